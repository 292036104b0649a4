# logistics/models/asset.py

from datetime import datetime
from logistics.extensions import db
from sqlalchemy.orm import validates


class Asset(db.Model):
    """Individually tracked equipment item (serialised weapon, vehicle...)."""
    __tablename__ = 'assets'

    STATUSES = ('available', 'assigned', 'expended', 'transferred')

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    serial_number = db.Column(db.String(80), index=True)
    status = db.Column(db.String(20), nullable=False, default='available')
    condition = db.Column(db.String(20), nullable=False, default='good')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    equipment_type_id = db.Column(db.Integer, db.ForeignKey('equipment_types.id'), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)

    equipment_type = db.relationship('EquipmentType')

    @validates('status')
    def validate_status(self, key, value):
        if value not in self.STATUSES:
            raise ValueError(f"Invalid asset status: {value}")
        return value

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'serialNumber': self.serial_number,
            'status': self.status,
            'condition': self.condition,
            'equipmentTypeId': self.equipment_type_id,
            'baseId': self.base_id,
        }

    def __repr__(self):
        return f'<Asset {self.name} {self.serial_number}>'
