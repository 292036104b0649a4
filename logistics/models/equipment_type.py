# logistics/models/equipment_type.py

from datetime import datetime
from logistics.extensions import db


class EquipmentType(db.Model):
    __tablename__ = 'equipment_types'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    category = db.Column(db.String(80), nullable=False, default='General')
    description = db.Column(db.Text)
    unit_of_measure = db.Column(db.String(20), nullable=False, default='units')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'description': self.description,
            'unitOfMeasure': self.unit_of_measure,
        }

    def __repr__(self):
        return f'<EquipmentType {self.name}>'
