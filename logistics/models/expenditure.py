# logistics/models/expenditure.py

from datetime import datetime
from logistics.extensions import db
from sqlalchemy.orm import validates


class Expenditure(db.Model):
    """Stock consumed or destroyed. Permanently removed from the base."""
    __tablename__ = 'expenditures'

    id = db.Column(db.Integer, primary_key=True)
    item_name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    expenditure_date = db.Column(db.Date, nullable=False, index=True)
    reason = db.Column(db.Text, nullable=False)
    authorized_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    equipment_type_id = db.Column(db.Integer, db.ForeignKey('equipment_types.id'), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)

    equipment_type = db.relationship('EquipmentType')

    @validates('quantity')
    def validate_quantity(self, key, value):
        try:
            value = int(value)
        except (ValueError, TypeError):
            raise ValueError("Quantity must be a whole number")
        if value <= 0:
            raise ValueError("Quantity must be positive")
        return value

    def to_dict(self):
        return {
            'id': self.id,
            'itemName': self.item_name,
            'quantity': self.quantity,
            'expenditureDate': self.expenditure_date.isoformat(),
            'reason': self.reason,
            'authorizedBy': self.authorized_by,
            'equipmentTypeId': self.equipment_type_id,
            'baseId': self.base_id,
            'createdBy': self.created_by,
        }

    def __repr__(self):
        return f'<Expenditure {self.id} {self.item_name} x{self.quantity}>'
