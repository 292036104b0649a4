# logistics/models/purchase.py

from datetime import datetime
from logistics.extensions import db
from sqlalchemy.orm import validates


class Purchase(db.Model):
    """Stock received at a base. Increases the destination base's balance."""
    __tablename__ = 'purchases'

    id = db.Column(db.Integer, primary_key=True)
    item_name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    purchase_date = db.Column(db.Date, nullable=False, index=True)
    purchase_order_number = db.Column(db.String(50))
    vendor = db.Column(db.String(120))
    unit_cost = db.Column(db.Numeric(12, 2))
    notes = db.Column(db.Text)
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
            'purchaseDate': self.purchase_date.isoformat(),
            'purchaseOrderNumber': self.purchase_order_number,
            'vendor': self.vendor,
            'unitCost': str(self.unit_cost) if self.unit_cost is not None else None,
            'notes': self.notes,
            'equipmentTypeId': self.equipment_type_id,
            'baseId': self.base_id,
            'createdBy': self.created_by,
        }

    def __repr__(self):
        return f'<Purchase {self.id} {self.item_name} x{self.quantity}>'
