# logistics/models/transfer.py

from datetime import datetime
from logistics.extensions import db
from sqlalchemy.orm import validates


class Transfer(db.Model):
    """Stock moving between two bases.

    Only a transfer whose status is ``completed`` moves stock: it decreases
    the balance of ``from_base_id`` and increases that of ``to_base_id``.
    """
    __tablename__ = 'transfers'

    STATUSES = ('pending', 'in_transit', 'completed', 'cancelled')
    COMPLETED = 'completed'

    id = db.Column(db.Integer, primary_key=True)
    transfer_number = db.Column(db.String(30), nullable=False, unique=True)
    item_name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    transfer_date = db.Column(db.Date, nullable=False, index=True)
    reason = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    completed_at = db.Column(db.DateTime)

    equipment_type_id = db.Column(db.Integer, db.ForeignKey('equipment_types.id'), nullable=False)
    from_base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)
    to_base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)

    equipment_type = db.relationship('EquipmentType')
    from_base = db.relationship('Base', foreign_keys=[from_base_id])
    to_base = db.relationship('Base', foreign_keys=[to_base_id])

    @validates('quantity')
    def validate_quantity(self, key, value):
        try:
            value = int(value)
        except (ValueError, TypeError):
            raise ValueError("Quantity must be a whole number")
        if value <= 0:
            raise ValueError("Quantity must be positive")
        return value

    @validates('status')
    def validate_status(self, key, value):
        if value not in self.STATUSES:
            raise ValueError(f"Invalid transfer status: {value}")
        return value

    @validates('to_base_id')
    def validate_to_base(self, key, value):
        if value is not None and value == self.from_base_id:
            raise ValueError("Source and destination base must differ")
        return value

    def update_status(self, status):
        """Move the transfer to ``status``; completing it stamps completed_at."""
        self.status = status
        if status == self.COMPLETED:
            self.completed_at = datetime.utcnow()

    def to_dict(self):
        return {
            'id': self.id,
            'transferNumber': self.transfer_number,
            'itemName': self.item_name,
            'quantity': self.quantity,
            'transferDate': self.transfer_date.isoformat(),
            'reason': self.reason,
            'status': self.status,
            'equipmentTypeId': self.equipment_type_id,
            'fromBaseId': self.from_base_id,
            'toBaseId': self.to_base_id,
            'createdBy': self.created_by,
            'completedAt': self.completed_at.isoformat() if self.completed_at else None,
        }

    def __repr__(self):
        return f'<Transfer {self.transfer_number} {self.status}>'
