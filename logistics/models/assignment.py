# logistics/models/assignment.py

from datetime import datetime
from logistics.extensions import db
from sqlalchemy.orm import validates


class Assignment(db.Model):
    """Equipment checked out to personnel. Stays on the base's books."""
    __tablename__ = 'assignments'

    STATUSES = ('active', 'returned', 'overdue')
    ACTIVE = 'active'

    id = db.Column(db.Integer, primary_key=True)
    personnel_id = db.Column(db.String(50), nullable=False)
    personnel_name = db.Column(db.String(120), nullable=False)
    personnel_rank = db.Column(db.String(20))
    item_name = db.Column(db.String(200), nullable=False)
    serial_number = db.Column(db.String(80))
    # NULL means the row stands for a single unit
    quantity = db.Column(db.Integer)
    assignment_date = db.Column(db.Date, nullable=False, index=True)
    expected_return_date = db.Column(db.Date)
    actual_return_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default='active', index=True)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    asset_id = db.Column(db.Integer, db.ForeignKey('assets.id'))
    equipment_type_id = db.Column(db.Integer, db.ForeignKey('equipment_types.id'), nullable=False)
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'), nullable=False)

    equipment_type = db.relationship('EquipmentType')
    asset = db.relationship('Asset')

    @validates('quantity')
    def validate_quantity(self, key, value):
        if value is None:
            return None
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
            raise ValueError(f"Invalid assignment status: {value}")
        return value

    @property
    def units(self):
        return self.quantity if self.quantity is not None else 1

    def update_status(self, status, return_date=None):
        self.status = status
        if return_date is not None:
            self.actual_return_date = return_date

    def to_dict(self):
        return {
            'id': self.id,
            'personnelId': self.personnel_id,
            'personnelName': self.personnel_name,
            'personnelRank': self.personnel_rank,
            'itemName': self.item_name,
            'serialNumber': self.serial_number,
            'quantity': self.units,
            'assignmentDate': self.assignment_date.isoformat(),
            'expectedReturnDate': (
                self.expected_return_date.isoformat()
                if self.expected_return_date else None
            ),
            'actualReturnDate': (
                self.actual_return_date.isoformat()
                if self.actual_return_date else None
            ),
            'status': self.status,
            'assetId': self.asset_id,
            'equipmentTypeId': self.equipment_type_id,
            'baseId': self.base_id,
            'createdBy': self.created_by,
        }

    def __repr__(self):
        return f'<Assignment {self.id} {self.personnel_name} {self.status}>'
