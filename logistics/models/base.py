# logistics/models/base.py

from datetime import datetime
from logistics.extensions import db


class Base(db.Model):
    """A physical site holding equipment stock."""
    __tablename__ = 'bases'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    location = db.Column(db.String(200))
    commander = db.Column(db.String(120))
    contact_info = db.Column(db.String(200))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    purchases = db.relationship('Purchase', backref='base', lazy='dynamic')
    assignments = db.relationship('Assignment', backref='base', lazy='dynamic')
    expenditures = db.relationship('Expenditure', backref='base', lazy='dynamic')
    assets = db.relationship('Asset', backref='base', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'location': self.location,
            'commander': self.commander,
            'contactInfo': self.contact_info,
        }

    def __repr__(self):
        return f'<Base {self.name}>'
