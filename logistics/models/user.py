from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from sqlalchemy.orm import validates
from logistics.extensions import db


class User(UserMixin, db.Model):
    """User model representing application users.

    Inherits from:
        UserMixin: Provides default implementations for Flask-Login interface
        db.Model: SQLAlchemy model base class
    """
    __tablename__ = 'users'

    ROLES = ('admin', 'base_commander', 'logistics_officer')

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    first_name = db.Column(db.String(64))
    last_name = db.Column(db.String(64))
    password_hash = db.Column(db.String(256))
    role = db.Column(
        db.String(20),
        nullable=False,
        default='logistics_officer'
    )  # admin, base_commander, logistics_officer
    # Home base: null for admins, the commanded base for base commanders
    base_id = db.Column(db.Integer, db.ForeignKey('bases.id'))
    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow
    )
    last_login = db.Column(db.DateTime)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    base = db.relationship('Base')

    @validates('role')
    def validate_role(self, key, value):
        if value not in self.ROLES:
            raise ValueError(f"Invalid role: {value}")
        return value

    def set_password(self, password):
        """Set user's password hash from plain text password.

        Args:
            password: Plain text password to hash
        """
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check if plain text password matches hash.

        Args:
            password: Plain text password to verify

        Returns:
            bool: True if password matches, False otherwise
        """
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def is_admin(self):
        """Check if user has admin role.

        Returns:
            bool: True if user is admin, False otherwise
        """
        return self.role == 'admin'

    def is_base_commander(self):
        return self.role == 'base_commander'

    def access_scope(self):
        """Build the access scope used to restrict what this user can see.

        Returns:
            AccessScope: role and home base of the user
        """
        from logistics.metrics.filters import AccessScope
        return AccessScope(role=self.role, home_base_id=self.base_id)

    def update_last_login(self):
        """Update user's last login timestamp to current time."""
        self.last_login = datetime.utcnow()
        db.session.commit()

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'role': self.role,
            'baseId': self.base_id,
        }

    def __repr__(self):
        """Get string representation of User.

        Returns:
            str: User representation with username
        """
        return f'<User {self.username}>'
