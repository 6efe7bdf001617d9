from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .catalog import new_record_id


class User(db.Model):
    """
    User accounts for authentication and attribution.

    role is one of admin, dispatch, receiver, view_only. permissions holds the
    capability tags granted on top of the role; admin ignores it entirely.

    Email uniqueness is enforced by user_service before writes.

    WHY: Every dispatch and receive must be attributable. No shared logins.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_email", "email"),
        {"sqlite_autoincrement": True},
    )

    FIELD_COLUMNS = {
        "email": "email",
        "name": "name",
        "role": "role",
        "permissions": "permissions",
        "active": "active",
        "passwordHash": "password_hash",
    }

    pk = db.Column(db.Integer, primary_key=True)
    id = db.Column(db.String(36), nullable=False, unique=True, default=new_record_id)

    email = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False)
    permissions = db.Column(db.JSON, nullable=False, default=list)
    active = db.Column(db.Boolean, nullable=False, default=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        """Full store record, including the credential hash."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "permissions": list(self.permissions or []),
            "active": self.active,
            "passwordHash": self.password_hash,
            "createdAt": to_utc_z(self.created_at),
        }
