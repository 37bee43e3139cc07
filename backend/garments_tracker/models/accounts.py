from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

ROLE_USER = "user"
ROLE_MANAGER = "manager"
ROLE_ADMIN = "admin"
VALID_ROLES = (ROLE_USER, ROLE_MANAGER, ROLE_ADMIN)

STATUS_ACTIVE = "active"
STATUS_SUSPENDED = "suspended"
VALID_STATUSES = (STATUS_ACTIVE, STATUS_SUSPENDED)


class Account(db.Model):
    """
    User account as known to the tracker.

    Authentication itself lives with the identity provider; this row only
    carries what the access policy needs (role, suspension state) plus
    profile fields shown in the admin console.

    Email is stored lower-cased and is unique: at most one account per email.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_role_status", "role", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=True)
    photo_url = db.Column(db.String(1024), nullable=True)

    role = db.Column(db.String(16), nullable=False, default=ROLE_USER)
    status = db.Column(db.String(16), nullable=False, default=STATUS_ACTIVE)

    # Suspension audit (cleared on reinstatement)
    suspend_reason = db.Column(db.String(255), nullable=True)
    suspend_feedback = db.Column(db.Text, nullable=True)
    suspended_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    @property
    def is_suspended(self) -> bool:
        return self.status == STATUS_SUSPENDED

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email!r} role={self.role} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "photoURL": self.photo_url,
            "role": self.role,
            "status": self.status,
            "suspendReason": self.suspend_reason,
            "suspendFeedback": self.suspend_feedback,
            "suspendedAt": to_utc_z(self.suspended_at),
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
