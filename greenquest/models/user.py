"""User model."""

from datetime import datetime
from enum import Enum

from greenquest import db


class UserRole(str, Enum):
    """User role enum."""

    USER = "user"
    ADMIN = "admin"
    AGENT = "agent"


class User(db.Model):
    """Platform user: reporter, pickup agent or admin."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)

    # Written only by LevelService; never decreases
    level = db.Column(db.Integer, default=1, nullable=False)

    role = db.Column(db.String(50), default=UserRole.USER.value, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    reports = db.relationship(
        "Report",
        foreign_keys="Report.user_id",
        backref="user",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )
    collected_reports = db.relationship(
        "Report",
        foreign_keys="Report.collector_id",
        backref="collector",
        lazy="dynamic",
    )
    rewards = db.relationship(
        "Reward", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    transactions = db.relationship(
        "Transaction", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    notifications = db.relationship(
        "Notification", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )
    badges = db.relationship(
        "UserBadge", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def to_dict(self) -> dict:
        """Convert user to dictionary."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "level": self.level,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<User {self.email}>"
