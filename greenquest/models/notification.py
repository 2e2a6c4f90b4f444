"""Notification model."""

from datetime import datetime
from enum import Enum

from greenquest import db


class NotificationType(str, Enum):
    """Notification type enum."""

    REWARD = "reward"
    REDEEM = "redeem"
    LEVEL_UP = "level_up"
    BADGE_AWARD = "badge_award"
    PICKUP = "pickup"
    SYSTEM = "system"


class Notification(db.Model):
    """Persisted inbox entry. There is no push delivery."""

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(50), nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "message": self.message,
            "type": self.type,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Notification {self.id} {self.type}>"
