"""Waste report model."""

from datetime import datetime
from enum import Enum

from greenquest import db


class ReportStatus(str, Enum):
    """Report status enum."""

    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses reachable from each status; completed is terminal
STATUS_TRANSITIONS = {
    ReportStatus.PENDING: {
        ReportStatus.ASSIGNED,
        ReportStatus.IN_PROGRESS,
        ReportStatus.COMPLETED,
        ReportStatus.CANCELLED,
    },
    ReportStatus.ASSIGNED: {
        ReportStatus.PENDING,
        ReportStatus.IN_PROGRESS,
        ReportStatus.COMPLETED,
        ReportStatus.CANCELLED,
    },
    ReportStatus.IN_PROGRESS: {
        ReportStatus.ASSIGNED,
        ReportStatus.COMPLETED,
        ReportStatus.CANCELLED,
    },
    ReportStatus.COMPLETED: set(),
    ReportStatus.CANCELLED: {ReportStatus.PENDING},
}


class Report(db.Model):
    """A reported pile of waste, and the pickup task that clears it."""

    __tablename__ = "reports"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    collector_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    location = db.Column(db.Text, nullable=False)
    waste_type = db.Column(db.String(255), nullable=False)

    # Kilograms, validated at submission
    amount = db.Column(db.Numeric(10, 2), nullable=False)

    image_url = db.Column(db.Text, nullable=True)
    verification_result = db.Column(db.JSON, nullable=True)

    status = db.Column(
        db.String(20), default=ReportStatus.PENDING.value, nullable=False, index=True
    )

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
    completed_at = db.Column(db.DateTime, nullable=True)

    def can_transition_to(self, status: ReportStatus) -> bool:
        """Check whether the report may move to ``status``."""
        return status in STATUS_TRANSITIONS[ReportStatus(self.status)]

    def to_dict(self) -> dict:
        """Convert report to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "collector_id": self.collector_id,
            "location": self.location,
            "waste_type": self.waste_type,
            "amount": float(self.amount) if self.amount is not None else None,
            "image_url": self.image_url,
            "verification_result": self.verification_result,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
        }

    def __repr__(self) -> str:
        return f"<Report {self.id} {self.status}>"
