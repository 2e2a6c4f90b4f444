"""Point ledger model."""

from datetime import datetime
from enum import Enum

from greenquest import db


class TransactionType(str, Enum):
    """Ledger entry types. ``earned_*`` add to the balance, the rest subtract."""

    EARNED_REPORT = "earned_report"
    EARNED_COLLECT = "earned_collect"
    REDEEMED = "redeemed"


class Transaction(db.Model):
    """Append-only ledger entry. Rows are never updated."""

    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = db.Column(db.String(20), nullable=False, index=True)

    # Unsigned by convention; the sign comes from ``type``
    amount = db.Column(db.Integer, nullable=False)

    description = db.Column(db.Text, nullable=False)
    date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @property
    def signed_amount(self) -> int:
        if self.type.startswith("earned"):
            return self.amount
        return -self.amount

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "amount": self.amount,
            "description": self.description,
            "date": self.date.strftime("%Y-%m-%d") if self.date else None,
        }

    def __repr__(self) -> str:
        return f"<Transaction {self.type} {self.amount}>"
