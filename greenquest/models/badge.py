"""Badge models and badge criteria."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from numbers import Real

from greenquest import db
from greenquest.errors import MalformedCriteria


class CriterionType(str, Enum):
    """What a badge criterion measures on the progress snapshot."""

    FIRST_WASTE_COLLECTION = "first_waste_collection"
    WASTE_COLLECTION = "waste_collection"
    REPORTS_SUBMITTED = "reports_submitted"
    REWARDS_REDEEMED = "rewards_redeemed"
    CO2_OFFSET = "co2_offset"
    USER_LEVEL = "user_level"
    PICKUP_TASKS_COMPLETED = "pickup_tasks_completed"


# camelCase names still found in older badge rows
LEGACY_CRITERION_NAMES = {
    "firstWasteCollected": CriterionType.FIRST_WASTE_COLLECTION,
    "wasteCollected": CriterionType.WASTE_COLLECTION,
    "reportsSubmitted": CriterionType.REPORTS_SUBMITTED,
    "rewardsRedeemed": CriterionType.REWARDS_REDEEMED,
    "co2Offset": CriterionType.CO2_OFFSET,
    "userLevel": CriterionType.USER_LEVEL,
    "pickupTasksCompleted": CriterionType.PICKUP_TASKS_COMPLETED,
}


@dataclass(frozen=True)
class BadgeCriteria:
    """A typed threshold over one progress counter."""

    type: CriterionType
    amount: float = 0

    @classmethod
    def from_payload(cls, payload) -> "BadgeCriteria":
        """Validate a raw ``{"type": ..., "amount": ...}`` payload.

        Raises MalformedCriteria when the shape is wrong.
        """
        if not isinstance(payload, dict):
            raise MalformedCriteria("Criteria must be an object")

        raw_type = payload.get("type")
        if raw_type in LEGACY_CRITERION_NAMES:
            criterion_type = LEGACY_CRITERION_NAMES[raw_type]
        else:
            try:
                criterion_type = CriterionType(raw_type)
            except ValueError:
                raise MalformedCriteria(
                    f"Unknown criteria type: {raw_type!r}",
                    {"allowed": [t.value for t in CriterionType]},
                )

        amount = payload.get("amount", 0)
        # bool is an int subclass
        if isinstance(amount, bool) or not isinstance(amount, Real):
            raise MalformedCriteria("Criteria amount must be a number")
        if amount < 0:
            raise MalformedCriteria("Criteria amount must not be negative")

        return cls(type=criterion_type, amount=amount)

    def to_payload(self) -> dict:
        return {"type": self.type.value, "amount": self.amount}

    def is_met(self, progress) -> bool:
        """Evaluate the criterion against a ProgressSnapshot."""
        if self.type == CriterionType.FIRST_WASTE_COLLECTION:
            return progress.waste_collected > 0
        if self.type == CriterionType.WASTE_COLLECTION:
            return progress.waste_collected >= self.amount
        if self.type == CriterionType.REPORTS_SUBMITTED:
            return progress.reports_submitted >= self.amount
        if self.type == CriterionType.REWARDS_REDEEMED:
            return progress.rewards_redeemed >= self.amount
        if self.type == CriterionType.CO2_OFFSET:
            return progress.co2_offset >= self.amount
        if self.type == CriterionType.USER_LEVEL:
            return progress.user_level >= self.amount
        if self.type == CriterionType.PICKUP_TASKS_COMPLETED:
            return progress.pickup_tasks_completed >= self.amount
        return False


class Badge(db.Model):
    """Badge definition model."""

    __tablename__ = "badges"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    category = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    criteria = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user_badges = db.relationship(
        "UserBadge", backref="badge", lazy="dynamic", cascade="all, delete-orphan"
    )

    @property
    def parsed_criteria(self) -> BadgeCriteria:
        """Typed criteria. Raises MalformedCriteria for bad stored rows."""
        return BadgeCriteria.from_payload(self.criteria)

    def to_dict(self) -> dict:
        """Convert badge to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "criteria": self.criteria,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Badge {self.name}>"


class UserBadge(db.Model):
    """A badge awarded to a user. At most one row per (user, badge)."""

    __tablename__ = "user_badges"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    badge_id = db.Column(
        db.Integer, db.ForeignKey("badges.id", ondelete="CASCADE"), nullable=False
    )
    awarded_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("user_id", "badge_id", name="unique_user_badge"),
    )

    def to_dict(self) -> dict:
        """Badge details plus the award timestamp."""
        result = self.badge.to_dict()
        result["awarded_at"] = self.awarded_at.isoformat() if self.awarded_at else None
        return result

    def __repr__(self) -> str:
        return f"<UserBadge {self.user_id}:{self.badge_id}>"


# Default badge catalog, seeded with `flask gamification seed-badges`
BADGES = [
    {
        "name": "First Haul",
        "category": "Waste Collection",
        "description": "Get your first waste report collected",
        "criteria": {"type": "first_waste_collection", "amount": 0},
    },
    {
        "name": "Century Collector",
        "category": "Waste Collection",
        "description": "Have 100 kg of reported waste collected",
        "criteria": {"type": "waste_collection", "amount": 100},
    },
    {
        "name": "Half-Tonne Hero",
        "category": "Waste Collection",
        "description": "Have 500 kg of reported waste collected",
        "criteria": {"type": "waste_collection", "amount": 500},
    },
    {
        "name": "Watchful Neighbour",
        "category": "Reporting",
        "description": "Get 10 reports completed",
        "criteria": {"type": "reports_submitted", "amount": 10},
    },
    {
        "name": "Street Guardian",
        "category": "Reporting",
        "description": "Get 50 reports completed",
        "criteria": {"type": "reports_submitted", "amount": 50},
    },
    {
        "name": "First Redemption",
        "category": "Rewards",
        "description": "Redeem your points for the first time",
        "criteria": {"type": "rewards_redeemed", "amount": 1},
    },
    {
        "name": "Carbon Cutter",
        "category": "Impact",
        "description": "Offset 50 kg of CO2",
        "criteria": {"type": "co2_offset", "amount": 50},
    },
    {
        "name": "Rising Star",
        "category": "Progress",
        "description": "Reach level 3",
        "criteria": {"type": "user_level", "amount": 3},
    },
    {
        "name": "Pickup Pro",
        "category": "Pickups",
        "description": "Complete 25 pickup tasks",
        "criteria": {"type": "pickup_tasks_completed", "amount": 25},
    },
]
