"""Reward models: per-user point grants and the redeemable catalog."""

from datetime import datetime

from greenquest import db


class Reward(db.Model):
    """Points granted to a user for one action.

    ``points`` is what is left of the grant; redemptions consume grants
    oldest first until the redeemed amount is covered.
    """

    __tablename__ = "rewards"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    collection_info = db.Column(db.Text, nullable=False, default="")

    points = db.Column(db.Integer, default=0, nullable=False)

    # Set once the grant has been fully spent
    is_redeemed = db.Column(db.Boolean, default=False, nullable=False, index=True)
    redeemed_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def consume(self, points: int) -> int:
        """Spend up to ``points`` from this grant. Returns points consumed."""
        used = min(points, self.points)
        self.points -= used
        if self.points == 0:
            self.is_redeemed = True
            self.redeemed_at = datetime.utcnow()
        return used

    def to_dict(self) -> dict:
        """Convert reward to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "collection_info": self.collection_info,
            "points": self.points,
            "is_redeemed": self.is_redeemed,
            "redeemed_at": self.redeemed_at.isoformat() if self.redeemed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Reward {self.id} user={self.user_id} points={self.points}>"


class RewardCatalogItem(db.Model):
    """Something users can redeem their points for."""

    __tablename__ = "reward_catalog"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    cost = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text, nullable=True)
    collection_info = db.Column(db.Text, nullable=True)
    is_available = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        """Convert catalog item to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "cost": self.cost,
            "description": self.description,
            "collection_info": self.collection_info,
            "is_available": self.is_available,
        }

    def __repr__(self) -> str:
        return f"<RewardCatalogItem {self.name} cost={self.cost}>"


# Default catalog, seeded with `flask gamification seed-catalog`
REWARD_CATALOG = [
    {
        "name": "Reusable Tote Bag",
        "cost": 100,
        "description": "A sturdy cotton tote to replace single-use plastic bags",
        "collection_info": "Pick up at any partner recycling centre",
    },
    {
        "name": "Tree Planting Certificate",
        "cost": 250,
        "description": "We plant a tree in your name",
        "collection_info": "Certificate is emailed within a week",
    },
    {
        "name": "Compost Starter Kit",
        "cost": 500,
        "description": "Bin, starter mix and a guide to home composting",
        "collection_info": "Delivered to your registered address",
    },
    {
        "name": "Community Clean-up Sponsor",
        "cost": 1500,
        "description": "Fund supplies for a neighbourhood clean-up day",
        "collection_info": "Your name is listed on the event page",
    },
]
