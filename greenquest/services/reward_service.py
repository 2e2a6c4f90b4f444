"""Reward store service: point grants, redemption and the reward catalog."""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from greenquest import db
from greenquest.errors import (
    Conflict,
    GreenQuestError,
    InsufficientBalance,
    InvalidAmount,
    InvalidTransactionType,
    NotFound,
    ValidationFailed,
)
from greenquest.models import (
    NotificationType,
    Reward,
    RewardCatalogItem,
    TransactionType,
    User,
)
from greenquest.models.reward import REWARD_CATALOG
from greenquest.services.ledger_service import LedgerService
from greenquest.services.notification_service import NotificationService
from greenquest.services.progression import refresh_progression
from greenquest.services.result import Result

logger = logging.getLogger(__name__)

# Sentinel catalog id meaning "redeem the whole balance"
REDEEM_ALL_ID = 0


class RewardService:
    """Grants and spends points.

    The ledger balance is the single source of truth; grant rows are kept
    in step with it so that their remaining points always add up to it.
    """

    def __init__(self):
        self.ledger = LedgerService()
        self.notifications = NotificationService()

    # ============ Granting ============

    def grant_points(
        self,
        user_id: int,
        points: int,
        name: str,
        description: str,
        transaction_type: TransactionType = TransactionType.EARNED_REPORT,
        collection_info: str = "",
    ) -> Reward:
        """Create a grant with its ledger entry and notification. No commit."""
        if not isinstance(points, int) or isinstance(points, bool) or points <= 0:
            raise InvalidAmount("Points must be a positive integer")
        if transaction_type not in (
            TransactionType.EARNED_REPORT,
            TransactionType.EARNED_COLLECT,
        ):
            raise InvalidTransactionType(
                f"Grants must be earned points, got: {transaction_type}"
            )
        if not db.session.get(User, user_id):
            raise NotFound(f"User with ID {user_id} does not exist.")

        reward = Reward(
            user_id=user_id,
            name=name,
            description=description,
            collection_info=collection_info,
            points=points,
            is_redeemed=False,
        )
        db.session.add(reward)
        db.session.flush()

        self.ledger.record_transaction(user_id, transaction_type, points, description)
        self.notifications.create_notification(
            user_id,
            f"You've earned {points} points: {name}",
            NotificationType.REWARD,
        )
        return reward

    def create_reward(
        self,
        user_id: int,
        points: int,
        name: str,
        description: str,
        transaction_type: TransactionType = TransactionType.EARNED_REPORT,
    ) -> Result:
        """Grant points to a user, then refresh level and badges."""
        try:
            reward = self.grant_points(
                user_id, points, name, description, transaction_type
            )
            refresh_progression(user_id)
            db.session.commit()
        except GreenQuestError as e:
            db.session.rollback()
            return Result.failure(e)
        except Exception:
            db.session.rollback()
            logger.exception(f"Error creating reward for user {user_id}")
            raise

        return Result.success(reward)

    # ============ Redemption ============

    def redeem_reward(self, user_id: int, reward_id: int) -> Result:
        """Spend points on a catalog item, or the whole balance for id 0.

        On InsufficientBalance nothing is written.
        """
        try:
            if not db.session.get(User, user_id):
                raise NotFound(f"User with ID {user_id} does not exist.")

            balance = self.ledger.get_balance(user_id)

            if reward_id == REDEEM_ALL_ID:
                if balance <= 0:
                    raise InsufficientBalance("You have no points to redeem")
                cost = balance
                item_name = "all points"
                self._close_open_grants(user_id)
                description = f"Redeemed all points: {balance}"
            else:
                item = db.session.get(RewardCatalogItem, reward_id)
                if not item or not item.is_available:
                    raise NotFound(f"Reward {reward_id} is not available")
                if item.cost > balance:
                    raise InsufficientBalance(
                        f"'{item.name}' costs {item.cost} points, balance is {balance}",
                        {"cost": item.cost, "balance": balance},
                    )
                cost = item.cost
                item_name = item.name
                self._consume_grants(user_id, cost)
                description = f"Redeemed: {item.name}"

            self.ledger.record_transaction(
                user_id, TransactionType.REDEEMED, cost, description
            )
            self.notifications.create_notification(
                user_id,
                f"You redeemed {cost} points for {item_name}.",
                NotificationType.REDEEM,
            )
            progression = refresh_progression(user_id)
            db.session.commit()
        except GreenQuestError as e:
            db.session.rollback()
            return Result.failure(e)
        except Exception:
            db.session.rollback()
            logger.exception(f"Error redeeming reward {reward_id} for user {user_id}")
            raise

        logger.info(f"User {user_id} redeemed {cost} points ({item_name})")
        return Result.success(
            {
                "reward": item_name,
                "redeemed_points": cost,
                "balance": balance - cost,
                **progression,
            }
        )

    def _open_grants(self, user_id: int) -> list[Reward]:
        return (
            Reward.query.filter_by(user_id=user_id, is_redeemed=False)
            .order_by(Reward.created_at, Reward.id)
            .all()
        )

    def _close_open_grants(self, user_id: int) -> None:
        now = datetime.utcnow()
        for grant in self._open_grants(user_id):
            grant.points = 0
            grant.is_redeemed = True
            grant.redeemed_at = now

    def _consume_grants(self, user_id: int, points: int) -> None:
        """Spend ``points`` from open grants, oldest first."""
        remaining = points
        for grant in self._open_grants(user_id):
            if remaining <= 0:
                break
            remaining -= grant.consume(remaining)

    # ============ Queries ============

    def get_available_rewards(self, user_id: int) -> list[dict]:
        """The user's balance (id 0) followed by redeemable catalog items."""
        try:
            balance = self.ledger.get_balance(user_id)
            items = (
                RewardCatalogItem.query.filter_by(is_available=True)
                .order_by(RewardCatalogItem.cost, RewardCatalogItem.id)
                .all()
            )
        except Exception:
            logger.exception("Error fetching available rewards")
            return []

        return [
            {
                "id": REDEEM_ALL_ID,
                "name": "Your Points",
                "cost": balance,
                "description": "Redeem your earned points",
                "collection_info": "Points earned from reporting and collecting waste",
            }
        ] + [
            {
                "id": item.id,
                "name": item.name,
                "cost": item.cost,
                "description": item.description,
                "collection_info": item.collection_info,
            }
            for item in items
        ]

    def get_user_rewards(self, user_id: int) -> list[Reward]:
        return (
            Reward.query.filter_by(user_id=user_id)
            .order_by(Reward.created_at.desc(), Reward.id.desc())
            .all()
        )

    def get_all_rewards(self) -> list[dict]:
        """Every grant with its owner's name, largest first."""
        try:
            rows = (
                db.session.query(Reward, User.name)
                .outerjoin(User, Reward.user_id == User.id)
                .order_by(Reward.points.desc(), Reward.id)
                .all()
            )
        except Exception:
            logger.exception("Error fetching all rewards")
            return []

        result = []
        for reward, user_name in rows:
            data = reward.to_dict()
            data["user_name"] = user_name
            result.append(data)
        return result

    def delete_reward(self, reward_id: int) -> Result:
        """Remove a grant row. Ledger entries are kept."""
        reward = db.session.get(Reward, reward_id)
        if not reward:
            return Result.failure(NotFound(f"Reward with ID {reward_id} not found."))
        db.session.delete(reward)
        db.session.commit()
        return Result.success()

    # ============ Catalog ============

    def list_catalog(self, include_unavailable: bool = False) -> list[RewardCatalogItem]:
        query = RewardCatalogItem.query
        if not include_unavailable:
            query = query.filter_by(is_available=True)
        return query.order_by(RewardCatalogItem.cost, RewardCatalogItem.id).all()

    def create_catalog_item(
        self,
        name: str,
        cost: int,
        description: str | None = None,
        collection_info: str | None = None,
    ) -> Result:
        if not isinstance(cost, int) or isinstance(cost, bool) or cost <= 0:
            return Result.failure(InvalidAmount("Cost must be a positive integer"))
        if RewardCatalogItem.query.filter_by(name=name).first():
            return Result.failure(Conflict(f"Reward '{name}' already exists"))

        item = RewardCatalogItem(
            name=name,
            cost=cost,
            description=description,
            collection_info=collection_info,
        )
        db.session.add(item)
        db.session.commit()
        return Result.success(item)

    def update_catalog_item(self, item_id: int, **fields) -> Result:
        item = db.session.get(RewardCatalogItem, item_id)
        if not item:
            return Result.failure(NotFound(f"Reward {item_id} not found"))

        cost = fields.get("cost")
        if cost is not None and (
            not isinstance(cost, int) or isinstance(cost, bool) or cost <= 0
        ):
            return Result.failure(InvalidAmount("Cost must be a positive integer"))
        if "is_available" in fields and not isinstance(fields["is_available"], bool):
            return Result.failure(
                ValidationFailed(
                    "is_available must be a boolean",
                    {"is_available": "must be true or false"},
                )
            )

        for key in ("name", "cost", "description", "collection_info", "is_available"):
            if key in fields and fields[key] is not None:
                setattr(item, key, fields[key])

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return Result.failure(
                Conflict(f"Reward '{fields.get('name')}' already exists")
            )
        return Result.success(item)

    def seed_default_catalog(self) -> int:
        """Create missing default catalog items. Returns rows created."""
        created = 0
        for item_data in REWARD_CATALOG:
            if not RewardCatalogItem.query.filter_by(name=item_data["name"]).first():
                db.session.add(RewardCatalogItem(**item_data))
                created += 1
        db.session.commit()
        return created
