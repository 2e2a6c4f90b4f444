"""User accounts, roles and the leaderboard."""

import logging
import math

from greenquest import db
from greenquest.errors import InvalidRole, NotFound
from greenquest.models import Transaction, TransactionType, User, UserRole
from greenquest.services.result import Result

logger = logging.getLogger(__name__)


class UserService:
    def get_or_create_user(self, email: str, name: str) -> tuple[User, bool]:
        """Find a user by email (case-insensitive) or create one.

        Returns (user, created).
        """
        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()
        if user:
            return user, False

        user = User(email=email, name=name or email.split("@")[0])
        db.session.add(user)
        db.session.commit()
        logger.info(f"Created user {user.id}")
        return user, True

    def get_users_page(self, page: int = 1, limit: int = 10) -> dict:
        page = max(page, 1)
        total = User.query.count()
        users = (
            User.query.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "users": [u.to_dict() for u in users],
            "total_pages": math.ceil(total / limit) if limit else 0,
            "current_page": page,
            "total_users": total,
        }

    def update_user_role(self, user_id: int, role: str) -> Result:
        if role not in [r.value for r in UserRole]:
            return Result.failure(
                InvalidRole(
                    f"Invalid role: {role}",
                    {"allowed": [r.value for r in UserRole]},
                )
            )
        user = db.session.get(User, user_id)
        if not user:
            return Result.failure(NotFound("User not found."))

        user.role = role
        db.session.commit()
        logger.info(f"User {user_id} role set to {role}")
        return Result.success(user)

    def delete_user(self, user_id: int) -> Result:
        user = db.session.get(User, user_id)
        if not user:
            return Result.failure(NotFound("User not found."))
        db.session.delete(user)
        db.session.commit()
        return Result.success()

    def get_recent_users(self, limit: int = 5) -> list[User]:
        """Newest sign-ups first."""
        return (
            User.query.order_by(User.created_at.desc(), User.id.desc())
            .limit(limit)
            .all()
        )

    def get_leaderboard(self, limit: int = 20) -> list[dict]:
        """Users ranked by lifetime points earned."""
        points = db.func.coalesce(db.func.sum(Transaction.amount), 0).label("points")
        rows = (
            db.session.query(User, points)
            .outerjoin(
                Transaction,
                db.and_(
                    Transaction.user_id == User.id,
                    Transaction.type.in_(
                        [
                            TransactionType.EARNED_REPORT.value,
                            TransactionType.EARNED_COLLECT.value,
                        ]
                    ),
                ),
            )
            .group_by(User.id)
            .order_by(points.desc(), User.id)
            .limit(limit)
            .all()
        )
        return [
            {
                "rank": rank,
                "user_id": user.id,
                "name": user.name,
                "level": user.level,
                "points": int(user_points or 0),
            }
            for rank, (user, user_points) in enumerate(rows, start=1)
        ]
