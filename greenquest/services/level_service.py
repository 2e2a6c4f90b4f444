"""Level update service."""

import logging

from greenquest import db
from greenquest.errors import NotFound
from greenquest.models import NotificationType, User
from greenquest.services.level_calculator import LevelCalculator
from greenquest.services.notification_service import NotificationService
from greenquest.services.progress_service import ProgressService

logger = logging.getLogger(__name__)


class LevelService:
    """Keeps ``users.level`` in step with progress."""

    def __init__(self):
        self.progress = ProgressService()
        self.notifications = NotificationService()

    def apply_level(self, user_id: int) -> dict:
        """Recompute and persist the level without committing.

        The stored level never goes down: if progress would compute a
        lower tier, the highest level reached is kept.
        """
        user = db.session.get(User, user_id)
        if not user:
            raise NotFound(f"User {user_id} not found")

        snapshot = self.progress.compute_progress(user_id)
        computed = LevelCalculator.calculate_level(
            snapshot.waste_collected,
            snapshot.reports_submitted,
            snapshot.points_earned,
        )

        old_level = user.level
        new_level = max(old_level, computed)

        if new_level == old_level:
            return {"level_up": False, "old_level": old_level, "new_level": old_level}

        user.level = new_level
        self.notifications.create_notification(
            user_id,
            f"You have leveled up to level {new_level}!",
            NotificationType.LEVEL_UP,
        )
        db.session.flush()
        logger.info(f"User {user_id} leveled up: {old_level} -> {new_level}")

        return {"level_up": True, "old_level": old_level, "new_level": new_level}

    def update_user_level(self, user_id: int) -> dict:
        """Recompute the level and commit if it changed."""
        result = self.apply_level(user_id)
        if result["level_up"]:
            db.session.commit()
        return result
