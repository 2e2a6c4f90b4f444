"""Business logic services."""

from greenquest.services.badge_service import BadgeService
from greenquest.services.ledger_service import LedgerService
from greenquest.services.level_calculator import LevelCalculator
from greenquest.services.level_service import LevelService
from greenquest.services.notification_service import NotificationService
from greenquest.services.pickup_service import PickupService
from greenquest.services.progress_service import ProgressService, ProgressSnapshot
from greenquest.services.report_service import ReportService
from greenquest.services.result import Result
from greenquest.services.reward_service import RewardService
from greenquest.services.user_service import UserService

__all__ = [
    "BadgeService",
    "LedgerService",
    "LevelCalculator",
    "LevelService",
    "NotificationService",
    "PickupService",
    "ProgressService",
    "ProgressSnapshot",
    "ReportService",
    "Result",
    "RewardService",
    "UserService",
]
