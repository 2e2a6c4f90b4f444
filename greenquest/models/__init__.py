"""Database models."""

from greenquest.models.badge import Badge, BadgeCriteria, CriterionType, UserBadge
from greenquest.models.notification import Notification, NotificationType
from greenquest.models.report import Report, ReportStatus
from greenquest.models.reward import Reward, RewardCatalogItem
from greenquest.models.transaction import Transaction, TransactionType
from greenquest.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Report",
    "ReportStatus",
    "Reward",
    "RewardCatalogItem",
    "Transaction",
    "TransactionType",
    "Notification",
    "NotificationType",
    "Badge",
    "BadgeCriteria",
    "CriterionType",
    "UserBadge",
]
