"""Progress aggregation service."""

import logging
from dataclasses import asdict, dataclass

from flask import current_app

from greenquest import db
from greenquest.models import Report, ReportStatus, User
from greenquest.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

DEFAULT_CO2_OFFSET_FACTOR = 0.5


@dataclass(frozen=True)
class ProgressSnapshot:
    """A user's cumulative achievement at one point in time."""

    waste_collected: float = 0.0
    reports_submitted: int = 0
    rewards_redeemed: int = 0
    co2_offset: float = 0.0
    points_earned: int = 0
    user_level: int = 1
    pickup_tasks_completed: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class ProgressService:
    """Computes progress snapshots. Read-only: never writes."""

    def __init__(self):
        self.ledger = LedgerService()

    def compute_progress(self, user_id: int) -> ProgressSnapshot:
        """Compute the snapshot, letting database errors propagate."""
        waste_total, completed_count = (
            db.session.query(
                db.func.coalesce(db.func.sum(Report.amount), 0),
                db.func.count(Report.id),
            )
            .filter(
                Report.user_id == user_id,
                Report.status == ReportStatus.COMPLETED.value,
            )
            .one()
        )
        waste_collected = round(float(waste_total or 0), 2)

        factor = current_app.config.get("CO2_OFFSET_FACTOR", DEFAULT_CO2_OFFSET_FACTOR)

        user = db.session.get(User, user_id)
        user_level = user.level if user else 1

        return ProgressSnapshot(
            waste_collected=waste_collected,
            reports_submitted=completed_count,
            rewards_redeemed=self.ledger.count_redemptions(user_id),
            co2_offset=round(waste_collected * factor, 2),
            points_earned=self.ledger.get_points_earned(user_id),
            user_level=user_level,
            # Same count, seen from the collection side
            pickup_tasks_completed=completed_count,
        )

    def get_user_progress(self, user_id: int) -> ProgressSnapshot:
        """Snapshot for dashboards; degrades to an empty snapshot on error."""
        try:
            return self.compute_progress(user_id)
        except Exception:
            logger.exception(f"Failed to compute progress for user {user_id}")
            return ProgressSnapshot()
