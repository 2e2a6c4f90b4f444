"""Waste report service: submission and the report status lifecycle."""

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from flask import current_app

from greenquest import db
from greenquest.errors import (
    GreenQuestError,
    InvalidAmount,
    InvalidStatus,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)
from greenquest.models import (
    NotificationType,
    Report,
    ReportStatus,
    TransactionType,
    User,
    UserRole,
)
from greenquest.services.notification_service import NotificationService
from greenquest.services.progression import refresh_progression
from greenquest.services.result import Result
from greenquest.services.reward_service import RewardService

logger = logging.getLogger(__name__)

MAX_AMOUNT = Decimal("99999999.99")
COLLECTOR_ROLES = (UserRole.AGENT.value, UserRole.ADMIN.value)

# interval -> (sqlite strftime, postgresql to_char)
TREND_FORMATS = {
    "weekly": ("%Y-%W", "IYYY-IW"),
    "monthly": ("%Y-%m", "YYYY-MM"),
}


def _sql_literal(value: str):
    # Inlined so SELECT and GROUP BY render the same expression
    return db.literal_column(f"'{value}'")


def parse_amount(value) -> Decimal:
    """Parse a waste amount in kg, e.g. ``"120.5"`` or ``"120.5 kg"``.

    Raises InvalidAmount for anything that is not a positive number.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount("Amount is required")

    text = str(value).strip().lower()
    if text.endswith("kg"):
        text = text[:-2].strip()

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidAmount(f"Amount must be a number of kilograms, got {value!r}")

    if not amount.is_finite():
        raise InvalidAmount("Amount must be a finite number")
    if amount > MAX_AMOUNT:
        raise InvalidAmount("Amount is too large")

    amount = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than zero")
    return amount


def parse_status(value) -> ReportStatus:
    try:
        return ReportStatus(value)
    except ValueError:
        raise InvalidStatus(
            f"Invalid status: {value}",
            {"allowed": [s.value for s in ReportStatus]},
        )


class ReportService:
    """Creates reports and moves them through their lifecycle.

    Every public mutation is one unit of work: report changes, point
    grants, ledger entries, notifications, level and badge updates are
    committed together or not at all.
    """

    def __init__(self):
        self.rewards = RewardService()
        self.notifications = NotificationService()

    # ============ Submission ============

    def create_report(
        self,
        user_id: int,
        location: str,
        waste_type: str,
        amount,
        image_url: str | None = None,
        verification_result: dict | None = None,
    ) -> Result:
        """Submit a report and grant the submission points."""
        try:
            if not location or not str(location).strip():
                raise ValidationFailed("Location is required", {"location": "required"})
            if not waste_type or not str(waste_type).strip():
                raise ValidationFailed(
                    "Waste type is required", {"waste_type": "required"}
                )
            parsed_amount = parse_amount(amount)

            if not db.session.get(User, user_id):
                raise NotFound(f"User with ID {user_id} does not exist.")

            report = Report(
                user_id=user_id,
                location=location.strip(),
                waste_type=waste_type.strip(),
                amount=parsed_amount,
                image_url=image_url,
                verification_result=verification_result,
                status=ReportStatus.PENDING.value,
            )
            db.session.add(report)
            db.session.flush()

            self.rewards.grant_points(
                user_id,
                current_app.config["REPORT_SUBMITTED_POINTS"],
                "Waste Report Submission",
                "Points earned for making a waste report.",
                TransactionType.EARNED_REPORT,
                collection_info="Points earned from waste report",
            )
            refresh_progression(user_id)
            db.session.commit()
        except GreenQuestError as e:
            db.session.rollback()
            return Result.failure(e)
        except Exception:
            db.session.rollback()
            logger.exception(f"Error creating report for user {user_id}")
            raise

        logger.info(f"User {user_id} submitted report {report.id}")
        return Result.success(report)

    # ============ Lifecycle ============

    def update_report_status(
        self, report_id: int, status: str, collector_id: int | None = None
    ) -> Result:
        """Move a report to ``status``, firing completion rewards once.

        ``collector_id`` optionally (re)assigns the collector in the same
        step. Re-applying the current status is a no-op.
        """
        try:
            new_status = parse_status(status)
            report = self._get_report(report_id)

            if collector_id is not None and collector_id != report.collector_id:
                # Collection points were paid to whoever held it at completion
                if report.status == ReportStatus.COMPLETED.value:
                    raise InvalidTransition(
                        f"Cannot reassign the collector of completed report "
                        f"{report.id}"
                    )
                self._set_collector(report, collector_id)

            if report.status != new_status.value:
                self._transition(report, new_status)

            db.session.commit()
        except GreenQuestError as e:
            db.session.rollback()
            return Result.failure(e)
        except Exception:
            db.session.rollback()
            logger.exception(f"Error updating status of report {report_id}")
            raise

        return Result.success(report)

    def assign_collector(self, report_id: int, collector_id: int) -> Result:
        """Assign a pickup agent and mark the report assigned."""
        return self.update_report_status(
            report_id, ReportStatus.ASSIGNED.value, collector_id=collector_id
        )

    def unassign_collector(self, report_id: int) -> Result:
        """Drop the collector and put the report back to pending."""
        try:
            report = self._get_report(report_id)
            if report.status != ReportStatus.PENDING.value:
                self._transition(report, ReportStatus.PENDING)
            report.collector_id = None
            db.session.commit()
        except GreenQuestError as e:
            db.session.rollback()
            return Result.failure(e)
        except Exception:
            db.session.rollback()
            logger.exception(f"Error unassigning collector of report {report_id}")
            raise

        return Result.success(report)

    def _get_report(self, report_id: int) -> Report:
        report = db.session.get(Report, report_id)
        if not report:
            raise NotFound(f"Report with ID {report_id} not found.")
        return report

    def _set_collector(self, report: Report, collector_id: int) -> None:
        collector = db.session.get(User, collector_id)
        if not collector:
            raise NotFound(f"Collector with ID {collector_id} not found.")
        if collector.role not in COLLECTOR_ROLES:
            raise ValidationFailed(
                f"User {collector_id} is not a pickup agent",
                {"collector_id": "must be an agent"},
            )
        report.collector_id = collector_id

    def _transition(self, report: Report, new_status: ReportStatus) -> None:
        """Apply a status change and its side effects. No commit."""
        if not report.can_transition_to(new_status):
            raise InvalidTransition(
                f"Cannot move report {report.id} from {report.status} "
                f"to {new_status.value}"
            )

        old_status = report.status
        report.status = new_status.value
        report.updated_at = datetime.utcnow()
        logger.info(f"Report {report.id}: {old_status} -> {new_status.value}")

        if new_status == ReportStatus.ASSIGNED and report.collector_id:
            self.notifications.create_notification(
                report.collector_id,
                f"You have been assigned pickup #{report.id} at {report.location}.",
                NotificationType.PICKUP,
            )

        if new_status == ReportStatus.COMPLETED:
            self._complete(report)

    def _complete(self, report: Report) -> None:
        report.completed_at = datetime.utcnow()
        db.session.flush()

        rewarded = [report.user_id]
        self.rewards.grant_points(
            report.user_id,
            current_app.config["REPORT_COMPLETED_POINTS"],
            "Waste Report Completion",
            f"Reward for completing report #{report.id}",
            TransactionType.EARNED_REPORT,
            collection_info="Points earned from waste report",
        )

        if report.collector_id:
            self.rewards.grant_points(
                report.collector_id,
                current_app.config["PICKUP_COLLECTED_POINTS"],
                "Waste Collection",
                f"Reward for collecting report #{report.id}",
                TransactionType.EARNED_COLLECT,
                collection_info="Points earned from waste collection",
            )
            if report.collector_id not in rewarded:
                rewarded.append(report.collector_id)

        for user_id in rewarded:
            refresh_progression(user_id)

    # ============ Queries ============

    def get_report(self, report_id: int) -> Report:
        return self._get_report(report_id)

    def get_user_reports(self, user_id: int) -> list[Report]:
        return (
            Report.query.filter_by(user_id=user_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
            .all()
        )

    def get_all_reports(self, status: str | None = None) -> list[Report]:
        query = Report.query
        if status:
            query = query.filter_by(status=parse_status(status).value)
        return query.order_by(Report.created_at.desc(), Report.id.desc()).all()

    def get_recent_reports(self, limit: int = 10) -> list[dict]:
        """Latest reports with the reporter's name, for dashboards."""
        try:
            rows = (
                db.session.query(Report, User.name)
                .outerjoin(User, Report.user_id == User.id)
                .order_by(Report.created_at.desc(), Report.id.desc())
                .limit(limit)
                .all()
            )
        except Exception:
            logger.exception("Error fetching recent reports")
            return []

        result = []
        for report, user_name in rows:
            data = report.to_dict()
            data["user_name"] = user_name
            result.append(data)
        return result

    def get_report_trends(self, interval: str = "weekly") -> dict:
        """Completed reports per week or month of submission, oldest first.

        Returns ``{"labels": [...], "data": [...]}`` with one period label
        (``YYYY-WW`` or ``YYYY-MM``) and one count per entry.
        """
        if interval not in TREND_FORMATS:
            raise ValidationFailed(
                f"Unknown trend interval: {interval}",
                {"interval": "must be weekly or monthly"},
            )

        sqlite_format, postgres_format = TREND_FORMATS[interval]
        if db.engine.dialect.name == "postgresql":
            period = db.func.to_char(Report.created_at, _sql_literal(postgres_format))
        else:
            period = db.func.strftime(_sql_literal(sqlite_format), Report.created_at)
        period = period.label("period")

        rows = (
            db.session.query(period, db.func.count(Report.id))
            .filter(Report.status == ReportStatus.COMPLETED.value)
            .group_by(period)
            .order_by(period)
            .all()
        )
        return {
            "labels": [label for label, _ in rows],
            "data": [count for _, count in rows],
        }

    def delete_report(self, report_id: int) -> Result:
        report = db.session.get(Report, report_id)
        if not report:
            return Result.failure(NotFound("Report not found."))
        db.session.delete(report)
        db.session.commit()
        return Result.success()
