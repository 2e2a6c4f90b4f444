"""Pickup agent service."""

from greenquest import db
from greenquest.errors import Forbidden, NotFound
from greenquest.models import Report, ReportStatus, User
from greenquest.services.report_service import ReportService


class PickupService:
    """Collector-facing view of reports."""

    def __init__(self):
        self.reports = ReportService()

    def get_all_pickup_requests(self, status: str | None = None) -> list[Report]:
        return self.reports.get_all_reports(status)

    def get_waste_collection_tasks(self, limit: int = 20) -> list[dict]:
        tasks = (
            Report.query.order_by(Report.created_at.desc(), Report.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": t.id,
                "location": t.location,
                "waste_type": t.waste_type,
                "amount": float(t.amount),
                "status": t.status,
                "date": t.created_at.strftime("%Y-%m-%d"),
                "collector_id": t.collector_id,
            }
            for t in tasks
        ]

    def update_pickup_status(
        self, pickup_id: int, status: str, agent_id: int | None = None
    ) -> Report:
        """Change a pickup's status, raising on failure.

        When ``agent_id`` is given and is not an admin, only the assigned
        collector may change the status.
        """
        if agent_id is not None:
            agent = db.session.get(User, agent_id)
            report = db.session.get(Report, pickup_id)
            if not report:
                raise NotFound(f"Pickup {pickup_id} not found")
            if not agent or (not agent.is_admin and report.collector_id != agent_id):
                raise Forbidden("Pickup is assigned to another collector")

        return self.reports.update_report_status(pickup_id, status).unwrap()

    def get_agent_profile(self, agent_id: int) -> dict:
        agent = db.session.get(User, agent_id)
        if not agent:
            raise NotFound("Agent profile not found.")

        base = Report.query.filter_by(collector_id=agent_id)
        completed = base.filter_by(status=ReportStatus.COMPLETED.value).count()
        in_progress = base.filter_by(status=ReportStatus.IN_PROGRESS.value).count()
        assigned = base.filter_by(status=ReportStatus.ASSIGNED.value).all()

        return {
            "id": agent.id,
            "name": agent.name,
            "email": agent.email,
            "completed_pickups": completed,
            "pending_pickups": in_progress,
            "assigned_pickups": [
                {
                    "id": r.id,
                    "location": r.location,
                    "waste_type": r.waste_type,
                    "status": r.status,
                }
                for r in assigned
            ],
        }
