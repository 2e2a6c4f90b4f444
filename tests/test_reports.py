"""Tests for waste reports and the report lifecycle."""

from decimal import Decimal

import pytest

from greenquest import db
from greenquest.errors import InvalidAmount
from greenquest.models import (
    Report,
    ReportStatus,
    Transaction,
    TransactionType,
    UserRole,
)
from greenquest.services import LedgerService, ReportService
from greenquest.services.report_service import parse_amount

REPORT = {"location": "Main St & 5th Ave", "waste_type": "plastic", "amount": "12.5"}


class TestParseAmount:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("120.5", Decimal("120.50")),
            ("120.5 kg", Decimal("120.50")),
            (" 3KG", Decimal("3.00")),
            (7, Decimal("7.00")),
            ("0.005", Decimal("0.01")),
        ],
    )
    def test_valid_amounts(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "abc", "0", "0.004", "-5", "NaN", "Infinity", True, "100000000"],
    )
    def test_invalid_amounts(self, value):
        with pytest.raises(InvalidAmount):
            parse_amount(value)


class TestCreateReportAPI:
    def test_create_report(self, auth_client, test_user):
        response = auth_client.post(
            "/api/v1/reports", json={**REPORT, "amount": "120.5 kg"}
        )

        assert response.status_code == 201
        report = response.json["data"]["report"]
        assert report["amount"] == 120.5
        assert report["status"] == "pending"
        assert LedgerService().get_balance(test_user["id"]) == 10

    def test_invalid_amount(self, auth_client):
        response = auth_client.post("/api/v1/reports", json={**REPORT, "amount": "-5"})
        assert response.status_code == 400
        assert response.json["error"]["code"] == "INVALID_AMOUNT"
        assert Report.query.count() == 0
        assert Transaction.query.count() == 0

    def test_missing_location(self, auth_client):
        response = auth_client.post("/api/v1/reports", json={**REPORT, "location": ""})
        assert response.status_code == 400
        assert response.json["error"]["code"] == "VALIDATION_ERROR"

    def test_list_my_reports(self, auth_client):
        auth_client.post("/api/v1/reports", json=REPORT)
        auth_client.post("/api/v1/reports", json={**REPORT, "waste_type": "glass"})

        response = auth_client.get("/api/v1/reports")
        assert response.status_code == 200
        assert [r["waste_type"] for r in response.json["data"]["reports"]] == [
            "glass",
            "plastic",
        ]

    def test_other_users_report_is_hidden(self, auth_client, make_user):
        other = make_user("other@example.com", "Other")
        report = ReportService().create_report(other["id"], "Elm St", "paper", "1")
        report_id = report.value.id

        response = auth_client.get(f"/api/v1/reports/{report_id}")
        assert response.status_code == 404


class TestReportLifecycle:
    def _submit(self, user_id, amount="12.5"):
        return ReportService().create_report(
            user_id, REPORT["location"], REPORT["waste_type"], amount
        ).unwrap()

    def test_completion_rewards_owner_once(self, app, test_user):
        report = self._submit(test_user["id"])
        service = ReportService()

        assert service.update_report_status(report.id, "completed").ok
        # Re-applying the same status is a no-op
        assert service.update_report_status(report.id, "completed").ok

        assert LedgerService().get_balance(test_user["id"]) == 60
        assert db.session.get(Report, report.id).completed_at is not None

    def test_completion_rewards_collector(self, app, test_user, agent_user):
        report = self._submit(test_user["id"])
        service = ReportService()

        assert service.assign_collector(report.id, agent_user["id"]).ok
        assert service.update_report_status(report.id, "completed").ok

        collect = Transaction.query.filter_by(
            user_id=agent_user["id"], type=TransactionType.EARNED_COLLECT.value
        ).one()
        assert collect.amount == 20

    def test_completed_collector_is_fixed(
        self, app, test_user, agent_user, make_user
    ):
        other = make_user("agent2@example.com", "Agent Two", UserRole.AGENT.value)
        report = self._submit(test_user["id"])
        service = ReportService()
        service.assign_collector(report.id, agent_user["id"])
        service.update_report_status(report.id, "completed")

        result = service.update_report_status(
            report.id, "completed", collector_id=other["id"]
        )

        assert result.error.code == "INVALID_TRANSITION"
        assert db.session.get(Report, report.id).collector_id == agent_user["id"]
        # Same collector is still accepted as a no-op
        assert service.update_report_status(
            report.id, "completed", collector_id=agent_user["id"]
        ).ok
        assert not Transaction.query.filter_by(
            user_id=other["id"], type=TransactionType.EARNED_COLLECT.value
        ).all()

    def test_completed_is_terminal(self, app, test_user):
        report = self._submit(test_user["id"])
        service = ReportService()
        service.update_report_status(report.id, "completed")

        result = service.update_report_status(report.id, "pending")

        assert result.error.code == "INVALID_TRANSITION"
        assert db.session.get(Report, report.id).status == "completed"

    def test_cancelled_can_reopen(self, app, test_user):
        report = self._submit(test_user["id"])
        service = ReportService()

        assert service.update_report_status(report.id, "cancelled").ok
        assert service.update_report_status(report.id, "pending").ok
        assert not service.update_report_status(report.id, "cancelled").error

    def test_unknown_status(self, app, test_user):
        report = self._submit(test_user["id"])
        result = ReportService().update_report_status(report.id, "done")
        assert result.error.code == "INVALID_STATUS"

    def test_failed_completion_rolls_back(self, app, test_user, monkeypatch):
        report = self._submit(test_user["id"])

        def explode(user_id):
            raise RuntimeError("badge table locked")

        monkeypatch.setattr(
            "greenquest.services.report_service.refresh_progression", explode
        )

        with pytest.raises(RuntimeError):
            ReportService().update_report_status(report.id, "completed")

        assert db.session.get(Report, report.id).status == ReportStatus.PENDING.value
        assert LedgerService().get_balance(test_user["id"]) == 10


class TestAdminReportAPI:
    def test_update_status(self, admin_client, test_user):
        report = ReportService().create_report(
            test_user["id"], "Elm St", "paper", "4"
        ).unwrap()

        response = admin_client.put(
            f"/api/v1/reports/{report.id}/status", json={"status": "completed"}
        )
        assert response.status_code == 200
        assert response.json["data"]["report"]["status"] == "completed"

        response = admin_client.put(
            f"/api/v1/reports/{report.id}/status", json={"status": "assigned"}
        )
        assert response.status_code == 409

    def test_user_cannot_update_status(self, auth_client, test_user):
        report = ReportService().create_report(
            test_user["id"], "Elm St", "paper", "4"
        ).unwrap()

        response = auth_client.put(
            f"/api/v1/reports/{report.id}/status", json={"status": "completed"}
        )
        assert response.status_code == 403

    def test_list_filter_and_delete(self, admin_client, test_user):
        service = ReportService()
        first = service.create_report(test_user["id"], "A", "paper", "1").unwrap()
        service.create_report(test_user["id"], "B", "paper", "1")
        service.update_report_status(first.id, "cancelled")

        response = admin_client.get("/api/v1/admin/reports?status=cancelled")
        assert [r["location"] for r in response.json["data"]["reports"]] == ["A"]

        response = admin_client.get("/api/v1/admin/reports?status=bogus")
        assert response.status_code == 400

        response = admin_client.get("/api/v1/admin/reports/recent")
        assert response.json["data"]["reports"][0]["user_name"] == "Test User"

        response = admin_client.delete(f"/api/v1/admin/reports/{first.id}")
        assert response.status_code == 200
        assert Report.query.count() == 1

    def test_missing_report(self, admin_client):
        response = admin_client.put(
            "/api/v1/reports/999/status", json={"status": "completed"}
        )
        assert response.status_code == 404
