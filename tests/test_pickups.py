"""Tests for pickup assignment and the agent API."""

from greenquest import db
from greenquest.models import Notification, NotificationType, Report, UserRole
from greenquest.services import LedgerService, ReportService


def _report(user_id):
    return ReportService().create_report(user_id, "Dock 4", "metal", "8").unwrap()


class TestPickupAssignment:
    def test_assign_notifies_agent(self, admin_client, test_user, agent_user):
        report = _report(test_user["id"])

        response = admin_client.post(
            f"/api/v1/pickups/{report.id}/assign",
            json={"collector_id": agent_user["id"]},
        )

        assert response.status_code == 200
        pickup = response.json["data"]["pickup"]
        assert pickup["status"] == "assigned"
        assert pickup["collector_id"] == agent_user["id"]

        notification = Notification.query.filter_by(
            user_id=agent_user["id"], type=NotificationType.PICKUP.value
        ).one()
        assert notification.message == (
            f"You have been assigned pickup #{report.id} at Dock 4."
        )

    def test_cannot_assign_plain_user(self, admin_client, test_user, make_user):
        report = _report(test_user["id"])
        other = make_user("other@example.com")

        response = admin_client.post(
            f"/api/v1/pickups/{report.id}/assign", json={"collector_id": other["id"]}
        )

        assert response.status_code == 400
        assert db.session.get(Report, report.id).collector_id is None

    def test_unassign(self, admin_client, test_user, agent_user):
        report = _report(test_user["id"])
        ReportService().assign_collector(report.id, agent_user["id"])

        response = admin_client.post(f"/api/v1/pickups/{report.id}/unassign")

        assert response.status_code == 200
        assert response.json["data"]["pickup"]["status"] == "pending"
        assert response.json["data"]["pickup"]["collector_id"] is None


class TestAgentAPI:
    def test_plain_user_cannot_list_pickups(self, auth_client):
        response = auth_client.get("/api/v1/pickups")
        assert response.status_code == 403

    def test_agent_lists_pickups_and_tasks(self, agent_client, test_user):
        _report(test_user["id"])

        response = agent_client.get("/api/v1/pickups?status=pending")
        assert response.status_code == 200
        assert len(response.json["data"]["pickups"]) == 1

        response = agent_client.get("/api/v1/pickups/tasks")
        assert response.json["data"]["tasks"][0]["amount"] == 8.0

    def test_agent_completes_own_pickup(self, agent_client, test_user, agent_user):
        report = _report(test_user["id"])
        ReportService().assign_collector(report.id, agent_user["id"])

        response = agent_client.put(
            f"/api/v1/pickups/{report.id}/status", json={"status": "in_progress"}
        )
        assert response.status_code == 200

        response = agent_client.put(
            f"/api/v1/pickups/{report.id}/status", json={"status": "completed"}
        )
        assert response.status_code == 200
        assert LedgerService().get_balance(agent_user["id"]) == 20
        assert LedgerService().get_balance(test_user["id"]) == 60

        profile = agent_client.get("/api/v1/agent/profile").json["data"]
        assert profile["completed_pickups"] == 1
        assert profile["assigned_pickups"] == []

    def test_agent_cannot_touch_others_pickup(
        self, client, login, make_user, test_user, agent_user
    ):
        report = _report(test_user["id"])
        ReportService().assign_collector(report.id, agent_user["id"])
        make_user("agent2@example.com", "Agent Two", UserRole.AGENT.value)

        response = client.put(
            f"/api/v1/pickups/{report.id}/status",
            json={"status": "completed"},
            headers=login("agent2@example.com"),
        )

        assert response.status_code == 403
        assert response.json["error"]["code"] == "FORBIDDEN"
        assert db.session.get(Report, report.id).status == "assigned"

    def test_invalid_transition_via_agent(self, agent_client, test_user, agent_user):
        report = _report(test_user["id"])
        ReportService().assign_collector(report.id, agent_user["id"])
        ReportService().update_report_status(report.id, "completed")

        response = agent_client.put(
            f"/api/v1/pickups/{report.id}/status", json={"status": "in_progress"}
        )
        assert response.status_code == 409
        assert response.json["error"]["code"] == "INVALID_TRANSITION"
