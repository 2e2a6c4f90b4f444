"""Tests for admin endpoints and the leaderboard."""

from datetime import datetime
from decimal import Decimal

from greenquest import db
from greenquest.models import (
    Notification,
    NotificationType,
    Report,
    RewardCatalogItem,
    User,
)
from greenquest.services import LedgerService, RewardService


class TestDashboardStats:
    def test_stats(self, admin_client, test_user):
        db.session.add_all(
            [
                Report(
                    user_id=test_user["id"],
                    location="A",
                    waste_type="paper",
                    amount=Decimal("12.5"),
                    status="completed",
                ),
                Report(
                    user_id=test_user["id"],
                    location="B",
                    waste_type="paper",
                    amount=Decimal("3"),
                    status="pending",
                ),
            ]
        )
        db.session.commit()
        RewardService().create_reward(test_user["id"], 40, "Bonus", "Bonus")
        RewardService().redeem_reward(test_user["id"], 0)

        response = admin_client.get("/api/v1/admin/dashboard")

        assert response.status_code == 200
        assert response.json["data"] == {
            "total_reports": 2,
            "pending_reports": 1,
            "completed_reports": 1,
            "total_users": 2,
            "points_redeemed": 40,
            "total_waste_collected": 12.5,
        }


class TestUserAdmin:
    def test_users_page(self, admin_client, make_user):
        for i in range(3):
            make_user(f"user{i}@example.com")

        response = admin_client.get("/api/v1/admin/users?page=1&limit=2")
        data = response.json["data"]
        assert len(data["users"]) == 2
        assert data["total_users"] == 4
        assert data["total_pages"] == 2

    def test_update_role(self, admin_client, test_user):
        response = admin_client.put(
            f"/api/v1/admin/users/{test_user['id']}/role", json={"role": "agent"}
        )
        assert response.status_code == 200
        assert db.session.get(User, test_user["id"]).role == "agent"

    def test_invalid_role(self, admin_client, test_user):
        response = admin_client.put(
            f"/api/v1/admin/users/{test_user['id']}/role", json={"role": "owner"}
        )
        assert response.status_code == 400
        assert response.json["error"]["code"] == "INVALID_ROLE"

    def test_delete_user(self, admin_client, test_user, admin_user):
        response = admin_client.delete(f"/api/v1/admin/users/{test_user['id']}")
        assert response.status_code == 200
        assert db.session.get(User, test_user["id"]) is None

        response = admin_client.delete(f"/api/v1/admin/users/{admin_user['id']}")
        assert response.status_code == 400


class TestPointGrantAdmin:
    def test_grant_points(self, admin_client, test_user):
        response = admin_client.post(
            "/api/v1/admin/rewards",
            json={"user_id": test_user["id"], "points": 75, "name": "Cleanup"},
        )

        assert response.status_code == 201
        assert response.json["data"]["reward"]["points"] == 75
        assert LedgerService().get_balance(test_user["id"]) == 75

        response = admin_client.get("/api/v1/admin/rewards")
        assert response.json["data"]["rewards"][0]["user_name"] == "Test User"

        response = admin_client.get("/api/v1/admin/transactions")
        assert len(response.json["data"]["transactions"]) == 1

    def test_grant_rejects_redemption_type(self, admin_client, test_user):
        response = admin_client.post(
            "/api/v1/admin/rewards",
            json={
                "user_id": test_user["id"],
                "points": 75,
                "transaction_type": "redeemed",
            },
        )
        assert response.status_code == 400
        assert response.json["error"]["code"] == "INVALID_TRANSACTION_TYPE"

    def test_delete_grant_keeps_ledger(self, admin_client, test_user):
        reward = RewardService().create_reward(
            test_user["id"], 30, "Bonus", "Bonus"
        ).unwrap()

        response = admin_client.delete(f"/api/v1/admin/rewards/{reward.id}")
        assert response.status_code == 200
        assert LedgerService().get_balance(test_user["id"]) == 30


class TestCatalogAdmin:
    def test_create_and_update_item(self, admin_client):
        response = admin_client.post(
            "/api/v1/admin/catalog", json={"name": "Seed Pack", "cost": 120}
        )
        assert response.status_code == 201
        item_id = response.json["data"]["item"]["id"]

        response = admin_client.put(
            f"/api/v1/admin/catalog/{item_id}", json={"is_available": False}
        )
        assert response.status_code == 200
        assert db.session.get(RewardCatalogItem, item_id).is_available is False

        response = admin_client.get("/api/v1/admin/catalog")
        assert [i["name"] for i in response.json["data"]["items"]] == ["Seed Pack"]

    def test_duplicate_name(self, admin_client):
        admin_client.post("/api/v1/admin/catalog", json={"name": "Seed Pack", "cost": 1})
        response = admin_client.post(
            "/api/v1/admin/catalog", json={"name": "Seed Pack", "cost": 2}
        )
        assert response.status_code == 409

    def test_rename_to_existing_name(self, admin_client):
        admin_client.post("/api/v1/admin/catalog", json={"name": "Bag", "cost": 50})
        response = admin_client.post(
            "/api/v1/admin/catalog", json={"name": "Cup", "cost": 80}
        )
        cup_id = response.json["data"]["item"]["id"]

        response = admin_client.put(
            f"/api/v1/admin/catalog/{cup_id}", json={"name": "Bag"}
        )

        assert response.status_code == 409
        assert response.json["error"]["code"] == "CONFLICT"
        assert db.session.get(RewardCatalogItem, cup_id).name == "Cup"

        # Session is usable after the rollback
        response = admin_client.put(
            f"/api/v1/admin/catalog/{cup_id}", json={"cost": 90}
        )
        assert response.status_code == 200

    def test_availability_must_be_boolean(self, admin_client):
        response = admin_client.post(
            "/api/v1/admin/catalog", json={"name": "Cup", "cost": 80}
        )
        item_id = response.json["data"]["item"]["id"]

        response = admin_client.put(
            f"/api/v1/admin/catalog/{item_id}", json={"is_available": "false"}
        )

        assert response.status_code == 400
        assert response.json["error"]["code"] == "VALIDATION_ERROR"
        assert db.session.get(RewardCatalogItem, item_id).is_available is True

    def test_cost_must_be_positive(self, admin_client):
        response = admin_client.post(
            "/api/v1/admin/catalog", json={"name": "Free", "cost": 0}
        )
        assert response.status_code == 400
        assert response.json["error"]["code"] == "INVALID_AMOUNT"


class TestLeaderboard:
    def test_ranked_by_points_earned(self, client, test_user, make_user):
        other = make_user("other@example.com", "Other")
        service = RewardService()
        service.create_reward(test_user["id"], 30, "Bonus", "Bonus")
        service.create_reward(other["id"], 90, "Bonus", "Bonus")
        # Spending does not lower the ranking
        service.redeem_reward(other["id"], 0)

        response = client.get("/api/v1/leaderboard")

        assert response.status_code == 200
        board = response.json["data"]["leaderboard"]
        assert [(row["rank"], row["name"], row["points"]) for row in board] == [
            (1, "Other", 90),
            (2, "Test User", 30),
        ]


class TestReportTrends:
    def _report(self, user_id, created_at, status="completed"):
        db.session.add(
            Report(
                user_id=user_id,
                location="Dock",
                waste_type="metal",
                amount=Decimal("1"),
                status=status,
                created_at=created_at,
            )
        )

    def test_monthly(self, admin_client, test_user):
        self._report(test_user["id"], datetime(2026, 1, 5, 9, 0))
        self._report(test_user["id"], datetime(2026, 1, 20, 9, 0))
        self._report(test_user["id"], datetime(2026, 2, 3, 9, 0))
        self._report(test_user["id"], datetime(2026, 2, 4, 9, 0), status="pending")
        db.session.commit()

        response = admin_client.get("/api/v1/admin/reports/trends?interval=monthly")

        assert response.status_code == 200
        assert response.json["data"] == {
            "labels": ["2026-01", "2026-02"],
            "data": [2, 1],
        }

    def test_weekly_is_default(self, admin_client, test_user):
        self._report(test_user["id"], datetime(2026, 1, 5, 9, 0))
        self._report(test_user["id"], datetime(2026, 1, 6, 9, 0))
        self._report(test_user["id"], datetime(2026, 1, 20, 9, 0))
        db.session.commit()

        response = admin_client.get("/api/v1/admin/reports/trends")

        data = response.json["data"]
        assert data["data"] == [2, 1]
        assert data["labels"] == sorted(data["labels"])

    def test_unknown_interval(self, admin_client):
        response = admin_client.get("/api/v1/admin/reports/trends?interval=daily")
        assert response.status_code == 400
        assert response.json["error"]["code"] == "VALIDATION_ERROR"


class TestRecentUsers:
    def test_newest_first(self, admin_client, make_user):
        make_user("first@example.com")
        make_user("second@example.com")

        response = admin_client.get("/api/v1/admin/users/recent?limit=2")

        assert response.status_code == 200
        assert [u["email"] for u in response.json["data"]["users"]] == [
            "second@example.com",
            "first@example.com",
        ]


class TestNotificationConsole:
    def test_send_and_list(self, admin_client, test_user):
        response = admin_client.post(
            "/api/v1/admin/notifications",
            json={"user_id": test_user["id"], "message": "  Pickup moved to Friday "},
        )

        assert response.status_code == 201
        notification = response.json["data"]["notification"]
        assert notification["type"] == NotificationType.SYSTEM.value
        assert notification["message"] == "Pickup moved to Friday"

        response = admin_client.get("/api/v1/admin/notifications")
        assert [n["id"] for n in response.json["data"]["notifications"]] == [
            notification["id"]
        ]

    def test_user_sees_system_message(self, admin_client, auth_client, test_user):
        admin_client.post(
            "/api/v1/admin/notifications",
            json={"user_id": test_user["id"], "message": "Welcome aboard"},
        )

        response = auth_client.get("/api/v1/notifications")
        assert [n["message"] for n in response.json["data"]["notifications"]] == [
            "Welcome aboard"
        ]

    def test_admin_marks_any_notification_read(self, admin_client, test_user):
        response = admin_client.post(
            "/api/v1/admin/notifications",
            json={"user_id": test_user["id"], "message": "Hello"},
        )
        notification_id = response.json["data"]["notification"]["id"]

        response = admin_client.post(
            f"/api/v1/admin/notifications/{notification_id}/read"
        )

        assert response.status_code == 200
        assert db.session.get(Notification, notification_id).is_read is True

    def test_unknown_user(self, admin_client):
        response = admin_client.post(
            "/api/v1/admin/notifications", json={"user_id": 999, "message": "Hi"}
        )
        assert response.status_code == 404
        assert Notification.query.count() == 0

    def test_missing_message(self, admin_client, test_user):
        response = admin_client.post(
            "/api/v1/admin/notifications", json={"user_id": test_user["id"]}
        )
        assert response.status_code == 400

    def test_requires_admin(self, auth_client, test_user):
        response = auth_client.post(
            "/api/v1/admin/notifications",
            json={"user_id": test_user["id"], "message": "Hi"},
        )
        assert response.status_code == 403
