"""Tests for progress snapshots and level updates."""

from decimal import Decimal

from greenquest import db
from greenquest.models import Notification, NotificationType, Report, ReportStatus, User
from greenquest.services import (
    LevelService,
    ProgressService,
    ProgressSnapshot,
    RewardService,
)


def _report(user_id, amount, status=ReportStatus.COMPLETED.value):
    report = Report(
        user_id=user_id,
        location="Harbour Rd",
        waste_type="plastic",
        amount=Decimal(amount),
        status=status,
    )
    db.session.add(report)
    db.session.commit()
    return report


class TestProgressService:
    def test_completed_reports_only(self, app, test_user):
        _report(test_user["id"], "120.5")
        _report(test_user["id"], "30", status=ReportStatus.PENDING.value)

        snapshot = ProgressService().compute_progress(test_user["id"])

        assert snapshot.waste_collected == 120.5
        assert snapshot.co2_offset == 60.25
        assert snapshot.reports_submitted == 1
        assert snapshot.pickup_tasks_completed == 1
        assert snapshot.user_level == 1

    def test_points_and_redemptions(self, app, test_user):
        service = RewardService()
        service.create_reward(test_user["id"], 40, "Bonus", "Bonus")
        service.redeem_reward(test_user["id"], 0)

        snapshot = ProgressService().compute_progress(test_user["id"])

        assert snapshot.points_earned == 40
        assert snapshot.rewards_redeemed == 1

    def test_dashboard_read_degrades_to_empty(self, app, test_user, monkeypatch):
        def broken(self, user_id):
            raise RuntimeError("database is gone")

        monkeypatch.setattr(ProgressService, "compute_progress", broken)

        assert ProgressService().get_user_progress(test_user["id"]) == ProgressSnapshot()

    def test_progress_endpoint(self, auth_client, test_user):
        _report(test_user["id"], "12.5")

        response = auth_client.get("/api/v1/user/progress")
        assert response.status_code == 200
        data = response.json["data"]
        assert data["progress"]["waste_collected"] == 12.5
        assert data["level"] == 1
        assert data["next_level"]["level"] == 2


class TestLevelService:
    def test_level_up_notifies_once(self, app, test_user):
        _report(test_user["id"], "60")

        result = LevelService().update_user_level(test_user["id"])

        assert result == {"level_up": True, "old_level": 1, "new_level": 2}
        assert db.session.get(User, test_user["id"]).level == 2
        level_ups = Notification.query.filter_by(
            user_id=test_user["id"], type=NotificationType.LEVEL_UP.value
        ).all()
        assert [n.message for n in level_ups] == ["You have leveled up to level 2!"]

        # Nothing changed, so nothing happens
        assert LevelService().update_user_level(test_user["id"])["level_up"] is False
        assert (
            Notification.query.filter_by(type=NotificationType.LEVEL_UP.value).count()
            == 1
        )

    def test_level_never_goes_down(self, app, test_user):
        user = db.session.get(User, test_user["id"])
        user.level = 4
        db.session.commit()

        result = LevelService().update_user_level(test_user["id"])

        assert result["level_up"] is False
        assert db.session.get(User, test_user["id"]).level == 4

    def test_points_grant_levels_up_in_same_action(self, app, test_user):
        result = RewardService().create_reward(test_user["id"], 500, "Bonus", "Bonus")

        assert result.ok
        assert db.session.get(User, test_user["id"]).level == 2
