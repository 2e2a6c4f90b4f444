"""Admin API endpoints: stats, users, badges, grants, catalog and notifications."""

import logging

from flask import request

from greenquest import db
from greenquest.api import api_bp
from greenquest.models import Report, ReportStatus, Transaction, TransactionType, User
from greenquest.services import (
    BadgeService,
    LedgerService,
    NotificationService,
    RewardService,
    UserService,
)
from greenquest.utils import result_response, success_response, validation_error
from greenquest.utils.auth import admin_required, current_user

logger = logging.getLogger(__name__)


# ============ Dashboard ============


@api_bp.route("/admin/dashboard", methods=["GET"])
@admin_required
def get_dashboard_stats():
    """Platform-wide counters for the admin dashboard."""
    total_reports = Report.query.count()
    pending_reports = Report.query.filter_by(
        status=ReportStatus.PENDING.value
    ).count()
    completed_reports = Report.query.filter_by(
        status=ReportStatus.COMPLETED.value
    ).count()

    total_waste = (
        db.session.query(db.func.coalesce(db.func.sum(Report.amount), 0))
        .filter(Report.status == ReportStatus.COMPLETED.value)
        .scalar()
    )
    points_redeemed = (
        db.session.query(db.func.coalesce(db.func.sum(Transaction.amount), 0))
        .filter(Transaction.type == TransactionType.REDEEMED.value)
        .scalar()
    )

    return success_response(
        {
            "total_reports": total_reports,
            "pending_reports": pending_reports,
            "completed_reports": completed_reports,
            "total_users": User.query.count(),
            "points_redeemed": int(points_redeemed),
            "total_waste_collected": float(total_waste),
        }
    )


@api_bp.route("/admin/users/recent", methods=["GET"])
@admin_required
def get_recent_users():
    limit = min(request.args.get("limit", 5, type=int), 50)
    users = UserService().get_recent_users(limit)
    return success_response({"users": [u.to_dict() for u in users]})


# ============ Users ============


@api_bp.route("/admin/users", methods=["GET"])
@admin_required
def get_users():
    """Paginated user list. Query params: page (default 1), limit (default 10)."""
    page = request.args.get("page", 1, type=int)
    limit = min(request.args.get("limit", 10, type=int), 100)
    return success_response(UserService().get_users_page(page, limit))


@api_bp.route("/admin/users/<int:user_id>/role", methods=["PUT"])
@admin_required
def update_user_role(user_id: int):
    """
    Change a user's role.

    Request body:
    {
        "role": "user|agent|admin"
    }
    """
    data = request.get_json(silent=True) or {}
    if "role" not in data:
        return validation_error({"role": "role is required"})

    result = UserService().update_user_role(user_id, data["role"])
    if result.ok:
        logger.info(
            f"Admin {current_user().id} set role of user {user_id} to {data['role']}"
        )
    return result_response(result, lambda user: {"user": user.to_dict()})


@api_bp.route("/admin/users/<int:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id: int):
    if user_id == current_user().id:
        return validation_error({"user_id": "You cannot delete yourself"})

    result = UserService().delete_user(user_id)
    return result_response(result, lambda _: {"deleted": True})


# ============ Badges ============


@api_bp.route("/admin/badges", methods=["POST"])
@admin_required
def create_badge():
    """
    Create a badge.

    Request body:
    {
        "name": "Heavy Lifter",
        "description": "Collect 50 kg of waste",
        "category": "Waste Collection",
        "criteria": {"type": "waste_collection", "amount": 50}
    }
    """
    data = request.get_json(silent=True) or {}
    missing = {
        field: f"{field} is required"
        for field in ("name", "criteria")
        if not data.get(field)
    }
    if missing:
        return validation_error(missing)

    result = BadgeService().create_badge(
        name=data["name"],
        description=data.get("description", ""),
        category=data.get("category", "General"),
        criteria=data["criteria"],
    )
    return result_response(
        result, lambda badge: {"badge": badge.to_dict()}, status_code=201
    )


@api_bp.route("/admin/badges/<int:badge_id>", methods=["PUT"])
@admin_required
def update_badge(badge_id: int):
    data = request.get_json(silent=True) or {}
    fields = {
        key: data[key]
        for key in ("name", "description", "category", "criteria")
        if key in data
    }
    result = BadgeService().update_badge(badge_id, **fields)
    return result_response(result, lambda badge: {"badge": badge.to_dict()})


@api_bp.route("/admin/badges/<int:badge_id>", methods=["DELETE"])
@admin_required
def delete_badge(badge_id: int):
    result = BadgeService().delete_badge(badge_id)
    return result_response(result, lambda _: {"deleted": True})


# ============ Point grants ============


@api_bp.route("/admin/rewards", methods=["GET"])
@admin_required
def get_all_rewards():
    return success_response({"rewards": RewardService().get_all_rewards()})


@api_bp.route("/admin/rewards", methods=["POST"])
@admin_required
def grant_reward():
    """
    Grant points to a user.

    Request body:
    {
        "user_id": 3,
        "points": 50,
        "name": "Cleanup bonus",
        "description": "Beach cleanup volunteer",
        "transaction_type": "earned_report"   // optional
    }
    """
    data = request.get_json(silent=True) or {}
    errors = {}
    if not isinstance(data.get("user_id"), int):
        errors["user_id"] = "user_id is required"
    if not isinstance(data.get("points"), int):
        errors["points"] = "points must be an integer"
    if errors:
        return validation_error(errors)

    name = data.get("name") or "Bonus points"
    result = RewardService().create_reward(
        data["user_id"],
        data["points"],
        name,
        data.get("description") or name,
        transaction_type=data.get(
            "transaction_type", TransactionType.EARNED_REPORT.value
        ),
    )
    return result_response(
        result, lambda reward: {"reward": reward.to_dict()}, status_code=201
    )


@api_bp.route("/admin/rewards/<int:reward_id>", methods=["DELETE"])
@admin_required
def delete_reward(reward_id: int):
    result = RewardService().delete_reward(reward_id)
    return result_response(result, lambda _: {"deleted": True})


@api_bp.route("/admin/transactions", methods=["GET"])
@admin_required
def get_all_transactions():
    return success_response({"transactions": LedgerService().get_all_transactions()})


# ============ Reward catalog ============


@api_bp.route("/admin/catalog", methods=["GET"])
@admin_required
def get_catalog():
    """Every catalog item, including unavailable ones."""
    items = RewardService().list_catalog(include_unavailable=True)
    return success_response({"items": [i.to_dict() for i in items]})


@api_bp.route("/admin/catalog", methods=["POST"])
@admin_required
def create_catalog_item():
    """
    Add a redeemable item.

    Request body:
    {
        "name": "Reusable Bottle",
        "cost": 250,
        "description": "...",       // optional
        "collection_info": "..."    // optional
    }
    """
    data = request.get_json(silent=True) or {}
    if not data.get("name"):
        return validation_error({"name": "name is required"})

    result = RewardService().create_catalog_item(
        data["name"],
        data.get("cost"),
        description=data.get("description"),
        collection_info=data.get("collection_info"),
    )
    return result_response(
        result, lambda item: {"item": item.to_dict()}, status_code=201
    )


@api_bp.route("/admin/catalog/<int:item_id>", methods=["PUT"])
@admin_required
def update_catalog_item(item_id: int):
    data = request.get_json(silent=True) or {}
    fields = {
        key: data[key]
        for key in ("name", "cost", "description", "collection_info", "is_available")
        if key in data
    }
    result = RewardService().update_catalog_item(item_id, **fields)
    return result_response(result, lambda item: {"item": item.to_dict()})


# ============ Notifications ============


@api_bp.route("/admin/notifications", methods=["GET"])
@admin_required
def get_recent_notifications():
    """Latest notifications of every user. Query params: limit (default 50)."""
    limit = min(request.args.get("limit", 50, type=int), 200)
    notifications = NotificationService().get_recent_notifications(limit)
    return success_response({"notifications": [n.to_dict() for n in notifications]})


@api_bp.route("/admin/notifications", methods=["POST"])
@admin_required
def send_notification():
    """
    Send a system notification to one user.

    Request body:
    {
        "user_id": 3,
        "message": "Collection is delayed on Friday"
    }
    """
    data = request.get_json(silent=True) or {}
    errors = {}
    if not isinstance(data.get("user_id"), int) or isinstance(data["user_id"], bool):
        errors["user_id"] = "user_id is required"
    if not isinstance(data.get("message"), str) or not data["message"].strip():
        errors["message"] = "message is required"
    if errors:
        return validation_error(errors)

    notification = NotificationService().send_system_notification(
        data["user_id"], data["message"].strip()
    )
    logger.info(
        f"Admin {current_user().id} sent notification {notification.id} "
        f"to user {data['user_id']}"
    )
    return success_response({"notification": notification.to_dict()}, status_code=201)


@api_bp.route("/admin/notifications/<int:notification_id>/read", methods=["POST"])
@admin_required
def admin_mark_notification_read(notification_id: int):
    notification = NotificationService().mark_notification_as_read(notification_id)
    return success_response({"notification": notification.to_dict()})
