"""Notification API endpoints."""

from flask import request

from greenquest.api import api_bp
from greenquest.services import NotificationService
from greenquest.utils import success_response
from greenquest.utils.auth import current_user, login_required


@api_bp.route("/notifications", methods=["GET"])
@login_required
def get_notifications():
    """
    Get notifications of the current user.

    Query params:
    - unread: "true" to return only unread ones (default)
    - limit: max results when unread=false (default 50)
    """
    service = NotificationService()
    user_id = current_user().id

    if request.args.get("unread", "true").lower() != "false":
        notifications = service.get_unread_notifications(user_id)
    else:
        limit = min(int(request.args.get("limit", 50)), 200)
        notifications = service.get_notifications(user_id, limit)

    return success_response({"notifications": [n.to_dict() for n in notifications]})


@api_bp.route("/notifications/<int:notification_id>/read", methods=["POST"])
@login_required
def mark_notification_read(notification_id: int):
    notification = NotificationService().mark_notification_as_read(
        notification_id, user_id=current_user().id
    )
    return success_response({"notification": notification.to_dict()})


@api_bp.route("/notifications/read-all", methods=["POST"])
@login_required
def mark_all_notifications_read():
    updated = NotificationService().mark_all_as_read(current_user().id)
    return success_response({"updated": updated})
