"""In-app notification service."""

from greenquest import db
from greenquest.errors import NotFound
from greenquest.models import Notification, NotificationType, User


class NotificationService:
    """Creates and reads inbox notifications."""

    def create_notification(
        self, user_id: int, message: str, notification_type: NotificationType | str
    ) -> Notification:
        """Insert an unread notification. Flushes; the caller commits."""
        notification = Notification(
            user_id=user_id,
            message=message,
            type=NotificationType(notification_type).value,
            is_read=False,
        )
        db.session.add(notification)
        db.session.flush()
        return notification

    def get_unread_notifications(self, user_id: int) -> list[Notification]:
        return (
            Notification.query.filter_by(user_id=user_id, is_read=False)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def get_notifications(self, user_id: int, limit: int = 50) -> list[Notification]:
        return (
            Notification.query.filter_by(user_id=user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

    def get_recent_notifications(self, limit: int = 50) -> list[Notification]:
        """Latest notifications across all users, for the admin console."""
        return (
            Notification.query.order_by(
                Notification.created_at.desc(), Notification.id.desc()
            )
            .limit(limit)
            .all()
        )

    def send_system_notification(self, user_id: int, message: str) -> Notification:
        """Admin-authored message to one user. Commits."""
        if not db.session.get(User, user_id):
            raise NotFound(f"User with ID {user_id} does not exist.")

        notification = self.create_notification(
            user_id, message, NotificationType.SYSTEM
        )
        db.session.commit()
        return notification

    def mark_notification_as_read(
        self, notification_id: int, user_id: int | None = None
    ) -> Notification:
        """Mark one notification read.

        When ``user_id`` is given, notifications of other users are
        reported as missing.
        """
        notification = db.session.get(Notification, notification_id)
        if not notification or (user_id is not None and notification.user_id != user_id):
            raise NotFound(f"Notification {notification_id} not found")

        notification.is_read = True
        db.session.commit()
        return notification

    def mark_all_as_read(self, user_id: int) -> int:
        """Mark every unread notification read. Returns how many changed."""
        updated = Notification.query.filter_by(user_id=user_id, is_read=False).update(
            {"is_read": True}
        )
        db.session.commit()
        return updated
