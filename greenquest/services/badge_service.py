"""Badge awarding and badge catalog service."""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from greenquest import db
from greenquest.errors import Conflict, GreenQuestError, MalformedCriteria, NotFound
from greenquest.models import Badge, BadgeCriteria, NotificationType, UserBadge
from greenquest.models.badge import BADGES
from greenquest.services.notification_service import NotificationService
from greenquest.services.progress_service import ProgressService
from greenquest.services.result import Result

logger = logging.getLogger(__name__)


class BadgeService:
    """Grants badges whose criteria a user's progress satisfies."""

    def __init__(self):
        self.progress = ProgressService()
        self.notifications = NotificationService()

    # ============ Awarding ============

    def apply_badges(self, user_id: int) -> list[Badge]:
        """Award newly earned badges without committing.

        Returns only the badges this call actually inserted.
        """
        all_badges = Badge.query.order_by(Badge.id).all()
        owned = self._owned_badge_ids(user_id)
        snapshot = self.progress.compute_progress(user_id)

        candidates = []
        for badge in all_badges:
            if badge.id in owned:
                continue
            try:
                criteria = badge.parsed_criteria
            except MalformedCriteria as e:
                logger.warning(f"Skipping badge {badge.id} with invalid criteria: {e}")
                continue
            if criteria.is_met(snapshot):
                candidates.append(badge)

        if not candidates:
            logger.debug(f"No new badges to award for user {user_id}")
            return []

        inserted_ids = self._insert_grants(user_id, [b.id for b in candidates])
        awarded = [b for b in candidates if b.id in inserted_ids]

        if awarded:
            self.notifications.create_notification(
                user_id,
                self._award_message(awarded),
                NotificationType.BADGE_AWARD,
            )
            logger.info(f"Awarded {len(awarded)} new badges to user {user_id}")

        return awarded

    def award_user_badges(self, user_id: int) -> list[Badge]:
        """Award newly earned badges and commit. Idempotent."""
        awarded = self.apply_badges(user_id)
        if awarded:
            db.session.commit()
        return awarded

    def _owned_badge_ids(self, user_id: int) -> set[int]:
        rows = db.session.query(UserBadge.badge_id).filter_by(user_id=user_id).all()
        return {row.badge_id for row in rows}

    def _insert_grants(self, user_id: int, badge_ids: list[int]) -> set[int]:
        """Insert grants, skipping any the unique constraint rejects.

        A racing request may have awarded the same badge after we read
        the owned set; those rows are silently dropped by the database.
        """
        now = datetime.utcnow()
        dialect = db.engine.dialect.name

        if dialect in ("postgresql", "sqlite"):
            if dialect == "postgresql":
                from sqlalchemy.dialects.postgresql import insert
            else:
                from sqlalchemy.dialects.sqlite import insert

            stmt = (
                insert(UserBadge)
                .values(
                    [
                        {"user_id": user_id, "badge_id": badge_id, "awarded_at": now}
                        for badge_id in badge_ids
                    ]
                )
                .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
                .returning(UserBadge.badge_id)
            )
            return set(db.session.execute(stmt).scalars().all())

        inserted = set()
        for badge_id in badge_ids:
            try:
                with db.session.begin_nested():
                    db.session.add(
                        UserBadge(user_id=user_id, badge_id=badge_id, awarded_at=now)
                    )
                inserted.add(badge_id)
            except IntegrityError:
                logger.info(f"Badge {badge_id} already awarded to user {user_id}")
        return inserted

    @staticmethod
    def _award_message(badges: list[Badge]) -> str:
        names = ", ".join(b.name for b in badges)
        if len(badges) == 1:
            return f"Congratulations! You've earned 1 new badge: {names}"
        return f"Congratulations! You've earned {len(badges)} new badges: {names}"

    # ============ Queries ============

    def get_all_badges(self) -> list[Badge]:
        return Badge.query.order_by(Badge.created_at.desc(), Badge.id.desc()).all()

    def get_user_badges(self, user_id: int) -> list[UserBadge]:
        return (
            UserBadge.query.filter_by(user_id=user_id)
            .order_by(UserBadge.awarded_at, UserBadge.id)
            .all()
        )

    # ============ Admin CRUD ============

    def create_badge(
        self, name: str, description: str, category: str, criteria: dict
    ) -> Result:
        """Create a badge. Criteria are validated and normalized here."""
        try:
            parsed = BadgeCriteria.from_payload(criteria)
        except MalformedCriteria as e:
            return Result.failure(e)

        if Badge.query.filter_by(name=name).first():
            return Result.failure(Conflict(f"Badge '{name}' already exists"))

        badge = Badge(
            name=name,
            description=description,
            category=category,
            criteria=parsed.to_payload(),
        )
        db.session.add(badge)
        db.session.commit()
        return Result.success(badge)

    def update_badge(self, badge_id: int, **fields) -> Result:
        """Update name, description, category and/or criteria."""
        badge = db.session.get(Badge, badge_id)
        if not badge:
            return Result.failure(NotFound(f"Badge {badge_id} not found"))

        try:
            if "criteria" in fields:
                fields["criteria"] = BadgeCriteria.from_payload(
                    fields["criteria"]
                ).to_payload()
        except GreenQuestError as e:
            return Result.failure(e)

        for key in ("name", "description", "category", "criteria"):
            if key in fields and fields[key] is not None:
                setattr(badge, key, fields[key])

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            return Result.failure(Conflict(f"Badge '{fields.get('name')}' already exists"))
        return Result.success(badge)

    def delete_badge(self, badge_id: int) -> Result:
        """Delete a badge together with its grants."""
        badge = db.session.get(Badge, badge_id)
        if not badge:
            return Result.failure(NotFound(f"Badge {badge_id} not found"))
        db.session.delete(badge)
        db.session.commit()
        return Result.success()

    def seed_default_badges(self) -> int:
        """Create or refresh the default badge catalog. Returns rows created."""
        created = 0
        for badge_data in BADGES:
            existing = Badge.query.filter_by(name=badge_data["name"]).first()
            if existing:
                existing.description = badge_data["description"]
                existing.category = badge_data["category"]
                existing.criteria = badge_data["criteria"]
            else:
                db.session.add(Badge(**badge_data))
                created += 1
        db.session.commit()
        return created
