"""Level and badge refresh run after every point-changing action."""

from greenquest.services.badge_service import BadgeService
from greenquest.services.level_service import LevelService


def refresh_progression(user_id: int) -> dict:
    """Update the user's level, then award badges. Does not commit.

    Level goes first so that level-based badges see the new level.
    """
    level_result = LevelService().apply_level(user_id)
    awarded = BadgeService().apply_badges(user_id)

    return {
        "level_up": level_result["level_up"],
        "level": level_result["new_level"],
        "new_badges": [b.to_dict() for b in awarded],
    }
