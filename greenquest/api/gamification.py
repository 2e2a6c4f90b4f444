"""Progress, levels, badges and leaderboard API endpoints."""

from flask import current_app, request

from greenquest.api import api_bp
from greenquest.extensions import cache
from greenquest.services import (
    BadgeService,
    LevelCalculator,
    ProgressService,
    UserService,
)
from greenquest.utils import success_response
from greenquest.utils.auth import current_user, login_required


@api_bp.route("/user/progress", methods=["GET"])
@login_required
def get_user_progress():
    """Progress snapshot plus what the next level needs."""
    user = current_user()
    snapshot = ProgressService().get_user_progress(user.id)

    return success_response(
        {
            "progress": snapshot.to_dict(),
            "level": user.level,
            "max_level": LevelCalculator.max_level(),
            "next_level": LevelCalculator.next_level_requirements(user.level),
        }
    )


@api_bp.route("/user/badges", methods=["GET"])
@login_required
def get_user_badges():
    """Badges the current user has earned, oldest first."""
    badges = BadgeService().get_user_badges(current_user().id)
    return success_response({"badges": [b.to_dict() for b in badges]})


@api_bp.route("/badges", methods=["GET"])
@login_required
def get_all_badges():
    """Full badge catalog with an ``earned`` flag for the current user."""
    service = BadgeService()
    owned = {ub.badge_id for ub in service.get_user_badges(current_user().id)}

    badges = []
    for badge in service.get_all_badges():
        data = badge.to_dict()
        data["earned"] = badge.id in owned
        badges.append(data)

    return success_response({"badges": badges})


@api_bp.route("/levels", methods=["GET"])
def get_levels():
    """The level ladder, lowest tier first."""
    return success_response({"levels": LevelCalculator.ladder()})


@api_bp.route("/leaderboard", methods=["GET"])
@cache.cached(timeout=60, query_string=True)
def get_leaderboard():
    """Top users by lifetime points earned."""
    default_limit = current_app.config.get("LEADERBOARD_SIZE", 20)
    limit = min(int(request.args.get("limit", default_limit)), 100)

    return success_response({"leaderboard": UserService().get_leaderboard(limit)})
