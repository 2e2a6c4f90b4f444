"""API blueprints."""

from flask import Blueprint

api_bp = Blueprint("api", __name__)

from greenquest.api import (admin, auth, gamification,  # noqa: E402, F401
                            notifications, pickups, reports, rewards)
