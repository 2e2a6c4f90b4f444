"""Authentication API endpoints."""

import logging

from flask import current_app, request
from flask_jwt_extended import create_access_token

from greenquest.api import api_bp
from greenquest.extensions import limiter
from greenquest.services import UserService
from greenquest.utils import (
    success_response,
    unauthorized,
    validate_identity_assertion,
    validation_error,
)
from greenquest.utils.auth import current_user, login_required

logger = logging.getLogger(__name__)


def _session_payload(user, is_new_user: bool) -> dict:
    # Identity must be a string for Flask-JWT-Extended
    access_token = create_access_token(identity=str(user.id))
    return {"user": user.to_dict(), "token": access_token, "is_new_user": is_new_user}


@api_bp.route("/auth/session", methods=["POST"])
@limiter.limit("20 per minute")
def create_session():
    """
    Exchange a signed identity assertion for an API token.

    Request body:
    {
        "email": "user@example.com",
        "name": "Jane",
        "signature": "<hex HMAC-SHA256 of the email>"
    }
    """
    data = request.get_json(silent=True)

    if not data or not data.get("email"):
        return validation_error({"email": "email is required"})
    if not data.get("signature"):
        return validation_error({"signature": "signature is required"})

    email = data["email"]
    if not validate_identity_assertion(email, data["signature"]):
        logger.warning("Rejected identity assertion")
        return unauthorized("Invalid identity assertion")

    user, created = UserService().get_or_create_user(email, data.get("name", ""))
    return success_response(_session_payload(user, created))


@api_bp.route("/auth/me", methods=["GET"])
@login_required
def get_current_user():
    """Get current authenticated user."""
    return success_response({"user": current_user().to_dict()})


@api_bp.route("/auth/dev", methods=["POST"])
def dev_authenticate():
    """
    Development-only endpoint for testing without the wallet login.
    Creates or gets a user by email.

    Request body:
    {
        "email": "test@example.com",
        "name": "Test User"
    }
    """
    if not current_app.debug:
        return unauthorized("This endpoint is only available in development mode")

    data = request.get_json(silent=True) or {}

    email = data.get("email", "test@example.com")
    name = data.get("name", "Test User")

    user, created = UserService().get_or_create_user(email, name)
    return success_response(_session_payload(user, created))
