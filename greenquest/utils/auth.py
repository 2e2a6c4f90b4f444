"""Authentication utilities."""

from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, jwt_required

from greenquest import db
from greenquest.models.user import User, UserRole
from greenquest.utils.response import forbidden, unauthorized


def _load_current_user():
    """Resolve the JWT identity to a user row, caching it on ``g``."""
    user_id = int(get_jwt_identity())
    user = db.session.get(User, user_id)
    g.current_user = user
    return user


def current_user() -> User | None:
    """Current user for handlers wrapped by the decorators below."""
    return g.get("current_user")


def login_required(fn):
    """Require a valid token for an existing user."""

    @wraps(fn)
    @jwt_required()
    def wrapper(*args, **kwargs):
        if not _load_current_user():
            return unauthorized("User not found")
        return fn(*args, **kwargs)

    return wrapper


def roles_required(*roles: str):
    """
    Require the current user to hold one of ``roles``.

    The role is read from the database on every request, never from
    token claims.
    """

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            user = _load_current_user()
            if not user:
                return unauthorized("User not found")
            if user.role not in roles:
                return forbidden("Insufficient permissions")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


admin_required = roles_required(UserRole.ADMIN.value)
agent_required = roles_required(UserRole.AGENT.value, UserRole.ADMIN.value)
