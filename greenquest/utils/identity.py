"""Identity assertion checks for the wallet login hand-off."""

import hashlib
import hmac

from flask import current_app


def sign_identity(email: str, secret: str) -> str:
    """HMAC-SHA256 signature of the normalized email."""
    return hmac.new(
        secret.encode("utf-8"),
        email.strip().lower().encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def validate_identity_assertion(email: str, signature: str) -> bool:
    """
    Validate an identity assertion issued by the wallet login.

    The login front end signs the user's email with the shared
    AUTH_PROVIDER_SECRET once the wallet provider has verified the user;
    the API only trusts emails carrying a matching signature.
    """
    if not email or not signature:
        return False

    secret = current_app.config.get("AUTH_PROVIDER_SECRET", "")
    if not secret:
        current_app.logger.error(
            "No AUTH_PROVIDER_SECRET configured, rejecting identity assertion"
        )
        return False

    expected = sign_identity(email, secret)
    return hmac.compare_digest(expected, signature)
