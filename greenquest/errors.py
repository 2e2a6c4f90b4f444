"""Domain errors for the rewarding pipeline.

Every error carries a stable ``code`` and the HTTP status the API layer
answers with.
"""


class GreenQuestError(Exception):
    """Base class for expected, user-facing failures."""

    code = "ERROR"
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFound(GreenQuestError):
    """Referenced user, report, reward, badge or notification is absent."""

    code = "NOT_FOUND"
    status_code = 404


class InvalidStatus(GreenQuestError):
    """Status string outside the report status enum."""

    code = "INVALID_STATUS"
    status_code = 400


class InvalidTransition(InvalidStatus):
    """Valid status, but not reachable from the report's current status."""

    code = "INVALID_TRANSITION"
    status_code = 409


class InsufficientBalance(GreenQuestError):
    """Redemption cost exceeds the user's point balance."""

    code = "INSUFFICIENT_BALANCE"
    status_code = 409


class MalformedCriteria(GreenQuestError):
    """Badge criteria payload fails shape validation."""

    code = "MALFORMED_CRITERIA"
    status_code = 400


class InvalidAmount(GreenQuestError):
    """Reported waste amount is not a positive decimal."""

    code = "INVALID_AMOUNT"
    status_code = 400


class ValidationFailed(GreenQuestError):
    """Request data is missing or has the wrong shape."""

    code = "VALIDATION_ERROR"
    status_code = 400


class Forbidden(GreenQuestError):
    code = "FORBIDDEN"
    status_code = 403


class Conflict(GreenQuestError):
    """Write would violate a uniqueness rule, e.g. a duplicate badge name."""

    code = "CONFLICT"
    status_code = 409


class InvalidRole(GreenQuestError):
    code = "INVALID_ROLE"
    status_code = 400


class InvalidTransactionType(GreenQuestError):
    code = "INVALID_TRANSACTION_TYPE"
    status_code = 400
