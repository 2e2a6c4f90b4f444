"""API response helpers."""

from typing import Any
from flask import jsonify


def success_response(
    data: Any = None, message: str | None = None, status_code: int = 200
):
    """Create a success response."""
    response = {"success": True}

    if data is not None:
        response["data"] = data

    if message is not None:
        response["message"] = message

    return jsonify(response), status_code


def error_response(
    code: str, message: str, details: dict | None = None, status_code: int = 400
):
    """Create an error response."""
    response = {"success": False, "error": {"code": code, "message": message}}

    if details is not None:
        response["error"]["details"] = details

    return jsonify(response), status_code


# Common error responses
def unauthorized(message: str = "Unauthorized"):
    """401 Unauthorized response."""
    return error_response("UNAUTHORIZED", message, status_code=401)


def forbidden(message: str = "Access denied"):
    """403 Forbidden response."""
    return error_response("FORBIDDEN", message, status_code=403)


def validation_error(details: dict):
    """400 Validation Error response."""
    return error_response(
        "VALIDATION_ERROR", "Invalid input data", details, status_code=400
    )


def domain_error(error):
    """Error response for a GreenQuestError."""
    return error_response(
        error.code, error.message, error.details, status_code=error.status_code
    )


def result_response(result, serialize=None, status_code: int = 200):
    """Turn a service Result into a success or error response."""
    if not result.ok:
        return domain_error(result.error)

    value = result.value
    if serialize is not None:
        value = serialize(value)
    return success_response(value, status_code=status_code)
