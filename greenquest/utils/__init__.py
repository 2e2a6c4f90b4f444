"""Utility functions."""

from greenquest.utils.identity import sign_identity, validate_identity_assertion
from greenquest.utils.response import (
    domain_error,
    error_response,
    forbidden,
    result_response,
    success_response,
    unauthorized,
    validation_error,
)

__all__ = [
    "success_response",
    "error_response",
    "domain_error",
    "result_response",
    "unauthorized",
    "forbidden",
    "validation_error",
    "sign_identity",
    "validate_identity_assertion",
]
