"""Centralized error handling and responses - DRY principle"""
from typing import Tuple
from onboarding.exceptions.exceptions import (
    AccessDeniedError, ConflictError, NotFoundError, PersistenceError,
    UpstreamFormatError, ValidationError,
)
from onboarding.logging_logs.log_config import get_logger

logger = get_logger("exceptions.error_handler")

STATUS_CODES = (
    (ValidationError, 400),
    (UpstreamFormatError, 400),
    (AccessDeniedError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)

def error_response(message: str, details=None) -> dict:
    body = {"success": False, "message": message}
    if details is not None:
        body["details"] = details
    return body

# ============= ERROR HANDLERS =============

def handle_service_error(e: Exception) -> Tuple[dict, int]:
    """Centralized error handling for services"""

    for error_type, status in STATUS_CODES:
        if isinstance(e, error_type):
            return error_response(str(e), e.details), status

    if isinstance(e, PersistenceError):
        logger.error(f"Persistence failure: {e}")
        return error_response("Database operation failed", e.details), 500

    if isinstance(e, ValueError):
        return error_response(str(e)), 400

    sanitized_error = str(e).replace('\n', ' ').replace('\r', ' ')[:500]
    logger.error(f"Unexpected error: {sanitized_error}")
    return error_response("Server error"), 500
