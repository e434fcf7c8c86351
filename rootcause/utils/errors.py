"""
Error helpers for the context service

Two kinds of problems exist here. Bad caller input is rejected with an HTTP
error in a uniform envelope. Missing or unreadable records are not errors at
all for the caller: they become notices on the resolved state.
"""

from typing import Any, Dict, Optional
from enum import Enum
import structlog
from fastapi import HTTPException, status

logger = structlog.get_logger(__name__)


class ErrorCode(str, Enum):
    """Codes returned in the error envelope"""
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MALFORMED_GRANULARITY = "MALFORMED_GRANULARITY"


# Shown to callers; never include internals here
USER_FRIENDLY_MESSAGES = {
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred. Please try again later.",
    ErrorCode.VALIDATION_ERROR: "The request contains invalid data. Please check your input.",
    ErrorCode.MALFORMED_GRANULARITY: "Granularity must look like '<count>_<UNIT>', for example '5_MINUTES'.",
}


class MalformedGranularityError(ValueError):
    """Raised when a granularity token is not of the form '<count>_<UNIT>'"""

    def __init__(self, token: Any):
        super().__init__(f"Malformed granularity token: {token!r}")
        self.token = token


def reference_not_found(kind: str, reference_id: Any) -> str:
    """
    Notice for a supplied id that resolved to no record.

    Args:
        kind: Parameter name of the reference ("metricId", "anomalyId", "sessionId")
        reference_id: The id that did not resolve
    """
    return f"Could not find {kind} {reference_id}"


def create_error_response(
    code: ErrorCode,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the error envelope: {"error": {"code", "message"[, "details"]}}.

    The message falls back to the canned text for the code.
    """
    error = {"code": code.value, "message": message or USER_FRIENDLY_MESSAGES[code]}
    if details:
        error["details"] = details
    return {"error": error}


def raise_validation_error(
    message: str,
    field: Optional[str] = None,
    code: ErrorCode = ErrorCode.VALIDATION_ERROR,
) -> None:
    """
    Reject the request with a 400.

    Args:
        message: What is wrong with the input
        field: Name of the offending parameter, if any
        code: Code to report in the envelope
    """
    logger.info("request_rejected", code=code.value, field=field, reason=message)

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=create_error_response(code, message, {"field": field} if field else None),
    )
