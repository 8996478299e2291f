"""
infinitytrain/errors.py
Centralized Error Handling

CORE PRINCIPLES:
- All errors follow consistent structure
- Errors are user-safe (no stack traces, no store internals)
- Errors are machine-readable
- No retries: a failed write is reported and the user re-submits

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "ErrorType",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

HTTP STATUS CODE DISCIPLINE:
- 200: Successful, valid request
- 400: Missing required field / invalid input / duplicate identity
- 404: Unknown id or email
- 422: Malformed body (Pydantic)
- 429: Rate limit exceeded
- 500: Store or transport failure (generic message only)
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_FIELD = "MISSING_FIELD"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    TOPIC_NOT_FOUND = "TOPIC_NOT_FOUND"

    RATE_LIMITED = "RATE_LIMITED"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class APIError(Exception):
    """Base API exception with consistent structure"""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.error = error
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": False,
            "error": self.error,
            "message": self.message,
            "code": self.code
        }
        if self.details:
            result["details"] = self.details
        return result

    def to_response(self) -> JSONResponse:
        """Convert to FastAPI JSONResponse"""
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


class BadRequestError(APIError):
    """400 Bad Request - Invalid input"""
    def __init__(self, message: str, code: str = ErrorCode.INVALID_INPUT, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="Bad Request",
            message=message,
            code=code,
            details=details
        )


def raise_bad_request(message: str, code: str = ErrorCode.INVALID_INPUT, details: Optional[Dict] = None):
    """Raise 400 Bad Request"""
    detail = {"success": False, "error": "Bad Request", "message": message, "code": code}
    if details:
        detail["details"] = details
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def raise_not_found(resource: str, identifier: Any = None, code: str = ErrorCode.NOT_FOUND):
    """Raise 404 Not Found"""
    message = f"{resource} not found"
    if identifier is not None:
        message = f"{resource} with id '{identifier}' not found"
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"success": False, "error": "Not Found", "message": message, "code": code}
    )


def new_log_id() -> str:
    return str(uuid.uuid4())[:8]


def log_and_raise_internal(error: Exception, context: str = "", message: Optional[str] = None):
    """Log an internal error and raise a safe 500 response"""
    log_id = new_log_id()
    logger.error(f"[{log_id}] Internal error in {context}: {type(error).__name__}: {str(error)}")
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "success": False,
            "error": "Internal Error",
            "message": message or "An internal error occurred. Please try again later.",
            "code": ErrorCode.INTERNAL_ERROR,
            "details": {"log_id": log_id}
        }
    )


def get_error_summary() -> Dict[str, Any]:
    """Return summary of error handling system for documentation"""
    return {
        "version": "1.0",
        "service": "api-error-handler",
        "response_structure": {
            "success": "boolean (always false for errors)",
            "error": "string (error type)",
            "message": "string (human-readable)",
            "code": "string (machine-readable)",
            "details": "object (optional)"
        },
        "status_codes": {
            "200": "Successful, valid request",
            "400": "Missing field / invalid input / duplicate identity",
            "404": "Resource does not exist",
            "422": "Malformed body (Pydantic)",
            "429": "Rate limit exceeded",
            "500": "Store or transport failure"
        },
        "error_codes": [
            attr for attr in dir(ErrorCode)
            if not attr.startswith('_')
        ]
    }
