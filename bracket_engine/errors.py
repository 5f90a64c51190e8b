"""
bracket_engine/errors.py
Centralized API error handling

ERROR RESPONSE STRUCTURE:
{
    "success": false,
    "error": "ErrorType",
    "message": "Human-readable description",
    "code": "UNIQUE_ERROR_CODE",
    "details": {} (optional)
}

HTTP STATUS CODE DISCIPLINE:
- 200/201: Successful request
- 400: Invalid input / malformed request (e.g. missing tournamentId)
- 404: Tournament or league does not exist (stale link)
- 409: Resource already exists (tournament already seeded)
- 422: Validation error (Pydantic)
- 429: Rate limit exceeded
- 500: Internal failure, including failed upstream fetches
"""

import logging
import uuid
from typing import Optional, Dict, Any
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorCode:
    """Unique error codes for machine-readable error handling"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_FIELD = "MISSING_FIELD"

    NOT_FOUND = "NOT_FOUND"
    TOURNAMENT_NOT_FOUND = "TOURNAMENT_NOT_FOUND"
    LEAGUE_NOT_FOUND = "LEAGUE_NOT_FOUND"

    FEATURE_DISABLED = "FEATURE_DISABLED"
    TOURNAMENT_EXISTS = "TOURNAMENT_EXISTS"
    INVALID_STRUCTURE = "INVALID_STRUCTURE"

    RATE_LIMITED = "RATE_LIMITED"

    INTERNAL_ERROR = "INTERNAL_ERROR"
    FETCH_FAILED = "FETCH_FAILED"


class ErrorResponse(BaseModel):
    """Standard error response model"""
    success: bool = False
    error: str
    message: str
    code: str
    details: Optional[Dict[str, Any]] = None


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
        """Convert to dictionary"""
        return ErrorResponse(
            error=self.error,
            message=self.message,
            code=self.code,
            details=self.details,
        ).model_dump(exclude_none=True)

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


class ForbiddenError(APIError):
    """403 Forbidden - Endpoint switched off by feature flag"""
    def __init__(self, message: str, code: str = ErrorCode.FEATURE_DISABLED):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="Forbidden",
            message=message,
            code=code
        )


class NotFoundError(APIError):
    """404 Not Found - Resource does not exist"""
    def __init__(self, resource: str, identifier: Any = None, code: str = ErrorCode.NOT_FOUND):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="Not Found",
            message=message,
            code=code
        )


class ConflictError(APIError):
    """409 Conflict - Resource already exists"""
    def __init__(self, message: str, code: str = ErrorCode.TOURNAMENT_EXISTS, details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="Conflict",
            message=message,
            code=code,
            details=details
        )


class InternalError(APIError):
    """500 Internal Server Error - Use sparingly, only for true internal failures"""
    def __init__(
        self,
        message: str = "An internal error occurred",
        code: str = ErrorCode.INTERNAL_ERROR,
        log_id: Optional[str] = None
    ):
        details = {"log_id": log_id} if log_id else None
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="Internal Error",
            message=message,
            code=code,
            details=details
        )


def new_log_id() -> str:
    return str(uuid.uuid4())[:8]


def internal_error_from(error: Exception, context: str = "", code: str = ErrorCode.INTERNAL_ERROR) -> InternalError:
    """Log an internal error with context and build a safe 500 response"""
    log_id = new_log_id()
    logger.error(f"[{log_id}] Internal error in {context}: {type(error).__name__}: {str(error)}")
    return InternalError(
        message="An internal error occurred. Please try again later.",
        code=code,
        log_id=log_id,
    )


def get_error_summary() -> Dict[str, Any]:
    """Return summary of error handling system for documentation"""
    return {
        "service": "bracket-engine-error-handler",
        "response_structure": {
            "success": "boolean (always false for errors)",
            "error": "string (error type)",
            "message": "string (human-readable)",
            "code": "string (machine-readable)",
            "details": "object (optional)"
        },
        "status_codes": {
            "200": "Successful, valid request",
            "400": "Invalid input / malformed request",
            "403": "Endpoint disabled by feature flag",
            "404": "Tournament or league does not exist",
            "409": "Tournament already exists",
            "422": "Validation error (Pydantic)",
            "429": "Rate limit exceeded",
            "500": "Internal error, including failed upstream fetches"
        },
        "error_codes": [
            attr for attr in dir(ErrorCode)
            if not attr.startswith('_')
        ]
    }
