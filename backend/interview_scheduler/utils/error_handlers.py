"""
Centralized error taxonomy and user-friendly error messages.

Core components raise the AppError subclasses below; the scheduling facade turns
them into structured results and the HTTP layer maps them to status codes.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    kind = "error"

    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Caller-supplied data is structurally or semantically invalid."""
    kind = "validation_error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class ConflictError(AppError):
    """Individually valid request that violates a state invariant."""
    kind = "conflict"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class NotFoundError(AppError):
    """Resource not found, or not owned by the caller."""
    kind = "not_found"

    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class UnauthorizedError(AppError):
    """Unauthorized access error."""
    kind = "unauthorized"

    def __init__(self, message: str = "Unauthorized access", details: dict | None = None):
        super().__init__(message, status_code=401, details=details)


class ForbiddenError(AppError):
    """Forbidden access error."""
    kind = "forbidden"

    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details)



# User-friendly error messages
ERROR_MESSAGES = {
    # Availability
    "past_date": "Cannot set availability for past dates.",
    "invalid_time_range": "Start time must be before end time.",
    "block_not_found": "Availability block not found.",
    "block_booked": "Cannot change a booked availability block.",
    "block_in_use": "This availability block has an active interview booked against it.",
    "interviewer_inactive": "Interviewer account is inactive.",
    "not_an_interviewer": "Only interview panelists and faculty members can set availability.",
    "user_not_found": "User not found.",
    "user_inactive": "User account is not active.",

    # Booking
    "candidate_not_active": "candidate not active",
    "candidate_already_scheduled": "candidate already scheduled",
    "interviewer_not_found": "Interviewer not found.",
    "block_not_active": "Availability block is not active.",
    "block_wrong_owner": "Availability block does not belong to this interviewer.",
    "outside_availability": "outside availability",
    "double_booked": "double booked",

    # Sessions
    "session_not_found": "Interview session not found.",
    "session_not_yours": "This interview session is not assigned to you.",
    "session_inactive": "This interview session is not active.",
    "session_closed": "This interview session can no longer be changed.",
    "cancel_completed": "Cannot cancel a completed interview.",
    "invalid_result": "Invalid result value. Must be SELECTED, REJECTED, or WAITING_LIST.",
    "invalid_status": "Status must be NO_SHOW or RESCHEDULED.",

    # General
    "unauthorized": "Please login to access this feature.",
    "forbidden": "You don't have permission to access this resource.",
    "not_found": "The requested resource was not found.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def handle_database_error(error: Exception, operation: str = "") -> AppError:
    """Translate a storage-layer failure raised during a write into an AppError."""
    logger.error("Database error during %s: %s", operation, error)

    error_str = str(error).lower()

    if "foreign key" in error_str:
        return ValidationError("Invalid reference. The related record may have been deleted.")

    # A constraint the second writer tripped over: the state moved under the caller.
    if "duplicate" in error_str or "unique" in error_str or "constraint" in error_str:
        return ConflictError(
            "This change conflicts with data saved by another request. Please refresh and try again."
        )

    return AppError(get_error_message("database_error"), status_code=503)


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
    }

    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError raised outside the scheduling facade (auth guards, route checks)."""
    logger.warning("%s: %s", type(exc).__name__, exc.message)
    return create_error_response(exc.status_code, exc.message, exc.details or None)
