"""
Validation utilities for scheduling input.

Every helper raises `ValidationError` so the same checks serve the facade and
the HTTP layer.
"""
from datetime import date, datetime, time
from typing import Any

from ..models.session import InterviewResult, SessionStatus
from .error_handlers import ValidationError, get_error_message


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required", details={"field": field_name})
        return None

    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", details={"field": field_name})

    value = value.strip()

    if required and not value:
        raise ValidationError(f"{field_name} cannot be empty", details={"field": field_name})

    if not value:
        return None

    if len(value) < min_length:
        raise ValidationError(
            f"{field_name} must be at least {min_length} characters",
            details={"field": field_name},
        )

    if len(value) > max_length:
        raise ValidationError(
            f"{field_name} must not exceed {max_length} characters",
            details={"field": field_name},
        )

    return value


def validate_integer_field(
    value: Any,
    field_name: str,
    min_value: int | None = None,
    max_value: int | None = None,
    required: bool = True,
) -> int | None:
    """Validate an integer field."""
    if value is None:
        if required:
            raise ValidationError(f"{field_name} is required", details={"field": field_name})
        return None

    # bool is an int subclass; "true" minutes is never meant.
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a valid integer", details={"field": field_name})

    if not isinstance(value, int):
        try:
            value = int(value)
        except (ValueError, TypeError):
            raise ValidationError(f"{field_name} must be a valid integer", details={"field": field_name})

    if min_value is not None and value < min_value:
        raise ValidationError(f"{field_name} must be at least {min_value}", details={"field": field_name})

    if max_value is not None and value > max_value:
        raise ValidationError(f"{field_name} must not exceed {max_value}", details={"field": field_name})

    return value


def parse_date(value: Any, field_name: str = "Date") -> date:
    """Accept a `date` or an ISO `YYYY-MM-DD` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format", details={"field": field_name})


def parse_time(value: Any, field_name: str = "Time") -> time:
    """Accept a `time` or an `HH:MM[:SS]` string. Local wall-clock, no timezone."""
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if isinstance(value, str) and value.strip():
        try:
            return time.fromisoformat(value.strip()).replace(tzinfo=None)
        except ValueError:
            pass
    raise ValidationError(f"{field_name} must be a time in HH:MM format", details={"field": field_name})


def validate_time_range(start: time, end: time, context: str | None = None) -> None:
    if not start < end:
        message = get_error_message("invalid_time_range")
        if context:
            message = f"Invalid time range for {context}: start time ({start:%H:%M}) must be before end time ({end:%H:%M})"
        raise ValidationError(message, details={"start_time": start.isoformat(), "end_time": end.isoformat()})


def validate_interview_result(result: Any) -> InterviewResult:
    """Validate interview result (SELECTED | REJECTED | WAITING_LIST)."""
    if isinstance(result, InterviewResult):
        return result
    if not result or not isinstance(result, str):
        raise ValidationError("Interview result is required", details={"field": "result"})
    try:
        return InterviewResult(result.strip().upper())
    except ValueError:
        raise ValidationError(get_error_message("invalid_result"), details={"field": "result"})


def validate_session_status(status: Any) -> SessionStatus:
    if isinstance(status, SessionStatus):
        return status
    if not status or not isinstance(status, str):
        raise ValidationError("Status is required", details={"field": "status"})
    try:
        return SessionStatus(status.strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown session status: {status}", details={"field": "status"})
