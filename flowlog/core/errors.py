"""
Custom exception hierarchy for flowlog.

Rule: every error has a machine-readable `code` string so callers (the CLI,
tests) can branch on it without parsing English messages.
"""
from __future__ import annotations

from datetime import date
from typing import Any


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class FlowlogException(Exception):
    """Base class for all application-level errors."""
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class StorageUnavailable(FlowlogException):
    code = "STORAGE_UNAVAILABLE"

    def __init__(self, location: str, reason: str | None = None):
        message = f"Storage at {location} cannot be opened."
        if reason:
            message = f"{message} {reason}"
        details: dict[str, Any] = {"location": location}
        if reason:
            details["reason"] = reason
        super().__init__(message=message, details=details)


class CodecError(FlowlogException):
    code = "CODEC_ERROR"


class UnsupportedFlowCode(CodecError):
    code = "UNSUPPORTED_FLOW_CODE"

    def __init__(self, value: Any):
        super().__init__(
            message=f"Unsupported flow quantifier: {value!r}.",
            details={"value": value},
        )


class ConstraintViolation(FlowlogException):
    code = "CONSTRAINT_VIOLATION"

    def __init__(self, day: date, reason: str | None = None):
        super().__init__(
            message=f"Storage constraint violated for {day}.",
            details={"day": str(day), "reason": reason} if reason else {"day": str(day)},
        )


class InvalidCalendarDate(FlowlogException):
    code = "INVALID_CALENDAR_DATE"

    def __init__(self, year: Any, month: Any, day: Any = None):
        parts = {"year": year, "month": month}
        if day is not None:
            parts["day"] = day
        shown = "-".join(str(v) for v in parts.values())
        super().__init__(
            message=f"Invalid calendar date components: {shown}.",
            details=parts,
        )
