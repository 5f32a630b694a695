"""
Dayboard Error Handling

Domain exceptions raised by services and stores, plus the HTTP exception
routers raise with user-facing messages and fix suggestions.
"""

from typing import Optional, List, Dict, Any
from enum import Enum

from fastapi import HTTPException
from pydantic import BaseModel


# === Domain Exceptions ===

class DayboardError(Exception):
    """Base class for errors raised below the HTTP layer."""


class InvalidArgument(DayboardError, ValueError):
    """Malformed input such as a bad date or id. Never retried."""


class NotFound(DayboardError, LookupError):
    """The targeted record does not exist (or no longer exists)."""


class BackendUnavailable(DayboardError):
    """The persistent store could not be reached or timed out."""


class Conflict(DayboardError):
    """A write collided with a uniqueness constraint."""


# === AI Errors ===

class AIError(DayboardError):
    """The text-completion collaborator could not produce an answer."""


class AINotConfigured(AIError):
    pass


class AITimeout(AIError):
    pass


class AIRateLimited(AIError):
    pass


class AIQuotaExceeded(AIError):
    pass


# === HTTP Errors ===

class ErrorCategory(str, Enum):
    """Categories of errors for better UX."""
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    CONNECTION = "connection"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"


class HelpfulError(BaseModel):
    """
    Error response with actionable guidance.

    All Dayboard errors include:
    - A clear, human-readable message
    - The category of error for UI handling
    - Specific suggestions to fix the issue
    """
    error: str
    message: str
    category: ErrorCategory
    suggestions: List[str]
    details: Optional[Dict[str, Any]] = None


class DayboardException(HTTPException):
    """
    HTTP exception with helpful error details.

    Usage:
        raise DayboardException.invalid_date("2024-13-40")
        raise DayboardException.day_not_found(date="2025-01-15")
    """

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        category: ErrorCategory,
        suggestions: List[str],
        details: Optional[Dict[str, Any]] = None
    ):
        self.helpful_error = HelpfulError(
            error=error,
            message=message,
            category=category,
            suggestions=suggestions,
            details=details
        )
        super().__init__(
            status_code=status_code,
            detail=self.helpful_error.model_dump(mode="json")
        )

    # === Validation Errors ===

    @classmethod
    def invalid_date(cls, value: str) -> "DayboardException":
        return cls(
            status_code=400,
            error="invalid_date",
            message=f"Invalid date: {value}",
            category=ErrorCategory.VALIDATION,
            suggestions=["Use YYYY-MM-DD format for dates", "Make sure the date exists in the calendar"],
            details={"date": value}
        )

    @classmethod
    def invalid_date_range(cls, start: str, end: str) -> "DayboardException":
        return cls(
            status_code=400,
            error="invalid_date_range",
            message=f"Invalid date range: {start} to {end}",
            category=ErrorCategory.VALIDATION,
            suggestions=["Use YYYY-MM-DD format for dates", "End date must not be before start date"],
            details={"start_date": start, "end_date": end}
        )

    @classmethod
    def invalid_id(cls, field: str, value: str) -> "DayboardException":
        return cls(
            status_code=400,
            error="invalid_id",
            message=f"Invalid {field} format",
            category=ErrorCategory.VALIDATION,
            suggestions=["Ids are UUIDs, or transient ids returned while offline"],
            details={field: value}
        )

    @classmethod
    def missing_field(cls, field: str) -> "DayboardException":
        return cls(
            status_code=400,
            error="missing_field",
            message=f"Missing {field}",
            category=ErrorCategory.VALIDATION,
            suggestions=[f"Provide '{field}' in the request"]
        )

    # === Authentication Errors ===

    @classmethod
    def identity_required(cls, header: str) -> "DayboardException":
        return cls(
            status_code=401,
            error="identity_required",
            message="Authentication required",
            category=ErrorCategory.AUTHENTICATION,
            suggestions=[
                f"Send the caller identity in the {header} header",
                "Or set ALLOW_DEV_IDENTITY=true for single-user development"
            ]
        )

    @classmethod
    def invalid_identity(cls, header: str, max_length: int) -> "DayboardException":
        return cls(
            status_code=400,
            error="invalid_identity",
            message=f"The {header} header is longer than {max_length} characters",
            category=ErrorCategory.VALIDATION,
            suggestions=[f"Send a user id of at most {max_length} characters"],
            details={"max_length": max_length}
        )

    # === Not Found Errors ===

    @classmethod
    def day_not_found(cls, date: Optional[str] = None, day_id: Optional[str] = None) -> "DayboardException":
        what = date or day_id
        return cls(
            status_code=404,
            error="day_not_found",
            message=f"Day not found: {what}",
            category=ErrorCategory.NOT_FOUND,
            suggestions=[
                f"Try: POST /api/days/{date}" if date else "Resolve the day again to get a fresh id"
            ],
            details={"date": date} if date else {"day_id": day_id}
        )

    @classmethod
    def record_not_found(cls, kind: str, record_id: str) -> "DayboardException":
        return cls(
            status_code=404,
            error=f"{kind}_not_found",
            message=f"{kind.capitalize()} not found",
            category=ErrorCategory.NOT_FOUND,
            suggestions=["Reload the day; the item may have been deleted elsewhere"],
            details={"id": record_id}
        )

    # === Connection Errors ===

    @classmethod
    def store_unavailable(cls, reason: Optional[str] = None) -> "DayboardException":
        return cls(
            status_code=503,
            error="store_unavailable",
            message=f"The database is unavailable{f': {reason}' if reason else ''}",
            category=ErrorCategory.CONNECTION,
            suggestions=[
                "Your edit was not saved; keep it and retry in a moment",
                "Check DATABASE_URL and that the database is reachable"
            ]
        )

    # === AI Errors ===

    @classmethod
    def ai_not_configured(cls) -> "DayboardException":
        return cls(
            status_code=503,
            error="ai_not_configured",
            message="AI service is not configured",
            category=ErrorCategory.CONFIGURATION,
            suggestions=[
                "Add LITELLM_API_KEY (or OPENAI_API_KEY / ANTHROPIC_API_KEY) to your .env file",
                "Restart the server after updating .env"
            ]
        )

    @classmethod
    def ai_timeout(cls) -> "DayboardException":
        return cls(
            status_code=504,
            error="ai_timeout",
            message="Request timed out. Please try again.",
            category=ErrorCategory.CONNECTION,
            suggestions=["Try again in a moment", "Shorten the conversation"]
        )

    @classmethod
    def ai_rate_limited(cls, model: Optional[str] = None) -> "DayboardException":
        return cls(
            status_code=429,
            error="ai_rate_limited",
            message="Too many requests. Please try again in a moment.",
            category=ErrorCategory.RATE_LIMIT,
            suggestions=["Wait a minute and try again"],
            details={"model": model} if model else None
        )

    @classmethod
    def ai_quota_exceeded(cls) -> "DayboardException":
        return cls(
            status_code=503,
            error="ai_quota_exceeded",
            message="AI service is currently unavailable due to quota limits",
            category=ErrorCategory.RATE_LIMIT,
            suggestions=["Check your AI provider account balance/credits"]
        )

    @classmethod
    def ai_failed(cls, reason: Optional[str] = None) -> "DayboardException":
        return cls(
            status_code=502,
            error="ai_failed",
            message="Failed to generate AI response. Please try again.",
            category=ErrorCategory.CONNECTION,
            suggestions=["Try again in a few minutes"],
            details={"reason": reason} if reason else None
        )
