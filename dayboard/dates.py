"""
Calendar date helpers.

Days are addressed by ISO 8601 strings (YYYY-MM-DD) everywhere in the API.
"""

import re
from datetime import date, datetime, timedelta
from typing import Optional

from .errors import InvalidArgument

DATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_date_string(value: str) -> bool:
    """True if value is YYYY-MM-DD and names a real calendar day."""
    if not isinstance(value, str) or not DATE_REGEX.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_date(value: str) -> str:
    """
    Return value unchanged if it is a valid day string.

    Raises:
        InvalidArgument: If the format is wrong or the day does not exist
            (e.g. 2024-13-40 or 2023-02-29).
    """
    if not is_valid_date_string(value):
        raise InvalidArgument(f"Invalid date format: {value!r}. Expected YYYY-MM-DD")
    return value


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def today(offset: int = 0, now: Optional[datetime] = None) -> str:
    """Today's date as YYYY-MM-DD, optionally shifted by offset days."""
    current = (now or datetime.now()).date()
    return format_date(current + timedelta(days=offset))


def shift_date(value: str, days: int) -> str:
    """Move a day string forward (or back, with negative days)."""
    return format_date(date.fromisoformat(validate_date(value)) + timedelta(days=days))


def format_date_for_display(value: str) -> str:
    """Human-readable form, e.g. 'Wednesday, January 15, 2025'."""
    parsed = date.fromisoformat(validate_date(value))
    return f"{parsed.strftime('%A, %B')} {parsed.day}, {parsed.year}"
