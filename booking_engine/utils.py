"""Shared formatting and parsing helpers used across the booking engine."""

import re
from typing import Optional, Union

from booking_engine.config import settings

Number = Union[int, float]

_ZIP_RE = re.compile(r"^\d{5}(-\d{4})?$")


def format_currency(amount: Number) -> str:
    """Format a price the way breakdown lines display it.

    Examples:
        >>> format_currency(1200)
        '$1,200'
        >>> format_currency(62.5)
        '$62.50'
    """
    symbol = settings.pricing.currency_symbol
    if float(amount).is_integer():
        return f"{symbol}{int(amount):,}"
    return f"{symbol}{amount:,.2f}"


def pluralize(count: int, noun: str) -> str:
    """Return '1 day' / '3 days' style labels."""
    return f"{count} {noun}{'s' if count != 1 else ''}"


def parse_hour(value: str) -> int:
    """Parse the hour out of an 'HH:MM' string.

    Raises:
        ValueError: If the value is not a valid 'HH:MM' time up to 24:00.
    """
    match = re.fullmatch(r"(\d{1,2}):(\d{2})", value.strip())
    if not match:
        raise ValueError(f"Invalid time: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if not 0 <= hour <= 24 or minute >= 60 or (hour == 24 and minute):
        raise ValueError(f"Invalid time: {value!r}")
    return hour


def format_hour(hour: int) -> str:
    """Canonical 24-hour 'HH:00' form."""
    return f"{hour:02d}:00"


def format_hour_12h(hour: int) -> str:
    """Format an hour (0-24) on the 12-hour clock.

    Examples:
        >>> format_hour_12h(0)
        '12:00 AM'
        >>> format_hour_12h(15)
        '3:00 PM'
    """
    if hour in (0, 24):
        return "12:00 AM"
    if hour < 12:
        return f"{hour}:00 AM"
    if hour == 12:
        return "12:00 PM"
    return f"{hour - 12}:00 PM"


def normalize_zip(value: Optional[str]) -> Optional[str]:
    """Normalize a US ZIP code, returning None when it is malformed.

    Examples:
        >>> normalize_zip(" 78701 ")
        '78701'
        >>> normalize_zip("7870") is None
        True
    """
    if value is None:
        return None
    cleaned = value.strip()
    if not _ZIP_RE.match(cleaned):
        return None
    return cleaned
