"""
Date normalization between the two encodings in play.

Display encoding is DD/MM/YYYY (what users type and read).
Storage encoding is YYYY-MM-DD (what the gateway accepts);
gateway responses may carry a time-of-day suffix after a
"T" or a space, which is discarded on read.

These are string transformations on calendar fields. No
timezone or instant arithmetic happens here, so a date never
shifts by a day on its way through.
"""

import re
from datetime import date

DISPLAY_PATTERN = re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}")
STORAGE_PATTERN = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})(?:[T ].*)?")


def is_display_date(value, strict: bool = False) -> bool:
    """
    Check that value has the DD/MM/YYYY shape.

    Only the shape is checked unless strict is set, in which
    case the day must also exist in that month and year.
    """
    if not isinstance(value, str) or not DISPLAY_PATTERN.fullmatch(value):
        return False
    if not strict:
        return True

    day, month, year = (int(part) for part in value.split("/"))
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def to_display(storage_date: str) -> str:
    """Convert YYYY-MM-DD (optionally with a time suffix) to DD/MM/YYYY."""
    match = STORAGE_PATTERN.fullmatch(storage_date or "")
    if not match:
        raise ValueError(f"Not a storage date: {storage_date!r}")
    year, month, day = match.groups()
    return f"{day}/{month}/{year}"


def to_storage(display_date: str) -> str:
    """Convert DD/MM/YYYY to YYYY-MM-DD."""
    if not is_display_date(display_date):
        raise ValueError(f"Not a display date: {display_date!r}")
    day, month, year = display_date.split("/")
    return f"{year}-{month}-{day}"


def today_display(today: date | None = None) -> str:
    today = today or date.today()
    return today.strftime("%d/%m/%Y")
