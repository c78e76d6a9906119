from __future__ import annotations

import re
from datetime import date, datetime

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_date(value: str) -> date:
    """Parse a dashed YYYY-MM-DD date. Compact and week-date ISO forms are rejected."""
    if not isinstance(value, str) or not ISO_DATE.fullmatch(value):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_long_date(value: str) -> str:
    """'2024-01-15' -> 'Monday, January 15, 2024'"""
    d = parse_date(value)
    return f"{WEEKDAYS[d.weekday()]}, {MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_short_date(value: str) -> str:
    """'2024-01-15' -> 'Jan 15, 2024'"""
    d = parse_date(value)
    return f"{MONTHS[d.month - 1][:3]} {d.day}, {d.year}"


def format_timestamp(now: datetime) -> str:
    """'1/15/2024, 3:04:05 PM' style generated-at stamp."""
    hour = now.hour % 12 or 12
    meridiem = "AM" if now.hour < 12 else "PM"
    return f"{now.month}/{now.day}/{now.year}, {hour}:{now.minute:02d}:{now.second:02d} {meridiem}"


def plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"
