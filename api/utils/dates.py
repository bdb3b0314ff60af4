"""
Date helpers shared by models and the expiry calculator.

Expiry columns arrive as plain dates, datetimes or ISO strings that may carry
a time part ("2024-01-10T00:00:00Z"). Only the calendar date matters, so the
time part is dropped without any timezone conversion.
"""

from datetime import date, datetime
from typing import Optional, Union


DateLike = Union[date, datetime, str, None]


def parse_date(value: DateLike) -> Optional[date]:
    """
    Reduce a date-like value to a calendar date.

    Handles:
    - date(2024, 1, 10) -> date(2024, 1, 10)
    - datetime(2024, 1, 10, 23, 59) -> date(2024, 1, 10)
    - "2024-01-10", "2024-01-10T03:00:00Z" -> date(2024, 1, 10)
    - None, "" -> None

    Args:
        value: Date, datetime or ISO string

    Returns:
        The calendar date, or None when no date is given

    Raises:
        ValueError: If the string is not an ISO date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    return date.fromisoformat(text.split("T")[0].split(" ")[0])

