"""Date utilities for the roast schedule.

All comparisons run on naive local datetimes. A bare ``YYYY-MM-DD`` date is
local midnight of that day; aware datetimes are converted to local time.
"""
from datetime import date, datetime, timedelta


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_scheduled_date(value: str | date | datetime) -> datetime:
    """Parse a scheduled date into a naive local datetime.

    Args:
        value: ISO 8601 date or datetime string, or a date/datetime object

    Returns:
        Naive local datetime

    Raises:
        ValueError: If the value is not a well-formed ISO 8601 date
    """
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError(f"Expected ISO date string, got {type(value).__name__}")

    text = value.strip()
    if len(text) == 10:
        d = date.fromisoformat(text)
        return datetime(d.year, d.month, d.day)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_local_naive(datetime.fromisoformat(text))


def start_of_day(value: datetime) -> datetime:
    """Midnight at the beginning of the given day."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def window_end(start: datetime, days: int) -> datetime:
    """End of a forward window of ``days`` days starting at ``start``."""
    return start + timedelta(days=days)
