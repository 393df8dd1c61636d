"""
Timestamp helpers.
Records carry ISO-8601 strings; due dates may be plain calendar dates.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Union


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format an aware datetime as `YYYY-MM-DDTHH:MM:SS.mmmZ`."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utcnow_iso() -> str:
    return to_iso(utcnow())


def parse_timestamp(value: Union[str, date, datetime]) -> datetime:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Plain dates (`2024-05-01`) are read as midnight UTC. Naive datetimes are
    assumed to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def year_month(value: datetime) -> str:
    """`YYYY-MM` tag used by rent payments."""
    return value.astimezone(timezone.utc).strftime("%Y-%m")


def add_month(value: datetime) -> datetime:
    """Same day next month, clamped to the last day of a shorter month."""
    year, month = (value.year + 1, 1) if value.month == 12 else (value.year, value.month + 1)
    for day in (value.day, 30, 29, 28):
        try:
            return value.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    return value + timedelta(days=28)
