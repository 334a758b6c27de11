"""UTC helpers. Every datetime is normalized to UTC before it is stored."""
from datetime import datetime, date, time
from typing import Optional

import pytz


def utcnow() -> datetime:
    return datetime.now(pytz.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime.

    Naive values are taken to already be UTC; SQLite hands stored values back
    without tzinfo.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def start_of_day(value: date) -> datetime:
    return pytz.utc.localize(datetime.combine(value, time.min))


def end_of_day(value: date) -> datetime:
    return pytz.utc.localize(datetime.combine(value, time.max))


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    value = to_utc(value)
    return value.isoformat() if value else None
