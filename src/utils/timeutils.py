"""Timestamp helpers.

Timestamps are persisted as fixed-width UTC ISO-8601 strings so that string
comparison in queries matches chronological order.
"""

from datetime import date, datetime
from typing import Optional

import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def to_utc_iso(value: datetime) -> str:
    """Format a datetime as a fixed-width UTC ISO string.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(pytz.utc).isoformat(timespec="microseconds")


def utc_now_iso() -> str:
    return to_utc_iso(utc_now())


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def to_date_iso(value: date) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()
