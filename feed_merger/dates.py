from __future__ import annotations

import time
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional

from dateutil import parser as dateparser

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_dt(value: str | None) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        dt = dateparser.parse(value)
    except (ValueError, OverflowError):
        return None
    if dt is None:
        return None
    # Ensure tz-aware for consistent comparisons
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2025-10-28T10:00:00.000Z``."""

    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def struct_to_iso(value: time.struct_time | None) -> Optional[str]:
    if value is None:
        return None
    return to_iso(datetime(*value[:6], tzinfo=timezone.utc))


def to_http_date(dt: datetime) -> str:
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
