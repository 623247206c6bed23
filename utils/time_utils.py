"""
Time helpers for scan history display.

Timestamps are stored as timezone-aware local datetimes; display uses
MM/DD/YY dates and a short relative label ("5 mins ago").
"""

import math
from datetime import datetime
from typing import Optional


def local_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def format_date(value: datetime) -> str:
    """
    Format as MM/DD/YY.

    Example:
        datetime(2026, 3, 7) -> "03/07/26"
    """
    return value.strftime("%m/%d/%y")


def format_timestamp(value: datetime) -> str:
    """Format as MM/DD/YY HH:MM:SS."""
    return f"{format_date(value)} {value.strftime('%H:%M:%S')}"


def relative_time(value: datetime, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago a scan happened.

    Under 10 seconds is "Just now"; anything a day or older falls back to the
    MM/DD/YY date.
    """
    now = now or local_now()
    if value.tzinfo is None and now.tzinfo is not None:
        value = value.replace(tzinfo=now.tzinfo)

    diff_sec = math.floor((now - value).total_seconds())
    diff_min = diff_sec // 60
    diff_hr = diff_min // 60

    if diff_sec < 10:
        return "Just now"
    if diff_sec < 60:
        return f"{diff_sec} secs ago"
    if diff_min == 1:
        return "1 min ago"
    if diff_min < 60:
        return f"{diff_min} mins ago"
    if diff_hr == 1:
        return "1 hour ago"
    if diff_hr < 24:
        return f"{diff_hr} hours ago"
    return format_date(value)


def is_same_local_day(value: datetime, now: Optional[datetime] = None) -> bool:
    """True if value falls on the same local calendar day as now."""
    now = now or local_now()
    if value.tzinfo is not None and now.tzinfo is not None:
        value = value.astimezone(now.tzinfo)
    return value.date() == now.date()
