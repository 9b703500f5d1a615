# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the campus eligibility engine.

This module provides standardized datetime operations to ensure consistency
across the entire codebase. All datetime operations should use these utilities.

Design Decisions:
-----------------
1. All timestamps are stored in UTC (PostgreSQL TIMESTAMPTZ)
2. All Python datetimes are timezone-aware (with timezone.utc)
3. Attendance is keyed by calendar day in the campus timezone, never by
   wall-clock time, so two marks on the same local day share one key

Usage:
------
    from src.utils.datetime import utc_now, to_campus_day

    # For current time
    now = utc_now()

    # For attendance keys
    day = to_campus_day(now, ZoneInfo("Asia/Kolkata"))
"""

from datetime import date, datetime, timezone, tzinfo


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    # Already aware - convert to UTC
    return dt.astimezone(timezone.utc)


def to_campus_day(value: date | datetime, campus_tz: tzinfo) -> date:
    """Normalize a date or datetime to the calendar day it falls on at campus.

    Aware datetimes are converted to the campus timezone first. Naive
    datetimes are taken as campus-local wall time. Plain dates pass through.

    Args:
        value: Date or datetime supplied by the caller.
        campus_tz: Timezone the campus operates in.

    Returns:
        The calendar day (midnight-normalized key).

    Example:
        >>> to_campus_day(datetime(2025, 1, 1, 20, 0, tzinfo=timezone.utc), ZoneInfo("Asia/Kolkata"))
        datetime.date(2025, 1, 2)
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(campus_tz)
        return value.date()
    return value
