"""Current-time and timezone helpers for inkbase."""

from __future__ import annotations

import datetime
import logging
import os
import zoneinfo

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


def now_utc() -> datetime.datetime:
    """Return current UTC time with tzinfo.

    Can be overridden for testing via the INKBASE_TEST_TIME environment variable
    (ISO 8601, e.g. "2025-10-27T08:20:00-07:00"). Naive values are taken as UTC.
    """
    test_time = os.environ.get("INKBASE_TEST_TIME")
    if test_time:
        try:
            dt = date_parser.isoparse(test_time)
        except ValueError as e:
            logger.warning("Failed to parse INKBASE_TEST_TIME=%r: %s", test_time, e)
        else:
            if dt.tzinfo is None:
                return dt.replace(tzinfo=datetime.timezone.utc)
            return dt.astimezone(datetime.timezone.utc)

    return datetime.datetime.now(datetime.timezone.utc)


def resolve_timezone(name: str | None, fallback: str = DEFAULT_TIMEZONE) -> datetime.tzinfo:
    """Look up an IANA timezone, falling back when the name is empty or unknown."""
    for candidate in (name, fallback):
        if not candidate:
            continue
        try:
            return zoneinfo.ZoneInfo(candidate)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError, TypeError):
            logger.warning("Invalid timezone %r, trying fallback", candidate)
    return datetime.timezone.utc


def ensure_aware(dt: datetime.datetime, tz: datetime.tzinfo = datetime.timezone.utc) -> datetime.datetime:
    """Attach ``tz`` to naive datetimes; aware values pass through unchanged."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt
