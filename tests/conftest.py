"""Shared fixtures for inkbase tests."""

from collections.abc import Generator
from datetime import datetime, timezone
from typing import Any

import pytest


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests with no network or server")
    config.addinivalue_line("markers", "integration: Tests that drive the aiohttp application")


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear INKBASE_TEST_TIME around every test so frozen clocks never leak."""
    monkeypatch.delenv("INKBASE_TEST_TIME", raising=False)
    yield
    monkeypatch.delenv("INKBASE_TEST_TIME", raising=False)


@pytest.fixture
def fixed_now() -> datetime:
    """Deterministic 'now': Wednesday 2025-01-15 08:30 UTC."""
    return datetime(2025, 1, 15, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def test_timezone() -> str:
    """Fixed timezone identifier so results do not depend on the host."""
    return "America/Los_Angeles"


# ==================== ICS Test Data Fixtures ====================


@pytest.fixture
def sample_ics_simple() -> str:
    """
    Return an ICS calendar with a single timed event.

    - "Team Meeting" on 2025-01-15 10:00-11:00 UTC in Conference Room A
    """
    return """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//inkbase Test//EN
CALSCALE:GREGORIAN
BEGIN:VEVENT
UID:test-event-001@inkbase.test
DTSTART:20250115T100000Z
DTEND:20250115T110000Z
SUMMARY:Team Meeting
LOCATION:Conference Room A
DESCRIPTION:Weekly team sync meeting
ORGANIZER;CN=Jane Doe:mailto:jane@example.com
DTSTAMP:20250115T090000Z
BEGIN:VALARM
ACTION:DISPLAY
DESCRIPTION:Reminder
TRIGGER:-PT15M
END:VALARM
END:VEVENT
END:VCALENDAR"""


@pytest.fixture
def sample_ics_recurring() -> str:
    """
    Return an ICS calendar with a daily recurring event and one exclusion.

    - "Daily Standup" 09:00-09:15 UTC from 2025-01-13, COUNT=10
    - 2025-01-16 is excluded via EXDATE
    """
    return """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//inkbase Test//EN
CALSCALE:GREGORIAN
BEGIN:VEVENT
UID:test-event-002@inkbase.test
DTSTART:20250113T090000Z
DTEND:20250113T091500Z
SUMMARY:Daily Standup
LOCATION:Virtual
RRULE:FREQ=DAILY;COUNT=10
EXDATE:20250116T090000Z
DTSTAMP:20250113T080000Z
END:VEVENT
END:VCALENDAR"""


@pytest.fixture
def sample_ics_all_day() -> str:
    """
    Return an ICS calendar with a date-only (all-day) event on 2025-01-15.
    """
    return """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//inkbase Test//EN
BEGIN:VEVENT
UID:test-event-003@inkbase.test
DTSTART;VALUE=DATE:20250115
SUMMARY:Company Holiday
GEO:37.386013;-122.082932
LOCATION:Mountain View
DTSTAMP:20250101T000000Z
END:VEVENT
END:VCALENDAR"""
