"""
Pytest configuration and fixtures for the weekly calendar summary tests.
"""

from datetime import date, datetime
from unittest.mock import MagicMock, Mock
from zoneinfo import ZoneInfo

import pytest

from summary_clients.models import CalendarEvent

NEW_YORK = ZoneInfo("America/New_York")


def timed(summary, start, location="", event_id="evt"):
    """Build a timed CalendarEvent."""
    return CalendarEvent(id=event_id, summary=summary, start_time=start, location=location)


def all_day(summary, day, location="", event_id="evt"):
    """Build an all-day CalendarEvent."""
    return CalendarEvent(id=event_id, summary=summary, start_date=day, location=location)


@pytest.fixture
def ny():
    return NEW_YORK


@pytest.fixture
def monday_morning():
    """Monday 19 October 2026, 08:00 in New York."""
    return datetime(2026, 10, 19, 8, 0, tzinfo=NEW_YORK)


@pytest.fixture
def week_events():
    """Team Sync today at 09:00 in Room 1, Dentist all day three days later."""
    return [
        timed("Team Sync", datetime(2026, 10, 19, 9, 0, tzinfo=NEW_YORK), location="Room 1"),
        all_day("Dentist", date(2026, 10, 22)),
    ]


@pytest.fixture
def credential_context():
    context = Mock()
    context.xoauth2_string.return_value = "user=me@example.com\x01auth=Bearer token\x01\x01"
    return context


@pytest.fixture
def smtp_server():
    """SMTP session that verifies and accepts every message."""
    server = MagicMock()
    server.noop.return_value = (250, b"2.0.0 OK")
    server.send_message.return_value = {}
    return server


@pytest.fixture
def smtp_factory(smtp_server):
    return Mock(return_value=smtp_server)
