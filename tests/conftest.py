"""
Shared fixtures for the test suite.

File logging is switched off before any application module is imported so
that running the tests does not create session logs.
"""

import json
import os

os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")

import pytest

from workday_agent.events.event_interface import EventBus


WORKDAY_DATE = "2025-10-28"

# File order is deliberately not start order, and two events overlap
WORKDAY_EVENTS = [
    {
        "type": "meeting",
        "title": "Daily standup",
        "from": "09:00",
        "to": "09:15",
        "location": "Room 4B",
        "participants": ["Alex", "Dana"],
    },
    {"type": "focus", "title": "Report draft", "from": "09:30", "to": "11:30"},
    {"type": "meeting", "title": "Coffee chat", "from": "10:00", "to": "10:30"},
    {"type": "meeting", "title": "Design review", "from": "14:00", "to": "15:00"},
    {"type": "meal", "title": "Lunch", "from": "12:30", "to": "13:30", "location": "Cafe Nero"},
]


def write_document(directory, date, events=None, raw=None):
    """Write ``<date>.json`` into ``directory`` and return its path."""
    path = directory / f"{date}.json"
    if raw is not None:
        path.write_text(raw, encoding="utf-8")
    else:
        path.write_text(
            json.dumps({"date": date, "workday": {"events": events or []}}),
            encoding="utf-8"
        )
    return path


@pytest.fixture
def data_dir(tmp_path):
    """A data directory holding one workday document."""
    directory = tmp_path / "data"
    directory.mkdir()
    write_document(directory, WORKDAY_DATE, WORKDAY_EVENTS)
    return directory


@pytest.fixture
def bus():
    """A private event bus so tests do not share subscribers."""
    return EventBus()
