"""
Shared fixtures: a fresh in-memory ledger per test and a fake remote calendar.
"""

from __future__ import annotations

import os

# Must be set before stay_sync.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["START_SCHEDULER"] = "false"

from datetime import date  # noqa: E402
from typing import Any, Callable, Generator, Optional  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from stay_sync.db.engine import create_db_engine, init_db  # noqa: E402
from stay_sync.db.writers.properties import insert_property  # noqa: E402
from stay_sync.db.writers.settings import update_calendar_settings  # noqa: E402

CALENDAR_ID = "casa-azul@group.calendar.google.com"
CREDENTIALS_PATH = "/tmp/client_secret.json"


class FakeCalendarClient:
    """
    In-memory stand-in for GoogleCalendarClient.

    Events live in `events` keyed by id. `fail_when(day, title)` makes both
    create and update raise for matching writes; ids in `missing` behave like
    events deleted remotely (update raises, create still works).
    """

    def __init__(self, auth_ok: bool = True):
        self.auth_ok = auth_ok
        self.connected_with: Optional[str] = None
        self.auth_calls = 0
        self.events: dict[str, dict[str, Any]] = {}
        self.created: list[str] = []
        self.updated: list[str] = []
        self.missing: set[str] = set()
        self.fail_when: Optional[Callable[[date, str], bool]] = None
        self._next_id = 0

    def authenticate(self, credentials_path: str) -> bool:
        self.auth_calls += 1
        if not self.auth_ok:
            self.connected_with = None
            return False
        self.connected_with = credentials_path
        return True

    def is_connected(self, credentials_path: Optional[str] = None) -> bool:
        if self.connected_with is None:
            return False
        return credentials_path is None or credentials_path == self.connected_with

    def _check(self, day: date, title: str) -> None:
        if self.fail_when is not None and self.fail_when(day, title):
            raise TimeoutError(f"remote write timed out for {day}")

    def create_event(
        self, calendar_id: str, day: date, title: str, description: str, color_id: str
    ) -> str:
        self._check(day, title)
        self._next_id += 1
        event_id = f"evt-{self._next_id}"
        self.events[event_id] = {
            "calendar_id": calendar_id,
            "day": day,
            "title": title,
            "description": description,
            "color_id": color_id,
        }
        self.created.append(event_id)
        return event_id

    def update_event(
        self,
        calendar_id: str,
        event_id: str,
        day: date,
        title: str,
        description: str,
        color_id: str,
    ) -> None:
        if event_id in self.missing or event_id not in self.events:
            raise LookupError(f"event {event_id} not found")
        self._check(day, title)
        self.events[event_id].update(
            {"day": day, "title": title, "description": description, "color_id": color_id}
        )
        self.updated.append(event_id)

    def list_calendars(self) -> dict[str, str]:
        return {"Casa Azul": CALENDAR_ID}

    def titles_on(self, day: date) -> list[str]:
        return sorted(e["title"] for e in self.events.values() if e["day"] == day)


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """Fresh in-memory ledger with all tables created."""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def property_id(db_engine: Engine) -> int:
    """A registered property to price and book."""
    return insert_property(db_engine, "Casa Azul")


@pytest.fixture
def calendar_settings(db_engine: Engine) -> dict[str, str]:
    """Configure the remote calendar target."""
    with db_engine.begin() as conn:
        update_calendar_settings(conn, CALENDAR_ID, CREDENTIALS_PATH)
    return {"calendar_id": CALENDAR_ID, "credentials_path": CREDENTIALS_PATH}


@pytest.fixture
def fake_client() -> FakeCalendarClient:
    """Remote calendar that accepts every write."""
    return FakeCalendarClient()
