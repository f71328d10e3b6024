"""
FastAPI dependency injection providers.

Routes receive the database engine, the shared calendar client and the sync
scheduler through these providers, so tests can swap them with
app.dependency_overrides.
"""

from __future__ import annotations

import threading
from typing import Generator, Optional

from sqlalchemy.engine import Engine

from stay_sync.calendar_api.client import GoogleCalendarClient
from stay_sync.db.engine import engine
from stay_sync.services.scheduler import SyncScheduler

_lock = threading.Lock()
_client: Optional[GoogleCalendarClient] = None
_scheduler: Optional[SyncScheduler] = None


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: test_engine
    """
    yield engine


def get_calendar_client() -> GoogleCalendarClient:
    """Provide the process-wide Google Calendar client."""
    global _client
    with _lock:
        if _client is None:
            _client = GoogleCalendarClient()
        return _client


def get_scheduler() -> SyncScheduler:
    """
    Provide the process-wide sync scheduler.

    The scheduler is created on first use and shares the calendar client with
    the /sync routes. Whether its timer runs is decided at application startup.
    """
    global _scheduler
    client = get_calendar_client()
    with _lock:
        if _scheduler is None:
            _scheduler = SyncScheduler(engine, client)
        return _scheduler
