"""One synchronization cycle: local ledger -> Google Calendar."""

import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from stay_sync.calendar_api.client import GoogleCalendarClient
from stay_sync.config import OPERATIONS_LOOKBACK_DAYS
from stay_sync.db.readers.settings import get_calendar_settings
from stay_sync.metrics import cycle_duration, sync_cycles
from stay_sync.pushers.days import push_days
from stay_sync.pushers.operations import push_operations
from stay_sync.services.status import StatusChannel

logger = structlog.get_logger(__name__)

MSG_SKIPPED = "Sync Skipped: Config missing"
MSG_AUTH_FAILED = "Sync Error: Auth Failed"
MSG_SYNCING = "Syncing..."
MSG_NO_CHANGES = "System Synced (No changes)"


class SyncOutcome(str, Enum):
    SKIPPED = "skipped"
    AUTH_FAILED = "auth_failed"
    SYNCED = "synced"
    NO_CHANGES = "no_changes"
    ERROR = "error"


@dataclass
class SyncReport:
    outcome: SyncOutcome
    message: str
    days_pushed: int = 0
    operations_pushed: int = 0

    @property
    def changes(self) -> int:
        return self.days_pushed + self.operations_pushed


def run_sync_cycle(
    engine: Engine,
    client: GoogleCalendarClient,
    status: Optional[StatusChannel] = None,
    today: Optional[date] = None,
    lookback_days: int = OPERATIONS_LOOKBACK_DAYS,
) -> SyncReport:
    """
    Push every pending day and reservation operation to the remote calendar.

    Never raises: any unexpected failure is reported as an "error" outcome and
    the next cycle starts from the unchanged synchronized flags.

    Args:
        engine: SQLAlchemy engine
        client: Calendar client, authenticated on demand
        status: Channel receiving the status line messages
        today: Reference date, defaults to the current date
        lookback_days: Look-back window for check-in/check-out events

    Returns:
        SyncReport: Outcome, final status message and per-kind change counts
    """
    status = status or StatusChannel()
    today = today or date.today()
    start_time = time.time()

    try:
        report = _run(engine, client, status, today, lookback_days)
    except Exception as e:
        logger.exception("sync_cycle_failed", error=str(e))
        report = SyncReport(SyncOutcome.ERROR, f"Sync Error: {e}")

    status.publish(report.message)
    cycle_duration.observe(time.time() - start_time)
    sync_cycles.labels(outcome=report.outcome.value).inc()
    logger.info(
        "sync_cycle_completed",
        outcome=report.outcome.value,
        days=report.days_pushed,
        operations=report.operations_pushed,
    )
    return report


def _run(
    engine: Engine,
    client: GoogleCalendarClient,
    status: StatusChannel,
    today: date,
    lookback_days: int,
) -> SyncReport:
    with engine.connect() as conn:
        settings = get_calendar_settings(conn)

    calendar_id = settings["calendar_id"]
    credentials_path = settings["credentials_path"]
    if not calendar_id or not credentials_path:
        return SyncReport(SyncOutcome.SKIPPED, MSG_SKIPPED)

    if not client.is_connected(credentials_path) and not client.authenticate(credentials_path):
        return SyncReport(SyncOutcome.AUTH_FAILED, MSG_AUTH_FAILED)

    status.publish(MSG_SYNCING)
    days_pushed = push_days(engine, client, calendar_id, today)
    operations_pushed = push_operations(engine, client, calendar_id, today, lookback_days)

    changes = days_pushed + operations_pushed
    if changes:
        return SyncReport(
            SyncOutcome.SYNCED, f"Synced {changes} updates", days_pushed, operations_pushed
        )
    return SyncReport(SyncOutcome.NO_CHANGES, MSG_NO_CHANGES)
