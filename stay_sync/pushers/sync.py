import sys

import structlog

from stay_sync.calendar_api.client import GoogleCalendarClient
from stay_sync.db.engine import engine, init_db
from stay_sync.logging_config import setup_logging
from stay_sync.services.sync import SyncOutcome, run_sync_cycle

# Setup logging
setup_logging(component="cli")
logger = structlog.get_logger(__name__)


def main() -> None:
    # Run a single sync cycle against the configured calendar
    init_db(engine)
    report = run_sync_cycle(engine, GoogleCalendarClient())
    print(report.message)
    if report.outcome in (SyncOutcome.AUTH_FAILED, SyncOutcome.ERROR):
        sys.exit(1)


if __name__ == "__main__":
    main()
