"""
Background scheduler of the sync cycle.

All cycles (periodic and manual) run on one single-worker executor, so two
cycles never overlap and a manual request queues behind the cycle in flight.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date
from typing import Callable, Optional

import structlog
from sqlalchemy.engine import Engine

from stay_sync.calendar_api.client import GoogleCalendarClient
from stay_sync.config import SYNC_INITIAL_DELAY_SECONDS, SYNC_INTERVAL_SECONDS
from stay_sync.services.status import StatusChannel
from stay_sync.services.sync import SyncReport, run_sync_cycle

logger = structlog.get_logger(__name__)

MSG_MANUAL = "Manual Sync Requested..."


class SyncScheduler:
    """
    Runs run_sync_cycle after an initial delay and then periodically.

    Example:
        >>> scheduler = SyncScheduler(engine, GoogleCalendarClient())
        >>> scheduler.start()
        >>> scheduler.force_sync().result().outcome
        <SyncOutcome.NO_CHANGES: 'no_changes'>
        >>> scheduler.shutdown()
    """

    def __init__(
        self,
        engine: Engine,
        client: GoogleCalendarClient,
        status: Optional[StatusChannel] = None,
        interval: float = SYNC_INTERVAL_SECONDS,
        initial_delay: float = SYNC_INITIAL_DELAY_SECONDS,
        today: Callable[[], date] = date.today,
    ):
        self.engine = engine
        self.client = client
        self.status = status or StatusChannel()
        self.interval = interval
        self.initial_delay = initial_delay
        self._today = today

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="stay-sync")
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._timer: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def start(self) -> None:
        """Start the periodic timer. Calling it again while running does nothing."""
        with self._lock:
            if self.running or self._stop.is_set():
                return
            self._timer = threading.Thread(
                target=self._loop, name="stay-sync-timer", daemon=True
            )
            self._timer.start()
        logger.info("sync_scheduler_started", interval=self.interval, initial_delay=self.initial_delay)

    def _loop(self) -> None:
        if self._stop.wait(self.initial_delay):
            return
        while not self._stop.is_set():
            self.tick()
            if self._stop.wait(self.interval):
                return

    def _cycle(self) -> SyncReport:
        return run_sync_cycle(self.engine, self.client, self.status, self._today())

    def tick(self) -> Future:
        """Submit one cycle to the worker."""
        return self._executor.submit(self._cycle)

    def force_sync(self) -> Future:
        """
        Request an immediate cycle.

        Returns:
            Future: Resolves to the SyncReport once the cycle has run
        """
        logger.info("manual_sync_requested")
        self.status.publish(MSG_MANUAL)
        return self.tick()

    def shutdown(self, wait: bool = True) -> None:
        """Stop the timer and let queued cycles finish."""
        self._stop.set()
        timer = self._timer
        if timer is not None and timer is not threading.current_thread():
            timer.join(timeout=5)
        self._executor.shutdown(wait=wait)
        logger.info("sync_scheduler_stopped")
