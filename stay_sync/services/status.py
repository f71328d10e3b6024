"""
Observer channel for the human-readable sync status line.

The sync scheduler publishes short messages ("Syncing...", "Synced 3 updates")
that a UI or the HTTP API can display. Subscribers are called synchronously on
the publishing thread; a subscriber that raises is logged and skipped.
"""

import threading
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)

StatusCallback = Callable[[str], None]


class StatusChannel:
    """
    Thread-safe publish/subscribe holder of the latest sync status.

    Example:
        >>> channel = StatusChannel()
        >>> unsubscribe = channel.subscribe(print)
        >>> channel.publish("Syncing...")
        Syncing...
        >>> unsubscribe()
        >>> channel.last_message
        'Syncing...'
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[StatusCallback] = []
        self._last_message: Optional[str] = None

    @property
    def last_message(self) -> Optional[str]:
        with self._lock:
            return self._last_message

    def subscribe(self, callback: StatusCallback) -> Callable[[], None]:
        """
        Register a callback for every future message.

        Returns:
            Callable[[], None]: Function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, message: str) -> None:
        with self._lock:
            self._last_message = message
            subscribers = list(self._subscribers)

        logger.info("sync_status", message=message)
        for callback in subscribers:
            try:
                callback(message)
            except Exception as e:
                logger.exception("status_subscriber_failed", error=str(e))
