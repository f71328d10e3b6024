"""
Unit tests for the background sync scheduler.
"""

from __future__ import annotations

import threading
from datetime import date
from typing import Any
from unittest.mock import Mock, patch

import pytest

from stay_sync.services.scheduler import SyncScheduler
from stay_sync.services.status import StatusChannel
from stay_sync.services.sync import SyncOutcome, SyncReport

NO_CHANGES = SyncReport(SyncOutcome.NO_CHANGES, "System Synced (No changes)")


def _scheduler(**kwargs: Any) -> SyncScheduler:
    kwargs.setdefault("interval", 60.0)
    kwargs.setdefault("initial_delay", 60.0)
    return SyncScheduler(Mock(), Mock(), **kwargs)


@pytest.mark.unit
@patch("stay_sync.services.scheduler.run_sync_cycle")
def test_force_sync_publishes_and_runs_cycle(mock_cycle: Mock) -> None:
    """Test that force_sync announces the request and resolves to the report."""
    mock_cycle.return_value = NO_CHANGES
    status = StatusChannel()
    messages: list[str] = []
    status.subscribe(messages.append)
    scheduler = _scheduler(status=status, today=lambda: date(2025, 5, 30))

    try:
        report = scheduler.force_sync().result(timeout=5)
    finally:
        scheduler.shutdown()

    assert report is NO_CHANGES
    assert messages[0] == "Manual Sync Requested..."
    mock_cycle.assert_called_once_with(
        scheduler.engine, scheduler.client, status, date(2025, 5, 30)
    )


@pytest.mark.unit
@patch("stay_sync.services.scheduler.run_sync_cycle")
def test_cycles_never_overlap(mock_cycle: Mock) -> None:
    """Test that a manual request queues behind the cycle in flight."""
    release = threading.Event()
    first_started = threading.Event()
    active = 0
    max_active = 0
    lock = threading.Lock()

    def cycle(*args: Any) -> SyncReport:
        nonlocal active, max_active
        with lock:
            active += 1
            max_active = max(max_active, active)
        first_started.set()
        release.wait(timeout=5)
        with lock:
            active -= 1
        return NO_CHANGES

    mock_cycle.side_effect = cycle
    scheduler = _scheduler()

    try:
        first = scheduler.tick()
        assert first_started.wait(timeout=5)
        second = scheduler.force_sync()
        assert not second.done()

        release.set()
        first.result(timeout=5)
        second.result(timeout=5)
    finally:
        scheduler.shutdown()

    assert mock_cycle.call_count == 2
    assert max_active == 1


@pytest.mark.unit
@patch("stay_sync.services.scheduler.run_sync_cycle")
def test_start_runs_periodic_cycles(mock_cycle: Mock) -> None:
    """Test that the timer submits cycles after the initial delay."""
    ran = threading.Event()
    calls = 0

    def cycle(*args: Any) -> SyncReport:
        nonlocal calls
        calls += 1
        if calls >= 2:
            ran.set()
        return NO_CHANGES

    mock_cycle.side_effect = cycle
    scheduler = _scheduler(interval=0.01, initial_delay=0.0)

    try:
        scheduler.start()
        assert ran.wait(timeout=5)
    finally:
        scheduler.shutdown()

    assert calls >= 2


@pytest.mark.unit
@patch("stay_sync.services.scheduler.run_sync_cycle")
def test_start_is_idempotent(mock_cycle: Mock) -> None:
    """Test that calling start twice keeps a single timer thread."""
    mock_cycle.return_value = NO_CHANGES
    scheduler = _scheduler()

    try:
        scheduler.start()
        timer = scheduler._timer
        scheduler.start()

        assert scheduler._timer is timer
        assert scheduler.running is True
    finally:
        scheduler.shutdown()

    assert scheduler.running is False
    mock_cycle.assert_not_called()


@pytest.mark.unit
def test_tick_after_shutdown_raises() -> None:
    """Test that no cycle can be submitted once the scheduler stopped."""
    scheduler = _scheduler()
    scheduler.shutdown()

    with pytest.raises(RuntimeError):
        scheduler.tick()
