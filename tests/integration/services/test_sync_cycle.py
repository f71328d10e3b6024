"""
Integration tests for the sync cycle against a fake remote calendar.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any
from unittest.mock import patch

import pytest
from sqlalchemy.engine import Engine

from stay_sync.db.readers.days import get_day
from stay_sync.db.readers.reservations import get_reservation
from stay_sync.models.days import Season
from stay_sync.services.booking import (
    assign_price_range,
    cancel_reservation,
    complete_checkin,
    create_reservation,
)
from stay_sync.services.seasons import classify_seasons
from stay_sync.services.status import StatusChannel
from stay_sync.services.sync import SyncOutcome, run_sync_cycle

TODAY = date(2025, 5, 30)


@pytest.fixture
def status() -> tuple[StatusChannel, list[str]]:
    """Status channel with a recording subscriber."""
    channel = StatusChannel()
    messages: list[str] = []
    channel.subscribe(messages.append)
    return channel, messages


@pytest.mark.integration
def test_sync_skipped_without_settings(
    db_engine: Engine, property_id: int, fake_client: Any, status: tuple
) -> None:
    """Test that a missing calendar configuration skips the cycle."""
    channel, messages = status
    assign_price_range(db_engine, property_id, TODAY, TODAY, Decimal("80"), Season.AVERAGE)

    report = run_sync_cycle(db_engine, fake_client, channel, TODAY)

    assert report.outcome == SyncOutcome.SKIPPED
    assert messages == ["Sync Skipped: Config missing"]
    assert fake_client.auth_calls == 0
    assert fake_client.events == {}


@pytest.mark.integration
def test_sync_auth_failure_touches_nothing(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any, status: tuple
) -> None:
    """Test that an auth failure reports the error and leaves rows pending."""
    channel, messages = status
    fake_client.auth_ok = False
    assign_price_range(db_engine, property_id, TODAY, TODAY, Decimal("80"), Season.AVERAGE)

    report = run_sync_cycle(db_engine, fake_client, channel, TODAY)

    assert report.outcome == SyncOutcome.AUTH_FAILED
    assert messages == ["Sync Error: Auth Failed"]
    with db_engine.connect() as conn:
        assert get_day(conn, property_id, TODAY)["is_synced"] is False

    fake_client.auth_ok = True
    assert run_sync_cycle(db_engine, fake_client, channel, TODAY).outcome == SyncOutcome.SYNCED
    assert fake_client.auth_calls == 2


@pytest.mark.integration
def test_sync_is_idempotent(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any, status: tuple
) -> None:
    """Test that a second cycle without local changes writes nothing."""
    channel, messages = status
    assign_price_range(
        db_engine, property_id, date(2025, 6, 1), date(2025, 6, 3), Decimal("80"), Season.AVERAGE
    )

    first = run_sync_cycle(db_engine, fake_client, channel, TODAY)
    writes = len(fake_client.created) + len(fake_client.updated)
    second = run_sync_cycle(db_engine, fake_client, channel, TODAY)

    assert first.outcome == SyncOutcome.SYNCED
    assert first.days_pushed == 3
    assert messages[:2] == ["Syncing...", "Synced 3 updates"]
    assert second.outcome == SyncOutcome.NO_CHANGES
    assert messages[-1] == "System Synced (No changes)"
    assert len(fake_client.created) + len(fake_client.updated) == writes
    assert fake_client.auth_calls == 1


@pytest.mark.integration
def test_sync_never_pushes_past_days(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any
) -> None:
    """Test that days before today stay local."""
    assign_price_range(
        db_engine, property_id, date(2025, 5, 28), date(2025, 5, 30), Decimal("80"), Season.LOW
    )

    report = run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)

    assert report.days_pushed == 1
    with db_engine.connect() as conn:
        assert get_day(conn, property_id, date(2025, 5, 28))["is_synced"] is False
        assert get_day(conn, property_id, TODAY)["is_synced"] is True


@pytest.mark.integration
def test_sync_continues_after_item_failure(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any
) -> None:
    """Test that a failing day is retried later while the rest are pushed."""
    assign_price_range(
        db_engine, property_id, date(2025, 6, 1), date(2025, 6, 3), Decimal("80"), Season.AVERAGE
    )
    fake_client.fail_when = lambda day, title: day == date(2025, 6, 2)

    report = run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)

    assert report.days_pushed == 2
    with db_engine.connect() as conn:
        assert get_day(conn, property_id, date(2025, 6, 2))["is_synced"] is False
        assert get_day(conn, property_id, date(2025, 6, 3))["is_synced"] is True

    fake_client.fail_when = None
    retry = run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)
    assert retry.days_pushed == 1


@pytest.mark.integration
def test_sync_recreates_event_deleted_remotely(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any
) -> None:
    """Test that a day whose remote event vanished gets a new reference."""
    assign_price_range(db_engine, property_id, TODAY, TODAY, Decimal("80"), Season.AVERAGE)
    run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)
    with db_engine.connect() as conn:
        old_id = get_day(conn, property_id, TODAY)["remote_event_id"]

    fake_client.missing.add(old_id)
    assign_price_range(db_engine, property_id, TODAY, TODAY, Decimal("95"), Season.HIGH)
    run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)

    with db_engine.connect() as conn:
        row = get_day(conn, property_id, TODAY)
    assert row["remote_event_id"] not in (None, old_id)
    assert row["is_synced"] is True
    assert fake_client.events[row["remote_event_id"]]["title"] == "[FREE] - 95€"


@pytest.mark.integration
def test_sync_storage_failure_reports_error(
    db_engine: Engine, calendar_settings: dict, fake_client: Any, status: tuple
) -> None:
    """Test that an unexpected failure ends the cycle with an error message."""
    channel, messages = status

    with patch(
        "stay_sync.services.sync.push_days", side_effect=RuntimeError("database is locked")
    ):
        report = run_sync_cycle(db_engine, fake_client, channel, TODAY)

    assert report.outcome == SyncOutcome.ERROR
    assert messages[-1] == "Sync Error: database is locked"


@pytest.mark.integration
def test_operations_partial_failure_keeps_successful_reference(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any
) -> None:
    """Test that a failed check-out event still saves the check-in reference."""
    reservation_id = create_reservation(
        db_engine, property_id, {"guest_name": "Ana"}, date(2025, 6, 1), date(2025, 6, 3), 2, False
    )
    fake_client.fail_when = lambda day, title: "CHECK-OUT" in title

    report = run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)

    assert report.operations_pushed == 1
    with db_engine.connect() as conn:
        reservation = get_reservation(conn, reservation_id)
    assert reservation["remote_event_in_id"] is not None
    assert reservation["remote_event_out_id"] is None
    assert reservation["ops_synced"] is False

    fake_client.fail_when = None
    run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)

    with db_engine.connect() as conn:
        reservation_after = get_reservation(conn, reservation_id)
    assert reservation_after["remote_event_in_id"] == reservation["remote_event_in_id"]
    assert reservation_after["remote_event_out_id"] is not None
    assert reservation_after["ops_synced"] is True
    assert fake_client.titles_on(date(2025, 6, 3)) == ["⬅ CHECK-OUT: Ana"]


@pytest.mark.integration
def test_operations_follow_checkin_completion(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any
) -> None:
    """Test that completing a check-in updates its existing event."""
    reservation_id = create_reservation(
        db_engine, property_id, {"guest_name": "Ana"}, date(2025, 6, 1), date(2025, 6, 3), 2, False
    )
    run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)

    complete_checkin(db_engine, reservation_id)
    report = run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)

    assert report.operations_pushed == 1
    with db_engine.connect() as conn:
        event_in_id = get_reservation(conn, reservation_id)["remote_event_in_id"]
    assert event_in_id in fake_client.updated
    assert fake_client.events[event_in_id]["title"] == "[✓] CHECK-IN: Ana"
    assert fake_client.events[event_in_id]["color_id"] == "10"


@pytest.mark.integration
def test_operations_outside_lookback_are_not_pushed(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any
) -> None:
    """Test that stays that ended more than a day ago are left alone."""
    create_reservation(
        db_engine, property_id, {"guest_name": "Old"}, date(2025, 5, 20), date(2025, 5, 28), 1, True
    )

    report = run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)

    assert report.operations_pushed == 0
    assert report.outcome == SyncOutcome.NO_CHANGES


@pytest.mark.integration
def test_end_to_end_booking_sync_and_cancel(
    db_engine: Engine, property_id: int, calendar_settings: dict, fake_client: Any
) -> None:
    """Test pricing, booking, syncing and cancelling a stay for Ana."""
    price = Decimal("100")
    season = classify_seasons([50, 80, price])[price]
    assert season == Season.HIGH
    assert assign_price_range(
        db_engine, property_id, date(2025, 6, 1), date(2025, 6, 2), price, season
    )

    reservation_id = create_reservation(
        db_engine, property_id, {"guest_name": "Ana"}, date(2025, 6, 1), date(2025, 6, 3), 2, True
    )
    assert reservation_id is not None

    with db_engine.connect() as conn:
        rows = [get_day(conn, property_id, d) for d in (date(2025, 6, 1), date(2025, 6, 2))]
        assert get_day(conn, property_id, date(2025, 6, 3)) is None
    for row in rows:
        assert row["status"] == "paid"
        assert row["is_synced"] is False

    report = run_sync_cycle(db_engine, fake_client, StatusChannel(), TODAY)
    assert report.outcome == SyncOutcome.SYNCED

    with db_engine.connect() as conn:
        rows = [get_day(conn, property_id, d) for d in (date(2025, 6, 1), date(2025, 6, 2))]
    for row in rows:
        assert row["is_synced"] is True
        assert row["remote_event_id"] is not None
        assert fake_client.events[row["remote_event_id"]]["title"] == "[PAID] Ana - 100€"
        assert fake_client.events[row["remote_event_id"]]["color_id"] == "11"

    assert cancel_reservation(db_engine, reservation_id)

    with db_engine.connect() as conn:
        rows = [get_day(conn, property_id, d) for d in (date(2025, 6, 1), date(2025, 6, 2))]
    for row in rows:
        assert row["status"] == "free"
        assert row["is_synced"] is False
