"""
Unit tests for the sync status observer channel.
"""

from __future__ import annotations

import pytest

from stay_sync.services.status import StatusChannel


@pytest.mark.unit
def test_status_channel_delivers_to_subscribers() -> None:
    """Test that every subscriber receives published messages in order."""
    channel = StatusChannel()
    first: list[str] = []
    second: list[str] = []
    channel.subscribe(first.append)
    channel.subscribe(second.append)

    channel.publish("Syncing...")
    channel.publish("Synced 3 updates")

    assert first == ["Syncing...", "Synced 3 updates"]
    assert second == first
    assert channel.last_message == "Synced 3 updates"


@pytest.mark.unit
def test_status_channel_unsubscribe() -> None:
    """Test that an unsubscribed callback stops receiving messages."""
    channel = StatusChannel()
    received: list[str] = []
    unsubscribe = channel.subscribe(received.append)

    channel.publish("a")
    unsubscribe()
    unsubscribe()
    channel.publish("b")

    assert received == ["a"]


@pytest.mark.unit
def test_status_channel_survives_failing_subscriber() -> None:
    """Test that a raising subscriber does not block the others."""
    channel = StatusChannel()
    received: list[str] = []

    def broken(message: str) -> None:
        raise RuntimeError("display gone")

    channel.subscribe(broken)
    channel.subscribe(received.append)

    channel.publish("Syncing...")

    assert received == ["Syncing..."]


@pytest.mark.unit
def test_status_channel_starts_empty() -> None:
    """Test that no message is reported before the first publish."""
    assert StatusChannel().last_message is None
