"""
Unit tests for logging_config.py.
"""

from __future__ import annotations

from typing import Generator

import pytest
import structlog

from stay_sync.logging_config import setup_logging, tag_component


@pytest.fixture
def restore_structlog() -> Generator[None, None, None]:
    """Put the API logging configuration back after the test."""
    yield
    setup_logging(component="api")


@pytest.mark.unit
def test_tag_component_keeps_explicit_value() -> None:
    """Test that the component is added unless the event already names one."""
    tag = tag_component("cli")

    assert tag(None, "info", {"event": "sync_cycle_completed"})["component"] == "cli"
    assert tag(None, "info", {"event": "x", "component": "api"})["component"] == "api"


@pytest.mark.unit
@pytest.mark.parametrize(
    "level,renderer",
    [
        ("INFO", structlog.processors.JSONRenderer),
        ("debug", structlog.dev.ConsoleRenderer),
    ],
)
def test_setup_logging_picks_renderer_by_level(
    restore_structlog: None, level: str, renderer: type
) -> None:
    """Test JSON output at INFO and console output at DEBUG."""
    setup_logging(component="cli", level=level)

    processors = structlog.get_config()["processors"]
    assert isinstance(processors[-1], renderer)
