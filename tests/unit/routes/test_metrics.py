"""
Unit tests for metrics endpoint.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from stay_sync.main import app
from stay_sync.metrics import (
    booking_operations,
    cycle_duration,
    items_pushed,
    push_failures,
    remote_latency,
    remote_requests,
    sync_cycles,
)


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    return TestClient(app)


@pytest.mark.unit
def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    """Test that /metrics endpoint returns Prometheus text format."""
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


@pytest.mark.unit
def test_metrics_endpoint_contains_custom_metrics(client: TestClient) -> None:
    """Test that /metrics endpoint includes the sync and booking metrics."""
    sync_cycles.labels(outcome="synced").inc()
    cycle_duration.observe(0.42)
    items_pushed.labels(entity_type="days").inc(3)
    push_failures.labels(entity_type="operations").inc()
    remote_requests.labels(operation="create", status="success").inc()
    remote_latency.labels(operation="create").observe(0.2)
    booking_operations.labels(operation="create", status="success").inc()

    content = client.get("/metrics").text

    assert "stay_sync_cycles_total" in content
    assert "stay_sync_cycle_duration_seconds" in content
    assert "stay_sync_items_pushed_total" in content
    assert "stay_sync_push_failures_total" in content
    assert "stay_sync_remote_requests_total" in content
    assert "stay_sync_remote_latency_seconds" in content
    assert "stay_sync_booking_operations_total" in content


@pytest.mark.unit
def test_metrics_endpoint_includes_help_and_type_metadata(client: TestClient) -> None:
    """Test that metrics include Prometheus HELP and TYPE metadata."""
    content = client.get("/metrics").text

    assert "# HELP" in content
    assert "# TYPE" in content
