"""
Integration tests for health and readiness endpoints.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from stay_sync.main import app


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    return TestClient(app)


@pytest.mark.integration
def test_health_endpoint_returns_ok(client: TestClient) -> None:
    """Test that /health always returns 200 OK."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_ready_endpoint_with_database_available(client: TestClient) -> None:
    """Test that /ready returns 200 when the ledger database answers."""
    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "checks": {"database": "ok"}}


@pytest.mark.integration
@patch("stay_sync.routes.health.check_engine_health", return_value=False)
def test_ready_endpoint_with_database_unavailable(mock_check: object, client: TestClient) -> None:
    """Test that /ready returns 503 when the database is not accessible."""
    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "not ready", "checks": {"database": "failed"}}
