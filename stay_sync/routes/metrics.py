"""
Scrape endpoint for the sync and booking counters of stay_sync.metrics.

Example:
    GET /metrics

    Response:
        # HELP stay_sync_cycles_total Total number of synchronization cycles by outcome
        # TYPE stay_sync_cycles_total counter
        stay_sync_cycles_total{outcome="synced"} 12.0
        stay_sync_push_failures_total{entity_type="days"} 1.0
        ...
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
def metrics() -> Response:
    """Render the default registry, which every stay_sync metric registers on."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
