"""
Prometheus metrics for sync cycles, remote calendar calls, and booking operations.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Metric Types:
    - Counter: Cumulative metrics that only increase (e.g., total remote requests)
    - Histogram: Observations bucketed by value (e.g., request latency)

Example:
    >>> from stay_sync.metrics import cycle_duration, items_pushed
    >>> with cycle_duration.time():
    ...     changes = push_days(...)
    ...     items_pushed.labels(entity_type="days").inc(changes)
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Sync Cycle Metrics
# =============================================================================

sync_cycles = Counter(
    "stay_sync_cycles_total",
    "Total number of synchronization cycles by outcome",
    ["outcome"],
)
"""
Counter for sync cycles.

Labels:
    outcome: synced, no_changes, skipped, auth_failed or error
"""

cycle_duration = Histogram(
    "stay_sync_cycle_duration_seconds",
    "Duration of synchronization cycles in seconds",
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, float("inf")),
)

items_pushed = Counter(
    "stay_sync_items_pushed_total",
    "Total number of ledger items pushed to the remote calendar",
    ["entity_type"],
)
"""
Counter for successfully pushed items.

Labels:
    entity_type: days or operations
"""

push_failures = Counter(
    "stay_sync_push_failures_total",
    "Total number of ledger items that could not be pushed",
    ["entity_type"],
)

# =============================================================================
# Remote Calendar API Metrics
# =============================================================================

remote_requests = Counter(
    "stay_sync_remote_requests_total",
    "Total Google Calendar API requests made",
    ["operation", "status"],
)
"""
Counter for Google Calendar API requests.

Labels:
    operation: create, update or list_calendars
    status: success or failure
"""

remote_latency = Histogram(
    "stay_sync_remote_latency_seconds",
    "Google Calendar API request latency in seconds",
    ["operation"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, float("inf")),
)

# =============================================================================
# Booking Metrics
# =============================================================================

booking_operations = Counter(
    "stay_sync_booking_operations_total",
    "Total booking engine operations by result",
    ["operation", "status"],
)
"""
Counter for booking engine operations.

Labels:
    operation: assign_price_range, create, update, payment, cancel, checkin, checkout
    status: success or failure
"""
