"""
Prometheus metrics for record store operations.

Metrics tracked:
- Client operation latency (histogram) by operation and outcome
- Client operation count (counter) by operation and outcome
- Query pages fetched (counter)
- Zone creation requests (counter)
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# RECORD STORE METRICS
# ============================================================================

record_store_operation_duration_seconds = Histogram(
    "recordstore_operation_duration_seconds",
    "Record store client operation latency",
    labelnames=["operation", "success"],
    buckets=(
        0.005,  # 5ms
        0.010,  # 10ms
        0.025,  # 25ms
        0.050,  # 50ms
        0.100,  # 100ms
        0.250,  # 250ms
        0.500,  # 500ms
        1.000,  # 1s
        2.500,  # 2.5s
        5.000,  # 5s
    ),
)

record_store_operations_total = Counter(
    "recordstore_operations_total",
    "Total record store client operations",
    labelnames=["operation", "success"],
)

record_store_query_pages_total = Counter(
    "recordstore_query_pages_total",
    "Query pages fetched while listing records",
    labelnames=["record_type"],
)

zone_creations_total = Counter(
    "recordstore_zone_creations_total",
    "Zone creation requests issued to the backend",
    labelnames=["zone", "success"],
)


def track_record_store_operation(
    operation: str,
    success: bool,
    duration_seconds: float,
) -> None:
    """
    Track record store operation metrics.

    Args:
        operation: Operation type (list, save, delete, ensure_zone)
        success: Whether operation succeeded
        duration_seconds: Operation duration
    """
    success_label = "true" if success else "false"
    record_store_operation_duration_seconds.labels(
        operation=operation, success=success_label
    ).observe(duration_seconds)
    record_store_operations_total.labels(operation=operation, success=success_label).inc()


def track_query_page(record_type: str) -> None:
    record_store_query_pages_total.labels(record_type=record_type).inc()


def track_zone_creation(zone: str, success: bool) -> None:
    zone_creations_total.labels(zone=zone, success="true" if success else "false").inc()
