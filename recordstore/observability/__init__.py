"""
Observability infrastructure.

Components:
- metrics.py: Prometheus metrics (counters, histograms)
- logging.py: Structured JSON logging with operation context
"""

from recordstore.observability.metrics import (
    track_query_page,
    track_record_store_operation,
    track_zone_creation,
)

__all__ = [
    "track_query_page",
    "track_record_store_operation",
    "track_zone_creation",
]
