"""
Observability Module for the Reference Synchronizer

Provides:
- Structured logging with correlation IDs
- Metrics collection (fetches, submissions, fetch durations)
"""

from core.observability.metrics import (
    FetchMetrics,
    get_metrics,
    record_fetch_started,
    record_fetch_succeeded,
    record_fetch_failed,
    record_submission,
)

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    with_correlation,
)

__all__ = [
    # Metrics
    "FetchMetrics",
    "get_metrics",
    "record_fetch_started",
    "record_fetch_succeeded",
    "record_fetch_failed",
    "record_submission",
    # Logging
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "with_correlation",
]
