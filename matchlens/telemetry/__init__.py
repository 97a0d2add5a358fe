"""
Telemetry Module

Prometheus metrics for:
- Collaborator requests (count, errors, latency)
- Flagged-match source selection (AI picks vs heuristic)
- View-mode widening
"""

from matchlens.telemetry.metrics import (
    ml_provider_requests_total,
    ml_provider_errors_total,
    ml_provider_latency_ms,
    ml_flagged_source_total,
    ml_view_widened_total,
    record_provider_request,
    record_provider_error,
    record_flagged_source,
    record_view_widened,
    get_metrics_text,
)

__all__ = [
    "ml_provider_requests_total",
    "ml_provider_errors_total",
    "ml_provider_latency_ms",
    "ml_flagged_source_total",
    "ml_view_widened_total",
    "record_provider_request",
    "record_provider_error",
    "record_flagged_source",
    "record_view_widened",
    "get_metrics_text",
]
