"""
Prometheus metrics for the match browser and the collaborator client.

Design principles:
- Low cardinality (controlled labels)
- Best-effort (never block main flow)

=============================================================================
CARDINALITY CONTROL
=============================================================================

ALLOWED LABELS (bounded sets):
- endpoint:     "match-data", "ai-picks", "analyze", "tts", "share" (max ~10)
- status_code:  "200", "404", "500", "0" (max ~10)
- error_code:   "timeout", "http_error", "aborted", "decode" (max ~10)
- source:       "ai_picks", "heuristic"
- time_filter:  "today", "tomorrow", "later"

FORBIDDEN AS LABELS:
- match_id, team names, league keys, sport keys
- URLs, raw error messages

Use logs for per-match debugging, not metric labels.
=============================================================================
"""

import logging

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)

logger = logging.getLogger(__name__)

# =============================================================================
# PROVIDER METRICS
# =============================================================================

ml_provider_requests_total = Counter(
    "ml_provider_requests_total",
    "Total requests to collaborator endpoints",
    ["endpoint", "status_code"],
)

ml_provider_errors_total = Counter(
    "ml_provider_errors_total",
    "Total failed requests to collaborator endpoints",
    ["endpoint", "error_code"],
)

ml_provider_latency_ms = Histogram(
    "ml_provider_latency_ms",
    "Collaborator request latency in milliseconds",
    ["endpoint"],
    buckets=[10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 15000],
)

# =============================================================================
# BROWSER METRICS
# =============================================================================

ml_flagged_source_total = Counter(
    "ml_flagged_source_total",
    "Flagged-match rankings by source",
    ["source"],
)

ml_view_widened_total = Counter(
    "ml_view_widened_total",
    "AI-picks views widened to the full window (no flagged matches)",
    ["time_filter"],
)


# =============================================================================
# HELPERS
# =============================================================================


def record_provider_request(endpoint: str, status_code: int, latency_ms: float) -> None:
    """Record a collaborator request (count + latency)."""
    try:
        ml_provider_requests_total.labels(
            endpoint=endpoint,
            status_code=str(status_code),
        ).inc()
        ml_provider_latency_ms.labels(endpoint=endpoint).observe(latency_ms)
    except Exception as e:
        logger.warning(f"Failed to record provider request metric: {e}")


def record_provider_error(endpoint: str, error_code: str) -> None:
    """Record a failed collaborator request."""
    try:
        ml_provider_errors_total.labels(
            endpoint=endpoint,
            error_code=error_code,
        ).inc()
    except Exception as e:
        logger.warning(f"Failed to record provider error metric: {e}")


def record_flagged_source(source: str) -> None:
    try:
        ml_flagged_source_total.labels(source=source).inc()
    except Exception as e:
        logger.warning(f"Failed to record flagged source metric: {e}")


def record_view_widened(time_filter: str) -> None:
    try:
        ml_view_widened_total.labels(time_filter=time_filter).inc()
    except Exception as e:
        logger.warning(f"Failed to record view widened metric: {e}")


def get_metrics_text() -> tuple[str, str]:
    """
    Generate Prometheus metrics text output.

    Returns:
        Tuple of (content, content_type)
    """
    return generate_latest(REGISTRY).decode("utf-8"), CONTENT_TYPE_LATEST
