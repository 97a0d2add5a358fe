"""Shared singletons for MatchLens.

Singleton-by-import pattern: main.py and routers import from this module
to share the same instances (asset cache, telemetry counters).
"""

from matchlens.utils.cache import AssetCache

# Logos and flags loaded once per process. Never evicted.
asset_cache = AssetCache()

# =============================================================================
# TELEMETRY COUNTERS (aggregated, no high-cardinality labels)
# =============================================================================
# Thread-safe via GIL for simple increments; no locks needed for counters.

_telemetry = {
    # AI picks
    "ai_picks_cache_hit": 0,
    "ai_picks_cache_miss": 0,
    "ai_picks_fetch_failed": 0,
    # Flagged-match source
    "flagged_source_ai_picks": 0,
    "flagged_source_heuristic": 0,
    # View composition
    "view_mode_widened": 0,
    # League counts
    "league_count_failed": 0,
}


def _incr(key: str) -> None:
    """Increment a telemetry counter."""
    _telemetry[key] = _telemetry.get(key, 0) + 1


def reset_telemetry() -> None:
    """Zero every counter (tests)."""
    for key in _telemetry:
        _telemetry[key] = 0
