"""Core routes: health, telemetry, metrics.

Auth per-endpoint:
- /health: public, rate limited
- /telemetry: public (aggregated counters only)
- /metrics: Bearer token when METRICS_BEARER_TOKEN is set
"""

from fastapi import APIRouter, Header, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from matchlens.config import get_settings
from matchlens.security import bearer_token_error, limiter
from matchlens.state import _telemetry, asset_cache
from matchlens.telemetry import get_metrics_text

router = APIRouter(tags=["core"])
settings = get_settings()


class HealthResponse(BaseModel):
    status: str
    manual_entry_mode: bool


@router.get("/health", response_model=HealthResponse)
@limiter.limit("120/minute")
async def health_check(request: Request):
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        manual_entry_mode=settings.manual_entry_mode,
    )


@router.get("/telemetry")
async def get_telemetry(request: Request):
    """
    Aggregated telemetry counters.

    No high-cardinality labels (no match_id, team names, URLs).

    NOTE: Counters reset on restart. This is diagnostic telemetry,
    not historical observability. For persistent metrics, scrape /metrics.
    """
    picks_hits = _telemetry["ai_picks_cache_hit"]
    picks_total = picks_hits + _telemetry["ai_picks_cache_miss"]
    picks_hit_rate = picks_hits / picks_total if picks_total > 0 else 0

    ai_source = _telemetry["flagged_source_ai_picks"]
    source_total = ai_source + _telemetry["flagged_source_heuristic"]
    ai_source_rate = ai_source / source_total if source_total > 0 else 0

    return {
        "ai_picks_cache": {
            "hit": picks_hits,
            "miss": _telemetry["ai_picks_cache_miss"],
            "fetch_failed": _telemetry["ai_picks_fetch_failed"],
            "hit_rate": round(picks_hit_rate, 3),
        },
        "flagged_source": {
            "ai_picks": ai_source,
            "heuristic": _telemetry["flagged_source_heuristic"],
            "ai_picks_rate": round(ai_source_rate, 3),
        },
        "view_mode_widened": _telemetry["view_mode_widened"],
        "league_count_failed": _telemetry["league_count_failed"],
        "assets_loaded": len(asset_cache),
    }


@router.get("/metrics")
async def prometheus_metrics(
    authorization: str = Header(None, alias="Authorization"),
):
    """
    Prometheus metrics endpoint.

    Exposes collaborator request counts/latency, flagged-source selection
    and view-mode widening. Requires Bearer token authentication when
    METRICS_BEARER_TOKEN is set.
    """
    error = bearer_token_error(authorization, settings.METRICS_BEARER_TOKEN)
    if error:
        return PlainTextResponse(
            content=f"# Unauthorized: {error}\n",
            status_code=401,
            media_type="text/plain",
        )

    content, content_type = get_metrics_text()
    return PlainTextResponse(content=content, media_type=content_type)
