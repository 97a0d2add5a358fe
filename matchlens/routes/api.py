"""Public API endpoints: match views, trending, per-match analysis views, config.

Match endpoints fetch from the collaborator services through ProviderClient;
analysis endpoints are pure and take an AnalyzeResponse body (camelCase or
snake_case keys). Collaborator failures map to 502 with a generic message.
"""

import asyncio
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from matchlens.browser.catalog import SPORTS, all_league_keys, is_seasonal
from matchlens.browser.filters import TimeFilter, ViewMode, compose_view, filter_matches_by_search
from matchlens.browser.trending import TrendingMatch, get_match_context, get_trending_matches
from matchlens.clients.provider import ProviderClient, ProviderError
from matchlens.config import get_settings
from matchlens.models import AnalyzeResponse, MatchData, Odds, Probabilities, WireModel
from matchlens.scoring.confidence import calculate_confidence_score, get_confidence_level, should_display_confidence
from matchlens.scoring.form import derive_result_streaks, significant_streaks, summarize_form
from matchlens.scoring.narration import build_share_payload, build_tts_text
from matchlens.scoring.odds_comparison import build_odds_comparison, difference_tier
from matchlens.scoring.schedule import FATIGUE_DISPLAY, analyze_rest
from matchlens.scoring.stats import quick_stats
from matchlens.state import asset_cache

router = APIRouter(tags=["api"])

logger = logging.getLogger(__name__)
settings = get_settings()

_provider_client: Optional[ProviderClient] = None


def get_provider_client() -> ProviderClient:
    """Process-wide collaborator client (overridden in tests)."""
    global _provider_client
    if _provider_client is None:
        _provider_client = ProviderClient()
    return _provider_client


async def close_provider_client() -> None:
    global _provider_client
    if _provider_client is not None:
        await _provider_client.close()
        _provider_client = None


def _match_dict(match: MatchData, reason: Optional[str] = None) -> dict:
    data = match.model_dump()
    if reason is not None:
        data["ai_reason"] = reason
    return data


def _trending_dict(trending: TrendingMatch) -> dict:
    data = _match_dict(trending.match)
    data["hot_score"] = round(trending.hot_score, 3)
    data["hot_factors"] = asdict(trending.factors)
    data["context"] = get_match_context(trending)
    return data


# =============================================================================
# MATCH VIEWS
# =============================================================================


@router.get("/matches/{sport_key}/view")
async def match_view(
    sport_key: str,
    time_filter: TimeFilter = Query(TimeFilter.TODAY),
    view_mode: ViewMode = Query(ViewMode.AI_PICKS),
    q: Optional[str] = Query(None, max_length=100),
    client: ProviderClient = Depends(get_provider_client),
):
    """
    Visible matches for one league and (time filter, view mode) selection.

    Matches and AI picks are fetched concurrently. An AI-picks failure only
    means the odds heuristic is used; a match-data failure is a 502.
    """
    try:
        matches, picks = await asyncio.gather(
            client.fetch_matches(sport_key),
            client.fetch_ai_picks(),
        )
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if q:
        matches = filter_matches_by_search(matches, q)

    view = compose_view(matches, picks, time_filter, view_mode)
    return {
        "sport_key": sport_key,
        "time_filter": view.time_filter.value,
        "view_mode": view.view_mode.value,
        "widened": view.widened,
        "flagged_source": view.flagged.source.value,
        "matches": [_match_dict(m, view.flagged.reasons.get(m.match_id)) for m in view.matches],
        "counts_by_time": view.counts_by_time,
        "flagged_counts_by_time": view.flagged_counts_by_time,
    }


@router.get("/matches/{sport_key}/trending")
async def trending_matches(
    sport_key: str,
    limit: int = Query(settings.TRENDING_LIMIT, ge=1, le=20),
    client: ProviderClient = Depends(get_provider_client),
):
    """Top matches by hot score within the trending window."""
    try:
        matches = await client.fetch_matches(sport_key)
    except ProviderError as e:
        raise HTTPException(status_code=502, detail=str(e))

    trending = get_trending_matches(matches, limit=limit, window_hours=settings.TRENDING_WINDOW_HOURS)
    return {"sport_key": sport_key, "matches": [_trending_dict(t) for t in trending]}


@router.get("/leagues/counts")
async def league_counts(client: ProviderClient = Depends(get_provider_client)):
    """Match count per catalogued league. Failed leagues count 0."""
    return await client.fetch_league_counts(all_league_keys())


# =============================================================================
# ANALYSIS VIEWS (pure)
# =============================================================================


@router.post("/analysis/confidence")
async def analysis_confidence(result: AnalyzeResponse):
    confidence = calculate_confidence_score(result)
    level = get_confidence_level(confidence.score)
    return {
        "score": confidence.score,
        "display": should_display_confidence(confidence.score, settings.CONFIDENCE_DISPLAY_MIN),
        "level": asdict(level),
        "factors": [asdict(f) for f in confidence.factors],
    }


@router.post("/analysis/schedule")
async def analysis_schedule(result: AnalyzeResponse):
    comparison = analyze_rest(result)

    def _side(info):
        data = asdict(info)
        data["fatigue"] = info.fatigue.value
        data["fatigue_display"] = asdict(FATIGUE_DISPLAY[info.fatigue])
        return data

    return {
        "home": _side(comparison.home),
        "away": _side(comparison.away),
        "advantage": comparison.advantage.value,
        "rest_diff": comparison.rest_diff,
        "advantage_label": comparison.advantage_label(),
        "has_data": comparison.has_data,
    }


@router.post("/analysis/form")
async def analysis_form(result: AnalyzeResponse):
    momentum = result.momentum_and_form
    sport = result.match_info.sport

    def _side(form, stats, streaks):
        summary = summarize_form(form, window=settings.FORM_WINDOW)
        data = asdict(summary)
        # No provider streaks: fall back to runs read off the form itself.
        notable = significant_streaks(streaks or derive_result_streaks(form))
        data["significant_streaks"] = [s.model_dump(by_alias=True) for s in notable]
        data["quick_stats"] = [{"label": label, "value": value} for label, value in quick_stats(stats, sport)]
        return data

    if momentum is None:
        return {"home": _side([], None, []), "away": _side([], None, [])}
    return {
        "home": _side(momentum.home_form, momentum.home_stats, momentum.home_streaks),
        "away": _side(momentum.away_form, momentum.away_stats, momentum.away_streaks),
    }


class OddsComparisonRequest(WireModel):
    probabilities: Probabilities = Field(default_factory=Probabilities)
    odds: Odds = Field(default_factory=Odds)


@router.post("/analysis/odds-comparison")
async def analysis_odds_comparison(body: OddsComparisonRequest):
    comparison = build_odds_comparison(body.probabilities, body.odds)
    rows = {}
    for outcome, row in comparison.by_outcome().items():
        rows[outcome.value.lower()] = {**asdict(row), "tier": difference_tier(row.difference)}
    return {
        "outcomes": rows,
        "bookmaker_margin": comparison.bookmaker_margin,
        "largest_difference": {
            "outcome": comparison.largest_difference.outcome.value,
            "difference": comparison.largest_difference.difference,
        },
        "explanation_short": comparison.explanation_short,
        "explanation_detailed": comparison.explanation_detailed,
    }


@router.post("/analysis/tts-text")
async def analysis_tts_text(result: AnalyzeResponse):
    return {"text": build_tts_text(result)}


@router.post("/analysis/share-payload")
async def analysis_share_payload(result: AnalyzeResponse):
    try:
        return build_share_payload(result)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# =============================================================================
# ASSETS + CONFIG
# =============================================================================


class AssetUrls(BaseModel):
    urls: list[str] = Field(default_factory=list, max_length=500)


@router.post("/assets/missing")
async def assets_missing(body: AssetUrls):
    """Which asset URLs still need loading (de-duplicated, input order)."""
    return {"missing": asset_cache.missing(body.urls)}


@router.post("/assets/loaded")
async def assets_loaded(body: AssetUrls):
    added = sum(1 for url in body.urls if asset_cache.mark_loaded(url))
    return {"added": added, "total": len(asset_cache)}


@router.get("/config")
async def public_config():
    """Client-facing configuration and the sports/league catalogue."""
    return {
        "manual_entry_mode": settings.manual_entry_mode,
        "ai_picks_limit": settings.AI_PICKS_LIMIT,
        "confidence_display_min": settings.CONFIDENCE_DISPLAY_MIN,
        "trending_limit": settings.TRENDING_LIMIT,
        "sports": [
            {
                "id": sport.id,
                "name": sport.name,
                "leagues": [
                    {"key": league.key, "name": league.name, "seasonal": is_seasonal(league.key)}
                    for league in sport.leagues
                ],
            }
            for sport in SPORTS
        ],
    }
