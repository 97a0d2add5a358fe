"""
Derived match lists for the browser: time windows, AI-flagged ranking, view mode.

Two flagged-match sources exist and are never mixed in one result:
- ai_picks: server-side flagged ids, ranked by edge + conviction / 10
- heuristic: get_value_flagged_matches() over the fetched odds

The heuristic is used only when the server returned no flagged ids at all.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from matchlens.browser.trending import ValueFlaggedMatch, get_value_flagged_matches
from matchlens.config import get_settings
from matchlens.models import AIPicksResponse, MatchData
from matchlens.state import _incr
from matchlens.telemetry.metrics import record_flagged_source, record_view_widened
from matchlens.utils.dates import local_day_bounds, parse_datetime

logger = logging.getLogger(__name__)


class TimeFilter(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    LATER = "later"


class ViewMode(str, Enum):
    AI_PICKS = "ai-picks"
    ALL = "all"


class FlaggedSource(str, Enum):
    AI_PICKS = "ai_picks"
    HEURISTIC = "heuristic"


@dataclass(frozen=True)
class FlaggedRanking:
    source: FlaggedSource
    matches: tuple[MatchData, ...] = ()
    reasons: dict[str, str] = field(default_factory=dict)
    value_flags: tuple[ValueFlaggedMatch, ...] = ()

    @property
    def match_ids(self) -> set[str]:
        return {m.match_id for m in self.matches}


@dataclass(frozen=True)
class BrowserView:
    matches: tuple[MatchData, ...]
    time_filter: TimeFilter
    view_mode: ViewMode
    widened: bool
    flagged: FlaggedRanking
    counts_by_time: dict[str, int]
    flagged_counts_by_time: dict[str, int]


# =============================================================================
# TIME WINDOWS
# =============================================================================


def classify_time_window(commence_time: Optional[str], now: Optional[datetime] = None) -> Optional[TimeFilter]:
    """
    Local calendar bucket of a kick-off time.

    [today 00:00, tomorrow 00:00) -> today
    [tomorrow 00:00, day after 00:00) -> tomorrow
    [day after 00:00, ...) -> later
    Earlier days and unparseable times -> None
    """
    kickoff = parse_datetime(commence_time)
    if kickoff is None:
        return None
    today, tomorrow, day_after = local_day_bounds(now)
    if kickoff < today:
        return None
    if kickoff < tomorrow:
        return TimeFilter.TODAY
    if kickoff < day_after:
        return TimeFilter.TOMORROW
    return TimeFilter.LATER


def filter_matches_by_time(
    matches: Iterable[MatchData],
    window: TimeFilter,
    now: Optional[datetime] = None,
) -> list[MatchData]:
    window = TimeFilter(window)
    return [m for m in matches if classify_time_window(m.commence_time, now) == window]


def count_matches_by_time(
    matches: Iterable[MatchData],
    now: Optional[datetime] = None,
    only_ids: Optional[set[str]] = None,
) -> dict[str, int]:
    """Matches per window, optionally restricted to a set of match ids."""
    counts = {w.value: 0 for w in TimeFilter}
    for m in matches:
        if only_ids is not None and m.match_id not in only_ids:
            continue
        window = classify_time_window(m.commence_time, now)
        if window is not None:
            counts[window.value] += 1
    return counts


# =============================================================================
# AI-FLAGGED RANKING
# =============================================================================


def rank_ai_flagged(
    matches: Iterable[MatchData],
    picks: Optional[AIPicksResponse],
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> FlaggedRanking:
    """
    Flagged matches from one source only.

    Server picks win whenever they flag anything (even if none of the flagged
    ids are in this league). Otherwise the odds heuristic ranks the list.
    """
    matches = list(matches)

    if picks is not None and picks.has_flagged:
        flagged_ids = set(picks.flagged_match_ids)
        by_id = picks.picks_by_id()
        flagged = [m for m in matches if m.match_id in flagged_ids]
        flagged.sort(
            key=lambda m: by_id[m.match_id].rank_score if m.match_id in by_id else 0.0,
            reverse=True,
        )
        reasons = {m.match_id: by_id[m.match_id].ai_reason for m in flagged if m.match_id in by_id}
        _incr("flagged_source_ai_picks")
        record_flagged_source(FlaggedSource.AI_PICKS.value)
        return FlaggedRanking(source=FlaggedSource.AI_PICKS, matches=tuple(flagged), reasons=reasons)

    if limit is None:
        limit = get_settings().VALUE_FLAG_LIMIT
    value_flags = get_value_flagged_matches(matches, limit=min(limit, len(matches)), now=now)
    _incr("flagged_source_heuristic")
    record_flagged_source(FlaggedSource.HEURISTIC.value)
    logger.info(f"No server AI picks, heuristic flagged {len(value_flags)} of {len(matches)} matches")
    return FlaggedRanking(
        source=FlaggedSource.HEURISTIC,
        matches=tuple(v.match for v in value_flags),
        reasons={v.match_id: v.ai_reason for v in value_flags},
        value_flags=tuple(value_flags),
    )


# =============================================================================
# VIEW COMPOSITION
# =============================================================================


def compose_view(
    matches: Iterable[MatchData],
    picks: Optional[AIPicksResponse],
    time_filter: TimeFilter = TimeFilter.TODAY,
    view_mode: ViewMode = ViewMode.AI_PICKS,
    now: Optional[datetime] = None,
) -> BrowserView:
    """
    Visible list for one (time filter, view mode) selection.

    In ai-picks mode the window narrows to flagged matches, unless none of
    them fall in the window: then every match of the window is shown.
    """
    matches = list(matches)
    time_filter = TimeFilter(time_filter)
    view_mode = ViewMode(view_mode)

    flagged = rank_ai_flagged(matches, picks, now=now)
    flagged_ids = flagged.match_ids

    in_window = filter_matches_by_time(matches, time_filter, now)
    visible = in_window
    widened = False

    if view_mode == ViewMode.AI_PICKS:
        picked = [m for m in in_window if m.match_id in flagged_ids]
        if picked:
            visible = picked
        else:
            widened = True
            _incr("view_mode_widened")
            record_view_widened(time_filter.value)
            logger.debug(f"No flagged matches in window '{time_filter.value}', showing all")

    return BrowserView(
        matches=tuple(visible),
        time_filter=time_filter,
        view_mode=view_mode,
        widened=widened,
        flagged=flagged,
        counts_by_time=count_matches_by_time(matches, now),
        flagged_counts_by_time=count_matches_by_time(matches, now, only_ids=flagged_ids),
    )


# =============================================================================
# SELECTOR UTILITIES
# =============================================================================


@dataclass(frozen=True)
class LeagueGroup:
    league_key: str
    league_name: str
    sport_key: str
    matches: tuple[MatchData, ...]


def _kickoff_sort_key(match: MatchData) -> float:
    kickoff = parse_datetime(match.commence_time)
    return kickoff.timestamp() if kickoff is not None else float("inf")


def group_matches_by_league(matches: Iterable[MatchData]) -> list[LeagueGroup]:
    """Groups sorted by league name, matches inside sorted by kick-off."""
    grouped: dict[str, list[MatchData]] = {}
    for m in matches:
        key = m.league or m.sport_key or "unknown"
        grouped.setdefault(key, []).append(m)

    groups = []
    for key, members in grouped.items():
        members.sort(key=_kickoff_sort_key)
        first = members[0]
        groups.append(
            LeagueGroup(
                league_key=key,
                league_name=first.league or "Unknown League",
                sport_key=first.sport_key,
                matches=tuple(members),
            )
        )
    groups.sort(key=lambda g: g.league_name.lower())
    return groups


def filter_matches_by_search(matches: Iterable[MatchData], query: Optional[str]) -> list[MatchData]:
    """Case-insensitive substring match on team names and league."""
    matches = list(matches)
    needle = (query or "").strip().lower()
    if not needle:
        return matches
    return [
        m for m in matches
        if needle in m.home_team.lower() or needle in m.away_team.lower() or needle in m.league.lower()
    ]
