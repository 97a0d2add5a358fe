"""
Match-browser state machine.

Inputs: sport, league, time filter, view mode. Matches for the selected league
are fetched once; filter and view-mode changes recompute the visible list
from that set without any network access.
"""

import logging
from datetime import datetime
from typing import Optional

from matchlens.browser.catalog import get_sport, sport_for_league
from matchlens.browser.filters import BrowserView, TimeFilter, ViewMode, compose_view
from matchlens.browser.trending import TrendingMatch, get_trending_matches
from matchlens.clients.cancellation import AbortSignal
from matchlens.clients.provider import ProviderClient, ProviderError
from matchlens.config import get_settings
from matchlens.models import AIPicksResponse, MatchData

logger = logging.getLogger(__name__)


class MatchBrowserState:
    """Selection plus the already-fetched data it is derived from."""

    def __init__(
        self,
        sport: Optional[str] = None,
        league: Optional[str] = None,
        time_filter: TimeFilter = TimeFilter.TODAY,
        view_mode: ViewMode = ViewMode.AI_PICKS,
    ):
        owning_sport = sport_for_league(league) if league else None
        if owning_sport is not None:
            self.sport = owning_sport.id
            self.league = league
        else:
            selected = get_sport(sport)
            self.sport = selected.id
            self.league = selected.default_league.key

        self.time_filter = TimeFilter(time_filter)
        self.view_mode = ViewMode(view_mode)

        self.matches: tuple[MatchData, ...] = ()
        self.picks: Optional[AIPicksResponse] = None
        self.league_counts: dict[str, int] = {}
        self.error: Optional[str] = None
        self._loaded_league: Optional[str] = None
        self._inflight: Optional[AbortSignal] = None

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def select_sport(self, sport_id: str) -> bool:
        """
        Switch sport. The league resets to the sport's first league only when
        the current league does not belong to it.

        Returns True if the league changed (a fetch is needed).
        """
        sport = get_sport(sport_id)
        self.sport = sport.id
        if sport.has_league(self.league):
            return False
        self.league = sport.default_league.key
        return True

    def select_league(self, league_key: str) -> bool:
        """Select a catalogued league (and its sport). Returns True if it changed."""
        sport = sport_for_league(league_key)
        if sport is None:
            raise ValueError(f"Unknown league: {league_key}")
        self.sport = sport.id
        changed = league_key != self.league
        self.league = league_key
        return changed

    def set_time_filter(self, time_filter: TimeFilter) -> None:
        self.time_filter = TimeFilter(time_filter)

    def set_view_mode(self, view_mode: ViewMode) -> None:
        self.view_mode = ViewMode(view_mode)

    def load_matches(self, matches, league: Optional[str] = None) -> None:
        """Replace the fetched set for `league` (default: the selected league)."""
        self.matches = tuple(matches)
        self._loaded_league = league or self.league
        self.error = None

    def load_ai_picks(self, picks: Optional[AIPicksResponse]) -> None:
        self.picks = picks

    def load_league_counts(self, counts: dict[str, int]) -> None:
        self.league_counts = dict(counts)

    @property
    def needs_fetch(self) -> bool:
        return self._loaded_league != self.league

    # -------------------------------------------------------------------------
    # Derived views (synchronous, no I/O)
    # -------------------------------------------------------------------------

    def visible(self, now: Optional[datetime] = None) -> BrowserView:
        matches = self.matches if not self.needs_fetch else ()
        return compose_view(matches, self.picks, self.time_filter, self.view_mode, now=now)

    def trending(self, now: Optional[datetime] = None, limit: Optional[int] = None) -> list[TrendingMatch]:
        settings = get_settings()
        if limit is None:
            limit = settings.TRENDING_LIMIT
        matches = self.matches if not self.needs_fetch else ()
        return get_trending_matches(matches, limit=limit, now=now, window_hours=settings.TRENDING_WINDOW_HOURS)

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def refresh(self, client: ProviderClient) -> None:
        """
        Fetch matches for the selected league.

        A newer refresh aborts the previous one, whose caller then gets
        RequestAborted. Fetch failures are kept as a user-facing error string.
        """
        if self._inflight is not None:
            self._inflight.abort("superseded")
        signal = AbortSignal()
        self._inflight = signal
        league = self.league

        try:
            matches = await client.fetch_matches(league, signal=signal)
        except ProviderError as e:
            logger.warning(f"Refresh failed for {league}: {e}")
            self.error = str(e)
            return
        finally:
            if self._inflight is signal:
                self._inflight = None

        self.load_matches(matches, league=league)

    def cancel(self) -> None:
        """Abort any in-flight refresh (e.g. when the view is torn down)."""
        if self._inflight is not None:
            self._inflight.abort("cancelled")
            self._inflight = None
