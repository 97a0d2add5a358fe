"""
Tests for trending (hot) matches and heuristic value flags.

Clock is fixed; every kick-off is relative to NOW.
"""

from datetime import datetime, timedelta, timezone

import pytest

from matchlens.browser.trending import (
    analyze_market_anomaly,
    calculate_hot_score,
    detect_derby,
    detect_match_value,
    get_match_context,
    get_trending_matches,
    get_trending_matches_by_category,
    get_value_flagged_matches,
    market_score,
    proximity_score,
    remove_vig,
)
from matchlens.models import MatchData

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _match(match_id, hours=2.0, sport_key="soccer_epl", home="Home FC", away="Away FC", **kwargs):
    return MatchData(
        match_id=match_id,
        sport_key=sport_key,
        home_team=home,
        away_team=away,
        commence_time=(NOW + timedelta(hours=hours)).isoformat(),
        **kwargs,
    )


def _books(*prices):
    return [{"name": name, "home": home, "away": away} for name, home, away in prices]


class TestHotScore:
    """Test the weighted hot score and its factors."""

    def test_weighted_sum(self):
        """3 books (2.0), 1X2 + draw (5), EPL (10), no derby, 2h out (10)."""
        match = _match(
            "m1",
            odds={"home": 2.1, "draw": 3.3, "away": 3.5},
            bookmakers=_books(("A", 2.1, 3.5), ("B", 2.0, 3.6), ("C", 2.2, 3.4)),
        )
        trending = calculate_hot_score(match, now=NOW)
        assert trending.factors.bookmaker_score == pytest.approx(2.0)
        assert trending.factors.market_score == 5
        assert trending.factors.league_score == 10
        assert trending.factors.derby_score == 0
        assert trending.factors.proximity_score == 10
        assert trending.hot_score == pytest.approx(4.8)

    def test_market_score_caps_at_10(self):
        match = _match("m1", odds={"home": 2.0, "draw": 3.0, "away": 4.0, "over": 1.9, "under": 1.9, "overUnderLine": 2.5})
        assert market_score(match) == 10

    def test_unknown_league_default_importance(self):
        assert calculate_hot_score(_match("m1", sport_key="soccer_nowhere"), now=NOW).factors.league_score == 5

    def test_proximity_bands(self):
        assert proximity_score(None) == 0
        assert proximity_score(-1) == 0
        assert proximity_score(3) == 10
        assert proximity_score(12) == 8
        assert proximity_score(24) == 6
        assert proximity_score(48) == 4
        assert proximity_score(72) == 2
        assert proximity_score(100) == 1


class TestDerby:
    """Test rivalry and same-city detection."""

    def test_known_rivalries(self):
        assert detect_derby("Manchester United", "Manchester City") is True
        assert detect_derby("Arsenal", "Chelsea") is True
        assert detect_derby("Los Angeles Lakers", "Boston Celtics") is True

    def test_same_team_name_twice_is_not_rivalry(self):
        assert detect_derby("Inter", "Inter Miami") is False

    def test_same_city_prefix(self):
        assert detect_derby("Sporting Lisbon", "Sporting Braga") is True

    def test_short_prefix_ignored(self):
        assert detect_derby("FC Porto", "FC Barcelona B") is False


class TestTrendingMatches:
    """Test window filtering and ordering."""

    def test_window_and_order(self):
        matches = [
            _match("past", hours=-1),
            _match("far", hours=60),
            _match("soon", hours=2, bookmakers=_books(*[(f"B{i}", 2.0, 2.0) for i in range(9)])),
            _match("tomorrow", hours=30, sport_key="soccer_england_league2"),
            MatchData(match_id="no-time", commence_time="tbd"),
        ]
        trending = get_trending_matches(matches, limit=8, now=NOW)
        assert [t.match_id for t in trending] == ["soon", "tomorrow"]

    def test_limit(self):
        matches = [_match(f"m{i}", hours=i + 1) for i in range(5)]
        assert len(get_trending_matches(matches, limit=3, now=NOW)) == 3

    def test_by_category(self):
        matches = [_match("epl"), _match("nba", sport_key="basketball_nba")]
        trending = get_trending_matches_by_category(matches, ["basketball_nba"], now=NOW)
        assert [t.match_id for t in trending] == ["nba"]

    def test_context(self):
        derby = calculate_hot_score(_match("d", hours=30, home="Arsenal", away="Tottenham Hotspur"), now=NOW)
        assert get_match_context(derby) == "Rivalry match • High market interest"
        soon = calculate_hot_score(_match("s", hours=2), now=NOW)
        assert get_match_context(soon) == "Starting soon • Market active"


class TestValueFlags:
    """Test sharp/soft edge, variance and anomaly detection."""

    def test_remove_vig(self):
        probs = remove_vig(2.0, 2.0)
        assert probs == {"home": 50.0, "away": 50.0}
        assert remove_vig(0, 2.0) is None
        three_way = remove_vig(2.0, 4.0, 4.0)
        assert sum(three_way.values()) == pytest.approx(100.0)

    def test_sharp_vs_soft_edge(self):
        """Pinnacle 50/50 vs Bet365 40/60 -> Home +10.0% edge."""
        match = _match("m1", bookmakers=_books(("Pinnacle", 2.0, 2.0), ("Bet365", 2.4, 1.6)))
        value_bet = detect_match_value(match)
        assert value_bet.outcome == "home"
        assert value_bet.edge_percent == 10.0
        assert value_bet.strength == "strong"
        assert value_bet.label == "Home +10.0% edge"

    def test_variance_edge(self):
        match = _match("m1", bookmakers=_books(("BookA", 2.0, 1.8), ("BookB", 2.2, 1.8), ("BookC", 2.5, 1.8)))
        value_bet = detect_match_value(match)
        assert value_bet.outcome == "home"
        assert value_bet.edge_percent == 2.5
        assert value_bet.strength == "slight"
        assert value_bet.label == "Home odds variance: 0.50"

    def test_anomaly(self):
        match = _match(
            "m1",
            bookmakers=_books(("BookA", 1.2, 5.0), ("BookB", 1.25, 5.5)),
            average_odds={"home": 1.22, "away": 5.25},
        )
        anomaly = analyze_market_anomaly(match)
        assert anomaly.has_disagreement is True
        assert anomaly.odds_spread == 0.5
        assert anomaly.skewed_market is True

    def test_single_book_has_no_anomaly(self):
        anomaly = analyze_market_anomaly(_match("m1", bookmakers=_books(("BookA", 2.0, 2.0))))
        assert anomaly.has_disagreement is False

    def test_flagged_matches_ranked(self):
        matches = [
            _match("flat", bookmakers=_books(("BookA", 2.0, 2.0), ("BookB", 2.0, 2.0), ("BookC", 2.0, 2.0))),
            _match("variance", bookmakers=_books(("BookA", 2.0, 1.8), ("BookB", 2.2, 1.8), ("BookC", 2.5, 1.8))),
            _match("sharp", bookmakers=_books(("Pinnacle", 2.0, 2.0), ("Bet365", 2.4, 1.6))),
            _match("started", hours=-1, bookmakers=_books(("Pinnacle", 2.0, 2.0), ("Bet365", 2.4, 1.6))),
        ]
        flagged = get_value_flagged_matches(matches, now=NOW)
        assert [f.match_id for f in flagged] == ["sharp", "variance"]
        assert flagged[0].value_score == pytest.approx(72)
        assert flagged[0].ai_reason == "Strong value signal detected"
        assert flagged[1].value_score == pytest.approx(33)
        assert flagged[1].ai_reason == "Bookmaker disagreement detected"

    def test_flagged_limit(self):
        matches = [
            _match(f"m{i}", bookmakers=_books(("Pinnacle", 2.0, 2.0), ("Bet365", 2.4, 1.6)))
            for i in range(4)
        ]
        assert len(get_value_flagged_matches(matches, limit=2, now=NOW)) == 2
