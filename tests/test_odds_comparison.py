"""
Tests for AI vs market-implied probability comparison.

Market side is 100 / odds, normalised to sum 100, one decimal.
"""

import pytest

from matchlens.models import Odds, Probabilities
from matchlens.scoring.odds_comparison import (
    LargestDifference,
    Outcome,
    build_explanation_short,
    build_odds_comparison,
    difference_tier,
    find_largest_difference,
    implied_probability,
)


class TestImpliedProbability:
    """Test 100 / decimal odds."""

    def test_basic(self):
        assert implied_probability(2.0) == 50.0
        assert implied_probability(4.0) == 25.0

    def test_invalid_odds(self):
        assert implied_probability(None) is None
        assert implied_probability(0) is None
        assert implied_probability(-1.5) is None


class TestBuildOddsComparison:
    """Test the full comparison."""

    def test_fair_book(self):
        """2.0 / 4.0 / 4.0 -> 50 / 25 / 25 with zero margin."""
        comparison = build_odds_comparison(
            Probabilities(home_win=58, draw=22, away_win=20),
            Odds(home=2.0, draw=4.0, away=4.0),
        )
        assert comparison.bookmaker_margin == 0.0
        assert comparison.home.market_implied == 50.0
        assert comparison.draw.market_implied == 25.0
        assert comparison.home.difference == 8.0
        assert comparison.draw.difference == -3.0
        assert comparison.away.difference == -5.0
        assert comparison.largest_difference == LargestDifference(Outcome.HOME, 8.0)
        assert comparison.explanation_short == "AI estimates HOME 8.0% higher than market odds suggest."
        assert "notable difference" in comparison.explanation_detailed
        assert "Bookmaker margin" not in comparison.explanation_detailed

    def test_margin_removed_and_reported(self):
        comparison = build_odds_comparison(
            Probabilities(home_win=48, draw=27, away_win=25),
            Odds(home=1.9, draw=3.4, away=3.8),
        )
        assert comparison.bookmaker_margin == 8.4
        total = comparison.home.market_implied + comparison.draw.market_implied + comparison.away.market_implied
        assert total == pytest.approx(100.0, abs=0.2)
        assert "Bookmaker margin is 8.4%" in comparison.explanation_detailed

    def test_lower_direction_on_tie(self):
        """-10 home vs +10 away: equal magnitude keeps HOME."""
        comparison = build_odds_comparison(
            Probabilities(home_win=40, draw=25, away_win=35),
            Odds(home=2.0, draw=4.0, away=4.0),
        )
        assert comparison.away.difference == 10.0
        assert comparison.largest_difference == LargestDifference(Outcome.HOME, -10.0)
        assert comparison.explanation_short == "AI estimates HOME 10.0% lower than market odds suggest."

    def test_two_way_market(self):
        """No draw odds -> draw row is empty, not zero."""
        comparison = build_odds_comparison(
            Probabilities(home_win=55, away_win=45),
            Odds(home=2.0, away=2.0),
        )
        assert comparison.draw.market_implied is None
        assert comparison.draw.difference is None
        assert comparison.home.difference == 5.0

    def test_no_odds(self):
        comparison = build_odds_comparison(Probabilities(home_win=50), Odds())
        assert comparison.bookmaker_margin is None
        assert comparison.largest_difference.outcome == Outcome.NONE
        assert comparison.explanation_short == "AI and market estimates are closely aligned."


class TestLargestDifference:
    """Test selection and tie-breaking."""

    def test_tie_prefers_home_over_draw(self):
        largest = find_largest_difference({Outcome.HOME: 3.0, Outcome.DRAW: -3.0, Outcome.AWAY: 0.0})
        assert largest.outcome == Outcome.HOME

    def test_tie_prefers_draw_over_away(self):
        largest = find_largest_difference({Outcome.HOME: 0.0, Outcome.DRAW: 3.0, Outcome.AWAY: -3.0})
        assert largest.outcome == Outcome.DRAW

    def test_all_zero_is_none(self):
        largest = find_largest_difference({Outcome.HOME: 0.0, Outcome.DRAW: 0.0, Outcome.AWAY: 0.0})
        assert largest == LargestDifference()

    def test_missing_ignored(self):
        largest = find_largest_difference({Outcome.HOME: None, Outcome.DRAW: None, Outcome.AWAY: -1.2})
        assert largest == LargestDifference(Outcome.AWAY, -1.2)


class TestTiers:
    """Test display tiers."""

    def test_tiers(self):
        assert difference_tier(None) == "none"
        assert difference_tier(0.0) == "neutral"
        assert difference_tier(2.9) == "neutral"
        assert difference_tier(-3.0) == "info"
        assert difference_tier(5.9) == "info"
        assert difference_tier(-6.0) == "accent"

    def test_short_explanation_lower(self):
        text = build_explanation_short(LargestDifference(Outcome.DRAW, -4.5))
        assert text == "AI estimates DRAW 4.5% lower than market odds suggest."
