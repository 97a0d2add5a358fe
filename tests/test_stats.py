"""
Tests for sport-adaptive quick stats.
"""

from matchlens.models import TeamStats
from matchlens.scoring.stats import (
    SPORT_STATS_CONFIG,
    StatKey,
    format_stat_value,
    get_sport_stats_config,
    normalize_sport,
    quick_stats,
)


class TestNormalizeSport:
    """Test free-form sport mapping."""

    def test_soccer_aliases(self):
        assert normalize_sport("Soccer") == "soccer"
        assert normalize_sport("football") == "soccer"
        assert normalize_sport("soccer_epl") == "soccer"

    def test_american_football(self):
        assert normalize_sport("American Football") == "nfl"
        assert normalize_sport("americanfootball_nfl") == "nfl"

    def test_basketball(self):
        assert normalize_sport("basketball_nba") == "nba"
        assert normalize_sport("Basketball") == "basketball"

    def test_other_sports(self):
        assert normalize_sport("icehockey_nhl") == "hockey"
        assert normalize_sport("UFC") == "mma"
        assert normalize_sport("tennis_atp") == "tennis"

    def test_unknown_falls_back(self):
        assert normalize_sport("Cricket") == "default"
        assert normalize_sport(None) == "default"
        assert get_sport_stats_config("Cricket") is SPORT_STATS_CONFIG["default"]


class TestFormatStatValue:
    """Test display formatting."""

    def test_win_rate_fraction_as_percent(self):
        assert format_stat_value(TeamStats(win_percentage=0.625), StatKey.WIN_PERCENTAGE) == "63%"
        assert format_stat_value(TeamStats(avg_goals_scored=0.5), StatKey.AVG_GOALS_SCORED) == "50%"

    def test_average_one_decimal(self):
        assert format_stat_value(TeamStats(avg_goals_scored=1.75), StatKey.AVG_GOALS_SCORED) == "1.8"
        assert format_stat_value(TeamStats(avg_goals_conceded=2.0), StatKey.AVG_GOALS_CONCEDED) == "2.0"

    def test_whole_numbers(self):
        assert format_stat_value(TeamStats(goals_scored=12.0), StatKey.GOALS_SCORED) == "12"
        assert format_stat_value(TeamStats(clean_sheets=2.5), StatKey.CLEAN_SHEETS) == "2.5"

    def test_missing(self):
        assert format_stat_value(None, StatKey.GOALS_SCORED) == "-"
        assert format_stat_value(TeamStats(), StatKey.WINS) == "-"


class TestQuickStats:
    """Test per-sport layouts."""

    def test_soccer_layout(self):
        stats = TeamStats(goals_scored=9, goals_conceded=4, clean_sheets=2)
        assert quick_stats(stats, "soccer") == [("Goals", "9"), ("Conceded", "4"), ("Clean Sheets", "2")]

    def test_nba_layout(self):
        stats = TeamStats(avg_goals_scored=0.6, goals_scored=3, goals_conceded=2)
        assert quick_stats(stats, "basketball_nba") == [("Win %", "60%"), ("Wins", "3"), ("Losses", "2")]

    def test_missing_stats_render_dashes(self):
        assert quick_stats(None, "hockey") == [("Goals", "-"), ("Allowed", "-"), ("Shutouts", "-")]
