"""
Sport-adaptive quick stats.

TeamStats field meaning shifts by sport:
- goals_scored: points / goals / wins depending on sport
- goals_conceded: points allowed / goals against / losses
- clean_sheets: shutouts / finishes
- avg_goals_scored: PPG / avg goals / win rate (0-1)

StatKey -> accessor keeps the lookup explicit instead of getattr by string.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from matchlens.models import TeamStats
from matchlens.utils.rounding import round_half_up, round_int


class StatKey(str, Enum):
    GOALS_SCORED = "goalsScored"
    GOALS_CONCEDED = "goalsConceded"
    CLEAN_SHEETS = "cleanSheets"
    AVG_GOALS_SCORED = "avgGoalsScored"
    AVG_GOALS_CONCEDED = "avgGoalsConceded"
    WINS = "wins"
    LOSSES = "losses"
    WIN_PERCENTAGE = "winPercentage"


STAT_ACCESSORS: dict[StatKey, Callable[[TeamStats], Optional[float]]] = {
    StatKey.GOALS_SCORED: lambda s: s.goals_scored,
    StatKey.GOALS_CONCEDED: lambda s: s.goals_conceded,
    StatKey.CLEAN_SHEETS: lambda s: s.clean_sheets,
    StatKey.AVG_GOALS_SCORED: lambda s: s.avg_goals_scored,
    StatKey.AVG_GOALS_CONCEDED: lambda s: s.avg_goals_conceded,
    StatKey.WINS: lambda s: s.wins,
    StatKey.LOSSES: lambda s: s.losses,
    StatKey.WIN_PERCENTAGE: lambda s: s.win_percentage,
}

_AVERAGE_KEYS = frozenset({StatKey.AVG_GOALS_SCORED, StatKey.AVG_GOALS_CONCEDED})


@dataclass(frozen=True)
class SportStatsConfig:
    primary_stats: tuple[tuple[StatKey, str], ...]
    form_label: str
    scoring_unit: str


_WIN_PCT_LAYOUT = (
    (StatKey.AVG_GOALS_SCORED, "Win %"),
    (StatKey.GOALS_SCORED, "Wins"),
    (StatKey.GOALS_CONCEDED, "Losses"),
)

SPORT_STATS_CONFIG: dict[str, SportStatsConfig] = {
    "soccer": SportStatsConfig(
        (
            (StatKey.GOALS_SCORED, "Goals"),
            (StatKey.GOALS_CONCEDED, "Conceded"),
            (StatKey.CLEAN_SHEETS, "Clean Sheets"),
        ),
        "Recent Form",
        "goals",
    ),
    "basketball": SportStatsConfig(_WIN_PCT_LAYOUT, "Last 5 Games", "points"),
    "nba": SportStatsConfig(_WIN_PCT_LAYOUT, "Last 5 Games", "points"),
    "nfl": SportStatsConfig(
        (
            (StatKey.GOALS_SCORED, "Points"),
            (StatKey.GOALS_CONCEDED, "Allowed"),
            (StatKey.AVG_GOALS_SCORED, "Avg PPG"),
        ),
        "Last 5 Games",
        "points",
    ),
    "hockey": SportStatsConfig(
        (
            (StatKey.GOALS_SCORED, "Goals"),
            (StatKey.GOALS_CONCEDED, "Allowed"),
            (StatKey.CLEAN_SHEETS, "Shutouts"),
        ),
        "Last 5 Games",
        "goals",
    ),
    "mma": SportStatsConfig(
        (
            (StatKey.GOALS_SCORED, "Wins"),
            (StatKey.GOALS_CONCEDED, "Losses"),
            (StatKey.CLEAN_SHEETS, "Finishes"),
        ),
        "Fight History",
        "fights",
    ),
    "tennis": SportStatsConfig(
        (
            (StatKey.GOALS_SCORED, "Wins"),
            (StatKey.AVG_GOALS_SCORED, "Win %"),
        ),
        "Recent Matches",
        "sets",
    ),
    "default": SportStatsConfig(
        (
            (StatKey.GOALS_SCORED, "Scored"),
            (StatKey.GOALS_CONCEDED, "Conceded"),
        ),
        "Recent Form",
        "points",
    ),
}


def normalize_sport(sport: Optional[str]) -> str:
    """Map a free-form sport string onto a SPORT_STATS_CONFIG key."""
    normalized = re.sub(r"[^a-z]", "", (sport or "").lower())
    if "soccer" in normalized or ("football" in normalized and "american" not in normalized):
        return "soccer"
    if "nba" in normalized:
        return "nba"
    if "basketball" in normalized:
        return "basketball"
    if "nfl" in normalized or "american" in normalized:
        return "nfl"
    if "hockey" in normalized or "nhl" in normalized:
        return "hockey"
    if "mma" in normalized or "ufc" in normalized:
        return "mma"
    if "tennis" in normalized:
        return "tennis"
    return "default"


def get_sport_stats_config(sport: Optional[str]) -> SportStatsConfig:
    return SPORT_STATS_CONFIG[normalize_sport(sport)]


def get_stat(stats: Optional[TeamStats], key: StatKey) -> Optional[float]:
    if stats is None:
        return None
    return STAT_ACCESSORS[key](stats)


def format_stat_value(stats: Optional[TeamStats], key: StatKey) -> str:
    """
    Display string for one stat.

    Win rates stored as 0-1 fractions render as percentages; averages above 1
    get one decimal; whole numbers render without decimals.
    """
    value = get_stat(stats, key)
    if value is None:
        return "-"

    if (key == StatKey.WIN_PERCENTAGE or key == StatKey.AVG_GOALS_SCORED) and value <= 1:
        return f"{round_int(value * 100)}%"

    if key in _AVERAGE_KEYS and value > 1:
        return f"{round_half_up(value, 1):.1f}"

    if float(value).is_integer():
        return str(int(value))
    return f"{round_half_up(value, 1):.1f}"


def quick_stats(stats: Optional[TeamStats], sport: Optional[str]) -> list[tuple[str, str]]:
    """(label, formatted value) pairs in the sport's layout order."""
    config = get_sport_stats_config(sport)
    return [(label, format_stat_value(stats, key)) for key, label in config.primary_stats]
