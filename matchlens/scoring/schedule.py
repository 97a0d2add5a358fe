"""
Rest and schedule analysis for both teams of a fixture.

Derived from the dates of each team's recent form matches:
- Rest days since last game
- Schedule density (games in the trailing 7 / 14 days)
- Back-to-back flag
- Fatigue factor and cross-team rest advantage

Unparseable or missing dates mean "no data", never an error.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from matchlens.models import AnalyzeResponse, FormMatch
from matchlens.utils.dates import DateLike, days_between, local_now, parse_datetime

ADVANTAGE_MIN_DAYS = 2


class Fatigue(str, Enum):
    FRESH = "fresh"
    NORMAL = "normal"
    TIRED = "tired"
    EXHAUSTED = "exhausted"


class RestAdvantage(str, Enum):
    HOME = "home"
    AWAY = "away"
    EVEN = "even"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ScheduleInfo:
    team: str
    rest_days: Optional[int] = None
    last_game_date: Optional[str] = None
    games_last_7_days: int = 0
    games_last_14_days: int = 0
    is_back_to_back: bool = False
    fatigue: Fatigue = Fatigue.NORMAL


@dataclass(frozen=True)
class RestComparison:
    home: ScheduleInfo
    away: ScheduleInfo
    advantage: RestAdvantage
    rest_diff: int = 0

    @property
    def has_data(self) -> bool:
        return self.home.rest_days is not None or self.away.rest_days is not None

    def advantage_label(self) -> Optional[str]:
        """'<team> +Nd rest' for a clear advantage, else None."""
        if self.advantage == RestAdvantage.HOME:
            return f"{self.home.team} +{abs(self.rest_diff)}d rest"
        if self.advantage == RestAdvantage.AWAY:
            return f"{self.away.team} +{abs(self.rest_diff)}d rest"
        return None


@dataclass(frozen=True)
class FatigueDisplay:
    label: str
    tone: str
    description: str


FATIGUE_DISPLAY = {
    Fatigue.FRESH: FatigueDisplay("Well Rested", "success", "5+ days rest - peak recovery"),
    Fatigue.NORMAL: FatigueDisplay("Normal Rest", "info", "3-4 days rest - standard recovery"),
    Fatigue.TIRED: FatigueDisplay("Limited Rest", "warning", "2 days rest - some fatigue expected"),
    Fatigue.EXHAUSTED: FatigueDisplay("Fatigued", "danger", "Back-to-back or heavy schedule"),
}


def classify_fatigue(rest_days: Optional[int], games_last_7_days: int) -> Fatigue:
    """Threshold order matters: 5+ days rest is fresh regardless of density."""
    if rest_days is None:
        return Fatigue.NORMAL
    if rest_days >= 5:
        return Fatigue.FRESH
    if rest_days <= 1 or games_last_7_days >= 4:
        return Fatigue.EXHAUSTED
    if rest_days <= 2 or games_last_7_days >= 3:
        return Fatigue.TIRED
    return Fatigue.NORMAL


def calculate_schedule_info(
    team: str,
    form_matches: Optional[Iterable[FormMatch]],
    match_date: DateLike,
    now: Optional[datetime] = None,
) -> ScheduleInfo:
    """
    Compute rest and density figures for one team.

    Args:
        team: Team display name
        form_matches: Recent results (any order, dates may be missing)
        match_date: Kick-off of the fixture being analysed; falls back to now
        now: Clock override (tests)
    """
    target = parse_datetime(match_date) or local_now(now)

    dated = []
    for m in form_matches or ():
        parsed = parse_datetime(m.date)
        if parsed is not None:
            dated.append((parsed, m))

    if not dated:
        return ScheduleInfo(team=team)

    dated.sort(key=lambda pair: pair[0], reverse=True)
    last_parsed, last_match = dated[0]
    rest_days = days_between(last_parsed, target)

    distances = [days_between(parsed, target) for parsed, _ in dated]
    games_7 = sum(1 for d in distances if d <= 7)
    games_14 = sum(1 for d in distances if d <= 14)

    return ScheduleInfo(
        team=team,
        rest_days=rest_days,
        last_game_date=last_match.date or None,
        games_last_7_days=games_7,
        games_last_14_days=games_14,
        is_back_to_back=rest_days <= 1,
        fatigue=classify_fatigue(rest_days, games_7),
    )


def compare_rest(home: ScheduleInfo, away: ScheduleInfo) -> RestComparison:
    if home.rest_days is None or away.rest_days is None:
        return RestComparison(home=home, away=away, advantage=RestAdvantage.UNKNOWN)

    diff = home.rest_days - away.rest_days
    if diff >= ADVANTAGE_MIN_DAYS:
        advantage = RestAdvantage.HOME
    elif diff <= -ADVANTAGE_MIN_DAYS:
        advantage = RestAdvantage.AWAY
    else:
        advantage = RestAdvantage.EVEN
    return RestComparison(home=home, away=away, advantage=advantage, rest_diff=diff)


def analyze_rest(result: AnalyzeResponse, now: Optional[datetime] = None) -> RestComparison:
    """Schedule info for both sides of an analysis result."""
    info = result.match_info
    momentum = result.momentum_and_form
    home_form = momentum.home_form if momentum else []
    away_form = momentum.away_form if momentum else []

    home = calculate_schedule_info(info.home_team, home_form, info.match_date, now=now)
    away = calculate_schedule_info(info.away_team, away_form, info.match_date, now=now)
    return compare_rest(home, away)
