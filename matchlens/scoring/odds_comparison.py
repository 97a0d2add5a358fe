"""
AI estimate vs market-implied probability comparison.

Market implied probabilities come from decimal odds (100 / odds), are
normalised to sum to 100 (removing the bookmaker margin, same idea as a
proportional de-vig) and rounded to one decimal.

The display tiers (neutral / info / accent) are presentation policy only,
not a statistical test.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from matchlens.models import Odds, Probabilities
from matchlens.utils.rounding import round1, round_half_up

ALIGNED_THRESHOLD = 3.0
NOTABLE_THRESHOLD = 6.0
MARGIN_NOTE_THRESHOLD = 5.0


class Outcome(str, Enum):
    HOME = "HOME"
    DRAW = "DRAW"
    AWAY = "AWAY"
    NONE = "NONE"


# Exact ties on |difference| resolve in this order.
OUTCOME_PRIORITY = (Outcome.HOME, Outcome.DRAW, Outcome.AWAY)


@dataclass(frozen=True)
class OutcomeComparison:
    ai_estimate: Optional[float]
    market_implied: Optional[float]
    difference: Optional[float]


@dataclass(frozen=True)
class LargestDifference:
    outcome: Outcome = Outcome.NONE
    difference: float = 0.0


@dataclass(frozen=True)
class OddsComparison:
    home: OutcomeComparison
    draw: OutcomeComparison
    away: OutcomeComparison
    bookmaker_margin: Optional[float]
    largest_difference: LargestDifference
    explanation_short: str
    explanation_detailed: str

    def by_outcome(self) -> dict[Outcome, OutcomeComparison]:
        return {Outcome.HOME: self.home, Outcome.DRAW: self.draw, Outcome.AWAY: self.away}


def implied_probability(odds: Optional[float]) -> Optional[float]:
    """100 / decimal odds, None for missing or non-positive odds."""
    if odds is None or odds <= 0:
        return None
    return 100.0 / odds


def _difference(ai: Optional[float], market: Optional[float]) -> Optional[float]:
    if ai is None or market is None:
        return None
    return round_half_up(ai - market, 1)


def find_largest_difference(differences: dict[Outcome, Optional[float]]) -> LargestDifference:
    """
    Outcome with the largest absolute difference.

    Strictly greater wins, so an exact tie keeps the earlier outcome in
    OUTCOME_PRIORITY. NONE when every difference is 0 or missing.
    """
    largest = LargestDifference()
    for outcome in OUTCOME_PRIORITY:
        diff = differences.get(outcome)
        if diff is not None and abs(diff) > abs(largest.difference):
            largest = LargestDifference(outcome=outcome, difference=diff)
    return largest


def difference_tier(diff: Optional[float]) -> str:
    if diff is None:
        return "none"
    magnitude = abs(diff)
    if magnitude < ALIGNED_THRESHOLD:
        return "neutral"
    if magnitude < NOTABLE_THRESHOLD:
        return "info"
    return "accent"


def build_explanation_short(largest: LargestDifference) -> str:
    if abs(largest.difference) < ALIGNED_THRESHOLD:
        return "AI and market estimates are closely aligned."
    direction = "higher" if largest.difference > 0 else "lower"
    return (
        f"AI estimates {largest.outcome.value} {abs(largest.difference):.1f}% "
        f"{direction} than market odds suggest."
    )


def build_explanation_detailed(largest: LargestDifference, margin: Optional[float]) -> str:
    parts = ["This shows how our probability estimates compare to what bookmaker odds imply. "]

    if margin is not None and margin > MARGIN_NOTE_THRESHOLD:
        parts.append(
            f"Note: Bookmaker margin is {round_half_up(margin, 1):.1f}%, "
            "meaning odds are adjusted in their favor. "
        )

    magnitude = abs(largest.difference)
    if magnitude < ALIGNED_THRESHOLD:
        parts.append("The estimates are similar, suggesting market pricing aligns with our analysis.")
    elif magnitude < NOTABLE_THRESHOLD:
        parts.append(
            "There is a moderate difference - this could reflect different information or modeling approaches."
        )
    else:
        parts.append("There is a notable difference - consider what factors might explain this gap.")

    parts.append(
        " Remember: probability estimates are not predictions, and past analysis does not guarantee future accuracy."
    )
    return "".join(parts)


def build_odds_comparison(ai: Probabilities, odds: Odds) -> OddsComparison:
    """
    Compare AI probabilities with the market view implied by 1X2 odds.

    Args:
        ai: AI estimates in percent (any may be None)
        odds: Decimal odds (draw may be None for two-way sports)
    """
    implied = {
        Outcome.HOME: implied_probability(odds.home),
        Outcome.DRAW: implied_probability(odds.draw),
        Outcome.AWAY: implied_probability(odds.away),
    }
    total = sum(v for v in implied.values() if v is not None)
    margin = round1(total - 100) if total > 0 else None

    norm_factor = 100 / total if total > 0 else 1
    market = {
        outcome: round1(value * norm_factor) if value is not None else None
        for outcome, value in implied.items()
    }

    estimates = {Outcome.HOME: ai.home_win, Outcome.DRAW: ai.draw, Outcome.AWAY: ai.away_win}
    diffs = {outcome: _difference(estimates[outcome], market[outcome]) for outcome in OUTCOME_PRIORITY}
    largest = find_largest_difference(diffs)

    def _row(outcome: Outcome) -> OutcomeComparison:
        return OutcomeComparison(
            ai_estimate=estimates[outcome],
            market_implied=market[outcome],
            difference=diffs[outcome],
        )

    return OddsComparison(
        home=_row(Outcome.HOME),
        draw=_row(Outcome.DRAW),
        away=_row(Outcome.AWAY),
        bookmaker_margin=margin,
        largest_difference=largest,
        explanation_short=build_explanation_short(largest),
        explanation_detailed=build_explanation_detailed(largest, margin),
    )
