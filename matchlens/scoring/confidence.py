"""
Confidence scorer for an analysis result.

Combines several reliability signals into one 20-95 score:
- Data quality (API vs manual)
- Form data source
- Probability spread
- Head-to-head sample size
- Market stability agreement
- Overall risk level

Every signal is optional. A missing signal contributes nothing (its delta is
skipped), so a completely empty result scores the 50 baseline.
"""

from dataclasses import dataclass, field
from typing import Optional

from matchlens.config import get_settings
from matchlens.models import AnalyzeResponse, DataQuality, RiskLevel
from matchlens.utils.rounding import format_number

BASELINE = 50
MIN_SCORE = 20
MAX_SCORE = 95

REAL_FORM_SOURCES = ("API_FOOTBALL", "API_SPORTS")
UNAVAILABLE_FORM_SOURCE = "UNAVAILABLE"


@dataclass(frozen=True)
class ConfidenceFactor:
    name: str
    impact: str  # positive | negative | neutral
    detail: str


@dataclass(frozen=True)
class ConfidenceResult:
    score: int
    factors: tuple[ConfidenceFactor, ...] = field(default_factory=tuple)

    @property
    def positive(self) -> list[ConfidenceFactor]:
        return [f for f in self.factors if f.impact == "positive"]

    @property
    def negative(self) -> list[ConfidenceFactor]:
        return [f for f in self.factors if f.impact == "negative"]


@dataclass(frozen=True)
class ConfidenceLevel:
    label: str
    tone: str
    description: str


_LEVELS = (
    (80, ConfidenceLevel("Strong Data", "success", "Strong confidence in this analysis")),
    (65, ConfidenceLevel("Good Data", "accent", "Good confidence, solid data foundation")),
    (50, ConfidenceLevel("Moderate Data", "warning", "Reasonable confidence, some uncertainty")),
    (35, ConfidenceLevel("Limited Data", "caution", "Limited confidence, proceed with caution")),
)
_INCOMPLETE = ConfidenceLevel("Incomplete", "danger", "Low confidence, high uncertainty")


def calculate_confidence_score(result: AnalyzeResponse) -> ConfidenceResult:
    """
    Score how much the analysis can be trusted.

    Args:
        result: Parsed analysis aggregate (any section may be absent)

    Returns:
        ConfidenceResult with score clamped to [20, 95] and the factors applied
    """
    factors: list[ConfidenceFactor] = []
    score = BASELINE

    # Data quality (+/- 15)
    data_quality = result.match_info.data_quality
    if data_quality == DataQuality.HIGH:
        score += 15
        factors.append(ConfidenceFactor("Data Quality", "positive", "High-quality data available"))
    elif data_quality == DataQuality.LOW:
        score -= 15
        factors.append(ConfidenceFactor("Data Quality", "negative", "Limited data available"))
    elif data_quality == DataQuality.MEDIUM:
        factors.append(ConfidenceFactor("Data Quality", "neutral", "Standard data quality"))

    momentum = result.momentum_and_form

    # Form data source (+/- 10)
    form_source = momentum.form_data_source if momentum else None
    if form_source in REAL_FORM_SOURCES:
        score += 10
        factors.append(ConfidenceFactor("Form Data", "positive", "Real-time form data"))
    elif form_source == UNAVAILABLE_FORM_SOURCE:
        score -= 10
        factors.append(ConfidenceFactor("Form Data", "negative", "Form data unavailable"))

    # Probability spread (+10 / -5), only over the probabilities that exist
    probs = result.probabilities
    present = [p for p in (probs.home_win, probs.draw, probs.away_win) if p is not None]
    if present:
        max_prob = max(present)
        if max_prob >= 60:
            score += 10
            factors.append(
                ConfidenceFactor("Clear Favorite", "positive", f"{format_number(max_prob)}% probability detected")
            )
        elif max_prob <= 40:
            score -= 5
            factors.append(ConfidenceFactor("Tight Match", "negative", "No clear favorite"))

    # Head-to-head history (+5)
    h2h = momentum.h2h_summary if momentum else None
    if h2h is not None and h2h.total_matches >= 3:
        score += 5
        factors.append(ConfidenceFactor("H2H History", "positive", f"{h2h.total_matches} previous meetings"))

    # Market stability (+/- 10)
    stabilities = _market_stabilities(result)
    if stabilities:
        high = sum(1 for s in stabilities if s == RiskLevel.HIGH)
        low = sum(1 for s in stabilities if s == RiskLevel.LOW)
        if high >= 2:
            score += 10
            factors.append(ConfidenceFactor("Market Stability", "positive", "Stable betting markets"))
        elif low >= 2:
            score -= 10
            factors.append(ConfidenceFactor("Market Volatility", "negative", "Volatile betting markets"))

    # Overall risk (+/- 5)
    risk = result.risk_analysis.overall_risk_level if result.risk_analysis else None
    if risk == RiskLevel.LOW:
        score += 5
        factors.append(ConfidenceFactor("Risk Level", "positive", "Low overall risk"))
    elif risk == RiskLevel.HIGH:
        score -= 5
        factors.append(ConfidenceFactor("Risk Level", "negative", "High overall risk"))

    score = max(MIN_SCORE, min(MAX_SCORE, score))
    return ConfidenceResult(score=score, factors=tuple(factors))


def _market_stabilities(result: AnalyzeResponse) -> list[RiskLevel]:
    stability = result.market_stability
    if stability is None or stability.markets is None:
        return []
    markets = stability.markets
    items = (markets.main_1x2, markets.over_under, markets.btts)
    return [item.stability for item in items if item is not None and item.stability is not None]


def get_confidence_level(score: int) -> ConfidenceLevel:
    for threshold, level in _LEVELS:
        if score >= threshold:
            return level
    return _INCOMPLETE


def should_display_confidence(score: int, minimum: Optional[int] = None) -> bool:
    """Below the display minimum the meter is hidden, not shown as a warning."""
    if minimum is None:
        minimum = get_settings().CONFIDENCE_DISPLAY_MIN
    return score >= minimum
