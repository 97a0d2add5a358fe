"""
Narration and share payloads built from an analysis result.

build_tts_text produces the script sent to the text-to-speech endpoint.
build_share_payload produces the body for the share-link endpoint.
Missing sections are skipped rather than rendered as "None".
"""

from dataclasses import dataclass
from typing import Optional

from matchlens.models import AnalyzeResponse
from matchlens.utils.dates import parse_datetime
from matchlens.utils.rounding import format_number

UPSET_ALERT_THRESHOLD = 30

DISCLAIMER = "Disclaimer: This analysis is for educational purposes only. Always gamble responsibly."

SHARE_DEFAULTS = {
    "league": "Match",
    "verdict": "AI Analysis",
    "risk": "MEDIUM",
    "confidence": 75,
    "sport": "soccer",
}


@dataclass(frozen=True)
class Verdict:
    headline: str
    side: str  # HOME | AWAY | DRAW
    probability: float


def _spoken_date(value: Optional[str]) -> Optional[str]:
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return f"{parsed:%A}, {parsed:%B} {parsed.day}"


def build_tts_text(result: AnalyzeResponse) -> str:
    """Plain-text script for the audio briefing."""
    info = result.match_info
    parts = [f"Analysis for {info.home_team} versus {info.away_team}."]

    if info.league_name:
        parts.append(f"Competition: {info.league_name}.")
    spoken_date = _spoken_date(info.match_date)
    if spoken_date:
        parts.append(f"Match date: {spoken_date}.")

    probs = result.probabilities
    if probs.home_win is not None:
        parts.append(
            f"Win probabilities: {info.home_team} has a {format_number(probs.home_win)}% chance of winning."
        )
    if probs.away_win is not None:
        parts.append(f"{info.away_team} has a {format_number(probs.away_win)}% chance of winning.")
    if probs.draw is not None:
        parts.append(f"The probability of a draw is {format_number(probs.draw)}%.")

    value = result.value_analysis
    if value is not None:
        if value.best_value_side:
            parts.append(f"Best value side: {value.best_value_side}.")
        if value.value_comment_detailed:
            parts.append(value.value_comment_detailed)

    risk = result.risk_analysis
    if risk is not None:
        if risk.overall_risk_level is not None:
            parts.append(f"Risk level: {risk.overall_risk_level.value}.")
        if risk.risk_explanation:
            parts.append(risk.risk_explanation)

    tactical = result.tactical_analysis
    if tactical is not None:
        if tactical.match_narrative:
            parts.append("Match Analysis:")
            parts.append(tactical.match_narrative)
        if tactical.expert_conclusion_one_liner:
            parts.append(f"Expert conclusion: {tactical.expert_conclusion_one_liner}")

    upset = result.upset_potential
    if upset is not None and upset.upset_probability is not None and upset.upset_probability > UPSET_ALERT_THRESHOLD:
        parts.append(f"Upset alert! {upset.upset_comment}".rstrip())

    parts.append(DISCLAIMER)
    return " ".join(parts)


def _edge_strength(diff: float) -> str:
    if diff > 25:
        return "Strong"
    if diff > 15:
        return "Moderate"
    return "Slight"


def build_verdict(result: AnalyzeResponse) -> Verdict:
    """Headline from the 1X2 probabilities (missing values count as 0)."""
    probs = result.probabilities
    info = result.match_info
    home = probs.home_win or 0
    away = probs.away_win or 0
    draw = probs.draw or 0
    top = max(home, away, draw)
    diff = abs(home - away)

    if top == draw and draw > 0:
        return Verdict("Draw Expected", "DRAW", draw)
    if top == home:
        return Verdict(f"{_edge_strength(diff)} {info.home_team} Edge", "HOME", home)
    return Verdict(f"{_edge_strength(diff)} {info.away_team} Edge", "AWAY", away)


def build_share_payload(result: AnalyzeResponse, confidence: Optional[float] = None) -> dict:
    """
    Body for the share-link endpoint (camelCase keys).

    Raises:
        ValueError: if either team name is missing
    """
    info = result.match_info
    if not info.home_team or not info.away_team:
        raise ValueError("homeTeam and awayTeam are required")

    verdict = build_verdict(result)
    if confidence is None:
        confidence = verdict.probability or SHARE_DEFAULTS["confidence"]

    best_value = result.value_analysis.best_value_side if result.value_analysis else None
    risk = result.risk_analysis.overall_risk_level if result.risk_analysis else None

    return {
        "homeTeam": info.home_team,
        "awayTeam": info.away_team,
        "league": info.league_name or SHARE_DEFAULTS["league"],
        "verdict": verdict.headline or SHARE_DEFAULTS["verdict"],
        "risk": risk.value if risk is not None else SHARE_DEFAULTS["risk"],
        "confidence": confidence,
        "value": best_value if best_value and best_value != "NONE" else None,
        "date": info.match_date,
        "sport": info.sport or SHARE_DEFAULTS["sport"],
    }
