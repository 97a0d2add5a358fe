"""Pydantic models for the JSON shapes served by the collaborator endpoints.

Wire format is camelCase; attributes are snake_case. Every field is optional
or defaulted so that partial payloads still parse: the scorers decide what
"missing" means, the models never reject it. Unknown enum values coerce to
None (UNKNOWN for trends) instead of failing validation.
"""

import base64
import binascii
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ValueFlag(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Trend(str, Enum):
    RISING = "RISING"
    FALLING = "FALLING"
    STABLE = "STABLE"
    UNKNOWN = "UNKNOWN"


class DataQuality(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class FormResult(str, Enum):
    WIN = "W"
    DRAW = "D"
    LOSS = "L"


def _coerce_enum(enum_cls, value, default=None):
    if value is None or isinstance(value, enum_cls):
        return value if value is not None else default
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        return default


class WireModel(BaseModel):
    """Base for camelCase payloads. Immutable once parsed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Match listings
# ---------------------------------------------------------------------------


class Odds(WireModel):
    home: Optional[float] = None
    draw: Optional[float] = None
    away: Optional[float] = None
    over_under_line: Optional[float] = None
    over: Optional[float] = None
    under: Optional[float] = None


class BookmakerOdds(WireModel):
    name: str = ""
    home: Optional[float] = None
    draw: Optional[float] = None
    away: Optional[float] = None


class MatchData(WireModel):
    match_id: str
    sport: str = ""
    sport_key: str = ""
    league: str = ""
    home_team: str = ""
    away_team: str = ""
    commence_time: Optional[str] = None
    source_type: Optional[str] = None
    odds: Odds = Field(default_factory=Odds)
    bookmakers: list[BookmakerOdds] = Field(default_factory=list)
    average_odds: Odds = Field(default_factory=Odds)

    @field_validator("commence_time", mode="before")
    @classmethod
    def _iso_commence_time(cls, v):
        if isinstance(v, datetime):
            return v.isoformat()
        return v


# ---------------------------------------------------------------------------
# Form, stats, streaks
# ---------------------------------------------------------------------------


class FormMatch(WireModel):
    result: Optional[FormResult] = None
    opponent: Optional[str] = None
    score: Optional[str] = None
    date: Optional[str] = None

    @field_validator("result", mode="before")
    @classmethod
    def _result(cls, v):
        return _coerce_enum(FormResult, v)


class TeamStats(WireModel):
    goals_scored: Optional[float] = None
    goals_conceded: Optional[float] = None
    clean_sheets: Optional[float] = None
    avg_goals_scored: Optional[float] = None
    avg_goals_conceded: Optional[float] = None
    wins: Optional[float] = None
    losses: Optional[float] = None
    win_percentage: Optional[float] = None


class TeamStreak(WireModel):
    kind: str = Field(alias="type")
    count: int = 0
    context: Optional[str] = None  # all, home, away or h2h


class H2HSummary(WireModel):
    total_matches: int = 0
    home_wins: int = 0
    away_wins: int = 0
    draws: int = 0


# ---------------------------------------------------------------------------
# Analysis aggregate
# ---------------------------------------------------------------------------


class MatchInfo(WireModel):
    match_id: Optional[str] = None
    sport: str = ""
    league_name: str = ""
    match_date: Optional[str] = None
    home_team: str = ""
    away_team: str = ""
    source_type: Optional[str] = None
    data_quality: Optional[DataQuality] = None

    @field_validator("data_quality", mode="before")
    @classmethod
    def _dq(cls, v):
        return _coerce_enum(DataQuality, v)


class Probabilities(WireModel):
    home_win: Optional[float] = None
    draw: Optional[float] = None
    away_win: Optional[float] = None
    over_under_line: Optional[float] = None
    over: Optional[float] = None
    under: Optional[float] = None


class ValueFlags(WireModel):
    home_win: ValueFlag = ValueFlag.NONE
    draw: ValueFlag = ValueFlag.NONE
    away_win: ValueFlag = ValueFlag.NONE

    @field_validator("home_win", "draw", "away_win", mode="before")
    @classmethod
    def _flag(cls, v):
        return _coerce_enum(ValueFlag, v, ValueFlag.NONE)


class ValueAnalysis(WireModel):
    implied_probabilities: Optional[Probabilities] = None
    value_flags: Optional[ValueFlags] = None
    best_value_side: Optional[str] = None
    value_comment_short: str = ""
    value_comment_detailed: str = ""


class RiskAnalysis(WireModel):
    overall_risk_level: Optional[RiskLevel] = None
    risk_explanation: str = ""
    bankroll_impact: str = ""

    @field_validator("overall_risk_level", mode="before")
    @classmethod
    def _risk(cls, v):
        return _coerce_enum(RiskLevel, v)


class MomentumAndForm(WireModel):
    home_momentum_score: Optional[float] = None
    away_momentum_score: Optional[float] = None
    home_trend: Trend = Trend.UNKNOWN
    away_trend: Trend = Trend.UNKNOWN
    key_form_factors: list[str] = Field(default_factory=list)
    form_data_source: Optional[str] = None
    home_form: list[FormMatch] = Field(default_factory=list)
    away_form: list[FormMatch] = Field(default_factory=list)
    h2h_summary: Optional[H2HSummary] = Field(default=None, alias="h2hSummary")
    home_stats: Optional[TeamStats] = None
    away_stats: Optional[TeamStats] = None
    home_streaks: list[TeamStreak] = Field(default_factory=list)
    away_streaks: list[TeamStreak] = Field(default_factory=list)

    @field_validator("home_trend", "away_trend", mode="before")
    @classmethod
    def _trend(cls, v):
        return _coerce_enum(Trend, v, Trend.UNKNOWN)

    @field_validator("home_form", "away_form", "home_streaks", "away_streaks", "key_form_factors", mode="before")
    @classmethod
    def _none_list(cls, v):
        return v if v is not None else []


class MarketStabilityItem(WireModel):
    stability: Optional[RiskLevel] = None
    confidence: Optional[int] = None
    comment: str = ""

    @field_validator("stability", mode="before")
    @classmethod
    def _stability(cls, v):
        return _coerce_enum(RiskLevel, v)


class MarketStabilityMarkets(WireModel):
    main_1x2: Optional[MarketStabilityItem] = Field(default=None, alias="main_1x2")
    over_under: Optional[MarketStabilityItem] = Field(default=None, alias="over_under")
    btts: Optional[MarketStabilityItem] = None


class MarketStability(WireModel):
    markets: Optional[MarketStabilityMarkets] = None
    safest_market_type: Optional[str] = None
    safest_market_explanation: str = ""


class UpsetPotential(WireModel):
    upset_probability: Optional[float] = None
    upset_comment: str = ""


class TacticalAnalysis(WireModel):
    styles_summary: str = ""
    match_narrative: str = ""
    key_match_factors: list[str] = Field(default_factory=list)
    expert_conclusion_one_liner: str = ""


class AnalysisMeta(WireModel):
    model_version: Optional[str] = None
    analysis_generated_at: Optional[str] = None
    data_sources_used: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class AnalyzeResponse(WireModel):
    success: bool = True
    confidence_score: Optional[int] = None
    match_info: MatchInfo = Field(default_factory=MatchInfo)
    probabilities: Probabilities = Field(default_factory=Probabilities)
    value_analysis: Optional[ValueAnalysis] = None
    risk_analysis: Optional[RiskAnalysis] = None
    momentum_and_form: Optional[MomentumAndForm] = None
    market_stability: Optional[MarketStability] = None
    upset_potential: Optional[UpsetPotential] = None
    tactical_analysis: Optional[TacticalAnalysis] = None
    meta: Optional[AnalysisMeta] = None
    error: Optional[str] = None

    @field_validator("match_info", "probabilities", mode="before")
    @classmethod
    def _none_section(cls, v):
        return v if v is not None else {}


# ---------------------------------------------------------------------------
# AI picks, TTS, share
# ---------------------------------------------------------------------------


class AIPick(WireModel):
    match_id: str
    ai_reason: str = ""
    value_bet_edge: Optional[float] = None
    conviction: Optional[float] = None
    match_name: Optional[str] = None
    sport: Optional[str] = None
    league: Optional[str] = None
    kickoff: Optional[str] = None

    @property
    def rank_score(self) -> float:
        """edge + conviction/10, missing parts count as 0."""
        return (self.value_bet_edge or 0) + (self.conviction or 0) / 10


class AIPicksResponse(WireModel):
    success: bool = False
    ai_picks: list[AIPick] = Field(default_factory=list)
    flagged_match_ids: list[str] = Field(default_factory=list)

    @field_validator("ai_picks", "flagged_match_ids", mode="before")
    @classmethod
    def _none_list(cls, v):
        return v if v is not None else []

    @property
    def has_flagged(self) -> bool:
        return len(self.flagged_match_ids) > 0

    def picks_by_id(self) -> dict[str, AIPick]:
        return {p.match_id: p for p in self.ai_picks}


class TTSResponse(WireModel):
    success: bool = False
    audio_base64: str = ""
    content_type: str = "audio/mpeg"
    error: Optional[str] = None

    def audio_bytes(self) -> bytes:
        """Decoded audio, empty on a malformed payload."""
        if not self.audio_base64:
            return b""
        try:
            return base64.b64decode(self.audio_base64, validate=True)
        except (binascii.Error, ValueError):
            return b""


class ShareResponse(WireModel):
    success: bool = False
    url: Optional[str] = None
    code: Optional[str] = None
    error: Optional[str] = None
