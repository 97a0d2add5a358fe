"""
Trending ("hot") matches and heuristic value flags.

Hot score per match (0-10 scale per factor):
    hot = 0.4 * bookmakers + 0.2 * markets + 0.2 * league + 0.1 * derby + 0.1 * proximity

Value flags are the client-side fallback used when no server AI picks exist:
- Sharp vs soft bookmaker de-vigged probabilities (edge in percentage points)
- Otherwise bookmaker odds variance (spread among 3+ books)
- Market anomaly: bookmaker disagreement and heavily skewed markets

Only upcoming matches are ranked. Unparseable kick-off times never qualify.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

import numpy as np

from matchlens.models import BookmakerOdds, MatchData
from matchlens.utils.dates import local_now, parse_datetime
from matchlens.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

# League importance tiers (higher = more important)
LEAGUE_IMPORTANCE: dict[str, int] = {
    # Soccer - top tier
    "soccer_epl": 10,
    "soccer_spain_la_liga": 10,
    "soccer_germany_bundesliga": 9,
    "soccer_italy_serie_a": 9,
    "soccer_france_ligue_one": 8,
    "soccer_uefa_champs_league": 10,
    "soccer_uefa_europa_league": 8,
    "soccer_uefa_europa_conference_league": 6,
    # Soccer - second tier
    "soccer_england_league1": 5,
    "soccer_england_league2": 4,
    "soccer_england_efl_cup": 6,
    "soccer_fa_cup": 7,
    "soccer_netherlands_eredivisie": 6,
    "soccer_portugal_primeira_liga": 6,
    "soccer_brazil_serie_a": 7,
    "soccer_mexico_ligamx": 6,
    "soccer_usa_mls": 6,
    # Basketball
    "basketball_nba": 10,
    "basketball_euroleague": 8,
    # American football
    "americanfootball_nfl": 10,
    "americanfootball_ncaaf": 8,
    # Hockey
    "icehockey_nhl": 10,
    # Tennis
    "tennis_atp_aus_open": 10,
    "tennis_atp_french_open": 10,
    "tennis_atp_us_open": 10,
    "tennis_atp_wimbledon": 10,
    # MMA
    "mma_mixed_martial_arts": 8,
}
DEFAULT_LEAGUE_IMPORTANCE = 5

RIVALRY_PAIRS: tuple[tuple[str, str], ...] = (
    # England
    ("manchester united", "manchester city"),
    ("manchester united", "liverpool"),
    ("liverpool", "everton"),
    ("arsenal", "tottenham"),
    ("chelsea", "tottenham"),
    ("chelsea", "arsenal"),
    # Spain
    ("barcelona", "real madrid"),
    ("atletico madrid", "real madrid"),
    ("sevilla", "real betis"),
    # Italy
    ("inter", "milan"),
    ("juventus", "inter"),
    ("roma", "lazio"),
    # Germany
    ("bayern", "dortmund"),
    # NBA
    ("lakers", "celtics"),
    ("lakers", "clippers"),
    ("warriors", "cavaliers"),
    ("nets", "knicks"),
    # NFL
    ("cowboys", "eagles"),
    ("packers", "bears"),
    ("49ers", "seahawks"),
    ("chiefs", "raiders"),
    ("patriots", "jets"),
    # NHL
    ("rangers", "islanders"),
    ("bruins", "canadiens"),
    ("penguins", "flyers"),
)

HOT_WEIGHTS = {
    "bookmaker": 0.4,
    "market": 0.2,
    "league": 0.2,
    "derby": 0.1,
    "proximity": 0.1,
}

# Sharp books move first and carry low margins; soft books carry extra margin.
SHARP_BOOKS = ("pinnacle", "betfair", "sbobet", "matchbook", "betdaq")
SOFT_BOOKS = ("bet365", "william hill", "ladbrokes", "betway", "unibet", "paddy power")

MIN_EDGE = 3.0
VARIANCE_MIN_BOOKMAKERS = 3
VARIANCE_SPREAD = 0.3
DISAGREEMENT_SPREAD = 0.25
SKEWED_ODDS = 1.25

_OUTCOME_LABELS = {"home": "Home", "draw": "Draw", "away": "Away"}


# =============================================================================
# HOT SCORE
# =============================================================================


@dataclass(frozen=True)
class HotFactors:
    bookmaker_score: float
    market_score: int
    league_score: int
    derby_score: int
    proximity_score: int


@dataclass(frozen=True)
class TrendingMatch:
    match: MatchData
    hot_score: float
    factors: HotFactors

    @property
    def match_id(self) -> str:
        return self.match.match_id


def bookmaker_score(match: MatchData) -> float:
    return min(len(match.bookmakers) / 1.5, 10)


def market_score(match: MatchData) -> int:
    odds = match.odds
    score = 0
    if odds.home and odds.away:
        score += 3  # moneyline / 1X2
    if odds.draw is not None:
        score += 2  # three-way market
    if odds.over and odds.under:
        score += 3
    if odds.over_under_line:
        score += 2
    return min(score, 10)


def league_score(sport_key: str) -> int:
    return LEAGUE_IMPORTANCE.get(sport_key, DEFAULT_LEAGUE_IMPORTANCE)


def detect_derby(home_team: str, away_team: str) -> bool:
    """Known rivalry, or a same-city derby (shared first word longer than 3 chars)."""
    home = (home_team or "").lower()
    away = (away_team or "").lower()

    for team1, team2 in RIVALRY_PAIRS:
        home_matches = team1 in home or team2 in home
        away_matches = team1 in away or team2 in away
        if home_matches and away_matches and (team1 in home) != (team1 in away):
            return True

    home_words = home.split(" ")
    away_words = away.split(" ")
    if len(home_words) > 1 and len(away_words) > 1:
        if home_words[0] == away_words[0] and len(home_words[0]) > 3:
            return True
    return False


def proximity_score(hours_until: Optional[float]) -> int:
    if hours_until is None or hours_until < 0:
        return 0
    if hours_until <= 3:
        return 10
    if hours_until <= 12:
        return 8
    if hours_until <= 24:
        return 6
    if hours_until <= 48:
        return 4
    if hours_until <= 72:
        return 2
    return 1


def calculate_hot_score(match: MatchData, now: Optional[datetime] = None) -> TrendingMatch:
    current = local_now(now)
    kickoff = parse_datetime(match.commence_time)
    hours = (kickoff - current).total_seconds() / 3600 if kickoff is not None else None

    factors = HotFactors(
        bookmaker_score=bookmaker_score(match),
        market_score=market_score(match),
        league_score=league_score(match.sport_key),
        derby_score=10 if detect_derby(match.home_team, match.away_team) else 0,
        proximity_score=proximity_score(hours),
    )
    hot = (
        factors.bookmaker_score * HOT_WEIGHTS["bookmaker"]
        + factors.market_score * HOT_WEIGHTS["market"]
        + factors.league_score * HOT_WEIGHTS["league"]
        + factors.derby_score * HOT_WEIGHTS["derby"]
        + factors.proximity_score * HOT_WEIGHTS["proximity"]
    )
    return TrendingMatch(match=match, hot_score=hot, factors=factors)


def _is_upcoming(match: MatchData, current: datetime, horizon: Optional[datetime] = None) -> bool:
    kickoff = parse_datetime(match.commence_time)
    if kickoff is None or kickoff <= current:
        return False
    return horizon is None or kickoff <= horizon


def get_trending_matches(
    matches: Iterable[MatchData],
    limit: int = 8,
    now: Optional[datetime] = None,
    window_hours: int = 48,
) -> list[TrendingMatch]:
    """Top matches by hot score, kicking off within the next `window_hours`."""
    current = local_now(now)
    horizon = current + timedelta(hours=window_hours)
    scored = [
        calculate_hot_score(m, now=current)
        for m in matches
        if _is_upcoming(m, current, horizon)
    ]
    scored.sort(key=lambda t: t.hot_score, reverse=True)
    return scored[:limit]


def get_trending_matches_by_category(
    matches: Iterable[MatchData],
    sport_keys: Iterable[str],
    limit: int = 8,
    now: Optional[datetime] = None,
) -> list[TrendingMatch]:
    keys = set(sport_keys)
    return get_trending_matches([m for m in matches if m.sport_key in keys], limit=limit, now=now)


def get_match_context(trending: TrendingMatch) -> str:
    """One-line reason a match is trending."""
    f = trending.factors
    if f.derby_score >= 10:
        return "Rivalry match • High market interest"
    if f.proximity_score >= 8:
        return "Starting soon • Market active"
    if f.market_score >= 7:
        return "Multiple markets available"
    if f.bookmaker_score >= 6:
        return "High bookmaker coverage"
    if f.league_score >= 8:
        return "Top-tier fixture"
    return "Market signals detected"


# =============================================================================
# VALUE FLAGS (heuristic fallback)
# =============================================================================


@dataclass(frozen=True)
class ValueBet:
    outcome: Optional[str] = None  # home | draw | away
    edge_percent: float = 0.0
    strength: str = "none"  # strong | moderate | slight | none
    label: str = "No edge detected"


@dataclass(frozen=True)
class MarketAnomaly:
    odds_spread: float = 0.0
    has_disagreement: bool = False
    skewed_market: bool = False


@dataclass(frozen=True)
class ValueFlaggedMatch:
    match: MatchData
    value_score: float
    value_bet: ValueBet
    market_anomaly: MarketAnomaly
    ai_reason: str

    @property
    def match_id(self) -> str:
        return self.match.match_id


def remove_vig(home: float, away: float, draw: Optional[float] = None) -> Optional[dict[str, float]]:
    """
    Proportional de-vig of 1X2 (or two-way) decimal odds, in percent.

    Returns None when home/away odds are missing or non-positive.
    """
    if not home or not away or home <= 0 or away <= 0:
        return None
    raw = {"home": 1 / home, "away": 1 / away}
    if draw and draw > 0:
        raw["draw"] = 1 / draw
    total = sum(raw.values())
    return {outcome: p / total * 100 for outcome, p in raw.items()}


def _priced(bookmakers: Iterable[BookmakerOdds]) -> list[BookmakerOdds]:
    return [b for b in bookmakers if b.home and b.away and b.home > 0 and b.away > 0]


def _books_matching(bookmakers: list[BookmakerOdds], names: tuple[str, ...]) -> list[BookmakerOdds]:
    return [b for b in bookmakers if any(n in b.name.lower() for n in names)]


def _spreads(bookmakers: list[BookmakerOdds]) -> tuple[float, float]:
    home = np.array([b.home for b in bookmakers], dtype=float)
    away = np.array([b.away for b in bookmakers], dtype=float)
    return float(np.ptp(home)), float(np.ptp(away))


def _strength(edge: float) -> str:
    if edge >= 8:
        return "strong"
    if edge >= 5:
        return "moderate"
    return "slight"


def _sharp_soft_edge(books: list[BookmakerOdds]) -> Optional[ValueBet]:
    sharp = _books_matching(books, SHARP_BOOKS)
    soft = _books_matching(books, SOFT_BOOKS)
    if not sharp or not soft:
        return None

    sharp_probs = remove_vig(sharp[0].home, sharp[0].away, sharp[0].draw)
    soft_draws = [b.draw for b in soft if b.draw]
    soft_probs = remove_vig(
        float(np.mean([b.home for b in soft])),
        float(np.mean([b.away for b in soft])),
        float(np.mean(soft_draws)) if soft_draws else None,
    )
    if sharp_probs is None or soft_probs is None:
        return None

    # Positive edge: the sharp market rates the outcome likelier than the soft market prices it.
    edges = [
        ("home", sharp_probs["home"] - soft_probs["home"]),
        ("away", sharp_probs["away"] - soft_probs["away"]),
    ]
    if "draw" in sharp_probs and "draw" in soft_probs:
        edges.append(("draw", sharp_probs["draw"] - soft_probs["draw"]))

    best_outcome, best_edge = edges[0]
    for outcome, edge in edges[1:]:
        if edge > best_edge:
            best_outcome, best_edge = outcome, edge

    if best_edge < MIN_EDGE:
        return None
    return ValueBet(
        outcome=best_outcome,
        edge_percent=round_half_up(best_edge, 1),
        strength=_strength(best_edge),
        label=f"{_OUTCOME_LABELS[best_outcome]} +{round_half_up(best_edge, 1):.1f}% edge",
    )


def _variance_edge(books: list[BookmakerOdds]) -> Optional[ValueBet]:
    if len(books) < VARIANCE_MIN_BOOKMAKERS:
        return None
    home_spread, away_spread = _spreads(books)
    if home_spread <= VARIANCE_SPREAD and away_spread <= VARIANCE_SPREAD:
        return None

    outcome, spread = ("home", home_spread) if home_spread > away_spread else ("away", away_spread)
    edge = spread * 5
    return ValueBet(
        outcome=outcome,
        edge_percent=round_half_up(edge, 1),
        strength="moderate" if edge >= 5 else "slight",
        label=f"{_OUTCOME_LABELS[outcome]} odds variance: {round_half_up(spread, 2):.2f}",
    )


def detect_match_value(match: MatchData) -> ValueBet:
    """Sharp-vs-soft edge first, bookmaker variance second."""
    books = _priced(match.bookmakers)
    return _sharp_soft_edge(books) or _variance_edge(books) or ValueBet()


def analyze_market_anomaly(match: MatchData) -> MarketAnomaly:
    books = _priced(match.bookmakers)
    if len(books) < 2:
        return MarketAnomaly()

    max_spread = max(_spreads(books))
    avg = match.average_odds
    skewed = (avg.home is not None and avg.home < SKEWED_ODDS) or (
        avg.away is not None and avg.away < SKEWED_ODDS
    )
    return MarketAnomaly(
        odds_spread=round_half_up(max_spread, 2),
        has_disagreement=max_spread > DISAGREEMENT_SPREAD,
        skewed_market=skewed,
    )


def calculate_value_score(value_bet: ValueBet, anomaly: MarketAnomaly, bookmaker_count: int) -> float:
    score = {"strong": 40, "moderate": 25, "slight": 15}.get(value_bet.strength, 0)
    score += min(value_bet.edge_percent * 2, 20)
    if anomaly.has_disagreement:
        score += 10
    score += min(bookmaker_count, 10)
    return score


def generate_ai_reason(value_bet: ValueBet, anomaly: MarketAnomaly) -> str:
    """Teaser text. Never exposes the edge itself."""
    if value_bet.strength == "strong":
        return "Strong value signal detected"
    if value_bet.strength == "moderate":
        return "Market mispricing detected"
    if anomaly.has_disagreement:
        return "Bookmaker disagreement detected"
    if value_bet.strength == "slight":
        return "Edge opportunity found"
    return "Value opportunity detected"


def get_value_flagged_matches(
    matches: Iterable[MatchData],
    limit: int = 10,
    now: Optional[datetime] = None,
) -> list[ValueFlaggedMatch]:
    """Upcoming matches with a value signal or bookmaker disagreement, best first."""
    current = local_now(now)
    flagged = []
    for match in matches:
        if not _is_upcoming(match, current):
            continue
        value_bet = detect_match_value(match)
        anomaly = analyze_market_anomaly(match)
        if value_bet.strength == "none" and not anomaly.has_disagreement:
            continue
        flagged.append(
            ValueFlaggedMatch(
                match=match,
                value_score=calculate_value_score(value_bet, anomaly, len(match.bookmakers)),
                value_bet=value_bet,
                market_anomaly=anomaly,
                ai_reason=generate_ai_reason(value_bet, anomaly),
            )
        )

    flagged.sort(key=lambda m: m.value_score, reverse=True)
    logger.debug(f"Value flags: {len(flagged)} candidate(s), limit {limit}")
    return flagged[:limit]
