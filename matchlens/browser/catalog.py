"""Sports and leagues offered by the match browser (provider sport keys)."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class League:
    key: str
    name: str


@dataclass(frozen=True)
class Sport:
    id: str
    name: str
    leagues: tuple[League, ...]

    def has_league(self, league_key: Optional[str]) -> bool:
        return any(league.key == league_key for league in self.leagues)

    @property
    def default_league(self) -> League:
        return self.leagues[0]


SPORTS: tuple[Sport, ...] = (
    Sport(
        "soccer",
        "Soccer",
        (
            League("soccer_epl", "Premier League"),
            League("soccer_spain_la_liga", "La Liga"),
            League("soccer_germany_bundesliga", "Bundesliga"),
            League("soccer_italy_serie_a", "Serie A"),
            League("soccer_france_ligue_one", "Ligue 1"),
            League("soccer_portugal_primeira_liga", "Primeira Liga"),
            League("soccer_netherlands_eredivisie", "Eredivisie"),
            League("soccer_turkey_super_league", "Süper Lig"),
            League("soccer_belgium_first_div", "Jupiler Pro League"),
            League("soccer_spl", "Scottish Premiership"),
            League("soccer_uefa_champs_league", "Champions League"),
            League("soccer_uefa_europa_league", "Europa League"),
        ),
    ),
    Sport(
        "basketball",
        "Basketball",
        (
            League("basketball_nba", "NBA"),
            League("basketball_euroleague", "EuroLeague"),
        ),
    ),
    Sport(
        "americanfootball",
        "American Football",
        (
            League("americanfootball_nfl", "NFL"),
            League("americanfootball_ncaaf", "NCAA Football"),
        ),
    ),
    Sport(
        "hockey",
        "Hockey",
        (League("icehockey_nhl", "NHL"),),
    ),
)

# Tournaments with off-seasons or breaks (empty listings are expected)
SEASONAL_LEAGUES = frozenset({
    "soccer_uefa_champs_league",
    "soccer_uefa_europa_league",
    "soccer_uefa_europa_conference_league",
    "americanfootball_ncaaf",
})

_SPORTS_BY_ID = {sport.id: sport for sport in SPORTS}


def get_sport(sport_id: Optional[str]) -> Sport:
    """Sport by id, first sport when unknown."""
    return _SPORTS_BY_ID.get(sport_id or "", SPORTS[0])


def sport_for_league(league_key: Optional[str]) -> Optional[Sport]:
    for sport in SPORTS:
        if sport.has_league(league_key):
            return sport
    return None


def all_league_keys() -> list[str]:
    return [league.key for sport in SPORTS for league in sport.leagues]


def is_seasonal(league_key: str) -> bool:
    return league_key in SEASONAL_LEAGUES
