"""Form streaks, form rating and notable streaks (most recent result first)."""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from matchlens.config import get_settings
from matchlens.models import FormMatch, FormResult, TeamStreak
from matchlens.utils.rounding import round_int

ResultLike = Union[FormMatch, FormResult, str, None]

# Goal-market streaks are common, so they need a longer run to be notable.
GOAL_STREAK_TYPES = frozenset({"scored", "conceded", "btts", "over25"})
GOAL_STREAK_MIN = 4
RESULT_STREAK_MIN = 3
SIGNIFICANT_STREAK_LIMIT = 4

_STREAK_TONES = {"W": "success", "D": "warning", "L": "danger"}


@dataclass(frozen=True)
class StreakInfo:
    label: str  # e.g. "W3", "-" when empty
    result: Optional[str] = None
    count: int = 0
    tone: str = "muted"


@dataclass(frozen=True)
class FormSummary:
    wins: int
    draws: int
    losses: int
    total: int
    points: int
    rating: int
    form_string: str
    streak: StreakInfo


def _letter(item: ResultLike) -> Optional[str]:
    if item is None:
        return None
    if isinstance(item, FormMatch):
        item = item.result
        if item is None:
            return None
    if isinstance(item, FormResult):
        return item.value
    text = str(item).strip().upper()
    return text or None


def _letters(results: Optional[Iterable[ResultLike]]) -> list[Optional[str]]:
    return [_letter(r) for r in (results or ())]


def get_form_streak(results: Optional[Iterable[ResultLike]]) -> StreakInfo:
    """Leading run of identical results. Unknown results get a '?' prefix."""
    letters = _letters(results)
    if not letters:
        return StreakInfo(label="-")

    first = letters[0]
    count = 0
    for letter in letters:
        if letter != first:
            break
        count += 1

    if first in _STREAK_TONES:
        return StreakInfo(label=f"{first}{count}", result=first, count=count, tone=_STREAK_TONES[first])
    return StreakInfo(label=f"?{count}", result=None, count=count)


def calculate_form_rating(results: Optional[Iterable[ResultLike]], window: Optional[int] = None) -> int:
    """
    Points share of the maximum over the first `window` results, 0-100.

    3 per win, 1 per draw. An empty window rates 0.
    """
    if window is None:
        window = get_settings().FORM_WINDOW
    letters = _letters(results)[:window]
    if not letters:
        return 0
    points = 3 * letters.count("W") + letters.count("D")
    return round_int(100 * points / (3 * len(letters)))


def summarize_form(form_matches: Optional[Iterable[ResultLike]], window: Optional[int] = None) -> FormSummary:
    if window is None:
        window = get_settings().FORM_WINDOW
    letters = _letters(form_matches)
    considered = letters[:window]
    wins = considered.count("W")
    draws = considered.count("D")
    return FormSummary(
        wins=wins,
        draws=draws,
        losses=considered.count("L"),
        total=len(considered),
        points=3 * wins + draws,
        rating=calculate_form_rating(considered, window=window),
        form_string="".join(letter or "?" for letter in considered),
        streak=get_form_streak(letters),
    )


def _leading_run(letters: list[Optional[str]], accepted: set) -> int:
    count = 0
    for letter in letters:
        if letter not in accepted:
            break
        count += 1
    return count


def derive_result_streaks(results: Optional[Iterable[ResultLike]]) -> list[TeamStreak]:
    """win/draw/loss/unbeaten/winless runs from the leading results (non-zero only)."""
    letters = _letters(results)
    runs = (
        ("win", {"W"}),
        ("draw", {"D"}),
        ("loss", {"L"}),
        ("unbeaten", {"W", "D"}),
        ("winless", {"D", "L"}),
    )
    streaks = []
    for kind, accepted in runs:
        count = _leading_run(letters, accepted)
        if count > 0:
            streaks.append(TeamStreak(kind=kind, count=count, context="all"))
    return streaks


def is_significant_streak(streak: TeamStreak) -> bool:
    minimum = GOAL_STREAK_MIN if streak.kind in GOAL_STREAK_TYPES else RESULT_STREAK_MIN
    return streak.count >= minimum


def significant_streaks(
    streaks: Optional[Iterable[TeamStreak]],
    limit: int = SIGNIFICANT_STREAK_LIMIT,
) -> list[TeamStreak]:
    """Notable streaks, longest first (stable for equal counts)."""
    notable = [s for s in (streaks or ()) if is_significant_streak(s)]
    notable.sort(key=lambda s: s.count, reverse=True)
    return notable[:limit]
