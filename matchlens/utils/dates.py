"""Date helpers shared by the scorers and the match browser.

Provider timestamps arrive as ISO strings ("2026-01-17T15:00:00Z") or bare
dates ("2026-01-17"). Anything unparseable is treated as "no data" (None),
never as an error.
"""

import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union

MS_PER_DAY = 86_400_000

DateLike = Union[str, datetime, date, None]


def parse_datetime(value: DateLike) -> Optional[datetime]:
    """
    Parse a provider timestamp into an aware datetime.

    Naive values (including bare dates) are read as UTC, which is how the
    upstream services emit them.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        raw = str(value).strip()
        if not raw:
            return None
        if raw.endswith("Z") or raw.endswith("z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_between(first: datetime, second: datetime) -> int:
    """Whole days between two instants (absolute, floored)."""
    diff_ms = abs((second - first).total_seconds()) * 1000
    return int(math.floor(diff_ms / MS_PER_DAY))


def local_now(now: Optional[datetime] = None) -> datetime:
    """Aware wall-clock now. Naive inputs are taken as process-local time."""
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def _local_midnight(day: date, zone: Optional[tzinfo]) -> datetime:
    # Each midnight resolves its own UTC offset, which differs across DST changes.
    if zone is None:
        return datetime.combine(day, time.min).astimezone()
    return datetime.combine(day, time.min, tzinfo=zone)


def local_day_bounds(now: Optional[datetime] = None) -> tuple[datetime, datetime, datetime]:
    """
    Local calendar midnights (today, tomorrow, day after tomorrow).

    Boundaries follow the wall clock of `now` (its tzinfo), not UTC. Without
    a tzinfo on `now` they follow process-local time, including on DST change
    days where a calendar day is 23 or 25 hours long.
    """
    zone = now.tzinfo if now is not None else None
    today = local_now(now).date()
    return (
        _local_midnight(today, zone),
        _local_midnight(today + timedelta(days=1), zone),
        _local_midnight(today + timedelta(days=2), zone),
    )


def hours_until(value: DateLike, now: Optional[datetime] = None) -> Optional[float]:
    """Hours from now until value (negative once started). None if unparseable."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return (parsed - local_now(now)).total_seconds() / 3600
