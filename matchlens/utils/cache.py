"""Small in-process caches.

SimpleCache replaces the repetitive dict pattern:
    _cache = {"data": None, "timestamp": 0, "ttl": 60}

Usage:
    _cache = SimpleCache(ttl=300)

    hit, data = _cache.get(params=limit)
    if hit:
        return data
    data = await fetch()
    _cache.set(data, params=limit)

AssetCache is the append-only set of asset URLs (league logos, flags) that
were already loaded once. It never evicts; its lifetime is whoever owns it
(one per process via matchlens.state, or a fresh one per test/session).
"""

import time
from typing import Iterable, Optional


_UNSET = object()


class SimpleCache:
    """TTL-based single-value cache with optional param-aware invalidation."""

    __slots__ = ("ttl", "data", "timestamp", "params")

    def __init__(self, ttl: float):
        self.ttl = ttl
        self.data = None
        self.timestamp: float = 0.0
        self.params = None

    def get(self, *, params=_UNSET) -> tuple[bool, object]:
        """Return (hit, data). Check TTL and optional params match."""
        if self.data is None:
            return False, None
        if time.time() - self.timestamp >= self.ttl:
            return False, None
        if params is not _UNSET and self.params != params:
            return False, None
        return True, self.data

    def set(self, data: object, *, params=None) -> None:
        """Store data with current timestamp."""
        self.data = data
        self.timestamp = time.time()
        if params is not None:
            self.params = params

    def invalidate(self) -> None:
        """Clear cached data."""
        self.data = None
        self.timestamp = 0.0
        self.params = None

    @property
    def age(self) -> "float | None":
        """Seconds since last set, or None if empty."""
        if self.timestamp == 0.0:
            return None
        return time.time() - self.timestamp


class AssetCache:
    """Append-only set of already-loaded asset URLs."""

    __slots__ = ("_urls",)

    def __init__(self, urls: Optional[Iterable[str]] = None):
        self._urls: set[str] = set(u for u in (urls or ()) if u)

    def has(self, url: Optional[str]) -> bool:
        return bool(url) and url in self._urls

    def mark_loaded(self, url: Optional[str]) -> bool:
        """Record a loaded URL. Returns True if it was new."""
        if not url or url in self._urls:
            return False
        self._urls.add(url)
        return True

    def missing(self, urls: Iterable[Optional[str]]) -> list[str]:
        """URLs not loaded yet, de-duplicated, in input order."""
        seen: set[str] = set()
        out = []
        for url in urls:
            if not url or url in self._urls or url in seen:
                continue
            seen.add(url)
            out.append(url)
        return out

    def __len__(self) -> int:
        return len(self._urls)

    def __contains__(self, url: object) -> bool:
        return url in self._urls
