from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Callable

from .config import DEFAULT_SEARCH_CONFIG
from .models import QuerySpec, SubQuery


class TTLCache:
    """In-process key/value store whose entries expire after ``ttl_seconds``.

    Safe to share between concurrent requests: every read and write happens
    under one lock, and no lock is held while callers do I/O. Nothing here is
    durable; callers must treat a miss as normal.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_items: int = 5000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl_seconds
        self.max_items = max_items
        self._clock = clock
        self._store: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is not None:
                value, expires_at = entry
                if self._clock() < expires_at:
                    self._hits += 1
                    return value
                del self._store[key]
            self._misses += 1
            return None

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if key not in self._store and len(self._store) >= self.max_items:
                self._evict()
            self._store[key] = (value, self._clock() + self.ttl)

    def _evict(self) -> None:
        now = self._clock()
        expired = [k for k, (_, expires_at) in self._store.items() if expires_at <= now]
        for k in expired:
            del self._store[k]
        overflow = len(self._store) - self.max_items + 1
        if overflow > 0:
            # dicts keep insertion order, so the front holds the oldest writes
            for k in list(self._store)[:overflow]:
                del self._store[k]

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


SEARCH_CACHE = TTLCache(ttl_seconds=DEFAULT_SEARCH_CONFIG.cache_ttl_seconds)
DETAILS_CACHE = TTLCache(ttl_seconds=DEFAULT_SEARCH_CONFIG.details_cache_ttl_seconds)


def make_key(parts: dict) -> str:
    normalized = json.dumps(parts, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def search_cache_key(
    spec: QuerySpec,
    subqueries: list[SubQuery],
    precision: int = DEFAULT_SEARCH_CONFIG.coord_precision,
) -> str:
    """Canonical key for a search: every input that shapes the payload.

    Coordinates are rounded so nearby origins share entries, and the cuisine
    tags are already a sorted tuple on :class:`QuerySpec`.
    """
    return make_key({
        "lat": round(spec.lat, precision),
        "lng": round(spec.lng, precision),
        "radius_km": spec.radius_km,
        "max_results": spec.max_results,
        "cuisines": sorted(spec.cuisines),
        "pure_veg": spec.pure_veg,
        "discovery_mode": spec.discovery_mode.value,
        "meal": spec.meal.value if spec.meal else None,
        "open_now": spec.open_now,
        "keywords": [sq.keyword for sq in subqueries],
    })


def get_cache_stats() -> dict:
    return {
        "search": SEARCH_CACHE.stats(),
        "details": DETAILS_CACHE.stats(),
    }


def clear_cache() -> None:
    SEARCH_CACHE.clear()
    DETAILS_CACHE.clear()
