"""
Configuration for the venue search engine.

Every knob can be overridden through a ``PLACES_*`` environment variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass(frozen=True)
class SearchConfig:
    cache_ttl_seconds: float = _env_float("PLACES_CACHE_TTL_SECONDS", 600)
    details_cache_ttl_seconds: float = _env_float("PLACES_DETAILS_CACHE_TTL_SECONDS", 1800)
    max_subqueries: int = _env_int("PLACES_MAX_SUBQUERIES", 8)
    max_keyword_tokens: int = _env_int("PLACES_MAX_KEYWORD_TOKENS", 8)
    coord_precision: int = _env_int("PLACES_COORD_PRECISION", 3)
    default_radius_km: float = _env_float("PLACES_DEFAULT_RADIUS_KM", 5.0)
    default_max_results: int = _env_int("PLACES_DEFAULT_MAX_RESULTS", 12)
    # Overall budget for one request's fan-out; unfinished sub-queries count as failed.
    deadline_seconds: float = _env_float("PLACES_REQUEST_DEADLINE_SECONDS", 8.0)


DEFAULT_SEARCH_CONFIG = SearchConfig()
