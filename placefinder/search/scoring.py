from __future__ import annotations

import math
from functools import cmp_to_key

from .models import DiscoveryMode, QuerySpec, Venue

EARTH_RADIUS_KM = 6371.0
DISTANCE_SENTINEL_KM = 999.0
DISTANCE_BONUS_CAP_KM = 6.0
SCORE_EPSILON = 1e-9

# (popularity weight, distance bonus weight)
MODE_WEIGHTS: dict[DiscoveryMode, tuple[float, float]] = {
    DiscoveryMode.famous: (1.35, 0.6),
    DiscoveryMode.balanced: (1.0, 1.1),
}


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points, in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def score_venue(
    rating: float | None,
    reviews: int | None,
    distance_km: float | None,
    mode: DiscoveryMode,
) -> float:
    """Blend popularity and proximity according to the discovery mode.

    Popularity is ``rating * ln(1 + reviews)`` so huge review counts are
    dampened; the distance bonus is ``6 - min(6, d)``, floored at zero.
    """
    r = rating or 0.0
    n = max(0, reviews or 0)
    d = DISTANCE_SENTINEL_KM if distance_km is None else distance_km

    popularity = r * math.log1p(n)
    distance_bonus = max(0.0, DISTANCE_BONUS_CAP_KM - min(DISTANCE_BONUS_CAP_KM, d))

    popularity_weight, distance_weight = MODE_WEIGHTS[mode]
    return popularity * popularity_weight + distance_bonus * distance_weight


def score_venues(venues: list[Venue], spec: QuerySpec) -> list[Venue]:
    """Set ``distance_km`` and ``score`` on every venue in place."""
    for venue in venues:
        if venue.has_coords:
            venue.distance_km = haversine_km(spec.lat, spec.lng, venue.lat, venue.lng)
        else:
            venue.distance_km = None
        venue.score = score_venue(
            venue.rating,
            venue.user_ratings_total,
            venue.distance_km,
            spec.discovery_mode,
        )
    return venues


def _compare(a: Venue, b: Venue) -> int:
    if abs(a.score - b.score) >= SCORE_EPSILON:
        return -1 if a.score > b.score else 1
    da = DISTANCE_SENTINEL_KM if a.distance_km is None else a.distance_km
    db = DISTANCE_SENTINEL_KM if b.distance_km is None else b.distance_km
    if da == db:
        return 0
    return -1 if da < db else 1


def rank_venues(venues: list[Venue]) -> list[Venue]:
    """Highest score first; near-equal scores go to the closer venue."""
    return sorted(venues, key=cmp_to_key(_compare))
