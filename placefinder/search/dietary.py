"""
Best-effort vegetarian filter.

This is a heuristic over names, addresses and provider categories. It misses
plenty of vegetarian places and occasionally lets a mixed kitchen through; it
must never be presented as a dietary guarantee.
"""

from __future__ import annotations

from typing import Iterable

from .models import Venue

VEG_NAME_HINTS: tuple[str, ...] = (
    "pure veg",
    "vegetarian",
    "veg only",
    "shakahari",
    "shudh",
    "satvik",
    "sattvik",
    "jain",
    "udupi",
    "udipi",
    "bhojanalaya",
)

VEG_CATEGORY_TYPES: frozenset[str] = frozenset({"vegetarian_restaurant", "vegan_restaurant"})


def is_probably_vegetarian(venue: Venue) -> bool:
    text = f"{venue.name} {venue.area}".lower()
    if any(hint in text for hint in VEG_NAME_HINTS):
        return True
    return any(t.lower() in VEG_CATEGORY_TYPES for t in venue.types)


def filter_vegetarian(venues: Iterable[Venue]) -> list[Venue]:
    return [v for v in venues if is_probably_vegetarian(v)]
