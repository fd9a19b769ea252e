from __future__ import annotations

from typing import Iterable

from .models import FetchResult, Venue


def dedupe_venues(venues: Iterable[Venue]) -> list[Venue]:
    """Keep the first venue seen for each provider id; drop id-less venues."""
    seen: set[str] = set()
    unique: list[Venue] = []
    for venue in venues:
        if not venue.id or venue.id in seen:
            continue
        seen.add(venue.id)
        unique.append(venue)
    return unique


def merge_results(results: Iterable[FetchResult]) -> list[Venue]:
    """Union successful sub-query results in issue order, deduplicated by id."""
    return dedupe_venues(
        venue
        for result in results
        if result.ok and result.venues
        for venue in result.venues
    )
