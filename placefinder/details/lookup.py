from __future__ import annotations

import logging
import re
import time
from typing import Any

import httpx

from ..analytics.store import record_event
from ..errors import InternalError, InvalidInput, PlacesError
from ..provider.config import DEFAULT_PROVIDER_CONFIG, ProviderConfig
from ..provider.google_places import (
    fetch_details,
    normalize_count,
    normalize_rating,
    require_api_key,
)
from ..search.cache import DETAILS_CACHE, TTLCache
from .models import VenueDetails

logger = logging.getLogger(__name__)

MAX_REVIEWS = 5
_PLACE_ID_RE = re.compile(r"^[A-Za-z0-9_\-]{1,512}$")


def validate_place_id(place_id: str | None) -> str:
    if not place_id:
        raise InvalidInput("placeId is required")
    cleaned = place_id.strip()
    if not _PLACE_ID_RE.match(cleaned):
        raise InvalidInput("placeId is malformed")
    return cleaned


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def parse_details(place_id: str, result: dict[str, Any]) -> VenueDetails:
    reviews = result.get("reviews")
    hours = result.get("opening_hours")
    return VenueDetails(
        place_id=str(result.get("place_id") or place_id),
        name=_text(result.get("name")),
        rating=normalize_rating(result.get("rating")),
        user_ratings_total=normalize_count(result.get("user_ratings_total")),
        google_url=_text(result.get("url")),
        website=_text(result.get("website")),
        address=_text(result.get("formatted_address")),
        opening_hours=hours if isinstance(hours, dict) else None,
        reviews=[r for r in reviews if isinstance(r, dict)][:MAX_REVIEWS] if isinstance(reviews, list) else [],
    )


async def get_venue_details(
    place_id: str | None,
    *,
    client: httpx.AsyncClient,
    provider_config: ProviderConfig = DEFAULT_PROVIDER_CONFIG,
    cache: TTLCache = DETAILS_CACHE,
) -> VenueDetails:
    """Extended metadata and up to five reviews for one venue, cached per id."""
    start_time = time.perf_counter()
    require_api_key(provider_config)
    key = validate_place_id(place_id)

    cached = cache.get(key)
    if cached is not None:
        record_event("details", {"place_id": key, "cache_hit": True})
        return cached.model_copy(update={"cached": True})

    try:
        details = parse_details(key, await fetch_details(client, key, provider_config))
    except PlacesError:
        raise
    except Exception as exc:
        logger.exception("Details lookup for %s failed", key)
        raise InternalError() from exc

    cache.set(key, details)
    record_event("details", {
        "place_id": key,
        "cache_hit": False,
        "response_time_ms": round((time.perf_counter() - start_time) * 1000, 1),
    })
    return details
