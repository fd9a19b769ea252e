from __future__ import annotations

import logging
import math
from typing import Any

import httpx

from ..errors import MissingConfiguration, UpstreamStatusError, UpstreamTransportError
from ..search.models import FailureKind, FetchResult, SubQuery, Venue
from .config import DEFAULT_PROVIDER_CONFIG, ProviderConfig

logger = logging.getLogger(__name__)

OK_STATUSES = {"OK", "ZERO_RESULTS"}

DETAIL_FIELDS = [
    "place_id",
    "name",
    "rating",
    "user_ratings_total",
    "url",
    "website",
    "formatted_address",
    "opening_hours",
    "reviews",
]

_ERROR_BODY_LIMIT = 400


def build_client(config: ProviderConfig = DEFAULT_PROVIDER_CONFIG) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.timeout)


def require_api_key(config: ProviderConfig) -> str:
    if not config.api_key:
        raise MissingConfiguration("Missing GOOGLE_MAPS_API_KEY on server")
    return config.api_key


# ── Raw record parsing ───────────────────────────────────────────────────


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def normalize_rating(rating: Any) -> float | None:
    if rating is None or isinstance(rating, bool):
        return None
    try:
        value = float(rating)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    # Clamp to [0, 5]
    return max(0.0, min(5.0, value))


def normalize_count(count: Any) -> int | None:
    if count is None or isinstance(count, bool):
        return None
    try:
        value = int(count)
    except (TypeError, ValueError, OverflowError):
        return None
    return max(0, value)


def _normalize_coord(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        coord = float(value)
    except (TypeError, ValueError):
        return None
    return coord if math.isfinite(coord) else None


def parse_place(raw: dict[str, Any]) -> Venue:
    """Map one Nearby Search result onto a :class:`Venue`."""
    location = _as_dict(_as_dict(raw.get("geometry")).get("location"))
    lat = _normalize_coord(location.get("lat"))
    lng = _normalize_coord(location.get("lng"))
    if lat is None or lng is None:
        lat = lng = None

    open_now = _as_dict(raw.get("opening_hours")).get("open_now")
    place_id = raw.get("place_id")
    types = raw.get("types") or []

    return Venue(
        id=str(place_id) if place_id else None,
        name=str(raw.get("name") or ""),
        area=str(raw.get("vicinity") or ""),
        lat=lat,
        lng=lng,
        rating=normalize_rating(raw.get("rating")),
        user_ratings_total=normalize_count(raw.get("user_ratings_total")),
        price_level=normalize_count(raw.get("price_level")),
        types=[str(t) for t in types] if isinstance(types, list) else [],
        open_now=open_now if isinstance(open_now, bool) else None,
    )


# ── Nearby Search ────────────────────────────────────────────────────────


def _nearby_params(subquery: SubQuery, api_key: str) -> dict[str, str]:
    params = {
        "location": f"{subquery.lat},{subquery.lng}",
        "radius": str(subquery.radius_m),
        "type": subquery.place_type,
        "key": api_key,
    }
    if subquery.keyword:
        params["keyword"] = subquery.keyword
    if subquery.open_now:
        params["opennow"] = "true"
    return params


def _failed(
    subquery: SubQuery,
    failure: FailureKind,
    *,
    status: str | None = None,
    detail: str | None = None,
) -> FetchResult:
    logger.warning(
        "Nearby search failed (keyword=%r, reason=%s, status=%s): %s",
        subquery.keyword,
        failure.value,
        status,
        detail,
    )
    return FetchResult.failed(subquery, failure, status=status, detail=detail)


async def fetch_nearby(
    client: httpx.AsyncClient,
    subquery: SubQuery,
    config: ProviderConfig = DEFAULT_PROVIDER_CONFIG,
) -> FetchResult:
    """
    Run one sub-query against the Nearby Search endpoint.

    Never raises for upstream trouble: transport errors, non-2xx responses,
    unreadable bodies and provider statuses other than ``OK`` /
    ``ZERO_RESULTS`` all come back as a failed :class:`FetchResult`.
    """
    try:
        response = await client.get(
            config.nearby_url, params=_nearby_params(subquery, config.api_key)
        )
    except httpx.HTTPError as exc:
        return _failed(subquery, FailureKind.transport, detail=str(exc) or type(exc).__name__)

    if not response.is_success:
        return _failed(
            subquery,
            FailureKind.http_status,
            status=str(response.status_code),
            detail=response.text[:_ERROR_BODY_LIMIT],
        )

    try:
        data = response.json()
    except ValueError:
        return _failed(subquery, FailureKind.bad_payload, detail="response body is not JSON")
    if not isinstance(data, dict):
        return _failed(subquery, FailureKind.bad_payload, detail="response body is not an object")

    status = data.get("status")
    if status not in OK_STATUSES:
        return _failed(
            subquery,
            FailureKind.provider_status,
            status=str(status),
            detail=data.get("error_message"),
        )

    results = data.get("results") or []
    if not isinstance(results, list):
        return _failed(
            subquery,
            FailureKind.bad_payload,
            status=str(status),
            detail="results is not a list",
        )
    venues = [parse_place(item) for item in results if isinstance(item, dict)]
    return FetchResult.success(subquery, venues, status=status)


# ── Place Details ────────────────────────────────────────────────────────


async def fetch_details(
    client: httpx.AsyncClient,
    place_id: str,
    config: ProviderConfig = DEFAULT_PROVIDER_CONFIG,
) -> dict[str, Any]:
    """Return the raw ``result`` object of a Place Details call.

    Unlike :func:`fetch_nearby` this raises, since a detail lookup has no
    siblings to fall back on.
    """
    params = {
        "place_id": place_id,
        "fields": ",".join(DETAIL_FIELDS),
        "key": require_api_key(config),
    }
    try:
        response = await client.get(config.details_url, params=params)
    except httpx.HTTPError as exc:
        logger.warning("Details call for %s failed", place_id, exc_info=True)
        raise UpstreamTransportError("Details API error", details=str(exc)) from exc

    if not response.is_success:
        raise UpstreamTransportError(
            "Details API error", details=response.text[:_ERROR_BODY_LIMIT]
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamTransportError(
            "Details API error", details="response body is not JSON"
        ) from exc

    status = data.get("status") if isinstance(data, dict) else None
    if status != "OK":
        raise UpstreamStatusError(
            "Details API status error",
            status=status,
            details=data.get("error_message") if isinstance(data, dict) else None,
        )
    return _as_dict(data.get("result"))
