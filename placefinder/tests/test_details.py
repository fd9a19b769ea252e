from __future__ import annotations

import asyncio

import httpx
import pytest

from placefinder.details.lookup import get_venue_details, validate_place_id
from placefinder.errors import InvalidInput, UpstreamStatusError
from placefinder.provider.config import ProviderConfig
from placefinder.search.cache import TTLCache

CONFIG = ProviderConfig(api_key="test-key")

DETAILS_RESULT = {
    "place_id": "ChIJ-thai",
    "name": "Thai Orchid",
    "rating": 4.4,
    "user_ratings_total": 812,
    "url": "https://maps.google.com/?cid=123",
    "website": "https://thaiorchid.example",
    "formatted_address": "Ghodbunder Road, Thane, Maharashtra",
    "opening_hours": {"open_now": True, "weekday_text": ["Monday: 11 AM - 11 PM"]},
    "reviews": [{"author_name": f"user{i}", "rating": 5, "text": "Great"} for i in range(8)],
}


def _lookup(handler, place_id: str | None = "ChIJ-thai", cache: TTLCache | None = None):
    cache = cache if cache is not None else TTLCache(ttl_seconds=1800)

    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await get_venue_details(place_id, client=client, provider_config=CONFIG, cache=cache)

    return asyncio.run(main())


@pytest.mark.parametrize("place_id", [None, "", "has spaces", "semi;colon", "x" * 600])
def test_malformed_place_ids_rejected(place_id):
    with pytest.raises(InvalidInput):
        validate_place_id(place_id)


def test_valid_place_id_is_trimmed():
    assert validate_place_id(" ChIJ-abc_123 ") == "ChIJ-abc_123"


def test_details_payload_shape():
    details = _lookup(lambda request: httpx.Response(200, json={"status": "OK", "result": DETAILS_RESULT}))
    body = details.model_dump(by_alias=True)
    assert body["placeId"] == "ChIJ-thai"
    assert body["googleUrl"] == "https://maps.google.com/?cid=123"
    assert body["address"] == "Ghodbunder Road, Thane, Maharashtra"
    assert body["openingHours"]["open_now"] is True
    assert len(body["reviews"]) == 5
    assert body["cached"] is False


def test_details_are_cached_per_place():
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"status": "OK", "result": DETAILS_RESULT})

    cache = TTLCache(ttl_seconds=1800)
    first = _lookup(handler, cache=cache)
    second = _lookup(handler, cache=cache)

    assert len(calls) == 1
    assert first.cached is False
    assert second.cached is True
    assert second.name == first.name


def test_status_errors_are_not_cached():
    cache = TTLCache(ttl_seconds=1800)
    with pytest.raises(UpstreamStatusError):
        _lookup(lambda request: httpx.Response(200, json={"status": "INVALID_REQUEST"}), cache=cache)
    assert len(cache) == 0


def test_garbled_detail_fields_are_dropped():
    garbled = {
        **DETAILS_RESULT,
        "name": 42,
        "rating": "n/a",
        "user_ratings_total": {"count": 3},
        "website": ["https://a.example"],
    }
    details = _lookup(lambda request: httpx.Response(200, json={"status": "OK", "result": garbled}))
    assert details.place_id == "ChIJ-thai"
    assert details.name is None
    assert details.rating is None
    assert details.user_ratings_total is None
    assert details.website is None
    assert details.address == "Ghodbunder Road, Thane, Maharashtra"


def test_detail_rating_is_clamped():
    details = _lookup(lambda request: httpx.Response(
        200, json={"status": "OK", "result": {**DETAILS_RESULT, "rating": 9, "user_ratings_total": -1}}
    ))
    assert details.rating == 5.0
    assert details.user_ratings_total == 0
