from __future__ import annotations

from typing import AsyncIterator

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .details.lookup import get_venue_details
from .details.models import VenueDetails
from .errors import PlacesError
from .provider.config import DEFAULT_PROVIDER_CONFIG, ProviderConfig
from .provider.google_places import build_client, require_api_key
from .search.cache import get_cache_stats
from .search.config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .search.engine import search_venues
from .search.models import QuerySpec, SearchResponse

app = FastAPI(title="Nearby Venue Search API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
)


# ── Dependencies ─────────────────────────────────────────────────────────


def get_provider_config() -> ProviderConfig:
    return DEFAULT_PROVIDER_CONFIG


def get_search_config() -> SearchConfig:
    return DEFAULT_SEARCH_CONFIG


async def get_http_client(
    config: ProviderConfig = Depends(get_provider_config),
) -> AsyncIterator[httpx.AsyncClient]:
    async with build_client(config) as client:
        yield client


@app.exception_handler(PlacesError)
async def places_error_handler(request: Request, exc: PlacesError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/places", response_model=SearchResponse)
async def places(
    lat: str | None = None,
    lng: str | None = None,
    radius_km: str | None = Query(default=None, alias="radiusKm"),
    max_results: str | None = Query(default=None, alias="maxResults"),
    cuisines: str | None = None,
    pure_veg: str | None = Query(default=None, alias="pureVeg"),
    discovery_mode: str | None = Query(default=None, alias="discoveryMode"),
    meal: str | None = None,
    open_now: str | None = Query(default=None, alias="openNow"),
    provider_config: ProviderConfig = Depends(get_provider_config),
    search_config: SearchConfig = Depends(get_search_config),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> SearchResponse:
    require_api_key(provider_config)
    spec = QuerySpec.from_params(
        lat=lat,
        lng=lng,
        radius_km=radius_km,
        max_results=max_results,
        cuisines=cuisines,
        pure_veg=pure_veg,
        discovery_mode=discovery_mode,
        meal=meal,
        open_now=open_now,
        config=search_config,
    )
    return await search_venues(
        spec,
        client=client,
        provider_config=provider_config,
        search_config=search_config,
    )


@app.get("/api/details", response_model=VenueDetails)
async def details(
    place_id: str | None = Query(default=None, alias="placeId"),
    provider_config: ProviderConfig = Depends(get_provider_config),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> VenueDetails:
    return await get_venue_details(place_id, client=client, provider_config=provider_config)


# ── Operational endpoints ────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats() -> dict:
    return get_cache_stats()


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
