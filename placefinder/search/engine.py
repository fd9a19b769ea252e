from __future__ import annotations

import asyncio
import logging
import time

import httpx

from ..analytics.store import record_event
from ..errors import InternalError, PlacesError, UpstreamStatusError, UpstreamTransportError
from ..provider.config import DEFAULT_PROVIDER_CONFIG, ProviderConfig
from ..provider.google_places import fetch_nearby, require_api_key
from .cache import SEARCH_CACHE, TTLCache, search_cache_key
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .cuisines import expand_keywords
from .dietary import filter_vegetarian
from .merge import merge_results
from .models import FailureKind, FetchResult, QuerySpec, SearchResponse, SubQuery
from .planner import plan_subqueries
from .scoring import rank_venues, score_venues

logger = logging.getLogger(__name__)


async def fan_out(
    client: httpx.AsyncClient,
    subqueries: list[SubQuery],
    provider_config: ProviderConfig = DEFAULT_PROVIDER_CONFIG,
    deadline_seconds: float = DEFAULT_SEARCH_CONFIG.deadline_seconds,
) -> list[FetchResult]:
    """Run all sub-queries concurrently and wait for every one of them.

    A sub-query still running when the deadline passes is cancelled and
    reported as a ``timeout`` failure. Results come back in issue order.
    """
    if not subqueries:
        return []

    tasks = [
        asyncio.create_task(fetch_nearby(client, sq, provider_config))
        for sq in subqueries
    ]
    _, pending = await asyncio.wait(
        tasks, timeout=deadline_seconds if deadline_seconds > 0 else None
    )
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    results: list[FetchResult] = []
    for subquery, task in zip(subqueries, tasks):
        if task in pending:
            logger.warning(
                "Nearby search timed out (keyword=%r) after %.1fs",
                subquery.keyword,
                deadline_seconds,
            )
            results.append(FetchResult.failed(
                subquery,
                FailureKind.timeout,
                detail=f"no response within {deadline_seconds}s",
            ))
        else:
            results.append(task.result())
    return results


def _raise_if_all_failed(results: list[FetchResult]) -> None:
    """Escalate when a broad search has nothing at all to merge."""
    failures = [r for r in results if not r.ok]
    if not results or len(failures) < len(results):
        return
    first = failures[0]
    if first.failure is FailureKind.provider_status:
        raise UpstreamStatusError(
            "Places API status error", status=first.status, details=first.detail
        )
    raise UpstreamTransportError(
        "Places API error", status=first.status, details=first.detail
    )


def _record_search(
    spec: QuerySpec,
    start_time: float,
    *,
    cache_hit: bool,
    results_returned: int,
    total_candidates: int | None = None,
    subqueries: int = 0,
    failed_subqueries: int = 0,
) -> None:
    record_event("search", {
        "cuisines": list(spec.cuisines),
        "discovery_mode": spec.discovery_mode.value,
        "pure_veg": spec.pure_veg,
        "meal": spec.meal.value if spec.meal else None,
        "open_now": spec.open_now,
        "radius_km": spec.radius_km,
        "subqueries": subqueries,
        "failed_subqueries": failed_subqueries,
        "total_candidates": total_candidates,
        "results_returned": results_returned,
        "response_time_ms": round((time.perf_counter() - start_time) * 1000, 1),
        "cache_hit": cache_hit,
    })


async def _search(
    spec: QuerySpec,
    client: httpx.AsyncClient,
    provider_config: ProviderConfig,
    search_config: SearchConfig,
    cache: TTLCache,
    start_time: float,
) -> SearchResponse:
    keywords = expand_keywords(spec)
    subqueries = plan_subqueries(keywords, spec, search_config)

    # --- Cache check ---
    key = search_cache_key(spec, subqueries, search_config.coord_precision)
    cached = cache.get(key)
    if cached is not None:
        logger.debug("Search cache hit for %s", key)
        _record_search(spec, start_time, cache_hit=True, results_returned=len(cached.places))
        return cached

    # --- Fan-out ---
    results = await fan_out(client, subqueries, provider_config, search_config.deadline_seconds)
    if not keywords:
        _raise_if_all_failed(results)

    # --- Merge, score, filter, rank ---
    venues = merge_results(results)
    total_candidates = len(venues)
    score_venues(venues, spec)
    if spec.pure_veg:
        venues = filter_vegetarian(venues)
    top = rank_venues(venues)[: spec.max_results]

    response = SearchResponse(places=[venue.to_out() for venue in top])
    cache.set(key, response)

    _record_search(
        spec,
        start_time,
        cache_hit=False,
        results_returned=len(response.places),
        total_candidates=total_candidates,
        subqueries=len(subqueries),
        failed_subqueries=sum(1 for r in results if not r.ok),
    )
    return response


async def search_venues(
    spec: QuerySpec,
    *,
    client: httpx.AsyncClient,
    provider_config: ProviderConfig = DEFAULT_PROVIDER_CONFIG,
    search_config: SearchConfig = DEFAULT_SEARCH_CONFIG,
    cache: TTLCache = SEARCH_CACHE,
) -> SearchResponse:
    """
    Ranked, deduplicated venues around ``spec``'s origin.

    Steps: expand cuisines, plan sub-queries, serve from cache when possible,
    otherwise fan out, merge, score, filter, sort, truncate and cache.
    Individual sub-query failures only shrink the result; anything else
    unexpected surfaces as :class:`InternalError`.
    """
    start_time = time.perf_counter()
    require_api_key(provider_config)
    try:
        return await _search(spec, client, provider_config, search_config, cache, start_time)
    except PlacesError:
        raise
    except Exception as exc:
        logger.exception("Venue search failed")
        raise InternalError() from exc
