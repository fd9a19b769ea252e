from __future__ import annotations

from placefinder.analytics.aggregator import compute_analytics
from placefinder.analytics.store import MAX_EVENTS, clear_events, get_events, record_event


def _search_event(**overrides) -> dict:
    event = {
        "type": "search",
        "cuisines": ["Thai"],
        "discovery_mode": "balanced",
        "pure_veg": False,
        "meal": None,
        "subqueries": 1,
        "failed_subqueries": 0,
        "response_time_ms": 10.0,
        "cache_hit": False,
    }
    event.update(overrides)
    return event


def test_analytics_empty():
    body = compute_analytics([])
    assert body["total_searches"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["subqueries"]["failure_rate"] == 0.0
    assert body["cache_stats"]["hit_rate"] == 0.0


def test_analytics_summarises_searches():
    events = [
        _search_event(cuisines=["Thai", "Korean"], subqueries=2, failed_subqueries=1, response_time_ms=30.0),
        _search_event(discovery_mode="famous", pure_veg=True, meal="dinner", response_time_ms=20.0),
        _search_event(cache_hit=True, subqueries=0, response_time_ms=1.0),
        {"type": "details", "cache_hit": True},
    ]
    body = compute_analytics(events)

    assert body["total_searches"] == 3
    assert body["avg_response_time_ms"] == 17.0
    assert body["top_cuisines"][0] == {"name": "Thai", "count": 3}
    assert body["discovery_mode_usage"] == {"balanced": 2, "famous": 1}
    assert body["meal_usage"] == {"dinner": 1}
    assert body["pure_veg_rate"] == 33.3
    assert body["subqueries"] == {"issued": 3, "failed": 1, "failure_rate": 33.3}
    assert body["cache_stats"] == {"hits": 1, "misses": 2, "hit_rate": 33.3}
    assert body["details"] == {"total": 1, "cache_hits": 1}


def test_store_records_and_clears():
    clear_events()
    record_event("search", {"cache_hit": False})
    events = get_events()
    assert len(events) == 1
    assert events[0]["type"] == "search"
    assert "timestamp" in events[0]
    clear_events()
    assert get_events() == []


def test_store_is_bounded():
    clear_events()
    for i in range(MAX_EVENTS + 5):
        record_event("search", {"n": i})
    events = get_events()
    assert len(events) == MAX_EVENTS
    assert events[0]["n"] == 5
    clear_events()
