from __future__ import annotations

from collections import Counter
from typing import Any


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    details = [e for e in events if e["type"] == "details"]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top cuisines
    cuisine_counter: Counter[str] = Counter()
    for s in searches:
        for c in s.get("cuisines", []) or []:
            cuisine_counter[c] += 1
    top_cuisines = [{"name": n, "count": c} for n, c in cuisine_counter.most_common(10)]

    mode_usage = dict(Counter(s.get("discovery_mode", "balanced") for s in searches))
    meal_usage = dict(Counter(s["meal"] for s in searches if s.get("meal")))
    pure_veg = sum(1 for s in searches if s.get("pure_veg"))

    # Fan-out health, only counted for searches that went upstream
    upstream = [s for s in searches if not s.get("cache_hit")]
    subqueries = sum(s.get("subqueries", 0) for s in upstream)
    failed = sum(s.get("failed_subqueries", 0) for s in upstream)

    cache_hits = sum(1 for s in searches if s.get("cache_hit"))
    detail_hits = sum(1 for d in details if d.get("cache_hit"))

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "top_cuisines": top_cuisines,
        "discovery_mode_usage": mode_usage,
        "meal_usage": meal_usage,
        "pure_veg_rate": _rate(pure_veg, total),
        "subqueries": {
            "issued": subqueries,
            "failed": failed,
            "failure_rate": _rate(failed, subqueries),
        },
        "cache_stats": {
            "hits": cache_hits,
            "misses": total - cache_hits,
            "hit_rate": _rate(cache_hits, total),
        },
        "details": {
            "total": len(details),
            "cache_hits": detail_hits,
        },
    }
