from __future__ import annotations

import logging

from .config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .cuisines import DIET_TOKENS
from .models import DiscoveryMode, QuerySpec, SubQuery

logger = logging.getLogger(__name__)

FAMOUS_KEYWORD = "famous"
KEYWORD_SUFFIX = "restaurant"
KEYWORD_SEPARATOR = " "


def compose_keyword(tokens: list[str], max_tokens: int) -> str:
    """Join *tokens* into one provider keyword, dropping repeats and extras."""
    seen: set[str] = set()
    kept: list[str] = []
    for token in tokens:
        token = token.strip()
        if not token or token.lower() in seen:
            continue
        seen.add(token.lower())
        kept.append(token)
        if len(kept) >= max_tokens:
            break
    return KEYWORD_SEPARATOR.join(kept)


def _keyword_tokens(keyword: str, spec: QuerySpec) -> list[str]:
    tokens = [keyword]
    if spec.pure_veg:
        tokens.extend(DIET_TOKENS)
    tokens.append(KEYWORD_SUFFIX)
    return tokens


def plan_subqueries(
    keywords: list[str],
    spec: QuerySpec,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
) -> list[SubQuery]:
    """Turn expanded keywords into the provider calls for one request.

    With no keywords a single broad search is issued (plus a "famous" one in
    famous mode). Otherwise one call per keyword, capped at
    ``config.max_subqueries`` in expansion order.
    """

    def _subquery(keyword: str | None) -> SubQuery:
        return SubQuery(
            lat=spec.lat,
            lng=spec.lng,
            radius_m=spec.radius_m,
            keyword=keyword,
            open_now=spec.open_now,
        )

    if not keywords:
        plan = [_subquery(None)]
        if spec.discovery_mode is DiscoveryMode.famous:
            famous = compose_keyword(_keyword_tokens(FAMOUS_KEYWORD, spec), config.max_keyword_tokens)
            plan.append(_subquery(famous))
        return plan

    if len(keywords) > config.max_subqueries:
        logger.debug(
            "Dropping %d keywords beyond the %d sub-query cap",
            len(keywords) - config.max_subqueries,
            config.max_subqueries,
        )

    return [
        _subquery(compose_keyword(_keyword_tokens(k, spec), config.max_keyword_tokens))
        for k in keywords[: config.max_subqueries]
    ]
