"""
Cuisine expansion.

Turns the handful of tags a user picks into concrete provider keywords.
Umbrella cuisines expand to their regional sub-cuisines; anything not in the
table is passed through verbatim so new tags keep working.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from .models import MealTime, QuerySpec


class CuisineGroup(str, Enum):
    south_indian = "South Indian"
    north_indian = "North Indian"
    maharashtrian = "Maharashtrian"
    street_food = "Street food"
    seafood = "Seafood"
    vegetarian = "Vegetarian"


# The umbrella token always comes first so it survives as a keyword.
CUISINE_GROUPS: dict[CuisineGroup, tuple[str, ...]] = {
    CuisineGroup.south_indian: ("South Indian", "Udupi", "Udipi", "Andhra", "Tamil"),
    CuisineGroup.north_indian: ("North Indian", "Punjabi", "Mughlai"),
    CuisineGroup.maharashtrian: (
        "Maharashtrian",
        "Malvani",
        "Kolhapuri",
        "Puneri",
        "Varhadi",
        "Khandeshi",
    ),
    CuisineGroup.street_food: ("Street food", "Chaat", "Snacks"),
    CuisineGroup.seafood: ("Seafood", "Coastal", "Fish"),
    CuisineGroup.vegetarian: ("Vegetarian", "Pure Veg"),
}

MEAL_KEYWORDS: dict[MealTime, str] = {
    MealTime.breakfast: "breakfast",
    MealTime.lunch: "lunch",
    MealTime.snack: "snacks",
    MealTime.dinner: "dinner",
}

DIET_TOKENS: tuple[str, ...] = ("pure veg", "vegetarian")

_GROUPS_BY_NAME = {group.value.lower(): group for group in CuisineGroup}


def parse_tag(tag: str) -> CuisineGroup | str:
    """Return the known group for *tag*, or the stripped tag itself."""
    cleaned = tag.strip()
    return _GROUPS_BY_NAME.get(cleaned.lower(), cleaned)


def expand_cuisines(tags: Iterable[str]) -> list[str]:
    """Expand cuisine tags into an ordered, duplicate-free keyword list.

    Umbrella groups are expanded first, then literal tags follow, each in
    sorted order. The output only depends on the set of tags given, and
    expanding it again returns the same list.
    """
    groups: set[CuisineGroup] = set()
    literals: set[str] = set()
    for tag in tags:
        if not tag or not tag.strip():
            continue
        parsed = parse_tag(tag)
        if isinstance(parsed, CuisineGroup):
            groups.add(parsed)
        else:
            literals.add(parsed)

    # lowercased keyword -> first spelling seen
    keywords: dict[str, str] = {}
    for group in sorted(groups, key=lambda g: g.value):
        for keyword in CUISINE_GROUPS[group]:
            keywords.setdefault(keyword.lower(), keyword)
    for literal in sorted(literals):
        keywords.setdefault(literal.lower(), literal)
    return list(keywords.values())


def expand_keywords(spec: QuerySpec) -> list[str]:
    """Cuisine keywords for *spec*, plus one meal token when a meal is set."""
    keywords = expand_cuisines(spec.cuisines)
    if spec.meal is not None:
        meal_keyword = MEAL_KEYWORDS[spec.meal]
        if meal_keyword.lower() not in {k.lower() for k in keywords}:
            keywords.append(meal_keyword)
    return keywords
