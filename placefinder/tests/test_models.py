from __future__ import annotations

import pytest

from placefinder.errors import InvalidInput
from placefinder.search.config import SearchConfig
from placefinder.search.models import DiscoveryMode, MealTime, QuerySpec, Venue


def _spec(**params) -> QuerySpec:
    params.setdefault("lat", "19.2")
    params.setdefault("lng", "72.97")
    return QuerySpec.from_params(**params)


# ── Coordinates ──────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "lat,lng",
    [
        (None, "72.9"), ("19.2", None), ("abc", "72.9"), ("nan", "72.9"), ("19.2", "inf"),
        ("Infinity", "72.9"), ("", ""),
    ],
)
def test_invalid_coordinates_rejected(lat, lng):
    with pytest.raises(InvalidInput):
        QuerySpec.from_params(lat=lat, lng=lng)


def test_direct_construction_rejects_non_finite_coordinates():
    with pytest.raises(ValueError):
        QuerySpec(lat=float("nan"), lng=72.9)


def test_coordinates_read_their_leading_number():
    spec = QuerySpec.from_params(lat="19.2N", lng=" 72.97,")
    assert (spec.lat, spec.lng) == (19.2, 72.97)


# ── Bounds ───────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, 5.0), ("abc", 5.0), ("0", 5.0), ("0.2", 1.0), ("7.5", 7.5), ("50", 20.0), ("-4", 1.0),
        ("Infinity", 20.0), ("inf", 5.0), ("nan", 5.0), ("3km", 3.0), ("12abc", 12.0), (" 2.5e0 ", 2.5),
    ],
)
def test_radius_defaults_and_clamps(raw, expected):
    assert _spec(radius_km=raw).radius_km == expected


@pytest.mark.parametrize(
    "raw,expected",
    [(None, 12), ("abc", 12), ("0", 12), ("5", 5), ("7.9", 7), ("100", 20), ("-3", 1), ("8 places", 8), ("1e3", 1)],
)
def test_max_results_defaults_and_clamps(raw, expected):
    assert _spec(max_results=raw).max_results == expected


@pytest.mark.parametrize("raw", [None, "abc", "0", float("nan")])
def test_radius_falls_back_to_the_configured_default(raw):
    config = SearchConfig(default_radius_km=3.0, default_max_results=4)
    spec = _spec(radius_km=raw, max_results=raw, config=config)
    assert spec.radius_km == 3.0
    assert spec.max_results == 4


def test_bounds_hold_on_direct_construction():
    spec = QuerySpec(lat=0.0, lng=0.0, radius_km=99, max_results=0)
    assert spec.radius_km == 20.0
    assert spec.max_results == 1


def test_radius_in_meters():
    assert _spec(radius_km="2.5").radius_m == 2500


# ── Preferences ──────────────────────────────────────────────────────────


def test_cuisines_are_trimmed_deduplicated_and_sorted():
    a = _spec(cuisines="Seafood, Maharashtrian,,Seafood")
    b = _spec(cuisines="Maharashtrian,Seafood")
    assert a.cuisines == ("Maharashtrian", "Seafood")
    assert a == b


@pytest.mark.parametrize("raw", ["1", "true", "TRUE", "yes", "on"])
def test_truthy_flags(raw):
    spec = _spec(pure_veg=raw, open_now=raw)
    assert spec.pure_veg is True
    assert spec.open_now is True


@pytest.mark.parametrize("raw", [None, "", "0", "false", "nope"])
def test_falsy_flags(raw):
    assert _spec(pure_veg=raw).pure_veg is False


def test_discovery_mode_parsing():
    assert _spec(discovery_mode="FAMOUS").discovery_mode is DiscoveryMode.famous
    assert _spec(discovery_mode="popular").discovery_mode is DiscoveryMode.balanced
    assert _spec().discovery_mode is DiscoveryMode.balanced


def test_meal_parsing():
    assert _spec(meal="Dinner").meal is MealTime.dinner
    assert _spec(meal="brunch").meal is None


def test_spec_is_immutable():
    spec = _spec()
    with pytest.raises(Exception):
        spec.radius_km = 3


# ── Output ───────────────────────────────────────────────────────────────


def test_venue_output_hides_score_and_uses_camel_case():
    venue = Venue(
        id="abc",
        name="Cafe",
        area="Thane West",
        lat=19.2,
        lng=72.97,
        rating=4.3,
        user_ratings_total=120,
        price_level=2,
        types=["restaurant"],
        open_now=True,
        distance_km=0.4,
        score=12.5,
    )
    body = venue.to_out().model_dump(by_alias=True)
    assert "score" not in body
    assert "distanceKm" not in body
    assert body["userRatingsTotal"] == 120
    assert body["priceLevel"] == 2
    assert body["openNow"] is True
    assert body["city"] == ""
    assert body["coords"] == {"lat": 19.2, "lng": 72.97}


def test_venue_output_without_geometry():
    body = Venue(id="x", name="No Geo").to_out().model_dump(by_alias=True)
    assert body["coords"] is None
    assert body["openNow"] is None
