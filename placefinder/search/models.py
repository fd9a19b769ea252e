from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..errors import InvalidInput
from .config import DEFAULT_SEARCH_CONFIG, SearchConfig

RADIUS_KM_MIN, RADIUS_KM_MAX = 1.0, 20.0
MAX_RESULTS_MIN, MAX_RESULTS_MAX = 1, 20
PLACE_TYPE = "restaurant"

_TRUTHY = {"1", "true", "yes", "on"}


class DiscoveryMode(str, Enum):
    balanced = "balanced"
    famous = "famous"


class MealTime(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    snack = "snack"
    dinner = "dinner"


class FailureKind(str, Enum):
    transport = "transport"
    http_status = "http_status"
    bad_payload = "bad_payload"
    provider_status = "provider_status"
    timeout = "timeout"


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


# Leading numeric prefix, so "5km" reads as 5 and "abc" as nothing.
_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"[+-]?\d+")


def _parse_float(raw: Any) -> float | None:
    if raw is None:
        return None
    match = _FLOAT_PREFIX.match(str(raw).strip())
    return float(match.group()) if match else None


def _parse_int(raw: Any) -> int | None:
    if raw is None:
        return None
    match = _INT_PREFIX.match(str(raw).strip())
    return int(match.group()) if match else None


def _parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw or "").strip().lower() in _TRUTHY


# ── Request ──────────────────────────────────────────────────────────────


class QuerySpec(BaseModel):
    """One inbound search, normalised. Bounds hold however it was built."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    radius_km: float = 5.0
    max_results: int = 12
    cuisines: tuple[str, ...] = ()
    pure_veg: bool = False
    discovery_mode: DiscoveryMode = DiscoveryMode.balanced
    meal: MealTime | None = None
    open_now: bool = False

    @field_validator("lat", "lng")
    @classmethod
    def _require_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("coordinates must be finite")
        return value

    @field_validator("radius_km")
    @classmethod
    def _clamp_radius(cls, value: float) -> float:
        if math.isnan(value):
            value = DEFAULT_SEARCH_CONFIG.default_radius_km
        return _clamp(value, RADIUS_KM_MIN, RADIUS_KM_MAX)

    @field_validator("max_results")
    @classmethod
    def _clamp_max_results(cls, value: int) -> int:
        return int(_clamp(value, MAX_RESULTS_MIN, MAX_RESULTS_MAX))

    @field_validator("cuisines", mode="before")
    @classmethod
    def _normalise_cuisines(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        return tuple(sorted({str(c).strip() for c in value if str(c).strip()}))

    @property
    def radius_m(self) -> int:
        return round(self.radius_km * 1000)

    @classmethod
    def from_params(
        cls,
        *,
        lat: Any,
        lng: Any,
        radius_km: Any = None,
        max_results: Any = None,
        cuisines: Any = None,
        pure_veg: Any = None,
        discovery_mode: Any = None,
        meal: Any = None,
        open_now: Any = None,
        config: SearchConfig = DEFAULT_SEARCH_CONFIG,
    ) -> QuerySpec:
        """Build a spec from raw transport strings, applying the API defaults."""
        latitude = _parse_float(lat)
        longitude = _parse_float(lng)
        if (
            latitude is None
            or longitude is None
            or not math.isfinite(latitude)
            or not math.isfinite(longitude)
        ):
            raise InvalidInput("lat and lng query params are required")

        # Zero, NaN and unparsable values fall back to the defaults before clamping.
        radius = _parse_float(radius_km)
        if not radius or math.isnan(radius):
            radius = config.default_radius_km
        limit = _parse_int(max_results) or config.default_max_results

        mode = str(discovery_mode or "").strip().lower()
        meal_value = str(meal or "").strip().lower()

        return cls(
            lat=latitude,
            lng=longitude,
            radius_km=radius,
            max_results=limit,
            cuisines=cuisines or (),
            pure_veg=_parse_flag(pure_veg),
            discovery_mode=DiscoveryMode(mode) if mode in DiscoveryMode.__members__ else DiscoveryMode.balanced,
            meal=MealTime(meal_value) if meal_value in MealTime.__members__ else None,
            open_now=_parse_flag(open_now),
        )


# ── Response ─────────────────────────────────────────────────────────────


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Coords(_ApiModel):
    lat: float
    lng: float


class VenueOut(_ApiModel):
    id: str
    name: str = ""
    area: str = ""
    city: str = ""
    coords: Coords | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    price_level: int | None = None
    types: list[str] = Field(default_factory=list)
    open_now: bool | None = None


class SearchResponse(_ApiModel):
    places: list[VenueOut] = Field(default_factory=list)


# ── Internal records ─────────────────────────────────────────────────────


@dataclass
class Venue:
    id: str | None
    name: str = ""
    area: str = ""
    lat: float | None = None
    lng: float | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    price_level: int | None = None
    types: list[str] = field(default_factory=list)
    open_now: bool | None = None
    distance_km: float | None = None
    score: float = 0.0

    @property
    def has_coords(self) -> bool:
        return self.lat is not None and self.lng is not None

    def to_out(self) -> VenueOut:
        return VenueOut(
            id=str(self.id),
            name=self.name,
            area=self.area,
            coords=Coords(lat=self.lat, lng=self.lng) if self.has_coords else None,
            rating=self.rating,
            user_ratings_total=self.user_ratings_total,
            price_level=self.price_level,
            types=list(self.types),
            open_now=self.open_now,
        )


@dataclass(frozen=True)
class SubQuery:
    lat: float
    lng: float
    radius_m: int
    keyword: str | None = None
    open_now: bool = False
    place_type: str = PLACE_TYPE


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one sub-query: either parsed venues or a failure reason."""

    subquery: SubQuery
    venues: list[Venue] | None = None
    failure: FailureKind | None = None
    status: str | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, subquery: SubQuery, venues: list[Venue], status: str | None = None) -> FetchResult:
        return cls(subquery=subquery, venues=venues, status=status)

    @classmethod
    def failed(
        cls,
        subquery: SubQuery,
        failure: FailureKind,
        *,
        status: str | None = None,
        detail: str | None = None,
    ) -> FetchResult:
        return cls(subquery=subquery, failure=failure, status=status, detail=detail)
