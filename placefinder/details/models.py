from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VenueDetails(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    place_id: str
    name: str | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    google_url: str | None = Field(default=None, description="Canonical Google Maps overview URL")
    website: str | None = None
    address: str | None = None
    opening_hours: dict[str, Any] | None = None
    reviews: list[dict[str, Any]] = Field(default_factory=list)
    cached: bool = False
