from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _unique(values: list[str]) -> list[str]:
    """Strip, drop blanks and de-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        value = value.strip()
        if value:
            seen.setdefault(value, None)
    return list(seen)


class UserLocation(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class RecommendationRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    city: str = Field(..., min_length=1, description="City to get recommendations for")
    radius: float | None = Field(default=None, gt=0, description="Search radius in km")
    vibes: list[str] = Field(..., min_length=1, description='Vibe tags, e.g. ["Nature"]')
    visited: list[str] = Field(default_factory=list)
    selected: list[str] = Field(default_factory=list)
    bookmarked: list[str] = Field(default_factory=list)
    user_location: UserLocation | None = Field(default=None, alias="userLocation")

    @field_validator("vibes")
    @classmethod
    def _require_vibes(cls, value: list[str]) -> list[str]:
        vibes = _unique(value)
        if not vibes:
            raise ValueError("at least one non-empty vibe is required")
        return vibes

    @field_validator("visited", "selected", "bookmarked")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        return _unique(value)


class EnrichedPlace(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    distance: str | int | float = "?"
    fare: str | int | float = "?"
    rating: str | int | float = "?"
    latitude: float = 0.0
    longitude: float = 0.0
    coordinates: str
    map_url: str = Field(..., alias="mapUrl")
    distance_from_user: float | None = Field(default=None, alias="distanceFromUser")
