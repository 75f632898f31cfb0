from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..recommendations.models import UserLocation


class TripDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    date: datetime.date
    weekday: str


class TripPlanState(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str
    start_date: datetime.date
    end_date: datetime.date
    days: tuple[TripDay, ...]
    current_day: int | None = None
    current_vibe: str | None = None
    selections: dict[int, tuple[str, ...]] = Field(default_factory=dict)
    visited: tuple[str, ...] = ()
    bookmarked: tuple[str, ...] = ()


class StartTripRequest(BaseModel):
    city: str = Field(..., min_length=1)
    start_date: datetime.date
    end_date: datetime.date


class VibeRequest(BaseModel):
    vibe: str = Field(..., min_length=1)


class PlaceNameRequest(BaseModel):
    name: str = Field(..., min_length=1)


class TripRecommendRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vibe: str | None = None
    radius: float | None = Field(default=None, gt=0)
    user_location: UserLocation | None = Field(default=None, alias="userLocation")


class TripStateResponse(BaseModel):
    trip: TripPlanState
    summary: str
