from __future__ import annotations

import datetime

from .models import TripDay, TripPlanState

MAX_TRIP_DAYS = 30

VIBES = [
    "Historic",
    "Foodie",
    "Beach",
    "Nature",
    "Art & Culture",
    "Shopping",
    "Nightlife",
    "Wellness",
]


class TripPlanError(ValueError):
    pass


def start_trip(city: str, start: datetime.date, end: datetime.date) -> TripPlanState:
    """Create a fresh trip with one day card per date, numbered from 1."""
    city = city.strip()
    if not city:
        raise TripPlanError("City is required")
    if start > end:
        raise TripPlanError("Start date must not be after end date")
    length = (end - start).days + 1
    if length > MAX_TRIP_DAYS:
        raise TripPlanError(f"Trips are limited to {MAX_TRIP_DAYS} days")

    days = tuple(
        TripDay(
            number=offset + 1,
            date=start + datetime.timedelta(days=offset),
            weekday=(start + datetime.timedelta(days=offset)).strftime("%A"),
        )
        for offset in range(length)
    )
    return TripPlanState(city=city, start_date=start, end_date=end, days=days)


def _require_day(state: TripPlanState) -> int:
    if state.current_day is None:
        raise TripPlanError("Select a day first")
    return state.current_day


def select_day(state: TripPlanState, day_number: int) -> TripPlanState:
    if not 1 <= day_number <= len(state.days):
        raise TripPlanError(f"Day {day_number} is not part of this trip")
    return state.model_copy(update={"current_day": day_number, "current_vibe": None})


def choose_vibe(state: TripPlanState, vibe: str) -> TripPlanState:
    _require_day(state)
    vibe = vibe.strip()
    if not vibe:
        raise TripPlanError("Vibe is required")
    return state.model_copy(update={"current_vibe": vibe})


def select_place(state: TripPlanState, name: str) -> TripPlanState:
    """Save ``name`` for the current day and mark it visited."""
    day = _require_day(state)
    name = name.strip()
    if not name:
        raise TripPlanError("Place name is required")

    saved = state.selections.get(day, ())
    if name in saved:
        return state
    selections = dict(state.selections)
    selections[day] = saved + (name,)
    visited = state.visited if name in state.visited else state.visited + (name,)
    return state.model_copy(update={"selections": selections, "visited": visited})


def toggle_bookmark(state: TripPlanState, name: str) -> TripPlanState:
    name = name.strip()
    if not name:
        raise TripPlanError("Place name is required")
    if name in state.bookmarked:
        bookmarked = tuple(b for b in state.bookmarked if b != name)
    else:
        bookmarked = state.bookmarked + (name,)
    return state.model_copy(update={"bookmarked": bookmarked})


def exclusions(state: TripPlanState) -> tuple[list[str], list[str], list[str]]:
    """Return (visited, selected for the current day, bookmarked)."""
    selected = state.selections.get(state.current_day, ()) if state.current_day else ()
    return list(state.visited), list(selected), list(state.bookmarked)


def saved_summary(state: TripPlanState) -> str:
    if state.current_day is None:
        return "No day selected"
    count = len(state.selections.get(state.current_day, ()))
    if count > 0:
        return f"Saved for Day {state.current_day}: {count} place(s)"
    return "No places saved yet"
