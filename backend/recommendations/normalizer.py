"""
Turns the raw text returned by the generation service into EnrichedPlace
records.

The reply is untrusted: it may be fenced in markdown, may not be JSON,
may have the wrong number of entries, and individual fields may be
missing or of the wrong type. Shape problems reject the whole batch;
field problems are coerced to defaults one record at a time.
"""
from __future__ import annotations

import json
import math
import re
from typing import Any
from urllib.parse import quote

from ..errors import InvalidCardinalityError, MalformedResponseError
from .config import DEFAULT_MAP_SEARCH_URL, CardinalityPolicy
from .models import EnrichedPlace, UserLocation

EARTH_RADIUS_KM = 6371.0

_FENCE_OPEN = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```$")


def strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = _FENCE_OPEN.sub("", text, count=1)
        text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def parse_places(text: str) -> Any:
    try:
        return json.loads(strip_code_fence(text))
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError, the int digit limit and deep nesting all land here
        raise MalformedResponseError(f"Reply is not valid JSON: {exc}") from exc


def check_cardinality(value: Any, policy: CardinalityPolicy) -> list[Any]:
    if not isinstance(value, list):
        raise InvalidCardinalityError(
            f"Expected a JSON array, got {type(value).__name__}"
        )
    count = len(value)
    if policy is CardinalityPolicy.exact4 and count != 4:
        raise InvalidCardinalityError(f"Expected exactly 4 places, got {count}")
    if policy is CardinalityPolicy.at_least6 and count < 6:
        raise InvalidCardinalityError(f"Expected at least 6 places, got {count}")
    return value


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _label(value: Any) -> str | int | float:
    # bool is an int subclass but never a meaningful distance/fare/rating
    if isinstance(value, bool):
        return "?"
    if isinstance(value, (int, float)):
        try:
            finite = math.isfinite(value)
        except OverflowError:
            return "?"
        return value if finite else "?"
    if isinstance(value, str) and value.strip():
        return value.strip()
    return "?"


def _coordinate(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def build_map_url(name: str, city: str, template: str) -> str:
    return template.format(query=quote(f"{name}, {city}", safe=""))


def normalize_place(
    raw: Any,
    city: str,
    user_location: UserLocation | None = None,
    map_search_url: str = DEFAULT_MAP_SEARCH_URL,
) -> EnrichedPlace:
    """
    Coerce one untrusted record into an EnrichedPlace.

    Field defaults: name ``"Unknown"``, description ``"No description"``,
    distance/fare/rating ``"?"``, latitude/longitude ``0``. Non-object
    records get every default.
    """
    if not isinstance(raw, dict):
        raw = {}

    name = _text(raw.get("name"), "Unknown")
    latitude = _coordinate(raw.get("latitude"))
    longitude = _coordinate(raw.get("longitude"))

    distance_from_user = None
    if user_location is not None:
        distance_from_user = round(
            haversine_km(user_location.lat, user_location.lng, latitude, longitude), 2,
        )

    return EnrichedPlace(
        name=name,
        description=_text(raw.get("description"), "No description"),
        distance=_label(raw.get("distance")),
        fare=_label(raw.get("fare")),
        rating=_label(raw.get("rating")),
        latitude=latitude,
        longitude=longitude,
        coordinates=f"{latitude},{longitude}",
        map_url=build_map_url(name, city, map_search_url),
        distance_from_user=distance_from_user,
    )


def normalize_response(
    text: str,
    city: str,
    policy: CardinalityPolicy,
    user_location: UserLocation | None = None,
    map_search_url: str = DEFAULT_MAP_SEARCH_URL,
) -> list[EnrichedPlace]:
    """Parse, validate and enrich a reply; upstream order is preserved."""
    records = check_cardinality(parse_places(text), policy)
    return [
        normalize_place(raw, city, user_location, map_search_url)
        for raw in records
    ]
