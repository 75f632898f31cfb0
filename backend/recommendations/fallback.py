from __future__ import annotations

from typing import Any

from .config import CardinalityPolicy

# Known places served when the generation service returns unusable output
# and the deployment runs with on_malformed=fallback.
FALLBACK_PLACES: dict[str, list[dict[str, Any]]] = {
    "bengaluru": [
        {
            "name": "Cubbon Park",
            "description": "300-acre green lung in the city centre with shaded walking trails.",
            "distance": "1 km",
            "fare": "Free",
            "rating": 4.6,
            "latitude": 12.9763,
            "longitude": 77.5929,
        },
        {
            "name": "Lalbagh Botanical Garden",
            "description": "Historic botanical garden known for its glass house and flower shows.",
            "distance": "4 km",
            "fare": "₹30",
            "rating": 4.5,
            "latitude": 12.9507,
            "longitude": 77.5848,
        },
        {
            "name": "Bangalore Palace",
            "description": "Tudor-style royal palace with carved wooden interiors.",
            "distance": "5 km",
            "fare": "₹230",
            "rating": 4.2,
            "latitude": 12.9987,
            "longitude": 77.5921,
        },
        {
            "name": "Tipu Sultan's Summer Palace",
            "description": "Two-storey teak palace from 1791 with a small museum.",
            "distance": "5 km",
            "fare": "₹25",
            "rating": 4.1,
            "latitude": 12.9593,
            "longitude": 77.5737,
        },
        {
            "name": "Vidhana Soudha",
            "description": "Neo-Dravidian seat of the state legislature, lit up on weekends.",
            "distance": "2 km",
            "fare": "Free",
            "rating": 4.5,
            "latitude": 12.9796,
            "longitude": 77.5906,
        },
        {
            "name": "ISKCON Temple Bangalore",
            "description": "Hilltop temple complex blending traditional and modern architecture.",
            "distance": "9 km",
            "fare": "Free",
            "rating": 4.6,
            "latitude": 13.0098,
            "longitude": 77.5511,
        },
        {
            "name": "Commercial Street",
            "description": "Busy shopping street for clothes, jewellery and street food.",
            "distance": "3 km",
            "fare": "Free",
            "rating": 4.2,
            "latitude": 12.9822,
            "longitude": 77.6083,
        },
        {
            "name": "Nandi Hills",
            "description": "Hill fortress north of the city, popular for sunrise views.",
            "distance": "60 km",
            "fare": "₹20",
            "rating": 4.4,
            "latitude": 13.3702,
            "longitude": 77.6835,
        },
    ],
}

# Alternate spellings users commonly type
_CITY_ALIASES = {"bangalore": "bengaluru"}


def _city_key(city: str) -> str:
    key = city.strip().lower()
    return _CITY_ALIASES.get(key, key)


def fallback_places(
    city: str,
    fallback_city: str,
    policy: CardinalityPolicy,
) -> list[dict[str, Any]] | None:
    """
    Return the fixed list for ``city`` if it is the configured fallback city.

    The list is trimmed to satisfy ``policy``. ``None`` means no fallback is
    available and the caller should fail instead.
    """
    key = _city_key(city)
    if key != _city_key(fallback_city):
        return None
    places = FALLBACK_PLACES.get(key)
    if not places:
        return None
    if policy is CardinalityPolicy.exact4:
        return places[:4]
    return list(places)
