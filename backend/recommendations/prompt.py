from __future__ import annotations

from .config import CardinalityPolicy
from .models import RecommendationRequest

PLACE_FIELDS = ("name", "description", "distance", "fare", "rating", "latitude", "longitude")

_CARDINALITY_TEXT = {
    CardinalityPolicy.exact4: "exactly 4",
    CardinalityPolicy.at_least6: "6 to 8",
}


def _join(values: list[str]) -> str:
    return ", ".join(values) if values else "None"


def build_prompt(
    request: RecommendationRequest,
    policy: CardinalityPolicy,
    default_radius_km: float = 10.0,
) -> str:
    """Return the instruction sent to the generation service for ``request``."""
    radius = request.radius if request.radius is not None else default_radius_km
    count = _CARDINALITY_TEXT[policy]

    lines = [
        f"Suggest {count} places to visit in {request.city} "
        f"within {radius:g} km that match these vibes: {_join(request.vibes)}.",
        f"Do NOT suggest places the user has already visited: {_join(request.visited)}.",
        f"Do NOT suggest places the user has already selected: {_join(request.selected)}.",
        f"Prefer places similar to the user's bookmarks: {_join(request.bookmarked)}.",
    ]
    if request.user_location is not None:
        loc = request.user_location
        lines.append(
            f"The user is currently at {loc.lat},{loc.lng}; "
            "estimate each distance from that point."
        )
    lines.extend([
        "",
        f"Respond with ONLY a JSON array of {count} objects, each with exactly "
        f"these fields: {', '.join(PLACE_FIELDS)}.",
        "distance is a short text such as \"3 km\", fare is an approximate entry fee "
        "or \"Free\", rating is out of 5, latitude and longitude are decimal degrees.",
        "Do not wrap the JSON in markdown code fences and do not add any other text.",
    ])
    return "\n".join(lines)
