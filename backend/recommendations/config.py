from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

DEFAULT_MAP_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query={query}"


class CardinalityPolicy(str, Enum):
    exact4 = "exact4"
    at_least6 = "atLeast6"


class MalformedPolicy(str, Enum):
    fail = "fail"
    fallback = "fallback"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RecommendationConfig:
    cardinality_policy: CardinalityPolicy = CardinalityPolicy.at_least6
    on_malformed: MalformedPolicy = MalformedPolicy.fail
    require_user_location: bool = False
    default_radius_km: float = 10.0
    map_search_url: str = DEFAULT_MAP_SEARCH_URL
    fallback_city: str = "Bengaluru"

    @classmethod
    def from_env(cls) -> "RecommendationConfig":
        """Build a config from ``RECOMMEND_*`` variables; bad values fail at import."""
        return cls(
            cardinality_policy=CardinalityPolicy(
                os.getenv("RECOMMEND_CARDINALITY", CardinalityPolicy.at_least6.value)
            ),
            on_malformed=MalformedPolicy(
                os.getenv("RECOMMEND_ON_MALFORMED", MalformedPolicy.fail.value)
            ),
            require_user_location=_env_bool("RECOMMEND_REQUIRE_USER_LOCATION", False),
            fallback_city=os.getenv("RECOMMEND_FALLBACK_CITY", "Bengaluru"),
        )


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig.from_env()
