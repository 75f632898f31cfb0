from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from ..errors import InvalidCardinalityError, MalformedResponseError, ValidationError
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import generate_text
from .config import DEFAULT_RECOMMENDATION_CONFIG, MalformedPolicy, RecommendationConfig
from .fallback import fallback_places
from .models import EnrichedPlace, RecommendationRequest
from .normalizer import normalize_place, normalize_response
from .prompt import build_prompt

logger = logging.getLogger(__name__)


@dataclass
class RecommendationResult:
    places: list[EnrichedPlace]
    source: str  # "llm" or "fallback"


def validate_request(request: RecommendationRequest, config: RecommendationConfig) -> None:
    if config.require_user_location and request.user_location is None:
        raise ValidationError("userLocation with numeric lat and lng is required")


async def get_recommendations(
    request: RecommendationRequest,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> RecommendationResult:
    """
    Run one request through prompt -> generation -> normalization.

    Errors from the generation client propagate. Parse and cardinality
    errors propagate too unless the deployment runs with
    ``on_malformed=fallback`` and a fallback list exists for the city.
    """
    start_time = time.time()
    validate_request(request, config)

    prompt = build_prompt(request, config.cardinality_policy, config.default_radius_km)
    raw_text = await generate_text(prompt, llm_config)

    try:
        places = normalize_response(
            raw_text,
            request.city,
            config.cardinality_policy,
            request.user_location,
            config.map_search_url,
        )
        source = "llm"
    except (MalformedResponseError, InvalidCardinalityError) as exc:
        logger.warning(
            "Unusable generation output for city=%r: %s; raw=%.500r",
            request.city,
            exc.message,
            raw_text,
        )
        if config.on_malformed is not MalformedPolicy.fallback:
            raise
        fixed = fallback_places(request.city, config.fallback_city, config.cardinality_policy)
        if fixed is None:
            raise
        logger.info("Serving fallback list for city=%r", request.city)
        places = [
            normalize_place(raw, request.city, request.user_location, config.map_search_url)
            for raw in fixed
        ]
        source = "fallback"

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "Recommendations for city=%r vibes=%d: %d places from %s in %sms",
        request.city,
        len(request.vibes),
        len(places),
        source,
        elapsed_ms,
    )
    return RecommendationResult(places=places, source=source)
