from __future__ import annotations

import logging

from groq import APIConnectionError, APIError, APIStatusError, AsyncGroq

from ..errors import ConfigError, UpstreamEmptyError, UpstreamError
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a local travel guide. "
    "You answer with raw JSON only: no markdown, no code fences, no commentary."
)


async def generate_text(prompt: str, config: LLMConfig = DEFAULT_LLM_CONFIG) -> str:
    """
    Send ``prompt`` to the Groq chat-completions API and return the reply text.

    A single attempt is made; SDK-level retries are disabled.

    Raises ``ConfigError`` when no API key is configured (before any network
    call), ``UpstreamError`` on a non-2xx status or a transport failure and
    ``UpstreamEmptyError`` when the completion carries no text.
    """
    if not config.api_key:
        raise ConfigError("GROQ_API_KEY is not set")

    client = AsyncGroq(api_key=config.api_key, timeout=config.timeout, max_retries=0)
    try:
        response = await client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        )
    except APIStatusError as exc:
        logger.warning("Groq returned HTTP %s", exc.status_code)
        raise UpstreamError(exc.status_code, exc.response.text) from exc
    except APIConnectionError as exc:
        # Also covers APITimeoutError
        logger.warning("Groq request failed: %s", type(exc).__name__)
        raise UpstreamError(None, str(exc)) from exc
    except APIError as exc:
        logger.warning("Groq call failed: %s", type(exc).__name__)
        raise UpstreamError(None, str(exc)) from exc
    finally:
        await client.close()

    choices = response.choices or []
    content = choices[0].message.content if choices else None
    if not content or not content.strip():
        raise UpstreamEmptyError("Groq response contained no completion text")

    logger.debug("Groq completion received (%d chars)", len(content))
    return content
