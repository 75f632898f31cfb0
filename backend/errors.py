"""
Error taxonomy for the recommendation pipeline.

Every error carries two messages: ``message`` holds the full internal
detail and is only ever logged, ``public_message`` is the short text that
may cross the HTTP boundary.
"""
from __future__ import annotations


class RecommendationError(Exception):
    status_code: int = 500
    public_message: str = "Failed to fetch recommendations"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(RecommendationError):
    public_message = "Recommendation service is not configured"


class UpstreamError(RecommendationError):
    def __init__(self, status: int | None, body: str) -> None:
        super().__init__(f"Generation service failed (status={status}): {body}")
        self.status = status
        self.body = body


class UpstreamEmptyError(RecommendationError):
    pass


class MalformedResponseError(RecommendationError):
    public_message = "Invalid response from recommendation service"


class InvalidCardinalityError(RecommendationError):
    public_message = "Invalid response from recommendation service"


class ValidationError(RecommendationError):
    """Bad caller input. The detail describes the caller's own request."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.public_message = message
