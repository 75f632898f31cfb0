"""
Place recommendation pipeline.

Responsibilities:
- Accept a city, vibes and exclusion lists from the caller.
- Build a JSON-only prompt for the generation service.
- Validate, coerce and enrich the untrusted reply into EnrichedPlace records.
- Substitute a fixed fallback list when the deployment asks for it.
"""
