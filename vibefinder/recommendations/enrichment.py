from __future__ import annotations

from typing import Any

from ..cache.ttl_cache import TTLCache
from ..llm.config import LLMConfig
from ..llm.groq_client import categorize_venue_vibe, generate_recommendation_description
from ..venues.models import Venue


def enrich_with_llm(
    data: dict[str, Any],
    venue: Venue | None,
    config: LLMConfig,
    cache: TTLCache,
) -> dict[str, Any]:
    """
    Fill in a missing description and missing vibe tags from the LLM.

    Fields the caller supplied are never overwritten. When the LLM is
    disabled or fails, ``data`` comes back unchanged.
    """
    if data.get("description") and data.get("vibe_tags"):
        return data

    venue_info = {
        "name": venue.name if venue else data.get("venue_name") or data.get("title", ""),
        "address": venue.address if venue else data.get("location") or "",
        "categories": venue.categories if venue else [],
    }
    enriched = dict(data)

    if not enriched.get("description"):
        description = generate_recommendation_description(venue_info, config=config, cache=cache)
        if description:
            enriched["description"] = description

    if not enriched.get("vibe_tags"):
        tags = categorize_venue_vibe(venue_info, config=config, cache=cache)
        if tags:
            enriched["vibe_tags"] = tags

    return enriched
