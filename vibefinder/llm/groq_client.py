from __future__ import annotations

import hashlib
import json
import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Any

from groq import Groq

from ..cache.config import DEFAULT_CACHE_TTL
from ..cache.ttl_cache import TTLCache
from ..geo import jitter
from ..vibes import VIBE_TAGS, normalize_tags
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

DESCRIPTION_SYSTEM_PROMPT = (
    "You are an AI that creates compelling, concise venue descriptions for a "
    "local recommendation app. Your descriptions should be engaging, authentic, "
    "and highlight what makes a place special. Focus on the atmosphere, "
    "experience, and unique aspects that would appeal to users. "
    "Keep descriptions short (1-2 sentences) but impactful."
)

VIBE_SYSTEM_PROMPT = (
    "You are an AI that categorizes venues by their \"vibe\" based on video "
    "content and venue information. Select 2-4 tags that best represent the "
    "atmosphere and experience of the venue. Return only the selected tags as "
    "a comma-separated list, nothing else."
)

MOCK_SYSTEM_PROMPT = (
    "You are an AI that generates realistic mock data for a local recommendation "
    "app. Recommendations should feel authentic and diverse, covering different "
    "types of venues and experiences.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"recommendations": [{"title": "...", "description": "...", '
    '"venue_name": "...", "location": "...", "vibe_tags": ["...", "..."]}]}'
)


def _cache_key(prompt: str, system_prompt: str, temperature: float, max_tokens: int) -> str:
    raw = json.dumps([prompt, system_prompt, temperature, max_tokens])
    return "llm:" + hashlib.sha256(raw.encode()).hexdigest()[:16]


def generate_text(
    prompt: str,
    system_prompt: str = "",
    temperature: float = 0.7,
    max_tokens: int | None = None,
    json_mode: bool = False,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    cache: TTLCache | None = None,
) -> str | None:
    """
    Run one chat completion against Groq.

    Returns the completion text, or ``None`` when the LLM is disabled or the
    call fails for any reason. Successful results are cached when ``cache``
    is given.
    """
    if not config.enabled or not config.api_key:
        return None

    max_tokens = max_tokens or config.max_tokens
    key = _cache_key(prompt, system_prompt, temperature, max_tokens)
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached

    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})

    kwargs: dict[str, Any] = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs,
        )
        content = (response.choices[0].message.content or "").strip()
    except Exception:
        logger.warning("Groq LLM call failed", exc_info=True)
        return None

    if not content:
        return None
    if cache is not None:
        cache.set(key, content, DEFAULT_CACHE_TTL.MEDIUM)
    return content


def _venue_block(venue: dict[str, Any], summary: str) -> str:
    categories = ", ".join(venue.get("categories") or [])
    return (
        f"Venue: {venue.get('name', '')}\n"
        f"Location: {venue.get('address', '')}\n"
        f"Categories: {categories}\n\n"
        f"Video content:\n{summary}"
    )


def generate_recommendation_description(
    venue: dict[str, Any],
    summary: str = "",
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    cache: TTLCache | None = None,
) -> str | None:
    prompt = (
        "Generate a concise, engaging description for a local venue "
        "recommendation based on the following information:\n\n"
        f"{_venue_block(venue, summary)}\n\n"
        "The description should be 1-2 sentences, highlight what makes this "
        "place special, and why it's trending."
    )
    return generate_text(
        prompt, DESCRIPTION_SYSTEM_PROMPT, temperature=0.7, max_tokens=100,
        config=config, cache=cache,
    )


def categorize_venue_vibe(
    venue: dict[str, Any],
    summary: str = "",
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    cache: TTLCache | None = None,
) -> list[str]:
    """Ask the LLM for 2-4 vibe tags. Tags outside the vocabulary are dropped."""
    prompt = (
        "Based on the following information about a venue and video content, "
        'identify the top 2-4 "vibe tags" that best describe this place.\n\n'
        f"{_venue_block(venue, summary)}\n\n"
        f"Choose from these vibe tags:\n{', '.join(VIBE_TAGS)}\n\n"
        "Return only the selected tags as a comma-separated list."
    )
    text = generate_text(
        prompt, VIBE_SYSTEM_PROMPT, temperature=0.3, max_tokens=50,
        config=config, cache=cache,
    )
    if not text:
        return []
    tags = normalize_tags(text.split(","))
    return [t for t in tags if t in VIBE_TAGS][:4]


def generate_mock_recommendations(
    count: int = 10,
    latitude: float = 37.7749,
    longitude: float = -122.4194,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[dict[str, Any]] | None:
    """
    Ask the LLM for ``count`` trending spots and fill in the fields it
    cannot know (coordinates, trend score, media URLs, timestamp).

    Returns ``None`` on any failure so the caller can fall back to the
    random generator. Not cached: every call should produce fresh data.
    """
    prompt = (
        f"Generate {count} mock recommendations for trending local spots near "
        f"latitude {latitude}, longitude {longitude}. For each include a catchy "
        "title, a brief description (1-2 sentences), a venue name, a location "
        f"and 2-4 vibe tags from this list: {', '.join(VIBE_TAGS)}."
    )
    text = generate_text(
        prompt, MOCK_SYSTEM_PROMPT, temperature=0.8, max_tokens=config.max_tokens,
        json_mode=True, config=config,
    )
    if not text:
        return None

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("LLM returned invalid JSON for mock recommendations")
        return None

    items = parsed.get("recommendations") if isinstance(parsed, dict) else parsed
    if not isinstance(items, list):
        return None

    now = datetime.now(timezone.utc)
    results: list[dict[str, Any]] = []
    for index, item in enumerate(items[:count]):
        if not isinstance(item, dict) or not item.get("title"):
            continue
        lat, lng = jitter(latitude, longitude)
        tags = [t for t in normalize_tags(item.get("vibe_tags")) if t in VIBE_TAGS]
        results.append({
            "title": str(item["title"]),
            "description": str(item.get("description", "")),
            "venue_name": item.get("venue_name"),
            "location": item.get("location"),
            "vibe_tags": tags,
            "recommendation_id": f"mock-{index}",
            "venue_id": f"venue-{index}",
            "social_media_url": f"https://example.com/social/{index}",
            "trend_score": random.randint(70, 100),
            "image_url": f"https://picsum.photos/seed/{index}/400/300",
            "video_url": f"https://example.com/video/{index}" if index % 3 == 0 else None,
            "latitude": lat,
            "longitude": lng,
            "timestamp": now - timedelta(seconds=random.random() * 7 * 24 * 3600),
        })
    return results or None
