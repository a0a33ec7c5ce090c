from __future__ import annotations

VIBE_TAGS: list[str] = [
    "chill",
    "lively",
    "upscale",
    "casual",
    "romantic",
    "family-friendly",
    "trendy",
    "nostalgic",
    "artsy",
    "energetic",
    "intimate",
    "social",
    "quiet",
    "loud",
    "outdoor",
    "cozy",
]

VENUE_CATEGORIES: list[str] = [
    "restaurant",
    "bar",
    "cafe",
    "club",
    "music",
    "art",
    "outdoor",
    "fitness",
    "shopping",
    "entertainment",
]

MAX_PREFERENCES = 5


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Lowercase, strip and de-duplicate tags, keeping first-seen order."""
    seen: list[str] = []
    for tag in tags or []:
        t = str(tag).strip().lower()
        if t and t not in seen:
            seen.append(t)
    return seen


def unknown_tags(tags: list[str]) -> list[str]:
    return [t for t in tags if t not in VIBE_TAGS]
