from __future__ import annotations

from collections import Counter
from typing import Any


def _top(counter: Counter, n: int = 10) -> list[dict[str, Any]]:
    return [{"name": name, "count": count} for name, count in counter.most_common(n)]


def compute_analytics(
    events: list[dict[str, Any]],
    cache_stats: dict[str, Any] | None = None,
) -> dict[str, Any]:
    by_type = Counter(e["type"] for e in events)

    # Most viewed pages and recommendations, most saved recommendations
    views: Counter[str] = Counter()
    saves: Counter[str] = Counter()
    pages: Counter[str] = Counter()
    for e in events:
        if e["type"] == "page_view":
            pages[e["page"]] += 1
        elif e["type"] == "recommendation_view":
            views[e["recommendation_id"]] += 1
        elif e["type"] == "recommendation_save":
            saves[e["recommendation_id"]] += 1

    # Filter usage rates
    feeds = [e for e in events if e["type"] == "filter_usage"]
    total_feeds = len(feeds)
    filter_counts = {"location": 0, "vibe_tags": 0, "min_trend_score": 0}
    for e in feeds:
        f = e.get("filters") or {}
        if f.get("latitude") is not None and f.get("longitude") is not None:
            filter_counts["location"] += 1
        if f.get("vibe_tags"):
            filter_counts["vibe_tags"] += 1
        if f.get("min_trend_score", 0) > 0:
            filter_counts["min_trend_score"] += 1
    filter_usage = {
        k: round(v / total_feeds * 100, 1) if total_feeds else 0.0
        for k, v in filter_counts.items()
    }

    # Vibe tags chosen during onboarding
    onboarding_vibes: Counter[str] = Counter()
    for e in events:
        if e["type"] == "onboarding_completion":
            for tag in e.get("preferences", []) or []:
                onboarding_vibes[tag] += 1

    upgrades = sum(
        1 for e in events
        if e["type"] == "subscription_upgrade" and e.get("tier") == "premium"
    )

    return {
        "total_events": len(events),
        "events_by_type": dict(by_type),
        "top_viewed": _top(views),
        "top_saved": _top(saves),
        "top_pages": _top(pages),
        "feed_requests": total_feeds,
        "filter_usage": filter_usage,
        "premium_upgrades": upgrades,
        "onboarding_vibes": _top(onboarding_vibes),
        "cache_stats": cache_stats or {},
    }
