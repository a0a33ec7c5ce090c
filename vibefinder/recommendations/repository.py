from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from ..cache.config import DEFAULT_CACHE_TTL, CacheTTL
from ..cache.ttl_cache import TTLCache
from ..geo import jitter, within_radius
from ..store.base import TableStore
from ..users.models import User
from ..vibes import VIBE_TAGS
from .models import Recommendation, RecommendationFilters

logger = logging.getLogger(__name__)

TABLE = "recommendations"

MOCK_VENUES = [
    "Blue Note Jazz Club", "The Rustic Spoon", "Skyline Lounge",
    "Harbor Brewing Co.", "Green Garden Cafe", "The Velvet Room",
    "Sunset Beach Bar", "Mountain View Restaurant", "Urban Eats",
    "The Cozy Corner", "Riverside Grill", "The Art Gallery Cafe",
]

MOCK_ACTIVITIES = [
    "Live Jazz Night", "Craft Cocktail Tasting", "Rooftop Party",
    "Local Beer Festival", "Farm-to-Table Dinner", "Poetry Slam",
    "Beach Volleyball Tournament", "Sunset Yoga Session", "Food Truck Rally",
    "Vintage Movie Night", "Riverside Picnic", "Art Exhibition Opening",
]


def random_trend_score() -> int:
    return random.randint(70, 100)


def _by_trend(recs: list[Recommendation]) -> list[Recommendation]:
    return sorted(recs, key=lambda r: r.trend_score, reverse=True)


def recommendation_key(recommendation_id: str) -> str:
    return f"recommendation:{recommendation_id}"


def venue_recommendations_key(venue_id: str) -> str:
    return f"venue:{venue_id}:recommendations"


class RecommendationRepository:
    def __init__(
        self,
        store: TableStore,
        cache: TTLCache,
        ttl: CacheTTL = DEFAULT_CACHE_TTL,
    ) -> None:
        self._store = store
        self._cache = cache
        self._ttl = ttl

    def _all(self) -> list[Recommendation]:
        return [Recommendation.model_validate(r) for r in self._store.list(TABLE)]

    def get_by_id(self, recommendation_id: str) -> Recommendation | None:
        key = recommendation_key(recommendation_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        row = self._store.get(TABLE, recommendation_id)
        if row is None:
            return None
        rec = Recommendation.model_validate(row)
        self._cache.set(key, rec, self._ttl.MEDIUM)
        return rec

    def get_by_ids(self, ids: list[str]) -> list[Recommendation]:
        if not ids:
            return []
        wanted = set(ids)
        found = {r.recommendation_id: r for r in self._all() if r.recommendation_id in wanted}
        return [found[i] for i in ids if i in found]

    def get_by_venue(self, venue_id: str) -> list[Recommendation]:
        return self._cache.get_or_set(
            venue_recommendations_key(venue_id),
            lambda: _by_trend([r for r in self._all() if r.venue_id == venue_id]),
            self._ttl.MEDIUM,
        )

    def get_by_location(
        self, latitude: float, longitude: float, radius_km: float = 5.0,
    ) -> list[Recommendation]:
        return [
            r for r in self._all()
            if within_radius(r.latitude, r.longitude, latitude, longitude, radius_km)
        ]

    def get_by_vibe_tags(self, vibe_tags: list[str]) -> list[Recommendation]:
        if not vibe_tags:
            return []
        wanted = set(vibe_tags)
        return _by_trend([r for r in self._all() if wanted.intersection(r.vibe_tags)])

    def get_with_filters(
        self, filters: RecommendationFilters, apply_limit: bool = True,
    ) -> list[Recommendation]:
        if filters.has_location:
            recs = self.get_by_location(filters.latitude, filters.longitude, filters.radius_km)
        else:
            recs = self._all()

        if filters.vibe_tags:
            wanted = set(filters.vibe_tags)
            recs = [r for r in recs if wanted.intersection(r.vibe_tags)]

        if filters.min_trend_score > 0:
            recs = [r for r in recs if r.trend_score >= filters.min_trend_score]

        recs = _by_trend(recs)
        return recs[: filters.limit] if apply_limit else recs

    def get_saved_by_user(self, user: User) -> list[Recommendation]:
        return self.get_by_ids(user.saved_locations)

    def create_or_update(self, data: dict[str, Any]) -> Recommendation:
        data = dict(data)
        data.pop("match_score", None)
        if not data.get("recommendation_id"):
            data["recommendation_id"] = uuid.uuid4().hex
        if not data.get("trend_score"):
            data["trend_score"] = random_trend_score()
        if not data.get("timestamp"):
            data["timestamp"] = datetime.now(timezone.utc)

        rec = Recommendation.model_validate(data)
        previous = self._store.get(TABLE, rec.recommendation_id)
        row = self._store.upsert(TABLE, rec.model_dump(mode="json", exclude={"match_score"}))
        saved = Recommendation.model_validate(row)

        self._invalidate(saved)
        # A recommendation that moved venue must also leave the old venue's list
        old_venue = (previous or {}).get("venue_id")
        if old_venue and old_venue != saved.venue_id:
            self._cache.delete(venue_recommendations_key(old_venue))
        logger.info("Upserted recommendation %s", saved.recommendation_id)
        return saved

    def delete(self, recommendation_id: str) -> bool:
        existing = self.get_by_id(recommendation_id)
        deleted = self._store.delete(TABLE, recommendation_id)
        self._cache.delete(recommendation_key(recommendation_id))
        if existing is not None:
            self._invalidate(existing)
        if deleted:
            logger.info("Deleted recommendation %s", recommendation_id)
        return deleted

    def _invalidate(self, rec: Recommendation) -> None:
        self._cache.delete(recommendation_key(rec.recommendation_id))
        if rec.venue_id:
            self._cache.delete(venue_recommendations_key(rec.venue_id))

    def generate_mock(
        self, count: int = 10, latitude: float = 37.7749, longitude: float = -122.4194,
    ) -> list[Recommendation]:
        now = datetime.now(timezone.utc)
        created: list[Recommendation] = []
        for i in range(count):
            lat, lng = jitter(latitude, longitude)
            tags = random.sample(VIBE_TAGS, random.randint(2, 4))
            venue = random.choice(MOCK_VENUES)
            activity = random.choice(MOCK_ACTIVITIES)
            created.append(self.create_or_update({
                "title": f"{activity} at {venue}",
                "description": (
                    f"Join us for a {', '.join(tags)} experience at {venue}. "
                    "This event is trending with locals and visitors alike."
                ),
                "venue_name": venue,
                "venue_id": f"venue-{i}",
                "location": "Downtown, San Francisco",
                "social_media_url": f"https://example.com/social/{i}",
                "trend_score": random_trend_score(),
                "vibe_tags": tags,
                "image_url": f"https://picsum.photos/seed/{i}/400/300",
                "video_url": f"https://example.com/video/{i}" if i % 3 == 0 else None,
                "latitude": lat,
                "longitude": lng,
                "timestamp": now - timedelta(seconds=random.random() * 7 * 24 * 3600),
            }))
        return created
