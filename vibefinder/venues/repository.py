from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any

from ..cache.config import DEFAULT_CACHE_TTL, CacheTTL
from ..cache.ttl_cache import TTLCache
from ..geo import jitter, within_radius
from ..recommendations.repository import MOCK_VENUES, venue_recommendations_key
from ..store.base import TableStore
from ..vibes import VENUE_CATEGORIES
from .models import Venue

logger = logging.getLogger(__name__)

TABLE = "venues"


def venue_key(venue_id: str) -> str:
    return f"venue:{venue_id}"


class VenueRepository:
    def __init__(
        self,
        store: TableStore,
        cache: TTLCache,
        ttl: CacheTTL = DEFAULT_CACHE_TTL,
    ) -> None:
        self._store = store
        self._cache = cache
        self._ttl = ttl

    def _all(self) -> list[Venue]:
        return [Venue.model_validate(r) for r in self._store.list(TABLE)]

    def get_by_id(self, venue_id: str) -> Venue | None:
        key = venue_key(venue_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        row = self._store.get(TABLE, venue_id)
        if row is None:
            return None
        venue = Venue.model_validate(row)
        self._cache.set(key, venue, self._ttl.MEDIUM)
        return venue

    def search(self, query: str) -> list[Venue]:
        q = (query or "").strip().lower()
        if not q:
            return []
        return sorted((v for v in self._all() if q in v.name.lower()), key=lambda v: v.name)

    def get_by_category(self, category: str) -> list[Venue]:
        c = (category or "").strip().lower()
        if not c:
            return []
        matches = [v for v in self._all() if c in (x.lower() for x in v.categories)]
        return sorted(matches, key=lambda v: v.name)

    def get_nearby(
        self, latitude: float, longitude: float, radius_km: float = 5.0,
    ) -> list[Venue]:
        return [
            v for v in self._all()
            if within_radius(v.latitude, v.longitude, latitude, longitude, radius_km)
        ]

    def create_or_update(self, data: dict[str, Any]) -> Venue:
        data = dict(data)
        now = datetime.now(timezone.utc)
        if not data.get("venue_id"):
            data["venue_id"] = uuid.uuid4().hex
        if not data.get("created_at"):
            existing = self._store.get(TABLE, data["venue_id"])
            data["created_at"] = (existing or {}).get("created_at") or now
        data["updated_at"] = now

        venue = Venue.model_validate(data)
        row = self._store.upsert(TABLE, venue.model_dump(mode="json"))
        saved = Venue.model_validate(row)

        self._cache.delete(venue_key(saved.venue_id))
        self._cache.delete(venue_recommendations_key(saved.venue_id))
        logger.info("Upserted venue %s", saved.venue_id)
        return saved

    def generate_mock(
        self, count: int = 10, latitude: float = 37.7749, longitude: float = -122.4194,
    ) -> list[Venue]:
        created: list[Venue] = []
        for i in range(count):
            lat, lng = jitter(latitude, longitude)
            created.append(self.create_or_update({
                "venue_id": f"venue-{i}",
                "name": random.choice(MOCK_VENUES),
                "address": f"{random.randint(100, 1099)} Main St, San Francisco, CA",
                "latitude": lat,
                "longitude": lng,
                "categories": random.sample(VENUE_CATEGORIES, random.randint(1, 3)),
            }))
        return created
