from __future__ import annotations

import logging
import threading
import time
from typing import Any

logger = logging.getLogger(__name__)


class EventLog:
    """Append-only, in-process log of user behaviour events."""

    def __init__(self) -> None:
        self._events: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def record(self, event_type: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._events.append({
                "type": event_type,
                "timestamp": time.time(),
                **data,
            })
        logger.debug("analytics event %s %s", event_type, data)

    def events(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    # ── Tracking helpers ────────────────────────────────────────────────

    def track_page_view(self, page: str, user_id: str | None = None) -> None:
        self.record("page_view", {"page": page, "user_id": user_id})

    def track_recommendation_view(self, recommendation_id: str) -> None:
        self.record("recommendation_view", {"recommendation_id": recommendation_id})

    def track_recommendation_save(self, recommendation_id: str, user_id: str) -> None:
        self.record("recommendation_save", {
            "recommendation_id": recommendation_id,
            "user_id": user_id,
        })

    def track_filter_usage(self, filters: dict[str, Any], user_id: str | None) -> None:
        self.record("filter_usage", {"filters": filters, "user_id": user_id})

    def track_subscription_upgrade(self, user_id: str, tier: str) -> None:
        self.record("subscription_upgrade", {"user_id": user_id, "tier": tier})

    def track_onboarding_completion(self, user_id: str, preferences: list[str]) -> None:
        self.record("onboarding_completion", {
            "user_id": user_id,
            "preferences": list(preferences),
        })
