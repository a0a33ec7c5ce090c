from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..store.base import TableStore
from .models import SubscriptionTier, User

logger = logging.getLogger(__name__)

TABLE = "users"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserRepository:
    """User rows are read straight from the store; they are never cached."""

    def __init__(self, store: TableStore) -> None:
        self._store = store

    def get_by_id(self, user_id: str) -> User | None:
        row = self._store.get(TABLE, user_id)
        return User.model_validate(row) if row is not None else None

    def create_or_update(self, user_id: str, **fields: Any) -> User:
        existing = self.get_by_id(user_id)
        base = existing.model_dump() if existing else User(user_id=user_id).model_dump()
        base.update({k: v for k, v in fields.items() if v is not None})
        base["user_id"] = user_id
        base["updated_at"] = _now()
        return self._save(User.model_validate(base))

    def _save(self, user: User) -> User:
        row = self._store.upsert(TABLE, user.model_dump(mode="json"))
        return User.model_validate(row)

    def _update(self, user_id: str, **fields: Any) -> User | None:
        user = self.get_by_id(user_id)
        if user is None:
            return None
        updated = user.model_copy(update={**fields, "updated_at": _now()})
        return self._save(User.model_validate(updated.model_dump()))

    def update_preferences(self, user_id: str, preferences: list[str]) -> User | None:
        return self._update(user_id, preferences=preferences)

    def complete_onboarding(self, user_id: str) -> User | None:
        return self._update(user_id, onboarding_complete=True)

    def update_subscription(
        self, user_id: str, tier: SubscriptionTier, expiry: datetime | None,
    ) -> User | None:
        logger.info("Subscription for %s set to %s", user_id, tier.value)
        return self._update(user_id, subscription_tier=tier, subscription_expiry=expiry)

    def save_location(self, user_id: str, recommendation_id: str) -> User | None:
        user = self.get_by_id(user_id)
        if user is None:
            return None
        if recommendation_id in user.saved_locations:
            return user
        return self._update(user_id, saved_locations=[*user.saved_locations, recommendation_id])

    def remove_saved_location(self, user_id: str, recommendation_id: str) -> User | None:
        user = self.get_by_id(user_id)
        if user is None:
            return None
        remaining = [rid for rid in user.saved_locations if rid != recommendation_id]
        return self._update(user_id, saved_locations=remaining)


def is_premium(user: User | None, now: datetime | None = None) -> bool:
    """Premium only while the tier is premium and the expiry is still ahead."""
    if user is None or user.subscription_tier != SubscriptionTier.premium:
        return False
    if user.subscription_expiry is None:
        return False
    expiry = user.subscription_expiry
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry > (now or _now())
