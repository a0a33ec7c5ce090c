from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ..vibes import MAX_PREFERENCES, normalize_tags, unknown_tags


class SubscriptionTier(str, Enum):
    free = "free"
    premium = "premium"


class User(BaseModel):
    user_id: str
    preferences: list[str] = Field(default_factory=list)
    saved_locations: list[str] = Field(default_factory=list)
    onboarding_complete: bool = False
    subscription_tier: SubscriptionTier = SubscriptionTier.free
    subscription_expiry: datetime | None = None
    updated_at: datetime | None = None


class PublicUser(BaseModel):
    user_id: str
    preferences: list[str]


class UserUpdate(BaseModel):
    preferences: list[str] | None = Field(default=None, max_length=MAX_PREFERENCES)
    onboarding_complete: bool | None = None

    @field_validator("preferences")
    @classmethod
    def _known_vibes(cls, v):
        return _validate_preferences(v) if v is not None else v


class PreferencesUpdate(BaseModel):
    preferences: list[str] = Field(..., max_length=MAX_PREFERENCES)

    @field_validator("preferences")
    @classmethod
    def _known_vibes(cls, v):
        return _validate_preferences(v)


class SavedLocationRequest(BaseModel):
    recommendation_id: str = Field(..., min_length=1)


class SubscriptionRequest(BaseModel):
    tier: SubscriptionTier


class SubscriptionResponse(BaseModel):
    tier: SubscriptionTier
    expiry: datetime | None
    is_active: bool
    features: list[str]


def _validate_preferences(tags: list[str]) -> list[str]:
    tags = normalize_tags(tags)
    unknown = unknown_tags(tags)
    if unknown:
        raise ValueError(f"Unknown vibe tags: {', '.join(unknown)}")
    return tags
