from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..vibes import normalize_tags


class Recommendation(BaseModel):
    recommendation_id: str
    title: str
    description: str = ""
    venue_id: str | None = None
    venue_name: str | None = None
    location: str | None = None
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    vibe_tags: list[str] = Field(default_factory=list)
    trend_score: int = Field(default=0, ge=0, le=100)
    timestamp: datetime | None = None
    image_url: str | None = None
    video_url: str | None = None
    social_media_url: str | None = None
    match_score: float | None = Field(
        default=None, description="Blended relevance score, set by premium ranking"
    )

    @field_validator("vibe_tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v):
        return normalize_tags(v)


class RecommendationIn(BaseModel):
    recommendation_id: str | None = None
    title: str = Field(..., min_length=1)
    description: str = ""
    venue_id: str | None = None
    venue_name: str | None = None
    location: str | None = None
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    vibe_tags: list[str] = Field(default_factory=list)
    trend_score: int | None = Field(default=None, ge=0, le=100)
    timestamp: datetime | None = None
    image_url: str | None = None
    video_url: str | None = None
    social_media_url: str | None = None


class RecommendationUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    venue_id: str | None = None
    venue_name: str | None = None
    location: str | None = None
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    vibe_tags: list[str] | None = None
    trend_score: int | None = Field(default=None, ge=0, le=100)
    image_url: str | None = None
    video_url: str | None = None
    social_media_url: str | None = None


class RecommendationFilters(BaseModel):
    vibe_tags: list[str] = Field(default_factory=list)
    min_trend_score: int = Field(default=0, ge=0, le=100)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    radius_km: float = Field(default=5.0, gt=0.0, le=100.0)
    limit: int = Field(default=20, ge=1, le=100)

    @field_validator("vibe_tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v):
        return normalize_tags(v)

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def is_advanced(self) -> bool:
        return bool(self.vibe_tags) or self.min_trend_score > 0


class FeedResponse(BaseModel):
    recommendations: list[Recommendation]
    total_candidates: int
    tier: str
    personalized: bool


class GenerateRequest(BaseModel):
    count: int = Field(default=10, ge=1, le=50)
    latitude: float = Field(default=37.7749, ge=-90.0, le=90.0)
    longitude: float = Field(default=-122.4194, ge=-180.0, le=180.0)
    use_llm: bool = False
