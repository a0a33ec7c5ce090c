from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ..recommendations.models import Recommendation


class Venue(BaseModel):
    venue_id: str
    name: str
    address: str
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    categories: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VenueIn(BaseModel):
    venue_id: str | None = None
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    categories: list[str] = Field(default_factory=list)


class VenueDetail(Venue):
    recommendations: list[Recommendation] = Field(default_factory=list)
