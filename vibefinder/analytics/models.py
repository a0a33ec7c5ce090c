from __future__ import annotations

from pydantic import BaseModel, Field


class PageViewRequest(BaseModel):
    page: str = Field(..., min_length=1, max_length=256)
