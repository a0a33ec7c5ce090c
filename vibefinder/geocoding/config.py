from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GeocodingConfig:
    api_key: str = field(default_factory=lambda: os.getenv("GOOGLE_MAPS_API_KEY", ""))
    base_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    places_url: str = "https://maps.googleapis.com/maps/api/place"
    timeout: float = 10.0


DEFAULT_GEOCODING_CONFIG = GeocodingConfig()
