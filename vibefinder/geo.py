from __future__ import annotations

import math
import random

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, in kilometres."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def within_radius(
    lat: float | None,
    lon: float | None,
    center_lat: float,
    center_lon: float,
    radius_km: float,
) -> bool:
    if lat is None or lon is None:
        return False
    return haversine_km(center_lat, center_lon, lat, lon) <= radius_km


def jitter(lat: float, lon: float, spread: float = 0.1) -> tuple[float, float]:
    """Random point in a box of ``spread`` degrees around the centre (~5 km at 0.1)."""
    new_lat = lat + (random.random() - 0.5) * spread
    new_lon = lon + (random.random() - 0.5) * spread
    return max(-90.0, min(90.0, new_lat)), max(-180.0, min(180.0, new_lon))
