from __future__ import annotations

import json
import logging
from typing import Any

import requests

from ..cache.config import DEFAULT_CACHE_TTL, CacheTTL
from ..cache.ttl_cache import TTLCache
from ..geo import haversine_km
from .config import DEFAULT_GEOCODING_CONFIG, GeocodingConfig

logger = logging.getLogger(__name__)

PLACE_DETAIL_FIELDS = (
    "name,formatted_address,formatted_phone_number,website,rating,"
    "reviews,photos,opening_hours"
)


class GeocodingError(Exception):
    """The address could not be resolved."""


def _location(result: dict[str, Any]) -> tuple[float, float]:
    try:
        location = result["geometry"]["location"]
        return location["lat"], location["lng"]
    except (KeyError, TypeError) as exc:
        raise GeocodingError("Google Maps result has no location") from exc


class GeocodingClient:
    def __init__(
        self,
        cache: TTLCache,
        config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
        ttl: CacheTTL = DEFAULT_CACHE_TTL,
        session: requests.Session | None = None,
    ) -> None:
        self._cache = cache
        self._config = config
        self._ttl = ttl
        self._session = session or requests.Session()

    def _get(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self._config.api_key:
            raise GeocodingError("GOOGLE_MAPS_API_KEY is not configured")
        try:
            response = self._session.get(
                url,
                params={**params, "key": self._config.api_key},
                timeout=self._config.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Google Maps request failed", exc_info=True)
            raise GeocodingError("Google Maps request failed") from exc

        if response.status_code != 200:
            raise GeocodingError(f"Google Maps API error: {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            logger.warning("Google Maps returned a non-JSON body")
            raise GeocodingError("Google Maps returned an invalid response") from exc
        if not isinstance(body, dict):
            raise GeocodingError("Google Maps returned an invalid response")
        return body

    def _first_result(self, params: dict[str, Any]) -> dict[str, Any]:
        body = self._get(self._config.base_url, params)
        status = body.get("status")
        results = body.get("results")
        if status != "OK" or not results or not isinstance(results[0], dict):
            raise GeocodingError(f"Google Maps API error: {status}")
        return results[0]

    def _search(self, endpoint: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        body = self._get(f"{self._config.places_url}/{endpoint}/json", params)
        status = body.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise GeocodingError(f"Google Maps API error: {status}")
        return body.get("results") or []

    def geocode_address(self, address: str) -> dict[str, Any]:
        """Resolve ``address`` to ``{latitude, longitude, formatted_address}``."""
        key = f"googlemaps:geocode:{address}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = self._first_result({"address": address})
        lat, lng = _location(result)
        data = {
            "latitude": lat,
            "longitude": lng,
            "formatted_address": result.get("formatted_address", address),
        }
        self._cache.set(key, data, self._ttl.LONG)
        return data

    def reverse_geocode(self, latitude: float, longitude: float) -> dict[str, Any]:
        key = f"googlemaps:reverse:{latitude},{longitude}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = self._first_result({"latlng": f"{latitude},{longitude}"})
        components: dict[str, str] = {}
        for comp in result.get("address_components", []):
            for kind in comp.get("types", []):
                components.setdefault(kind, comp.get("long_name", ""))
        data = {
            "formatted_address": result.get("formatted_address", ""),
            "components": components,
        }
        self._cache.set(key, data, self._ttl.LONG)
        return data

    def place_details(self, place_id: str) -> dict[str, Any]:
        """
        Look up one place by its Google place id.

        Photo entries are Places photo URLs without the API key; whoever
        renders them appends their own key.
        """
        key = f"googlemaps:place:{place_id}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        body = self._get(
            f"{self._config.places_url}/details/json",
            {"place_id": place_id, "fields": PLACE_DETAIL_FIELDS},
        )
        result = body.get("result")
        if body.get("status") != "OK" or not isinstance(result, dict):
            raise GeocodingError(f"Google Maps API error: {body.get('status')}")

        photos = [
            f"{self._config.places_url}/photo?maxwidth=400&photoreference={p['photo_reference']}"
            for p in result.get("photos") or []
            if p.get("photo_reference")
        ]
        data = {
            "name": result.get("name"),
            "address": result.get("formatted_address"),
            "phone": result.get("formatted_phone_number"),
            "website": result.get("website"),
            "rating": result.get("rating"),
            "reviews": result.get("reviews") or [],
            "photos": photos,
            "opening_hours": result.get("opening_hours"),
        }
        self._cache.set(key, data, self._ttl.MEDIUM)
        return data

    def search_places(self, query: str, **options: Any) -> list[dict[str, Any]]:
        """Text search. Extra ``options`` are passed through as query parameters."""
        key = f"googlemaps:search:{query}:{json.dumps(options, sort_keys=True)}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        data = []
        for result in self._search("textsearch", {"query": query, **options}):
            lat, lng = _location(result)
            data.append({
                "place_id": result.get("place_id"),
                "name": result.get("name"),
                "address": result.get("formatted_address"),
                "latitude": lat,
                "longitude": lng,
                "rating": result.get("rating"),
                "types": result.get("types", []),
            })
        self._cache.set(key, data, self._ttl.MEDIUM)
        return data

    def nearby_places(
        self, latitude: float, longitude: float, radius: int = 1000, **options: Any,
    ) -> list[dict[str, Any]]:
        """Places within ``radius`` metres, each with its ``distance`` in metres."""
        key = (
            f"googlemaps:nearby:{latitude},{longitude}:{radius}:"
            f"{json.dumps(options, sort_keys=True)}"
        )
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        params = {"location": f"{latitude},{longitude}", "radius": radius, **options}
        data = []
        for result in self._search("nearbysearch", params):
            lat, lng = _location(result)
            data.append({
                "place_id": result.get("place_id"),
                "name": result.get("name"),
                "address": result.get("vicinity"),
                "latitude": lat,
                "longitude": lng,
                "rating": result.get("rating"),
                "types": result.get("types", []),
                "distance": haversine_km(latitude, longitude, lat, lng) * 1000,
            })
        self._cache.set(key, data, self._ttl.MEDIUM)
        return data
