from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from vibefinder.cache.ttl_cache import TTLCache
from vibefinder.geocoding.config import GeocodingConfig
from vibefinder.geocoding.google_maps import GeocodingClient, GeocodingError

CONFIG = GeocodingConfig(api_key="test-key")

GEOCODE_BODY = {
    "status": "OK",
    "results": [{
        "formatted_address": "1 Main St, San Francisco, CA 94105, USA",
        "geometry": {"location": {"lat": 37.79, "lng": -122.39}},
    }],
}

REVERSE_BODY = {
    "status": "OK",
    "results": [{
        "formatted_address": "1 Main St, San Francisco, CA 94105, USA",
        "address_components": [
            {"long_name": "San Francisco", "types": ["locality", "political"]},
            {"long_name": "California", "types": ["administrative_area_level_1", "political"]},
        ],
    }],
}


def _session(body: dict, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    session = MagicMock()
    session.get.return_value = response
    return session


def test_geocode_address():
    session = _session(GEOCODE_BODY)
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    result = client.geocode_address("1 Main St")

    assert result == {
        "latitude": 37.79,
        "longitude": -122.39,
        "formatted_address": "1 Main St, San Francisco, CA 94105, USA",
    }
    params = session.get.call_args.kwargs["params"]
    assert params == {"address": "1 Main St", "key": "test-key"}


def test_geocode_is_cached():
    session = _session(GEOCODE_BODY)
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    first = client.geocode_address("1 Main St")
    second = client.geocode_address("1 Main St")

    assert first == second
    assert session.get.call_count == 1


def test_geocode_zero_results():
    session = _session({"status": "ZERO_RESULTS", "results": []})
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    with pytest.raises(GeocodingError, match="ZERO_RESULTS"):
        client.geocode_address("nowhere")


def test_geocode_http_error():
    session = _session({}, status_code=500)
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    with pytest.raises(GeocodingError, match="500"):
        client.geocode_address("1 Main St")


def test_geocode_network_error():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("unreachable")
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    with pytest.raises(GeocodingError):
        client.geocode_address("1 Main St")


def test_geocode_requires_api_key():
    session = _session(GEOCODE_BODY)
    client = GeocodingClient(TTLCache(), GeocodingConfig(api_key=""), session=session)

    with pytest.raises(GeocodingError):
        client.geocode_address("1 Main St")
    session.get.assert_not_called()


def test_failures_are_not_cached():
    cache = TTLCache()
    client = GeocodingClient(cache, CONFIG, session=_session({"status": "OVER_QUERY_LIMIT"}))

    with pytest.raises(GeocodingError):
        client.geocode_address("1 Main St")
    assert cache.size == 0


def test_reverse_geocode_components():
    session = _session(REVERSE_BODY)
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    result = client.reverse_geocode(37.79, -122.39)

    assert result["formatted_address"].startswith("1 Main St")
    assert result["components"]["locality"] == "San Francisco"
    assert result["components"]["administrative_area_level_1"] == "California"
    assert result["components"]["political"] == "San Francisco"
    assert session.get.call_args.kwargs["params"]["latlng"] == "37.79,-122.39"


# ── HTTP endpoints ───────────────────────────────────────────────────────


def test_geocode_endpoint_requires_login(client):
    assert client.get("/geocode", params={"address": "1 Main St"}).status_code == 401


def test_geocode_endpoint(client, services):
    services.geocoder._session = _session(GEOCODE_BODY)
    client.post("/auth/wallet", json={"address": "0xabc"})

    resp = client.get("/geocode", params={"address": "1 Main St"})

    assert resp.status_code == 200
    assert resp.json()["latitude"] == 37.79


def test_reverse_geocode_endpoint_failure(client, services):
    services.geocoder._session = _session({"status": "ZERO_RESULTS"})
    client.post("/auth/wallet", json={"address": "0xabc"})

    resp = client.get("/geocode/reverse", params={"latitude": 0, "longitude": 0})

    assert resp.status_code == 400


def test_non_json_body_raises_geocoding_error():
    session = _session({})
    session.get.return_value.json.side_effect = ValueError("Expecting value")
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    with pytest.raises(GeocodingError):
        client.geocode_address("1 Main St")


def test_result_without_geometry_raises_geocoding_error():
    body = {"status": "OK", "results": [{"formatted_address": "1 Main St"}]}
    client = GeocodingClient(TTLCache(), CONFIG, session=_session(body))

    with pytest.raises(GeocodingError):
        client.geocode_address("1 Main St")


def test_create_venue_with_html_error_page_is_400(client, services):
    session = _session({})
    session.get.return_value.json.side_effect = ValueError("Expecting value")
    services.geocoder._session = session
    client.post("/auth/wallet", json={"address": "0xabc"})

    resp = client.post("/venues", json={"name": "Skyline Lounge", "address": "3 High St"})

    assert resp.status_code == 400


# ── Places ───────────────────────────────────────────────────────────────

DETAILS_BODY = {
    "status": "OK",
    "result": {
        "name": "Blue Note",
        "formatted_address": "131 W 3rd St",
        "formatted_phone_number": "(212) 475-8592",
        "website": "https://bluenote.net",
        "rating": 4.6,
        "reviews": [{"author_name": "Sam", "rating": 5, "text": "Great sets."}],
        "photos": [{"photo_reference": "abc"}, {}],
        "opening_hours": {"open_now": True},
    },
}

SEARCH_BODY = {
    "status": "OK",
    "results": [{
        "place_id": "p1",
        "name": "Blue Note",
        "formatted_address": "131 W 3rd St",
        "vicinity": "131 W 3rd St",
        "geometry": {"location": {"lat": 37.7749, "lng": -122.4194}},
        "rating": 4.6,
        "types": ["bar"],
    }],
}


def test_place_details():
    session = _session(DETAILS_BODY)
    cache = TTLCache()
    client = GeocodingClient(cache, CONFIG, session=session)

    result = client.place_details("p1")

    assert result["name"] == "Blue Note"
    assert result["phone"] == "(212) 475-8592"
    assert result["photos"] == [f"{CONFIG.places_url}/photo?maxwidth=400&photoreference=abc"]
    assert session.get.call_args.args[0] == f"{CONFIG.places_url}/details/json"
    assert "googlemaps:place:p1" in cache

    client.place_details("p1")
    assert session.get.call_count == 1


def test_place_details_not_found():
    client = GeocodingClient(TTLCache(), CONFIG, session=_session({"status": "NOT_FOUND"}))

    with pytest.raises(GeocodingError, match="NOT_FOUND"):
        client.place_details("missing")


def test_search_places():
    session = _session(SEARCH_BODY)
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    result = client.search_places("jazz", type="bar")

    assert result == [{
        "place_id": "p1",
        "name": "Blue Note",
        "address": "131 W 3rd St",
        "latitude": 37.7749,
        "longitude": -122.4194,
        "rating": 4.6,
        "types": ["bar"],
    }]
    params = session.get.call_args.kwargs["params"]
    assert params["query"] == "jazz"
    assert params["type"] == "bar"


def test_search_places_zero_results_is_empty():
    client = GeocodingClient(TTLCache(), CONFIG, session=_session({"status": "ZERO_RESULTS"}))

    assert client.search_places("nothing here") == []


def test_search_places_error_status():
    client = GeocodingClient(TTLCache(), CONFIG, session=_session({"status": "REQUEST_DENIED"}))

    with pytest.raises(GeocodingError, match="REQUEST_DENIED"):
        client.search_places("jazz")


def test_nearby_places_reports_distance():
    session = _session(SEARCH_BODY)
    client = GeocodingClient(TTLCache(), CONFIG, session=session)

    result = client.nearby_places(37.7849, -122.4194, radius=2000)

    assert result[0]["address"] == "131 W 3rd St"
    # 0.01 degrees of latitude is roughly 1.1 km
    assert 1100 < result[0]["distance"] < 1125
    params = session.get.call_args.kwargs["params"]
    assert params["location"] == "37.7849,-122.4194"
    assert params["radius"] == 2000


def test_places_endpoints(client, services):
    client.post("/auth/wallet", json={"address": "0xabc"})

    services.geocoder._session = _session(SEARCH_BODY)
    assert client.get("/places/search", params={"query": "jazz"}).json()[0]["place_id"] == "p1"
    nearby = client.get("/places/nearby", params={"latitude": 37.78, "longitude": -122.42})
    assert nearby.status_code == 200

    services.geocoder._session = _session(DETAILS_BODY)
    assert client.get("/places/p1").json()["name"] == "Blue Note"


def test_place_details_endpoint_failure(client, services):
    services.geocoder._session = _session({"status": "NOT_FOUND"})
    client.post("/auth/wallet", json={"address": "0xabc"})

    assert client.get("/places/missing").status_code == 400


def test_places_endpoints_require_login(client):
    assert client.get("/places/search", params={"query": "jazz"}).status_code == 401
    assert client.get("/places/p1").status_code == 401
