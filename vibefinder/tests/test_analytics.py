from __future__ import annotations

from vibefinder.analytics.aggregator import compute_analytics
from vibefinder.analytics.store import EventLog


def _login_wallet(c, address="0xabc"):
    c.post("/auth/wallet", json={"address": address})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _sample_log() -> EventLog:
    log = EventLog()
    log.track_recommendation_view("r1")
    log.track_recommendation_view("r1")
    log.track_recommendation_view("r2")
    log.track_recommendation_save("r2", "u1")
    log.track_filter_usage({"latitude": 1.0, "longitude": 2.0, "vibe_tags": [], "min_trend_score": 0}, "u1")
    log.track_filter_usage({"latitude": None, "longitude": None, "vibe_tags": ["chill"], "min_trend_score": 50}, "u2")
    log.track_subscription_upgrade("u1", "premium")
    log.track_subscription_upgrade("u2", "free")
    log.track_onboarding_completion("u1", ["chill", "cozy"])
    log.track_onboarding_completion("u2", ["chill"])
    return log


def test_compute_analytics():
    result = compute_analytics(_sample_log().events())

    assert result["total_events"] == 10
    assert result["events_by_type"]["recommendation_view"] == 3
    assert result["top_viewed"][0] == {"name": "r1", "count": 2}
    assert result["top_saved"] == [{"name": "r2", "count": 1}]
    assert result["feed_requests"] == 2
    assert result["filter_usage"] == {"location": 50.0, "vibe_tags": 50.0, "min_trend_score": 50.0}
    assert result["premium_upgrades"] == 1
    assert result["onboarding_vibes"][0] == {"name": "chill", "count": 2}


def test_compute_analytics_empty():
    result = compute_analytics([])

    assert result["total_events"] == 0
    assert result["filter_usage"] == {"location": 0.0, "vibe_tags": 0.0, "min_trend_score": 0.0}
    assert result["cache_stats"] == {}


def test_event_log_clear():
    log = _sample_log()
    log.clear()
    assert log.events() == []


def test_analytics_requires_admin(client):
    assert client.get("/analytics").status_code == 401
    _login_wallet(client)
    assert client.get("/analytics").status_code == 403


def test_analytics_endpoint(client, services):
    services.recommendations.create_or_update({"recommendation_id": "r1", "title": "Jazz", "trend_score": 80})
    client.get("/recommendations/r1")
    client.get("/recommendations")
    _login_admin(client)

    body = client.get("/analytics").json()

    assert body["events_by_type"]["recommendation_view"] == 1
    assert body["feed_requests"] == 1
    assert set(body["cache_stats"]) == {"size", "hits", "misses", "hit_rate"}


def test_page_views_are_counted():
    log = EventLog()
    log.track_page_view("/feed", "u1")
    log.track_page_view("/feed")
    log.track_page_view("/onboarding", "u1")

    result = compute_analytics(log.events())

    assert result["events_by_type"]["page_view"] == 3
    assert result["top_pages"] == [{"name": "/feed", "count": 2}, {"name": "/onboarding", "count": 1}]


def test_page_view_endpoint(client, services):
    resp = client.post("/analytics/pageview", json={"page": "/feed"})
    assert resp.status_code == 204

    _login_wallet(client)
    client.post("/analytics/pageview", json={"page": "/saved"})

    views = [e for e in services.events.events() if e["type"] == "page_view"]
    assert [(e["page"], e["user_id"]) for e in views] == [("/feed", None), ("/saved", "0xabc")]


def test_page_view_requires_page(client):
    assert client.post("/analytics/pageview", json={"page": ""}).status_code == 422
