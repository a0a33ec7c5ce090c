from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.models import PageViewRequest
from .auth.dependencies import get_current_user, require_admin, require_owner, require_user
from .auth.models import LoginRequest, WalletLoginRequest
from .auth.users import wallet_session_user
from .geocoding.google_maps import GeocodingError
from .llm.groq_client import generate_mock_recommendations
from .recommendations.enrichment import enrich_with_llm
from .recommendations.feed import PremiumRequiredError, build_feed
from .recommendations.models import (
    FeedResponse,
    GenerateRequest,
    Recommendation,
    RecommendationFilters,
    RecommendationIn,
    RecommendationUpdate,
)
from .services import Services, build_services
from .store.base import StoreError
from .users.models import (
    PreferencesUpdate,
    PublicUser,
    SavedLocationRequest,
    SubscriptionRequest,
    SubscriptionResponse,
    SubscriptionTier,
    User,
    UserUpdate,
)
from .users.repository import is_premium
from .venues.models import Venue, VenueDetail, VenueIn
from .vibes import MAX_PREFERENCES, VENUE_CATEGORIES, VIBE_TAGS

logger = logging.getLogger(__name__)

PREMIUM_PERIOD = timedelta(days=30)

PREMIUM_FEATURES = [
    "Advanced filtering",
    "Personalized vibe matching",
    "Unlimited saved locations",
    "Ad-free experience",
    "Priority recommendations",
]
FREE_FEATURES = [
    "Basic filtering",
    "Limited saved locations",
    "Standard recommendations",
]


def get_services(request: Request) -> Services:
    return request.app.state.services


def _subscription(user: User) -> SubscriptionResponse:
    active = is_premium(user)
    return SubscriptionResponse(
        tier=user.subscription_tier,
        expiry=user.subscription_expiry,
        is_active=active,
        features=PREMIUM_FEATURES if active else FREE_FEATURES,
    )


def _load_user(services: Services, user_id: str) -> User:
    user = services.users.get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def create_app(services: Services | None = None) -> FastAPI:
    services = services or build_services()

    app = FastAPI(title="VibeFinder API", version="1.0.0")
    app.state.services = services
    app.add_middleware(SessionMiddleware, secret_key=services.auth_config.session_secret)

    @app.exception_handler(StoreError)
    def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # ── Public endpoints ─────────────────────────────────────────────────

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/vibes")
    def vibes() -> dict:
        return {
            "vibe_tags": VIBE_TAGS,
            "categories": VENUE_CATEGORIES,
            "max_preferences": MAX_PREFERENCES,
        }

    # ── Auth endpoints ───────────────────────────────────────────────────

    @app.post("/auth/wallet")
    def wallet_login(
        body: WalletLoginRequest,
        request: Request,
        services: Services = Depends(get_services),
    ) -> dict:
        user = services.users.get_by_id(body.address)
        if user is None:
            user = services.users.create_or_update(body.address)
        session_user = wallet_session_user(user.user_id)
        request.session["user"] = session_user
        return {"status": "ok", "user": session_user}

    @app.post("/auth/login")
    def admin_login(
        body: LoginRequest,
        request: Request,
        services: Services = Depends(get_services),
    ) -> dict:
        user = services.admins.authenticate(body.username, body.password)
        if not user:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        request.session["user"] = user
        return {"status": "ok", "user": user}

    @app.post("/auth/logout")
    def logout(request: Request) -> dict:
        request.session.clear()
        return {"status": "logged_out"}

    @app.get("/auth/me")
    def auth_me(request: Request) -> dict:
        user = get_current_user(request)
        if not user:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return user

    # ── Recommendations ──────────────────────────────────────────────────

    @app.get("/recommendations", response_model=FeedResponse)
    def recommendations_feed(
        request: Request,
        latitude: float | None = Query(default=None, ge=-90.0, le=90.0),
        longitude: float | None = Query(default=None, ge=-180.0, le=180.0),
        radius: float = Query(default=5.0, gt=0.0, le=100.0),
        vibe_tags: list[str] = Query(default=[]),
        min_trend_score: int = Query(default=0, ge=0, le=100),
        limit: int = Query(default=20, ge=1, le=100),
        services: Services = Depends(get_services),
    ) -> FeedResponse:
        session_user = get_current_user(request) or {}
        user = None
        if session_user.get("user_id"):
            user = services.users.get_by_id(session_user["user_id"])

        filters = RecommendationFilters(
            vibe_tags=vibe_tags,
            min_trend_score=min_trend_score,
            latitude=latitude,
            longitude=longitude,
            radius_km=radius,
            limit=limit,
        )
        try:
            return build_feed(services.recommendations, services.events, filters, user)
        except PremiumRequiredError as exc:
            raise HTTPException(status_code=403, detail=str(exc)) from exc

    @app.post("/recommendations", response_model=Recommendation, status_code=201)
    def create_recommendation(
        body: RecommendationIn,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> Recommendation:
        data = body.model_dump()
        venue = services.venues.get_by_id(body.venue_id) if body.venue_id else None
        data = enrich_with_llm(data, venue, services.llm_config, services.cache)
        return services.recommendations.create_or_update(data)

    @app.post("/recommendations/generate", response_model=list[Recommendation])
    def generate_recommendations(
        body: GenerateRequest,
        user: dict = Depends(require_admin),
        services: Services = Depends(get_services),
    ) -> list[Recommendation]:
        if body.use_llm:
            items = generate_mock_recommendations(
                body.count, body.latitude, body.longitude, config=services.llm_config,
            )
            if items:
                return [services.recommendations.create_or_update(i) for i in items]
            logger.info("LLM mock generation unavailable, using random generator")
        return services.recommendations.generate_mock(body.count, body.latitude, body.longitude)

    @app.get("/recommendations/{recommendation_id}", response_model=Recommendation)
    def get_recommendation(
        recommendation_id: str,
        services: Services = Depends(get_services),
    ) -> Recommendation:
        rec = services.recommendations.get_by_id(recommendation_id)
        if rec is None:
            raise HTTPException(status_code=404, detail="Recommendation not found")
        services.events.track_recommendation_view(recommendation_id)
        return rec

    @app.patch("/recommendations/{recommendation_id}", response_model=Recommendation)
    def update_recommendation(
        recommendation_id: str,
        body: RecommendationUpdate,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> Recommendation:
        existing = services.recommendations.get_by_id(recommendation_id)
        if existing is None:
            raise HTTPException(status_code=404, detail="Recommendation not found")
        data = {
            **existing.model_dump(exclude={"match_score"}),
            **body.model_dump(exclude_unset=True),
            "recommendation_id": recommendation_id,
        }
        return services.recommendations.create_or_update(data)

    @app.delete("/recommendations/{recommendation_id}")
    def delete_recommendation(
        recommendation_id: str,
        user: dict = Depends(require_admin),
        services: Services = Depends(get_services),
    ) -> dict:
        if not services.recommendations.delete(recommendation_id):
            raise HTTPException(status_code=404, detail="Recommendation not found")
        return {"status": "deleted"}

    # ── Venues ───────────────────────────────────────────────────────────

    @app.get("/venues", response_model=list[Venue])
    def list_venues(
        query: str | None = None,
        category: str | None = None,
        latitude: float | None = Query(default=None, ge=-90.0, le=90.0),
        longitude: float | None = Query(default=None, ge=-180.0, le=180.0),
        radius: float = Query(default=5.0, gt=0.0, le=100.0),
        services: Services = Depends(get_services),
    ) -> list[Venue]:
        if query:
            return services.venues.search(query)
        if category:
            return services.venues.get_by_category(category)
        if latitude is not None and longitude is not None:
            return services.venues.get_nearby(latitude, longitude, radius)
        raise HTTPException(status_code=400, detail="Missing search parameters")

    @app.post("/venues", response_model=Venue, status_code=201)
    def create_venue(
        body: VenueIn,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> Venue:
        data = body.model_dump()
        if body.latitude is None or body.longitude is None:
            try:
                geo = services.geocoder.geocode_address(f"{body.name}, {body.address}")
            except GeocodingError as exc:
                logger.warning("Geocoding failed for venue %r: %s", body.name, exc)
                raise HTTPException(status_code=400, detail="Failed to geocode address") from exc
            data["latitude"] = geo["latitude"]
            data["longitude"] = geo["longitude"]
        return services.venues.create_or_update(data)

    @app.post("/venues/generate", response_model=list[Venue])
    def generate_venues(
        body: GenerateRequest,
        user: dict = Depends(require_admin),
        services: Services = Depends(get_services),
    ) -> list[Venue]:
        return services.venues.generate_mock(body.count, body.latitude, body.longitude)

    @app.get("/venues/{venue_id}", response_model=VenueDetail)
    def get_venue(
        venue_id: str,
        services: Services = Depends(get_services),
    ) -> VenueDetail:
        venue = services.venues.get_by_id(venue_id)
        if venue is None:
            raise HTTPException(status_code=404, detail="Venue not found")
        detail = VenueDetail(**venue.model_dump())
        try:
            detail.recommendations = services.recommendations.get_by_venue(venue_id)
        except StoreError:
            # Venue data alone is still useful.
            logger.warning("Could not load recommendations for venue %s", venue_id, exc_info=True)
        return detail

    # ── Geocoding ────────────────────────────────────────────────────────

    @app.get("/geocode")
    def geocode(
        address: str = Query(..., min_length=1),
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> dict:
        try:
            return services.geocoder.geocode_address(address)
        except GeocodingError as exc:
            raise HTTPException(status_code=400, detail="Failed to geocode address") from exc

    @app.get("/geocode/reverse")
    def reverse_geocode(
        latitude: float = Query(..., ge=-90.0, le=90.0),
        longitude: float = Query(..., ge=-180.0, le=180.0),
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> dict:
        try:
            return services.geocoder.reverse_geocode(latitude, longitude)
        except GeocodingError as exc:
            raise HTTPException(status_code=400, detail="Failed to reverse geocode") from exc

    @app.get("/places/search")
    def search_places(
        query: str = Query(..., min_length=1),
        place_type: str | None = Query(default=None, alias="type"),
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> list[dict]:
        options = {"type": place_type} if place_type else {}
        try:
            return services.geocoder.search_places(query, **options)
        except GeocodingError as exc:
            raise HTTPException(status_code=400, detail="Place search failed") from exc

    @app.get("/places/nearby")
    def nearby_places(
        latitude: float = Query(..., ge=-90.0, le=90.0),
        longitude: float = Query(..., ge=-180.0, le=180.0),
        radius: int = Query(default=1000, gt=0, le=50000),
        place_type: str | None = Query(default=None, alias="type"),
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> list[dict]:
        options = {"type": place_type} if place_type else {}
        try:
            return services.geocoder.nearby_places(latitude, longitude, radius, **options)
        except GeocodingError as exc:
            raise HTTPException(status_code=400, detail="Nearby search failed") from exc

    @app.get("/places/{place_id}")
    def place_details(
        place_id: str,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> dict:
        try:
            return services.geocoder.place_details(place_id)
        except GeocodingError as exc:
            raise HTTPException(status_code=400, detail="Failed to fetch place details") from exc

    # ── Users ────────────────────────────────────────────────────────────

    @app.get("/users/me", response_model=User)
    def get_me(
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> User:
        record = services.users.get_by_id(user["user_id"])
        if record is None:
            record = services.users.create_or_update(user["user_id"])
        return record

    @app.post("/users/me", response_model=User)
    def update_me(
        body: UserUpdate,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> User:
        return services.users.create_or_update(user["user_id"], **body.model_dump())

    @app.get("/users/{user_id}")
    def get_user(
        user_id: str,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> dict:
        record = _load_user(services, user_id)
        if user["user_id"] != user_id:
            # Other users only see the public profile
            public = PublicUser(user_id=record.user_id, preferences=record.preferences)
            return public.model_dump(mode="json")
        return record.model_dump(mode="json")

    @app.patch("/users/{user_id}/preferences", response_model=User)
    def update_preferences(
        user_id: str,
        body: PreferencesUpdate,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> User:
        require_owner(user_id, user)
        updated = services.users.update_preferences(user_id, body.preferences)
        if updated is None:
            raise HTTPException(status_code=404, detail="User not found")
        return updated

    @app.post("/users/{user_id}/onboarding", response_model=User)
    def complete_onboarding(
        user_id: str,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> User:
        require_owner(user_id, user)
        updated = services.users.complete_onboarding(user_id)
        if updated is None:
            raise HTTPException(status_code=404, detail="User not found")
        services.events.track_onboarding_completion(user_id, updated.preferences)
        return updated

    @app.get("/users/{user_id}/saved-locations", response_model=list[Recommendation])
    def get_saved_locations(
        user_id: str,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> list[Recommendation]:
        require_owner(user_id, user)
        return services.recommendations.get_saved_by_user(_load_user(services, user_id))

    @app.post("/users/{user_id}/saved-locations", response_model=User)
    def save_location(
        user_id: str,
        body: SavedLocationRequest,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> User:
        require_owner(user_id, user)
        if services.recommendations.get_by_id(body.recommendation_id) is None:
            raise HTTPException(status_code=404, detail="Recommendation not found")
        updated = services.users.save_location(user_id, body.recommendation_id)
        if updated is None:
            raise HTTPException(status_code=404, detail="User not found")
        services.events.track_recommendation_save(body.recommendation_id, user_id)
        return updated

    @app.delete("/users/{user_id}/saved-locations", response_model=User)
    def remove_saved_location(
        user_id: str,
        recommendation_id: str | None = None,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> User:
        require_owner(user_id, user)
        if not recommendation_id:
            raise HTTPException(status_code=400, detail="Missing recommendation_id")
        updated = services.users.remove_saved_location(user_id, recommendation_id)
        if updated is None:
            raise HTTPException(status_code=404, detail="User not found")
        return updated

    # ── Subscriptions ────────────────────────────────────────────────────

    @app.get("/subscriptions", response_model=SubscriptionResponse)
    def get_subscription(
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> SubscriptionResponse:
        return _subscription(_load_user(services, user["user_id"]))

    @app.post("/subscriptions", response_model=SubscriptionResponse)
    def update_subscription(
        body: SubscriptionRequest,
        user: dict = Depends(require_user),
        services: Services = Depends(get_services),
    ) -> SubscriptionResponse:
        expiry = None
        if body.tier == SubscriptionTier.premium:
            expiry = datetime.now(timezone.utc) + PREMIUM_PERIOD
        updated = services.users.update_subscription(user["user_id"], body.tier, expiry)
        if updated is None:
            raise HTTPException(status_code=404, detail="User not found")
        if body.tier == SubscriptionTier.premium:
            services.events.track_subscription_upgrade(user["user_id"], body.tier.value)
        return _subscription(updated)

    # ── Analytics ────────────────────────────────────────────────────────

    @app.post("/analytics/pageview", status_code=204)
    def page_view(
        body: PageViewRequest,
        request: Request,
        services: Services = Depends(get_services),
    ) -> None:
        session_user = get_current_user(request) or {}
        services.events.track_page_view(body.page, session_user.get("user_id"))

    # ── Admin endpoints ──────────────────────────────────────────────────

    @app.get("/analytics")
    def analytics(
        user: dict = Depends(require_admin),
        services: Services = Depends(get_services),
    ) -> dict:
        return compute_analytics(services.events.events(), services.cache.stats())

    @app.get("/cache/stats")
    def cache_stats(
        user: dict = Depends(require_admin),
        services: Services = Depends(get_services),
    ) -> dict:
        return services.cache.stats()

    @app.delete("/cache")
    def clear_cache(
        user: dict = Depends(require_admin),
        services: Services = Depends(get_services),
    ) -> dict:
        services.cache.clear()
        return {"status": "cleared"}

    return app


app = create_app()
