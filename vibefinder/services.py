from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .analytics.store import EventLog
from .auth.config import DEFAULT_AUTH_CONFIG, AuthConfig
from .auth.users import AdminAccounts
from .cache.config import CacheTTL
from .cache.ttl_cache import TTLCache
from .geocoding.config import DEFAULT_GEOCODING_CONFIG, GeocodingConfig
from .geocoding.google_maps import GeocodingClient
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .recommendations.repository import RecommendationRepository
from .store.base import TableStore
from .store.config import StoreConfig
from .store.memory import InMemoryStore
from .users.repository import UserRepository
from .venues.repository import VenueRepository

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything a request handler needs, built once at startup."""

    cache: TTLCache
    ttl: CacheTTL
    store: TableStore
    recommendations: RecommendationRepository
    venues: VenueRepository
    users: UserRepository
    geocoder: GeocodingClient
    events: EventLog
    admins: AdminAccounts
    llm_config: LLMConfig
    auth_config: AuthConfig


def build_store(config: StoreConfig) -> TableStore:
    if config.use_supabase:
        from .store.supabase_store import SupabaseStore

        logger.info("Using Supabase store at %s", config.supabase_url)
        return SupabaseStore(config)
    logger.info("Using in-memory store")
    return InMemoryStore()


def build_services(
    store: TableStore | None = None,
    store_config: StoreConfig | None = None,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    geocoding_config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
    auth_config: AuthConfig = DEFAULT_AUTH_CONFIG,
    ttl: CacheTTL | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> Services:
    ttl = ttl or CacheTTL()
    cache = TTLCache(clock=clock)
    if store is None:
        store = build_store(store_config or StoreConfig())
    return Services(
        cache=cache,
        ttl=ttl,
        store=store,
        recommendations=RecommendationRepository(store, cache, ttl),
        venues=VenueRepository(store, cache, ttl),
        users=UserRepository(store),
        geocoder=GeocodingClient(cache, geocoding_config, ttl),
        events=EventLog(),
        admins=AdminAccounts(auth_config),
        llm_config=llm_config,
        auth_config=auth_config,
    )
