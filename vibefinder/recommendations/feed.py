from __future__ import annotations

import logging

from ..analytics.store import EventLog
from ..users.models import User
from ..users.repository import is_premium
from .matcher import FREE_POLICY, policy_for_tier, rank
from .models import FeedResponse, RecommendationFilters
from .repository import RecommendationRepository

logger = logging.getLogger(__name__)


class PremiumRequiredError(Exception):
    """Advanced filters were requested without an active premium subscription."""


def build_feed(
    repository: RecommendationRepository,
    events: EventLog,
    filters: RecommendationFilters,
    user: User | None = None,
) -> FeedResponse:
    premium = is_premium(user)

    # --- Tier gate ---
    if filters.is_advanced and not premium:
        raise PremiumRequiredError("Advanced filtering requires a premium subscription")

    events.track_filter_usage(
        filters.model_dump(exclude={"limit"}),
        user.user_id if user else None,
    )

    # --- Candidates ---
    candidates = repository.get_with_filters(filters, apply_limit=False)
    total_candidates = len(candidates)

    # --- Personalization ---
    preferences = set(user.preferences) if user else set()
    policy = policy_for_tier(premium)
    personalized = rank(preferences, candidates, policy)

    applied = bool(preferences) and bool(candidates)
    if policy is FREE_POLICY and not personalized and candidates:
        # Nothing matched the user's vibes: show the unfiltered feed instead.
        logger.debug("No vibe matches for %s, falling back to unfiltered feed",
                     user.user_id if user else "anonymous")
        personalized = candidates
        applied = False

    return FeedResponse(
        recommendations=personalized[: filters.limit],
        total_candidates=total_candidates,
        tier=policy.name,
        personalized=applied,
    )
