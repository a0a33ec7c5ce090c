"""
Preference matching for the recommendation feed.

Two policies decide how a user's vibe preferences shape the candidate list:

* **FreeRankingPolicy** keeps only candidates sharing at least one vibe tag
  with the user, in their original order.
* **PremiumRankingPolicy** scores every candidate and sorts by score::

      match_score = |preferences ∩ vibe_tags| / max(|preferences|, 1)
      final_score = 0.7 × match_score + 0.3 × (trend_score / 100)

The policy is chosen once per request from the user's subscription tier and
handed to :func:`rank`. An empty preference set always returns the
candidates unchanged, whichever policy is active.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

from .models import Recommendation


class RankingPolicy(Protocol):
    name: str

    def apply(
        self, preferences: set[str], candidates: Sequence[Recommendation]
    ) -> list[Recommendation]: ...


def _overlap(preferences: set[str], rec: Recommendation) -> int:
    return len(preferences.intersection(rec.vibe_tags or []))


@dataclass(frozen=True)
class FreeRankingPolicy:
    name: str = "free"

    def apply(
        self, preferences: set[str], candidates: Sequence[Recommendation]
    ) -> list[Recommendation]:
        return [rec for rec in candidates if _overlap(preferences, rec) > 0]


@dataclass(frozen=True)
class PremiumRankingPolicy:
    name: str = "premium"
    match_weight: float = 0.7
    trend_weight: float = 0.3

    def score(self, preferences: set[str], rec: Recommendation) -> float:
        match = _overlap(preferences, rec) / max(len(preferences), 1)
        return self.match_weight * match + self.trend_weight * (rec.trend_score / 100)

    def apply(
        self, preferences: set[str], candidates: Sequence[Recommendation]
    ) -> list[Recommendation]:
        scored = [
            rec.model_copy(update={"match_score": self.score(preferences, rec)})
            for rec in candidates
        ]
        # sorted() is stable, so equal scores keep their input order
        return sorted(scored, key=lambda r: r.match_score, reverse=True)


FREE_POLICY = FreeRankingPolicy()
PREMIUM_POLICY = PremiumRankingPolicy()


def policy_for_tier(is_premium: bool) -> RankingPolicy:
    return PREMIUM_POLICY if is_premium else FREE_POLICY


def rank(
    preferences: Iterable[str],
    candidates: Sequence[Recommendation],
    policy: RankingPolicy = FREE_POLICY,
) -> list[Recommendation]:
    """Personalize ``candidates`` for ``preferences`` using ``policy``."""
    prefs = {p for p in preferences if p}
    if not prefs:
        return list(candidates)
    return policy.apply(prefs, candidates)
