from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_seconds(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class CacheTTL:
    """TTL presets in seconds. Callers pick one; the cache only sees a number."""

    SHORT: float = field(default_factory=lambda: _env_seconds("CACHE_TTL_SHORT", 5 * 60))
    MEDIUM: float = field(default_factory=lambda: _env_seconds("CACHE_TTL_MEDIUM", 30 * 60))
    LONG: float = field(default_factory=lambda: _env_seconds("CACHE_TTL_LONG", 24 * 60 * 60))

    def __post_init__(self) -> None:
        if not (0 <= self.SHORT < self.MEDIUM < self.LONG):
            raise ValueError(
                f"TTL presets must satisfy short < medium < long, got "
                f"{self.SHORT}, {self.MEDIUM}, {self.LONG}"
            )


DEFAULT_CACHE_TTL = CacheTTL()
