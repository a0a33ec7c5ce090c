from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class AuthConfig:
    session_secret: str = field(
        default_factory=lambda: os.getenv("SESSION_SECRET", "vibefinder-secret-change-in-production")
    )
    admin_username: str = field(default_factory=lambda: os.getenv("ADMIN_USERNAME", "admin"))
    admin_password: str = field(default_factory=lambda: os.getenv("ADMIN_PASSWORD", "admin123"))


DEFAULT_AUTH_CONFIG = AuthConfig()
