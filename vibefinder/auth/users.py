from __future__ import annotations

from typing import Any

import bcrypt

from .config import DEFAULT_AUTH_CONFIG, AuthConfig


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


class AdminAccounts:
    """Username/password accounts for operators. Regular users sign in by wallet."""

    def __init__(self, config: AuthConfig = DEFAULT_AUTH_CONFIG) -> None:
        self._accounts: dict[str, str] = {}
        if config.admin_username and config.admin_password:
            self.add(config.admin_username, config.admin_password)

    def add(self, username: str, password: str) -> None:
        self._accounts[username] = _hash_password(password)

    def authenticate(self, username: str, password: str) -> dict[str, Any] | None:
        """Verify credentials. Returns ``{username, role}`` or ``None``."""
        hashed = self._accounts.get(username)
        if hashed and _verify_password(password, hashed):
            return {"username": username, "role": "admin"}
        return None


def wallet_session_user(address: str) -> dict[str, Any]:
    return {"user_id": address, "role": "user"}
