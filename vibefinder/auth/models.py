from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class WalletLoginRequest(BaseModel):
    address: str = Field(..., min_length=1, max_length=128, description="Wallet address")
