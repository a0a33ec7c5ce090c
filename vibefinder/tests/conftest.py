from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from vibefinder.app import create_app
from vibefinder.auth.config import AuthConfig
from vibefinder.geocoding.config import GeocodingConfig
from vibefinder.llm.config import LLMConfig
from vibefinder.services import build_services
from vibefinder.store.memory import InMemoryStore


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def services(clock):
    return build_services(
        store=InMemoryStore(),
        llm_config=LLMConfig(api_key="", enabled=False),
        geocoding_config=GeocodingConfig(api_key="test-key"),
        auth_config=AuthConfig(
            session_secret="test-secret",
            admin_username="admin",
            admin_password="admin123",
        ),
        clock=clock,
    )


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services))
