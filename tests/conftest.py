"""Shared fixtures for the auth-transport test suite."""
from __future__ import annotations

import asyncio

import httpx
import pytest

from auth_transport.client import AuthenticatedClient
from auth_transport.config import Config, EnvironmentProfile, Settings
from auth_transport.credentials import CredentialCell
from auth_transport.signals import SessionSignal

REFRESH_PATH = "/api/v1/accounts/token/refresh/"


class FakeApi:
    """In-process stand-in for the API server, served through httpx.MockTransport.

    Accepts only ``Bearer <valid_token>``. The refresh endpoint hands out
    ``new_token`` (which then becomes valid) unless told to fail, and waits
    on ``refresh_gate`` first so tests can pile up concurrent 401s.
    """

    def __init__(self, valid_token: str = "T2", new_token: str = "T2") -> None:
        self.valid_token = valid_token
        self.new_token = new_token
        self.refresh_status = 200
        self.refresh_body: object = None
        self.refresh_raises: Exception | None = None
        self.refresh_gate = asyncio.Event()
        self.refresh_gate.set()
        self.refresh_requests: list[httpx.Request] = []
        self.calls: list[tuple[str, str | None]] = []
        self.always_401: set[str] = set()
        self.statuses: dict[str, int] = {}

    @property
    def refresh_calls(self) -> int:
        return len(self.refresh_requests)

    def hold_refresh(self) -> None:
        self.refresh_gate.clear()

    def release_refresh(self) -> None:
        self.refresh_gate.set()

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == REFRESH_PATH:
            self.refresh_requests.append(request)
            await self.refresh_gate.wait()
            if self.refresh_raises is not None:
                raise self.refresh_raises
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"detail": "Token is invalid or expired"})
            if self.refresh_body is not None:
                return httpx.Response(200, json=self.refresh_body)
            self.valid_token = self.new_token
            return httpx.Response(200, json={"access": self.new_token})

        auth = request.headers.get("Authorization")
        self.calls.append((path, auth))
        if path in self.always_401 or auth != f"Bearer {self.valid_token}":
            return httpx.Response(401, json={"detail": "Given token not valid for any token type"})
        if path in self.statuses:
            return httpx.Response(self.statuses[path], json={"detail": "error"})
        return httpx.Response(200, json={"path": path, "auth": auth})

    def calls_for(self, path: str) -> list[str | None]:
        return [auth for p, auth in self.calls if p == path]


@pytest.fixture
def fake_settings() -> Settings:
    return Settings(
        api_base_url="https://api.test",
        api_prefix="/api/v1",
        refresh_path="/accounts/token/refresh/",
        request_timeout=5.0,
        refresh_timeout=2.0,
    )


@pytest.fixture
def fake_environments() -> dict[str, EnvironmentProfile]:
    return {
        "local": EnvironmentProfile(api_base_url="http://localhost:8000"),
        "staging": EnvironmentProfile(
            api_base_url="https://staging.api.test/",
            refresh_path="/auth/refresh/",
        ),
    }


@pytest.fixture
def fake_config(fake_settings, fake_environments) -> Config:
    return Config(settings=fake_settings, environments=fake_environments)


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def cell() -> CredentialCell:
    """Cell holding a stale token the fake API no longer accepts."""
    return CredentialCell("T1")


@pytest.fixture
def signal() -> SessionSignal:
    return SessionSignal()


@pytest.fixture
def make_client(fake_config, api, cell, signal):
    """Factory for AuthenticatedClient wired to the fake API."""

    def factory(**kwargs) -> AuthenticatedClient:
        kwargs.setdefault("credentials", cell)
        kwargs.setdefault("signal", signal)
        kwargs.setdefault("transport", httpx.MockTransport(api.handler))
        return AuthenticatedClient(fake_config, **kwargs)

    return factory


async def wait_for_waiters(client: AuthenticatedClient, count: int) -> None:
    """Yield to the loop until ``count`` requests are parked on the refresh."""
    for _ in range(1000):
        if client._coordinator.waiter_count >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} waiters, got {client._coordinator.waiter_count}")
