"""Authenticated API client.

The one entry point service code should use: every call goes through the
refresh coordinator, so an expired access token is refreshed and the call
replayed without the caller noticing.
"""

from __future__ import annotations

from typing import Any

import httpx

from auth_transport.auth import RefreshCoordinator, RefreshState
from auth_transport.config import Config
from auth_transport.credentials import CredentialCell, default_cell
from auth_transport.dispatcher import RequestDispatcher
from auth_transport.models.auth import CredentialStatus
from auth_transport.signals import SessionSignal, get_signal


def _preview(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}...{token[-4:]}"


class AuthenticatedClient:
    """HTTP client for the API with single-flight token refresh."""

    def __init__(
        self,
        config: Config,
        env: str | None = None,
        *,
        credentials: CredentialCell | None = None,
        signal: SessionSignal | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cookies: dict[str, str] | None = None,
    ) -> None:
        self._config = config
        self._credentials = credentials if credentials is not None else default_cell()
        self._signal = signal if signal is not None else get_signal(config.settings.logout_event)
        self._dispatcher = RequestDispatcher(
            config.api_url(env),
            self._credentials,
            timeout=config.settings.request_timeout,
            transport=transport,
            cookies=cookies,
        )
        self._coordinator = RefreshCoordinator(
            self._dispatcher,
            self._credentials,
            self._signal,
            refresh_path=config.refresh_path(env),
            refresh_timeout=config.settings.refresh_timeout,
        )

    async def __aenter__(self) -> AuthenticatedClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @property
    def credentials(self) -> CredentialCell:
        return self._credentials

    @property
    def signal(self) -> SessionSignal:
        return self._signal

    @property
    def state(self) -> RefreshState:
        return self._coordinator.state

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a prebuilt request with refresh-and-replay on 401."""
        return await self._coordinator.send(request)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make an authenticated API request.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            path: API path (e.g. "/menu/items/"). Appended to the API base URL.
            json: JSON request body.
            params: Query parameters.
            headers: Additional headers to include.

        Returns:
            The httpx.Response object. Non-401 error statuses are returned as is.

        Raises:
            SessionExpiredError: The token could not be refreshed.
            RepeatedAuthenticationError: The request failed with 401 after a refresh.
        """
        request = self._dispatcher.build_request(
            method.upper(), path, json=json, params=params, headers=headers
        )
        return await self._coordinator.send(request)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for GET requests."""
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for POST requests."""
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for PUT requests."""
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for PATCH requests."""
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for DELETE requests."""
        return await self.request("DELETE", path, **kwargs)

    async def refresh(self) -> str:
        """Force a token refresh (joining one already in flight)."""
        return await self._coordinator.refresh()

    def status(self) -> CredentialStatus:
        """Get the current credential status."""
        token = self._credentials.get()
        return CredentialStatus(
            has_token=token is not None,
            state=self._coordinator.state.value,
            token_preview=_preview(token) if token else None,
        )

    async def aclose(self) -> None:
        """Cancel any in-flight refresh and close the underlying HTTP client."""
        await self._coordinator.aclose()
        await self._dispatcher.aclose()
