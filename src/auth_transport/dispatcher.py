"""Outbound HTTP dispatch with bearer credential injection.

The dispatcher does not interpret status codes. Recovery from 401s is
layered on top by the refresh coordinator.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from auth_transport.credentials import CredentialCell

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Sends requests through one shared httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        credentials: CredentialCell,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        cookies: dict[str, str] | None = None,
    ) -> None:
        self._credentials = credentials
        # The cookie jar carries the session cookie used by the refresh call
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            cookies=cookies,
            timeout=timeout,
            transport=transport,
        )

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build a request relative to the API base URL."""
        return self._http.build_request(method, path, json=json, params=params, headers=headers)

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a request, attaching the current access token if there is one."""
        token = self._credentials.get()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        else:
            request.headers.pop("Authorization", None)
        logger.debug("%s %s (credentialed=%s)", request.method, request.url, bool(token))
        return await self._http.send(request)

    async def send_uncredentialed(self, request: httpx.Request) -> httpx.Response:
        """Send a request without touching its Authorization header."""
        logger.debug("%s %s (uncredentialed)", request.method, request.url)
        return await self._http.send(request)

    @property
    def cookies(self) -> httpx.Cookies:
        return self._http.cookies

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
