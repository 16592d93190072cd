"""Single-flight access token refresh.

Requests that come back 401 are parked on the one in-flight refresh (or
start it), then replayed once with the new token. If the refresh fails,
every parked request is rejected and the session invalidation signal fires
once for the whole batch.

All state changes below happen between awaits, so two requests can never
both see IDLE and both start a refresh.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus

import httpx

from auth_transport.credentials import CredentialCell
from auth_transport.dispatcher import RequestDispatcher
from auth_transport.models.auth import RefreshResponse
from auth_transport.signals import SessionSignal
from auth_transport.utils.errors import (
    RefreshError,
    RepeatedAuthenticationError,
    SessionExpiredError,
)

logger = logging.getLogger(__name__)

AUTH_FAILURE_STATUS = HTTPStatus.UNAUTHORIZED


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class PendingRequest:
    """A request waiting on a refresh. ``request`` is None for explicit refresh() callers."""
    request: httpx.Request | None
    retried: bool = False
    continuation: asyncio.Future | None = None


@dataclass
class RefreshOperation:
    """One in-flight refresh and the requests queued against it, in join order."""
    waiters: list[PendingRequest] = field(default_factory=list)
    task: asyncio.Task | None = None


class RefreshCoordinator:
    """Wraps a RequestDispatcher with 401 detection, refresh and replay."""

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        credentials: CredentialCell,
        signal: SessionSignal,
        refresh_path: str = "/accounts/token/refresh/",
        refresh_timeout: float | None = 15.0,
    ) -> None:
        self._dispatcher = dispatcher
        self._credentials = credentials
        self._signal = signal
        self._refresh_path = refresh_path
        self._refresh_timeout = refresh_timeout
        self._operation: RefreshOperation | None = None

    @property
    def state(self) -> RefreshState:
        return RefreshState.IDLE if self._operation is None else RefreshState.REFRESHING

    @property
    def waiter_count(self) -> int:
        return 0 if self._operation is None else len(self._operation.waiters)

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a request, transparently refreshing and replaying once on 401.

        Raises:
            SessionExpiredError: The refresh needed to recover failed.
            RepeatedAuthenticationError: The replay was rejected with 401 too.
        """
        return await self._send_pending(PendingRequest(request=request))

    async def refresh(self) -> str:
        """Join the in-flight refresh, or start one, and return the new token."""
        pending = PendingRequest(request=None, retried=True)
        self._join(pending)
        return await pending.continuation

    async def _send_pending(self, pending: PendingRequest) -> httpx.Response:
        response = await self._dispatcher.send(pending.request)
        if response.status_code != AUTH_FAILURE_STATUS:
            return response

        if pending.retried:
            logger.warning(
                "Replayed %s %s was rejected again, giving up",
                pending.request.method, pending.request.url,
            )
            raise RepeatedAuthenticationError(response)

        pending.retried = True
        self._join(pending)
        await pending.continuation
        return await self._send_pending(pending)

    def _join(self, pending: PendingRequest) -> None:
        """Queue a waiter on the current refresh, starting one if idle. Never awaits."""
        pending.continuation = asyncio.get_running_loop().create_future()

        if self._operation is not None:
            self._operation.waiters.append(pending)
            logger.debug("Joined in-flight refresh (%d waiting)", len(self._operation.waiters))
            return

        operation = RefreshOperation(waiters=[pending])
        self._operation = operation
        logger.info("Starting token refresh")
        operation.task = asyncio.create_task(self._run(operation))

    async def _run(self, operation: RefreshOperation) -> None:
        try:
            if self._refresh_timeout is None:
                token = await self._request_new_token()
            else:
                token = await asyncio.wait_for(self._request_new_token(), self._refresh_timeout)
        except asyncio.CancelledError:
            self._settle_cancelled(operation)
            raise
        except Exception as e:
            self._settle_failure(operation, e)
        else:
            self._settle_success(operation, token)

    async def _request_new_token(self) -> str:
        """POST to the refresh endpoint, authenticated only by the session cookie."""
        request = self._dispatcher.build_request("POST", self._refresh_path)
        response = await self._dispatcher.send_uncredentialed(request)

        if not response.is_success:
            raise RefreshError(
                f"Token refresh failed (HTTP {response.status_code})",
                status_code=response.status_code,
            )

        try:
            return RefreshResponse(**response.json()).access
        except (ValueError, TypeError) as e:
            raise RefreshError(
                f"Token refresh returned an unusable body: {e}",
                status_code=response.status_code,
            ) from e

    def _settle_success(self, operation: RefreshOperation, token: str) -> None:
        self._credentials.set(token)
        logger.info("Token refreshed, replaying %d waiting request(s)", len(operation.waiters))
        for waiter in operation.waiters:
            if not waiter.continuation.done():
                waiter.continuation.set_result(token)
        self._operation = None

    def _settle_failure(self, operation: RefreshOperation, error: Exception) -> None:
        if isinstance(error, asyncio.TimeoutError):
            reason = f"refresh timed out after {self._refresh_timeout}s"
        else:
            reason = str(error) or type(error).__name__
        logger.warning("Token refresh failed (%s), ending session for %d waiter(s)",
                       reason, len(operation.waiters))

        self._credentials.clear()
        for waiter in operation.waiters:
            if not waiter.continuation.done():
                exc = SessionExpiredError(f"Session expired: {reason}")
                exc.__cause__ = error
                waiter.continuation.set_exception(exc)
        self._operation = None
        self._signal.emit()

    def _settle_cancelled(self, operation: RefreshOperation) -> None:
        logger.info("Token refresh cancelled, rejecting %d waiter(s)", len(operation.waiters))
        for waiter in operation.waiters:
            if not waiter.continuation.done():
                waiter.continuation.set_exception(SessionExpiredError("Session expired: refresh cancelled"))
        self._operation = None

    async def aclose(self) -> None:
        """Cancel an in-flight refresh, if any."""
        operation = self._operation
        if operation is None or operation.task is None:
            return
        operation.task.cancel()
        try:
            await operation.task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        finally:
            # A task cancelled before its first step never reaches _run's handler
            if self._operation is operation:
                self._settle_cancelled(operation)
