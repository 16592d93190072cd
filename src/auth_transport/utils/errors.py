"""Transport exceptions and structured error output for the CLI."""

from __future__ import annotations

import json
import sys

import httpx
from rich.console import Console

console = Console(stderr=True)


class AuthTransportError(Exception):
    """Base class for errors raised by the auth transport."""


class RefreshError(AuthTransportError):
    """The refresh endpoint rejected the session or returned an unusable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(AuthTransportError):
    """Refresh failed; the session is over and the user must log in again."""


class RepeatedAuthenticationError(AuthTransportError):
    """A request was rejected with 401 even after being replayed with a fresh token."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(
            f"Authentication failed after token refresh (HTTP {response.status_code}): "
            f"{response.request.method} {response.request.url}"
        )
        self.response = response


# Actionable hints keyed by error substring
_ERROR_HINTS: list[tuple[str, str]] = [
    ("session expired", "Session is over - log in again to obtain a new session cookie"),
    ("after token refresh", "Server keeps rejecting fresh tokens - check the account's permissions"),
    ("refresh", "Refresh endpoint rejected the session cookie - pass a valid --cookie"),
    ("401", "Access token rejected - pass --token or --cookie"),
    ("unknown environment", "Environment not configured - check config/profiles.yaml"),
    ("timeout", "Request timed out - try again or check network connectivity"),
    ("timed out", "Request timed out - try again or check network connectivity"),
    ("connection", "Connection error - check network connectivity and the API base URL"),
]


def _get_hint(error_message: str) -> str | None:
    """Match an error message to an actionable hint."""
    lower = error_message.lower()
    for pattern, hint in _ERROR_HINTS:
        if pattern.lower() in lower:
            return hint
    return None


def _error_code(error: Exception) -> str:
    if isinstance(error, SessionExpiredError):
        return "SESSION_EXPIRED"
    if isinstance(error, (RepeatedAuthenticationError, RefreshError)):
        return "AUTH_ERROR"
    if isinstance(error, httpx.TimeoutException):
        return "TIMEOUT"
    if isinstance(error, httpx.TransportError):
        return "CONNECTION_ERROR"

    message = str(error).lower()
    if "401" in message or "unauthorized" in message:
        return "AUTH_ERROR"
    if "timeout" in message or "timed out" in message:
        return "TIMEOUT"
    if "connection" in message:
        return "CONNECTION_ERROR"
    return "RUNTIME_ERROR"


def handle_error(error: Exception) -> None:
    """Handle an error with structured output to stdout and human-readable output to stderr.

    Outputs a JSON error object to stdout for agent consumption:
    {"error": true, "code": "SESSION_EXPIRED", "message": "...", "hint": "..."}
    """
    message = str(error) or type(error).__name__
    hint = _get_hint(message)

    error_obj: dict[str, object] = {
        "error": True,
        "code": _error_code(error),
        "message": message,
    }
    if hint:
        error_obj["hint"] = hint

    json.dump(error_obj, sys.stdout)
    sys.stdout.write("\n")

    console.print(f"[red]Error:[/red] {message}")
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")
