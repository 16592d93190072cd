"""In-memory holder for the current access token.

The token is never persisted. Only the refresh coordinator and the login
flow write to it; everything else reads.
"""

from __future__ import annotations


class CredentialCell:
    """Process-wide mutable cell holding at most one access token."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str | None) -> None:
        # Empty strings count as "no credential"
        self._token = token or None

    def clear(self) -> None:
        self._token = None

    @property
    def has_credential(self) -> bool:
        return self._token is not None


_default_cell = CredentialCell()


def default_cell() -> CredentialCell:
    """The cell shared by every client that is not given its own."""
    return _default_cell


def set_access_token(token: str | None) -> None:
    """Store the token obtained at login (or clear it with None)."""
    _default_cell.set(token)


def get_access_token() -> str | None:
    return _default_cell.get()
