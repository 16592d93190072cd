"""Auth-related data models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RefreshResponse(BaseModel):
    """Body returned by the refresh endpoint."""
    access: str = Field(min_length=1)


class CredentialStatus(BaseModel):
    """Current state of the in-memory credential and the refresh coordinator."""
    has_token: bool
    state: str
    token_preview: str | None = None
