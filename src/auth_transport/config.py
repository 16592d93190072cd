"""Configuration management for the auth transport.

Loads endpoint settings from .env and environment profiles from profiles.yaml.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class EnvironmentProfile(BaseModel):
    """A single deployment's API endpoints."""
    api_base_url: str
    refresh_path: str | None = None


class Settings(BaseModel):
    """Application settings loaded from environment variables."""
    api_base_url: str = Field(default="http://localhost:8000", description="API origin")
    api_prefix: str = Field(default="/api/v1", description="Path prefix for every API call")
    refresh_path: str = Field(default="/accounts/token/refresh/", description="Refresh endpoint path")
    request_timeout: float = Field(default=30.0, description="Timeout for ordinary requests in seconds")
    refresh_timeout: float = Field(default=15.0, description="Upper bound on one refresh call in seconds")
    logout_event: str = Field(default="auth:logout", description="Session invalidation signal name")


class Config(BaseModel):
    """Full application configuration."""
    settings: Settings
    environments: dict[str, EnvironmentProfile] = Field(default_factory=dict)

    def get_environment(self, name: str) -> EnvironmentProfile:
        """Get an environment profile by name (e.g. local, staging)."""
        name = name.lower()
        if name not in self.environments:
            available = ", ".join(sorted(self.environments.keys())) or "none"
            raise ValueError(f"Unknown environment '{name}'. Available: {available}")
        return self.environments[name]

    def api_url(self, env: str | None = None) -> str:
        """Base URL plus API prefix for an environment, or the default settings."""
        base = self.get_environment(env).api_base_url if env else self.settings.api_base_url
        return base.rstrip("/") + self.settings.api_prefix

    def refresh_path(self, env: str | None = None) -> str:
        """Refresh endpoint path, relative to api_url()."""
        if env:
            profile = self.get_environment(env)
            if profile.refresh_path:
                return profile.refresh_path
        return self.settings.refresh_path

    @property
    def all_environments(self) -> list[str]:
        """List all configured environment names."""
        return sorted(self.environments.keys())


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (where config/ lives)."""
    current = Path(__file__).resolve().parent
    for parent in [current, *current.parents]:
        if (parent / "config" / "profiles.yaml").exists():
            return parent
    # Fallback: cwd
    return Path.cwd()


def _load_profiles(project_root: Path) -> dict[str, EnvironmentProfile]:
    """Load environment profiles from profiles.yaml, if present."""
    profiles_path = project_root / "config" / "profiles.yaml"
    if not profiles_path.exists():
        logger.debug("No profiles config at %s, using settings only", profiles_path)
        return {}

    with open(profiles_path) as f:
        data = yaml.safe_load(f) or {}

    environments = {}
    for name, profile_data in data.get("environments", {}).items():
        environments[name.lower()] = EnvironmentProfile(**profile_data)
    return environments


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def _load_settings() -> Settings:
    """Load settings from environment variables.

    Supports both AUTH_TRANSPORT_* and the frontend's VITE_API_BASE_URL.
    """
    return Settings(
        api_base_url=_env("AUTH_TRANSPORT_API_BASE_URL", "VITE_API_BASE_URL", default="http://localhost:8000"),
        api_prefix=_env("AUTH_TRANSPORT_API_PREFIX", default="/api/v1"),
        refresh_path=_env("AUTH_TRANSPORT_REFRESH_PATH", default="/accounts/token/refresh/"),
        request_timeout=float(_env("AUTH_TRANSPORT_REQUEST_TIMEOUT", default="30")),
        refresh_timeout=float(_env("AUTH_TRANSPORT_REFRESH_TIMEOUT", default="15")),
        logout_event=_env("AUTH_TRANSPORT_LOGOUT_EVENT", default="auth:logout"),
    )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load and cache the full application configuration."""
    project_root = _find_project_root()

    # Load .env from project root if it exists
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    settings = _load_settings()
    environments = _load_profiles(project_root)

    return Config(settings=settings, environments=environments)
