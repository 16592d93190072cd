"""Tests for config.py — environment lookup, URL building, env helpers."""
import pytest

from auth_transport.config import _env, _load_profiles, _load_settings


# ── get_environment ──────────────────────────────────────────────────

def test_get_environment_lower(fake_config):
    """Accepts uppercase and still resolves correctly."""
    assert fake_config.get_environment("LOCAL").api_base_url == "http://localhost:8000"


def test_get_environment_unknown(fake_config):
    with pytest.raises(ValueError, match="Unknown environment 'prod'"):
        fake_config.get_environment("prod")


def test_all_environments_sorted(fake_config):
    assert fake_config.all_environments == ["local", "staging"]


# ── api_url / refresh_path ───────────────────────────────────────────

def test_api_url_default(fake_config):
    assert fake_config.api_url() == "https://api.test/api/v1"


def test_api_url_strips_trailing_slash(fake_config):
    assert fake_config.api_url("staging") == "https://staging.api.test/api/v1"


def test_refresh_path_default(fake_config):
    assert fake_config.refresh_path() == "/accounts/token/refresh/"


def test_refresh_path_environment_override(fake_config):
    assert fake_config.refresh_path("staging") == "/auth/refresh/"


def test_refresh_path_environment_without_override(fake_config):
    assert fake_config.refresh_path("local") == "/accounts/token/refresh/"


# ── _env helper ──────────────────────────────────────────────────────

def test_env_first_key(monkeypatch):
    monkeypatch.setenv("FOO", "bar")
    assert _env("FOO", "BAZ") == "bar"


def test_env_fallback_key(monkeypatch):
    monkeypatch.delenv("FOO", raising=False)
    monkeypatch.setenv("BAZ", "qux")
    assert _env("FOO", "BAZ") == "qux"


def test_env_default(monkeypatch):
    monkeypatch.delenv("FOO", raising=False)
    monkeypatch.delenv("BAZ", raising=False)
    assert _env("FOO", "BAZ", default="fallback") == "fallback"


def test_env_strips_quotes(monkeypatch):
    monkeypatch.setenv("FOO", '"hello"')
    assert _env("FOO") == "hello"


# ── _load_settings ───────────────────────────────────────────────────

def test_load_settings_defaults(monkeypatch):
    for key in ("AUTH_TRANSPORT_API_BASE_URL", "VITE_API_BASE_URL", "AUTH_TRANSPORT_REFRESH_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    settings = _load_settings()
    assert settings.api_base_url == "http://localhost:8000"
    assert settings.refresh_timeout == 15.0


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("AUTH_TRANSPORT_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("AUTH_TRANSPORT_REFRESH_PATH", "/token/refresh/")
    monkeypatch.setenv("AUTH_TRANSPORT_REFRESH_TIMEOUT", "5")
    settings = _load_settings()
    assert settings.api_base_url == "https://api.example.com"
    assert settings.refresh_path == "/token/refresh/"
    assert settings.refresh_timeout == 5.0


def test_load_settings_vite_fallback(monkeypatch):
    """Falls back to the frontend's VITE_API_BASE_URL."""
    monkeypatch.delenv("AUTH_TRANSPORT_API_BASE_URL", raising=False)
    monkeypatch.setenv("VITE_API_BASE_URL", "https://legacy.example.com")
    assert _load_settings().api_base_url == "https://legacy.example.com"


# ── _load_profiles ───────────────────────────────────────────────────

def test_load_profiles(tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "profiles.yaml").write_text(
        "environments:\n"
        "  Staging:\n"
        "    api_base_url: https://staging.example.com\n"
        "    refresh_path: /auth/refresh/\n"
    )
    profiles = _load_profiles(tmp_path)
    assert list(profiles) == ["staging"]
    assert profiles["staging"].refresh_path == "/auth/refresh/"


def test_load_profiles_missing_file(tmp_path):
    assert _load_profiles(tmp_path) == {}


def test_load_profiles_empty_file(tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "profiles.yaml").write_text("")
    assert _load_profiles(tmp_path) == {}
