# src/lostfound/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/lostfound/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `LOSTFOUND_LOG_LEVEL`, `LOSTFOUND_STORE_PATH`)
- an external YAML file via `LOSTFOUND_CONFIG_PATH`

Design rule:
- Defaults (radius, page size, default status) live in YAML, not in service code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal
from lostfound.core.env import load_dotenv_if_present

import yaml
from pydantic import BaseModel, Field


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `lostfound.config`."""
    text = resources.files("lostfound.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "LostFound"
    timezone: str = "UTC"
    log_level: str = "INFO"


class PostSettings(BaseModel):
    default_status: str = "lost"
    conventional_statuses: list[str] = Field(default_factory=lambda: ["lost", "found", "deceased"])
    # None keeps status an open string.
    allowed_statuses: list[str] | None = None


class SearchSettings(BaseModel):
    default_radius_km: float = Field(5.0, ge=0)


class ListingSettings(BaseModel):
    default_page: int = Field(1, ge=1)
    default_limit: int = Field(10, ge=1)
    max_limit: int | None = Field(default=None, ge=1)
    recent_window_hours: float = Field(24, gt=0)


class GeocodingSettings(BaseModel):
    enabled: bool = True
    base_url: str = "https://nominatim.openstreetmap.org/reverse"
    timeout_seconds: float = Field(5.0, gt=0)
    max_concurrency: int = Field(4, ge=1)
    user_agent: str = "lostfound/0.1.0"


class StoreSettings(BaseModel):
    backend: Literal["memory", "json"] = "memory"
    path: str = "data/posts.json"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    posts: PostSettings = Field(default_factory=PostSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    listing: ListingSettings = Field(default_factory=ListingSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Only a short whitelist is honoured; everything else comes from YAML.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("LOSTFOUND_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    store_path = os.getenv("LOSTFOUND_STORE_PATH")
    if store_path:
        store = data.setdefault("store", {})
        store["path"] = store_path
        store["backend"] = "json"

    geocoding_url = os.getenv("LOSTFOUND_GEOCODING_BASE_URL")
    if geocoding_url:
        data.setdefault("geocoding", {})["base_url"] = geocoding_url

    geocoding_enabled = os.getenv("LOSTFOUND_GEOCODING_ENABLED")
    if geocoding_enabled:
        data.setdefault("geocoding", {})["enabled"] = geocoding_enabled.strip().lower() in {"1", "true", "yes", "y"}

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("LOSTFOUND_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
