from __future__ import annotations

import pytest

from lostfound.config.settings import Settings, _apply_env_overrides, get_settings


def test_packaged_defaults():
    settings = get_settings()

    assert settings.posts.default_status == "lost"
    assert settings.posts.allowed_statuses is None
    assert settings.search.default_radius_km == 5.0
    assert settings.listing.default_page == 1
    assert settings.listing.default_limit == 10
    assert settings.listing.max_limit is None
    assert settings.listing.recent_window_hours == 24


def test_env_overrides_switch_store_and_geocoding(monkeypatch):
    monkeypatch.setenv("LOSTFOUND_STORE_PATH", "/tmp/lostfound/posts.json")
    monkeypatch.setenv("LOSTFOUND_GEOCODING_ENABLED", "0")
    monkeypatch.setenv("LOSTFOUND_LOG_LEVEL", "debug")

    settings = Settings.model_validate(_apply_env_overrides({}))

    assert settings.store.backend == "json"
    assert settings.store.path == "/tmp/lostfound/posts.json"
    assert settings.geocoding.enabled is False
    assert settings.app.log_level == "debug"


def test_config_path_replaces_packaged_defaults(monkeypatch, tmp_path):
    config = tmp_path / "lostfound.yaml"
    config.write_text("search:\n  default_radius_km: 12.5\n", encoding="utf-8")
    monkeypatch.setenv("LOSTFOUND_CONFIG_PATH", str(config))
    get_settings.cache_clear()
    try:
        assert get_settings().search.default_radius_km == 12.5
    finally:
        get_settings.cache_clear()


def test_invalid_yaml_values_are_rejected():
    with pytest.raises(ValueError):
        Settings.model_validate({"listing": {"default_limit": 0}})
