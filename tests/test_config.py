"""Tests for settings parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from marketplace.config import Settings, get_settings, reset_settings_cache


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.profile_collections() == ("detailer", "customer")
    assert settings.tax_flat_rate == pytest.approx(0.0719)
    assert settings.notification_feed_limit == 50


def test_service_account_must_be_a_json_object() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, firebase_service_account="[1, 2]")
    with pytest.raises(ValidationError):
        Settings(_env_file=None, firebase_service_account="not json")


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("DEVICE_TOKEN_COLLECTIONS", "customer, detailer")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
    reset_settings_cache()
    try:
        settings = get_settings()
        assert settings.profile_collections() == ("customer", "detailer")
        assert settings.allowed_origins() == ["https://a.example", "https://b.example"]
    finally:
        reset_settings_cache()
