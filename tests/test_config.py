"""Tests for settings."""

import pytest

from meal_windows.config import Settings, build_constraints


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "header.payload.signature")
    monkeypatch.setenv("API_TOKEN", "token")
    monkeypatch.setenv("OPENAI_API_KEY", "key")
    monkeypatch.setenv("ADVANCED_ENGINE", "none")
    monkeypatch.setenv("DEVIATION_THRESHOLD", "0.3")

    settings = Settings(_env_file=None)

    assert settings.advanced_engine == "none"
    assert settings.deviation_threshold == 0.3
    assert settings.openai_store is False


def test_build_constraints_copies_settings(settings: Settings) -> None:
    constraints = build_constraints(
        settings.model_copy(update={"bedtime_buffer_hours": 2.0})
    )

    assert constraints.deviation_threshold == 0.25
    assert constraints.bedtime_buffer_hours == 2.0
    assert constraints.min_calories_per_window == 200
