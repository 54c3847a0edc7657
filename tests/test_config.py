"""Tests for environment-driven settings."""

from core.config import Settings, parse_origins


def test_defaults(monkeypatch):
    for name in ("NUTRITION_STRICT_PRESETS", "RATIO_TOLERANCE", "CORS_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.nutrition_strict_presets is False
    assert settings.ratio_tolerance == 0.01
    assert parse_origins(settings.cors_origins) == ["*"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("NUTRITION_STRICT_PRESETS", "true")
    monkeypatch.setenv("RATIO_TOLERANCE", "0.05")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    settings = Settings(_env_file=None)
    assert settings.nutrition_strict_presets is True
    assert settings.ratio_tolerance == 0.05
    assert parse_origins(settings.cors_origins) == ["http://a.test", "http://b.test"]
