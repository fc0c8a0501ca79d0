"""Tests for environment-driven configuration."""

import pytest

from attention_engine.config import EngineSettings, ScoringWeights, load_settings, load_weights


class TestLoadWeights:
    def test_defaults_without_override(self, monkeypatch):
        monkeypatch.delenv("ATTENTION_SCORING_WEIGHTS", raising=False)
        assert load_weights() == ScoringWeights()

    def test_json_override(self, monkeypatch):
        monkeypatch.setenv(
            "ATTENTION_SCORING_WEIGHTS",
            '{"owner_bonus": 40, "severity_multipliers": {"low": 0.5, "medium": 1, "high": 2, "critical": 4}}'
        )
        weights = load_weights()
        assert weights.owner_bonus == 40
        assert weights.severity_multipliers["critical"] == 4
        assert weights.blocking_bonus == 25

    def test_invalid_json(self, monkeypatch):
        monkeypatch.setenv("ATTENTION_SCORING_WEIGHTS", "{not json")
        with pytest.raises(ValueError, match="ATTENTION_SCORING_WEIGHTS"):
            load_weights()


class TestLoadSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "ATTENTION_DEFAULT_WINDOW_HOURS",
            "ATTENTION_MAX_WINDOW_HOURS",
            "ATTENTION_COLLECTOR_TIMEOUT",
            "ATTENTION_FAIL_FAST",
            "ATTENTION_USER_HEADER",
            "ATTENTION_SCORING_WEIGHTS",
            "LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)
        assert load_settings() == EngineSettings()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ATTENTION_DEFAULT_WINDOW_HOURS", "48")
        monkeypatch.setenv("ATTENTION_MAX_WINDOW_HOURS", "168")
        monkeypatch.setenv("ATTENTION_COLLECTOR_TIMEOUT", "1.5")
        monkeypatch.setenv("ATTENTION_FAIL_FAST", "true")
        monkeypatch.setenv("ATTENTION_USER_HEADER", "X-Forwarded-User")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.default_window_hours == 48
        assert settings.max_window_hours == 168
        assert settings.collector_timeout_seconds == 1.5
        assert settings.fail_fast_collectors is True
        assert settings.user_header == "X-Forwarded-User"
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["0", "false", "no", "off"])
    def test_fail_fast_falsey(self, monkeypatch, value):
        monkeypatch.setenv("ATTENTION_FAIL_FAST", value)
        assert load_settings().fail_fast_collectors is False
