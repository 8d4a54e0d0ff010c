"""Tests for medtriage/core/config.py — YAML loading, defaults, SecretStr."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from medtriage.core.config import (
    AppConfig,
    ChannelRateLimit,
    EscalationConfig,
    LoggingConfig,
    Settings,
    get_settings,
    load_settings,
    reset_settings,
)
from medtriage.core.types import ContactType
from medtriage.taxonomy.categories import CATEGORIES


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()


class TestDefaults:
    """Settings should have sensible defaults when no YAML is provided."""

    def test_default_app_config(self) -> None:
        cfg = AppConfig()
        assert cfg.platform == "zweitmeinung.ng"
        assert cfg.environment == "production"
        assert cfg.version is None

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "json"

    def test_default_rate_limits(self) -> None:
        s = Settings()
        assert s.rate_limits["console"].limit == 100
        assert s.rate_limits["email"].limit == 10
        assert s.rate_limits["voice"].limit == 5
        assert s.rate_limits["chat"].limit == 20
        assert s.rate_limits["webhook"].limit == 50
        assert all(r.window_ms == 60_000 for r in s.rate_limits.values())

    def test_window_secs(self) -> None:
        assert ChannelRateLimit(limit=1, window_ms=1500).window_secs == 1.5

    def test_rate_limit_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ChannelRateLimit(limit=0)

    def test_default_escalation_sets(self) -> None:
        cfg = EscalationConfig()
        assert cfg.critical_teams_patient_safety == [
            "patient-safety",
            "tech-emergency",
            "medical-director",
        ]
        assert cfg.critical_teams_default == ["tech-emergency", "patient-safety"]

    def test_default_teams_cover_every_category(self) -> None:
        cfg = EscalationConfig()
        for category in CATEGORIES.values():
            for team in category.default_escalation_teams:
                assert team in cfg.teams, team

    def test_patient_safety_team_has_voice_primary(self) -> None:
        team = EscalationConfig().teams["patient-safety"]
        primaries = [c for c in team.contacts if c.primary]
        assert len(primaries) == 1
        assert primaries[0].type == ContactType.VOICE
        assert {c.type for c in team.contacts} == {
            ContactType.VOICE,
            ContactType.EMAIL,
            ContactType.CHAT,
        }

    def test_default_settings(self) -> None:
        s = Settings()
        assert s.history.capacity == 100
        assert s.dispatch.handler_timeout_secs == 10.0
        assert s.dispatch.side_effect_timeout_secs == 10.0
        assert s.monitoring.enabled is False
        assert s.webhook.enabled is False


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "app": {"environment": "development", "version": "1.2.3"},
            "rate_limits": {"email": {"limit": 2, "window_ms": 1000}},
            "history": {"capacity": 5},
            "logging": {"level": "DEBUG", "format": "console"},
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        s = load_settings(config_file)
        assert s.app.environment == "development"
        assert s.app.version == "1.2.3"
        assert s.rate_limits["email"].limit == 2
        assert s.rate_limits["email"].window_ms == 1000
        assert s.history.capacity == 5
        assert s.logging.level == "DEBUG"

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        s = load_settings(tmp_path / "nonexistent.yaml")
        assert s.history.capacity == 100

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        s = load_settings(config_file)
        assert s.app.platform == "zweitmeinung.ng"

    def test_custom_team_directory(self, tmp_path: Path) -> None:
        config_data = {
            "escalation": {
                "critical_teams_default": ["oncall"],
                "teams": {
                    "oncall": {
                        "name": "On Call",
                        "contacts": [{"type": "chat", "value": "#oncall", "primary": True}],
                    },
                },
            },
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        s = load_settings(config_file)
        assert list(s.escalation.teams) == ["oncall"]
        assert s.escalation.teams["oncall"].contacts[0].type == ContactType.CHAT

    def test_secret_str_masked(self, tmp_path: Path) -> None:
        config_data = {
            "monitoring": {"enabled": True, "webhook_url": "https://hooks.example/secret"},
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        s = load_settings(config_file)
        assert "secret" not in str(s.monitoring.webhook_url)
        assert s.monitoring.webhook_url.get_secret_value() == "https://hooks.example/secret"

    def test_shipped_settings_file_loads(self) -> None:
        path = Path(__file__).resolve().parents[2] / "config" / "settings.yaml"
        s = load_settings(path)
        assert s.rate_limits["voice"].limit == 5
        assert "patient-safety" in s.escalation.teams


class TestCaching:
    def test_get_settings_caches(self, tmp_path: Path) -> None:
        load_settings(tmp_path / "none.yaml")
        assert get_settings() is get_settings()

    def test_reset_clears_cache(self, tmp_path: Path) -> None:
        first = load_settings(tmp_path / "none.yaml")
        reset_settings()
        second = load_settings(tmp_path / "none.yaml")
        assert first is not second
