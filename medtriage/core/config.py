"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr

from medtriage.core.types import ContactType

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class AppConfig(BaseModel):
    """Deployment metadata attached to every alert context."""

    platform: str = "zweitmeinung.ng"
    environment: str = "production"
    version: str | None = None
    build_time: str | None = None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class ChannelRateLimit(BaseModel):
    """Sliding-window admission limit for a single channel."""

    limit: int = Field(gt=0)
    window_ms: int = Field(default=60_000, gt=0)

    @property
    def window_secs(self) -> float:
        return self.window_ms / 1000.0


def _default_rate_limits() -> dict[str, ChannelRateLimit]:
    return {
        "console": ChannelRateLimit(limit=100, window_ms=60_000),
        ContactType.EMAIL.value: ChannelRateLimit(limit=10, window_ms=60_000),
        ContactType.VOICE.value: ChannelRateLimit(limit=5, window_ms=60_000),
        ContactType.CHAT.value: ChannelRateLimit(limit=20, window_ms=60_000),
        ContactType.WEBHOOK.value: ChannelRateLimit(limit=50, window_ms=60_000),
    }


class DispatchConfig(BaseModel):
    """Channel dispatch configuration."""

    handler_timeout_secs: float = Field(default=10.0, gt=0)
    side_effect_timeout_secs: float = Field(default=10.0, gt=0)


class ContactConfig(BaseModel):
    """A single way of reaching an escalation team."""

    type: ContactType
    value: str
    primary: bool = False


class TeamConfig(BaseModel):
    """An escalation team and its contact methods."""

    name: str
    priority: str = "P1"
    response_time: str = "30 minutes"
    contacts: list[ContactConfig] = Field(default_factory=list)


def _team(
    name: str,
    slug: str,
    priority: str = "P1",
    response_time: str = "30 minutes",
    voice: str | None = None,
) -> TeamConfig:
    contacts = [
        ContactConfig(type=ContactType.EMAIL, value=f"{slug}@zweitmeinung.ng", primary=voice is None),
        ContactConfig(type=ContactType.CHAT, value=f"#{slug}-alerts"),
    ]
    if voice is not None:
        contacts.insert(0, ContactConfig(type=ContactType.VOICE, value=voice, primary=True))
    return TeamConfig(name=name, priority=priority, response_time=response_time, contacts=contacts)


def _default_teams() -> dict[str, TeamConfig]:
    return {
        "patient-safety": _team(
            "Patient Safety Team", "patient-safety", "P0", "5 minutes", voice="+49-800-MEDICAL",
        ),
        "tech-emergency": _team(
            "Technical Emergency Team", "tech-emergency", "P0", "5 minutes", voice="+49-800-TECH-911",
        ),
        "medical-director": TeamConfig(
            name="Medical Director",
            priority="P0",
            response_time="15 minutes",
            contacts=[
                ContactConfig(
                    type=ContactType.EMAIL, value="medical-director@zweitmeinung.ng", primary=True,
                ),
                ContactConfig(type=ContactType.VOICE, value="+49-800-MED-DIR"),
            ],
        ),
        "compliance": TeamConfig(
            name="Compliance & Privacy Team",
            priority="P1",
            response_time="15 minutes",
            contacts=[
                ContactConfig(type=ContactType.EMAIL, value="compliance@zweitmeinung.ng", primary=True),
                ContactConfig(type=ContactType.VOICE, value="+49-800-PRIVACY"),
            ],
        ),
        "medical-team": _team("Medical Team", "medical-team", "P0", "5 minutes"),
        "tech-lead": _team("Technical Lead", "tech-lead"),
        "patient-experience": _team("Patient Experience", "patient-experience"),
        "tech-support": _team("Technical Support", "tech-support", "P2", "2 hours"),
        "backend-team": _team("Backend Team", "backend-team"),
        "api-monitoring": TeamConfig(
            name="API Monitoring",
            contacts=[
                ContactConfig(
                    type=ContactType.WEBHOOK,
                    value="https://monitoring.zweitmeinung.ng/hooks/api",
                    primary=True,
                ),
            ],
        ),
        "security-team": _team("Security Team", "security-team"),
        "patient-privacy": _team("Patient Privacy", "patient-privacy"),
        "accessibility-team": _team("Accessibility Team", "accessibility-team", "P2", "2 hours"),
        "frontend-team": _team("Frontend Team", "frontend-team", "P2", "2 hours"),
        "design-system": _team("Design System", "design-system", "P2", "2 hours"),
        "performance-team": _team("Performance Team", "performance-team", "P3", "24 hours"),
        "analytics-team": _team("Analytics Team", "analytics-team", "P3", "24 hours"),
        "privacy-team": _team("Privacy Team", "privacy-team", "P1", "15 minutes"),
        "legal": _team("Legal", "legal", "P1", "15 minutes"),
    }


class EscalationConfig(BaseModel):
    """Tier escalation policy and team directory."""

    critical_teams_patient_safety: list[str] = [
        "patient-safety",
        "tech-emergency",
        "medical-director",
    ]
    critical_teams_default: list[str] = ["tech-emergency", "patient-safety"]
    teams: dict[str, TeamConfig] = Field(default_factory=_default_teams)


class HistoryConfig(BaseModel):
    """Alert history configuration."""

    capacity: int = Field(default=100, gt=0)


class MonitoringConfig(BaseModel):
    """External monitoring webhook for P0 pings."""

    enabled: bool = False
    webhook_url: SecretStr = SecretStr("")


class WebhookChannelConfig(BaseModel):
    """Generic JSON webhook transport for the ``webhook`` contact type."""

    enabled: bool = False
    url: SecretStr = SecretStr("")


class Settings(BaseModel):
    """Root settings container."""

    app: AppConfig = AppConfig()
    logging: LoggingConfig = LoggingConfig()
    rate_limits: dict[str, ChannelRateLimit] = Field(default_factory=_default_rate_limits)
    dispatch: DispatchConfig = DispatchConfig()
    escalation: EscalationConfig = EscalationConfig()
    history: HistoryConfig = HistoryConfig()
    monitoring: MonitoringConfig = MonitoringConfig()
    webhook: WebhookChannelConfig = WebhookChannelConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
