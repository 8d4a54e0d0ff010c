"""Tests for the pipeline factory — wiring logic with various config combinations."""

from __future__ import annotations

from pydantic import SecretStr

from medtriage.context.types import ErrorHints
from medtriage.core.config import MonitoringConfig, Settings, WebhookChannelConfig
from medtriage.core.types import DeliveryOutcome, Tier
from medtriage.dispatch.channels import LogChannel, WebhookChannel
from medtriage.escalation.factory import create_alert_pipeline
from medtriage.escalation.orchestrator import EscalationOrchestrator
from medtriage.escalation.sinks import (
    InMemoryIncidentStore,
    LogIncidentStore,
    LogMonitoringSink,
    WebhookMonitoringSink,
)
from medtriage.escalation.types import ReportedError


# ── Helpers ─────────────────────────────────────────────────────


def _settings(**kw: object) -> Settings:
    defaults: dict[str, object] = {}
    defaults.update(kw)
    return Settings(**defaults)  # type: ignore[arg-type]


# ── Config Combinations ────────────────────────────────────────


class TestFactoryWiring:
    def test_defaults(self) -> None:
        orch = create_alert_pipeline(_settings())
        assert isinstance(orch, EscalationOrchestrator)
        registry = orch.dispatcher.registry
        assert sorted(registry.channel_ids) == ["chat", "console", "email", "voice", "webhook"]
        assert all(isinstance(ch, LogChannel) for ch in registry.channels())
        assert isinstance(orch._monitoring, LogMonitoringSink)
        assert isinstance(orch._incidents, LogIncidentStore)

    def test_rate_limits_from_settings(self) -> None:
        orch = create_alert_pipeline(_settings())
        limits = orch.dispatcher.rate_limiter.limits
        assert limits["voice"].limit == 5
        assert limits["console"].limit == 100

    def test_webhook_enabled(self) -> None:
        orch = create_alert_pipeline(
            _settings(webhook=WebhookChannelConfig(enabled=True, url=SecretStr("https://h.example"))),
        )
        assert isinstance(orch.dispatcher.registry.get("webhook"), WebhookChannel)
        assert isinstance(orch.dispatcher.registry.get("email"), LogChannel)

    def test_monitoring_enabled(self) -> None:
        orch = create_alert_pipeline(
            _settings(
                monitoring=MonitoringConfig(enabled=True, webhook_url=SecretStr("https://m.example")),
            ),
        )
        assert isinstance(orch._monitoring, WebhookMonitoringSink)

    def test_explicit_sinks_win(self) -> None:
        store = InMemoryIncidentStore()
        monitoring = LogMonitoringSink()
        orch = create_alert_pipeline(_settings(), monitoring=monitoring, incidents=store)
        assert orch._monitoring is monitoring
        assert orch._incidents is store

    def test_history_capacity(self) -> None:
        orch = create_alert_pipeline(_settings(history={"capacity": 7}))
        assert orch.history.capacity == 7

    def test_side_effect_timeout(self) -> None:
        orch = create_alert_pipeline(_settings(dispatch={"side_effect_timeout_secs": 2.5}))
        assert orch._side_effect_timeout == 2.5

    def test_team_directory(self) -> None:
        orch = create_alert_pipeline(_settings())
        assert "patient-safety" in orch.teams


class TestEndToEnd:
    async def test_p0_through_log_channels(self) -> None:
        store = InMemoryIncidentStore()
        orch = create_alert_pipeline(_settings(), incidents=store)
        outcome = await orch.process_error(
            ReportedError(message="emergency banner crashed", name="TypeError"),
            ErrorHints(category="emergency_component", emergency_hint=True),
        )
        await orch.close()

        assert outcome.alert.tier == Tier.P0
        assert all(d.outcome == DeliveryOutcome.DELIVERED for d in outcome.deliveries)
        assert len(store.reports) == 1
        assert len(orch.history) == 1
