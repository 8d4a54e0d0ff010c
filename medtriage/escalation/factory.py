"""Convenience factory for wiring the alert pipeline."""

from __future__ import annotations

from medtriage.context.collector import ContextCollector
from medtriage.context.detection import DetectionStrategy
from medtriage.core.config import Settings, get_settings
from medtriage.core.types import ContactType
from medtriage.dispatch.channels import LogChannel, NotificationChannel, WebhookChannel
from medtriage.dispatch.rate_limiter import SlidingWindowRateLimiter
from medtriage.dispatch.registry import AlertDispatcher, ChannelRegistry
from medtriage.dispatch.types import CONSOLE_CHANNEL, channel_for
from medtriage.escalation.history import AlertHistory
from medtriage.escalation.orchestrator import EscalationOrchestrator
from medtriage.escalation.sinks import (
    FallbackSignal,
    IncidentStore,
    LogIncidentStore,
    LogMonitoringSink,
    MonitoringSink,
    WebhookMonitoringSink,
)
from medtriage.escalation.teams import TeamDirectory


def _build_registry(settings: Settings) -> ChannelRegistry:
    """Console plus one channel per contact type; log-backed unless configured."""
    registry = ChannelRegistry()
    registry.register(CONSOLE_CHANNEL, LogChannel(CONSOLE_CHANNEL))
    for contact_type in ContactType:
        channel_id = channel_for(contact_type)
        channel: NotificationChannel = LogChannel(channel_id)
        if contact_type == ContactType.WEBHOOK and settings.webhook.enabled:
            channel = WebhookChannel(
                url=settings.webhook.url.get_secret_value(),
                timeout_secs=settings.dispatch.handler_timeout_secs,
            )
        registry.register(channel_id, channel)
    return registry


def create_alert_pipeline(
    settings: Settings | None = None,
    monitoring: MonitoringSink | None = None,
    incidents: IncidentStore | None = None,
    fallback: FallbackSignal | None = None,
    strategy: DetectionStrategy | None = None,
) -> EscalationOrchestrator:
    """Build an orchestrator with its dispatcher, directory, and sinks from config.

    Sinks passed explicitly take precedence over the configured ones.
    """
    settings = settings or get_settings()

    dispatcher = AlertDispatcher(
        registry=_build_registry(settings),
        rate_limiter=SlidingWindowRateLimiter(settings.rate_limits),
        timeout_secs=settings.dispatch.handler_timeout_secs,
    )

    if monitoring is None:
        if settings.monitoring.enabled:
            monitoring = WebhookMonitoringSink(
                settings.monitoring.webhook_url.get_secret_value(),
                timeout_secs=settings.dispatch.handler_timeout_secs,
            )
        else:
            monitoring = LogMonitoringSink()

    return EscalationOrchestrator(
        dispatcher=dispatcher,
        teams=TeamDirectory.from_config(settings.escalation.teams),
        collector=ContextCollector(app=settings.app, strategy=strategy),
        history=AlertHistory(settings.history.capacity),
        monitoring=monitoring,
        incidents=incidents or LogIncidentStore(),
        fallback=fallback,
        escalation=settings.escalation,
        platform=settings.app.platform,
        side_effect_timeout_secs=settings.dispatch.side_effect_timeout_secs,
    )
