"""Collaborator contracts for P0 side effects: monitoring, incidents, fallback UI."""

from __future__ import annotations

import abc
from collections import deque

import aiohttp
import structlog

from medtriage.dispatch.types import AlertPayload
from medtriage.escalation.types import IncidentReport, MonitoringEvent
from medtriage.taxonomy.categories import ErrorCategory

logger = structlog.get_logger(__name__)


class MonitoringSink(abc.ABC):
    """Receives monitoring pings for critical alerts."""

    @abc.abstractmethod
    async def publish(self, event: MonitoringEvent) -> None:
        """Publish a monitoring event."""

    async def close(self) -> None:
        """Release resources."""


class IncidentStore(abc.ABC):
    """Durable storage for incident records (owned by the host)."""

    @abc.abstractmethod
    async def store(self, report: IncidentReport) -> None:
        """Persist an incident report."""

    async def close(self) -> None:
        """Release resources."""


class FallbackSignal(abc.ABC):
    """Switches an interactive front end into an emergency fallback mode."""

    @abc.abstractmethod
    async def trigger_fallback(
        self,
        category: ErrorCategory,
        alert: AlertPayload,
        action: str,
    ) -> None:
        """Trigger the fallback *action* for *category*."""


class LogMonitoringSink(MonitoringSink):
    """Writes monitoring events to the structured log."""

    async def publish(self, event: MonitoringEvent) -> None:
        logger.warning("monitoring_alert", **event.model_dump(mode="json"))


class WebhookMonitoringSink(MonitoringSink):
    """POSTs monitoring events as JSON to an external monitoring webhook."""

    def __init__(self, url: str, timeout_secs: float = 10.0) -> None:
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout_secs)
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def publish(self, event: MonitoringEvent) -> None:
        session = self._get_session()
        async with session.post(self._url, json=event.model_dump(mode="json")) as resp:
            if resp.status >= 300:
                body = await resp.text()
                logger.warning(
                    "monitoring_webhook_failed",
                    status=resp.status,
                    body=body[:200],
                    alert_id=event.alert_id,
                )

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


class LogIncidentStore(IncidentStore):
    """Writes incident reports to the structured log."""

    async def store(self, report: IncidentReport) -> None:
        logger.warning("incident_report_stored", **report.model_dump(mode="json"))


class InMemoryIncidentStore(IncidentStore):
    """Keeps the last *capacity* incident reports; used by hosts without a store."""

    def __init__(self, capacity: int = 100) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._reports: deque[IncidentReport] = deque(maxlen=capacity)

    @property
    def reports(self) -> list[IncidentReport]:
        """Stored reports, oldest first."""
        return list(self._reports)

    async def store(self, report: IncidentReport) -> None:
        self._reports.append(report)
