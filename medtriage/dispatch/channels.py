"""Notification channels — structured-log and JSON webhook delivery."""

from __future__ import annotations

import abc
from typing import Any

import aiohttp
import structlog

from medtriage.dispatch.exceptions import ChannelDeliveryError
from medtriage.dispatch.types import Notification

logger = structlog.get_logger(__name__)


class NotificationChannel(abc.ABC):
    """Base class for alert delivery channels.

    Concrete email / voice / chat transports live in the host application and
    are registered against the dispatcher at startup.
    """

    @abc.abstractmethod
    async def send(self, notification: Notification) -> bool:
        """Deliver a notification. Returns True on success."""

    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


def notification_body(notification: Notification) -> dict[str, Any]:
    """JSON-safe representation of a notification for transports."""
    alert = notification.alert
    body: dict[str, Any] = {
        "level": notification.level,
        "message": notification.message,
        "alert_id": alert.id,
        "tier": alert.tier.value,
        "response_time": alert.response_time,
        "category": alert.category,
        "severity": alert.severity.value,
        "error": alert.error.model_dump(),
        "context": alert.context.model_dump(mode="json"),
        "escalation": alert.escalation.model_dump(mode="json"),
        "immediate": notification.immediate,
        "timestamp": alert.timestamp,
    }
    if notification.team_id is not None:
        body["team"] = {"id": notification.team_id, "name": notification.team_name}
    if notification.contact is not None:
        body["contact"] = {
            "type": notification.contact.type.value,
            "value": notification.contact.value,
        }
    return body


class LogChannel(NotificationChannel):
    """Writes notifications to the structured log.

    Registered as the ``console`` channel, and as the placeholder for every
    contact type the host has not wired a real transport for.
    """

    def __init__(self, channel_id: str = "console") -> None:
        self._channel_id = channel_id
        self._logger = structlog.get_logger("medtriage.alerts").bind(channel=channel_id)

    @property
    def channel_id(self) -> str:
        return self._channel_id

    async def send(self, notification: Notification) -> bool:
        alert = notification.alert
        self._logger.warning(
            "healthcare_error_alert",
            level=notification.level,
            message=notification.message,
            alert_id=alert.id,
            tier=alert.tier.value,
            response_time=alert.response_time,
            category=alert.category,
            team=notification.team_id,
            contact_type=notification.contact.type.value if notification.contact else None,
            immediate=notification.immediate,
            specialty=alert.context.specialty,
            persona=alert.context.persona,
        )
        return True


class WebhookChannel(NotificationChannel):
    """POSTs notifications as JSON to a webhook URL.

    If the notification's contact is itself a webhook, its value is used as
    the target URL; otherwise the configured default URL is used.
    """

    def __init__(
        self,
        url: str = "",
        timeout_secs: float = 10.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout_secs)
        self._headers = headers or {}
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    def _target(self, notification: Notification) -> str:
        contact = notification.contact
        if contact is not None and contact.value.startswith(("http://", "https://")):
            return contact.value
        return self._url

    async def send(self, notification: Notification) -> bool:
        url = self._target(notification)
        if not url:
            raise ChannelDeliveryError("webhook channel has no target URL")

        payload = notification_body(notification)
        session = self._get_session()
        async with session.post(url, json=payload, headers=self._headers) as resp:
            if resp.status in (200, 201, 202, 204):
                return True
            body = await resp.text()
            logger.warning(
                "webhook_send_failed",
                status=resp.status,
                body=body[:200],
                alert_id=notification.alert.id,
            )
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
