"""Channel registry and rate-limited dispatcher."""

from __future__ import annotations

import asyncio

import structlog

from medtriage.core.types import DeliveryOutcome
from medtriage.dispatch.channels import NotificationChannel
from medtriage.dispatch.rate_limiter import SlidingWindowRateLimiter
from medtriage.dispatch.types import DeliveryResult, Notification

logger = structlog.get_logger(__name__)


class ChannelRegistry:
    """Named notification channels. Re-registering an id replaces it."""

    def __init__(self, channels: dict[str, NotificationChannel] | None = None) -> None:
        self._channels: dict[str, NotificationChannel] = dict(channels or {})

    def register(self, channel_id: str, channel: NotificationChannel) -> None:
        self._channels[channel_id] = channel

    def unregister(self, channel_id: str) -> NotificationChannel | None:
        return self._channels.pop(channel_id, None)

    def get(self, channel_id: str) -> NotificationChannel | None:
        return self._channels.get(channel_id)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    @property
    def channel_ids(self) -> list[str]:
        return list(self._channels)

    def channels(self) -> list[NotificationChannel]:
        return list(self._channels.values())


class AlertDispatcher:
    """Routes notifications to registered channels under rate limits.

    - A channel over its limit is not called; the result is ``suppressed``.
    - An unknown channel id yields ``channel_not_found``.
    - A channel that raises, returns False, or exceeds *timeout_secs* yields
      ``failed`` / ``timed_out``, and its rate-limit slot is given back.

    ``dispatch`` never raises, so one failing channel cannot stop the rest of
    an escalation fan-out.
    """

    def __init__(
        self,
        registry: ChannelRegistry | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        timeout_secs: float = 10.0,
    ) -> None:
        self._registry = registry if registry is not None else ChannelRegistry()
        if rate_limiter is None:
            rate_limiter = SlidingWindowRateLimiter()
        self._rate_limiter = rate_limiter
        self._timeout_secs = timeout_secs

    @property
    def registry(self) -> ChannelRegistry:
        return self._registry

    @property
    def rate_limiter(self) -> SlidingWindowRateLimiter:
        return self._rate_limiter

    def register(self, channel_id: str, channel: NotificationChannel) -> None:
        self._registry.register(channel_id, channel)

    async def dispatch(self, channel_id: str, notification: Notification) -> DeliveryResult:
        alert_id = notification.alert.id
        team_id = notification.team_id

        channel = self._registry.get(channel_id)
        if channel is None:
            logger.error("channel_not_found", channel=channel_id, alert_id=alert_id)
            return DeliveryResult(
                channel_id=channel_id,
                outcome=DeliveryOutcome.CHANNEL_NOT_FOUND,
                team_id=team_id,
            )

        stamp = self._rate_limiter.now()
        if not self._rate_limiter.try_acquire(channel_id, stamp):
            logger.info(
                "delivery_suppressed",
                channel=channel_id,
                alert_id=alert_id,
                team=team_id,
                reason="rate_limited",
            )
            return DeliveryResult(
                channel_id=channel_id,
                outcome=DeliveryOutcome.SUPPRESSED,
                team_id=team_id,
            )

        try:
            ok = await asyncio.wait_for(channel.send(notification), timeout=self._timeout_secs)
        except TimeoutError:
            self._rate_limiter.release(channel_id, stamp)
            logger.error(
                "channel_delivery_timeout",
                channel=channel_id,
                alert_id=alert_id,
                team=team_id,
                timeout_secs=self._timeout_secs,
            )
            return DeliveryResult(
                channel_id=channel_id,
                outcome=DeliveryOutcome.TIMED_OUT,
                team_id=team_id,
                detail=f"no response within {self._timeout_secs}s",
            )
        except Exception as exc:
            self._rate_limiter.release(channel_id, stamp)
            logger.exception(
                "channel_delivery_failed",
                channel=channel_id,
                alert_id=alert_id,
                team=team_id,
            )
            return DeliveryResult(
                channel_id=channel_id,
                outcome=DeliveryOutcome.FAILED,
                team_id=team_id,
                detail=f"{type(exc).__name__}: {exc}",
            )

        if not ok:
            self._rate_limiter.release(channel_id, stamp)
            logger.error(
                "channel_delivery_failed",
                channel=channel_id,
                alert_id=alert_id,
                team=team_id,
                reason="channel_reported_failure",
            )
            return DeliveryResult(
                channel_id=channel_id,
                outcome=DeliveryOutcome.FAILED,
                team_id=team_id,
                detail="channel reported failure",
            )

        logger.debug("delivered", channel=channel_id, alert_id=alert_id, team=team_id)
        return DeliveryResult(
            channel_id=channel_id,
            outcome=DeliveryOutcome.DELIVERED,
            team_id=team_id,
        )

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        for channel_id in self._registry.channel_ids:
            channel = self._registry.get(channel_id)
            if channel is None:
                continue
            try:
                await channel.close()
            except Exception:
                logger.exception("channel_close_error", channel=channel_id)
