"""Alert dispatch — channels, registry, and per-channel rate limiting."""

from medtriage.dispatch.channels import LogChannel, NotificationChannel, WebhookChannel
from medtriage.dispatch.exceptions import (
    ChannelDeliveryError,
    DispatchError,
)
from medtriage.dispatch.rate_limiter import SlidingWindowRateLimiter
from medtriage.dispatch.registry import AlertDispatcher, ChannelRegistry
from medtriage.dispatch.types import (
    CONSOLE_CHANNEL,
    CONTACT_CHANNELS,
    AlertPayload,
    ContactMethod,
    DeliveryResult,
    ErrorSummary,
    EscalationDescriptor,
    Notification,
    channel_for,
)

__all__ = [
    "CONSOLE_CHANNEL",
    "CONTACT_CHANNELS",
    "AlertDispatcher",
    "AlertPayload",
    "ChannelDeliveryError",
    "ChannelRegistry",
    "ContactMethod",
    "DeliveryResult",
    "DispatchError",
    "ErrorSummary",
    "EscalationDescriptor",
    "LogChannel",
    "Notification",
    "NotificationChannel",
    "SlidingWindowRateLimiter",
    "WebhookChannel",
    "channel_for",
]
