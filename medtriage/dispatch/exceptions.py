"""Alert dispatch exceptions."""

from __future__ import annotations


class DispatchError(Exception):
    """Base exception for dispatch errors."""


class ChannelDeliveryError(DispatchError):
    """A channel failed to deliver a notification."""
