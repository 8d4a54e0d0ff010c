"""Core module — config, types, logging."""

from medtriage.core.config import Settings, get_settings, load_settings, reset_settings
from medtriage.core.logging import log_level_for, setup_logging
from medtriage.core.types import (
    RESPONSE_TIMES,
    SEVERITY_TIERS,
    AlertState,
    ContactType,
    DeliveryOutcome,
    Severity,
    Tier,
)

__all__ = [
    "RESPONSE_TIMES",
    "SEVERITY_TIERS",
    "AlertState",
    "ContactType",
    "DeliveryOutcome",
    "Settings",
    "Severity",
    "Tier",
    "get_settings",
    "load_settings",
    "log_level_for",
    "reset_settings",
    "setup_logging",
]
