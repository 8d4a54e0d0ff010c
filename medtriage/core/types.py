"""Shared enums used across the triage pipeline."""

from __future__ import annotations

from enum import StrEnum


class Severity(StrEnum):
    """Medical error severity, highest first."""

    CRITICAL = "critical"  # Patient safety impact
    HIGH = "high"  # Medical workflow disruption
    MEDIUM = "medium"  # User experience issue
    LOW = "low"  # Non-blocking


class Tier(StrEnum):
    """Urgency tier driving response time and fan-out breadth."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"


class ContactType(StrEnum):
    """Closed set of contact methods a team can be reached by."""

    EMAIL = "email"
    VOICE = "voice"
    CHAT = "chat"
    WEBHOOK = "webhook"


class AlertState(StrEnum):
    """Lifecycle of a single alert, in order."""

    RECEIVED = "received"
    CLASSIFIED = "classified"
    ENRICHED = "enriched"
    DISPATCHING = "dispatching"
    ARCHIVED = "archived"


class DeliveryOutcome(StrEnum):
    """Result of a single channel dispatch."""

    DELIVERED = "delivered"
    SUPPRESSED = "suppressed"
    CHANNEL_NOT_FOUND = "channel_not_found"
    TEAM_NOT_FOUND = "team_not_found"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


SEVERITY_TIERS: dict[Severity, Tier] = {
    Severity.CRITICAL: Tier.P0,
    Severity.HIGH: Tier.P1,
    Severity.MEDIUM: Tier.P2,
    Severity.LOW: Tier.P3,
}

RESPONSE_TIMES: dict[Tier, str] = {
    Tier.P0: "5 minutes",
    Tier.P1: "30 minutes",
    Tier.P2: "2 hours",
    Tier.P3: "24 hours",
}
