"""Domain types for alert dispatch — the alert payload and channel contracts."""

from __future__ import annotations

import time
from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

from medtriage.context.types import AlertContext
from medtriage.core.types import ContactType, DeliveryOutcome, Severity, Tier

CONSOLE_CHANNEL = "console"

# Contact method → registered channel id.
CONTACT_CHANNELS: Mapping[ContactType, str] = MappingProxyType({
    ContactType.EMAIL: "email",
    ContactType.VOICE: "voice",
    ContactType.CHAT: "chat",
    ContactType.WEBHOOK: "webhook",
})


def channel_for(contact_type: ContactType) -> str:
    return CONTACT_CHANNELS[contact_type]


class ErrorSummary(BaseModel):
    """The reported error, reduced to what is safe to forward."""

    model_config = ConfigDict(frozen=True)

    message: str = ""
    name: str = "Error"
    correlation_id: str | None = None


class EscalationDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    teams: tuple[str, ...] = ()
    immediate: bool = False
    patient_safety: bool = False


class AlertPayload(BaseModel):
    """The unit flowing through the pipeline, created once per error.

    Frozen; archiving produces a copy with ``processed``/``processed_at`` set.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: float = Field(default_factory=time.time)
    tier: Tier
    response_time: str
    category: str
    severity: Severity
    error: ErrorSummary
    fingerprint: str = ""
    context: AlertContext = AlertContext()
    escalation: EscalationDescriptor = EscalationDescriptor()
    processed: bool = False
    processed_at: float | None = None


class ContactMethod(BaseModel):
    """A single way of reaching an escalation team."""

    model_config = ConfigDict(frozen=True)

    type: ContactType
    value: str
    primary: bool = False

    @property
    def channel_id(self) -> str:
        return channel_for(self.type)


class Notification(BaseModel):
    """What a channel receives: the alert plus who it is addressed to."""

    model_config = ConfigDict(frozen=True)

    alert: AlertPayload
    level: str = "INFO"
    message: str = ""
    team_id: str | None = None
    team_name: str | None = None
    contact: ContactMethod | None = None
    immediate: bool = False


class DeliveryResult(BaseModel):
    """Outcome of one dispatch attempt."""

    model_config = ConfigDict(frozen=True)

    channel_id: str
    outcome: DeliveryOutcome
    team_id: str | None = None
    detail: str = ""

    @property
    def delivered(self) -> bool:
        return self.outcome == DeliveryOutcome.DELIVERED
