"""Domain types for escalation — inbound errors and outbound collaborator records."""

from __future__ import annotations

import traceback

from pydantic import BaseModel, ConfigDict, Field

from medtriage.core.types import AlertState, Severity, Tier
from medtriage.dispatch.types import AlertPayload, DeliveryResult


class ReportedError(BaseModel):
    """An application error as handed over by the error-reporting layer."""

    message: str = ""
    name: str = "Error"
    correlation_id: str | None = None
    stack: str | None = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        correlation_id: str | None = None,
    ) -> ReportedError:
        stack = None
        if exc.__traceback__ is not None:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(
            message=str(exc),
            name=type(exc).__name__,
            correlation_id=correlation_id,
            stack=stack,
        )


class MonitoringEvent(BaseModel):
    """Ping sent to external monitoring for a P0 alert."""

    model_config = ConfigDict(frozen=True)

    source: str
    type: str = "healthcare_critical_error"
    priority: Tier
    patient_safety_impact: bool
    timestamp: float
    alert_id: str


class IncidentReport(BaseModel):
    """Incident record synthesized for a P0 alert."""

    id: str
    title: str
    severity: Severity
    priority: Tier
    patient_safety_impact: bool
    affected_services: list[str] = Field(default_factory=list)
    medical_specialty: str = "unknown"
    persona: str = "patient"
    timestamp: float
    response_teams: list[str] = Field(default_factory=list)
    status: str = "open"
    actions: list[str] = Field(default_factory=list)


class AlertOutcome(BaseModel):
    """Everything that happened to one alert, returned by ``process_error``."""

    alert: AlertPayload
    deliveries: list[DeliveryResult] = Field(default_factory=list)
    states: list[AlertState] = Field(default_factory=list)
    fallback_action: str | None = None
    incident_id: str | None = None

    @property
    def delivered_count(self) -> int:
        return sum(1 for d in self.deliveries if d.delivered)
