"""Escalation — tier strategies, teams, history, and P0 collaborators."""

from medtriage.escalation.exceptions import EscalationError, InvalidTransitionError
from medtriage.escalation.factory import create_alert_pipeline
from medtriage.escalation.history import AlertHistory
from medtriage.escalation.orchestrator import (
    AlertLifecycle,
    EscalationOrchestrator,
    error_fingerprint,
    generate_alert_id,
)
from medtriage.escalation.reporters import (
    report_accessibility_error,
    report_api_error,
    report_emergency_component_error,
    report_patient_form_error,
)
from medtriage.escalation.sinks import (
    FallbackSignal,
    IncidentStore,
    InMemoryIncidentStore,
    LogIncidentStore,
    LogMonitoringSink,
    MonitoringSink,
    WebhookMonitoringSink,
)
from medtriage.escalation.teams import EscalationTeam, TeamDirectory
from medtriage.escalation.types import (
    AlertOutcome,
    IncidentReport,
    MonitoringEvent,
    ReportedError,
)

__all__ = [
    "AlertHistory",
    "AlertLifecycle",
    "AlertOutcome",
    "EscalationError",
    "EscalationOrchestrator",
    "EscalationTeam",
    "FallbackSignal",
    "InMemoryIncidentStore",
    "IncidentReport",
    "IncidentStore",
    "InvalidTransitionError",
    "LogIncidentStore",
    "LogMonitoringSink",
    "MonitoringEvent",
    "MonitoringSink",
    "ReportedError",
    "TeamDirectory",
    "WebhookMonitoringSink",
    "create_alert_pipeline",
    "error_fingerprint",
    "generate_alert_id",
    "report_accessibility_error",
    "report_api_error",
    "report_emergency_component_error",
    "report_patient_form_error",
]
