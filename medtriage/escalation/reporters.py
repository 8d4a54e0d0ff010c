"""Preset reporters for common healthcare error shapes.

Each helper fills in the category, severity, and flags typical for one kind
of failure, then submits through the orchestrator. Explicit hints passed by
the caller override the preset.
"""

from __future__ import annotations

from typing import Any

from medtriage.context.types import EnvironmentSignals, ErrorHints
from medtriage.core.types import Severity
from medtriage.escalation.orchestrator import EscalationOrchestrator
from medtriage.escalation.types import ReportedError


def _merge(preset: dict[str, Any], hints: ErrorHints | None) -> ErrorHints:
    if hints is None:
        return ErrorHints(**preset)
    explicit = hints.model_dump(exclude_unset=True)
    return ErrorHints(**{**preset, **explicit})


def report_emergency_component_error(
    orchestrator: EscalationOrchestrator,
    error: ReportedError,
    component_name: str,
    hints: ErrorHints | None = None,
    signals: EnvironmentSignals | None = None,
) -> None:
    preset = {
        "severity": Severity.CRITICAL,
        "category": "emergency_component",
        "component_name": component_name,
        "emergency_hint": True,
        "patient_safety_impact": True,
    }
    orchestrator.submit_error(error, _merge(preset, hints), signals)


def report_patient_form_error(
    orchestrator: EscalationOrchestrator,
    error: ReportedError,
    form_step: str,
    hints: ErrorHints | None = None,
    signals: EnvironmentSignals | None = None,
) -> None:
    preset = {
        "severity": Severity.HIGH,
        "category": "patient_form",
        "form_step": form_step,
        "patient_safety_impact": False,
    }
    orchestrator.submit_error(error, _merge(preset, hints), signals)


def report_accessibility_error(
    orchestrator: EscalationOrchestrator,
    error: ReportedError,
    hints: ErrorHints | None = None,
    signals: EnvironmentSignals | None = None,
) -> None:
    preset = {
        "severity": Severity.HIGH,
        "category": "accessibility",
        "patient_safety_impact": True,
    }
    orchestrator.submit_error(error, _merge(preset, hints), signals)


def report_api_error(
    orchestrator: EscalationOrchestrator,
    error: ReportedError,
    endpoint: str,
    emergency_api: bool = False,
    hints: ErrorHints | None = None,
    signals: EnvironmentSignals | None = None,
) -> None:
    """API failures only touch patient safety on emergency endpoints."""
    preset = {
        "severity": Severity.HIGH,
        "category": "api_failure",
        "patient_safety_impact": emergency_api,
        "extra": {"endpoint": endpoint},
    }
    orchestrator.submit_error(error, _merge(preset, hints), signals)
