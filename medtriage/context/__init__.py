"""Context enrichment — detection, PII scrubbing, and context collection."""

from medtriage.context.collector import ContextCollector
from medtriage.context.detection import DetectionStrategy, KeywordDetectionStrategy
from medtriage.context.sanitizer import (
    PII_FIELDS,
    sanitize_route,
    sanitize_stack,
    sanitize_user_agent,
    scrub,
    scrub_text,
)
from medtriage.context.types import (
    AlertContext,
    DeviceContext,
    EnvironmentSignals,
    ErrorHints,
    JourneyStage,
    MedicalSpecialty,
)

__all__ = [
    "PII_FIELDS",
    "AlertContext",
    "ContextCollector",
    "DetectionStrategy",
    "DeviceContext",
    "EnvironmentSignals",
    "ErrorHints",
    "JourneyStage",
    "KeywordDetectionStrategy",
    "MedicalSpecialty",
    "sanitize_route",
    "sanitize_stack",
    "sanitize_user_agent",
    "scrub",
    "scrub_text",
]
