"""Medical error taxonomy — categories, personas, and the priority matrix.

Everything here is defined once at import time and never mutated. Lookups are
total: unknown codes degrade to a default entry instead of raising, so an
alert can always continue through the pipeline with less information.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from medtriage.core.types import RESPONSE_TIMES, Severity, Tier


class ErrorCategory(BaseModel):
    """A medical-risk category and its escalation defaults."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    severity: Severity
    target_response_time: str
    patient_safety_impact: bool
    default_escalation_teams: tuple[str, ...]
    fallback_action: str
    immediate: bool = False
    description: str = ""


class UserPersona(BaseModel):
    """A healthcare user persona, used as a priority-matrix key."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    stress_level: str
    technical_expertise: str
    accessibility_needs: str
    mobile_usage: str


# ── Categories ──────────────────────────────────────────────────

_CATEGORY_LIST: tuple[ErrorCategory, ...] = (
    # CRITICAL: patient safety impact
    ErrorCategory(
        code="emergency_component",
        name="Emergency Component Failure",
        severity=Severity.CRITICAL,
        target_response_time="5 minutes",
        patient_safety_impact=True,
        default_escalation_teams=("medical-team", "tech-lead", "patient-safety"),
        fallback_action="Show static emergency contacts",
        immediate=True,
        description="Critical failure in emergency contact, banner, or urgent care components",
    ),
    ErrorCategory(
        code="patient_safety",
        name="Patient Safety Risk",
        severity=Severity.CRITICAL,
        target_response_time="5 minutes",
        patient_safety_impact=True,
        default_escalation_teams=("patient-safety", "medical-director", "compliance"),
        fallback_action="Disable affected functionality",
        immediate=True,
        description="Any error that could directly impact patient safety or medical care",
    ),
    # HIGH: medical workflow disruption
    ErrorCategory(
        code="patient_form",
        name="Patient Form Error",
        severity=Severity.HIGH,
        target_response_time="30 minutes",
        patient_safety_impact=False,
        default_escalation_teams=("patient-experience", "tech-support"),
        fallback_action="Provide alternative contact methods",
        description="Errors in patient data collection forms and medical intake",
    ),
    ErrorCategory(
        code="api_failure",
        name="Medical API Failure",
        severity=Severity.HIGH,
        target_response_time="30 minutes",
        patient_safety_impact=False,
        default_escalation_teams=("backend-team", "api-monitoring"),
        fallback_action="Show cached data or static content",
        description="Backend API errors affecting medical data and services",
    ),
    ErrorCategory(
        code="authentication",
        name="Medical Authentication Error",
        severity=Severity.HIGH,
        target_response_time="30 minutes",
        patient_safety_impact=False,
        default_escalation_teams=("security-team", "patient-privacy"),
        fallback_action="Provide guest access to emergency information",
        description="Login, session, and medical data access errors",
    ),
    ErrorCategory(
        code="data_privacy",
        name="Medical Data Privacy Error",
        severity=Severity.HIGH,
        target_response_time="15 minutes",
        patient_safety_impact=False,
        default_escalation_teams=("privacy-team", "compliance", "legal"),
        fallback_action="Disable data collection temporarily",
        immediate=True,
        description="GDPR and medical data privacy compliance errors",
    ),
    # MEDIUM: user experience issues
    ErrorCategory(
        code="accessibility",
        name="Healthcare Accessibility Error",
        severity=Severity.MEDIUM,
        target_response_time="2 hours",
        patient_safety_impact=True,  # a11y failures block patient access
        default_escalation_teams=("accessibility-team", "patient-experience"),
        fallback_action="Display accessibility help information",
        description="Accessibility failures affecting healthcare users",
    ),
    ErrorCategory(
        code="navigation",
        name="Medical Navigation Error",
        severity=Severity.MEDIUM,
        target_response_time="2 hours",
        patient_safety_impact=False,
        default_escalation_teams=("frontend-team", "patient-experience"),
        fallback_action="Provide site map and direct links",
        description="Navigation and routing issues in medical workflows",
    ),
    ErrorCategory(
        code="ui_component",
        name="Healthcare UI Component Error",
        severity=Severity.MEDIUM,
        target_response_time="2 hours",
        patient_safety_impact=False,
        default_escalation_teams=("design-system", "frontend-team"),
        fallback_action="Use fallback UI components",
        description="Non-critical UI component failures in healthcare interface",
    ),
    # LOW: non-blocking
    ErrorCategory(
        code="performance",
        name="Healthcare Performance Issue",
        severity=Severity.LOW,
        target_response_time="24 hours",
        patient_safety_impact=False,
        default_escalation_teams=("performance-team",),
        fallback_action="Show loading indicators and skeleton UI",
        description="Performance degradation affecting healthcare user experience",
    ),
    ErrorCategory(
        code="analytics",
        name="Medical Analytics Error",
        severity=Severity.LOW,
        target_response_time="24 hours",
        patient_safety_impact=False,
        default_escalation_teams=("analytics-team",),
        fallback_action="Continue operation without analytics",
        description="Non-critical analytics and tracking errors",
    ),
)

CATEGORIES: Mapping[str, ErrorCategory] = MappingProxyType(
    {cat.code: cat for cat in _CATEGORY_LIST}
)

DEFAULT_CATEGORY_CODE = "ui_component"
DEFAULT_CATEGORY: ErrorCategory = CATEGORIES[DEFAULT_CATEGORY_CODE]

# Used when a category carries no escalation teams at all.
FALLBACK_TEAMS: tuple[str, ...] = ("tech-support",)

# Emergency fallback performed on P0 alerts, keyed by category code.
EMERGENCY_FALLBACK_ACTIONS: Mapping[str, str] = MappingProxyType({
    "emergency_component": "Display static emergency contacts",
    "patient_safety": "Show emergency medical guidance",
    "patient_form": "Provide alternative contact methods",
    "api_failure": "Show cached emergency information",
    "authentication": "Enable guest access to emergency info",
})
DEFAULT_EMERGENCY_FALLBACK = "Show emergency contact information"


# ── Personas ────────────────────────────────────────────────────

PATIENT = "patient"
HEALTHCARE_PROFESSIONAL = "healthcare_professional"
MEDICAL_REVIEWER = "medical_reviewer"
EMERGENCY_USER = "emergency_user"
CAREGIVER = "caregiver"

PERSONAS: Mapping[str, UserPersona] = MappingProxyType({
    PATIENT: UserPersona(
        code=PATIENT,
        name="Patient",
        stress_level="high",
        technical_expertise="low",
        accessibility_needs="variable",
        mobile_usage="primary",
    ),
    HEALTHCARE_PROFESSIONAL: UserPersona(
        code=HEALTHCARE_PROFESSIONAL,
        name="Healthcare Professional",
        stress_level="medium",
        technical_expertise="medium",
        accessibility_needs="standard",
        mobile_usage="frequent",
    ),
    MEDICAL_REVIEWER: UserPersona(
        code=MEDICAL_REVIEWER,
        name="Medical Content Reviewer",
        stress_level="low",
        technical_expertise="high",
        accessibility_needs="standard",
        mobile_usage="desktop-primary",
    ),
    EMERGENCY_USER: UserPersona(
        code=EMERGENCY_USER,
        name="Emergency User",
        stress_level="critical",
        technical_expertise="variable",
        accessibility_needs="urgent",
        mobile_usage="exclusive",
    ),
    CAREGIVER: UserPersona(
        code=CAREGIVER,
        name="Patient Caregiver",
        stress_level="high",
        technical_expertise="variable",
        accessibility_needs="often-present",
        mobile_usage="primary",
    ),
})

DEFAULT_PERSONA_CODE = PATIENT


# ── Priority matrix ─────────────────────────────────────────────

PRIORITY_MATRIX: Mapping[str, Mapping[str, Tier]] = MappingProxyType({
    # Emergency users: everything that blocks help is urgent.
    EMERGENCY_USER: MappingProxyType({
        "emergency_component": Tier.P0,
        "patient_safety": Tier.P0,
        "patient_form": Tier.P1,
        "api_failure": Tier.P1,
        "accessibility": Tier.P1,
        "navigation": Tier.P2,
    }),
    HEALTHCARE_PROFESSIONAL: MappingProxyType({
        "emergency_component": Tier.P0,
        "patient_safety": Tier.P0,
        "authentication": Tier.P1,
        "api_failure": Tier.P1,
        "patient_form": Tier.P2,
        "ui_component": Tier.P3,
    }),
    PATIENT: MappingProxyType({
        "emergency_component": Tier.P0,
        "patient_safety": Tier.P0,
        "patient_form": Tier.P1,
        "accessibility": Tier.P1,
        "navigation": Tier.P2,
    }),
})


# ── Lookups ─────────────────────────────────────────────────────


def lookup_category(code: str | None) -> ErrorCategory:
    """Return the category for *code*, or the default UI-component category."""
    if not code:
        return DEFAULT_CATEGORY
    return CATEGORIES.get(code, DEFAULT_CATEGORY)


def is_known_category(code: str | None) -> bool:
    return bool(code) and code in CATEGORIES


def lookup_persona(code: str | None) -> UserPersona:
    """Return the persona for *code*, or the patient persona."""
    if not code:
        return PERSONAS[DEFAULT_PERSONA_CODE]
    return PERSONAS.get(code, PERSONAS[DEFAULT_PERSONA_CODE])


def is_known_persona(code: str | None) -> bool:
    return bool(code) and code in PERSONAS


def escalation_teams_for(code: str | None) -> tuple[str, ...]:
    """Default escalation teams for a category (never empty)."""
    teams = lookup_category(code).default_escalation_teams
    return teams or FALLBACK_TEAMS


def response_time_for(tier: Tier | str) -> str:
    """Required response time for a tier; unknown tiers get the slowest."""
    try:
        return RESPONSE_TIMES[Tier(tier)]
    except ValueError:
        return RESPONSE_TIMES[Tier.P3]


def emergency_fallback_action(code: str | None) -> str:
    """Fallback UI action performed when a P0 alert is raised for *code*."""
    if not code:
        return DEFAULT_EMERGENCY_FALLBACK
    return EMERGENCY_FALLBACK_ACTIONS.get(code, DEFAULT_EMERGENCY_FALLBACK)
