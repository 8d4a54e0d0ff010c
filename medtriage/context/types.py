"""Domain types for context enrichment — inbound hints and the scrubbed context."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from medtriage.core.types import Severity


class MedicalSpecialty(StrEnum):
    """Specialties served by the platform (route tokens are the values)."""

    KARDIOLOGIE = "kardiologie"
    ONKOLOGIE = "onkologie"
    GALLENBLASE = "gallenblase"
    NEPHROLOGIE = "nephrologie"
    SCHILDDRUESE = "schilddruese"
    INTENSIVMEDIZIN = "intensivmedizin"
    ALLGEMEINE_FRAGEN = "allgemeine-fragen"
    UNKNOWN = "unknown"


class JourneyStage(StrEnum):
    DISCOVERY = "discovery"
    SELECTION = "selection"
    CONSULTATION = "consultation"
    FOLLOW_UP = "follow_up"
    EMERGENCY = "emergency"


class DeviceContext(StrEnum):
    MOBILE_EMERGENCY = "mobile_emergency"
    DESKTOP_PROFESSIONAL = "desktop_professional"
    TABLET_BEDSIDE = "tablet_bedside"
    MOBILE_STANDARD = "mobile_standard"


# ── Inbound ─────────────────────────────────────────────────────


class ErrorHints(BaseModel):
    """Caller-supplied hints accompanying a reported error.

    Every field is optional; missing hints are detected from environment
    signals or defaulted. ``extra`` carries free-form fields that are scrubbed
    before they reach the context.
    """

    severity: Severity | None = None
    category: str | None = None
    persona_hint: str | None = None
    emergency_hint: bool | None = None
    patient_safety_impact: bool | None = None
    specialty_hint: str | None = None
    component_name: str | None = None
    route: str | None = None
    user_action: str | None = None
    form_step: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class EnvironmentSignals(BaseModel):
    """Best-effort signals from the host environment (browser, server, CLI).

    A non-interactive host leaves all of these unset.
    """

    route: str | None = None
    user_agent: str | None = None
    viewport_width: int | None = None
    viewport_height: int | None = None
    pixel_ratio: float | None = None
    prefers_reduced_motion: bool | None = None
    prefers_high_contrast: bool | None = None
    prefers_dark_scheme: bool | None = None
    screen_reader: bool | None = None
    keyboard_navigation: bool | None = None
    font_size_px: float | None = None
    connection: dict[str, Any] | None = None


# ── Context ─────────────────────────────────────────────────────


class SessionInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = "unknown"
    duration_secs: int = 0
    timestamp: float = 0.0


class HealthcareInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    specialty: str = MedicalSpecialty.UNKNOWN.value
    persona: str = "patient"
    journey_stage: str = JourneyStage.DISCOVERY.value
    emergency: bool = False
    device_context: str | None = None


class BrowserInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Other"
    version: str = "unknown"
    engine: str = "Other"
    mobile: bool = False


class ViewportInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = 0
    height: int = 0
    orientation: str = "portrait"
    pixel_ratio: float = 1.0


class DeviceInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "desktop"
    screen_size: str = "xlarge"


class TechnicalInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_agent: str | None = None
    browser: BrowserInfo | None = None
    device: DeviceInfo | None = None
    viewport: ViewportInfo | None = None
    connection: dict[str, Any] | None = None


class AccessibilityInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    reduced_motion: bool = False
    high_contrast: bool = False
    screen_reader: bool = False
    keyboard_navigation: bool = False
    font_size: str = "normal"
    color_scheme: str = "light"
    animations: bool = True


class ComponentInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "unknown"
    route: str = "unknown"
    action: str | None = None
    form_step: str | None = None


class EnvironmentInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    platform: str = ""
    environment: str = "production"
    is_development: bool = False
    version: str | None = None
    build_time: str | None = None


class AlertContext(BaseModel):
    """Anonymized situational record attached to an alert.

    Built fresh per alert and scrubbed as the final step, so no string leaf
    holds an email address, phone number, or bare 6+-digit identifier.
    """

    model_config = ConfigDict(frozen=True)

    session: SessionInfo = SessionInfo()
    healthcare: HealthcareInfo = HealthcareInfo()
    technical: TechnicalInfo = TechnicalInfo()
    accessibility: AccessibilityInfo | None = None
    component: ComponentInfo = ComponentInfo()
    environment: EnvironmentInfo = EnvironmentInfo()
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def specialty(self) -> str:
        return self.healthcare.specialty

    @property
    def persona(self) -> str:
        return self.healthcare.persona

    @property
    def emergency(self) -> bool:
        return self.healthcare.emergency
