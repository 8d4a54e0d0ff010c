"""Detection strategies — infer medical context from routes and component names.

The heuristics are plain substring matching. Hosts that need stricter
detection subclass ``DetectionStrategy`` and hand it to ``ContextCollector``.
"""

from __future__ import annotations

import abc

from medtriage.context.types import JourneyStage, MedicalSpecialty
from medtriage.taxonomy.categories import (
    EMERGENCY_USER,
    HEALTHCARE_PROFESSIONAL,
    PATIENT,
    is_known_persona,
)

ROUTE_EMERGENCY_KEYWORDS: tuple[str, ...] = ("emergency", "urgent", "notfall", "sofort")
COMPONENT_EMERGENCY_KEYWORDS: tuple[str, ...] = ("emergency", "urgent", "critical", "notfall")

# Component-name keywords → specialty, checked in order.
COMPONENT_SPECIALTY_KEYWORDS: tuple[tuple[tuple[str, ...], MedicalSpecialty], ...] = (
    (("cardio", "heart", "kardio"), MedicalSpecialty.KARDIOLOGIE),
    (("onko", "onco", "cancer"), MedicalSpecialty.ONKOLOGIE),
    (("gallen", "gallbladder", "biliary"), MedicalSpecialty.GALLENBLASE),
    (("nephro", "kidney", "niere"), MedicalSpecialty.NEPHROLOGIE),
    (("thyroid", "schild"), MedicalSpecialty.SCHILDDRUESE),
    (("intensiv", "icu", "intensive"), MedicalSpecialty.INTENSIVMEDIZIN),
)

ROUTE_PERSONA_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("/professional", "/doctor"), HEALTHCARE_PROFESSIONAL),
    (("/emergency", "/urgent"), EMERGENCY_USER),
)

ROUTE_JOURNEY_KEYWORDS: tuple[tuple[tuple[str, ...], JourneyStage], ...] = (
    (("/consultation", "/appointment"), JourneyStage.CONSULTATION),
    (("/select", "/choose"), JourneyStage.SELECTION),
    (("/follow", "/result"), JourneyStage.FOLLOW_UP),
)

COMPONENT_JOURNEY_KEYWORDS: tuple[tuple[tuple[str, ...], JourneyStage], ...] = (
    (("selector", "choose"), JourneyStage.SELECTION),
)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def _lower(value: str | None) -> str:
    return value.lower() if value else ""


class DetectionStrategy(abc.ABC):
    """Resolves healthcare context fields from hints and environment signals.

    Each method receives the explicit caller value (if any) alongside the raw
    route and component name, and must never raise.
    """

    @abc.abstractmethod
    def detect_emergency(
        self,
        explicit: bool | None,
        route: str | None,
        component_name: str | None,
    ) -> bool:
        """True if any emergency signal is present."""

    @abc.abstractmethod
    def detect_specialty(
        self,
        explicit: str | None,
        route: str | None,
        component_name: str | None,
    ) -> str:
        """Medical specialty code, or ``unknown``."""

    @abc.abstractmethod
    def detect_persona(
        self,
        explicit: str | None,
        route: str | None,
        emergency: bool,
    ) -> str:
        """Persona code; emergencies force the emergency-user persona."""

    @abc.abstractmethod
    def detect_journey_stage(
        self,
        route: str | None,
        component_name: str | None,
        emergency: bool,
    ) -> str:
        """Journey stage code."""


class KeywordDetectionStrategy(DetectionStrategy):
    """Default strategy: explicit value, then keyword match, then a safe default."""

    def detect_emergency(
        self,
        explicit: bool | None,
        route: str | None,
        component_name: str | None,
    ) -> bool:
        if explicit is True:
            return True
        if _contains_any(_lower(route), ROUTE_EMERGENCY_KEYWORDS):
            return True
        return _contains_any(_lower(component_name), COMPONENT_EMERGENCY_KEYWORDS)

    def detect_specialty(
        self,
        explicit: str | None,
        route: str | None,
        component_name: str | None,
    ) -> str:
        if explicit:
            return explicit

        path = _lower(route)
        if path:
            for specialty in MedicalSpecialty:
                if specialty is MedicalSpecialty.UNKNOWN:
                    continue
                if specialty.value in path:
                    return specialty.value

        component = _lower(component_name)
        if component:
            for keywords, specialty in COMPONENT_SPECIALTY_KEYWORDS:
                if _contains_any(component, keywords):
                    return specialty.value

        return MedicalSpecialty.UNKNOWN.value

    def detect_persona(
        self,
        explicit: str | None,
        route: str | None,
        emergency: bool,
    ) -> str:
        if emergency:
            return EMERGENCY_USER
        if explicit and is_known_persona(explicit):
            return explicit

        path = _lower(route)
        for keywords, persona in ROUTE_PERSONA_KEYWORDS:
            if _contains_any(path, keywords):
                return persona

        return PATIENT

    def detect_journey_stage(
        self,
        route: str | None,
        component_name: str | None,
        emergency: bool,
    ) -> str:
        if emergency:
            return JourneyStage.EMERGENCY.value

        path = _lower(route)
        for keywords, stage in ROUTE_JOURNEY_KEYWORDS:
            if _contains_any(path, keywords):
                return stage.value

        component = _lower(component_name)
        for keywords, stage in COMPONENT_JOURNEY_KEYWORDS:
            if _contains_any(component, keywords):
                return stage.value

        return JourneyStage.DISCOVERY.value
