"""ContextCollector — builds the anonymized, PII-scrubbed context for an alert."""

from __future__ import annotations

import re
import secrets
import string
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from medtriage.context.detection import DetectionStrategy, KeywordDetectionStrategy
from medtriage.context.sanitizer import (
    PII_FIELDS,
    sanitize_route,
    sanitize_user_agent,
    scrub,
    strip_pii_fields,
)
from medtriage.context.types import AlertContext, DeviceContext, EnvironmentSignals, ErrorHints
from medtriage.core.config import AppConfig

logger = structlog.get_logger(__name__)

_MOBILE_MAX_WIDTH = 768
_TABLET_MAX_WIDTH = 1024
_WORK_HOURS = range(8, 19)
_SCREEN_READER_MARKERS = ("NVDA", "JAWS", "VoiceOver")
_LARGE_FONT_PX = 16.0
_BROWSER_VERSION_RE = re.compile(r"(Firefox|Edg|Chrome|Safari)/(\d+)")


def _anonymous_session_id() -> str:
    """Session-scoped id with no digits, so it survives the scrub pass intact."""
    token = "".join(secrets.choice(string.ascii_lowercase) for _ in range(16))
    return f"healthcare-session-{token}"


class ContextCollector:
    """Collects situational context for error reports.

    Each field is resolved independently: an explicit hint wins, then the
    detection strategy matches environment signals, then a safe default is
    used. Missing signals (non-interactive hosts) degrade to ``None`` rather
    than raising. The assembled structure is scrubbed last, so the returned
    ``AlertContext`` never carries emails, phone numbers, numeric identifiers,
    or deny-listed fields.
    """

    def __init__(
        self,
        app: AppConfig | None = None,
        strategy: DetectionStrategy | None = None,
        deny_list: frozenset[str] = PII_FIELDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._app = app or AppConfig()
        self._strategy = strategy or KeywordDetectionStrategy()
        self._deny_list = deny_list
        self._clock = clock
        self._session_id = _anonymous_session_id()
        self._session_start = clock()

    @property
    def strategy(self) -> DetectionStrategy:
        return self._strategy

    @property
    def session_id(self) -> str:
        return self._session_id

    def build_context(
        self,
        hints: ErrorHints | None = None,
        signals: EnvironmentSignals | None = None,
    ) -> AlertContext:
        """Build and scrub the context for one error."""
        hints = hints or ErrorHints()
        signals = signals or EnvironmentSignals()
        now = self._clock()

        route = hints.route or signals.route
        component_name = hints.component_name

        emergency = self._strategy.detect_emergency(
            hints.emergency_hint, route, component_name,
        )
        specialty = self._strategy.detect_specialty(
            hints.specialty_hint, route, component_name,
        )
        persona = self._strategy.detect_persona(hints.persona_hint, route, emergency)
        journey_stage = self._strategy.detect_journey_stage(route, component_name, emergency)

        raw: dict[str, Any] = {
            "session": {
                "id": self._session_id,
                "duration_secs": max(0, round(now - self._session_start)),
                "timestamp": now,
            },
            "healthcare": {
                "specialty": specialty,
                "persona": persona,
                "journey_stage": journey_stage,
                "emergency": emergency,
                "device_context": self._device_context(signals, emergency, now),
            },
            "technical": {
                "user_agent": (
                    sanitize_user_agent(signals.user_agent) if signals.user_agent else None
                ),
                "browser": self._browser_info(signals.user_agent),
                "device": self._device_info(signals),
                "viewport": self._viewport_info(signals),
                "connection": dict(signals.connection) if signals.connection else None,
            },
            "accessibility": self._accessibility_info(signals),
            "component": {
                "name": component_name or "unknown",
                "route": sanitize_route(route),
                "action": hints.user_action,
                "form_step": hints.form_step,
            },
            "environment": {
                "platform": self._app.platform,
                "environment": self._app.environment,
                "is_development": self._app.environment == "development",
                "version": self._app.version,
                "build_time": self._app.build_time,
            },
            "extra": strip_pii_fields(hints.extra, self._deny_list),
        }

        scrubbed = scrub(raw, self._deny_list)
        context = AlertContext.model_validate(scrubbed)
        logger.debug(
            "context_built",
            specialty=context.specialty,
            persona=context.persona,
            emergency=context.emergency,
            journey_stage=context.healthcare.journey_stage,
        )
        return context

    # ── Environment probes (best-effort) ────────────────────────

    @staticmethod
    def _viewport_info(signals: EnvironmentSignals) -> dict[str, Any] | None:
        if signals.viewport_width is None or signals.viewport_height is None:
            return None
        width, height = signals.viewport_width, signals.viewport_height
        return {
            "width": width,
            "height": height,
            "orientation": "landscape" if width > height else "portrait",
            "pixel_ratio": signals.pixel_ratio or 1.0,
        }

    @staticmethod
    def _device_info(signals: EnvironmentSignals) -> dict[str, Any] | None:
        width = signals.viewport_width
        if width is None:
            return None
        if width <= _MOBILE_MAX_WIDTH:
            device_type = "mobile"
        elif width <= _TABLET_MAX_WIDTH:
            device_type = "tablet"
        else:
            device_type = "desktop"

        if width <= 480:
            screen_size = "small"
        elif width <= _MOBILE_MAX_WIDTH:
            screen_size = "medium"
        elif width <= _TABLET_MAX_WIDTH:
            screen_size = "large"
        else:
            screen_size = "xlarge"
        return {"type": device_type, "screen_size": screen_size}

    @staticmethod
    def _browser_info(user_agent: str | None) -> dict[str, Any] | None:
        if not user_agent:
            return None

        if "Firefox" in user_agent:
            name = "Firefox"
        elif "Edg" in user_agent:
            name = "Edge"
        elif "Chrome" in user_agent:
            name = "Chrome"
        elif "Safari" in user_agent:
            name = "Safari"
        else:
            name = "Other"

        match = _BROWSER_VERSION_RE.search(user_agent)
        version = match.group(2) if match else "unknown"

        if "Gecko/" in user_agent and "like Gecko" not in user_agent:
            engine = "Gecko"
        elif "AppleWebKit" in user_agent and "Chrome" in user_agent:
            engine = "Blink"
        elif "AppleWebKit" in user_agent:
            engine = "WebKit"
        else:
            engine = "Other"

        mobile = any(marker in user_agent for marker in ("Mobile", "Android", "iPhone", "iPad"))
        return {"name": name, "version": version, "engine": engine, "mobile": mobile}

    def _device_context(
        self,
        signals: EnvironmentSignals,
        emergency: bool,
        now: float,
    ) -> str | None:
        width = signals.viewport_width
        if width is None:
            return None

        is_mobile = width <= _MOBILE_MAX_WIDTH
        is_tablet = _MOBILE_MAX_WIDTH < width <= _TABLET_MAX_WIDTH

        if emergency:
            return (
                DeviceContext.MOBILE_EMERGENCY.value
                if is_mobile
                else DeviceContext.DESKTOP_PROFESSIONAL.value
            )

        if is_tablet:
            return DeviceContext.TABLET_BEDSIDE.value

        work_hours = datetime.fromtimestamp(now).hour in _WORK_HOURS
        if not is_mobile and work_hours:
            return DeviceContext.DESKTOP_PROFESSIONAL.value

        return DeviceContext.MOBILE_STANDARD.value

    @staticmethod
    def _accessibility_info(signals: EnvironmentSignals) -> dict[str, Any] | None:
        probes = (
            signals.prefers_reduced_motion,
            signals.prefers_high_contrast,
            signals.prefers_dark_scheme,
            signals.screen_reader,
            signals.keyboard_navigation,
            signals.font_size_px,
        )
        if signals.user_agent is None and all(p is None for p in probes):
            return None

        ua = signals.user_agent or ""
        screen_reader = bool(signals.screen_reader) or any(
            marker in ua for marker in _SCREEN_READER_MARKERS
        )
        reduced_motion = bool(signals.prefers_reduced_motion)
        font_size = (
            "large"
            if signals.font_size_px is not None and signals.font_size_px > _LARGE_FONT_PX
            else "normal"
        )
        return {
            "reduced_motion": reduced_motion,
            "high_contrast": bool(signals.prefers_high_contrast),
            "screen_reader": screen_reader,
            "keyboard_navigation": bool(signals.keyboard_navigation),
            "font_size": font_size,
            "color_scheme": "dark" if signals.prefers_dark_scheme else "light",
            "animations": not reduced_motion,
        }
