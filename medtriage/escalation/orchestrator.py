"""EscalationOrchestrator — classify, enrich, fan out, and archive each error.

Every error moves through ``received → classified → enriched → dispatching →
archived``. Dispatch strategy depends on the resolved tier:

- P0: every contact method of every critical team, concurrently, plus the
  emergency fallback, a monitoring ping, and an incident record.
- P1: the primary contact of every category team.
- P2/P3: the primary contact of the first category team.

Nothing raised by a channel or collaborator escapes; the alert is archived
even when no delivery succeeded.
"""

from __future__ import annotations

import asyncio
import itertools
import re
import secrets
import string
import time
from collections.abc import Awaitable, Callable

import structlog

from medtriage.context.collector import ContextCollector
from medtriage.context.sanitizer import scrub_text
from medtriage.context.types import AlertContext, EnvironmentSignals, ErrorHints
from medtriage.core.config import EscalationConfig
from medtriage.core.logging import log_level_for
from medtriage.core.types import AlertState, DeliveryOutcome, Tier
from medtriage.dispatch.registry import AlertDispatcher
from medtriage.dispatch.types import (
    CONSOLE_CHANNEL,
    AlertPayload,
    DeliveryResult,
    ErrorSummary,
    EscalationDescriptor,
    Notification,
)
from medtriage.escalation.exceptions import InvalidTransitionError
from medtriage.escalation.history import AlertHistory
from medtriage.escalation.sinks import FallbackSignal, IncidentStore, MonitoringSink
from medtriage.escalation.teams import TeamDirectory
from medtriage.escalation.types import (
    AlertOutcome,
    IncidentReport,
    MonitoringEvent,
    ReportedError,
)
from medtriage.taxonomy.categories import (
    ErrorCategory,
    emergency_fallback_action,
    escalation_teams_for,
    is_known_category,
    lookup_category,
    response_time_for,
)
from medtriage.taxonomy.priority import PriorityResolver

# Dedicated structured logger for decision records.
decision_logger = structlog.get_logger("decision_log")

logger = structlog.get_logger(__name__)

_STATE_ORDER: tuple[AlertState, ...] = tuple(AlertState)

_BANNERS: dict[Tier, tuple[str, str]] = {
    Tier.P0: ("CRITICAL", "PATIENT SAFETY IMPACT - IMMEDIATE ACTION REQUIRED"),
    Tier.P1: ("HIGH", "Medical workflow disruption - prompt response needed"),
    Tier.P2: ("MEDIUM", "Medical platform error requiring attention"),
    Tier.P3: ("MEDIUM", "Medical platform error requiring attention"),
}

_BASE36 = string.digits + string.ascii_lowercase
_alert_sequence = itertools.count()

StrategyFn = Callable[[AlertPayload, ErrorCategory], Awaitable["_DispatchReport"]]


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_alert_id(now: float | None = None) -> str:
    """Time-based id with a random suffix, unique for the process lifetime."""
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"healthcare-alert-{_base36(millis)}-{suffix}{_base36(next(_alert_sequence))}"


def error_fingerprint(error: ErrorSummary, category: str, specialty: str | None) -> str:
    """Stable grouping key for similar medical errors."""
    parts = [
        "healthcare",
        category,
        specialty if specialty and specialty != "unknown" else "general",
        error.name or "unknown",
        error.message[:50] if error.message else "no-message",
    ]
    return re.sub(r"[^a-z0-9-]", "", "-".join(parts).lower())


class AlertLifecycle:
    """Forward-only state tracker for a single alert."""

    def __init__(self) -> None:
        self._states: list[AlertState] = [AlertState.RECEIVED]

    @property
    def state(self) -> AlertState:
        return self._states[-1]

    @property
    def states(self) -> list[AlertState]:
        return list(self._states)

    def advance(self, to: AlertState) -> None:
        current = _STATE_ORDER.index(self.state)
        target = _STATE_ORDER.index(to)
        if target != current + 1:
            raise InvalidTransitionError(f"cannot move from {self.state} to {to}")
        self._states.append(to)


class _DispatchReport:
    """Accumulates what a tier strategy did."""

    def __init__(self) -> None:
        self.deliveries: list[DeliveryResult] = []
        self.fallback_action: str | None = None
        self.incident_id: str | None = None


class EscalationOrchestrator:
    """Top-level coordinator of the triage pipeline.

    Construct one per process (see ``create_alert_pipeline``) and call
    ``submit_error`` from any coroutine; ``process_error`` is the awaitable
    form that returns what happened.
    """

    def __init__(
        self,
        dispatcher: AlertDispatcher,
        teams: TeamDirectory,
        collector: ContextCollector | None = None,
        resolver: PriorityResolver | None = None,
        history: AlertHistory | None = None,
        monitoring: MonitoringSink | None = None,
        incidents: IncidentStore | None = None,
        fallback: FallbackSignal | None = None,
        escalation: EscalationConfig | None = None,
        platform: str = "zweitmeinung.ng",
        clock: Callable[[], float] = time.time,
        side_effect_timeout_secs: float = 10.0,
    ) -> None:
        self._dispatcher = dispatcher
        self._teams = teams
        self._collector = collector if collector is not None else ContextCollector()
        self._resolver = resolver if resolver is not None else PriorityResolver()
        self._history = history if history is not None else AlertHistory()
        self._monitoring = monitoring
        self._incidents = incidents
        self._fallback = fallback
        self._escalation = escalation if escalation is not None else EscalationConfig()
        self._platform = platform
        self._clock = clock
        self._side_effect_timeout = side_effect_timeout_secs
        self._pending: set[asyncio.Task[AlertOutcome]] = set()
        self._strategies: dict[Tier, StrategyFn] = {
            Tier.P0: self._handle_critical,
            Tier.P1: self._handle_high_priority,
            Tier.P2: self._handle_standard,
            Tier.P3: self._handle_standard,
        }

    # ── Properties ──────────────────────────────────────────────

    @property
    def dispatcher(self) -> AlertDispatcher:
        return self._dispatcher

    @property
    def teams(self) -> TeamDirectory:
        return self._teams

    @property
    def history(self) -> AlertHistory:
        return self._history

    @property
    def pending(self) -> int:
        """Number of submitted alerts still in flight."""
        return len(self._pending)

    # ── Entry points ────────────────────────────────────────────

    def submit_error(
        self,
        error: ReportedError,
        hints: ErrorHints | None = None,
        signals: EnvironmentSignals | None = None,
    ) -> None:
        """Fire-and-forget: schedule processing on the running event loop.

        Outcomes are observable only through channels, sinks, and history.
        Must be called while an event loop is running.
        """
        task = asyncio.get_running_loop().create_task(
            self.process_error(error, hints, signals),
        )
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    async def process_error(
        self,
        error: ReportedError,
        hints: ErrorHints | None = None,
        signals: EnvironmentSignals | None = None,
    ) -> AlertOutcome:
        """Run one error through every stage and return the outcome."""
        hints = hints or ErrorHints()
        lifecycle = AlertLifecycle()
        logger.info(
            "alert_received",
            error_name=error.name,
            correlation_id=error.correlation_id,
            category_hint=hints.category,
        )

        # ── Classified ──
        category = lookup_category(hints.category)
        if hints.category and not is_known_category(hints.category):
            logger.warning(
                "unknown_category",
                category=hints.category,
                fallback=category.code,
            )
        severity = hints.severity or category.severity
        patient_safety = (
            hints.patient_safety_impact
            if hints.patient_safety_impact is not None
            else category.patient_safety_impact
        )
        lifecycle.advance(AlertState.CLASSIFIED)

        # ── Enriched ──
        context = self._collector.build_context(hints, signals)
        tier = self._resolver.resolve(category.code, context.persona, context.emergency)
        payload = self._build_payload(error, category, severity, patient_safety, context, tier)
        lifecycle.advance(AlertState.ENRICHED)

        # ── Dispatching ──
        lifecycle.advance(AlertState.DISPATCHING)
        strategy = self._strategies.get(tier, self._handle_standard)
        report = await strategy(payload, category)

        # ── Archived ──
        archived = payload.model_copy(update={"processed": True, "processed_at": self._clock()})
        self._history.append(archived)
        lifecycle.advance(AlertState.ARCHIVED)
        self._log_decision(archived, report.deliveries)

        return AlertOutcome(
            alert=archived,
            deliveries=report.deliveries,
            states=lifecycle.states,
            fallback_action=report.fallback_action,
            incident_id=report.incident_id,
        )

    async def drain(self) -> None:
        """Wait for every submitted alert to reach the archive."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        await self._dispatcher.close()
        for sink in (self._monitoring, self._incidents):
            if sink is None:
                continue
            try:
                await sink.close()
            except Exception:
                logger.exception("sink_close_error", sink=type(sink).__name__)

    # ── Payload ─────────────────────────────────────────────────

    def _build_payload(
        self,
        error: ReportedError,
        category: ErrorCategory,
        severity: str,
        patient_safety: bool,
        context: AlertContext,
        tier: Tier,
    ) -> AlertPayload:
        now = self._clock()
        summary = ErrorSummary(
            message=scrub_text(error.message),
            name=error.name,
            correlation_id=error.correlation_id,
        )
        return AlertPayload(
            id=generate_alert_id(now),
            timestamp=now,
            tier=tier,
            response_time=response_time_for(tier),
            category=category.code,
            severity=severity,
            error=summary,
            fingerprint=error_fingerprint(summary, category.code, context.specialty),
            context=context,
            escalation=EscalationDescriptor(
                teams=escalation_teams_for(category.code),
                immediate=tier == Tier.P0,
                patient_safety=patient_safety,
            ),
        )

    # ── Tier strategies ─────────────────────────────────────────

    async def _handle_critical(
        self,
        payload: AlertPayload,
        category: ErrorCategory,
    ) -> _DispatchReport:
        report = _DispatchReport()
        logger.critical(
            "critical_medical_error",
            alert_id=payload.id,
            category=payload.category,
            patient_safety=payload.escalation.patient_safety,
        )
        report.deliveries.append(await self._console_banner(payload))

        team_ids = (
            self._escalation.critical_teams_patient_safety
            if payload.escalation.patient_safety
            else self._escalation.critical_teams_default
        )

        fanout = asyncio.gather(*(
            self._notify_team(team_id, payload, immediate=True) for team_id in team_ids
        ))
        team_results, _ = await asyncio.gather(
            fanout,
            self._emergency_procedures(payload, category, report),
        )
        for results in team_results:
            report.deliveries.extend(results)
        return report

    async def _handle_high_priority(
        self,
        payload: AlertPayload,
        category: ErrorCategory,
    ) -> _DispatchReport:
        report = _DispatchReport()
        logger.error("high_priority_medical_error", alert_id=payload.id, category=payload.category)
        report.deliveries.append(await self._console_banner(payload))
        for team_id in payload.escalation.teams:
            report.deliveries.extend(await self._notify_team(team_id, payload, immediate=False))
        return report

    async def _handle_standard(
        self,
        payload: AlertPayload,
        category: ErrorCategory,
    ) -> _DispatchReport:
        report = _DispatchReport()
        logger.warning("medical_error_alert", alert_id=payload.id, category=payload.category)
        report.deliveries.append(await self._console_banner(payload))
        if payload.escalation.teams:
            first = payload.escalation.teams[0]
            report.deliveries.extend(await self._notify_team(first, payload, immediate=False))
        return report

    # ── Delivery helpers ────────────────────────────────────────

    async def _console_banner(self, payload: AlertPayload) -> DeliveryResult:
        level, message = _BANNERS.get(payload.tier, _BANNERS[Tier.P3])
        notification = Notification(
            alert=payload,
            level=level,
            message=message,
            immediate=payload.escalation.immediate,
        )
        return await self._dispatcher.dispatch(CONSOLE_CHANNEL, notification)

    async def _notify_team(
        self,
        team_id: str,
        payload: AlertPayload,
        immediate: bool,
    ) -> list[DeliveryResult]:
        """Immediate: every contact method, concurrently. Otherwise the primary."""
        team = self._teams.get(team_id)
        if team is None:
            logger.error("team_not_found", team=team_id, alert_id=payload.id)
            return [
                DeliveryResult(
                    channel_id="",
                    outcome=DeliveryOutcome.TEAM_NOT_FOUND,
                    team_id=team_id,
                ),
            ]

        if immediate:
            contacts = list(team.contacts)
        else:
            primary = team.primary_contact
            contacts = [primary] if primary is not None else []

        if not contacts:
            logger.warning("team_has_no_contacts", team=team_id, alert_id=payload.id)
            return []

        level, message = _BANNERS.get(payload.tier, _BANNERS[Tier.P3])
        results = await asyncio.gather(*(
            self._dispatcher.dispatch(
                contact.channel_id,
                Notification(
                    alert=payload,
                    level=level,
                    message=message,
                    team_id=team.id,
                    team_name=team.name,
                    contact=contact,
                    immediate=immediate,
                ),
            )
            for contact in contacts
        ))
        return list(results)

    # ── P0 side effects ─────────────────────────────────────────

    async def _emergency_procedures(
        self,
        payload: AlertPayload,
        category: ErrorCategory,
        report: _DispatchReport,
    ) -> None:
        logger.warning("emergency_procedures_started", alert_id=payload.id)
        report.fallback_action = await self._execute_fallback(payload, category)
        await self._alert_monitoring(payload)
        report.incident_id = await self._prepare_incident(payload, report.fallback_action)

    async def _execute_fallback(self, payload: AlertPayload, category: ErrorCategory) -> str:
        action = emergency_fallback_action(payload.category)
        logger.warning("emergency_fallback", action=action, alert_id=payload.id)
        if self._fallback is None:
            return action
        try:
            await asyncio.wait_for(
                self._fallback.trigger_fallback(category, payload, action),
                timeout=self._side_effect_timeout,
            )
        except TimeoutError:
            logger.error("fallback_signal_timeout", alert_id=payload.id)
        except Exception:
            logger.exception("fallback_signal_failed", alert_id=payload.id)
        return action

    async def _alert_monitoring(self, payload: AlertPayload) -> None:
        if self._monitoring is None:
            return
        event = MonitoringEvent(
            source=self._platform,
            priority=payload.tier,
            patient_safety_impact=payload.escalation.patient_safety,
            timestamp=payload.timestamp,
            alert_id=payload.id,
        )
        try:
            await asyncio.wait_for(
                self._monitoring.publish(event), timeout=self._side_effect_timeout,
            )
        except TimeoutError:
            logger.error("monitoring_publish_timeout", alert_id=payload.id)
        except Exception:
            logger.exception("monitoring_publish_failed", alert_id=payload.id)

    async def _prepare_incident(self, payload: AlertPayload, fallback_action: str | None) -> str:
        incident = IncidentReport(
            id=f"incident-{payload.id}",
            title=f"Healthcare Critical Error: {payload.error.name}",
            severity=payload.severity,
            priority=payload.tier,
            patient_safety_impact=payload.escalation.patient_safety,
            affected_services=[payload.context.component.name or "unknown"],
            medical_specialty=payload.context.specialty,
            persona=payload.context.persona,
            timestamp=payload.timestamp,
            response_teams=list(payload.escalation.teams),
            actions=[fallback_action] if fallback_action else [],
        )
        logger.info("incident_report_prepared", incident_id=incident.id)
        if self._incidents is not None:
            try:
                await asyncio.wait_for(
                    self._incidents.store(incident), timeout=self._side_effect_timeout,
                )
            except TimeoutError:
                logger.error("incident_store_timeout", incident_id=incident.id)
            except Exception:
                logger.exception("incident_store_failed", incident_id=incident.id)
        return incident.id

    # ── Logging ─────────────────────────────────────────────────

    def _log_decision(self, alert: AlertPayload, deliveries: list[DeliveryResult]) -> None:
        outcomes: dict[str, int] = {}
        for d in deliveries:
            outcomes[d.outcome.value] = outcomes.get(d.outcome.value, 0) + 1
        decision_logger.log(
            log_level_for(alert.severity),
            "decision",
            alert_id=alert.id,
            tier=alert.tier.value,
            category=alert.category,
            severity=alert.severity.value,
            fingerprint=alert.fingerprint,
            persona=alert.context.persona,
            emergency=alert.context.emergency,
            teams=list(alert.escalation.teams),
            outcomes=outcomes,
        )

    def _on_task_done(self, task: asyncio.Task[AlertOutcome]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "alert_processing_failed",
                error=f"{type(exc).__name__}: {exc}",
            )
