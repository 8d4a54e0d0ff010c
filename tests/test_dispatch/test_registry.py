"""Tests for ChannelRegistry and AlertDispatcher — routing, limits, failures."""

from __future__ import annotations

import asyncio

from medtriage.core.config import ChannelRateLimit
from medtriage.core.types import ContactType, DeliveryOutcome, Severity, Tier
from medtriage.dispatch.channels import NotificationChannel
from medtriage.dispatch.rate_limiter import SlidingWindowRateLimiter
from medtriage.dispatch.registry import AlertDispatcher, ChannelRegistry
from medtriage.dispatch.types import AlertPayload, ContactMethod, ErrorSummary, Notification


# ── Helpers ─────────────────────────────────────────────────────


class FakeChannel(NotificationChannel):
    """In-memory channel for testing."""

    def __init__(self, fail: bool = False, result: bool = True, delay: float = 0.0) -> None:
        self.sent: list[Notification] = []
        self._fail = fail
        self._result = result
        self._delay = delay
        self.closed = False

    async def send(self, notification: Notification) -> bool:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail:
            raise ConnectionError("fake error")
        self.sent.append(notification)
        return self._result

    async def close(self) -> None:
        self.closed = True


class BrokenCloseChannel(FakeChannel):
    async def close(self) -> None:
        raise RuntimeError("close failed")


def _notification(**kw: object) -> Notification:
    alert = AlertPayload(
        id="healthcare-alert-test",
        timestamp=1000.0,
        tier=Tier.P2,
        response_time="2 hours",
        category="navigation",
        severity=Severity.MEDIUM,
        error=ErrorSummary(message="boom"),
    )
    defaults: dict[str, object] = {"alert": alert, "team_id": "frontend-team"}
    defaults.update(kw)
    return Notification(**defaults)  # type: ignore[arg-type]


def _dispatcher(limits: dict[str, ChannelRateLimit] | None = None, timeout: float = 1.0) -> AlertDispatcher:
    return AlertDispatcher(
        rate_limiter=SlidingWindowRateLimiter(limits or {}),
        timeout_secs=timeout,
    )


# ── Registry ────────────────────────────────────────────────────


class TestChannelRegistry:
    def test_register_and_get(self) -> None:
        reg = ChannelRegistry()
        ch = FakeChannel()
        reg.register("email", ch)
        assert reg.get("email") is ch
        assert "email" in reg
        assert len(reg) == 1

    def test_re_register_replaces(self) -> None:
        reg = ChannelRegistry()
        first, second = FakeChannel(), FakeChannel()
        reg.register("email", first)
        reg.register("email", second)
        assert reg.get("email") is second
        assert reg.channel_ids == ["email"]

    def test_unregister(self) -> None:
        reg = ChannelRegistry({"chat": FakeChannel()})
        assert reg.unregister("chat") is not None
        assert reg.unregister("chat") is None
        assert reg.get("chat") is None


# ── Dispatch outcomes ───────────────────────────────────────────


class TestDispatch:
    async def test_delivered(self) -> None:
        disp = _dispatcher()
        ch = FakeChannel()
        disp.register("email", ch)
        result = await disp.dispatch("email", _notification())
        assert result.outcome == DeliveryOutcome.DELIVERED
        assert result.delivered is True
        assert result.team_id == "frontend-team"
        assert len(ch.sent) == 1

    async def test_injected_empty_registry_is_used(self) -> None:
        reg = ChannelRegistry()
        disp = AlertDispatcher(registry=reg, rate_limiter=SlidingWindowRateLimiter({}))
        assert disp.registry is reg

        ch = FakeChannel()
        reg.register("email", ch)
        result = await disp.dispatch("email", _notification())
        assert result.outcome == DeliveryOutcome.DELIVERED
        assert len(ch.sent) == 1

    async def test_channel_not_found(self) -> None:
        result = await _dispatcher().dispatch("pager", _notification())
        assert result.outcome == DeliveryOutcome.CHANNEL_NOT_FOUND
        assert result.channel_id == "pager"

    async def test_suppressed_over_limit(self) -> None:
        disp = _dispatcher({"voice": ChannelRateLimit(limit=2, window_ms=60_000)})
        ch = FakeChannel()
        disp.register("voice", ch)
        outcomes = [(await disp.dispatch("voice", _notification())).outcome for _ in range(4)]
        assert outcomes == [
            DeliveryOutcome.DELIVERED,
            DeliveryOutcome.DELIVERED,
            DeliveryOutcome.SUPPRESSED,
            DeliveryOutcome.SUPPRESSED,
        ]
        assert len(ch.sent) == 2

    async def test_exception_is_failed_and_releases_slot(self) -> None:
        disp = _dispatcher({"chat": ChannelRateLimit(limit=1, window_ms=60_000)})
        disp.register("chat", FakeChannel(fail=True))
        result = await disp.dispatch("chat", _notification())
        assert result.outcome == DeliveryOutcome.FAILED
        assert "ConnectionError" in result.detail
        assert disp.rate_limiter.count("chat") == 0

    async def test_false_return_is_failed(self) -> None:
        disp = _dispatcher()
        disp.register("chat", FakeChannel(result=False))
        result = await disp.dispatch("chat", _notification())
        assert result.outcome == DeliveryOutcome.FAILED

    async def test_timeout(self) -> None:
        disp = _dispatcher({"email": ChannelRateLimit(limit=5)}, timeout=0.01)
        disp.register("email", FakeChannel(delay=1.0))
        result = await disp.dispatch("email", _notification())
        assert result.outcome == DeliveryOutcome.TIMED_OUT
        assert disp.rate_limiter.count("email") == 0

    async def test_concurrent_burst_respects_limit(self) -> None:
        disp = _dispatcher({"email": ChannelRateLimit(limit=3, window_ms=60_000)})
        ch = FakeChannel(delay=0.01)
        disp.register("email", ch)
        results = await asyncio.gather(*(disp.dispatch("email", _notification()) for _ in range(7)))
        assert sum(1 for r in results if r.delivered) == 3
        assert sum(1 for r in results if r.outcome == DeliveryOutcome.SUPPRESSED) == 4

    async def test_contact_routed_by_channel_id(self) -> None:
        disp = _dispatcher()
        ch = FakeChannel()
        disp.register("chat", ch)
        contact = ContactMethod(type=ContactType.CHAT, value="#ops", primary=True)
        await disp.dispatch(contact.channel_id, _notification(contact=contact))
        assert ch.sent[0].contact == contact


class TestLifecycle:
    async def test_close_all_channels(self) -> None:
        disp = _dispatcher()
        a, b = FakeChannel(), FakeChannel()
        disp.register("a", a)
        disp.register("b", b)
        await disp.close()
        assert a.closed and b.closed

    async def test_close_error_does_not_stop_others(self) -> None:
        disp = _dispatcher()
        ok = FakeChannel()
        disp.register("broken", BrokenCloseChannel())
        disp.register("ok", ok)
        await disp.close()
        assert ok.closed
