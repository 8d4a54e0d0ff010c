"""Tests for SlidingWindowRateLimiter — window math, bursts, atomic reservation."""

from __future__ import annotations

import threading

from medtriage.core.config import ChannelRateLimit
from medtriage.dispatch.rate_limiter import SlidingWindowRateLimiter


# ── Helpers ─────────────────────────────────────────────────────


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _limiter(limit: int = 3, window_ms: int = 1000, clock: FakeClock | None = None) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(
        {"email": ChannelRateLimit(limit=limit, window_ms=window_ms)},
        clock=clock or FakeClock(),
    )


# ── Admission ───────────────────────────────────────────────────


class TestAdmit:
    def test_admit_does_not_record(self) -> None:
        rl = _limiter(limit=1)
        assert rl.admit("email") is True
        assert rl.admit("email") is True
        assert rl.count("email") == 0

    def test_record_then_full(self) -> None:
        rl = _limiter(limit=2)
        rl.record("email")
        rl.record("email")
        assert rl.admit("email") is False

    def test_unconfigured_channel_always_admitted(self) -> None:
        rl = _limiter(limit=1)
        for _ in range(50):
            assert rl.try_acquire("pager") is True
        assert rl.count("pager") == 0

    def test_burst_with_admit_then_record(self) -> None:
        rl = _limiter(limit=4)
        admitted = 0
        for _ in range(4 + 3):
            if rl.admit("email"):
                rl.record("email")
                admitted += 1
        assert admitted == 4

    def test_burst_admits_exactly_limit(self) -> None:
        rl = _limiter(limit=5)
        admitted = sum(1 for _ in range(8) if rl.try_acquire("email"))
        assert admitted == 5


# ── Window ──────────────────────────────────────────────────────


class TestWindow:
    def test_window_slides(self) -> None:
        clock = FakeClock(1000.0)
        rl = _limiter(limit=2, window_ms=1000, clock=clock)
        assert rl.try_acquire("email")
        clock.now = 1000.5
        assert rl.try_acquire("email")
        assert not rl.try_acquire("email")

        clock.now = 1000.9
        assert not rl.try_acquire("email")
        # First stamp is outside the window once a full second has passed.
        clock.now = 1001.0
        assert rl.try_acquire("email")

    def test_pruning_bounds_storage(self) -> None:
        clock = FakeClock(0.0)
        rl = _limiter(limit=100, window_ms=1000, clock=clock)
        for i in range(500):
            clock.now = i * 0.1
            rl.record("email")
        assert rl.count("email") <= 11
        assert len(rl._timestamps["email"]) <= 12

    def test_explicit_now(self) -> None:
        rl = _limiter(limit=1, window_ms=1000)
        assert rl.try_acquire("email", now=5.0)
        assert not rl.admit("email", now=5.5)
        assert rl.admit("email", now=6.5)


# ── Reservation ─────────────────────────────────────────────────


class TestReservation:
    def test_release_frees_slot(self) -> None:
        clock = FakeClock(10.0)
        rl = _limiter(limit=1, clock=clock)
        assert rl.try_acquire("email")
        assert not rl.try_acquire("email")
        rl.release("email", 10.0)
        assert rl.try_acquire("email")

    def test_release_unknown_is_noop(self) -> None:
        rl = _limiter()
        rl.release("email", 1.0)
        rl.release("nothing", 1.0)
        assert rl.count("email") == 0

    def test_concurrent_acquire_never_over_admits(self) -> None:
        rl = _limiter(limit=10, window_ms=60_000)
        results: list[bool] = []
        lock = threading.Lock()

        def worker() -> None:
            for _ in range(20):
                ok = rl.try_acquire("email")
                with lock:
                    results.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sum(results) == 10


class TestConfig:
    def test_set_limit_and_reset(self) -> None:
        rl = _limiter(limit=1)
        rl.try_acquire("email")
        rl.set_limit("email", ChannelRateLimit(limit=2, window_ms=1000))
        assert rl.try_acquire("email")
        rl.reset("email")
        assert rl.count("email") == 0
        assert rl.limits["email"].limit == 2

    def test_limits_is_a_copy(self) -> None:
        rl = _limiter()
        rl.limits.clear()
        assert "email" in rl.limits
