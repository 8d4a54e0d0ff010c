"""Per-channel sliding-window rate limiter."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable, Mapping

from medtriage.core.config import ChannelRateLimit


class SlidingWindowRateLimiter:
    """Admits at most ``limit`` events per rolling ``window_ms`` per channel.

    ``admit`` is a read-only check and ``record`` appends an admission; a
    caller using them separately must sequence them itself, and two callers
    interleaving on one channel can both pass ``admit``. ``try_acquire``
    performs check and record as one step under the lock, and ``release``
    gives back a reservation whose delivery did not go through. Channels with
    no configured limit are always admitted and never tracked.

    Timestamps are seconds from *clock* (monotonic by default).
    """

    def __init__(
        self,
        limits: Mapping[str, ChannelRateLimit] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limits: dict[str, ChannelRateLimit] = dict(limits or {})
        self._clock = clock
        self._timestamps: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    @property
    def limits(self) -> dict[str, ChannelRateLimit]:
        """Read-only copy of the configured limits."""
        return dict(self._limits)

    def set_limit(self, channel_id: str, limit: ChannelRateLimit) -> None:
        with self._lock:
            self._limits[channel_id] = limit

    def now(self) -> float:
        return self._clock()

    # ── Check / record ──────────────────────────────────────────

    def admit(self, channel_id: str, now: float | None = None) -> bool:
        """True if *channel_id* is under its limit at *now*. Records nothing."""
        with self._lock:
            return self._admit_locked(channel_id, self._resolve(now))

    def record(self, channel_id: str, now: float | None = None) -> None:
        """Record an admission at *now* and prune entries outside the window."""
        with self._lock:
            self._record_locked(channel_id, self._resolve(now))

    # ── Atomic reservation ──────────────────────────────────────

    def try_acquire(self, channel_id: str, now: float | None = None) -> bool:
        """Check and record in one step. Returns False if the channel is full."""
        stamp = self._resolve(now)
        with self._lock:
            if not self._admit_locked(channel_id, stamp):
                return False
            self._record_locked(channel_id, stamp)
            return True

    def release(self, channel_id: str, stamp: float) -> None:
        """Drop one reservation made at *stamp* (no-op if already pruned)."""
        with self._lock:
            stamps = self._timestamps.get(channel_id)
            if stamps is None:
                return
            try:
                stamps.remove(stamp)
            except ValueError:
                pass

    def count(self, channel_id: str, now: float | None = None) -> int:
        """Number of recorded admissions inside the current window."""
        with self._lock:
            return self._count_locked(channel_id, self._resolve(now))

    def reset(self, channel_id: str | None = None) -> None:
        with self._lock:
            if channel_id is None:
                self._timestamps.clear()
            else:
                self._timestamps.pop(channel_id, None)

    # ── Internals (caller holds the lock) ───────────────────────

    def _resolve(self, now: float | None) -> float:
        return self._clock() if now is None else now

    def _count_locked(self, channel_id: str, now: float) -> int:
        limit = self._limits.get(channel_id)
        stamps = self._timestamps.get(channel_id)
        if limit is None or not stamps:
            return 0
        window_start = now - limit.window_secs
        return sum(1 for t in stamps if t > window_start)

    def _admit_locked(self, channel_id: str, now: float) -> bool:
        limit = self._limits.get(channel_id)
        if limit is None:
            return True
        return self._count_locked(channel_id, now) < limit.limit

    def _record_locked(self, channel_id: str, now: float) -> None:
        limit = self._limits.get(channel_id)
        if limit is None:
            return
        stamps = self._timestamps.setdefault(channel_id, deque())
        stamps.append(now)
        window_start = now - limit.window_secs
        self._timestamps[channel_id] = deque(t for t in stamps if t > window_start)
