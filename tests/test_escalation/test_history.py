"""Tests for AlertHistory — bounded FIFO eviction."""

from __future__ import annotations

import pytest

from medtriage.core.types import Severity, Tier
from medtriage.dispatch.types import AlertPayload, ErrorSummary
from medtriage.escalation.history import AlertHistory


def _alert(n: int) -> AlertPayload:
    return AlertPayload(
        id=f"alert-{n}",
        timestamp=float(n),
        tier=Tier.P3,
        response_time="24 hours",
        category="performance",
        severity=Severity.LOW,
        error=ErrorSummary(message="slow"),
    )


class TestAlertHistory:
    def test_keeps_last_capacity_entries(self) -> None:
        history = AlertHistory(capacity=100)
        for n in range(150):
            history.append(_alert(n))
        snapshot = history.snapshot()
        assert len(snapshot) == 100
        assert [a.id for a in snapshot] == [f"alert-{n}" for n in range(50, 150)]

    def test_snapshot_is_a_copy(self) -> None:
        history = AlertHistory(capacity=3)
        history.append(_alert(1))
        snap = history.snapshot()
        snap.clear()
        assert len(history) == 1

    def test_clear(self) -> None:
        history = AlertHistory()
        history.append(_alert(1))
        history.clear()
        assert len(history) == 0
        assert history.capacity == 100

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            AlertHistory(capacity=0)
