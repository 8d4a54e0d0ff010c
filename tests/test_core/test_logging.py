"""Tests for medtriage/core/logging.py — severity levels and setup."""

from __future__ import annotations

import logging

import pytest

from medtriage.core.config import reset_settings
from medtriage.core.logging import log_level_for, setup_logging
from medtriage.core.types import Severity


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    reset_settings()


class TestLogLevelFor:
    def test_severity_mapping(self) -> None:
        assert log_level_for(Severity.CRITICAL) == logging.CRITICAL
        assert log_level_for(Severity.HIGH) == logging.ERROR
        assert log_level_for(Severity.MEDIUM) == logging.WARNING
        assert log_level_for(Severity.LOW) == logging.INFO

    def test_accepts_plain_strings(self) -> None:
        assert log_level_for("low") == logging.INFO

    def test_unknown_severity_is_error(self) -> None:
        assert log_level_for("catastrophic") == logging.ERROR


class TestSetupLogging:
    def test_sets_root_level(self) -> None:
        setup_logging(level="DEBUG", fmt="console")
        assert logging.getLogger().level == logging.DEBUG

    def test_single_handler(self) -> None:
        setup_logging(level="INFO", fmt="json")
        setup_logging(level="INFO", fmt="json")
        assert len(logging.getLogger().handlers) == 1
