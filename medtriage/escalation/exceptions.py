"""Escalation exceptions."""

from __future__ import annotations


class EscalationError(Exception):
    """Base exception for escalation errors."""


class InvalidTransitionError(EscalationError):
    """An alert lifecycle was asked to move backwards or skip ahead."""
