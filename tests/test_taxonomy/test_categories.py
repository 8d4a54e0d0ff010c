"""Tests for the medical error taxonomy — categories, personas, lookups."""

from __future__ import annotations

import pytest

from medtriage.core.types import Severity, Tier
from medtriage.taxonomy.categories import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    DEFAULT_EMERGENCY_FALLBACK,
    PERSONAS,
    PRIORITY_MATRIX,
    emergency_fallback_action,
    escalation_teams_for,
    is_known_category,
    is_known_persona,
    lookup_category,
    lookup_persona,
    response_time_for,
)


class TestCategories:
    def test_eleven_categories(self) -> None:
        assert len(CATEGORIES) == 11

    def test_critical_categories_affect_patient_safety(self) -> None:
        for code in ("emergency_component", "patient_safety"):
            cat = CATEGORIES[code]
            assert cat.severity == Severity.CRITICAL
            assert cat.patient_safety_impact is True
            assert cat.immediate is True

    def test_accessibility_flags_patient_safety(self) -> None:
        assert CATEGORIES["accessibility"].patient_safety_impact is True

    def test_every_category_has_teams(self) -> None:
        for cat in CATEGORIES.values():
            assert cat.default_escalation_teams

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            CATEGORIES["new"] = DEFAULT_CATEGORY  # type: ignore[index]


class TestLookups:
    def test_lookup_known(self) -> None:
        assert lookup_category("performance").severity == Severity.LOW

    def test_lookup_unknown_falls_back(self) -> None:
        assert lookup_category("nope") is DEFAULT_CATEGORY
        assert lookup_category(None).code == "ui_component"

    def test_is_known(self) -> None:
        assert is_known_category("api_failure") is True
        assert is_known_category("nope") is False
        assert is_known_category(None) is False

    def test_persona_lookup(self) -> None:
        assert lookup_persona("caregiver").name == "Patient Caregiver"
        assert lookup_persona("robot").code == "patient"
        assert is_known_persona("emergency_user") is True
        assert is_known_persona("robot") is False
        assert len(PERSONAS) == 5

    def test_escalation_teams(self) -> None:
        assert escalation_teams_for("performance") == ("performance-team",)
        assert escalation_teams_for("nope") == ("design-system", "frontend-team")

    def test_response_times(self) -> None:
        assert response_time_for(Tier.P0) == "5 minutes"
        assert response_time_for("P2") == "2 hours"
        assert response_time_for("P9") == "24 hours"

    def test_emergency_fallback_action(self) -> None:
        assert emergency_fallback_action("emergency_component") == "Display static emergency contacts"
        assert emergency_fallback_action("navigation") == DEFAULT_EMERGENCY_FALLBACK
        assert emergency_fallback_action(None) == DEFAULT_EMERGENCY_FALLBACK


class TestPriorityMatrix:
    def test_patient_row_has_no_performance_entry(self) -> None:
        assert "performance" not in PRIORITY_MATRIX["patient"]

    def test_rows_reference_known_categories(self) -> None:
        for row in PRIORITY_MATRIX.values():
            for code in row:
                assert code in CATEGORIES
