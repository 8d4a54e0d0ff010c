"""Medical error taxonomy and priority resolution."""

from medtriage.taxonomy.categories import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    PERSONAS,
    PRIORITY_MATRIX,
    ErrorCategory,
    UserPersona,
    emergency_fallback_action,
    escalation_teams_for,
    is_known_category,
    is_known_persona,
    lookup_category,
    lookup_persona,
    response_time_for,
)
from medtriage.taxonomy.priority import PriorityResolver, resolve_priority

__all__ = [
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "PERSONAS",
    "PRIORITY_MATRIX",
    "ErrorCategory",
    "PriorityResolver",
    "UserPersona",
    "emergency_fallback_action",
    "escalation_teams_for",
    "is_known_category",
    "is_known_persona",
    "lookup_category",
    "lookup_persona",
    "resolve_priority",
    "response_time_for",
]
