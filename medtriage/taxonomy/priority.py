"""PriorityResolver — (category, persona, emergency) → urgency tier."""

from __future__ import annotations

from collections.abc import Mapping

from medtriage.core.types import SEVERITY_TIERS, Tier
from medtriage.taxonomy.categories import PRIORITY_MATRIX, lookup_category


class PriorityResolver:
    """Resolves an urgency tier from the priority matrix.

    Resolution order:

    1. An emergency context is always P0.
    2. An explicit ``(persona, category)`` matrix entry.
    3. The tier implied by the category's severity.

    The resolver holds no mutable state; ``resolve`` is pure and total.
    """

    def __init__(self, matrix: Mapping[str, Mapping[str, Tier]] | None = None) -> None:
        self._matrix = PRIORITY_MATRIX if matrix is None else matrix

    def resolve(
        self,
        category_code: str | None,
        persona_code: str | None,
        emergency: bool = False,
    ) -> Tier:
        if emergency:
            return Tier.P0

        persona_row = self._matrix.get(persona_code or "")
        if persona_row is not None:
            tier = persona_row.get(category_code or "")
            if tier is not None:
                return Tier(tier)

        category = lookup_category(category_code)
        return SEVERITY_TIERS.get(category.severity, Tier.P3)


_DEFAULT_RESOLVER = PriorityResolver()


def resolve_priority(
    category_code: str | None,
    persona_code: str | None,
    emergency: bool = False,
) -> Tier:
    """Resolve a tier against the built-in priority matrix."""
    return _DEFAULT_RESOLVER.resolve(category_code, persona_code, emergency)
