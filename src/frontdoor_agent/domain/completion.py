"""Completion checker: pure functions over collected fields and the field registry."""

from __future__ import annotations

from typing import Mapping

from frontdoor_agent.domain.fields import FieldRegistry


def missing_required_fields(collected: Mapping[str, str], registry: FieldRegistry) -> list[str]:
    """Required field names, in registry order, whose value does not satisfy the registry."""
    return [
        f.name
        for f in registry.required_fields()
        if not registry.is_satisfied(collected.get(f.name))
    ]


def missing_fields(collected: Mapping[str, str], registry: FieldRegistry) -> list[str]:
    """All field names (required and optional) still without a valid value."""
    return [f.name for f in registry.fields if not registry.is_satisfied(collected.get(f.name))]


def is_complete(collected: Mapping[str, str], registry: FieldRegistry) -> bool:
    return not missing_required_fields(collected, registry)


def completion_percentage(collected: Mapping[str, str], registry: FieldRegistry) -> int:
    """round(100 * satisfied / total) over every field, rounding halves up."""
    total = len(registry.fields)
    if total == 0:
        return 100
    satisfied = sum(1 for f in registry.fields if registry.is_satisfied(collected.get(f.name)))
    # integer half-up: floor(100*s/t + 1/2)
    return (200 * satisfied + total) // (2 * total)
