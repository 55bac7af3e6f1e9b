"""Field registry: lookup and the shared value-validity rule. No I/O."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from frontdoor_agent.config.models import FieldDefinition
from frontdoor_agent.domain.errors import UnknownFieldError

# Values the model emits when it means "nothing here"
_PLACEHOLDERS = frozenset({"null", ":null", "\u0000"})


def is_valid_field_value(value: Any) -> bool:
    """Reject None, empty or whitespace-only strings and placeholder tokens."""
    if value is None:
        return False
    if isinstance(value, str):
        v = value.strip()
        return bool(v) and v not in _PLACEHOLDERS
    return True


class FieldRegistry:
    """Immutable catalog of request fields, in display order."""

    def __init__(
        self,
        fields: Iterable[FieldDefinition],
        unknown_value: str = "not sure",
        unknown_satisfies_required: bool = True,
    ) -> None:
        self._fields: tuple[FieldDefinition, ...] = tuple(fields)
        self._by_name = {f.name: f for f in self._fields}
        self.unknown_value = unknown_value
        self.unknown_satisfies_required = unknown_satisfies_required

    @property
    def fields(self) -> tuple[FieldDefinition, ...]:
        return self._fields

    @property
    def names(self) -> list[str]:
        return [f.name for f in self._fields]

    def required_fields(self) -> list[FieldDefinition]:
        return [f for f in self._fields if f.required]

    def optional_fields(self) -> list[FieldDefinition]:
        return [f for f in self._fields if not f.required]

    def field_by_name(self, name: str) -> FieldDefinition | None:
        return self._by_name.get(name)

    def is_valid_value(self, value: Any) -> bool:
        return is_valid_field_value(value)

    def is_satisfied(self, value: Any) -> bool:
        """
        Valid value, and, when the policy says an explicit "I don't know"
        does not count, not the unknown marker either.
        """
        if not is_valid_field_value(value):
            return False
        if self.unknown_satisfies_required:
            return True
        return not (isinstance(value, str) and value.strip().lower() == self.unknown_value.lower())

    def unknown_keys(self, collected: Mapping[str, Any]) -> list[str]:
        return [k for k in collected if k not in self._by_name]

    def check_known(self, collected: Mapping[str, Any]) -> None:
        """Raise UnknownFieldError if collected has keys outside the registry."""
        unknown = self.unknown_keys(collected)
        if unknown:
            raise UnknownFieldError(unknown)
