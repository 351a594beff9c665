"""Field alias resolution.

Configuration maps short, user-facing keys and aliases onto the names the
project actually uses:

    fields:
      priority:
        field: Priority
        values:
          p1: "P1"

Resolution is best-effort: anything not configured passes through verbatim.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.config import FieldAlias


class FieldResolver:
    """Translates field keys and value aliases using configured mappings."""

    def __init__(self, fields: Mapping[str, FieldAlias] | None = None) -> None:
        self._fields = fields or {}

    def resolve_value(self, field_key: str, alias: str) -> str:
        """Map a value alias to the project's option value.

        Args:
            field_key: Configured field key (e.g., "priority")
            alias: Value as typed by the user (e.g., "p1")

        Returns:
            The configured value, or ``alias`` unchanged when either the key
            or the alias is not configured
        """
        mapping = self._fields.get(field_key)
        if mapping is None:
            return alias
        return mapping.values.get(alias, alias)

    def resolve_field_name(self, field_key: str, default: str | None = None) -> str:
        """Map a field key to the project's field name.

        Returns ``default`` (or ``field_key`` when no default is given) when
        the key is unmapped or mapped to an empty name.
        """
        mapping = self._fields.get(field_key)
        if mapping is None or not mapping.field:
            return default or field_key
        return mapping.field

    def resolve(
        self, field_key: str, alias: str, default_name: str | None = None
    ) -> tuple[str, str]:
        """Resolve both the field name and the value in one call."""
        return (
            self.resolve_field_name(field_key, default_name),
            self.resolve_value(field_key, alias),
        )
