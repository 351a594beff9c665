"""Project field value updates, dispatched on the field's data type."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from .errors import (
    FieldNotFoundError,
    InvalidNumberError,
    OptionNotFoundError,
    UnsupportedFieldTypeError,
)

if TYPE_CHECKING:
    from ..models import ProjectField
    from ..repositories.protocol import FieldWriter

logger = logging.getLogger(__name__)

SINGLE_SELECT = "SINGLE_SELECT"
TEXT = "TEXT"
NUMBER = "NUMBER"


class FieldValueSetter:
    """Sets project item fields by field name.

    Field definitions are fetched once per project and reused for the
    lifetime of the setter (one command invocation).
    """

    def __init__(self, backend: FieldWriter) -> None:
        self._backend = backend
        self._fields: dict[str, list[ProjectField]] = {}  # project_id -> fields

    def get_fields(self, project_id: str) -> list[ProjectField]:
        """Get (and cache) a project's field definitions."""
        if project_id not in self._fields:
            self._fields[project_id] = self._backend.get_project_fields(project_id)
        return self._fields[project_id]

    def find_field(self, project_id: str, field_name: str) -> ProjectField:
        """Find a field by exact, case-sensitive name.

        Raises:
            FieldNotFoundError: If the project has no such field
        """
        for project_field in self.get_fields(project_id):
            if project_field.name == field_name:
                return project_field
        raise FieldNotFoundError(field_name)

    def set_field(self, project_id: str, item_id: str, field_name: str, value: str) -> None:
        """Set a field value on a project item.

        Issues exactly one mutation on success and none on any error.

        Raises:
            FieldNotFoundError: No field with this name
            OptionNotFoundError: Single-select value matches no option name
            InvalidNumberError: Number field value is not a finite number
            UnsupportedFieldTypeError: Field type is not single-select, text or number
            GitHubClientError: The mutation failed
        """
        project_field = self.find_field(project_id, field_name)
        payload = _build_value(project_field, value)

        logger.debug(
            "Setting %s=%r on item %s (%s)", field_name, value, item_id, project_field.data_type
        )
        self._backend.update_item_field(project_id, item_id, project_field.id, payload)


def _build_value(project_field: ProjectField, value: str) -> dict[str, Any]:
    """Build the ProjectV2FieldValue input for a field."""
    data_type = project_field.data_type

    if data_type == SINGLE_SELECT:
        option = project_field.get_option(value)
        if option is None:
            raise OptionNotFoundError(
                project_field.name, value, [o.name for o in project_field.options]
            )
        return {"singleSelectOptionId": option.id}

    if data_type == TEXT:
        return {"text": value}

    if data_type == NUMBER:
        try:
            number = float(value)
        except ValueError as e:
            raise InvalidNumberError(project_field.name, value) from e
        if not math.isfinite(number):
            raise InvalidNumberError(project_field.name, value)
        return {"number": number}

    raise UnsupportedFieldTypeError(project_field.name, data_type)
