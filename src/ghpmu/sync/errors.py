"""Domain errors for sync operations and host error classification."""

from __future__ import annotations

# Sub-issue link failure reasons
REASON_ALREADY_LINKED = "already-linked"
REASON_NOT_LINKED = "not-linked"
REASON_OTHER = "other"

# Substrings the host uses in sub-issue link/unlink error messages. The API
# exposes no structured code for these cases.
_ALREADY_LINKED_MARKERS = ("duplicate", "only have one parent")
_NOT_LINKED_MARKERS = ("not a sub-issue", "not found", "is not a child")

# Substrings used when adding an item that is already in the project
_ALREADY_MEMBER_MARKERS = ("already exists", "already in project", "already been added")


class SyncError(Exception):
    """Base exception for sync errors."""

    pass


class FieldValueError(SyncError):
    """A project field value could not be set."""

    pass


class FieldNotFoundError(FieldValueError):
    """The project has no field with this name."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"field not found: {field_name}")
        self.field_name = field_name


class OptionNotFoundError(FieldValueError):
    """A single-select field has no option with this name."""

    def __init__(self, field_name: str, value: str, available: list[str] | None = None) -> None:
        message = f"option '{value}' not found for field '{field_name}'"
        if available:
            message += f" (available: {', '.join(available)})"
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.available = available or []


class InvalidNumberError(FieldValueError):
    """A number field was given a value that is not a finite number."""

    def __init__(self, field_name: str, value: str) -> None:
        super().__init__(f"invalid number '{value}' for field '{field_name}'")
        self.field_name = field_name
        self.value = value


class UnsupportedFieldTypeError(FieldValueError):
    """The field's data type cannot be set from a string value."""

    def __init__(self, field_name: str, data_type: str) -> None:
        super().__init__(f"unsupported field type {data_type} for field '{field_name}'")
        self.field_name = field_name
        self.data_type = data_type


class ItemIdUnavailableError(SyncError):
    """The issue is already in the project but its item ID could not be found."""

    pass


class NotInProjectError(SyncError):
    """An issue that must already be a project item is not one."""

    pass


class TriageConfigError(SyncError):
    """A triage rule is missing or unusable."""

    pass


class SubIssueLinkError(SyncError):
    """Linking or unlinking a sub-issue failed.

    ``reason`` is one of "already-linked", "not-linked" or "other".
    """

    def __init__(self, message: str, reason: str = REASON_OTHER) -> None:
        super().__init__(message)
        self.reason = reason


def is_already_linked_error(error: BaseException) -> bool:
    """Whether a host error means the child already has a parent."""
    message = str(error).lower()
    return any(marker in message for marker in _ALREADY_LINKED_MARKERS)


def is_not_linked_error(error: BaseException) -> bool:
    """Whether a host error means the child is not a sub-issue of that parent."""
    message = str(error).lower()
    return any(marker in message for marker in _NOT_LINKED_MARKERS)


def is_already_member_error(error: BaseException) -> bool:
    """Whether a host error means the issue is already a project item."""
    message = str(error).lower()
    return any(marker in message for marker in _ALREADY_MEMBER_MARKERS)
