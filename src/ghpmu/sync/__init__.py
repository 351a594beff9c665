"""Batch synchronization between issues and a project board.

Only the pure building blocks are re-exported here; the operations that
talk to GitHub are imported from their own modules.
"""

from .errors import (
    FieldNotFoundError,
    FieldValueError,
    InvalidNumberError,
    ItemIdUnavailableError,
    NotInProjectError,
    OptionNotFoundError,
    SubIssueLinkError,
    SyncError,
    TriageConfigError,
    UnsupportedFieldTypeError,
)
from .field_resolver import FieldResolver
from .query_matcher import ParsedQuery, matches, parse_query, requested_state

__all__ = [
    "FieldNotFoundError",
    "FieldResolver",
    "FieldValueError",
    "InvalidNumberError",
    "ItemIdUnavailableError",
    "NotInProjectError",
    "OptionNotFoundError",
    "ParsedQuery",
    "SubIssueLinkError",
    "SyncError",
    "TriageConfigError",
    "UnsupportedFieldTypeError",
    "matches",
    "parse_query",
    "requested_state",
]
