"""Triage query matching.

Evaluates the small subset of GitHub search syntax that triage rules use
against a single issue:

- "is:open" / "is:closed" - issue state
- "label:NAME" - issue must carry the label (every occurrence enforced)
- "-label:NAME" - issue must not carry the label (every occurrence enforced)
- 'label:"needs review"' - quoted values may contain spaces

All qualifiers are AND'd together. Anything else in the query is ignored so
richer search syntax can be pasted in without failing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.issue import Issue

# Optional leading "-", key, then key:value or key:"quoted value"
TOKEN_PATTERN = re.compile(r'(?:(?<=\s)|^)(-?)(\w+):(?:"([^"]+)"|(\S+))')

STATE_OPEN = "open"
STATE_CLOSED = "closed"
STATE_ALL = "all"


@dataclass(frozen=True)
class ParsedQuery:
    """Parsed representation of a triage query."""

    include_labels: tuple[str, ...] = field(default_factory=tuple)  # All must be present
    exclude_labels: tuple[str, ...] = field(default_factory=tuple)  # None may be present
    state: str | None = None  # "open", "closed", "all" or None when unspecified


def parse_query(query: str) -> ParsedQuery:
    """Parse a query string into its supported qualifiers.

    Args:
        query: Query like "is:open -label:tracked"

    Returns:
        ParsedQuery with the recognized qualifiers; unknown tokens are dropped
    """
    include: list[str] = []
    exclude: list[str] = []
    state: str | None = None

    for negated, key, value in _tokenize(query):
        key_lower = key.lower()
        if key_lower == "label":
            (exclude if negated else include).append(value)
        elif key_lower == "is" and not negated:
            value_lower = value.lower()
            if value_lower in (STATE_OPEN, STATE_CLOSED, STATE_ALL):
                state = value_lower

    return ParsedQuery(include_labels=tuple(include), exclude_labels=tuple(exclude), state=state)


def matches(issue: Issue, query: str) -> bool:
    """Check whether an issue satisfies every qualifier in the query.

    Label names are compared exactly (case-sensitive). "is:all" and an
    unspecified state place no constraint on the issue state.
    """
    parsed = parse_query(query)

    for label in parsed.exclude_labels:
        if issue.has_label(label):
            return False

    for label in parsed.include_labels:
        if not issue.has_label(label):
            return False

    if parsed.state == STATE_OPEN and issue.state.upper() != "OPEN":
        return False
    if parsed.state == STATE_CLOSED and issue.state.upper() != "CLOSED":
        return False

    return True


def requested_state(query: str) -> str:
    """Issue state to fetch from repositories for this query.

    Returns:
        "closed" for is:closed, "all" for is:all, otherwise "open"
    """
    state = parse_query(query).state
    return state if state in (STATE_CLOSED, STATE_ALL) else STATE_OPEN


def _tokenize(query: str) -> list[tuple[bool, str, str]]:
    """Extract (negated, key, value) triples from a query."""
    tokens: list[tuple[bool, str, str]] = []
    for match in TOKEN_PATTERN.finditer(query):
        negated = match.group(1) == "-"
        key = match.group(2)
        # Use quoted value if present, otherwise unquoted
        value = match.group(3) or match.group(4)
        tokens.append((negated, key, value))
    return tokens
