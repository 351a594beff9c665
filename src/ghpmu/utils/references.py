"""Parsing of issue references and repository names."""

import re
from typing import NamedTuple

# https://github.com/owner/repo/issues/123 with an optional #anchor or query
ISSUE_URL_PATTERN = re.compile(
    r"^https?://github\.com/([^/\s]+)/([^/\s]+)/issues/(\d+)(?:[/?#].*)?$"
)

# owner/repo#123
QUALIFIED_PATTERN = re.compile(r"^([^/\s#]+)/([^/\s#]+)#(\d+)$")

# 123 or #123
NUMBER_PATTERN = re.compile(r"^#?(\d+)$")


class IssueRef(NamedTuple):
    """A parsed issue reference. Owner and repo are empty for bare numbers."""

    owner: str
    repo: str
    number: int

    @property
    def has_repository(self) -> bool:
        return bool(self.owner and self.repo)

    def with_default(self, repository: str) -> "IssueRef":
        """Fill in a default "owner/repo" when the reference had none."""
        if self.has_repository:
            return self
        owner, repo = split_repository(repository)
        return IssueRef(owner, repo, self.number)


def parse_issue_reference(text: str) -> IssueRef:
    """Parse an issue reference.

    Accepts "123", "#123", "owner/repo#123" and
    "https://github.com/owner/repo/issues/123[#anchor]".

    Raises:
        ValueError: If the text is not a valid reference
    """
    text = text.strip()

    match = ISSUE_URL_PATTERN.match(text)
    if match:
        return IssueRef(match.group(1), match.group(2), _positive(match.group(3), text))

    match = QUALIFIED_PATTERN.match(text)
    if match:
        return IssueRef(match.group(1), match.group(2), _positive(match.group(3), text))

    match = NUMBER_PATTERN.match(text)
    if match:
        return IssueRef("", "", _positive(match.group(1), text))

    raise ValueError(f"invalid issue reference: {text}")


def split_repository(repository: str) -> tuple[str, str]:
    """Split "owner/repo" into its parts.

    Raises:
        ValueError: If the value is not in owner/repo format
    """
    parts = repository.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError(f"invalid repository format {repository!r}: expected owner/repo")
    return parts[0], parts[1]


def _positive(value: str, text: str) -> int:
    number = int(value)
    if number <= 0:
        raise ValueError(f"invalid issue number in {text!r}")
    return number
