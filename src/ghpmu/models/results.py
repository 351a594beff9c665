"""Result models for batch operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .issue import Issue, SubIssue


class TriageStatus(str, Enum):
    """Per-issue triage outcome."""

    PROCESSED = "processed"  # Changes applied
    SKIPPED = "skipped"  # Declined at the interactive prompt
    FAILED = "failed"  # Membership or a field update failed
    WOULD_PROCESS = "would-process"  # Dry run


@dataclass
class TriageOutcome:
    """What happened to one issue during triage."""

    issue: Issue
    status: TriageStatus
    error: str | None = None
    warnings: list[str] = field(default_factory=list)  # Best-effort label failures

    @property
    def key(self) -> str:
        return self.issue.key


@dataclass
class TriageResult:
    """Result of a triage run."""

    rule: str | None  # Rule name, None for ad-hoc queries
    query: str
    matched: list[Issue] = field(default_factory=list)  # Candidates selected by the query
    outcomes: list[TriageOutcome] = field(default_factory=list)
    dry_run: bool = False
    aborted: bool = False  # Operator quit at an interactive prompt

    def _count(self, status: TriageStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def processed(self) -> int:
        return self._count(TriageStatus.PROCESSED)

    @property
    def skipped(self) -> int:
        return self._count(TriageStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(TriageStatus.FAILED)

    @property
    def would_process(self) -> int:
        return self._count(TriageStatus.WOULD_PROCESS)

    @property
    def has_errors(self) -> bool:
        """Whether any issue failed."""
        return self.failed > 0

    @property
    def status(self) -> str:
        """Overall status: "no-matches", "dry-run" or "completed"."""
        if not self.matched:
            return "no-matches"
        if self.dry_run:
            return "dry-run"
        return "completed"


@dataclass
class MoveResult:
    """Result of a move (field update) operation."""

    updated: list[str] = field(default_factory=list)  # Issue keys updated
    skipped: list[str] = field(default_factory=list)  # Descendants not in the project
    errors: list[str] = field(default_factory=list)  # Per-issue failures
    warnings: list[str] = field(default_factory=list)  # Hierarchy walk warnings
    dry_run: bool = False

    @property
    def has_errors(self) -> bool:
        """Whether any errors occurred."""
        return len(self.errors) > 0


@dataclass
class IntakeResult:
    """Result of an intake run."""

    untracked: list[Issue] = field(default_factory=list)  # Open issues not in the project
    added: list[Issue] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)  # Field failures on added items
    dry_run: bool = False

    @property
    def has_errors(self) -> bool:
        """Whether any errors occurred."""
        return len(self.errors) > 0


@dataclass
class SplitResult:
    """Result of splitting a checklist into sub-issues."""

    parent: Issue
    created: list[Issue] = field(default_factory=list)  # New sub-issues, linked or not
    errors: list[str] = field(default_factory=list)  # Creation and link failures
    dry_run: bool = False
    tasks: list[str] = field(default_factory=list)  # Task titles considered

    @property
    def failed(self) -> int:
        """Tasks whose issue could not be created."""
        if self.dry_run:
            return 0
        return len(self.tasks) - len(self.created)

    @property
    def status(self) -> str:
        """Overall status: "no-tasks", "dry-run" or "completed"."""
        if not self.tasks:
            return "no-tasks"
        if self.dry_run:
            return "dry-run"
        return "completed"

    @property
    def has_errors(self) -> bool:
        """Whether any errors occurred."""
        return len(self.errors) > 0


@dataclass
class SubRemoveResult:
    """Result of unlinking one or more sub-issues."""

    removed: list[int] = field(default_factory=list)
    not_linked: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Whether any errors occurred."""
        return len(self.errors) > 0


@dataclass
class SubListResult:
    """Issues related to one issue through sub-issue links."""

    issue: Issue
    parent: Issue | None = None
    children: list[SubIssue] = field(default_factory=list)
    siblings: list[SubIssue] = field(default_factory=list)


@dataclass
class CreateResult:
    """Result of creating an issue and adding it to the project."""

    issue: Issue
    item_id: str = ""
    warnings: list[str] = field(default_factory=list)  # Field failures
