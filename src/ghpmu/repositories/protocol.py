"""Capability protocols for the GitHub backend.

Each sync component depends only on the narrow capabilities it uses, so
tests can fake exactly those methods. GitHubProjectsRepository implements
all of them.
"""

from __future__ import annotations

from typing import Any, Protocol

from ..models import Comment, Issue, ItemsPage, Project, ProjectField, SubIssue


class ProjectReader(Protocol):
    """Can look up a project and its field definitions."""

    def get_project(self, owner: str, number: int) -> Project:
        """Get a project by owner login and number.

        Raises:
            GitHubClientError: If the project cannot be fetched
        """
        ...

    def get_project_fields(self, project_id: str) -> list[ProjectField]:
        """Get every field definition of a project, in project order."""
        ...


class ProjectItemsReader(Protocol):
    """Can page through a project's items."""

    def get_project_items_page(
        self, project_id: str, cursor: str | None = None, first: int = 100
    ) -> ItemsPage:
        """Fetch one page of items starting after ``cursor``."""
        ...


class IssueReader(Protocol):
    """Can read issues from repositories."""

    def get_issue(self, owner: str, repo: str, number: int) -> Issue:
        """Get a single issue.

        Raises:
            GitHubNotFoundError: If the issue does not exist
        """
        ...

    def get_repository_issues(self, owner: str, repo: str, state: str = "open") -> list[Issue]:
        """Get all issues of a repository in a state ("open", "closed" or "all")."""
        ...


class SubIssueReader(Protocol):
    """Can read sub-issue links."""

    def get_sub_issues(self, owner: str, repo: str, number: int) -> list[SubIssue]:
        """Get the direct sub-issues of an issue, in host order."""
        ...

    def get_parent_issue(self, owner: str, repo: str, number: int) -> Issue | None:
        """Get the parent of an issue, or None when it has none."""
        ...


class MembershipWriter(Protocol):
    """Can add issues to a project and find their items."""

    def add_item_to_project(self, project_id: str, issue_id: str) -> str:
        """Add an issue to a project and return the item ID."""
        ...

    def find_project_item_id(self, project_id: str, issue_id: str) -> str | None:
        """Find an issue's existing item ID in a project."""
        ...


class FieldWriter(ProjectReader, Protocol):
    """Can read field definitions and write a field value."""

    def update_item_field(
        self, project_id: str, item_id: str, field_id: str, value: dict[str, Any]
    ) -> None:
        """Set one field value on a project item.

        ``value`` is a ProjectV2FieldValue input, e.g. {"singleSelectOptionId": "..."}.
        """
        ...


class LabelWriter(Protocol):
    """Can add labels to issues."""

    def add_label(self, issue: Issue, label: str) -> None:
        """Add an existing repository label to an issue."""
        ...


class IssueWriter(Protocol):
    """Can create issues."""

    def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str = "",
        labels: list[str] | None = None,
        assignees: list[str] | None = None,
        milestone: str | None = None,
    ) -> Issue:
        """Create an issue and return it."""
        ...


class SubIssueWriter(Protocol):
    """Can link and unlink sub-issues."""

    def add_sub_issue(self, parent_id: str, child_id: str) -> None: ...

    def remove_sub_issue(self, parent_id: str, child_id: str) -> None: ...


class CommentReader(Protocol):
    def get_issue_comments(self, owner: str, repo: str, number: int) -> list[Comment]: ...


class TriageBackend(IssueReader, MembershipWriter, FieldWriter, LabelWriter, Protocol):
    """Everything a triage run needs."""

    pass


class MoveBackend(FieldWriter, IssueReader, ProjectItemsReader, SubIssueReader, Protocol):
    """Everything a move needs."""

    pass


class IntakeBackend(IssueReader, MembershipWriter, FieldWriter, ProjectItemsReader, Protocol):
    """Everything an intake run needs."""

    pass


class SubIssueBackend(IssueReader, IssueWriter, SubIssueReader, SubIssueWriter, Protocol):
    """Everything sub-issue management and split need."""

    pass


class ProjectMembershipBackend(ProjectReader, MembershipWriter, Protocol):
    """Can find the configured project and add issues to it."""

    pass


class CreateBackend(IssueWriter, MembershipWriter, FieldWriter, Protocol):
    """Everything issue creation needs."""

    pass
