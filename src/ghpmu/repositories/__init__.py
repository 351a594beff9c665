"""Repository layer for GitHub data access."""

from .github_projects import GitHubProjectsRepository
from .protocol import (
    CommentReader,
    CreateBackend,
    FieldWriter,
    IntakeBackend,
    IssueReader,
    IssueWriter,
    LabelWriter,
    MembershipWriter,
    MoveBackend,
    ProjectItemsReader,
    ProjectMembershipBackend,
    ProjectReader,
    SubIssueBackend,
    SubIssueReader,
    SubIssueWriter,
    TriageBackend,
)

__all__ = [
    "CommentReader",
    "CreateBackend",
    "FieldWriter",
    "GitHubProjectsRepository",
    "IntakeBackend",
    "IssueReader",
    "IssueWriter",
    "LabelWriter",
    "MembershipWriter",
    "MoveBackend",
    "ProjectItemsReader",
    "ProjectMembershipBackend",
    "ProjectReader",
    "SubIssueBackend",
    "SubIssueReader",
    "SubIssueWriter",
    "TriageBackend",
]
