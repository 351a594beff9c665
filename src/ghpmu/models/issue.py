"""Issue and project data models."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

# Issue states as reported by the GraphQL API
STATE_OPEN = "OPEN"
STATE_CLOSED = "CLOSED"


def issue_key(owner: str, repo: str, number: int) -> str:
    """Canonical "owner/repo#number" key used to index project items."""
    return f"{owner}/{repo}#{number}"


class Repository(BaseModel):
    """Repository coordinates."""

    owner: str = ""
    name: str = ""

    @property
    def full_name(self) -> str:
        """Repository in "owner/repo" format (empty if unknown)."""
        if not self.owner or not self.name:
            return ""
        return f"{self.owner}/{self.name}"

    @property
    def is_empty(self) -> bool:
        return not self.owner and not self.name


class Label(BaseModel):
    """Issue label."""

    name: str
    color: str = ""


class Actor(BaseModel):
    """User account (author or assignee)."""

    login: str


class Milestone(BaseModel):
    """Issue milestone."""

    title: str


class Issue(BaseModel):
    """A GitHub issue."""

    id: str = ""  # GraphQL node ID
    number: int
    title: str = ""
    body: str = ""
    state: str = STATE_OPEN  # OPEN or CLOSED
    url: str = ""
    repository: Repository = Field(default_factory=Repository)
    author: Actor | None = None
    assignees: list[Actor] = Field(default_factory=list)
    labels: list[Label] = Field(default_factory=list)
    milestone: Milestone | None = None

    @property
    def key(self) -> str:
        """Issue key in "owner/repo#number" format."""
        return issue_key(self.repository.owner, self.repository.name, self.number)

    @property
    def label_names(self) -> list[str]:
        return [label.name for label in self.labels]

    @property
    def assignee_logins(self) -> list[str]:
        return [assignee.login for assignee in self.assignees]

    def has_label(self, name: str) -> bool:
        """Whether the issue carries a label with exactly this name (case-sensitive)."""
        return any(label.name == name for label in self.labels)


class FieldValue(BaseModel):
    """A project field value on an item, rendered as a string."""

    field: str
    value: str


class ProjectItem(BaseModel):
    """A project item. Only items whose content is an Issue carry ``issue``."""

    id: str  # Project item node ID
    content_type: str = "Issue"  # Issue, PullRequest or DraftIssue
    issue: Issue | None = None
    field_values: list[FieldValue] = Field(default_factory=list)

    def get_field_value(self, field_name: str) -> str | None:
        """Get a field value by field name (case-insensitive)."""
        wanted = field_name.lower()
        for field_value in self.field_values:
            if field_value.field.lower() == wanted:
                return field_value.value
        return None


class FieldOption(BaseModel):
    """Single-select field option."""

    id: str
    name: str


class ProjectField(BaseModel):
    """Project field definition."""

    id: str
    name: str
    data_type: str  # SINGLE_SELECT, TEXT, NUMBER, DATE, ITERATION, ...
    options: list[FieldOption] = Field(default_factory=list)

    def get_option(self, name: str) -> FieldOption | None:
        """Find an option by exact display name."""
        for option in self.options:
            if option.name == name:
                return option
        return None


class Project(BaseModel):
    """A GitHub Projects (v2) board."""

    id: str
    number: int
    title: str = ""
    url: str = ""
    closed: bool = False
    owner_login: str = ""
    owner_type: str = "User"  # User or Organization


class SubIssue(BaseModel):
    """A sub-issue as reported in its parent's sub-issue list."""

    id: str = ""
    number: int
    title: str = ""
    state: str = STATE_OPEN
    url: str = ""
    repository: Repository = Field(default_factory=Repository)  # may be empty
    parent_id: str = ""


class Comment(BaseModel):
    """Issue comment."""

    author: str = ""
    body: str = ""
    created_at: str = ""


@dataclass
class HierarchyNode:
    """An issue found while walking a sub-issue tree."""

    owner: str
    repo: str
    number: int
    title: str
    state: str
    item_id: str  # Empty if the issue is not in the project
    depth: int  # 1 for direct children of the root

    @property
    def key(self) -> str:
        return issue_key(self.owner, self.repo, self.number)

    @property
    def in_project(self) -> bool:
        return bool(self.item_id)


@dataclass
class ItemsPage:
    """One page of project items plus its pagination state."""

    items: list[ProjectItem]
    has_next_page: bool = False
    end_cursor: str | None = None
