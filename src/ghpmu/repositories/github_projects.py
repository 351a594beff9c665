"""GitHub Issues and Projects backend."""

from __future__ import annotations

import logging
import math
from typing import Any

from ..github import GitHubClient, GitHubClientError, GitHubNotFoundError
from ..github.queries import (
    ADD_ITEM_TO_PROJECT,
    ADD_LABELS,
    ADD_SUB_ISSUE,
    CREATE_ISSUE,
    GET_ISSUE,
    GET_ISSUE_COMMENTS,
    GET_ISSUE_PROJECT_ITEMS,
    GET_ORG_PROJECT,
    GET_PARENT_ISSUE,
    GET_PROJECT_FIELDS,
    GET_PROJECT_ITEMS,
    GET_REPOSITORY,
    GET_REPOSITORY_ISSUES,
    GET_REPOSITORY_LABELS,
    GET_REPOSITORY_MILESTONES,
    GET_SUB_ISSUES,
    GET_USER,
    GET_USER_PROJECT,
    REMOVE_SUB_ISSUE,
    UPDATE_ITEM_FIELD,
)
from ..models import (
    Comment,
    FieldValue,
    Issue,
    ItemsPage,
    Project,
    ProjectField,
    ProjectItem,
    Repository,
    SubIssue,
)

logger = logging.getLogger(__name__)

# GraphQL IssueState values per requested state
_STATES = {
    "open": ["OPEN"],
    "closed": ["CLOSED"],
    "all": ["OPEN", "CLOSED"],
}

ISSUES_PAGE_SIZE = 100


class GitHubProjectsRepository:
    """Reads and writes issues, project items and sub-issue links.

    Implements every capability protocol in ``repositories.protocol`` on top
    of a GitHubClient. Responses are mapped to the pydantic models; GraphQL
    shapes never leak past this class.
    """

    def __init__(self, client: GitHubClient) -> None:
        """Initialize the repository.

        Args:
            client: Authenticated GitHub GraphQL client
        """
        self._client = client

        # Repository labels cache (repo -> {label_name: label_id})
        self._repo_labels: dict[str, dict[str, str]] = {}
        # Repository node IDs (repo -> id)
        self._repo_ids: dict[str, str] = {}

    # --- Projects ---

    def get_project(self, owner: str, number: int) -> Project:
        """Get a project, trying a user owner first and then an organization."""
        try:
            result = self._client.query(GET_USER_PROJECT, {"owner": owner, "number": number})
            project_data = (result.get("user") or {}).get("projectV2")
            if project_data:
                return _map_project(project_data, owner, "User")
        except GitHubClientError as e:
            logger.debug("User project lookup failed for %s: %s", owner, e)

        try:
            result = self._client.query(GET_ORG_PROJECT, {"owner": owner, "number": number})
        except GitHubClientError as e:
            raise GitHubNotFoundError(f"Project not found: {owner}/projects/{number} ({e})") from e
        project_data = (result.get("organization") or {}).get("projectV2")
        if not project_data:
            raise GitHubNotFoundError(f"Project not found: {owner}/projects/{number}")
        return _map_project(project_data, owner, "Organization")

    def get_project_fields(self, project_id: str) -> list[ProjectField]:
        """Get all field definitions of a project."""
        result = self._client.query(GET_PROJECT_FIELDS, {"projectId": project_id})
        nodes = (result.get("node") or {}).get("fields", {}).get("nodes", [])

        fields: list[ProjectField] = []
        for node in nodes:
            if not node or not node.get("id"):
                continue
            fields.append(
                ProjectField(
                    id=node["id"],
                    name=node.get("name", ""),
                    data_type=node.get("dataType", ""),
                    options=node.get("options") or [],
                )
            )
        logger.debug("Project %s has %d fields", project_id, len(fields))
        return fields

    def get_project_items_page(
        self, project_id: str, cursor: str | None = None, first: int = 100
    ) -> ItemsPage:
        """Fetch one page of project items."""
        result = self._client.query(
            GET_PROJECT_ITEMS,
            {"projectId": project_id, "first": first, "cursor": cursor},
        )
        items_data = (result.get("node") or {}).get("items", {})
        page_info = items_data.get("pageInfo", {})
        items = [_map_item(node) for node in items_data.get("nodes", []) if node]
        return ItemsPage(
            items=items,
            has_next_page=bool(page_info.get("hasNextPage")),
            end_cursor=page_info.get("endCursor"),
        )

    def add_item_to_project(self, project_id: str, issue_id: str) -> str:
        """Add an issue to a project, returning the (possibly existing) item ID."""
        result = self._client.mutate(
            ADD_ITEM_TO_PROJECT,
            {"projectId": project_id, "contentId": issue_id},
        )
        item = (result.get("addProjectV2ItemById") or {}).get("item") or {}
        item_id = item.get("id", "")
        logger.debug("Added %s to project %s as item %s", issue_id, project_id, item_id)
        return item_id

    def find_project_item_id(self, project_id: str, issue_id: str) -> str | None:
        """Find the item ID an issue already has in a project."""
        result = self._client.query(GET_ISSUE_PROJECT_ITEMS, {"issueId": issue_id})
        nodes = (result.get("node") or {}).get("projectItems", {}).get("nodes", [])
        for node in nodes:
            if (node.get("project") or {}).get("id") == project_id:
                return node.get("id")
        return None

    def update_item_field(
        self, project_id: str, item_id: str, field_id: str, value: dict[str, Any]
    ) -> None:
        """Set a single field value on a project item."""
        self._client.mutate(
            UPDATE_ITEM_FIELD,
            {
                "projectId": project_id,
                "itemId": item_id,
                "fieldId": field_id,
                "value": value,
            },
        )

    # --- Issues ---

    def get_issue(self, owner: str, repo: str, number: int) -> Issue:
        """Get one issue by number."""
        result = self._client.query(GET_ISSUE, {"owner": owner, "name": repo, "number": number})
        issue_data = (result.get("repository") or {}).get("issue")
        if not issue_data:
            raise GitHubNotFoundError(f"Issue not found: {owner}/{repo}#{number}")
        return _map_issue(issue_data, Repository(owner=owner, name=repo))

    def get_repository_issues(self, owner: str, repo: str, state: str = "open") -> list[Issue]:
        """Get every issue in a repository with the given state."""
        states = _STATES.get(state.lower(), _STATES["open"])
        repository = Repository(owner=owner, name=repo)

        issues: list[Issue] = []
        cursor = None
        while True:
            result = self._client.query(
                GET_REPOSITORY_ISSUES,
                {
                    "owner": owner,
                    "name": repo,
                    "states": states,
                    "first": ISSUES_PAGE_SIZE,
                    "cursor": cursor,
                },
            )
            issues_data = (result.get("repository") or {}).get("issues", {})
            for node in issues_data.get("nodes", []):
                if node:
                    issues.append(_map_issue(node, repository))

            page_info = issues_data.get("pageInfo", {})
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor:
                break

        logger.debug("Fetched %d %s issues from %s/%s", len(issues), state, owner, repo)
        return issues

    def get_issue_comments(self, owner: str, repo: str, number: int) -> list[Comment]:
        result = self._client.query(
            GET_ISSUE_COMMENTS, {"owner": owner, "name": repo, "number": number}
        )
        issue_data = (result.get("repository") or {}).get("issue") or {}
        return [
            Comment(
                author=(node.get("author") or {}).get("login", ""),
                body=node.get("body", ""),
                created_at=node.get("createdAt", ""),
            )
            for node in issue_data.get("comments", {}).get("nodes", [])
        ]

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
        """Create an issue.

        Unknown labels, assignees and milestones are skipped with a warning
        rather than failing the creation.
        """
        repository = f"{owner}/{repo}"
        issue_input: dict[str, Any] = {
            "repositoryId": self._get_repository_id(owner, repo),
            "title": title,
            "body": body,
        }

        if labels:
            label_map = self._fetch_repo_labels(repository)
            label_ids = []
            for label in labels:
                if label in label_map:
                    label_ids.append(label_map[label])
                else:
                    logger.warning("Label '%s' not found in %s", label, repository)
            if label_ids:
                issue_input["labelIds"] = label_ids

        if assignees:
            assignee_ids = [uid for uid in (self._get_user_id(a) for a in assignees) if uid]
            if assignee_ids:
                issue_input["assigneeIds"] = assignee_ids

        if milestone:
            milestone_id = self._get_milestone_id(owner, repo, milestone)
            if milestone_id:
                issue_input["milestoneId"] = milestone_id
            else:
                logger.warning("Milestone '%s' not found in %s", milestone, repository)

        logger.debug("Creating issue in %s: %s", repository, title)
        result = self._client.mutate(CREATE_ISSUE, {"input": issue_input})
        issue_data = (result.get("createIssue") or {}).get("issue")
        if not issue_data:
            raise GitHubClientError(f"Failed to create issue in {repository}")

        issue = _map_issue(issue_data, Repository(owner=owner, name=repo))
        logger.info("Created GitHub issue: %s", issue.key)
        return issue

    def add_label(self, issue: Issue, label: str) -> None:
        """Add an existing repository label to an issue.

        Raises:
            GitHubNotFoundError: If the repository has no such label
        """
        repository = issue.repository.full_name
        label_id = self._fetch_repo_labels(repository).get(label)
        if not label_id:
            raise GitHubNotFoundError(f"Label '{label}' not found in {repository}")
        self._client.mutate(ADD_LABELS, {"labelableId": issue.id, "labelIds": [label_id]})
        logger.debug("Added label '%s' to %s", label, issue.key)

    # --- Sub-issues ---

    def get_sub_issues(self, owner: str, repo: str, number: int) -> list[SubIssue]:
        """Get the direct sub-issues of an issue."""
        result = self._client.query(
            GET_SUB_ISSUES, {"owner": owner, "name": repo, "number": number}
        )
        issue_data = (result.get("repository") or {}).get("issue")
        if not issue_data:
            raise GitHubNotFoundError(f"Issue not found: {owner}/{repo}#{number}")

        parent_id = issue_data.get("id", "")
        return [
            SubIssue(
                id=node.get("id", ""),
                number=node["number"],
                title=node.get("title", ""),
                state=node.get("state", "OPEN"),
                url=node.get("url", ""),
                repository=_map_repository(node.get("repository")),
                parent_id=parent_id,
            )
            for node in issue_data.get("subIssues", {}).get("nodes", [])
            if node
        ]

    def get_parent_issue(self, owner: str, repo: str, number: int) -> Issue | None:
        """Get the parent issue, or None if the issue has no parent."""
        result = self._client.query(
            GET_PARENT_ISSUE, {"owner": owner, "name": repo, "number": number}
        )
        issue_data = (result.get("repository") or {}).get("issue")
        if not issue_data:
            raise GitHubNotFoundError(f"Issue not found: {owner}/{repo}#{number}")
        parent = issue_data.get("parent")
        if not parent:
            return None
        return _map_issue(parent, Repository(owner=owner, name=repo))

    def add_sub_issue(self, parent_id: str, child_id: str) -> None:
        self._client.mutate(ADD_SUB_ISSUE, {"issueId": parent_id, "subIssueId": child_id})

    def remove_sub_issue(self, parent_id: str, child_id: str) -> None:
        self._client.mutate(REMOVE_SUB_ISSUE, {"issueId": parent_id, "subIssueId": child_id})

    # --- Lookups ---

    def _get_repository_id(self, owner: str, repo: str) -> str:
        repository = f"{owner}/{repo}"
        if repository not in self._repo_ids:
            result = self._client.query(GET_REPOSITORY, {"owner": owner, "name": repo})
            repo_data = result.get("repository")
            if not repo_data:
                raise GitHubNotFoundError(f"Repository not found: {repository}")
            self._repo_ids[repository] = repo_data["id"]
        return self._repo_ids[repository]

    def _fetch_repo_labels(self, repository: str) -> dict[str, str]:
        """Fetch labels for a repository, caching the result.

        Args:
            repository: Repository in "owner/repo" format

        Returns:
            Dict mapping label name to label node ID
        """
        if repository in self._repo_labels:
            return self._repo_labels[repository]

        owner, name = repository.split("/")
        result = self._client.query(GET_REPOSITORY_LABELS, {"owner": owner, "name": name})
        labels_data = (result.get("repository") or {}).get("labels", {}).get("nodes", [])
        label_map = {label["name"]: label["id"] for label in labels_data}
        self._repo_labels[repository] = label_map
        logger.debug("Fetched %d labels from %s", len(label_map), repository)
        return label_map

    def _get_user_id(self, login: str) -> str | None:
        try:
            result = self._client.query(GET_USER, {"login": login})
        except GitHubClientError as e:
            logger.warning("Assignee '%s' not found: %s", login, e)
            return None
        return (result.get("user") or {}).get("id")

    def _get_milestone_id(self, owner: str, repo: str, milestone: str) -> str | None:
        """Find an open milestone by number or title."""
        result = self._client.query(GET_REPOSITORY_MILESTONES, {"owner": owner, "name": repo})
        nodes = (result.get("repository") or {}).get("milestones", {}).get("nodes", [])
        for node in nodes:
            if str(node.get("number")) == milestone or node.get("title") == milestone:
                return node.get("id")
        return None


def _map_repository(data: dict[str, Any] | None) -> Repository:
    """Map a {name, owner{login}} node; missing data yields an empty Repository."""
    if not data:
        return Repository()
    return Repository(owner=(data.get("owner") or {}).get("login", ""), name=data.get("name", ""))


def _map_project(data: dict[str, Any], owner: str, owner_type: str) -> Project:
    return Project(
        id=data["id"],
        number=data.get("number", 0),
        title=data.get("title", ""),
        url=data.get("url", ""),
        closed=bool(data.get("closed")),
        owner_login=owner,
        owner_type=owner_type,
    )


def _map_issue(data: dict[str, Any], default_repository: Repository | None = None) -> Issue:
    """Map an Issue node, falling back to the queried repository when absent."""
    repository = _map_repository(data.get("repository"))
    if repository.is_empty and default_repository is not None:
        repository = default_repository

    author = data.get("author")
    milestone = data.get("milestone")
    return Issue(
        id=data.get("id", ""),
        number=data["number"],
        title=data.get("title", ""),
        body=data.get("body") or "",
        state=data.get("state", "OPEN"),
        url=data.get("url", ""),
        repository=repository,
        author={"login": author["login"]} if author else None,
        assignees=(data.get("assignees") or {}).get("nodes", []),
        labels=(data.get("labels") or {}).get("nodes", []),
        milestone={"title": milestone["title"]} if milestone else None,
    )


def _map_item(data: dict[str, Any]) -> ProjectItem:
    """Map a project item node; non-issue content yields an item without an issue."""
    content = data.get("content") or {}
    content_type = content.get("__typename", "")
    issue = _map_issue(content) if content_type == "Issue" and "number" in content else None

    field_values: list[FieldValue] = []
    for node in (data.get("fieldValues") or {}).get("nodes", []):
        if not node:
            continue
        field_name = (node.get("field") or {}).get("name")
        value = _field_value_text(node)
        if field_name and value is not None:
            field_values.append(FieldValue(field=field_name, value=value))

    return ProjectItem(
        id=data["id"],
        content_type=content_type,
        issue=issue,
        field_values=field_values,
    )


def _field_value_text(node: dict[str, Any]) -> str | None:
    """Render a field value node as text (single-select name, text or number)."""
    if node.get("name") is not None:
        return node["name"]
    if node.get("text") is not None:
        return node["text"]
    number = node.get("number")
    if number is not None:
        if isinstance(number, float) and math.isfinite(number) and number.is_integer():
            return str(int(number))
        return str(number)
    return None
