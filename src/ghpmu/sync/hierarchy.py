"""Sub-issue hierarchy traversal.

Walks parent -> child sub-issue links depth-first. Children may live in a
different repository than their parent; a child reported without
repository information is assumed to share its parent's repository.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..github import GitHubClientError
from ..models import HierarchyNode, SubListResult, issue_key

if TYPE_CHECKING:
    from ..models import ProjectItem, SubIssue
    from ..repositories.protocol import IssueReader, SubIssueReader

logger = logging.getLogger(__name__)

RELATIONS = ("children", "parent", "siblings", "all")
STATES = ("open", "closed", "all")


def build_item_index(items: list[ProjectItem]) -> dict[str, str]:
    """Map "owner/repo#number" to project item ID for every issue item."""
    index: dict[str, str] = {}
    for item in items:
        if item.issue is not None:
            index[item.issue.key] = item.id
    return index


def filter_by_state(sub_issues: list[SubIssue], state: str) -> list[SubIssue]:
    """Keep sub-issues in the given state ("open", "closed" or "all")."""
    if state == "all":
        return list(sub_issues)
    wanted = state.upper()
    return [sub for sub in sub_issues if sub.state.upper() == wanted]


class HierarchyWalker:
    """Collects the descendants of an issue.

    Failures fetching a child's own sub-issues are recorded in ``warnings``
    and the walk continues with its siblings. An issue reached twice is
    emitted once.
    """

    def __init__(self, backend: SubIssueReader) -> None:
        self._backend = backend
        self.warnings: list[str] = []
        self._visited: set[str] = set()

    def collect(
        self,
        owner: str,
        repo: str,
        number: int,
        item_index: dict[str, str],
        current_depth: int,
        max_depth: int,
    ) -> list[HierarchyNode]:
        """Collect descendants in pre-order, up to ``max_depth``.

        Args:
            owner: Root issue repository owner
            repo: Root issue repository name
            number: Root issue number
            item_index: "owner/repo#number" -> project item ID (see build_item_index)
            current_depth: Depth assigned to the root's children (usually 1)
            max_depth: Deepest level to include

        Returns:
            Nodes ordered parent-before-children, siblings in host order.
            Empty when ``current_depth > max_depth``.

        Raises:
            GitHubClientError: If the root's own sub-issues cannot be fetched
        """
        if current_depth > max_depth:
            return []

        self._visited.add(issue_key(owner, repo, number))
        return self._collect_children(owner, repo, number, item_index, current_depth, max_depth)

    def _collect_children(
        self,
        owner: str,
        repo: str,
        number: int,
        item_index: dict[str, str],
        current_depth: int,
        max_depth: int,
    ) -> list[HierarchyNode]:
        sub_issues = self._backend.get_sub_issues(owner, repo, number)

        nodes: list[HierarchyNode] = []
        for sub in sub_issues:
            sub_owner = sub.repository.owner or owner
            sub_repo = sub.repository.name or repo
            key = issue_key(sub_owner, sub_repo, sub.number)

            if key in self._visited:
                self._warn(f"{key} already visited, skipping")
                continue
            self._visited.add(key)

            nodes.append(
                HierarchyNode(
                    owner=sub_owner,
                    repo=sub_repo,
                    number=sub.number,
                    title=sub.title,
                    state=sub.state,
                    item_id=item_index.get(key, ""),
                    depth=current_depth,
                )
            )

            if current_depth + 1 > max_depth:
                continue
            try:
                nodes.extend(
                    self._collect_children(
                        sub_owner, sub_repo, sub.number, item_index, current_depth + 1, max_depth
                    )
                )
            except GitHubClientError as e:
                self._warn(f"failed to get sub-issues for {key}: {e}")

        return nodes

    def relations(
        self,
        backend: IssueReader,
        owner: str,
        repo: str,
        number: int,
        relation: str = "children",
        state: str = "all",
        limit: int = 0,
    ) -> SubListResult:
        """Collect the issues related to one issue.

        Args:
            backend: Issue reader used to load the issue itself
            relation: "children", "parent", "siblings" or "all"
            state: Keep only "open", "closed" or "all" children/siblings
            limit: Maximum children and siblings each (0 for no limit)

        Raises:
            ValueError: Unknown relation or state
            GitHubClientError: The issue or its children cannot be fetched
        """
        relation = relation.lower()
        state = state.lower()
        if relation not in RELATIONS:
            raise ValueError(
                f"invalid relation: {relation} (must be children, parent, siblings, or all)"
            )
        if state not in STATES:
            raise ValueError(f"invalid state: {state} (must be open, closed, or all)")

        result = SubListResult(issue=backend.get_issue(owner, repo, number))

        if relation in ("children", "all"):
            result.children = filter_by_state(
                self._backend.get_sub_issues(owner, repo, number), state
            )

        if relation in ("parent", "siblings", "all"):
            try:
                result.parent = self._backend.get_parent_issue(owner, repo, number)
            except GitHubClientError as e:
                self._warn(f"failed to get parent of {issue_key(owner, repo, number)}: {e}")

        if relation in ("siblings", "all") and result.parent is not None:
            parent_owner = result.parent.repository.owner or owner
            parent_repo = result.parent.repository.name or repo
            try:
                siblings = self._backend.get_sub_issues(
                    parent_owner, parent_repo, result.parent.number
                )
            except GitHubClientError as e:
                self._warn(f"failed to get siblings of {issue_key(owner, repo, number)}: {e}")
            else:
                siblings = [
                    sib
                    for sib in siblings
                    if issue_key(
                        sib.repository.owner or parent_owner,
                        sib.repository.name or parent_repo,
                        sib.number,
                    )
                    != issue_key(owner, repo, number)
                ]
                result.siblings = filter_by_state(siblings, state)

        if limit > 0:
            result.children = result.children[:limit]
            result.siblings = result.siblings[:limit]

        return result

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)
