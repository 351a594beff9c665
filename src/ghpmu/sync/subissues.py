"""Sub-issue management: link, create, unlink and list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..github import GitHubClientError
from ..models import Issue, SubListResult, SubRemoveResult
from ..utils.references import IssueRef, parse_issue_reference, split_repository
from .errors import (
    REASON_ALREADY_LINKED,
    SubIssueLinkError,
    SyncError,
    is_already_linked_error,
    is_not_linked_error,
)
from .hierarchy import HierarchyWalker
from .membership import ensure_member

if TYPE_CHECKING:
    from ..models import PmuConfig
    from ..repositories.protocol import ProjectMembershipBackend, SubIssueBackend

logger = logging.getLogger(__name__)


@dataclass
class LinkedIssue:
    """A parent/child pair after linking."""

    parent: Issue
    child: Issue
    linked: bool = True
    warnings: list[str] = field(default_factory=list)

    @property
    def cross_repo(self) -> bool:
        return self.parent.repository.full_name.lower() != self.child.repository.full_name.lower()


class SubIssueService:
    """Manages parent/child links between issues.

    Bare issue numbers are resolved against ``default_repo`` when given,
    otherwise against the first configured repository.
    """

    def __init__(
        self,
        config: PmuConfig,
        backend: SubIssueBackend,
        default_repo: str | None = None,
    ) -> None:
        self._config = config
        self._backend = backend
        self._default_repo = default_repo

    def resolve(self, reference: str) -> IssueRef:
        """Parse a reference and fill in the default repository.

        Raises:
            ValueError: Bad reference, or a bare number with no repository to use
        """
        ref = parse_issue_reference(reference)
        if ref.has_repository:
            return ref
        repository = self._default_repo or (
            self._config.repositories[0] if self._config.repositories else ""
        )
        if not repository:
            raise ValueError(
                "no repository specified and none configured "
                "(use --repo or configure in .gh-pmu.yml)"
            )
        return ref.with_default(repository)

    def add(self, parent_ref: str, child_ref: str) -> LinkedIssue:
        """Link an existing issue as a sub-issue.

        Raises:
            SubIssueLinkError: The host refused the link; ``reason`` is
                "already-linked" when the child already has a parent
            GitHubClientError: Either issue cannot be fetched
        """
        parent = self._get(self.resolve(parent_ref))
        child = self._get(self.resolve(child_ref))

        try:
            self._backend.add_sub_issue(parent.id, child.id)
        except GitHubClientError as e:
            if is_already_linked_error(e):
                raise SubIssueLinkError(
                    f"issue #{child.number} is already a sub-issue "
                    "(issues can only have one parent)",
                    reason=REASON_ALREADY_LINKED,
                ) from e
            raise SubIssueLinkError(f"failed to add sub-issue link: {e}") from e

        logger.info("Linked %s under %s", child.key, parent.key)
        return LinkedIssue(parent=parent, child=child)

    def create(
        self,
        parent_ref: str,
        title: str,
        body: str = "",
        repo: str | None = None,
        labels: list[str] | None = None,
        assignees: list[str] | None = None,
        milestone: str | None = None,
        inherit_labels: bool = True,
        project_backend: ProjectMembershipBackend | None = None,
    ) -> LinkedIssue:
        """Create a new issue and link it under the parent.

        The new issue goes to ``repo`` when given, else the parent's
        repository. Parent labels are inherited only within the same
        repository. When ``project_backend`` is given the new issue is also
        added to the configured project. A failed link or project add is
        returned as a warning: the issue exists either way.

        Raises:
            ValueError: Bad reference or repository format
            GitHubClientError: The parent cannot be fetched or the issue cannot be created
        """
        parent_key = self.resolve(parent_ref)
        parent = self._get(parent_key)

        if repo:
            owner, name = split_repository(repo)
        else:
            owner, name = parent_key.owner, parent_key.repo
        same_repo = (owner.lower(), name.lower()) == (
            parent_key.owner.lower(),
            parent_key.repo.lower(),
        )

        all_labels = list(labels or [])
        if same_repo and inherit_labels:
            all_labels.extend(label for label in parent.label_names if label not in all_labels)

        child = self._backend.create_issue(
            owner, name, title, body, all_labels, list(assignees or []), milestone
        )
        result = LinkedIssue(parent=parent, child=child)

        try:
            self._backend.add_sub_issue(parent.id, child.id)
        except GitHubClientError as e:
            result.linked = False
            result.warnings.append(f"issue created but failed to link as sub-issue: {e}")

        if project_backend is not None:
            try:
                project = project_backend.get_project(
                    self._config.project.owner, self._config.project.number
                )
                ensure_member(project_backend, project.id, child.id)
            except (GitHubClientError, SyncError) as e:
                result.warnings.append(f"failed to add issue to project: {e}")

        for warning in result.warnings:
            logger.warning(warning)
        return result

    def remove(self, parent_ref: str, child_refs: list[str]) -> tuple[Issue, SubRemoveResult]:
        """Unlink each child from the parent. Failures do not stop the batch.

        Raises:
            ValueError: A bad reference
            GitHubClientError: The parent cannot be fetched
        """
        parent = self._get(self.resolve(parent_ref))
        children = [self.resolve(ref) for ref in child_refs]

        result = SubRemoveResult()
        for ref in children:
            try:
                child = self._get(ref)
            except GitHubClientError as e:
                result.errors.append(f"#{ref.number}: failed to get issue: {e}")
                continue

            try:
                self._backend.remove_sub_issue(parent.id, child.id)
            except GitHubClientError as e:
                if is_not_linked_error(e):
                    result.not_linked.append(ref.number)
                    result.errors.append(
                        f"#{ref.number}: not a sub-issue of #{parent.number}"
                    )
                else:
                    result.errors.append(f"#{ref.number}: {e}")
                continue

            logger.info("Unlinked %s from %s", child.key, parent.key)
            result.removed.append(ref.number)

        return parent, result

    def list_related(
        self,
        reference: str,
        relation: str = "children",
        state: str = "all",
        limit: int = 0,
    ) -> tuple[SubListResult, list[str]]:
        """List related issues. Returns the result and any lookup warnings."""
        ref = self.resolve(reference)
        walker = HierarchyWalker(self._backend)
        result = walker.relations(
            self._backend, ref.owner, ref.repo, ref.number, relation, state, limit
        )
        return result, walker.warnings

    def _get(self, ref: IssueRef) -> Issue:
        return self._backend.get_issue(ref.owner, ref.repo, ref.number)

