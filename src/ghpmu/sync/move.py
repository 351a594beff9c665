"""Move: update Status/Priority on an issue and optionally its sub-issues."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..github import GitHubClientError
from ..models import HierarchyNode, MoveResult, issue_key
from .errors import FieldValueError, NotInProjectError
from .field_setter import FieldValueSetter
from .hierarchy import HierarchyWalker, build_item_index
from .paged import PagedCollector

if TYPE_CHECKING:
    from ..models import PmuConfig, Project
    from ..repositories.protocol import MoveBackend

logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 10


@dataclass
class FieldChange:
    """A resolved field update."""

    key: str  # Configured key, e.g. "status"
    field_name: str  # Project field name, e.g. "Status"
    value: str  # Resolved option value

    def describe(self) -> str:
        return f"{self.field_name} → {self.value}"


@dataclass
class MovePlan:
    """Issues and field changes a move will apply."""

    project: Project
    targets: list[HierarchyNode]  # Root first (depth 0), then descendants in pre-order
    changes: list[FieldChange]
    warnings: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> list[HierarchyNode]:
        return [node for node in self.targets if not node.in_project]


class MoveOperation:
    """Plans and applies field updates across an issue tree."""

    def __init__(
        self,
        config: PmuConfig,
        backend: MoveBackend,
        field_setter: FieldValueSetter | None = None,
    ) -> None:
        self._config = config
        self._backend = backend
        self._setter = field_setter or FieldValueSetter(backend)

    def plan(
        self,
        owner: str,
        repo: str,
        number: int,
        status: str | None = None,
        priority: str | None = None,
        recursive: bool = False,
        depth: int = DEFAULT_DEPTH,
    ) -> MovePlan:
        """Resolve the field changes and collect the issues to update.

        Raises:
            ValueError: Neither status nor priority given
            NotInProjectError: The root issue is not in the project
            GitHubClientError: Issue, project or item lookup failed
        """
        if not status and not priority:
            raise ValueError("at least one of --status or --priority is required")

        resolver = self._config.resolver
        changes: list[FieldChange] = []
        for key, alias in (("status", status), ("priority", priority)):
            if alias:
                field_name, value = resolver.resolve(key, alias, key.capitalize())
                changes.append(FieldChange(key=key, field_name=field_name, value=value))

        issue = self._backend.get_issue(owner, repo, number)
        project = self._backend.get_project(
            self._config.project.owner, self._config.project.number
        )
        item_index = build_item_index(PagedCollector(self._backend).fetch_all(project.id))

        root_key = issue_key(owner, repo, number)
        root_item_id = item_index.get(root_key)
        if not root_item_id:
            raise NotInProjectError(f"issue #{number} is not in the project")

        targets = [
            HierarchyNode(
                owner=owner,
                repo=repo,
                number=number,
                title=issue.title,
                state=issue.state,
                item_id=root_item_id,
                depth=0,
            )
        ]

        warnings: list[str] = []
        if recursive:
            walker = HierarchyWalker(self._backend)
            targets.extend(
                walker.collect(owner, repo, number, item_index, current_depth=1, max_depth=depth)
            )
            warnings = walker.warnings

        return MovePlan(project=project, targets=targets, changes=changes, warnings=warnings)

    def apply(self, plan: MovePlan, dry_run: bool = False) -> MoveResult:
        """Apply a plan. Field failures are recorded per issue; the batch continues."""
        result = MoveResult(dry_run=dry_run, warnings=list(plan.warnings))

        for node in plan.targets:
            if not node.in_project:
                result.skipped.append(node.key)
                continue
            if dry_run:
                result.updated.append(node.key)
                continue

            try:
                for change in plan.changes:
                    self._setter.set_field(
                        plan.project.id, node.item_id, change.field_name, change.value
                    )
            except (FieldValueError, GitHubClientError) as e:
                message = f"failed to update {node.key}: {e}"
                logger.warning(message)
                result.errors.append(message)
                continue

            logger.info("Updated %s", node.key)
            result.updated.append(node.key)

        return result
