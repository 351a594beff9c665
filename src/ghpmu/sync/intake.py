"""Intake: find open issues not yet tracked in the project and add them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..github import GitHubClientError
from ..models import IntakeResult, Issue
from ..utils.references import split_repository
from .errors import FieldValueError, SyncError
from .field_setter import FieldValueSetter
from .membership import ensure_member
from .paged import PagedCollector

if TYPE_CHECKING:
    from ..models import PmuConfig
    from ..repositories.protocol import IntakeBackend

logger = logging.getLogger(__name__)


def filter_by_labels(issues: list[Issue], labels: list[str]) -> list[Issue]:
    """Keep issues carrying any of the labels (case-insensitive)."""
    wanted = {label.lower() for label in labels}
    return [i for i in issues if any(name.lower() in wanted for name in i.label_names)]


def filter_by_assignees(issues: list[Issue], assignees: list[str]) -> list[Issue]:
    """Keep issues assigned to any of the users (case-insensitive)."""
    wanted = {login.lower() for login in assignees}
    return [i for i in issues if any(login.lower() in wanted for login in i.assignee_logins)]


class IntakeOperation:
    """Finds untracked issues and adds them to the project."""

    def __init__(
        self,
        config: PmuConfig,
        backend: IntakeBackend,
        field_setter: FieldValueSetter | None = None,
    ) -> None:
        self._config = config
        self._backend = backend
        self._setter = field_setter or FieldValueSetter(backend)

    def run(
        self,
        apply: dict[str, str] | None = None,
        labels: list[str] | None = None,
        assignees: list[str] | None = None,
        dry_run: bool = False,
    ) -> IntakeResult:
        """Find untracked open issues and, when ``apply`` is given, add them.

        Args:
            apply: Field values to set on added items ({} adds with defaults
                only; None only lists)
            labels: Keep issues with any of these labels
            assignees: Keep issues assigned to any of these users
            dry_run: List only, even when ``apply`` is given

        Raises:
            GitHubClientError: Project or project item lookup failed
        """
        project = self._backend.get_project(
            self._config.project.owner, self._config.project.number
        )
        tracked = {
            item.issue.id
            for item in PagedCollector(self._backend).fetch_all(project.id)
            if item.issue is not None
        }

        result = IntakeResult(dry_run=dry_run)
        for repository in self._config.repositories:
            try:
                owner, name = split_repository(repository)
                issues = self._backend.get_repository_issues(owner, name, "open")
            except (ValueError, GitHubClientError) as e:
                message = f"failed to get issues from {repository}: {e}"
                logger.warning(message)
                result.warnings.append(message)
                continue
            result.untracked.extend(issue for issue in issues if issue.id not in tracked)

        if labels:
            result.untracked = filter_by_labels(result.untracked, labels)
        if assignees:
            result.untracked = filter_by_assignees(result.untracked, assignees)

        logger.info("Found %d untracked issue(s)", len(result.untracked))
        if dry_run or apply is None:
            return result

        values = self._field_values(apply)
        for issue in result.untracked:
            try:
                item_id = ensure_member(self._backend, project.id, issue.id)
            except (GitHubClientError, SyncError) as e:
                message = f"failed to add {issue.key}: {e}"
                logger.warning(message)
                result.errors.append(message)
                continue

            for field_name, value in values:
                try:
                    self._setter.set_field(project.id, item_id, field_name, value)
                except (FieldValueError, GitHubClientError) as e:
                    message = f"failed to set {field_name} on {issue.key}: {e}"
                    logger.warning(message)
                    result.warnings.append(message)

            result.added.append(issue)

        return result

    def _field_values(self, apply: dict[str, str]) -> list[tuple[str, str]]:
        """Resolve --apply pairs, filling status/priority from config defaults."""
        resolver = self._config.resolver
        defaults = self._config.defaults
        given = {key.lower() for key in apply}

        values: list[tuple[str, str]] = []
        for key, value in apply.items():
            key_lower = key.lower()
            if key_lower in ("status", "priority"):
                values.append(resolver.resolve(key_lower, value, key_lower.capitalize()))
            else:
                values.append((key, value))

        for key, default in (("status", defaults.status), ("priority", defaults.priority)):
            if default and key not in given:
                values.append(resolver.resolve(key, default, key.capitalize()))
        return values
