"""Create: open a new issue, add it to the project and set its fields."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..github import GitHubClientError
from ..models import CreateResult
from .errors import FieldValueError
from .field_setter import FieldValueSetter
from .membership import ensure_member

if TYPE_CHECKING:
    from ..models import PmuConfig
    from ..repositories.protocol import CreateBackend

logger = logging.getLogger(__name__)


class IssueDraft(BaseModel):
    """Issue content, from flags or a YAML/JSON file."""

    title: str = ""
    body: str = ""
    labels: list[str] = Field(default_factory=list)
    assignees: list[str] = Field(default_factory=list)
    milestone: str | None = None
    status: str | None = None
    priority: str | None = None

    def merged_with(self, other: IssueDraft) -> IssueDraft:
        """Overlay ``other``: its scalars win when set, its lists are appended."""
        return IssueDraft(
            title=other.title or self.title,
            body=other.body or self.body,
            labels=self.labels + [label for label in other.labels if label not in self.labels],
            assignees=self.assignees
            + [login for login in other.assignees if login not in self.assignees],
            milestone=other.milestone or self.milestone,
            status=other.status or self.status,
            priority=other.priority or self.priority,
        )


def load_issue_draft(path: Path) -> IssueDraft:
    """Read a draft from a .json file, or YAML for any other extension.

    Raises:
        ValueError: Unreadable, unparsable or invalid file
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"failed to read file {path}: {e}") from e

    try:
        data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"failed to parse {path.name}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a mapping")
    try:
        return IssueDraft(**data)
    except ValidationError as e:
        raise ValueError(f"invalid issue file {path.name}: {e}") from e


class CreateOperation:
    """Creates an issue and registers it in the configured project."""

    def __init__(
        self,
        config: PmuConfig,
        backend: CreateBackend,
        field_setter: FieldValueSetter | None = None,
    ) -> None:
        self._config = config
        self._backend = backend
        self._setter = field_setter or FieldValueSetter(backend)

    def run(self, owner: str, repo: str, draft: IssueDraft) -> CreateResult:
        """Create the issue, add it to the project, then set Status/Priority.

        Config default labels come first. Status and priority fall back to
        the config defaults. Field failures are warnings.

        Raises:
            ValueError: The draft has no title
            GitHubClientError: Creation, project lookup or project add failed
            ItemIdUnavailableError: The project item ID could not be determined
        """
        if not draft.title:
            raise ValueError("title is required")

        defaults = self._config.defaults
        labels = list(defaults.labels)
        labels.extend(label for label in draft.labels if label not in labels)

        issue = self._backend.create_issue(
            owner, repo, draft.title, draft.body, labels, draft.assignees, draft.milestone
        )
        logger.info("Created %s", issue.key)

        project = self._backend.get_project(
            self._config.project.owner, self._config.project.number
        )
        item_id = ensure_member(self._backend, project.id, issue.id)
        result = CreateResult(issue=issue, item_id=item_id)

        resolver = self._config.resolver
        for key, value in (
            ("status", draft.status or defaults.status),
            ("priority", draft.priority or defaults.priority),
        ):
            if not value:
                continue
            field_name, option = resolver.resolve(key, value, key.capitalize())
            try:
                self._setter.set_field(project.id, item_id, field_name, option)
            except (FieldValueError, GitHubClientError) as e:
                message = f"failed to set {key}: {e}"
                logger.warning(message)
                result.warnings.append(message)

        return result
