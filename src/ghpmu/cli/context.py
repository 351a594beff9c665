"""Shared setup for commands: configuration, GitHub client and serializers."""

import logging
from dataclasses import dataclass
from typing import Any

from ..config import Settings
from ..github.client import GitHubAuthError, GitHubClient, GitHubClientError
from ..models import Issue, PmuConfig, ProjectItem, SubIssue
from ..repositories import GitHubProjectsRepository
from ..services.config_service import ConfigError, ConfigService
from .output import error, info

logger = logging.getLogger(__name__)


@dataclass
class CommandContext:
    """What every remote command needs."""

    config: PmuConfig
    client: GitHubClient
    backend: GitHubProjectsRepository

    def close(self) -> None:
        self.client.close()


def load_config(settings: Settings) -> PmuConfig | None:
    """Load and validate the config, printing the error on failure."""
    try:
        return ConfigService(settings.project_root, settings).get_config()
    except ConfigError as e:
        error(f"Failed to load configuration: {e}")
        info("Create a .gh-pmu.yml with project and repositories sections")
        return None


def open_context(settings: Settings) -> CommandContext | None:
    """Load config and authenticate, printing errors. None means exit 1."""
    config = load_config(settings)
    if config is None:
        return None

    try:
        client = GitHubClient.from_environment()
    except GitHubAuthError as e:
        error(f"GitHub authentication failed: {e}")
        info("Set GITHUB_TOKEN environment variable or run 'gh auth login'")
        return None
    except GitHubClientError as e:
        error(f"GitHub client error: {e}")
        return None

    return CommandContext(config=config, client=client, backend=GitHubProjectsRepository(client))


def issue_to_dict(issue: Issue) -> dict[str, Any]:
    return {
        "number": issue.number,
        "title": issue.title,
        "state": issue.state,
        "url": issue.url,
        "repository": issue.repository.full_name,
        "assignees": issue.assignee_logins,
        "labels": issue.label_names,
    }


def sub_issue_to_dict(sub: SubIssue) -> dict[str, Any]:
    return {
        "number": sub.number,
        "title": sub.title,
        "state": sub.state,
        "url": sub.url,
        "repository": sub.repository.full_name,
    }


def item_to_dict(item: ProjectItem) -> dict[str, Any]:
    data = issue_to_dict(item.issue) if item.issue else {}
    data["fieldValues"] = {fv.field: fv.value for fv in item.field_values}
    return data


def truncate(text: str, width: int = 50) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."
