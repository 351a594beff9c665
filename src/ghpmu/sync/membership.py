"""Idempotent project membership."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..github import GitHubClientError
from .errors import ItemIdUnavailableError, is_already_member_error

if TYPE_CHECKING:
    from ..repositories.protocol import MembershipWriter

logger = logging.getLogger(__name__)


def ensure_member(backend: MembershipWriter, project_id: str, issue_id: str) -> str:
    """Make sure an issue is an item of a project and return its item ID.

    GitHub normally answers a duplicate add with the existing item. When it
    reports "already exists" instead, the existing item is looked up.

    Not safe to call concurrently for the same (project, issue) pair.

    Args:
        backend: Membership capability
        project_id: Project node ID
        issue_id: Issue node ID

    Returns:
        The project item ID

    Raises:
        ItemIdUnavailableError: Issue is already a member but its item ID
            could not be determined
        GitHubClientError: Any other failure adding the item
    """
    try:
        item_id = backend.add_item_to_project(project_id, issue_id)
    except GitHubClientError as e:
        if not is_already_member_error(e):
            raise
        logger.debug("Issue %s already in project %s, looking up item", issue_id, project_id)
        item_id = _lookup_existing(backend, project_id, issue_id, e)

    if not item_id:
        item_id = _lookup_existing(backend, project_id, issue_id, None)
    return item_id


def _lookup_existing(
    backend: MembershipWriter,
    project_id: str,
    issue_id: str,
    cause: Exception | None,
) -> str:
    try:
        item_id = backend.find_project_item_id(project_id, issue_id)
    except GitHubClientError as e:
        raise ItemIdUnavailableError(
            f"could not determine item id for {issue_id}: {e}"
        ) from (cause or e)
    if not item_id:
        raise ItemIdUnavailableError(f"could not determine item id for {issue_id}") from cause
    return item_id
