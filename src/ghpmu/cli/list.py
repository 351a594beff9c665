"""List command: project items for the configured repository."""

import logging

from ..config import Settings
from ..github.client import GitHubClientError
from ..models import ProjectItem
from ..repositories import SubIssueReader
from ..services.filter_service import FilterService, ItemFilter
from ..sync.paged import PagedCollector
from .context import item_to_dict, open_context, truncate
from .output import error, info, print_json, table

logger = logging.getLogger(__name__)


def run_list(
    settings: Settings,
    status: str | None = None,
    priority: str | None = None,
    assignee: str | None = None,
    label: str | None = None,
    search: str | None = None,
    limit: int = 0,
    has_sub_issues: bool = False,
    as_json: bool = False,
) -> int:
    """List project items belonging to the first configured repository.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    ctx = open_context(settings)
    if ctx is None:
        return 1

    config = ctx.config
    resolver = config.resolver
    try:
        project = ctx.backend.get_project(config.project.owner, config.project.number)
        items = PagedCollector(ctx.backend).fetch_all(project.id, config.repositories[0])

        item_filter = ItemFilter(
            status=resolver.resolve_value("status", status) if status else None,
            priority=resolver.resolve_value("priority", priority) if priority else None,
            assignee=assignee,
            label=label,
            text=search,
            status_field=resolver.resolve_field_name("status", "Status"),
            priority_field=resolver.resolve_field_name("priority", "Priority"),
        )
        items = FilterService().apply(items, item_filter)

        if has_sub_issues:
            items = _with_sub_issues(ctx.backend, items)
    except GitHubClientError as e:
        error(f"Failed to list issues: {e}")
        return 1
    finally:
        ctx.close()

    if limit > 0:
        items = items[:limit]

    if as_json:
        print_json({"items": [item_to_dict(item) for item in items]})
        return 0

    if not items:
        info("No issues found")
        return 0

    rows = []
    for item in items:
        issue = item.issue
        if issue is None:
            continue
        rows.append(
            [
                f"#{issue.number}",
                truncate(issue.title),
                item.get_field_value(item_filter.status_field) or "",
                item.get_field_value(item_filter.priority_field) or "",
                ", ".join(issue.assignee_logins) or "-",
            ]
        )
    table(["NUMBER", "TITLE", "STATUS", "PRIORITY", "ASSIGNEES"], rows)
    return 0


def _with_sub_issues(backend: SubIssueReader, items: list[ProjectItem]) -> list[ProjectItem]:
    """Keep items whose issue has at least one sub-issue. Lookup failures drop the item."""
    kept: list[ProjectItem] = []
    for item in items:
        issue = item.issue
        if issue is None:
            continue
        try:
            subs = backend.get_sub_issues(
                issue.repository.owner, issue.repository.name, issue.number
            )
        except GitHubClientError as e:
            logger.warning("failed to get sub-issues of %s: %s", issue.key, e)
            continue
        if subs:
            kept.append(item)
    return kept
