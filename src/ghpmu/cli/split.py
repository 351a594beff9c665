"""Split command: turn a checklist into sub-issues."""

import logging
from typing import Any

from ..config import Settings
from ..github.client import GitHubClientError
from ..models import Issue, SplitResult
from ..sync.split import SplitOperation
from .context import open_context
from .output import error, header, info, print_json, success

logger = logging.getLogger(__name__)


def run_split(
    settings: Settings,
    reference: str,
    tasks: list[str] | None = None,
    source: str | None = None,
    dry_run: bool = False,
    as_json: bool = False,
) -> int:
    """Create a sub-issue for each task under the parent issue.

    Args:
        source: "body" to read the parent's checklist, or a markdown file path

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    ctx = open_context(settings)
    if ctx is None:
        return 1

    try:
        result = SplitOperation(ctx.config, ctx.backend).run(
            reference, source=source, tasks=tasks, dry_run=dry_run
        )
    except (ValueError, OSError) as e:
        error(str(e))
        return 1
    except GitHubClientError as e:
        error(f"Failed to get parent issue: {e}")
        return 1
    finally:
        ctx.close()

    parent = result.parent
    if as_json:
        print_json(_to_json(result))
        return 0 if not result.has_errors else 1

    if not result.tasks:
        info("No tasks found to create as sub-issues")
        return 0

    if dry_run:
        header(
            f"Would create {len(result.tasks)} sub-issue(s) under "
            f"#{parent.number}: {parent.title}\n"
        )
        for i, task in enumerate(result.tasks, start=1):
            print(f"  {i}. {task}")
        return 0

    for issue in result.created:
        success(f"Created sub-issue #{issue.number}: {issue.title}")
    for message in result.errors:
        error(message)

    summary = (
        f"\nSplit complete: {len(result.created)} sub-issue(s) created under #{parent.number}"
    )
    if result.failed:
        summary += f" ({result.failed} failed)"
    print(summary)
    return 0 if not result.has_errors else 1


def _brief(issue: Issue) -> dict[str, Any]:
    return {"number": issue.number, "title": issue.title, "url": issue.url}


def _to_json(result: SplitResult) -> dict[str, Any]:
    data: dict[str, Any] = {"status": result.status, "parent": _brief(result.parent)}
    if result.status != "completed":
        data["taskCount"] = len(result.tasks)
        data["tasks"] = result.tasks
        return data
    data["createdCount"] = len(result.created)
    data["failedCount"] = result.failed
    data["created"] = [_brief(issue) for issue in result.created]
    data["errors"] = result.errors
    return data
