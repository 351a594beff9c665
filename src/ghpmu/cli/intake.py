"""Intake command: find open issues not yet in the project."""

import logging

from ..config import Settings
from ..github.client import GitHubClientError
from ..models import Issue
from ..sync.intake import IntakeOperation
from ..sync.triage import parse_apply_fields
from .context import issue_to_dict, open_context, truncate
from .output import error, header, info, print_json, success, table, warning

logger = logging.getLogger(__name__)


def run_intake(
    settings: Settings,
    apply: str | None = None,
    labels: list[str] | None = None,
    assignees: list[str] | None = None,
    dry_run: bool = False,
    as_json: bool = False,
) -> int:
    """List untracked issues, or add them to the project when ``apply`` is set.

    Args:
        apply: None to only list; otherwise "key:value,..." pairs ("" for defaults only)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    ctx = open_context(settings)
    if ctx is None:
        return 1

    fields = parse_apply_fields(apply) if apply is not None else None
    try:
        result = IntakeOperation(ctx.config, ctx.backend).run(
            apply=fields, labels=labels, assignees=assignees, dry_run=dry_run
        )
    except GitHubClientError as e:
        error(f"Intake failed: {e}")
        return 1
    finally:
        ctx.close()

    for message in result.warnings:
        warning(message)

    if not result.untracked:
        if as_json:
            print_json({"status": "untracked", "count": 0, "issues": []})
        else:
            info("All issues are already tracked in the project")
        return 0

    if dry_run:
        if as_json:
            print_json(_to_json(result.untracked, "dry-run"))
            return 0
        header(f"Would add {len(result.untracked)} issue(s) to project:\n")
        _issue_table(result.untracked)
        return 0

    if fields is not None:
        for message in result.errors:
            error(message)
        if as_json:
            print_json(_to_json(result.added, "applied"))
        else:
            summary = f"Added {len(result.added)} issue(s) to project"
            if result.errors:
                summary += f" ({len(result.errors)} failed)"
            success(summary)
        return 0 if not result.has_errors else 1

    if as_json:
        print_json(_to_json(result.untracked, "untracked"))
        return 0
    header(f"Found {len(result.untracked)} untracked issue(s):\n")
    _issue_table(result.untracked)
    print()
    info("Use --apply to add these issues to the project")
    return 0


def _issue_table(issues: list[Issue]) -> None:
    table(
        ["NUMBER", "TITLE", "REPOSITORY", "STATE"],
        [
            [f"#{i.number}", truncate(i.title), i.repository.full_name, i.state]
            for i in issues
        ],
    )


def _to_json(issues: list[Issue], status: str) -> dict:
    return {
        "status": status,
        "count": len(issues),
        "issues": [issue_to_dict(issue) for issue in issues],
    }
