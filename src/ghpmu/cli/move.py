"""Move command: update Status/Priority on an issue tree."""

import logging

from ..config import Settings
from ..github.client import GitHubClientError
from ..sync.errors import SyncError
from ..sync.move import DEFAULT_DEPTH, MoveOperation
from ..utils.references import parse_issue_reference
from .context import open_context
from .output import error, header, info, success, warning

logger = logging.getLogger(__name__)


def run_move(
    settings: Settings,
    reference: str,
    status: str | None = None,
    priority: str | None = None,
    recursive: bool = False,
    depth: int = DEFAULT_DEPTH,
    dry_run: bool = False,
    yes: bool = False,
) -> int:
    """Update project fields on an issue and, with --recursive, its sub-issues.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if not status and not priority:
        error("at least one of --status or --priority is required")
        return 1

    ctx = open_context(settings)
    if ctx is None:
        return 1

    try:
        ref = parse_issue_reference(reference).with_default(ctx.config.repositories[0])
        operation = MoveOperation(ctx.config, ctx.backend)
        plan = operation.plan(
            ref.owner, ref.repo, ref.number, status, priority, recursive=recursive, depth=depth
        )

        for message in plan.warnings:
            warning(message)

        if recursive or dry_run:
            if dry_run:
                header("Dry run - no changes will be made\n")
            print(f"Issues to update ({len(plan.targets)}):")
            for node in plan.targets:
                indent = "  " * (node.depth + 1)
                suffix = "" if node.in_project else " (not in project, will skip)"
                print(f"{indent}• #{node.number} - {node.title}{suffix}")
            print("\nChanges to apply:")
            for change in plan.changes:
                print(f"  • {change.describe()}")

            if not dry_run and not yes:
                try:
                    response = (
                        input(f"\nProceed with updating {len(plan.targets)} issues? [y/N] ")
                        .strip()
                        .lower()
                    )
                except (KeyboardInterrupt, EOFError):
                    print()
                    response = ""
                if response not in ("y", "yes"):
                    info("Aborted.")
                    return 0
            print()

        result = operation.apply(plan, dry_run=dry_run)
    except ValueError as e:
        error(str(e))
        return 1
    except (GitHubClientError, SyncError) as e:
        error(f"Failed to move issue: {e}")
        return 1
    finally:
        ctx.close()

    for message in result.errors:
        error(message)

    if dry_run:
        info(f"Would update {len(result.updated)} issue(s)")
        return 0

    summary = f"Updated {len(result.updated)} issue(s)"
    if result.skipped:
        summary += f" ({len(result.skipped)} skipped - not in project)"
    success(summary)
    for change in plan.changes:
        info(change.describe())
    return 0 if not result.has_errors else 1
