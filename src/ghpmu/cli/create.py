"""Create command: open an issue and add it to the project."""

import logging
from pathlib import Path

from ..config import Settings
from ..github.client import GitHubClientError
from ..sync.create import CreateOperation, IssueDraft, load_issue_draft
from ..sync.errors import SyncError
from ..utils.references import split_repository
from .context import open_context
from .output import error, success, warning

logger = logging.getLogger(__name__)


def run_create(
    settings: Settings,
    draft: IssueDraft,
    repo: str | None = None,
    from_file: Path | None = None,
) -> int:
    """Create an issue from flags and/or a YAML/JSON file.

    Values given as flags override the file's.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if from_file is not None:
        try:
            draft = load_issue_draft(from_file).merged_with(draft)
        except ValueError as e:
            error(str(e))
            return 1

    if not draft.title:
        error("--title is required (or a title in --from-file)")
        return 1

    ctx = open_context(settings)
    if ctx is None:
        return 1

    try:
        owner, name = split_repository(repo or ctx.config.repositories[0])
        result = CreateOperation(ctx.config, ctx.backend).run(owner, name, draft)
    except ValueError as e:
        error(str(e))
        return 1
    except (GitHubClientError, SyncError) as e:
        error(f"Failed to create issue: {e}")
        return 1
    finally:
        ctx.close()

    for message in result.warnings:
        warning(message)
    success(f"Created issue #{result.issue.number}: {result.issue.title}")
    print(result.issue.url)
    return 0
