"""Split: turn a checklist into sub-issues of a parent issue."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from ..github import GitHubClientError
from ..models import SplitResult
from ..utils.references import parse_issue_reference

if TYPE_CHECKING:
    from ..models import PmuConfig
    from ..repositories.protocol import SubIssueBackend

logger = logging.getLogger(__name__)

# Unchecked markdown task: "- [ ] Task"
CHECKLIST_PATTERN = re.compile(r"^[ \t]*-\s*\[\s*\]\s*(.+)$", re.MULTILINE)

FROM_BODY = "body"


def parse_checklist(text: str) -> list[str]:
    """Return the titles of unchecked checklist items, in order.

    Checked items ("- [x] ...") are left out.
    """
    return [match.group(1).strip() for match in CHECKLIST_PATTERN.finditer(text or "")]


class SplitOperation:
    """Creates one sub-issue per task under a parent issue."""

    def __init__(self, config: PmuConfig, backend: SubIssueBackend) -> None:
        self._config = config
        self._backend = backend

    def gather_tasks(
        self, body: str, source: str | None = None, tasks: list[str] | None = None
    ) -> list[str]:
        """Collect task titles from the parent body, a file, or explicit arguments.

        Args:
            body: The parent issue's body
            source: "body" to parse ``body``, or a path to a markdown file
            tasks: Explicit task titles, used when no source is given

        Raises:
            ValueError: No source and no tasks given
            OSError: The file cannot be read
        """
        if source == FROM_BODY:
            return parse_checklist(body)
        if source:
            return parse_checklist(Path(source).read_text(encoding="utf-8"))
        if tasks:
            return [task.strip() for task in tasks if task.strip()]
        raise ValueError(
            "no tasks specified\n"
            "Use --from=body, --from=<file>, or provide tasks as arguments"
        )

    def run(
        self,
        reference: str,
        source: str | None = None,
        tasks: list[str] | None = None,
        dry_run: bool = False,
    ) -> SplitResult:
        """Create and link a sub-issue for every task.

        New issues go to the parent's repository. A task whose issue was
        created but could not be linked is still counted as created and the
        link failure is recorded in ``errors``.

        Raises:
            ValueError: Bad reference, no repository configured, or no tasks
            GitHubClientError: The parent issue cannot be fetched
        """
        ref = parse_issue_reference(reference)
        if not ref.has_repository:
            if not self._config.repositories:
                raise ValueError("no repository specified and none configured")
            ref = ref.with_default(self._config.repositories[0])

        parent = self._backend.get_issue(ref.owner, ref.repo, ref.number)
        result = SplitResult(parent=parent, dry_run=dry_run)
        result.tasks = self.gather_tasks(parent.body, source, tasks)

        if not result.tasks or dry_run:
            return result

        for task in result.tasks:
            try:
                issue = self._backend.create_issue(ref.owner, ref.repo, task, "")
            except GitHubClientError as e:
                message = f"failed to create {task!r}: {e}"
                logger.warning(message)
                result.errors.append(message)
                continue

            try:
                self._backend.add_sub_issue(parent.id, issue.id)
            except GitHubClientError as e:
                message = f"created #{issue.number} but failed to link it: {e}"
                logger.warning(message)
                result.errors.append(message)

            logger.info("Created sub-issue %s under %s", issue.key, parent.key)
            result.created.append(issue)

        return result
