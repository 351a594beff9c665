"""Sub-issue commands: add, create, list and remove."""

import logging

from ..config import Settings
from ..github.client import GitHubClientError
from ..models import STATE_CLOSED, SubIssue
from ..sync.errors import SyncError
from ..sync.subissues import SubIssueService
from .context import issue_to_dict, open_context, sub_issue_to_dict
from .output import error, header, info, print_json, progress_bar, success, warning

logger = logging.getLogger(__name__)


def run_sub_add(settings: Settings, parent: str, child: str, repo: str | None = None) -> int:
    """Link an existing issue as a sub-issue of another.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    ctx = open_context(settings)
    if ctx is None:
        return 1

    try:
        linked = SubIssueService(ctx.config, ctx.backend, repo).add(parent, child)
    except (ValueError, GitHubClientError, SyncError) as e:
        error(str(e))
        return 1
    finally:
        ctx.close()

    if linked.cross_repo:
        success(f"Linked {linked.child.key} as sub-issue of {linked.parent.key}")
        print(f"  Parent: {linked.parent.title} ({linked.parent.repository.full_name})")
        print(f"  Child:  {linked.child.title} ({linked.child.repository.full_name})")
    else:
        success(f"Linked issue #{linked.child.number} as sub-issue of #{linked.parent.number}")
        print(f"  Parent: {linked.parent.title}")
        print(f"  Child:  {linked.child.title}")
    return 0


def run_sub_create(
    settings: Settings,
    parent: str,
    title: str,
    body: str = "",
    repo: str | None = None,
    labels: list[str] | None = None,
    assignees: list[str] | None = None,
    milestone: str | None = None,
    inherit_labels: bool = True,
    add_to_project: bool = False,
) -> int:
    """Create a new issue linked under a parent, optionally in another repository.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    ctx = open_context(settings)
    if ctx is None:
        return 1

    try:
        linked = SubIssueService(ctx.config, ctx.backend).create(
            parent,
            title,
            body=body,
            repo=repo,
            labels=labels,
            assignees=assignees,
            milestone=milestone,
            inherit_labels=inherit_labels,
            project_backend=ctx.backend if add_to_project else None,
        )
    except (ValueError, GitHubClientError, SyncError) as e:
        error(f"Failed to create sub-issue: {e}")
        return 1
    finally:
        ctx.close()

    for message in linked.warnings:
        warning(message)

    child = linked.child
    if not linked.linked:
        info(f"Created issue #{child.number}: {child.title}")
    elif linked.cross_repo:
        success(f"Created cross-repo sub-issue {child.key} under parent {linked.parent.key}")
    else:
        success(f"Created sub-issue #{child.number} under parent #{linked.parent.number}")
    print(f"  Title:  {child.title}")
    print(f"  Parent: {linked.parent.title}")
    if linked.cross_repo:
        print(f"  Repo:   {child.repository.full_name}")
    if child.labels:
        print(f"  Labels: {', '.join(child.label_names)}")
    if child.assignees:
        print(f"  Assignees: {', '.join('@' + login for login in child.assignee_logins)}")
    if child.milestone:
        print(f"  Milestone: {child.milestone.title}")
    print(child.url)
    return 0


def run_sub_list(
    settings: Settings,
    reference: str,
    relation: str = "children",
    state: str = "all",
    limit: int = 0,
    repo: str | None = None,
    as_json: bool = False,
) -> int:
    """List children, parent and/or siblings of an issue.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    ctx = open_context(settings)
    if ctx is None:
        return 1

    try:
        result, warnings = SubIssueService(ctx.config, ctx.backend, repo).list_related(
            reference, relation=relation, state=state, limit=limit
        )
    except (ValueError, GitHubClientError) as e:
        error(str(e))
        return 1
    finally:
        ctx.close()

    for message in warnings:
        warning(message)

    relation = relation.lower()
    if as_json:
        data: dict = {"issue": issue_to_dict(result.issue)}
        if relation in ("children", "all"):
            data["children"] = [sub_issue_to_dict(sub) for sub in result.children]
            data["summary"] = _summary(result.children)
        if relation in ("parent", "siblings", "all"):
            data["parent"] = issue_to_dict(result.parent) if result.parent else None
        if relation in ("siblings", "all"):
            data["siblings"] = [sub_issue_to_dict(sub) for sub in result.siblings]
        print_json(data)
        return 0

    issue = result.issue
    if relation in ("parent", "siblings", "all"):
        if result.parent is not None:
            header(f"Parent: #{result.parent.number} - {result.parent.title}")
        else:
            info(f"#{issue.number} has no parent issue")

    if relation in ("children", "all"):
        if result.children:
            header(f"Sub-issues of #{issue.number}: {issue.title}")
            _print_subs(result.children, issue.repository.full_name)
            summary = _summary(result.children)
            print(f"\nProgress: {progress_bar(summary['closed'], summary['total'])}")
        else:
            info(f"No sub-issues found for #{issue.number}")

    if relation in ("siblings", "all") and result.parent is not None:
        if result.siblings:
            header(f"Siblings of #{issue.number}:")
            _print_subs(result.siblings, issue.repository.full_name)
        else:
            info(f"#{issue.number} has no siblings")
    return 0


def run_sub_remove(
    settings: Settings, parent: str, children: list[str], repo: str | None = None
) -> int:
    """Unlink one or more sub-issues from a parent.

    Returns:
        Exit code (0 for success, non-zero when every removal failed)
    """
    ctx = open_context(settings)
    if ctx is None:
        return 1

    try:
        parent_issue, result = SubIssueService(ctx.config, ctx.backend, repo).remove(
            parent, children
        )
    except (ValueError, GitHubClientError) as e:
        error(str(e))
        return 1
    finally:
        ctx.close()

    if len(children) == 1:
        if result.removed:
            success(
                f"Removed sub-issue link: #{result.removed[0]} is no longer "
                f"a sub-issue of #{parent_issue.number}"
            )
            print(f"  Former parent: {parent_issue.title}")
            return 0
        for message in result.errors:
            error(message)
        return 1

    header(f"Removing sub-issues from parent #{parent_issue.number}: {parent_issue.title}\n")
    for number in result.removed:
        success(f"#{number}")
    for message in result.errors:
        error(message)
    print(f"\nSummary: {len(result.removed)} succeeded, {len(result.errors)} failed")
    return 1 if result.errors and not result.removed else 0


def _print_subs(subs: list[SubIssue], home_repo: str) -> None:
    for sub in subs:
        mark = "[x]" if sub.state == STATE_CLOSED else "[ ]"
        full_name = sub.repository.full_name
        if full_name and full_name.lower() != home_repo.lower():
            print(f"  {mark} {full_name}#{sub.number} - {sub.title}")
        else:
            print(f"  {mark} #{sub.number} - {sub.title}")


def _summary(subs: list[SubIssue]) -> dict[str, int]:
    closed = sum(1 for sub in subs if sub.state == STATE_CLOSED)
    return {"total": len(subs), "open": len(subs) - closed, "closed": closed}
