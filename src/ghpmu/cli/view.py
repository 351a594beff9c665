"""View command: one issue with its project fields and sub-issue progress."""

import logging
from typing import Any

from ..config import Settings
from ..github.client import GitHubClientError
from ..models import STATE_CLOSED, Comment, FieldValue, Issue, SubIssue
from ..sync.paged import PagedCollector
from ..utils.references import parse_issue_reference
from .context import open_context, sub_issue_to_dict
from .output import dim, error, header, print_json, progress_bar

logger = logging.getLogger(__name__)


def run_view(
    settings: Settings,
    reference: str,
    comments: bool = False,
    as_json: bool = False,
) -> int:
    """Show an issue with its project fields, parent, sub-issues and comments.

    Sub-issue, parent and comment lookups are best-effort: a failure hides
    that section instead of failing the command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    ctx = open_context(settings)
    if ctx is None:
        return 1

    config = ctx.config
    backend = ctx.backend
    try:
        ref = parse_issue_reference(reference).with_default(config.repositories[0])
        issue = backend.get_issue(ref.owner, ref.repo, ref.number)

        project = backend.get_project(config.project.owner, config.project.number)
        field_values: list[FieldValue] = []
        for item in PagedCollector(backend).fetch_all(project.id):
            if item.issue is not None and item.issue.key.lower() == issue.key.lower():
                field_values = item.field_values
                break

        subs: list[SubIssue] = _best_effort(
            [], backend.get_sub_issues, ref.owner, ref.repo, ref.number
        )
        parent: Issue | None = _best_effort(
            None, backend.get_parent_issue, ref.owner, ref.repo, ref.number
        )
        notes: list[Comment] = (
            _best_effort([], backend.get_issue_comments, ref.owner, ref.repo, ref.number)
            if comments
            else []
        )
    except ValueError as e:
        error(str(e))
        return 1
    except GitHubClientError as e:
        error(f"Failed to get issue: {e}")
        return 1
    finally:
        ctx.close()

    if as_json:
        print_json(_to_json(issue, field_values, subs, parent, notes))
    else:
        _print_issue(issue, field_values, subs, parent, notes)
    return 0


def _best_effort(default: Any, fetch: Any, *args: Any) -> Any:
    try:
        return fetch(*args)
    except GitHubClientError as e:
        logger.warning("%s failed: %s", getattr(fetch, "__name__", "lookup"), e)
        return default


def _progress(subs: list[SubIssue]) -> tuple[int, int]:
    closed = sum(1 for sub in subs if sub.state == STATE_CLOSED)
    return closed, len(subs)


def _to_json(
    issue: Issue,
    field_values: list[FieldValue],
    subs: list[SubIssue],
    parent: Issue | None,
    notes: list[Comment],
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "number": issue.number,
        "title": issue.title,
        "state": issue.state,
        "body": issue.body,
        "url": issue.url,
        "author": issue.author.login if issue.author else "",
        "assignees": issue.assignee_logins,
        "labels": issue.label_names,
        "fieldValues": {fv.field: fv.value for fv in field_values},
    }
    if issue.milestone:
        data["milestone"] = issue.milestone.title
    if subs:
        closed, total = _progress(subs)
        data["subIssues"] = [sub_issue_to_dict(sub) for sub in subs]
        data["subProgress"] = {
            "total": total,
            "completed": closed,
            "percentage": closed * 100 // total,
        }
    if parent is not None:
        data["parentIssue"] = {"number": parent.number, "title": parent.title, "url": parent.url}
    if notes:
        data["comments"] = [
            {"author": c.author, "body": c.body, "createdAt": c.created_at} for c in notes
        ]
    return data


def _print_issue(
    issue: Issue,
    field_values: list[FieldValue],
    subs: list[SubIssue],
    parent: Issue | None,
    notes: list[Comment],
) -> None:
    header(f"{issue.title} #{issue.number}")
    print(f"State: {issue.state}")
    print(f"URL: {issue.url}")
    print()
    if issue.author:
        print(f"Author: @{issue.author.login}")
    if issue.assignees:
        print(f"Assignees: {', '.join('@' + login for login in issue.assignee_logins)}")
    if issue.labels:
        print(f"Labels: {', '.join(issue.label_names)}")
    if issue.milestone:
        print(f"Milestone: {issue.milestone.title}")

    if field_values:
        print()
        print("Project Fields:")
        for fv in field_values:
            print(f"  {fv.field}: {fv.value}")

    if parent is not None:
        print()
        print(f"Parent Issue: #{parent.number} - {parent.title}")

    if subs:
        print()
        print("Sub-Issues:")
        for sub in subs:
            mark = "[x]" if sub.state == STATE_CLOSED else "[ ]"
            full_name = sub.repository.full_name
            if full_name and full_name.lower() != issue.repository.full_name.lower():
                print(f"  {mark} {full_name}#{sub.number} - {sub.title}")
            else:
                print(f"  {mark} #{sub.number} - {sub.title}")
        closed, total = _progress(subs)
        print(f"  Progress: {progress_bar(closed, total)}")

    if issue.body:
        print()
        print(issue.body)

    if notes:
        print()
        print(f"Comments ({len(notes)}):")
        for note in notes:
            print()
            print(dim(f"@{note.author} · {note.created_at}"))
            print(note.body)
