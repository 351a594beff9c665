"""CLI entry point for ghpmu."""

import argparse
from pathlib import Path

from . import __version__
from .config import Settings
from .logging import setup_logging
from .sync.move import DEFAULT_DEPTH


def _add_json(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Output in JSON format")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="ghpmu",
        description="Sync GitHub issues with a GitHub Projects board",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory containing .gh-pmu.yml (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    # list
    p = commands.add_parser("list", aliases=["ls"], help="List issues from the project")
    p.add_argument("-s", "--status", help="Filter by status (e.g. backlog, in_progress)")
    p.add_argument("-p", "--priority", help="Filter by priority (e.g. p0, p1)")
    p.add_argument("-a", "--assignee", help="Filter by assignee login")
    p.add_argument("-l", "--label", help="Filter by label name")
    p.add_argument("-q", "--search", help="Search in issue title and body")
    p.add_argument("-n", "--limit", type=int, default=0, help="Limit results (0 for no limit)")
    p.add_argument(
        "--has-sub-issues", action="store_true", help="Only show issues with sub-issues"
    )
    _add_json(p)

    # view
    p = commands.add_parser("view", help="View an issue with its project fields")
    p.add_argument("issue", help="Issue number, owner/repo#N, or issue URL")
    p.add_argument("-c", "--comments", action="store_true", help="Show issue comments")
    _add_json(p)

    # create
    p = commands.add_parser("create", help="Create an issue and add it to the project")
    p.add_argument("-t", "--title", default="", help="Issue title")
    p.add_argument("-b", "--body", default="", help="Issue body")
    p.add_argument("-s", "--status", help="Project status (alias or option name)")
    p.add_argument("-p", "--priority", help="Project priority (alias or option name)")
    p.add_argument("-l", "--label", action="append", default=[], help="Add a label (repeatable)")
    p.add_argument(
        "-a", "--assignee", action="append", default=[], help="Assign a user (repeatable)"
    )
    p.add_argument("-m", "--milestone", help="Milestone title")
    p.add_argument("-R", "--repo", help="Target repository (owner/repo)")
    p.add_argument("-f", "--from-file", type=Path, help="Create from a YAML or JSON file")

    # move
    p = commands.add_parser("move", help="Update Status/Priority on an issue")
    p.add_argument("issue", help="Issue number, owner/repo#N, or issue URL")
    p.add_argument("-s", "--status", help="New status")
    p.add_argument("-p", "--priority", help="New priority")
    p.add_argument("-r", "--recursive", action="store_true", help="Also update all sub-issues")
    p.add_argument(
        "--depth", type=int, default=DEFAULT_DEPTH, help="Maximum recursion depth"
    )
    p.add_argument("--dry-run", action="store_true", help="Show what would change")
    p.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompt")

    # triage
    p = commands.add_parser("triage", help="Apply triage rules to matching issues")
    p.add_argument("rule", nargs="?", help="Triage rule name from .gh-pmu.yml")
    p.add_argument("--list", action="store_true", help="List configured triage rules")
    p.add_argument("--query", help="Ad-hoc query, e.g. 'is:open -label:triaged'")
    p.add_argument("--apply", help="Ad-hoc field values, e.g. 'status:backlog,priority:p2'")
    p.add_argument("-R", "--repo", help="Only triage this repository (owner/repo)")
    p.add_argument("--dry-run", action="store_true", help="Show matching issues only")
    p.add_argument(
        "-i", "--interactive", action="store_true", help="Confirm each issue (y/n/q)"
    )
    _add_json(p)

    # intake
    p = commands.add_parser("intake", help="Find open issues not yet in the project")
    p.add_argument(
        "--apply",
        nargs="?",
        const="",
        default=None,
        help="Add untracked issues, optionally setting 'status:x,priority:y'",
    )
    p.add_argument("-l", "--label", action="append", default=[], help="Filter by label")
    p.add_argument("-a", "--assignee", action="append", default=[], help="Filter by assignee")
    p.add_argument("--dry-run", action="store_true", help="Show what would be added")
    _add_json(p)

    # split
    p = commands.add_parser("split", help="Create sub-issues from a checklist")
    p.add_argument("issue", help="Parent issue")
    p.add_argument("tasks", nargs="*", help="Task titles")
    p.add_argument(
        "--from",
        dest="source",
        help="'body' to use the parent's checklist, or a markdown file path",
    )
    p.add_argument("--dry-run", action="store_true", help="Show what would be created")
    _add_json(p)

    # sub
    sub = commands.add_parser("sub", help="Manage sub-issues")
    sub_commands = sub.add_subparsers(dest="sub_command", metavar="SUBCOMMAND")
    sub_commands.required = True

    p = sub_commands.add_parser("add", help="Link an existing issue as a sub-issue")
    p.add_argument("parent")
    p.add_argument("child")
    p.add_argument("-R", "--repo", help="Default repository for bare issue numbers")

    p = sub_commands.add_parser("create", help="Create a new sub-issue")
    p.add_argument("--parent", required=True, help="Parent issue")
    p.add_argument("-t", "--title", required=True, help="Issue title")
    p.add_argument("-b", "--body", default="", help="Issue body")
    p.add_argument("-R", "--repo", help="Repository for the new issue (owner/repo)")
    p.add_argument("-l", "--label", action="append", default=[], help="Add a label")
    p.add_argument("-a", "--assignee", action="append", default=[], help="Assign a user")
    p.add_argument("-m", "--milestone", help="Milestone title")
    p.add_argument(
        "--no-inherit-labels",
        dest="inherit_labels",
        action="store_false",
        help="Do not copy the parent's labels",
    )
    p.add_argument(
        "--add-to-project", action="store_true", help="Also add the issue to the project"
    )

    p = sub_commands.add_parser("list", help="List related issues")
    p.add_argument("issue")
    p.add_argument(
        "--relation",
        default="children",
        choices=["children", "parent", "siblings", "all"],
        help="Which relations to show",
    )
    p.add_argument(
        "--state", default="all", choices=["open", "closed", "all"], help="Filter by state"
    )
    p.add_argument("-n", "--limit", type=int, default=0, help="Limit results (0 for no limit)")
    p.add_argument("-R", "--repo", help="Default repository for bare issue numbers")
    _add_json(p)

    p = sub_commands.add_parser("remove", help="Unlink sub-issues from a parent")
    p.add_argument("parent")
    p.add_argument("children", nargs="+")
    p.add_argument("-R", "--repo", help="Default repository for bare issue numbers")

    return parser


def dispatch(args: argparse.Namespace, settings: Settings) -> int:
    """Run the selected command and return its exit code."""
    command = args.command

    if command in ("list", "ls"):
        from .cli.list import run_list

        return run_list(
            settings,
            status=args.status,
            priority=args.priority,
            assignee=args.assignee,
            label=args.label,
            search=args.search,
            limit=args.limit,
            has_sub_issues=args.has_sub_issues,
            as_json=args.json,
        )

    if command == "view":
        from .cli.view import run_view

        return run_view(settings, args.issue, comments=args.comments, as_json=args.json)

    if command == "create":
        from .cli.create import run_create
        from .sync.create import IssueDraft

        draft = IssueDraft(
            title=args.title,
            body=args.body,
            labels=args.label,
            assignees=args.assignee,
            milestone=args.milestone,
            status=args.status,
            priority=args.priority,
        )
        return run_create(settings, draft, repo=args.repo, from_file=args.from_file)

    if command == "move":
        from .cli.move import run_move

        return run_move(
            settings,
            args.issue,
            status=args.status,
            priority=args.priority,
            recursive=args.recursive,
            depth=args.depth,
            dry_run=args.dry_run,
            yes=args.yes,
        )

    if command == "triage":
        from .cli.triage import run_triage

        return run_triage(
            settings,
            args.rule,
            list_rules=args.list,
            query=args.query,
            apply=args.apply,
            repo=args.repo,
            dry_run=args.dry_run,
            interactive=args.interactive,
            as_json=args.json,
        )

    if command == "intake":
        from .cli.intake import run_intake

        return run_intake(
            settings,
            apply=args.apply,
            labels=args.label,
            assignees=args.assignee,
            dry_run=args.dry_run,
            as_json=args.json,
        )

    if command == "split":
        from .cli.split import run_split

        return run_split(
            settings,
            args.issue,
            tasks=args.tasks,
            source=args.source,
            dry_run=args.dry_run,
            as_json=args.json,
        )

    from .cli import sub

    if args.sub_command == "add":
        return sub.run_sub_add(settings, args.parent, args.child, repo=args.repo)
    if args.sub_command == "create":
        return sub.run_sub_create(
            settings,
            args.parent,
            args.title,
            body=args.body,
            repo=args.repo,
            labels=args.label,
            assignees=args.assignee,
            milestone=args.milestone,
            inherit_labels=args.inherit_labels,
            add_to_project=args.add_to_project,
        )
    if args.sub_command == "list":
        return sub.run_sub_list(
            settings,
            args.issue,
            relation=args.relation,
            state=args.state,
            limit=args.limit,
            repo=args.repo,
            as_json=args.json,
        )
    return sub.run_sub_remove(settings, args.parent, args.children, repo=args.repo)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Build settings from CLI args
    settings_kwargs: dict = {}
    if args.config_dir:
        settings_kwargs["project_root"] = args.config_dir
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)

    setup_logging(settings.verbose, settings.log_file)

    raise SystemExit(dispatch(args, settings))


if __name__ == "__main__":
    main()
