"""Triage command: apply rules to issues matching a query."""

import logging

from ..config import Settings
from ..github.client import GitHubClientError
from ..models import PmuConfig, TriageResult, TriageStatus
from ..sync.errors import SyncError
from ..sync.triage import TriageProcessor, describe_actions
from .context import issue_to_dict, load_config, open_context, truncate
from .output import error, header, info, print_json, success, table, warning

logger = logging.getLogger(__name__)


def run_triage(
    settings: Settings,
    rule_name: str | None = None,
    list_rules: bool = False,
    query: str | None = None,
    apply: str | None = None,
    repo: str | None = None,
    dry_run: bool = False,
    interactive: bool = False,
    as_json: bool = False,
) -> int:
    """Run a configured triage rule, or an ad-hoc --query/--apply pair.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    if list_rules:
        config = load_config(settings)
        if config is None:
            return 1
        return _list_rules(config, as_json)

    ctx = open_context(settings)
    if ctx is None:
        return 1

    processor = TriageProcessor(ctx.config, ctx.backend)
    actions: list[str] = []
    try:
        if dry_run and not as_json:
            actions = processor.describe_plan(rule_name, query=query, apply=apply)
        result = processor.run(
            rule_name,
            query=query,
            apply=apply,
            repo=repo,
            dry_run=dry_run,
            interactive=interactive,
        )
    except (GitHubClientError, SyncError) as e:
        error(str(e))
        return 1
    finally:
        ctx.close()

    if as_json:
        print_json(_to_json(result))
        return 0 if not result.has_errors else 1

    label = f"triage config {result.rule!r}" if result.rule else f"query {result.query!r}"
    if not result.matched:
        info(f"No issues match the {label}")
        return 0

    if dry_run:
        header(f"Would process {len(result.matched)} issue(s) with {label}:\n")
        _issue_table(result)
        print()
        if actions:
            print("Actions to apply:")
            for line in actions:
                print(f"  • {line}")
        return 0

    for outcome in result.outcomes:
        for message in outcome.warnings:
            warning(message)
        if outcome.error:
            error(f"#{outcome.issue.number}: {outcome.error}")
        elif outcome.status == TriageStatus.PROCESSED:
            success(f"Processed #{outcome.issue.number}: {outcome.issue.title}")

    if result.aborted:
        info("Aborted.")

    print(
        f"\nTriage complete: {result.processed} processed, "
        f"{result.skipped} skipped, {result.failed} failed"
    )
    return 0 if not result.has_errors else 1


def _list_rules(config: PmuConfig, as_json: bool) -> int:
    rules = sorted(config.triage.items())
    if as_json:
        print_json(
            [
                {
                    "name": name,
                    "query": rule.query,
                    "applyLabels": rule.apply.labels,
                    "applyFields": rule.apply.fields,
                }
                for name, rule in rules
            ]
        )
        return 0

    if not rules:
        info("No triage configurations defined in .gh-pmu.yml")
        return 0

    table(
        ["NAME", "QUERY", "ACTIONS"],
        [[name, rule.query, describe_actions(rule)] for name, rule in rules],
    )
    return 0


def _issue_table(result: TriageResult) -> None:
    table(
        ["NUMBER", "TITLE", "STATE", "LABELS"],
        [
            [
                f"#{issue.number}",
                truncate(issue.title),
                issue.state,
                ", ".join(issue.label_names) or "-",
            ]
            for issue in result.matched
        ],
    )


def _to_json(result: TriageResult) -> dict:
    if result.dry_run or not result.matched:
        issues = result.matched
    else:
        issues = [o.issue for o in result.outcomes if o.status == TriageStatus.PROCESSED]
    return {
        "status": result.status,
        "configName": result.rule or "ad-hoc",
        "count": len(issues),
        "issues": [issue_to_dict(issue) for issue in issues],
        "processed": result.processed,
        "skipped": result.skipped,
        "failed": result.failed,
    }
