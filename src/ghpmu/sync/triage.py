"""Triage: bulk-apply labels and field values to issues matching a query.

A run goes through these stages:

1. Resolve the rule (named from config, or an ad-hoc query/apply pair)
2. Look up the project (fatal on failure, before any mutation)
3. Select candidates from the configured repositories with the query matcher
4. Dry run: report the candidates and stop
5. Per issue: optional y/n/q prompt, ensure project membership, add labels
   (best-effort), set fields (first failure fails that issue only), then
   optional interactive status/estimate prompts
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..github import GitHubClientError
from ..models import Issue, TriageOutcome, TriageResult, TriageRule, TriageStatus
from ..utils.references import split_repository
from .errors import FieldValueError, SyncError, TriageConfigError
from .field_setter import FieldValueSetter
from .membership import ensure_member
from .query_matcher import matches, requested_state

if TYPE_CHECKING:
    from ..models import PmuConfig, Project
    from ..repositories.protocol import TriageBackend

logger = logging.getLogger(__name__)

PromptFunc = Callable[[str], str]

# Field keys prompted for by rules with interactive flags
STATUS_KEY = "status"
ESTIMATE_KEY = "estimate"


class TriageAborted(Exception):
    """The operator quit at a prompt."""

    pass


@dataclass
class _Plan:
    """A triage rule resolved for one run."""

    name: str | None
    query: str
    labels: list[str] = field(default_factory=list)
    fields: dict[str, str] = field(default_factory=dict)
    prompt_status: bool = False
    prompt_estimate: bool = False


def parse_apply_fields(value: str | None) -> dict[str, str]:
    """Parse "status:backlog,priority:p1" into {"status": "backlog", "priority": "p1"}.

    Pairs without a colon, or with an empty key or value, are ignored.
    """
    result: dict[str, str] = {}
    if not value:
        return result

    for pair in value.split(","):
        key, sep, val = pair.strip().partition(":")
        key = key.strip()
        val = val.strip()
        if sep and key and val:
            result[key] = val
    return result


def describe_actions(rule: TriageRule) -> str:
    """One-line summary of a rule's actions for `triage --list`."""
    actions: list[str] = []
    if rule.apply.labels:
        actions.append(f"labels: {', '.join(rule.apply.labels)}")
    for key, value in rule.apply.fields.items():
        actions.append(f"{key}: {value}")

    if not actions:
        if rule.interactive.status or rule.interactive.estimate:
            return "interactive only"
        return "none"
    return "; ".join(actions)


class TriageProcessor:
    """Runs triage rules against the configured repositories."""

    def __init__(
        self,
        config: PmuConfig,
        backend: TriageBackend,
        prompt: PromptFunc = input,
        field_setter: FieldValueSetter | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            config: Loaded configuration (rules, field aliases, repositories)
            backend: GitHub capabilities used for reads and writes
            prompt: Reads one line of operator input for interactive runs
            field_setter: Shared setter (and field cache); created if omitted
        """
        self._config = config
        self._backend = backend
        self._prompt = prompt
        self._setter = field_setter or FieldValueSetter(backend)
        self._resolver = config.resolver

    def list_rules(self) -> list[tuple[str, TriageRule]]:
        """Configured rules, sorted by name."""
        return sorted(self._config.triage.items())

    def describe_plan(
        self,
        rule_name: str | None = None,
        *,
        query: str | None = None,
        apply: str | dict[str, str] | None = None,
    ) -> list[str]:
        """Describe what a run would apply, with aliases resolved."""
        plan = self._resolve_plan(rule_name, query, apply)
        lines: list[str] = []
        if plan.labels:
            lines.append(f"Add labels: {', '.join(plan.labels)}")
        for key, value in plan.fields.items():
            lines.append(f"Set {key}: {self._resolver.resolve_value(key, value)}")
        if plan.prompt_status:
            lines.append("Prompt for status (interactive)")
        if plan.prompt_estimate:
            lines.append("Prompt for estimate (interactive)")
        return lines

    def run(
        self,
        rule_name: str | None = None,
        *,
        query: str | None = None,
        apply: str | dict[str, str] | None = None,
        repo: str | None = None,
        dry_run: bool = False,
        interactive: bool = False,
    ) -> TriageResult:
        """Run a named rule or an ad-hoc query.

        Args:
            rule_name: Name of a rule under ``triage:`` in the config
            query: Ad-hoc query, used when no rule name is given
            apply: Ad-hoc field updates ("status:backlog,priority:p1" or a dict)
            repo: Restrict to one "owner/repo" instead of the configured list
            dry_run: Select and report only; never prompts or mutates
            interactive: Confirm each issue with y/n/q

        Returns:
            TriageResult with one outcome per issue reached

        Raises:
            TriageConfigError: Unknown rule, missing query or bad repository
            GitHubClientError: Project or field lookup failed
        """
        plan = self._resolve_plan(rule_name, query, apply)
        project = self._backend.get_project(
            self._config.project.owner, self._config.project.number
        )

        result = TriageResult(rule=plan.name, query=plan.query, dry_run=dry_run)
        result.matched = self.select_candidates(plan.query, repo)

        if not result.matched:
            logger.info("No issues match %r", plan.query)
            return result

        if dry_run:
            for issue in result.matched:
                result.outcomes.append(
                    TriageOutcome(issue=issue, status=TriageStatus.WOULD_PROCESS)
                )
            return result

        if plan.fields or (interactive and (plan.prompt_status or plan.prompt_estimate)):
            # Fatal before any mutation if the field set is unavailable
            self._setter.get_fields(project.id)

        for issue in result.matched:
            if interactive:
                try:
                    answer = self._ask(f"\nProcess #{issue.number}: {issue.title}? [y/n/q] ")
                except TriageAborted:
                    result.aborted = True
                    break
                answer = answer.lower()
                if answer == "q":
                    result.aborted = True
                    break
                if answer not in ("y", "yes"):
                    result.outcomes.append(
                        TriageOutcome(issue=issue, status=TriageStatus.SKIPPED)
                    )
                    continue

            outcome, aborted = self._apply(project, issue, plan, interactive)
            result.outcomes.append(outcome)
            if aborted:
                result.aborted = True
                break

        logger.info(
            "Triage complete: %d processed, %d skipped, %d failed%s",
            result.processed,
            result.skipped,
            result.failed,
            " (aborted)" if result.aborted else "",
        )
        return result

    def select_candidates(self, query: str, repo: str | None = None) -> list[Issue]:
        """Fetch issues from the target repositories and keep those matching the query.

        A repository that cannot be read is logged and skipped.
        """
        if repo:
            if "/" not in repo:
                raise TriageConfigError(
                    f"invalid repository format {repo!r}: expected owner/repo"
                )
            repositories = [repo]
        else:
            repositories = self._config.repositories

        state = requested_state(query)
        candidates: list[Issue] = []
        for repository in repositories:
            try:
                owner, name = split_repository(repository)
            except ValueError:
                logger.warning("Skipping invalid repository %r", repository)
                continue

            try:
                issues = self._backend.get_repository_issues(owner, name, state)
            except GitHubClientError as e:
                logger.warning("Failed to fetch issues from %s: %s", repository, e)
                continue

            candidates.extend(issue for issue in issues if matches(issue, query))

        logger.debug("%d candidate(s) for %r", len(candidates), query)
        return candidates

    def _resolve_plan(
        self,
        rule_name: str | None,
        query: str | None,
        apply: str | dict[str, str] | None,
    ) -> _Plan:
        if rule_name:
            rule = self._config.get_triage_rule(rule_name)
            if rule is None:
                raise TriageConfigError(
                    f"triage config {rule_name!r} not found\n"
                    "Use --list to see available configs"
                )
            return _Plan(
                name=rule_name,
                query=rule.query,
                labels=list(rule.apply.labels),
                fields=dict(rule.apply.fields),
                prompt_status=rule.interactive.status,
                prompt_estimate=rule.interactive.estimate,
            )

        if query:
            fields = apply if isinstance(apply, dict) else parse_apply_fields(apply)
            return _Plan(name=None, query=query, fields=dict(fields))

        raise TriageConfigError(
            "triage config name is required\n"
            "Use --list to see available configs, or use --query for ad-hoc triage"
        )

    def _apply(
        self, project: Project, issue: Issue, plan: _Plan, interactive: bool
    ) -> tuple[TriageOutcome, bool]:
        """Apply a plan to one issue; failures fail only this issue.

        Returns:
            (outcome, aborted) - aborted is True when the operator quit at a
            status/estimate prompt
        """
        outcome = TriageOutcome(issue=issue, status=TriageStatus.PROCESSED)

        try:
            item_id = ensure_member(self._backend, project.id, issue.id)
        except (GitHubClientError, SyncError) as e:
            return self._fail(outcome, f"failed to add issue to project: {e}"), False

        for label in plan.labels:
            if issue.has_label(label):
                continue
            try:
                self._backend.add_label(issue, label)
            except GitHubClientError as e:
                message = f"failed to add label {label!r} to {issue.key}: {e}"
                logger.warning(message)
                outcome.warnings.append(message)

        for key, value in plan.fields.items():
            try:
                self._set(project.id, item_id, key, value)
            except (FieldValueError, GitHubClientError) as e:
                return self._fail(outcome, f"failed to set {key}: {e}"), False

        if interactive:
            prompts = ((plan.prompt_status, STATUS_KEY), (plan.prompt_estimate, ESTIMATE_KEY))
            for enabled, key in prompts:
                if not enabled:
                    continue
                try:
                    value = self._ask(f"  {key.capitalize()} for #{issue.number} (blank to skip): ")
                except TriageAborted:
                    return outcome, True
                if not value:
                    continue
                try:
                    self._set(project.id, item_id, key, value, default_name=key.capitalize())
                except (FieldValueError, GitHubClientError) as e:
                    return self._fail(outcome, f"failed to set {key}: {e}"), False

        logger.info("Processed %s", issue.key)
        return outcome, False

    def _set(
        self, project_id: str, item_id: str, key: str, value: str, default_name: str | None = None
    ) -> None:
        field_name, resolved = self._resolver.resolve(key, value, default_name)
        self._setter.set_field(project_id, item_id, field_name, resolved)

    def _ask(self, message: str) -> str:
        """Prompt the operator; EOF or Ctrl-C aborts the run."""
        try:
            return self._prompt(message).strip()
        except (KeyboardInterrupt, EOFError) as e:
            raise TriageAborted() from e

    @staticmethod
    def _fail(outcome: TriageOutcome, message: str) -> TriageOutcome:
        logger.warning("Failed to process %s: %s", outcome.key, message)
        outcome.status = TriageStatus.FAILED
        outcome.error = message
        return outcome
