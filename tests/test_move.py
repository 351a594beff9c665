"""Tests for the move operation."""

from unittest.mock import MagicMock

import pytest

from ghpmu.github.client import GitHubClientError
from ghpmu.models import (
    FieldOption,
    Issue,
    ItemsPage,
    PmuConfig,
    Project,
    ProjectField,
    ProjectItem,
    Repository,
    SubIssue,
)
from ghpmu.sync.errors import NotInProjectError
from ghpmu.sync.move import MoveOperation


def _issue(number: int) -> Issue:
    return Issue(
        id=f"I_{number}",
        number=number,
        title=f"Issue {number}",
        repository=Repository(owner="acme", name="api"),
    )


def _item(number: int) -> ProjectItem:
    return ProjectItem(id=f"PVTI_{number}", issue=_issue(number))


@pytest.fixture
def config() -> PmuConfig:
    return PmuConfig(
        project={"owner": "acme", "number": 3},
        repositories=["acme/api"],
        fields={"status": {"field": "Status", "values": {"in_progress": "In Progress"}}},
    )


@pytest.fixture
def backend() -> MagicMock:
    """Root #1 with children #2 (in project) and #3 (not in project); #2 has child #4."""
    backend = MagicMock()
    backend.get_issue.side_effect = lambda owner, repo, number: _issue(number)
    backend.get_project.return_value = Project(id="PVT_1", number=3)
    backend.get_project_items_page.return_value = ItemsPage(
        items=[_item(1), _item(2), _item(4)]
    )
    children = {
        1: [SubIssue(number=2, title="Issue 2"), SubIssue(number=3, title="Issue 3")],
        2: [SubIssue(number=4, title="Issue 4")],
    }
    backend.get_sub_issues.side_effect = lambda owner, repo, number: children.get(number, [])
    backend.get_project_fields.return_value = [
        ProjectField(
            id="F_status",
            name="Status",
            data_type="SINGLE_SELECT",
            options=[FieldOption(id="opt_ip", name="In Progress")],
        ),
        ProjectField(
            id="F_priority",
            name="Priority",
            data_type="SINGLE_SELECT",
            options=[FieldOption(id="opt_p1", name="P1")],
        ),
    ]
    return backend


class TestMovePlan:
    """Tests for MoveOperation.plan."""

    def test_requires_a_field(self, config, backend):
        with pytest.raises(ValueError, match="required"):
            MoveOperation(config, backend).plan("acme", "api", 1)
        backend.get_issue.assert_not_called()

    def test_resolves_aliases(self, config, backend):
        plan = MoveOperation(config, backend).plan(
            "acme", "api", 1, status="in_progress", priority="P1"
        )

        assert [(c.field_name, c.value) for c in plan.changes] == [
            ("Status", "In Progress"),
            ("Priority", "P1"),
        ]
        assert [t.number for t in plan.targets] == [1]
        assert plan.targets[0].item_id == "PVTI_1"

    def test_root_not_in_project(self, config, backend):
        backend.get_project_items_page.return_value = ItemsPage(items=[_item(2)])

        with pytest.raises(NotInProjectError, match="#1"):
            MoveOperation(config, backend).plan("acme", "api", 1, status="in_progress")

    def test_recursive_collects_tree(self, config, backend):
        plan = MoveOperation(config, backend).plan(
            "acme", "api", 1, status="in_progress", recursive=True
        )

        assert [(t.number, t.depth) for t in plan.targets] == [(1, 0), (2, 1), (4, 2), (3, 1)]
        assert [t.number for t in plan.skipped] == [3]

    def test_recursive_respects_depth(self, config, backend):
        plan = MoveOperation(config, backend).plan(
            "acme", "api", 1, status="in_progress", recursive=True, depth=1
        )

        assert [t.number for t in plan.targets] == [1, 2, 3]


class TestMoveApply:
    """Tests for MoveOperation.apply."""

    def test_updates_project_items_and_skips_others(self, config, backend):
        operation = MoveOperation(config, backend)
        plan = operation.plan("acme", "api", 1, status="in_progress", recursive=True)

        result = operation.apply(plan)

        assert result.updated == ["acme/api#1", "acme/api#2", "acme/api#4"]
        assert result.skipped == ["acme/api#3"]
        assert not result.has_errors
        item_ids = [c.args[1] for c in backend.update_item_field.call_args_list]
        assert item_ids == ["PVTI_1", "PVTI_2", "PVTI_4"]
        backend.get_project_fields.assert_called_once_with("PVT_1")

    def test_dry_run_does_not_mutate(self, config, backend):
        operation = MoveOperation(config, backend)
        plan = operation.plan("acme", "api", 1, status="in_progress", recursive=True)

        result = operation.apply(plan, dry_run=True)

        assert result.dry_run
        assert result.updated == ["acme/api#1", "acme/api#2", "acme/api#4"]
        backend.update_item_field.assert_not_called()

    def test_failure_continues_batch(self, config, backend):
        operation = MoveOperation(config, backend)
        plan = operation.plan("acme", "api", 1, status="in_progress", recursive=True)
        backend.update_item_field.side_effect = [None, GitHubClientError("rate limited"), None]

        result = operation.apply(plan)

        assert result.updated == ["acme/api#1", "acme/api#4"]
        assert len(result.errors) == 1
        assert "acme/api#2" in result.errors[0]

    def test_unknown_option_recorded_per_issue(self, config, backend):
        operation = MoveOperation(config, backend)
        plan = operation.plan("acme", "api", 1, status="Shipped")

        result = operation.apply(plan)

        assert result.updated == []
        assert "Shipped" in result.errors[0]
        backend.update_item_field.assert_not_called()

    def test_walk_warnings_carried(self, config, backend):
        def sub_issues(owner, repo, number):
            if number == 2:
                raise GitHubClientError("timeout")
            return [SubIssue(number=2, title="Issue 2")] if number == 1 else []

        backend.get_sub_issues.side_effect = sub_issues
        operation = MoveOperation(config, backend)
        plan = operation.plan("acme", "api", 1, status="in_progress", recursive=True)

        result = operation.apply(plan)

        assert result.updated == ["acme/api#1", "acme/api#2"]
        assert "timeout" in result.warnings[0]
