"""Tests for splitting checklists into sub-issues."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ghpmu.github.client import GitHubClientError
from ghpmu.models import Issue, PmuConfig, Repository
from ghpmu.sync.split import SplitOperation, parse_checklist

PARENT_BODY = """Plan:

- [ ] Write the parser
- [x] Pick a name
  - [ ]   Add tests
* [ ] not a dash item
- [] Ship it
"""


def _issue(number: int, title: str = "", body: str = "") -> Issue:
    return Issue(
        id=f"I_{number}",
        number=number,
        title=title or f"Issue {number}",
        body=body,
        repository=Repository(owner="acme", name="api"),
    )


@pytest.fixture
def config() -> PmuConfig:
    return PmuConfig(project={"owner": "acme", "number": 3}, repositories=["acme/api"])


@pytest.fixture
def backend() -> MagicMock:
    backend = MagicMock()
    backend.get_issue.return_value = _issue(10, "Epic", PARENT_BODY)
    created = iter(range(11, 20))
    backend.create_issue.side_effect = lambda owner, repo, title, body: _issue(
        next(created), title
    )
    return backend


class TestParseChecklist:
    """Tests for parse_checklist."""

    def test_unchecked_items_in_order(self):
        assert parse_checklist(PARENT_BODY) == ["Write the parser", "Add tests", "Ship it"]

    def test_empty(self):
        assert parse_checklist("") == []
        assert parse_checklist("no tasks here") == []


class TestSplit:
    """Tests for SplitOperation."""

    def test_creates_and_links_each_task(self, config, backend):
        result = SplitOperation(config, backend).run("#10", source="body")

        assert result.status == "completed"
        assert [i.title for i in result.created] == ["Write the parser", "Add tests", "Ship it"]
        assert result.failed == 0
        backend.get_issue.assert_called_once_with("acme", "api", 10)
        backend.create_issue.assert_any_call("acme", "api", "Write the parser", "")
        assert [c.args for c in backend.add_sub_issue.call_args_list] == [
            ("I_10", "I_11"),
            ("I_10", "I_12"),
            ("I_10", "I_13"),
        ]

    def test_explicit_tasks(self, config, backend):
        result = SplitOperation(config, backend).run("acme/web#10", tasks=["One", "  ", "Two"])

        assert result.tasks == ["One", "Two"]
        backend.get_issue.assert_called_once_with("acme", "web", 10)
        backend.create_issue.assert_any_call("acme", "web", "One", "")

    def test_tasks_from_file(self, config, backend, tmp_path: Path):
        tasks_file = tmp_path / "tasks.md"
        tasks_file.write_text("- [ ] From file\n")

        result = SplitOperation(config, backend).run("10", source=str(tasks_file))

        assert result.tasks == ["From file"]

    def test_dry_run(self, config, backend):
        result = SplitOperation(config, backend).run("10", source="body", dry_run=True)

        assert result.status == "dry-run"
        assert len(result.tasks) == 3
        assert result.failed == 0
        backend.create_issue.assert_not_called()

    def test_no_tasks_in_body(self, config, backend):
        backend.get_issue.return_value = _issue(10, "Epic", "nothing to do")

        result = SplitOperation(config, backend).run("10", source="body")

        assert result.status == "no-tasks"
        backend.create_issue.assert_not_called()

    def test_no_source_or_tasks(self, config, backend):
        with pytest.raises(ValueError, match="no tasks specified"):
            SplitOperation(config, backend).run("10")

    def test_bare_number_without_repositories(self, backend):
        config = PmuConfig(project={"owner": "acme", "number": 3})

        with pytest.raises(ValueError, match="no repository"):
            SplitOperation(config, backend).run("10", tasks=["One"])

    def test_create_failure_skips_task(self, config, backend):
        backend.create_issue.side_effect = [
            _issue(11, "One"),
            GitHubClientError("validation failed"),
        ]

        result = SplitOperation(config, backend).run("10", tasks=["One", "Two"])

        assert [i.number for i in result.created] == [11]
        assert result.failed == 1
        assert "'Two'" in result.errors[0]

    def test_link_failure_still_counts_as_created(self, config, backend):
        backend.add_sub_issue.side_effect = GitHubClientError("limit reached")

        result = SplitOperation(config, backend).run("10", tasks=["One"])

        assert [i.number for i in result.created] == [11]
        assert result.failed == 0
        assert "failed to link" in result.errors[0]
