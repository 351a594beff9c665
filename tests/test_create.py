"""Tests for issue creation."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ghpmu.github.client import GitHubClientError
from ghpmu.models import FieldOption, Issue, PmuConfig, Project, ProjectField, Repository
from ghpmu.sync.create import CreateOperation, IssueDraft, load_issue_draft


@pytest.fixture
def config() -> PmuConfig:
    return PmuConfig(
        project={"owner": "acme", "number": 3},
        repositories=["acme/api"],
        defaults={"status": "backlog", "priority": "p2", "labels": ["triage"]},
        fields={
            "status": {"field": "Status", "values": {"backlog": "Backlog", "ready": "Ready"}},
            "priority": {"field": "Priority", "values": {"p2": "P2"}},
        },
    )


@pytest.fixture
def backend() -> MagicMock:
    backend = MagicMock()
    backend.create_issue.return_value = Issue(
        id="I_7", number=7, title="New", repository=Repository(owner="acme", name="api")
    )
    backend.get_project.return_value = Project(id="PVT_1", number=3)
    backend.add_item_to_project.return_value = "PVTI_7"
    backend.get_project_fields.return_value = [
        ProjectField(
            id="F_status",
            name="Status",
            data_type="SINGLE_SELECT",
            options=[
                FieldOption(id="opt_backlog", name="Backlog"),
                FieldOption(id="opt_ready", name="Ready"),
            ],
        ),
        ProjectField(
            id="F_priority",
            name="Priority",
            data_type="SINGLE_SELECT",
            options=[FieldOption(id="opt_p2", name="P2")],
        ),
    ]
    return backend


class TestCreateOperation:
    """Tests for CreateOperation.run."""

    def test_creates_adds_and_sets_defaults(self, config, backend):
        draft = IssueDraft(title="New", body="Details", labels=["bug", "triage"])

        result = CreateOperation(config, backend).run("acme", "api", draft)

        backend.create_issue.assert_called_once_with(
            "acme", "api", "New", "Details", ["triage", "bug"], [], None
        )
        backend.add_item_to_project.assert_called_once_with("PVT_1", "I_7")
        assert result.item_id == "PVTI_7"
        assert [c.args[2:] for c in backend.update_item_field.call_args_list] == [
            ("F_status", {"singleSelectOptionId": "opt_backlog"}),
            ("F_priority", {"singleSelectOptionId": "opt_p2"}),
        ]
        assert result.warnings == []

    def test_draft_status_overrides_default(self, config, backend):
        CreateOperation(config, backend).run("acme", "api", IssueDraft(title="New", status="ready"))

        first = backend.update_item_field.call_args_list[0]
        assert first.args[3] == {"singleSelectOptionId": "opt_ready"}

    def test_title_required(self, config, backend):
        with pytest.raises(ValueError, match="title"):
            CreateOperation(config, backend).run("acme", "api", IssueDraft())
        backend.create_issue.assert_not_called()

    def test_field_failure_is_warning(self, config, backend):
        backend.update_item_field.side_effect = [GitHubClientError("boom"), None]

        result = CreateOperation(config, backend).run("acme", "api", IssueDraft(title="New"))

        assert result.issue.number == 7
        assert len(result.warnings) == 1
        assert "status" in result.warnings[0]

    def test_creation_failure_propagates(self, config, backend):
        backend.create_issue.side_effect = GitHubClientError("no access")

        with pytest.raises(GitHubClientError):
            CreateOperation(config, backend).run("acme", "api", IssueDraft(title="New"))
        backend.add_item_to_project.assert_not_called()


class TestIssueDraft:
    """Tests for drafts and draft files."""

    def test_merged_with(self):
        base = IssueDraft(title="From file", body="Body", labels=["a"], status="backlog")
        flags = IssueDraft(title="From flag", labels=["a", "b"], priority="p1")

        merged = base.merged_with(flags)

        assert merged.title == "From flag"
        assert merged.body == "Body"
        assert merged.labels == ["a", "b"]
        assert merged.status == "backlog"
        assert merged.priority == "p1"

    def test_load_yaml(self, tmp_path: Path):
        path = tmp_path / "issue.yml"
        path.write_text("title: Fix login\nlabels: [bug]\nstatus: ready\n")

        draft = load_issue_draft(path)

        assert draft.title == "Fix login"
        assert draft.labels == ["bug"]
        assert draft.status == "ready"

    def test_load_json(self, tmp_path: Path):
        path = tmp_path / "issue.json"
        path.write_text('{"title": "Fix login", "assignees": ["octocat"]}')

        assert load_issue_draft(path).assignees == ["octocat"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ValueError, match="failed to read"):
            load_issue_draft(tmp_path / "missing.yml")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "issue.json"
        path.write_text("{not json")

        with pytest.raises(ValueError, match="failed to parse"):
            load_issue_draft(path)

    def test_non_mapping(self, tmp_path: Path):
        path = tmp_path / "issue.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="mapping"):
            load_issue_draft(path)

    def test_wrong_types(self, tmp_path: Path):
        path = tmp_path / "issue.yml"
        path.write_text("title: x\nlabels: {a: b}\n")

        with pytest.raises(ValueError, match="invalid issue file"):
            load_issue_draft(path)
