"""Tests for sub-issue management."""

from unittest.mock import MagicMock

import pytest

from ghpmu.github.client import GitHubClientError
from ghpmu.models import Issue, Label, PmuConfig, Project, Repository, SubIssue
from ghpmu.sync.errors import (
    REASON_ALREADY_LINKED,
    REASON_OTHER,
    SubIssueLinkError,
    is_already_linked_error,
)
from ghpmu.sync.subissues import SubIssueService


def _issue(owner: str, repo: str, number: int, labels=()) -> Issue:
    return Issue(
        id=f"I_{repo}_{number}",
        number=number,
        title=f"Issue {number}",
        repository=Repository(owner=owner, name=repo),
        labels=[Label(name=n) for n in labels],
    )


@pytest.fixture
def config() -> PmuConfig:
    return PmuConfig(project={"owner": "acme", "number": 3}, repositories=["acme/api"])


@pytest.fixture
def backend() -> MagicMock:
    backend = MagicMock()
    backend.get_issue.side_effect = lambda owner, repo, number: _issue(
        owner, repo, number, labels=["epic"] if number == 1 else []
    )
    backend.create_issue.side_effect = (
        lambda owner, repo, title, body, labels, assignees, milestone: Issue(
            id=f"I_{repo}_50",
            number=50,
            title=title,
            repository=Repository(owner=owner, name=repo),
            labels=[Label(name=n) for n in labels],
        )
    )
    return backend


class TestResolve:
    """Tests for reference resolution."""

    def test_bare_number_uses_first_repository(self, config, backend):
        ref = SubIssueService(config, backend).resolve("#5")
        assert (ref.owner, ref.repo, ref.number) == ("acme", "api", 5)

    def test_default_repo_wins(self, config, backend):
        ref = SubIssueService(config, backend, "acme/web").resolve("5")
        assert ref.repo == "web"

    def test_qualified_reference_untouched(self, config, backend):
        ref = SubIssueService(config, backend, "acme/web").resolve("other/lib#5")
        assert (ref.owner, ref.repo) == ("other", "lib")

    def test_no_repository_available(self, backend):
        service = SubIssueService(PmuConfig(), backend)
        with pytest.raises(ValueError, match="no repository specified"):
            service.resolve("5")


class TestAdd:
    """Tests for linking existing issues."""

    def test_links_parent_and_child(self, config, backend):
        linked = SubIssueService(config, backend).add("1", "acme/web#2")

        backend.add_sub_issue.assert_called_once_with("I_api_1", "I_web_2")
        assert linked.cross_repo

    def test_already_linked(self, config, backend):
        backend.add_sub_issue.side_effect = GitHubClientError("Issue may only have one parent")

        with pytest.raises(SubIssueLinkError) as exc_info:
            SubIssueService(config, backend).add("1", "2")

        assert exc_info.value.reason == REASON_ALREADY_LINKED
        assert "#2 is already a sub-issue" in str(exc_info.value)

    def test_other_failure(self, config, backend):
        backend.add_sub_issue.side_effect = GitHubClientError("server error")

        with pytest.raises(SubIssueLinkError) as exc_info:
            SubIssueService(config, backend).add("1", "2")

        assert exc_info.value.reason == REASON_OTHER

    def test_unrelated_already_message_is_other(self, config, backend):
        """Only link-specific wording marks a child as already linked."""
        backend.add_sub_issue.side_effect = GitHubClientError("Resource already locked")

        with pytest.raises(SubIssueLinkError) as exc_info:
            SubIssueService(config, backend).add("1", "2")

        assert exc_info.value.reason == REASON_OTHER


class TestLinkErrorClassification:
    """Tests for is_already_linked_error."""

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("Issue may only have one parent", True),
            ("duplicate sub-issue", True),
            ("Label already exists", False),
            ("Resource already locked", False),
        ],
    )
    def test_markers(self, message, expected):
        assert is_already_linked_error(GitHubClientError(message)) is expected


class TestCreate:
    """Tests for creating sub-issues."""

    def test_same_repo_inherits_labels(self, config, backend):
        linked = SubIssueService(config, backend).create("1", "Child", labels=["bug"])

        backend.create_issue.assert_called_once_with(
            "acme", "api", "Child", "", ["bug", "epic"], [], None
        )
        backend.add_sub_issue.assert_called_once_with("I_api_1", "I_api_50")
        assert linked.linked
        assert not linked.cross_repo

    def test_no_inherit(self, config, backend):
        SubIssueService(config, backend).create("1", "Child", inherit_labels=False)

        assert backend.create_issue.call_args.args[4] == []

    def test_cross_repo_does_not_inherit(self, config, backend):
        linked = SubIssueService(config, backend).create("1", "Child", repo="acme/web")

        assert backend.create_issue.call_args.args[:2] == ("acme", "web")
        assert backend.create_issue.call_args.args[4] == []
        assert linked.cross_repo

    def test_repo_compare_is_case_insensitive(self, config, backend):
        SubIssueService(config, backend).create("1", "Child", repo="ACME/API")

        assert backend.create_issue.call_args.args[4] == ["epic"]

    def test_link_failure_is_warning(self, config, backend):
        backend.add_sub_issue.side_effect = GitHubClientError("nope")

        linked = SubIssueService(config, backend).create("1", "Child")

        assert not linked.linked
        assert "failed to link" in linked.warnings[0]

    def test_add_to_project(self, config, backend):
        project_backend = MagicMock()
        project_backend.get_project.return_value = Project(id="PVT_1", number=3)
        project_backend.add_item_to_project.return_value = "PVTI_50"

        linked = SubIssueService(config, backend).create(
            "1", "Child", project_backend=project_backend
        )

        project_backend.add_item_to_project.assert_called_once_with("PVT_1", "I_api_50")
        assert linked.warnings == []

    def test_project_failure_is_warning(self, config, backend):
        project_backend = MagicMock()
        project_backend.get_project.side_effect = GitHubClientError("no project")

        linked = SubIssueService(config, backend).create(
            "1", "Child", project_backend=project_backend
        )

        assert linked.linked
        assert "failed to add issue to project" in linked.warnings[0]

    def test_invalid_repo(self, config, backend):
        with pytest.raises(ValueError, match="owner/repo"):
            SubIssueService(config, backend).create("1", "Child", repo="web")
        backend.create_issue.assert_not_called()


class TestRemove:
    """Tests for unlinking sub-issues."""

    def test_batch_continues_after_failures(self, config, backend):
        def remove(parent_id, child_id):
            if child_id == "I_api_3":
                raise GitHubClientError("Issue is not a sub-issue of this parent")
            if child_id == "I_api_4":
                raise GitHubClientError("boom")

        backend.remove_sub_issue.side_effect = remove

        parent, result = SubIssueService(config, backend).remove("1", ["2", "3", "4", "5"])

        assert parent.number == 1
        assert result.removed == [2, 5]
        assert result.not_linked == [3]
        assert result.errors == ["#3: not a sub-issue of #1", "#4: boom"]

    def test_child_lookup_failure(self, config, backend):
        def get_issue(owner, repo, number):
            if number == 9:
                raise GitHubClientError("missing")
            return _issue(owner, repo, number)

        backend.get_issue.side_effect = get_issue

        _, result = SubIssueService(config, backend).remove("1", ["9"])

        assert result.errors == ["#9: failed to get issue: missing"]
        backend.remove_sub_issue.assert_not_called()


class TestListRelated:
    """Tests for listing related issues."""

    def test_children_with_state_filter(self, config, backend):
        backend.get_sub_issues.return_value = [
            SubIssue(number=2, state="OPEN"),
            SubIssue(number=3, state="CLOSED"),
        ]

        result, warnings = SubIssueService(config, backend).list_related("1", state="closed")

        assert [s.number for s in result.children] == [3]
        assert warnings == []
        backend.get_sub_issues.assert_called_once_with("acme", "api", 1)

    def test_parent_failure_is_warning(self, config, backend):
        backend.get_parent_issue.side_effect = GitHubClientError("timeout")

        result, warnings = SubIssueService(config, backend).list_related("2", relation="parent")

        assert result.parent is None
        assert "timeout" in warnings[0]
