"""Tests for sub-issue hierarchy traversal."""

from unittest.mock import MagicMock

import pytest

from ghpmu.github.client import GitHubClientError, GitHubNotFoundError
from ghpmu.models import Issue, ProjectItem, Repository, SubIssue
from ghpmu.sync.hierarchy import HierarchyWalker, build_item_index, filter_by_state


def _sub(number: int, repo: str = "", state: str = "OPEN") -> SubIssue:
    owner, _, name = repo.partition("/")
    return SubIssue(
        id=f"I_{number}",
        number=number,
        title=f"Issue {number}",
        state=state,
        repository=Repository(owner=owner, name=name),
    )


class FakeTree:
    """Sub-issue lookups keyed by "owner/repo#number"."""

    def __init__(self, children: dict[str, list[SubIssue] | Exception]) -> None:
        self.children = children
        self.calls: list[str] = []

    def get_sub_issues(self, owner: str, repo: str, number: int) -> list[SubIssue]:
        key = f"{owner}/{repo}#{number}"
        self.calls.append(key)
        result = self.children.get(key, [])
        if isinstance(result, Exception):
            raise result
        return result


class TestCollect:
    """Tests for HierarchyWalker.collect."""

    @pytest.fixture
    def tree(self) -> FakeTree:
        """Root #1 with children #2 and #3; #2 has children #4 and #5."""
        return FakeTree(
            {
                "acme/api#1": [_sub(2), _sub(3)],
                "acme/api#2": [_sub(4), _sub(5)],
            }
        )

    def test_max_depth_one_returns_direct_children(self, tree):
        nodes = HierarchyWalker(tree).collect("acme", "api", 1, {}, current_depth=1, max_depth=1)

        assert [n.number for n in nodes] == [2, 3]
        assert all(n.depth == 1 for n in nodes)

    def test_full_walk_is_pre_order(self, tree):
        nodes = HierarchyWalker(tree).collect("acme", "api", 1, {}, current_depth=1, max_depth=10)

        assert [(n.number, n.depth) for n in nodes] == [(2, 1), (4, 2), (5, 2), (3, 1)]

    @pytest.mark.parametrize("current,maximum", [(1, 0), (2, 1), (5, 3), (11, 10)])
    def test_depth_beyond_max_returns_empty_without_fetching(self, tree, current, maximum):
        walker = HierarchyWalker(tree)

        assert walker.collect("acme", "api", 1, {}, current, maximum) == []
        assert tree.calls == []

    def test_item_ids_from_index(self, tree):
        index = {"acme/api#2": "PVTI_2", "acme/api#4": "PVTI_4"}

        nodes = HierarchyWalker(tree).collect("acme", "api", 1, index, 1, 10)

        by_number = {n.number: n for n in nodes}
        assert by_number[2].in_project and by_number[2].item_id == "PVTI_2"
        assert not by_number[3].in_project
        assert not by_number[5].in_project

    def test_cross_repository_children(self):
        """Children keep their own repository; missing repository means the parent's."""
        tree = FakeTree(
            {
                "acme/api#1": [_sub(7, "acme/web"), _sub(2)],
                "acme/web#7": [_sub(8)],
            }
        )

        nodes = HierarchyWalker(tree).collect("acme", "api", 1, {}, 1, 10)

        assert [n.key for n in nodes] == ["acme/web#7", "acme/web#8", "acme/api#2"]

    def test_failed_branch_does_not_stop_siblings(self):
        tree = FakeTree(
            {
                "acme/api#1": [_sub(2), _sub(3), _sub(4)],
                "acme/api#2": GitHubClientError("timeout"),
                "acme/api#3": [_sub(30)],
            }
        )
        walker = HierarchyWalker(tree)

        nodes = walker.collect("acme", "api", 1, {}, 1, 10)

        assert [n.number for n in nodes] == [2, 3, 30, 4]
        assert len(walker.warnings) == 1
        assert "acme/api#2" in walker.warnings[0]

    def test_root_failure_propagates(self):
        tree = FakeTree({"acme/api#1": GitHubNotFoundError("no such issue")})

        with pytest.raises(GitHubNotFoundError):
            HierarchyWalker(tree).collect("acme", "api", 1, {}, 1, 10)

    def test_cycle_is_visited_once(self):
        tree = FakeTree(
            {
                "acme/api#1": [_sub(2)],
                "acme/api#2": [_sub(1), _sub(3)],
            }
        )
        walker = HierarchyWalker(tree)

        nodes = walker.collect("acme", "api", 1, {}, 1, 10)

        assert [n.number for n in nodes] == [2, 3]
        assert any("already visited" in w for w in walker.warnings)


class TestRelations:
    """Tests for HierarchyWalker.relations (sub list)."""

    @pytest.fixture
    def backend(self) -> MagicMock:
        backend = MagicMock()
        backend.get_issue.return_value = Issue(
            id="I_2", number=2, title="Child", repository=Repository(owner="acme", name="api")
        )
        backend.get_parent_issue.return_value = Issue(
            id="I_1", number=1, title="Epic", repository=Repository(owner="acme", name="api")
        )

        def sub_issues(owner, repo, number):
            if number == 1:
                return [_sub(2), _sub(3, state="CLOSED"), _sub(4)]
            return [_sub(20), _sub(21, state="CLOSED")]

        backend.get_sub_issues.side_effect = sub_issues
        return backend

    def test_children(self, backend):
        result = HierarchyWalker(backend).relations(backend, "acme", "api", 2, "children", "all")

        assert [c.number for c in result.children] == [20, 21]
        assert result.parent is None
        backend.get_parent_issue.assert_not_called()

    def test_siblings_exclude_self(self, backend):
        result = HierarchyWalker(backend).relations(backend, "acme", "api", 2, "siblings", "all")

        assert result.parent is not None and result.parent.number == 1
        assert [s.number for s in result.siblings] == [3, 4]

    def test_state_filter_and_limit(self, backend):
        result = HierarchyWalker(backend).relations(
            backend, "acme", "api", 2, "all", "open", limit=1
        )

        assert [c.number for c in result.children] == [20]
        assert [s.number for s in result.siblings] == [4]

    def test_invalid_relation(self, backend):
        with pytest.raises(ValueError, match="invalid relation"):
            HierarchyWalker(backend).relations(backend, "acme", "api", 2, "cousins", "all")

    def test_invalid_state(self, backend):
        with pytest.raises(ValueError, match="invalid state"):
            HierarchyWalker(backend).relations(backend, "acme", "api", 2, "children", "merged")


class TestHelpers:
    """Tests for module helpers."""

    def test_filter_by_state(self):
        subs = [_sub(1), _sub(2, state="CLOSED")]
        assert [s.number for s in filter_by_state(subs, "open")] == [1]
        assert [s.number for s in filter_by_state(subs, "closed")] == [2]
        assert len(filter_by_state(subs, "all")) == 2

    def test_build_item_index(self):
        items = [
            ProjectItem(
                id="PVTI_1",
                issue=Issue(number=1, repository=Repository(owner="acme", name="api")),
            ),
            ProjectItem(id="PVTI_2", content_type="DraftIssue"),
        ]
        assert build_item_index(items) == {"acme/api#1": "PVTI_1"}
