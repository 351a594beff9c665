"""Tests for idempotent project membership."""

from unittest.mock import MagicMock

import pytest

from ghpmu.github.client import GitHubClientError, GitHubGraphQLError
from ghpmu.sync.errors import ItemIdUnavailableError
from ghpmu.sync.membership import ensure_member


class TestEnsureMember:
    """Tests for ensure_member."""

    def test_new_item(self):
        """Adding a new issue returns the new item ID."""
        backend = MagicMock()
        backend.add_item_to_project.return_value = "PVTI_1"

        assert ensure_member(backend, "PVT_1", "I_1") == "PVTI_1"
        backend.add_item_to_project.assert_called_once_with("PVT_1", "I_1")
        backend.find_project_item_id.assert_not_called()

    def test_existing_item_returned_by_add(self):
        """GitHub answering a duplicate add with the item is a success."""
        backend = MagicMock()
        backend.add_item_to_project.return_value = "PVTI_existing"

        assert ensure_member(backend, "PVT_1", "I_1") == "PVTI_existing"
        assert ensure_member(backend, "PVT_1", "I_1") == "PVTI_existing"

    def test_already_exists_error_looks_up_item(self):
        """An "already exists" error falls back to looking up the item."""
        backend = MagicMock()
        backend.add_item_to_project.side_effect = GitHubGraphQLError(
            "GraphQL errors: Content already exists in this project"
        )
        backend.find_project_item_id.return_value = "PVTI_9"

        assert ensure_member(backend, "PVT_1", "I_1") == "PVTI_9"
        backend.find_project_item_id.assert_called_once_with("PVT_1", "I_1")

    def test_already_exists_without_item_id_fails(self):
        """When the existing item cannot be found, the error says so."""
        backend = MagicMock()
        backend.add_item_to_project.side_effect = GitHubGraphQLError("item already exists")
        backend.find_project_item_id.return_value = None

        with pytest.raises(ItemIdUnavailableError, match="could not determine item id"):
            ensure_member(backend, "PVT_1", "I_1")

    def test_empty_item_id_triggers_lookup(self):
        backend = MagicMock()
        backend.add_item_to_project.return_value = ""
        backend.find_project_item_id.return_value = "PVTI_2"

        assert ensure_member(backend, "PVT_1", "I_1") == "PVTI_2"

    def test_other_errors_propagate(self):
        backend = MagicMock()
        backend.add_item_to_project.side_effect = GitHubClientError("boom")

        with pytest.raises(GitHubClientError, match="boom"):
            ensure_member(backend, "PVT_1", "I_1")
        backend.find_project_item_id.assert_not_called()
