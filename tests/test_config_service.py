"""Tests for ConfigService."""

from pathlib import Path
from unittest.mock import patch

import pytest

from ghpmu.config import Settings
from ghpmu.services import ConfigError, ConfigService

VALID_CONFIG = """
project:
  owner: acme
  number: 3
repositories:
  - acme/api
  - acme/web
defaults:
  status: backlog
  labels: [triage]
fields:
  priority:
    field: Priority
    values:
      p1: P1
      p2: 2
triage:
  tracked:
    query: "is:open -label:tracked"
    apply:
      labels: [tracked]
      fields:
        status: backlog
"""


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    return tmp_path


class TestConfigServiceLoading:
    """Tests for ConfigService file loading."""

    def test_load_valid_config(self, project_root: Path):
        (project_root / ".gh-pmu.yml").write_text(VALID_CONFIG)

        config = ConfigService(project_root).get_config()

        assert config.project.owner == "acme"
        assert config.project.number == 3
        assert config.repositories == ["acme/api", "acme/web"]
        assert config.defaults.labels == ["triage"]
        assert config.resolve_field_value("priority", "p2") == "2"
        assert config.get_field_name("priority") == "Priority"
        assert config.get_triage_rule("tracked").apply.labels == ["tracked"]

    def test_legacy_file_used_when_alone(self, project_root: Path):
        (project_root / ".gh-pm.yml").write_text(VALID_CONFIG)

        service = ConfigService(project_root)

        assert service.config_path.name == ".gh-pm.yml"
        assert service.get_config().project.owner == "acme"

    def test_new_file_preferred(self, project_root: Path):
        (project_root / ".gh-pm.yml").write_text("project: {owner: old, number: 1}\n")
        (project_root / ".gh-pmu.yml").write_text(VALID_CONFIG)

        assert ConfigService(project_root).get_config().project.owner == "acme"

    def test_config_is_cached(self, project_root: Path):
        path = project_root / ".gh-pmu.yml"
        path.write_text(VALID_CONFIG)
        service = ConfigService(project_root)

        first = service.get_config()
        path.write_text(VALID_CONFIG.replace("number: 3", "number: 4"))

        assert service.get_config() is first
        service.reload()
        assert service.get_config().project.number == 4

    def test_numeric_defaults_and_triage_fields(self, project_root: Path):
        """YAML numbers in defaults and triage field values load as text."""
        (project_root / ".gh-pmu.yml").write_text(
            "project: {owner: acme, number: 3}\n"
            "repositories: [acme/api]\n"
            "defaults:\n"
            "  priority: 1\n"
            "triage:\n"
            "  estimate:\n"
            "    query: is:open\n"
            "    apply:\n"
            "      fields:\n"
            "        estimate: 3\n"
        )

        config = ConfigService(project_root).get_config()

        assert config.defaults.priority == "1"
        assert config.get_triage_rule("estimate").apply.fields == {"estimate": "3"}


class TestConfigServiceErrors:
    """Tests for invalid configuration."""

    def test_missing_file(self, project_root: Path):
        with pytest.raises(ConfigError, match="no .gh-pmu.yml found"):
            ConfigService(project_root).get_config()

    def test_invalid_yaml(self, project_root: Path):
        (project_root / ".gh-pmu.yml").write_text("project: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigService(project_root).get_config()

    def test_empty_file(self, project_root: Path):
        (project_root / ".gh-pmu.yml").write_text("")

        with pytest.raises(ConfigError, match="empty"):
            ConfigService(project_root).get_config()

    def test_not_a_mapping(self, project_root: Path):
        (project_root / ".gh-pmu.yml").write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            ConfigService(project_root).get_config()

    def test_bad_repository_format(self, project_root: Path):
        (project_root / ".gh-pmu.yml").write_text(
            "project: {owner: acme, number: 3}\nrepositories: [api]\n"
        )

        with pytest.raises(ConfigError, match="owner/repo"):
            ConfigService(project_root).get_config()

    @pytest.mark.parametrize(
        "content,message",
        [
            ("project: {number: 3}\nrepositories: [acme/api]\n", "project.owner"),
            ("project: {owner: acme}\nrepositories: [acme/api]\n", "project.number"),
            ("project: {owner: acme, number: 3}\n", "repository"),
        ],
    )
    def test_missing_required(self, project_root: Path, content, message):
        (project_root / ".gh-pmu.yml").write_text(content)

        with pytest.raises(ConfigError, match=message):
            ConfigService(project_root).get_config()


class TestConfigServiceOverrides:
    """Tests for GH_PM_* environment overrides."""

    def test_env_overrides_project(self, project_root: Path):
        (project_root / ".gh-pmu.yml").write_text(VALID_CONFIG)

        env = {"GH_PM_PROJECT_OWNER": "other", "GH_PM_PROJECT_NUMBER": "9"}
        with patch.dict("os.environ", env):
            settings = Settings()

        config = ConfigService(project_root, settings).get_config()

        assert config.project.owner == "other"
        assert config.project.number == 9

    def test_override_satisfies_required(self, project_root: Path):
        (project_root / ".gh-pmu.yml").write_text("repositories: [acme/api]\n")
        settings = Settings(project_owner="acme", project_number=3)

        config = ConfigService(project_root, settings).get_config()

        assert (config.project.owner, config.project.number) == ("acme", 3)
