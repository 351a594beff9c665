"""Configuration service for loading .gh-pmu.yml."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..config import Settings
from ..models import PmuConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration is missing or invalid."""

    pass


class ConfigService:
    """Service for loading and caching the project configuration."""

    CONFIG_FILE = ".gh-pmu.yml"
    LEGACY_CONFIG_FILE = ".gh-pm.yml"

    def __init__(self, project_root: Path, settings: Settings | None = None) -> None:
        """Initialize the config service.

        Args:
            project_root: Directory containing the config file
            settings: Process settings carrying GH_PM_* project overrides
        """
        self.project_root = project_root
        self._settings = settings
        self._config: PmuConfig | None = None

    @property
    def config_path(self) -> Path:
        """The config file in use; the legacy name is used only when it alone exists."""
        path = self.project_root / self.CONFIG_FILE
        legacy = self.project_root / self.LEGACY_CONFIG_FILE
        if not path.exists() and legacy.exists():
            return legacy
        return path

    def get_config(self) -> PmuConfig:
        """Get configuration, loading from file if not cached.

        Raises:
            ConfigError: Missing file, invalid YAML, or invalid content
        """
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def reload(self) -> None:
        """Clear cached configuration, forcing reload on next access."""
        self._config = None

    def _load_config(self) -> PmuConfig:
        config_path = self.config_path

        if not config_path.exists():
            raise ConfigError(
                f"no {self.CONFIG_FILE} found in {self.project_root.resolve()}"
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path.name}: {e}") from e

        if data is None:
            raise ConfigError(f"{config_path.name} is empty")
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path.name} must contain a mapping")

        try:
            config = PmuConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid {config_path.name}: {e}") from e

        if self._settings is not None:
            config.apply_overrides(self._settings.project_owner, self._settings.project_number)

        try:
            config.validate_required()
        except ValueError as e:
            raise ConfigError(f"Invalid {config_path.name}: {e}") from e

        logger.info(
            "Loaded %s: project %s/%d, %d repositories",
            config_path.name,
            config.project.owner,
            config.project.number,
            len(config.repositories),
        )
        return config
