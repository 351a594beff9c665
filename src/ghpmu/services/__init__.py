"""Services layer."""

from .config_service import ConfigError, ConfigService
from .filter_service import FilterService, ItemFilter

__all__ = ["ConfigError", "ConfigService", "FilterService", "ItemFilter"]
