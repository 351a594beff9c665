"""Process settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process settings, read from GH_PM_* environment variables and CLI flags."""

    project_root: Path = Field(
        default=Path(),
        description="Directory containing .gh-pmu.yml",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    project_owner: str | None = Field(
        default=None,
        description="Override project.owner from the config file",
    )

    project_number: int | None = Field(
        default=None,
        description="Override project.number from the config file",
    )

    model_config = {
        "env_prefix": "GH_PM_",
    }
