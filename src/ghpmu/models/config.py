"""Configuration models for .gh-pmu.yml."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ..sync.field_resolver import FieldResolver


class ProjectConfig(BaseModel):
    """Target project coordinates."""

    owner: str = ""
    number: int = 0
    name: str = ""


class DefaultsConfig(BaseModel):
    """Default values used when creating or intaking issues."""

    status: str = ""
    priority: str = ""
    labels: list[str] = Field(default_factory=list)

    @field_validator("status", "priority", mode="before")
    @classmethod
    def stringify(cls, v: object) -> object:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class FieldAlias(BaseModel):
    """Maps a short field key to a project field name and value aliases.

    Example:
        priority:
          field: Priority
          values:
            p0: "P0"
            p1: "P1"
    """

    field: str = ""
    values: dict[str, str] = Field(default_factory=dict)

    @field_validator("values", mode="before")
    @classmethod
    def stringify_values(cls, v: object) -> object:
        """YAML reads `p1: 1` as an int; option names are always strings."""
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items()}
        return v


class TriageApply(BaseModel):
    """Actions a triage rule applies to each matching issue."""

    labels: list[str] = Field(default_factory=list)
    fields: dict[str, str] = Field(default_factory=dict)

    @field_validator("fields", mode="before")
    @classmethod
    def stringify_fields(cls, v: object) -> object:
        """Numeric field values such as `estimate: 3` are applied as text."""
        if isinstance(v, dict):
            return {str(k): str(val) for k, val in v.items()}
        return v


class TriageInteractive(BaseModel):
    """Fields a triage rule prompts for when run interactively."""

    status: bool = False
    estimate: bool = False


class TriageRule(BaseModel):
    """A named query plus the actions applied to its matches."""

    model_config = {"frozen": True}

    query: str = ""
    apply: TriageApply = Field(default_factory=TriageApply)
    interactive: TriageInteractive = Field(default_factory=TriageInteractive)


class OptionMetadata(BaseModel):
    name: str
    id: str


class FieldMetadata(BaseModel):
    name: str
    id: str
    data_type: str = ""
    options: list[OptionMetadata] = Field(default_factory=list)


class ProjectMetadata(BaseModel):
    id: str = ""


class Metadata(BaseModel):
    """Project IDs cached in the config file by earlier runs."""

    project: ProjectMetadata = Field(default_factory=ProjectMetadata)
    fields: list[FieldMetadata] = Field(default_factory=list)


class PmuConfig(BaseModel):
    """Root configuration model for .gh-pmu.yml."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    repositories: list[str] = Field(default_factory=list)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    fields: dict[str, FieldAlias] = Field(default_factory=dict)
    triage: dict[str, TriageRule] = Field(default_factory=dict)
    metadata: Metadata | None = None

    @field_validator("repositories")
    @classmethod
    def validate_repositories(cls, v: list[str]) -> list[str]:
        """Repositories must be in owner/repo format."""
        for repo in v:
            parts = repo.split("/")
            if len(parts) != 2 or not all(parts):
                raise ValueError(f"Invalid repository '{repo}'. Expected 'owner/repo'.")
        return v

    def validate_required(self) -> None:
        """Check that the fields every command needs are present.

        Raises:
            ValueError: If project owner, number or repositories are missing
        """
        if not self.project.owner:
            raise ValueError("project.owner is required")
        if not self.project.number:
            raise ValueError("project.number is required")
        if not self.repositories:
            raise ValueError("at least one repository is required")

    def apply_overrides(self, owner: str | None = None, number: int | None = None) -> None:
        """Override the project coordinates (from GH_PM_* environment settings)."""
        if owner:
            self.project.owner = owner
        if number:
            self.project.number = number

    @property
    def resolver(self) -> FieldResolver:
        return FieldResolver(self.fields)

    def resolve_field_value(self, field_key: str, alias: str) -> str:
        """Map an alias to its configured value; unknown aliases pass through."""
        return self.resolver.resolve_value(field_key, alias)

    def get_field_name(self, field_key: str) -> str:
        """Map a field key to its project field name; unknown keys pass through."""
        return self.resolver.resolve_field_name(field_key)

    def get_triage_rule(self, name: str) -> TriageRule | None:
        return self.triage.get(name)
