"""Data models."""

from .config import (
    DefaultsConfig,
    FieldAlias,
    PmuConfig,
    ProjectConfig,
    TriageApply,
    TriageInteractive,
    TriageRule,
)
from .issue import (
    STATE_CLOSED,
    STATE_OPEN,
    Actor,
    Comment,
    FieldOption,
    FieldValue,
    HierarchyNode,
    Issue,
    ItemsPage,
    Label,
    Milestone,
    Project,
    ProjectField,
    ProjectItem,
    Repository,
    SubIssue,
    issue_key,
)
from .results import (
    CreateResult,
    IntakeResult,
    MoveResult,
    SplitResult,
    SubListResult,
    SubRemoveResult,
    TriageOutcome,
    TriageResult,
    TriageStatus,
)

__all__ = [
    "STATE_CLOSED",
    "STATE_OPEN",
    "Actor",
    "Comment",
    "CreateResult",
    "DefaultsConfig",
    "FieldAlias",
    "FieldOption",
    "FieldValue",
    "HierarchyNode",
    "IntakeResult",
    "Issue",
    "ItemsPage",
    "Label",
    "Milestone",
    "MoveResult",
    "PmuConfig",
    "Project",
    "ProjectConfig",
    "ProjectField",
    "ProjectItem",
    "Repository",
    "SplitResult",
    "SubIssue",
    "SubListResult",
    "SubRemoveResult",
    "TriageApply",
    "TriageInteractive",
    "TriageOutcome",
    "TriageResult",
    "TriageRule",
    "TriageStatus",
    "issue_key",
]
