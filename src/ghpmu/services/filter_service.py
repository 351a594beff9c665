"""Service for filtering project items."""

from dataclasses import dataclass

from ..models import ProjectItem


@dataclass
class ItemFilter:
    """Filters for listing project items. Empty fields match everything."""

    status: str | None = None  # Resolved Status option name
    priority: str | None = None  # Resolved Priority option name
    assignee: str | None = None
    label: str | None = None
    text: str | None = None  # Free text search in title or body
    status_field: str = "Status"
    priority_field: str = "Priority"


class FilterService:
    """Service for applying filters to project items."""

    def apply(self, items: list[ProjectItem], filter_: ItemFilter) -> list[ProjectItem]:
        """Apply filter to a list of items. Items without issue content never match."""
        return [item for item in items if self._matches(item, filter_)]

    def _matches(self, item: ProjectItem, f: ItemFilter) -> bool:
        issue = item.issue
        if issue is None:
            return False

        # Field values (case-insensitive)
        if f.status and (item.get_field_value(f.status_field) or "").lower() != f.status.lower():
            return False
        if f.priority and (
            (item.get_field_value(f.priority_field) or "").lower() != f.priority.lower()
        ):
            return False

        if f.assignee:
            wanted = f.assignee.lower()
            if not any(login.lower() == wanted for login in issue.assignee_logins):
                return False

        if f.label:
            wanted = f.label.lower()
            if not any(name.lower() == wanted for name in issue.label_names):
                return False

        # Text search (case-insensitive)
        if f.text:
            search_text = f.text.lower()
            if search_text not in issue.title.lower() and search_text not in issue.body.lower():
                return False

        return True
