"""Cursor pagination over project items."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import ProjectItem
    from ..repositories.protocol import ProjectItemsReader

logger = logging.getLogger(__name__)

# GitHub's maximum page size for connections
PAGE_SIZE = 100


class PagedCollector:
    """Collects every issue item of a project across all pages."""

    def __init__(self, backend: ProjectItemsReader, page_size: int = PAGE_SIZE) -> None:
        self._backend = backend
        self._page_size = page_size

    def fetch_all(self, project_id: str, repository: str | None = None) -> list[ProjectItem]:
        """Fetch all project items whose content is an issue.

        Drafts and pull requests are dropped. Items are returned in the
        order received, each item ID once.

        Args:
            project_id: Project node ID
            repository: Optional "owner/repo" filter, applied after fetching

        Returns:
            Flat list of issue items
        """
        items: list[ProjectItem] = []
        seen: set[str] = set()
        cursor: str | None = None
        page_count = 0

        while True:
            page_count += 1
            page = self._backend.get_project_items_page(project_id, cursor, self._page_size)
            logger.debug("Page %d: fetched %d items", page_count, len(page.items))

            for item in page.items:
                if item.content_type != "Issue" or item.issue is None:
                    continue
                if item.id in seen:
                    continue
                seen.add(item.id)
                items.append(item)

            if not page.has_next_page:
                break
            if not page.end_cursor:
                logger.warning(
                    "Project %s reported another page without a cursor, stopping after page %d",
                    project_id,
                    page_count,
                )
                break
            if page.end_cursor == cursor:
                logger.warning(
                    "Project %s repeated cursor %r, stopping after page %d",
                    project_id,
                    cursor,
                    page_count,
                )
                break
            cursor = page.end_cursor

        logger.info("Fetched %d issue items in %d page(s)", len(items), page_count)

        if repository:
            wanted = repository.lower()
            items = [
                item
                for item in items
                if item.issue is not None and item.issue.repository.full_name.lower() == wanted
            ]
            logger.debug("%d items in %s", len(items), repository)

        return items
