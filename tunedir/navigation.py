"""
Directory navigation and pagination for the browser pane.
"""
import math
from dataclasses import dataclass
from typing import List, Optional

from tunedir.listing import DirectoryEntry, DirectoryLister, sort_entries
from tunedir.logging_config import get_logger
from tunedir.paths import parent_directory, same_directory

logger = get_logger('navigation')


@dataclass(frozen=True)
class Page:
    """Visible window of a listing.

    Attributes:
        visible_from: First visible index
        visible_to: One past the last visible index
        current_page: 1-based page holding the selection, 0 for an empty listing
        total_pages: Number of pages
    """
    visible_from: int
    visible_to: int
    current_page: int
    total_pages: int


def paginate(height: int, length: int, selection: Optional[int]) -> Page:
    """Split ``length`` rows into pages of ``height`` and find the selection's page."""
    height = max(1, height)
    if length <= 0:
        return Page(0, 0, 0, 0)

    total_pages = math.ceil(length / height)
    index = min(max(selection or 0, 0), length - 1)
    page_index = index // height
    visible_from = page_index * height
    visible_to = min(visible_from + height, length)
    return Page(visible_from, visible_to, page_index + 1, total_pages)


class NavigationCursor:
    """Current directory, its sorted listing and the selected row.

    Listing failures raise ``OSError`` before anything is replaced, so a
    failed relist or directory change leaves the cursor exactly as it was.
    """

    def __init__(self, lister: DirectoryLister, directory: str, viewport_height: int = 1):
        self.lister = lister
        self.current_directory: str = directory
        self.listing: List[DirectoryEntry] = []
        self.selection_index: Optional[int] = None
        self.viewport_height: int = max(1, viewport_height)

    @property
    def selected_entry(self) -> Optional[DirectoryEntry]:
        if self.selection_index is None:
            return None
        return self.listing[self.selection_index]

    @property
    def page(self) -> Page:
        return paginate(self.viewport_height, len(self.listing), self.selection_index)

    def resize(self, viewport_height: int) -> None:
        self.viewport_height = max(1, viewport_height)

    def relist(self, substring: Optional[str] = None) -> None:
        """Reload the current directory, optionally filtered by ``substring``."""
        entries = sort_entries(self.lister.list(self.current_directory, substring or None))
        self._replace(self.current_directory, entries)

    def enter_directory(self, path: str) -> None:
        entries = sort_entries(self.lister.list(path))
        self._replace(path, entries)
        logger.debug(f"Entered {path}")

    def go_to_parent(self, root_boundary: str) -> bool:
        """Move to the parent directory unless already at ``root_boundary``.

        Returns:
            True if the directory changed
        """
        if same_directory(self.current_directory, root_boundary):
            return False
        self.enter_directory(parent_directory(self.current_directory))
        return True

    def _replace(self, directory: str, entries: List[DirectoryEntry]) -> None:
        self.current_directory = directory
        self.listing = entries
        self.selection_index = 0 if entries else None

    def move_top(self) -> None:
        if self.listing:
            self.selection_index = 0

    def move_bottom(self) -> None:
        if self.listing:
            self.selection_index = len(self.listing) - 1

    def move_up(self, step: int = 1) -> None:
        if self.selection_index is None:
            return
        self.selection_index = max(0, self.selection_index - step)

    def move_down(self, step: int = 1) -> None:
        if self.selection_index is None:
            return
        self.selection_index = min(len(self.listing) - 1, self.selection_index + step)

    def next_page(self) -> None:
        page = self.page
        if page.total_pages <= 1 or page.current_page >= page.total_pages:
            return
        self.selection_index = page.current_page * max(1, self.viewport_height)

    def previous_page(self) -> None:
        page = self.page
        if page.total_pages <= 1 or page.current_page <= 1:
            return
        self.selection_index = (page.current_page - 2) * max(1, self.viewport_height)
