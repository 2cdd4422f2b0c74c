"""Pagination bar shown under the session and lock tables."""

from textual.reactive import reactive
from textual.widgets import Static

from ..models.query import Page


class PaginationBar(Static):
    """Page position, total rows and page size on one line."""

    DEFAULT_CSS = """
    PaginationBar {
        dock: bottom;
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    page_num = reactive(1)
    page_size = reactive(10)
    total = reactive(0)
    loading = reactive(False)

    def render(self) -> str:
        pages = Page(total=self.total).page_count(self.page_size)
        marker = "  loading…" if self.loading else ""
        return (
            f"  page {self.page_num}/{pages}  │  {self.total} total  │"
            f"  {self.page_size} / page{marker}  │  \\[ ] page  - + size"
        )

    def update_from_state(self, page_num: int, page_size: int, total: int, loading: bool) -> None:
        self.page_num = page_num
        self.page_size = page_size
        self.total = total
        self.loading = loading
