"""Help screen: key reference for the console.

Page 1: Transaction list
Page 2: Branch sessions and global locks
"""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from .base import ConsoleModalScreen


# Use \[ to escape brackets so Rich doesn't interpret them as markup tags
PAGE_1 = """

                            txn portal

               global transactions on the coordinator


      query                           actions on the row

      /          focus filters        d        delete
      enter      search               D        force delete
      r          refresh              s        stop / start retry
      R          reset filters        c        commit or rollback
      b          with branches        x        change status

      pages                           drill down

      \\[ / ]      prev / next          v        branch sessions
      - / +      page size            g        global locks


      other

      ?          help
      q          quit


                              \\[1/2]  n:next  q:close"""


PAGE_2 = """

                      branch sessions & locks


      branch sessions  (v, needs with branches on)

      d          delete branch
      D          force delete branch
      s          stop / start retry
      g          locks held by the branch


      global locks  (g)

      enter      search
      R          reset filters
      d          delete lock
      k          check lock
      \\[ / ]      prev / next page


      risky actions ask twice: once to confirm,
      then again with the protocol warning


                              \\[2/2]  q:close"""


PAGES = [PAGE_1, PAGE_2]


class HelpScreen(ConsoleModalScreen[None]):
    """Two-page key reference overlay."""

    DEFAULT_CSS = """
    HelpScreen #help-content {
        color: $text-muted;
    }
    """

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("space", "next_page", "Next"),
        ("n", "next_page", "Next"),
        ("p", "prev_page", "Prev"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._page_index = 0

    @property
    def page_index(self) -> int:
        return self._page_index

    def compose(self) -> ComposeResult:
        self.add_class("modal-base", "modal-md")
        with Vertical(id="dialog"):
            yield Static(PAGES[self._page_index], id="help-content")

    def _update_page(self) -> None:
        self.query_one("#help-content", Static).update(PAGES[self._page_index])

    def action_close(self) -> None:
        self.dismiss()

    def action_next_page(self) -> None:
        if self._page_index < len(PAGES) - 1:
            self._page_index += 1
            self._update_page()
        else:
            self.dismiss()

    def action_prev_page(self) -> None:
        if self._page_index > 0:
            self._page_index -= 1
            self._update_page()
