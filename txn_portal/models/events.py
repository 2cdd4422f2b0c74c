"""Custom Textual Message events for Txn Portal UI."""

from textual.message import Message

from .session import BranchSession, GlobalSession


class GlobalSessionSelected(Message):
    """Fired when the cursor moves to a global session row."""

    def __init__(self, session: GlobalSession) -> None:
        self.session = session
        super().__init__()


class BranchSessionSelected(Message):
    """Fired when the cursor moves to a branch session row."""

    def __init__(self, branch: BranchSession) -> None:
        self.branch = branch
        super().__init__()
