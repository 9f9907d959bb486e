from typing import Optional


class GeminiError(Exception):
    """The AI endpoint failed, is not configured, or returned output outside the requested schema."""


class PersistenceError(Exception):
    """A call to the subjects/DSKP REST backend failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class BatchCommitError(Exception):
    """A sequential commit of DSKP items stopped part way through.

    Items before the failing one stay committed; nothing after it was attempted.
    """

    def __init__(self, committed: int, total: int, cause: Exception):
        super().__init__(f"Committed {committed} of {total} DSKP items before failure: {cause}")
        self.committed = committed
        self.total = total
        self.cause = cause
