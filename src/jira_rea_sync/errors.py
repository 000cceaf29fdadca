"""Exception hierarchy for Jira to Rea synchronization."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jira_rea_sync.sync.engine import ImportResult


class SyncError(Exception):
    """Base class for all synchronization errors."""


class AuthenticationError(SyncError):
    """Raised when an operation needs a session that is missing or invalid."""


class RangeError(SyncError, ValueError):
    """Raised when a date window is invalid (end before start)."""


class RemoteError(SyncError):
    """Non-success outcome from one of the remote services.

    Attributes:
        status_code: HTTP status code, or None for transport failures and timeouts.
        body: Raw response body, if any.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(SyncError):
    """Raised when a response body cannot be normalized into any usable shape."""


class OperationCancelled(SyncError):
    """Raised when the caller cancelled an in-flight operation.

    Attributes:
        result: Counts observed before cancelling, set when an import batch was cut short.
    """

    def __init__(self, message: str = "Operation cancelled", result: "ImportResult | None" = None) -> None:
        super().__init__(message)
        self.result = result


class ImportAborted(RemoteError):
    """A submission failed and the rest of the batch was abandoned.

    Attributes:
        result: Counts observed before the failing submission.
    """

    def __init__(self, cause: RemoteError, result: "ImportResult") -> None:
        super().__init__(str(cause), status_code=cause.status_code, body=cause.body)
        self.result = result
