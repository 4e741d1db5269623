"""Error hierarchy for mountgrep."""
from __future__ import annotations


class GrepError(Exception):
    """Base error for all mountgrep errors."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class UsageError(GrepError):
    """Bad or missing flags, or no pattern."""


class InvalidPatternError(GrepError):
    """The pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str, *, cause: Exception | None = None) -> None:
        super().__init__(f"invalid pattern '{pattern}': {reason}", cause=cause)
        self.pattern = pattern
        self.reason = reason


class LocalIOError(GrepError):
    """A local file or directory could not be read."""

    def __init__(self, path: str, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(f"{path}: {message}", cause=cause)
        self.path = path


# ---------------------------------------------------------------------------
# Remote substrate errors
# ---------------------------------------------------------------------------


class BackendError(GrepError):
    """The remote substrate failed to answer a call."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code


class BackendNotFoundError(BackendError):
    """The substrate has nothing at the requested path."""


class BackendUnavailableError(BackendError):
    """Server-side failure reported by the substrate."""


class NetworkError(BackendError):
    """The substrate could not be reached."""


class RequestTimeoutError(BackendError):
    """A substrate call timed out."""


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------


def error_from_status_code(status_code: int, message: str) -> BackendError:
    """Map an HTTP status code to the appropriate error type."""
    if status_code == 404:
        return BackendNotFoundError(message, status_code=status_code)
    if status_code == 408:
        return RequestTimeoutError(message, status_code=status_code)
    if 500 <= status_code <= 599:
        return BackendUnavailableError(message, status_code=status_code)
    return BackendError(message, status_code=status_code)
