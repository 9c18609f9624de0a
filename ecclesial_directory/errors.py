"""
Exception hierarchy for the data-access layer.

- `BackendError` and its subclasses mean a backend failed to answer; the data
  service may fall back to the other backend when it sees one.
- `NotFoundError` means the backend answered and the row does not exist.
- `BackendUnavailableError` means every configured backend is exhausted.
"""

from typing import Optional


class DirectoryError(Exception):
    """Base class for all directory errors."""


class BackendError(DirectoryError):
    """A backend failed to serve a request."""


class DatabaseError(BackendError):
    """The database driver reported an error."""


class TransportError(BackendError):
    """An HTTP request failed or returned a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EnvelopeError(BackendError):
    """The REST API answered 2xx with an envelope whose status is "error"."""


class NotFoundError(DirectoryError):
    """The requested row does not exist."""


class BackendUnavailableError(DirectoryError):
    """No configured backend could serve the request."""
