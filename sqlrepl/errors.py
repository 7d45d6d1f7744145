"""Error taxonomy shared by the connection, schema, and rendering layers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .rows import BufferedRows


class SqlReplError(RuntimeError):
    """Base class for errors raised by sqlrepl."""


class ConnectionBackendError(SqlReplError):
    """Raised when a connection cannot be established."""


class DriverResolutionError(ConnectionBackendError):
    """Raised when no usable driver claims the connection URL."""


class AuthenticationError(ConnectionBackendError):
    """Raised when the database rejects the supplied credentials."""


class DataAccessError(SqlReplError):
    """Raised when metadata or cursor operations fail.

    When a cursor fails while being drained, ``rows`` holds the partially
    built store so callers can still show what was read.
    """

    def __init__(self, message: str, *, rows: "BufferedRows | None" = None) -> None:
        super().__init__(message)
        self.rows = rows


class UnsupportedQuotingError(SqlReplError):
    """Reported when a dialect uses a multi-character identifier quote."""

    def __init__(self, quote: str) -> None:
        super().__init__(
            f"Identifier quote string is '{quote}'; quote strings longer than 1 char are not supported"
        )
        self.quote = quote


class InternalConsistencyError(SqlReplError):
    """Raised when the column width allocation hits an impossible state."""


__all__ = [
    "AuthenticationError",
    "ConnectionBackendError",
    "DataAccessError",
    "DriverResolutionError",
    "InternalConsistencyError",
    "SqlReplError",
    "UnsupportedQuotingError",
]
