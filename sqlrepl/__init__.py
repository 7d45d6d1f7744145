"""Connection management and buffered result rendering for an interactive SQL shell."""

from __future__ import annotations

__version__ = "0.1.0"

from .connection import ConnectionManager
from .errors import (
    AuthenticationError,
    ConnectionBackendError,
    DataAccessError,
    DriverResolutionError,
    InternalConsistencyError,
    SqlReplError,
    UnsupportedQuotingError,
)
from .quoting import IdentifierQuoting, detect_quoting
from .rows import BufferedRows, Row, compute_widths, scale_min_widths
from .schema import Column, Schema, Table

__all__ = [
    "AuthenticationError",
    "BufferedRows",
    "Column",
    "ConnectionBackendError",
    "ConnectionManager",
    "DataAccessError",
    "DriverResolutionError",
    "IdentifierQuoting",
    "InternalConsistencyError",
    "Row",
    "Schema",
    "SqlReplError",
    "Table",
    "UnsupportedQuotingError",
    "__version__",
    "compute_widths",
    "detect_quoting",
    "scale_min_widths",
]
