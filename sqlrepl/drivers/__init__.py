"""Database drivers and the registry that resolves URLs to them."""

from __future__ import annotations

from .base import Connection, DatabaseMetadata, Driver, IsolationLevel, ResultCursor
from .registry import DEFAULT_REGISTRY, DriverRegistry, KNOWN_DRIVERS

__all__ = [
    "Connection",
    "DatabaseMetadata",
    "DEFAULT_REGISTRY",
    "Driver",
    "DriverRegistry",
    "IsolationLevel",
    "KNOWN_DRIVERS",
    "ResultCursor",
]
