"""Protocols implemented by database drivers."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable


class IsolationLevel(str, Enum):
    """Transaction isolation levels a connection can be asked to apply."""

    NONE = "TRANSACTION_NONE"
    READ_UNCOMMITTED = "TRANSACTION_READ_UNCOMMITTED"
    READ_COMMITTED = "TRANSACTION_READ_COMMITTED"
    REPEATABLE_READ = "TRANSACTION_REPEATABLE_READ"
    SERIALIZABLE = "TRANSACTION_SERIALIZABLE"

    @property
    def sql_name(self) -> str:
        return self.name.replace("_", " ")


@runtime_checkable
class ResultCursor(Protocol):
    """DB-API shaped cursor; ``sqlite3.Cursor`` satisfies it as-is."""

    @property
    def description(self) -> Sequence[Sequence[Any]] | None: ...

    @property
    def rowcount(self) -> int: ...

    def execute(self, sql: str) -> Any: ...

    def fetchone(self) -> Sequence[Any] | None: ...

    def close(self) -> None: ...


@runtime_checkable
class DatabaseMetadata(Protocol):
    """Driver supplied facts about the connected database."""

    def identifier_quote_string(self) -> str | None: ...

    def stores_upper_case_identifiers(self) -> bool: ...

    def extra_name_characters(self) -> str | None: ...

    def database_product_name(self) -> str: ...

    def database_product_version(self) -> str: ...

    def driver_name(self) -> str: ...

    def driver_version(self) -> str: ...

    def get_tables(self, catalog: str | None) -> Sequence[str]:
        """Names of the base tables visible in ``catalog``."""

    def get_columns(self, catalog: str | None, table: str) -> Sequence[tuple[str, bool]]:
        """``(column_name, is_primary_key)`` pairs for ``table`` in ordinal order."""


@runtime_checkable
class Connection(Protocol):
    """A live database handle."""

    @property
    def closed(self) -> bool: ...

    @property
    def catalog(self) -> str | None: ...

    @property
    def autocommit(self) -> bool: ...

    def metadata(self) -> DatabaseMetadata: ...

    def cursor(self) -> ResultCursor: ...

    def set_autocommit(self, enabled: bool) -> None: ...

    def set_isolation(self, level: IsolationLevel) -> None: ...

    def warnings(self) -> Sequence[str]: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class Driver(Protocol):
    """Opens connections for the URLs it claims."""

    name: str

    def accepts_url(self, url: str) -> bool: ...

    def connect(self, url: str, info: Mapping[str, str | None]) -> Connection: ...


__all__ = [
    "Connection",
    "DatabaseMetadata",
    "Driver",
    "IsolationLevel",
    "ResultCursor",
]
