"""Lazily fetched table and column metadata for one connection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from .drivers.base import Connection, DatabaseMetadata
from .errors import DataAccessError

LOG = logging.getLogger(__name__)

MetadataSource = Callable[[], tuple[Connection, DatabaseMetadata]]


@dataclass(frozen=True, slots=True)
class Column:
    name: str
    is_primary_key: bool = False


@dataclass(slots=True)
class Table:
    """A table whose columns are fetched on first access."""

    name: str
    _schema: "Schema | None" = field(default=None, repr=False, compare=False)
    _columns: list[Column] | None = field(default=None, repr=False, compare=False)

    @property
    def columns(self) -> list[Column]:
        if self._columns is None:
            self._columns = self._schema.fetch_columns(self.name) if self._schema else []
        return self._columns

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)


@dataclass(frozen=True, slots=True)
class TableFetch:
    """Outcome of a table listing: the tables read, or the error that stopped it."""

    tables: list[Table]
    error: DataAccessError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Schema:
    """Caches the table list of the connected catalog.

    The list is fetched once; later calls return the same list object. A
    failed fetch is cached as an empty list and never retried unless
    :meth:`invalidate` is called. With ``strict=True`` the failure is raised
    instead.
    """

    def __init__(self, source: MetadataSource, *, strict: bool = False) -> None:
        self._source = source
        self._strict = strict
        self._tables: list[Table] | None = None
        self._last_error: DataAccessError | None = None

    @property
    def last_error(self) -> DataAccessError | None:
        return self._last_error

    @property
    def loaded(self) -> bool:
        return self._tables is not None

    def get_tables(self) -> list[Table]:
        if self._tables is not None:
            return self._tables
        result = self.fetch_tables()
        self._tables = result.tables
        self._last_error = result.error
        if result.error is not None and self._strict:
            raise result.error
        return self._tables

    def get_table(self, name: str) -> Table | None:
        folded = name.casefold()
        for table in self.get_tables():
            if table.name.casefold() == folded:
                return table
        return None

    def table_names(self) -> list[str]:
        return sorted({table.name for table in self.get_tables()})

    def invalidate(self) -> None:
        """Forget cached tables so the next access fetches again."""

        self._tables = None
        self._last_error = None

    def fetch_tables(self) -> TableFetch:
        """Read the table list without touching the cache."""

        tables: list[Table] = []
        seen: set[str] = set()
        try:
            connection, metadata = self._source()
            for name in metadata.get_tables(connection.catalog):
                if name in seen:
                    continue
                seen.add(name)
                tables.append(Table(name=name, _schema=self))
        except Exception as exc:
            error = exc if isinstance(exc, DataAccessError) else DataAccessError(str(exc))
            LOG.debug("Table listing failed", extra={"error": str(exc)})
            return TableFetch(tables=[], error=error)
        return TableFetch(tables=tables)

    def fetch_columns(self, table: str) -> list[Column]:
        try:
            connection, metadata = self._source()
            return [
                Column(name=name, is_primary_key=is_pk)
                for name, is_pk in metadata.get_columns(connection.catalog, table)
            ]
        except Exception as exc:
            if self._strict:
                if isinstance(exc, DataAccessError):
                    raise
                raise DataAccessError(str(exc)) from exc
            LOG.debug("Column listing failed", extra={"table": table, "error": str(exc)})
            return []


__all__ = ["Column", "MetadataSource", "Schema", "Table", "TableFetch"]
