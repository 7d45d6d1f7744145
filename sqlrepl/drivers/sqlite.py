"""SQLite driver built on the standard library ``sqlite3`` module."""

from __future__ import annotations

import logging
import sqlite3
from typing import Mapping, Sequence

from .. import __version__
from ..errors import ConnectionBackendError, DataAccessError
from .base import IsolationLevel

LOG = logging.getLogger(__name__)

URL_PREFIX = "sqlite:"


def database_path(url: str) -> str:
    """Map ``sqlite:`` URLs onto ``sqlite3.connect`` targets.

    ``sqlite::memory:`` and a bare ``sqlite://`` open an in-memory database,
    ``sqlite:///tmp/demo.db`` opens ``/tmp/demo.db`` and ``sqlite:demo.db`` a
    path relative to the working directory.
    """

    rest = url[len(URL_PREFIX):]
    if rest.startswith("//"):
        rest = rest[2:]
    return rest or ":memory:"


class SqliteMetadata:
    """Metadata for a :class:`SqliteConnection`."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection

    def identifier_quote_string(self) -> str | None:
        return '"'

    def stores_upper_case_identifiers(self) -> bool:
        return False

    def extra_name_characters(self) -> str | None:
        return "$"

    def database_product_name(self) -> str:
        return "SQLite"

    def database_product_version(self) -> str:
        return sqlite3.sqlite_version

    def driver_name(self) -> str:
        return "sqlrepl sqlite3"

    def driver_version(self) -> str:
        return __version__

    def get_tables(self, catalog: str | None) -> Sequence[str]:
        schema = _quote(catalog or "main")
        rows = self._query(
            f"SELECT name FROM {schema}.sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return tuple(str(row[0]) for row in rows)

    def get_columns(self, catalog: str | None, table: str) -> Sequence[tuple[str, bool]]:
        schema = _quote(catalog or "main")
        rows = self._query(f"PRAGMA {schema}.table_info({_quote(table)})")
        # table_info: cid, name, type, notnull, dflt_value, pk
        return tuple((str(row[1]), bool(row[5])) for row in rows)

    def _query(self, sql: str) -> list[tuple[object, ...]]:
        try:
            return self._conn.execute(sql).fetchall()
        except sqlite3.Error as exc:
            raise DataAccessError(f"SQLite metadata query failed: {exc}") from exc


class SqliteConnection:
    """Adapts ``sqlite3.Connection`` to the sqlrepl connection protocol."""

    def __init__(self, connection: sqlite3.Connection, *, catalog: str = "main") -> None:
        self._conn = connection
        self._catalog = catalog
        self._closed = False

    @property
    def raw(self) -> sqlite3.Connection:
        return self._conn

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def catalog(self) -> str | None:
        return self._catalog

    @property
    def autocommit(self) -> bool:
        return self._conn.isolation_level is None

    def metadata(self) -> SqliteMetadata:
        if self._closed:
            raise DataAccessError("Connection is closed.")
        return SqliteMetadata(self._conn)

    def cursor(self) -> sqlite3.Cursor:
        if self._closed:
            raise DataAccessError("Connection is closed.")
        return self._conn.cursor()

    def set_autocommit(self, enabled: bool) -> None:
        self._conn.isolation_level = None if enabled else "DEFERRED"

    def set_isolation(self, level: IsolationLevel) -> None:
        if level is IsolationLevel.NONE:
            return
        # SQLite is serializable; only dirty reads can be switched on.
        flag = 1 if level is IsolationLevel.READ_UNCOMMITTED else 0
        try:
            self._conn.execute(f"PRAGMA read_uncommitted = {flag}")
        except sqlite3.Error as exc:
            raise DataAccessError(f"Cannot set isolation level: {exc}") from exc

    def warnings(self) -> Sequence[str]:
        return ()

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._conn.close()

    def __str__(self) -> str:
        return f"sqlite connection ({self._catalog})"


class SqliteDriver:
    """Claims ``sqlite:`` URLs."""

    name = "sqlite"

    def accepts_url(self, url: str) -> bool:
        return url.startswith(URL_PREFIX)

    def connect(self, url: str, info: Mapping[str, str | None]) -> SqliteConnection:
        path = database_path(url)
        try:
            # completion workers read metadata off the UI thread, serialized by the manager lock
            raw = sqlite3.connect(path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise ConnectionBackendError(f"Failed to open SQLite database '{path}': {exc}") from exc
        LOG.debug("Opened SQLite database", extra={"path": path})
        return SqliteConnection(raw)


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


__all__ = ["SqliteConnection", "SqliteDriver", "SqliteMetadata", "database_path"]
