"""PostgreSQL driver that runs asyncpg behind a blocking facade."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Coroutine, Mapping, Sequence, TypeVar

import asyncpg

from .. import __version__
from ..errors import AuthenticationError, ConnectionBackendError, DataAccessError
from .base import IsolationLevel

T = TypeVar("T")

URL_PREFIXES = ("postgresql:", "postgres:")

_AUTH_ERRORS = (
    asyncpg.exceptions.InvalidPasswordError,
    asyncpg.exceptions.InvalidAuthorizationSpecificationError,
)

_TABLES_QUERY = """
    SELECT table_schema, table_name
    FROM information_schema.tables
    WHERE table_catalog = $1
      AND table_type = 'BASE TABLE'
      AND table_schema NOT IN ('pg_catalog', 'information_schema')
    ORDER BY table_schema, table_name
"""

_COLUMNS_QUERY = """
    SELECT c.column_name,
           EXISTS (
               SELECT 1
               FROM information_schema.table_constraints tc
               JOIN information_schema.key_column_usage k
                 ON tc.constraint_name = k.constraint_name
                AND tc.table_schema = k.table_schema
               WHERE tc.constraint_type = 'PRIMARY KEY'
                 AND tc.table_schema = c.table_schema
                 AND tc.table_name = c.table_name
                 AND k.column_name = c.column_name
           ) AS is_primary_key
    FROM information_schema.columns c
    WHERE c.table_schema = $1 AND c.table_name = $2
    ORDER BY c.ordinal_position
"""


class _LoopThread:
    """Private event loop running on a daemon thread."""

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            name="sqlrepl-asyncpg-driver",
            daemon=True,
        )
        self._thread.start()

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    def shutdown(self) -> None:
        if not self._loop.is_running():  # pragma: no cover
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=1)


class AsyncpgMetadata:
    """Metadata for an :class:`AsyncpgConnection`."""

    def __init__(self, connection: "AsyncpgConnection") -> None:
        self._connection = connection

    def identifier_quote_string(self) -> str | None:
        return '"'

    def stores_upper_case_identifiers(self) -> bool:
        return False

    def extra_name_characters(self) -> str | None:
        return ""

    def database_product_name(self) -> str:
        return "PostgreSQL"

    def database_product_version(self) -> str:
        version = self._connection.raw.get_server_version()
        return f"{version.major}.{version.minor}"

    def driver_name(self) -> str:
        return "sqlrepl asyncpg"

    def driver_version(self) -> str:
        return f"{__version__} (asyncpg {asyncpg.__version__})"

    def get_tables(self, catalog: str | None) -> Sequence[str]:
        rows = self._connection.run_query(_TABLES_QUERY, catalog or self._connection.catalog)
        names: list[str] = []
        for row in rows:
            schema = str(row["table_schema"])
            table = str(row["table_name"])
            names.append(table if schema == "public" else f"{schema}.{table}")
        return tuple(names)

    def get_columns(self, catalog: str | None, table: str) -> Sequence[tuple[str, bool]]:
        schema, _, name = table.rpartition(".")
        rows = self._connection.run_query(_COLUMNS_QUERY, schema or "public", name)
        return tuple((str(row["column_name"]), bool(row["is_primary_key"])) for row in rows)


class AsyncpgCursor:
    """Buffers one statement's records and hands them out DB-API style."""

    def __init__(self, connection: "AsyncpgConnection") -> None:
        self._connection = connection
        self._rows: list[tuple[object, ...]] = []
        self._position = 0
        self.description: tuple[tuple[object, ...], ...] | None = None
        self.rowcount = -1

    def execute(self, sql: str) -> "AsyncpgCursor":
        description, rows, status = self._connection.run(self._connection.execute_statement(sql))
        self.description = description
        self._rows = rows
        self._position = 0
        self.rowcount = len(rows) if description else _rowcount_from_status(status)
        return self

    def fetchone(self) -> tuple[object, ...] | None:
        if self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return row

    def close(self) -> None:
        self._rows = []
        self._position = 0


class AsyncpgConnection:
    """Blocking wrapper around an ``asyncpg.Connection``."""

    def __init__(self, raw: asyncpg.Connection, loop: _LoopThread, *, catalog: str | None) -> None:
        self._raw = raw
        self._loop = loop
        self._catalog = catalog
        self._autocommit = True
        self._transaction: Any | None = None
        self._notices: list[str] = []
        raw.add_log_listener(self._on_notice)

    @property
    def raw(self) -> asyncpg.Connection:
        return self._raw

    @property
    def closed(self) -> bool:
        return self._raw.is_closed()

    @property
    def catalog(self) -> str | None:
        return self._catalog

    @property
    def autocommit(self) -> bool:
        return self._autocommit

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        try:
            return self._loop.run(coro)
        except asyncpg.PostgresError as exc:
            raise DataAccessError(str(exc)) from exc
        except (asyncpg.InterfaceError, OSError) as exc:
            raise DataAccessError(f"Connection failure: {exc}") from exc

    def run_query(self, sql: str, *args: object) -> list[Any]:
        return self.run(self._raw.fetch(sql, *args))

    async def execute_statement(
        self, sql: str
    ) -> tuple[tuple[tuple[object, ...], ...] | None, list[tuple[object, ...]], str]:
        if not self._autocommit and self._transaction is None:
            self._transaction = self._raw.transaction()
            await self._transaction.start()
        statement = await self._raw.prepare(sql)
        attributes = statement.get_attributes()
        records = await statement.fetch()
        description = None
        if attributes:
            description = tuple(
                (attr.name, attr.type.name, None, None, None, None, None) for attr in attributes
            )
        return description, [tuple(record) for record in records], statement.get_statusmsg() or ""

    def metadata(self) -> AsyncpgMetadata:
        return AsyncpgMetadata(self)

    def cursor(self) -> AsyncpgCursor:
        if self.closed:
            raise DataAccessError("Connection is closed.")
        return AsyncpgCursor(self)

    def set_autocommit(self, enabled: bool) -> None:
        if enabled and self._transaction is not None:
            self.commit()
        self._autocommit = enabled

    def set_isolation(self, level: IsolationLevel) -> None:
        if level is IsolationLevel.NONE:
            return
        self.run(
            self._raw.execute(
                f"SET SESSION CHARACTERISTICS AS TRANSACTION ISOLATION LEVEL {level.sql_name}"
            )
        )

    def warnings(self) -> Sequence[str]:
        notices, self._notices = self._notices, []
        return tuple(notices)

    def commit(self) -> None:
        transaction, self._transaction = self._transaction, None
        if transaction is not None:
            self.run(transaction.commit())

    def rollback(self) -> None:
        transaction, self._transaction = self._transaction, None
        if transaction is not None:
            self.run(transaction.rollback())

    def close(self) -> None:
        if self.closed:
            return
        self._transaction = None
        self.run(self._raw.close())

    def _on_notice(self, _connection: object, message: object) -> None:
        self._notices.append(str(getattr(message, "message", message)))

    def __str__(self) -> str:
        return f"postgresql connection ({self._catalog})"


class AsyncpgDriver:
    """Claims ``postgresql:`` and ``postgres:`` URLs."""

    name = "asyncpg"

    def __init__(self, *, connect_timeout: float = 5.0) -> None:
        self._connect_timeout = connect_timeout
        self._loop: _LoopThread | None = None

    def accepts_url(self, url: str) -> bool:
        return url.startswith(URL_PREFIXES)

    def connect(self, url: str, info: Mapping[str, str | None]) -> AsyncpgConnection:
        loop = self._ensure_loop()
        try:
            raw, catalog = loop.run(self._open(url, info))
        except _AUTH_ERRORS as exc:
            raise AuthenticationError(f"Authentication failed for '{url}': {exc}") from exc
        except Exception as exc:
            raise ConnectionBackendError(f"Failed to connect to '{url}': {exc}") from exc
        return AsyncpgConnection(raw, loop, catalog=catalog)

    def shutdown(self) -> None:
        """Stop the background event loop (testing helper)."""

        if self._loop is not None:
            self._loop.shutdown()
            self._loop = None

    async def _open(self, url: str, info: Mapping[str, str | None]) -> tuple[asyncpg.Connection, str | None]:
        kwargs: dict[str, object] = {"dsn": url, "timeout": self._connect_timeout}
        if info.get("user"):
            kwargs["user"] = info["user"]
        if info.get("password"):
            kwargs["password"] = info["password"]
        raw = await asyncpg.connect(**kwargs)
        try:
            catalog = await raw.fetchval("SELECT current_database()")
        except Exception:
            await raw.close()
            raise
        return raw, catalog

    def _ensure_loop(self) -> _LoopThread:
        if self._loop is None:
            self._loop = _LoopThread()
        return self._loop


def _rowcount_from_status(status: str) -> int:
    # "INSERT 0 3", "UPDATE 2", "CREATE TABLE"
    tail = status.rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else -1


__all__ = ["AsyncpgConnection", "AsyncpgCursor", "AsyncpgDriver", "AsyncpgMetadata"]
