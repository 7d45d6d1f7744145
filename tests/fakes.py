"""In-memory stand-ins for drivers, connections, cursors and the message sink."""

from __future__ import annotations

from typing import Callable, Mapping, Sequence

from sqlrepl.drivers.base import IsolationLevel
from sqlrepl.errors import DataAccessError


class FakeMetadata:
    def __init__(
        self,
        *,
        quote: str | None = '"',
        upper: bool = False,
        extra: str | None = "",
        product: str = "FakeDB",
        tables: Sequence[str] = ("accounts", "orders"),
        columns: Mapping[str, Sequence[tuple[str, bool]]] | None = None,
        fail_tables: bool = False,
    ) -> None:
        self.quote = quote
        self.upper = upper
        self.extra = extra
        self.product = product
        self.tables = list(tables)
        self.columns = dict(
            columns
            or {
                "accounts": (("id", True), ("email", False)),
                "orders": (("id", True), ("account_id", False), ("total", False)),
            }
        )
        self.fail_tables = fail_tables
        self.table_calls = 0
        self.column_calls = 0

    def identifier_quote_string(self) -> str | None:
        return self.quote

    def stores_upper_case_identifiers(self) -> bool:
        return self.upper

    def extra_name_characters(self) -> str | None:
        return self.extra

    def database_product_name(self) -> str:
        return self.product

    def database_product_version(self) -> str:
        return "1.0"

    def driver_name(self) -> str:
        return "fake"

    def driver_version(self) -> str:
        return "0.0"

    def get_tables(self, catalog: str | None) -> Sequence[str]:
        self.table_calls += 1
        if self.fail_tables:
            raise DataAccessError("metadata unavailable")
        return tuple(self.tables)

    def get_columns(self, catalog: str | None, table: str) -> Sequence[tuple[str, bool]]:
        self.column_calls += 1
        return tuple(self.columns.get(table, ()))


class FakeCursor:
    def __init__(
        self,
        columns: Sequence[str] = (),
        rows: Sequence[Sequence[object]] = (),
        *,
        fail_after: int | None = None,
    ) -> None:
        self.description = tuple((name, None, None, None, None, None, None) for name in columns) or None
        self.rowcount = -1
        self._rows = list(rows)
        self._position = 0
        self._fail_after = fail_after
        self.closed = False

    def execute(self, sql: str) -> "FakeCursor":
        return self

    def fetchone(self) -> Sequence[object] | None:
        if self._fail_after is not None and self._position == self._fail_after:
            raise RuntimeError("connection lost")
        if self._position >= len(self._rows):
            return None
        row = self._rows[self._position]
        self._position += 1
        return row

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    catalog = "main"

    def __init__(
        self,
        metadata: FakeMetadata | None = None,
        *,
        fail_close: bool = False,
        fail_isolation: bool = False,
        fail_metadata: bool = False,
        warnings: Sequence[str] = (),
    ) -> None:
        self._metadata = metadata or FakeMetadata()
        self.closed = False
        self.close_calls = 0
        self.fail_close = fail_close
        self.fail_isolation = fail_isolation
        self.fail_metadata = fail_metadata
        self.autocommit = True
        self.isolation: IsolationLevel | None = None
        self._warnings = list(warnings)

    def metadata(self) -> FakeMetadata:
        if self.fail_metadata:
            raise DataAccessError("no metadata")
        return self._metadata

    def cursor(self) -> FakeCursor:
        return FakeCursor()

    def set_autocommit(self, enabled: bool) -> None:
        self.autocommit = enabled

    def set_isolation(self, level: IsolationLevel) -> None:
        if self.fail_isolation:
            raise DataAccessError("isolation not supported")
        self.isolation = level

    def warnings(self) -> Sequence[str]:
        return tuple(self._warnings)

    def commit(self) -> None:
        return None

    def rollback(self) -> None:
        return None

    def close(self) -> None:
        self.close_calls += 1
        if self.fail_close:
            raise RuntimeError("close failed")
        self.closed = True


class FakeDriver:
    name = "fake"

    def __init__(
        self,
        factory: Callable[[], FakeConnection] | None = None,
        *,
        prefix: str = "fake:",
    ) -> None:
        self._factory = factory or FakeConnection
        self.prefix = prefix
        self.error: Exception | None = None
        self.connect_calls = 0
        self.connections: list[FakeConnection] = []
        self.last_info: Mapping[str, str | None] | None = None

    def accepts_url(self, url: str) -> bool:
        return url.startswith(self.prefix)

    def connect(self, url: str, info: Mapping[str, str | None]) -> FakeConnection:
        self.connect_calls += 1
        self.last_info = info
        if self.error is not None:
            raise self.error
        connection = self._factory()
        self.connections.append(connection)
        return connection


class RecordingSink:
    def __init__(self) -> None:
        self.outputs: list[tuple[str, dict[str, object]]] = []
        self.debugs: list[tuple[str, dict[str, object]]] = []
        self.errors: list[tuple[str, dict[str, object]]] = []

    def output(self, key: str, **params: object) -> None:
        self.outputs.append((key, params))

    def debug(self, key: str, **params: object) -> None:
        self.debugs.append((key, params))

    def error(self, key: str, **params: object) -> None:
        self.errors.append((key, params))

    def keys(self, channel: str) -> list[str]:
        return [key for key, _ in getattr(self, channel)]
