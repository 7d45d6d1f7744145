"""Query execution against the managed connection."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from .connection import ConnectionManager
from .errors import DataAccessError, SqlReplError
from .rows import BufferedRows

LOG = logging.getLogger(__name__)


class QueryExecutionError(SqlReplError):
    """Raised when a query fails to execute."""


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Outcome of one statement: buffered rows, or a status for statements without rows."""

    rows: BufferedRows | None
    status: str
    elapsed_ms: int
    row_count: int | None = None

    @property
    def columns(self) -> tuple[str, ...]:
        return self.rows.column_labels if self.rows is not None else ()


class QueryExecutor:
    """Runs SQL on the connection owned by a :class:`ConnectionManager`."""

    def __init__(self, manager: ConnectionManager, *, max_width: int | None = None) -> None:
        self._manager = manager
        self._max_width = max_width

    @property
    def max_width(self) -> int:
        return self._max_width or self._manager.options.max_width

    def execute(self, sql: str) -> QueryResult:
        statement = sql.strip().rstrip(";").strip()
        if not statement:
            raise QueryExecutionError("Provide SQL to execute.")
        with self._manager.lock:
            return self._execute(statement)

    def _execute(self, statement: str) -> QueryResult:
        connection = self._manager.get_connection()
        started = time.perf_counter()
        try:
            cursor = connection.cursor()
        except DataAccessError as exc:
            raise QueryExecutionError(str(exc)) from exc
        try:
            try:
                cursor.execute(statement)
            except Exception as exc:
                raise QueryExecutionError(str(exc)) from exc
            if cursor.description:
                rows = BufferedRows(cursor, max_width=self.max_width)
                rows.normalize_widths()
                count = len(rows) - 1
                status = f"{count} row{'s' if count != 1 else ''} selected"
                result_rows: BufferedRows | None = rows
            else:
                count = cursor.rowcount if cursor.rowcount is not None and cursor.rowcount >= 0 else None
                status = f"{count} row{'s' if count != 1 else ''} affected" if count is not None else "OK"
                result_rows = None
        except DataAccessError as exc:
            raise QueryExecutionError(str(exc)) from exc
        finally:
            try:
                cursor.close()
            except Exception:  # pragma: no cover - best effort cleanup
                LOG.debug("Cursor close failed", exc_info=True)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return QueryResult(rows=result_rows, status=status, elapsed_ms=elapsed_ms, row_count=count)


__all__ = ["QueryExecutionError", "QueryExecutor", "QueryResult"]
