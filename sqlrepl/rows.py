"""Buffered result rows and the column width allocation used to display them."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

from .drivers.base import ResultCursor
from .errors import DataAccessError, InternalConsistencyError

LOG = logging.getLogger(__name__)

DEFAULT_MAX_WIDTH = 80
NULL_TEXT = "NULL"


@dataclass(slots=True)
class Row:
    """One display row; the meta row carries column labels instead of data."""

    values: list[str]
    sizes: list[int]
    is_meta: bool = False

    @classmethod
    def meta(cls, labels: Sequence[str]) -> "Row":
        values = [str(label) for label in labels]
        return cls(values=values, sizes=[len(value) for value in values], is_meta=True)

    @classmethod
    def data(cls, cells: Sequence[Any], width: int) -> "Row":
        values = [format_cell(cells[idx]) if idx < len(cells) else "" for idx in range(width)]
        return cls(values=values, sizes=[len(value) for value in values])


def format_cell(value: Any) -> str:
    if value is None:
        return NULL_TEXT
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return str(value)


def scale_min_widths(minimums: Sequence[float], total_width: float) -> list[float]:
    """Shrink ``minimums`` proportionally when they cannot all fit ``total_width``."""

    total = sum(minimums)
    if total <= total_width:
        return list(minimums)
    ratio = total_width / total
    return [value * ratio for value in minimums]


def compute_widths(minimums: Sequence[float], maximums: Sequence[float], total_width: float) -> list[int]:
    """Allocate ``total_width`` across columns using quadratic sizing.

    Column ``i`` gets ``r*r + r*(span[i] - 1)`` characters where
    ``span[i] = max[i] - min[i]``. Summing over ``n`` columns gives
    ``n*r*r + r*(sum(span) - n) = total_width``, solved for its positive root.
    Columns with more spread between header and content get more room.
    """

    n = len(minimums)
    if n == 0:
        return []
    a = float(n)
    b = -float(n)
    c = -float(total_width)
    for idx in range(n):
        b += maximums[idx] - minimums[idx]
    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        raise InternalConsistencyError(
            f"Negative discriminant {discriminant} for widths min={list(minimums)} max={list(maximums)}"
        )
    r = (math.sqrt(discriminant) - b) / (2 * a)
    return [int(r * r + (maximums[idx] - minimums[idx] - 1) * r) for idx in range(n)]


class BufferedRows:
    """Reads every row of a cursor into memory, meta row first."""

    def __init__(self, cursor: ResultCursor, *, max_width: int = DEFAULT_MAX_WIDTH) -> None:
        self.max_width = max_width
        self._rows: list[Row] = []
        description = cursor.description or ()
        labels = [str(column[0]) for column in description]
        self._column_count = len(labels)
        self._rows.append(Row.meta(labels))
        self._drain(cursor)

    def _drain(self, cursor: ResultCursor) -> None:
        while True:
            try:
                record = cursor.fetchone()
            except Exception as exc:
                LOG.debug(
                    "Cursor failed while buffering rows",
                    extra={"rows_read": len(self._rows) - 1},
                )
                raise DataAccessError(f"Failed to read result row: {exc}", rows=self) from exc
            if record is None:
                return
            self._rows.append(Row.data(record, self._column_count))

    @property
    def column_count(self) -> int:
        return self._column_count

    @property
    def column_labels(self) -> tuple[str, ...]:
        return tuple(self._rows[0].values) if self._rows else ()

    @property
    def header(self) -> Row:
        return self._rows[0]

    @property
    def data_rows(self) -> tuple[Row, ...]:
        return tuple(self._rows[1:])

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def normalize_widths(self) -> None:
        """Fit every column into ``max_width`` and share the result across rows."""

        if not self._rows:
            return
        n = len(self._rows[0].values)
        minimums = [0.0] * n
        maximums = [0.0] * n
        for row in self._rows:
            if row.is_meta:
                for idx in range(n):
                    minimums[idx] = row.sizes[idx]
            else:
                for idx in range(n):
                    maximums[idx] = max(maximums[idx], row.sizes[idx])
        maximums = [max(low, high) for low, high in zip(minimums, maximums)]
        minimums = scale_min_widths(minimums, self.max_width)

        widths = compute_widths(minimums, maximums, self.max_width)
        for row in self._rows:
            row.sizes = widths


__all__ = [
    "BufferedRows",
    "DEFAULT_MAX_WIDTH",
    "NULL_TEXT",
    "Row",
    "compute_widths",
    "format_cell",
    "scale_min_widths",
]
