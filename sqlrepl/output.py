"""Plain-text rendering of buffered rows."""

from __future__ import annotations

from .rows import BufferedRows, Row

SEPARATOR = " | "


def fit(value: str, width: int) -> str:
    """Pad or truncate ``value`` to exactly ``width`` characters."""

    if width <= 0:
        return ""
    if len(value) <= width:
        return value.ljust(width)
    if width == 1:
        return value[:1]
    return value[: width - 1] + "…"


def render_row(row: Row) -> str:
    return SEPARATOR.join(fit(value, width) for value, width in zip(row.values, row.sizes)).rstrip()


def render_table(rows: BufferedRows) -> list[str]:
    """Header, a dashed rule and one line per data row, using normalized widths."""

    header = rows.header
    lines = [render_row(header)]
    lines.append("-+-".join("-" * max(width, 0) for width in header.sizes))
    lines.extend(render_row(row) for row in rows.data_rows)
    return lines


__all__ = ["fit", "render_row", "render_table", "SEPARATOR"]
