"""Tests for plain-text table rendering."""

from __future__ import annotations

from fakes import FakeCursor
from sqlrepl.output import fit, render_table
from sqlrepl.rows import BufferedRows


def test_fit_pads_and_truncates() -> None:
    assert fit("abc", 5) == "abc  "
    assert fit("abcdef", 4) == "abc…"
    assert fit("abc", 1) == "a"
    assert fit("abc", 0) == ""


def test_render_table_uses_shared_widths() -> None:
    rows = BufferedRows(FakeCursor(("id", "name"), [(1, "alice"), (2, None)]), max_width=20)
    rows.normalize_widths()
    widths = rows.header.sizes

    lines = render_table(rows)

    assert len(lines) == 4
    assert lines[0].startswith("id")
    assert lines[1] == "-+-".join("-" * width for width in widths)
    assert "NULL" in lines[3]
