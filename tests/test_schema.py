"""Tests for the lazily populated schema cache."""

from __future__ import annotations

import pytest

from fakes import FakeConnection, FakeMetadata
from sqlrepl.errors import DataAccessError
from sqlrepl.schema import Column, Schema


def _schema(metadata: FakeMetadata, *, strict: bool = False) -> Schema:
    connection = FakeConnection(metadata)
    return Schema(lambda: (connection, metadata), strict=strict)


def test_tables_are_fetched_once_and_cached() -> None:
    metadata = FakeMetadata(tables=("accounts", "orders"))
    schema = _schema(metadata)

    first = schema.get_tables()
    second = schema.get_tables()

    assert second is first
    assert [table.name for table in first] == ["accounts", "orders"]
    assert metadata.table_calls == 1


def test_failed_fetch_caches_empty_list_without_retry() -> None:
    metadata = FakeMetadata(fail_tables=True)
    schema = _schema(metadata)

    assert schema.get_tables() == []
    assert schema.get_tables() == []
    assert metadata.table_calls == 1
    assert isinstance(schema.last_error, DataAccessError)


def test_strict_schema_raises_fetch_errors() -> None:
    schema = _schema(FakeMetadata(fail_tables=True), strict=True)

    with pytest.raises(DataAccessError):
        schema.get_tables()


def test_fetch_tables_reports_result_without_caching() -> None:
    metadata = FakeMetadata(fail_tables=True)
    schema = _schema(metadata)

    result = schema.fetch_tables()

    assert result.ok is False
    assert result.tables == []
    assert schema.loaded is False


def test_invalidate_forces_a_new_fetch() -> None:
    metadata = FakeMetadata(tables=("accounts",))
    schema = _schema(metadata)
    first = schema.get_tables()
    metadata.tables.append("payments")

    schema.invalidate()
    refreshed = schema.get_tables()

    assert refreshed is not first
    assert [table.name for table in refreshed] == ["accounts", "payments"]
    assert metadata.table_calls == 2


def test_duplicate_table_names_are_dropped_in_order() -> None:
    schema = _schema(FakeMetadata(tables=("orders", "accounts", "orders")))

    assert [table.name for table in schema.get_tables()] == ["orders", "accounts"]
    assert schema.table_names() == ["accounts", "orders"]


def test_get_table_ignores_case() -> None:
    schema = _schema(FakeMetadata(tables=("Accounts",)))

    assert schema.get_table("ACCOUNTS") is schema.get_tables()[0]
    assert schema.get_table("missing") is None


def test_columns_are_fetched_lazily_with_primary_keys() -> None:
    metadata = FakeMetadata()
    schema = _schema(metadata)
    table = schema.get_table("accounts")
    assert table is not None
    assert metadata.column_calls == 0

    columns = table.columns

    assert columns == [Column("id", True), Column("email", False)]
    assert table.columns is columns
    assert table.column_names == ("id", "email")
    assert metadata.column_calls == 1
