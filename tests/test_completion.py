"""Tests for word delimiting and argument-aware completion."""

from __future__ import annotations

from fakes import FakeConnection, FakeMetadata
from sqlrepl.completion import ArgumentCompleter, Completion, SqlCompleter, WordDelimiter, apply_completion
from sqlrepl.quoting import IdentifierQuoting
from sqlrepl.schema import Schema
from sqlrepl.sqlintel import SchemaMetadataProvider, SqlIntelService


class _WordList:
    def __init__(self, *words: str) -> None:
        self._words = words

    def complete(self, word: str, *, context: str = "") -> list[str]:
        return [candidate for candidate in self._words if candidate.startswith(word)]


def _sql_completer(metadata: FakeMetadata, quoting: IdentifierQuoting = IdentifierQuoting.DEFAULT) -> SqlCompleter:
    connection = FakeConnection(metadata)
    schema = Schema(lambda: (connection, metadata))
    provider = SchemaMetadataProvider(schema, quoting=quoting)
    return SqlCompleter(SqlIntelService(provider))


def test_delimiter_treats_name_characters_as_word_parts() -> None:
    delimiter = WordDelimiter("$#")

    assert delimiter.is_delimiter("a b", 1) is True
    assert delimiter.is_delimiter("a.b", 1) is True
    assert delimiter.is_delimiter("a_b", 1) is False
    assert delimiter.is_delimiter("a$b", 1) is False
    assert delimiter.is_delimiter("a#b", 1) is False
    assert delimiter.is_delimiter("é", 0) is False


def test_delimit_locates_cursor_word() -> None:
    args = WordDelimiter().delimit("SELECT foo.ba", 13)

    assert args.arguments == ("SELECT", "foo", "ba")
    assert args.cursor_argument == 2
    assert args.argument_cursor == 2
    assert args.cursor_word == "ba"


def test_delimit_after_trailing_space_starts_new_word() -> None:
    args = WordDelimiter().delimit("SELECT ", 7)

    assert args.arguments == ("SELECT",)
    assert args.cursor_argument == 1
    assert args.cursor_word == ""


def test_strict_completer_requires_preceding_words_to_match() -> None:
    strict = ArgumentCompleter(WordDelimiter(), _WordList("alpha", "beta", "gamma"))

    assert strict.complete("alpha gam") == Completion(("gamma",), 6)
    assert strict.complete("zzz gam").candidates == ()


def test_non_strict_completer_only_checks_cursor_word() -> None:
    loose = ArgumentCompleter(WordDelimiter(), _WordList("alpha", "gamma"), strict=False)

    assert loose.complete("zzz gam").candidates == ("gamma",)


def test_completer_per_position_reuses_last_for_later_arguments() -> None:
    completer = ArgumentCompleter(WordDelimiter(), _WordList("open"), _WordList("door", "dome"), strict=False)

    assert completer.complete("op").candidates == ("open",)
    assert completer.complete("open do").candidates == ("door", "dome")
    assert completer.complete("open door do").candidates == ("door", "dome")


def test_sql_completer_offers_tables_after_from() -> None:
    completer = ArgumentCompleter(
        WordDelimiter(), _sql_completer(FakeMetadata(tables=("accounts", "orders"))), strict=False
    )

    completion = completer.complete("SELECT * FROM acc")

    assert completion.candidates == ("accounts",)
    assert completion.start == len("SELECT * FROM ")
    assert apply_completion("SELECT * FROM acc", completion, "accounts") == "SELECT * FROM accounts"


def test_sql_completer_offers_columns_of_referenced_tables() -> None:
    completer = _sql_completer(FakeMetadata())

    candidates = completer.complete("", context="SELECT * FROM orders WHERE ")

    assert "account_id" in candidates
    assert "total" in candidates
    assert "email" not in candidates


def test_sql_completer_offers_keywords() -> None:
    completer = _sql_completer(FakeMetadata())

    assert completer.complete("sel", context="sel") == ["SELECT"]


def test_sql_completer_quotes_names_that_need_it() -> None:
    completer = _sql_completer(FakeMetadata(tables=("Order Items",)))

    candidates = completer.complete("ord", context="SELECT * FROM ord")

    assert candidates[0] == '"Order Items"'
    assert "ORDER BY" in candidates
