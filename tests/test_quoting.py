"""Tests for identifier quoting detection."""

from __future__ import annotations

import pytest

from sqlrepl.errors import UnsupportedQuotingError
from sqlrepl.quoting import NUL, IdentifierQuoting, detect_quoting


@pytest.mark.parametrize("quote", [None, "", " "])
def test_missing_quote_string_disables_quoting(quote: str | None) -> None:
    quoting = detect_quoting(quote, True, "PostgreSQL")

    assert quoting == IdentifierQuoting(NUL, NUL, False)
    assert quoting.enabled is False


def test_mysql_without_quote_string_uses_backticks() -> None:
    quoting = detect_quoting("", True, "MySQL")

    assert quoting == IdentifierQuoting("`", "`", True)


def test_single_character_quote_is_symmetric() -> None:
    assert detect_quoting("`", True, "MySQL-5.7") == IdentifierQuoting("`", "`", True)
    assert detect_quoting('"', False, "PostgreSQL") == IdentifierQuoting('"', '"', False)


def test_bracket_quote_closes_with_bracket() -> None:
    assert detect_quoting("[", False, "SQLServer") == IdentifierQuoting("[", "]", False)


def test_multi_character_quote_falls_back_to_default() -> None:
    reported: list[UnsupportedQuotingError] = []

    quoting = detect_quoting('""', False, "X", on_error=reported.append)

    assert quoting is IdentifierQuoting.DEFAULT
    assert quoting == IdentifierQuoting('"', '"', False)
    assert len(reported) == 1
    assert reported[0].quote == '""'
    assert "longer than 1 char" in str(reported[0])


def test_quote_doubles_embedded_end_character() -> None:
    assert IdentifierQuoting.DEFAULT.quote('say "hi"') == '"say ""hi"""'
    assert IdentifierQuoting("[", "]", False).quote("a]b") == "[a]]b]"
    assert IdentifierQuoting.NONE.quote("My Table") == "My Table"


def test_needs_quoting_respects_case_folding_and_name_characters() -> None:
    lower = IdentifierQuoting('"', '"', False)
    upper = IdentifierQuoting('"', '"', True)

    assert lower.needs_quoting("accounts") is False
    assert lower.needs_quoting("Accounts") is True
    assert lower.needs_quoting("order items") is True
    assert lower.needs_quoting("1st") is True
    assert lower.needs_quoting("price$", "$") is False
    assert upper.needs_quoting("ACCOUNTS") is False
    assert upper.needs_quoting("accounts") is True
    assert lower.quote_if_needed("Order Items") == '"Order Items"'
