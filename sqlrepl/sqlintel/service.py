"""SQL completion service coordinating parsing, keywords, and schema names."""

from __future__ import annotations

import re
from typing import Iterable

from sqlglot import exp, parse_one
from sqlglot.errors import ParseError, TokenError

from .catalog import KeywordCatalog
from .metadata import MetadataProvider
from .models import AnalysisResult, Clause, Suggestion

MAX_SUGGESTIONS = 50


class SqlIntelService:
    """Facade that wraps sqlglot parsing and ranks completion candidates."""

    def __init__(
        self,
        metadata_provider: MetadataProvider | None = None,
        keyword_catalog: KeywordCatalog | None = None,
        *,
        dialect: str | None = None,
    ) -> None:
        self._metadata = metadata_provider
        self._keywords = keyword_catalog or KeywordCatalog.default()
        self._dialect = dialect

    def analyze(self, buffer: str, cursor: int) -> AnalysisResult:
        """Parse the whole buffer for referenced tables; the clause comes from the text before ``cursor``."""

        clause = _detect_clause(buffer, cursor)
        stripped = buffer.strip()
        ast: exp.Expression | None = None
        errors: list[str] = []
        tables: tuple[str, ...] = ()
        if stripped:
            try:
                ast = parse_one(stripped, read=self._dialect)
            except (ParseError, TokenError) as exc:
                errors.append(str(exc).strip())
                tables = tuple(_scan_tables(buffer))
            else:
                tables = tuple(_collect_tables(ast))

        return AnalysisResult(
            buffer=buffer,
            cursor=cursor,
            clause=clause,
            tables=tables,
            ast=ast,
            errors=tuple(errors),
        )

    def suggest(self, buffer: str, cursor: int) -> list[Suggestion]:
        """Return ordered suggestions for the current cursor location."""

        return self.suggestions_from_analysis(self.analyze(buffer, cursor))

    def suggestions_from_analysis(self, analysis: AnalysisResult) -> list[Suggestion]:
        suggestions = self._keywords.suggestions_for(analysis.clause)
        if self._metadata is not None:
            suggestions.extend(self._metadata.suggestions_for(analysis))
        suggestions.sort(key=lambda item: (-item.score, item.label))
        return suggestions


_CLAUSE_TOKENS: dict[Clause, tuple[str, ...]] = {
    Clause.DELETE: ("DELETE FROM", "DELETE"),
    Clause.UPDATE: ("UPDATE",),
    Clause.INSERT: ("INSERT INTO", "INSERT"),
    Clause.SELECT: ("SELECT",),
    Clause.FROM: ("FROM", "JOIN"),
    Clause.WHERE: ("WHERE", "ON", "SET"),
    Clause.GROUP: ("GROUP BY",),
    Clause.HAVING: ("HAVING",),
    Clause.ORDER: ("ORDER BY",),
    Clause.LIMIT: ("LIMIT",),
}

_TABLE_REF = re.compile(r"\b(?:FROM|JOIN|UPDATE|INTO)\s+([\w$.]+)", re.IGNORECASE)


def _detect_clause(buffer: str, cursor: int) -> Clause:
    search = buffer[:cursor].upper()
    if not search.strip():
        return Clause.ANY
    last_clause = Clause.ANY
    last_pos = -1
    for clause, tokens in _CLAUSE_TOKENS.items():
        for token in tokens:
            pos = _rfind_token(search, token)
            if pos > last_pos:
                last_pos = pos
                last_clause = clause
    return last_clause if last_pos >= 0 else Clause.ANY


def _rfind_token(haystack: str, needle: str) -> int:
    pattern = re.compile(rf"\b{re.escape(needle)}\b")
    match_pos = -1
    for match in pattern.finditer(haystack):
        match_pos = match.start()
    return match_pos


def _collect_tables(expression: exp.Expression) -> Iterable[str]:
    tables: list[str] = []
    seen: set[str] = set()
    for table in expression.find_all(exp.Table):
        schema = table.db
        name = table.name or ""
        label = f"{schema}.{name}" if schema else name
        norm = label.lower()
        if norm and norm not in seen:
            tables.append(label)
            seen.add(norm)
    return tables


def _scan_tables(buffer: str) -> Iterable[str]:
    """Regex fallback for half-typed statements sqlglot cannot parse."""

    seen: set[str] = set()
    for match in _TABLE_REF.finditer(buffer):
        name = match.group(1)
        if name.lower() not in seen:
            seen.add(name.lower())
            yield name


__all__ = ["SqlIntelService", "MAX_SUGGESTIONS"]
