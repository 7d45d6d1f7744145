"""Identifier suggestions backed by the live schema cache."""

from __future__ import annotations

from typing import Protocol, Sequence

from ..quoting import IdentifierQuoting
from ..schema import Schema, Table
from .models import AnalysisResult, Clause, Suggestion, SuggestionType

TABLE_CLAUSES = frozenset({Clause.FROM, Clause.INSERT, Clause.UPDATE, Clause.DELETE})


class MetadataProvider(Protocol):
    """Protocol for services that surface identifier suggestions."""

    def suggestions_for(self, analysis: AnalysisResult) -> Sequence[Suggestion]:
        """Return identifier suggestions tailored to the given analysis result."""


class SchemaMetadataProvider:
    """Suggests table names, and the columns of referenced tables, from a :class:`Schema`."""

    def __init__(
        self,
        schema: Schema,
        *,
        quoting: IdentifierQuoting = IdentifierQuoting.NONE,
        extra_name_characters: str = "",
    ) -> None:
        self._schema = schema
        self._quoting = quoting
        self._extra = extra_name_characters

    def suggestions_for(self, analysis: AnalysisResult) -> Sequence[Suggestion]:
        tables = self._schema.get_tables()
        if not tables:
            return ()
        if analysis.clause in TABLE_CLAUSES or analysis.clause is Clause.ANY:
            return tuple(
                Suggestion(
                    label=self._label(table.name),
                    type=SuggestionType.TABLE,
                    detail="table",
                    score=0.7,
                )
                for table in tables
            )
        suggestions: list[Suggestion] = []
        for table in self._targets_for(analysis, tables):
            for column in table.columns:
                detail = f"{table.name} primary key" if column.is_primary_key else f"{table.name} column"
                suggestions.append(
                    Suggestion(
                        label=self._label(column.name),
                        type=SuggestionType.COLUMN,
                        detail=detail,
                        score=0.75 if column.is_primary_key else 0.65,
                    )
                )
        return tuple(suggestions)

    def _targets_for(self, analysis: AnalysisResult, tables: Sequence[Table]) -> tuple[Table, ...]:
        targets: list[Table] = []
        for name in analysis.tables:
            table = self._schema.get_table(name) or self._schema.get_table(name.split(".")[-1])
            if table is not None and table not in targets:
                targets.append(table)
        return tuple(targets) if targets else tuple(tables)

    def _label(self, name: str) -> str:
        return self._quoting.quote_if_needed(name, self._extra)


__all__ = ["MetadataProvider", "SchemaMetadataProvider", "TABLE_CLAUSES"]
