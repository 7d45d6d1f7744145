"""Keyword catalog for clause-aware completion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .models import Clause, Suggestion, SuggestionType


@dataclass(slots=True)
class KeywordEntry:
    """Keyword metadata used for ranking suggestions."""

    keyword: str
    clauses: Tuple[Clause, ...]
    weight: float = 1.0


class KeywordCatalog:
    """In-memory catalog that returns clause-aware keyword suggestions."""

    def __init__(self, entries: Sequence[KeywordEntry]) -> None:
        self._entries = tuple(entries)

    @classmethod
    def default(cls) -> "KeywordCatalog":
        return cls(_DEFAULT_ENTRIES)

    def suggestions_for(self, clause: Clause) -> list[Suggestion]:
        matches: list[Suggestion] = []
        for entry in self._entries:
            if Clause.ANY in entry.clauses or clause in entry.clauses:
                matches.append(
                    Suggestion(
                        label=entry.keyword,
                        type=SuggestionType.KEYWORD,
                        detail="keyword",
                        score=entry.weight,
                    )
                )
        return matches


_DEFAULT_ENTRIES: Tuple[KeywordEntry, ...] = (
    KeywordEntry("SELECT", (Clause.ANY,), 0.6),
    KeywordEntry("DISTINCT", (Clause.SELECT,), 0.5),
    KeywordEntry("FROM", (Clause.SELECT,), 0.55),
    KeywordEntry("WHERE", (Clause.FROM, Clause.UPDATE, Clause.DELETE), 0.55),
    KeywordEntry("JOIN", (Clause.FROM,), 0.5),
    KeywordEntry("ON", (Clause.FROM,), 0.45),
    KeywordEntry("AND", (Clause.WHERE, Clause.HAVING), 0.5),
    KeywordEntry("OR", (Clause.WHERE, Clause.HAVING), 0.45),
    KeywordEntry("NULL", (Clause.WHERE,), 0.4),
    KeywordEntry("GROUP BY", (Clause.FROM, Clause.WHERE), 0.45),
    KeywordEntry("HAVING", (Clause.GROUP,), 0.45),
    KeywordEntry("ORDER BY", (Clause.FROM, Clause.WHERE, Clause.GROUP, Clause.HAVING), 0.45),
    KeywordEntry("LIMIT", (Clause.FROM, Clause.WHERE, Clause.ORDER), 0.4),
    KeywordEntry("INSERT INTO", (Clause.ANY,), 0.5),
    KeywordEntry("VALUES", (Clause.INSERT,), 0.5),
    KeywordEntry("UPDATE", (Clause.ANY,), 0.5),
    KeywordEntry("SET", (Clause.UPDATE,), 0.55),
    KeywordEntry("DELETE FROM", (Clause.ANY,), 0.5),
)


__all__ = ["KeywordCatalog", "KeywordEntry"]
