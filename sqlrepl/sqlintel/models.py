"""Dataclasses shared by the completion services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from sqlglot import exp


class Clause(str, Enum):
    """Represents the current SQL clause under the cursor."""

    ANY = "any"
    SELECT = "select"
    FROM = "from"
    WHERE = "where"
    GROUP = "group"
    HAVING = "having"
    ORDER = "order"
    LIMIT = "limit"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class SuggestionType(str, Enum):
    """Where a completion candidate came from."""

    KEYWORD = "keyword"
    TABLE = "table"
    COLUMN = "column"


@dataclass(slots=True)
class Suggestion:
    """Single completion candidate."""

    label: str
    type: SuggestionType
    detail: str | None = None
    score: float = 0.0


@dataclass(slots=True)
class AnalysisResult:
    """Structural context derived from the text before the cursor."""

    buffer: str
    cursor: int
    clause: Clause
    tables: Tuple[str, ...]
    ast: exp.Expression | None
    errors: Tuple[str, ...]


__all__ = ["AnalysisResult", "Clause", "Suggestion", "SuggestionType"]
