"""Clause-aware SQL completion services."""

from __future__ import annotations

from .catalog import KeywordCatalog, KeywordEntry
from .metadata import MetadataProvider, SchemaMetadataProvider
from .models import AnalysisResult, Clause, Suggestion, SuggestionType
from .service import MAX_SUGGESTIONS, SqlIntelService

__all__ = [
    "AnalysisResult",
    "Clause",
    "KeywordCatalog",
    "KeywordEntry",
    "MAX_SUGGESTIONS",
    "MetadataProvider",
    "SchemaMetadataProvider",
    "SqlIntelService",
    "Suggestion",
    "SuggestionType",
]
