"""SQL completion services and helpers."""

from __future__ import annotations

from .catalog import PRIORITIZED_SQL_WORDS, static_completions
from .models import CompletionEntry, FunctionMeta, FunctionRecord, KeywordRecord, MarkdownString
from .rows import CatalogFunctionRow, KeywordRow, LegacyFunctionRow, normalize_label
from .service import CompletionSynthesizer, FunctionSource, match_completions

__all__ = [
    "CatalogFunctionRow",
    "CompletionEntry",
    "CompletionSynthesizer",
    "FunctionMeta",
    "FunctionRecord",
    "FunctionSource",
    "KeywordRecord",
    "KeywordRow",
    "LegacyFunctionRow",
    "MarkdownString",
    "PRIORITIZED_SQL_WORDS",
    "match_completions",
    "normalize_label",
    "static_completions",
]
