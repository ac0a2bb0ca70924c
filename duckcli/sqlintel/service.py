"""Completion synthesizer merging keyword and function metadata into one index."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Sequence

from ..models import Row
from ..queries import FUNCTIONS_QUERY, KEYWORDS_QUERY, LEGACY_FUNCTIONS_QUERY
from ..query import QueryExecutionError
from .catalog import add_keyword_completions, static_completions
from .functions import add_function_completions
from .models import CompletionEntry, FunctionRecord
from .rows import CatalogFunctionRow, KeywordRow, LegacyFunctionRow, adapt_rows

LOG = logging.getLogger(__name__)

MAX_SUGGESTIONS = 50

RowFetcher = Callable[[str], Awaitable[list[Row]]]


@dataclass(frozen=True, slots=True)
class FunctionSource:
    """One attempt in the function metadata fallback chain."""

    name: str
    query: str
    model: type[CatalogFunctionRow] | type[LegacyFunctionRow]


FUNCTION_SOURCES: tuple[FunctionSource, ...] = (
    FunctionSource("duckdb_functions()", FUNCTIONS_QUERY, CatalogFunctionRow),
    FunctionSource("PRAGMA functions", LEGACY_FUNCTIONS_QUERY, LegacyFunctionRow),
)


class CompletionSynthesizer:
    """Builds the completion index once and hands out the cached mapping afterwards.

    Concurrent first callers share the same in-flight build. Metadata failures never
    propagate: they are logged as warnings and the built-in keyword table fills in.
    """

    def __init__(
        self,
        fetch_rows: RowFetcher,
        *,
        function_sources: Sequence[FunctionSource] = FUNCTION_SOURCES,
    ) -> None:
        self._fetch_rows = fetch_rows
        self._function_sources = tuple(function_sources)
        self._cache: dict[str, CompletionEntry] | None = None
        self._pending: asyncio.Task[dict[str, CompletionEntry]] | None = None

    @property
    def cached(self) -> dict[str, CompletionEntry] | None:
        return self._cache

    async def completions(self) -> dict[str, CompletionEntry]:
        if self._cache is not None:
            return self._cache
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._build())
        return await asyncio.shield(self._pending)

    def reset(self) -> None:
        """Forget the cached index; a build still in flight finishes for its waiters only."""

        self._cache = None
        self._pending = None

    async def _build(self) -> dict[str, CompletionEntry]:
        task = asyncio.current_task()
        try:
            completions = await self._synthesize()
        finally:
            detached = self._pending is not task
            if not detached:
                self._pending = None
        if not detached:
            self._cache = completions
        return completions

    async def _synthesize(self) -> dict[str, CompletionEntry]:
        completions: dict[str, CompletionEntry] = {}
        try:
            rows = await self._fetch_rows(KEYWORDS_QUERY)
        except QueryExecutionError as exc:
            LOG.warning("Failed to load DuckDB keywords dynamically: %s", exc)
            completions.update(static_completions())
        else:
            add_keyword_completions(adapt_rows(KeywordRow, rows), completions)

        if not completions:
            completions.update(static_completions())

        add_function_completions(await self._load_functions(), completions)

        if not completions:
            completions.update(static_completions())
        LOG.debug("Completion index built with %d entries", len(completions))
        return completions

    async def _load_functions(self) -> list[FunctionRecord]:
        for source in self._function_sources:
            try:
                rows = await self._fetch_rows(source.query)
            except QueryExecutionError as exc:
                LOG.warning("Failed to load %s metadata: %s", source.name, exc)
                continue
            return adapt_rows(source.model, rows)
        return []


def match_completions(
    completions: Mapping[str, CompletionEntry],
    prefix: str,
    *,
    limit: int = MAX_SUGGESTIONS,
) -> list[CompletionEntry]:
    """Entries whose filter text starts with ``prefix``, in sort order."""

    needle = prefix.strip().upper()
    if not needle:
        return []
    matches = [entry for entry in completions.values() if entry.filter_text.startswith(needle)]
    matches.sort(key=lambda entry: entry.sort_text)
    return matches[:limit]


__all__ = [
    "CompletionSynthesizer",
    "FUNCTION_SOURCES",
    "FunctionSource",
    "MAX_SUGGESTIONS",
    "RowFetcher",
    "match_completions",
]
