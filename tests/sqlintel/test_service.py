"""Unit tests for the completion synthesizer."""

from __future__ import annotations

import asyncio
import logging

import pytest

from duckcli.queries import FUNCTIONS_QUERY, KEYWORDS_QUERY, LEGACY_FUNCTIONS_QUERY
from duckcli.query import QueryExecutionError
from duckcli.sqlintel import CompletionSynthesizer, match_completions, static_completions


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class _Fetcher:
    """Serves canned rows per query; unknown queries fail like a broken CLI."""

    def __init__(self, responses: dict[str, list[dict[str, object]]]) -> None:
        self.responses = responses
        self.calls: list[str] = []

    async def __call__(self, sql: str) -> list[dict[str, object]]:
        self.calls.append(sql)
        await asyncio.sleep(0)
        if sql not in self.responses:
            raise QueryExecutionError("Catalog Error: function does not exist")
        return self.responses[sql]


_KEYWORDS = [
    {"label": "SELECT", "category": "RESERVED"},
    {"label": "FROM", "category": "RESERVED"},
    {"label": "LEFT", "category": "TYPE_FUNCTION"},
]


@pytest.mark.anyio
async def test_overloaded_functions_merge_signatures() -> None:
    fetcher = _Fetcher(
        {
            KEYWORDS_QUERY: _KEYWORDS,
            FUNCTIONS_QUERY: [
                {
                    "label": "add",
                    "category": "SCALAR",
                    "returnType": "INTEGER",
                    "parameters": ["a", "b"],
                    "parameterTypes": ["INTEGER", "INTEGER"],
                    "description": "",
                },
                {
                    "label": "add",
                    "category": "SCALAR",
                    "returnType": "DOUBLE",
                    "parameters": '["a","b"]',
                    "parameterTypes": '["DOUBLE","DOUBLE"]',
                    "description": "Adds two values.",
                    "tags": {"category": "math"},
                },
            ],
        }
    )
    synthesizer = CompletionSynthesizer(fetcher)

    completions = await synthesizer.completions()

    entry = completions["ADD"]
    docs = entry.documentation.value
    assert entry.detail == "ADD(a: INTEGER, b: INTEGER)"
    assert entry.sort_text == "4:ADD"
    assert "- `ADD(a: INTEGER, b: INTEGER)`" in docs
    assert "- `ADD(a: DOUBLE, b: DOUBLE)`" in docs
    assert "TYPE: SCALAR\n" in docs
    assert "RETURNS: INTEGER, DOUBLE" in docs
    assert "TAGS: category=math" in docs
    assert docs.endswith("\n\nAdds two values.")
    assert entry.documentation.kind == "markdown"


@pytest.mark.anyio
async def test_completions_are_cached_after_first_call() -> None:
    fetcher = _Fetcher({KEYWORDS_QUERY: _KEYWORDS, FUNCTIONS_QUERY: []})
    synthesizer = CompletionSynthesizer(fetcher)

    first = await synthesizer.completions()
    calls = list(fetcher.calls)
    second = await synthesizer.completions()

    assert second is first
    assert fetcher.calls == calls


@pytest.mark.anyio
async def test_concurrent_first_calls_share_one_build() -> None:
    fetcher = _Fetcher({KEYWORDS_QUERY: _KEYWORDS, FUNCTIONS_QUERY: []})
    synthesizer = CompletionSynthesizer(fetcher)

    first, second = await asyncio.gather(synthesizer.completions(), synthesizer.completions())

    assert first is second
    assert fetcher.calls.count(KEYWORDS_QUERY) == 1


@pytest.mark.anyio
async def test_keyword_sort_priority() -> None:
    fetcher = _Fetcher({KEYWORDS_QUERY: _KEYWORDS, FUNCTIONS_QUERY: [{"label": "abs", "parameters": ["x"]}]})

    completions = await CompletionSynthesizer(fetcher).completions()

    assert completions["SELECT"].sort_text == "2:SELECT"
    assert completions["FROM"].sort_text == "3:FROM"
    assert completions["ABS"].sort_text == "4:ABS"
    assert completions["SELECT"].sort_text < completions["FROM"].sort_text < completions["ABS"].sort_text
    assert completions["FROM"].documentation.value == "```yaml\nWORD: FROM\nTYPE: RESERVED\n```"


@pytest.mark.anyio
async def test_function_docs_are_appended_to_matching_keyword() -> None:
    fetcher = _Fetcher(
        {
            KEYWORDS_QUERY: _KEYWORDS,
            FUNCTIONS_QUERY: [{"label": "left", "category": "SCALAR", "parameters": ["string", "count"]}],
        }
    )

    completions = await CompletionSynthesizer(fetcher).completions()

    entry = completions["LEFT"]
    assert entry.sort_text == "3:LEFT"
    assert entry.detail == "LEFT"
    assert entry.documentation.value.startswith("```yaml\nWORD: LEFT\nTYPE: TYPE_FUNCTION\n```\n\n```yaml\nWORD: LEFT\nTYPE: SCALAR")
    assert "- `LEFT(string, count)`" in entry.documentation.value


@pytest.mark.anyio
async def test_labels_that_are_not_identifiers_are_dropped() -> None:
    fetcher = _Fetcher(
        {
            KEYWORDS_QUERY: _KEYWORDS + [{"label": "!!", "category": "RESERVED"}],
            FUNCTIONS_QUERY: [
                {"label": "~~"},
                {"label": "1st_value"},
                {"name": "list_value"},
                {"label": "   "},
            ],
        }
    )

    completions = await CompletionSynthesizer(fetcher).completions()

    assert "LIST_VALUE" in completions
    assert completions["LIST_VALUE"].detail == "LIST_VALUE(...)"
    assert all(label.replace("_", "").isalnum() for label in completions)
    assert "1ST_VALUE" not in completions


@pytest.mark.anyio
async def test_falls_back_to_legacy_function_listing(caplog: pytest.LogCaptureFixture) -> None:
    fetcher = _Fetcher(
        {
            KEYWORDS_QUERY: _KEYWORDS,
            LEGACY_FUNCTIONS_QUERY: [
                {"name": "upper", "type": "scalar", "return_type": "VARCHAR", "parameters": "[col0]"},
            ],
        }
    )

    with caplog.at_level(logging.WARNING, logger="duckcli.sqlintel.service"):
        completions = await CompletionSynthesizer(fetcher).completions()

    entry = completions["UPPER"]
    assert entry.detail == "UPPER(col0)"
    assert "TYPE: SCALAR" in entry.documentation.value
    assert "RETURNS: VARCHAR" in entry.documentation.value
    assert any("duckdb_functions()" in record.getMessage() for record in caplog.records)


@pytest.mark.anyio
async def test_every_source_failing_yields_static_keywords(caplog: pytest.LogCaptureFixture) -> None:
    fetcher = _Fetcher({})

    with caplog.at_level(logging.WARNING, logger="duckcli.sqlintel.service"):
        completions = await CompletionSynthesizer(fetcher).completions()

    assert set(completions) == set(static_completions())
    assert completions["SELECT"].sort_text == "2:SELECT"
    messages = [record.getMessage() for record in caplog.records]
    assert any("keywords" in message for message in messages)
    assert any("PRAGMA functions" in message for message in messages)
    assert fetcher.calls == [KEYWORDS_QUERY, FUNCTIONS_QUERY, LEGACY_FUNCTIONS_QUERY]


@pytest.mark.anyio
async def test_empty_keyword_listing_uses_static_table() -> None:
    fetcher = _Fetcher({KEYWORDS_QUERY: [], FUNCTIONS_QUERY: [{"label": "abs", "parameters": ["x"]}]})

    completions = await CompletionSynthesizer(fetcher).completions()

    assert "ABS" in completions
    assert "WHERE" in completions


@pytest.mark.anyio
async def test_reset_rebuilds_the_index() -> None:
    fetcher = _Fetcher({KEYWORDS_QUERY: _KEYWORDS, FUNCTIONS_QUERY: []})
    synthesizer = CompletionSynthesizer(fetcher)
    first = await synthesizer.completions()

    synthesizer.reset()
    second = await synthesizer.completions()

    assert second is not first
    assert fetcher.calls.count(KEYWORDS_QUERY) == 2


@pytest.mark.anyio
async def test_reset_during_build_still_answers_waiters() -> None:
    started = asyncio.Event()
    release = asyncio.Event()
    fetcher = _Fetcher({KEYWORDS_QUERY: _KEYWORDS, FUNCTIONS_QUERY: []})

    async def gated(sql: str) -> list[dict[str, object]]:
        started.set()
        await release.wait()
        return await fetcher(sql)

    synthesizer = CompletionSynthesizer(gated)
    pending = asyncio.ensure_future(synthesizer.completions())
    await started.wait()
    synthesizer.reset()
    release.set()
    completions = await pending

    assert "SELECT" in completions
    assert synthesizer.cached is None


def test_match_completions_orders_by_sort_text() -> None:
    completions = static_completions()

    matches = match_completions(completions, "se")

    labels = [entry.label for entry in matches]
    assert labels[0] == "SELECT"
    assert "SET" in labels
    assert match_completions(completions, "  ") == []
