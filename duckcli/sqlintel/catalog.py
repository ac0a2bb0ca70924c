"""Keyword completions and the built-in fallback keyword table."""

from __future__ import annotations

from typing import Iterable, MutableMapping

from .models import CompletionEntry, KeywordRecord, MarkdownString

PRIORITIZED_SQL_WORDS = frozenset({"SELECT", "CREATE", "UPDATE", "DELETE"})


def keyword_entry(record: KeywordRecord) -> CompletionEntry:
    label = record.label
    prefix = "2:" if label in PRIORITIZED_SQL_WORDS else "3:"
    return CompletionEntry(
        label=label,
        detail=label,
        filter_text=label,
        sort_text=prefix + label,
        documentation=MarkdownString(f"```yaml\nWORD: {label}\nTYPE: {record.category}\n```"),
    )


def add_keyword_completions(
    records: Iterable[KeywordRecord],
    completions: MutableMapping[str, CompletionEntry],
) -> None:
    """Insert (or replace) one entry per keyword record."""

    for record in records:
        completions[record.label] = keyword_entry(record)


def static_completions() -> dict[str, CompletionEntry]:
    """Fresh copy of the built-in keyword completions."""

    completions: dict[str, CompletionEntry] = {}
    add_keyword_completions(_STATIC_KEYWORDS, completions)
    return completions


def _keywords(category: str, words: str) -> tuple[KeywordRecord, ...]:
    return tuple(KeywordRecord(label=word, category=category) for word in words.split())


_STATIC_KEYWORDS: tuple[KeywordRecord, ...] = (
    _keywords(
        "RESERVED",
        """
        ALL ANALYSE ANALYZE AND ANY ARRAY AS ASC ASYMMETRIC BOTH CASE CAST CHECK COLLATE
        COLUMN CONSTRAINT CREATE DEFAULT DEFERRABLE DESC DESCRIBE DISTINCT DO ELSE END
        EXCEPT FALSE FETCH FOR FOREIGN FROM GRANT GROUP HAVING IN INITIALLY INTERSECT INTO
        LATERAL LEADING LIMIT NOT NULL OFFSET ON ONLY OR ORDER PIVOT PLACING PRIMARY
        QUALIFY REFERENCES RETURNING SELECT SHOW SOME SUMMARIZE SYMMETRIC TABLE THEN TO
        TRAILING TRUE UNION UNIQUE UNPIVOT USING VARIADIC WHEN WHERE WINDOW WITH
        """,
    )
    + _keywords(
        "UNRESERVED",
        """
        ALTER ATTACH BEGIN CALL CHECKPOINT COMMIT COPY DATABASE DELETE DETACH DROP EXPLAIN
        EXPORT FUNCTION IMPORT INDEX INSERT INSTALL LOAD MACRO PRAGMA REPLACE ROLLBACK
        SCHEMA SEQUENCE SET TEMPORARY TRANSACTION TYPE UPDATE VACUUM VALUES VIEW
        """,
    )
    + _keywords(
        "COLUMN_NAME",
        """
        BETWEEN BIGINT BOOLEAN COALESCE DECIMAL EXISTS EXTRACT GROUPING INTEGER INTERVAL
        NULLIF REAL SMALLINT TIMESTAMP VARCHAR
        """,
    )
    + _keywords(
        "TYPE_FUNCTION",
        """
        ANTI ASOF CROSS FULL ILIKE INNER IS JOIN LEFT LIKE NATURAL OUTER POSITIONAL RIGHT
        SEMI SIMILAR
        """,
    )
)


__all__ = [
    "PRIORITIZED_SQL_WORDS",
    "add_keyword_completions",
    "keyword_entry",
    "static_completions",
]
