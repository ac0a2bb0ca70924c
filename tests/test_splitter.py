"""Tests for the SQL statement splitter."""

from __future__ import annotations

import pytest

from duckcli.splitter import split_statements


def test_splits_terminated_statements_in_order() -> None:
    script = "CREATE TABLE t (id INTEGER);\nINSERT INTO t VALUES (1);\nSELECT * FROM t;"

    assert split_statements(script) == [
        "CREATE TABLE t (id INTEGER)",
        "INSERT INTO t VALUES (1)",
        "SELECT * FROM t",
    ]


def test_statement_without_terminator_is_kept() -> None:
    assert split_statements("SELECT 1") == ["SELECT 1"]


def test_semicolon_inside_single_quotes_does_not_split() -> None:
    assert split_statements("SELECT ';' ; SELECT 1;") == ["SELECT ';'", "SELECT 1"]


def test_doubled_single_quote_is_an_escape() -> None:
    assert split_statements("SELECT 'it''s; fine'; SELECT 2") == ["SELECT 'it''s; fine'", "SELECT 2"]


def test_semicolon_inside_double_quotes_does_not_split() -> None:
    script = 'SELECT "odd;name" FROM t; SELECT "a""b;c"'

    assert split_statements(script) == ['SELECT "odd;name" FROM t', 'SELECT "a""b;c"']


def test_line_comment_hides_semicolon_and_is_preserved() -> None:
    script = "SELECT 1 -- note; still a comment\n; SELECT 2"

    assert split_statements(script) == ["SELECT 1 -- note; still a comment", "SELECT 2"]


def test_block_comment_hides_semicolon() -> None:
    assert split_statements("SELECT /* ; */ 1; SELECT 2") == ["SELECT /* ; */ 1", "SELECT 2"]


def test_unterminated_block_comment_consumes_rest_of_input() -> None:
    script = "SELECT 1; /* never closed; SELECT 2; SELECT 3"

    assert split_statements(script) == ["SELECT 1", "/* never closed; SELECT 2; SELECT 3"]


def test_quote_characters_inside_comments_are_ignored() -> None:
    script = "SELECT 1 -- don't\n; SELECT 2 /* \" */; SELECT 3"

    assert split_statements(script) == ["SELECT 1 -- don't", 'SELECT 2 /* " */', "SELECT 3"]


@pytest.mark.parametrize("script", ["", "   ", ";;", " ; \n ; "])
def test_blank_input_yields_nothing(script: str) -> None:
    assert split_statements(script) == []


def test_single_dash_and_slash_are_plain_characters() -> None:
    assert split_statements("SELECT 4 - 2 / 1; SELECT 5") == ["SELECT 4 - 2 / 1", "SELECT 5"]
