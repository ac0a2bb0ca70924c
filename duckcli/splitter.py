"""Split raw SQL scripts into individually executable statements."""

from __future__ import annotations

from enum import Enum


class _Mode(Enum):
    NORMAL = "normal"
    SINGLE_QUOTE = "single_quote"
    DOUBLE_QUOTE = "double_quote"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"


_QUOTE_MODES = {"'": _Mode.SINGLE_QUOTE, '"': _Mode.DOUBLE_QUOTE}


def split_statements(script: str) -> list[str]:
    """Split ``script`` on top-level semicolons.

    Semicolons inside quoted text or comments do not end a statement. Quotes and
    comments are kept verbatim in the returned statements, which are trimmed and never
    empty. A trailing statement without a terminator is still returned.
    """

    statements: list[str] = []
    current: list[str] = []
    mode = _Mode.NORMAL
    index = 0
    length = len(script)

    while index < length:
        ch = script[index]
        nxt = script[index + 1] if index + 1 < length else ""

        if mode is _Mode.LINE_COMMENT:
            current.append(ch)
            if ch == "\n":
                mode = _Mode.NORMAL
            index += 1
            continue

        if mode is _Mode.BLOCK_COMMENT:
            if ch == "*" and nxt == "/":
                current.append("*/")
                mode = _Mode.NORMAL
                index += 2
                continue
            current.append(ch)
            index += 1
            continue

        if mode in (_Mode.SINGLE_QUOTE, _Mode.DOUBLE_QUOTE):
            quote = "'" if mode is _Mode.SINGLE_QUOTE else '"'
            current.append(ch)
            if ch == quote:
                if nxt == quote:
                    # doubled quote is an escaped quote character
                    current.append(nxt)
                    index += 2
                    continue
                mode = _Mode.NORMAL
            index += 1
            continue

        if ch == "-" and nxt == "-":
            current.append("--")
            mode = _Mode.LINE_COMMENT
            index += 2
            continue
        if ch == "/" and nxt == "*":
            current.append("/*")
            mode = _Mode.BLOCK_COMMENT
            index += 2
            continue
        if ch in _QUOTE_MODES:
            current.append(ch)
            mode = _QUOTE_MODES[ch]
            index += 1
            continue
        if ch == ";":
            _flush(current, statements)
            current = []
            index += 1
            continue

        current.append(ch)
        index += 1

    _flush(current, statements)
    return statements


def _flush(buffer: list[str], statements: list[str]) -> None:
    statement = "".join(buffer).strip()
    if statement:
        statements.append(statement)


__all__ = ["split_statements"]
