"""Query execution services: one CLI invocation per statement."""

from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from .models import ConnectionHandle, Row
from .process import ProcessError, run_process

LOG = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Statement executed successfully."
GENERIC_FAILURE = "DuckDB CLI query failed."

_RESULT_SET_STATEMENT = re.compile(
    r"^(select|with|pragma|show|describe|call|explain|summarize)\b",
    re.IGNORECASE,
)


class QueryExecutionError(RuntimeError):
    """Raised when a statement fails to execute or its output cannot be read."""


@dataclass(frozen=True, slots=True)
class ResultMessage:
    """User-facing message attached to a statement result."""

    message: str
    date: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


@dataclass(frozen=True, slots=True)
class StatementResult:
    """Normalized outcome of a single statement."""

    request_id: str | None
    result_id: str
    connection_id: str
    columns: tuple[str, ...]
    messages: tuple[ResultMessage, ...]
    query: str
    rows: tuple[Row, ...]
    error: bool = False
    raw_error: BaseException | None = None

    @classmethod
    def success(
        cls,
        statement: str,
        rows: list[Row],
        *,
        request_id: str | None,
        connection_id: str,
    ) -> StatementResult:
        messages: tuple[ResultMessage, ...] = ()
        if not rows and not is_result_set_statement(statement):
            messages = (ResultMessage(SUCCESS_MESSAGE),)
        return cls(
            request_id=request_id,
            result_id=new_result_id(),
            connection_id=connection_id,
            columns=tuple(rows[0].keys()) if rows else (),
            messages=messages,
            query=statement,
            rows=tuple(rows),
        )

    @classmethod
    def failure(
        cls,
        statement: str,
        exc: BaseException,
        *,
        request_id: str | None,
        connection_id: str,
    ) -> StatementResult:
        return cls(
            request_id=request_id,
            result_id=new_result_id(),
            connection_id=connection_id,
            columns=(),
            messages=(ResultMessage(str(exc) or GENERIC_FAILURE),),
            query=statement,
            rows=(),
            error=True,
            raw_error=exc,
        )


class StatementExecutor(Protocol):
    """Interface implemented by statement executors."""

    async def run(self, handle: ConnectionHandle, statement: str) -> list[Row]: ...


class CliStatementExecutor:
    """Runs a single statement through the DuckDB CLI and decodes its JSON output."""

    def build_args(self, handle: ConnectionHandle, statement: str) -> list[str]:
        args = [handle.database_path]
        if handle.read_only:
            args.append("-readonly")
        args.extend(["-json", "-c", statement])
        return args

    async def run(self, handle: ConnectionHandle, statement: str) -> list[Row]:
        LOG.debug("Running statement on %s: %.80s", handle.database_path, statement)
        try:
            output = await run_process(handle.executable_path, self.build_args(handle, statement))
        except ProcessError as exc:
            raise QueryExecutionError(exc.detail or GENERIC_FAILURE) from exc
        return parse_json_rows(output.stdout)


def parse_json_rows(stdout: str) -> list[Row]:
    """Decode CLI JSON output; a lone object becomes a one-row list."""

    if not stdout or not stdout.strip():
        return []
    try:
        parsed = json.loads(stdout)
    except json.JSONDecodeError as exc:
        raise QueryExecutionError(f"Unable to parse DuckDB CLI output: {exc}") from exc
    rows = parsed if isinstance(parsed, list) else [parsed]
    if not all(isinstance(row, dict) for row in rows):
        raise QueryExecutionError("Unexpected DuckDB CLI output: expected JSON objects.")
    return rows


def is_result_set_statement(statement: str) -> bool:
    """True when the leading keyword conventionally produces rows."""

    return bool(_RESULT_SET_STATEMENT.match(statement.strip()))


def new_result_id() -> str:
    return str(uuid.uuid4())


__all__ = [
    "CliStatementExecutor",
    "GENERIC_FAILURE",
    "QueryExecutionError",
    "ResultMessage",
    "SUCCESS_MESSAGE",
    "StatementExecutor",
    "StatementResult",
    "is_result_set_statement",
    "parse_json_rows",
]
