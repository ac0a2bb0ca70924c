"""DuckDB driver backed by the ``duckdb`` command-line executable."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping

from . import queries
from .config import ConfigurationError, ConnectionSettings
from .models import ConnectionHandle, Row
from .query import CliStatementExecutor, QueryExecutionError, StatementExecutor, StatementResult
from .resolver import ExecutableResolver, ResolutionError
from .splitter import split_statements
from .sqlintel import CompletionEntry, CompletionSynthesizer

LOG = logging.getLogger(__name__)


class DuckDBDriver:
    """Runs SQL scripts against one database through the DuckDB CLI.

    The connection handle is resolved lazily on first use and reused until
    :meth:`close`. Concurrent callers of :meth:`open` share one in-flight resolution.
    """

    def __init__(
        self,
        settings: ConnectionSettings,
        *,
        resolver: ExecutableResolver | None = None,
        executor: StatementExecutor | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._settings = settings
        self._resolver = resolver or ExecutableResolver(settings, environ=environ)
        self._executor = executor or CliStatementExecutor()
        self._handle: ConnectionHandle | None = None
        self._opening: asyncio.Task[ConnectionHandle] | None = None
        self._completions = CompletionSynthesizer(self.query_results)

    @property
    def settings(self) -> ConnectionSettings:
        return self._settings

    @property
    def connection_id(self) -> str:
        return self._settings.connection_id

    @property
    def handle(self) -> ConnectionHandle | None:
        """Current connection handle, if one has been opened."""

        return self._handle

    async def open(self) -> ConnectionHandle:
        if self._handle is not None:
            return self._handle
        if self._opening is None:
            self._opening = asyncio.ensure_future(self._open())
        return await asyncio.shield(self._opening)

    async def close(self) -> None:
        """Drop the connection handle and the completion index built for it.

        An open or completion build still in flight is detached, not cancelled, so its
        current waiters finish normally.
        """

        self._handle = None
        self._opening = None
        self._completions.reset()

    async def _open(self) -> ConnectionHandle:
        task = asyncio.current_task()
        try:
            self._settings.ensure_valid()
            executable = await self._resolver.resolve()
        finally:
            detached = self._opening is not task
            if not detached:
                self._opening = None
        handle = ConnectionHandle(
            database_path=self._settings.database_target(),
            executable_path=executable,
            read_only=self._settings.read_only,
        )
        if detached:
            # closed mid-resolution: waiters get the handle, the driver does not keep it
            return handle
        self._handle = handle
        LOG.debug("Opened %s with %s", handle.database_path, handle.executable_path)
        return handle

    async def query(self, script: str, *, request_id: str | None = None) -> list[StatementResult]:
        """Execute every statement of ``script`` in order.

        The first failing statement produces an error result and ends the batch; results
        gathered before it are returned alongside it.
        """

        results: list[StatementResult] = []
        for statement in split_statements(str(script)):
            try:
                handle = await self.open()
                rows = await self._executor.run(handle, statement)
            except (QueryExecutionError, ResolutionError, ConfigurationError) as exc:
                LOG.debug("Statement failed: %s", exc)
                results.append(
                    StatementResult.failure(
                        statement,
                        exc,
                        request_id=request_id,
                        connection_id=self.connection_id,
                    )
                )
                break
            results.append(
                StatementResult.success(
                    statement,
                    rows,
                    request_id=request_id,
                    connection_id=self.connection_id,
                )
            )
        return results

    async def query_results(self, sql: str) -> list[Row]:
        """Rows of the first statement in ``sql``; raises when it failed."""

        results = await self.query(sql)
        if not results:
            return []
        first = results[0]
        if first.error:
            raw = first.raw_error
            if isinstance(raw, QueryExecutionError):
                raise raw
            raise QueryExecutionError(first.messages[0].message) from raw
        return list(first.rows)

    async def test_connection(self) -> None:
        await self.open()
        await self.query_results("SELECT 1")

    async def get_static_completions(self) -> dict[str, CompletionEntry]:
        """Completion index for this connection, computed once and cached."""

        return await self._completions.completions()

    async def fetch_tables(self) -> list[Row]:
        return await self.query_results(queries.fetch_tables())

    async def fetch_views(self) -> list[Row]:
        return await self.query_results(queries.fetch_views())

    async def fetch_columns(self, table: str, schema: str | None = None) -> list[Row]:
        return await self.query_results(queries.fetch_columns(table, schema))

    async def describe_table(self, table: str, schema: str | None = None) -> list[Row]:
        return await self.query_results(queries.describe_table(table, schema))

    async def fetch_records(
        self,
        table: str,
        schema: str | None = None,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Row]:
        return await self.query_results(queries.fetch_records(table, schema, limit=limit, offset=offset))

    async def count_records(self, table: str, schema: str | None = None) -> int:
        rows = await self.query_results(queries.count_records(table, schema))
        if not rows:
            return 0
        return int(rows[0].get("total") or 0)

    async def search_tables(self, search: str = "") -> list[Row]:
        return await self.query_results(queries.search_tables(search))

    async def search_columns(
        self,
        search: str = "",
        tables: Iterable[str] = (),
        *,
        limit: int = 100,
    ) -> list[Row]:
        return await self.query_results(queries.search_columns(search, tables, limit=limit))


__all__ = ["DuckDBDriver"]
