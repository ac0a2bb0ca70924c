"""Tests for the query pad and status bar."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from textual.widgets import DataTable, Input

from duckcli import app as app_module
from duckcli.app import DuckCliApp
from duckcli.config import AppConfig, ConnectionSettings
from duckcli.driver import DuckDBDriver
from duckcli.models import ConnectionHandle, Row
from duckcli.session import SessionManager, SessionState
from duckcli.widgets import QueryPad
from duckcli.widgets.status_bar import describe_state


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class _Resolver:
    async def resolve(self) -> str:
        return "/usr/bin/duckdb"


class _Executor:
    async def run(self, handle: ConnectionHandle, statement: str) -> list[Row]:
        if statement.startswith("SELECT 42"):
            return [{"answer": 42, "label": None}]
        return []


def _driver(settings: ConnectionSettings) -> DuckDBDriver:
    return DuckDBDriver(settings, resolver=_Resolver(), executor=_Executor())


def test_describe_state_lists_profile_details() -> None:
    state = SessionState(
        profile=ConnectionSettings(name="Archive", database="archive.duckdb", read_only=True),
        connected=False,
        refreshed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        status="Unavailable",
        last_error="DuckDB CLI executable was not found.\nAttempted: duckdb",
    )

    text = describe_state(state)

    assert text.startswith("Profile: Archive | Database: archive.duckdb | Mode: read-only")
    assert "Status: Unavailable" in text
    assert text.endswith("Error: DuckDB CLI executable was not found.")


@pytest.mark.anyio
async def test_query_pad_renders_last_result_set(monkeypatch: pytest.MonkeyPatch) -> None:
    config = AppConfig(profiles=[ConnectionSettings(name="Scratch")])
    monkeypatch.setattr(app_module, "_load_app_config", lambda: config)
    manager = SessionManager(config, driver_factory=_driver)
    app = DuckCliApp(session_manager=manager)

    async with app.run_test() as pilot:
        await pilot.pause()
        assert manager.state is not None
        assert manager.state.connected is True

        app.query_one("#query-input", Input).value = "SELECT 42 AS answer, NULL AS label; CREATE TABLE t (id INTEGER)"
        await app.query_one(QueryPad).run_current_query()
        await pilot.pause()

        table = app.query_one("#query-results", DataTable)
        assert table.row_count == 1
        assert len(table.columns) == 2
        assert table.get_row_at(0) == ["42", "NULL"]
