"""Query pad widget: script input, completion hints and statement results."""

from __future__ import annotations

import asyncio
import re
from typing import Sequence

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Input, Static

from duckcli.query import StatementResult
from duckcli.session import SessionManager
from duckcli.sqlintel import CompletionEntry, match_completions

_WORD_AT_END = re.compile(r"[A-Za-z_][A-Za-z0-9_]*$")


class QueryPad(Container):
    """Editor surface that runs scripts through the active session."""

    DEFAULT_CSS = """
    QueryPad {
        layout: vertical;
        border: round $primary 40%;
        padding: 1 2;
        height: 1fr;
        background: $surface;
    }

    QueryPad .panel-title {
        text-style: bold;
    }

    QueryPad Input {
        border: heavy $primary;
    }

    #query-hints {
        height: auto;
        min-height: 3;
        color: $text-muted;
    }

    QueryPad .query-actions {
        height: auto;
        margin-top: 1;
    }

    QueryPad .query-actions > * {
        margin-right: 1;
    }

    #query-results {
        height: 1fr;
        margin-top: 1;
        border-top: solid $surface-darken-2;
    }

    #query-messages {
        height: auto;
        max-height: 8;
    }
    """

    HINT_DELAY = 0.15
    HINT_LIMIT = 5
    RESULT_LIMIT = 200

    def __init__(self, session_manager: SessionManager) -> None:
        super().__init__(id="query-pad")
        self._session_manager = session_manager

    def compose(self) -> ComposeResult:
        yield Static("Query Pad", classes="panel-title")
        yield Input(placeholder="SELECT 42 AS answer; CREATE TABLE t (id INTEGER);", id="query-input")
        yield Static("", id="query-hints")
        yield Horizontal(
            Button("Run script", id="run-query", variant="primary"),
            Static("", id="query-status"),
            classes="query-actions",
        )
        yield DataTable(id="query-results", zebra_stripes=True)
        yield Static("", id="query-messages")

    async def on_input_changed(self, event: Input.Changed) -> None:
        self.run_worker(self._refresh_hints(event.value), exclusive=True, group="hints")

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        await self.run_current_query()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "run-query":
            await self.run_current_query()

    async def run_current_query(self) -> None:
        sql = self.query_one("#query-input", Input).value.strip()
        if not sql:
            self._set_status("Enter SQL to run.")
            return
        if self._session_manager.driver is None:
            self._set_status("No active profile.")
            return
        self._set_status("Executing…")
        results = await self._session_manager.run_script(sql)
        self.render_results(results)

    def render_results(self, results: Sequence[StatementResult]) -> None:
        table = self.query_one("#query-results", DataTable)
        table.clear(columns=True)
        shown = next((result for result in reversed(results) if result.rows), None)
        if shown is not None:
            table.add_columns(*shown.columns)
            for row in shown.rows[: self.RESULT_LIMIT]:
                table.add_row(*(self._format_cell(row.get(column)) for column in shown.columns))

        lines: list[str] = []
        for result in results:
            if result.error:
                lines.append(f"✖ {result.messages[0].message}")
                continue
            if result.rows:
                lines.append(f"✔ {len(result.rows)} row(s): {_first_line(result.query)}")
            lines.extend(f"ℹ {message.message}" for message in result.messages)
        self.query_one("#query-messages", Static).update("\n".join(lines))

        failed = any(result.error for result in results)
        summary = f"{len(results)} statement(s)"
        self._set_status(f"{summary}, stopped on error" if failed else summary)

    async def _refresh_hints(self, buffer: str) -> None:
        await asyncio.sleep(self.HINT_DELAY)
        match = _WORD_AT_END.search(buffer)
        hints = self.query_one("#query-hints", Static)
        if not match or self._session_manager.driver is None:
            hints.update("")
            return
        completions = await self._session_manager.completions()
        entries = match_completions(completions, match.group(0), limit=self.HINT_LIMIT)
        hints.update(self._format_hints(entries))

    @staticmethod
    def _format_hints(entries: Sequence[CompletionEntry]) -> str:
        return "\n".join(f"{entry.label} · {entry.detail}" for entry in entries)

    def _set_status(self, message: str) -> None:
        self.query_one("#query-status", Static).update(message)

    @staticmethod
    def _format_cell(value: object) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        return str(value)


def _first_line(statement: str) -> str:
    line = statement.strip().splitlines()[0] if statement.strip() else ""
    return line[:60]


__all__ = ["QueryPad"]
