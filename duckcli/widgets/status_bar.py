"""Status bar widget that mirrors session information."""

from __future__ import annotations

from typing import Callable

from textual.widgets import Static

from duckcli.session import SessionManager, SessionState


class StatusBar(Static):
    """Compact status strip rendered above Textual's footer."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $surface-darken-3;
        color: $text;
    }
    """

    def __init__(self, session_manager: SessionManager) -> None:
        super().__init__("", id="status-bar")
        self._session_manager = session_manager
        self._unsubscribe: Callable[[], None] | None = None

    async def on_mount(self) -> None:
        self._unsubscribe = self._session_manager.subscribe(self._handle_session_update)

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_session_update(self, state: SessionState) -> None:
        self.update(describe_state(state))


def describe_state(state: SessionState) -> str:
    profile = state.profile
    mode = "read-only" if profile.read_only else "read-write"
    parts = [
        f"Profile: {profile.name}",
        f"Database: {profile.database}",
        f"Mode: {mode}",
        f"Status: {state.status}",
        f"CLI: {state.executable or '—'}",
        f"Refreshed: {state.refreshed_at.astimezone().strftime('%H:%M:%S')}",
    ]
    if state.last_error:
        parts.append(f"Error: {state.last_error.splitlines()[0][:80]}")
    return " | ".join(parts)


__all__ = ["StatusBar", "describe_state"]
