"""Textual application entry point for duckcli."""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import Footer, Header

from .config import AppConfig, load_config, save_config
from .session import SessionManager
from .widgets import QueryPad, StatusBar

LOG = logging.getLogger(__name__)


def _load_app_config() -> AppConfig:
    """Load configuration with a small wrapper for future overrides."""

    return load_config()


class DuckCliApp(App[None]):
    """Terminal query pad for DuckDB databases driven through the CLI."""

    TITLE = "duckcli"
    CSS = """
    Screen {
        layout: vertical;
    }
    #main-column {
        layout: vertical;
        padding: 1 2;
        height: 1fr;
    }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+r", "reconnect", "Reconnect"),
    ]

    def __init__(self, *, session_manager: SessionManager | None = None) -> None:
        super().__init__()
        self._config = _load_app_config()
        self._session_manager = session_manager or SessionManager(self._config)

    @property
    def session_manager(self) -> SessionManager:
        """Expose the session manager for tests."""

        return self._session_manager

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Container(QueryPad(self._session_manager), id="main-column")
        yield StatusBar(self._session_manager)
        yield Footer()

    async def on_mount(self) -> None:
        name = self._session_manager.initial_profile_name()
        if not name:
            return
        try:
            await self._activate(name)
        except ValueError as exc:
            self.notify(str(exc), severity="error")

    async def _shutdown(self) -> None:
        await self._session_manager.close()
        await super()._shutdown()

    async def action_reconnect(self) -> None:
        name = self._session_manager.active_profile_name
        if name:
            await self._activate(name)

    async def switch_profile(self, name: str) -> None:
        """Activate the requested connection profile and persist the choice."""

        try:
            await self._activate(name)
        except ValueError as exc:
            self.notify(str(exc), severity="error")
            return
        self._config = self._config.with_active_profile(name)
        save_config(self._config)

    async def _activate(self, name: str) -> None:
        state = await self._session_manager.connect(name)
        if state.last_error:
            LOG.warning("Profile %s unavailable: %s", name, state.last_error)
            self.notify(state.last_error.splitlines()[0][:120], severity="warning")
        else:
            self.notify(f"Connected to {state.profile.name}", severity="information")


def main() -> None:
    """Invoke the Textual application."""

    DuckCliApp().run()


if __name__ == "__main__":
    main()
