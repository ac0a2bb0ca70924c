"""Session manager wiring connection profiles to DuckDB drivers."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from .config import AppConfig, ConfigurationError, ConnectionSettings
from .driver import DuckDBDriver
from .query import StatementResult
from .resolver import ResolutionError
from .sqlintel import CompletionEntry

LOG = logging.getLogger(__name__)

SessionListener = Callable[["SessionState"], None]
DriverFactory = Callable[[ConnectionSettings], DuckDBDriver]


@dataclass(frozen=True, slots=True)
class SessionState:
    """Current session snapshot (active profile + connection status)."""

    profile: ConnectionSettings
    connected: bool
    refreshed_at: datetime
    status: str = "Connected"
    executable: str | None = None
    last_error: str | None = None


class SessionManager:
    """Keeps one driver per active profile and tells listeners when it changes."""

    def __init__(self, config: AppConfig, *, driver_factory: DriverFactory = DuckDBDriver) -> None:
        self._config = config
        self._driver_factory = driver_factory
        self._listeners: set[SessionListener] = set()
        self._driver: DuckDBDriver | None = None
        self._state: SessionState | None = None

    @property
    def profiles(self) -> tuple[ConnectionSettings, ...]:
        return tuple(self._config.profiles)

    @property
    def state(self) -> SessionState | None:
        return self._state

    @property
    def driver(self) -> DuckDBDriver | None:
        return self._driver

    @property
    def active_profile_name(self) -> str | None:
        if self._state:
            return self._state.profile.name
        return None

    def initial_profile_name(self) -> str | None:
        """Configured active profile, else the first profile."""

        if self._config.active_profile:
            return self._config.active_profile
        return self._config.profiles[0].name if self._config.profiles else None

    async def connect(self, name: str) -> SessionState:
        """Activate the requested profile, closing the previous driver."""

        profile = self._config.profile(name)
        if self._driver is not None:
            await self._driver.close()
        self._driver = self._driver_factory(profile)
        try:
            handle = await self._driver.open()
        except (ConfigurationError, ResolutionError) as exc:
            LOG.warning("Could not open profile %r: %s", profile.name, exc)
            self._update_state(profile, connected=False, status="Unavailable", last_error=str(exc))
        else:
            self._update_state(profile, connected=True, executable=handle.executable_path)
        return self._state

    async def run_script(self, sql: str) -> list[StatementResult]:
        """Execute ``sql`` on the active driver under a fresh request id."""

        driver = self._require_driver()
        return await driver.query(sql, request_id=str(uuid.uuid4()))

    async def completions(self) -> dict[str, CompletionEntry]:
        return await self._require_driver().get_static_completions()

    async def close(self) -> None:
        if self._driver is not None:
            await self._driver.close()
            self._driver = None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Subscribe to session updates; returns an unsubscribe handle."""

        self._listeners.add(listener)
        if self._state:
            listener(self._state)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def _require_driver(self) -> DuckDBDriver:
        if self._driver is None:
            raise RuntimeError("No active profile; call connect() first.")
        return self._driver

    def _update_state(
        self,
        profile: ConnectionSettings,
        *,
        connected: bool,
        status: str = "Connected",
        executable: str | None = None,
        last_error: str | None = None,
    ) -> None:
        self._state = SessionState(
            profile=profile,
            connected=connected,
            refreshed_at=datetime.now(tz=timezone.utc),
            status=status,
            executable=executable,
            last_error=last_error,
        )
        for listener in tuple(self._listeners):
            listener(self._state)


__all__ = ["SessionManager", "SessionState"]
