"""Locate and validate a runnable DuckDB CLI executable."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Sequence

from .config import ConnectionSettings, is_path_like
from .process import ProcessError, run_process

LOG = logging.getLogger(__name__)

DUCKDB_CLI_PATH_ENV = "DUCKDB_CLI_PATH"
LEGACY_WINDOWS_CLI_PATH = "M:\\Programs\\duckdb\\duckdb.exe"
MAX_REPORTED_ATTEMPTS = 5

AUTO_EXECUTABLE_CANDIDATES: Mapping[str, tuple[str, ...]] = {
    "win32": (
        "duckdb.exe",
        LEGACY_WINDOWS_CLI_PATH,
        "C:\\Program Files\\DuckDB\\duckdb.exe",
        "C:\\Program Files (x86)\\DuckDB\\duckdb.exe",
    ),
    "darwin": (
        "duckdb",
        "/opt/homebrew/bin/duckdb",
        "/usr/local/bin/duckdb",
        "/usr/bin/duckdb",
    ),
    "linux": (
        "duckdb",
        "/usr/local/bin/duckdb",
        "/usr/bin/duckdb",
        "/snap/bin/duckdb",
    ),
}


class ResolutionError(RuntimeError):
    """Raised when no usable DuckDB CLI executable can be found."""


@dataclass(frozen=True, slots=True)
class CandidateSource:
    """One step of the resolution chain.

    ``strict`` sources report their first invalid candidate instead of falling through
    to later sources.
    """

    name: str
    candidates: Callable[[], Sequence[str]]
    strict: bool = False
    invalid_prefix: str = ""


class ExecutableResolver:
    """Resolves the CLI from settings, then the environment, then platform defaults."""

    def __init__(
        self,
        settings: ConnectionSettings,
        *,
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
    ) -> None:
        self._settings = settings
        self._environ = environ if environ is not None else os.environ
        self._platform = platform or sys.platform

    def sources(self) -> tuple[CandidateSource, ...]:
        """Ordered resolution chain; the first validated candidate wins."""

        return (
            CandidateSource(
                name="settings",
                candidates=self._configured_candidates,
                strict=True,
                invalid_prefix='Invalid "duckdbCliPath" / "duckdbPath"',
            ),
            CandidateSource(
                name="environment",
                candidates=self._environment_candidates,
                strict=True,
                invalid_prefix=f"Invalid environment variable {DUCKDB_CLI_PATH_ENV}",
            ),
            CandidateSource(name="auto-discovery", candidates=self.auto_candidates),
        )

    async def resolve(self) -> str:
        attempts: list[str] = []
        for source in self.sources():
            for candidate in source.candidates():
                try:
                    await self.validate(candidate)
                except ResolutionError as exc:
                    if source.strict:
                        raise ResolutionError(f'{source.invalid_prefix}: "{candidate}". {exc}') from exc
                    LOG.debug("Rejected %s candidate %s: %s", source.name, candidate, exc)
                    attempts.append(f"{candidate} -> {exc}")
                    continue
                LOG.debug("Resolved DuckDB CLI from %s: %s", source.name, candidate)
                return candidate

        attempted = ""
        if attempts:
            attempted = f" Attempted: {' | '.join(attempts[:MAX_REPORTED_ATTEMPTS])}"
        raise ResolutionError(
            "DuckDB CLI executable was not found. "
            f'Set "duckdbCliPath" in the connection settings or add "duckdb" to your PATH.{attempted}'
        )

    async def validate(self, candidate: str) -> None:
        """Check the candidate exists (when path-like) and answers ``--version``."""

        if is_path_like(candidate) and not Path(candidate).exists():
            raise ResolutionError(f'DuckDB executable not found at "{candidate}".')
        try:
            await run_process(candidate, ["--version"])
        except ProcessError as exc:
            raise ResolutionError(f"DuckDB CLI validation failed. {exc.detail}") from exc

    def auto_candidates(self) -> tuple[str, ...]:
        candidates = list(AUTO_EXECUTABLE_CANDIDATES.get(self._platform, ("duckdb",)))
        bare = "duckdb.exe" if self._platform == "win32" else "duckdb"
        if bare not in candidates:
            candidates.append(bare)
        return tuple(candidates)

    def _configured_candidates(self) -> tuple[str, ...]:
        configured = self._settings.configured_executable()
        return (configured,) if configured else ()

    def _environment_candidates(self) -> tuple[str, ...]:
        value = (self._environ.get(DUCKDB_CLI_PATH_ENV) or "").strip()
        if not value:
            return ()
        if is_path_like(value):
            value = self._settings.to_absolute(value)
        return (value,)


__all__ = [
    "AUTO_EXECUTABLE_CANDIDATES",
    "DUCKDB_CLI_PATH_ENV",
    "CandidateSource",
    "ExecutableResolver",
    "ResolutionError",
]
