"""Connection settings and app configuration loading helpers."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

import tomllib

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "duckcli" / "config.toml"

MEMORY_DATABASE = ":memory:"
READ_ONLY_TOKENS = frozenset({"1", "true", "yes", "enabled", "on"})

_SEPARATOR = re.compile(r"[\\/]")
_DRIVE_PREFIX = re.compile(r"^[a-zA-Z]:")


class ConfigurationError(ValueError):
    """Raised when connection settings describe an unusable combination."""


def is_path_like(candidate: str) -> bool:
    """True when ``candidate`` names a location rather than a bare command."""

    return bool(_SEPARATOR.search(candidate) or _DRIVE_PREFIX.match(candidate))


def is_memory_database(database: str) -> bool:
    return database.strip().lower() == MEMORY_DATABASE


class ConnectionSettings(BaseModel):
    """Settings for a single DuckDB connection profile.

    Keys follow the connection-settings surface (``duckdbCliPath``, ``duckdbPath``,
    ``readOnly``); the snake_case field names are accepted as well.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = "DuckDB"
    database: str = MEMORY_DATABASE
    duckdb_cli_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("duckdbCliPath", "duckdb_cli_path"),
    )
    duckdb_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("duckdbPath", "duckdb_path"),
    )
    read_only: bool = Field(default=False, validation_alias=AliasChoices("readOnly", "read_only"))
    project_root: Path | None = None

    @field_validator("read_only", mode="before")
    @classmethod
    def _coerce_read_only(cls, value: object) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in READ_ONLY_TOKENS
        return False

    @field_validator("database", mode="before")
    @classmethod
    def _default_database(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return MEMORY_DATABASE
        return value

    @property
    def connection_id(self) -> str:
        """Stable identifier attached to every result produced for this profile."""

        return f"{self.name}|{self.database}"

    def root(self) -> Path:
        return self.project_root or Path.cwd()

    def to_absolute(self, value: str) -> str:
        """Resolve ``value`` against the project root unless it is already absolute."""

        if os.path.isabs(value) or _DRIVE_PREFIX.match(value):
            return value
        return str(self.root() / value)

    def database_target(self) -> str:
        """Database argument for the CLI: the in-memory marker or an absolute path."""

        if is_memory_database(self.database):
            return MEMORY_DATABASE
        return self.to_absolute(self.database.strip())

    def configured_executable(self) -> str:
        """Configured CLI path (either alias), absolutized when it looks like a path."""

        configured = (self.duckdb_cli_path or self.duckdb_path or "").strip()
        if configured and is_path_like(configured):
            return self.to_absolute(configured)
        return configured

    def ensure_valid(self) -> None:
        """Reject combinations that can never produce a working connection."""

        if not self.read_only:
            return
        if is_memory_database(self.database):
            raise ConfigurationError('Read-only mode is not supported with ":memory:" database.')
        target = self.database_target()
        if not os.path.exists(target):
            raise ConfigurationError(f'Database file not found for read-only mode: "{target}"')


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    theme: str = "dark"
    profiles: list[ConnectionSettings] = Field(default_factory=lambda: list(_default_profiles()))
    active_profile: str | None = None

    def profile(self, name: str) -> ConnectionSettings:
        for profile in self.profiles:
            if profile.name == name:
                return profile
        raise ValueError(f"Profile '{name}' not found.")

    def with_active_profile(self, name: str) -> AppConfig:
        """Return a copy with the active profile updated."""

        return self.model_copy(update={"active_profile": name})


def load_config() -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing or unreadable."""

    try:
        with CONFIG_FILE.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError) as exc:
        LOG.warning("Ignoring unreadable config file %s: %s", CONFIG_FILE, exc)
        return AppConfig()

    profiles: list[ConnectionSettings] = []
    for entry in raw.get("profiles") or ():
        if not isinstance(entry, dict) or not entry.get("name"):
            continue
        try:
            profiles.append(ConnectionSettings.model_validate(entry))
        except ValidationError as exc:
            LOG.warning("Skipping invalid profile %r: %s", entry.get("name"), exc)

    theme = raw.get("theme")
    active_profile = raw.get("active_profile")
    return AppConfig(
        theme=theme if isinstance(theme, str) else AppConfig.model_fields["theme"].default,
        profiles=profiles or list(_default_profiles()),
        active_profile=active_profile if isinstance(active_profile, str) else None,
    )


def save_config(config: AppConfig) -> None:
    """Persist configuration to disk."""

    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = [f"theme = {_quote(config.theme)}"]
    if config.active_profile:
        lines.append(f"active_profile = {_quote(config.active_profile)}")
    for profile in config.profiles:
        lines.append("")
        lines.append("[[profiles]]")
        lines.append(f"name = {_quote(profile.name)}")
        lines.append(f"database = {_quote(profile.database)}")
        if profile.duckdb_cli_path:
            lines.append(f"duckdbCliPath = {_quote(profile.duckdb_cli_path)}")
        if profile.duckdb_path:
            lines.append(f"duckdbPath = {_quote(profile.duckdb_path)}")
        if profile.read_only:
            lines.append("readOnly = true")
    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _default_profiles() -> tuple[ConnectionSettings, ...]:
    """Default profile shown on first run before config is customized."""

    return (ConnectionSettings(name="In-memory"),)


__all__ = [
    "AppConfig",
    "CONFIG_FILE",
    "ConfigurationError",
    "ConnectionSettings",
    "MEMORY_DATABASE",
    "READ_ONLY_TOKENS",
    "is_memory_database",
    "is_path_like",
    "load_config",
    "save_config",
]
