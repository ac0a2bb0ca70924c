"""Shared dataclasses used across driver/session modules."""

from __future__ import annotations

from dataclasses import dataclass

Row = dict[str, object]


@dataclass(frozen=True, slots=True)
class ConnectionHandle:
    """Resolved, immutable parameters for invoking the CLI against one database."""

    database_path: str
    executable_path: str
    read_only: bool = False


__all__ = ["ConnectionHandle", "Row"]
