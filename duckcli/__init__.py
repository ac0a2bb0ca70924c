"""Query DuckDB databases through the ``duckdb`` command-line executable."""

from __future__ import annotations

__version__ = "0.1.0"
