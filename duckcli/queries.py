"""Introspection and explorer queries issued through the DuckDB CLI.

Identifiers and literals are rendered with sqlglot so user-supplied table names and
search text are quoted for the DuckDB dialect.
"""

from __future__ import annotations

from typing import Iterable

from sqlglot import exp

DIALECT = "duckdb"
DEFAULT_SCHEMA = "main"

KEYWORDS_QUERY = (
    "SELECT UPPER(keyword_name) AS label, UPPER(keyword_category) AS category "
    "FROM duckdb_keywords() ORDER BY keyword_name;"
)

FUNCTIONS_QUERY = """
SELECT
  function_name AS label,
  UPPER(function_type) AS category,
  function_type AS functionType,
  description,
  return_type AS returnType,
  to_json(parameters) AS parameters,
  to_json(parameter_types) AS parameterTypes,
  to_json(tags) AS tags
FROM duckdb_functions()
WHERE function_name IS NOT NULL
  AND length(trim(function_name)) > 0
ORDER BY function_name;
"""

LEGACY_FUNCTIONS_QUERY = "PRAGMA functions;"

_EXCLUDED_SCHEMAS = "('information_schema', 'pg_catalog')"

_PRIMARY_KEYS = """
LEFT JOIN (
  SELECT KCU.table_schema, KCU.table_name, KCU.column_name
  FROM information_schema.table_constraints AS TC
  INNER JOIN information_schema.key_column_usage AS KCU
    ON TC.constraint_name = KCU.constraint_name
    AND TC.table_schema = KCU.table_schema
    AND TC.table_name = KCU.table_name
  WHERE TC.constraint_type = 'PRIMARY KEY'
) AS PK
  ON PK.table_schema = C.table_schema
  AND PK.table_name = C.table_name
  AND PK.column_name = C.column_name"""


def literal(value: object) -> str:
    """Render ``value`` as a DuckDB string literal."""

    return exp.Literal.string(str(value)).sql(dialect=DIALECT)


def _table(table: str, schema: str | None) -> exp.Table:
    return exp.table_(table, db=schema or DEFAULT_SCHEMA, quoted=True)


def _like(search: str) -> str:
    return literal(f"%{search.lower()}%")


def fetch_tables(table_type: str = "BASE TABLE", kind: str = "table") -> str:
    return f"""
SELECT table_name AS label,
  table_schema AS schema,
  {literal(kind)} AS type
FROM information_schema.tables
WHERE table_schema NOT IN {_EXCLUDED_SCHEMAS}
  AND LOWER(table_type) = {literal(table_type.lower())}
ORDER BY table_schema, table_name
"""


def fetch_views() -> str:
    return fetch_tables("VIEW", kind="view")


def fetch_columns(table: str, schema: str | None = None) -> str:
    return f"""
SELECT C.column_name AS label,
  C.column_name AS name,
  C.ordinal_position - 1 AS cid,
  C.data_type AS dataType,
  CASE WHEN C.is_nullable = 'YES' THEN 1 ELSE 0 END AS isNullable,
  CASE WHEN PK.column_name IS NULL THEN 0 ELSE 1 END AS isPk,
  'column' AS type
FROM information_schema.columns AS C{_PRIMARY_KEYS}
WHERE C.table_schema = {literal(schema or DEFAULT_SCHEMA)}
  AND C.table_name = {literal(table)}
ORDER BY C.ordinal_position ASC
"""


def describe_table(table: str, schema: str | None = None) -> str:
    return f"""
SELECT C.*
FROM information_schema.columns AS C
WHERE C.table_schema = {literal(schema or DEFAULT_SCHEMA)}
  AND C.table_name = {literal(table)}
ORDER BY C.ordinal_position ASC
"""


def fetch_records(table: str, schema: str | None = None, *, limit: int = 50, offset: int = 0) -> str:
    query = exp.select("*").from_(_table(table, schema)).limit(limit or 50).offset(offset or 0)
    return query.sql(dialect=DIALECT) + ";"


def count_records(table: str, schema: str | None = None) -> str:
    total = exp.alias_(exp.func("count", exp.Literal.number(1)), "total")
    return exp.select(total).from_(_table(table, schema)).sql(dialect=DIALECT) + ";"


def search_tables(search: str = "") -> str:
    condition = ""
    if search:
        pattern = _like(search)
        condition = f"AND (LOWER(table_name) LIKE {pattern} OR LOWER(table_schema) LIKE {pattern})"
    return f"""
SELECT table_name AS label,
  table_schema AS schema,
  CASE WHEN LOWER(table_type) = 'view' THEN 'view' ELSE 'table' END AS type
FROM information_schema.tables
WHERE table_schema NOT IN {_EXCLUDED_SCHEMAS}
{condition}
ORDER BY table_schema, table_name
"""


def search_columns(search: str = "", tables: Iterable[str] = (), *, limit: int = 100) -> str:
    conditions: list[str] = []
    names = [name for name in tables if name]
    if names:
        listed = ", ".join(literal(name.lower()) for name in names)
        conditions.append(f"AND LOWER(C.table_name) IN ({listed})")
    if search:
        pattern = _like(search)
        conditions.append(
            f"AND (LOWER(C.table_name || '.' || C.column_name) LIKE {pattern} "
            f"OR LOWER(C.column_name) LIKE {pattern})"
        )
    filters = "\n".join(conditions)
    return f"""
SELECT C.column_name AS label,
  C.table_name AS "table",
  C.table_schema AS schema,
  C.data_type AS dataType,
  CASE WHEN C.is_nullable = 'YES' THEN 1 ELSE 0 END AS isNullable,
  CASE WHEN PK.column_name IS NULL THEN 0 ELSE 1 END AS isPk,
  'column' AS type
FROM information_schema.columns AS C{_PRIMARY_KEYS}
WHERE C.table_schema NOT IN {_EXCLUDED_SCHEMAS}
{filters}
ORDER BY C.column_name ASC,
  C.ordinal_position ASC
LIMIT {int(limit or 100)}
"""


__all__ = [
    "DEFAULT_SCHEMA",
    "FUNCTIONS_QUERY",
    "KEYWORDS_QUERY",
    "LEGACY_FUNCTIONS_QUERY",
    "count_records",
    "describe_table",
    "fetch_columns",
    "fetch_records",
    "fetch_tables",
    "fetch_views",
    "literal",
    "search_columns",
    "search_tables",
]
