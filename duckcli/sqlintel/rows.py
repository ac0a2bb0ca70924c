"""Adapters that turn loosely-typed introspection rows into canonical records.

Keyword rows come from ``duckdb_keywords()``; function rows arrive either from the
``duckdb_functions()`` catalog query or from the legacy ``PRAGMA functions`` listing.
Each shape is validated by its own model and normalized through ``to_record``; nothing
past this module sees the raw row dictionaries.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .models import FunctionRecord, KeywordRecord

_LABEL = re.compile(r"[A-Z_][A-Z0-9_]*")
_EDGE_QUOTES = re.compile(r"^['\"]|['\"]$")


def normalize_label(value: object) -> str | None:
    """Uppercase ``value`` and accept it only when it is identifier-shaped."""

    label = _text(value).upper()
    if not label or not _LABEL.fullmatch(label):
        return None
    return label


def to_string_list(value: object) -> list[str]:
    """Flatten parameter lists given as sequences or bracketed text like ``[a, 'b']``."""

    if isinstance(value, (list, tuple)):
        return [item for item in (_text(entry) for entry in value) if item]
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return []
        if trimmed.startswith("[") and trimmed.endswith("]"):
            inner = trimmed[1:-1].strip()
            if not inner:
                return []
            items = (_EDGE_QUOTES.sub("", part.strip()) for part in inner.split(","))
            return [item for item in items if item]
        return [trimmed]
    return []


def to_tag_list(value: object) -> list[str]:
    """Flatten tags given as JSON text, mappings (``key=value``), lists or scalars."""

    if not value:
        return []
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return []
        try:
            decoded = json.loads(trimmed)
        except json.JSONDecodeError:
            return [trimmed]
        return to_tag_list(decoded)
    if isinstance(value, Mapping):
        tags: list[str] = []
        for key, raw in value.items():
            text = _text(raw)
            tags.append(f"{key}={text}" if text else str(key))
        return [tag for tag in tags if tag]
    if isinstance(value, (list, tuple)):
        flattened: list[str] = []
        for item in value:
            flattened.extend(to_tag_list(item))
        return flattened
    return [str(value)]


def render_parameters(names: object, types: object) -> tuple[str, ...]:
    """Pair parameter names with their types, positionally."""

    name_list = to_string_list(names)
    type_list = to_string_list(types)
    rendered: list[str] = []
    for index in range(max(len(name_list), len(type_list))):
        name = name_list[index] if index < len(name_list) else ""
        kind = type_list[index] if index < len(type_list) else ""
        if name and kind and name != kind:
            rendered.append(f"{name}: {kind}")
        elif name or kind:
            rendered.append(name or kind)
    return tuple(rendered)


class _SourceRow(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class KeywordRow(_SourceRow):
    """Row returned by the keyword listing query."""

    label: Any = None
    category: Any = None

    def to_record(self) -> KeywordRecord | None:
        label = normalize_label(self.label)
        if label is None:
            return None
        return KeywordRecord(label=label, category=_text(self.category or "KEYWORD").upper())


class CatalogFunctionRow(_SourceRow):
    """Row returned by the ``duckdb_functions()`` catalog query."""

    label: Any = None
    name: Any = None
    category: Any = None
    function_type: Any = Field(default=None, validation_alias=AliasChoices("functionType", "function_type"))
    type_: Any = Field(default=None, validation_alias="type")
    description: Any = None
    return_type: Any = Field(default=None, validation_alias=AliasChoices("returnType", "return_type"))
    parameters: Any = None
    parameter_types: Any = Field(
        default=None,
        validation_alias=AliasChoices("parameterTypes", "parameter_types"),
    )
    tags: Any = None

    def to_record(self) -> FunctionRecord | None:
        label = normalize_label(self.label or self.name)
        if label is None:
            return None
        category = _text(self.category or self.function_type or self.type_ or "FUNCTION").upper()
        return FunctionRecord(
            label=label,
            category=category or "FUNCTION",
            return_type=_text(self.return_type),
            description=_text(self.description),
            parameters=render_parameters(self.parameters, self.parameter_types),
            tags=tuple(to_tag_list(self.tags)),
        )


class LegacyFunctionRow(_SourceRow):
    """Row returned by ``PRAGMA functions``."""

    name: Any = None
    type_: Any = Field(default=None, validation_alias="type")
    return_type: Any = None
    parameters: Any = None

    def to_record(self) -> FunctionRecord | None:
        label = normalize_label(self.name)
        if label is None:
            return None
        return FunctionRecord(
            label=label,
            category=_text(self.type_ or "FUNCTION").upper() or "FUNCTION",
            return_type=_text(self.return_type),
            parameters=render_parameters(self.parameters, None),
        )


SourceRow = Union[KeywordRow, CatalogFunctionRow, LegacyFunctionRow]
_Row = TypeVar("_Row", KeywordRow, CatalogFunctionRow, LegacyFunctionRow)


def adapt_rows(model: type[_Row], rows: Iterable[object]) -> list[Any]:
    """Validate ``rows`` against ``model`` and keep the records with usable labels."""

    records = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        record = model.model_validate(dict(row)).to_record()
        if record is not None:
            records.append(record)
    return records


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


__all__ = [
    "CatalogFunctionRow",
    "KeywordRow",
    "LegacyFunctionRow",
    "SourceRow",
    "adapt_rows",
    "normalize_label",
    "render_parameters",
    "to_string_list",
    "to_tag_list",
]
