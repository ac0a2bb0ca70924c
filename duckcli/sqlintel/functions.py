"""Fold function metadata rows into completion entries."""

from __future__ import annotations

from typing import Iterable, MutableMapping

from .models import CompletionEntry, FunctionMeta, FunctionRecord, MarkdownString

MAX_RETURN_TYPES = 3
MAX_TAGS = 6
MAX_SIGNATURES = 8


def group_functions(records: Iterable[FunctionRecord]) -> dict[str, FunctionMeta]:
    """Group overloads by label, keeping every category, signature and tag seen."""

    grouped: dict[str, FunctionMeta] = {}
    for record in records:
        grouped.setdefault(record.label, FunctionMeta()).merge(record)
    return grouped


def render_documentation(label: str, meta: FunctionMeta) -> str:
    return_types = meta.return_types[:MAX_RETURN_TYPES]
    tags = meta.tags[:MAX_TAGS]
    signatures = meta.signatures[:MAX_SIGNATURES]

    lines = ["```yaml", f"WORD: {label}", f"TYPE: {', '.join(meta.categories) or 'FUNCTION'}"]
    if return_types:
        lines.append(f"RETURNS: {', '.join(return_types)}")
    if tags:
        lines.append(f"TAGS: {', '.join(tags)}")
    lines.append("```")
    value = "\n".join(lines)

    if signatures:
        bullets = "\n".join(f"- `{signature}`" for signature in signatures)
        value += f"\n\nSignatures:\n{bullets}"
    if meta.description:
        value += f"\n\n{meta.description}"
    return value


def add_function_completions(
    records: Iterable[FunctionRecord],
    completions: MutableMapping[str, CompletionEntry],
) -> None:
    """Add function entries; keyword entries with the same label gain the docs instead."""

    for label, meta in group_functions(records).items():
        documentation = render_documentation(label, meta)
        existing = completions.get(label)
        if existing is not None:
            existing.append_documentation(documentation)
            continue
        completions[label] = CompletionEntry(
            label=label,
            detail=meta.signatures[0] if meta.signatures else f"{label}(...)",
            filter_text=label,
            sort_text=f"4:{label}",
            documentation=MarkdownString(documentation),
        )


__all__ = ["add_function_completions", "group_functions", "render_documentation"]
