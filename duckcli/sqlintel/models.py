"""Core dataclasses shared by the completion services."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class MarkdownString:
    """Documentation payload rendered by the completion UI."""

    value: str
    kind: str = "markdown"


@dataclass(slots=True)
class CompletionEntry:
    """Single autocomplete entry keyed by its normalized label."""

    label: str
    detail: str
    filter_text: str
    sort_text: str
    documentation: MarkdownString

    def append_documentation(self, value: str) -> None:
        existing = self.documentation.value.strip()
        self.documentation = MarkdownString(f"{existing}\n\n{value}" if existing else value)


@dataclass(frozen=True, slots=True)
class KeywordRecord:
    """Canonical keyword row after adaptation."""

    label: str
    category: str


@dataclass(frozen=True, slots=True)
class FunctionRecord:
    """Canonical function row after adaptation.

    ``parameters`` holds rendered ``name: type`` pairs (or a bare name or type).
    """

    label: str
    category: str
    return_type: str = ""
    description: str = ""
    parameters: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.label}({', '.join(self.parameters)})"


@dataclass(slots=True)
class FunctionMeta:
    """Metadata accumulated across every row sharing a function label."""

    categories: list[str] = field(default_factory=list)
    return_types: list[str] = field(default_factory=list)
    signatures: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    description: str = ""

    def merge(self, record: FunctionRecord) -> None:
        _add(self.categories, record.category)
        if record.return_type:
            _add(self.return_types, record.return_type)
        if record.parameters:
            _add(self.signatures, record.signature)
        for tag in record.tags:
            _add(self.tags, tag)
        if not self.description and record.description:
            self.description = record.description


def _add(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)


__all__ = [
    "CompletionEntry",
    "FunctionMeta",
    "FunctionRecord",
    "KeywordRecord",
    "MarkdownString",
]
