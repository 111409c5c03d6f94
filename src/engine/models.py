"""Core data model for the annotation resolution engine.

In-memory value types (paths, declarations, call nodes, comments, markers,
ranges) are frozen dataclasses. ``Symbol`` is a pydantic record because its
visibility is mutated in place by the resolver and it is serialized as-is.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

SymbolKind = Literal["constant", "instance_method", "class_method"]
Visibility = Literal["public", "private", "protected"]
ArgumentKind = Literal[
    "string",
    "identifier",
    "attribute",
    "splat",
    "keyword",
    "expression",
]

Namespace = tuple[str, ...]

_CONSTANT_NAME = re.compile(r"^[A-Z][A-Za-z0-9_]*$")


def is_constant_name(name: str) -> bool:
    """Return True if ``name`` is shaped like a constant (leading capital)."""
    return bool(_CONSTANT_NAME.match(name))


def format_namespace(namespace: Namespace) -> str:
    return ".".join(namespace) if namespace else "<root>"


class DirectiveKind(str, Enum):
    """Recognized visibility directive shapes."""

    MARK_CONSTANT_PRIVATE = "mark_constant_private"
    MARK_METHOD_PRIVATE = "mark_method_private"


class MarkerAction(str, Enum):
    """Recognized suppression marker actions."""

    DISABLE = "disable"
    ENABLE = "enable"


@dataclass(frozen=True, order=True)
class SymbolPath:
    """Fully qualified identity of a symbol: namespace chain, name and kind."""

    namespace: Namespace
    name: str
    kind: SymbolKind

    @property
    def qualified_name(self) -> str:
        return ".".join((*self.namespace, self.name))

    @property
    def key(self) -> str:
        return f"symkey:{self.qualified_name}::{self.kind}"

    def __str__(self) -> str:
        return f"{self.qualified_name} ({self.kind})"


class Symbol(BaseModel):
    """A declared symbol and its current visibility."""

    path: SymbolPath
    visibility: Visibility = Field(default="public")
    unit_id: str = Field(description="Source unit that first declared the symbol")
    line: int = Field(description="1-based declaration line")

    def to_dict(self) -> dict[str, object]:
        return {
            "qualified_name": self.path.qualified_name,
            "kind": self.path.kind,
            "visibility": self.visibility,
            "unit": self.unit_id,
            "line": self.line,
        }


@dataclass(frozen=True)
class Declaration:
    """A declaration reported by the host parser."""

    namespace: Namespace
    name: str
    kind: SymbolKind
    line: int

    @property
    def path(self) -> SymbolPath:
        return SymbolPath(self.namespace, self.name, self.kind)


@dataclass(frozen=True)
class CallArgument:
    """One structurally classified argument of a call node."""

    kind: ArgumentKind
    text: str
    value: str | None = None


@dataclass(frozen=True)
class CallNode:
    """A namespace-level call statement reported by the host parser."""

    namespace: Namespace
    callee: str
    line: int
    arguments: tuple[CallArgument, ...] = ()


@dataclass(frozen=True)
class CommentToken:
    """A comment with its 1-based line number.

    ``trailing`` is True when source code precedes the comment on its line.
    """

    line: int
    text: str
    trailing: bool = False


@dataclass(frozen=True)
class SuppressionMarker:
    rule: str
    action: MarkerAction
    line: int
    trailing: bool = False


@dataclass(frozen=True, order=True)
class DisabledRange:
    """Inclusive line interval over which a rule is suppressed."""

    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        if self.start_line < 1 or self.end_line < self.start_line:
            msg = f"Invalid disabled range [{self.start_line}, {self.end_line}]"
            raise ValueError(msg)

    def __contains__(self, line: object) -> bool:
        return isinstance(line, int) and self.start_line <= line <= self.end_line

    def to_dict(self) -> dict[str, int]:
        return {"start_line": self.start_line, "end_line": self.end_line}


@dataclass(frozen=True)
class SourceUnit:
    """Everything the engine needs to know about one parsed source unit."""

    unit_id: str
    line_count: int
    declarations: tuple[Declaration, ...] = ()
    calls: tuple[CallNode, ...] = ()
    comments: tuple[CommentToken, ...] = ()
    namespace: Namespace = field(default_factory=tuple)


__all__ = [
    "ArgumentKind",
    "CallArgument",
    "CallNode",
    "CommentToken",
    "Declaration",
    "DirectiveKind",
    "DisabledRange",
    "MarkerAction",
    "Namespace",
    "SourceUnit",
    "SuppressionMarker",
    "Symbol",
    "SymbolKind",
    "SymbolPath",
    "Visibility",
    "format_namespace",
    "is_constant_name",
]
