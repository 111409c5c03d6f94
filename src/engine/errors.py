"""Diagnostics produced while resolving visibility directives.

These are exception types so they carry a message and can be chained, but the
engine collects and returns them instead of raising them across a run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from engine.models import format_namespace

if TYPE_CHECKING:
    from collections.abc import Sequence

    from engine.models import CallArgument, Namespace, SymbolPath


class DirectiveError(Exception):
    """Base class for directive diagnostics."""

    @property
    def message(self) -> str:
        return str(self)


class InvalidDirectiveArgument(DirectiveError):
    """A directive parameter is neither a literal nor a constant reference."""

    def __init__(
        self,
        directive: str,
        argument: CallArgument,
        *,
        accepts_references: bool = False,
    ) -> None:
        self.directive = directive
        self.argument = argument
        expected = (
            "a string literal or a constant reference"
            if accepts_references
            else "a string literal"
        )
        super().__init__(f"{directive}: argument `{argument.text}` must be {expected}")


class UnresolvedSymbol(DirectiveError):
    """A directive targets a symbol that has not been declared (yet)."""

    def __init__(self, directive: str, path: SymbolPath) -> None:
        self.directive = directive
        self.path = path
        super().__init__(f"{directive}: undefined {path.kind} `{path.qualified_name}`")


class DirectiveFailed(DirectiveError):
    """Aggregate of every parameter failure of one directive call site."""

    def __init__(
        self,
        *,
        directive: str,
        namespace: Namespace,
        unit_id: str,
        line: int,
        errors: Sequence[DirectiveError],
    ) -> None:
        self.directive = directive
        self.namespace = namespace
        self.unit_id = unit_id
        self.line = line
        self.errors = tuple(errors)
        noun = "error" if len(self.errors) == 1 else "errors"
        details = "; ".join(error.message for error in self.errors)
        super().__init__(
            f"Failed to apply {directive} in {format_namespace(namespace)}"
            f" ({len(self.errors)} {noun}): {details}"
        )

    def location(self) -> str:
        return f"{self.unit_id}:{self.line}"

    def to_dict(self) -> dict[str, object]:
        return {
            "unit": self.unit_id,
            "line": self.line,
            "directive": self.directive,
            "namespace": format_namespace(self.namespace),
            "message": self.message,
            "errors": [
                {"type": type(error).__name__, "message": error.message}
                for error in self.errors
            ],
        }


__all__ = [
    "DirectiveError",
    "DirectiveFailed",
    "InvalidDirectiveArgument",
    "UnresolvedSymbol",
]
