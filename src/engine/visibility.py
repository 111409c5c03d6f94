"""Visibility directive resolution against the symbol registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from engine.classify import DirectiveCatalog, classify_call
from engine.errors import (
    DirectiveError,
    DirectiveFailed,
    InvalidDirectiveArgument,
    UnresolvedSymbol,
)
from engine.models import SymbolPath, format_namespace, is_constant_name

if TYPE_CHECKING:
    from engine.classify import DirectiveShape
    from engine.models import CallArgument, CallNode, Namespace, SourceUnit
    from engine.registry import SymbolTable

logger = logging.getLogger(__name__)


def _target_name(shape: DirectiveShape, argument: CallArgument) -> str | None:
    """Extract the symbol name a directive argument refers to, if static."""
    if argument.kind == "string":
        return argument.value or None
    if (
        shape.accepts_references
        and argument.kind == "identifier"
        and argument.value is not None
        and is_constant_name(argument.value)
    ):
        return argument.value
    return None


class VisibilityResolver:
    """Apply ``private`` directives found in one source unit.

    Directives are matched by call name and their arguments are read
    structurally; nothing is ever evaluated. Every argument that can be
    resolved is applied even when its siblings fail.
    """

    def __init__(
        self,
        registry: SymbolTable,
        *,
        unit_id: str,
        catalog: DirectiveCatalog | None = None,
    ) -> None:
        self.registry = registry
        self.unit_id = unit_id
        self.catalog = catalog or DirectiveCatalog()

    def _lookup(self, path: SymbolPath, line: int) -> bool:
        symbol = self.registry.get(path)
        if symbol is None:
            return False
        # Within a unit a symbol must be declared before the directive.
        return not (symbol.unit_id == self.unit_id and symbol.line > line)

    def process_directive(
        self, namespace: Namespace, directive_node: CallNode
    ) -> DirectiveFailed | None:
        """Resolve one call node; return a DirectiveFailed if any argument failed.

        Calls that are not directives are ignored and return None.
        """
        shape = classify_call(directive_node, self.catalog)
        if shape is None:
            return None

        errors: list[DirectiveError] = []
        applied = 0
        for argument in directive_node.arguments:
            name = _target_name(shape, argument)
            if name is None:
                errors.append(
                    InvalidDirectiveArgument(
                        shape.name,
                        argument,
                        accepts_references=shape.accepts_references,
                    )
                )
                continue

            path = SymbolPath(namespace, name, shape.target_kind)
            if not self._lookup(path, directive_node.line):
                errors.append(UnresolvedSymbol(shape.name, path))
                continue

            self.registry.set_visibility(
                path, "private", unit_id=self.unit_id, line=directive_node.line
            )
            applied += 1

        logger.debug(
            "%s:%d %s in %s: %d applied, %d failed",
            self.unit_id,
            directive_node.line,
            shape.name,
            format_namespace(namespace),
            applied,
            len(errors),
        )

        if not errors:
            return None
        return DirectiveFailed(
            directive=shape.name,
            namespace=namespace,
            unit_id=self.unit_id,
            line=directive_node.line,
            errors=errors,
        )

    def process_unit(self, unit: SourceUnit) -> list[DirectiveFailed]:
        """Process every call of ``unit`` in source order."""
        failures: list[DirectiveFailed] = []
        for call in sorted(unit.calls, key=lambda c: c.line):
            failure = self.process_directive(call.namespace, call)
            if failure is not None:
                failures.append(failure)
        return failures


__all__ = ["VisibilityResolver"]
