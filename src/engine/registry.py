"""Run-scoped symbol registry and its change-tracking wrapper."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from engine.models import Symbol

if TYPE_CHECKING:
    from engine.models import Declaration, SymbolPath, Visibility

logger = logging.getLogger(__name__)


class SymbolTable(Protocol):
    def declare(self, declaration: Declaration, unit_id: str) -> Symbol: ...

    def get(self, path: SymbolPath) -> Symbol | None: ...

    def set_visibility(
        self,
        path: SymbolPath,
        visibility: Visibility,
        *,
        unit_id: str,
        line: int,
    ) -> Visibility: ...

    def symbols(self) -> list[Symbol]: ...

    def clear(self) -> None: ...


class SymbolRegistry:
    """Mapping from qualified path to symbol, shared by every unit of a run.

    All reads and writes take the same lock so units can be processed from
    worker threads. A path is registered at most once: the first declaration
    wins and later ones return the existing symbol.
    """

    def __init__(self) -> None:
        self._symbols: dict[SymbolPath, Symbol] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._symbols)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._symbols

    def declare(self, declaration: Declaration, unit_id: str) -> Symbol:
        path = declaration.path
        with self._lock:
            existing = self._symbols.get(path)
            if existing is not None:
                logger.debug(
                    "Ignoring re-declaration of %s at %s:%d (first declared at %s:%d)",
                    path,
                    unit_id,
                    declaration.line,
                    existing.unit_id,
                    existing.line,
                )
                return existing
            symbol = Symbol(path=path, unit_id=unit_id, line=declaration.line)
            self._symbols[path] = symbol
            return symbol

    def get(self, path: SymbolPath) -> Symbol | None:
        with self._lock:
            return self._symbols.get(path)

    def set_visibility(
        self,
        path: SymbolPath,
        visibility: Visibility,
        *,
        unit_id: str,
        line: int,
    ) -> Visibility:
        """Set the visibility of a registered symbol and return the old value.

        Raises:
            KeyError: If ``path`` is not registered.
        """
        with self._lock:
            symbol = self._symbols[path]
            previous = symbol.visibility
            symbol.visibility = visibility
        logger.debug(
            "%s: %s -> %s (%s:%d)", path, previous, visibility, unit_id, line
        )
        return previous

    def symbols(self) -> list[Symbol]:
        with self._lock:
            return sorted(self._symbols.values(), key=lambda s: s.path)

    def clear(self) -> None:
        with self._lock:
            self._symbols.clear()


@dataclass(frozen=True)
class VisibilityChange:
    path: SymbolPath
    before: Visibility
    after: Visibility
    unit_id: str
    line: int

    def to_dict(self) -> dict[str, object]:
        return {
            "qualified_name": self.path.qualified_name,
            "kind": self.path.kind,
            "before": self.before,
            "after": self.after,
            "unit": self.unit_id,
            "line": self.line,
        }


class ChangeTrackingRegistry:
    """Symbol table wrapper that records every effective visibility change.

    Delegates storage to the wrapped table; only ``set_visibility`` is
    augmented.
    """

    def __init__(self, inner: SymbolTable) -> None:
        self._inner = inner
        self._changes: list[VisibilityChange] = []
        self._lock = threading.Lock()

    def declare(self, declaration: Declaration, unit_id: str) -> Symbol:
        return self._inner.declare(declaration, unit_id)

    def get(self, path: SymbolPath) -> Symbol | None:
        return self._inner.get(path)

    def set_visibility(
        self,
        path: SymbolPath,
        visibility: Visibility,
        *,
        unit_id: str,
        line: int,
    ) -> Visibility:
        previous = self._inner.set_visibility(
            path, visibility, unit_id=unit_id, line=line
        )
        if previous == visibility:
            return previous
        with self._lock:
            self._changes.append(
                VisibilityChange(
                    path=path,
                    before=previous,
                    after=visibility,
                    unit_id=unit_id,
                    line=line,
                )
            )
        return previous

    def symbols(self) -> list[Symbol]:
        return self._inner.symbols()

    def changes(self) -> list[VisibilityChange]:
        with self._lock:
            return sorted(self._changes, key=lambda c: (c.unit_id, c.line, c.path))

    def clear(self) -> None:
        self._inner.clear()
        with self._lock:
            self._changes.clear()


__all__ = [
    "ChangeTrackingRegistry",
    "SymbolRegistry",
    "SymbolTable",
    "VisibilityChange",
]
