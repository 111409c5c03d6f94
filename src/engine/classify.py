"""Stateless recognition of directive calls and suppression markers.

Directives and markers are opt-in annotations layered over ordinary calls and
comments: anything that does not match a recognized shape is simply not an
annotation, never an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from engine.models import (
    DirectiveKind,
    MarkerAction,
    SuppressionMarker,
    SymbolKind,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from engine.models import CallNode, CommentToken

DEFAULT_MARKER_PREFIX = "annotate"


@dataclass(frozen=True)
class DirectiveShape:
    """Classification result for a directive call."""

    kind: DirectiveKind
    target_kind: SymbolKind
    name: str

    @property
    def accepts_references(self) -> bool:
        return self.kind is DirectiveKind.MARK_CONSTANT_PRIVATE


@dataclass(frozen=True)
class DirectiveCatalog:
    """Call names recognized for each directive shape."""

    constant: frozenset[str] = frozenset({"private_constant"})
    method: frozenset[str] = frozenset({"private"})
    class_method: frozenset[str] = frozenset({"private_class_method"})

    @classmethod
    def from_names(
        cls,
        *,
        constant: Iterable[str],
        method: Iterable[str],
        class_method: Iterable[str],
    ) -> DirectiveCatalog:
        return cls(
            constant=frozenset(constant),
            method=frozenset(method),
            class_method=frozenset(class_method),
        )


def classify_call(
    call: CallNode, catalog: DirectiveCatalog | None = None
) -> DirectiveShape | None:
    """Return the directive shape of ``call`` or None if it is not a directive.

    Only bare callee names are matched; ``obj.private(...)`` targets some
    other object and is never a directive.
    """
    catalog = catalog or DirectiveCatalog()
    callee = call.callee
    if callee in catalog.constant:
        return DirectiveShape(DirectiveKind.MARK_CONSTANT_PRIVATE, "constant", callee)
    if callee in catalog.class_method:
        return DirectiveShape(DirectiveKind.MARK_METHOD_PRIVATE, "class_method", callee)
    if callee in catalog.method:
        return DirectiveShape(
            DirectiveKind.MARK_METHOD_PRIVATE, "instance_method", callee
        )
    return None


_RULE_LIST = r"[\w./\-]+(?:\s*,\s*[\w./\-]+)*"


@lru_cache(maxsize=16)
def _marker_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(
        rf"^#+\s*{re.escape(prefix)}\s*:\s*(?P<action>disable|enable)\s*=\s*"
        rf"(?P<rules>{_RULE_LIST})\s*(?:#.*)?$"
    )


def classify_comment(
    comment: CommentToken, prefix: str = DEFAULT_MARKER_PREFIX
) -> tuple[SuppressionMarker, ...]:
    """Parse the suppression markers carried by one comment.

    ``# annotate: disable=LineLength, Naming`` yields one marker per rule, in
    the order written. Anything else yields no markers.
    """
    match = _marker_pattern(prefix).match(comment.text.strip())
    if match is None:
        return ()

    action = MarkerAction(match.group("action"))
    markers: list[SuppressionMarker] = []
    seen: set[str] = set()
    for raw in match.group("rules").split(","):
        rule = raw.strip()
        if not rule or rule in seen:
            continue
        seen.add(rule)
        markers.append(
            SuppressionMarker(
                rule=rule,
                action=action,
                line=comment.line,
                trailing=comment.trailing,
            )
        )
    return tuple(markers)


__all__ = [
    "DEFAULT_MARKER_PREFIX",
    "DirectiveCatalog",
    "DirectiveShape",
    "classify_call",
    "classify_comment",
]
