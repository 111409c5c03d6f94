"""Text and JSON renderings of run results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from engine.errors import DirectiveFailed
    from engine.models import DisabledRange, Symbol
    from engine.registry import VisibilityChange
    from engine.suppression import ReportEntry


def _default(obj: object) -> object:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    msg = f"Type is not JSON serializable: {type(obj).__name__}"
    raise TypeError(msg)


def dumps(payload: object) -> bytes:
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    return orjson.dumps(payload, default=_default, option=opts)


def describe_range(disabled: DisabledRange) -> str:
    if disabled.start_line == disabled.end_line:
        return f"line {disabled.start_line}"
    return f"lines {disabled.start_line}-{disabled.end_line}"


def render_suppressions(report: Mapping[str, Sequence[ReportEntry]]) -> list[str]:
    return [
        f"rule {rule} disabled in unit {unit_id}, {describe_range(disabled)}"
        for rule, entries in report.items()
        for unit_id, disabled in entries
    ]


def render_diagnostics(failures: Sequence[DirectiveFailed]) -> list[str]:
    return [f"{failure.location()}: {failure.message}" for failure in failures]


def render_symbols(symbols: Sequence[Symbol]) -> list[str]:
    return [
        f"{symbol.visibility:<9} {symbol.path.kind:<15} {symbol.path.qualified_name}"
        for symbol in symbols
    ]


def render_changes(changes: Sequence[VisibilityChange]) -> list[str]:
    return [
        f"{change.unit_id}:{change.line}: {change.path.qualified_name} "
        f"{change.before} -> {change.after}"
        for change in changes
    ]


def suppressions_payload(
    report: Mapping[str, Sequence[ReportEntry]],
) -> dict[str, list[dict[str, Any]]]:
    return {
        rule: [{"unit": unit_id, **disabled.to_dict()} for unit_id, disabled in entries]
        for rule, entries in report.items()
    }


__all__ = [
    "describe_range",
    "dumps",
    "render_changes",
    "render_diagnostics",
    "render_suppressions",
    "render_symbols",
    "suppressions_payload",
]
