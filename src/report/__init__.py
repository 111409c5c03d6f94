"""Rendering of diagnostics, symbols and suppression reports."""

from report.render import (
    describe_range,
    dumps,
    render_changes,
    render_diagnostics,
    render_suppressions,
    render_symbols,
    suppressions_payload,
)

__all__ = [
    "describe_range",
    "dumps",
    "render_changes",
    "render_diagnostics",
    "render_suppressions",
    "render_symbols",
    "suppressions_payload",
]
