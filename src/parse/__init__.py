"""Host parser for Python sources."""

from parse.treesitter_units import extract_source_unit, parse_source_unit

__all__ = ["extract_source_unit", "parse_source_unit"]
