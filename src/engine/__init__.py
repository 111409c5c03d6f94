"""Annotation resolution engine: visibility directives and rule suppressions."""

from engine.classify import DirectiveCatalog, classify_call, classify_comment
from engine.errors import (
    DirectiveError,
    DirectiveFailed,
    InvalidDirectiveArgument,
    UnresolvedSymbol,
)
from engine.models import DisabledRange, SourceUnit, Symbol, SymbolPath
from engine.registry import ChangeTrackingRegistry, SymbolRegistry
from engine.run import AnalysisRun, UnitReport, resolve_visibility, suppression_report
from engine.suppression import AggregatedReport, SuppressionTracker
from engine.visibility import VisibilityResolver

__all__ = [
    "AggregatedReport",
    "AnalysisRun",
    "ChangeTrackingRegistry",
    "DirectiveCatalog",
    "DirectiveError",
    "DirectiveFailed",
    "DisabledRange",
    "InvalidDirectiveArgument",
    "SourceUnit",
    "SuppressionTracker",
    "Symbol",
    "SymbolPath",
    "SymbolRegistry",
    "UnitReport",
    "UnresolvedSymbol",
    "VisibilityResolver",
    "classify_call",
    "classify_comment",
    "resolve_visibility",
    "suppression_report",
]
