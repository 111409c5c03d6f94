"""Run-scoped analysis context and the engine's public entry points."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from engine.classify import DEFAULT_MARKER_PREFIX, DirectiveCatalog
from engine.registry import ChangeTrackingRegistry, SymbolRegistry
from engine.suppression import AggregatedReport, SuppressionTracker
from engine.visibility import VisibilityResolver

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from engine.errors import DirectiveFailed
    from engine.models import SourceUnit, Symbol
    from engine.registry import SymbolTable, VisibilityChange
    from engine.suppression import ReportEntry, SuppressionMap
    from rules.config import AnnotateConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class UnitReport:
    """Outcome of processing one source unit."""

    unit_id: str
    diagnostics: list[DirectiveFailed] = field(default_factory=list)
    suppressions: SuppressionMap = field(default_factory=dict)


class AnalysisRun:
    """Owns the symbol registry and the aggregated report for one run.

    Units are added first; ``analyze`` then registers the declarations of
    every pending unit before resolving any directive, so a directive can
    target a symbol declared in another unit regardless of processing order.
    """

    def __init__(
        self,
        *,
        catalog: DirectiveCatalog | None = None,
        suppressions_enabled: bool = False,
        marker_prefix: str = DEFAULT_MARKER_PREFIX,
        rules: Iterable[str] = (),
        track_changes: bool = False,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            msg = f"workers must be >= 1, got {workers}"
            raise ValueError(msg)
        self.catalog = catalog or DirectiveCatalog()
        self.suppressions_enabled = suppressions_enabled
        self.tracker = SuppressionTracker(prefix=marker_prefix, rules=rules)
        self.workers = workers
        self._change_tracker: ChangeTrackingRegistry | None = None
        self.registry: SymbolTable = SymbolRegistry()
        if track_changes:
            self._change_tracker = ChangeTrackingRegistry(self.registry)
            self.registry = self._change_tracker
        self.report = AggregatedReport()
        self._units: dict[str, SourceUnit] = {}
        self._pending: list[str] = []
        self._unit_reports: dict[str, UnitReport] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: AnnotateConfig) -> AnalysisRun:
        directives = config.directives
        return cls(
            catalog=DirectiveCatalog.from_names(
                constant=directives.constant,
                method=directives.method,
                class_method=directives.class_method,
            ),
            suppressions_enabled=config.suppressions.enabled,
            marker_prefix=config.suppressions.marker_prefix,
            rules=config.suppressions.rules,
            track_changes=config.visibility.track_changes,
            workers=config.workers,
        )

    @property
    def units(self) -> list[SourceUnit]:
        with self._lock:
            return list(self._units.values())

    def add_unit(self, unit: SourceUnit) -> None:
        with self._lock:
            if unit.unit_id in self._units:
                msg = f"Source unit already added: {unit.unit_id}"
                raise ValueError(msg)
            self._units[unit.unit_id] = unit
            self._pending.append(unit.unit_id)

    def add_units(self, units: Iterable[SourceUnit]) -> None:
        for unit in units:
            self.add_unit(unit)

    def _map(
        self, func: Callable[[SourceUnit], T], units: Sequence[SourceUnit]
    ) -> list[T]:
        if self.workers == 1 or len(units) < 2:
            return [func(unit) for unit in units]
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            return list(executor.map(func, units))

    def _declare(self, unit: SourceUnit) -> int:
        for declaration in unit.declarations:
            self.registry.declare(declaration, unit.unit_id)
        return len(unit.declarations)

    def _process(self, unit: SourceUnit) -> UnitReport:
        resolver = VisibilityResolver(
            self.registry, unit_id=unit.unit_id, catalog=self.catalog
        )
        unit_report = UnitReport(unit.unit_id, diagnostics=resolver.process_unit(unit))
        if self.suppressions_enabled:
            unit_report.suppressions = self.tracker.process_unit(unit)
            self.report.append(unit.unit_id, unit_report.suppressions)
        return unit_report

    def analyze(self) -> list[UnitReport]:
        """Process every unit added since the last call.

        Declaration collection for all pending units finishes before any
        directive is resolved.
        """
        with self._lock:
            pending = [self._units[unit_id] for unit_id in self._pending]
            self._pending = []
        if not pending:
            return []

        declared = self._map(self._declare, pending)
        logger.info(
            "Registered %d declarations from %d units",
            sum(declared),
            len(pending),
        )

        reports = self._map(self._process, pending)
        with self._lock:
            for unit_report in reports:
                self._unit_reports[unit_report.unit_id] = unit_report
        return reports

    def unit_reports(self) -> list[UnitReport]:
        with self._lock:
            return [self._unit_reports[key] for key in sorted(self._unit_reports)]

    def diagnostics(self) -> list[DirectiveFailed]:
        return sorted(
            (
                failure
                for unit_report in self.unit_reports()
                for failure in unit_report.diagnostics
            ),
            key=lambda failure: (failure.unit_id, failure.line),
        )

    def symbols(self) -> list[Symbol]:
        return self.registry.symbols()

    def changes(self) -> list[VisibilityChange]:
        if self._change_tracker is None:
            return []
        return self._change_tracker.changes()

    def reset(self) -> None:
        """Discard every unit, symbol, diagnostic and suppression range."""
        with self._lock:
            self._units.clear()
            self._pending = []
            self._unit_reports.clear()
        self.registry.clear()
        self.report.clear()


def resolve_visibility(run: AnalysisRun) -> list[DirectiveFailed]:
    """Apply all directives of the run's units and return the diagnostics."""
    run.analyze()
    failures = run.diagnostics()
    if failures:
        logger.warning("%d directive call sites failed", len(failures))
    return failures


def suppression_report(run: AnalysisRun) -> dict[str, list[ReportEntry]]:
    """Return the non-empty aggregated suppression report of the run.

    Empty when suppression tracking is disabled for the run.
    """
    if not run.suppressions_enabled:
        logger.debug("Suppression tracking disabled; report is empty")
        return {}
    run.analyze()
    return run.report.as_mapping()


__all__ = [
    "AnalysisRun",
    "UnitReport",
    "resolve_visibility",
    "suppression_report",
]
