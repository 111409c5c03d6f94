"""Suppression marker tracking and cross-unit aggregation."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from engine.classify import DEFAULT_MARKER_PREFIX, classify_comment
from engine.models import DisabledRange, MarkerAction

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from engine.models import CommentToken, SourceUnit, SuppressionMarker

logger = logging.getLogger(__name__)

SuppressionMap = dict[str, list[DisabledRange]]
ReportEntry = tuple[str, DisabledRange]


class SuppressionTracker:
    """Build the disabled ranges of one source unit from its markers.

    Malformed or unmatched markers are no-ops: a second ``disable`` for an
    already disabled rule keeps the existing range and an ``enable`` with no
    open range is ignored. The tracker never raises on marker content.
    """

    def __init__(
        self,
        *,
        prefix: str = DEFAULT_MARKER_PREFIX,
        rules: Iterable[str] | None = None,
    ) -> None:
        self.prefix = prefix
        self.catalog = frozenset(rules or ())

    def markers(self, comments: Iterable[CommentToken]) -> list[SuppressionMarker]:
        """Return the recognized markers of ``comments`` in source order."""
        found: list[SuppressionMarker] = []
        for comment in sorted(comments, key=lambda c: c.line):
            for marker in classify_comment(comment, self.prefix):
                if self.catalog and marker.rule not in self.catalog:
                    logger.debug(
                        "Ignoring marker for unknown rule %s at line %d",
                        marker.rule,
                        marker.line,
                    )
                    continue
                found.append(marker)
        return found

    def track(
        self, markers: Sequence[SuppressionMarker], last_line: int
    ) -> SuppressionMap:
        """Fold markers into per-rule disabled ranges.

        Markers are read in line order; markers on lines below 1 are dropped.
        Ranges still open at the end close at ``last_line``. Rules that never
        produce a range are absent from the result.
        """
        open_ranges: dict[str, int] = {}
        ranges: SuppressionMap = {}

        for marker in sorted(markers, key=lambda m: m.line):
            rule = marker.rule
            if marker.line < 1:
                logger.debug("Ignoring marker for %s at line %d", rule, marker.line)
                continue
            if marker.action is MarkerAction.DISABLE:
                if rule in open_ranges:
                    continue
                open_ranges[rule] = marker.line
                continue

            start = open_ranges.pop(rule, None)
            if start is None:
                continue
            ranges.setdefault(rule, []).append(DisabledRange(start, marker.line))

        end = max(last_line, 1)
        for rule, start in open_ranges.items():
            ranges.setdefault(rule, []).append(DisabledRange(start, max(start, end)))

        return {
            rule: sorted(rule_ranges)
            for rule, rule_ranges in sorted(ranges.items())
            if rule_ranges
        }

    def process_unit(self, unit: SourceUnit) -> SuppressionMap:
        return self.track(self.markers(unit.comments), unit.line_count)


class AggregatedReport:
    """Cross-unit accumulation of disabled ranges, grouped by rule.

    Units append their finished maps one at a time; the report lives until
    ``clear`` is called or the owning run is dropped.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[ReportEntry]] = {}
        self._lock = threading.Lock()

    def append(
        self,
        unit_id: str,
        suppression_map: Mapping[str, Sequence[DisabledRange]],
    ) -> None:
        with self._lock:
            for rule, ranges in suppression_map.items():
                if not ranges:
                    continue
                bucket = self._entries.setdefault(rule, [])
                bucket.extend((unit_id, disabled) for disabled in ranges)

    def as_mapping(self) -> dict[str, list[ReportEntry]]:
        """Return a sorted, non-empty snapshot of the report."""
        with self._lock:
            return {
                rule: sorted(entries)
                for rule, entries in sorted(self._entries.items())
                if entries
            }

    def __bool__(self) -> bool:
        with self._lock:
            return any(self._entries.values())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


__all__ = [
    "AggregatedReport",
    "ReportEntry",
    "SuppressionMap",
    "SuppressionTracker",
]
