from __future__ import annotations

from engine.models import (
    CommentToken,
    DisabledRange,
    MarkerAction,
    SourceUnit,
    SuppressionMarker,
)
from engine.suppression import AggregatedReport, SuppressionTracker


def _marker(
    rule: str, action: str, line: int, *, trailing: bool = False
) -> SuppressionMarker:
    return SuppressionMarker(rule, MarkerAction(action), line, trailing)


def _unit(unit_id: str, line_count: int, *comments: tuple[int, str]) -> SourceUnit:
    return SourceUnit(
        unit_id=unit_id,
        line_count=line_count,
        comments=tuple(CommentToken(line, text) for line, text in comments),
    )


def test_disable_enable_scenario() -> None:
    unit = _unit(
        "app.py",
        40,
        (5, "# annotate: disable=LineLength"),
        (12, "# regular comment"),
        (20, "# annotate: enable=LineLength"),
    )

    assert SuppressionTracker().process_unit(unit) == {
        "LineLength": [DisabledRange(5, 20)]
    }


def test_unmatched_trailing_disable_extends_to_end_of_unit() -> None:
    result = SuppressionTracker().track([_marker("Naming", "disable", 8)], 31)

    assert result == {"Naming": [DisabledRange(8, 31)]}


def test_repeated_disable_keeps_one_continuous_range() -> None:
    result = SuppressionTracker().track(
        [
            _marker("R", "disable", 2),
            _marker("R", "disable", 6),
            _marker("R", "enable", 9),
        ],
        50,
    )

    assert result == {"R": [DisabledRange(2, 9)]}


def test_unmatched_enable_is_ignored() -> None:
    result = SuppressionTracker().track(
        [
            _marker("R", "enable", 1),
            _marker("R", "disable", 3),
            _marker("R", "enable", 4),
            _marker("R", "enable", 7),
        ],
        10,
    )

    assert result == {"R": [DisabledRange(3, 4)]}


def test_enable_only_rule_is_not_reported() -> None:
    result = SuppressionTracker().track([_marker("Ghost", "enable", 3)], 10)

    assert result == {}


def test_rules_do_not_leak_into_each_other() -> None:
    result = SuppressionTracker().track(
        [
            _marker("A", "disable", 1),
            _marker("B", "disable", 2),
            _marker("A", "enable", 3),
            _marker("A", "disable", 6),
            _marker("A", "enable", 8),
            _marker("B", "enable", 9),
        ],
        12,
    )

    assert result == {
        "A": [DisabledRange(1, 3), DisabledRange(6, 8)],
        "B": [DisabledRange(2, 9)],
    }


def test_disable_after_code_opens_range_to_end_of_unit() -> None:
    result = SuppressionTracker().track(
        [_marker("R", "disable", 4, trailing=True)],
        15,
    )

    assert result == {"R": [DisabledRange(4, 15)]}


def test_disable_after_code_closes_at_matching_enable() -> None:
    result = SuppressionTracker().track(
        [
            _marker("R", "disable", 4, trailing=True),
            _marker("R", "enable", 6),
            _marker("R", "disable", 10, trailing=True),
        ],
        15,
    )

    assert result == {"R": [DisabledRange(4, 6), DisabledRange(10, 15)]}


def test_marker_below_line_one_is_ignored() -> None:
    result = SuppressionTracker().track(
        [
            _marker("R", "disable", 0),
            _marker("S", "disable", -3),
            _marker("S", "enable", 2),
        ],
        5,
    )

    assert result == {}


def test_track_accepts_markers_out_of_line_order() -> None:
    result = SuppressionTracker().track(
        [_marker("R", "enable", 9), _marker("R", "disable", 2)],
        20,
    )

    assert result == {"R": [DisabledRange(2, 9)]}


def test_markers_are_read_in_line_order() -> None:
    unit = _unit(
        "app.py",
        10,
        (7, "# annotate: enable=R"),
        (2, "# annotate: disable=R"),
    )

    assert SuppressionTracker().process_unit(unit) == {"R": [DisabledRange(2, 7)]}


def test_rule_catalog_filters_unknown_rules() -> None:
    unit = _unit(
        "app.py",
        10,
        (1, "# annotate: disable=Known, Unknown"),
    )

    result = SuppressionTracker(rules=["Known"]).process_unit(unit)

    assert result == {"Known": [DisabledRange(1, 10)]}


def test_custom_prefix() -> None:
    unit = _unit(
        "app.py",
        10,
        (1, "# annotate: disable=A"),
        (2, "# lint: disable=B"),
    )

    assert SuppressionTracker(prefix="lint").process_unit(unit) == {
        "B": [DisabledRange(2, 10)]
    }


def test_disabled_range_membership() -> None:
    disabled = DisabledRange(5, 20)

    assert 5 in disabled
    assert 20 in disabled
    assert 21 not in disabled


def test_aggregated_report_groups_by_rule_and_skips_empty() -> None:
    report = AggregatedReport()
    report.append("b.py", {"LineLength": [DisabledRange(3, 4)], "Empty": []})
    report.append("a.py", {"LineLength": [DisabledRange(1, 9)]})
    report.append("a.py", {"Naming": [DisabledRange(2, 2)]})

    assert report.as_mapping() == {
        "LineLength": [("a.py", DisabledRange(1, 9)), ("b.py", DisabledRange(3, 4))],
        "Naming": [("a.py", DisabledRange(2, 2))],
    }


def test_aggregated_report_clear() -> None:
    report = AggregatedReport()
    report.append("a.py", {"R": [DisabledRange(1, 2)]})
    assert report

    report.clear()

    assert not report
    assert report.as_mapping() == {}
