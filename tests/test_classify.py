from __future__ import annotations

import pytest

from engine.classify import (
    DirectiveCatalog,
    DirectiveShape,
    classify_call,
    classify_comment,
)
from engine.models import (
    CallArgument,
    CallNode,
    CommentToken,
    DirectiveKind,
    MarkerAction,
)


def _call(callee: str, *values: str) -> CallNode:
    return CallNode(
        namespace=("pkg", "Widget"),
        callee=callee,
        line=3,
        arguments=tuple(CallArgument("string", repr(v), v) for v in values),
    )


@pytest.mark.parametrize(
    ("callee", "kind", "target_kind"),
    [
        ("private_constant", DirectiveKind.MARK_CONSTANT_PRIVATE, "constant"),
        ("private", DirectiveKind.MARK_METHOD_PRIVATE, "instance_method"),
        ("private_class_method", DirectiveKind.MARK_METHOD_PRIVATE, "class_method"),
    ],
)
def test_classify_call_recognizes_default_directives(
    callee: str, kind: DirectiveKind, target_kind: str
) -> None:
    shape = classify_call(_call(callee, "x"))

    assert shape == DirectiveShape(kind, target_kind, callee)  # type: ignore[arg-type]


@pytest.mark.parametrize("callee", ["print", "self.private", "privately", ""])
def test_classify_call_unrecognized_shapes_are_not_directives(callee: str) -> None:
    assert classify_call(_call(callee, "x")) is None


def test_classify_call_uses_custom_catalog() -> None:
    catalog = DirectiveCatalog.from_names(
        constant=["hide_constant"], method=["hide"], class_method=[]
    )

    assert classify_call(_call("private", "x"), catalog) is None
    shape = classify_call(_call("hide_constant", "X"), catalog)
    assert shape is not None
    assert shape.kind is DirectiveKind.MARK_CONSTANT_PRIVATE
    assert shape.accepts_references


def test_method_directive_does_not_accept_references() -> None:
    shape = classify_call(_call("private", "x"))

    assert shape is not None
    assert not shape.accepts_references


def test_classify_comment_disable_multiple_rules() -> None:
    markers = classify_comment(
        CommentToken(line=5, text="# annotate: disable=LineLength, Naming/Foo")
    )

    assert [(m.rule, m.action, m.line) for m in markers] == [
        ("LineLength", MarkerAction.DISABLE, 5),
        ("Naming/Foo", MarkerAction.DISABLE, 5),
    ]


def test_classify_comment_enable_keeps_trailing_flag() -> None:
    (marker,) = classify_comment(
        CommentToken(line=9, text="#annotate:enable=LineLength", trailing=True)
    )

    assert marker.action is MarkerAction.ENABLE
    assert marker.trailing


def test_classify_comment_deduplicates_rules() -> None:
    markers = classify_comment(
        CommentToken(line=1, text="# annotate: disable=A,A,B")
    )

    assert [m.rule for m in markers] == ["A", "B"]


def test_classify_comment_allows_trailing_remark() -> None:
    markers = classify_comment(
        CommentToken(line=1, text="# annotate: disable=A  # legacy module")
    )

    assert [m.rule for m in markers] == ["A"]


@pytest.mark.parametrize(
    "text",
    [
        "# just a comment",
        "# annotate: disable",
        "# annotate: disable=",
        "# annotate: toggle=LineLength",
        "# other: disable=LineLength",
        "# note annotate: disable=LineLength",
    ],
)
def test_classify_comment_ignores_malformed_markers(text: str) -> None:
    assert classify_comment(CommentToken(line=1, text=text)) == ()


def test_classify_comment_custom_prefix() -> None:
    comment = CommentToken(line=2, text="# lint: disable=E501")

    assert classify_comment(comment) == ()
    assert [m.rule for m in classify_comment(comment, "lint")] == ["E501"]
