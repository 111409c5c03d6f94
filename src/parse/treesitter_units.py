"""Tree-sitter based source-unit extraction for Python files.

Turns one file into the declarations, namespace-level call statements and
comments the engine consumes. Only static structure is read: call arguments
are classified by node type and string literals are decoded with
``ast.literal_eval``; nothing is executed.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser
from tree_sitter_python import language as get_python_language

from engine.models import (
    CallArgument,
    CallNode,
    CommentToken,
    Declaration,
    SourceUnit,
    is_constant_name,
)

if TYPE_CHECKING:
    from pathlib import Path

    from engine.models import ArgumentKind, Namespace, SymbolKind

logger = logging.getLogger(__name__)

_PARSER: Parser | None = None

_CLASS_LEVEL_DECORATORS = frozenset({"classmethod", "staticmethod"})

_ARGUMENT_KINDS: dict[str, ArgumentKind] = {
    "identifier": "identifier",
    "attribute": "attribute",
    "list_splat": "splat",
    "dictionary_splat": "splat",
    "keyword_argument": "keyword",
}


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with Python language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_python_language())
        _PARSER = Parser(lang)

    return _PARSER


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf8", errors="replace")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


@dataclass
class _Collector:
    declarations: list[Declaration] = field(default_factory=list)
    calls: list[CallNode] = field(default_factory=list)

    def declare(
        self, namespace: Namespace, name: str, kind: SymbolKind, node: Node
    ) -> None:
        self.declarations.append(Declaration(namespace, name, kind, _line(node)))


def _classify_string(node: Node) -> CallArgument:
    raw = _text(node)
    if any(child.type == "interpolation" for child in node.children):
        return CallArgument("expression", raw)
    try:
        value = ast.literal_eval(raw)
    except (ValueError, SyntaxError):
        return CallArgument("expression", raw)
    if not isinstance(value, str):
        return CallArgument("expression", raw)
    return CallArgument("string", raw, value)


def _classify_argument(node: Node) -> CallArgument:
    if node.type == "string":
        return _classify_string(node)
    kind = _ARGUMENT_KINDS.get(node.type, "expression")
    raw = _text(node)
    return CallArgument(kind, raw, raw if kind == "identifier" else None)


def _call_arguments(call: Node) -> tuple[CallArgument, ...]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return ()
    if arguments.type != "argument_list":
        # e.g. private(name for name in NAMES)
        return (CallArgument("expression", _text(arguments)),)
    return tuple(
        _classify_argument(child)
        for child in arguments.named_children
        if child.type != "comment"
    )


def _assignment_targets(node: Node) -> list[Node]:
    """Return identifier targets of a (possibly chained) assignment."""
    targets: list[Node] = []
    current: Node | None = node
    while current is not None and current.type == "assignment":
        if current.child_by_field_name("right") is None:
            # Bare annotation (`NAME: int`) binds nothing.
            break
        left = current.child_by_field_name("left")
        if left is not None:
            if left.type == "identifier":
                targets.append(left)
            elif left.type in ("pattern_list", "tuple_pattern"):
                targets.extend(
                    child for child in left.named_children if child.type == "identifier"
                )
        current = current.child_by_field_name("right")
    return targets


def _handle_expression_statement(
    node: Node, namespace: Namespace, out: _Collector
) -> None:
    for child in node.named_children:
        if child.type == "assignment":
            for target in _assignment_targets(child):
                name = _text(target)
                if is_constant_name(name):
                    out.declare(namespace, name, "constant", target)
        elif child.type == "call":
            function = child.child_by_field_name("function")
            out.calls.append(
                CallNode(
                    namespace=namespace,
                    callee=_text(function),
                    line=_line(child),
                    arguments=_call_arguments(child),
                )
            )


def _decorator_names(node: Node) -> set[str]:
    names: set[str] = set()
    for child in node.children:
        if child.type != "decorator":
            continue
        for expr in child.named_children:
            if expr.type != "comment":
                names.add(_text(expr))
    return names


def _handle_class(node: Node, namespace: Namespace, out: _Collector) -> None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return
    class_name = _text(name_node)
    out.declare(namespace, class_name, "constant", node)
    body = node.child_by_field_name("body")
    if body is not None:
        _walk(body, (*namespace, class_name), out, in_class=True)


def _handle_function(
    node: Node,
    namespace: Namespace,
    out: _Collector,
    *,
    decorators: set[str],
    in_class: bool,
) -> None:
    """Declare a function or method.

    Function bodies are not walked: nested definitions and calls inside a
    body are not namespace-level.
    """
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return
    kind: SymbolKind = (
        "class_method"
        if in_class and decorators & _CLASS_LEVEL_DECORATORS
        else "instance_method"
    )
    out.declare(namespace, _text(name_node), kind, node)


def _is_statement_container(node: Node) -> bool:
    return (
        node.type == "block"
        or node.type.endswith("_statement")
        or node.type.endswith("_clause")
    )


def _visit(
    node: Node, namespace: Namespace, out: _Collector, *, in_class: bool
) -> None:
    if node.type == "class_definition":
        _handle_class(node, namespace, out)
        return

    if node.type == "function_definition":
        _handle_function(node, namespace, out, decorators=set(), in_class=in_class)
        return

    if node.type == "decorated_definition":
        definition = node.child_by_field_name("definition")
        if definition is None:
            return
        if definition.type == "class_definition":
            _handle_class(definition, namespace, out)
        elif definition.type == "function_definition":
            _handle_function(
                definition,
                namespace,
                out,
                decorators=_decorator_names(node),
                in_class=in_class,
            )
        return

    if node.type == "expression_statement":
        _handle_expression_statement(node, namespace, out)
        return

    if _is_statement_container(node):
        _walk(node, namespace, out, in_class=in_class)


def _walk(
    node: Node, namespace: Namespace, out: _Collector, *, in_class: bool
) -> None:
    for child in node.named_children:
        _visit(child, namespace, out, in_class=in_class)


def _collect_comments(root: Node, source_lines: list[bytes]) -> list[CommentToken]:
    comments: list[CommentToken] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "comment":
            row, col = node.start_point
            prefix = source_lines[row][:col] if row < len(source_lines) else b""
            comments.append(
                CommentToken(
                    line=row + 1,
                    text=_text(node),
                    trailing=bool(prefix.strip()),
                )
            )
            continue
        stack.extend(reversed(node.children))
    comments.sort(key=lambda c: c.line)
    return comments


def _line_count(source_bytes: bytes) -> int:
    count = source_bytes.count(b"\n")
    if source_bytes and not source_bytes.endswith(b"\n"):
        count += 1
    return max(count, 1)


def parse_source_unit(
    source_bytes: bytes, unit_id: str, module_name: str
) -> SourceUnit:
    """Build a SourceUnit from Python source bytes.

    Args:
        source_bytes: Raw file contents
        unit_id: Identifier reported for this unit (usually the relative path)
        module_name: Dotted module name; its parts form the root namespace

    Returns:
        SourceUnit with declarations and calls in source order.
    """
    tree = _get_parser().parse(source_bytes)
    namespace: Namespace = tuple(part for part in module_name.split(".") if part)

    out = _Collector()
    _walk(tree.root_node, namespace, out, in_class=False)

    source_lines = source_bytes.split(b"\n")
    return SourceUnit(
        unit_id=unit_id,
        line_count=_line_count(source_bytes),
        declarations=tuple(out.declarations),
        calls=tuple(out.calls),
        comments=tuple(_collect_comments(tree.root_node, source_lines)),
        namespace=namespace,
    )


def extract_source_unit(
    file_path: Path,
    relative_path: str,
    module_name: str,
) -> SourceUnit | None:
    """Read and parse one Python file; return None if it cannot be read."""
    try:
        source_bytes = file_path.read_bytes()
    except OSError as exc:
        logger.warning("Skipping unreadable file %s: %s", relative_path, exc)
        return None
    return parse_source_unit(source_bytes, relative_path, module_name)


__all__ = ["extract_source_unit", "parse_source_unit"]
