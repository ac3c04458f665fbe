"""
Capture collection.

Turns a match tree into the ordered `(kind, text)` list that semantic
actions index into by position.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from .matcher import Match


# Leaf kinds whose source text is captured
ATOMS = frozenset({
    "bitfield_clause",
    "field_identifier",
    "identifier",
    "number_literal",
    "char_literal",
    "preproc_arg",
    "primitive_type",
    "sized_type_specifier",
    "type_identifier",
})

# Expression kinds captured verbatim as a whole
EXPRESSIONS = frozenset({
    "parenthesized_expression",
    "binary_expression",
    "unary_expression",
    "math_expression",
    "bitwise_expression",
    "shift_expression",
    "escape_sequence",
})

# Declarator names that push their pointer level onto the preceding type
DECLARATOR_NAMES = frozenset({"identifier", "field_identifier", "type_identifier"})

# Capture kinds that spell a type
TYPE_NAMES = frozenset({"primitive_type", "sized_type_specifier", "type_identifier"})


class Capture(NamedTuple):
    """One captured value."""

    kind: str
    text: str


def node_text(node: Any) -> str:
    text = node.text
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="ignore")
    return text or ""


def pointer_depth(node: Any) -> int:
    """
    Count the pointer declarators wrapping a declarator name.

    `int *p` puts `p` under one pointer_declarator; `struct S *f(void)`
    puts `f` under a function_declarator inside one.
    """
    parent = node.parent
    while parent is not None and parent.type in ("function_declarator", "array_declarator"):
        # Array sizes are not declarator names
        if parent.child_by_field_name("declarator") != node:
            return 0
        node, parent = parent, parent.parent

    depth = 0
    while parent is not None and parent.type == "pointer_declarator":
        depth += 1
        parent = parent.parent
    return depth


def collect_captures(match: Match) -> list[Capture]:
    """
    Collect the captures of a successful match, depth-first, left-to-right.

    Args:
        match: Match tree returned by match_node()

    Returns:
        Ordered capture list
    """
    captures: list[Capture] = []
    _collect(match, captures)
    return captures


def _declaration_type(captures: list[Capture]) -> Capture | None:
    """Most recent type capture, without its pointer levels."""
    for capture in reversed(captures):
        if capture.kind in TYPE_NAMES:
            return capture._replace(text=capture.text.rstrip(" *"))
    return None


def _collect(match: Match, captures: list[Capture]) -> None:
    node = match.node
    kind = node.type

    if kind in ATOMS or kind in EXPRESSIONS:
        if kind in DECLARATOR_NAMES and captures:
            depth = pointer_depth(node)
            stars = " " + "*" * depth if depth else ""
            base = None
            if kind == "field_identifier" and captures[-1].kind not in TYPE_NAMES:
                # Later declarator of `int a, *b;` repeats the declared type
                base = _declaration_type(captures)
            if base is not None:
                captures.append(base._replace(text=base.text + stars))
            elif depth:
                prev = captures[-1]
                captures[-1] = prev._replace(text=prev.text + stars)
        captures.append(Capture(kind, " ".join(node_text(node).split())))
        return

    for child in match.children:
        _collect(child, captures)
