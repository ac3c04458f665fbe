"""
Pattern matcher.

A pattern's children are compiled to one regular expression over an
alphabet with a single code unit per node kind. Matching a node's child
list is then one `fullmatch` of the encoded kinds; the spans of the
capture groups tell which child pattern consumed which child node, and
matching recurses from there.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterable

from .lisp import GrammarError, GrammarPattern, Quantifier


# ============================================================================
# Alphabet
# ============================================================================

class Alphabet:
    """Append-only mapping from node kind to a single code unit."""

    # Private use area, so codes never collide with regex syntax
    _BASE = 0xE001
    OTHER = chr(0xE000)

    def __init__(self):
        self._codes: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, kind: str) -> bool:
        return kind in self._codes

    def add(self, kind: str) -> str:
        """Assign a code to a kind (idempotent)."""
        code = self._codes.get(kind)
        if code is None:
            code = chr(self._BASE + len(self._codes))
            self._codes[kind] = code
        return code

    def code(self, kind: str) -> str:
        """Code for a kind; kinds never named by a pattern share OTHER."""
        return self._codes.get(kind, self.OTHER)

    def encode(self, kinds: Iterable[str]) -> str:
        return "".join(self.code(kind) for kind in kinds)


# Shared by every table so compiled matchers stay valid process-wide
ALPHABET = Alphabet()


# ============================================================================
# Compilation
# ============================================================================

@lru_cache(maxsize=None)
def _compile_regex(source: str) -> re.Pattern:
    return re.compile(source, re.DOTALL)


def _char_class(pattern: GrammarPattern, alphabet: Alphabet) -> str:
    if pattern.is_wildcard:
        return "."
    codes = [re.escape(alphabet.add(kind)) for kind in pattern.kinds]
    return f"[{''.join(codes)}]"


def _quantified(pattern: GrammarPattern, alphabet: Alphabet) -> str:
    cls = _char_class(pattern, alphabet)
    suffix = pattern.quantifier.value
    if pattern.quantifier is Quantifier.OR_WITH_NEXT:
        suffix = ""
    return f"({cls}{suffix})"


def regex_source(pattern: GrammarPattern, alphabet: Alphabet = ALPHABET) -> tuple[str, list[int]]:
    """
    Build the regex source for a pattern's children.

    Returns:
        The regex source and, per capture group, the index of the child
        pattern it stands for
    """
    parts: list[str] = []
    groups: list[int] = []
    run: list[str] = []

    for index, child in enumerate(pattern.children):
        groups.append(index)
        run.append(_quantified(child, alphabet))
        if child.quantifier is Quantifier.OR_WITH_NEXT:
            continue
        if len(run) == 1:
            parts.append(run[0])
        else:
            parts.append("(?:" + "|".join(run) + ")")
        run = []

    if run:
        raise GrammarError(
            f"Quantifier '!' on the last child of ({pattern.name}) has nothing to alternate with",
            pattern.to_text(),
        )

    return "".join(parts), groups


def compile_pattern(pattern: GrammarPattern, alphabet: Alphabet = ALPHABET) -> GrammarPattern:
    """Compile (once) the matcher of a pattern and all its descendants."""
    for node in pattern.iter_tree():
        for kind in node.kinds:
            alphabet.add(kind)
        if node.children and node.regex is None:
            source, groups = regex_source(node, alphabet)
            try:
                node.regex = _compile_regex(source)
            except re.error as e:
                raise GrammarError(f"Failed to compile matcher: {e}", pattern.to_text()) from e
            node.groups = groups
    return pattern


# ============================================================================
# Matching
# ============================================================================

@dataclass
class Match:
    """A node claimed by a pattern, with the matches of its children."""

    node: Any
    pattern: GrammarPattern
    children: list[Match] = field(default_factory=list)

    def iter_nodes(self) -> Iterable[Any]:
        yield self.node
        for child in self.children:
            yield from child.iter_nodes()


def named_children(node: Any) -> list[Any]:
    """Named children of a tree-sitter node, without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def match_node(
    pattern: GrammarPattern,
    node: Any,
    enclosing: GrammarPattern | None = None,
    alphabet: Alphabet = ALPHABET,
) -> Match | None:
    """
    Match a node against a compiled pattern.

    Args:
        pattern: Pattern to match
        node: tree-sitter node
        enclosing: Parent pattern, used when `pattern` is recursive
        alphabet: Alphabet the pattern was compiled against

    Returns:
        The match tree, or None if the node does not have this shape
    """
    if not pattern.accepts(node.type):
        return None

    shape = enclosing if pattern.recursive and enclosing is not None else pattern
    if not shape.children:
        return Match(node, pattern)

    if shape.regex is None:
        compile_pattern(shape, alphabet)

    kids = named_children(node)
    found = shape.regex.fullmatch(alphabet.encode(kid.type for kid in kids))
    if found is None:
        return None

    result = Match(node, pattern)
    for group, child_index in enumerate(shape.groups, start=1):
        start, end = found.span(group)
        if start < 0:
            continue
        child_pattern = shape.children[child_index]
        for kid in kids[start:end]:
            sub = match_node(child_pattern, kid, shape, alphabet)
            if sub is None:
                return None
            result.children.append(sub)

    return result
