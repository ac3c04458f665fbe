"""
Grammar pattern language.

Patterns describe the shape of a tree-sitter node and its named children
in a small parenthesized syntax:

    (struct_specifier|union_specifier
     (type_identifier?)
     (field_declaration_list
      (field_declaration+ ...)))

Each pattern is `(name[suffix] child*)`:
- name: a node kind, an alternation `a|b|c`, or empty for any kind
- suffix: `+` one-or-more, `*` zero-or-more, `?` zero-or-one,
  `!` alternated with the following sibling
- a leading `^` marks a recursive child, matched against the
  enclosing pattern's children
- `@name` in a child position splices a named fragment
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Sequence


class GrammarError(ValueError):
    """Malformed grammar pattern text."""

    def __init__(self, message: str, text: str = ""):
        self.text = text
        if text:
            message = f"{message} in pattern:\n{text.strip()}"
        super().__init__(message)


class Quantifier(str, Enum):
    """How many sibling nodes a child pattern may consume."""

    EXACTLY_ONE = ""
    ONE_OR_MORE = "+"
    ZERO_OR_MORE = "*"
    ZERO_OR_ONE = "?"
    OR_WITH_NEXT = "!"


# Signature of a semantic action: (context, node, captures) -> None
Action = Callable[[Any, Any, list], None]


@dataclass
class GrammarPattern:
    """A node in a compiled pattern tree."""

    name: str = ""
    quantifier: Quantifier = Quantifier.EXACTLY_ONE
    recursive: bool = False
    children: list[GrammarPattern] = field(default_factory=list)

    # Only set on top-level patterns registered in a GrammarTable
    action: Action | None = field(default=None, compare=False, repr=False)

    # Compiled matcher, filled in by matcher.compile_pattern()
    regex: re.Pattern | None = field(default=None, compare=False, repr=False)
    groups: list[int] = field(default_factory=list, compare=False, repr=False)

    @property
    def kinds(self) -> tuple[str, ...]:
        """Node kinds accepted by this pattern (empty means any)."""
        if not self.name:
            return ()
        return tuple(self.name.split("|"))

    @property
    def is_wildcard(self) -> bool:
        return not self.name

    def accepts(self, kind: str) -> bool:
        """Check whether a node kind is accepted by this pattern's name."""
        return self.is_wildcard or kind in self.kinds

    def clone(self) -> GrammarPattern:
        """Copy the pattern tree without its action or compiled matcher."""
        return GrammarPattern(
            name=self.name,
            quantifier=self.quantifier,
            recursive=self.recursive,
            children=[child.clone() for child in self.children],
        )

    def iter_tree(self) -> Iterable[GrammarPattern]:
        """Yield this pattern and all descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def to_text(self, indent: int = 0) -> str:
        """Render the pattern back to DSL text."""
        head = ("^" if self.recursive else "") + self.name + self.quantifier.value
        pad = " " * indent
        if not self.children:
            return f"{pad}({head})"
        lines = [f"{pad}({head}"]
        for child in self.children:
            lines.append(child.to_text(indent + 1))
        lines[-1] += ")"
        return "\n".join(lines)


# A fragment is either one pattern or an ordered run of sibling patterns
Fragment = GrammarPattern | Sequence[GrammarPattern]


_TOKEN_RE = re.compile(r"\(|\)|[^\s()]+")
_HEAD_RE = re.compile(
    r"^(?P<rec>\^)?"
    r"(?P<name>[A-Za-z_]\w*(?:\|[A-Za-z_]\w*)*)?"
    r"(?P<suffix>[+*?!])?$"
)
_REF_RE = re.compile(r"^@(?P<ref>[A-Za-z_]\w*)$")
_NAME_RE = re.compile(r"^[A-Za-z_]\w*(?:\|[A-Za-z_]\w*)*$")


def _tokenize(text: str) -> list[str]:
    for bad in re.finditer(r"[^\x00-\x7f]", text):
        raise GrammarError(f"Non-ASCII character {bad.group()!r}", text)
    return _TOKEN_RE.findall(text)


class _Parser:
    """Recursive descent over the token list."""

    def __init__(self, text: str, fragments: Mapping[str, Fragment] | None):
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0
        self.fragments = fragments or {}

    def error(self, message: str) -> GrammarError:
        return GrammarError(message, self.text)

    def peek(self) -> str | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise self.error("Unbalanced parentheses: unexpected end of pattern")
        self.pos += 1
        return token

    def parse_sequence(self) -> list[GrammarPattern]:
        """Parse sibling patterns until ')' or end of input."""
        result: list[GrammarPattern] = []
        while True:
            token = self.peek()
            if token is None or token == ")":
                return result
            if token == "(":
                result.append(self.parse_pattern())
                continue
            ref = _REF_RE.match(token)
            if ref:
                self.pos += 1
                result.extend(self.splice(ref.group("ref")))
                continue
            raise self.error(f"Unexpected token {token!r}")

    def splice(self, ref: str) -> list[GrammarPattern]:
        if ref not in self.fragments:
            raise self.error(f"Unknown fragment @{ref}")
        fragment = self.fragments[ref]
        if isinstance(fragment, GrammarPattern):
            return [fragment.clone()]
        return [pattern.clone() for pattern in fragment]

    def parse_pattern(self) -> GrammarPattern:
        if self.take() != "(":
            raise self.error("Expected '('")

        pattern = GrammarPattern()
        token = self.peek()
        if token is not None and token not in ("(", ")") and not token.startswith("@"):
            self.pos += 1
            head = _HEAD_RE.match(token)
            if head is None:
                raise self.error(f"Invalid pattern name or quantifier {token!r}")
            pattern.recursive = head.group("rec") is not None
            pattern.name = head.group("name") or ""
            pattern.quantifier = Quantifier(head.group("suffix") or "")

        pattern.children = self.parse_sequence()
        if self.take() != ")":
            raise self.error("Unbalanced parentheses: expected ')'")

        _check_alternation(pattern, self.text)
        return pattern


def _check_alternation(pattern: GrammarPattern, text: str) -> None:
    if pattern.children and pattern.children[-1].quantifier is Quantifier.OR_WITH_NEXT:
        raise GrammarError(
            f"Quantifier '!' on the last child of ({pattern.name}) has nothing to alternate with",
            text,
        )


def parse_fragment(text: str, fragments: Mapping[str, Fragment] | None = None) -> list[GrammarPattern]:
    """
    Parse a run of sibling patterns.

    Args:
        text: DSL text holding zero or more patterns
        fragments: Named fragments available to `@name` references

    Returns:
        The parsed patterns in order
    """
    parser = _Parser(text, fragments)
    result = parser.parse_sequence()
    if parser.peek() is not None:
        raise parser.error("Unbalanced parentheses: unexpected ')'")
    return result


def parse_pattern(text: str, fragments: Mapping[str, Fragment] | None = None) -> GrammarPattern:
    """
    Parse exactly one top-level pattern.

    Raises:
        GrammarError: If the text is malformed or holds more than one pattern
    """
    patterns = parse_fragment(text, fragments)
    if len(patterns) != 1:
        raise GrammarError(f"Expected exactly one pattern, found {len(patterns)}", text)
    return patterns[0]


def compose(
    name: str,
    *parts: Fragment,
    quantifier: Quantifier = Quantifier.EXACTLY_ONE,
) -> GrammarPattern:
    """
    Build a new pattern whose children are clones of existing patterns.

    Lets a later rule reuse an earlier one as a sub-shape, e.g. a typedef
    wrapping the bare struct pattern.
    """
    children: list[GrammarPattern] = []
    for part in parts:
        if isinstance(part, GrammarPattern):
            children.append(part.clone())
        else:
            children.extend(pattern.clone() for pattern in part)

    pattern = GrammarPattern(name=name, quantifier=quantifier, children=children)
    text = pattern.to_text()
    if name and _NAME_RE.match(name) is None:
        raise GrammarError(f"Invalid pattern name {name!r}", text)
    _check_alternation(pattern, text)
    return pattern
