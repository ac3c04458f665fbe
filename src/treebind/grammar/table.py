"""
Grammar table: node kind -> ordered top-level patterns.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from .captures import Capture, collect_captures
from .lisp import Action, GrammarError, GrammarPattern, parse_pattern
from .matcher import ALPHABET, Alphabet, Match, compile_pattern, match_node

logger = logging.getLogger(__name__)


class GrammarTable:
    """
    Registry of top-level patterns keyed by node kind.

    Patterns registered under the same kind are tried in registration
    order and the first one that matches claims the node.
    """

    def __init__(self, alphabet: Alphabet = ALPHABET):
        self._alphabet = alphabet
        self._patterns: dict[str, list[GrammarPattern]] = {}
        self._ordered: list[GrammarPattern] = []

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[GrammarPattern]:
        return iter(self._ordered)

    def __contains__(self, kind: str) -> bool:
        return kind in self._patterns

    def kinds(self) -> list[str]:
        return list(self._patterns)

    def register(self, pattern: GrammarPattern | str, action: Action | None = None) -> GrammarPattern:
        """
        Compile a top-level pattern and register it under each kind it names.

        Args:
            pattern: Pattern or DSL text
            action: Semantic action run on a successful match

        Returns:
            The registered (compiled) pattern

        Raises:
            GrammarError: If the pattern is malformed or names no kind
        """
        if isinstance(pattern, str):
            pattern = parse_pattern(pattern)
        if pattern.is_wildcard:
            raise GrammarError("Top-level pattern must name a node kind", pattern.to_text())

        compile_pattern(pattern, self._alphabet)
        if action is not None:
            pattern.action = action

        for kind in pattern.kinds:
            self._patterns.setdefault(kind, []).append(pattern)
        self._ordered.append(pattern)
        return pattern

    def candidates(self, kind: str) -> list[GrammarPattern]:
        """Patterns registered under a kind, in registration order."""
        return list(self._patterns.get(kind, ()))

    def match(self, node: Any) -> tuple[GrammarPattern, Match] | None:
        """Find the first registered pattern matching a node."""
        for pattern in self._patterns.get(node.type, ()):
            found = match_node(pattern, node, alphabet=self._alphabet)
            if found is not None:
                return pattern, found
        return None

    def dispatch(self, node: Any, context: Any) -> list[Capture] | None:
        """
        Match a node and run the claiming pattern's action.

        Returns:
            The captures handed to the action, or None if nothing matched
        """
        claimed = self.match(node)
        if claimed is None:
            return None

        pattern, found = claimed
        captures = collect_captures(found)
        logger.debug("%s claimed by %s: %s", node.type, pattern.name, captures)
        if pattern.action is not None:
            pattern.action(context, node, captures)
        return captures

    def describe(self) -> str:
        """Render every registered pattern, one block per kind."""
        blocks = []
        for kind, patterns in self._patterns.items():
            for pattern in patterns:
                blocks.append(f"# {kind}\n{pattern.to_text()}")
        return "\n\n".join(blocks)
