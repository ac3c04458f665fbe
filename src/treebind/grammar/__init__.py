"""
Grammar pattern engine.

Compiles the parenthesized pattern language into regex-backed matchers
and applies them to tree-sitter nodes.

Key Components:
- parse_pattern() / compose(): Build pattern trees
- GrammarTable: Kind-indexed, ordered pattern registry with dispatch
- match_node() / collect_captures(): Matching and capture extraction
"""

from .captures import ATOMS, EXPRESSIONS, Capture, collect_captures
from .lisp import (
    GrammarError,
    GrammarPattern,
    Quantifier,
    compose,
    parse_fragment,
    parse_pattern,
)
from .matcher import ALPHABET, Alphabet, Match, compile_pattern, match_node
from .table import GrammarTable

__all__ = [
    # Pattern language
    "GrammarError",
    "GrammarPattern",
    "Quantifier",
    "compose",
    "parse_fragment",
    "parse_pattern",
    # Matching
    "ALPHABET",
    "Alphabet",
    "Match",
    "compile_pattern",
    "match_node",
    # Captures
    "ATOMS",
    "EXPRESSIONS",
    "Capture",
    "collect_captures",
    # Table
    "GrammarTable",
]
