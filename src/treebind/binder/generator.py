"""
Binding generator - tree-sitter front end for the grammar engine.

Parses C/C++ headers with tree-sitter, walks every named node in
document order and lets the grammar table claim and translate the
shapes it knows. Everything runs synchronously in one call chain.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

import tree_sitter_c as tsc
import tree_sitter_cpp as tscpp
from tree_sitter import Language, Parser, Tree

from ..config import Mode, get_config
from ..grammar import GrammarTable
from ..grammar.matcher import named_children
from .codegen import render_module
from .context import GenerationContext
from .rules import get_grammar_table

logger = logging.getLogger(__name__)

_LANGUAGES = {
    Mode.C: tsc.language,
    Mode.CPP: tscpp.language,
}


class BindingGenerator:
    """
    Generate ctypes declarations from C/C++ headers.

    One call to generate()/generate_file() is one run with a fresh
    GenerationContext; generate_headers() shares one context across
    all headers of the session so shared declarations are emitted once.
    """

    def __init__(self, mode: Mode | str | None = None, table: GrammarTable | None = None):
        """Initialize the generator."""
        self._mode = Mode(mode) if mode else get_config().mode
        self._table = table if table is not None else get_grammar_table()
        self._parsers: dict[Mode, Parser] = {}

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def table(self) -> GrammarTable:
        return self._table

    def _get_parser(self, mode: Mode) -> Parser:
        """Get or create the parser of a language mode."""
        parser = self._parsers.get(mode)
        if parser is None:
            parser = Parser(Language(_LANGUAGES[mode]()))
            self._parsers[mode] = parser
        return parser

    # ========================================================================
    # Parsing & traversal
    # ========================================================================

    def parse(self, source: str | bytes, mode: Mode | str | None = None) -> Tree:
        """Parse source text into a tree-sitter tree."""
        if isinstance(source, str):
            source = source.encode("utf-8")
        return self._get_parser(Mode(mode) if mode else self._mode).parse(source)

    def walk(self, root: Any) -> Iterator[Any]:
        """Yield named, non-comment nodes in document order (preorder)."""
        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(named_children(node)))

    def process(self, root: Any, context: GenerationContext) -> int:
        """
        Dispatch every node under root against the grammar table.

        Returns:
            Number of nodes claimed by a pattern
        """
        claimed = 0
        for node in self.walk(root):
            if node.type not in self._table:
                continue
            if self._table.dispatch(node, context) is not None:
                claimed += 1
        return claimed

    # ========================================================================
    # Public API
    # ========================================================================

    def generate(
        self,
        source: str | bytes,
        header: str = "",
        context: GenerationContext | None = None,
        mode: Mode | str | None = None,
    ) -> GenerationContext:
        """
        Generate declarations from header source text.

        Args:
            source: Header contents
            header: Provenance recorded on foreign-linkage declarations
            context: Context to extend (a fresh one when omitted)
            mode: Language mode override

        Returns:
            The context holding the emitted declarations
        """
        if context is None:
            context = GenerationContext()
        context.begin_header(header)

        tree = self.parse(source, mode)
        if tree.root_node.has_error:
            logger.warning("Parse errors in %s; unparsed regions are skipped", header or "<source>")

        claimed = self.process(tree.root_node, context)
        logger.debug("%s: %d nodes claimed, %s", header or "<source>", claimed, context.counts())
        return context

    def generate_file(
        self,
        file_path: str | Path,
        context: GenerationContext | None = None,
        mode: Mode | str | None = None,
    ) -> GenerationContext:
        """
        Generate declarations from a header file.

        Args:
            file_path: Header path, or a name looked up in the include dirs
            context: Context to extend (a fresh one when omitted)
            mode: Language mode override (default: from the file extension)
        """
        config = get_config()
        path = config.find_header(file_path)
        if path is None:
            raise FileNotFoundError(f"Header not found: {file_path}")

        content = path.read_bytes()
        return self.generate(
            content,
            header=str(file_path),
            context=context,
            mode=mode or config.mode_for(path),
        )

    def generate_headers(self, file_paths: list[str | Path]) -> GenerationContext:
        """Generate declarations for several headers in one shared context."""
        context = GenerationContext()
        for file_path in file_paths:
            self.generate_file(file_path, context=context)
        return context

    def render(self, context: GenerationContext, dynlib: str | None = None) -> str:
        """Render a context as a ctypes Python module."""
        return render_module(context, dynlib if dynlib is not None else get_config().dynlib)


# ============================================================================
# Global Instance
# ============================================================================

_generator: BindingGenerator | None = None


def get_generator() -> BindingGenerator:
    """Get the global generator instance."""
    global _generator
    if _generator is None:
        _generator = BindingGenerator()
    return _generator


def set_generator(generator: BindingGenerator | None) -> None:
    """Set the global generator instance (useful for testing)."""
    global _generator
    _generator = generator
