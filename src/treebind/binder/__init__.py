"""
Binding synthesis for C/C++ headers.

Semantic actions, the default header grammar, the per-run symbol
registry and the ctypes renderer.
"""

from .codegen import render_block, render_module
from .context import GenerationContext
from .decls import (
    Category,
    Constant,
    Declaration,
    Enumeration,
    Enumerator,
    Field,
    Function,
    Parameter,
    Record,
    TypeAlias,
)
from .generator import BindingGenerator, get_generator, set_generator
from .rules import build_grammar_table, get_grammar_table, get_rule_text

__all__ = [
    "BindingGenerator",
    "get_generator",
    "set_generator",
    "GenerationContext",
    "Category",
    "Constant",
    "Declaration",
    "Enumeration",
    "Enumerator",
    "Field",
    "Function",
    "Parameter",
    "Record",
    "TypeAlias",
    "build_grammar_table",
    "get_grammar_table",
    "get_rule_text",
    "render_block",
    "render_module",
]
