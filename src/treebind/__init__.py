"""
treebind - grammar-driven binding generator for C/C++ headers.

Provides:
- A parenthesized pattern language over tree-sitter syntax trees
- A default header grammar (macros, typedefs, structs, enums, functions)
- ctypes module generation
- An MCP server exposing generation and grammar inspection tools
"""

__version__ = "0.1.0"
