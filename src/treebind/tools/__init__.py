"""
MCP Tools for treebind.

Modules:
- bindings: Binding generation, grammar inspection and header download
"""

from . import bindings

__all__ = ["bindings"]
