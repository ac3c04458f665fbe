"""
Per-run symbol registry and output buffers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .decls import Category, Declaration

logger = logging.getLogger(__name__)


def _by_category(factory):
    return field(default_factory=lambda: {category: factory() for category in Category})


@dataclass
class GenerationContext:
    """
    State of one generation run.

    Holds the names already declared per category, the declarations
    emitted per category, and the header currently being processed.
    Create a fresh context for every independent run; a reused context
    turns every previously seen name into a silent skip.
    """

    current_header: str = ""
    declared: dict[Category, set[str]] = _by_category(set)
    buffers: dict[Category, list[Declaration]] = _by_category(list)
    headers: list[str] = field(default_factory=list)

    # Type names used by declarations, in first-use order
    referenced: dict[str, None] = field(default_factory=dict)

    # Generated names of anonymous records/enums, keyed by source span
    _anonymous: dict[tuple, str] = field(default_factory=dict, repr=False)

    def begin_header(self, header: str) -> None:
        """Switch the provenance header for subsequent declarations."""
        self.current_header = header
        if header not in self.headers:
            self.headers.append(header)

    def is_declared(self, category: Category, name: str) -> bool:
        return name in self.declared[category]

    def declare(self, category: Category, name: str) -> bool:
        """
        Reserve a name in a category.

        Returns:
            False if the name was already declared
        """
        names = self.declared[category]
        if name in names:
            logger.debug("Skipping duplicate %s %s", category.value, name)
            return False
        names.add(name)
        return True

    def emit(self, category: Category, declaration: Declaration) -> None:
        self.buffers[category].append(declaration)

    def unique_name(self, category: Category, prefix: str, key: Any = None) -> str:
        """
        Generate a name not yet declared in a category.

        Args:
            category: Category whose names must be avoided
            prefix: Name prefix, e.g. "AnonStruct"
            key: Optional identity (e.g. a source span); the same key
                always gets the same name within this context
        """
        if key is not None:
            lookup = (category, prefix, self.current_header, key)
            if lookup in self._anonymous:
                return self._anonymous[lookup]

        index = 0
        taken = set(self._anonymous.values()) | self.declared[category]
        while f"{prefix}{index}" in taken:
            index += 1
        name = f"{prefix}{index}"

        if key is not None:
            self._anonymous[lookup] = name
        return name

    def refer(self, name: str) -> None:
        """Record a type name used by a field, alias or signature."""
        self.referenced.setdefault(name, None)

    def undeclared_types(self) -> list[str]:
        """
        Referenced type names that no record, alias or enum declares.

        Forward-declared structs (`typedef struct Impl *ImplHandle`) and
        types from headers outside the run end up here.
        """
        return [
            name
            for name in self.referenced
            if not self.is_declared(Category.TYPE, name)
            and not self.is_declared(Category.ENUM, name)
        ]

    def block(self, category: Category) -> list[Declaration]:
        return list(self.buffers[category])

    def counts(self) -> dict[str, int]:
        return {category.value: len(self.buffers[category]) for category in Category}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "headers": list(self.headers),
            "counts": self.counts(),
            "declarations": {
                category.value: [d.to_dict() for d in self.buffers[category]]
                for category in Category
            },
        }
