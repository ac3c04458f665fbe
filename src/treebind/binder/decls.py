"""
Declarations synthesized from matched header shapes.

Type fields hold ctypes expressions (e.g. `ctypes.c_int`,
`ctypes.POINTER(STRUCT1)`); `None` stands for "no value".
"""

from dataclasses import asdict, dataclass, field
from enum import Enum


class Category(str, Enum):
    """Declaration categories, each with its own name set and output block."""

    CONST = "const"
    TYPE = "type"
    ENUM = "enum"
    PROC = "proc"


@dataclass
class Constant:
    """An object-like macro with a literal value."""
    name: str
    value: str
    header: str = ""

    def to_dict(self) -> dict:
        return {"kind": "constant", **asdict(self)}


@dataclass
class TypeAlias:
    """A typedef of a scalar, pointer or named type."""
    name: str
    target: str
    header: str = ""
    opaque: bool = False

    def to_dict(self) -> dict:
        return {"kind": "alias", **asdict(self)}


@dataclass
class Field:
    """
    A record field.

    `length` is the ctypes array suffix of fixed-size arrays (`4`, or
    `3 * 2` for `[2][3]`); `bits` is the width of a bitfield.
    """
    name: str
    type: str
    length: str | None = None
    bits: str | None = None


@dataclass
class Record:
    """A struct or union with foreign-linkage provenance."""
    name: str
    importc: str
    header: str = ""
    is_union: bool = False
    fields: list[Field] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "kind": "union" if self.is_union else "struct",
            "name": self.name,
            "importc": self.importc,
            "header": self.header,
            "fields": [asdict(f) for f in self.fields],
        }


@dataclass
class Enumerator:
    """One enumeration constant; `value` is source text or the auto number."""
    name: str
    value: str


@dataclass
class Enumeration:
    """A distinct integer type plus its constants."""
    name: str
    header: str = ""
    members: list[Enumerator] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "kind": "enum",
            "name": self.name,
            "header": self.header,
            "members": [asdict(m) for m in self.members],
        }


@dataclass
class Parameter:
    """A function parameter."""
    name: str
    type: str


@dataclass
class Function:
    """An external function signature."""
    name: str
    importc: str
    header: str = ""
    return_type: str | None = None
    parameters: list[Parameter] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "kind": "function",
            "name": self.name,
            "importc": self.importc,
            "header": self.header,
            "return_type": self.return_type,
            "parameters": [asdict(p) for p in self.parameters],
        }


Declaration = Constant | TypeAlias | Record | Enumeration | Function
