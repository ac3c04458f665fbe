"""
Semantic actions.

Each action receives the generation context, the claimed node and the
ordered capture list of the match, and emits at most one declaration
(plus enumerators). Captures are addressed by position: actions know
where names sit from the shape of the pattern they are bound to.
"""

from __future__ import annotations

import logging
from typing import Any

from ..grammar.captures import Capture
from ..grammar.matcher import named_children
from .context import GenerationContext
from .decls import (
    Category,
    Constant,
    Enumeration,
    Enumerator,
    Field,
    Function,
    Parameter,
    Record,
    TypeAlias,
)
from .sanitizer import (
    ctype,
    normalize_expression,
    normalize_literal,
    parse_int,
    sanitize_identifier,
    split_pointer,
    type_name,
)

logger = logging.getLogger(__name__)

# Capture kinds that follow a field as its array length
ARRAY_LENGTHS = frozenset({"identifier", "number_literal"})

OPAQUE = "ctypes.Structure"


# ============================================================================
# Helpers
# ============================================================================

def _resolve(ctx: GenerationContext, c_type: str) -> str | None:
    """ctypes expression for a captured type, noting the type name it uses."""
    name = type_name(c_type)
    if name:
        ctx.refer(name)
    return ctype(c_type)


def _target(ctx: GenerationContext, c_type: str) -> str:
    """Like _resolve(), but `None` spells no value."""
    result = _resolve(ctx, c_type)
    return "None" if result is None else result


def _has_name(specifier: Any) -> bool:
    return any(child.type == "type_identifier" for child in named_children(specifier))


def _under_typedef(node: Any) -> bool:
    return node.parent is not None and node.parent.type == "type_definition"


def _specifier(node: Any, kinds: tuple[str, ...]) -> Any:
    for child in named_children(node):
        if child.type in kinds:
            return child
    return None


def _span(node: Any) -> tuple[int, int]:
    return node.start_byte, node.end_byte


def _array_length(capture: Capture) -> str:
    if capture.kind == "number_literal":
        return normalize_literal(capture.text) or capture.text
    return sanitize_identifier(capture.text)


def _bit_width(capture: Capture) -> str:
    width = capture.text.lstrip(":").strip()
    return normalize_literal(width) or normalize_expression(width)


# ============================================================================
# #define
# ============================================================================

def define_constant(ctx: GenerationContext, node: Any, captures: list[Capture]) -> None:
    """`#define NAME literal` -> constant."""
    if len(captures) < 2:
        return
    name = sanitize_identifier(captures[0].text)
    value = normalize_literal(captures[1].text)
    if not name or not value:
        logger.debug("Skipping non-literal define %s", captures[0].text)
        return
    if ctx.declare(Category.CONST, name):
        ctx.emit(Category.CONST, Constant(name, value, ctx.current_header))


# ============================================================================
# typedef
# ============================================================================

def declare_alias(ctx: GenerationContext, node: Any, captures: list[Capture]) -> None:
    """`typedef T NAME` -> alias; `typedef X X` -> opaque placeholder."""
    if len(captures) < 2:
        return
    c_type = captures[0].text
    name = sanitize_identifier(captures[1].text)
    if not name or not ctx.declare(Category.TYPE, name):
        return

    base, depth = split_pointer(c_type)
    if depth == 0 and sanitize_identifier(base) == name:
        alias = TypeAlias(name, OPAQUE, ctx.current_header, opaque=True)
    else:
        alias = TypeAlias(name, _target(ctx, c_type), ctx.current_header)
    ctx.emit(Category.TYPE, alias)


# ============================================================================
# struct / union
# ============================================================================

def _emit_record(
    ctx: GenerationContext,
    name: str,
    importc: str,
    is_union: bool,
    captures: list[Capture],
    start: int,
    end_from_tail: int,
) -> None:
    if not name or not ctx.declare(Category.TYPE, name):
        return

    record = Record(name, importc, ctx.current_header, is_union=is_union)
    end = len(captures) - end_from_tail
    i = start
    while i + 1 < end:
        field_type = _target(ctx, captures[i].text)
        if captures[i + 1].kind == "bitfield_clause":
            # Unnamed bitfield: padding
            field_name = f"_pad{len(record.fields)}"
            i += 1
        else:
            field_name = sanitize_identifier(captures[i + 1].text)
            i += 2

        lengths = []
        while i < end and captures[i].kind in ARRAY_LENGTHS:
            lengths.append(_array_length(captures[i]))
            i += 1
        bits = None
        if i < end and captures[i].kind == "bitfield_clause":
            bits = _bit_width(captures[i])
            i += 1

        # ctypes nests arrays innermost first: `[2][3]` is `T * 3 * 2`
        length = " * ".join(reversed(lengths)) or None
        record.fields.append(Field(field_name, field_type, length, bits))

    ctx.emit(Category.TYPE, record)


def declare_record(ctx: GenerationContext, node: Any, captures: list[Capture]) -> None:
    """`struct X { ... }` / `union X { ... }`, named or anonymous."""
    named = _has_name(node)
    if not named and _under_typedef(node):
        # Named by the enclosing typedef
        return

    keyword = "union" if node.type == "union_specifier" else "struct"
    if named:
        raw = captures[0].text
        name = sanitize_identifier(raw)
        importc = f"{keyword} {raw}"
        start = 1
    else:
        prefix = "AnonUnion" if keyword == "union" else "AnonStruct"
        name = ctx.unique_name(Category.TYPE, prefix, key=_span(node))
        importc = ""
        start = 0

    _emit_record(ctx, name, importc, keyword == "union", captures, start, 0)


def declare_typedef_record(ctx: GenerationContext, node: Any, captures: list[Capture]) -> None:
    """`typedef struct [X] { ... } NAME`."""
    specifier = _specifier(node, ("struct_specifier", "union_specifier"))
    if specifier is None or not captures:
        return

    start = 1 if _has_name(specifier) else 0
    raw = captures[-1].text
    _emit_record(
        ctx,
        sanitize_identifier(raw),
        raw,
        specifier.type == "union_specifier",
        captures,
        start,
        1,
    )


# ============================================================================
# enum
# ============================================================================

def _enumerators(specifier: Any) -> list[Any]:
    body = _specifier(specifier, ("enumerator_list",))
    if body is None:
        return []
    return [child for child in named_children(body) if child.type == "enumerator"]


def _constant_value(ctx: GenerationContext, name: str) -> int | None:
    for const in ctx.block(Category.CONST):
        if const.name == name:
            return parse_int(const.value)
    return None


def _emit_enum(
    ctx: GenerationContext,
    name: str,
    specifier: Any,
    captures: list[Capture],
    start: int,
) -> None:
    """
    Emit an enum and its enumerators.

    Captures are grouped per `enumerator` node: a name, then the value
    if the enumerator has one. Values that are not integers advance the
    counter by one, unless they name an earlier enumerator of the same
    enum or an earlier integer macro, whose value is known. A name that
    is not a known constant is emitted as the counter value instead.
    """
    if not name or not ctx.declare(Category.ENUM, name):
        return

    enum = Enumeration(name, ctx.current_header)
    known: dict[str, int] = {}
    counter = 0
    i = start
    for enumerator in _enumerators(specifier):
        member = sanitize_identifier(captures[i].text)
        if len(named_children(enumerator)) > 1:
            explicit = captures[i + 1]
            number = parse_int(explicit.text)
            if explicit.kind == "identifier":
                value = sanitize_identifier(explicit.text)
                number = known.get(value, _constant_value(ctx, value))
                if number is None and not ctx.is_declared(Category.CONST, value):
                    # Unknown name: keep the fallback number
                    value = str(counter)
            elif number is None:
                value = normalize_expression(explicit.text)
            elif explicit.kind == "char_literal":
                value = str(number)
            else:
                value = normalize_literal(explicit.text) or explicit.text
            counter = counter + 1 if number is None else number + 1
            i += 2
        else:
            number = counter
            value = str(counter)
            counter += 1
            i += 1

        if number is not None:
            known[member] = number
        if member and ctx.declare(Category.CONST, member):
            enum.members.append(Enumerator(member, value))

    ctx.emit(Category.ENUM, enum)


def declare_enum(ctx: GenerationContext, node: Any, captures: list[Capture]) -> None:
    """`enum X { ... }`, named or anonymous."""
    named = _has_name(node)
    if not named and _under_typedef(node):
        return

    if named:
        name = sanitize_identifier(captures[0].text)
        start = 1
    else:
        name = ctx.unique_name(Category.ENUM, "AnonEnum", key=_span(node))
        start = 0
    _emit_enum(ctx, name, node, captures, start)


def declare_typedef_enum(ctx: GenerationContext, node: Any, captures: list[Capture]) -> None:
    """`typedef enum [X] { ... } NAME`."""
    specifier = _specifier(node, ("enum_specifier",))
    if specifier is None or not captures:
        return
    start = 1 if _has_name(specifier) else 0
    _emit_enum(ctx, sanitize_identifier(captures[-1].text), specifier, captures, start)


# ============================================================================
# Functions
# ============================================================================

def declare_function(ctx: GenerationContext, node: Any, captures: list[Capture]) -> None:
    """`ret name(type param, ...)` -> external function signature."""
    if len(captures) < 2:
        return
    importc = captures[1].text
    name = sanitize_identifier(importc)
    if not name or not ctx.declare(Category.PROC, name):
        return

    return_type = _resolve(ctx, captures[0].text)
    parameters: list[Parameter] = []
    i = 2
    while i < len(captures):
        param_type = captures[i].text
        if i + 1 < len(captures) and captures[i + 1].kind == "identifier":
            param_name = sanitize_identifier(captures[i + 1].text)
            i += 2
        else:
            # Unnamed parameter
            param_name = ""
            i += 1
        if param_type == "void" and not param_name:
            continue
        parameters.append(Parameter(param_name or f"arg{len(parameters)}", _target(ctx, param_type)))

    ctx.emit(
        Category.PROC,
        Function(name, importc, ctx.current_header, return_type, parameters),
    )
