"""
ctypes module rendering.

Renders the blocks of a GenerationContext as Python source. Blocks come
out in a fixed order so names are bound before use: constants, enums,
types, procedures. Within the type block, record classes are declared
first and get their `_fields_` last, so records may point at each other
and at aliases declared after them. Type names that are used but never
declared (forward-declared structs) get an empty placeholder class.
"""

from __future__ import annotations

from .context import GenerationContext
from .decls import (
    Category,
    Constant,
    Enumeration,
    Function,
    Record,
    TypeAlias,
)

INDENT = "    "

_TITLES = {
    Category.CONST: "Constants",
    Category.ENUM: "Enumerations",
    Category.TYPE: "Types",
    Category.PROC: "Procedures",
}

_ORDER = (Category.CONST, Category.ENUM, Category.TYPE, Category.PROC)

_BIND_HELPER = '''\
def _bind(name, argtypes, restype):
    func = getattr(_lib, name, None)
    if func is not None:
        func.argtypes = argtypes
        func.restype = restype
    return func'''


def _banner(title: str) -> str:
    return f"# {'=' * 76}\n# {title}\n# {'=' * 76}"


# ============================================================================
# Declarations
# ============================================================================

def render_constant(const: Constant) -> str:
    return f"{const.name} = {const.value}"


def render_enum(enum: Enumeration) -> str:
    """An enum is a c_int subclass plus one module constant per member."""
    lines = [f"class {enum.name}(ctypes.c_int):", f"{INDENT}pass"]
    if enum.members:
        lines.append("")
    for member in enum.members:
        lines.append(f"{member.name} = {member.value}")
    return "\n".join(lines)


def render_record_stub(record: Record) -> str:
    base = "ctypes.Union" if record.is_union else "ctypes.Structure"
    return "\n".join([
        f"class {record.name}({base}):",
        f"{INDENT}_importc_ = {record.importc!r}",
        f"{INDENT}_header_ = {record.header!r}",
    ])


def render_opaque(alias: TypeAlias) -> str:
    return "\n".join([
        f"class {alias.name}({alias.target}):",
        f"{INDENT}_importc_ = {alias.name!r}",
        f"{INDENT}_header_ = {alias.header!r}",
    ])


def render_placeholder(name: str) -> str:
    """Empty class for a type that is used but never declared."""
    return f"class {name}(ctypes.Structure):\n{INDENT}pass"


def render_alias(alias: TypeAlias) -> str:
    return f"{alias.name} = {alias.target}"


def render_fields(record: Record) -> str:
    if not record.fields:
        return f"{record.name}._fields_ = []"

    lines = [f"{record.name}._fields_ = ["]
    for f in record.fields:
        field_type = "ctypes.c_void_p" if f.type == "None" else f.type
        if f.length is not None:
            field_type = f"{field_type} * {f.length}"
        if f.bits is not None:
            lines.append(f"{INDENT}({f.name!r}, {field_type}, {f.bits}),")
        else:
            lines.append(f"{INDENT}({f.name!r}, {field_type}),")
    lines.append("]")
    return "\n".join(lines)


def render_function(func: Function) -> str:
    argtypes = ", ".join(p.type for p in func.parameters)
    restype = func.return_type or "None"
    params = ", ".join(p.name for p in func.parameters)
    return (
        f"# {func.importc}({params})\n"
        f"{func.name} = _bind({func.importc!r}, [{argtypes}], {restype})"
    )


# ============================================================================
# Blocks
# ============================================================================

def render_block(context: GenerationContext, category: Category | str) -> str:
    """
    Render one category block, without its banner.

    Returns:
        Python source, or "" if the block is empty
    """
    category = Category(category)
    decls = context.block(category)
    placeholders = context.undeclared_types() if category is Category.TYPE else []
    if not decls and not placeholders:
        return ""

    if category is Category.CONST:
        return "\n".join(render_constant(d) for d in decls)

    if category is Category.ENUM:
        return "\n\n\n".join(render_enum(d) for d in decls)

    if category is Category.PROC:
        return "\n\n".join(render_function(d) for d in decls)

    records = [d for d in decls if isinstance(d, Record)]
    classes = [render_placeholder(name) for name in placeholders]
    classes += [
        render_record_stub(d) if isinstance(d, Record) else render_opaque(d)
        for d in decls
        if isinstance(d, Record) or (isinstance(d, TypeAlias) and d.opaque)
    ]
    aliases = [
        render_alias(d) for d in decls if isinstance(d, TypeAlias) and not d.opaque
    ]

    parts = []
    if classes:
        parts.append("\n\n\n".join(classes))
    if aliases:
        parts.append("\n".join(aliases))
    if records:
        parts.append("\n\n".join(render_fields(r) for r in records))
    return "\n\n\n".join(parts)


def render_module(context: GenerationContext, dynlib: str | None = None) -> str:
    """
    Render a complete ctypes module.

    Args:
        context: Context holding the emitted declarations
        dynlib: Shared library to load; None binds against the
            symbols of the running process

    Returns:
        Python source text; identical input gives identical output
    """
    headers = [h for h in context.headers if h]
    lines = ["# Generated by treebind. Do not edit."]
    if headers:
        lines.append("# Sources:")
        lines.extend(f"#   {h}" for h in headers)

    sections = [
        "\n".join(lines),
        "import ctypes",
        f"_lib = ctypes.CDLL({dynlib or None!r})",
    ]
    if context.block(Category.PROC):
        sections.append(_BIND_HELPER)

    for category in _ORDER:
        body = render_block(context, category)
        if body:
            sections.append(f"{_banner(_TITLES[category])}\n\n{body}")

    return "\n\n\n".join(sections) + "\n"
