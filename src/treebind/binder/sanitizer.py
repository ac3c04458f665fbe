"""
Identifier, literal and type normalization.

Turns raw C tokens into valid Python names, Python-compatible numeric
literals and ctypes type expressions.
"""

import keyword
import re

# "No value" placeholder: void return types and void aliases
VOID = None

_UNDERSCORES_RE = re.compile(r"_+")
_COMMENT_RE = re.compile(r"/[/*].*?(?:\*/)?$", re.DOTALL)

_DECIMAL_RE = re.compile(r"^[+-]?(?:0|[1-9]\d*)(?P<suffix>[uUlL]*)$")
_OCTAL_RE = re.compile(r"^(?P<sign>[+-]?)0(?P<digits>[0-7]+)(?P<suffix>[uUlL]*)$")
_HEX_RE = re.compile(r"^[+-]?0[xX][0-9a-fA-F]+(?P<suffix>[uUlL]*)$")
_BINARY_RE = re.compile(r"^[+-]?0[bB][01]+(?P<suffix>[uUlL]*)$")
_FLOAT_RE = re.compile(
    r"^[+-]?(?:\d+\.\d*|\.\d+|\d+(?=[eE]))(?:[eE][+-]?\d+)?(?P<suffix>[fFlL]?)$"
)
_CHAR_RE = re.compile(r"^[LuU]?'(?P<body>\\.[^']*|[^'\\])'$")

# Numbers inside constant expressions
_SUFFIXED_RE = re.compile(r"(?<![\w.])(0[xX][0-9a-fA-F]+|0[bB][01]+|\d+)[uUlL]+\b")
_OCTAL_WORD_RE = re.compile(r"(?<![\w.])0([0-7]+)\b(?!\.)")

_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "0": "\0", "a": "\a", "b": "\b",
    "f": "\f", "v": "\v", "\\": "\\", "'": "'", '"': '"', "?": "?",
}


def sanitize_identifier(name: str) -> str:
    """
    Normalize a C identifier into a Python name.

    Leading/trailing underscores are stripped and runs of underscores
    collapsed, so `_test_call_` becomes `test_call`. Python keywords get
    a trailing underscore.
    """
    result = _UNDERSCORES_RE.sub("_", name.strip().strip("_"))
    if keyword.iskeyword(result):
        result += "_"
    return result


def normalize_literal(value: str) -> str:
    """
    Normalize the value of an object-like macro.

    Args:
        value: Raw preprocessor argument text

    Returns:
        A Python numeric literal, or "" if the value is not a plain number
    """
    text = _COMMENT_RE.sub("", value).strip()
    while text.startswith("(") and text.endswith(")"):
        text = text[1:-1].strip()

    octal = _OCTAL_RE.match(text)
    if octal:
        return f"{octal.group('sign')}0o{octal.group('digits')}"

    for regex in (_DECIMAL_RE, _HEX_RE, _BINARY_RE, _FLOAT_RE):
        found = regex.match(text)
        if found:
            suffix = found.group("suffix")
            return text[: len(text) - len(suffix)] if suffix else text
    return ""


def normalize_expression(value: str) -> str:
    """Rewrite the numbers of a C constant expression as Python literals."""
    text = _COMMENT_RE.sub("", value).strip()
    text = _SUFFIXED_RE.sub(r"\1", text)
    return _OCTAL_WORD_RE.sub(r"0o\1", text)


def parse_int(value: str) -> int | None:
    """
    Parse a C integer or character literal.

    Returns:
        The integer value, or None if `value` is not an integer literal
    """
    text = value.strip()
    char = _CHAR_RE.match(text)
    if char:
        body = char.group("body")
        if body.startswith("\\"):
            escape = body[1:]
            if escape[:1] in ("x", "X"):
                return int(escape[1:], 16)
            if escape.isdigit():
                return int(escape, 8)
            return ord(_ESCAPES.get(escape, escape[:1]))
        return ord(body)

    literal = normalize_literal(text)
    if not literal or _FLOAT_RE.match(literal) and not _DECIMAL_RE.match(literal):
        return None
    try:
        return int(literal, 0)
    except ValueError:
        return None


# ============================================================================
# C type -> ctypes
# ============================================================================

_SCALARS = {
    "char": "ctypes.c_char",
    "signed char": "ctypes.c_byte",
    "unsigned char": "ctypes.c_ubyte",
    "short": "ctypes.c_short",
    "unsigned short": "ctypes.c_ushort",
    "int": "ctypes.c_int",
    "unsigned int": "ctypes.c_uint",
    "long": "ctypes.c_long",
    "unsigned long": "ctypes.c_ulong",
    "long long": "ctypes.c_longlong",
    "unsigned long long": "ctypes.c_ulonglong",
    "float": "ctypes.c_float",
    "double": "ctypes.c_double",
    "long double": "ctypes.c_longdouble",
    "bool": "ctypes.c_bool",
    "_Bool": "ctypes.c_bool",
    "size_t": "ctypes.c_size_t",
    "ssize_t": "ctypes.c_ssize_t",
    "ptrdiff_t": "ctypes.c_ssize_t",
    "intptr_t": "ctypes.c_ssize_t",
    "uintptr_t": "ctypes.c_size_t",
    "wchar_t": "ctypes.c_wchar",
    "int8_t": "ctypes.c_int8",
    "int16_t": "ctypes.c_int16",
    "int32_t": "ctypes.c_int32",
    "int64_t": "ctypes.c_int64",
    "uint8_t": "ctypes.c_uint8",
    "uint16_t": "ctypes.c_uint16",
    "uint32_t": "ctypes.c_uint32",
    "uint64_t": "ctypes.c_uint64",
}

# Pointer-to-X types ctypes provides directly
_POINTERS = {
    "void": "ctypes.c_void_p",
    "char": "ctypes.c_char_p",
    "wchar_t": "ctypes.c_wchar_p",
}

_QUALIFIERS = {"const", "volatile", "restrict", "struct", "union", "enum"}


def _sized_type(words: list[str]) -> str:
    """Canonical spelling of sized specifiers (`long unsigned int` etc.)."""
    unsigned = "unsigned" in words
    longs = words.count("long")
    if "char" in words:
        base = "char"
        if "signed" in words:
            return "signed char"
    elif "short" in words:
        base = "short"
    elif longs >= 2:
        base = "long long"
    elif longs == 1:
        base = "long double" if "double" in words else "long"
    elif "double" in words:
        base = "double"
    else:
        base = "int"
    return f"unsigned {base}" if unsigned else base


def split_pointer(c_type: str) -> tuple[str, int]:
    """Split `int **` into (`int`, 2)."""
    text = c_type.strip()
    depth = 0
    while text.endswith("*"):
        depth += 1
        text = text[:-1].rstrip()
    return text, depth


def base_type(c_type: str) -> str:
    """Map a pointer-free C type to ctypes (None for void)."""
    words = [w for w in c_type.split() if w not in _QUALIFIERS]
    if not words:
        return "ctypes.c_int"

    spelled = " ".join(words)
    if spelled == "void":
        return VOID
    if spelled in _SCALARS:
        return _SCALARS[spelled]
    if set(words) <= {"signed", "unsigned", "short", "long", "int", "char", "double"}:
        return _SCALARS[_sized_type(words)]
    return sanitize_identifier(words[-1])


def ctype(c_type: str) -> str | None:
    """
    Map a captured C type (possibly with trailing `*`s) to a ctypes expression.

    Returns:
        The ctypes expression, or None for `void`
    """
    text, depth = split_pointer(c_type)
    words = [w for w in text.split() if w not in _QUALIFIERS]
    spelled = " ".join(words)

    if depth == 0:
        return base_type(text)

    if spelled in _POINTERS:
        result = _POINTERS[spelled]
        depth -= 1
    else:
        result = base_type(text)
    for _ in range(depth):
        result = f"ctypes.POINTER({result})"
    return result


def type_name(c_type: str) -> str | None:
    """
    Name of the declared type a captured C type refers to.

    Returns:
        The sanitized name, or None for scalars, void and ctypes builtins
    """
    result = base_type(split_pointer(c_type)[0])
    if result is None or result.startswith("ctypes."):
        return None
    return result
