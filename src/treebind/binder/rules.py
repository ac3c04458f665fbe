"""
Default grammar for C/C++ headers.

Shapes are written in the pattern language (see grammar.lisp) and bound
to semantic actions. Shared sub-shapes are parsed once as fragments and
spliced with `@name`; the typedef variants of struct and enum are
composed from the already-built bare patterns.
"""

from ..grammar import GrammarPattern, GrammarTable, compose, parse_fragment, parse_pattern
from . import actions

# ============================================================================
# Fragments
# ============================================================================

FRAGMENT_TEXTS = {
    # A type specifier: int / X / unsigned int / struct X
    "type": """
        (primitive_type|type_identifier?)
        (sized_type_specifier?
         (primitive_type?)
        )
        (struct_specifier|union_specifier|enum_specifier?
         (type_identifier)
        )
    """,

    # Field declarators, any number per declaration:
    # `a`, `*a`, `a[4]`, `a[2][3]`, `*a[4]`, `a : 3`
    "fields": """
        (field_identifier|pointer_declarator|array_declarator|bitfield_clause+
         (type_qualifier*)
         (^pointer_declarator|array_declarator?)
         (field_identifier?)
         (identifier|number_literal?)
        )
    """,

    # A function declarator with its parameter list
    "func": """
        (function_declarator?
         (identifier)
         (parameter_list
          (parameter_declaration*
           (type_qualifier*)
           @type
           (type_qualifier*)
           (identifier?)
           (pointer_declarator?
            (type_qualifier*)
            (^pointer_declarator?)
            (identifier?)
           )
          )
         )
        )
    """,
}

# ============================================================================
# Top-level rules
# ============================================================================

RULE_TEXTS = {
    # #define X Y
    "define": """
        (preproc_def
         (identifier)
         (preproc_arg)
        )
    """,

    # typedef int X / typedef X Y / typedef struct X Y / typedef T *Y
    "typedef": """
        (type_definition
         (type_qualifier*)
         @type
         (type_identifier?)
         (pointer_declarator?
          (type_qualifier*)
          (^pointer_declarator?)
          (type_identifier?)
         )
        )
    """,

    # struct X { ... } / union X { ... }
    "struct": """
        (struct_specifier|union_specifier
         (type_identifier?)
         (field_declaration_list
          (field_declaration+
           (type_qualifier*)
           @type
           @fields
          )
         )
        )
    """,

    # enum X { a, b = 1, ... }
    "enum": """
        (enum_specifier
         (type_identifier?)
         (enumerator_list
          (enumerator+
           (identifier)
           (number_literal|char_literal|identifier|parenthesized_expression|binary_expression|unary_expression|math_expression|bitwise_expression|shift_expression?)
          )
         )
        )
    """,

    # typ function(typ param1, ...)
    "function": """
        (declaration
         (storage_class_specifier?)
         (type_qualifier?)
         @type
         @func
         (pointer_declarator?
          (^pointer_declarator?)
          @func
         )
        )
    """,
}


def get_rule_text(name: str) -> str | None:
    """
    Get the DSL text of a rule or fragment by name.

    Args:
        name: Rule or fragment name

    Returns:
        Pattern text or None if not found
    """
    return RULE_TEXTS.get(name) or FRAGMENT_TEXTS.get(name)


def build_fragments() -> dict[str, list[GrammarPattern]]:
    """Parse the shared fragments; later fragments may use earlier ones."""
    fragments: dict[str, list[GrammarPattern]] = {}
    for name, text in FRAGMENT_TEXTS.items():
        fragments[name] = parse_fragment(text, fragments)
    return fragments


def build_grammar_table() -> GrammarTable:
    """
    Build the default grammar table.

    Registration order matters: the first pattern matching a node claims it.

    Raises:
        GrammarError: If any rule fails to compile
    """
    fragments = build_fragments()
    table = GrammarTable()

    def rule(name: str) -> GrammarPattern:
        return parse_pattern(RULE_TEXTS[name], fragments)

    table.register(rule("define"), actions.define_constant)
    table.register(rule("typedef"), actions.declare_alias)

    struct = table.register(rule("struct"), actions.declare_record)
    table.register(
        compose("type_definition", struct, parse_fragment("(type_identifier)")),
        actions.declare_typedef_record,
    )

    enum = table.register(rule("enum"), actions.declare_enum)
    table.register(
        compose("type_definition", enum, parse_fragment("(type_identifier)")),
        actions.declare_typedef_enum,
    )

    table.register(rule("function"), actions.declare_function)
    return table


# ============================================================================
# Global Instance
# ============================================================================

_table: GrammarTable | None = None


def get_grammar_table() -> GrammarTable:
    """Get the global grammar table (built on first use)."""
    global _table
    if _table is None:
        _table = build_grammar_table()
    return _table
