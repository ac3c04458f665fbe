"""Tests for the grammar table."""

import pytest

from treebind.binder import Category, GenerationContext, build_grammar_table
from treebind.grammar import GrammarError, GrammarTable


class TestRegistration:
    """Test pattern registration."""

    def test_register_text(self):
        """Test registering pattern text under its kind."""
        table = GrammarTable()
        pattern = table.register("(preproc_def (identifier) (preproc_arg))")
        assert "preproc_def" in table
        assert table.candidates("preproc_def") == [pattern]
        assert pattern.regex is not None

    def test_register_alternation(self):
        """Test that an alternated name registers under every kind."""
        table = GrammarTable()
        pattern = table.register("(struct_specifier|union_specifier (field_declaration_list))")
        assert table.candidates("struct_specifier") == [pattern]
        assert table.candidates("union_specifier") == [pattern]
        assert len(table) == 1

    def test_wildcard_top_level_rejected(self):
        """Test that a top-level pattern must name a kind."""
        with pytest.raises(GrammarError, match="must name a node kind"):
            GrammarTable().register("((identifier))")

    def test_registration_order(self):
        """Test that candidates keep registration order."""
        table = GrammarTable()
        first = table.register("(type_definition (primitive_type) (type_identifier))")
        second = table.register("(type_definition (type_identifier) (type_identifier))")
        assert table.candidates("type_definition") == [first, second]
        assert list(table) == [first, second]

    def test_default_grammar(self):
        """Test the kinds covered by the default grammar."""
        table = build_grammar_table()
        assert set(table.kinds()) == {
            "preproc_def",
            "type_definition",
            "struct_specifier",
            "union_specifier",
            "enum_specifier",
            "declaration",
        }
        assert len(table.candidates("type_definition")) == 3


class TestDispatch:
    """Test matching and action dispatch."""

    def test_first_match_claims(self, parse, find_node):
        """Test that the first matching pattern runs, and only it."""
        calls = []
        table = GrammarTable()
        table.register("(preproc_def (identifier) (preproc_arg))", lambda c, n, caps: calls.append("first"))
        table.register("(preproc_def (identifier) ())", lambda c, n, caps: calls.append("second"))

        node = find_node(parse("#define A 1\n"), "preproc_def")
        captures = table.dispatch(node, None)

        assert calls == ["first"]
        assert [c.text for c in captures] == ["A", "1"]

    def test_fallthrough(self, parse, find_node):
        """Test that a failing pattern passes the node to the next one."""
        calls = []
        table = GrammarTable()
        table.register("(preproc_def (identifier) (identifier))", lambda c, n, caps: calls.append("first"))
        table.register("(preproc_def (identifier) (preproc_arg))", lambda c, n, caps: calls.append("second"))

        table.dispatch(find_node(parse("#define A 1\n"), "preproc_def"), None)
        assert calls == ["second"]

    def test_unmatched(self, parse, find_node):
        """Test that an unmatched node returns None."""
        table = GrammarTable()
        table.register("(preproc_def (identifier) (preproc_arg))")
        node = find_node(parse("#define A\n"), "preproc_def")
        assert table.dispatch(node, None) is None

    def test_redispatch_is_idempotent(self, parse, find_node):
        """Test that dispatching a node twice declares it once."""
        table = build_grammar_table()
        context = GenerationContext()
        node = find_node(parse("struct S { int a; };"), "struct_specifier")

        table.dispatch(node, context)
        table.dispatch(node, context)
        assert context.counts()["type"] == 1

    def test_anonymous_redispatch_is_idempotent(self, parse, find_node):
        """Test that an anonymous record keeps one generated name."""
        table = build_grammar_table()
        context = GenerationContext()
        node = find_node(parse("struct { int a; } s;"), "struct_specifier")

        table.dispatch(node, context)
        table.dispatch(node, context)
        assert [r.name for r in context.block(Category.TYPE)] == ["AnonStruct0"]

    def test_describe(self):
        """Test the grammar listing."""
        table = GrammarTable()
        table.register("(preproc_def (identifier) (preproc_arg))")
        assert table.describe() == "# preproc_def\n(preproc_def\n (identifier)\n (preproc_arg))"
