"""Tests for identifier, literal and type normalization."""

import pytest

from treebind.binder.sanitizer import (
    ctype,
    normalize_expression,
    normalize_literal,
    parse_int,
    sanitize_identifier,
    split_pointer,
)


class TestIdentifiers:
    """Test C identifier -> Python name."""

    def test_strip_underscores(self):
        """Test that outer underscores are stripped."""
        assert sanitize_identifier("_test_call_int_param_") == "test_call_int_param"
        assert sanitize_identifier("__reserved") == "reserved"

    def test_collapse_underscores(self):
        """Test that underscore runs collapse to one."""
        assert sanitize_identifier("a__b___c") == "a_b_c"

    def test_keywords(self):
        """Test that Python keywords get a trailing underscore."""
        assert sanitize_identifier("class") == "class_"
        assert sanitize_identifier("lambda") == "lambda_"
        assert sanitize_identifier("type") == "type"

    def test_plain_names_unchanged(self):
        """Test that ordinary names pass through."""
        assert sanitize_identifier("STRUCT1") == "STRUCT1"


class TestLiterals:
    """Test macro value normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("512", "512"),
            ("0x512", "0x512"),
            ("5.12", "5.12"),
            ("0", "0"),
            ("-1", "-1"),
            ("0755", "0o755"),
            ("100UL", "100"),
            ("0xFFu", "0xFF"),
            ("1.5f", "1.5"),
            ("1e10", "1e10"),
            ("0b101", "0b101"),
            ("(42)", "42"),
            ("42 /* answer */", "42"),
            ("42 // answer", "42"),
        ],
    )
    def test_numbers(self, raw, expected):
        """Test accepted numeric forms."""
        assert normalize_literal(raw) == expected

    @pytest.mark.parametrize("raw", ["", "FOO", "(A * 2)", "\"text\"", "x * y", "08"])
    def test_non_numbers(self, raw):
        """Test that anything but a plain number is rejected."""
        assert normalize_literal(raw) == ""

    def test_expressions(self):
        """Test number rewriting inside constant expressions."""
        assert normalize_expression("~0u") == "~0"
        assert normalize_expression("(1UL << 010)") == "(1 << 0o10)"
        assert normalize_expression("0xFFu | FLAG_2") == "0xFF | FLAG_2"
        assert normalize_expression("1.05 + 0") == "1.05 + 0"

    def test_parse_int(self):
        """Test integer values of literals."""
        assert parse_int("42") == 42
        assert parse_int("0x10") == 16
        assert parse_int("010") == 8
        assert parse_int("7u") == 7
        assert parse_int("-3") == -3

    def test_parse_char(self):
        """Test character literals and escapes."""
        assert parse_int("'a'") == 97
        assert parse_int("'\\n'") == 10
        assert parse_int("'\\0'") == 0
        assert parse_int("'\\x41'") == 65

    def test_parse_int_rejects(self):
        """Test that floats and expressions have no integer value."""
        assert parse_int("1.5") is None
        assert parse_int("1 << 2") is None
        assert parse_int("FOO") is None


class TestTypes:
    """Test C type -> ctypes expression."""

    def test_split_pointer(self):
        """Test trailing `*` counting."""
        assert split_pointer("int **") == ("int", 2)
        assert split_pointer("int") == ("int", 0)

    @pytest.mark.parametrize(
        "c_type, expected",
        [
            ("int", "ctypes.c_int"),
            ("unsigned int", "ctypes.c_uint"),
            ("long unsigned int", "ctypes.c_ulong"),
            ("unsigned", "ctypes.c_uint"),
            ("long long", "ctypes.c_longlong"),
            ("uint8_t", "ctypes.c_uint8"),
            ("size_t", "ctypes.c_size_t"),
            ("double", "ctypes.c_double"),
            ("STRUCT1", "STRUCT1"),
            ("struct _private_", "private"),
        ],
    )
    def test_scalars_and_names(self, c_type, expected):
        """Test non-pointer types."""
        assert ctype(c_type) == expected

    @pytest.mark.parametrize(
        "c_type, expected",
        [
            ("void *", "ctypes.c_void_p"),
            ("char *", "ctypes.c_char_p"),
            ("const char *", "ctypes.c_char_p"),
            ("wchar_t *", "ctypes.c_wchar_p"),
            ("int *", "ctypes.POINTER(ctypes.c_int)"),
            ("int **", "ctypes.POINTER(ctypes.POINTER(ctypes.c_int))"),
            ("char **", "ctypes.POINTER(ctypes.c_char_p)"),
            ("STRUCT1 *", "ctypes.POINTER(STRUCT1)"),
        ],
    )
    def test_pointers(self, c_type, expected):
        """Test pointer types."""
        assert ctype(c_type) == expected

    def test_void(self):
        """Test that void has no ctypes type."""
        assert ctype("void") is None
