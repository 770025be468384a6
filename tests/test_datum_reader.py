"""
Host datum reader tests

Tests the S-expression grammar the directive scanner delegates to:
atoms, compound data, comments, named markers, errors and the writer.
"""

import math
from fractions import Fraction

import pytest

from sharpbang.config import AppSettings
from sharpbang.lib.datum import DatumReader, datum_write, number_parse
from sharpbang.lib.errors import MalformedDatumError
from sharpbang.lib.source import Source
from sharpbang.models import Char, DottedList, Position, Symbol, Vector


def read_one(text: str, **settings):
    """Read the first datum of text"""
    datum, _ = DatumReader(AppSettings(**settings)).datum_read(Source(text), Position())
    return datum


class TestAtoms:
    """Test numbers, symbols, booleans, characters and strings"""

    @pytest.mark.parametrize("text,expected", [
        ("42", 42),
        ("-7", -7),
        ("+3", 3),
        ("3/4", Fraction(3, 4)),
        ("-1/2", Fraction(-1, 2)),
        ("2.5", 2.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("#xff", 255),
        ("#b101", 5),
        ("#o17", 15),
        ("#d10", 10),
        ("+inf.0", math.inf),
        ("-inf.0", -math.inf),
    ])
    def test_numbers(self, text, expected):
        assert read_one(text) == expected

    def test_nan(self):
        assert math.isnan(read_one("+nan.0"))

    @pytest.mark.parametrize("text", [
        "foo", "mode:", "-*-", ":", "/usr/bin/env", "ft=lisp", "tw=60",
        "+", "-", "...", "1+", "nan", "inf", "a#b",
    ])
    def test_symbols(self, text):
        """Tokens that are not numbers read as symbols"""
        assert read_one(text) == Symbol(text)

    def test_pipe_symbol(self):
        """|...| symbols keep spaces and escapes"""
        assert read_one("|hello world|") == Symbol("hello world")
        assert read_one(r"|a\|b|") == Symbol("a|b")

    @pytest.mark.parametrize("text,expected", [
        ("#t", True), ("#true", True), ("#f", False), ("#false", False),
    ])
    def test_booleans(self, text, expected):
        assert read_one(text) is expected

    @pytest.mark.parametrize("text,expected", [
        ("#\\a", "a"),
        ("#\\A", "A"),
        ("#\\(", "("),
        ("#\\space", " "),
        ("#\\newline", "\n"),
        ("#\\tab", "\t"),
        ("#\\x41", "A"),
        ("#\\x", "x"),
    ])
    def test_characters(self, text, expected):
        assert read_one(text) == Char(expected)

    @pytest.mark.parametrize("text,expected", [
        ('"plain"', "plain"),
        ('"tab\\there"', "tab\there"),
        ('"quote\\"d"', 'quote"d'),
        ('"back\\\\slash"', "back\\slash"),
        ('"hex\\x41;"', "hexA"),
        ('"multi\nline"', "multi\nline"),
        ('"joined \\\n    here"', "joined here"),
    ])
    def test_strings(self, text, expected):
        assert read_one(text) == expected


class TestCompound:
    """Test lists, vectors, bytevectors and abbreviations"""

    def test_list(self):
        assert read_one("(a (b 1) \"c\")") == (Symbol("a"), (Symbol("b"), 1), "c")

    def test_square_brackets(self):
        assert read_one("[a b]") == (Symbol("a"), Symbol("b"))

    def test_empty_list(self):
        assert read_one("()") == ()

    def test_dotted_list(self):
        assert read_one("(a b . c)") == DottedList(items=(Symbol("a"), Symbol("b")), tail=Symbol("c"))

    def test_vector(self):
        assert read_one("#(1 #(2))") == Vector(items=(1, Vector(items=(2,))))

    def test_bytevector(self):
        assert read_one("#u8(0 127 255)") == bytes([0, 127, 255])

    @pytest.mark.parametrize("text,name", [
        ("'x", "quote"),
        ("`x", "quasiquote"),
        (",x", "unquote"),
        (",@x", "unquote-splicing"),
    ])
    def test_abbreviations(self, text, name):
        assert read_one(text) == (Symbol(name), Symbol("x"))

    def test_multiline_list(self):
        """Outside directives data may span lines"""
        assert read_one("(a\n b\n c)") == (Symbol("a"), Symbol("b"), Symbol("c"))


class TestComments:
    """Test comments and markers in the atmosphere"""

    def test_line_comment(self):
        assert read_one("; note\nfoo") == Symbol("foo")

    def test_nested_block_comment(self):
        assert read_one("#| outer #| inner |# still |# foo") == Symbol("foo")

    def test_datum_comment(self):
        assert read_one("#;(skip me) foo") == Symbol("foo")

    def test_comment_inside_list(self):
        assert read_one("(a ; note\n #| x |# b)") == (Symbol("a"), Symbol("b"))

    def test_fold_case_markers(self):
        """#!fold-case and #!no-fold-case toggle symbol folding"""
        reader = DatumReader()
        source = Source("#!fold-case ABC #!no-fold-case DEF")
        first, pos = reader.datum_read(source, Position())
        second, _ = reader.datum_read(source, pos)
        assert first == Symbol("abc")
        assert second == Symbol("DEF")

    def test_fold_case_setting(self):
        """fold_case in settings starts the reader folded"""
        assert read_one("Hello", fold_case=True) == Symbol("hello")
        assert read_one("|Hello|", fold_case=True) == Symbol("Hello")

    def test_directive_in_list_is_handed_off(self):
        """A directive between list elements goes to directive_handle"""
        seen = []
        reader = DatumReader(directive_handle=seen.append)
        datum, _ = reader.datum_read(Source("(a #! note here\n b)"), Position())
        assert datum == (Symbol("a"), Symbol("b"))
        assert seen[0].datums == (Symbol("note"), Symbol("here"))


class TestErrors:
    """Test malformed input"""

    @pytest.mark.parametrize("text,message", [
        ("(a b", "unterminated list"),
        (")", r"unexpected '\)'"),
        ("(a]", r"expected '\)'"),
        ('"abc', "unterminated string"),
        ('"\\q"', "unknown string escape"),
        ('"\\x41"', "hex escape"),
        ("#| never closed", "unterminated block comment"),
        ("#\\bogus", "unknown character name"),
        ("#q", "unknown syntax"),
        ("#xzz", "invalid number"),
        ("#u8(256)", "bytevector"),
        ("#(a . b)", "dotted"),
        ("( . a)", "unexpected '.'"),
        ("(a . )", "missing datum"),
        ("(a . b c)", "dotted tail"),
        ("1/0", "division by zero"),
        ("'", "missing datum"),
        ("", "end of input"),
        ("#!r6rs", "'#!'"),
    ])
    def test_malformed(self, text, message):
        with pytest.raises(MalformedDatumError, match=message):
            read_one(text)

    def test_error_position(self):
        """Errors report where reading stopped"""
        with pytest.raises(MalformedDatumError) as excinfo:
            DatumReader().datum_read(Source("(a\n  ]", name="bad.scm"), Position())
        error = excinfo.value
        assert (error.line, error.column) == (2, 2)
        assert str(error).startswith("bad.scm:2:2:")


class TestWriter:
    """Test external representations"""

    def test_write_compound(self):
        datum = (
            Symbol("a"), "x y", Char(" "), 1.5, Fraction(1, 2), True,
            Vector(items=(1,)), b"\x01", DottedList(items=(Symbol("a"),), tail=Symbol("b")),
        )
        assert datum_write(datum) == '(a "x y" #\\space 1.5 1/2 #t #(1) #u8(1) (a . b))'

    @pytest.mark.parametrize("name,written", [
        ("hello world", "|hello world|"),
        ("42", "|42|"),
        ("", "||"),
        ("#odd", "|#odd|"),
        ("plain", "plain"),
    ])
    def test_write_symbol_pipes(self, name, written):
        assert datum_write(Symbol(name)) == written

    def test_write_string_escapes(self):
        assert datum_write('say "hi"\n') == '"say \\"hi\\"\\n"'

    def test_write_special_floats(self):
        assert datum_write(math.inf) == "+inf.0"
        assert datum_write(-math.inf) == "-inf.0"
        assert datum_write(math.nan) == "+nan.0"

    def test_write_rejects_unknown_types(self):
        with pytest.raises(TypeError):
            datum_write(object())

    def test_number_parse(self):
        assert number_parse("12") == 12
        assert number_parse("ff", 16) == 255
        assert number_parse("tw=60") is None
