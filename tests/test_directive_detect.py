"""
Directive start detection, intraline skipping and assembly tests

Tests the leaf pieces of line directive reading: deciding whether `#!`
starts a directive, skipping whitespace and comments without leaving the
line, and assembling the immutable Directive value.
"""

import pytest

from sharpbang.lib.datum import DatumReader
from sharpbang.lib.directive import (
    DirectiveAssembler,
    directive_detect,
    intraline_skip,
)
from sharpbang.lib.source import Source
from sharpbang.models import Directive, Position, Symbol, WhitespacePolicy


def after_marker(source: Source) -> Position:
    """Position just after a leading '#!'"""
    return source.advance(Position(), 2)


class TestDirectiveDetect:
    """Test the single-character lookahead after '#!'"""

    @pytest.mark.parametrize("text", ["#! foo", "#!\tfoo", "#!\n", "#!\r\n", "#!"])
    def test_directive_starts(self, text):
        """Whitespace, line break or end of input after '#!' starts a directive"""
        source = Source(text)
        assert directive_detect(source, after_marker(source)) is True

    @pytest.mark.parametrize("text", ["#!r6rs", "#!fold-case", "#!/usr/bin/env", "#!#!", "#!("])
    def test_strict_declines_non_whitespace(self, text):
        """Under the strict policy any other character declines"""
        source = Source(text)
        assert directive_detect(source, after_marker(source), WhitespacePolicy.STRICT_NO_SPACE) is False

    @pytest.mark.parametrize("text", ["#!r6rs", "#!/usr/bin/env"])
    def test_allow_space_accepts_non_whitespace(self, text):
        """Under allow_space anything after '#!' starts a directive"""
        source = Source(text)
        assert directive_detect(source, after_marker(source), WhitespacePolicy.ALLOW_SPACE) is True

    @pytest.mark.parametrize("text", ["#!fold-case", "#!no-fold-case\n", "#!fold-case)"])
    def test_allow_space_declines_named_markers(self, text):
        """Named markers are never directives, whatever the policy"""
        source = Source(text)
        assert directive_detect(source, after_marker(source), WhitespacePolicy.ALLOW_SPACE) is False

    def test_detect_consumes_nothing(self):
        """Detection is a pure lookahead: the position is unchanged"""
        source = Source("#!r6rs")
        pos = after_marker(source)
        directive_detect(source, pos)
        assert source.peek(pos) == "r"
        assert pos == Position(line=1, column=2, offset=2)


class TestIntralineSkip:
    """Test the whitespace/comment skipper used inside directives"""

    def setup_method(self):
        self.grammar = DatumReader()

    def test_skips_spaces_and_tabs(self):
        """Horizontal whitespace is skipped up to the next datum"""
        source = Source("#!  \t foo")
        pos = intraline_skip(self.grammar, source, after_marker(source), 1)
        assert source.peek(pos) == "f"

    def test_stops_at_newline(self):
        """The line break is left for the scanner to see"""
        source = Source("#!   \nfoo")
        pos = intraline_skip(self.grammar, source, after_marker(source), 1)
        assert source.peek(pos) == "\n"
        assert pos.line == 1

    def test_line_comment_stops_before_newline(self):
        """A ; comment is skipped but its line break is not"""
        source = Source("#! ; trailing words\nfoo")
        pos = intraline_skip(self.grammar, source, after_marker(source), 1)
        assert source.peek(pos) == "\n"

    def test_block_comment_on_one_line(self):
        """A one-line block comment is skipped like whitespace"""
        source = Source("#! #| note |# foo")
        pos = intraline_skip(self.grammar, source, after_marker(source), 1)
        assert source.peek(pos) == "f"

    def test_block_comment_crossing_line_stops_after_comment(self):
        """A comment running onto the next line ends skipping right after it"""
        source = Source("#! #| one\ntwo |# foo")
        pos = intraline_skip(self.grammar, source, after_marker(source), 1)
        assert pos.line == 2
        assert source.peek(pos) == " "

    def test_stops_at_datum(self):
        """Non-whitespace, non-comment characters stop the skipper at once"""
        source = Source("#!(a)")
        pos = intraline_skip(self.grammar, source, after_marker(source), 1)
        assert pos == after_marker(source)


class TestDirectiveAssembler:
    """Test accumulation and finalization of directive datums"""

    def test_finalize_preserves_order(self):
        """Datums come out in the order they were appended"""
        assembler = DirectiveAssembler(Position())
        assembler.datum_append(Symbol("vim:"))
        assembler.datum_append(Symbol("ft=lisp"))
        directive = assembler.directive_finalize()

        assert isinstance(directive, Directive)
        assert directive.datums == (Symbol("vim:"), Symbol("ft=lisp"))
        assert list(directive) == [Symbol("vim:"), Symbol("ft=lisp")]
        assert directive.position == Position()

    def test_empty_directive(self):
        """Finalizing without datums yields an empty directive"""
        directive = DirectiveAssembler().directive_finalize()
        assert len(directive) == 0
        assert directive.head() is None

    def test_append_after_finalize_rejected(self):
        """A finalized directive cannot grow"""
        assembler = DirectiveAssembler()
        assembler.directive_finalize()
        with pytest.raises(RuntimeError):
            assembler.datum_append(Symbol("late"))

    def test_directive_is_immutable(self):
        """Directive values are frozen"""
        directive = DirectiveAssembler().directive_finalize()
        with pytest.raises(AttributeError):
            directive.datums = (Symbol("x"),)

    def test_directive_is_not_a_tuple(self):
        """Directives are distinguishable from list literals (tuples)"""
        directive = Directive(datums=(Symbol("a"),))
        assert not isinstance(directive, tuple)
        assert directive[0] == Symbol("a")
