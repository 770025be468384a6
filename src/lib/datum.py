"""
Host datum reader for R7RS-flavoured S-expressions

DatumReader is the grammar the line directive scanner delegates to. It
reads one datum at a time from a Source at an explicit Position and
reports where the datum ended:

    >>> reader = DatumReader()
    >>> reader.datum_read(Source("(a . b) c"), Position())
    (DottedList(items=(Symbol(name='a'),), tail=Symbol(name='b')), Position(line=1, column=7, offset=7))

Supported syntax:
- lists ( ) and [ ], dotted tails, vectors #( ), bytevectors #u8( )
- strings with \\a \\b \\t \\n \\r \\" \\\\ \\| \\x<hex>; and line continuations
- characters #\\a, #\\space, #\\x41; booleans #t #f #true #false
- integers, decimals, ratios, +inf.0/-inf.0/+nan.0, radix prefixes #x #b #o #d
- symbols, including |pipe quoted| symbols
- abbreviations ' ` , ,@
- comments: ; line, #| nested block |#, #; datum
- named markers #!fold-case and #!no-fold-case
- `#!` line directives wherever a comment may appear
"""

import math
import re
from fractions import Fraction
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import AppSettings, appsettings
from ..models.datum import Char, DottedList, Symbol, Vector
from ..models.directives import Directive
from ..models.reader import Position
from .directive import (
    MARKER,
    NAMED_MARKERS,
    LineDirectiveScanner,
    directive_detect,
    intraline_skip,
    namedMarker_match,
)
from .errors import MalformedDatumError, NestedDirectiveError
from .log import LOG
from .source import Source, delimiter_is, intralineWhitespace_is, newline_is

CHAR_NAMES: Dict[str, str] = {
    'alarm': '\a',
    'backspace': '\b',
    'delete': '\x7f',
    'escape': '\x1b',
    'newline': '\n',
    'null': '\x00',
    'return': '\r',
    'space': ' ',
    'tab': '\t',
}

STRING_ESCAPES: Dict[str, str] = {
    'a': '\a',
    'b': '\b',
    't': '\t',
    'n': '\n',
    'r': '\r',
    '"': '"',
    '\\': '\\',
    '|': '|',
}

ABBREVIATIONS: Dict[str, str] = {
    ",@": "unquote-splicing",
    "'": "quote",
    "`": "quasiquote",
    ",": "unquote",
}

CLOSERS: Dict[str, str] = {'(': ')', '[': ']'}

RADIXES: Dict[str, int] = {'x': 16, 'b': 2, 'o': 8, 'd': 10}

SPECIAL_FLOATS: Dict[str, float] = {
    '+inf.0': math.inf,
    '-inf.0': -math.inf,
    '+nan.0': math.nan,
    '-nan.0': math.nan,
}

integer_literal = re.compile(r"[+-]?\d+")
ratio_literal = re.compile(r"([+-]?\d+)/(\d+)")
decimal_literal = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
radix_digits = re.compile(r"[+-]?[0-9a-fA-F]+")

DirectiveHandler = Callable[[Directive], None]


def number_parse(token: str, radix: int = 10) -> Optional[Any]:
    """
    Parse a numeric token

    Args:
        token: Token text without any radix prefix
        radix: 2, 8, 10 or 16

    Returns:
        int, Fraction or float, or None if the token is not a number

    Raises:
        ZeroDivisionError: for a ratio with a zero denominator
    """
    if radix != 10:
        if radix_digits.fullmatch(token):
            try:
                return int(token, radix)
            except ValueError:
                return None
        return None

    if token in SPECIAL_FLOATS:
        return SPECIAL_FLOATS[token]
    if integer_literal.fullmatch(token):
        return int(token)
    ratio = ratio_literal.fullmatch(token)
    if ratio:
        return Fraction(int(ratio.group(1)), int(ratio.group(2)))
    if decimal_literal.fullmatch(token):
        return float(token)
    return None


class DatumReader:
    """
    Reads standard data values and skips comments

    Satisfies the HostGrammar protocol used by LineDirectiveScanner, and
    hands any line directive met in comment position (at top level or
    between list elements) to directive_handle.

    Attributes:
        settings: Active reader settings
        fold_case: Current case-folding mode, toggled by #!fold-case and
                   #!no-fold-case
        directive_handle: Callback receiving directives read in comment
                          position; None discards them
        scanner: LineDirectiveScanner bound to this grammar
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        directive_handle: Optional[DirectiveHandler] = None,
    ) -> None:
        self.settings = settings or appsettings
        self.fold_case = self.settings.fold_case
        self.directive_handle = directive_handle
        self.scanner = LineDirectiveScanner(self, self.settings)

    def error(self, message: str, source: Source, pos: Position) -> MalformedDatumError:
        return MalformedDatumError(message, pos, source.name)

    def name_fold(self, name: str) -> str:
        return name.casefold() if self.fold_case else name

    # ------------------------------------------------------------------
    # Atmosphere: whitespace, comments, markers, directives
    # ------------------------------------------------------------------

    def directiveStart_at(self, source: Source, pos: Position) -> bool:
        """Check if a line directive (not a named marker) starts at pos"""
        if not source.startswith(pos, MARKER):
            return False
        return directive_detect(source, source.advance(pos, len(MARKER)), self.settings.whitespace_policy)

    def comment_skip(
        self, source: Source, pos: Position, *, in_directive: bool = False
    ) -> Optional[Position]:
        """
        Skip one comment starting at pos

        Comments are ; line comments (stopping before the line break),
        #| |# block comments, #; datum comments and the named markers.
        Outside a directive a line directive also counts: it is scanned
        and handed to directive_handle.

        Inside a directive the named markers leave fold_case alone, and a
        #; with nothing left on its line comments out nothing: the skip
        ends at the line break.

        Returns:
            Position after the comment, or None if no comment starts at pos
        """
        char = source.peek(pos)
        if char == ';':
            while not source.eof_at(pos) and not newline_is(source.peek(pos)):
                pos = source.advance(pos)
            return pos

        if char != '#':
            return None

        following = source.peek(pos, 1)
        if following == '|':
            return self.blockComment_skip(source, pos)

        if following == ';':
            start = source.advance(pos, 2)
            if in_directive:
                start = intraline_skip(self, source, start, pos.line)
                if start.line != pos.line or source.eof_at(start) or newline_is(source.peek(start)):
                    return start
            else:
                start = self.atmosphere_skip(source, start)
            _, end = self.datum_read(source, start, in_directive=in_directive)
            return end

        if following == '!':
            after = source.advance(pos, 2)
            marker = namedMarker_match(source, after)
            if marker is not None:
                name, end = marker
                if not in_directive:
                    self.fold_case = NAMED_MARKERS[name]
                LOG(f"#!{name} at {pos}", level=3)
                return end
            if not in_directive and directive_detect(source, after, self.settings.whitespace_policy):
                directive, end = self.scanner.directive_scan(source, after)
                if self.directive_handle is not None:
                    self.directive_handle(directive)
                return end

        return None

    def blockComment_skip(self, source: Source, pos: Position) -> Position:
        """Skip a possibly nested #| ... |# comment starting at pos"""
        start = pos
        depth = 0
        while True:
            if source.startswith(pos, '#|'):
                depth += 1
                pos = source.advance(pos, 2)
            elif source.startswith(pos, '|#'):
                depth -= 1
                pos = source.advance(pos, 2)
                if depth == 0:
                    return pos
            elif source.eof_at(pos):
                raise self.error("unterminated block comment", source, start)
            else:
                pos = source.advance(pos)

    def atmosphere_skip(
        self, source: Source, pos: Position, *, in_directive: bool = False
    ) -> Position:
        """Skip all whitespace (line breaks included) and comments"""
        while True:
            char = source.peek(pos)
            if char != "" and char.isspace():
                pos = source.advance(pos)
                continue
            end = self.comment_skip(source, pos, in_directive=in_directive)
            if end is None:
                return pos
            pos = end

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def datum_read(
        self, source: Source, pos: Position, *, in_directive: bool = False
    ) -> Tuple[Any, Position]:
        """
        Read one datum

        Outside a directive, leading whitespace and comments are skipped
        first. Inside a directive, pos must already be at the datum: the
        caller owns the line boundary.

        Args:
            source: Source text
            pos: Where to start reading
            in_directive: Reading on behalf of a line directive

        Returns:
            (datum, position just after it)

        Raises:
            MalformedDatumError: no valid datum starts here
            NestedDirectiveError: in_directive and a line directive starts
                                  inside the datum
        """
        if not in_directive:
            pos = self.atmosphere_skip(source, pos)

        char = source.peek(pos)
        if char == "":
            raise self.error("unexpected end of input", source, pos)
        if char in CLOSERS:
            return self.list_read(source, pos, in_directive)
        if char in ')]':
            raise self.error(f"unexpected '{char}'", source, pos)
        if char == '"':
            return self.string_read(source, pos)
        if char == '|':
            return self.pipeSymbol_read(source, pos)
        if char in "'`,":
            return self.abbreviation_read(source, pos, in_directive)
        if char == '#':
            return self.hash_read(source, pos, in_directive)
        return self.atom_read(source, pos)

    def list_read(self, source: Source, pos: Position, in_directive: bool) -> Tuple[Any, Position]:
        """Read a list or dotted list; pos is at the opening bracket"""
        start = pos
        closer = CLOSERS[source.peek(pos)]
        pos = source.advance(pos)
        items: List[Any] = []
        tail: Any = None
        dotted = False

        while True:
            pos = self.atmosphere_skip(source, pos, in_directive=in_directive)
            char = source.peek(pos)
            if char == "":
                raise self.error("unterminated list", source, start)

            if char in ')]':
                if char != closer:
                    raise self.error(f"expected '{closer}' to close list", source, pos)
                pos = source.advance(pos)
                if dotted:
                    return DottedList(items=tuple(items), tail=tail), pos
                return tuple(items), pos

            if dotted:
                raise self.error("expected end of list after dotted tail", source, pos)

            if char == '.' and delimiter_is(source.peek(pos, 1)):
                if not items:
                    raise self.error("unexpected '.'", source, pos)
                pos = self.atmosphere_skip(source, source.advance(pos), in_directive=in_directive)
                if source.eof_at(pos) or source.peek(pos) in ')]':
                    raise self.error("missing datum after '.'", source, pos)
                tail, pos = self.datum_read(source, pos, in_directive=in_directive)
                dotted = True
                continue

            datum, pos = self.datum_read(source, pos, in_directive=in_directive)
            items.append(datum)

    def string_read(self, source: Source, pos: Position) -> Tuple[str, Position]:
        """Read a string literal; pos is at the opening quote"""
        start = pos
        pos = source.advance(pos)
        chars: List[str] = []

        while True:
            char = source.peek(pos)
            if char == "":
                raise self.error("unterminated string", source, start)
            if char == '"':
                return "".join(chars), source.advance(pos)
            if char != '\\':
                chars.append(char)
                pos = source.advance(pos)
                continue

            escape = source.peek(pos, 1)
            if escape in STRING_ESCAPES:
                chars.append(STRING_ESCAPES[escape])
                pos = source.advance(pos, 2)
            elif escape == 'x':
                value, pos = self.hexScalar_read(source, source.advance(pos, 2), pos)
                chars.append(value)
            elif intralineWhitespace_is(escape) or newline_is(escape):
                pos = self.lineContinuation_skip(source, source.advance(pos), pos)
            else:
                raise self.error(f"unknown string escape '\\{escape}'", source, pos)

    def lineContinuation_skip(self, source: Source, pos: Position, start: Position) -> Position:
        """Skip `<ws>* newline <ws>*` after a backslash inside a string"""
        while intralineWhitespace_is(source.peek(pos)):
            pos = source.advance(pos)
        if not newline_is(source.peek(pos)):
            raise self.error("backslash in string must precede a line break", source, start)
        pos = source.newline_skip(pos)
        while intralineWhitespace_is(source.peek(pos)):
            pos = source.advance(pos)
        return pos

    def hexScalar_read(self, source: Source, pos: Position, start: Position) -> Tuple[str, Position]:
        """Read `<hex digits>;` of a \\x escape; pos is after the 'x'"""
        digits: List[str] = []
        while source.peek(pos) not in ('', ';') and not delimiter_is(source.peek(pos)):
            digits.append(source.peek(pos))
            pos = source.advance(pos)
        if source.peek(pos) != ';':
            raise self.error("hex escape must end with ';'", source, start)
        try:
            return chr(int("".join(digits), 16)), source.advance(pos)
        except ValueError:
            raise self.error(f"invalid hex escape '{''.join(digits)}'", source, start) from None

    def pipeSymbol_read(self, source: Source, pos: Position) -> Tuple[Symbol, Position]:
        """Read a |pipe quoted| symbol; its name is never case folded"""
        start = pos
        pos = source.advance(pos)
        chars: List[str] = []

        while True:
            char = source.peek(pos)
            if char == "":
                raise self.error("unterminated |symbol|", source, start)
            if char == '|':
                return Symbol("".join(chars)), source.advance(pos)
            if char != '\\':
                chars.append(char)
                pos = source.advance(pos)
                continue

            escape = source.peek(pos, 1)
            if escape in STRING_ESCAPES:
                chars.append(STRING_ESCAPES[escape])
                pos = source.advance(pos, 2)
            elif escape == 'x':
                value, pos = self.hexScalar_read(source, source.advance(pos, 2), pos)
                chars.append(value)
            else:
                raise self.error(f"unknown symbol escape '\\{escape}'", source, pos)

    def abbreviation_read(self, source: Source, pos: Position, in_directive: bool) -> Tuple[tuple, Position]:
        """Read 'x, `x, ,x or ,@x as a two-element list"""
        start = pos
        prefix = ',@' if source.startswith(pos, ',@') else source.peek(pos)
        pos = self.atmosphere_skip(source, source.advance(pos, len(prefix)), in_directive=in_directive)
        if source.eof_at(pos) or source.peek(pos) in ')]':
            raise self.error(f"missing datum after '{prefix}'", source, start)
        datum, pos = self.datum_read(source, pos, in_directive=in_directive)
        return (Symbol(ABBREVIATIONS[prefix]), datum), pos

    def hash_read(self, source: Source, pos: Position, in_directive: bool) -> Tuple[Any, Position]:
        """Read a datum introduced by '#'"""
        following = source.peek(pos, 1)

        if following == '(':
            items, end = self.list_read(source, source.advance(pos), in_directive)
            if isinstance(items, DottedList):
                raise self.error("vector literal cannot be dotted", source, pos)
            return Vector(items=items), end

        if source.startswith(pos, '#u8('):
            items, end = self.list_read(source, source.advance(pos, 3), in_directive)
            if isinstance(items, DottedList) or not all(
                isinstance(item, int) and not isinstance(item, bool) and 0 <= item <= 255
                for item in items
            ):
                raise self.error("bytevector elements must be integers 0-255", source, pos)
            return bytes(items), end

        if following == '\\':
            return self.char_read(source, pos)

        if following == '!':
            if in_directive and self.directiveStart_at(source, pos):
                raise NestedDirectiveError("line directive inside a line directive", pos, source.name)
            raise self.error("unrecognized '#!' syntax", source, pos)

        token, end = self.token_read(source, source.advance(pos))
        if token in ('t', 'true'):
            return True, end
        if token in ('f', 'false'):
            return False, end
        if len(token) > 1 and token[0].lower() in RADIXES:
            value = number_parse(token[1:], RADIXES[token[0].lower()])
            if value is not None:
                return value, end
            raise self.error(f"invalid number '#{token}'", source, pos)
        raise self.error(f"unknown syntax '#{token}'", source, pos)

    def char_read(self, source: Source, pos: Position) -> Tuple[Char, Position]:
        """Read #\\c, #\\name or #\\x<hex>; pos is at '#'"""
        first = source.peek(pos, 2)
        if first == "":
            raise self.error("unexpected end of input in character", source, pos)
        rest, end = self.token_read(source, source.advance(pos, 3))
        name = first + rest
        if len(name) == 1:
            return Char(name), end

        folded = self.name_fold(name)
        if folded in CHAR_NAMES:
            return Char(CHAR_NAMES[folded]), end
        if folded[0] == 'x':
            try:
                return Char(chr(int(folded[1:], 16))), end
            except ValueError:
                pass
        raise self.error(f"unknown character name '{name}'", source, pos)

    def token_read(self, source: Source, pos: Position) -> Tuple[str, Position]:
        """Read characters up to the next delimiter"""
        chars: List[str] = []
        while not delimiter_is(source.peek(pos)):
            chars.append(source.peek(pos))
            pos = source.advance(pos)
        return "".join(chars), pos

    def atom_read(self, source: Source, pos: Position) -> Tuple[Any, Position]:
        """Read a number or symbol"""
        token, end = self.token_read(source, pos)
        if token == '':
            raise self.error(f"unexpected character {source.peek(pos)!r}", source, pos)
        if token == '.':
            raise self.error("unexpected '.'", source, pos)
        try:
            value = number_parse(token)
        except ZeroDivisionError:
            raise self.error(f"division by zero in '{token}'", source, pos) from None
        if value is not None:
            return value, end
        return Symbol(self.name_fold(token)), end


# ----------------------------------------------------------------------
# Writer
# ----------------------------------------------------------------------

CHAR_NAMES_REVERSE: Dict[str, str] = {value: name for name, value in CHAR_NAMES.items()}
STRING_ESCAPES_REVERSE: Dict[str, str] = {
    '\\': '\\\\', '"': '\\"', '\n': '\\n', '\t': '\\t', '\r': '\\r', '\a': '\\a', '\b': '\\b',
}


def symbol_needsPipes(name: str) -> bool:
    """Check whether a symbol name must be written as |name|"""
    if name in ('', '.'):
        return True
    if any(delimiter_is(char) for char in name):
        return True
    if name[0] in "#'`,":
        return True
    try:
        return number_parse(name) is not None
    except ZeroDivisionError:
        return True


def text_escape(text: str, quote: str) -> str:
    escaped = []
    for char in text:
        if char in STRING_ESCAPES_REVERSE:
            escaped.append(STRING_ESCAPES_REVERSE[char])
        elif char == quote:
            escaped.append('\\' + quote)
        elif not char.isprintable():
            escaped.append(f"\\x{ord(char):x};")
        else:
            escaped.append(char)
    return "".join(escaped)


def datum_write(datum: Any) -> str:
    """
    External representation of a datum, readable by DatumReader

    Example:
        >>> datum_write((Symbol("vim:"), Symbol("set"), "a b", 60))
        '(vim: set "a b" 60)'
    """
    if isinstance(datum, bool):
        return '#t' if datum else '#f'
    if isinstance(datum, Symbol):
        if symbol_needsPipes(datum.name):
            return f"|{text_escape(datum.name, '|')}|"
        return datum.name
    if isinstance(datum, str):
        return f'"{text_escape(datum, chr(34))}"'
    if isinstance(datum, Char):
        if datum.value in CHAR_NAMES_REVERSE:
            return f"#\\{CHAR_NAMES_REVERSE[datum.value]}"
        if datum.value.isprintable() and not datum.value.isspace():
            return f"#\\{datum.value}"
        return f"#\\x{ord(datum.value):x}"
    if isinstance(datum, int):
        return str(datum)
    if isinstance(datum, Fraction):
        return f"{datum.numerator}/{datum.denominator}"
    if isinstance(datum, float):
        if math.isnan(datum):
            return '+nan.0'
        if math.isinf(datum):
            return '+inf.0' if datum > 0 else '-inf.0'
        return repr(datum)
    if isinstance(datum, tuple):
        return "(" + " ".join(datum_write(item) for item in datum) + ")"
    if isinstance(datum, DottedList):
        items = " ".join(datum_write(item) for item in datum.items)
        return f"({items} . {datum_write(datum.tail)})"
    if isinstance(datum, Vector):
        return "#(" + " ".join(datum_write(item) for item in datum.items) + ")"
    if isinstance(datum, bytes):
        return "#u8(" + " ".join(str(byte) for byte in datum) + ")"
    raise TypeError(f"cannot write {type(datum).__name__} as a datum")
