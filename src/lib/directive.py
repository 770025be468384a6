"""
Line directive scanning

Recognizes and reads `#!` line directives:

    #! /usr/bin/env fantastic-scheme
    #! -*- mode: scheme -*- vim: set ft=scheme :

A directive is the list of datums on the rest of the `#!` line. The scanner
does not know the datum grammar; it drives an injected HostGrammar for
datums and comments and only enforces the directive's own rules:

- the directive never extends past the line it started on
- a directive may not contain another directive

Positions are threaded through every call as values, so a scan never
mutates shared state and a declined scan consumes nothing.
"""

from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..config import AppSettings, appsettings
from ..models.directives import Directive, LineCrossingPolicy, WhitespacePolicy
from ..models.reader import Position, ScannerState
from .errors import CrossesLineBoundaryError, ReaderError
from .log import LOG
from .source import Source, delimiter_is, intralineWhitespace_is, newline_is

MARKER = "#!"

# `#!` forms that are never line directives, mapped to the case folding
# they switch on
NAMED_MARKERS: Dict[str, bool] = {
    'fold-case': True,
    'no-fold-case': False,
}


class HostGrammar(Protocol):
    """
    What the scanner needs from the embedding reader's grammar

    datum_read: read one datum starting exactly at pos; raise
        MalformedDatumError if none starts there. With in_directive set,
        a directive start anywhere inside the datum raises
        NestedDirectiveError.
    comment_skip: if a comment starts at pos, return the position after
        it (line comments stop before their newline); otherwise None.
    """

    def datum_read(
        self, source: Source, pos: Position, *, in_directive: bool = False
    ) -> Tuple[Any, Position]:
        ...

    def comment_skip(
        self, source: Source, pos: Position, *, in_directive: bool = False
    ) -> Optional[Position]:
        ...


def namedMarker_match(source: Source, pos: Position) -> Optional[Tuple[str, Position]]:
    """
    Match a named `#!` marker

    Args:
        pos: Position immediately after `#!`

    Returns:
        (marker name, position after it) or None
    """
    for name in NAMED_MARKERS:
        if source.startswith(pos, name) and delimiter_is(source.peek(pos, len(name))):
            return name, source.advance(pos, len(name))
    return None


def directive_detect(
    source: Source,
    pos: Position,
    policy: WhitespacePolicy = WhitespacePolicy.STRICT_NO_SPACE,
) -> bool:
    """
    Decide whether the `#!` just before pos starts a line directive

    Named markers are declined under every policy. Otherwise one character
    is examined. Nothing is consumed.

    Args:
        source: Source text
        pos: Position immediately after `#!`
        policy: Whether a non-whitespace character may follow `#!`

    Returns:
        True for a line directive, False if the caller should treat the
        `#!` as some other syntax

    Example:
        "#! foo", "#!\\n" and "#!" at end of input -> True
        "#!r6rs" -> False (True under ALLOW_SPACE)
        "#!fold-case" -> False
    """
    if namedMarker_match(source, pos) is not None:
        return False

    char = source.peek(pos)
    if char == "" or newline_is(char) or intralineWhitespace_is(char):
        return True
    return policy == WhitespacePolicy.ALLOW_SPACE


def intraline_skip(
    grammar: HostGrammar, source: Source, pos: Position, anchor_line: int
) -> Position:
    """
    Skip horizontal whitespace and host comments without leaving a line

    Comment recognition is delegated to the grammar. A comment that itself
    runs onto a later line is consumed whole, and skipping stops right
    after it so the caller sees that the anchor line has ended.

    Returns:
        Position of the first character that is neither whitespace nor a
        comment: a datum start, a newline, end of input, or any position
        past the anchor line
    """
    while True:
        if intralineWhitespace_is(source.peek(pos)):
            pos = source.advance(pos)
            continue

        end = grammar.comment_skip(source, pos, in_directive=True)
        if end is None:
            return pos

        pos = end
        if pos.line != anchor_line:
            return pos


class DirectiveAssembler:
    """
    Accumulates datums for one directive

    Example:
        >>> assembler = DirectiveAssembler(Position())
        >>> assembler.datum_append(Symbol("mode:"))
        >>> assembler.directive_finalize().datums
        (Symbol(name='mode:'),)
    """

    def __init__(self, position: Optional[Position] = None) -> None:
        self.position = position
        self.datums: List[Any] = []
        self.finalized = False

    def datum_append(self, datum: Any) -> None:
        if self.finalized:
            raise RuntimeError("directive already finalized")
        self.datums.append(datum)

    def directive_finalize(self) -> Directive:
        self.finalized = True
        return Directive(datums=tuple(self.datums), position=self.position)


class LineDirectiveScanner:
    """
    State machine that reads one line directive

    States:
        START         record the anchor line, create the assembler
        SKIPPING      skip intraline whitespace/comments, then check the
                      line boundary
        READING_DATUM read exactly one datum through the host grammar
        DONE          consume the line break and return the directive
        ERROR         re-raise; no partial directive escapes

    The boundary is checked after every skip, i.e. before every datum, so
    neither comments nor datums can carry the directive onto the next line
    unnoticed.
    """

    def __init__(self, grammar: HostGrammar, settings: Optional[AppSettings] = None) -> None:
        self.grammar = grammar
        self.settings = settings or appsettings

    def directive_read(
        self, source: Source, pos: Position
    ) -> Optional[Tuple[Directive, Position]]:
        """
        Attempt to read a line directive

        Args:
            source: Source text
            pos: Position immediately after a `#!` consumed by the caller

        Returns:
            (directive, position after it), or None if the `#!` does not
            start a line directive; in that case nothing is consumed

        Raises:
            NestedDirectiveError: directive content starts another directive
            MalformedDatumError: a datum in the directive fails to parse
            CrossesLineBoundaryError: a datum ends on a later line (ERROR policy)
        """
        if not directive_detect(source, pos, self.settings.whitespace_policy):
            LOG(f"'#!' at {pos} is not a line directive", level=3)
            return None
        return self.directive_scan(source, pos)

    def directive_scan(self, source: Source, pos: Position) -> Tuple[Directive, Position]:
        """
        Read a line directive whose start has already been detected

        Args:
            source: Source text
            pos: Position immediately after the `#!`

        Returns:
            (directive, position after the directive's line break)
        """
        marker_pos = Position(line=pos.line, column=pos.column - 2, offset=pos.offset - 2)
        state = ScannerState.START
        assembler = DirectiveAssembler(marker_pos)
        anchor_line = pos.line

        while True:
            if state is ScannerState.START:
                state = self.state_change(state, ScannerState.SKIPPING, pos)

            elif state is ScannerState.SKIPPING:
                pos = intraline_skip(self.grammar, source, pos, anchor_line)
                if self.boundary_reached(source, pos, anchor_line):
                    state = self.state_change(state, ScannerState.DONE, pos)
                else:
                    state = self.state_change(state, ScannerState.READING_DATUM, pos)

            elif state is ScannerState.READING_DATUM:
                try:
                    datum, end = self.grammar.datum_read(source, pos, in_directive=True)
                    if end.line != anchor_line:
                        self.lineCrossing_check(source, pos, end)
                except ReaderError:
                    self.state_change(state, ScannerState.ERROR, pos)
                    raise

                assembler.datum_append(datum)
                LOG(f"directive datum {len(assembler.datums)} read at {pos}", level=3)
                pos = end
                if end.line != anchor_line:
                    state = self.state_change(state, ScannerState.DONE, pos)
                else:
                    state = self.state_change(state, ScannerState.SKIPPING, pos)

            else:
                if pos.line == anchor_line:
                    pos = source.newline_skip(pos)
                return assembler.directive_finalize(), pos

    def boundary_reached(self, source: Source, pos: Position, anchor_line: int) -> bool:
        """Check if the directive ends at pos"""
        if pos.line != anchor_line:
            return True
        if source.eof_at(pos):
            return True
        return newline_is(source.peek(pos))

    def lineCrossing_check(self, source: Source, start: Position, end: Position) -> None:
        """
        Apply the line-crossing policy to a datum spanning start..end

        Raises:
            CrossesLineBoundaryError: under LineCrossingPolicy.ERROR
        """
        if self.settings.line_crossing == LineCrossingPolicy.ERROR:
            raise CrossesLineBoundaryError(
                f"datum in line directive continues onto line {end.line}",
                start,
                source.name,
            )
        LOG(f"datum at {start} crosses onto line {end.line}; truncating directive", level=2)

    def state_change(self, current: ScannerState, target: ScannerState, pos: Position) -> ScannerState:
        LOG(f"scanner: {current.value} -> {target.value} at {pos}", level=3)
        return target


def directive_write(directive: Directive) -> str:
    """
    External representation of a directive as a `#!` line (no line break)

    Example:
        Directive((Symbol("mode:"), Symbol("scheme"))) -> "#! mode: scheme"
    """
    from .datum import datum_write

    return MARKER + "".join(f" {datum_write(datum)}" for datum in directive)
