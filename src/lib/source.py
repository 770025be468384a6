"""
Source text with position arithmetic

A Source wraps an immutable string. It never tracks a cursor itself:
callers hold a Position and ask the Source to peek at it or to compute the
Position after it. Line counting treats "\\n", "\\r\\n" and a lone "\\r" as
one line break each.
"""

import re
from typing import Optional

from ..models.reader import Position

NEWLINE_CHARS = "\r\n"
LINE_BREAK = re.compile(r"\r\n|\r|\n")
DELIMITERS = '()[]";|'


def newline_is(char: str) -> bool:
    """Check if char starts a line break"""
    return char != "" and char in NEWLINE_CHARS


def intralineWhitespace_is(char: str) -> bool:
    """Check if char is whitespace that does not end a line"""
    return char != "" and char not in NEWLINE_CHARS and char.isspace()


def delimiter_is(char: str) -> bool:
    """Check if char ends a symbol or number token ('' is end of input)"""
    return char == "" or char.isspace() or char in DELIMITERS


class Source:
    """
    Read-only view over source text

    Attributes:
        text: Complete source text
        name: Optional label (usually a file name) used in error messages

    Example:
        >>> src = Source("#!\\nx")
        >>> pos = src.advance(Position(), 3)
        >>> pos
        Position(line=2, column=0, offset=3)
        >>> src.peek(pos)
        'x'
    """

    def __init__(self, text: str, name: Optional[str] = None) -> None:
        self.text = text
        self.name = name

    def __len__(self) -> int:
        return len(self.text)

    def peek(self, pos: Position, ahead: int = 0) -> str:
        """Character at pos (plus ahead), or '' past the end"""
        index = pos.offset + ahead
        if 0 <= index < len(self.text):
            return self.text[index]
        return ""

    def startswith(self, pos: Position, prefix: str) -> bool:
        return self.text.startswith(prefix, pos.offset)

    def eof_at(self, pos: Position) -> bool:
        return pos.offset >= len(self.text)

    def advance(self, pos: Position, count: int = 1) -> Position:
        """
        Position after consuming count characters from pos

        Stops at end of text; never moves past it.
        """
        line, column, offset = pos.line, pos.column, pos.offset
        end = min(offset + count, len(self.text))
        while offset < end:
            char = self.text[offset]
            offset += 1
            if char == "\n" or (char == "\r" and self.peek(Position(offset=offset)) != "\n"):
                line += 1
                column = 0
            else:
                column += 1
        return Position(line=line, column=column, offset=offset)

    def newline_skip(self, pos: Position) -> Position:
        """Consume one line break ("\\n", "\\r\\n" or "\\r") if pos is at one"""
        if self.startswith(pos, "\r\n"):
            return self.advance(pos, 2)
        if newline_is(self.peek(pos)):
            return self.advance(pos)
        return pos

    def line_get(self, line: int) -> str:
        """Text of a 1-based line without its terminator, for diagnostics"""
        lines = LINE_BREAK.split(self.text)
        if 1 <= line <= len(lines):
            return lines[line - 1]
        return ""
