"""
Reader-specific data models

Cursor positions and scanner states shared by the host reader and the
line directive scanner.
"""

from enum import Enum
from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """
    Immutable cursor over a source text

    Every read operation receives a Position and returns a new one; nothing
    in the reader keeps a cursor of its own.

    Attributes:
        line: 1-based physical line number
        column: 0-based column within the line
        offset: 0-based character index into the source text

    Example:
        For source "#! foo\\nbar" the 'b' of "bar" sits at
        Position(line=2, column=0, offset=7)
    """
    line: int = 1
    column: int = 0
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class ScannerState(Enum):
    """
    States of the line directive scanner

    START -> SKIPPING -> (READING_DATUM <-> SKIPPING) -> DONE, with ERROR
    reachable from READING_DATUM.
    """
    START = "start"
    SKIPPING = "skipping"
    READING_DATUM = "reading_datum"
    DONE = "done"
    ERROR = "error"
