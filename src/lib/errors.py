"""
Reader exceptions

All reader errors derive from the built-in SyntaxError so that callers
handling ordinary parse failures catch them too. Each carries the Position
where reading stopped.
"""

from typing import Optional

from ..models.reader import Position


class ReaderError(SyntaxError):
    """
    Base class for errors raised while reading source text

    Attributes:
        message: Error description without location
        position: Where the error was detected (None if unknown)
        source_name: File name or other label of the source text
    """

    def __init__(
        self,
        message: str,
        position: Optional[Position] = None,
        source_name: Optional[str] = None,
    ) -> None:
        self.message = message
        self.position = position
        self.source_name = source_name
        super().__init__(self.location_format())

    @property
    def line(self) -> Optional[int]:
        return self.position.line if self.position else None

    @property
    def column(self) -> Optional[int]:
        return self.position.column if self.position else None

    def location_format(self) -> str:
        """
        Build "name:line:column: message", omitting unknown parts.

        Example:
            >>> str(MalformedDatumError("bad", Position(2, 5, 11), "init.scm"))
            'init.scm:2:5: bad'
        """
        location = ""
        if self.source_name:
            location = f"{self.source_name}:"
        if self.position is not None:
            location += f"{self.position.line}:{self.position.column}:"
        if location:
            return f"{location} {self.message}"
        return self.message


class MalformedDatumError(ReaderError):
    """No valid datum starts at the reported position."""


class NestedDirectiveError(ReaderError):
    """A line directive's content would itself start a line directive."""


class CrossesLineBoundaryError(ReaderError):
    """A datum inside a line directive ends on a later line than the directive."""
