"""
Embedding reader for whole source texts

Reads top-level forms one after another, recognizing `#!` line directives
wherever a comment may appear. Every directive is logged (with its
registry classification) on Reader.directives; top-level directives can
also be returned to the caller in textual order.

Example:
    >>> reader = Reader("#! mode: scheme\\n(define x 1)\\n")
    >>> list(reader.forms_read())
    [(Symbol(name='define'), Symbol(name='x'), 1)]
    >>> reader.directives[0].spec.name
    'emacs'
"""

from typing import Any, Iterator, List, Optional

from ..config import AppSettings, appsettings
from ..models.directives import Directive, DirectiveRecord
from ..models.reader import Position
from .datum import DatumReader
from .directive import MARKER, directive_write
from .directives import DirectiveRegistry
from .log import LOG
from .source import Source

_EOF = object()


class Reader:
    """
    Reads top-level data and line directives from a source text

    Attributes:
        source: Source being read
        settings: Reader settings (whitespace and line-crossing policies)
        registry: DirectiveRegistry used to classify directives
        grammar: DatumReader doing the actual datum and comment reading
        position: Position of the next unread character
        directives: Every directive read so far, in textual order
    """

    def __init__(
        self,
        text: str,
        source_name: Optional[str] = None,
        settings: Optional[AppSettings] = None,
        registry: Optional[DirectiveRegistry] = None,
    ) -> None:
        self.source = Source(text, source_name)
        self.settings = settings or appsettings
        self.registry = registry if registry is not None else DirectiveRegistry()
        self.grammar = DatumReader(self.settings, directive_handle=self.directive_record)
        self.position = Position()
        self.directives: List[DirectiveRecord] = []

    def directive_record(self, directive: Directive) -> None:
        """Classify a directive and append it to the directive log"""
        spec = self.registry.spec_find(directive)
        self.directives.append(DirectiveRecord(directive=directive, spec=spec))
        LOG(
            f"Directive at {directive.position}: {directive_write(directive)} "
            f"[{spec.name if spec else 'generic'}]",
            level=2,
        )

    def item_next(self) -> Any:
        """
        Read the next top-level item

        Returns:
            A datum, a Directive for a top-level line directive, or _EOF

        Raises:
            ReaderError: malformed input; self.position stays at the start
                         of the failed item
        """
        source = self.source
        pos = self.position

        while True:
            char = source.peek(pos)
            if char == "":
                self.position = pos
                return _EOF

            if char.isspace():
                pos = source.advance(pos)
                continue

            if source.startswith(pos, MARKER):
                found = self.grammar.scanner.directive_read(source, source.advance(pos, len(MARKER)))
                if found is not None:
                    directive, pos = found
                    self.directive_record(directive)
                    self.position = pos
                    return directive

            end = self.grammar.comment_skip(source, pos)
            if end is not None:
                pos = end
                continue

            datum, pos = self.grammar.datum_read(source, pos)
            self.position = pos
            return datum

    def read(self) -> Any:
        """
        Read the next top-level datum, skipping (but logging) directives

        Raises:
            EOFError: no datum left
            ReaderError: malformed input
        """
        while True:
            item = self.item_next()
            if item is _EOF:
                raise EOFError("end of input")
            if not isinstance(item, Directive):
                return item

    def forms_read(self, include_directives: bool = False) -> Iterator[Any]:
        """
        Iterate over all remaining top-level forms

        Args:
            include_directives: Also yield top-level Directive values, in
                                textual order among the data

        Yields:
            Datums (and Directives if requested)
        """
        while True:
            item = self.item_next()
            if item is _EOF:
                return
            if include_directives or not isinstance(item, Directive):
                yield item


def source_read(text: str, source_name: Optional[str] = None, settings: Optional[AppSettings] = None) -> List[Any]:
    """Read every top-level datum of text"""
    return list(Reader(text, source_name=source_name, settings=settings).forms_read())
