"""
sharpbang - `#!` line directives for S-expression readers

Reads line directives (shebang lines, editor mode lines, other metadata)
as lists of data while keeping them comments to every other tool.
"""

__version__ = "1.0.0"

from .errors import ReaderError, MalformedDatumError, NestedDirectiveError, CrossesLineBoundaryError
from .source import Source
from .directive import (
    DirectiveAssembler,
    HostGrammar,
    LineDirectiveScanner,
    directive_detect,
    directive_write,
    intraline_skip,
    namedMarker_match,
)
from .datum import DatumReader, datum_write
from .reader import Reader, source_read
from .directives import DirectiveRegistry
from .lexer import SharpbangSchemeLexer, get_lexer, source_highlight
from .log import LOG, state_connectToLogger

__all__ = [
    "ReaderError",
    "MalformedDatumError",
    "NestedDirectiveError",
    "CrossesLineBoundaryError",
    "Source",
    "DirectiveAssembler",
    "HostGrammar",
    "LineDirectiveScanner",
    "directive_detect",
    "directive_write",
    "intraline_skip",
    "namedMarker_match",
    "DatumReader",
    "datum_write",
    "Reader",
    "source_read",
    "DirectiveRegistry",
    "SharpbangSchemeLexer",
    "get_lexer",
    "source_highlight",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
