"""
sharpbang - `#!` line directives for S-expression readers

Shebang lines, copyright headers and editor mode lines that Scheme readers
return as data and every other tool sees as comments.
"""

__version__ = "1.0.0"

from .lib import (
    Reader,
    DatumReader,
    LineDirectiveScanner,
    DirectiveRegistry,
    ReaderError,
    NestedDirectiveError,
    MalformedDatumError,
    CrossesLineBoundaryError,
    LOG,
    state_connectToLogger,
)
from .models import Directive, Position, Symbol

__all__ = [
    "Reader",
    "DatumReader",
    "LineDirectiveScanner",
    "DirectiveRegistry",
    "ReaderError",
    "NestedDirectiveError",
    "MalformedDatumError",
    "CrossesLineBoundaryError",
    "LOG",
    "state_connectToLogger",
    "Directive",
    "Position",
    "Symbol",
    "__version__",
]
