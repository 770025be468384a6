"""
Models package for sharpbang

Contains data structures and type definitions for the reader and the
command-line pipeline.
"""

from .state import ProgramState, pipeline
from .reader import Position, ScannerState
from .datum import Symbol, Char, Vector, DottedList, Datum
from .directives import (
    Directive,
    DirectiveCategory,
    DirectiveRecord,
    DirectiveSpec,
    LineCrossingPolicy,
    WhitespacePolicy,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "Position",
    "ScannerState",
    "Symbol",
    "Char",
    "Vector",
    "DottedList",
    "Datum",
    "Directive",
    "DirectiveCategory",
    "DirectiveRecord",
    "DirectiveSpec",
    "LineCrossingPolicy",
    "WhitespacePolicy",
]
