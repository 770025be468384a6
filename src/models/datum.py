"""
Datum models

Python representations of the values produced by the host datum reader.
Proper lists are plain tuples, strings are str, numbers are int, Fraction
or float, booleans are bool and bytevectors are bytes. The classes below
cover the remaining Scheme types.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class Symbol:
    """
    An interned-by-value Scheme symbol

    Attributes:
        name: Symbol text, after any case folding

    Example:
        >>> Symbol("mode:") == Symbol("mode:")
        True
        >>> str(Symbol("/usr/bin/env"))
        '/usr/bin/env'
    """
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Char:
    """A single Scheme character (#\\a, #\\space, #\\x41)"""
    value: str


@dataclass(frozen=True)
class Vector:
    """A Scheme vector literal #(...)"""
    items: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class DottedList:
    """
    An improper list such as (a b . c)

    Attributes:
        items: Elements before the dot (at least one)
        tail: Datum after the dot
    """
    items: Tuple[Any, ...]
    tail: Any


Datum = Union[Symbol, Char, Vector, DottedList, tuple, str, bool, int, Fraction, float, bytes]
