"""
Directive value and directive specification models

Defines the immutable Directive produced by the line directive scanner,
the policies that govern scanning, and the DirectiveSpec metadata used by
the DirectiveRegistry to classify well-known directives.
"""

from collections.abc import Sequence
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .datum import Symbol
from .reader import Position


class WhitespacePolicy(str, Enum):
    """
    Whether `#!` must be followed by whitespace to start a line directive

    STRICT_NO_SPACE: `#!r6rs` is not a line directive
    ALLOW_SPACE: `#!r6rs` and `#! r6rs` yield the same directive
    """
    STRICT_NO_SPACE = "strict_no_space"
    ALLOW_SPACE = "allow_space"


class LineCrossingPolicy(str, Enum):
    """
    What to do when a datum inside a directive ends on a later line

    ERROR: raise CrossesLineBoundaryError at the datum's start
    TRUNCATE: keep the datum as the directive's last element and stop
    """
    ERROR = "error"
    TRUNCATE = "truncate"


@dataclass(frozen=True)
class Directive(Sequence):
    """
    Ordered, immutable list of datums read from one `#!` line

    A distinct type rather than a bare tuple so that callers can tell a
    directive apart from an ordinary list literal.

    Attributes:
        datums: Datums in left-to-right textual order
        position: Position of the `#` of the introducing `#!`

    Example:
        For source "#! mode: scheme":
        Directive(datums=(Symbol("mode:"), Symbol("scheme")), position=Position(1, 0, 0))
    """
    datums: Tuple[Any, ...] = ()
    position: Optional[Position] = None

    def __getitem__(self, index):
        return self.datums[index]

    def __len__(self) -> int:
        return len(self.datums)

    def head(self) -> Optional[Any]:
        """First datum, or None for an empty directive"""
        return self.datums[0] if self.datums else None


class DirectiveCategory(Enum):
    """
    Categories of well-known line directives

    Used by the registry to label directives in reports.
    """
    INTERPRETER = "interpreter"  # #! /usr/bin/env scheme
    EDITOR = "editor"            # #! -*- mode: scheme -*-, #! vim: ...
    GENERIC = "generic"          # anything without a registered spec


@dataclass
class DirectiveSpec:
    """
    Specification for a well-known directive

    Matches on the first datum of a directive, which must be a symbol.

    Attributes:
        name: Spec name used in reports (e.g., "shebang", "vim")
        category: Category for organization
        description: Human-readable description
        handler: Function (directive) -> dict of extracted details
        keys: Exact symbol names that select this spec
        prefix: Symbol-name prefix that selects this spec (e.g., "/")
        examples: Example directive lines
    """
    name: str
    category: DirectiveCategory
    description: str
    handler: Callable[[Directive], Dict[str, Any]]
    keys: List[str] = field(default_factory=list)
    prefix: Optional[str] = None
    examples: List[str] = field(default_factory=list)

    def matches(self, directive: Directive) -> bool:
        """
        Check if this spec handles a directive

        Args:
            directive: Directive to check

        Returns:
            True if the directive's first datum is a symbol named by one of
            this DirectiveSpec's keys or starting with its prefix
        """
        head = directive.head()
        if not isinstance(head, Symbol):
            return False

        if head.name in self.keys:
            return True

        if self.prefix and head.name.startswith(self.prefix):
            return True

        return False


@dataclass(frozen=True)
class DirectiveRecord:
    """
    Entry in an embedding reader's directive log

    Attributes:
        directive: The directive as read
        spec: Matching registry spec, or None if unclassified
    """
    directive: Directive
    spec: Optional[DirectiveSpec] = None

    @property
    def position(self) -> Optional[Position]:
        return self.directive.position
