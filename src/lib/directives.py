"""
Registry of well-known line directives

Classifies a Directive by its first datum and extracts the details a report
needs (interpreter of a shebang line, editor variables of a mode line).
Uses DirectiveSpec for metadata and matching.
"""

from typing import Any, Dict, List, Optional

from ..models.datum import Symbol
from ..models.directives import Directive, DirectiveCategory, DirectiveSpec
from .datum import datum_write

EMACS_DELIMITER = '-*-'
VIM_SET_COMMANDS = ('set', 'se')


def datum_text(datum: Any) -> str:
    """Symbol names as-is, everything else in external representation"""
    if isinstance(datum, Symbol):
        return datum.name
    return datum_write(datum)


class DirectiveRegistry:
    """
    Registry of directive specifications and handlers

    Maps the leading symbol of a directive to a DirectiveSpec whose handler
    extracts structured details from the directive's datums.
    """

    def __init__(self) -> None:
        """Initialize the registry and register all built-in directives"""
        self.specs: Dict[str, DirectiveSpec] = {}
        self.interpreterDirectives_register()
        self.editorDirectives_register()

    def register(self, spec: DirectiveSpec) -> None:
        """Register a directive specification (replacing one of the same name)"""
        self.specs[spec.name] = spec

    def spec_get(self, name: str) -> Optional[DirectiveSpec]:
        """Get a directive specification by spec name"""
        return self.specs.get(name)

    def spec_find(self, directive: Directive) -> Optional[DirectiveSpec]:
        """
        Find the spec that handles a directive

        Exact keys win over prefixes; among equals, the first registered wins.

        Returns:
            Matching DirectiveSpec, or None for an unclassified directive
        """
        head = directive.head()
        if not isinstance(head, Symbol):
            return None

        for spec in self.specs.values():
            if head.name in spec.keys:
                return spec

        for spec in self.specs.values():
            if spec.matches(directive):
                return spec

        return None

    def directives_listByCategory(self, category: DirectiveCategory) -> List[DirectiveSpec]:
        """Get all directive specs in a category"""
        return [spec for spec in self.specs.values() if spec.category == category]

    def directive_describe(self, directive: Directive) -> Dict[str, Any]:
        """
        Classify a directive and extract its details

        Returns:
            Dict with "name" and "category" plus whatever the matching
            handler extracts; unclassified directives are "generic"

        Example:
            #! mode: scheme ->
            {"name": "emacs", "category": "editor", "variables": {"mode": "scheme"}}
        """
        spec = self.spec_find(directive)
        if spec is None:
            return {"name": "generic", "category": DirectiveCategory.GENERIC.value}
        return {"name": spec.name, "category": spec.category.value, **spec.handler(directive)}

    def interpreterDirectives_register(self) -> None:
        """Register shebang-style interpreter lines"""

        def shebang_handler(directive: Directive) -> Dict[str, Any]:
            """Handle #! /path/to/interpreter args... (unwrapping /usr/bin/env)"""
            words = [datum_text(datum) for datum in directive]
            details: Dict[str, Any] = {"interpreter": words[0], "arguments": words[1:]}

            if words[0].endswith('/env') and len(words) > 1:
                details = {"launcher": words[0], "interpreter": words[1], "arguments": words[2:]}

            return details

        self.register(DirectiveSpec(
            name='shebang',
            category=DirectiveCategory.INTERPRETER,
            description='Unix interpreter line: absolute interpreter path and its arguments',
            handler=shebang_handler,
            prefix='/',
            examples=['#! /usr/bin/env fantastic-scheme', '#! /usr/local/bin/scheme --script'],
        ))

    def editorDirectives_register(self) -> None:
        """Register Emacs and Vim mode lines"""

        def emacs_handler(directive: Directive) -> Dict[str, Any]:
            """Handle #! -*- mode: scheme -*- and #! mode: scheme"""
            words = [datum_text(datum) for datum in directive]
            if words[0] == EMACS_DELIMITER:
                words = words[1:]
                if EMACS_DELIMITER in words:
                    words = words[:words.index(EMACS_DELIMITER)]

            variables: Dict[str, str] = {}
            if len(words) == 1 and not words[0].endswith(':'):
                variables['mode'] = words[0]
                return {"variables": variables}

            index = 0
            while index < len(words):
                word = words[index]
                if word.endswith(':') and len(word) > 1 and index + 1 < len(words):
                    variables[word[:-1]] = words[index + 1]
                    index += 2
                else:
                    index += 1
            return {"variables": variables}

        self.register(DirectiveSpec(
            name='emacs',
            category=DirectiveCategory.EDITOR,
            description='Emacs file-local variables line',
            handler=emacs_handler,
            keys=[EMACS_DELIMITER, 'mode:'],
            examples=['#! -*- mode: scheme -*-', '#! mode: scheme'],
        ))

        def vim_handler(directive: Directive) -> Dict[str, Any]:
            """Handle #! vim: ft=lisp tw=60 ... : (with or without 'set')"""
            options: Dict[str, Any] = {}
            for datum in directive[1:]:
                word = datum_text(datum)
                if word in VIM_SET_COMMANDS:
                    continue
                closing = word.endswith(':')
                word = word.rstrip(':')
                if word:
                    name, sep, value = word.partition('=')
                    options[name] = value if sep else True
                if closing:
                    break
            return {"options": options}

        self.register(DirectiveSpec(
            name='vim',
            category=DirectiveCategory.EDITOR,
            description='Vim modeline',
            handler=vim_handler,
            keys=['vim:', 'vi:', 'ex:'],
            examples=['#! vim: ft=lisp tw=60 ts=2 expandtab fileencoding=euc-jp :'],
        ))
