"""
Pygments lexer for Scheme source with `#!` line directives

Extends the stock Pygments SchemeLexer so that line directives and the
fold-case markers are highlighted as comments rather than as stray `#`
syntax.

Token types:
- Comment.Hashbang: a whole line directive (#! mode: scheme)
- Comment.Preproc: #!fold-case and #!no-fold-case
- everything else: as SchemeLexer
"""

from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import inherit
from pygments.lexers.lisp import SchemeLexer
from pygments.token import Comment


class SharpbangSchemeLexer(SchemeLexer):
    """
    Lexer for Scheme with line directives

    Example:
        #! /usr/bin/env fantastic-scheme
        (display "hi")

    Tokens:
        #! /usr/bin/env fantastic-scheme → Comment.Hashbang
        (display "hi") → as SchemeLexer
    """

    name = 'Scheme (line directives)'
    aliases = ['sharpbang', 'scheme-sharpbang']
    filenames = []

    tokens = {
        # Every expression, at any depth, is lexed in the 'value' state
        'value': [
            # Named markers (must win over the line directive rule)
            (r'#!(?:no-)?fold-case(?=[\s()\[\]";|]|\Z)', Comment.Preproc),

            # Line directive: #! followed by whitespace or end of line
            (r'#!(?=[ \t]|\r?\n|\r|\Z)[^\r\n]*', Comment.Hashbang),

            inherit,
        ],
    }


def get_lexer() -> SharpbangSchemeLexer:
    """
    Get the SharpbangSchemeLexer instance

    Returns:
        SharpbangSchemeLexer instance ready for use with Pygments
    """
    return SharpbangSchemeLexer()


def source_highlight(text: str, title: Optional[str] = None) -> str:
    """
    Render source text as a standalone highlighted HTML document

    Args:
        text: Scheme source
        title: Document title

    Returns:
        Complete HTML page with embedded CSS
    """
    formatter = HtmlFormatter(full=True, linenos='table', title=title or '')
    return highlight(text, get_lexer(), formatter)
