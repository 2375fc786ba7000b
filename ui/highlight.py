"""Lightweight syntax highlighting for solution code blocks.

Code is split into tokens with one regex per language; every token is
HTML-escaped and recognised tokens are wrapped in ``<span class="hl-*">``.
Languages without rules are escaped only.
"""

from __future__ import annotations

import re

from markupsafe import Markup, escape

SPARQL_KEYWORDS = (
    "PREFIX", "BASE", "SELECT", "DISTINCT", "WHERE", "FILTER", "OPTIONAL", "UNION",
    "ORDER", "BY", "LIMIT", "OFFSET", "ASK", "CONSTRUCT", "DESCRIBE", "GRAPH", "BIND", "AS",
)

PYTHON_KEYWORDS = (
    "def", "class", "import", "from", "return", "if", "else", "elif", "for", "while",
    "try", "except", "finally", "with", "as", "in", "not", "and", "or", "is", "None",
    "True", "False", "lambda", "yield", "pass", "raise",
)

_SPARQL = re.compile(
    r"(?P<iri><[^<>\s]*>)"
    r"|(?P<comment>#[^\n]*)"
    r"|(?P<string>\"[^\"\n]*\"|'[^'\n]*')"
    r"|(?P<variable>[?$]\w+)"
    r"|(?P<keyword>\b(?:" + "|".join(SPARQL_KEYWORDS) + r")\b)"
    r"|(?P<prefix>\b[A-Za-z][\w-]*:(?:\w+)?)"
)

_PYTHON = re.compile(
    r"(?P<comment>#[^\n]*)"
    r"|(?P<string>\"[^\"\n]*\"|'[^'\n]*')"
    r"|(?P<keyword>\b(?:" + "|".join(PYTHON_KEYWORDS) + r")\b)"
)

RULES = {
    "sparql": _SPARQL,
    "python": _PYTHON,
}


def highlight(code: str, language: str) -> Markup:
    """Return ``code`` as safe HTML with highlight spans for ``language``."""
    pattern = RULES.get((language or "").lower())
    if pattern is None:
        return Markup(escape(code))

    parts = []
    position = 0
    for match in pattern.finditer(code):
        parts.append(escape(code[position:match.start()]))
        parts.append(Markup('<span class="hl-{0}">{1}</span>').format(match.lastgroup, match.group()))
        position = match.end()
    parts.append(escape(code[position:]))
    return Markup("").join(parts)
