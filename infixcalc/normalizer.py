"""Rewrite loosely formatted input into the canonical form the tokenizer scans.

Pure string rewrite, always succeeds.
"""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")

# Applied in order; each pass is a plain non-overlapping left-to-right replace.
_REWRITES: tuple[tuple[str, str], ...] = (
    ("[", "("),
    ("]", ")"),
    ("+-", "-"),
    ("-+", "-"),
    ("--", "+"),
    ("**", "^"),
    ("//", "/"),
    (")(", ")*("),
)


def normalize(text: str) -> str:
    """Return the canonical form of ``text``.

    '2 ** [3]' -> '2^(3)', '-(1+2)' -> '0-(1+2)'
    """
    expr = _WHITESPACE_RE.sub("", text)
    for old, new in _REWRITES:
        expr = expr.replace(old, new)

    # A leading negated group becomes a binary subtraction from zero.
    if expr.startswith("-("):
        expr = "0" + expr
    return expr
