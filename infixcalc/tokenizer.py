"""Single-pass scanner from canonical text to a validated token sequence.

Implicit multiplication and unary minus are resolved during the scan by
looking at the tokens already emitted, so no second rewrite pass is needed:

    2(3)   -> 2 * ( 3 )
    (2)3   -> ( 2 ) * 3
    3*-2   -> 3 * -2        (the '-' is folded into the literal)
    -3+4   -> -3 + 4
"""

from __future__ import annotations

import re

from infixcalc.errors import (
    ArityError,
    NoOperatorError,
    NumberFormatError,
    UnbalancedParenError,
)
from infixcalc.models import OPERATORS, Token, TokenKind

_LITERAL_RE = re.compile(r"(?:[0-9]+(?:\.[0-9]+)?|\.[0-9]+)")
_DELIMITERS = frozenset(OPERATORS) | {"(", ")"}


def _parse_literal(run: str, expression: str) -> float:
    if not _LITERAL_RE.fullmatch(run):
        raise NumberFormatError(f"Not a number: {run!r}", expression)
    return float(run)


def _folds_unary_minus(tokens: list[Token]) -> bool:
    """True when the last token is a '-' with no left operand."""
    if not tokens or not tokens[-1].is_operator("-"):
        return False
    if len(tokens) == 1:
        return True
    before = tokens[-2]
    return before.kind is TokenKind.OPERATOR or before.kind is TokenKind.OPEN_PAREN


def tokenize(expr: str) -> list[Token]:
    """Scan a normalized expression into tokens.

    Raises:
        NumberFormatError: a literal run is not a plain decimal number.
        NoOperatorError: the expression contains no operator.
        ArityError: operators are not strictly fewer than operands.
        UnbalancedParenError: '(' and ')' counts differ.
    """
    tokens: list[Token] = []
    num_operators = 0
    num_operands = 0
    num_open = 0
    num_close = 0

    i = 0
    n = len(expr)
    while i < n:
        ch = expr[i]

        if ch in OPERATORS:
            num_operators += 1
            tokens.append(Token.operator(ch))
            i += 1
            continue

        if ch == "(":
            num_open += 1
            if tokens and tokens[-1].kind in (TokenKind.NUMBER, TokenKind.CLOSE_PAREN):
                num_operators += 1
                tokens.append(Token.operator("*"))
            tokens.append(Token.open_paren())
            i += 1
            continue

        if ch == ")":
            num_close += 1
            tokens.append(Token.close_paren())
            i += 1
            continue

        # Literal run: everything up to the next operator or parenthesis.
        start = i
        while i < n and expr[i] not in _DELIMITERS:
            i += 1
        value = _parse_literal(expr[start:i], expr)
        num_operands += 1

        if _folds_unary_minus(tokens):
            num_operators -= 1
            tokens[-1] = Token.number(-value)
            continue

        if tokens and tokens[-1].kind is TokenKind.CLOSE_PAREN:
            num_operators += 1
            tokens.append(Token.operator("*"))
        tokens.append(Token.number(value))

    if num_operators == 0:
        raise NoOperatorError("No arithmetic operators detected", expr)
    if num_operators >= num_operands:
        raise ArityError(
            f"Operator count ({num_operators}) >= operand count ({num_operands})", expr
        )
    if num_open != num_close:
        raise UnbalancedParenError(
            f"Unbalanced expression: {num_open} '(' vs {num_close} ')'", expr
        )
    return tokens
