"""Data models for infixcalc.

Token, TokenKind, EvaluationOptions, EvaluationResult: the typed
structures that flow through normalizer -> tokenizer -> evaluator -> boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from infixcalc.errors import EvaluationError

OPERATORS = ("+", "-", "*", "/", "^")

# Higher binds tighter.
PRECEDENCE: dict[str, int] = {
    "^": 3,
    "*": 2,
    "/": 2,
    "+": 1,
    "-": 1,
}


class TokenKind(str, Enum):
    """Token categories produced by the tokenizer."""

    NUMBER = "number"
    OPERATOR = "operator"
    OPEN_PAREN = "open-paren"
    CLOSE_PAREN = "close-paren"


@dataclass(frozen=True)
class Token:
    """A single scanned token.

    ``value`` is set for NUMBER tokens, ``symbol`` for OPERATOR tokens.
    """

    kind: TokenKind
    value: Optional[float] = None
    symbol: Optional[str] = None

    @classmethod
    def number(cls, value: float) -> Token:
        return cls(TokenKind.NUMBER, value=value)

    @classmethod
    def operator(cls, symbol: str) -> Token:
        if symbol not in OPERATORS:
            raise ValueError(f"Unknown operator: {symbol!r}")
        return cls(TokenKind.OPERATOR, symbol=symbol)

    @classmethod
    def open_paren(cls) -> Token:
        return cls(TokenKind.OPEN_PAREN)

    @classmethod
    def close_paren(cls) -> Token:
        return cls(TokenKind.CLOSE_PAREN)

    def is_operator(self, symbol: Optional[str] = None) -> bool:
        if self.kind is not TokenKind.OPERATOR:
            return False
        return symbol is None or self.symbol == symbol

    @property
    def text(self) -> str:
        """Source-like rendering, used by the ``tokens`` command."""
        if self.kind is TokenKind.NUMBER:
            return repr(self.value)
        if self.kind is TokenKind.OPERATOR:
            return self.symbol or ""
        return "(" if self.kind is TokenKind.OPEN_PAREN else ")"


@dataclass(frozen=True)
class EvaluationOptions:
    """Per-call evaluation settings.

    rounding_digits: round the final value to this many decimal places.
        None keeps full floating-point precision.
    """

    rounding_digits: Optional[int] = None

    def __post_init__(self) -> None:
        digits = self.rounding_digits
        if digits is None:
            return
        if isinstance(digits, bool) or not isinstance(digits, int) or digits < 0:
            raise ValueError(f"rounding_digits must be a non-negative int, got {digits!r}")


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one ``evaluate`` call: a value or an error, never both."""

    expression: str
    value: Optional[float] = None
    error: Optional[EvaluationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> float:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        d: dict = {"expression": self.expression, "ok": self.ok}
        if self.error is not None:
            d["error"] = {"code": self.error.code, "message": self.error.message}
        else:
            d["value"] = self.value
        return d
