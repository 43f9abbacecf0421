"""Error taxonomy for infixcalc.

Every evaluation failure is a per-call, recoverable condition. The engine
raises these internally and the ``evaluate`` facade turns them into an
``EvaluationResult``; the boundary decides how to render them.
"""

from __future__ import annotations


class EvaluationError(Exception):
    """Base class for a failed evaluation."""

    code = "evaluation"

    def __init__(self, message: str, expression: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.expression = expression


# --- Detected by the tokenizer after the scan ---

class NoOperatorError(EvaluationError):
    code = "no-operator"


class ArityError(EvaluationError):
    """Operator count is not strictly less than operand count."""

    code = "arity"


class UnbalancedParenError(EvaluationError):
    code = "unbalanced-paren"


class NumberFormatError(EvaluationError):
    """A literal run that is not a plain decimal number."""

    code = "number-format"


# --- Detected during reduction ---

class MismatchedParenError(EvaluationError):
    code = "mismatched-paren"


class IncompleteExpressionError(EvaluationError):
    code = "incomplete-expression"


class DivideByZeroError(EvaluationError):
    code = "divide-by-zero"


# --- Wire codec ---

class ProtocolError(Exception):
    """A frame could not be encoded or decoded."""


class ConnectionClosed(ProtocolError):
    """Peer closed the stream cleanly between frames."""
