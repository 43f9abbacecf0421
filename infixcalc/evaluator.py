"""Two-stack precedence evaluator and the public ``evaluate`` entry point.

A restricted shunting-yard: there is no output queue, operators are applied
eagerly against the operand stack as soon as precedence allows.

Both stacks live on a per-call ``_Frame`` and are discarded on return, so
concurrent callers never see each other's state and no locking is needed.

Same-precedence operators pop with ``<=``, which makes every operator
left-associative, '^' included: 2^3^2 == (2^3)^2 == 64.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from infixcalc.errors import (
    DivideByZeroError,
    EvaluationError,
    IncompleteExpressionError,
    MismatchedParenError,
)
from infixcalc.models import PRECEDENCE, EvaluationOptions, EvaluationResult, Token, TokenKind
from infixcalc.normalizer import normalize
from infixcalc.tokenizer import tokenize

_OPEN = "("


def _is_odd_integer(x: float) -> bool:
    return x.is_integer() and int(x) % 2 == 1


def _power(base: float, exponent: float) -> float:
    """IEEE-754 pow: out-of-range results become values, not exceptions."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        negative = base < 0 and _is_odd_integer(exponent)
        return -math.inf if negative else math.inf
    except ValueError:
        if base == 0 and exponent < 0:
            # pow(-0.0, -odd) keeps the sign of zero
            return math.copysign(math.inf, base) if _is_odd_integer(exponent) else math.inf
        return math.nan


@dataclass
class _Frame:
    """Operand and operator stacks for a single evaluation."""

    expression: str
    operands: list[float] = field(default_factory=list)
    operators: list[str] = field(default_factory=list)

    def apply(self) -> None:
        """Pop one operator and its two operands, push the result."""
        op = self.operators.pop()
        if op == _OPEN:
            raise MismatchedParenError("Unmatched '(' in expression", self.expression)
        if len(self.operands) < 2:
            raise IncompleteExpressionError(
                f"Operator '{op}' is missing an operand", self.expression
            )
        a = self.operands.pop()
        b = self.operands.pop()

        if op == "+":
            result = a + b
        elif op == "-":
            result = b - a
        elif op == "*":
            result = a * b
        elif op == "/":
            if a == 0:
                raise DivideByZeroError("Cannot divide by 0", self.expression)
            result = b / a
        else:
            result = _power(b, a)
        self.operands.append(result)

    def close_group(self) -> None:
        while self.operators and self.operators[-1] != _OPEN:
            self.apply()
        if not self.operators:
            raise MismatchedParenError("Unmatched ')' in expression", self.expression)
        self.operators.pop()

    def push_operator(self, op: str) -> None:
        while (
            self.operators
            and self.operators[-1] != _OPEN
            and PRECEDENCE[op] <= PRECEDENCE[self.operators[-1]]
        ):
            self.apply()
        self.operators.append(op)

    def finish(self) -> float:
        while self.operators:
            self.apply()
        if len(self.operands) != 1:
            raise IncompleteExpressionError(
                f"Expected one value after reduction, found {len(self.operands)}",
                self.expression,
            )
        return self.operands[0]


def reduce_tokens(tokens: Sequence[Token], expression: str = "") -> float:
    """Reduce a token sequence to a single value.

    Raises:
        MismatchedParenError: a ')' or '(' without a partner.
        IncompleteExpressionError: an operator lacks operands, or values remain.
        DivideByZeroError: division by an exact zero.
    """
    frame = _Frame(expression)
    for token in tokens:
        if token.kind is TokenKind.NUMBER:
            frame.operands.append(token.value)
        elif token.kind is TokenKind.OPEN_PAREN:
            frame.operators.append(_OPEN)
        elif token.kind is TokenKind.CLOSE_PAREN:
            frame.close_group()
        else:
            frame.push_operator(token.symbol)
    return frame.finish()


def evaluate(
    expression: str,
    options: Optional[Union[EvaluationOptions, dict]] = None,
) -> EvaluationResult:
    """Evaluate an infix expression.

    Never raises for bad input: failures come back as
    ``EvaluationResult(error=...)``.

    Args:
        expression: Raw text, e.g. '3 + 4 * 2' or '[2](3) ** 2'.
        options: EvaluationOptions, or a dict of its fields.
            ``rounding_digits`` rounds the final value only.
    """
    if options is None:
        options = EvaluationOptions()
    elif isinstance(options, dict):
        options = EvaluationOptions(**options)

    try:
        canonical = normalize(expression)
        value = reduce_tokens(tokenize(canonical), canonical)
    except EvaluationError as e:
        if not e.expression:
            e.expression = expression
        return EvaluationResult(expression=expression, error=e)

    if options.rounding_digits is not None:
        value = round(value, options.rounding_digits)
    return EvaluationResult(expression=expression, value=value)
