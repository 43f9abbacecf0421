"""Response formatting boundary.

Turns evaluation results into the text sent over the wire or shown to a
user. Rounding for display belongs here, not in the evaluator.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Optional

from infixcalc.errors import EvaluationError
from infixcalc.models import EvaluationResult

# Textual IEEE-754 not-a-number, sent in place of a failed result.
SENTINEL = "NaN"

# Java prints plain decimals only for magnitudes in [1e-3, 1e7).
_PLAIN_MIN = 1e-3
_PLAIN_MAX = 1e7


def format_value(value: float, rounding_digits: Optional[int] = None) -> str:
    """Render a float the way a Java double prints.

    11 -> '11.0', 1e7 -> '1.0E7', 0.0001 -> '1.0E-4', inf -> 'Infinity'
    """
    if math.isnan(value):
        return SENTINEL
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if rounding_digits is not None:
        value = round(value, rounding_digits)

    value = float(value)
    magnitude = abs(value)
    if magnitude == 0 or _PLAIN_MIN <= magnitude < _PLAIN_MAX:
        return repr(value)

    # Shortest round-trip digits, laid out as d.dddE<n>
    shortest = Decimal(repr(magnitude))
    digits = "".join(map(str, shortest.as_tuple().digits)).strip("0")
    mantissa = digits[0] + "." + (digits[1:] or "0")
    sign = "-" if value < 0 else ""
    return f"{sign}{mantissa}E{shortest.adjusted()}"


def format_result(result: EvaluationResult, rounding_digits: Optional[int] = None) -> str:
    """Wire text for a result; the sentinel for a failure."""
    if not result.ok:
        return SENTINEL
    return format_value(result.value, rounding_digits)


def describe_error(error: EvaluationError) -> str:
    """One-line message for display layers."""
    if error.expression:
        return f"{error.message} (in {error.expression!r})"
    return error.message
