"""Tests for reduction and the evaluate() entry point."""

import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from infixcalc import EvaluationOptions, EvaluationResult, evaluate
from infixcalc.errors import (
    ArityError,
    DivideByZeroError,
    EvaluationError,
    IncompleteExpressionError,
    MismatchedParenError,
    NoOperatorError,
    NumberFormatError,
    UnbalancedParenError,
)
from infixcalc.evaluator import reduce_tokens
from infixcalc.models import Token


def value(expr, **options):
    result = evaluate(expr, EvaluationOptions(**options))
    assert result.ok, result.error
    return result.value


# --- Precedence and associativity ---

def test_precedence_mul_before_add():
    assert value("3 + 4 * 2") == pytest.approx(11.0)


def test_parens_override_precedence():
    assert value("(1+2)*3") == pytest.approx(9.0)


def test_power_is_left_associative():
    """2^3^2 is (2^3)^2 = 64, not 2^(3^2) = 512."""
    assert value("2^3^2") == pytest.approx(64.0)


def test_power_binds_tighter_than_mul():
    assert value("2*3^2") == pytest.approx(18.0)


def test_subtraction_left_to_right():
    assert value("10 - 2 - 3") == pytest.approx(5.0)


def test_division_left_to_right():
    assert value("100 / 10 / 2") == pytest.approx(5.0)


def test_nested_parens():
    assert value("((2 + 3) * (4 - 1))") == pytest.approx(15.0)


# --- Input forms ---

def test_unary_minus_leading():
    assert value("-3+4") == pytest.approx(1.0)


def test_unary_minus_after_operator():
    assert value("3 * -2") == pytest.approx(-6.0)


def test_double_negative():
    assert value("3 - -2") == pytest.approx(5.0)


def test_subtract_from_negative_literal():
    assert value("-3-2") == pytest.approx(-5.0)


def test_negative_exponent():
    assert value("2^-1") == pytest.approx(0.5)


def test_negated_group():
    assert value("-(2+3)*2") == pytest.approx(-10.0)


@pytest.mark.parametrize("expr", ["(2)(3)", "2(3)", "(2)3", "[2][3]"])
def test_implicit_multiplication(expr):
    assert value(expr) == pytest.approx(6.0)


def test_alternate_symbols():
    assert value("2 ** 3 // 4") == pytest.approx(2.0)


def test_decimals():
    assert value("1.5 * 2 + .5") == pytest.approx(3.5)


# --- Failures come back as results ---

def test_divide_by_zero():
    result = evaluate("5/0")
    assert not result.ok
    assert isinstance(result.error, DivideByZeroError)
    assert result.value is None


def test_divide_by_computed_zero():
    assert isinstance(evaluate("5/(2-2)").error, DivideByZeroError)


def test_trailing_operator():
    assert isinstance(evaluate("1+2+").error, (ArityError, IncompleteExpressionError))


def test_unbalanced_parens():
    assert isinstance(evaluate("(1+2").error, UnbalancedParenError)


def test_close_before_open():
    assert isinstance(evaluate("1)+(2").error, MismatchedParenError)


def test_no_operator():
    assert isinstance(evaluate("42").error, NoOperatorError)


def test_bad_number():
    assert isinstance(evaluate("2 + two").error, NumberFormatError)


def test_error_keeps_raw_expression():
    result = evaluate("1 + 2 +")
    assert result.expression == "1 + 2 +"
    assert result.error.expression


def test_unwrap():
    assert evaluate("1+1").unwrap() == 2.0
    with pytest.raises(DivideByZeroError):
        evaluate("1/0").unwrap()


def test_to_dict():
    assert evaluate("1+1").to_dict() == {"expression": "1+1", "ok": True, "value": 2.0}
    d = evaluate("1/0").to_dict()
    assert d["ok"] is False
    assert d["error"]["code"] == "divide-by-zero"


@pytest.mark.parametrize("expr", [
    "", "+", "()", "(((", ")))", "1+", "*1", "1 2", "((1)", "1)(", "x", "#",
    "1/0", "2^", "--", "-", "(-)", "1..2+3", "3+)(", "[]", "1+()",
])
def test_no_exception_escapes(expr):
    result = evaluate(expr)
    assert isinstance(result, EvaluationResult)
    assert result.ok or isinstance(result.error, EvaluationError)


# --- Reduction edge cases ---

def test_reduce_leftover_open_paren():
    tokens = [Token.open_paren(), Token.number(1.0), Token.operator("+"), Token.number(2.0)]
    with pytest.raises(MismatchedParenError):
        reduce_tokens(tokens)


def test_reduce_two_values_no_operator():
    with pytest.raises(IncompleteExpressionError):
        reduce_tokens([Token.number(1.0), Token.number(2.0)])


def test_reduce_missing_operand():
    with pytest.raises(IncompleteExpressionError):
        reduce_tokens([Token.number(1.0), Token.operator("+")])


def test_reduce_close_without_open():
    with pytest.raises(MismatchedParenError):
        reduce_tokens([Token.number(1.0), Token.close_paren()])


# --- Power follows IEEE pow ---

def test_power_overflow_is_infinity():
    assert value("2^1024") == math.inf


def test_power_overflow_negative_odd():
    assert value("(0-2)^1025") == -math.inf


def test_power_negative_base_fractional_exponent_is_nan():
    assert math.isnan(value("(0-8)^.5"))


def test_zero_to_negative_power_is_infinity():
    assert value("0^(0-1)") == math.inf


def test_negative_zero_to_negative_odd_power_is_negative_infinity():
    assert value("-0^(0-1)") == -math.inf


def test_negative_zero_to_negative_even_power_is_infinity():
    assert value("-0^(0-2)") == math.inf


# --- Rounding option ---

def test_rounding_one_digit():
    assert value("10/3", rounding_digits=1) == 3.3


def test_no_rounding_keeps_precision():
    assert value("10/3") == pytest.approx(10 / 3)
    assert value("10/3") != 3.3


def test_rounding_applies_to_final_value_only():
    # Rounding each step would give 3.3 * 3 = 9.9
    assert value("10/3*3", rounding_digits=1) == 10.0


def test_options_as_dict():
    assert evaluate("10/3", {"rounding_digits": 2}).value == 3.33


@pytest.mark.parametrize("bad", [-1, 1.5, True])
def test_invalid_rounding(bad):
    with pytest.raises(ValueError):
        EvaluationOptions(rounding_digits=bad)


# --- Concurrency: no state shared between calls ---

EXPRESSIONS = [
    "3 + 4 * 2", "(1+2)*3", "2^3^2", "-3+4", "(2)(3)", "10/3", "5/0",
    "((1+2)*(3+4))/(5-6)", "1+2+", "(1+2", "2*(3+(4*(5+6)))", "100-99-1",
]


def test_concurrent_calls_match_sequential():
    expected = [evaluate(e).to_dict() for e in EXPRESSIONS]
    work = EXPRESSIONS * 200
    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda e: evaluate(e).to_dict(), work))
    assert results == expected * 200


def test_repeated_calls_are_independent():
    first = evaluate("(1+2)*3").value
    evaluate("(((")
    evaluate("1/0")
    assert evaluate("(1+2)*3").value == first
