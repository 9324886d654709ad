"""Tests for numeric evaluation of expression trees."""

import math

import pytest

from aljabar_pkg.evaluator import evaluate_expression
from aljabar_pkg.parser import parse_expression
from aljabar_pkg.types import EvaluationError


def evaluate(text, **values):
    return evaluate_expression(parse_expression(text), values)


class TestEvaluate:
    def test_arithmetic(self):
        assert evaluate("2 * x + 1", x=3) == 7.0
        assert evaluate("2 ** 3 - 10 / 4") == 5.5
        assert evaluate("-x", x=2) == -2.0

    def test_constants(self):
        assert evaluate("pi") == math.pi
        assert evaluate("e") == math.e
        assert evaluate("e", e=2) == 2.0

    def test_functions(self):
        assert evaluate("sqrt(16)") == 4.0
        assert evaluate("abs(-3)") == 3.0
        assert evaluate("ln(exp(2))") == pytest.approx(2.0)
        assert evaluate("log(1000)") == pytest.approx(3.0)


class TestEvaluateErrors:
    @pytest.mark.parametrize(
        "text,code",
        [
            ("x", "UNKNOWN_IDENTIFIER"),
            ("1 / 0", "DIVISION_BY_ZERO"),
            ("0 ** -1", "DIVISION_BY_ZERO"),
            ("(-8) ** 0.5", "NOT_REAL"),
            ("ln(0)", "DOMAIN_ERROR"),
            ("sqrt(-1)", "DOMAIN_ERROR"),
            ("foo(1)", "UNKNOWN_FUNCTION"),
            ("10 ** 400", "OVERFLOW"),
            ("exp(1000)", "OVERFLOW"),
        ],
    )
    def test_error_codes(self, text, code):
        with pytest.raises(EvaluationError) as exc_info:
            evaluate(text)
        assert exc_info.value.code == code
