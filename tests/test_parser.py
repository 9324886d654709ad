"""Unit tests for parser module."""

import unittest

from aljabar_pkg.config import MAX_INPUT_LENGTH
from aljabar_pkg.expression import (
    BinaryExpression,
    CallExpression,
    Equation,
    Identifier,
    Literal,
    UnaryExpression,
)
from aljabar_pkg.parser import (
    format_number,
    is_balanced,
    math_style_expression_to_expression,
    parse_equation,
    parse_expression,
    preprocess,
    print_equation,
    print_expression,
    print_math_style_expression,
)
from aljabar_pkg.types import ParseError, ValidationError

x = Identifier("x")


class TestPreprocess(unittest.TestCase):
    """Test preprocessing functions."""

    def test_exponent_conversion(self):
        self.assertEqual(preprocess("2^3"), "2**3")
        self.assertEqual(preprocess("x^2"), "x**2")

    def test_unicode_operators(self):
        self.assertEqual(preprocess("a × b − c ÷ d"), "a * b - c / d")

    def test_forbidden_tokens(self):
        for text in ["__import__('os')", "import sys", "lambda: 1", "a; b"]:
            with self.assertRaises(ValidationError) as ctx:
                preprocess(text)
            self.assertEqual(ctx.exception.code, "FORBIDDEN_TOKEN")

    def test_input_length_limit(self):
        with self.assertRaises(ValidationError) as ctx:
            preprocess("x" * (MAX_INPUT_LENGTH + 1))
        self.assertEqual(ctx.exception.code, "TOO_LONG")

    def test_empty_input(self):
        for text in ["", "   ", None]:
            with self.assertRaises(ValidationError) as ctx:
                preprocess(text)
            self.assertEqual(ctx.exception.code, "EMPTY_INPUT")

    def test_parentheses_balancing(self):
        self.assertEqual(is_balanced("(1+2)"), (True, None))
        self.assertEqual(is_balanced("(1+2"), (False, 0))
        self.assertEqual(is_balanced("1+2)"), (False, 3))
        self.assertEqual(is_balanced("(]"), (False, 1))
        with self.assertRaises(ValidationError) as ctx:
            preprocess("(x + 1")
        self.assertEqual(ctx.exception.code, "UNBALANCED_PARENS")


class TestParseExpression(unittest.TestCase):
    """Test building Expression trees."""

    def test_precedence(self):
        expected = BinaryExpression("+", Literal(1), BinaryExpression("*", Literal(2), x))
        self.assertEqual(parse_expression("1 + 2 * x"), expected)

    def test_left_association(self):
        a, b, c = Identifier("a"), Identifier("b"), Identifier("c")
        self.assertEqual(
            parse_expression("a - b - c"),
            BinaryExpression("-", BinaryExpression("-", a, b), c),
        )

    def test_caret_power(self):
        self.assertEqual(parse_expression("x^2"), BinaryExpression("**", x, Literal(2)))

    def test_unary(self):
        self.assertEqual(parse_expression("-x"), UnaryExpression("-", x))
        self.assertEqual(parse_expression("+x"), x)

    def test_call(self):
        self.assertEqual(parse_expression("sin(x)"), CallExpression("sin", (x,)))
        self.assertEqual(parse_expression("f(x)"), CallExpression("f", (x,)))

    def test_float_literal(self):
        self.assertEqual(parse_expression("0.5"), Literal(0.5))

    def test_syntax_error(self):
        with self.assertRaises(ParseError) as ctx:
            parse_expression("x +")
        self.assertEqual(ctx.exception.code, "SYNTAX_ERROR")

    def test_unsupported_syntax(self):
        for text in ["x < 1", "a[1]", "x.real", "x % 2", "True", "'a'", "x // 2"]:
            with self.subTest(text=text):
                with self.assertRaises(ParseError) as ctx:
                    parse_expression(text)
                self.assertEqual(ctx.exception.code, "UNSUPPORTED_SYNTAX")

    def test_equals_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            parse_expression("x = 1")
        self.assertEqual(ctx.exception.code, "INVALID_FORMAT")

    def test_depth_limit(self):
        with self.assertRaises(ValidationError) as ctx:
            parse_expression("-" * 150 + "x")
        self.assertEqual(ctx.exception.code, "TOO_DEEP")


class TestParseEquation(unittest.TestCase):
    def test_sides(self):
        eq = parse_equation("x + 1 = 2")
        self.assertEqual(eq, Equation(BinaryExpression("+", x, Literal(1)), Literal(2)))

    def test_invalid(self):
        for text in ["x + 1", "x = 1 = 2", "= 2", "x ="]:
            with self.subTest(text=text):
                with self.assertRaises(ValidationError) as ctx:
                    parse_equation(text)
                self.assertEqual(ctx.exception.code, "INVALID_FORMAT")


class TestPrintExpression(unittest.TestCase):
    """Test printing keeps association visible."""

    def test_round_trip_forms(self):
        cases = [
            "(a + b) + c",
            "a + b * c",
            "a * (b + c)",
            "a - (b - c)",
            "2 ** (3 ** 2)",
            "-(a + b)",
            "sin(x) * 2",
        ]
        for text in cases:
            with self.subTest(text=text):
                self.assertEqual(print_expression(parse_expression(text)), text)

    def test_negative_base(self):
        self.assertEqual(print_expression(parse_expression("(-2)**2")), "(-2) ** 2")
        self.assertEqual(
            print_expression(BinaryExpression("**", Literal(-2), Literal(2))), "(-2) ** 2"
        )

    def test_literals(self):
        self.assertEqual(print_expression(Literal(3.0)), "3")
        self.assertEqual(print_expression(Literal(0.5)), "0.5")
        self.assertEqual(print_expression(BinaryExpression("+", x, Literal(-1))), "x + -1")

    def test_equation(self):
        self.assertEqual(print_equation(parse_equation("x^2 = 9")), "x ** 2 = 9")


class TestFormatNumber(unittest.TestCase):
    def test_integral(self):
        self.assertEqual(format_number(3.0), "3")
        self.assertEqual(format_number(-2), "-2")

    def test_fraction(self):
        self.assertEqual(format_number(0.5), "0.5")

    def test_precision(self):
        self.assertEqual(format_number(1 / 3, 4), "0.3333")
        self.assertEqual(format_number(-0.0, 6), "0")

    def test_non_finite(self):
        self.assertEqual(format_number(float("inf")), "inf")


class TestMathStyle(unittest.TestCase):
    """Test handwritten-style printing and input conversion."""

    def test_print_polynomial(self):
        expr = parse_expression("2*x**2 + 3*x - 1")
        self.assertEqual(print_math_style_expression(expr), "2 x^2 + 3 x - 1")

    def test_print_keeps_needed_parentheses(self):
        self.assertEqual(print_math_style_expression(parse_expression("a - (b + c)")), "a - (b + c)")
        self.assertEqual(print_math_style_expression(parse_expression("(a + b) * c")), "(a + b) c")

    def test_print_minus_one_coefficient(self):
        expr = BinaryExpression("*", Literal(-1), x)
        self.assertEqual(print_math_style_expression(expr), "-x")

    def test_print_precision(self):
        expr = BinaryExpression("*", Literal(1 / 3), x)
        self.assertEqual(print_math_style_expression(expr, 3), "0.333 x")

    def test_input_conversion(self):
        self.assertEqual(math_style_expression_to_expression("2x + 3"), "2*x + 3")
        self.assertEqual(math_style_expression_to_expression("2 x"), "2*x")
        self.assertEqual(math_style_expression_to_expression("x^2"), "x**2")
        self.assertEqual(math_style_expression_to_expression("2(x+1)"), "2*(x+1)")
        self.assertEqual(math_style_expression_to_expression("(a)(b)"), "(a)*(b)")
        self.assertEqual(math_style_expression_to_expression("a(b+c)"), "a*(b+c)")

    def test_input_keeps_function_calls(self):
        self.assertEqual(math_style_expression_to_expression("sin(x)"), "sin(x)")

    def test_conversion_parses(self):
        expr = parse_expression(math_style_expression_to_expression("3x^2 - 2x"))
        self.assertEqual(print_expression(expr), "3 * x ** 2 - 2 * x")


if __name__ == "__main__":
    unittest.main()
