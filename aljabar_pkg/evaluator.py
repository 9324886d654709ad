"""Numeric evaluation of Expression trees."""

from __future__ import annotations

import math
from typing import Callable, Mapping

from .expression import (
    BinaryExpression,
    CallExpression,
    Expression,
    Identifier,
    Literal,
    UnaryExpression,
)
from .types import EvaluationError

FUNCTIONS: dict[str, Callable[..., float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "ln": math.log,
    "log": math.log10,
    "exp": math.exp,
    "sqrt": math.sqrt,
    "abs": abs,
}

CONSTANTS = {"pi": math.pi, "e": math.e}


def evaluate_expression(expr: Expression, values: Mapping[str, float] | None = None) -> float:
    """Evaluate ``expr`` to a float.

    ``values`` maps identifier names to numbers; ``pi`` and ``e`` are known
    unless overridden.

    Raises:
        EvaluationError: for unknown identifiers or functions, and for results
            that are not finite real numbers
    """
    values = values or {}

    def visit(node: Expression) -> float:
        if isinstance(node, Literal):
            return float(node.value)
        if isinstance(node, Identifier):
            if node.name in values:
                return float(values[node.name])
            if node.name in CONSTANTS:
                return CONSTANTS[node.name]
            raise EvaluationError(f"Unknown identifier '{node.name}'", "UNKNOWN_IDENTIFIER")
        if isinstance(node, UnaryExpression):
            return -visit(node.argument)
        if isinstance(node, BinaryExpression):
            left = visit(node.left)
            right = visit(node.right)
            if node.operator == "+":
                return left + right
            if node.operator == "-":
                return left - right
            if node.operator == "*":
                return left * right
            if node.operator == "/":
                if right == 0:
                    raise EvaluationError("Division by zero", "DIVISION_BY_ZERO")
                return left / right
            if node.operator == "**":
                try:
                    value = left**right
                except ZeroDivisionError as e:
                    raise EvaluationError("Division by zero", "DIVISION_BY_ZERO") from e
                if isinstance(value, complex):
                    raise EvaluationError("Result is not a real number", "NOT_REAL")
                return value
            raise EvaluationError(f"Unknown operator '{node.operator}'", "UNSUPPORTED_OPERATOR")
        if isinstance(node, CallExpression):
            function = FUNCTIONS.get(node.callee)
            if function is None:
                raise EvaluationError(f"Unknown function '{node.callee}'", "UNKNOWN_FUNCTION")
            try:
                return function(*(visit(a) for a in node.arguments))
            except (ValueError, TypeError) as e:
                raise EvaluationError(
                    f"Cannot evaluate {node.callee}: {e}", "DOMAIN_ERROR"
                ) from e
        raise EvaluationError(f"Not an expression: {node!r}", "UNSUPPORTED_SYNTAX")

    try:
        result = visit(expr)
    except OverflowError as e:
        raise EvaluationError("Numeric overflow", "OVERFLOW") from e
    if isinstance(result, complex) or not math.isfinite(result):
        raise EvaluationError("Result is not a finite real number", "NOT_REAL")
    return result
