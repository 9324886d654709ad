"""Symbolic differentiation and Taylor expansion on Expression trees."""

from __future__ import annotations

import math

from .expression import (
    BinaryExpression,
    CallExpression,
    Expression,
    Identifier,
    Literal,
    UnaryExpression,
    binary,
    expression_has_variable,
    make_has_variable,
    negate,
)
from .optimizer import optimize_expression
from .solver import compose_expression


def derive_expression_with(e: Expression, by: str) -> Expression:
    """Derivative of ``e`` with respect to ``by``.

    The result is not simplified; pass it through ``optimize_expression``.
    Shapes without a rule (a variable exponent, an unknown function) are
    returned unchanged.
    """
    if isinstance(e, Literal):
        return Literal(0)
    if isinstance(e, Identifier):
        return Literal(1 if e.name == by else 0)
    if isinstance(e, UnaryExpression):
        return UnaryExpression(e.operator, derive_expression_with(e.argument, by))
    if isinstance(e, BinaryExpression):
        if e.operator in ("+", "-"):
            return binary(derive_expression_with(e.left, by), e.operator, derive_expression_with(e.right, by))
        if e.operator == "*":
            # (u v)' = u' v + u v'
            return binary(
                binary(derive_expression_with(e.left, by), "*", e.right),
                "+",
                binary(e.left, "*", derive_expression_with(e.right, by)),
            )
        if e.operator == "/":
            # (u / v)' = (u' v - u v') / v / v
            return binary(
                binary(
                    binary(
                        binary(derive_expression_with(e.left, by), "*", e.right),
                        "-",
                        binary(e.left, "*", derive_expression_with(e.right, by)),
                    ),
                    "/",
                    e.right,
                ),
                "/",
                e.right,
            )
        if e.operator == "**":
            if not expression_has_variable(e.right, by):
                if not expression_has_variable(e.left, by):
                    return Literal(0)
                # (u ** n)' = u' n u ** (n - 1)
                return binary(
                    binary(derive_expression_with(e.left, by), "*", e.right),
                    "*",
                    binary(e.left, "**", binary(e.right, "-", Literal(1))),
                )
        return e
    if isinstance(e, CallExpression) and len(e.arguments) == 1:
        a = e.arguments[0]
        if not expression_has_variable(a, by):
            return Literal(0)
        inner = derive_expression_with(a, by)
        if e.callee == "sin":
            return binary(CallExpression("cos", e.arguments), "*", inner)
        if e.callee == "cos":
            return negate(binary(CallExpression("sin", e.arguments), "*", inner))
        if e.callee == "ln":
            return binary(inner, "/", a)
        if e.callee == "exp":
            return binary(e, "*", inner)
    return e


def _at_zero(e: Expression, by: str, has_variable) -> Expression:
    return optimize_expression(compose_expression(e, {by: Literal(0)}), has_variable)


def taylor_expand_expression_with(
    e: Expression, by: str, num: int, to_primary_function: bool = False
) -> Expression:
    """Maclaurin polynomial of ``e`` with ``num`` terms.

    With ``to_primary_function`` every term is integrated once, giving the
    series of an antiderivative that vanishes at 0.
    """
    has_variable = make_has_variable(by)
    result = _at_zero(e, by, has_variable)
    if to_primary_function:
        result = optimize_expression(binary(result, "*", Identifier(by)), has_variable)
    for i in range(1, num):
        e = optimize_expression(derive_expression_with(e, by), has_variable)
        c = _at_zero(e, by, has_variable)
        d: Expression = Literal(math.factorial(i))
        if to_primary_function:
            d = binary(d, "*", Literal(i + 1))
        term = binary(
            binary(c, "/", d),
            "*",
            binary(Identifier(by), "**", Literal(i + 1 if to_primary_function else i)),
        )
        result = optimize_expression(binary(term, "+", result), has_variable)
    return result
