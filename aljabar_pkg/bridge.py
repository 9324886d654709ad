"""Conversion between Expression trees and SymPy, and equivalence checking."""

from __future__ import annotations

import random
from functools import reduce

import sympy as sp

from .evaluator import evaluate_expression
from .expression import (
    BinaryExpression,
    CallExpression,
    Expression,
    Identifier,
    Literal,
    UnaryExpression,
    binary,
    get_identifiers,
    negate,
)
from .logging_config import get_logger
from .numeric import is_zero
from .types import EvaluationError

logger = get_logger("bridge")

_TO_SYMPY_FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "ln": sp.log,
    "log": lambda x: sp.log(x, 10),
    "exp": sp.exp,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
}

_FROM_SYMPY_FUNCTIONS = {
    sp.sin: "sin",
    sp.cos: "cos",
    sp.tan: "tan",
    sp.asin: "asin",
    sp.acos: "acos",
    sp.atan: "atan",
    sp.log: "ln",
    sp.exp: "exp",
    sp.Abs: "abs",
}


def to_sympy(expr: Expression) -> sp.Expr:
    """Build the SymPy expression for ``expr``.

    Integral literals become ``sp.Integer``; other literals ``sp.Float``.
    Unknown functions become undefined SymPy functions of the same name.
    """
    if isinstance(expr, Literal):
        value = float(expr.value)
        if value.is_integer():
            return sp.Integer(int(value))
        return sp.Float(value)
    if isinstance(expr, Identifier):
        return sp.Symbol(expr.name)
    if isinstance(expr, UnaryExpression):
        return -to_sympy(expr.argument)
    if isinstance(expr, BinaryExpression):
        left = to_sympy(expr.left)
        right = to_sympy(expr.right)
        if expr.operator == "+":
            return left + right
        if expr.operator == "-":
            return left - right
        if expr.operator == "*":
            return left * right
        if expr.operator == "/":
            return left / right
        if expr.operator == "**":
            return left**right
    if isinstance(expr, CallExpression):
        arguments = [to_sympy(a) for a in expr.arguments]
        function = _TO_SYMPY_FUNCTIONS.get(expr.callee)
        if function is not None:
            return function(*arguments)
        return sp.Function(expr.callee)(*arguments)
    raise EvaluationError(f"Cannot convert {expr!r} to SymPy", "CONVERSION_ERROR")


def from_sympy(value: sp.Basic) -> Expression:
    """Build an Expression tree from a SymPy expression.

    Rationals become float literals; a product with a ``-1`` coefficient
    becomes a negation.
    """
    if value.is_Number:
        if not value.is_real:
            raise EvaluationError(f"Cannot convert {value} to a real literal", "CONVERSION_ERROR")
        number = float(value)
        return Literal(int(number) if number.is_integer() else number)
    if value.is_Symbol:
        return Identifier(value.name)
    if value == sp.pi:
        return Identifier("pi")
    if value == sp.E:
        return Identifier("e")
    if value.is_Add:
        terms = [from_sympy(a) for a in value.as_ordered_terms()]
        return reduce(lambda left, right: binary(left, "+", right), terms)
    if value.is_Mul:
        coefficient, rest = value.as_coeff_Mul()
        if coefficient == -1:
            return negate(from_sympy(rest))
        factors = [from_sympy(a) for a in value.as_ordered_factors()]
        return reduce(lambda left, right: binary(left, "*", right), factors)
    if value.is_Pow:
        base, exponent = value.as_base_exp()
        return binary(from_sympy(base), "**", from_sympy(exponent))
    if isinstance(value, sp.Function):
        name = _FROM_SYMPY_FUNCTIONS.get(value.func, str(value.func))
        return CallExpression(name, tuple(from_sympy(a) for a in value.args))
    raise EvaluationError(f"Cannot convert {value} from SymPy", "CONVERSION_ERROR")


def _sample_equivalent(e1: Expression, e2: Expression, samples: int, seed: int) -> bool:
    names = sorted(get_identifiers(e1) | get_identifiers(e2))
    rng = random.Random(seed)
    checked = 0
    for _ in range(samples * 4):
        if checked >= samples:
            break
        values = {name: rng.uniform(-3, 3) for name in names}
        try:
            a = evaluate_expression(e1, values)
            b = evaluate_expression(e2, values)
        except EvaluationError:
            continue
        if not is_zero(a - b, 1e-6 * max(1.0, abs(a), abs(b))):
            return False
        checked += 1
    return checked > 0


def are_equivalent(e1: Expression, e2: Expression, samples: int = 8, seed: int = 0) -> bool:
    """True when the two trees are algebraically equal.

    SymPy's ``simplify`` decides first; when it cannot reduce the difference
    to zero the trees are compared numerically at random points.
    """
    try:
        difference = sp.simplify(to_sympy(e1) - to_sympy(e2))
        if difference == 0:
            return True
        if difference.is_number:
            return is_zero(float(difference), 1e-9)
    except (TypeError, ValueError, sp.SympifyError) as e:
        logger.debug("SymPy comparison failed: %s", e)
    return _sample_equivalent(e1, e2, samples, seed)
