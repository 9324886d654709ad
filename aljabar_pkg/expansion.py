"""Polynomial expansion and regrouping."""

from __future__ import annotations

from typing import Optional

from .config import MAX_EXPAND_POWER, MAX_EXPAND_TERMS, MAX_REWRITE_DEPTH
from .expression import (
    BinaryExpression,
    Expression,
    Identifier,
    Literal,
    UnaryExpression,
    binary,
    get_reverse_operator,
    is_binary,
    is_negation,
    negate,
)
from .factorization import (
    Factor,
    expression_to_factor,
    expression_to_factors,
    factors_to_expression,
    group_all_factors,
    group_factors_by,
    multiply_factor,
    optimize_factors,
    sort_factors,
)
from .logging_config import get_logger

logger = get_logger("expansion")


class _Expander:
    def __init__(self):
        self.depth = 0
        self.cache: dict[Expression, Expression] = {}

    def expand(self, e: Expression) -> Expression:
        if not isinstance(e, (BinaryExpression, UnaryExpression)):
            return e
        known = self.cache.get(e)
        if known is not None:
            return known
        if self.depth >= MAX_REWRITE_DEPTH:
            logger.debug("Rewrite depth limit reached during expansion")
            return e
        self.depth += 1
        try:
            if isinstance(e, BinaryExpression):
                result = self._expand_binary(e)
            else:
                result = self._expand_unary(e)
        finally:
            self.depth -= 1
        self.cache[e] = result
        return result

    def _expand_binary(self, e: BinaryExpression) -> Expression:
        rewritten = self._rewrite(e)
        if rewritten is not None:
            return self.expand(rewritten)
        left = self.expand(e.left)
        right = self.expand(e.right)
        if left is e.left and right is e.right:
            return e
        return self.expand(BinaryExpression(e.operator, left, right))

    def _rewrite(self, e: BinaryExpression) -> Optional[Expression]:
        left, right = e.left, e.right
        if e.operator == "**" and isinstance(right, Literal):
            if right.value == 2 and is_binary(left, "+", "-"):
                # (a + b) ** 2 -> (a * a + 2 * (a * b)) + b * b
                return binary(
                    binary(
                        binary(left.left, "*", left.left),
                        left.operator,
                        binary(Literal(2), "*", binary(left.left, "*", left.right)),
                    ),
                    "+",
                    binary(left.right, "*", left.right),
                )
            if right.value == 2 and is_binary(left, "*", "/"):
                # (a * b) ** 2 -> ((a * a) * b) * b
                return binary(
                    binary(binary(left.left, "*", left.left), left.operator, left.right),
                    left.operator,
                    left.right,
                )
            if (
                float(right.value).is_integer()
                and right.value >= 3
                and isinstance(left, (BinaryExpression, UnaryExpression))
            ):
                if right.value > MAX_EXPAND_POWER:
                    logger.debug("Power %s above expansion limit, kept as is", right.value)
                    return None
                # (a + b) ** 3 -> a ** 3 + 3 * a ** 2 * b + 3 * a * b ** 2 + b ** 3
                return self._power_of_sum(left, int(right.value))

        if e.operator == "*":
            # a * (b + c) -> a * b + a * c
            if is_binary(right, "+", "-"):
                return binary(
                    binary(left, "*", right.left), right.operator, binary(left, "*", right.right)
                )
            # (a + b) * c -> a * c + b * c
            if is_binary(left, "+", "-"):
                return binary(
                    binary(left.left, "*", right), left.operator, binary(left.right, "*", right)
                )
            if is_binary(left, "/") and isinstance(left.right, Identifier):
                if isinstance(right, Identifier):
                    # (a / b) * b -> a
                    if left.right == right:
                        return left.left
                else:
                    # (X / a) * Y -> (X * Y) / a
                    return binary(binary(left.left, "*", right), "/", left.right)

        # (a + b) / c -> a / c + b / c
        if e.operator == "/" and is_binary(left, "+", "-"):
            return binary(binary(left.left, "/", right), left.operator, binary(left.right, "/", right))
        return None

    def _power_of_sum(self, base: Expression, power: int) -> Optional[Expression]:
        """Multiply out ``base ** power`` in Factor space, merging like terms every step."""
        factors = expression_to_factors(self.expand(base))
        if factors is None:
            logger.debug("Base of power %d is not a sum of monomials, kept as is", power)
            return None
        terms = optimize_factors(factors)
        result = [Factor(1)]
        for _ in range(power):
            result = optimize_factors(multiply_factor(f, g) for f in result for g in terms)
            if len(result) > MAX_EXPAND_TERMS:
                logger.debug("Expansion of power %d exceeds %d terms, kept as is", power, MAX_EXPAND_TERMS)
                return None
        return factors_to_expression(sort_factors(result))

    def _expand_unary(self, e: UnaryExpression) -> Expression:
        # -(a + b) -> -a - b
        if is_negation(e) and is_binary(e.argument, "+", "-"):
            return self.expand(
                binary(
                    negate(e.argument.left),
                    get_reverse_operator(e.argument.operator),
                    e.argument.right,
                )
            )
        argument = self.expand(e.argument)
        if argument is e.argument:
            return e
        return self.expand(UnaryExpression(e.operator, argument))


def expand_expression(expr: Expression) -> Expression:
    """Distribute products and integer powers over sums.

    The result is a sum of products, ready for ``expression_to_factors``.
    Quotients by non-constant expressions stay as they are.
    """
    try:
        return _Expander().expand(expr)
    except RecursionError:
        logger.warning("Expansion exceeded the interpreter recursion limit")
        return expr


def group_expression(expr: Expression, by: Optional[Expression] = None) -> Optional[Expression]:
    """Expand ``expr`` and regroup its terms around shared factors.

    With ``by`` the terms containing it are collected as ``by * (...)``;
    otherwise terms are grouped by their most frequent identifiers.
    Returns None when ``expr`` does not expand to a sum of monomials, or
    when ``by`` is not a monomial or no term contains it.
    """
    factors = expression_to_factors(expand_expression(expr))
    if factors is None:
        return None
    factors = optimize_factors(factors)
    if by is None:
        return group_all_factors(factors)
    common = expression_to_factor(by)
    if common is None or not common.bases:
        return None
    return group_factors_by(factors, Factor.of(1, common.bases))
