"""Factor algebra: expressions as sums of monomials.

A ``Factor`` is one monomial, ``coefficient * base1**e1 * base2**e2 ...``.
Bases are identifiers, calls, or radicands (``(a + b) ** 0.5``) that cannot
be distributed any further. A list of Factors stands for their sum.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from functools import reduce
from typing import Iterable, Optional, Sequence

from .config import MAX_DIVISION_STEPS
from .expression import (
    BinaryExpression,
    CallExpression,
    Expression,
    Identifier,
    Literal,
    UnaryExpression,
    binary,
    expression_sort_key,
    negate,
)
from .logging_config import get_logger
from .numeric import is_zero

logger = get_logger("factorization")


@dataclass(frozen=True)
class Factor:
    """A monomial with canonically ordered, merged bases."""

    coefficient: float = 1
    bases: tuple = ()

    @classmethod
    def of(cls, coefficient: float, bases: Iterable[tuple[Expression, float]] = ()) -> "Factor":
        merged: dict[Expression, float] = {}
        for base, exponent in bases:
            merged[base] = merged.get(base, 0) + exponent
        ordered = sorted(
            ((base, exponent) for base, exponent in merged.items() if not is_zero(exponent)),
            key=lambda pair: expression_sort_key(pair[0]),
        )
        return cls(coefficient, tuple(ordered))

    @property
    def degree(self) -> float:
        return sum(exponent for _, exponent in self.bases)

    def exponent_of(self, base: Expression) -> float:
        for b, exponent in self.bases:
            if b == base:
                return exponent
        return 0


def multiply_factor(f1: Factor, f2: Factor) -> Factor:
    return Factor.of(f1.coefficient * f2.coefficient, f1.bases + f2.bases)


def power_factor(factor: Factor, power: int) -> Optional[Factor]:
    """Raise a monomial to an integer power; None if the coefficient overflows."""
    try:
        coefficient = factor.coefficient**power
        if isinstance(coefficient, int) and coefficient.bit_length() > 1024:
            return None
    except OverflowError:
        return None
    return Factor.of(
        coefficient,
        ((base, exponent * power) for base, exponent in factor.bases),
    )


def reverse_factor(factor: Factor) -> Factor:
    return Factor(-factor.coefficient, factor.bases)


def divide_factor(f1: Factor, f2: Factor) -> Optional[Factor]:
    """Monomial quotient ``f1 / f2``, or None when ``f2`` does not divide ``f1``."""
    if f2.coefficient == 0:
        return None
    remaining = dict(f1.bases)
    for base, exponent in f2.bases:
        available = remaining.get(base)
        if available is None or available < exponent and not is_zero(available - exponent):
            return None
        remaining[base] = available - exponent
    return Factor.of(f1.coefficient / f2.coefficient, remaining.items())


def _radicand(expr: Expression) -> Optional[Expression]:
    factors = expression_to_factors(expr)
    if factors is None:
        return None
    return factors_to_expression(sort_factors(optimize_factors(factors)))


def expression_to_factor(expr: Expression) -> Optional[Factor]:
    """Convert a single product term; None for sums, quotients and other shapes."""
    if isinstance(expr, Literal):
        return Factor(expr.value)
    if isinstance(expr, (Identifier, CallExpression)):
        return Factor(1, ((expr, 1),))
    if isinstance(expr, UnaryExpression):
        if expr.operator != "-":
            return None
        inner = expression_to_factor(expr.argument)
        return reverse_factor(inner) if inner else None
    if not isinstance(expr, BinaryExpression):
        return None
    if expr.operator == "*":
        left = expression_to_factor(expr.left)
        right = expression_to_factor(expr.right)
        if left is None or right is None:
            return None
        return multiply_factor(left, right)
    if expr.operator == "/":
        if not isinstance(expr.right, Literal) or expr.right.value == 0:
            return None
        left = expression_to_factor(expr.left)
        if left is None:
            return None
        return Factor(left.coefficient / expr.right.value, left.bases)
    if expr.operator == "**":
        if not isinstance(expr.right, Literal):
            return None
        power = expr.right.value
        if power <= 0:
            return None
        if float(power).is_integer():
            base = expression_to_factor(expr.left)
            return power_factor(base, int(power)) if base else None
        if isinstance(expr.left, Literal):
            if expr.left.value < 0:
                return None
            return Factor(expr.left.value**power)
        radicand = _radicand(expr.left)
        if radicand is None:
            return None
        if isinstance(radicand, Literal):
            return Factor(radicand.value**power) if radicand.value >= 0 else None
        return Factor.of(1, ((radicand, power),))
    return None


def expression_to_factors(expr: Expression) -> Optional[list[Factor]]:
    """Convert an expanded additive expression into a Factor-sum.

    Returns None if any term is not a monomial (a quotient by a non-constant,
    a power of a sum, a symbolic exponent).
    """
    if isinstance(expr, BinaryExpression) and expr.operator in ("+", "-"):
        left = expression_to_factors(expr.left)
        right = expression_to_factors(expr.right)
        if left is None or right is None:
            return None
        if expr.operator == "-":
            right = [reverse_factor(f) for f in right]
        return left + right
    if isinstance(expr, UnaryExpression) and expr.operator == "-":
        inner = expression_to_factors(expr.argument)
        if inner is None:
            return None
        return [reverse_factor(f) for f in inner]
    factor = expression_to_factor(expr)
    if factor is None:
        return None
    return [factor]


def _power_expression(base: Expression, exponent: float) -> Expression:
    if exponent == 1:
        return base
    return binary(base, "**", Literal(exponent))


def factor_to_expression(factor: Factor) -> Expression:
    """Rebuild a monomial as ``(k * a) * b ** 2``; a unit coefficient is omitted."""
    parts = [_power_expression(base, exponent) for base, exponent in factor.bases]
    if not parts:
        return Literal(factor.coefficient)
    product = reduce(lambda left, right: binary(left, "*", right), parts)
    if factor.coefficient == 1:
        return product
    if factor.coefficient == -1:
        return negate(product)
    return reduce(lambda left, right: binary(left, "*", right), [Literal(factor.coefficient), *parts])


def factors_to_expression(factors: Sequence[Factor]) -> Expression:
    """Rebuild a Factor-sum as a left-nested ``+`` chain; empty is ``0``."""
    if not factors:
        return Literal(0)
    return reduce(
        lambda left, right: binary(left, "+", right),
        (factor_to_expression(f) for f in factors),
    )


def optimize_factors(factors: Iterable[Factor], tolerance: float | None = None) -> list[Factor]:
    """Merge like terms and drop zero terms, keeping first-occurrence order."""
    merged: dict[tuple, float] = {}
    for factor in factors:
        merged[factor.bases] = merged.get(factor.bases, 0) + factor.coefficient
    return [
        Factor(coefficient, bases)
        for bases, coefficient in merged.items()
        if not is_zero(coefficient, tolerance)
    ]


def sort_factors(factors: Iterable[Factor]) -> list[Factor]:
    """Order by descending total degree, then by base identity."""
    return sorted(
        factors,
        key=lambda f: (
            -f.degree,
            tuple((expression_sort_key(base), -exponent) for base, exponent in f.bases),
        ),
    )


def subtract_factors(f1: Sequence[Factor], f2: Sequence[Factor]) -> list[Factor]:
    result = list(f1)
    for factor in f2:
        for i, r in enumerate(result):
            if r.bases == factor.bases:
                coefficient = r.coefficient - factor.coefficient
                if is_zero(coefficient):
                    del result[i]
                else:
                    result[i] = Factor(coefficient, r.bases)
                break
        else:
            result.append(reverse_factor(factor))
    return result


def _term_order(factors: Iterable[Factor]):
    """Graded order over the bases of ``factors``, leading term first."""
    bases = sorted(
        {base for factor in factors for base, _ in factor.bases},
        key=expression_sort_key,
    )

    def key(factor: Factor) -> tuple:
        return (-factor.degree, tuple(-factor.exponent_of(base) for base in bases))

    return key


def divide_factors(
    numerator: Sequence[Factor], divisor: Sequence[Factor]
) -> Optional[list[Factor]]:
    """Exact long division of Factor-sums.

    Terms are taken in graded order, so the leading term of the remainder
    must always be divisible by the leading term of the divisor. Returns the
    quotient, or None as soon as it is not, or when the division needs more
    than ``MAX_DIVISION_STEPS`` steps.
    """
    remainder = optimize_factors(numerator)
    divisor = optimize_factors(divisor)
    if not divisor or not remainder:
        return None
    key = _term_order([*remainder, *divisor])
    lead = min(divisor, key=key)
    quotient: list[Factor] = []
    while remainder:
        if len(quotient) >= MAX_DIVISION_STEPS:
            logger.debug("Division step limit reached")
            return None
        term = divide_factor(min(remainder, key=key), lead)
        if term is None:
            return None
        quotient.append(term)
        remainder = subtract_factors(remainder, [multiply_factor(f, term) for f in divisor])
    return quotient


def divide(e1: Expression, e2: Expression) -> Optional[Expression]:
    """Exact quotient of two expressions, or None."""
    f1 = expression_to_factors(e1)
    if not f1:
        return None
    f2 = expression_to_factors(e2)
    if not f2:
        return None
    quotient = divide_factors(f1, f2)
    if not quotient:
        return None
    return factors_to_expression(quotient)


def _integer_content(coefficient: float) -> int:
    if float(coefficient).is_integer() and coefficient:
        return abs(int(coefficient))
    return 1


def _extract_factor(factor: Factor, power: int) -> Optional[tuple[dict[str, int], int]]:
    variables: dict[str, int] = {}
    for base, exponent in factor.bases:
        if not isinstance(base, Identifier) or not float(exponent).is_integer():
            return None
        if exponent >= power:
            variables[base.name] = int(exponent // power)
    if not variables:
        return None
    return variables, _integer_content(factor.coefficient)


def extract_factors(
    factors: Sequence[Factor], power: int
) -> Optional[tuple[Factor, list[Factor]]]:
    """Pull the largest common ``power``-th power out of a Factor-sum.

    Returns ``(base, remaining)`` with ``sum(factors) == base**power *
    sum(remaining)``, or None when nothing can be extracted.
    """
    common: Optional[tuple[dict[str, int], int]] = None
    for factor in factors:
        extracted = _extract_factor(factor, power)
        if extracted is None:
            return None
        if common is None:
            common = extracted
            continue
        variables, constant = extracted
        common = (
            {
                name: min(count, common[0][name])
                for name, count in variables.items()
                if name in common[0]
            },
            math.gcd(constant, common[1]),
        )
    if common is None:
        return None
    variables, constant = common
    if not variables and constant <= 1:
        return None
    base = Factor.of(constant ** (1 / power), ((Identifier(n), c) for n, c in variables.items()))
    full = Factor.of(constant, ((Identifier(n), c * power) for n, c in variables.items()))
    remaining = divide_factors(factors, [full])
    if remaining is None:
        return None
    return base, remaining


def _times(common: Expression, expr: Expression) -> Expression:
    if expr == Literal(1):
        return common
    return binary(common, "*", expr)


def _grouped_factors(factors: Sequence[Factor], by: Factor) -> list[tuple[int, list[Factor]]]:
    """Group terms by how many times ``by`` divides them, highest count first."""
    if not by.bases:
        return [(0, list(factors))]
    groups: dict[int, list[Factor]] = {}
    for factor in factors:
        count = 0
        current = factor
        while True:
            quotient = divide_factor(current, by)
            if quotient is None or quotient == current:
                break
            count += 1
            current = quotient
        groups.setdefault(count, []).append(current)
    return sorted(groups.items(), key=lambda item: -item[0])


def _grouped_factors_to_expression(
    groups: list[tuple[int, list[Factor]]], by: Factor, regroup=None
) -> Expression:
    result: Optional[Expression] = None
    for count, members in groups:
        inner = regroup(members) if regroup else None
        if inner is None:
            inner = factors_to_expression(members)
        if count > 0:
            inner = _times(factor_to_expression(power_factor(by, count)), inner)
        result = inner if result is None else binary(result, "+", inner)
    return result if result is not None else Literal(0)


def group_factors_by(factors: Sequence[Factor], common: Factor) -> Optional[Expression]:
    """Rewrite as ``common * (quotients) + (rest)``.

    Terms divisible by several powers of ``common`` are grouped per power.
    Returns None when no term contains ``common``.
    """
    groups = _grouped_factors(factors, common)
    if all(count == 0 for count, _ in groups):
        return None
    return _grouped_factors_to_expression(groups, common)


def group_factors_by_variables(
    factors: Sequence[Factor], names: Sequence[str], level: int = 0
) -> Optional[Expression]:
    """Nested grouping by ``names[level]``, then ``names[level + 1]`` inside each group."""
    if len(factors) <= 1 or level >= len(names):
        return None
    by = Factor.of(1, ((Identifier(names[level]), 1),))
    groups = _grouped_factors(factors, by)
    if all(count == 0 for count, _ in groups):
        return group_factors_by_variables(factors, names, level + 1)
    return _grouped_factors_to_expression(
        groups,
        by,
        regroup=lambda members: group_factors_by_variables(members, names, level + 1),
    )


def group_all_factors(factors: Sequence[Factor]) -> Expression:
    """Group by identifiers in order of how many terms contain them."""
    counts: Counter = Counter()
    for factor in factors:
        for base, _ in factor.bases:
            if isinstance(base, Identifier):
                counts[base.name] += 1
    names = [name for name, _ in sorted(counts.items(), key=lambda item: (-item[1], item[0]))]
    grouped = group_factors_by_variables(factors, names)
    if grouped is None:
        return factors_to_expression(factors)
    return grouped
