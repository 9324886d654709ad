"""Equation solving.

Single equations are brought to the form ``expression = 0``, expanded, and
read as a polynomial in the target variable when possible: degree 1 and 2
are solved symbolically (numerically when every coefficient is a number),
numeric degree 3 and 4 go through the closed-form root solvers. Anything
else is handled by isolating rewrites (``x + a = b`` to ``x = b - a`` and so
on); an equation that cannot be isolated is returned unresolved.
"""

from __future__ import annotations

import itertools
from typing import Iterable, Mapping, Optional, Union

from .config import MAX_SOLVE_DEPTH
from .expansion import expand_expression
from .expression import (
    BinaryExpression,
    Equation,
    Expression,
    Identifier,
    Literal,
    binary,
    expression_has_variable,
    get_identifiers,
    get_reverse_operator,
    is_binary,
    is_negation,
    iterate_expression,
    make_has_variable,
    map_identifiers,
    negate,
)
from .factorization import Factor, expression_to_factors, factors_to_expression, optimize_factors
from .logging_config import get_logger
from .numeric import calculate_equation2, is_same_number, solve_polynomial
from .optimizer import optimize_equation, optimize_expression
from .parser import print_equation

logger = get_logger("solver")

Solution = Union[Expression, Equation]


def compose_expression(expr: Expression, substitutions: Mapping[str, Expression]) -> Expression:
    """Replace every identifier named in ``substitutions`` by its expression."""
    return map_identifiers(expr, lambda identifier: substitutions.get(identifier.name, identifier))


def compose_equation(equation: Equation, substitutions: Mapping[str, Expression]) -> Equation:
    return Equation(
        compose_expression(equation.left, substitutions),
        compose_expression(equation.right, substitutions),
    )


def equation_has_variable(equation: Equation, variable: str) -> bool:
    return expression_has_variable(equation.left, variable) or expression_has_variable(
        equation.right, variable
    )


def get_equation_variables(equation: Equation) -> list[str]:
    """Identifier names used on either side, sorted."""
    return sorted(get_identifiers(equation.left) | get_identifiers(equation.right))


def _polynomial_terms(factors: list[Factor], variable: str) -> Optional[dict[int, list[Factor]]]:
    """Group a Factor-sum by the power of ``variable``.

    Returns None when the variable appears with a fractional exponent or
    inside another base (a call, a radicand).
    """
    x = Identifier(variable)
    terms: dict[int, list[Factor]] = {}
    for factor in factors:
        exponent = factor.exponent_of(x)
        if not float(exponent).is_integer() or exponent < 0:
            return None
        rest = Factor.of(factor.coefficient, ((b, e) for b, e in factor.bases if b != x))
        if any(expression_has_variable(base, variable) for base, _ in rest.bases):
            return None
        terms.setdefault(int(exponent), []).append(rest)
    return terms


def _solve_polynomial_form(factors: list[Factor], variable: str) -> Optional[list[Equation]]:
    terms = _polynomial_terms(factors, variable)
    if terms is None:
        return None
    degree = max(terms, default=0)
    if degree == 0:
        return None
    x = Identifier(variable)
    coefficients = [
        optimize_expression(factors_to_expression(optimize_factors(terms.get(k, []))))
        for k in range(degree, -1, -1)
    ]
    numeric = all(isinstance(c, Literal) for c in coefficients)

    if degree == 1:
        a, b = coefficients
        return [Equation(x, optimize_expression(binary(negate(b), "/", a)))]
    if degree == 2:
        a, b, c = coefficients
        if numeric:
            roots = calculate_equation2(b.value / a.value, c.value / a.value)
            return [Equation(x, Literal(r)) for r in roots]
        # x = (-b +- (b ** 2 - 4 * a * c) ** 0.5) / (2 * a)
        discriminant = binary(
            binary(b, "**", Literal(2)), "-", binary(binary(Literal(4), "*", a), "*", c)
        )
        root = binary(discriminant, "**", Literal(0.5))
        denominator = binary(Literal(2), "*", a)
        return [
            Equation(x, optimize_expression(binary(binary(negate(b), sign, root), "/", denominator)))
            for sign in ("+", "-")
        ]
    if numeric and degree <= 4:
        roots = solve_polynomial([c.value for c in coefficients])
        return [Equation(x, Literal(r)) for r in roots]
    logger.debug("Polynomial of degree %d in %s is not solved symbolically", degree, variable)
    return None


def _is_zero_literal(expr: Expression) -> bool:
    return isinstance(expr, Literal) and expr.value == 0


def _divides_by_zero(expr: Expression) -> bool:
    return any(is_binary(node, "/") and _is_zero_literal(node.right) for node in iterate_expression(expr))


def _is_contradiction(equation: Equation) -> bool:
    """Both sides fold to numbers that differ, as in ``0 * x = 5``."""
    left = optimize_expression(equation.left)
    right = optimize_expression(equation.right)
    return (
        isinstance(left, Literal)
        and isinstance(right, Literal)
        and not is_same_number(left.value, right.value)
    )


class _Isolator:
    """Move everything but the target variable to the right-hand side."""

    def __init__(self, variable: str):
        self.variable = variable
        self.has_variable = make_has_variable(variable)
        self.depth = 0

    def has(self, expr: Expression) -> bool:
        return self.has_variable(expr)

    def optimize(self, expr: Expression) -> Expression:
        return optimize_expression(expr, self.has_variable)

    def solve(self, equation: Equation) -> list[Equation]:
        if self.depth >= MAX_SOLVE_DEPTH:
            logger.debug("Solve depth limit reached for %s", self.variable)
            return [equation]
        self.depth += 1
        try:
            return self._solve(optimize_equation(equation, self.has_variable))
        finally:
            self.depth -= 1

    def _solve(self, equation: Equation) -> list[Equation]:
        left, right = equation.left, equation.right
        if not self.has(left):
            if not self.has(right):
                return [] if _is_contradiction(equation) else [equation]
            # a = x -> x = a
            left, right = right, left
        if not self.has(right):
            return self._isolate(left, right)
        # x = (x + 1) / a -> x * a = x + 1
        if is_binary(right, "/"):
            return self.solve(Equation(self.optimize(binary(left, "*", right.right)), right.left))
        # x + 1 = 2 * x -> x + 1 - 2 * x = 0
        return self.solve(Equation(binary(left, "-", right), Literal(0)))

    def _isolate(self, left: Expression, right: Expression) -> list[Equation]:
        if is_negation(left):
            # -x = a -> x = -a
            return self.solve(Equation(left.argument, negate(right)))
        if not isinstance(left, BinaryExpression):
            return [Equation(left, right)]
        operator = left.operator

        if self.has(left.left) and not self.has(left.right):
            if operator == "**":
                return self._isolate_power(left, right)
            # x + a = b -> x = b - a, x * a = b -> x = b / a
            return self.solve(
                Equation(left.left, binary(right, get_reverse_operator(operator), left.right))
            )
        if self.has(left.right) and not self.has(left.left):
            if operator == "**":
                logger.debug("Variable exponent in %s is not isolated", self.variable)
                return [Equation(left, right)]
            # a / x = 0 has no solution
            if operator == "/" and _is_zero_literal(right):
                return []
            # a - x = b -> x = a - b, a / x = b -> x = a / b
            if operator in ("-", "/"):
                return self.solve(Equation(left.right, binary(left.left, operator, right)))
            # a + x = b -> x = b - a
            return self.solve(
                Equation(left.right, binary(right, get_reverse_operator(operator), left.left))
            )
        # (x + 1) / x = 0
        if operator == "/" and _is_zero_literal(right):
            return self.solve(Equation(left.left, right))
        # (x + 1) * sin(x) = 0
        if operator == "*" and _is_zero_literal(right):
            return self.solve(Equation(left.left, right)) + self.solve(Equation(left.right, right))
        if operator in ("+", "-", "*"):
            factors = expression_to_factors(expand_expression(binary(left, "-", right)))
            if factors is not None:
                result = _solve_polynomial_form(optimize_factors(factors), self.variable)
                if result is not None:
                    return result
        return [Equation(left, right)]

    def _isolate_power(self, left: BinaryExpression, right: Expression) -> list[Equation]:
        exponent = left.right
        if isinstance(exponent, Literal) and isinstance(right, Literal) and right.value < 0:
            if float(exponent.value).is_integer() and exponent.value % 2 == 0:
                return []
            if 0 < exponent.value < 1:
                return []
        root = self.optimize(binary(right, "**", self.optimize(binary(Literal(1), "/", exponent))))
        # x ** 2 = 9 -> x = 3, x = -3
        if (
            isinstance(exponent, Literal)
            and float(exponent.value).is_integer()
            and exponent.value % 2 == 0
        ):
            return self.solve(Equation(left.left, root)) + self.solve(
                Equation(left.left, negate(root))
            )
        return self.solve(Equation(left.left, root))


def solve_equation(equation: Equation, variable: str) -> list[Equation]:
    """Solve ``equation`` for ``variable``.

    Returns:
        ``variable = expression`` equations, one per branch. An empty list
        means there is no real solution, which includes contradictions such
        as ``x = x + 1``. An equation of any other shape is returned as is
        when the variable cannot be isolated.
    """
    has_variable = make_has_variable(variable)
    if not equation_has_variable(equation, variable):
        if _is_contradiction(equation):
            return []
        return [optimize_equation(equation)]

    zero_form = optimize_expression(binary(equation.left, "-", equation.right), has_variable)
    if is_binary(zero_form, "/"):
        zero_form = zero_form.left
    factors = expression_to_factors(expand_expression(zero_form))
    result = None
    if factors is not None:
        result = _solve_polynomial_form(optimize_factors(factors), variable)
    if result is None:
        logger.debug("Equation is not a solvable polynomial in %s, isolating", variable)
        result = _Isolator(variable).solve(equation)
    return [s for s in result if not _divides_by_zero(s.right)]


def _ordered(variables: Iterable[str]) -> list[str]:
    if isinstance(variables, (set, frozenset)):
        return sorted(variables)
    return list(variables)


def _as_solution(equation: Equation, variable: str) -> Solution:
    if equation.left == Identifier(variable) and not expression_has_variable(
        equation.right, variable
    ):
        return equation.right
    return equation


def solve_equations(
    equations: Iterable[Equation], variables: Iterable[str] | None = None
) -> list[dict[str, Solution]]:
    """Solve each equation independently.

    Every equation is solved for the first requested variable it contains
    that no earlier equation has taken. An equation whose variables are all
    taken is kept unresolved under its own printed form as key, so no slot
    is ever overwritten.

    Returns the cartesian product of every equation's branches as solution
    maps. A slot holds an Equation when its variable could not be isolated.
    An empty list means some equation has no real solution.
    """
    equations = list(equations)
    if variables is None:
        names: set[str] = set()
        for equation in equations:
            names.update(get_equation_variables(equation))
        variables = names
    order = _ordered(variables)

    taken: set[str] = set()
    slots: list[tuple[str, list[Solution]]] = []
    for equation in equations:
        contained = [v for v in order if equation_has_variable(equation, v)]
        if not contained:
            continue
        free = [v for v in contained if v not in taken]
        if not free:
            logger.debug("Every variable of an equation is already taken, kept unresolved")
            slots.append((print_equation(equation), [equation]))
            continue
        variable = free[0]
        taken.add(variable)
        solutions = [_as_solution(s, variable) for s in solve_equation(equation, variable)]
        if not solutions:
            return []
        slots.append((variable, solutions))
    return [
        {key: value for (key, _), value in zip(slots, combination)}
        for combination in itertools.product(*(solutions for _, solutions in slots))
    ]


def _solve_system(
    equations: list[Equation],
    unknowns: frozenset[str],
    context: dict[str, Solution],
    depth: int,
) -> list[dict[str, Solution]]:
    if depth > MAX_SOLVE_DEPTH:
        logger.debug("System solve depth limit reached")
        return [context]
    pending = []
    for equation in equations:
        names = [v for v in get_equation_variables(equation) if v in unknowns]
        if names:
            pending.append((names, equation))
        elif _is_contradiction(equation):
            return []
    if not pending:
        return [context]

    index = min(range(len(pending)), key=lambda i: len(pending[i][0]))
    names, equation = pending.pop(index)
    rest = [e for _, e in pending]
    variable = names[0]

    results = []
    for solution in solve_equation(equation, variable):
        value = _as_solution(solution, variable)
        if isinstance(value, Equation):
            branch = dict(context)
            branch[variable] = value
            results.extend(_solve_system(rest, unknowns - {variable}, branch, depth + 1))
            continue
        substitution = {variable: value}
        branch = {
            name: (
                known
                if isinstance(known, Equation)
                else optimize_expression(compose_expression(known, substitution))
            )
            for name, known in context.items()
        }
        branch[variable] = value
        results.extend(
            _solve_system(
                [compose_equation(e, substitution) for e in rest],
                unknowns - {variable},
                branch,
                depth + 1,
            )
        )
    return results


def solve_equation_system(
    equations: Iterable[Equation], variables: Iterable[str] | None = None
) -> list[dict[str, Solution]]:
    """Solve equations together by substitution.

    The equation with the fewest unknowns is solved first, its solution is
    substituted into the remaining equations and into earlier results, and
    every root opens its own branch. Each returned map holds the values found
    on one branch; a value is an Equation when that variable could not be
    isolated.
    """
    equations = list(equations)
    if variables is None:
        names: set[str] = set()
        for equation in equations:
            names.update(get_equation_variables(equation))
        variables = names
    return _solve_system(equations, frozenset(variables), {}, 0)
