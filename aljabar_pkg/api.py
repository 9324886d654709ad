"""Public API for Aljabar - takes text, returns structured result objects."""

from __future__ import annotations

import math
from typing import Sequence

from .bridge import are_equivalent
from .calculus import derive_expression_with
from . import config
from .expansion import expand_expression, group_expression
from .expression import Equation, Expression, Identifier, get_identifiers, make_has_variable
from .evaluator import evaluate_expression
from .logging_config import get_logger
from .numeric import solve_polynomial
from .optimizer import optimize_expression
from .parser import (
    format_number,
    parse_equation,
    parse_expression,
    print_equation,
    print_expression,
)
from .solver import get_equation_variables, solve_equation_system
from .solver import solve_equation as _solve_equation
from .types import (
    EquivalenceResult,
    EvaluationError,
    ExpressionResult,
    ParseError,
    RootsResult,
    SolveResult,
    SystemResult,
    ValidationError,
)

logger = get_logger("api")

_INPUT_ERRORS = (ValidationError, ParseError, EvaluationError)


def _expression_result(expr: Expression) -> ExpressionResult:
    return ExpressionResult(
        ok=True,
        result=print_expression(expr),
        free_symbols=sorted(get_identifiers(expr)),
    )


def _approximate(expr: Expression) -> str | None:
    if get_identifiers(expr):
        return None
    try:
        return format_number(evaluate_expression(expr), config.OUTPUT_PRECISION)
    except EvaluationError:
        return None


def optimize(expression: str, variable: str | None = None) -> ExpressionResult:
    """Simplify an expression.

    Args:
        expression: Expression string (e.g., "a + a", "(x^2 + 3*x + 2)/(x + 1)")
        variable: Optional variable whose terms are gathered to the left

    Returns:
        ExpressionResult with the simplified expression

    Example:
        >>> from aljabar_pkg.api import optimize
        >>> optimize("a + a").result
        '2 * a'
        >>> optimize("a*x + b*x", variable="x").result
        '(a + b) * x'
    """
    try:
        expr = parse_expression(expression)
        return _expression_result(optimize_expression(expr, make_has_variable(variable)))
    except _INPUT_ERRORS as e:
        logger.warning("optimize failed: %s", e)
        return ExpressionResult(ok=False, error=str(e), error_code=e.code)


def expand(expression: str) -> ExpressionResult:
    """Expand products and integer powers into a sum of terms.

    Example:
        >>> from aljabar_pkg.api import expand
        >>> expand("(a + b)^2").result
        '(a ** 2 + (2 * a) * b) + b ** 2'
    """
    try:
        expr = parse_expression(expression)
        return _expression_result(optimize_expression(expand_expression(expr)))
    except _INPUT_ERRORS as e:
        logger.warning("expand failed: %s", e)
        return ExpressionResult(ok=False, error=str(e), error_code=e.code)


def factorize(expression: str, by: str | None = None) -> ExpressionResult:
    """Group the terms of an expression around shared factors.

    Args:
        expression: Expression string (e.g., "a*b + a*c")
        by: Optional monomial to pull out (e.g., "a", "x^2"); without it
            terms are grouped by their most frequent variables

    Returns:
        ExpressionResult with the grouped expression
    """
    try:
        expr = parse_expression(expression)
        common = parse_expression(by) if by else None
        grouped = group_expression(expr, common)
        if grouped is None:
            return ExpressionResult(
                ok=False,
                error="Expression cannot be grouped by the requested factor",
                error_code="NOT_FACTORABLE",
            )
        return _expression_result(grouped)
    except _INPUT_ERRORS as e:
        logger.warning("factorize failed: %s", e)
        return ExpressionResult(ok=False, error=str(e), error_code=e.code)


def solve_equation(equation: str, variable: str | None = None) -> SolveResult:
    """Solve a single equation.

    Args:
        equation: Equation string (e.g., "2*x + 1 = 0", "x^2 = 9")
        variable: Variable to solve for (default: first variable, alphabetically)

    Returns:
        SolveResult with one exact solution per branch and its numeric
        approximation when the solution is a number

    Example:
        >>> from aljabar_pkg.api import solve_equation
        >>> solve_equation("x^2 = 9").exact
        ['3', '-3']
    """
    try:
        parsed = parse_equation(equation)
        names = get_equation_variables(parsed)
        if not names:
            return SolveResult(
                ok=False,
                result_type="equation",
                error="No variables found in equation",
                error_code="NO_VARIABLE",
            )
        variable = variable or names[0]
        if variable not in names:
            return SolveResult(
                ok=False,
                result_type="equation",
                variable=variable,
                error=f"Variable '{variable}' not found in equation",
                error_code="VARIABLE_NOT_FOUND",
            )
        solutions = _solve_equation(parsed, variable)
    except _INPUT_ERRORS as e:
        logger.warning("solve_equation failed: %s", e)
        return SolveResult(ok=False, result_type="equation", error=str(e), error_code=e.code)

    if not solutions:
        return SolveResult(ok=True, result_type="no_real_solution", variable=variable, exact=[])
    resolved = all(
        s.left == Identifier(variable) and variable not in get_identifiers(s.right)
        for s in solutions
    )
    if not resolved:
        return SolveResult(
            ok=True,
            result_type="unresolved",
            variable=variable,
            exact=[print_equation(s) for s in solutions],
        )
    return SolveResult(
        ok=True,
        result_type="equation",
        variable=variable,
        exact=[print_expression(s.right) for s in solutions],
        approx=[_approximate(s.right) for s in solutions],
    )


def solve_system(equations: str | Sequence[str], variables: Sequence[str] | None = None) -> SystemResult:
    """Solve several equations together.

    Args:
        equations: Comma-separated equations (e.g., "x+y=10, x-y=2") or a list
        variables: Optional variables to solve for (default: all of them)

    Returns:
        SystemResult with one solution map per branch

    Example:
        >>> from aljabar_pkg.api import solve_system
        >>> solve_system("x+y=10, x-y=2").solutions
        [{'x': '6', 'y': '4'}]
    """
    if isinstance(equations, str):
        equations = [part for part in equations.split(",") if part.strip()]
    try:
        parsed = [parse_equation(text) for text in equations]
        if not parsed:
            raise ValidationError("No equations given", "EMPTY_INPUT")
        branches = solve_equation_system(parsed, variables)
    except _INPUT_ERRORS as e:
        logger.warning("solve_system failed: %s", e)
        return SystemResult(ok=False, error=str(e), error_code=e.code)
    return SystemResult(
        ok=True,
        solutions=[
            {
                name: print_equation(value) if isinstance(value, Equation) else print_expression(value)
                for name, value in branch.items()
            }
            for branch in branches
        ],
    )


def find_roots(coefficients: Sequence[float]) -> RootsResult:
    """Real roots of a polynomial given by its coefficients, highest degree first.

    Example:
        >>> from aljabar_pkg.api import find_roots
        >>> find_roots([1, 0, -1]).roots
        [1.0, -1.0]
    """
    try:
        values = [float(c) for c in coefficients]
    except (TypeError, ValueError) as e:
        logger.warning("find_roots failed: %s", e)
        return RootsResult(ok=False, error=f"Invalid coefficient: {e}", error_code="INVALID_COEFFICIENTS")
    if not values or not all(math.isfinite(v) for v in values):
        return RootsResult(
            ok=False, error="Coefficients must be finite numbers", error_code="INVALID_COEFFICIENTS"
        )
    if all(v == 0 for v in values[:-1]):
        return RootsResult(
            ok=False, error="Polynomial must have degree of at least 1", error_code="INVALID_COEFFICIENTS"
        )
    return RootsResult(ok=True, roots=solve_polynomial(values))


def differentiate(expression: str, variable: str | None = None) -> ExpressionResult:
    """Differentiate an expression with respect to a variable.

    Args:
        expression: Expression string (e.g., "x^3")
        variable: Variable to differentiate with respect to (default: first variable found)

    Returns:
        ExpressionResult with the simplified derivative
    """
    try:
        expr = parse_expression(expression)
        names = sorted(get_identifiers(expr))
        if not names:
            return ExpressionResult(
                ok=False, error="No variables found in expression", error_code="NO_VARIABLE"
            )
        variable = variable or names[0]
        derivative = derive_expression_with(expr, variable)
        return _expression_result(optimize_expression(derivative, make_has_variable(variable)))
    except _INPUT_ERRORS as e:
        logger.warning("differentiate failed: %s", e)
        return ExpressionResult(ok=False, error=str(e), error_code=e.code)


def check_equivalence(first: str, second: str) -> EquivalenceResult:
    """Decide whether two expressions are algebraically equal.

    Example:
        >>> from aljabar_pkg.api import check_equivalence
        >>> check_equivalence("(x + 1)^2", "x^2 + 2*x + 1").equivalent
        True
    """
    try:
        return EquivalenceResult(
            ok=True, equivalent=are_equivalent(parse_expression(first), parse_expression(second))
        )
    except _INPUT_ERRORS as e:
        logger.warning("check_equivalence failed: %s", e)
        return EquivalenceResult(ok=False, error=str(e), error_code=e.code)
