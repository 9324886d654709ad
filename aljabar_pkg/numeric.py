"""Tolerance-aware comparisons and real polynomial root solvers.

Closed forms are used up to degree four; higher degrees fall back to Newton
iteration with synthetic-division deflation. Every solver only reports
finite real roots and never raises for numeric input: degenerate input just
yields fewer roots.
"""

from __future__ import annotations

import math
from typing import Callable, Iterable, Sequence, TypeVar

import numpy as np

from . import config
from .config import (
    LOOSE_TOLERANCE,
    NEWTON_INITIAL_GUESS,
    NEWTON_MAX_ITERATIONS,
    ROOT_RESIDUAL_TOLERANCE,
)
from .logging_config import get_logger
from .parser import format_number

logger = get_logger("numeric")

T = TypeVar("T")


def is_zero(value: float, tolerance: float | None = None) -> bool:
    """True when ``abs(value) <= tolerance`` (default ``DEFAULT_TOLERANCE``)."""
    if tolerance is None:
        tolerance = config.DEFAULT_TOLERANCE
    return abs(value) <= tolerance


def is_same_number(a: float, b: float, tolerance: float | None = None) -> bool:
    return is_zero(a - b, tolerance)


def less_than(a: float, b: float, tolerance: float | None = None) -> bool:
    return a < b and not is_same_number(a, b, tolerance)


def larger_than(a: float, b: float, tolerance: float | None = None) -> bool:
    return a > b and not is_same_number(a, b, tolerance)


def sqrt3(value: float) -> float:
    """Real cube root."""
    if value < 0:
        return -((-value) ** (1 / 3))
    return value ** (1 / 3)


def deduplicate(values: Iterable[T], is_same: Callable[[T, T], bool]) -> list[T]:
    result: list[T] = []
    for value in values:
        if all(not is_same(r, value) for r in result):
            result.append(value)
    return result


def _sqrt(value: float) -> float:
    if value < 0:
        return math.nan
    return math.sqrt(value)


def _acos(value: float) -> float:
    return math.acos(min(1.0, max(-1.0, value)))


def _divide(a: float, b: float) -> float:
    if b == 0:
        return math.nan
    return a / b


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _finite(roots: Iterable[float]) -> list[float]:
    return [float(r) for r in roots if math.isfinite(r)]


def calculate_equation1(a: float, b: float, tolerance: float | None = None) -> list[float]:
    """Root of ``a x + b = 0``; empty when ``a`` is zero."""
    if is_zero(a, tolerance):
        return []
    return [-b / a]


def calculate_equation2(b: float, c: float, tolerance: float | None = None) -> list[float]:
    """Real roots of ``x^2 + b x + c = 0``.

    A double root is reported once and complex pairs are dropped.
    """
    if is_zero(c, tolerance):
        remains = calculate_equation1(1, b, tolerance)
        if any(is_zero(r, tolerance) for r in remains):
            return remains
        return [0.0, *remains]
    discriminant = b**2 - 4 * c
    if less_than(discriminant, 0, tolerance):
        return []
    if is_zero(discriminant, tolerance):
        return [-b / 2]
    h = math.sqrt(discriminant)
    # c / q is the smaller root, free of cancellation when abs(b) >> abs(c)
    q = -(b + math.copysign(h, b)) / 2
    return sorted((q, c / q), reverse=True)


def calculate_equation3(
    b: float, c: float, d: float, tolerance: float | None = None
) -> list[float]:
    """Real roots of ``x^3 + b x^2 + c x + d = 0`` (Shengjin's discriminants)."""
    if is_zero(d, tolerance):
        remains = calculate_equation2(b, c, tolerance)
        if any(is_zero(r, tolerance) for r in remains):
            return remains
        return [0.0, *remains]
    A = b * b - 3 * c
    B = b * c - 9 * d
    C = c * c - 3 * b * d
    if is_zero(A, tolerance) and is_zero(B, tolerance):
        return [-b / 3]
    f = B * B - 4 * A * C
    if is_zero(f, tolerance):
        K = _divide(B, A)
        return _finite([-b + K, -K / 2])
    t = A * b
    if f > 0:
        s = math.sqrt(f)
        y1 = t + 1.5 * (-B + s)
        y2 = t + 1.5 * (-B - s)
        return [(-b - sqrt3(y1) - sqrt3(y2)) / 3]
    p = _sqrt(A)
    if not math.isfinite(p) or p == 0:
        return []
    theta = _acos((t - 1.5 * B) / A / p) / 3
    m = math.cos(theta)
    q = math.sqrt(3) * math.sin(theta)
    return _finite(
        [
            (-b - 2 * p * m) / 3,
            (-b + p * (m + q)) / 3,
            (-b + p * (m - q)) / 3,
        ]
    )


def _quartic_candidates(b: float, c: float, d: float, e: float, tolerance: float | None) -> list[float]:
    if is_zero(e, tolerance):
        remains = calculate_equation3(b, c, d, tolerance)
        if any(is_zero(r, tolerance) for r in remains):
            return remains
        return [0.0, *remains]
    b2 = b**2
    b3 = b2 * b
    D = 3 * b2 - 8 * c
    E = -b3 + 4 * c * b - 8 * d
    F = 3 * b3 * b + 16 * c**2 - 16 * c * b2 + 16 * b * d - 64 * e
    if is_zero(E, tolerance) and is_zero(F, tolerance):
        if is_zero(D, tolerance):
            return [-b / 4]
        if D < 0:
            return []
        h = math.sqrt(D)
        return [(-b + h) / 4, (-b - h) / 4]
    E2 = E**2
    D2 = D**2
    A = D2 - 3 * F
    B = D * F - 9 * E2
    C = F**2 - 3 * D * E2
    if is_zero(A, tolerance) and is_zero(B, tolerance) and is_zero(C, tolerance):
        h = b * D
        g2 = 4 * D
        return [_divide(-h + 9 * E, g2), _divide(-h - 3 * E, g2)]
    f = B**2 - 4 * A * C
    if is_zero(f, tolerance):
        h = _divide(2 * A * E, B)
        j = -(b + h) / 4
        if _sign(B) != _sign(A):
            return [j]
        i = _sqrt(_divide(2 * B, A))
        k = -b + h
        return [(k + i) / 4, (k - i) / 4, j]
    if f > 0:
        h = math.sqrt(f)
        i = A * D
        z1 = i - 1.5 * (B - h)
        z2 = i - 1.5 * (B + h)
        j = sqrt3(z1) + sqrt3(z2)
        z = D2 - D * j + j**2 - 3 * A
        k = -b + _sign(E) * _sqrt((D + j) / 3)
        m = _sqrt((2 * D - j + 2 * _sqrt(z)) / 3)
        return [(k + m) / 4, (k - m) / 4]
    if larger_than(D, 0, tolerance) and larger_than(F, 0, tolerance):
        if is_zero(E, tolerance):
            h = 2 * math.sqrt(F)
            i = _sqrt(D + h)
            j = _sqrt(D - h)
            return [(-b + i) / 4, (-b - i) / 4, (-b + j) / 4, (-b - j) / 4]
        j = _sqrt(A)
        s = _acos(_divide(_divide(3 * B - 2 * A * D, 2 * A), j))
        h = math.cos(s / 3)
        y1 = _sign(E) * _sqrt((D - 2 * j * h) / 3)
        i = math.sqrt(3) * math.sin(s / 3)
        y2 = _sqrt((D + j * (h + i)) / 3)
        y3 = _sqrt((D + j * (h - i)) / 3)
        k1 = y2 + y3
        k2 = y2 - y3
        return [
            (-b + y1 + k1) / 4,
            (-b + y1 - k1) / 4,
            (-b - y1 + k2) / 4,
            (-b - y1 - k2) / 4,
        ]
    return []


def _residual_scale(coefficients: Sequence[float], x: float) -> float:
    degree = len(coefficients) - 1
    return max(1.0, sum(abs(k) * abs(x) ** (degree - i) for i, k in enumerate(coefficients)))


def _polish(coefficients: Sequence[float], x: float, steps: int = 3) -> float:
    """Refine a root with a few Newton steps, keeping only improvements."""
    derivative = np.polyder(np.asarray(coefficients, dtype=float))
    best = x
    best_residual = abs(float(np.polyval(coefficients, x)))
    for _ in range(steps):
        slope = float(np.polyval(derivative, best))
        if slope == 0 or best_residual == 0:
            break
        candidate = best - float(np.polyval(coefficients, best)) / slope
        residual = abs(float(np.polyval(coefficients, candidate)))
        if not math.isfinite(candidate) or residual >= best_residual:
            break
        best, best_residual = candidate, residual
    return best


def _accept_roots(
    coefficients: Sequence[float], candidates: Iterable[float], tolerance: float | None
) -> list[float]:
    accepted = []
    for x in _finite(candidates):
        x = _polish(coefficients, x)
        residual = abs(float(np.polyval(coefficients, x)))
        if residual <= ROOT_RESIDUAL_TOLERANCE * _residual_scale(coefficients, x):
            accepted.append(x)
        else:
            logger.debug("Rejected spurious root %r (residual %r)", x, residual)
    return deduplicate(accepted, lambda a, b: is_same_number(a, b, tolerance))


def calculate_equation4(
    b: float, c: float, d: float, e: float, tolerance: float | None = None
) -> list[float]:
    """Real roots of ``x^4 + b x^3 + c x^2 + d x + e = 0``.

    Candidates come from the depressed quartic and its resolvent cubic; each
    one is polished and kept only if its residual is within
    ``ROOT_RESIDUAL_TOLERANCE`` relative to the size of the polynomial's terms.
    """
    candidates = _quartic_candidates(b, c, d, e, tolerance)
    return _accept_roots([1.0, b, c, d, e], candidates, tolerance)


def solve_polynomial(coefficients: Sequence[float], tolerance: float | None = None) -> list[float]:
    """Real roots of a polynomial given highest degree first.

    Leading zero coefficients are stripped; a constant polynomial has no roots.
    """
    coefficients = [float(k) for k in coefficients]
    while coefficients and is_zero(coefficients[0], tolerance):
        coefficients.pop(0)
    if len(coefficients) <= 1:
        return []
    leading = coefficients[0]
    monic = [k / leading for k in coefficients[1:]]
    degree = len(monic)
    if degree == 1:
        return calculate_equation1(1, monic[0], tolerance)
    if degree == 2:
        return calculate_equation2(*monic, tolerance=tolerance)
    if degree == 3:
        return _accept_roots(
            [1.0, *monic], calculate_equation3(*monic, tolerance=tolerance), tolerance
        )
    if degree == 4:
        return calculate_equation4(*monic, tolerance=tolerance)
    return calculate_equation5(coefficients)


def newton_iterate(
    x0: float,
    f: Callable[[float], float],
    df: Callable[[float], float],
    tolerance: float,
    max_iterations: int | None = None,
) -> float | None:
    """Newton's method from ``x0``; None when it does not converge."""
    if max_iterations is None:
        max_iterations = NEWTON_MAX_ITERATIONS
    x = x0
    count = 0
    while True:
        g = f(x)
        if math.isnan(g):
            break
        if abs(g) < tolerance:
            break
        if count > max_iterations:
            return None
        slope = df(x)
        if is_zero(slope):
            return None
        x = x - g / slope
        count += 1
    return x


def calculate_equation5(
    coefficients: Sequence[float],
    x0: float | None = None,
    tolerance: float | None = None,
    max_iterations: int | None = None,
) -> list[float]:
    """Real roots of a polynomial of any degree (highest degree first).

    One root is located by Newton iteration from ``x0``, divided out
    synthetically, and the remaining polynomial is solved recursively.
    """
    if x0 is None:
        x0 = NEWTON_INITIAL_GUESS
    if tolerance is None:
        tolerance = LOOSE_TOLERANCE
    params = [float(k) for k in coefficients]
    if len(params) <= 5:
        return solve_polynomial(params)
    if abs(params[0]) > 1 / tolerance:
        params = [p / params[0] for p in params]
    if is_zero(params[0], tolerance):
        return calculate_equation5(params[1:], x0, tolerance, max_iterations)
    if is_zero(params[-1], tolerance):
        remains = calculate_equation5(params[:-1], x0, tolerance, max_iterations)
        if any(is_zero(r, tolerance) for r in remains):
            return remains
        return [0.0, *remains]

    polynomial = np.asarray(params)
    derivative = np.polyder(polynomial)
    x = newton_iterate(
        x0,
        lambda v: float(np.polyval(polynomial, v)),
        lambda v: float(np.polyval(derivative, v)),
        tolerance,
        max_iterations,
    )
    if x is None or not math.isfinite(x):
        logger.debug("Newton iteration did not converge from %r", x0)
        return []
    deflated: list[float] = []
    for i, p in enumerate(params[:-1]):
        deflated.append(p if i == 0 else p + deflated[i - 1] * x)
    remains = calculate_equation5(deflated, x0, tolerance, max_iterations)
    if any(is_same_number(r, x, tolerance) for r in remains):
        return remains
    return [x, *remains]


def calculate_equation_set(
    rows: Sequence[Sequence[float]], tolerance: float | None = None
) -> list[float] | None:
    """Solve the linear system ``sum(a[i][j] x[j]) + a[i][n] = 0``.

    Each row holds ``n`` coefficients followed by the constant term. Returns
    None for a non-square or singular system.
    """
    if not rows or len({len(row) for row in rows}) != 1:
        return None
    matrix = np.asarray(rows, dtype=float)
    n = matrix.shape[0]
    if matrix.ndim != 2 or matrix.shape[1] != n + 1:
        return None
    a = matrix[:, :n]
    constants = -matrix[:, n]
    if tolerance is None:
        tolerance = config.DEFAULT_TOLERANCE
    if np.linalg.matrix_rank(a, tol=tolerance) < n:
        return None
    return [float(v) for v in np.linalg.solve(a, constants)]


def equation_params_to_expression(params: Sequence[float], variable_name: str = "x") -> str:
    """Render coefficients (highest degree first) as ``2 x^2 + -3 x + 1``."""
    terms = []
    for i, param in enumerate(params):
        if param == 0:
            continue
        term = format_number(param)
        power = len(params) - i - 1
        if power == 1:
            term += " " + variable_name
        elif power > 1:
            term += f" {variable_name}^{power}"
        terms.append(term)
    return " + ".join(terms)
