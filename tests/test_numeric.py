"""Unit tests for tolerance helpers and polynomial root solvers."""

import math
import unittest

from aljabar_pkg.numeric import (
    calculate_equation1,
    calculate_equation2,
    calculate_equation3,
    calculate_equation4,
    calculate_equation5,
    calculate_equation_set,
    deduplicate,
    equation_params_to_expression,
    is_same_number,
    is_zero,
    larger_than,
    less_than,
    newton_iterate,
    solve_polynomial,
    sqrt3,
)


def _quartic(b, c, d, e, x):
    return x**4 + b * x**3 + c * x**2 + d * x + e


class TestTolerance(unittest.TestCase):
    """Test epsilon comparisons."""

    def test_is_zero_default(self):
        self.assertTrue(is_zero(0))
        self.assertTrue(is_zero(1e-9))
        self.assertTrue(is_zero(-1e-9))
        self.assertFalse(is_zero(1e-7))

    def test_is_zero_custom_tolerance(self):
        self.assertTrue(is_zero(1e-3, 1e-2))
        self.assertFalse(is_zero(1e-1, 1e-2))

    def test_boundary_is_inclusive(self):
        self.assertTrue(is_zero(0.5, 0.5))

    def test_comparisons(self):
        self.assertTrue(is_same_number(1.0, 1.0 + 1e-10))
        self.assertFalse(less_than(1.0, 1.0 + 1e-10))
        self.assertTrue(less_than(1.0, 2.0))
        self.assertTrue(larger_than(2.0, 1.0))
        self.assertFalse(larger_than(1.0, 1.0))

    def test_sqrt3(self):
        self.assertAlmostEqual(sqrt3(27), 3.0)
        self.assertAlmostEqual(sqrt3(-8), -2.0)
        self.assertEqual(sqrt3(0), 0.0)

    def test_deduplicate(self):
        values = deduplicate([1.0, 1.0 + 1e-10, 2.0], is_same_number)
        self.assertEqual(values, [1.0, 2.0])


class TestLowDegree(unittest.TestCase):
    """Test linear and quadratic closed forms."""

    def test_linear(self):
        self.assertEqual(calculate_equation1(2, -4), [2.0])
        self.assertEqual(calculate_equation1(0, 1), [])

    def test_quadratic_two_roots(self):
        self.assertEqual(calculate_equation2(-3, 2), [2.0, 1.0])

    def test_quadratic_double_root(self):
        self.assertEqual(calculate_equation2(2, 1), [-1.0])

    def test_quadratic_no_real_roots(self):
        self.assertEqual(calculate_equation2(0, 1), [])

    def test_quadratic_zero_constant(self):
        self.assertEqual(calculate_equation2(1, 0), [0.0, -1.0])

    def test_quadratic_roots_are_valid(self):
        for b, c in [(-3, 2), (0.5, -7.25), (10, 1), (-1e3, 3)]:
            for r in calculate_equation2(b, c):
                self.assertTrue(is_zero(r * r + b * r + c, 1e-6 * max(1, r * r)))

    def test_quadratic_with_dominant_linear_term(self):
        large, small = sorted(calculate_equation2(1e6, 1))
        self.assertTrue(is_zero(small * small + 1e6 * small + 1, 1e-8))
        self.assertAlmostEqual(small, -1e-6, places=15)
        self.assertAlmostEqual(large * small, 1.0)


class TestCubicAndQuartic(unittest.TestCase):
    """Test cubic and quartic root extraction."""

    def test_cubic_three_real_roots(self):
        roots = sorted(calculate_equation3(-6, 11, -6))
        self.assertEqual(len(roots), 3)
        for actual, expected in zip(roots, [1, 2, 3]):
            self.assertAlmostEqual(actual, expected, places=9)

    def test_cubic_zero_constant(self):
        self.assertEqual(sorted(calculate_equation3(0, -1, 0)), [-1.0, 0.0, 1.0])

    def test_biquadratic(self):
        self.assertEqual(calculate_equation4(0, -5, 0, 4), [2.0, -2.0, 1.0, -1.0])

    def test_quartic_residual_gate(self):
        # (x - 1)(x - 2)(x - 3)(x - 4)
        b, c, d, e = -10, 35, -50, 24
        roots = calculate_equation4(b, c, d, e)
        for r in roots:
            self.assertTrue(is_zero(_quartic(b, c, d, e, r), 1e-6 * max(1, r**4)))
            self.assertTrue(any(abs(r - k) < 1e-6 for k in (1, 2, 3, 4)))

    def test_quartic_no_real_roots(self):
        self.assertEqual(calculate_equation4(0, 0, 0, 1), [])

    def test_outputs_are_finite(self):
        for args in [(1, 1, 1, 1), (0, 0, 0, 0), (3, -2, 7, 0.5), (1e-12, 0, 0, -1)]:
            for r in calculate_equation4(*args):
                self.assertTrue(math.isfinite(r))


class TestSolvePolynomial(unittest.TestCase):
    """Test the general entry point."""

    def test_strips_leading_zeros(self):
        self.assertEqual(solve_polynomial([0, 0, 1, -1]), [1.0])

    def test_constant_has_no_roots(self):
        self.assertEqual(solve_polynomial([5]), [])
        self.assertEqual(solve_polynomial([]), [])

    def test_non_monic_quadratic(self):
        self.assertEqual(solve_polynomial([2, 0, -8]), [2.0, -2.0])

    def test_cubic(self):
        roots = sorted(solve_polynomial([1, -6, 11, -6]))
        for actual, expected in zip(roots, [1, 2, 3]):
            self.assertAlmostEqual(actual, expected, places=6)

    def test_quintic_with_zero_root(self):
        roots = sorted(solve_polynomial([1, 0, 0, 0, -1, 0]))
        self.assertEqual(len(roots), 3)
        for actual, expected in zip(roots, [-1, 0, 1]):
            self.assertAlmostEqual(actual, expected, places=9)

    def test_sextic_by_newton(self):
        # (x^2 - 1)(x^2 - 4)(x^2 - 9)
        coefficients = [1, 0, -14, 0, 49, 0, -36]
        roots = calculate_equation5(coefficients)
        self.assertTrue(roots)
        for r in roots:
            self.assertTrue(any(abs(r - k) < 1e-3 for k in (-3, -2, -1, 1, 2, 3)))


class TestNewton(unittest.TestCase):
    """Test Newton iteration."""

    def test_converges(self):
        x = newton_iterate(1.0, lambda v: v * v - 2, lambda v: 2 * v, 1e-12)
        self.assertAlmostEqual(x, math.sqrt(2), places=10)

    def test_zero_derivative(self):
        self.assertIsNone(newton_iterate(0.0, lambda v: v * v + 1, lambda v: 2 * v, 1e-9))

    def test_iteration_limit(self):
        # x^2 + 1 has no real root, iteration wanders until the limit
        result = newton_iterate(0.5, lambda v: v * v + 1, lambda v: 2 * v, 1e-12, 20)
        self.assertIsNone(result)


class TestLinearSystems(unittest.TestCase):
    """Test linear equation sets."""

    def test_two_by_two(self):
        # x + y - 10 = 0, x - y - 2 = 0
        x, y = calculate_equation_set([[1, 1, -10], [1, -1, -2]])
        self.assertAlmostEqual(x, 6)
        self.assertAlmostEqual(y, 4)

    def test_singular(self):
        self.assertIsNone(calculate_equation_set([[1, 1, -1], [2, 2, -2]]))

    def test_not_square(self):
        self.assertIsNone(calculate_equation_set([[1, 1, 1, 0]]))
        self.assertIsNone(calculate_equation_set([]))


class TestParamsToExpression(unittest.TestCase):
    def test_rendering(self):
        self.assertEqual(equation_params_to_expression([2, -3, 1]), "2 x^2 + -3 x + 1")
        self.assertEqual(equation_params_to_expression([1, 0, -4], "t"), "1 t^2 + -4")


if __name__ == "__main__":
    unittest.main()
