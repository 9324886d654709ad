"""Unit tests for equation and system solving."""

import unittest

from aljabar_pkg.evaluator import evaluate_expression
from aljabar_pkg.expression import BinaryExpression, Equation, Identifier, Literal, iterate_expression
from aljabar_pkg.parser import parse_equation, parse_expression, print_expression
from aljabar_pkg.solver import (
    compose_equation,
    compose_expression,
    equation_has_variable,
    get_equation_variables,
    solve_equation,
    solve_equation_system,
    solve_equations,
)

x = Identifier("x")


def solve(text, variable="x"):
    return solve_equation(parse_equation(text), variable)


def values(solutions):
    return sorted(evaluate_expression(s.right) for s in solutions)


class TestComposition(unittest.TestCase):
    def test_compose_expression(self):
        expr = compose_expression(parse_expression("x + y"), {"x": Literal(2)})
        self.assertEqual(print_expression(expr), "2 + y")

    def test_compose_equation(self):
        eq = compose_equation(parse_equation("x = y"), {"y": parse_expression("a * b")})
        self.assertEqual(eq, Equation(x, parse_expression("a * b")))

    def test_variables(self):
        eq = parse_equation("x + y = z")
        self.assertEqual(get_equation_variables(eq), ["x", "y", "z"])
        self.assertTrue(equation_has_variable(eq, "z"))
        self.assertFalse(equation_has_variable(eq, "w"))


class TestPolynomialEquations(unittest.TestCase):
    """Test equations that reduce to polynomials in the variable."""

    def test_linear(self):
        self.assertEqual(solve("2*x + 1 = 0"), [Equation(x, Literal(-0.5))])
        self.assertEqual(solve("-x = 4"), [Equation(x, Literal(-4))])

    def test_quadratic(self):
        self.assertEqual(solve("x**2 = 9"), [Equation(x, Literal(3)), Equation(x, Literal(-3))])

    def test_quadratic_without_real_roots(self):
        self.assertEqual(solve("x**2 + 1 = 0"), [])

    def test_product_form(self):
        self.assertEqual(values(solve("(x + 1) * x = 0")), [-1.0, 0.0])

    def test_rational(self):
        roots = values(solve("2*x = 3/x"))
        self.assertEqual(len(roots), 2)
        self.assertAlmostEqual(roots[0], -1.224744871391589)
        self.assertAlmostEqual(roots[1], 1.224744871391589)

    def test_reciprocal(self):
        self.assertEqual(values(solve("1/x = 2")), [0.5])

    def test_cubic(self):
        roots = values(solve("x**3 - 6*x**2 + 11*x - 6 = 0"))
        self.assertEqual(len(roots), 3)
        for actual, expected in zip(roots, [1, 2, 3]):
            self.assertAlmostEqual(actual, expected, places=6)

    def test_quartic(self):
        self.assertEqual(values(solve("x**4 - 5*x**2 + 4 = 0")), [-2.0, -1.0, 1.0, 2.0])

    def test_symbolic_linear(self):
        self.assertEqual(print_expression(solve("x + y = 10")[0].right), "-y + 10")
        [solution] = solve("a*x + b = 0")
        value = evaluate_expression(solution.right, {"a": 2, "b": 3})
        self.assertAlmostEqual(value, -1.5)

    def test_symbolic_quadratic(self):
        solutions = solve("x**2 + b*x + c = 0")
        self.assertEqual(len(solutions), 2)
        found = sorted(evaluate_expression(s.right, {"b": -3, "c": 2}) for s in solutions)
        self.assertAlmostEqual(found[0], 1.0)
        self.assertAlmostEqual(found[1], 2.0)


class TestIsolation(unittest.TestCase):
    """Test equations solved by isolating rewrites."""

    def test_fractional_power(self):
        self.assertEqual(solve("x**0.5 = 3"), [Equation(x, Literal(9))])

    def test_fractional_power_of_negative(self):
        self.assertEqual(solve("x**0.5 = -3"), [])

    def test_radical_of_sum(self):
        self.assertEqual(solve("(x + 1)**0.5 = 2"), [Equation(x, Literal(3))])

    def test_variable_exponent_is_unresolved(self):
        [equation] = solve("2**x = 8")
        self.assertEqual(print_expression(equation.left), "2 ** x")
        self.assertNotEqual(equation.left, x)

    def test_contradiction_has_no_solution(self):
        self.assertEqual(solve("x = x + 1"), [])
        self.assertEqual(solve("0*x = 5"), [])
        self.assertEqual(solve("1 = 2"), [])

    def test_identity_is_kept(self):
        self.assertNotEqual(solve("x = x"), [])

    def test_reciprocal_equal_to_zero(self):
        self.assertEqual(solve("1/x = 0"), [])
        self.assertEqual(solve("3/(x + 1) = 0"), [])

    def test_no_branch_divides_by_zero(self):
        for text in ["1/x = 0", "2/x + 1 = 1", "(x + 1)/x = 1", "a/x = 0"]:
            for solution in solve(text):
                for node in iterate_expression(solution.right):
                    if isinstance(node, BinaryExpression) and node.operator == "/":
                        self.assertNotEqual(node.right, Literal(0), text)


class TestSolveEquations(unittest.TestCase):
    """Test independent solving of several equations."""

    def test_cartesian_product(self):
        result = solve_equations([parse_equation("x**2 = 4"), parse_equation("y = 3")])
        self.assertEqual(
            result,
            [
                {"x": Literal(2), "y": Literal(3)},
                {"x": Literal(-2), "y": Literal(3)},
            ],
        )

    def test_no_solution(self):
        self.assertEqual(solve_equations([parse_equation("x**2 = -1")]), [])

    def test_unresolved_slot(self):
        [branch] = solve_equations([parse_equation("2**x = 8")], {"x"})
        self.assertIsInstance(branch["x"], Equation)

    def test_shared_variable_takes_next_free(self):
        [branch] = solve_equations(
            [parse_equation("x + 1 = 0"), parse_equation("x + y = 0")], {"x", "y"}
        )
        self.assertEqual(branch["x"], Literal(-1))
        self.assertAlmostEqual(evaluate_expression(branch["y"], {"x": 3}), -3)

    def test_every_variable_taken(self):
        first, second = parse_equation("x = 1"), parse_equation("x = 2 * y")
        [branch] = solve_equations([first, second], {"x"})
        self.assertEqual(branch["x"], Literal(1))
        self.assertEqual(len(branch), 2)
        [kept] = [value for key, value in branch.items() if key != "x"]
        self.assertEqual(kept, second)

    def test_no_slot_is_overwritten(self):
        equations = [parse_equation(text) for text in ["a + b = 1", "a - b = 3", "a * b = 2"]]
        [branch] = solve_equations(equations, ["a", "b"])
        self.assertEqual(len(branch), 3)
        self.assertIn("a * b = 2", branch)


class TestSystems(unittest.TestCase):
    """Test substitution-based system solving."""

    def test_linear_system(self):
        result = solve_equation_system(
            [parse_equation("x + y = 10"), parse_equation("x - y = 2")]
        )
        self.assertEqual(result, [{"x": Literal(6), "y": Literal(4)}])

    def test_branches(self):
        result = solve_equation_system([parse_equation("x**2 = y"), parse_equation("y = 4")])
        self.assertEqual(
            result,
            [
                {"y": Literal(4), "x": Literal(2)},
                {"y": Literal(4), "x": Literal(-2)},
            ],
        )

    def test_inconsistent(self):
        result = solve_equation_system([parse_equation("x = 1"), parse_equation("x = 2")])
        self.assertEqual(result, [])


if __name__ == "__main__":
    unittest.main()
