"""Test that API functions return typed dataclasses."""

from aljabar_pkg.api import (
    check_equivalence,
    differentiate,
    expand,
    factorize,
    find_roots,
    optimize,
    solve_equation,
    solve_system,
)
from aljabar_pkg.types import (
    EquivalenceResult,
    ExpressionResult,
    RootsResult,
    SolveResult,
    SystemResult,
)


class TestAPITypedReturns:
    """Test that all API functions return typed dataclasses."""

    def test_optimize_returns_expression_result(self):
        """Test that optimize() returns ExpressionResult."""
        result = optimize("a + a")
        assert isinstance(result, ExpressionResult)
        assert result.ok is True
        assert result.result == "2 * a"
        assert result.free_symbols == ["a"]

    def test_optimize_with_variable(self):
        result = optimize("a*x + b*x", variable="x")
        assert result.result == "(a + b) * x"

    def test_optimize_error_returns_expression_result(self):
        """Test that optimize() errors return ExpressionResult."""
        result = optimize("(x")
        assert isinstance(result, ExpressionResult)
        assert result.ok is False
        assert result.error_code == "UNBALANCED_PARENS"

    def test_expand(self):
        result = expand("(a + b)^2")
        assert isinstance(result, ExpressionResult)
        assert result.result == "(a ** 2 + (2 * a) * b) + b ** 2"

    def test_factorize(self):
        assert factorize("a*b + a*c", by="a").result == "a * (b + c)"
        assert factorize("a*b + a*c").result == "a * (b + c)"

    def test_factorize_failure(self):
        result = factorize("x / y")
        assert result.ok is False
        assert result.error_code == "NOT_FACTORABLE"

    def test_solve_equation_returns_solve_result(self):
        """Test that solve_equation() returns SolveResult."""
        result = solve_equation("x^2 = 9")
        assert isinstance(result, SolveResult)
        assert result.ok is True
        assert result.result_type == "equation"
        assert result.variable == "x"
        assert result.exact == ["3", "-3"]
        assert result.approx == ["3", "-3"]

    def test_solve_equation_approximations(self):
        result = solve_equation("2*x = 3/x")
        assert sorted(result.approx) == ["-1.22474", "1.22474"]

    def test_solve_equation_symbolic(self):
        result = solve_equation("x + y = 10", "x")
        assert result.exact == ["-y + 10"]
        assert result.approx == [None]

    def test_solve_equation_no_real_solution(self):
        result = solve_equation("x^2 = -1")
        assert result.ok is True
        assert result.result_type == "no_real_solution"
        assert result.exact == []

    def test_solve_equation_contradiction(self):
        result = solve_equation("x = x + 1")
        assert result.ok is True
        assert result.result_type == "no_real_solution"
        assert result.exact == []

    def test_solve_equation_unresolved(self):
        result = solve_equation("2^x = 8")
        assert result.result_type == "unresolved"
        assert result.exact == ["2 ** x = 8"]

    def test_solve_equation_error_returns_solve_result(self):
        """Test that solve_equation() errors return SolveResult."""
        result = solve_equation("x = x = 1")
        assert isinstance(result, SolveResult)
        assert result.ok is False
        assert result.error_code == "INVALID_FORMAT"

    def test_solve_system_returns_system_result(self):
        """Test that solve_system() returns SystemResult."""
        result = solve_system("x+y=10, x-y=2")
        assert isinstance(result, SystemResult)
        assert result.ok is True
        assert result.solutions == [{"x": "6", "y": "4"}]

    def test_solve_system_accepts_list(self):
        result = solve_system(["x^2 = y", "y = 4"])
        assert {s["x"] for s in result.solutions} == {"2", "-2"}

    def test_solve_system_inconsistent(self):
        result = solve_system("x = 1, x = 2")
        assert result.ok is True
        assert result.solutions == []

    def test_find_roots_returns_roots_result(self):
        """Test that find_roots() returns RootsResult."""
        result = find_roots([1, 0, -1])
        assert isinstance(result, RootsResult)
        assert result.roots == [1.0, -1.0]

    def test_differentiate(self):
        result = differentiate("x^3")
        assert isinstance(result, ExpressionResult)
        assert result.result == "3 * x ** 2"

    def test_check_equivalence_returns_equivalence_result(self):
        result = check_equivalence("(x + 1)^2", "x^2 + 2*x + 1")
        assert isinstance(result, EquivalenceResult)
        assert result.equivalent is True
        assert check_equivalence("x", "y").equivalent is False

    def test_to_dict(self):
        assert optimize("a + 0").to_dict() == {"ok": True, "result": "a", "free_symbols": ["a"]}
        data = solve_equation("x + 1 = 0").to_dict()
        assert data["type"] == "equation"
        assert data["exact"] == ["-1"]
        assert find_roots([]).to_dict()["error_code"] == "INVALID_COEFFICIENTS"
