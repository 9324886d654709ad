"""Command line interface for Aljabar."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from . import api
from . import config as _config
from .config import VAR_NAME_RE, VERSION
from .logging_config import get_logger, setup_logging
from .parser import format_number
from .types import (
    EquivalenceResult,
    ExpressionResult,
    RootsResult,
    SolveResult,
    SystemResult,
)

logger = get_logger("cli")


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running Aljabar health check...")
    print("-" * 50)

    try:
        import sympy as sp

        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        checks_failed += 1

    try:
        import numpy

        print(f"[OK] NumPy {numpy.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] NumPy import failed: {e}")
        checks_failed += 1

    result = api.optimize("a + a")
    if result.ok and result.result == "2 * a":
        print("[OK] Basic simplification works")
        checks_passed += 1
    else:
        print(f"[FAIL] Simplification check failed: {result}")
        checks_failed += 1

    solved = api.solve_equation("x + 1 = 0", "x")
    if solved.ok and solved.exact == ["-1"]:
        print("[OK] Basic solving works")
        checks_passed += 1
    else:
        print(f"[FAIL] Solving check failed: {solved}")
        checks_failed += 1

    equivalence = api.check_equivalence("(x + 1)^2", "x^2 + 2*x + 1")
    if equivalence.ok and equivalence.equivalent:
        print("[OK] SymPy equivalence check works")
        checks_passed += 1
    else:
        print(f"[FAIL] Equivalence check failed: {equivalence}")
        checks_failed += 1

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def _format_human(result: Any) -> str:
    if not result.ok:
        return f"Error: {result.error}"
    if isinstance(result, ExpressionResult):
        return result.result
    if isinstance(result, SolveResult):
        if result.result_type == "no_real_solution":
            return "No real solution"
        if result.result_type == "unresolved":
            return "\n".join(result.exact)
        lines = []
        for exact, approx in zip(result.exact, result.approx):
            line = f"{result.variable} = {exact}"
            if approx is not None and approx != exact:
                line += f"  (~ {approx})"
            lines.append(line)
        return "\n".join(lines)
    if isinstance(result, SystemResult):
        if not result.solutions:
            return "No solution"
        return "\n".join(
            ", ".join(f"{name} = {value}" for name, value in branch.items())
            for branch in result.solutions
        )
    if isinstance(result, RootsResult):
        if not result.roots:
            return "No real roots"
        precision = _config.OUTPUT_PRECISION
        return "Roots: " + ", ".join(format_number(r, precision) for r in result.roots)
    if isinstance(result, EquivalenceResult):
        return "Equivalent" if result.equivalent else "Not equivalent"
    return str(result)


def print_result(result: Any, output_format: str = "human") -> None:
    """Print a result object in the requested format."""
    if output_format == "json":
        print(json.dumps(result.to_dict()))
    else:
        print(_format_human(result))


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for Aljabar CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        prog="aljabar", description="Symbolic algebra and equation solving"
    )
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("--optimize", type=str, metavar="EXPR", help="Simplify an expression")
    actions.add_argument("--expand", type=str, metavar="EXPR", help="Expand an expression")
    actions.add_argument(
        "--factor", type=str, metavar="EXPR", help="Group terms around shared factors"
    )
    actions.add_argument("--solve", type=str, metavar="EQ", help="Solve one equation")
    actions.add_argument(
        "--system", type=str, nargs="+", metavar="EQ", help="Solve equations together"
    )
    actions.add_argument(
        "--roots",
        type=float,
        nargs="+",
        metavar="C",
        help="Real roots of a polynomial, coefficients highest degree first",
    )
    actions.add_argument("--derive", type=str, metavar="EXPR", help="Differentiate an expression")
    actions.add_argument(
        "--equivalent",
        type=str,
        nargs=2,
        metavar="EXPR",
        help="Check whether two expressions are algebraically equal",
    )
    actions.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    parser.add_argument("--variable", type=str, help="Target variable")
    parser.add_argument("--by", type=str, help="Factor to pull out with --factor")
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "--tolerance", type=float, help="Override the zero tolerance (default: 1e-8)"
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Set output precision (significant digits)"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)

    # Apply CLI configuration overrides
    if args.tolerance is not None:
        if args.tolerance <= 0:
            print("Error: --tolerance must be positive", file=sys.stderr)
            return 2
        _config.DEFAULT_TOLERANCE = args.tolerance
    for flag, name in (("--variable", args.variable), ("--by", args.by)):
        if name is not None and not VAR_NAME_RE.match(name):
            print(f"Error: {flag} must be a variable name, got {name!r}", file=sys.stderr)
            return 2
    if args.precision and args.precision > 0:
        _config.OUTPUT_PRECISION = int(args.precision)

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()

    if args.optimize is not None:
        result = api.optimize(args.optimize, args.variable)
    elif args.expand is not None:
        result = api.expand(args.expand)
    elif args.factor is not None:
        result = api.factorize(args.factor, args.by)
    elif args.solve is not None:
        result = api.solve_equation(args.solve, args.variable)
    elif args.system is not None:
        variables = [args.variable] if args.variable else None
        result = api.solve_system(args.system, variables)
    elif args.roots is not None:
        result = api.find_roots(args.roots)
    elif args.derive is not None:
        result = api.differentiate(args.derive, args.variable)
    elif args.equivalent is not None:
        result = api.check_equivalence(*args.equivalent)
    else:
        parser.print_help()
        return 0

    logger.debug("Result: %r", result)
    print_result(result, output_format=args.format)
    return 0 if result.ok else 1


if __name__ == "__main__":
    """Allow running the CLI module directly with python -m aljabar_pkg.cli"""
    sys.exit(main_entry())
