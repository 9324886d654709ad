"""Centralized configuration for Aljabar.

This module defines:
- Numeric tolerances used by the root solvers and the factor algebra
- Input validation limits (length, depth, node count)
- Rewrite limits for the normalizer, expander and solver
- Cache sizes for parsing
- Regex patterns for parsing

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with ALJABAR_)
"""

import os
import re

# Version is defined in pyproject.toml [project] section
try:
    import importlib.metadata

    VERSION = importlib.metadata.version("aljabar")
except Exception:
    # Fallback if package not installed
    VERSION = "0.1.0"

# Numeric tolerance constants
DEFAULT_TOLERANCE = float(
    os.getenv("ALJABAR_DEFAULT_TOLERANCE", "1e-8")
)  # Default epsilon for is_zero and friends
LOOSE_TOLERANCE = float(
    os.getenv("ALJABAR_LOOSE_TOLERANCE", "1e-5")
)  # Newton convergence bound for degree five and above
ROOT_RESIDUAL_TOLERANCE = float(
    os.getenv("ALJABAR_ROOT_RESIDUAL_TOLERANCE", "1e-6")
)  # Accepted residual for a candidate polynomial root
NEWTON_MAX_ITERATIONS = int(os.getenv("ALJABAR_NEWTON_MAX_ITERATIONS", "100"))
NEWTON_INITIAL_GUESS = float(os.getenv("ALJABAR_NEWTON_INITIAL_GUESS", "0.5"))

# Rewrite limits
MAX_REWRITE_DEPTH = int(
    os.getenv("ALJABAR_MAX_REWRITE_DEPTH", "200")
)  # Nested re-normalizations before a node is returned as is
MAX_NORMALIZE_PASSES = int(
    os.getenv("ALJABAR_MAX_NORMALIZE_PASSES", "8")
)  # Whole-tree passes until the normalized form stops changing
MAX_EXPAND_POWER = int(
    os.getenv("ALJABAR_MAX_EXPAND_POWER", "32")
)  # Integer powers above this stay unexpanded
MAX_EXPAND_TERMS = int(
    os.getenv("ALJABAR_MAX_EXPAND_TERMS", "2000")
)  # Merged terms an expanded power may have
MAX_DIVISION_STEPS = int(
    os.getenv("ALJABAR_MAX_DIVISION_STEPS", "64")
)  # Long-division recursion bound for factor sums
MAX_SOLVE_DEPTH = int(os.getenv("ALJABAR_MAX_SOLVE_DEPTH", "32"))

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("ALJABAR_MAX_INPUT_LENGTH", "10000"))  # characters
MAX_EXPRESSION_DEPTH = int(
    os.getenv("ALJABAR_MAX_EXPRESSION_DEPTH", "100")
)  # tree depth
MAX_EXPRESSION_NODES = int(
    os.getenv("ALJABAR_MAX_EXPRESSION_NODES", "5000")
)  # total nodes

# Cache configuration
CACHE_SIZE_PARSE = int(os.getenv("ALJABAR_CACHE_SIZE_PARSE", "1024"))

# Output configuration
OUTPUT_PRECISION = int(os.getenv("ALJABAR_OUTPUT_PRECISION", "6"))

# Functions the normalizer folds when called with a literal argument
FOLDABLE_FUNCTIONS = ("sin", "cos", "tan", "ln", "exp")

# Functions the evaluator and the sympy bridge understand
KNOWN_FUNCTIONS = (
    "sin",
    "cos",
    "tan",
    "asin",
    "acos",
    "atan",
    "ln",
    "log",
    "exp",
    "sqrt",
    "abs",
)

VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Math-style input helpers: "2x", "2(", ")(", ")x"
DIGIT_LETTERS_REGEX = re.compile(r"(\d+(?:\.\d+)?)\s*([A-Za-z(])")
CLOSE_OPEN_REGEX = re.compile(r"\)\s*([A-Za-z0-9(])")
