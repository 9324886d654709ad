"""Aljabar package: expression normalizer, expander, factor algebra and equation solver."""

__all__ = [
    "config",
    "expression",
    "parser",
    "numeric",
    "factorization",
    "optimizer",
    "expansion",
    "calculus",
    "evaluator",
    "solver",
    "bridge",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "optimize",
    "expand",
    "factorize",
    "solve_equation",
    "solve_system",
    "find_roots",
    "differentiate",
    "check_equivalence",
]
