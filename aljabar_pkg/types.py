"""Type definitions and result dataclasses for consistent API responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ExpressionResult:
    """Result of an expression transformation (optimize, expand, factor, derive)."""

    ok: bool
    result: str | None = None
    free_symbols: list[str] | None = None
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.result is not None:
            result_dict["result"] = self.result
        if self.free_symbols is not None:
            result_dict["free_symbols"] = self.free_symbols
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"ExpressionResult(ok=False, error={self.error!r})"
        parts = [f"ok={self.ok}"]
        if self.result is not None:
            parts.append(f"result={self.result!r}")
        if self.free_symbols is not None:
            parts.append(f"free_symbols={self.free_symbols!r}")
        return f"ExpressionResult({', '.join(parts)})"


@dataclass
class SolveResult:
    """Result of solving a single equation."""

    ok: bool
    result_type: str  # "equation", "unresolved", "no_real_solution"
    variable: str | None = None
    error: str | None = None
    error_code: str | None = None
    exact: list[str] | None = None
    approx: list[str | None] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok, "type": self.result_type}
        if self.variable is not None:
            result_dict["variable"] = self.variable
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        if self.exact is not None:
            result_dict["exact"] = self.exact
        if self.approx is not None:
            result_dict["approx"] = self.approx
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"SolveResult(ok=False, result_type={self.result_type!r}, error={self.error!r})"
        parts = [f"ok={self.ok}", f"result_type={self.result_type!r}"]
        if self.variable is not None:
            parts.append(f"variable={self.variable!r}")
        if self.exact is not None:
            parts.append(f"exact={self.exact!r}")
        if self.approx is not None:
            parts.append(f"approx={self.approx!r}")
        return f"SolveResult({', '.join(parts)})"


@dataclass
class SystemResult:
    """Result of solving several equations together."""

    ok: bool
    result_type: str = "system"
    error: str | None = None
    error_code: str | None = None
    solutions: list[dict[str, str]] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok, "type": self.result_type}
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        if self.solutions is not None:
            result_dict["solutions"] = self.solutions
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"SystemResult(ok=False, error={self.error!r})"
        return f"SystemResult(ok={self.ok}, solutions={self.solutions!r})"


@dataclass
class RootsResult:
    """Real roots of a numeric polynomial."""

    ok: bool
    roots: list[float] | None = None
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.roots is not None:
            result_dict["roots"] = self.roots
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"RootsResult(ok=False, error={self.error!r})"
        return f"RootsResult(ok={self.ok}, roots={self.roots!r})"


@dataclass
class EquivalenceResult:
    """Result of comparing two expressions."""

    ok: bool
    equivalent: bool | None = None
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.equivalent is not None:
            result_dict["equivalent"] = self.equivalent
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"EquivalenceResult(ok=False, error={self.error!r})"
        return f"EquivalenceResult(ok={self.ok}, equivalent={self.equivalent!r})"


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ParseError(Exception):
    """Raised when parsing fails."""

    def __init__(self, message: str, code: str = "PARSE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class EvaluationError(Exception):
    """Raised when an expression cannot be evaluated to a real number."""

    def __init__(self, message: str, code: str = "EVALUATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

