"""Expression normalizer.

``optimize_expression`` rewrites a tree bottom-up: children are normalized
first, then the node is matched against an ordered list of rewrite rules.
The first rule that applies produces a new node, which is normalized again.
When a target-variable predicate is supplied, terms containing the variable
are gathered to the left and their coefficients combined, which is the shape
the equation solver needs.
"""

from __future__ import annotations

import math
from typing import Callable, Optional

from .config import FOLDABLE_FUNCTIONS, MAX_NORMALIZE_PASSES, MAX_REWRITE_DEPTH
from .expression import (
    BinaryExpression,
    CallExpression,
    Equation,
    Expression,
    HasVariable,
    Identifier,
    Literal,
    UnaryExpression,
    binary,
    get_reverse_operator,
    is_binary,
    is_negation,
    negate,
)
from .factorization import (
    Factor,
    divide,
    expression_to_factors,
    extract_factors,
    factor_to_expression,
    factors_to_expression,
    optimize_factors,
)
from .logging_config import get_logger
from .numeric import is_zero

logger = get_logger("optimizer")

_FOLDED_CALLS: dict[str, Callable[[float], float]] = {
    name: getattr(math, "log" if name == "ln" else name) for name in FOLDABLE_FUNCTIONS
}


def _fold(operator: str, a: float, b: float) -> Optional[float]:
    """Evaluate a literal operation; None when the result is not a finite real."""
    a, b = float(a), float(b)
    try:
        if operator == "+":
            value = a + b
        elif operator == "-":
            value = a - b
        elif operator == "*":
            value = a * b
        elif operator == "/":
            value = a / b
        elif operator == "**":
            value = a**b
        else:
            return None
    except (ZeroDivisionError, OverflowError):
        return None
    if isinstance(value, complex) or not math.isfinite(value):
        return None
    return value


def _is_literal(expr: Expression, value: float | None = None) -> bool:
    if not isinstance(expr, Literal):
        return False
    return value is None or expr.value == value


def _is_numeric(expr: Expression) -> bool:
    """A literal, or a negated literal."""
    return isinstance(expr, Literal) or (
        isinstance(expr, UnaryExpression) and isinstance(expr.argument, Literal)
    )


def should_be_after(e1: Expression, e2: Expression) -> bool:
    """Canonical ordering test: True when ``e1`` belongs after ``e2``.

    Identifiers order by name; negations order by their argument; binary
    nodes compare left operands first and right operands on a tie.
    """
    if isinstance(e1, UnaryExpression):
        return should_be_after(e1.argument, e2)
    if isinstance(e2, UnaryExpression):
        return should_be_after(e1, e2.argument)
    if isinstance(e1, BinaryExpression) and isinstance(e2, BinaryExpression):
        if should_be_after(e1.left, e2.left):
            return True
        if e1 == e2:
            return should_be_after(e1.right, e2.right)
        return False
    if isinstance(e1, Identifier) and isinstance(e2, Identifier):
        return e1.name > e2.name
    return False


class _Normalizer:
    def __init__(self, has_variable: HasVariable = None):
        self.has_variable = has_variable
        self.depth = 0
        # normalized node for every node seen so far, results map to themselves
        self.cache: dict[Expression, Expression] = {}
        self.binary_rules = (
            self._fold_literals,
            self._zero_identities,
            self._unit_identities,
            self._sign_identities,
            self._same_operands,
            self._negated_same_operands,
            self._subtraction_forms,
            self._left_binary_rules,
            self._right_binary_rules,
            self._commutative_order,
            self._negated_operands,
            self._fraction_sums,
            self._distribute_products,
            self._combine_variable_terms,
            self._distribute_powers,
            self._square_binomial,
            self._cancel_fractions,
            self._merge_like_terms,
            self._extract_perfect_powers,
            self._extract_common_denominator_factor,
        )

    def has(self, expr: Expression) -> bool:
        return self.has_variable is not None and self.has_variable(expr)

    def lacks(self, expr: Expression) -> bool:
        """True when no predicate is set or ``expr`` does not contain the variable."""
        return self.has_variable is None or not self.has_variable(expr)

    def optimize(self, expr: Expression) -> Expression:
        if isinstance(expr, (Literal, Identifier)):
            return expr
        known = self.cache.get(expr)
        if known is not None:
            return known
        if self.depth >= MAX_REWRITE_DEPTH:
            logger.debug("Rewrite depth limit reached, returning node unchanged")
            return expr
        self.depth += 1
        try:
            if isinstance(expr, BinaryExpression):
                result = self._optimize_binary(expr)
            elif isinstance(expr, UnaryExpression):
                result = self._optimize_unary(expr)
            elif isinstance(expr, CallExpression):
                result = self._optimize_call(expr)
            else:
                return expr
        finally:
            self.depth -= 1
        self.cache[expr] = result
        self.cache.setdefault(result, result)
        return result

    def _optimize_binary(self, expr: BinaryExpression) -> Expression:
        e = BinaryExpression(expr.operator, self.optimize(expr.left), self.optimize(expr.right))
        if e.operator == "/" and isinstance(e.right, Literal) and e.right.value == 0:
            return e
        for rule in self.binary_rules:
            result = rule(e)
            if result is not None:
                return result
        return e

    # 1 + 2 -> 3
    def _fold_literals(self, e: BinaryExpression) -> Optional[Expression]:
        if isinstance(e.left, Literal) and isinstance(e.right, Literal):
            value = _fold(e.operator, e.left.value, e.right.value)
            if value is not None:
                return Literal(value)
        return None

    def _zero_identities(self, e: BinaryExpression) -> Optional[Expression]:
        if isinstance(e.left, Literal) and is_zero(e.left.value):
            if e.operator == "+":
                return e.right
            if e.operator == "-":
                return self.optimize(negate(e.right))
            if e.operator in ("*", "/"):
                return e.left
        if isinstance(e.right, Literal) and is_zero(e.right.value):
            if e.operator in ("+", "-"):
                return e.left
            if e.operator == "*":
                return e.right
            if e.operator == "**":
                return Literal(1)
        return None

    def _unit_identities(self, e: BinaryExpression) -> Optional[Expression]:
        if _is_literal(e.right, 1) and e.operator in ("*", "/", "**"):
            return e.left
        if _is_literal(e.left, 1) and e.operator == "*":
            return e.right
        return None

    def _sign_identities(self, e: BinaryExpression) -> Optional[Expression]:
        # a * -1 -> -a, a / -1 -> -a
        if _is_literal(e.right, -1) and e.operator in ("*", "/"):
            return self.optimize(negate(e.left))
        if _is_literal(e.left, -1) and e.operator == "*":
            return self.optimize(negate(e.right))
        return None

    def _same_operands(self, e: BinaryExpression) -> Optional[Expression]:
        if e.left != e.right:
            return None
        if e.operator == "+":
            return self.optimize(binary(Literal(2), "*", e.left))
        if e.operator == "-":
            return Literal(0)
        if e.operator == "*":
            return self.optimize(binary(e.left, "**", Literal(2)))
        if e.operator == "/":
            return Literal(1)
        return None

    def _negated_same_operands(self, e: BinaryExpression) -> Optional[Expression]:
        if not (is_negation(e.left) and e.left.argument == e.right):
            return None
        if e.operator == "+":
            return Literal(0)
        if e.operator == "-":
            return self.optimize(binary(Literal(-2), "*", self.optimize(e.left.argument)))
        if e.operator == "/":
            return Literal(-1)
        return None

    def _subtraction_forms(self, e: BinaryExpression) -> Optional[Expression]:
        # a - 2 -> a + -2
        if e.operator == "-" and isinstance(e.right, Literal):
            return self.optimize(binary(e.left, "+", Literal(-e.right.value)))
        # a / 2 -> 0.5 * a, 6 * a / 2 -> 3 * a
        if e.operator == "/" and isinstance(e.right, Literal):
            factors = expression_to_factors(e.left)
            if factors:
                k = e.right.value
                scaled = [Factor(f.coefficient / k, f.bases) for f in factors]
                return self.optimize(factors_to_expression(scaled))
            return self.optimize(binary(e.left, "*", Literal(1 / e.right.value)))
        # a - -b -> a + b
        if e.operator == "-" and is_negation(e.right):
            return self.optimize(binary(e.left, "+", self.optimize(e.right.argument)))
        # a - 2 * b -> a + -2 * b
        if e.operator == "-" and is_binary(e.right, "*") and isinstance(e.right.left, Literal):
            return self.optimize(
                binary(
                    e.left,
                    "+",
                    self.optimize(
                        binary(Literal(-e.right.left.value), "*", self.optimize(e.right.right))
                    ),
                )
            )
        return None

    def _left_binary_rules(self, e: BinaryExpression) -> Optional[Expression]:
        left = e.left
        if not isinstance(left, BinaryExpression):
            return None
        op = e.operator
        additive = op in ("+", "-")
        left_additive = left.operator in ("+", "-")

        # (a + b) - b -> a
        if op == "-" and left.operator == "+" and left.right == e.right:
            return self.optimize(left.left)
        # (a - b) - a -> -b
        if op == "-" and left.operator == "-" and left.left == e.right:
            return self.optimize(negate(self.optimize(left.right)))
        # (a + -b) + b -> a
        if op == "+" and left.operator == "+" and is_negation(left.right) and left.right.argument == e.right:
            return self.optimize(left.left)
        # (a - b) + b -> a
        if op == "+" and left.operator == "-" and left.right == e.right:
            return self.optimize(left.left)
        # (a + b) + -b -> a
        if op == "+" and left.operator == "+" and is_negation(e.right) and left.right == e.right.argument:
            return self.optimize(left.left)

        # (a + 1) + 2 -> a + 3, (a + 1) - 2 -> a + -1
        if additive and left_additive and isinstance(left.right, Literal) and isinstance(e.right, Literal):
            value = left.right.value * (-1 if left.operator == "-" else 1) + e.right.value * (
                -1 if op == "-" else 1
            )
            if value == 0:
                return self.optimize(left.left)
            return self.optimize(
                binary(self.optimize(left.left), "+" if value > 0 else "-", Literal(abs(value)))
            )
        # (2 * a) * 3 -> 6 * a, (2 + a) + 3 -> 5 + a
        if op in ("+", "*") and left.operator == op and isinstance(left.left, Literal) and isinstance(e.right, Literal):
            value = _fold(op, left.left.value, e.right.value)
            if value is not None:
                return self.optimize(binary(Literal(value), op, self.optimize(left.right)))
        # (a * 2) * 3 -> 6 * a, (a + 2) + 3 -> 5 + a
        if op in ("+", "*") and left.operator == op and isinstance(left.right, Literal) and isinstance(e.right, Literal):
            value = _fold(op, left.right.value, e.right.value)
            if value is not None:
                return self.optimize(binary(Literal(value), op, self.optimize(left.left)))

        # (1 + 2 * a) + a -> 1 + 3 * a
        if (
            op == "+"
            and left.operator == "+"
            and isinstance(left.left, Literal)
            and is_binary(left.right, "*")
            and isinstance(left.right.left, Literal)
            and left.right.right == e.right
        ):
            return self.optimize(
                binary(
                    left.left,
                    "+",
                    self.optimize(
                        binary(Literal(left.right.left.value + 1), "*", self.optimize(left.right.right))
                    ),
                )
            )
        # (1 + a) + a -> 1 + 2 * a, (1 - a) - a -> 1 - 2 * a
        if additive and left.operator == op and left.right == e.right:
            return self.optimize(
                binary(
                    self.optimize(left.left),
                    op,
                    self.optimize(binary(Literal(2), "*", self.optimize(left.right))),
                )
            )
        # (1 + 3 * a) - a -> 1 + 2 * a
        if (
            op == "-"
            and left.operator == "+"
            and isinstance(left.left, Literal)
            and is_binary(left.right, "*")
            and isinstance(left.right.left, Literal)
            and left.right.right == e.right
        ):
            return self.optimize(
                binary(
                    left.left,
                    "+",
                    self.optimize(binary(Literal(left.right.left.value - 1), "*", e.right)),
                )
            )
        # (1 + 2 * a) + 3 * a -> 1 + 5 * a
        if (
            op == "+"
            and left.operator == "+"
            and isinstance(left.left, Literal)
            and is_binary(left.right, "*")
            and isinstance(left.right.left, Literal)
            and is_binary(e.right, "*")
            and isinstance(e.right.left, Literal)
            and left.right.right == e.right.right
        ):
            return self.optimize(
                binary(
                    left.left,
                    "+",
                    self.optimize(
                        binary(
                            Literal(left.right.left.value + e.right.left.value),
                            "*",
                            self.optimize(left.right.right),
                        )
                    ),
                )
            )
        # (1 - a) + 5 * a -> 1 + 4 * a
        if (
            op == "+"
            and left.operator == "-"
            and isinstance(left.left, Literal)
            and is_binary(e.right, "*")
            and isinstance(e.right.left, Literal)
            and left.right == e.right.right
        ):
            return self.optimize(
                binary(
                    left.left,
                    "+",
                    self.optimize(
                        binary(Literal(e.right.left.value - 1), "*", self.optimize(e.right.right))
                    ),
                )
            )

        # (a + 1) + b -> (a + b) + 1
        if additive and left_additive and isinstance(left.right, Literal):
            return self.optimize(
                binary(
                    self.optimize(binary(self.optimize(left.left), op, e.right)),
                    left.operator,
                    left.right,
                )
            )

        if self.has_variable is not None and additive:
            # (3 * x + a) + x -> (3 * x + x) + a
            if (
                left_additive
                and self.has(e.right)
                and self.has(left.left)
                and not self.has(left.right)
            ):
                return self.optimize(
                    binary(
                        self.optimize(binary(self.optimize(left.left), op, e.right)),
                        left.operator,
                        self.optimize(left.right),
                    )
                )
            # (a - b * x) + c * x -> (-b * x + c * x) + a
            if (
                left.operator == "-"
                and self.has(e.right)
                and self.has(left.right)
                and not self.has(left.left)
            ):
                return self.optimize(
                    binary(
                        self.optimize(
                            binary(self.optimize(negate(self.optimize(left.right))), op, e.right)
                        ),
                        "+",
                        self.optimize(left.left),
                    )
                )

        # (a * c) * b -> (a * b) * c, (a / c) / b -> (a / b) / c
        if (
            op in ("*", "/")
            and left.operator == op
            and self.lacks(left.right)
            and should_be_after(left.right, e.right)
        ):
            return self.optimize(
                binary(binary(self.optimize(left.left), op, e.right), op, self.optimize(left.right))
            )
        # (a / c) * b -> (a * b) / c
        if op == "*" and left.operator == "/" and self.lacks(left.right):
            return self.optimize(
                binary(binary(self.optimize(left.left), "*", e.right), "/", self.optimize(left.right))
            )
        # (a + c) + b -> (a + b) + c
        if (
            additive
            and left_additive
            and self.lacks(left.right)
            and should_be_after(left.right, e.right)
        ):
            return self.optimize(
                binary(
                    binary(self.optimize(left.left), op, e.right),
                    left.operator,
                    self.optimize(left.right),
                )
            )
        return None

    def _right_binary_rules(self, e: BinaryExpression) -> Optional[Expression]:
        right = e.right
        if not isinstance(right, BinaryExpression):
            return None
        # a + (b + c) -> (a + b) + c, a + (b - c) -> (a + b) - c
        if e.operator == "+" and right.operator in ("+", "-"):
            return self.optimize(
                binary(
                    self.optimize(binary(e.left, "+", self.optimize(right.left))),
                    right.operator,
                    self.optimize(right.right),
                )
            )
        # a - (b + c) -> (a - b) - c, a - (b - c) -> (a - b) + c
        if e.operator == "-" and right.operator in ("+", "-"):
            return self.optimize(
                binary(
                    self.optimize(binary(e.left, "-", self.optimize(right.left))),
                    get_reverse_operator(right.operator),
                    self.optimize(right.right),
                )
            )
        # a * (b * c) -> (a * b) * c, a * (b / c) -> (a * b) / c
        if e.operator == "*" and right.operator in ("*", "/"):
            return self.optimize(
                binary(
                    self.optimize(binary(e.left, "*", self.optimize(right.left))),
                    right.operator,
                    self.optimize(right.right),
                )
            )
        return None

    def _commutative_order(self, e: BinaryExpression) -> Optional[Expression]:
        if e.operator not in ("+", "*"):
            return None
        # b + a -> a + b, b * a -> a * b
        same_side = self.has_variable is None or self.has(e.left) == self.has(e.right)
        if same_side and should_be_after(e.left, e.right):
            return self.optimize(binary(e.right, e.operator, e.left))
        # x * a -> a * x
        if e.operator == "*" and self.has(e.left) and not self.has(e.right):
            return self.optimize(binary(e.right, "*", e.left))
        # a + x -> x + a
        if e.operator == "+" and self.has_variable is not None and not self.has(e.left) and self.has(e.right):
            return self.optimize(binary(e.right, "+", e.left))
        return None

    def _negated_operands(self, e: BinaryExpression) -> Optional[Expression]:
        if e.operator not in ("*", "/"):
            return None
        # a * -b -> -(a * b)
        if is_negation(e.right):
            return self.optimize(
                negate(self.optimize(binary(e.left, e.operator, self.optimize(e.right.argument))))
            )
        # (-a) * b -> -(a * b)
        if is_negation(e.left):
            return self.optimize(
                negate(self.optimize(binary(self.optimize(e.left.argument), e.operator, e.right)))
            )
        return None

    def _fraction_sums(self, e: BinaryExpression) -> Optional[Expression]:
        if e.operator not in ("+", "-"):
            return None
        # a + b / c -> (a * c + b) / c
        if is_binary(e.right, "/") and not _is_numeric(e.right.right):
            denominator = self.optimize(e.right.right)
            return self.optimize(
                binary(
                    self.optimize(
                        binary(
                            self.optimize(binary(e.left, "*", denominator)),
                            e.operator,
                            self.optimize(e.right.left),
                        )
                    ),
                    "/",
                    denominator,
                )
            )
        # a / b + c -> (a + b * c) / b
        if is_binary(e.left, "/") and not _is_numeric(e.left.right):
            denominator = self.optimize(e.left.right)
            return self.optimize(
                binary(
                    self.optimize(
                        binary(
                            self.optimize(e.left.left),
                            e.operator,
                            self.optimize(binary(denominator, "*", e.right)),
                        )
                    ),
                    "/",
                    denominator,
                )
            )
        return None

    def _distribute_products(self, e: BinaryExpression) -> Optional[Expression]:
        if e.operator != "*":
            return None
        # (a + b) * c -> a * c + b * c
        if self.lacks(e.right) and is_binary(e.left, "+", "-"):
            return self.optimize(
                binary(
                    self.optimize(binary(self.optimize(e.left.left), "*", e.right)),
                    e.left.operator,
                    self.optimize(binary(self.optimize(e.left.right), "*", e.right)),
                )
            )
        # a * (b + c) -> a * b + a * c
        if self.lacks(e.left) and is_binary(e.right, "+", "-"):
            return self.optimize(
                binary(
                    self.optimize(binary(e.left, "*", self.optimize(e.right.left))),
                    e.right.operator,
                    self.optimize(binary(e.left, "*", self.optimize(e.right.right))),
                )
            )
        return None

    def _combine_variable_terms(self, e: BinaryExpression) -> Optional[Expression]:
        if self.has_variable is None or e.operator not in ("+", "-"):
            return None
        left, right = e.left, e.right
        # a * x + b * x -> (a + b) * x
        if (
            is_binary(left, "*")
            and is_binary(right, "*")
            and left.right == right.right
            and not self.has(left.left)
            and self.has(left.right)
            and not self.has(right.left)
        ):
            return self.optimize(
                binary(
                    self.optimize(binary(self.optimize(left.left), e.operator, self.optimize(right.left))),
                    "*",
                    self.optimize(left.right),
                )
            )
        # a * x + x -> (a + 1) * x
        if (
            is_binary(left, "*")
            and not self.has(left.left)
            and self.has(left.right)
            and left.right == right
        ):
            return self.optimize(
                binary(
                    self.optimize(binary(self.optimize(left.left), e.operator, Literal(1))),
                    "*",
                    self.optimize(left.right),
                )
            )
        # x + a * x -> (1 + a) * x
        if (
            is_binary(right, "*")
            and not self.has(right.left)
            and self.has(right.right)
            and left == right.right
        ):
            return self.optimize(
                binary(
                    self.optimize(binary(Literal(1), e.operator, self.optimize(right.left))),
                    "*",
                    left,
                )
            )
        # -x + a * x -> (-1 + a) * x
        if (
            is_binary(right, "*")
            and is_negation(left)
            and not self.has(right.left)
            and self.has(right.right)
            and left.argument == right.right
        ):
            return self.optimize(
                binary(
                    self.optimize(binary(Literal(-1), e.operator, self.optimize(right.left))),
                    "*",
                    self.optimize(left.argument),
                )
            )
        return None

    def _distribute_powers(self, e: BinaryExpression) -> Optional[Expression]:
        # (x / a) ** b -> x ** b / a ** b, (a * x) ** b -> a ** b * x ** b
        if (
            self.has_variable is None
            or e.operator != "**"
            or self.has(e.right)
            or not is_binary(e.left, "*", "/")
        ):
            return None
        if self.has(e.left.left) != self.has(e.left.right):
            return self.optimize(
                binary(
                    self.optimize(binary(self.optimize(e.left.left), "**", e.right)),
                    e.left.operator,
                    self.optimize(binary(self.optimize(e.left.right), "**", e.right)),
                )
            )
        return None

    def _square_binomial(self, e: BinaryExpression) -> Optional[Expression]:
        # (a + b) ** 2 -> a ** 2 + 2 * a * b + b ** 2
        if e.operator != "**" or not _is_literal(e.right, 2) or not is_binary(e.left, "+", "-"):
            return None
        a = self.optimize(e.left.left)
        b = self.optimize(e.left.right)
        return self.optimize(
            binary(
                self.optimize(
                    binary(
                        self.optimize(binary(a, "**", e.right)),
                        e.left.operator,
                        self.optimize(binary(self.optimize(binary(e.right, "*", a)), "*", b)),
                    )
                ),
                "+",
                self.optimize(binary(b, "**", e.right)),
            )
        )

    def _cancel_fractions(self, e: BinaryExpression) -> Optional[Expression]:
        if e.operator != "/":
            return None
        # (a * b + a * c) / (b + c) -> a
        quotient = divide(e.left, e.right)
        if quotient is not None:
            return self.optimize(quotient)
        # ((a * b + a * c) / b) / (b + c) -> a / b
        if is_binary(e.left, "/"):
            quotient = divide(e.left.left, e.right)
            if quotient is not None:
                return self.optimize(
                    binary(self.optimize(quotient), "/", self.optimize(e.left.right))
                )
        return None

    def _merge_like_terms(self, e: BinaryExpression) -> Optional[Expression]:
        # ((a + 2 * b) + 2 * a) + 3 * b -> 3 * a + 5 * b
        if e.operator not in ("+", "-"):
            return None
        factors = expression_to_factors(e)
        if factors:
            merged = optimize_factors(factors)
            if len(merged) < len(factors):
                return self.optimize(factors_to_expression(merged))
        return None

    def _extract_perfect_powers(self, e: BinaryExpression) -> Optional[Expression]:
        # (b * a ** 2 + 3 * a ** 2) ** 0.5 -> a * (b + 3) ** 0.5
        if e.operator != "**" or not isinstance(e.right, Literal) or not 0 < e.right.value < 1:
            return None
        power = 1 / e.right.value
        if not float(power).is_integer():
            return None
        factors = expression_to_factors(e.left)
        if not factors:
            return None
        extracted = extract_factors(factors, int(power))
        if extracted is None:
            return None
        base, remaining = extracted
        return self.optimize(
            binary(
                factor_to_expression(base),
                "*",
                self.optimize(binary(factors_to_expression(remaining), "**", e.right)),
            )
        )

    def _extract_common_denominator_factor(self, e: BinaryExpression) -> Optional[Expression]:
        # 1 / (2 * a + 2 * b) -> (1 / 2) / (a + b)
        if e.operator != "/" or not is_binary(e.right, "+", "-"):
            return None
        factors = expression_to_factors(e.right)
        if not factors:
            return None
        extracted = extract_factors(factors, 1)
        if extracted is None:
            return None
        base, remaining = extracted
        return self.optimize(
            binary(
                self.optimize(binary(e.left, "/", factor_to_expression(base))),
                "/",
                factors_to_expression(remaining),
            )
        )

    def _optimize_unary(self, expr: UnaryExpression) -> Expression:
        argument = self.optimize(expr.argument)
        e = UnaryExpression(expr.operator, argument)
        if e.operator != "-":
            return e
        # -(1) -> -1
        if isinstance(argument, Literal):
            return Literal(-argument.value)
        # -(-a) -> a
        if is_negation(argument):
            return self.optimize(argument.argument)
        # -(a + b) -> -a - b
        if is_binary(argument, "+", "-"):
            return self.optimize(
                binary(
                    self.optimize(negate(self.optimize(argument.left))),
                    get_reverse_operator(argument.operator),
                    self.optimize(argument.right),
                )
            )
        if is_binary(argument, "*", "/"):
            # -(2 * a) -> -2 * a
            if isinstance(argument.left, Literal):
                return self.optimize(
                    binary(Literal(-argument.left.value), argument.operator, self.optimize(argument.right))
                )
            # -(a * 2) -> a * -2
            if isinstance(argument.right, Literal):
                return self.optimize(
                    binary(self.optimize(argument.left), argument.operator, Literal(-argument.right.value))
                )
        return e

    def _optimize_call(self, expr: CallExpression) -> Expression:
        arguments = tuple(self.optimize(a) for a in expr.arguments)
        e = CallExpression(expr.callee, arguments)
        function = _FOLDED_CALLS.get(e.callee)
        if function is not None and len(arguments) == 1 and isinstance(arguments[0], Literal):
            try:
                value = function(float(arguments[0].value))
            except (ValueError, OverflowError):
                return e
            if math.isfinite(value):
                return Literal(value)
        return e


def optimize_expression(expr: Expression, has_variable: HasVariable = None) -> Expression:
    """Normalize ``expr``.

    Args:
        expr: Tree to normalize; it is never modified.
        has_variable: Optional predicate marking the target variable. When given,
            terms containing it are kept together and moved to the left.

    Returns:
        An equivalent, simplified tree. Shapes no rule covers are returned as is.
    """
    result = expr
    try:
        for _ in range(MAX_NORMALIZE_PASSES):
            normalized = _Normalizer(has_variable).optimize(result)
            if normalized == result:
                return result
            result = normalized
    except RecursionError:
        logger.warning("Normalization exceeded the interpreter recursion limit")
        return result
    logger.debug("Normalization did not settle after %d passes", MAX_NORMALIZE_PASSES)
    return result


def optimize_equation(equation: Equation, has_variable: HasVariable = None) -> Equation:
    return Equation(
        optimize_expression(equation.left, has_variable),
        optimize_expression(equation.right, has_variable),
    )
