"""Expression tree types and traversal helpers.

Every node is an immutable dataclass, so structural equality is plain ``==``
and nodes can be shared freely between trees. Transformations always build
new nodes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

BINARY_OPERATORS = ("+", "-", "*", "/", "**")
UNARY_OPERATORS = ("-",)


@dataclass(frozen=True)
class Literal:
    value: float

    def __post_init__(self):
        if isinstance(self.value, bool):
            raise TypeError("Literal value must be a number")


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class UnaryExpression:
    operator: str
    argument: "Expression"


@dataclass(frozen=True)
class BinaryExpression:
    operator: str
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class CallExpression:
    callee: str
    arguments: tuple = ()


Expression = Union[Literal, Identifier, UnaryExpression, BinaryExpression, CallExpression]


@dataclass(frozen=True)
class Equation:
    """``left = right``."""

    left: Expression
    right: Expression


HasVariable = Optional[Callable[[Expression], bool]]


def binary(left: Expression, operator: str, right: Expression) -> BinaryExpression:
    return BinaryExpression(operator, left, right)


def negate(argument: Expression) -> UnaryExpression:
    return UnaryExpression("-", argument)


def is_literal(expr: Expression) -> bool:
    return isinstance(expr, Literal)


def is_identifier(expr: Expression) -> bool:
    return isinstance(expr, Identifier)


def is_binary(expr: Expression, *operators: str) -> bool:
    """True for a BinaryExpression, optionally restricted to ``operators``."""
    if not isinstance(expr, BinaryExpression):
        return False
    return not operators or expr.operator in operators


def is_negation(expr: Expression) -> bool:
    return isinstance(expr, UnaryExpression) and expr.operator == "-"


def iterate_expression(expr: Expression) -> Iterator[Expression]:
    """Yield every node of the tree in pre-order."""
    stack = [expr]
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, BinaryExpression):
            stack.append(node.right)
            stack.append(node.left)
        elif isinstance(node, UnaryExpression):
            stack.append(node.argument)
        elif isinstance(node, CallExpression):
            stack.extend(reversed(node.arguments))


def count_nodes(expr: Expression) -> int:
    return sum(1 for _ in iterate_expression(expr))


def get_identifiers(expr: Expression) -> set[str]:
    return {node.name for node in iterate_expression(expr) if isinstance(node, Identifier)}


def expression_has_variable(expr: Expression, name: str) -> bool:
    return any(
        isinstance(node, Identifier) and node.name == name
        for node in iterate_expression(expr)
    )


def make_has_variable(name: str | None) -> HasVariable:
    """Build the target-variable predicate used by the normalizer and solver."""
    if name is None:
        return None
    return lambda expr: expression_has_variable(expr, name)


def is_numeric_expression(expr: Expression) -> bool:
    """True when the tree contains no identifiers at all."""
    return not any(isinstance(node, Identifier) for node in iterate_expression(expr))


def get_reverse_operator(operator: str) -> str:
    """Inverse of a binary operator: ``+``/``-`` and ``*``/``/`` swap."""
    return {"+": "-", "-": "+", "*": "/", "/": "*"}.get(operator, operator)


_KIND_ORDER = {
    Identifier: 0,
    CallExpression: 1,
    UnaryExpression: 2,
    BinaryExpression: 3,
    Literal: 4,
}


def expression_sort_key(expr: Expression) -> tuple:
    """Total order over trees, used to keep factor bases canonical."""
    kind = _KIND_ORDER[type(expr)]
    if isinstance(expr, Identifier):
        return (kind, expr.name)
    if isinstance(expr, Literal):
        return (kind, float(expr.value))
    if isinstance(expr, UnaryExpression):
        return (kind, expr.operator, expression_sort_key(expr.argument))
    if isinstance(expr, BinaryExpression):
        return (
            kind,
            expr.operator,
            expression_sort_key(expr.left),
            expression_sort_key(expr.right),
        )
    return (kind, expr.callee, tuple(expression_sort_key(a) for a in expr.arguments))


def map_identifiers(
    expr: Expression, replace: Callable[[Identifier], Expression]
) -> Expression:
    """Rebuild ``expr`` with every identifier passed through ``replace``."""
    if isinstance(expr, Identifier):
        return replace(expr)
    if isinstance(expr, UnaryExpression):
        argument = map_identifiers(expr.argument, replace)
        if argument is expr.argument:
            return expr
        return UnaryExpression(expr.operator, argument)
    if isinstance(expr, BinaryExpression):
        left = map_identifiers(expr.left, replace)
        right = map_identifiers(expr.right, replace)
        if left is expr.left and right is expr.right:
            return expr
        return BinaryExpression(expr.operator, left, right)
    if isinstance(expr, CallExpression):
        arguments = tuple(map_identifiers(a, replace) for a in expr.arguments)
        if all(new is old for new, old in zip(arguments, expr.arguments)):
            return expr
        return CallExpression(expr.callee, arguments)
    return expr
