"""Input parsing, validation and printing.

This module handles:
- Input sanitization and validation
- Parsing text into the engine's Expression tree (via the standard ``ast`` module)
- Printing Expression trees back to text, in engine style and math style
- Math-style input conversion (``2 x``, ``x^2``, ``2(x + 1)``)
"""

from __future__ import annotations

import ast
import re
from functools import lru_cache
from typing import Any

from .config import (
    CACHE_SIZE_PARSE,
    CLOSE_OPEN_REGEX,
    DIGIT_LETTERS_REGEX,
    KNOWN_FUNCTIONS,
    MAX_EXPRESSION_DEPTH,
    MAX_EXPRESSION_NODES,
    MAX_INPUT_LENGTH,
)
from .expression import (
    BinaryExpression,
    CallExpression,
    Equation,
    Expression,
    Identifier,
    Literal,
    UnaryExpression,
)
from .logging_config import get_logger
from .types import ParseError, ValidationError

logger = get_logger("parser")

# Tokens with no meaning in the expression grammar
FORBIDDEN_TOKENS = (
    "__",
    ";",
    "lambda",
    "import",
    ":=",
)

_SYMBOL_REPLACEMENTS = {
    "−": "-",  # minus sign
    "×": "*",  # multiplication sign
    "·": "*",  # middle dot
    "÷": "/",  # division sign
}

_BINARY_OPERATORS = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.Pow: "**",
}

# Lower index binds tighter
PRIORITIZED_BINARY_OPERATORS = (("**",), ("*", "/"), ("+", "-"))


def _priority(operator: str) -> int:
    for index, group in enumerate(PRIORITIZED_BINARY_OPERATORS):
        if operator in group:
            return index
    raise ValueError(f"Unknown operator {operator!r}")


def format_number(val: Any, precision: int | None = None) -> str:
    """Format a numeric value for display.

    Integral values print without a fractional part (``3``), everything else
    uses the shortest round-tripping representation (``0.5``). With
    ``precision`` the value is rounded to that many significant digits.
    """
    value = float(val)
    if value != value or value in (float("inf"), float("-inf")):
        return str(value)
    if precision is not None:
        text = f"{value:.{precision}g}"
        return "0" if text == "-0" else text
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def is_balanced(input_str: str) -> tuple[bool, int | None]:
    """Check if parentheses/brackets are balanced. Returns (is_balanced, error_position)."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    stack: list[tuple[str, int]] = []  # (char, position)
    for i, char in enumerate(input_str):
        if char in pairs:
            stack.append((char, i))
        elif char in pairs.values():
            if not stack:
                return False, i
            opening, pos = stack.pop()
            if pairs[opening] != char:
                return False, i
    if stack:
        return False, stack[0][1]  # Return position of first unmatched
    return True, None


def preprocess(input_str: str) -> str:
    """Validate and normalize raw input before parsing.

    Applies transformations:
    - Validates input length and forbidden tokens
    - Standardizes unicode operator symbols to ASCII
    - Converts ``^`` to ``**``
    - Validates balanced parentheses/brackets

    Raises:
        ValidationError: If input is empty, too long, contains forbidden tokens,
                        or has unbalanced parentheses/brackets
    """
    input_str = input_str.strip() if input_str else ""
    if not input_str:
        raise ValidationError("Empty input", "EMPTY_INPUT")
    if len(input_str) > MAX_INPUT_LENGTH:
        raise ValidationError(
            f"Input too long (>{MAX_INPUT_LENGTH} characters)", "TOO_LONG"
        )
    lowered = input_str.lower()
    for token in FORBIDDEN_TOKENS:
        if token in lowered:
            logger.warning("Blocked forbidden token %r", token)
            raise ValidationError(
                f"Input contains forbidden token: {token}", "FORBIDDEN_TOKEN"
            )

    for symbol, replacement in _SYMBOL_REPLACEMENTS.items():
        input_str = input_str.replace(symbol, replacement)
    input_str = input_str.replace("^", "**")

    balanced, position = is_balanced(input_str)
    if not balanced:
        raise ValidationError(
            f"Unbalanced parentheses or brackets at position {position}",
            "UNBALANCED_PARENS",
        )
    return input_str


class _ExpressionBuilder(ast.NodeVisitor):
    """Translate a Python ``ast`` expression into the engine's tree."""

    def __init__(self):
        self.depth = 0
        self.nodes = 0

    def visit(self, node: ast.AST) -> Expression:
        self.nodes += 1
        if self.nodes > MAX_EXPRESSION_NODES:
            raise ValidationError(
                f"Expression too complex (>{MAX_EXPRESSION_NODES} nodes)",
                "TOO_COMPLEX",
            )
        self.depth += 1
        try:
            if self.depth > MAX_EXPRESSION_DEPTH:
                raise ValidationError(
                    f"Expression too deeply nested (>{MAX_EXPRESSION_DEPTH} levels)",
                    "TOO_DEEP",
                )
            return super().visit(node)
        finally:
            self.depth -= 1

    def visit_Constant(self, node: ast.Constant) -> Expression:
        value = node.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ParseError(f"Unsupported constant {value!r}", "UNSUPPORTED_SYNTAX")
        return Literal(value)

    def visit_Name(self, node: ast.Name) -> Expression:
        return Identifier(node.id)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Expression:
        if isinstance(node.op, ast.UAdd):
            return self.visit(node.operand)
        if isinstance(node.op, ast.USub):
            return UnaryExpression("-", self.visit(node.operand))
        raise ParseError("Unsupported unary operator", "UNSUPPORTED_SYNTAX")

    def visit_BinOp(self, node: ast.BinOp) -> Expression:
        operator = _BINARY_OPERATORS.get(type(node.op))
        if operator is None:
            raise ParseError(
                f"Unsupported operator {type(node.op).__name__}", "UNSUPPORTED_SYNTAX"
            )
        return BinaryExpression(operator, self.visit(node.left), self.visit(node.right))

    def visit_Call(self, node: ast.Call) -> Expression:
        if not isinstance(node.func, ast.Name) or node.keywords:
            raise ParseError("Unsupported function call", "UNSUPPORTED_SYNTAX")
        if any(isinstance(arg, ast.Starred) for arg in node.args):
            raise ParseError("Unsupported function call", "UNSUPPORTED_SYNTAX")
        return CallExpression(node.func.id, tuple(self.visit(arg) for arg in node.args))

    def generic_visit(self, node: ast.AST) -> Expression:
        raise ParseError(
            f"Unsupported syntax: {type(node).__name__}", "UNSUPPORTED_SYNTAX"
        )


@lru_cache(maxsize=CACHE_SIZE_PARSE)
def parse_expression(text: str) -> Expression:
    """Parse expression text into an Expression tree.

    Raises:
        ValidationError: for empty, oversized or malformed input
        ParseError: for syntax the grammar does not support
    """
    source = preprocess(text)
    if "=" in source:
        raise ValidationError(
            "Expression must not contain '='; use parse_equation", "INVALID_FORMAT"
        )
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as e:
        raise ParseError(f"Invalid syntax: {e.msg}", "SYNTAX_ERROR") from e
    except (RecursionError, MemoryError) as e:
        raise ValidationError("Expression too deeply nested", "TOO_DEEP") from e
    return _ExpressionBuilder().visit(tree.body)


def parse_equation(text: str) -> Equation:
    """Parse ``left = right`` into an Equation."""
    source = text.strip() if text else ""
    if not source:
        raise ValidationError("Empty input", "EMPTY_INPUT")
    parts = source.split("=")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise ValidationError(
            "Equation must contain exactly one '=' with both sides present",
            "INVALID_FORMAT",
        )
    return Equation(parse_expression(parts[0]), parse_expression(parts[1]))


def print_expression(expr: Expression) -> str:
    """Print a tree keeping binary order.

    A binary child is parenthesized whenever it does not bind tighter than its
    parent, so association is always visible: ``(a + b) + c``, ``a + b * c``.
    """
    if isinstance(expr, Literal):
        return format_number(expr.value)
    if isinstance(expr, Identifier):
        return expr.name
    if isinstance(expr, UnaryExpression):
        argument = print_expression(expr.argument)
        if isinstance(expr.argument, BinaryExpression):
            argument = f"({argument})"
        return expr.operator + argument
    if isinstance(expr, BinaryExpression):
        priority = _priority(expr.operator)
        left = _print_operand(expr.left, priority)
        right = _print_operand(expr.right, priority)
        if expr.operator == "**" and (
            isinstance(expr.left, UnaryExpression)
            or (isinstance(expr.left, Literal) and expr.left.value < 0)
        ):
            left = f"({left})"
        return f"{left} {expr.operator} {right}"
    if isinstance(expr, CallExpression):
        arguments = ", ".join(print_expression(a) for a in expr.arguments)
        return f"{expr.callee}({arguments})"
    raise TypeError(f"Not an expression: {expr!r}")


def _print_operand(expr: Expression, parent_priority: int) -> str:
    text = print_expression(expr)
    if isinstance(expr, BinaryExpression) and _priority(expr.operator) >= parent_priority:
        return f"({text})"
    return text


def print_equation(equation: Equation) -> str:
    return f"{print_expression(equation.left)} = {print_expression(equation.right)}"


def print_math_style_expression(expr: Expression, precision: int | None = None) -> str:
    """Print a tree the way it would be handwritten: ``2 x^2 + 3 x - 1``.

    Only the parentheses the precedence rules require are kept, ``*`` becomes a
    space and ``**`` becomes ``^``.
    """

    def render(node: Expression, limit: float = float("inf")) -> str:
        if isinstance(node, Literal):
            return format_number(node.value, precision)
        if isinstance(node, Identifier):
            return node.name
        if isinstance(node, UnaryExpression):
            return f"({node.operator}{render(node.argument, -1)})"
        if isinstance(node, BinaryExpression):
            index = _priority(node.operator)
            right_index = index if node.operator in ("+", "*") else index - 0.1
            if node.operator == "*":
                operator = " "
            elif node.operator == "**":
                operator = "^"
            else:
                operator = f" {node.operator} "
            left = render(node.left, index)
            right = render(node.right, right_index)
            if left == "-1" and operator == " ":
                text = "-" + right
            else:
                text = left + operator + right
            if index > limit:
                return f"({text})"
            return text
        if isinstance(node, CallExpression):
            return f"{node.callee}({', '.join(render(a) for a in node.arguments)})"
        raise TypeError(f"Not an expression: {node!r}")

    return render(expr)


def math_style_expression_to_expression(text: str) -> str:
    """Convert math-style input into engine syntax.

    ``2 x`` and ``2x`` become ``2*x``, ``x^2`` becomes ``x**2``, ``2(x+1)``
    and ``(a)(b)`` gain the implicit ``*``. Known function names keep their
    call parentheses.
    """
    text = re.sub(r" {2,}", " ", text.strip())
    text = re.sub(r"(?<=[A-Za-z0-9)]) (?=[A-Za-z0-9(])", "*", text)
    text = text.replace("^", "**")
    text = re.sub(r"(?<![A-Za-z_\d.])" + DIGIT_LETTERS_REGEX.pattern, r"\1*\2", text)
    text = CLOSE_OPEN_REGEX.sub(r")*\1", text)

    def insert_call_star(match: re.Match) -> str:
        name = match.group(1)
        if name in KNOWN_FUNCTIONS:
            return match.group(0)
        return f"{name}*("

    return re.sub(r"([A-Za-z_][A-Za-z0-9_]*)\s*\(", insert_call_star, text)
