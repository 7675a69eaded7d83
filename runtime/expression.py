"""Compile user expressions of ``x`` and ``y`` into evaluable functions.

The text is parsed with :mod:`ast` and walked by a whitelisting visitor that
builds a :mod:`sympy` expression. No ``eval`` is involved, so only the
operators, functions and names listed below can ever reach SymPy. Partial
derivatives are obtained symbolically and lambdified against :mod:`math`.
"""

from __future__ import annotations

import ast
import logging
import math
from typing import Any, Callable, Tuple

import sympy

from core.exceptions import ExpressionError
from modules.functions import CUSTOM_ID, DEFAULT_RANGE, FunctionDef

logger = logging.getLogger("surface_descent")

X, Y = sympy.symbols("x y", real=True)

ALLOWED_FUNCS = {
    "sin": sympy.sin,
    "cos": sympy.cos,
    "tan": sympy.tan,
    "asin": sympy.asin,
    "acos": sympy.acos,
    "atan": sympy.atan,
    "sinh": sympy.sinh,
    "cosh": sympy.cosh,
    "tanh": sympy.tanh,
    "exp": sympy.exp,
    "log": sympy.log,
    "ln": sympy.log,
    "sqrt": sympy.sqrt,
    "abs": sympy.Abs,
}

ALLOWED_NAMES = {"x": X, "y": Y, "pi": sympy.pi, "e": sympy.E}

# Failures that can occur when a lambdified expression is evaluated with
# floats from the math module.
EVALUATION_ERRORS = (ArithmeticError, ValueError, TypeError)


MAX_CONSTANT_DIGITS = 308


def _power(base: sympy.Expr, exponent: sympy.Expr) -> sympy.Expr:
    # number**number is evaluated exactly; keep it within float range.
    if base.is_Number and exponent.is_Number and base not in (0, 1, -1):
        try:
            digits = abs(float(exponent)) * abs(math.log10(abs(float(base))))
        except (OverflowError, ValueError):
            digits = math.inf
        if not digits <= MAX_CONSTANT_DIGITS:
            raise ValueError(f"Constant power {base}^{exponent} is too large")
    return base**exponent


class SympyBuilder(ast.NodeVisitor):
    """Translate a restricted Python AST into a SymPy expression."""

    def visit(self, node: ast.AST) -> sympy.Expr:
        return super().visit(node)

    def visit_Expression(self, node: ast.Expression) -> sympy.Expr:
        return self.visit(node.body)

    def visit_BinOp(self, node: ast.BinOp) -> sympy.Expr:
        left = self.visit(node.left)
        right = self.visit(node.right)
        if isinstance(node.op, ast.Add):
            return left + right
        if isinstance(node.op, ast.Sub):
            return left - right
        if isinstance(node.op, ast.Mult):
            return left * right
        if isinstance(node.op, ast.Div):
            return left / right
        if isinstance(node.op, ast.Pow):
            return _power(left, right)
        raise ValueError("Unsupported operator")

    def visit_UnaryOp(self, node: ast.UnaryOp) -> sympy.Expr:
        operand = self.visit(node.operand)
        if isinstance(node.op, ast.UAdd):
            return operand
        if isinstance(node.op, ast.USub):
            return -operand
        raise ValueError("Unsupported unary operator")

    def visit_Call(self, node: ast.Call) -> sympy.Expr:
        if not isinstance(node.func, ast.Name) or node.keywords:
            raise ValueError("Unsupported function call")
        func = ALLOWED_FUNCS.get(node.func.id)
        if func is None:
            raise ValueError(f"Unsupported function: {node.func.id}")
        if len(node.args) != 1:
            raise ValueError(f"{node.func.id}() takes exactly one argument")
        return func(self.visit(node.args[0]))

    def visit_Name(self, node: ast.Name) -> sympy.Expr:
        if node.id in ALLOWED_NAMES:
            return ALLOWED_NAMES[node.id]
        raise ValueError(f"Unknown name: {node.id}")

    def visit_Constant(self, node: ast.Constant) -> sympy.Expr:
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ValueError("Unsupported literal")
        if isinstance(node.value, int):
            return sympy.Integer(node.value)
        return sympy.Float(node.value)

    def generic_visit(self, node: ast.AST) -> Any:
        raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def parse_expression(text: str) -> sympy.Expr:
    """Parse ``text`` into a SymPy expression of ``x`` and ``y``.

    ``^`` is accepted as the power operator. Raises :class:`ExpressionError`
    for anything outside the supported grammar.
    """
    if not isinstance(text, str) or not text.strip():
        raise ExpressionError(str(text), "Expression is empty.")
    source = text.strip().replace("^", "**")
    try:
        tree = ast.parse(source, mode="eval")
        return SympyBuilder().visit(tree)
    except (SyntaxError, ValueError, TypeError, RecursionError) as exc:
        raise ExpressionError(text, f"Cannot parse {text!r}: {exc}") from exc


def _to_float(value) -> float:
    """Coerce a lambdified result to a finite float or raise."""
    result = float(value)
    if not math.isfinite(result):
        raise ValueError("non-finite result")
    return result


def _lambdify(expr: sympy.Expr) -> Callable[[float, float], Any]:
    if expr.has(sympy.Derivative, sympy.Subs):
        raise ExpressionError(str(expr), "Derivative has no closed form.")
    return sympy.lambdify((X, Y), expr, modules="math")


def _safe_value(raw: Callable[[float, float], Any], text: str):
    def f(x: float, y: float) -> float:
        try:
            return _to_float(raw(float(x), float(y)))
        except EVALUATION_ERRORS as exc:
            logger.debug("Evaluation of %r failed at (%g, %g): %s", text, x, y, exc)
            return 0.0

    return f


def _safe_gradient(raw_dx, raw_dy, text: str):
    def grad(x: float, y: float) -> Tuple[float, float]:
        try:
            return (
                _to_float(raw_dx(float(x), float(y))),
                _to_float(raw_dy(float(x), float(y))),
            )
        except EVALUATION_ERRORS as exc:
            logger.debug("Gradient of %r failed at (%g, %g): %s", text, x, y, exc)
            return 0.0, 0.0

    return grad


def compile_expression(
    text: str,
    *,
    function_id: str = CUSTOM_ID,
    name: str = "Custom Function",
    domain: Tuple[float, float] = DEFAULT_RANGE,
) -> FunctionDef:
    """Compile ``text`` into a :class:`FunctionDef` with a symbolic gradient.

    Raises :class:`ExpressionError` when the text cannot be parsed. The
    returned evaluators never raise: failures at a point evaluate to ``0`` and
    ``(0, 0)``. If the partial derivatives cannot be lambdified the definition
    carries no analytic gradient.
    """
    expr = parse_expression(text)
    try:
        raw_f = _lambdify(expr)
    except (ExpressionError, SyntaxError, TypeError, NameError) as exc:
        raise ExpressionError(text, f"Cannot compile {text!r}: {exc}") from exc

    grad = None
    try:
        raw_dx = _lambdify(sympy.diff(expr, X))
        raw_dy = _lambdify(sympy.diff(expr, Y))
        grad = _safe_gradient(raw_dx, raw_dy, text)
    except (ExpressionError, SyntaxError, TypeError, NameError) as exc:
        logger.debug(
            "No symbolic gradient for %r (%s); using finite differences.", text, exc
        )

    return FunctionDef(
        id=function_id,
        name=name,
        f=_safe_value(raw_f, text),
        range=(float(domain[0]), float(domain[1])),
        grad=grad,
        expression=text,
    )


__all__ = ["compile_expression", "parse_expression", "X", "Y"]
