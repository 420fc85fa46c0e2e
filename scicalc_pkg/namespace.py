"""SymPy names reachable from calculator expressions, with size guards.

Expressions are parsed unevaluated so that powers and factorials can be
sized before SymPy computes them exactly. Helpers that SymPy would
otherwise evaluate eagerly (factorial, roots, log10) check their operands
first.
"""

from __future__ import annotations

from typing import Any

import sympy as sp

from .config import MAX_FACTORIAL_ARGUMENT, MAX_RESULT_DIGITS
from .types import EvaluationError

_ESTIMATE_PRECISION = 15


def _estimate(expr: Any) -> sp.Float | None:
    """Low-precision real value of ``expr``, or None when it has none."""
    try:
        value = sp.N(expr, _ESTIMATE_PRECISION)
    except (TypeError, ValueError, ArithmeticError):
        return None
    if not value.is_Number or value.is_finite is False:
        return None
    return value


def check_power(base: Any, exponent: Any) -> None:
    """Reject ``base**exponent`` when its exact value would exceed MAX_RESULT_DIGITS digits.

    Raises:
        EvaluationError: With code TOO_LARGE
    """
    base_value = _estimate(base)
    exp_value = _estimate(exponent)
    if base_value is None or exp_value is None or base_value == 0:
        return
    digits = sp.N(abs(exp_value) * abs(sp.log(abs(base_value), 10)), _ESTIMATE_PRECISION)
    if digits > MAX_RESULT_DIGITS:
        raise EvaluationError(
            f"Result too large (more than {MAX_RESULT_DIGITS} digits)", "TOO_LARGE"
        )


def check_factorial(argument: Any) -> None:
    value = _estimate(argument)
    if value is not None and value > MAX_FACTORIAL_ARGUMENT:
        raise EvaluationError(
            f"Factorial argument too large (>{MAX_FACTORIAL_ARGUMENT})", "TOO_LARGE"
        )


def check_magnitude(expr: Any) -> None:
    """Size every power and factorial in an unevaluated expression tree.

    Nodes are visited children first, so an oversized inner power is
    rejected before the estimate of an enclosing one is attempted.
    """
    if not isinstance(expr, sp.Basic):
        return
    for node in sp.postorder_traversal(expr):
        if isinstance(node, sp.Pow):
            check_power(node.base, node.exp)
        elif isinstance(node, sp.factorial):
            check_factorial(node.args[0])


def _factorial(n, evaluate=True):
    check_magnitude(n)
    check_factorial(n)
    return sp.factorial(n)


def _nth_root(radicand, index, evaluate=True):
    check_magnitude(radicand)
    check_magnitude(index)
    return sp.real_root(radicand, index)


# The unevaluated parser passes evaluate=False to cbrt
def _cube_root(radicand, evaluate=True):
    check_magnitude(radicand)
    return sp.real_root(radicand, 3)


def _log10(value, evaluate=True):
    check_magnitude(value)
    return sp.log(value, 10)


ALLOWED_SYMPY_NAMES = {
    "pi": sp.pi,
    "e": sp.E,
    "E": sp.E,
    "deg": sp.pi / 180,
    "sqrt": sp.sqrt,
    "cbrt": _cube_root,
    "nthRoot": _nth_root,
    "exp": sp.exp,
    "log": sp.log,
    "ln": sp.log,
    "log10": _log10,
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "factorial": _factorial,
    "abs": sp.Abs,
}

# Names the generated parser code needs; nothing else is reachable.
PARSER_GLOBALS = {
    "__builtins__": {},
    "Integer": sp.Integer,
    "Float": sp.Float,
    "Rational": sp.Rational,
    "Symbol": sp.Symbol,
    "Function": sp.Function,
    "Add": sp.Add,
    "Mul": sp.Mul,
    "Pow": sp.Pow,
}
