"""Numeric evaluation of normalized expressions and result formatting."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

import sympy as sp
from sympy.core.function import AppliedUndef

from .config import EVAL_PRECISION, RESULT_DECIMALS
from .logging_config import get_logger
from .namespace import check_magnitude
from .normalizer import normalize, parse_normalized
from .types import AngleMode, EvaluationError, ValidationError

logger = get_logger("evaluator")

_NON_FINITE = (sp.zoo, sp.oo, -sp.oo, sp.nan)


def numeric_value(expr: Any, precision: int = EVAL_PRECISION) -> sp.Float:
    """Reduce a parsed expression to a real, finite SymPy Float.

    Raises:
        EvaluationError: If the expression is not numeric, not finite or not real
    """
    if not isinstance(expr, sp.Expr):
        raise EvaluationError("Expression does not evaluate to a number", "NOT_NUMERIC")

    undefined = sorted(str(f.func) for f in expr.atoms(AppliedUndef))
    if undefined:
        raise EvaluationError(f"Unknown function: {undefined[0]}", "UNKNOWN_IDENTIFIER")
    symbols = sorted(str(s) for s in expr.free_symbols)
    if symbols:
        raise EvaluationError(f"Unknown identifier: {symbols[0]}", "UNKNOWN_IDENTIFIER")
    if expr.has(*_NON_FINITE):
        raise EvaluationError("Result is not a finite number", "NOT_FINITE")

    value = sp.N(expr, precision)
    if value.has(*_NON_FINITE) or value.is_finite is False:
        raise EvaluationError("Result is not a finite number", "NOT_FINITE")

    real, imag = value.as_real_imag()
    if imag != 0 and abs(imag) > sp.Rational(1, 10 ** (precision // 2)):
        raise EvaluationError("Result is not a real number", "NOT_REAL")
    if not real.is_Number:
        raise EvaluationError("Expression does not evaluate to a number", "NOT_NUMERIC")
    return sp.Float(real, precision)


def strip_trailing_zeros(text: str) -> str:
    """Drop trailing fractional zeros and a dangling point; ``-0`` becomes ``0``."""
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-", "-0"):
        return "0"
    return text


def format_result(value: Any, decimals: int = RESULT_DECIMALS) -> str:
    """Format a number in fixed-point notation, then strip trailing zeros.

    The fixed-point step rounds half up at ``decimals`` digits after the
    point. Stripping is done on the string, so large and small magnitudes
    keep every digit.

    Args:
        value: SymPy number, Decimal or anything ``Decimal(str(value))`` accepts
        decimals: Digits after the decimal point before stripping

    Returns:
        Plain decimal string (never exponent notation)
    """
    try:
        dec = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as e:
        raise EvaluationError(f"Cannot format result: {value}", "EVAL_ERROR") from e
    if not dec.is_finite():
        raise EvaluationError("Result is not a finite number", "NOT_FINITE")
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, max(dec.adjusted(), 0) + decimals + 2)
        ctx.rounding = ROUND_HALF_UP
        fixed = dec.quantize(Decimal(1).scaleb(-decimals))
    return strip_trailing_zeros(format(fixed, "f"))


def evaluate_expression(
    expression: str, angle_mode: AngleMode = AngleMode.RADIANS
) -> tuple[str, str]:
    """Normalize, parse and evaluate one expression.

    Returns:
        Tuple of (formatted_result, normalized_expression)

    Raises:
        ValidationError: If normalization rejects the input
        EvaluationError: If parsing or evaluation fails, or an exact
            power or factorial would be too large to compute
    """
    normalized = normalize(expression, angle_mode)
    expr = parse_normalized(normalized)
    check_magnitude(expr)
    try:
        if isinstance(expr, sp.Basic):
            expr = expr.doit()
        value = numeric_value(expr)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise EvaluationError(f"Evaluation failed: {e}", "EVAL_ERROR") from e
    return format_result(value), normalized


def evaluate_safely(
    expression: str, angle_mode: AngleMode = AngleMode.RADIANS
) -> dict[str, Any]:
    """Evaluate an expression and report the outcome as a plain dict.

    Never raises for bad input; errors come back as
    ``{"ok": False, "error": ..., "error_code": ...}``.
    """
    try:
        result, normalized = evaluate_expression(expression, angle_mode)
    except ValidationError as e:
        logger.warning("Rejected %r: %s - %s", expression, e.code, e.message)
        return {"ok": False, "error": str(e), "error_code": e.code}
    except EvaluationError as e:
        logger.warning("Evaluation of %r failed: %s - %s", expression, e.code, e.message)
        return {"ok": False, "error": str(e), "error_code": e.code}
    except RecursionError:
        logger.warning("Evaluation of %r exceeded recursion depth", expression)
        return {"ok": False, "error": "Expression too deeply nested", "error_code": "TOO_DEEP"}
    logger.debug("Evaluated %r -> %s", expression, result)
    return {"ok": True, "result": result, "normalized": normalized}
