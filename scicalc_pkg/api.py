"""Public API for SciCalc - returns structured objects without side effects."""

from __future__ import annotations

from .evaluator import evaluate_safely
from .normalizer import normalize
from .types import AngleMode, EvalResult, ValidationError


def evaluate(expression: str, is_radians: bool = True) -> EvalResult:
    """Evaluate a calculator expression.

    Args:
        expression: Expression in calculator notation (e.g., "8+4", "(9)^2", "5!")
        is_radians: False to read sin/cos/tan arguments as degrees

    Returns:
        EvalResult with the formatted result or the error

    Example:
        >>> from scicalc_pkg.api import evaluate
        >>> evaluate("8+4").result
        '12'
        >>> evaluate("sin(30)", is_radians=False).result
        '0.5'
    """
    data = evaluate_safely(expression, AngleMode.from_is_radians(is_radians))
    if not data.get("ok"):
        return EvalResult(
            ok=False,
            error=data.get("error") or "Unknown error",
            error_code=data.get("error_code"),
        )
    return EvalResult(ok=True, result=data.get("result"), normalized=data.get("normalized"))


def normalize_expression(expression: str, is_radians: bool = True) -> str:
    """Rewrite calculator notation into evaluator syntax without evaluating.

    Example:
        >>> from scicalc_pkg.api import normalize_expression
        >>> normalize_expression("50%")
        '(50/100)'
    """
    return normalize(expression, AngleMode.from_is_radians(is_radians))


def validate_expression(expression: str) -> tuple[bool, str | None]:
    """Validate an expression without evaluating it.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        normalize(expression)
        return True, None
    except ValidationError as e:
        return False, str(e)
