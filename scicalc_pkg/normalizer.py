"""Expression normalization and parsing.

This module handles:
- Input sanitization and validation (length, forbidden tokens, balance)
- Rewriting calculator notation into evaluator syntax
  (√ -> sqrt, π -> pi, N% -> (N/100), N! -> factorial(N), A nthRoot B)
- Tagging sin/cos/tan arguments as degrees when the calculator is in Deg mode
- SymPy parsing against a whitelisted namespace
"""

from __future__ import annotations

from functools import lru_cache
from tokenize import TokenError
from typing import Any

from sympy import parse_expr

from .config import (
    CLOSE_PAREN_DIGIT_REGEX,
    FACTORIAL_REGEX,
    IMPLICIT_NUMBER_REGEX,
    MAX_FACTORIAL_ARGUMENT,
    MAX_INPUT_LENGTH,
    NTH_ROOT_REGEX,
    PERCENT_REGEX,
    SQRT_NUMBER_REGEX,
    TRANSFORMATIONS,
    TRIG_CALL_REGEX,
)
from .logging_config import get_logger
from .namespace import ALLOWED_SYMPY_NAMES, PARSER_GLOBALS
from .types import AngleMode, EvaluationError, ValidationError

logger = get_logger("normalizer")

# Basic denylist to avoid dangerous tokens before SymPy parsing
FORBIDDEN_TOKENS = (
    "__",
    "import",
    "lambda",
    "eval",
    "exec",
    "open",
    "os.",
    "sys.",
    "subprocess",
    "builtins",
    "getattr",
    "setattr",
    "delattr",
    "compile",
    "globals",
    "locals",
    "memoryview",
    "bytes",
    "bytearray",
)

_UNICODE_OPERATORS = {
    "−": "-",
    "–": "-",
    "×": "*",
    "÷": "/",
}

_OPERAND_CHARS = frozenset(
    "0123456789.abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_"
)


def is_balanced(input_str: str) -> tuple[bool, int | None]:
    """Check if parentheses/brackets are balanced. Returns (is_balanced, error_position)."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    stack: list[tuple[str, int]] = []
    for i, char in enumerate(input_str):
        if char in pairs:
            stack.append((char, i))
        elif char in pairs.values():
            if not stack:
                return False, i
            opening, _ = stack.pop()
            if pairs[opening] != char:
                return False, i
    if stack:
        return False, stack[0][1]
    return True, None


def _matching_close(text: str, open_idx: int) -> int:
    depth = 0
    for i in range(open_idx, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _matching_open(text: str, close_idx: int) -> int:
    depth = 0
    for i in range(close_idx, -1, -1):
        if text[i] == ")":
            depth += 1
        elif text[i] == "(":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _left_operand_start(text: str) -> int:
    """Index where the operand ending at ``text[-1]`` begins, or -1 if there is none."""
    end = len(text) - 1
    if end < 0:
        return -1
    if text[end] == ")":
        start = _matching_open(text, end)
        if start < 0:
            return -1
        # Include a function name written directly before the group
        while start > 0 and text[start - 1] in _OPERAND_CHARS:
            start -= 1
        return start
    start = end + 1
    while start > 0 and text[start - 1] in _OPERAND_CHARS:
        start -= 1
    return start if start <= end else -1


def _right_operand_end(text: str) -> int:
    """Index just past the operand starting at ``text[0]``, or -1 if there is none."""
    if not text:
        return -1
    idx = 0
    if text[0] in "+-":
        idx = 1
    if idx < len(text) and text[idx] == "(":
        close = _matching_close(text, idx)
        return close + 1 if close >= 0 else -1
    start = idx
    while idx < len(text) and text[idx] in _OPERAND_CHARS:
        idx += 1
    if idx == start:
        return -1
    if idx < len(text) and text[idx] == "(":
        close = _matching_close(text, idx)
        return close + 1 if close >= 0 else -1
    return idx


def _rewrite_factorials(expr: str) -> str:
    def _literal(match) -> str:
        value = int(match.group(1))
        if value > MAX_FACTORIAL_ARGUMENT:
            raise ValidationError(
                f"Factorial argument too large (>{MAX_FACTORIAL_ARGUMENT})", "TOO_LARGE"
            )
        return f"factorial({value})"

    expr = FACTORIAL_REGEX.sub(_literal, expr)
    # Postfix ! on a group, constant or decimal: (3)! -> factorial((3))
    while "!" in expr:
        bang = expr.index("!")
        head = expr[:bang].rstrip()
        start = _left_operand_start(head)
        if start < 0:
            raise ValidationError("Factorial needs an operand", "INCOMPLETE_EXPRESSION")
        expr = f"{head[:start]}factorial({head[start:]}){expr[bang + 1:]}"
    return expr


def _rewrite_nth_roots(expr: str) -> str:
    """Turn the infix ``A nthRoot B`` form into ``nthRoot(A, B)``."""
    match = NTH_ROOT_REGEX.search(expr)
    while match:
        head, tail = expr[: match.start()], expr[match.end():]
        start = _left_operand_start(head)
        end = _right_operand_end(tail)
        if start < 0 or end < 0:
            raise ValidationError(
                "nthRoot needs a radicand and an index", "INCOMPLETE_EXPRESSION"
            )
        expr = f"{head[:start]}nthRoot({head[start:]}, {tail[:end]}){tail[end:]}"
        match = NTH_ROOT_REGEX.search(expr)
    return expr


def _tag_degree_arguments(expr: str) -> str:
    """Rewrite ``sin(x)`` as ``sin((x)*deg)``; likewise cos and tan, nested calls included."""
    parts: list[str] = []
    pos = 0
    while True:
        match = TRIG_CALL_REGEX.search(expr, pos)
        if match is None:
            parts.append(expr[pos:])
            return "".join(parts)
        open_idx = match.end() - 1
        close_idx = _matching_close(expr, open_idx)
        if close_idx < 0:
            raise ValidationError(
                "Mismatched or unbalanced parentheses in the expression.", "UNBALANCED"
            )
        inner = _tag_degree_arguments(expr[open_idx + 1 : close_idx])
        parts.append(expr[pos : match.start()])
        parts.append(f"{match.group(1)}(({inner})*deg)")
        pos = close_idx + 1


def normalize(input_str: str, angle_mode: AngleMode = AngleMode.RADIANS) -> str:
    """Rewrite a calculator expression into evaluator syntax.

    Applies, in order:
    - Validates input length and forbidden tokens
    - Standardizes unicode operators (×, ÷, −)
    - Converts √ to sqrt and π to pi
    - Handles percentages (50% -> (50/100))
    - Handles factorials (5! -> factorial(5))
    - Converts the infix nthRoot form (8 nthRoot 3 -> nthRoot(8, 3))
    - Inserts implicit multiplication after numbers (2pi -> 2*pi)
    - Validates balanced parentheses/brackets
    - In degrees mode, tags sin/cos/tan arguments as degrees

    Args:
        input_str: Raw expression in calculator notation
        angle_mode: Radians or Degrees

    Returns:
        Normalized string ready for SymPy parsing

    Raises:
        ValidationError: If input is empty, too long, contains forbidden tokens,
                        has unbalanced parentheses or an incomplete operator
    """
    input_str = input_str.strip() if input_str else ""
    if not input_str:
        raise ValidationError("Expression is required", "EMPTY_INPUT")
    if len(input_str) > MAX_INPUT_LENGTH:
        raise ValidationError(
            f"Input too long (>{MAX_INPUT_LENGTH} characters)", "TOO_LONG"
        )
    lowered = input_str.lower()
    for tok in FORBIDDEN_TOKENS:
        if tok in lowered:
            logger.warning("Blocked forbidden token %r", tok)
            raise ValidationError(
                f"Input contains forbidden token: {tok}", "FORBIDDEN_TOKEN"
            )

    expr = input_str
    for symbol, replacement in _UNICODE_OPERATORS.items():
        expr = expr.replace(symbol, replacement)

    expr = SQRT_NUMBER_REGEX.sub(r"sqrt(\1)", expr)
    expr = expr.replace("√", "sqrt").replace("π", "pi")
    expr = PERCENT_REGEX.sub(r"(\1/100)", expr)
    expr = _rewrite_factorials(expr)
    expr = _rewrite_nth_roots(expr)
    expr = IMPLICIT_NUMBER_REGEX.sub(r"\1*", expr)
    expr = CLOSE_PAREN_DIGIT_REGEX.sub(")*", expr)

    balanced, position = is_balanced(expr)
    if not balanced:
        raise ValidationError(
            f"Mismatched or unbalanced parentheses near position {position}.",
            "UNBALANCED",
        )

    if angle_mode is AngleMode.DEGREES:
        expr = _tag_degree_arguments(expr)

    normalized = " ".join(expr.split())
    logger.debug("Normalized %r -> %r", input_str, normalized)
    return normalized


@lru_cache(maxsize=1024)
def parse_normalized(expr_str: str) -> Any:
    """Parse a normalized expression with SymPy, leaving arithmetic unevaluated.

    Callers size the tree with ``namespace.check_magnitude`` before calling
    ``doit()`` on it.

    Raises:
        EvaluationError: If SymPy cannot parse the expression
    """
    try:
        return parse_expr(
            expr_str,
            local_dict=dict(ALLOWED_SYMPY_NAMES),
            global_dict=dict(PARSER_GLOBALS),
            transformations=TRANSFORMATIONS,
            evaluate=False,
        )
    except (SyntaxError, TokenError) as e:
        raise EvaluationError(f"Invalid expression syntax: {e}", "PARSE_ERROR") from e
    except (TypeError, ValueError, AttributeError, NameError) as e:
        raise EvaluationError(f"Invalid expression: {e}", "PARSE_ERROR") from e
    except RecursionError as e:
        raise EvaluationError("Expression too deeply nested", "TOO_DEEP") from e
