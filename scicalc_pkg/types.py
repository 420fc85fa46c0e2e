"""Type definitions, result dataclasses and the error taxonomy."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class AngleMode(enum.Enum):
    """How trigonometric arguments are interpreted before evaluation."""

    RADIANS = "Rad"
    DEGREES = "Deg"

    @property
    def is_radians(self) -> bool:
        return self is AngleMode.RADIANS

    @classmethod
    def from_is_radians(cls, is_radians: bool) -> "AngleMode":
        return cls.RADIANS if is_radians else cls.DEGREES

    def toggled(self) -> "AngleMode":
        return AngleMode.DEGREES if self is AngleMode.RADIANS else AngleMode.RADIANS


@dataclass
class EvalResult:
    """Result of evaluating a calculator expression."""

    ok: bool
    result: str | None = None
    normalized: str | None = None
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.result is not None:
            result_dict["result"] = self.result
        if self.normalized is not None:
            result_dict["normalized"] = self.normalized
        if self.error is not None:
            result_dict["error"] = self.error
        if self.error_code is not None:
            result_dict["error_code"] = self.error_code
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"EvalResult(ok=False, error={self.error!r}, error_code={self.error_code!r})"
        return f"EvalResult(ok=True, result={self.result!r})"


class ValidationError(Exception):
    """Raised when input validation fails before evaluation."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class EvaluationError(Exception):
    """Raised when the evaluator rejects an expression."""

    def __init__(self, message: str, code: str = "EVAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class TransportError(Exception):
    """Raised when the remote evaluator cannot be reached or answers badly.

    ``kind`` is one of ``connection``, ``timeout``, ``http_status`` or
    ``bad_response``.
    """

    def __init__(self, message: str, kind: str = "connection", status: int | None = None):
        self.message = message
        self.kind = kind
        self.status = status
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class EmptyExpression(Exception):
    """Raised when evaluation is requested with nothing entered."""
