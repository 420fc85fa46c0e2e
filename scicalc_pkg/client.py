"""Evaluator contract implementations used by the keypad state machine.

``evaluate(expression, angle_mode) -> str`` returns the formatted result or
raises ``EvaluationError`` / ``TransportError``.
"""

from __future__ import annotations

from typing import Protocol

import requests

from .api import evaluate
from .config import REQUEST_TIMEOUT, SERVER_URL
from .logging_config import get_logger
from .types import AngleMode, EvaluationError, TransportError

logger = get_logger("client")


class Evaluator(Protocol):
    def evaluate(self, expression: str, angle_mode: AngleMode) -> str: ...


class HttpEvaluator:
    """Evaluate expressions through the calculator backend's /calculate endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or SERVER_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}/calculate"

    def evaluate(self, expression: str, angle_mode: AngleMode) -> str:
        payload = {"expression": expression, "isRadians": angle_mode.is_radians}
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.Timeout as exc:
            raise TransportError(
                f"Timed out after {self.timeout}s waiting for {self.url}", kind="timeout"
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"Request to {self.url} failed: {exc}", kind="connection") from exc

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code == 400 and isinstance(data, dict) and "error" in data:
            raise EvaluationError(str(data["error"]), "REMOTE_ERROR")
        if not 200 <= resp.status_code < 300:
            raise TransportError(
                f"Unexpected HTTP status {resp.status_code} from {self.url}",
                kind="http_status",
                status=resp.status_code,
            )
        if not isinstance(data, dict) or not isinstance(data.get("result"), str):
            raise TransportError(f"Unparseable response from {self.url}", kind="bad_response")
        return data["result"]


class LocalEvaluator:
    """Evaluate expressions in-process, without a server."""

    def evaluate(self, expression: str, angle_mode: AngleMode) -> str:
        outcome = evaluate(expression, is_radians=angle_mode.is_radians)
        if not outcome.ok:
            raise EvaluationError(outcome.error or "Invalid Expression", outcome.error_code or "EVAL_ERROR")
        return outcome.result
