"""Keypad input state machine.

``transition(state, button)`` is pure: it maps the current state and one
button press to the next state, plus an optional evaluation request when
the press asks for a result. ``Calculator`` owns a state, runs the
evaluator for those requests and folds the outcome back in.
"""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Callable, Iterable

from . import keypad
from .client import Evaluator
from .config import AUTO_EVALUATE_UNARY, BUSY_TEXT, ERROR_TEXT, NUMBER_REGEX
from .evaluator import strip_trailing_zeros
from .logging_config import evaluation_context, get_logger
from .types import AngleMode, EmptyExpression, EvaluationError, TransportError

logger = get_logger("machine")


class Phase(enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    RESULT = "result"
    ERROR = "error"


@dataclass(frozen=True)
class CalculatorState:
    display: str = "0"
    expression: str = ""
    angle_mode: AngleMode = AngleMode.RADIANS
    memory: Decimal = Decimal(0)
    second_functions: bool = False
    is_result: bool = False
    phase: Phase = Phase.IDLE

    @property
    def busy(self) -> bool:
        return self.phase is Phase.PENDING

    @property
    def memory_text(self) -> str:
        return format_memory(self.memory)


@dataclass(frozen=True)
class EvaluationRequest:
    expression: str
    angle_mode: AngleMode


@dataclass(frozen=True)
class Step:
    state: CalculatorState
    request: EvaluationRequest | None = None


def parse_display_number(text: str) -> Decimal | None:
    """Numeric value of a display string, or None when it is not a plain number."""
    text = text.strip()
    if not NUMBER_REGEX.match(text):
        return None
    return Decimal(text)


def format_memory(value: Decimal) -> str:
    return strip_trailing_zeros(format(value, "f"))


def _toggle_sign(text: str) -> str:
    return text[1:] if text.startswith("-") else f"-{text}"


def _clear_error(state: CalculatorState) -> CalculatorState:
    if state.phase is Phase.ERROR or state.display == ERROR_TEXT:
        return replace(state, display="0", expression="", is_result=False, phase=Phase.IDLE)
    return state


def _request_evaluation(state: CalculatorState) -> Step:
    if not state.expression:
        raise EmptyExpression()
    pending = replace(state, display=BUSY_TEXT, phase=Phase.PENDING)
    return Step(pending, EvaluationRequest(state.expression, state.angle_mode))


def _apply_function(
    state: CalculatorState, template: keypad.FunctionTemplate, auto_evaluate: bool
) -> Step:
    operand = state.expression or state.display
    wrapped = replace(
        state,
        display=template.apply(state.display),
        expression=template.apply(operand),
        is_result=False,
        phase=Phase.IDLE,
    )
    if auto_evaluate and not template.infix:
        return _request_evaluation(wrapped)
    return Step(wrapped)


def _apply_constant(state: CalculatorState, constant: keypad.Constant) -> CalculatorState:
    if state.display == "0" or state.is_result:
        display, expression = constant.display, constant.expression
    else:
        display = state.display + constant.display
        expression = state.expression + constant.expression
    return replace(state, display=display, expression=expression, is_result=False, phase=Phase.IDLE)


def _apply_memory(state: CalculatorState, button: str) -> CalculatorState:
    if button == keypad.MEMORY_CLEAR:
        return replace(state, memory=Decimal(0))
    if button == keypad.MEMORY_RECALL:
        recalled = format_memory(state.memory)
        base = _clear_error(state)
        return replace(base, display=recalled, expression=base.expression + recalled)

    value = parse_display_number(state.display)
    if value is None:
        logger.debug("Ignoring %s: display %r is not a number", button, state.display)
        return state
    if button == keypad.MEMORY_ADD:
        return replace(state, memory=state.memory + value)
    return replace(state, memory=state.memory - value)


def _apply_entry(state: CalculatorState, button: str) -> CalculatorState:
    is_operator = button in keypad.OPERATORS
    after_error = state.phase is Phase.ERROR or state.display == ERROR_TEXT
    if after_error or (state.is_result and not is_operator):
        display = expression = button
    elif state.display == "0" and button != ".":
        display = expression = button
    else:
        display = state.display + button
        expression = state.expression + button
    return replace(state, display=display, expression=expression, is_result=False, phase=Phase.IDLE)


def transition(
    state: CalculatorState,
    button: str,
    *,
    auto_evaluate_unary: bool = AUTO_EVALUATE_UNARY,
    random_source: Callable[[], float] = random.random,
) -> Step:
    """Compute the next state for one button press.

    Presses while an evaluation is pending are dropped. The only
    nondeterminism is ``random_source``, used by ``rand``.

    Raises:
        ValueError: If ``button`` is not a keypad button
    """
    if not keypad.is_known_button(button):
        raise ValueError(f"Unknown button: {button!r}")
    if state.busy:
        logger.debug("Dropped %r while an evaluation is pending", button)
        return Step(state)

    if button == keypad.ALL_CLEAR:
        return Step(replace(state, display="0", expression="", is_result=False, phase=Phase.IDLE))
    if button in keypad.MODE_BUTTONS:
        return Step(replace(state, angle_mode=state.angle_mode.toggled()))
    if button == keypad.SECOND:
        return Step(replace(state, second_functions=not state.second_functions))
    if button in (keypad.MEMORY_ADD, keypad.MEMORY_SUBTRACT, keypad.MEMORY_RECALL, keypad.MEMORY_CLEAR):
        return Step(_apply_memory(state, button))

    if button == keypad.CLEAR:
        expression = "" if state.display in ("0", ERROR_TEXT) else state.expression
        phase = Phase.IDLE if state.phase is Phase.ERROR else state.phase
        return Step(replace(state, display="0", expression=expression, phase=phase))
    if button == keypad.EQUALS:
        try:
            return _request_evaluation(state)
        except EmptyExpression:
            return Step(state)

    if button in keypad.ENTRY_BUTTONS:
        return Step(_apply_entry(state, button))

    state = _clear_error(state)
    if button == keypad.BACKSPACE:
        display = state.display[:-1] if len(state.display) > 1 else "0"
        expression = state.expression[:-1] if len(state.expression) > 1 else ""
        return Step(replace(state, display=display, expression=expression))
    if button == keypad.SIGN:
        return Step(
            replace(
                state,
                display=_toggle_sign(state.display),
                expression=_toggle_sign(state.expression),
            )
        )
    if button in keypad.FUNCTION_TEMPLATES:
        return _apply_function(state, keypad.FUNCTION_TEMPLATES[button], auto_evaluate_unary)
    if button in keypad.CONSTANTS:
        return Step(_apply_constant(state, keypad.CONSTANTS[button]))
    if button == keypad.RANDOM:
        value = str(random_source())
        return Step(replace(state, display=value, expression=value, is_result=False, phase=Phase.IDLE))
    # EE
    return Step(
        replace(
            state,
            display=state.display + "e",
            expression=state.expression + "e",
            is_result=False,
        )
    )


def apply_success(state: CalculatorState, result: str) -> CalculatorState:
    return replace(state, display=result, expression=result, is_result=True, phase=Phase.RESULT)


def apply_failure(state: CalculatorState) -> CalculatorState:
    return replace(state, display=ERROR_TEXT, expression="", is_result=False, phase=Phase.ERROR)


class Calculator:
    """A calculator session: one state, one evaluator, presses applied in order."""

    def __init__(
        self,
        evaluator: Evaluator,
        *,
        auto_evaluate_unary: bool | None = None,
        random_source: Callable[[], float] = random.random,
        state: CalculatorState | None = None,
    ) -> None:
        self.evaluator = evaluator
        self.auto_evaluate_unary = (
            AUTO_EVALUATE_UNARY if auto_evaluate_unary is None else auto_evaluate_unary
        )
        self.random_source = random_source
        self.state = state or CalculatorState()

    def press(self, button: str) -> CalculatorState:
        step = transition(
            self.state,
            button,
            auto_evaluate_unary=self.auto_evaluate_unary,
            random_source=self.random_source,
        )
        self.state = step.state
        if step.request is not None:
            self.state = self._evaluate(step.request)
        return self.state

    def press_many(self, buttons: Iterable[str]) -> CalculatorState:
        for button in buttons:
            self.press(button)
        return self.state

    def _evaluate(self, request: EvaluationRequest) -> CalculatorState:
        try:
            result = self.evaluator.evaluate(request.expression, request.angle_mode)
        except (EvaluationError, TransportError) as exc:
            code = exc.code if isinstance(exc, EvaluationError) else exc.kind
            context = evaluation_context(request.expression, request.angle_mode.value, code)
            logger.warning("Evaluation failed: %s", exc, extra=context)
            return apply_failure(self.state)
        logger.debug("Evaluated %r -> %s", request.expression, result)
        return apply_success(self.state, result)
