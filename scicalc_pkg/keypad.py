"""Button tables for the calculator keypad.

Every function button is described by a template applied to the current
text, so the state machine never needs per-button code paths.
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import AngleMode

DIGITS = frozenset("0123456789")
OPERATORS = frozenset({"+", "-", "*", "/", "%", "^"})
ENTRY_BUTTONS = DIGITS | OPERATORS | {".", "(", ")"}

ALL_CLEAR = "AC"
CLEAR = "C"
BACKSPACE = "←"
EQUALS = "="
SIGN = "+/-"
MEMORY_ADD = "M+"
MEMORY_SUBTRACT = "M-"
MEMORY_RECALL = "MR"
MEMORY_CLEAR = "MC"
SECOND = "2nd"
RANDOM = "rand"
EXPONENT = "EE"
MODE_BUTTONS = frozenset({"Rad", "Deg"})


@dataclass(frozen=True)
class FunctionTemplate:
    """How a function button rewrites the text it is applied to.

    ``template`` contains ``{x}`` where the previous text goes. Infix
    templates leave the expression waiting for another operand and are
    never evaluated automatically.
    """

    template: str
    infix: bool = False

    def apply(self, text: str) -> str:
        return self.template.replace("{x}", text)


FUNCTION_TEMPLATES: dict[str, FunctionTemplate] = {
    "x²": FunctionTemplate("({x})^2"),
    "x³": FunctionTemplate("({x})^3"),
    "xʸ": FunctionTemplate("{x}^", infix=True),
    "eˣ": FunctionTemplate("exp({x})"),
    "10ˣ": FunctionTemplate("10^({x})"),
    "¹/x": FunctionTemplate("1/({x})"),
    "²√x": FunctionTemplate("sqrt({x})"),
    "³√x": FunctionTemplate("cbrt({x})"),
    "ʸ√x": FunctionTemplate("{x} nthRoot ", infix=True),
    "ln": FunctionTemplate("log({x})"),
    "log₁₀": FunctionTemplate("log10({x})"),
    "sin": FunctionTemplate("sin({x})"),
    "cos": FunctionTemplate("cos({x})"),
    "tan": FunctionTemplate("tan({x})"),
    "sinh": FunctionTemplate("sinh({x})"),
    "cosh": FunctionTemplate("cosh({x})"),
    "tanh": FunctionTemplate("tanh({x})"),
    "sin⁻¹": FunctionTemplate("asin({x})"),
    "cos⁻¹": FunctionTemplate("acos({x})"),
    "tan⁻¹": FunctionTemplate("atan({x})"),
    "!": FunctionTemplate("{x}!"),
}


@dataclass(frozen=True)
class Constant:
    display: str
    expression: str


CONSTANTS: dict[str, Constant] = {
    "e": Constant(display="2.71828", expression="2.71828"),
    "π": Constant(display="3.14159", expression="pi"),
}

# (primary, second) labels sharing one key
SECOND_FUNCTION_PAIRS: tuple[tuple[str, str], ...] = (
    ("x²", "x³"),
    ("²√x", "³√x"),
    ("sin", "sin⁻¹"),
    ("cos", "cos⁻¹"),
    ("tan", "tan⁻¹"),
    ("xʸ", "¹/x"),
    ("!", "eˣ"),
    ("%", "10ˣ"),
)
_SECOND_OF = dict(SECOND_FUNCTION_PAIRS)

_SECONDARY_PANEL = (
    ALL_CLEAR, SIGN, BACKSPACE, SECOND, "{mode}",
    MEMORY_CLEAR, MEMORY_ADD, MEMORY_SUBTRACT, MEMORY_RECALL, CLEAR,
)
_PRIMARY_PANEL = (
    "x²", "²√x", "sin", "cos", "tan",
    "xʸ", "ln", "(", ")", "/",
    "!", "7", "8", "9", "*",
    "%", "4", "5", "6", "-",
    "π", "1", "2", "3", "+",
    "e", "0", ".", EQUALS,
)


def active_label(label: str, second_functions: bool) -> str:
    """Label shown on a key given the 2nd toggle."""
    if second_functions:
        return _SECOND_OF.get(label, label)
    return label


def button_layout(
    second_functions: bool = False, angle_mode: AngleMode = AngleMode.RADIANS
) -> tuple[list[str], list[str]]:
    """Return the (secondary, primary) panels with their currently active labels."""
    secondary = [angle_mode.value if label == "{mode}" else label for label in _SECONDARY_PANEL]
    primary = [active_label(label, second_functions) for label in _PRIMARY_PANEL]
    return secondary, primary


def is_known_button(label: str) -> bool:
    return (
        label in ENTRY_BUTTONS
        or label in FUNCTION_TEMPLATES
        or label in CONSTANTS
        or label in MODE_BUTTONS
        or label
        in {
            ALL_CLEAR, CLEAR, BACKSPACE, EQUALS, SIGN, MEMORY_ADD, MEMORY_SUBTRACT,
            MEMORY_RECALL, MEMORY_CLEAR, SECOND, RANDOM, EXPONENT,
        }
    )
