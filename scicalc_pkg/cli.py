from __future__ import annotations

import argparse
import json
import shlex
import sys

from .api import evaluate
from .client import HttpEvaluator, LocalEvaluator
from .config import LOG_LEVEL, REQUEST_TIMEOUT, SERVER_HOST, SERVER_PORT, VERSION
from .keypad import button_layout
from .machine import Calculator, CalculatorState
from .types import AngleMode


REPL_HELP = """Type button labels separated by spaces, e.g.  1 6 ²√x =
Commands: layout, state, help, quit"""


def _state_dict(state: CalculatorState) -> dict[str, object]:
    return {
        "display": state.display,
        "expression": state.expression,
        "angle_mode": state.angle_mode.value,
        "memory": state.memory_text,
        "second_functions": state.second_functions,
        "is_result": state.is_result,
    }


def _print_state(state: CalculatorState, output_format: str) -> None:
    if output_format == "json":
        print(json.dumps(_state_dict(state)))
        return
    print(f"  {state.expression or '0'}")
    print(f"  {state.display}")


def _print_layout(state: CalculatorState) -> None:
    secondary, primary = button_layout(state.second_functions, state.angle_mode)
    for panel in (secondary, primary):
        for row in range(0, len(panel), 5):
            print("  " + "  ".join(f"{label:>5}" for label in panel[row : row + 5]))


def _build_calculator(args: argparse.Namespace) -> Calculator:
    if args.remote:
        evaluator = HttpEvaluator(base_url=args.remote, timeout=args.timeout)
    else:
        evaluator = LocalEvaluator()
    state = CalculatorState(angle_mode=AngleMode.DEGREES if args.degrees else AngleMode.RADIANS)
    return Calculator(evaluator, auto_evaluate_unary=args.auto_evaluate or None, state=state)


def _press_all(calculator: Calculator, buttons: list[str]) -> bool:
    for button in buttons:
        try:
            calculator.press(button)
        except ValueError as e:
            print(f"Error: {e}")
            return False
    return True


def repl_loop(calculator: Calculator, output_format: str = "human") -> int:
    """Interactive keypad: each whitespace-separated token is one button press."""
    print(f"SciCalc {VERSION}. {REPL_HELP}")
    _print_state(calculator.state, output_format)
    while True:
        try:
            line = input(">>> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return 0
        line = line.strip()
        if not line:
            continue
        command = line.lower()
        if command in ("quit", "exit"):
            return 0
        if command == "help":
            print(REPL_HELP)
            continue
        if command == "layout":
            _print_layout(calculator.state)
            continue
        if command == "state":
            print(json.dumps(_state_dict(calculator.state), indent=2))
            continue
        try:
            buttons = shlex.split(line)
        except ValueError as e:
            print(f"Error: {e}")
            continue
        _press_all(calculator, buttons)
        _print_state(calculator.state, output_format)


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the SciCalc CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(prog="scicalc")
    parser.add_argument(
        "-e",
        "--eval",
        type=str,
        help="Evaluate one expression and exit (non-interactive)",
        dest="eval_expr",
    )
    parser.add_argument(
        "-k",
        "--press",
        nargs="+",
        metavar="BUTTON",
        help="Press keypad buttons in order and print the final display",
    )
    parser.add_argument("--serve", action="store_true", help="Run the calculator backend")
    parser.add_argument("--host", type=str, default=SERVER_HOST, help="Bind address for --serve")
    parser.add_argument("--port", type=int, default=SERVER_PORT, help="Port for --serve")
    parser.add_argument(
        "--remote",
        type=str,
        metavar="URL",
        help="Evaluate keypad input through a backend at URL instead of in-process",
    )
    parser.add_argument(
        "--degrees", action="store_true", help="Start in degrees mode for sin/cos/tan"
    )
    parser.add_argument(
        "--auto-evaluate",
        action="store_true",
        help="Evaluate immediately after unary function buttons (x², ln, sin, ...)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=REQUEST_TIMEOUT,
        help="Backend request timeout in seconds",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=LOG_LEVEL.upper() if LOG_LEVEL.upper() in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    args = parser.parse_args(argv)

    from .logging_config import setup_logging

    setup_logging(level=args.log_level, log_file=args.log_file, server=args.serve)

    if args.version:
        print(VERSION)
        return 0

    if args.serve:
        from .server import run_server

        run_server(host=args.host, port=args.port)
        return 0

    if args.eval_expr is not None:
        outcome = evaluate(args.eval_expr, is_radians=not args.degrees)
        if args.format == "json":
            print(json.dumps(outcome.to_dict()))
        elif outcome.ok:
            print(outcome.result)
        else:
            print(f"Error: {outcome.error}")
        return 0 if outcome.ok else 1

    calculator = _build_calculator(args)
    if args.press:
        if not _press_all(calculator, args.press):
            return 1
        _print_state(calculator.state, args.format)
        return 0
    return repl_loop(calculator, args.format)


if __name__ == "__main__":
    sys.exit(main_entry())
