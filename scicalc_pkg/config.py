"""Centralized configuration for SciCalc.

This module defines:
- Server and client settings (bind address, base URL, request timeout)
- Evaluation settings (numeric precision, result decimals, input limits)
- Keypad behaviour (auto-evaluation policy for unary function buttons)
- SymPy parse transformations and result size limits
- Regex patterns used by the expression normalizer

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with SCICALC_)
"""

import os
import re

from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    rationalize,
    standard_transformations,
)

try:
    import importlib.metadata

    VERSION = importlib.metadata.version("scicalc")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# HTTP server / client
SERVER_HOST = os.getenv("SCICALC_SERVER_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("SCICALC_SERVER_PORT", "4000"))
SERVER_URL = os.getenv("SCICALC_SERVER_URL", "http://localhost:4000")
REQUEST_TIMEOUT = float(os.getenv("SCICALC_REQUEST_TIMEOUT", "10"))  # seconds
CORS_ORIGINS = os.getenv("SCICALC_CORS_ORIGINS", "*")

# Evaluation
RESULT_DECIMALS = int(os.getenv("SCICALC_RESULT_DECIMALS", "10"))
EVAL_PRECISION = int(os.getenv("SCICALC_EVAL_PRECISION", "64"))  # significant digits
MAX_INPUT_LENGTH = int(os.getenv("SCICALC_MAX_INPUT_LENGTH", "1000"))  # characters
MAX_FACTORIAL_ARGUMENT = int(os.getenv("SCICALC_MAX_FACTORIAL_ARGUMENT", "1000"))
MAX_RESULT_DIGITS = int(os.getenv("SCICALC_MAX_RESULT_DIGITS", "10000"))  # exact powers

# Keypad
AUTO_EVALUATE_UNARY = (
    os.getenv("SCICALC_AUTO_EVALUATE_UNARY", "false").lower() == "true"
)
BUSY_TEXT = "Calculating..."
ERROR_TEXT = "Error"

LOG_LEVEL = os.getenv("SCICALC_LOG_LEVEL", "INFO")


# rationalize keeps decimal literals exact, so 0.1+0.2 evaluates to 3/10.
TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
    rationalize,
)

PERCENT_REGEX = re.compile(r"(\d+(?:\.\d+)?)%")
FACTORIAL_REGEX = re.compile(r"(?<![\d.])(\d+)!")
SQRT_NUMBER_REGEX = re.compile(r"√\s*(\d+(?:\.\d+)?)")
TRIG_CALL_REGEX = re.compile(r"\b(sin|cos|tan)\s*\(")
NTH_ROOT_REGEX = re.compile(r"\s*\bnthRoot\b(?!\s*\()\s*")
# 2pi -> 2*pi, 3(4) -> 3*(4); leaves 2e5, 1.5E-3 and log10( alone
IMPLICIT_NUMBER_REGEX = re.compile(
    r"(?<![\w.])(\d+(?:\.\d+)?)(?![eE][-+]?\d)\s*(?=[A-Za-z_(])"
)
CLOSE_PAREN_DIGIT_REGEX = re.compile(r"\)\s*(?=\d)")
# Accepts partial entries such as 5. and .5
NUMBER_REGEX = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
