"""SciCalc package: keypad state machine, expression normalizer, evaluator, and HTTP backend."""

__all__ = [
    "config",
    "types",
    "logging_config",
    "normalizer",
    "evaluator",
    "api",
    "server",
    "client",
    "keypad",
    "machine",
    "cli",
]

# Public API exports

__api_exports__ = [
    "evaluate",
    "normalize_expression",
    "validate_expression",
]
