"""Unit tests for the expression normalizer."""

import unittest

import sympy as sp

from scicalc_pkg.config import MAX_INPUT_LENGTH
from scicalc_pkg.normalizer import is_balanced, normalize, parse_normalized
from scicalc_pkg.types import AngleMode, EvaluationError, ValidationError


class TestNotationRewrites(unittest.TestCase):
    """Calculator notation -> evaluator syntax."""

    def test_plain_arithmetic_unchanged(self):
        self.assertEqual(normalize("8+4"), "8+4")
        self.assertEqual(normalize("(9)^2"), "(9)^2")

    def test_percent(self):
        self.assertEqual(normalize("50%"), "(50/100)")
        self.assertEqual(normalize("12.5%"), "(12.5/100)")

    def test_sqrt_and_pi_symbols(self):
        self.assertEqual(normalize("√(16)"), "sqrt(16)")
        self.assertEqual(normalize("√9"), "sqrt(9)")
        self.assertEqual(normalize("π"), "pi")

    def test_factorial_literal(self):
        self.assertEqual(normalize("5!"), "factorial(5)")
        self.assertEqual(normalize("3+4!"), "3+factorial(4)")

    def test_factorial_of_group(self):
        self.assertEqual(normalize("(3)!"), "factorial((3))")
        self.assertEqual(normalize("sqrt(16)!"), "factorial(sqrt(16))")

    def test_nth_root_infix(self):
        self.assertEqual(normalize("8 nthRoot 3"), "nthRoot(8, 3)")
        self.assertEqual(normalize("(2+6) nthRoot 3"), "nthRoot((2+6), 3)")
        self.assertEqual(normalize("1+27 nthRoot 3"), "1+nthRoot(27, 3)")

    def test_implicit_multiplication_after_numbers(self):
        self.assertEqual(normalize("2π"), "2*pi")
        self.assertEqual(normalize("3(4)"), "3*(4)")
        self.assertEqual(normalize("(7/100)3"), "(7/100)*3")

    def test_scientific_notation_kept(self):
        self.assertEqual(normalize("2e5"), "2e5")
        self.assertEqual(normalize("1.5E-3"), "1.5E-3")
        self.assertEqual(normalize("log10(100)"), "log10(100)")

    def test_unicode_operators(self):
        self.assertEqual(normalize("6×2÷3−1"), "6*2/3-1")


class TestDegreeTagging(unittest.TestCase):
    """sin/cos/tan arguments in degrees mode."""

    def test_radians_untouched(self):
        self.assertEqual(normalize("sin(30)", AngleMode.RADIANS), "sin(30)")

    def test_degrees_tagged(self):
        self.assertEqual(normalize("sin(30)", AngleMode.DEGREES), "sin((30)*deg)")
        self.assertEqual(normalize("cos(60)+tan(45)", AngleMode.DEGREES), "cos((60)*deg)+tan((45)*deg)")

    def test_nested_arguments(self):
        self.assertEqual(
            normalize("sin(cos(60))", AngleMode.DEGREES), "sin((cos((60)*deg))*deg)"
        )
        self.assertEqual(normalize("sin((10+20))", AngleMode.DEGREES), "sin(((10+20))*deg)")

    def test_inverse_and_hyperbolic_untouched(self):
        self.assertEqual(normalize("asin(0.5)", AngleMode.DEGREES), "asin(0.5)")
        self.assertEqual(normalize("sinh(1)", AngleMode.DEGREES), "sinh(1)")


class TestValidation(unittest.TestCase):
    """Rejected inputs."""

    def test_empty(self):
        with self.assertRaises(ValidationError) as ctx:
            normalize("   ")
        self.assertEqual(ctx.exception.code, "EMPTY_INPUT")

    def test_too_long(self):
        with self.assertRaises(ValidationError) as ctx:
            normalize("1" * (MAX_INPUT_LENGTH + 1))
        self.assertEqual(ctx.exception.code, "TOO_LONG")

    def test_forbidden_tokens(self):
        for bad in ("__import__('os')", "import sys", "lambda: 1"):
            with self.assertRaises(ValidationError) as ctx:
                normalize(bad)
            self.assertEqual(ctx.exception.code, "FORBIDDEN_TOKEN")

    def test_unbalanced(self):
        with self.assertRaises(ValidationError) as ctx:
            normalize("(1+2")
        self.assertEqual(ctx.exception.code, "UNBALANCED")

    def test_factorial_limit(self):
        with self.assertRaises(ValidationError) as ctx:
            normalize("100000!")
        self.assertEqual(ctx.exception.code, "TOO_LARGE")

    def test_dangling_operators(self):
        with self.assertRaises(ValidationError):
            normalize("5+!")
        with self.assertRaises(ValidationError):
            normalize("8 nthRoot")

    def test_is_balanced_position(self):
        self.assertEqual(is_balanced("((1+2)*3)"), (True, None))
        self.assertEqual(is_balanced("1+2)"), (False, 3))
        self.assertEqual(is_balanced("(1+2"), (False, 0))


class TestParse(unittest.TestCase):
    """SymPy parsing of normalized strings."""

    def test_parse_power_uses_caret(self):
        self.assertEqual(parse_normalized("(9)^2").doit(), 81)

    def test_parse_leaves_arithmetic_unevaluated(self):
        expr = parse_normalized("9^9^9")
        self.assertIsInstance(expr, sp.Pow)
        self.assertIsInstance(expr.exp, sp.Pow)

    def test_decimals_are_exact(self):
        self.assertEqual(parse_normalized("0.1+0.2").doit(), sp.Rational(3, 10))

    def test_group_factorial_limit(self):
        with self.assertRaises(EvaluationError) as ctx:
            parse_normalized(normalize("(200000)!"))
        self.assertEqual(ctx.exception.code, "TOO_LARGE")

    def test_syntax_error(self):
        with self.assertRaises(EvaluationError) as ctx:
            parse_normalized("2 +")
        self.assertEqual(ctx.exception.code, "PARSE_ERROR")


if __name__ == "__main__":
    unittest.main()
