"""Unit tests for parser module."""

import math
import unittest

import pytest

from grapher_pkg.config import MAX_INPUT_LENGTH
from grapher_pkg.functions import MathFunction
from grapher_pkg.nodes import (
    BinaryOp,
    FunctionCall,
    Node,
    ParameterizedFunctionCall,
    evaluate_tree,
)
from grapher_pkg.parser import is_balanced, parse, parse_tree
from grapher_pkg.types import ParseError


class TestArithmetic(unittest.TestCase):
    """Test constant folding of arithmetic."""

    def test_precedence(self):
        self.assertEqual(parse("2+3*4"), 14.0)
        self.assertEqual(parse("(2+3)*4"), 20.0)
        self.assertEqual(parse("10-4-3"), 3.0)
        self.assertEqual(parse("12/3/2"), 2.0)

    def test_power_is_right_associative(self):
        self.assertEqual(parse("2^3^2"), 512.0)

    def test_unary_minus_binds_looser_than_power(self):
        self.assertEqual(parse("-2^2"), -4.0)
        self.assertEqual(parse("(-2)^2"), 4.0)
        self.assertEqual(parse("2^-1"), 0.5)

    def test_unary_after_operator(self):
        self.assertEqual(parse("2*-3"), -6.0)
        self.assertEqual(parse("--2"), 2.0)
        self.assertEqual(parse("+5"), 5.0)

    def test_constants(self):
        self.assertAlmostEqual(parse("pi"), math.pi)
        self.assertAlmostEqual(parse("PI"), math.pi)
        self.assertAlmostEqual(parse("e"), math.e)
        self.assertAlmostEqual(parse("2*pi"), 2 * math.pi)

    def test_number_literals(self):
        self.assertEqual(parse("1.5"), 1.5)
        self.assertEqual(parse(".5"), 0.5)
        self.assertEqual(parse("2e-3"), 0.002)

    def test_python_power_spelling(self):
        self.assertEqual(parse("2**3"), 8.0)


class TestFunctions(unittest.TestCase):
    """Test built-in function calls."""

    def test_trig(self):
        self.assertEqual(parse("sin(0)"), 0.0)
        self.assertEqual(parse("cos(0)"), 1.0)
        self.assertAlmostEqual(parse("tan(pi/4)"), 1.0)

    def test_reciprocal_trig(self):
        self.assertAlmostEqual(parse("sec(0)"), 1.0)
        self.assertAlmostEqual(parse("csc(pi/2)"), 1.0)
        self.assertAlmostEqual(parse("cot(pi/4)"), 1.0)

    def test_inverse_functions(self):
        self.assertAlmostEqual(parse("asin(1)"), math.pi / 2)
        self.assertAlmostEqual(parse("asec(2)"), math.acos(0.5))
        self.assertAlmostEqual(parse("acot(1)"), math.pi / 4)
        self.assertAlmostEqual(parse("acosh(1)"), 0.0)

    def test_log_defaults_to_base_ten(self):
        self.assertEqual(parse("log(100)"), 2.0)

    def test_log_with_base(self):
        self.assertAlmostEqual(parse("log{2}(8)"), 3.0)
        self.assertAlmostEqual(parse("log{e}(e^2)"), 2.0)

    def test_ln_sqrt_abs(self):
        self.assertAlmostEqual(parse("ln(e)"), 1.0)
        self.assertEqual(parse("sqrt(16)"), 4.0)
        self.assertEqual(parse("abs(-3)"), 3.0)

    def test_root(self):
        self.assertAlmostEqual(parse("root{3}(27)"), 3.0)
        self.assertAlmostEqual(parse("root{3}(-8)"), -2.0)
        self.assertTrue(math.isnan(parse("root{2}(-4)")))

    def test_call_without_parentheses(self):
        tree = parse_tree("sin x^2")
        self.assertIsInstance(tree, FunctionCall)
        self.assertIsInstance(tree.argument, BinaryOp)

    def test_power_applies_to_call(self):
        tree = parse_tree("sin(x)^2")
        self.assertIsInstance(tree, BinaryOp)
        self.assertEqual(tree.operator, "^")
        self.assertIsInstance(tree.left, FunctionCall)
        self.assertAlmostEqual(evaluate_tree(tree, math.pi / 2), 1.0)

    def test_nodes_store_function_member(self):
        tree = parse_tree("log{2}(x)")
        self.assertIsInstance(tree, ParameterizedFunctionCall)
        self.assertIs(tree.function, MathFunction.LOG)
        self.assertEqual(tree.parameter, 2.0)


class TestIeeeResults(unittest.TestCase):
    """Division by zero and domain errors are values, not errors."""

    def test_division_by_zero(self):
        self.assertEqual(parse("1/0"), math.inf)
        self.assertEqual(parse("-1/0"), -math.inf)
        self.assertTrue(math.isnan(parse("0/0")))

    def test_out_of_domain(self):
        self.assertTrue(math.isnan(parse("ln(-1)")))
        self.assertTrue(math.isnan(parse("sqrt(-1)")))
        self.assertTrue(math.isnan(parse("asin(2)")))


class TestTrees(unittest.TestCase):
    """Test tree results for expressions with a free variable."""

    def test_variable_gives_tree(self):
        tree = parse("x^2")
        self.assertIsInstance(tree, Node)
        self.assertTrue(tree.has_variable)

    def test_parse_tree_always_returns_tree(self):
        self.assertIsInstance(parse_tree("2+2"), Node)

    def test_case_insensitive_variable(self):
        self.assertEqual(evaluate_tree(parse_tree("X+1"), 2.0), 3.0)

    def test_cached_tree_is_shared(self):
        self.assertIs(parse_tree("x+41"), parse_tree("x+41"))


class TestUserFunctions(unittest.TestCase):
    """Test inline expansion of user-defined functions."""

    def test_simple_call(self):
        self.assertEqual(parse("f(3)", {"f": "x^2"}), 9.0)

    def test_argument_is_substituted_as_subtree(self):
        tree = parse_tree("f(x+1)", {"f": "x^2"})
        self.assertEqual(evaluate_tree(tree, 1.0), 4.0)
        self.assertEqual(evaluate_tree(tree, -3.0), 4.0)

    def test_nested_definitions(self):
        self.assertEqual(parse("g(2)", {"f": "x+1", "g": "f(x)*2"}), 6.0)

    def test_names_are_case_insensitive(self):
        self.assertEqual(parse("f(2)", {"F": "x*2"}), 4.0)

    def test_direct_recursion(self):
        with self.assertRaises(ParseError) as ctx:
            parse("f(1)", {"f": "f(x)+1"})
        self.assertEqual(ctx.exception.code, "RECURSIVE_FUNCTION")

    def test_mutual_recursion(self):
        with self.assertRaises(ParseError) as ctx:
            parse("f(1)", {"f": "g(x)", "g": "f(x)"})
        self.assertEqual(ctx.exception.code, "RECURSIVE_FUNCTION")

    def test_error_in_body(self):
        with self.assertRaises(ParseError) as ctx:
            parse("f(1)", {"f": "x+"})
        self.assertEqual(ctx.exception.code, "UNEXPECTED_END")
        self.assertIn("'f'", ctx.exception.message)

    def test_builtin_wins_over_user_function(self):
        self.assertEqual(parse("sin(0)", {"sin": "x+1"}), 0.0)


class TestParseErrors:
    """Test malformed input."""

    @pytest.mark.parametrize(
        "text, code",
        [
            ("", "EMPTY_INPUT"),
            ("   ", "EMPTY_INPUT"),
            ("2+", "UNEXPECTED_END"),
            ("2 3", "TRAILING_INPUT"),
            ("2x", "TRAILING_INPUT"),
            ("foo(2)", "UNKNOWN_IDENTIFIER"),
            ("y + 1", "UNKNOWN_IDENTIFIER"),
            ("(1+2", "UNBALANCED_PARENTHESES"),
            ("1+2)", "UNBALANCED_PARENTHESES"),
            ("root(4)", "MISSING_PARAMETER"),
            ("sin{2}(x)", "UNEXPECTED_PARAMETER"),
            ("log{x}(2)", "NON_CONSTANT_PARAMETER"),
            ("*2", "UNEXPECTED_TOKEN"),
            ("1.2.3", "MALFORMED_NUMBER"),
        ],
    )
    def test_error_codes(self, text, code):
        with pytest.raises(ParseError) as exc_info:
            parse(text)
        assert exc_info.value.code == code

    def test_input_too_long(self):
        with pytest.raises(ParseError) as exc_info:
            parse("1" * (MAX_INPUT_LENGTH + 1))
        assert exc_info.value.code == "TOO_LONG"

    def test_position_reported(self):
        with pytest.raises(ParseError) as exc_info:
            parse("1 + foo")
        assert exc_info.value.position == 4


class TestIsBalanced(unittest.TestCase):
    def test_parentheses_balancing(self):
        self.assertEqual(is_balanced("(1+2)"), (True, None))
        self.assertEqual(is_balanced("log{2}((x))"), (True, None))
        self.assertEqual(is_balanced("(1+2"), (False, 0))
        self.assertEqual(is_balanced("1+2)"), (False, 3))
        self.assertEqual(is_balanced("(1}"), (False, 2))


if __name__ == "__main__":
    unittest.main()
