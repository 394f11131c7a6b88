"""Unit tests for the evaluator."""

import math
import unittest

import numpy as np

from grapher_pkg.domain import Interval
from grapher_pkg.evaluator import Evaluator, evaluate, evaluate_constant
from grapher_pkg.types import DefinitionError, EvaluationError


class TestEvaluate(unittest.TestCase):
    """Test evaluation at a point."""

    def test_at_point(self):
        self.assertEqual(evaluate("x^2", -2.0), 4.0)
        self.assertEqual(evaluate("sqrt(x)", 9.0), 3.0)

    def test_matches_parenthesized_substitution(self):
        # x binds as an atom, so -x^2 at 3 is -9
        self.assertEqual(evaluate("-x^2", 3.0), -9.0)
        self.assertEqual(evaluate("2^x", -1.0), 0.5)

    def test_ieee_results(self):
        self.assertEqual(evaluate("1/x", 0.0), math.inf)
        self.assertTrue(math.isnan(evaluate("ln(x)", -1.0)))

    def test_array(self):
        xs = np.array([1.0, 2.0, 3.0])
        np.testing.assert_allclose(evaluate("2*x", xs), [2.0, 4.0, 6.0])

    def test_constant_expression_over_array(self):
        result = evaluate("5", np.zeros(4))
        self.assertEqual(result.shape, (4,))

    def test_parse_error_becomes_evaluation_error(self):
        with self.assertRaises(EvaluationError) as ctx:
            evaluate("foo(x)", 1.0)
        self.assertEqual(ctx.exception.code, "UNKNOWN_IDENTIFIER")


class TestEvaluateConstant(unittest.TestCase):
    def test_constant(self):
        self.assertEqual(evaluate_constant("2+3*4"), 14.0)
        self.assertAlmostEqual(evaluate_constant("sin(pi/2)"), 1.0)

    def test_free_variable(self):
        with self.assertRaises(EvaluationError) as ctx:
            evaluate_constant("x + 1")
        self.assertEqual(ctx.exception.code, "FREE_VARIABLE")

    def test_empty(self):
        with self.assertRaises(EvaluationError) as ctx:
            evaluate_constant("")
        self.assertEqual(ctx.exception.code, "EMPTY_INPUT")


class TestParameters(unittest.TestCase):
    """Test parameter binding and substitution."""

    def test_parameter_value(self):
        evaluator = Evaluator({"a": 2.0})
        self.assertEqual(evaluator.evaluate("a*x", 3.0), 6.0)

    def test_case_insensitive(self):
        evaluator = Evaluator({"A": 2.0})
        self.assertEqual(evaluator.evaluate("a + A", 0.0), 4.0)
        self.assertIn("a", evaluator.parameters)

    def test_whole_word_only(self):
        evaluator = Evaluator({"a": 2.0})
        # "tan" and "atan" must not be touched
        self.assertEqual(evaluator.substitute("atan(a)"), "atan((2.0))")

    def test_negative_value_is_parenthesized(self):
        evaluator = Evaluator({"a": -2.0})
        self.assertEqual(evaluator.evaluate_constant("a^2"), 4.0)

    def test_set_and_remove(self):
        evaluator = Evaluator()
        evaluator.set_parameter("k", 3)
        self.assertEqual(evaluator.evaluate_constant("k*2"), 6.0)
        evaluator.remove_parameter("K")
        with self.assertRaises(EvaluationError):
            evaluator.evaluate_constant("k*2")

    def test_parameters_property_is_a_copy(self):
        evaluator = Evaluator({"a": 1.0})
        evaluator.parameters["a"] = 5.0
        self.assertEqual(evaluator.parameters["a"], 1.0)

    def test_reserved_names(self):
        evaluator = Evaluator()
        for name in ("x", "pi", "e", "sin", "LOG"):
            with self.subTest(name=name):
                with self.assertRaises(DefinitionError) as ctx:
                    evaluator.set_parameter(name, 1.0)
                self.assertEqual(ctx.exception.code, "RESERVED_NAME")

    def test_invalid_name(self):
        with self.assertRaises(DefinitionError) as ctx:
            Evaluator().set_parameter("2a", 1.0)
        self.assertEqual(ctx.exception.code, "INVALID_NAME")

    def test_non_finite_value_rejected(self):
        evaluator = Evaluator()
        for value in (math.inf, -math.inf, math.nan):
            with self.subTest(value=value):
                with self.assertRaises(DefinitionError) as ctx:
                    evaluator.set_parameter("a", value)
                self.assertEqual(ctx.exception.code, "NON_FINITE_VALUE")
        self.assertEqual(evaluator.parameters, {})


class TestUserFunctions(unittest.TestCase):
    def test_define_and_call(self):
        evaluator = Evaluator(functions={"f": "x^2 + 1"})
        self.assertEqual(evaluator.evaluate("f(x)", 2.0), 5.0)
        self.assertEqual(evaluator.evaluate("f(2*x)", 1.0), 5.0)

    def test_parameters_reach_function_bodies(self):
        evaluator = Evaluator({"a": 3.0}, {"f": "a*x"})
        self.assertEqual(evaluator.evaluate("f(x)", 2.0), 6.0)

    def test_remove_function(self):
        evaluator = Evaluator(functions={"f": "x"})
        evaluator.remove_function("f")
        with self.assertRaises(EvaluationError) as ctx:
            evaluator.evaluate("f(x)", 1.0)
        self.assertEqual(ctx.exception.code, "UNKNOWN_IDENTIFIER")

    def test_builtin_name_rejected(self):
        with self.assertRaises(DefinitionError):
            Evaluator().define_function("sin", "x")

    def test_recursive_function(self):
        evaluator = Evaluator(functions={"f": "f(x)"})
        with self.assertRaises(EvaluationError) as ctx:
            evaluator.evaluate("f(x)", 1.0)
        self.assertEqual(ctx.exception.code, "RECURSIVE_FUNCTION")


class TestCompileAndDomain(unittest.TestCase):
    def test_compile_is_cached(self):
        evaluator = Evaluator({"a": 1.5})
        self.assertIs(evaluator.compile("a*x + 7"), evaluator.compile("a*x + 7"))

    def test_domain(self):
        evaluator = Evaluator({"c": 2.0})
        self.assertEqual(evaluator.domain("sqrt(x - c)"), Interval(2.0, math.inf))


if __name__ == "__main__":
    unittest.main()
