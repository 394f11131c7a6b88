"""Tests for the public API: typed returns and error results."""

import math

import pytest

from grapher_pkg.api import (
    analyze_domain,
    describe,
    evaluate,
    evaluate_constant,
    find_intersections,
    parse,
)
from grapher_pkg.domain import Composed, Interval
from grapher_pkg.nodes import Node
from grapher_pkg.types import EvalResult, EvaluationError, Point


class TestTypedReturns:
    def test_parse_returns_float_or_node(self):
        assert isinstance(parse("2+2"), float)
        assert isinstance(parse("x+2"), Node)

    def test_evaluate(self):
        assert evaluate("x^2", -2) == 4.0
        assert evaluate("a*x + 1", 2, parameters={"a": 3}) == 7.0

    def test_evaluate_with_functions(self):
        assert evaluate("g(x) + 1", 2, functions={"g": "x^3"}) == 9.0

    def test_evaluate_constant(self):
        assert evaluate_constant("b/2", parameters={"b": 5}) == 2.5
        with pytest.raises(EvaluationError):
            evaluate_constant("x")

    def test_analyze_domain(self):
        assert analyze_domain("sqrt(x - k)", parameters={"k": 1}) == Interval(1.0, math.inf)
        domain = analyze_domain("asec(x)")
        assert isinstance(domain, Composed)
        assert str(domain) == "(-inf, -1] U [1, inf)"

    def test_find_intersections(self):
        points = find_intersections("x", "c", -10, 10, 800, parameters={"c": 3})
        assert len(points) == 1
        assert isinstance(points[0], Point)
        assert points[0].x == pytest.approx(3.0, abs=1e-6)


class TestDescribe:
    def test_constant(self):
        result = describe("2+2")
        assert isinstance(result, EvalResult)
        assert result.ok
        assert result.value == 4.0
        assert result.result == "4"
        assert result.domain == "(-inf, inf)"
        assert result.latex == "2 + 2"

    def test_huge_constant_power(self):
        result = describe("10^10^10")
        assert result.ok
        assert result.value == math.inf
        assert result.result == "inf"
        assert result.latex == "10^{10^{10}}"

    def test_with_x(self):
        result = describe("x^2", x=3)
        assert result.value == 9.0
        assert result.result == "9"
        assert result.latex == "x^{2}"

    def test_without_x(self):
        result = describe("x^2")
        assert result.ok
        assert result.value is None
        assert result.result == "(x ^ 2)"

    def test_domain(self):
        assert describe("ln(x)").domain == "[1e-10, inf)"

    def test_error(self):
        result = describe("foo(")
        assert not result.ok
        assert result.code == "UNBALANCED_PARENTHESES"
        assert result.to_dict() == {
            "ok": False,
            "error": result.error,
            "code": "UNBALANCED_PARENTHESES",
        }

    def test_unknown_identifier(self):
        result = describe("y + 1")
        assert result.code == "UNKNOWN_IDENTIFIER"
        assert "EvalResult(ok=False" in repr(result)

    def test_to_dict_skips_missing_fields(self):
        data = describe("x").to_dict()
        assert data["ok"] is True
        assert "value" not in data
        assert "error" not in data
