"""Tests for domain analysis of expression trees."""

import logging
import math

import pytest

from grapher_pkg import domain_analyzer
from grapher_pkg.config import DOMAIN_EPSILON
from grapher_pkg.domain import Composed, Interval, unrestricted
from grapher_pkg.domain_analyzer import analyze, collect_constraints, merge_constraints
from grapher_pkg.functions import ConstraintKind
from grapher_pkg.parser import parse, parse_tree


def domain_of(text):
    return analyze(parse_tree(text))


def members(domain):
    assert isinstance(domain, Composed)
    return [(m.min_bound(), m.max_bound()) for m in domain.members]


class TestSingleFunctions:
    def test_polynomial_is_unrestricted(self):
        assert domain_of("x^3 - 2*x") == unrestricted()

    def test_ln_open_lower_bound(self):
        assert domain_of("ln(x)") == Interval(DOMAIN_EPSILON, math.inf)

    def test_log_with_base(self):
        assert domain_of("log{2}(x)") == Interval(DOMAIN_EPSILON, math.inf)

    def test_sqrt_closed_lower_bound(self):
        assert domain_of("sqrt(x)") == Interval(0.0, math.inf)

    def test_asin(self):
        assert domain_of("asin(x)") == Interval(-1.0, 1.0)

    def test_atanh_open_both_ends(self):
        assert domain_of("atanh(x)") == Interval(-1.0 + DOMAIN_EPSILON, 1.0 - DOMAIN_EPSILON)

    def test_acosh(self):
        assert domain_of("acosh(x)") == Interval(1.0, math.inf)

    def test_asech(self):
        assert domain_of("asech(x)") == Interval(DOMAIN_EPSILON, 1.0)

    def test_asec_outside_unit(self):
        assert members(domain_of("asec(x)")) == [(-math.inf, -1.0), (1.0, math.inf)]

    def test_acoth_excludes_unit_edges(self):
        assert members(domain_of("acoth(x)")) == [
            (-math.inf, -1.0 - DOMAIN_EPSILON),
            (1.0 + DOMAIN_EPSILON, math.inf),
        ]

    @pytest.mark.parametrize("name", ["acot", "acsch"])
    def test_excludes_zero(self, name):
        assert members(domain_of(f"{name}(x)")) == [
            (-math.inf, -DOMAIN_EPSILON),
            (DOMAIN_EPSILON, math.inf),
        ]

    def test_even_root(self):
        assert domain_of("root{2}(x)") == Interval(0.0, math.inf)
        assert domain_of("root{4}(x)") == Interval(0.0, math.inf)

    def test_odd_root_unrestricted(self):
        assert domain_of("root{3}(x)") == unrestricted()


class TestAffineArguments:
    def test_shifted(self):
        assert domain_of("ln(x - 1)") == Interval(1.0 + DOMAIN_EPSILON, math.inf)

    def test_negated_flips_bound(self):
        assert domain_of("ln(-x)") == Interval(-math.inf, -DOMAIN_EPSILON)

    def test_reflected_sqrt(self):
        assert domain_of("sqrt(3 - x)") == Interval(-math.inf, 3.0)

    def test_scaled(self):
        assert domain_of("sqrt(2*x - 4)") == Interval(2.0, math.inf)

    def test_scaled_absolute_value_rule(self):
        assert members(domain_of("asec(x/2)")) == [(-math.inf, -2.0), (2.0, math.inf)]

    def test_shifted_absolute_value_rule(self):
        assert members(domain_of("asec(x - 3)")) == [(-math.inf, 2.0), (4.0, math.inf)]

    def test_constant_argument_restricts_nothing(self):
        assert domain_of("ln(2) + x") == unrestricted()

    def test_non_affine_argument_restricts_nothing(self):
        assert domain_of("ln(x^2 - 1)") == unrestricted()
        assert domain_of("sqrt(sin(x))") == unrestricted()

    def test_nested_calls_collect_inner_first(self):
        constraints = []
        collect_constraints(parse_tree("sqrt(ln(x))"), constraints)
        assert [c.kind for c in constraints] == [ConstraintKind.GREATER_THAN]


class TestCombinations:
    def test_bounds_intersect(self):
        assert domain_of("sqrt(x) + sqrt(4 - x)") == Interval(0.0, 4.0)

    def test_no_common_x(self):
        assert domain_of("sqrt(x - 5) + sqrt(-x)") == Interval(0.0, 0.0)

    def test_excluded_point_inside_bounds(self):
        assert members(domain_of("ln(x) + acot(x - 1)")) == [
            (DOMAIN_EPSILON, 1.0 - DOMAIN_EPSILON),
            (1.0 + DOMAIN_EPSILON, math.inf),
        ]

    def test_excluded_point_outside_bounds_ignored(self):
        assert domain_of("sqrt(x) + acot(x + 5)") == Interval(0.0, math.inf)

    def test_absolute_value_rule_clipped_to_bounds(self):
        assert members(domain_of("sqrt(x + 3) + asec(x)")) == [
            (-3.0, -1.0),
            (1.0, math.inf),
        ]

    def test_empty_pieces_dropped(self):
        assert domain_of("sqrt(x - 2) + asec(x)") == Composed((Interval(2.0, math.inf),))

    def test_merge_without_constraints(self):
        assert merge_constraints([]) == unrestricted()


class TestAnalyze:
    def test_folded_constant(self):
        assert analyze(parse("2 + 2")) == unrestricted()

    def test_constant_tree(self):
        assert analyze(parse_tree("ln(2)")) == unrestricted()

    def test_failure_is_logged_and_unrestricted(self, monkeypatch, caplog):
        def broken(constraints):
            raise RuntimeError("boom")

        monkeypatch.setattr(domain_analyzer, "merge_constraints", broken)
        with caplog.at_level(logging.WARNING, logger="grapher.domain"):
            result = analyze(parse_tree("ln(x)"))
        assert result == unrestricted()
        assert "boom" in caplog.text
