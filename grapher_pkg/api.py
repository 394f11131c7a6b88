"""Public API for Grapher - plain functions over the expression engine."""

from __future__ import annotations

from typing import Mapping

from .domain import Domain
from .evaluator import Evaluator
from .formatting import format_number, to_latex
from .intersection import IntersectionFinder
from .nodes import Node, evaluate_tree
from .parser import parse, parse_tree
from .types import EvalResult, GrapherError, Point


def _evaluator(
    parameters: Mapping[str, float] | None, functions: Mapping[str, str] | None
) -> Evaluator:
    return Evaluator(parameters, functions)


def evaluate(
    expression: str,
    x: float,
    parameters: Mapping[str, float] | None = None,
    functions: Mapping[str, str] | None = None,
) -> float:
    """Evaluate an expression at ``x``.

    Example:
        >>> from grapher_pkg.api import evaluate
        >>> evaluate("x^2", -2)
        4.0
        >>> evaluate("a*x + 1", 2, parameters={"a": 3})
        7.0
    """
    return _evaluator(parameters, functions).evaluate(expression, x)


def evaluate_constant(
    expression: str,
    parameters: Mapping[str, float] | None = None,
    functions: Mapping[str, str] | None = None,
) -> float:
    return _evaluator(parameters, functions).evaluate_constant(expression)


def analyze_domain(
    expression: str,
    parameters: Mapping[str, float] | None = None,
    functions: Mapping[str, str] | None = None,
) -> Domain:
    """Domain of ``expression`` in x.

    Example:
        >>> str(analyze_domain("asec(x)"))
        '(-inf, -1] U [1, inf)'
    """
    return _evaluator(parameters, functions).domain(expression)


def find_intersections(
    left: str,
    right: str,
    min_x: float,
    max_x: float,
    pixel_width: int,
    parameters: Mapping[str, float] | None = None,
    functions: Mapping[str, str] | None = None,
) -> list[Point]:
    finder = IntersectionFinder(_evaluator(parameters, functions))
    return finder.find_intersections(left, right, min_x, max_x, pixel_width)


def describe(
    expression: str,
    x: float | None = None,
    parameters: Mapping[str, float] | None = None,
    functions: Mapping[str, str] | None = None,
) -> EvalResult:
    """Parse, evaluate and analyze an expression without raising.

    Args:
        expression: Expression text
        x: Optional value for the free variable
        parameters: Optional named parameter values
        functions: Optional user function bodies

    Returns:
        EvalResult with the normalized expression, its value (when it is
        constant or ``x`` is given), its domain and LaTeX; on failure
        ``ok`` is False and ``error``/``code`` describe the problem
    """
    try:
        evaluator = _evaluator(parameters, functions)
        tree = evaluator.compile(expression)
        value = None
        if not tree.has_variable:
            value = evaluate_tree(tree)
        elif x is not None:
            value = evaluate_tree(tree, x)
        domain = evaluator.domain(expression)
        return EvalResult(
            ok=True,
            result=format_number(value) if value is not None else str(tree),
            value=value,
            domain=str(domain),
            latex=to_latex(tree),
        )
    except GrapherError as e:
        return EvalResult(ok=False, error=e.message, code=e.code)


__all__ = [
    "Node",
    "parse",
    "parse_tree",
    "evaluate",
    "evaluate_constant",
    "analyze_domain",
    "find_intersections",
    "describe",
]
