"""Domain analysis of expression trees.

The analyzer walks a tree, asks every function call for the restrictions it
places on its argument, maps those restrictions from the argument onto x,
and folds them into a single ``Domain``.

Only arguments that are affine in x (``a*x + b`` with ``a != 0``) can be
mapped back onto x. A constant argument restricts nothing, and neither does
an argument such as ``x^2 - 1``; evaluation produces NaN where such an
expression is undefined and callers skip those samples. Denominators are
not solved either, so ``1/x`` keeps the whole real line.

Open bounds are approximated by moving them inward by ``DOMAIN_EPSILON``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .config import DOMAIN_EPSILON
from .domain import Composed, Domain, Interval, unrestricted
from .functions import ConstraintKind
from .logging_config import get_logger
from .nodes import (
    BinaryOp,
    FunctionCall,
    Node,
    Number,
    ParameterizedFunctionCall,
    UnaryOp,
    Variable,
    evaluate_tree,
)
from .types import DomainAnalysisError

logger = get_logger("domain")


@dataclass(frozen=True)
class _XConstraint:
    """A restriction on x.

    For ABS_AT_LEAST the restriction reads ``|x - center| >= value``.
    """

    kind: ConstraintKind
    value: float
    inclusive: bool
    center: float = 0.0


def _affine(node: Node) -> tuple[float, float] | None:
    """Return ``(a, b)`` with ``node == a*x + b``, or None if not affine."""
    if not node.has_variable:
        value = evaluate_tree(node)
        return (0.0, value) if math.isfinite(value) else None
    if isinstance(node, Variable):
        return (1.0, 0.0)
    if isinstance(node, UnaryOp):
        inner = _affine(node.operand)
        if inner is None:
            return None
        return inner if node.operator == "+" else (-inner[0], -inner[1])
    if isinstance(node, BinaryOp):
        left = _affine(node.left)
        right = _affine(node.right)
        if left is None or right is None:
            return None
        if node.operator == "+":
            return (left[0] + right[0], left[1] + right[1])
        if node.operator == "-":
            return (left[0] - right[0], left[1] - right[1])
        if node.operator == "*":
            if left[0] == 0.0:
                return (left[1] * right[0], left[1] * right[1])
            if right[0] == 0.0:
                return (left[0] * right[1], left[1] * right[1])
            return None
        if node.operator == "/":
            if right[0] == 0.0 and right[1] != 0.0:
                return (left[0] / right[1], left[1] / right[1])
            return None
        if node.operator == "^" and right[0] == 0.0 and right[1] == 1.0:
            return left
    return None


def _map_to_x(constraint, a: float, b: float) -> _XConstraint:
    """Translate a restriction on ``a*x + b`` into a restriction on x."""
    pivot = (constraint.value - b) / a
    kind = constraint.kind
    if kind is ConstraintKind.NOT_EQUAL:
        return _XConstraint(kind, pivot, constraint.inclusive)
    if kind is ConstraintKind.ABS_AT_LEAST:
        return _XConstraint(
            kind, constraint.value / abs(a), constraint.inclusive, center=-b / a
        )
    if a < 0:
        # Dividing by a negative slope flips the inequality
        kind = (
            ConstraintKind.LESS_THAN
            if kind is ConstraintKind.GREATER_THAN
            else ConstraintKind.GREATER_THAN
        )
    return _XConstraint(kind, pivot, constraint.inclusive)


def collect_constraints(node: Node, constraints: list[_XConstraint]) -> None:
    """Append the x restrictions of ``node`` and its descendants, in order."""
    if isinstance(node, (Number, Variable)):
        return
    if isinstance(node, BinaryOp):
        collect_constraints(node.left, constraints)
        collect_constraints(node.right, constraints)
        return
    if isinstance(node, UnaryOp):
        collect_constraints(node.operand, constraints)
        return
    if isinstance(node, (FunctionCall, ParameterizedFunctionCall)):
        collect_constraints(node.argument, constraints)
        parameter = node.parameter if isinstance(node, ParameterizedFunctionCall) else None
        rules = node.function.constraints(parameter)
        if not rules:
            return
        coefficients = _affine(node.argument)
        if coefficients is None:
            logger.debug(f"Argument of {node.name} is not affine in x: {node.argument}")
            return
        a, b = coefficients
        if a == 0.0 or not math.isfinite(a):
            return
        constraints.extend(_map_to_x(rule, a, b) for rule in rules)
        return
    raise DomainAnalysisError(f"Unsupported node type: {type(node).__name__}")


def _open_shift(value: float, inclusive: bool, direction: float) -> float:
    if inclusive or math.isinf(value):
        return value
    return value + direction * DOMAIN_EPSILON


def _pieces(pieces: list[tuple[float, float]]) -> Domain:
    members = [Interval(lo, hi) for lo, hi in pieces if lo <= hi]
    if not members:
        return Interval(0.0, 0.0)
    return Composed(tuple(members))


def merge_constraints(constraints: list[_XConstraint]) -> Domain:
    """Fold x restrictions into a Domain.

    Bounds tighten a running interval. The first not-equal or
    absolute-value restriction that actually splits the running interval
    returns a Composed domain at once; later restrictions are not applied.
    """
    lower, upper = -math.inf, math.inf
    lower_inclusive = upper_inclusive = True

    for constraint in constraints:
        kind = constraint.kind
        if kind is ConstraintKind.GREATER_THAN:
            if constraint.value > lower:
                lower, lower_inclusive = constraint.value, constraint.inclusive
            elif constraint.value == lower:
                lower_inclusive = lower_inclusive and constraint.inclusive
        elif kind is ConstraintKind.LESS_THAN:
            if constraint.value < upper:
                upper, upper_inclusive = constraint.value, constraint.inclusive
            elif constraint.value == upper:
                upper_inclusive = upper_inclusive and constraint.inclusive
        elif kind is ConstraintKind.NOT_EQUAL:
            if lower < constraint.value < upper:
                start = _open_shift(lower, lower_inclusive, 1.0)
                end = _open_shift(upper, upper_inclusive, -1.0)
                return _pieces(
                    [
                        (start, constraint.value - DOMAIN_EPSILON),
                        (constraint.value + DOMAIN_EPSILON, end),
                    ]
                )
        elif kind is ConstraintKind.ABS_AT_LEAST:
            start = _open_shift(lower, lower_inclusive, 1.0)
            end = _open_shift(upper, upper_inclusive, -1.0)
            left_edge = _open_shift(
                constraint.center - constraint.value, constraint.inclusive, -1.0
            )
            right_edge = _open_shift(
                constraint.center + constraint.value, constraint.inclusive, 1.0
            )
            return _pieces(
                [(start, min(left_edge, end)), (max(right_edge, start), end)]
            )
        else:
            raise DomainAnalysisError(f"Unknown constraint kind: {kind}")

    lower = _open_shift(lower, lower_inclusive, 1.0)
    upper = _open_shift(upper, upper_inclusive, -1.0)
    if lower > upper:
        # Nothing satisfies every restriction
        return Interval(0.0, 0.0)
    return Interval(lower, upper)


def analyze(expression: Node | float) -> Domain:
    """Compute the domain of a parsed expression.

    Accepts whatever ``parser.parse`` returns; a folded constant is defined
    everywhere. Never raises: a failure is logged and yields the whole real
    line.
    """
    if not isinstance(expression, Node):
        return unrestricted()
    try:
        constraints: list[_XConstraint] = []
        collect_constraints(expression, constraints)
        if not constraints:
            return unrestricted()
        return merge_constraints(constraints)
    except Exception as e:
        logger.warning(f"Domain analysis failed for {expression}: {e}", exc_info=True)
        return unrestricted()
