"""Intersection points of two expressions.

The difference ``d(x) = left(x) - right(x)`` is sampled across the range at
a density tied to the pixel width. Every sign change between two usable
neighbouring samples is refined by bisection and every sample where the
difference is exactly zero is reported as it is, so two identical sides
give one point per sample. A candidate whose residual is large next to the
values of the sides is a pole, not a root, and is dropped. Roots closer
together than ``DEDUPLICATION_THRESHOLD`` are reported once.
"""

from __future__ import annotations

import math
from typing import Callable

import numpy as np

from . import config
from .evaluator import Evaluator
from .logging_config import get_logger
from .nodes import Node, evaluate_tree
from .types import GrapherError, Point

logger = get_logger("intersection")


def _is_valid(value: float) -> bool:
    return math.isfinite(value)


def _has_sign_change(previous: float, current: float) -> bool:
    return (previous > 0 and current < 0) or (previous < 0 and current > 0)


def sample_count_for_width(pixel_width: int) -> int:
    """Clamp the pixel width into the allowed number of scan intervals."""
    return min(
        config.MAX_INTERSECTION_SAMPLES,
        max(config.MIN_INTERSECTION_SAMPLES, int(pixel_width)),
    )


class IntersectionFinder:
    """Finds where two expressions take the same value."""

    def __init__(self, evaluator: Evaluator | None = None):
        self.evaluator = evaluator or Evaluator()

    def _compile(self, expression: str | Node) -> Node:
        if isinstance(expression, Node):
            return expression
        return self.evaluator.compile(expression)

    def _difference(self, left: Node, right: Node) -> Callable[[float], float]:
        return lambda x: evaluate_tree(left, x) - evaluate_tree(right, x)

    def find_root_by_bisection(
        self,
        left: str | Node,
        right: str | Node,
        a: float,
        b: float,
        fa: float,
    ) -> float:
        """Refine a root of ``left - right`` bracketed by ``[a, b]``.

        Args:
            left: Left-hand expression
            right: Right-hand expression
            a: Start of the bracket
            b: End of the bracket
            fa: Value of the difference at ``a``

        Returns:
            The first midpoint whose difference is within
            ``BISECTION_EPSILON`` of zero, otherwise the midpoint of the
            final bracket. A midpoint that cannot be evaluated ends the
            search early.
        """
        difference = self._difference(self._compile(left), self._compile(right))
        for _ in range(config.BISECTION_MAX_ITERATIONS):
            mid = (a + b) / 2.0
            try:
                fm = difference(mid)
            except GrapherError as e:
                logger.debug(f"Bisection stopped at x={mid}: {e}")
                break
            if not _is_valid(fm):
                break
            if abs(fm) < config.BISECTION_EPSILON:
                return mid
            if (fa > 0 and fm < 0) or (fa < 0 and fm > 0):
                b = mid
            else:
                a, fa = mid, fm
        return (a + b) / 2.0

    def find_intersections(
        self,
        left: str | Node,
        right: str | Node,
        min_x: float,
        max_x: float,
        pixel_width: int,
    ) -> list[Point]:
        """Find the points where ``left`` and ``right`` meet in ``[min_x, max_x]``.

        Never raises for bad samples; an expression that cannot be compiled
        at all yields no points.

        Returns:
            Intersection points in ascending x order, no two closer than
            ``DEDUPLICATION_THRESHOLD`` in x
        """
        try:
            left_tree = self._compile(left)
            right_tree = self._compile(right)
        except GrapherError as e:
            logger.debug(f"No intersections for {left!r} = {right!r}: {e}")
            return []

        samples = sample_count_for_width(pixel_width)
        step = (max_x - min_x) / samples
        xs = min_x + np.arange(samples + 1) * step
        values = evaluate_tree(left_tree, xs) - evaluate_tree(right_tree, xs)

        roots: list[Point] = []
        previous_value = math.nan
        previous_x = min_x
        for x, value in zip(xs.tolist(), values.tolist()):
            if value == 0.0:
                self._accept(roots, left_tree, right_tree, x)
            elif (
                _is_valid(previous_value)
                and _is_valid(value)
                and _has_sign_change(previous_value, value)
            ):
                root = self.find_root_by_bisection(
                    left_tree, right_tree, previous_x, x, previous_value
                )
                self._accept(roots, left_tree, right_tree, root)
            # A non-finite sample breaks the chain, so no bracket spans it
            previous_value = value
            previous_x = x

        roots.sort(key=lambda point: point.x)
        return roots

    def _accept(
        self, roots: list[Point], left_tree: Node, right_tree: Node, root: float
    ) -> None:
        if not _is_valid(root):
            return
        if any(abs(existing.x - root) < config.DEDUPLICATION_THRESHOLD for existing in roots):
            return
        y = evaluate_tree(left_tree, root)
        other = evaluate_tree(right_tree, root)
        if not (_is_valid(y) and _is_valid(other)):
            logger.debug(f"Discarding intersection candidate at x={root}: y={y}")
            return
        # A sign change across a pole bisects onto the pole, not a root
        scale = max(1.0, abs(y), abs(other))
        if abs(y - other) > config.INTERSECTION_RESIDUAL_TOLERANCE * scale:
            logger.debug(
                f"Discarding intersection candidate at x={root}: residual {y - other}"
            )
            return
        roots.append(Point(root, y))


def find_intersections(
    left: str,
    right: str,
    min_x: float,
    max_x: float,
    pixel_width: int,
    evaluator: Evaluator | None = None,
) -> list[Point]:
    return IntersectionFinder(evaluator).find_intersections(
        left, right, min_x, max_x, pixel_width
    )
