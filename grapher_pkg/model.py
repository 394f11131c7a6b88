"""Workspace model: parameters, the viewport and plottable objects.

Every plottable object keeps the points it computed last. The cache is not
tied to the viewport: the owner calls ``invalidate_cache()`` when the
bounds, the pixel width or any parameter changes, and the next ``points``
call recomputes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from . import config
from .domain import Discrete, Domain
from .domain_analyzer import analyze
from .evaluator import Evaluator
from .formatting import format_number
from .intersection import IntersectionFinder
from .logging_config import get_logger
from .nodes import Node
from .types import DefinitionError, GrapherError, Point

logger = get_logger("model")


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


class Parameter:
    """A named value, optionally bounded to a slider range.

    A ranged parameter clamps every value into ``[minimum, maximum]``; a
    discrete one also rounds it to the nearest integer.
    """

    def __init__(
        self,
        name: str,
        value: float | None = None,
        minimum: float | None = None,
        maximum: float | None = None,
        discrete: bool = False,
    ):
        if (minimum is None) != (maximum is None):
            raise ValueError("minimum and maximum must be given together")
        if minimum is not None and minimum > maximum:
            raise ValueError(f"minimum {minimum} is greater than maximum {maximum}")
        self.name = name
        self.minimum = minimum
        self.maximum = maximum
        self.discrete = discrete
        if value is None:
            value = (minimum + maximum) / 2.0 if self.has_range else 0.0
        self.value = 0.0
        self.set_value(value)

    @property
    def has_range(self) -> bool:
        return self.minimum is not None

    @property
    def range(self) -> float:
        return self.maximum - self.minimum if self.has_range else 0.0

    @property
    def step_count(self) -> int | None:
        """Number of values a discrete range can take, else None."""
        if not (self.discrete and self.has_range):
            return None
        return int(self.maximum - self.minimum) + 1

    def set_value(self, value: float) -> float:
        """Clamp (and round, if discrete) ``value``, store and return it.

        Raises:
            DefinitionError: If ``value`` is inf or NaN
        """
        value = float(value)
        if not math.isfinite(value):
            raise DefinitionError(
                f"Parameter '{self.name}' must be a finite number, got {value}",
                "NON_FINITE_VALUE",
            )
        if self.has_range:
            value = max(self.minimum, min(self.maximum, value))
            if self.discrete:
                value = _round_half_up(value)
        self.value = value
        return value

    def display_string(self) -> str:
        if not self.has_range:
            return f"{self.name}={format_number(self.value, 3)}"
        separator = ".." if self.discrete else ":"
        return f"{self.name}=[{self.minimum:g}{separator}{self.maximum:g}]"

    def __repr__(self) -> str:
        return f"Parameter({self.display_string()}, value={self.value!r})"


@dataclass
class GraphBounds:
    """The visible region of the graph in graph coordinates."""

    min_x: float = config.DEFAULT_MIN_X
    max_x: float = config.DEFAULT_MAX_X
    min_y: float = config.DEFAULT_MIN_X
    max_y: float = config.DEFAULT_MAX_X

    def __post_init__(self):
        if not (self.min_x < self.max_x and self.min_y < self.max_y):
            raise ValueError(f"Empty viewport: {self}")

    @classmethod
    def centered(cls, half_width: float, half_height: float) -> "GraphBounds":
        return cls(-half_width, half_width, -half_height, half_height)

    @property
    def range_x(self) -> float:
        return self.max_x - self.min_x

    @property
    def range_y(self) -> float:
        return self.max_y - self.min_y

    @property
    def center_x(self) -> float:
        return (self.min_x + self.max_x) / 2.0

    @property
    def center_y(self) -> float:
        return (self.min_y + self.max_y) / 2.0

    def x_to_screen(self, x: float, screen_width: int) -> int:
        return int((x - self.min_x) / self.range_x * screen_width)

    def y_to_screen(self, y: float, screen_height: int) -> int:
        return int((self.max_y - y) / self.range_y * screen_height)

    def screen_to_x(self, screen_x: int, screen_width: int) -> float:
        return self.min_x + screen_x * self.range_x / screen_width

    def screen_to_y(self, screen_y: int, screen_height: int) -> float:
        return self.max_y - screen_y * self.range_y / screen_height

    def pan(self, delta_x: float, delta_y: float) -> None:
        self.min_x += delta_x
        self.max_x += delta_x
        self.min_y += delta_y
        self.max_y += delta_y

    def zoom(self, factor: float, focus_x: float, focus_y: float) -> None:
        """Scale both ranges by ``factor`` keeping the focus point fixed."""
        if factor <= 0:
            raise ValueError("zoom factor must be positive")
        new_range_x = self.range_x * factor
        new_range_y = self.range_y * factor
        rel_x = (focus_x - self.min_x) / self.range_x
        rel_y = (self.max_y - focus_y) / self.range_y
        self.min_x = focus_x - rel_x * new_range_x
        self.max_x = self.min_x + new_range_x
        self.max_y = focus_y + rel_y * new_range_y
        self.min_y = self.max_y - new_range_y

    def adaptive_sample_count(self, pixel_width: int) -> int:
        """Curve sample count: denser when zoomed in, sparser when zoomed out."""
        zoom_factor = config.ADAPTIVE_REFERENCE_RANGE / max(1.0, self.range_x)
        samples = int(pixel_width * math.sqrt(zoom_factor))
        return max(config.MIN_CURVE_SAMPLES, min(config.MAX_CURVE_SAMPLES, samples))


class PlottableFunction(ABC):
    """Base class of everything that produces points on the graph."""

    def __init__(self, name: str | None = None):
        self.name = name
        self._cached_points: list[Point] = []
        self._cache_valid = False

    @property
    def cache_valid(self) -> bool:
        return self._cache_valid

    def invalidate_cache(self) -> None:
        self._cache_valid = False

    def points(self, bounds: GraphBounds, width: int) -> list[Point]:
        """Return the cached points, computing them first if invalid."""
        if not self._cache_valid:
            self._cached_points = self.compute_points(bounds, width)
            self._cache_valid = True
        return self._cached_points

    @abstractmethod
    def compute_points(self, bounds: GraphBounds, width: int) -> list[Point]:
        """Compute points for the given viewport and pixel width."""

    @property
    @abstractmethod
    def is_continuous(self) -> bool:
        """True if consecutive points should be joined by lines."""

    @abstractmethod
    def display_string(self) -> str:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.display_string()!r})"


class RegularFunction(PlottableFunction):
    """The curve ``y = f(x)`` sampled over the domain of ``f``."""

    def __init__(self, expression: str, evaluator: Evaluator, name: str | None = None):
        super().__init__(name)
        self.expression = expression
        self.evaluator = evaluator
        self._domain: Domain | None = None
        self._domain_key: Node | None = None

    @property
    def domain(self) -> Domain:
        """Domain of the expression, recomputed only when its compiled tree changes.

        The tree has parameter values and user-function bodies inlined, so
        moving a parameter or redefining a function it calls both count as
        a change.
        """
        tree = self.evaluator.compile(self.expression)
        if self._domain is None or tree != self._domain_key:
            self._domain = analyze(tree)
            self._domain_key = tree
        return self._domain

    def evaluate(self, x):
        return self.evaluator.evaluate(self.expression, x)

    def compute_points(self, bounds: GraphBounds, width: int) -> list[Point]:
        try:
            xs = self.domain.sample_points(
                bounds.min_x, bounds.max_x, bounds.adaptive_sample_count(width) + 1
            )
            if len(xs) == 0:
                return []
            ys = self.evaluate(xs)
        except GrapherError as e:
            logger.warning(f"Cannot plot {self.display_string()!r}: {e}")
            return []
        finite = np.isfinite(ys)
        return [Point(x, y) for x, y in zip(xs[finite].tolist(), ys[finite].tolist())]

    @property
    def is_continuous(self) -> bool:
        return True

    def display_string(self) -> str:
        if self.name:
            return f"{self.name}(x)={self.expression}"
        return self.expression


class EquationFunction(PlottableFunction):
    """The solutions of ``left = right`` inside the viewport, as points."""

    def __init__(
        self,
        left: str,
        right: str,
        finder: IntersectionFinder,
        name: str | None = None,
    ):
        super().__init__(name)
        self.left = left
        self.right = right
        self.finder = finder

    def compute_points(self, bounds: GraphBounds, width: int) -> list[Point]:
        return self.finder.find_intersections(
            self.left, self.right, bounds.min_x, bounds.max_x, width
        )

    @property
    def is_continuous(self) -> bool:
        return False

    def display_string(self) -> str:
        if self.name:
            return f"{self.name}: {self.left} = {self.right}"
        return f"({self.left} = {self.right})"


COMPARISONS = {
    ">=": np.greater_equal,
    "<=": np.less_equal,
    ">": np.greater,
    "<": np.less,
}


class InequationFunction(PlottableFunction):
    """The region where ``left <op> right`` holds.

    Its points are the boundary, the ``left`` curve sampled across the
    view; ``region_spans`` gives the x ranges to shade.
    """

    def __init__(
        self,
        left: str,
        operator: str,
        right: str,
        evaluator: Evaluator,
        name: str | None = None,
    ):
        if operator not in COMPARISONS:
            raise ValueError(f"Unknown comparison operator: {operator}")
        super().__init__(name)
        self.left = left
        self.operator = operator
        self.right = right
        self.evaluator = evaluator

    def satisfies(self, x):
        """True where both sides are finite and the comparison holds.

        ``x`` may be a float or a numpy array, like ``Evaluator.evaluate``.

        Raises:
            EvaluationError: If either side does not compile
        """
        left = self.evaluator.evaluate(self.left, x)
        right = self.evaluator.evaluate(self.right, x)
        with np.errstate(invalid="ignore"):
            holds = COMPARISONS[self.operator](left, right)
        return holds & np.isfinite(left) & np.isfinite(right)

    def _sample_xs(self, bounds: GraphBounds) -> np.ndarray:
        return np.linspace(bounds.min_x, bounds.max_x, config.REGION_SAMPLES + 1)

    def compute_points(self, bounds: GraphBounds, width: int) -> list[Point]:
        xs = self._sample_xs(bounds)
        try:
            left = self.evaluator.evaluate(self.left, xs)
            right = self.evaluator.evaluate(self.right, xs)
        except GrapherError as e:
            logger.warning(f"Cannot plot {self.display_string()!r}: {e}")
            return []
        valid = np.isfinite(left) & np.isfinite(right)
        return [Point(x, y) for x, y in zip(xs[valid].tolist(), left[valid].tolist())]

    def region_spans(self, bounds: GraphBounds) -> list[tuple[float, float]]:
        """Maximal ``(start, end)`` x ranges of the view where the inequation holds."""
        xs = self._sample_xs(bounds)
        try:
            mask = self.satisfies(xs)
        except GrapherError as e:
            logger.warning(f"Cannot shade {self.display_string()!r}: {e}")
            return []
        spans: list[tuple[float, float]] = []
        start = None
        previous = bounds.min_x
        for x, inside in zip(xs.tolist(), mask.tolist()):
            if inside and start is None:
                start = x
            elif not inside and start is not None:
                spans.append((start, previous))
                start = None
            previous = x
        if start is not None:
            spans.append((start, previous))
        return spans

    @property
    def is_continuous(self) -> bool:
        return True

    def display_string(self) -> str:
        body = f"{self.left} {self.operator} {self.right}"
        if self.name:
            return f"{self.name}: {body}"
        return f"({body})"


class NumberSetFunction(PlottableFunction):
    """A finite set of numbers, drawn as points on the x axis."""

    def __init__(self, values: Iterable[float], name: str | None = None):
        super().__init__(name)
        self.domain = Discrete(tuple(values))

    @property
    def values(self) -> tuple[float, ...]:
        return self.domain.values

    def contains(self, value: float) -> bool:
        return self.domain.contains(value)

    def compute_points(self, bounds: GraphBounds, width: int) -> list[Point]:
        xs = self.domain.sample_points(bounds.min_x, bounds.max_x, len(self.values))
        return [Point(x, 0.0) for x in xs.tolist()]

    @property
    def is_continuous(self) -> bool:
        return False

    def display_string(self) -> str:
        body = "{" + ", ".join(f"{value:g}" for value in self.values) + "}"
        return f"{self.name}={body}" if self.name else body


class PointFunction(PlottableFunction):
    """A point whose coordinates are constant expressions, or a fixed point list."""

    def __init__(
        self,
        x_expression: str | None = None,
        y_expression: str | None = None,
        evaluator: Evaluator | None = None,
        name: str | None = None,
        static_points: Iterable[Point] | None = None,
    ):
        super().__init__(name)
        if static_points is None and (x_expression is None or y_expression is None):
            raise ValueError("either coordinates or static points are required")
        self.x_expression = x_expression
        self.y_expression = y_expression
        self.evaluator = evaluator or Evaluator()
        self._static_points = (
            [Point(float(x), float(y)) for x, y in static_points]
            if static_points is not None
            else None
        )

    @classmethod
    def from_points(cls, points: Iterable[Point], name: str | None = None) -> "PointFunction":
        return cls(name=name, static_points=points)

    @property
    def is_parametric(self) -> bool:
        return self._static_points is None

    def add_point(self, x: float, y: float) -> None:
        if self.is_parametric:
            raise TypeError("Cannot add points to a point defined by expressions")
        self._static_points.append(Point(float(x), float(y)))
        self.invalidate_cache()

    def compute_points(self, bounds: GraphBounds, width: int) -> list[Point]:
        if not self.is_parametric:
            return list(self._static_points)
        try:
            x = self.evaluator.evaluate_constant(self.x_expression)
            y = self.evaluator.evaluate_constant(self.y_expression)
        except GrapherError as e:
            logger.warning(f"Cannot place point {self.display_string()!r}: {e}")
            return []
        if not (math.isfinite(x) and math.isfinite(y)):
            return []
        return [Point(x, y)]

    @property
    def is_continuous(self) -> bool:
        return False

    def display_string(self) -> str:
        if not self.is_parametric:
            body = ", ".join(f"({p.x:g}, {p.y:g})" for p in self._static_points)
            return f"{self.name}={{{body}}}" if self.name else f"{{{body}}}"
        body = f"({self.x_expression}, {self.y_expression})"
        return f"{self.name}={body}" if self.name else body
