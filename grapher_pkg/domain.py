"""Domain values: the set of x where an expression is defined.

A domain answers membership and bound queries and produces the x values a
curve is sampled at. Domains are immutable and every ``sample_points`` call
returns a fresh ascending numpy array clipped to the requested view.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from .config import MAX_DOMAIN_SAMPLES, MIN_DOMAIN_SAMPLES, MIN_SAMPLES_PER_SUBDOMAIN


def _check_sample_count(n: int) -> None:
    if n <= 0:
        raise ValueError(f"number of samples must be > 0, got {n}")


def _format_bound(value: float) -> str:
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{value:g}"


class Domain(ABC):
    """Capability shared by every domain variant."""

    @abstractmethod
    def contains(self, x: float) -> bool:
        """True if ``x`` lies in the domain."""

    @abstractmethod
    def min_bound(self) -> float:
        """Leftmost point of the domain (may be -inf)."""

    @abstractmethod
    def max_bound(self) -> float:
        """Rightmost point of the domain (may be +inf)."""

    @abstractmethod
    def sample_points(self, view_min: float, view_max: float, n: int) -> np.ndarray:
        """Ascending x values inside both the domain and ``[view_min, view_max]``.

        Raises:
            ValueError: If ``n <= 0``
        """

    @property
    def is_empty(self) -> bool:
        return self.min_bound() > self.max_bound()


@dataclass(frozen=True)
class Interval(Domain):
    """Closed interval ``[lower, upper]``; empty when ``lower > upper``."""

    lower: float
    upper: float

    def contains(self, x: float) -> bool:
        return self.lower <= x <= self.upper

    def min_bound(self) -> float:
        return self.lower

    def max_bound(self) -> float:
        return self.upper

    def sample_points(self, view_min: float, view_max: float, n: int) -> np.ndarray:
        _check_sample_count(n)
        start = max(self.lower, view_min)
        end = min(self.upper, view_max)
        if math.isnan(view_min) or math.isnan(view_max) or math.isnan(start) or math.isnan(end):
            return np.empty(0)
        if math.isinf(start) or math.isinf(end) or start > end:
            return np.empty(0)
        if start == end:
            return np.array([start], dtype=np.float64)
        count = max(MIN_DOMAIN_SAMPLES, min(n, MAX_DOMAIN_SAMPLES))
        return np.linspace(start, end, count)

    def __str__(self) -> str:
        left = "(" if math.isinf(self.lower) else "["
        right = ")" if math.isinf(self.upper) else "]"
        return f"{left}{_format_bound(self.lower)}, {_format_bound(self.upper)}{right}"


@dataclass(frozen=True)
class Composed(Domain):
    """Union of one or more member domains."""

    members: tuple[Domain, ...]

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))
        if not self.members:
            raise ValueError("Composed domain needs at least one member")

    def contains(self, x: float) -> bool:
        return any(member.contains(x) for member in self.members)

    def min_bound(self) -> float:
        return min(member.min_bound() for member in self.members)

    def max_bound(self) -> float:
        return max(member.max_bound() for member in self.members)

    def sample_points(self, view_min: float, view_max: float, n: int) -> np.ndarray:
        _check_sample_count(n)
        per_member = max(MIN_SAMPLES_PER_SUBDOMAIN, n // len(self.members))
        pieces = [
            member.sample_points(view_min, view_max, per_member)
            for member in self.members
        ]
        merged = np.concatenate(pieces) if pieces else np.empty(0)
        merged = merged[(merged >= view_min) & (merged <= view_max)]
        points = np.unique(merged)  # sorted, duplicates removed
        if len(points) <= n:
            return points
        if n == 1:
            return points[:1].copy()
        step = (len(points) - 1) / (n - 1)
        # Round half up
        indices = np.floor(np.arange(n) * step + 0.5).astype(int)
        indices = np.clip(indices, 0, len(points) - 1)
        return points[indices]

    def __str__(self) -> str:
        return " U ".join(str(member) for member in self.members)


@dataclass(frozen=True)
class Discrete(Domain):
    """A finite set of x values, kept sorted and without duplicates.

    Sampling returns every value inside the view; ``n`` is only validated,
    since a set is never thinned out.
    """

    values: tuple[float, ...]

    def __post_init__(self):
        values = tuple(sorted({float(value) for value in self.values}))
        if not values:
            raise ValueError("Discrete domain needs at least one value")
        if not all(math.isfinite(value) for value in values):
            raise ValueError(f"Discrete domain values must be finite: {values}")
        object.__setattr__(self, "values", values)

    def contains(self, x: float) -> bool:
        return x in self.values

    def min_bound(self) -> float:
        return self.values[0]

    def max_bound(self) -> float:
        return self.values[-1]

    def sample_points(self, view_min: float, view_max: float, n: int) -> np.ndarray:
        _check_sample_count(n)
        values = np.array(self.values, dtype=np.float64)
        return values[(values >= view_min) & (values <= view_max)]

    def __str__(self) -> str:
        return "{" + ", ".join(_format_bound(value) for value in self.values) + "}"


def unrestricted() -> Interval:
    """The whole real line, used when nothing restricts x."""
    return Interval(-math.inf, math.inf)
