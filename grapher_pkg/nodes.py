"""Expression tree model.

Trees are built by parser.py and are immutable once built: every node is a
frozen dataclass that exclusively owns its children. Evaluation accepts a
scalar or a numpy array for the free variable, so a whole row of sample
points can be evaluated in one pass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from .functions import MathFunction
from .types import EvaluationError

BINARY_OPERATORS = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "^": np.power,
}

UNARY_OPERATORS = {
    "+": np.positive,
    "-": np.negative,
}


def _as_float(x):
    if np.ndim(x) == 0:
        return np.float64(x)
    return np.asarray(x, dtype=np.float64)


class Node(ABC):
    """Base class of all expression tree nodes."""

    @abstractmethod
    def evaluate(self, x=None):
        """Evaluate the subtree with the free variable bound to ``x``.

        Must be called under ``numpy.errstate(all="ignore")`` for IEEE
        results without warnings; ``evaluate_tree`` does that.
        """

    @abstractmethod
    def children(self) -> tuple["Node", ...]:
        """Direct child nodes, left to right."""

    @abstractmethod
    def substitute(self, replacement: "Node") -> "Node":
        """Return a copy with every free variable replaced by ``replacement``."""

    def walk(self) -> Iterator["Node"]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children():
            yield from child.walk()

    @property
    def has_variable(self) -> bool:
        return any(isinstance(node, Variable) for node in self.walk())

    def depth(self) -> int:
        kids = self.children()
        return 1 + (max(child.depth() for child in kids) if kids else 0)


@dataclass(frozen=True)
class Number(Node):
    value: float

    def evaluate(self, x=None):
        return np.float64(self.value)

    def children(self) -> tuple[Node, ...]:
        return ()

    def substitute(self, replacement: Node) -> Node:
        return self

    def __str__(self) -> str:
        return f"{self.value:g}" if self.value >= 0 else f"({self.value:g})"


@dataclass(frozen=True)
class Variable(Node):
    name: str = "x"

    def evaluate(self, x=None):
        if x is None:
            raise EvaluationError(
                f"Free variable '{self.name}' has no value", "UNBOUND_VARIABLE"
            )
        return _as_float(x)

    def children(self) -> tuple[Node, ...]:
        return ()

    def substitute(self, replacement: Node) -> Node:
        return replacement

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class BinaryOp(Node):
    left: Node
    operator: str
    right: Node

    def __post_init__(self):
        if self.operator not in BINARY_OPERATORS:
            raise ValueError(f"Unknown binary operator: {self.operator}")

    def evaluate(self, x=None):
        return BINARY_OPERATORS[self.operator](
            self.left.evaluate(x), self.right.evaluate(x)
        )

    def children(self) -> tuple[Node, ...]:
        return (self.left, self.right)

    def substitute(self, replacement: Node) -> Node:
        return BinaryOp(
            self.left.substitute(replacement),
            self.operator,
            self.right.substitute(replacement),
        )

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class UnaryOp(Node):
    operator: str
    operand: Node

    def __post_init__(self):
        if self.operator not in UNARY_OPERATORS:
            raise ValueError(f"Unknown unary operator: {self.operator}")

    def evaluate(self, x=None):
        return UNARY_OPERATORS[self.operator](self.operand.evaluate(x))

    def children(self) -> tuple[Node, ...]:
        return (self.operand,)

    def substitute(self, replacement: Node) -> Node:
        return UnaryOp(self.operator, self.operand.substitute(replacement))

    def __str__(self) -> str:
        return f"{self.operator}{self.operand}"


@dataclass(frozen=True)
class FunctionCall(Node):
    function: MathFunction
    argument: Node

    @property
    def name(self) -> str:
        return self.function.function_name

    def evaluate(self, x=None):
        return self.function.apply(self.argument.evaluate(x))

    def children(self) -> tuple[Node, ...]:
        return (self.argument,)

    def substitute(self, replacement: Node) -> Node:
        return FunctionCall(self.function, self.argument.substitute(replacement))

    def __str__(self) -> str:
        return f"{self.name}({self.argument})"


@dataclass(frozen=True)
class ParameterizedFunctionCall(Node):
    function: MathFunction
    argument: Node
    parameter: float

    @property
    def name(self) -> str:
        return self.function.function_name

    def evaluate(self, x=None):
        return self.function.apply(self.argument.evaluate(x), self.parameter)

    def children(self) -> tuple[Node, ...]:
        return (self.argument,)

    def substitute(self, replacement: Node) -> Node:
        return ParameterizedFunctionCall(
            self.function, self.argument.substitute(replacement), self.parameter
        )

    def __str__(self) -> str:
        return f"{self.name}{{{self.parameter:g}}}({self.argument})"


def evaluate_tree(node: Node, x=None):
    """Evaluate ``node`` with IEEE semantics and no floating-point warnings.

    Returns a Python float for scalar input and a float64 array otherwise.
    """
    with np.errstate(all="ignore"):
        result = node.evaluate(x)
    if x is not None and np.ndim(x) != 0:
        # A constant subtree ignores x; keep the output aligned with the input
        return np.broadcast_to(np.asarray(result, dtype=np.float64), np.shape(x)).copy()
    return float(result)
