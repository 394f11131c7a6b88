"""The workspace: parameters, named functions and everything plotted."""

from __future__ import annotations

from .definitions import Definition, DefinitionKind, parse_definition
from .evaluator import Evaluator
from .intersection import IntersectionFinder
from .logging_config import get_logger
from .model import (
    EquationFunction,
    GraphBounds,
    InequationFunction,
    NumberSetFunction,
    Parameter,
    PlottableFunction,
    PointFunction,
    RegularFunction,
)
from .types import DefinitionError, Point

logger = get_logger("graph")


class Graph:
    """Owns the workspace bindings and the plottable objects built from input lines.

    Unnamed entries are keyed ``#1``, ``#2``, ... in the order they were
    added. Changing or removing anything invalidates every cached point
    list, since any expression may refer to any parameter or function.
    """

    def __init__(self):
        self.evaluator = Evaluator()
        self.finder = IntersectionFinder(self.evaluator)
        self._parameters: dict[str, Parameter] = {}
        self._plottables: dict[str, PlottableFunction] = {}
        self._counter = 0

    @property
    def parameters(self) -> dict[str, Parameter]:
        return dict(self._parameters)

    @property
    def plottables(self) -> dict[str, PlottableFunction]:
        return dict(self._plottables)

    def _key(self, name: str | None) -> str:
        if name:
            return name.lower()
        self._counter += 1
        return f"#{self._counter}"

    def add(self, line: str) -> Definition:
        """Classify ``line`` and add what it defines to the workspace.

        Raises:
            DefinitionError: If the line cannot be classified
            EvaluationError: If a constant or function body does not evaluate
        """
        definition = parse_definition(line)
        kind = definition.kind

        if kind is DefinitionKind.PARAMETER:
            parameter = Parameter(
                definition.name,
                minimum=definition.minimum,
                maximum=definition.maximum,
                discrete=definition.discrete,
            )
            self._bind_parameter(parameter)
        elif kind is DefinitionKind.CONSTANT:
            value = self.evaluator.evaluate_constant(definition.expression)
            self._bind_parameter(Parameter(definition.name, value))
        elif kind is DefinitionKind.FUNCTION:
            previous = self.evaluator.functions.get(definition.name.lower())
            self.evaluator.define_function(definition.name, definition.expression)
            try:
                self.evaluator.compile(definition.expression)
            except Exception:
                if previous is None:
                    self.evaluator.remove_function(definition.name)
                else:
                    self.evaluator.define_function(definition.name, previous)
                raise
            self._plottables[self._key(definition.name)] = RegularFunction(
                definition.expression, self.evaluator, definition.name
            )
        elif kind is DefinitionKind.EXPRESSION:
            self.evaluator.compile(definition.expression)
            self._plottables[self._key(None)] = RegularFunction(
                definition.expression, self.evaluator
            )
        elif kind is DefinitionKind.EQUATION:
            self.evaluator.compile(definition.left)
            self.evaluator.compile(definition.right)
            self._plottables[self._key(definition.name)] = EquationFunction(
                definition.left, definition.right, self.finder, definition.name
            )
        elif kind is DefinitionKind.INEQUATION:
            self.evaluator.compile(definition.left)
            self.evaluator.compile(definition.right)
            self._plottables[self._key(definition.name)] = InequationFunction(
                definition.left,
                definition.operator,
                definition.right,
                self.evaluator,
                definition.name,
            )
        elif kind is DefinitionKind.NUMBER_SET:
            self._plottables[self._key(definition.name)] = NumberSetFunction(
                definition.values, definition.name
            )
        elif kind is DefinitionKind.POINT:
            x_expression, y_expression = definition.coordinates
            self._plottables[self._key(definition.name)] = PointFunction(
                x_expression, y_expression, self.evaluator, definition.name
            )

        logger.debug(f"Added {kind.value}: {definition.source!r}")
        self.invalidate_all()
        return definition

    def _bind_parameter(self, parameter: Parameter) -> None:
        self.evaluator.set_parameter(parameter.name, parameter.value)
        self._parameters[parameter.name.lower()] = parameter

    def set_parameter(self, name: str, value: float) -> float:
        """Move a parameter (clamped to its range) and return the stored value."""
        parameter = self._parameters.get(name.lower())
        if parameter is None:
            raise DefinitionError(f"Unknown parameter '{name}'", "UNKNOWN_NAME")
        stored = parameter.set_value(value)
        self.evaluator.set_parameter(parameter.name, stored)
        self.invalidate_all()
        return stored

    def remove(self, name: str) -> None:
        key = name.lower()
        found = False
        if key in self._parameters:
            del self._parameters[key]
            self.evaluator.remove_parameter(key)
            found = True
        if key in self.evaluator.functions:
            self.evaluator.remove_function(key)
            found = True
        if key in self._plottables:
            del self._plottables[key]
            found = True
        if not found:
            raise DefinitionError(f"Nothing named '{name}' to remove", "UNKNOWN_NAME")
        self.invalidate_all()

    def invalidate_all(self) -> None:
        for plottable in self._plottables.values():
            plottable.invalidate_cache()
        logger.debug("Invalidated all point caches")

    def points(self, bounds: GraphBounds, width: int) -> dict[str, list[Point]]:
        """Points of every plottable entry, keyed like ``plottables``."""
        return {key: item.points(bounds, width) for key, item in self._plottables.items()}
