"""Expression evaluation with named parameters and user functions.

An ``Evaluator`` owns the workspace bindings. Evaluating text happens in
two steps:

1. every named parameter is replaced by its value in parentheses
   (whole word, case-insensitive), in the expression and in the bodies of
   the user functions;
2. the substituted text is parsed once (the parse is cached) and the tree
   is evaluated with the free variable ``x`` bound as an atom, which gives
   the same result as substituting ``(x)`` into the text.

Evaluation follows IEEE semantics: division by zero and arguments outside a
function's domain yield inf or NaN rather than raising.
"""

from __future__ import annotations

import math
import re
from typing import Mapping

from .config import FREE_VARIABLE, VAR_NAME_RE
from .domain import Domain
from .domain_analyzer import analyze
from .functions import RESERVED_NAMES
from .logging_config import get_logger
from .nodes import Node, evaluate_tree
from .parser import parse_tree
from .types import DefinitionError, EvaluationError, ParseError

logger = get_logger("evaluator")


def _check_name(name: str, kind: str) -> str:
    if not VAR_NAME_RE.match(name or ""):
        raise DefinitionError(f"Invalid {kind} name: {name!r}", "INVALID_NAME")
    lowered = name.lower()
    if lowered in RESERVED_NAMES or lowered == FREE_VARIABLE:
        raise DefinitionError(
            f"'{name}' is a reserved name and cannot be used as a {kind}",
            "RESERVED_NAME",
        )
    return lowered


def _check_value(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise DefinitionError(
            f"Parameter '{name}' must be a finite number, got {value}",
            "NON_FINITE_VALUE",
        )
    return value


class Evaluator:
    """Evaluates expression text against a set of workspace bindings."""

    def __init__(
        self,
        parameters: Mapping[str, float] | None = None,
        functions: Mapping[str, str] | None = None,
    ):
        self._parameters: dict[str, float] = {}
        self._functions: dict[str, str] = {}
        for name, value in (parameters or {}).items():
            self.set_parameter(name, value)
        for name, body in (functions or {}).items():
            self.define_function(name, body)

    @property
    def parameters(self) -> dict[str, float]:
        return dict(self._parameters)

    @property
    def functions(self) -> dict[str, str]:
        return dict(self._functions)

    def set_parameter(self, name: str, value: float) -> None:
        self._parameters[_check_name(name, "parameter")] = _check_value(name, value)

    def remove_parameter(self, name: str) -> None:
        self._parameters.pop(name.lower(), None)

    def define_function(self, name: str, body: str) -> None:
        """Bind ``name(x)`` to ``body``; calls are inlined at parse time."""
        self._functions[_check_name(name, "function")] = body

    def remove_function(self, name: str) -> None:
        self._functions.pop(name.lower(), None)

    def substitute(self, expression: str) -> str:
        """Replace every parameter name in ``expression`` by its value."""
        text = expression.strip()
        for name, value in self._parameters.items():
            text = re.sub(
                rf"\b{re.escape(name)}\b", f"({value!r})", text, flags=re.IGNORECASE
            )
        return text

    def compile(self, expression: str) -> Node:
        """Substitute parameters and parse ``expression`` into a tree.

        Raises:
            EvaluationError: If the substituted text does not parse
        """
        text = self.substitute(expression)
        functions = {name: self.substitute(body) for name, body in self._functions.items()}
        try:
            return parse_tree(text, functions)
        except ParseError as e:
            logger.debug(f"Cannot evaluate {expression!r} (as {text!r}): {e}")
            raise EvaluationError(e.message, e.code) from e

    def evaluate(self, expression: str, x):
        """Evaluate ``expression`` at ``x``.

        ``x`` may be a float or a numpy array; an array gives an array of
        the same shape.
        """
        return evaluate_tree(self.compile(expression), x)

    def evaluate_constant(self, expression: str) -> float:
        """Evaluate an expression that must not mention ``x``.

        Raises:
            EvaluationError: If the expression has a free variable or does
                not parse
        """
        tree = self.compile(expression)
        if tree.has_variable:
            raise EvaluationError(
                f"Expression {expression!r} depends on '{FREE_VARIABLE}'",
                "FREE_VARIABLE",
            )
        return evaluate_tree(tree)

    def domain(self, expression: str) -> Domain:
        return analyze(self.compile(expression))


_default_evaluator = Evaluator()


def evaluate(expression: str, x):
    """Evaluate ``expression`` at ``x`` with no parameters or user functions."""
    return _default_evaluator.evaluate(expression, x)


def evaluate_constant(expression: str) -> float:
    return _default_evaluator.evaluate_constant(expression)
