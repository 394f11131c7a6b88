"""Built-in function table.

Every built-in function is a member of the closed ``MathFunction``
enumeration. Each member carries one ``FunctionSpec`` record holding its
parameter arity, its numeric evaluator and its domain rule, so the parser
resolves a name once and the evaluator and domain analyzer never compare
strings again. Adding a function means adding one member here.

Evaluators operate on numpy float64 scalars or arrays and follow IEEE
semantics: an argument outside the mathematical domain yields NaN and a
pole yields +/-inf. Callers run them under ``numpy.errstate(all="ignore")``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Optional, Tuple

import numpy as np


class ParameterUse(Enum):
    NONE = "none"
    OPTIONAL = "optional"
    REQUIRED = "required"


class ConstraintKind(Enum):
    GREATER_THAN = "greater_than"  # arg > value, or >= when inclusive
    LESS_THAN = "less_than"  # arg < value, or <= when inclusive
    NOT_EQUAL = "not_equal"  # arg != value
    ABS_AT_LEAST = "abs_at_least"  # |arg| >= value, or > when not inclusive


@dataclass(frozen=True)
class Constraint:
    """A restriction a function places on its argument."""

    kind: ConstraintKind
    value: float
    inclusive: bool

    def __str__(self) -> str:
        symbols = {
            ConstraintKind.GREATER_THAN: (">=", ">"),
            ConstraintKind.LESS_THAN: ("<=", "<"),
            ConstraintKind.NOT_EQUAL: ("!=", "!="),
            ConstraintKind.ABS_AT_LEAST: (">=", ">"),
        }
        op = symbols[self.kind][0 if self.inclusive else 1]
        arg = "|arg|" if self.kind is ConstraintKind.ABS_AT_LEAST else "arg"
        return f"{arg} {op} {self.value:g}"


def _above(value: float, inclusive: bool) -> Constraint:
    return Constraint(ConstraintKind.GREATER_THAN, value, inclusive)


def _below(value: float, inclusive: bool) -> Constraint:
    return Constraint(ConstraintKind.LESS_THAN, value, inclusive)


DomainRule = Callable[[Optional[float]], Tuple[Constraint, ...]]


def _rule(*constraints: Constraint) -> DomainRule:
    return lambda parameter: constraints


_UNRESTRICTED = _rule()
_POSITIVE = _rule(_above(0.0, False))
_NON_NEGATIVE = _rule(_above(0.0, True))
_UNIT_CLOSED = _rule(_above(-1.0, True), _below(1.0, True))
_UNIT_OPEN = _rule(_above(-1.0, False), _below(1.0, False))
_NONZERO = _rule(Constraint(ConstraintKind.NOT_EQUAL, 0.0, False))
_OUTSIDE_UNIT_CLOSED = _rule(Constraint(ConstraintKind.ABS_AT_LEAST, 1.0, True))
_OUTSIDE_UNIT_OPEN = _rule(Constraint(ConstraintKind.ABS_AT_LEAST, 1.0, False))


def _even_root_rule(parameter: float | None) -> tuple[Constraint, ...]:
    if parameter is not None and parameter % 2 == 0:
        return (_above(0.0, True),)
    return ()


def _reciprocal(x):
    return np.divide(1.0, x)


def _log(x, base):
    if base is None:
        return np.log10(x)
    return np.log(x) / np.log(base)


def _root(x, index):
    exponent = np.divide(1.0, index)
    if float(index).is_integer() and int(index) % 2 == 1:
        # Odd roots are real for negative arguments
        return np.sign(x) * np.power(np.abs(x), exponent)
    return np.power(x, exponent)


def _unary(func: Callable) -> Callable:
    return lambda x, parameter=None: func(x)


@dataclass(frozen=True)
class FunctionSpec:
    """Arity, evaluator and domain rule of one built-in function."""

    name: str
    evaluator: Callable
    domain_rule: DomainRule = _UNRESTRICTED
    parameter: ParameterUse = ParameterUse.NONE


class MathFunction(Enum):
    SIN = FunctionSpec("sin", _unary(np.sin))
    COS = FunctionSpec("cos", _unary(np.cos))
    TAN = FunctionSpec("tan", _unary(np.tan))
    COT = FunctionSpec("cot", _unary(lambda x: _reciprocal(np.tan(x))))
    SEC = FunctionSpec("sec", _unary(lambda x: _reciprocal(np.cos(x))))
    CSC = FunctionSpec("csc", _unary(lambda x: _reciprocal(np.sin(x))))

    ASIN = FunctionSpec("asin", _unary(np.arcsin), _UNIT_CLOSED)
    ACOS = FunctionSpec("acos", _unary(np.arccos), _UNIT_CLOSED)
    ATAN = FunctionSpec("atan", _unary(np.arctan))
    ACOT = FunctionSpec("acot", _unary(lambda x: np.arctan(_reciprocal(x))), _NONZERO)
    ASEC = FunctionSpec(
        "asec", _unary(lambda x: np.arccos(_reciprocal(x))), _OUTSIDE_UNIT_CLOSED
    )
    ACSC = FunctionSpec(
        "acsc", _unary(lambda x: np.arcsin(_reciprocal(x))), _OUTSIDE_UNIT_CLOSED
    )

    SINH = FunctionSpec("sinh", _unary(np.sinh))
    COSH = FunctionSpec("cosh", _unary(np.cosh))
    TANH = FunctionSpec("tanh", _unary(np.tanh))
    COTH = FunctionSpec("coth", _unary(lambda x: _reciprocal(np.tanh(x))))
    SECH = FunctionSpec("sech", _unary(lambda x: _reciprocal(np.cosh(x))))
    CSCH = FunctionSpec("csch", _unary(lambda x: _reciprocal(np.sinh(x))))

    ASINH = FunctionSpec("asinh", _unary(np.arcsinh))
    ACOSH = FunctionSpec("acosh", _unary(np.arccosh), _rule(_above(1.0, True)))
    ATANH = FunctionSpec("atanh", _unary(np.arctanh), _UNIT_OPEN)
    ACOTH = FunctionSpec(
        "acoth", _unary(lambda x: np.arctanh(_reciprocal(x))), _OUTSIDE_UNIT_OPEN
    )
    ASECH = FunctionSpec(
        "asech",
        _unary(lambda x: np.arccosh(_reciprocal(x))),
        _rule(_above(0.0, False), _below(1.0, True)),
    )
    ACSCH = FunctionSpec("acsch", _unary(lambda x: np.arcsinh(_reciprocal(x))), _NONZERO)

    LN = FunctionSpec("ln", _unary(np.log), _POSITIVE)
    ABS = FunctionSpec("abs", _unary(np.abs))
    SQRT = FunctionSpec("sqrt", _unary(np.sqrt), _NON_NEGATIVE)

    LOG = FunctionSpec("log", _log, _POSITIVE, ParameterUse.OPTIONAL)
    ROOT = FunctionSpec("root", _root, _even_root_rule, ParameterUse.REQUIRED)

    @property
    def function_name(self) -> str:
        return self.value.name

    @property
    def parameter_use(self) -> ParameterUse:
        return self.value.parameter

    def apply(self, argument, parameter: float | None = None):
        """Evaluate this function on a numpy scalar or array."""
        return self.value.evaluator(argument, parameter)

    def constraints(self, parameter: float | None = None) -> tuple[Constraint, ...]:
        """Restrictions this function places on its argument."""
        return self.value.domain_rule(parameter)


FUNCTIONS: MappingProxyType = MappingProxyType(
    {member.function_name: member for member in MathFunction}
)

CONSTANTS: MappingProxyType = MappingProxyType({"pi": math.pi, "e": math.e})

RESERVED_NAMES = frozenset(FUNCTIONS) | frozenset(CONSTANTS)


def lookup(name: str) -> MathFunction | None:
    """Resolve a lower-cased name to its built-in function, if any."""
    return FUNCTIONS.get(name)
