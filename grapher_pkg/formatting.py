"""Display formatting for numbers, points and expressions.

This module handles:
- Number formatting with a configurable number of significant digits
- Unicode superscripts for exponents in expression text
- Conversion of expression trees to SymPy for LaTeX rendering
"""

from __future__ import annotations

import math
import re
from typing import Any

import sympy as sp

from .config import OUTPUT_PRECISION
from .functions import MathFunction
from .nodes import (
    BinaryOp,
    FunctionCall,
    Node,
    Number,
    ParameterizedFunctionCall,
    UnaryOp,
    Variable,
)
from .types import Point

_SUPERSCRIPTS = {
    "0": "⁰",
    "1": "¹",
    "2": "²",
    "3": "³",
    "4": "⁴",
    "5": "⁵",
    "6": "⁶",
    "7": "⁷",
    "8": "⁸",
    "9": "⁹",
    "-": "⁻",
    "n": "ⁿ",
}


def superscriptify(input_str: str) -> str:
    """Convert numeric string to Unicode superscript characters.

    Args:
        input_str: Input string with digits and '-' (e.g., "123", "-5")

    Returns:
        String with superscript Unicode characters (e.g., "¹²³", "⁻⁵")
    """
    return "".join(_SUPERSCRIPTS.get(char, char) for char in input_str)


def format_superscript(expr_str: str) -> str:
    """Replace integer powers written with ``^`` or ``**`` by superscripts.

    ``x^2`` becomes ``x²`` and ``x**-3`` becomes ``x⁻³``.
    """
    return re.sub(
        r"(?:\^|\*\*)\s*(-?\d+)(?![\d.])",
        lambda m: superscriptify(m.group(1)),
        expr_str,
    )


def format_number(val: Any, precision: int = OUTPUT_PRECISION) -> str:
    """Format a numeric value with specified precision.

    Args:
        val: Numeric value to format
        precision: Number of significant digits (default: OUTPUT_PRECISION)

    Returns:
        Formatted string representation of the number
    """
    try:
        value = float(val)
        if value == 0.0:
            return "0"  # avoid "-0" for values that round to negative zero
        fmt = "{:." + str(int(precision)) + "g}"
        return fmt.format(value)
    except (ValueError, TypeError, OverflowError):
        return str(val)


def format_point(point: Point, precision: int = OUTPUT_PRECISION) -> str:
    return f"({format_number(point.x, precision)}, {format_number(point.y, precision)})"


def prettify_expr(expr_str: str) -> str:
    """Convert expression text to a more readable form.

    Integer powers become superscripts, 'sqrt(' becomes '√(' and '*'
    becomes '×'.

    Args:
        expr_str: Expression string (e.g., "sqrt(4)*x^2")

    Returns:
        Prettified string (e.g., "√(4)×x²")
    """
    result = format_superscript(expr_str)
    result = re.sub(r"sqrt\(", "√(", result)
    result = result.replace("*", "×")
    return result


_SYMPY_FUNCTIONS = {
    MathFunction.SIN: sp.sin,
    MathFunction.COS: sp.cos,
    MathFunction.TAN: sp.tan,
    MathFunction.COT: sp.cot,
    MathFunction.SEC: sp.sec,
    MathFunction.CSC: sp.csc,
    MathFunction.ASIN: sp.asin,
    MathFunction.ACOS: sp.acos,
    MathFunction.ATAN: sp.atan,
    MathFunction.ACOT: sp.acot,
    MathFunction.ASEC: sp.asec,
    MathFunction.ACSC: sp.acsc,
    MathFunction.SINH: sp.sinh,
    MathFunction.COSH: sp.cosh,
    MathFunction.TANH: sp.tanh,
    MathFunction.COTH: sp.coth,
    MathFunction.SECH: sp.sech,
    MathFunction.CSCH: sp.csch,
    MathFunction.ASINH: sp.asinh,
    MathFunction.ACOSH: sp.acosh,
    MathFunction.ATANH: sp.atanh,
    MathFunction.ACOTH: sp.acoth,
    MathFunction.ASECH: sp.asech,
    MathFunction.ACSCH: sp.acsch,
    MathFunction.LN: sp.log,
    MathFunction.ABS: sp.Abs,
    MathFunction.SQRT: sp.sqrt,
}


def _number_to_sympy(value: float) -> sp.Expr:
    if value == math.pi:
        return sp.pi
    if value == math.e:
        return sp.E
    if math.isfinite(value) and value.is_integer():
        return sp.Integer(int(value))
    return sp.Float(value)


def _reciprocal(value: float) -> sp.Expr:
    if math.isfinite(value) and value.is_integer():
        return sp.Rational(1, int(value))
    return sp.Pow(_number_to_sympy(value), -1)


def _build(node: Node) -> sp.Expr:
    if isinstance(node, Number):
        return _number_to_sympy(node.value)
    if isinstance(node, Variable):
        return sp.Symbol(node.name)
    if isinstance(node, UnaryOp):
        operand = _build(node.operand)
        return -operand if node.operator == "-" else operand
    if isinstance(node, BinaryOp):
        left, right = _build(node.left), _build(node.right)
        if node.operator == "+":
            return sp.Add(left, right)
        if node.operator == "-":
            return sp.Add(left, -right)
        if node.operator == "*":
            return sp.Mul(left, right)
        if node.operator == "/":
            return sp.Mul(left, sp.Pow(right, -1))
        return sp.Pow(left, right)
    if isinstance(node, ParameterizedFunctionCall):
        argument = _build(node.argument)
        if node.function is MathFunction.ROOT:
            return sp.Pow(argument, _reciprocal(node.parameter))
        return sp.Mul(sp.log(argument), sp.Pow(sp.log(_number_to_sympy(node.parameter)), -1))
    if isinstance(node, FunctionCall):
        argument = _build(node.argument)
        if node.function is MathFunction.LOG:
            return sp.Mul(sp.log(argument), sp.Pow(sp.log(10), -1))
        return _SYMPY_FUNCTIONS[node.function](argument)
    raise TypeError(f"Cannot convert {type(node).__name__} to SymPy")


def to_sympy(node: Node) -> sp.Expr:
    """Convert an expression tree to an equivalent, unevaluated SymPy expression.

    Nothing is simplified, so ``x + x`` stays ``x + x`` and ``10^10^10`` is
    never expanded into an exact integer; call ``.doit()`` on the result to
    let SymPy evaluate it. ``log{b}(a)`` maps to ``log(a)/log(b)`` and
    ``root{n}(a)`` to ``a**(1/n)``.
    """
    with sp.evaluate(False):
        return _build(node)


def to_latex(node: Node) -> str:
    """LaTeX source for an expression tree, printed without evaluation."""
    with sp.evaluate(False):
        return sp.latex(_build(node))
