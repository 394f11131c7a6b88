"""Classification of workspace input lines.

Each line typed into the workspace becomes one ``Definition``:

- ``f(x) = x^2``          named function
- ``a = [1:5]``           parameter with a continuous range
- ``n = [1..5]``          parameter restricted to integers
- ``a = 2.5``             constant
- ``P = (1, a)``, ``(2, 3)``  point
- ``h: x^2 = 4``, ``(sin(x) = 0.5)``, ``x^2 = 2*x + 1``  equation
- ``(x^2 >= 2*x + 1)``, ``r: sin(x) < 0``  inequation (shaded region)
- ``s = {1, 2, 3}``, ``{-2.5, 10}``  number set
- ``x^2 - 1``             bare expression (plotted as y = f(x))

Classification is purely textual; expressions are parsed later by the
evaluator, with the workspace parameters bound.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .config import (
    CONSTANT_RE,
    EQUATION_LABEL_RE,
    FREE_VARIABLE,
    NAMED_FUNCTION_RE,
    NUMBER_SET_RE,
    POINT_RE,
    RANGE_RE,
)
from .functions import RESERVED_NAMES, lookup
from .types import DefinitionError

_FREE_VARIABLE_RE = re.compile(rf"\b{FREE_VARIABLE}\b", re.IGNORECASE)


class DefinitionKind(Enum):
    FUNCTION = "function"
    PARAMETER = "parameter"
    CONSTANT = "constant"
    POINT = "point"
    EQUATION = "equation"
    INEQUATION = "inequation"
    NUMBER_SET = "number_set"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class Definition:
    """One classified input line."""

    kind: DefinitionKind
    source: str
    name: str | None = None
    expression: str | None = None
    left: str | None = None
    right: str | None = None
    coordinates: tuple[str, str] | None = None
    minimum: float | None = None
    maximum: float | None = None
    discrete: bool = False
    operator: str | None = None
    values: tuple[float, ...] | None = None

    @property
    def has_name(self) -> bool:
        return self.name is not None


def split_top_level(input_str: str, separator: str = ",") -> list[str]:
    """Split string on ``separator`` where it is not inside (), [] or {}."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in input_str:
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth = max(0, depth - 1)
        current.append(char)
    parts.append("".join(current).strip())
    return parts


def _is_enclosed(text: str) -> bool:
    """True if the parenthesis opening ``text`` closes at its last character."""
    if not (text.startswith("(") and text.endswith(")")):
        return False
    depth = 0
    for i, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i == len(text) - 1
    return False


def _check_name(name: str) -> str:
    if name.lower() in RESERVED_NAMES or name.lower() == FREE_VARIABLE:
        raise DefinitionError(
            f"'{name}' is a reserved name and cannot be defined", "RESERVED_NAME"
        )
    return name


def _equation(line: str, body: str, name: str | None) -> Definition:
    sides = split_top_level(body, "=")
    if len(sides) != 2 or not sides[0] or not sides[1]:
        raise DefinitionError(
            f"Equation must have exactly one '=' between two sides: {body!r}",
            "MALFORMED_EQUATION",
        )
    return Definition(
        DefinitionKind.EQUATION, line, name=name, left=sides[0], right=sides[1]
    )


def find_comparison(text: str) -> tuple[int, str] | None:
    """Index and operator of the first ``<``, ``<=``, ``>`` or ``>=`` outside brackets."""
    depth = 0
    for i, char in enumerate(text):
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth = max(0, depth - 1)
        elif char in "<>" and depth == 0:
            operator = char + "=" if text[i + 1 : i + 2] == "=" else char
            return i, operator
    return None


def _inequation(line: str, body: str, name: str | None) -> Definition:
    index, operator = find_comparison(body)
    left = body[:index].strip()
    right = body[index + len(operator) :].strip()
    if (
        not left
        or not right
        or find_comparison(right) is not None
        or len(split_top_level(left, "=")) > 1
        or len(split_top_level(right, "=")) > 1
    ):
        raise DefinitionError(
            f"Inequation must have exactly one comparison between two sides: {body!r}",
            "MALFORMED_INEQUATION",
        )
    return Definition(
        DefinitionKind.INEQUATION,
        line,
        name=name,
        left=left,
        right=right,
        operator=operator,
    )


def parse_definition(line: str) -> Definition:
    """Classify one workspace input line.

    Raises:
        DefinitionError: If the line is empty, malformed, or defines a
            reserved name
    """
    text = (line or "").strip()
    if not text:
        raise DefinitionError("Input cannot be empty", "EMPTY_INPUT")

    match = NAMED_FUNCTION_RE.match(text)
    if match and lookup(match.group(1).lower()) is None:
        # "sin(x) = x" is an equation, not a redefinition of sin
        name, body = match.groups()
        return Definition(
            DefinitionKind.FUNCTION, text, name=_check_name(name), expression=body.strip()
        )

    match = RANGE_RE.match(text)
    if match:
        name, start, separator, end = match.groups()
        minimum, maximum = float(start), float(end)
        if minimum > maximum:
            raise DefinitionError(
                f"Range start {start} is greater than end {end}", "INVALID_RANGE"
            )
        return Definition(
            DefinitionKind.PARAMETER,
            text,
            name=_check_name(name),
            minimum=minimum,
            maximum=maximum,
            discrete=separator == "..",
        )

    match = NUMBER_SET_RE.match(text)
    if match:
        name, body = match.groups()
        return Definition(
            DefinitionKind.NUMBER_SET,
            text,
            name=_check_name(name) if name else None,
            values=tuple(float(value) for value in body.split(",")),
        )

    match = EQUATION_LABEL_RE.match(text)
    if match:
        name, body = match.groups()
        body = body.strip()
        if find_comparison(body) is not None:
            return _inequation(text, body, _check_name(name))
        return _equation(text, body, _check_name(name))

    match = POINT_RE.match(text)
    if match:
        name = match.group(1)
        enclosed = text[match.start(2) - 1 :]
        if _is_enclosed(enclosed):
            inner = match.group(2).strip()
            parts = split_top_level(inner)
            if len(parts) == 2 and all(parts):
                return Definition(
                    DefinitionKind.POINT,
                    text,
                    name=_check_name(name) if name else None,
                    coordinates=(parts[0], parts[1]),
                )
            if name is None and find_comparison(inner) is not None:
                return _inequation(text, inner, None)
            if name is None and len(split_top_level(inner, "=")) > 1:
                return _equation(text, inner, None)

    match = CONSTANT_RE.match(text)
    if match:
        name, body = match.groups()
        body = body.strip()
        if (
            name.lower() != FREE_VARIABLE
            and len(split_top_level(body, "=")) == 1
            and find_comparison(body) is None
        ):
            _check_name(name)
            if _FREE_VARIABLE_RE.search(body):
                return Definition(DefinitionKind.FUNCTION, text, name=name, expression=body)
            return Definition(DefinitionKind.CONSTANT, text, name=name, expression=body)

    if find_comparison(text) is not None:
        return _inequation(text, text, None)

    if len(split_top_level(text, "=")) > 1:
        return _equation(text, text, None)

    return Definition(DefinitionKind.EXPRESSION, text, expression=text)
