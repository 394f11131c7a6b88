"""Recursive-descent parser for expression text.

Grammar, lowest precedence first::

    expr     := term (('+' | '-') term)*
    term     := factor (('*' | '/') factor)*
    factor   := ('+' | '-') factor | primary ['^' factor]
    primary  := '(' expr ')' | number | name ['{' expr '}'] call_arg | name
    call_arg := '(' expr ')' | factor

Exponentiation is right-associative and binds tighter than a leading sign,
so ``2^3^2`` is 512 and ``-2^2`` is -4.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Mapping

from .config import CACHE_SIZE_PARSE, FREE_VARIABLE, MAX_FUNCTION_EXPANSION_DEPTH, MAX_INPUT_LENGTH
from .functions import CONSTANTS, MathFunction, ParameterUse, lookup
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
from .tokenizer import TokenKind, TokenStream
from .types import ParseError

logger = get_logger("parser")


def is_balanced(input_str: str) -> tuple[bool, int | None]:
    """Check if parentheses/braces are balanced. Returns (is_balanced, error_position)."""
    pairs = {"(": ")", "{": "}"}
    stack: list[tuple[str, int]] = []  # (char, position)
    for i, char in enumerate(input_str):
        if char in pairs:
            stack.append((char, i))
        elif char in pairs.values():
            if not stack:
                return False, i
            opening, _ = stack.pop()
            if pairs[opening] != char:
                return False, i
    if stack:
        return False, stack[0][1]  # Return position of first unmatched
    return True, None


class _ExpressionParser:
    """One parse of one source string.

    ``expanding`` holds the user functions whose bodies are currently being
    inlined, outermost first, so a body that calls back into itself is
    reported instead of recursing forever.
    """

    def __init__(
        self,
        text: str,
        functions: Mapping[str, str],
        expanding: tuple[str, ...] = (),
    ):
        self.text = text
        self.functions = functions
        self.expanding = expanding
        self.stream = TokenStream.from_text(text)

    def parse(self) -> Node:
        tree = self.parse_expression()
        if not self.stream.at_end():
            token = self.stream.peek()
            raise ParseError(
                f"Unexpected '{token.value}' at position {token.position}",
                "TRAILING_INPUT",
                token.position,
            )
        return tree

    def parse_expression(self) -> Node:
        node = self.parse_term()
        while True:
            token = self.stream.accept_operator("+", "-")
            if token is None:
                return node
            node = BinaryOp(node, token.value, self.parse_term())

    def parse_term(self) -> Node:
        node = self.parse_factor()
        while True:
            token = self.stream.accept_operator("*", "/")
            if token is None:
                return node
            node = BinaryOp(node, token.value, self.parse_factor())

    def parse_factor(self) -> Node:
        sign = self.stream.accept_operator("+", "-")
        if sign is not None:
            return UnaryOp(sign.value, self.parse_factor())
        base = self.parse_primary()
        if self.stream.accept_operator("^") is not None:
            # Right operand is a full factor, which makes '^' right-associative
            return BinaryOp(base, "^", self.parse_factor())
        return base

    def parse_primary(self) -> Node:
        token = self.stream.peek()
        if token.is_punctuation("("):
            self.stream.advance()
            node = self.parse_expression()
            self.stream.expect_punctuation(")")
            return node
        if token.kind is TokenKind.NUMBER:
            self.stream.advance()
            return Number(float(token.value))
        if token.kind is TokenKind.IDENTIFIER:
            self.stream.advance()
            return self._parse_name(token.value, token.position)
        if token.kind is TokenKind.END:
            raise ParseError(
                "Unexpected end of input", "UNEXPECTED_END", token.position
            )
        raise ParseError(
            f"Unexpected '{token.value}' at position {token.position}",
            "UNEXPECTED_TOKEN",
            token.position,
        )

    def _parse_name(self, name: str, position: int) -> Node:
        if name in CONSTANTS:
            return Number(CONSTANTS[name])
        if name == FREE_VARIABLE:
            return Variable(name)
        function = lookup(name)
        if function is not None:
            return self._parse_builtin_call(function, position)
        if name in self.functions:
            return self._expand_user_function(name, position)
        raise ParseError(
            f"Unknown identifier '{name}' at position {position}",
            "UNKNOWN_IDENTIFIER",
            position,
        )

    def _parse_call_argument(self) -> Node:
        if self.stream.accept_punctuation("(") is not None:
            argument = self.parse_expression()
            self.stream.expect_punctuation(")")
            return argument
        return self.parse_factor()

    def _parse_function_parameter(self, function: MathFunction) -> float | None:
        brace = self.stream.accept_punctuation("{")
        if brace is None:
            if function.parameter_use is ParameterUse.REQUIRED:
                raise ParseError(
                    f"'{function.function_name}' needs a parameter, e.g. "
                    f"{function.function_name}{{2}}(x)",
                    "MISSING_PARAMETER",
                    self.stream.position,
                )
            return None
        if function.parameter_use is ParameterUse.NONE:
            raise ParseError(
                f"'{function.function_name}' does not take a parameter",
                "UNEXPECTED_PARAMETER",
                brace.position,
            )
        parameter = self.parse_expression()
        self.stream.expect_punctuation("}")
        if parameter.has_variable:
            raise ParseError(
                f"Parameter of '{function.function_name}' must be constant",
                "NON_CONSTANT_PARAMETER",
                brace.position,
            )
        return evaluate_tree(parameter)

    def _parse_builtin_call(self, function: MathFunction, position: int) -> Node:
        parameter = self._parse_function_parameter(function)
        argument = self._parse_call_argument()
        if parameter is None:
            return FunctionCall(function, argument)
        return ParameterizedFunctionCall(function, argument, parameter)

    def _expand_user_function(self, name: str, position: int) -> Node:
        if name in self.expanding:
            chain = " -> ".join(self.expanding + (name,))
            raise ParseError(
                f"Function '{name}' is defined in terms of itself ({chain})",
                "RECURSIVE_FUNCTION",
                position,
            )
        if len(self.expanding) >= MAX_FUNCTION_EXPANSION_DEPTH:
            raise ParseError(
                f"Function calls nested deeper than {MAX_FUNCTION_EXPANSION_DEPTH}",
                "EXPANSION_TOO_DEEP",
                position,
            )
        argument = self._parse_call_argument()
        body_text = self.functions[name]
        try:
            body = _ExpressionParser(
                body_text, self.functions, self.expanding + (name,)
            ).parse()
        except ParseError as e:
            if e.code in ("RECURSIVE_FUNCTION", "EXPANSION_TOO_DEEP"):
                raise
            raise ParseError(
                f"In body of '{name}': {e.message}", e.code, position
            ) from e
        return body.substitute(argument)


def _normalize_functions(functions: Mapping[str, str] | None) -> tuple[tuple[str, str], ...]:
    if not functions:
        return ()
    return tuple(sorted((name.lower(), body) for name, body in functions.items()))


@lru_cache(maxsize=CACHE_SIZE_PARSE)
def _parse_cached(text: str, function_items: tuple[tuple[str, str], ...]) -> Node:
    if not text or not text.strip():
        raise ParseError("Empty expression", "EMPTY_INPUT", 0)
    if len(text) > MAX_INPUT_LENGTH:
        raise ParseError(
            f"Input too long (max {MAX_INPUT_LENGTH} characters)", "TOO_LONG", None
        )
    balanced, position = is_balanced(text)
    if not balanced:
        raise ParseError(
            f"Unbalanced parentheses at position {position}",
            "UNBALANCED_PARENTHESES",
            position,
        )
    tree = _ExpressionParser(text, dict(function_items)).parse()
    logger.debug(f"Parsed {text!r} -> {tree}")
    return tree


def parse_tree(text: str, functions: Mapping[str, str] | None = None) -> Node:
    """Parse ``text`` into an expression tree.

    Args:
        text: Expression source
        functions: Optional mapping of user function names to body text;
            a call ``f(arg)`` is inlined with ``arg`` in place of ``x``

    Returns:
        Root node of the tree. Trees are immutable and shared between
        callers through the parse cache.

    Raises:
        ParseError: If the text is not a well-formed expression
    """
    return _parse_cached(text, _normalize_functions(functions))


def parse(text: str, functions: Mapping[str, str] | None = None) -> float | Node:
    """Parse ``text``, folding it to a float when it has no free variable.

    Division by zero and out-of-domain arguments are not parse errors; they
    fold to inf or NaN.
    """
    tree = parse_tree(text, functions)
    if tree.has_variable:
        return tree
    return evaluate_tree(tree)


def clear_parse_cache() -> None:
    _parse_cached.cache_clear()
    logger.debug("Parse cache cleared")
