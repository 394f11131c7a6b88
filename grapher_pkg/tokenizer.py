"""Lexical analysis for expression text.

The tokenizer turns a source string into an immutable list of tokens.
Grammar rules in parser.py consume them through a TokenStream, a small
forward-only cursor that is created for a single parse call and never
shared, so parsing stays reentrant.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .types import ParseError


class TokenKind(Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    END = "end"


@dataclass(frozen=True)
class Token:
    """A single lexical token with its source offset."""

    kind: TokenKind
    value: str
    position: int

    def is_operator(self, *symbols: str) -> bool:
        return self.kind is TokenKind.OPERATOR and self.value in symbols

    def is_punctuation(self, symbol: str) -> bool:
        return self.kind is TokenKind.PUNCTUATION and self.value == symbol


_NUMBER_RE = re.compile(r"[0-9.]+(?:[eE][+-]?[0-9]+)?")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Display glyphs accepted as operator spellings
_OPERATOR_ALIASES = {
    "+": "+",
    "-": "-",
    "−": "-",  # minus sign
    "*": "*",
    "×": "*",  # multiplication sign
    "⋅": "*",  # dot operator
    "/": "/",
    "÷": "/",  # division sign
    "^": "^",
}
_PUNCTUATION = frozenset("(){},")


def tokenize(text: str) -> list[Token]:
    """Split expression text into tokens.

    Identifiers are lower-cased, so names are matched case-insensitively.
    Python-style ``**`` is read as ``^``.

    Args:
        text: Expression source

    Returns:
        List of tokens terminated by a single END token

    Raises:
        ParseError: On an unexpected character or a malformed number
    """
    tokens: list[Token] = []
    pos = 0
    length = len(text)
    while pos < length:
        char = text[pos]
        if char.isspace():
            pos += 1
            continue
        if char in "0123456789.":
            match = _NUMBER_RE.match(text, pos)
            literal = match.group(0)
            try:
                float(literal)
            except ValueError:
                raise ParseError(
                    f"Malformed number '{literal}' at position {pos}",
                    "MALFORMED_NUMBER",
                    pos,
                ) from None
            tokens.append(Token(TokenKind.NUMBER, literal, pos))
            pos = match.end()
            continue
        if char.isalpha() or char == "_":
            match = _IDENTIFIER_RE.match(text, pos)
            if match is None:
                # Non-ASCII letters (e.g. a Greek pi) are not identifiers
                raise ParseError(
                    f"Unexpected character '{char}' at position {pos}",
                    "UNEXPECTED_CHARACTER",
                    pos,
                )
            tokens.append(Token(TokenKind.IDENTIFIER, match.group(0).lower(), pos))
            pos = match.end()
            continue
        if text.startswith("**", pos):
            tokens.append(Token(TokenKind.OPERATOR, "^", pos))
            pos += 2
            continue
        if char in _OPERATOR_ALIASES:
            tokens.append(Token(TokenKind.OPERATOR, _OPERATOR_ALIASES[char], pos))
            pos += 1
            continue
        if char in _PUNCTUATION:
            tokens.append(Token(TokenKind.PUNCTUATION, char, pos))
            pos += 1
            continue
        raise ParseError(
            f"Unexpected character '{char}' at position {pos}",
            "UNEXPECTED_CHARACTER",
            pos,
        )
    tokens.append(Token(TokenKind.END, "", length))
    return tokens


class TokenStream:
    """Forward-only cursor over a token list, owned by one parse call."""

    def __init__(self, tokens: list[Token]):
        if not tokens or tokens[-1].kind is not TokenKind.END:
            raise ValueError("token list must end with an END token")
        self._tokens = tokens
        self._index = 0

    @classmethod
    def from_text(cls, text: str) -> "TokenStream":
        return cls(tokenize(text))

    @property
    def position(self) -> int:
        return self.peek().position

    def peek(self) -> Token:
        return self._tokens[self._index]

    def at_end(self) -> bool:
        return self.peek().kind is TokenKind.END

    def advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind is not TokenKind.END:
            self._index += 1
        return token

    def accept_operator(self, *symbols: str) -> Token | None:
        """Consume and return the next token if it is one of ``symbols``."""
        if self.peek().is_operator(*symbols):
            return self.advance()
        return None

    def accept_punctuation(self, symbol: str) -> Token | None:
        if self.peek().is_punctuation(symbol):
            return self.advance()
        return None

    def expect_punctuation(self, symbol: str) -> Token:
        token = self.accept_punctuation(symbol)
        if token is None:
            found = self.peek()
            found_text = found.value or "end of input"
            raise ParseError(
                f"Expected '{symbol}' at position {found.position}, found '{found_text}'",
                "EXPECTED_TOKEN",
                found.position,
            )
        return token
