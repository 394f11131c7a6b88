"""Type definitions, result dataclasses and the error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple


class Point(NamedTuple):
    """A point in graph coordinates."""

    x: float
    y: float


@dataclass
class EvalResult:
    """Result of evaluating or describing an expression without raising."""

    ok: bool
    result: str | None = None
    value: float | None = None
    domain: str | None = None
    latex: str | None = None
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.result is not None:
            result_dict["result"] = self.result
        if self.value is not None:
            result_dict["value"] = self.value
        if self.domain is not None:
            result_dict["domain"] = self.domain
        if self.latex is not None:
            result_dict["latex"] = self.latex
        if self.error is not None:
            result_dict["error"] = self.error
        if self.code is not None:
            result_dict["code"] = self.code
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the result."""
        if not self.ok:
            return f"EvalResult(ok=False, error={self.error!r}, code={self.code!r})"
        parts = [f"ok={self.ok}"]
        if self.result is not None:
            parts.append(f"result={self.result!r}")
        if self.value is not None:
            parts.append(f"value={self.value!r}")
        if self.domain is not None:
            parts.append(f"domain={self.domain!r}")
        return f"EvalResult({', '.join(parts)})"


class GrapherError(Exception):
    """Base class for all expression engine errors."""

    default_code = "GRAPHER_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ParseError(GrapherError):
    """Raised when an expression is syntactically malformed."""

    default_code = "PARSE_ERROR"

    def __init__(self, message: str, code: str | None = None, position: int | None = None):
        self.position = position
        super().__init__(message, code)


class EvaluationError(GrapherError):
    """Raised when an expression cannot be evaluated after binding."""

    default_code = "EVALUATION_ERROR"


class DomainAnalysisError(GrapherError):
    """Raised inside the domain analyzer; never escapes analyze()."""

    default_code = "DOMAIN_ANALYSIS_ERROR"


class DefinitionError(GrapherError):
    """Raised when a workspace input line cannot be turned into a definition."""

    default_code = "DEFINITION_ERROR"
