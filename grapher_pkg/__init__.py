"""Grapher package: expression engine for an interactive graphing calculator."""

__all__ = [
    "config",
    "tokenizer",
    "functions",
    "nodes",
    "parser",
    "domain",
    "domain_analyzer",
    "evaluator",
    "intersection",
    "definitions",
    "model",
    "graph",
    "formatting",
    "plotting",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "parse",
    "parse_tree",
    "evaluate",
    "evaluate_constant",
    "analyze_domain",
    "find_intersections",
    "describe",
]
