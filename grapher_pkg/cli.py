"""Command-line interface for Grapher.

Examples:
    python -m grapher_pkg -e "2+3*4"
    python -m grapher_pkg -e "a*x^2" --at 3 --param a=2
    python -m grapher_pkg --domain "ln(x - 1)"
    python -m grapher_pkg --intersect "x^2" "2*x+1" --range -10 10
    python -m grapher_pkg "f(x)=sin(x)" "(f(x) = 0.5)" --ascii
    python -m grapher_pkg "(x^2 <= 4)" "s = {1, 2, 3}" --ascii
"""

from __future__ import annotations

import argparse
import json
import math
import sys
from typing import Any

from . import config as _config
from .config import VERSION
from .definitions import DefinitionKind, parse_definition
from .formatting import format_number, format_point, to_latex
from .graph import Graph
from .logging_config import get_logger, setup_logging
from .model import GraphBounds
from .types import GrapherError

logger = get_logger("cli")

_PARAMETER_KINDS = (DefinitionKind.PARAMETER, DefinitionKind.CONSTANT)


def _fmt(value: float) -> str:
    return format_number(value, _config.OUTPUT_PRECISION)


def _json_number(value: float) -> Any:
    """JSON has no NaN or Infinity; send those as strings."""
    return value if math.isfinite(value) else str(value)


def _emit(payload: dict[str, Any], human: str, output_format: str) -> None:
    if output_format == "json":
        print(json.dumps(payload))
    else:
        print(human)


def _emit_error(error: GrapherError, output_format: str) -> None:
    if output_format == "json":
        print(json.dumps({"ok": False, "error": error.message, "code": error.code}))
    else:
        print(f"Error: {error.message}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grapher",
        description="Evaluate, analyze and plot single-variable expressions",
    )
    parser.add_argument(
        "entries",
        nargs="*",
        metavar="LINE",
        help='Workspace input lines, e.g. "f(x)=x^2", "a=[1:5]", "(x^2 = 2)"',
    )
    parser.add_argument(
        "-e", "--eval", type=str, dest="eval_expr", help="Evaluate one expression"
    )
    parser.add_argument("--at", type=float, help="Value of x for --eval")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Bind a parameter (value or range such as [1:5]); repeatable",
    )
    parser.add_argument(
        "--define",
        action="append",
        default=[],
        metavar="F(x)=BODY",
        help="Define a named function; repeatable",
    )
    parser.add_argument("--domain", type=str, metavar="EXPR", help="Print the domain of EXPR")
    parser.add_argument(
        "--intersect",
        nargs=2,
        metavar=("LEFT", "RIGHT"),
        help="Find the intersections of LEFT and RIGHT",
    )
    parser.add_argument(
        "--range",
        nargs=2,
        type=float,
        metavar=("MIN", "MAX"),
        default=[_config.DEFAULT_MIN_X, _config.DEFAULT_MAX_X],
        help="x range for --intersect and plots",
    )
    parser.add_argument(
        "--y-range",
        nargs=2,
        type=float,
        metavar=("MIN", "MAX"),
        default=[_config.DEFAULT_MIN_X, _config.DEFAULT_MAX_X],
        help="y range for plots",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=_config.DEFAULT_PIXEL_WIDTH,
        help="Pixel width that sets the sampling density",
    )
    parser.add_argument("--plot", type=str, metavar="FILE", help="Save a PNG plot of the workspace")
    parser.add_argument("--ascii", action="store_true", help="Print an ASCII plot of the workspace")
    parser.add_argument("--latex", action="store_true", help="Also print LaTeX for --eval")
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "-p", "--precision", type=int, help="Set output precision (significant digits)"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    return parser


def _build_graph(args: argparse.Namespace) -> Graph:
    graph = Graph()
    for binding in args.param:
        if parse_definition(binding).kind not in _PARAMETER_KINDS:
            raise GrapherError(f"Expected NAME=VALUE, got {binding!r}", "INVALID_ARGUMENT")
        graph.add(binding)
    for definition in args.define:
        graph.add(definition)
    for line in args.entries:
        graph.add(line)
    return graph


def _run_eval(graph: Graph, args: argparse.Namespace, output_format: str) -> None:
    expression = args.eval_expr.strip()
    evaluator = graph.evaluator
    if args.at is not None:
        value = evaluator.evaluate(expression, args.at)
    else:
        value = evaluator.evaluate_constant(expression)
    payload = {"ok": True, "expression": expression, "value": _json_number(value)}
    if args.at is not None:
        payload["x"] = args.at
    human = _fmt(value)
    if args.latex:
        latex = to_latex(evaluator.compile(expression))
        payload["latex"] = latex
        human = f"{human}\nLaTeX: {latex}"
    _emit(payload, human, output_format)


def _run_domain(graph: Graph, args: argparse.Namespace, output_format: str) -> None:
    domain = graph.evaluator.domain(args.domain)
    payload = {
        "ok": True,
        "expression": args.domain,
        "domain": str(domain),
        "min": _json_number(domain.min_bound()),
        "max": _json_number(domain.max_bound()),
    }
    _emit(payload, str(domain), output_format)


def _run_intersect(graph: Graph, args: argparse.Namespace, output_format: str) -> None:
    left, right = args.intersect
    min_x, max_x = args.range
    points = graph.finder.find_intersections(left, right, min_x, max_x, args.width)
    payload = {
        "ok": True,
        "left": left,
        "right": right,
        "points": [[_json_number(p.x), _json_number(p.y)] for p in points],
    }
    if points:
        human = "\n".join(format_point(p, _config.OUTPUT_PRECISION) for p in points)
    else:
        human = "No intersections in range"
    _emit(payload, human, output_format)


def _run_plot(graph: Graph, args: argparse.Namespace, output_format: str) -> int:
    from .plotting import plot_graph

    bounds = GraphBounds(args.range[0], args.range[1], args.y_range[0], args.y_range[1])
    results = []
    if args.plot:
        results.append(plot_graph(graph, bounds, args.width, output=args.plot))
    if args.ascii or not args.plot:
        results.append(plot_graph(graph, bounds, args.width, ascii=True))
    for result in results:
        if output_format == "json":
            print(json.dumps(result.to_dict()))
        else:
            print(result.result if result.ok else f"Error: {result.error}")
    return 0 if all(result.ok for result in results) else 1


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for Grapher CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    output_format = args.format

    setup_logging(level=args.log_level, log_file=args.log_file)

    # Apply CLI configuration overrides
    if args.precision and args.precision > 0:
        _config.OUTPUT_PRECISION = int(args.precision)

    if args.version:
        print(VERSION)
        return 0

    actions = [args.eval_expr, args.domain, args.intersect, args.plot, args.ascii]
    if not any(actions) and not args.entries:
        parser.print_help()
        return 0

    try:
        graph = _build_graph(args)
        if args.eval_expr:
            _run_eval(graph, args, output_format)
        if args.domain:
            _run_domain(graph, args, output_format)
        if args.intersect:
            _run_intersect(graph, args, output_format)
    except GrapherError as e:
        logger.debug(f"Command failed: {e.code} - {e.message}")
        _emit_error(e, output_format)
        return 1

    if args.plot or args.ascii or (args.entries and not any(actions)):
        try:
            return _run_plot(graph, args, output_format)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main_entry())
