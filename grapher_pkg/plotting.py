"""Rendering of the workspace as an ASCII chart or a matplotlib image."""

from __future__ import annotations

import numpy as np

try:
    # Set non-GUI backend before importing pyplot
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from .config import DEFAULT_PIXEL_WIDTH
from .graph import Graph
from .logging_config import get_logger
from .model import GraphBounds, InequationFunction, PlottableFunction
from .types import EvalResult, Point

logger = get_logger("plotting")

ASCII_ROWS = 20
ASCII_COLS = 60


def split_segments(points: list[Point], bounds: GraphBounds) -> list[list[Point]]:
    """Break a sampled curve where it should not be joined by a line.

    A break happens across a hole in the sampling (more than twice the
    median x step) and across a jump taller than the viewport, which is
    how a pole shows up between two samples.
    """
    if len(points) < 2:
        return [points] if points else []
    xs = np.array([p.x for p in points])
    steps = np.diff(xs)
    typical = float(np.median(steps))
    segments: list[list[Point]] = [[points[0]]]
    for previous, point, step in zip(points, points[1:], steps.tolist()):
        gap = typical > 0 and step > 2.0 * typical
        jump = abs(point.y - previous.y) > bounds.range_y
        if gap or jump:
            segments.append([])
        segments[-1].append(point)
    return segments


def render_ascii(
    series: dict[str, tuple[PlottableFunction, list[Point]]],
    bounds: GraphBounds,
    rows: int = ASCII_ROWS,
    cols: int = ASCII_COLS,
) -> str:
    """Draw points onto a character grid.

    Curves use '*', isolated points 'o' and the columns where an
    inequation holds are filled with '.' behind everything else.
    """
    grid = [[" " for _ in range(cols)] for _ in range(rows)]

    for plottable, _ in series.values():
        if not isinstance(plottable, InequationFunction):
            continue
        for start, end in plottable.region_spans(bounds):
            first = max(0, bounds.x_to_screen(start, cols - 1))
            last = min(cols - 1, bounds.x_to_screen(end, cols - 1))
            for c in range(first, last + 1):
                for r in range(rows):
                    grid[r][c] = "."

    x_axis_row = bounds.y_to_screen(0.0, rows - 1) if bounds.min_y <= 0 <= bounds.max_y else -1
    y_axis_col = bounds.x_to_screen(0.0, cols - 1) if bounds.min_x <= 0 <= bounds.max_x else -1
    for r in range(rows):
        for c in range(cols):
            if r == x_axis_row and c == y_axis_col:
                grid[r][c] = "+"
            elif r == x_axis_row:
                grid[r][c] = "-"
            elif c == y_axis_col:
                grid[r][c] = "|"

    for plottable, points in series.values():
        mark = "*" if plottable.is_continuous else "o"
        for point in points:
            if not (bounds.min_x <= point.x <= bounds.max_x):
                continue
            if not (bounds.min_y <= point.y <= bounds.max_y):
                continue
            col = max(0, min(cols - 1, bounds.x_to_screen(point.x, cols - 1)))
            row = max(0, min(rows - 1, bounds.y_to_screen(point.y, rows - 1)))
            grid[row][col] = mark

    return "\n".join("".join(line) for line in grid)


def _render_image(
    series: dict[str, tuple[PlottableFunction, list[Point]]],
    bounds: GraphBounds,
    output: str,
) -> None:
    fig, ax = plt.subplots(figsize=(10, 6))
    try:
        for plottable, points in series.values():
            label = plottable.display_string()
            if plottable.is_continuous:
                color = None
                for i, segment in enumerate(split_segments(points, bounds)):
                    (line,) = ax.plot(
                        [p.x for p in segment],
                        [p.y for p in segment],
                        linewidth=2,
                        color=color,
                        label=label if i == 0 else None,
                    )
                    color = line.get_color()
                if isinstance(plottable, InequationFunction):
                    for start, end in plottable.region_spans(bounds):
                        ax.axvspan(start, end, color=color, alpha=0.15, linewidth=0)
            else:
                ax.scatter(
                    [p.x for p in points], [p.y for p in points], zorder=3, label=label
                )
        ax.set_xlim(bounds.min_x, bounds.max_x)
        ax.set_ylim(bounds.min_y, bounds.max_y)
        ax.set_xlabel("x", fontsize=12, fontweight="bold")
        ax.set_ylabel("y", fontsize=12, fontweight="bold")
        ax.grid(True, alpha=0.3, linestyle="--")
        ax.axhline(y=0, color="k", linewidth=0.8, linestyle="-", alpha=0.3)
        ax.axvline(x=0, color="k", linewidth=0.8, linestyle="-", alpha=0.3)
        if series:
            ax.legend(loc="best", fontsize=10)
        plt.tight_layout()
        fig.savefig(output, dpi=150, bbox_inches="tight")
    finally:
        plt.close(fig)


def plot_graph(
    graph: Graph,
    bounds: GraphBounds | None = None,
    width: int = DEFAULT_PIXEL_WIDTH,
    output: str | None = None,
    ascii: bool = False,
) -> EvalResult:
    """Plot every entry of the workspace.

    Args:
        graph: Workspace to plot
        bounds: Viewport (default: -10..10 on both axes)
        width: Pixel width driving the sampling density
        output: PNG path for the matplotlib image (required unless ascii)
        ascii: If True, return an ASCII chart in ``result`` instead

    Returns:
        EvalResult with the chart text or the saved file path
    """
    bounds = bounds or GraphBounds()
    if not ascii:
        if not HAS_MATPLOTLIB:
            return EvalResult(
                ok=False,
                error="matplotlib not installed. Use ascii=True for ASCII plot.",
                code="MISSING_DEPENDENCY",
            )
        if not output:
            return EvalResult(ok=False, error="An output file is required", code="NO_OUTPUT")

    graph.invalidate_all()
    series = {
        key: (plottable, plottable.points(bounds, width))
        for key, plottable in graph.plottables.items()
    }
    drawn = sum(len(points) for _, points in series.values())
    logger.debug(f"Plotting {len(series)} entries, {drawn} points")

    if ascii:
        return EvalResult(ok=True, result=render_ascii(series, bounds))

    try:
        _render_image(series, bounds, output)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to save plot to {output}: {e}", exc_info=True)
        return EvalResult(ok=False, error=f"Failed to save plot: {e}", code="PLOT_FAILED")
    return EvalResult(ok=True, result=f"Plot saved to: {output}")