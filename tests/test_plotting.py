"""Tests for ASCII and image plotting."""

import pytest

from grapher_pkg.graph import Graph
from grapher_pkg.model import GraphBounds
from grapher_pkg.plotting import ASCII_COLS, ASCII_ROWS, plot_graph, render_ascii, split_segments
from grapher_pkg.types import Point


class TestSplitSegments:
    def test_empty_and_single(self):
        assert split_segments([], GraphBounds()) == []
        assert split_segments([Point(0, 0)], GraphBounds()) == [[Point(0, 0)]]

    def test_gap_in_sampling(self):
        points = [Point(0, 0), Point(1, 1), Point(2, 2), Point(10, 3)]
        segments = split_segments(points, GraphBounds())
        assert segments == [points[:3], points[3:]]

    def test_jump_taller_than_view(self):
        points = [Point(0, 0), Point(1, 100), Point(2, 101)]
        segments = split_segments(points, GraphBounds())
        assert segments == [points[:1], points[1:]]

    def test_smooth_curve_single_segment(self):
        points = [Point(x / 10, (x / 10) ** 2) for x in range(-20, 21)]
        assert len(split_segments(points, GraphBounds())) == 1


class TestAscii:
    def test_axes_only(self):
        chart = render_ascii({}, GraphBounds())
        lines = chart.splitlines()
        assert len(lines) == ASCII_ROWS
        assert all(len(line) == ASCII_COLS for line in lines)
        assert lines[9][29] == "+"
        assert set(lines[9]) == {"-", "+"}

    def test_no_axes_outside_view(self):
        chart = render_ascii({}, GraphBounds(1, 5, 1, 5))
        assert set(chart) <= {" ", "\n"}

    def test_plot_graph_ascii(self):
        graph = Graph()
        graph.add("x + 5")
        graph.add("(-5, 0)")
        result = plot_graph(graph, ascii=True)
        assert result.ok
        assert "*" in result.result
        assert "o" in result.result

    def test_points_outside_view_skipped(self):
        graph = Graph()
        graph.add("(50, 50)")
        result = plot_graph(graph, ascii=True)
        assert "o" not in result.result

    def test_inequation_region_shaded(self):
        graph = Graph()
        graph.add("(x < -5)")
        chart = plot_graph(graph, ascii=True).result
        lines = chart.splitlines()
        assert lines[0][0] == "."
        assert lines[0][30] == " "
        assert "*" in chart

    def test_number_set_on_axis(self):
        graph = Graph()
        graph.add("{2, 4}")
        lines = plot_graph(graph, ascii=True).result.splitlines()
        assert lines[9].count("o") == 2


class TestImage:
    def test_requires_output(self):
        result = plot_graph(Graph())
        assert not result.ok
        assert result.code in ("NO_OUTPUT", "MISSING_DEPENDENCY")

    def test_png_written(self, tmp_path):
        pytest.importorskip("matplotlib")
        graph = Graph()
        graph.add("f(x) = 1/x")
        graph.add("h: x^2 = 4")
        output = tmp_path / "plot.png"
        result = plot_graph(graph, output=str(output))
        assert result.ok, result.error
        assert output.exists()
        assert output.stat().st_size > 0

    def test_png_with_region_and_set(self, tmp_path):
        pytest.importorskip("matplotlib")
        graph = Graph()
        graph.add("r: sin(x) > 0")
        graph.add("s = {1, 2, 3}")
        output = tmp_path / "region.png"
        result = plot_graph(graph, output=str(output))
        assert result.ok, result.error
        assert output.stat().st_size > 0

    def test_unwritable_path(self, tmp_path):
        pytest.importorskip("matplotlib")
        graph = Graph()
        graph.add("x")
        result = plot_graph(graph, output=str(tmp_path / "missing" / "plot.png"))
        assert not result.ok
        assert result.code == "PLOT_FAILED"
