# tests/test_metrics.py
"""Tests for text metrics and auto-fit sizing."""

import pytest

from codereel.metrics import (
    FitOptions,
    code_fits,
    fit_codes,
    fit_dual,
    fit_quad,
    fit_single,
    get_line_height,
    grid_cells,
    measure_code,
    measure_text,
    _cell_size,
)

SNIPPET = """public int total(List<Integer> xs) {
    int sum = 0;
    for (int x : xs) {
        sum += x;
    }
    return sum;
}"""


class TestMeasure:
    """Monospace approximation."""

    def test_measure_text(self):
        assert measure_text("abcd", 20) == pytest.approx(4 * 12)

    def test_line_height(self):
        assert get_line_height(20) == pytest.approx(30)

    def test_measure_code_uses_longest_line(self):
        metrics = measure_code("ab\nabcdef\nabc", 10)
        assert metrics.width == pytest.approx(6 * 6)
        assert metrics.height == pytest.approx(3 * 15)
        assert metrics.line_height == pytest.approx(15)


class TestFitCodes:
    """Font size search."""

    def test_trivial_snippet_gets_maximum(self):
        """A one-character snippet fits at the largest size tried."""
        result = fit_codes(["a"], 1, 1, FitOptions(min_font_size=10, max_font_size=20))
        assert result.font_size == 20

    def test_nothing_fits_returns_minimum(self):
        """When no size fits, the minimum is returned instead of failing."""
        huge = "x" * 5000
        result = fit_codes([huge], 1, 1, FitOptions(min_font_size=10, max_font_size=20))
        assert result.font_size == 10

    def test_result_carries_cells_and_line_height(self):
        result = fit_codes([SNIPPET, SNIPPET], 1, 2)
        assert len(result.cells) == 2
        assert result.line_height == pytest.approx(result.font_size * 1.5)
        assert all(cell.font_size == result.font_size for cell in result.cells)

    def test_chosen_size_fits(self):
        options = FitOptions()
        result = fit_codes([SNIPPET], 2, 2, options)
        width, height = _cell_size(2, 2, options)
        assert code_fits([SNIPPET], result.font_size, width, height, options)

    def test_monotonic(self):
        """Every size below an accepted one also fits."""
        long_line = "    return repository.findAllByOwnerIdAndStatusOrderByCreatedAtDesc(ownerId, status);"
        options = FitOptions(min_font_size=8, max_font_size=60)
        result = fit_codes([SNIPPET, long_line], 1, 2, options)
        width, height = _cell_size(1, 2, options)
        size = result.font_size
        while size >= options.min_font_size:
            assert code_fits([SNIPPET, long_line], size, width, height, options)
            size -= options.font_step

    def test_larger_grid_never_allows_larger_font(self):
        single = fit_single(SNIPPET).font_size
        quad = fit_quad([SNIPPET] * 4).font_size
        assert quad <= single

    def test_dual_is_one_row_two_columns(self):
        result = fit_dual([SNIPPET, SNIPPET])
        assert len(result.cells) == 2
        assert result.cells[0].y == result.cells[1].y
        assert result.cells[0].x < result.cells[1].x


class TestGridCells:
    """Grid partitioning."""

    def test_cells_are_centred_on_origin(self):
        cells = grid_cells(1, 3)
        assert cells[1].x == pytest.approx(0)
        assert cells[0].x == pytest.approx(-cells[2].x)

    def test_two_rows_pinned_to_safe_zone(self):
        """Two rows sit on the top and bottom edges of the safe zone."""
        options = FitOptions(canvas_height=1080, margin_y=60, gap=60)
        cells = grid_cells(2, 1, options)
        top, bottom = cells[0], cells[1]
        assert top.y - top.height / 2 == pytest.approx(-480)
        assert bottom.y + bottom.height / 2 == pytest.approx(480)
        assert bottom.y - top.y == pytest.approx(top.height + options.gap)

    def test_row_major_order(self):
        cells = grid_cells(2, 2)
        assert cells[0].y == cells[1].y
        assert cells[0].x < cells[1].x
        assert cells[2].y > cells[0].y
