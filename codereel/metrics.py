"""Approximate text metrics and auto-fit sizing for code blocks.

Widths use a fixed monospace ratio of the font size instead of real glyph
measurement. The auto-fit search relies on the fit predicate being monotonic
in font size: every measured dimension grows linearly with the font size, so
once a size fits, every smaller size fits too, and a descending scan can stop
at the first accepted size.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from codereel.config import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    CHAR_WIDTH_RATIO,
    FIT_CELL_FILL,
    FIT_FILL_PERCENT,
    FIT_FONT_STEP,
    FIT_GAP,
    FIT_MAX_FONT_SIZE,
    FIT_MIN_FONT_SIZE,
    LINE_HEIGHT_RATIO,
    SAFE_MARGIN_Y,
)


@dataclass(frozen=True)
class CodeMetrics:
    """Measured size of a code snippet.

    Attributes:
        width: Width of the longest line.
        height: Total height of all lines.
        line_height: Height of a single line.

    """

    width: float
    height: float
    line_height: float


def measure_char(font_size: float, char_width_ratio: float = CHAR_WIDTH_RATIO) -> float:
    """Width of one monospace character."""
    return font_size * char_width_ratio


def measure_text(text: str, font_size: float, char_width_ratio: float = CHAR_WIDTH_RATIO) -> float:
    """Approximate rendered width of ``text`` at ``font_size``."""
    return len(text) * measure_char(font_size, char_width_ratio)


def get_line_height(font_size: float, line_height_ratio: float = LINE_HEIGHT_RATIO) -> float:
    """Line height for a font size."""
    return font_size * line_height_ratio


def measure_code(
    code: str,
    font_size: float,
    char_width_ratio: float = CHAR_WIDTH_RATIO,
    line_height_ratio: float = LINE_HEIGHT_RATIO,
) -> CodeMetrics:
    """Measure a multi-line snippet.

    Args:
        code: Source text, lines separated by "\\n".
        font_size: Font size to measure at.
        char_width_ratio: Glyph width as a fraction of font size.
        line_height_ratio: Line height as a multiple of font size.

    Returns:
        CodeMetrics with the widest line's width and the stacked height.

    """
    lines = code.split("\n")
    longest = max(len(line) for line in lines)
    line_height = get_line_height(font_size, line_height_ratio)
    return CodeMetrics(
        width=longest * measure_char(font_size, char_width_ratio),
        height=len(lines) * line_height,
        line_height=line_height,
    )


# =============================================================================
# Auto-fit
# =============================================================================


@dataclass(frozen=True)
class FitOptions:
    """Options for grid partitioning and font-size search.

    Attributes:
        canvas_width: Canvas width in pixels.
        canvas_height: Canvas height in pixels.
        fill_percent: Fraction of the canvas the grid may occupy.
        gap: Space between neighbouring cells.
        margin_y: Vertical safe-zone margin, used by the two-row geometry.
        min_font_size: Smallest font size tried; returned when nothing fits.
        max_font_size: Largest font size tried.
        font_step: Decrement between tried sizes.
        cell_fill: Fraction of each cell a snippet may cover.
        char_width_ratio: Glyph width as a fraction of font size.
        line_height_ratio: Line height as a multiple of font size.

    """

    canvas_width: float = CANVAS_WIDTH
    canvas_height: float = CANVAS_HEIGHT
    fill_percent: float = FIT_FILL_PERCENT
    gap: float = FIT_GAP
    margin_y: float = SAFE_MARGIN_Y
    min_font_size: float = FIT_MIN_FONT_SIZE
    max_font_size: float = FIT_MAX_FONT_SIZE
    font_step: float = FIT_FONT_STEP
    cell_fill: float = FIT_CELL_FILL
    char_width_ratio: float = CHAR_WIDTH_RATIO
    line_height_ratio: float = LINE_HEIGHT_RATIO


@dataclass(frozen=True)
class GridCell:
    """One cell of an auto-fit grid, centred at (x, y)."""

    x: float
    y: float
    width: float
    height: float
    font_size: float
    line_height: float


@dataclass(frozen=True)
class AutoFitResult:
    """Outcome of ``fit_codes``: the chosen font size and the cells."""

    font_size: float
    line_height: float
    cells: list[GridCell] = field(default_factory=list)


def _cell_size(rows: int, cols: int, options: FitOptions) -> tuple[float, float]:
    usable_width = options.canvas_width * options.fill_percent
    cell_width = (usable_width - (cols - 1) * options.gap) / cols
    if rows == 2:
        band = options.canvas_height - 2 * options.margin_y
        cell_height = (band - options.gap) / 2
    else:
        usable_height = options.canvas_height * options.fill_percent
        cell_height = (usable_height - (rows - 1) * options.gap) / rows
    return cell_width, cell_height


def _row_centres(rows: int, cell_height: float, options: FitOptions) -> list[float]:
    if rows == 2:
        # Two rows are pinned to the top and bottom edges of the safe zone.
        band = options.canvas_height - 2 * options.margin_y
        return [-band / 2 + cell_height / 2, band / 2 - cell_height / 2]
    grid_height = rows * cell_height + (rows - 1) * options.gap
    start = -grid_height / 2 + cell_height / 2
    return [start + row * (cell_height + options.gap) for row in range(rows)]


def grid_cells(
    rows: int,
    cols: int,
    options: FitOptions | None = None,
    font_size: float | None = None,
) -> list[GridCell]:
    """Partition the canvas into a rows x cols grid, row-major.

    Args:
        rows: Number of rows (clamped to at least 1).
        cols: Number of columns (clamped to at least 1).
        options: Grid options; defaults to ``FitOptions()``.
        font_size: Font size recorded on each cell; defaults to the maximum.

    Returns:
        Cells ordered left to right, top to bottom.

    """
    options = options or FitOptions()
    rows = max(1, rows)
    cols = max(1, cols)
    size = options.max_font_size if font_size is None else font_size
    line_height = get_line_height(size, options.line_height_ratio)

    cell_width, cell_height = _cell_size(rows, cols, options)
    grid_width = cols * cell_width + (cols - 1) * options.gap
    start_x = -grid_width / 2 + cell_width / 2

    cells: list[GridCell] = []
    for y in _row_centres(rows, cell_height, options):
        for col in range(cols):
            cells.append(GridCell(
                x=start_x + col * (cell_width + options.gap),
                y=y,
                width=cell_width,
                height=cell_height,
                font_size=size,
                line_height=line_height,
            ))
    return cells


def code_fits(
    sources: Sequence[str],
    font_size: float,
    cell_width: float,
    cell_height: float,
    options: FitOptions | None = None,
) -> bool:
    """Check whether every snippet fits a cell at ``font_size``."""
    options = options or FitOptions()
    max_width = cell_width * options.cell_fill
    max_height = cell_height * options.cell_fill
    for source in sources:
        measured = measure_code(source, font_size, options.char_width_ratio, options.line_height_ratio)
        if measured.width > max_width or measured.height > max_height:
            return False
    return True


def fit_codes(
    sources: Sequence[str],
    rows: int,
    cols: int,
    options: FitOptions | None = None,
) -> AutoFitResult:
    """Pick the largest font size at which every snippet fits its grid cell.

    Scans from ``max_font_size`` down to ``min_font_size`` in ``font_step``
    decrements and stops at the first size that fits. If no size fits, the
    minimum is returned rather than failing.

    Args:
        sources: Code snippets that must all fit.
        rows: Grid rows.
        cols: Grid columns.
        options: Search and geometry options.

    Returns:
        AutoFitResult with the chosen size and the cells laid out at it.

    """
    options = options or FitOptions()
    rows = max(1, rows)
    cols = max(1, cols)
    cell_width, cell_height = _cell_size(rows, cols, options)

    best = options.min_font_size
    size = options.max_font_size
    step = options.font_step if options.font_step > 0 else 1
    while size >= options.min_font_size:
        if code_fits(sources, size, cell_width, cell_height, options):
            best = size
            break
        size -= step

    return AutoFitResult(
        font_size=best,
        line_height=get_line_height(best, options.line_height_ratio),
        cells=grid_cells(rows, cols, options, font_size=best),
    )


def fit_single(code: str, options: FitOptions | None = None) -> AutoFitResult:
    return fit_codes([code], 1, 1, options)


def fit_dual(codes: Sequence[str], options: FitOptions | None = None) -> AutoFitResult:
    return fit_codes(codes, 1, 2, options)


def fit_quad(codes: Sequence[str], options: FitOptions | None = None) -> AutoFitResult:
    return fit_codes(codes, 2, 2, options)
