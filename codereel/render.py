"""Neon terminal preview of scenes and tokens.

Rasterizes the text nodes of a Scene onto a character grid with the Rich
library, using the Dracula-based palette from ``codereel.theme``. This is a
preview, not a renderer of record: positions snap to character cells and
opacity maps onto three levels (hidden, dim, full).
"""

from collections.abc import Sequence

import pyfiglet
from rich import box
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from codereel.config import CANVAS_HEIGHT, CANVAS_WIDTH
from codereel.scene import NodeKind, Scene
from codereel.theme import NEON_COLORS, NEON_THEME, SyntaxTheme, interpolate_color
from codereel.timeline import Timeline, Transition
from codereel.tokenizer import Token

# Nodes fainter than this are not drawn; fainter than DIM_THRESHOLD are dimmed.
HIDDEN_THRESHOLD = 0.05
DIM_THRESHOLD = 0.6

BANNER_GRADIENT = [NEON_COLORS["cyan"], NEON_COLORS["pink"], NEON_COLORS["purple"]]


def create_console() -> Console:
    """Create a Rich Console with the neon theme applied."""
    return Console(theme=NEON_THEME)


# =============================================================================
# Scene Rasterizer
# =============================================================================


class TerminalRenderer:
    """Draw a Scene's visible text nodes as a grid of styled characters.

    Args:
        scene: Scene to draw.
        columns: Width of the character grid.
        rows: Height of the character grid.
        canvas_width: World width mapped onto ``columns``.
        canvas_height: World height mapped onto ``rows``.

    Usage:
        renderer = TerminalRenderer(scene)
        console.print(renderer.render_panel())

    """

    def __init__(
        self,
        scene: Scene,
        columns: int = 160,
        rows: int = 36,
        canvas_width: float = CANVAS_WIDTH,
        canvas_height: float = CANVAS_HEIGHT,
    ) -> None:
        self.scene = scene
        self.columns = columns
        self.rows = rows
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height

    def _cell(self, x: float, y: float) -> tuple[int, int]:
        col = round((x + self.canvas_width / 2) / self.canvas_width * self.columns)
        row = round((y + self.canvas_height / 2) / self.canvas_height * self.rows)
        return col, row

    def render(self) -> Text:
        """Rasterize the scene into one Text with a line per grid row."""
        grid: list[list[tuple[str, Style | None]]] = [
            [(" ", None)] * self.columns for _ in range(self.rows)
        ]
        for handle in self.scene.walk():
            node = self.scene[handle]
            if node.kind is not NodeKind.TEXT or not node.text:
                continue
            opacity = self.scene.world_opacity(handle)
            if opacity < HIDDEN_THRESHOLD:
                continue
            position = self.scene.world_position(handle)
            col, row = self._cell(position.x, position.y)
            if not 0 <= row < self.rows:
                continue
            style = Style(color=node.fill, dim=opacity < DIM_THRESHOLD)
            for offset, char in enumerate(node.text):
                if 0 <= col + offset < self.columns:
                    grid[row][col + offset] = (char, style)

        text = Text(no_wrap=True)
        for index, row_cells in enumerate(grid):
            for char, style in row_cells:
                text.append(char, style=style)
            if index < self.rows - 1:
                text.append("\n")
        return text

    def render_panel(self, title: str | None = None) -> Panel:
        return Panel(
            self.render(),
            title=title,
            box=box.ROUNDED,
            border_style=Style(color=NEON_COLORS["purple"], dim=True),
            style=Style(bgcolor=NEON_COLORS["background"]),
            padding=(0, 1),
        )

    def __rich__(self) -> Panel:
        return self.render_panel()


async def play_live(
    console: Console,
    timeline: Timeline,
    transition: Transition,
    renderer: TerminalRenderer,
    speed: float = 1.0,
    title: str | None = None,
) -> int:
    """Play ``transition`` in real time, redrawing the scene every frame.

    Returns:
        Number of frames played.

    """
    with Live(
        renderer.render_panel(title),
        console=console,
        refresh_per_second=timeline.fps,
    ) as live:
        return await timeline.play(
            transition,
            on_frame=lambda _: live.update(renderer.render_panel(title)),
            speed=speed,
        )


# =============================================================================
# Tokens
# =============================================================================


def render_tokens(tokens: Sequence[Token], theme: SyntaxTheme) -> Text:
    """Color one line of tokens with a syntax theme."""
    text = Text(no_wrap=True)
    for token in tokens:
        text.append(token.text, style=theme.rich_style(token.type))
    return text


def print_token_table(console: Console, lines: Sequence[Sequence[Token]], theme: SyntaxTheme) -> None:
    """Print each line's colored source next to its token tags."""
    table = Table(box=box.SIMPLE, border_style=Style(color=NEON_COLORS["purple"], dim=True))
    table.add_column("#", style="neon.dim", justify="right")
    table.add_column("Source", no_wrap=True)
    table.add_column("Tokens", style="neon.dim")
    for index, tokens in enumerate(lines, start=1):
        tags = " ".join(token.type.value for token in tokens)
        table.add_row(str(index), render_tokens(tokens, theme), tags)
    console.print(table)


# =============================================================================
# Banner and Messages
# =============================================================================


def _gradient_color(position: float) -> str:
    position = max(0.0, min(1.0, position))
    index = position * (len(BANNER_GRADIENT) - 1)
    lower = int(index)
    upper = min(lower + 1, len(BANNER_GRADIENT) - 1)
    return interpolate_color(BANNER_GRADIENT[lower], BANNER_GRADIENT[upper], index - lower)


def print_banner(console: Console, text: str = "codereel") -> None:
    """Print an ASCII art banner with a cyan to purple gradient.

    Args:
        console: Rich Console instance for output.
        text: The text to render as ASCII art.

    """
    try:
        art = pyfiglet.figlet_format(text, font="ansi_shadow")
    except pyfiglet.FigletError:
        try:
            art = pyfiglet.figlet_format(text, font="slant")
        except pyfiglet.FigletError:
            art = pyfiglet.figlet_format(text, font="standard")

    lines = art.rstrip("\n").split("\n")
    width = max((len(line) for line in lines), default=1) or 1

    banner = Text()
    for line_index, line in enumerate(lines):
        for char_index, char in enumerate(line):
            if char == " ":
                banner.append(char)
            else:
                banner.append(char, style=Style(color=_gradient_color(char_index / width), bold=True))
        if line_index < len(lines) - 1:
            banner.append("\n")

    console.print()
    console.print(
        Panel(
            banner,
            box=box.DOUBLE_EDGE,
            border_style=Style(color=NEON_COLORS["purple"], dim=True),
            padding=(0, 2),
        )
    )


def print_error(console: Console, title: str, message: str) -> None:
    """Print an error panel with red styling."""
    panel = Panel(
        Text(message, style=Style(color=NEON_COLORS["red"])),
        title=f"⚠️  {title}",
        title_align="left",
        box=box.DOUBLE_EDGE,
        border_style=Style(color=NEON_COLORS["red"]),
        padding=(0, 1),
    )
    console.print(panel)


def print_info(console: Console, message: str) -> None:
    console.print(f"[neon.info]ℹ[/] [neon.fg]{message}[/]")


def print_success(console: Console, message: str) -> None:
    console.print(f"[neon.success]✔[/] [neon.fg]{message}[/]")
