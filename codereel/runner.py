"""Command implementations behind the codereel CLI."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from codereel.block import BlockConfig, CodeBlock
from codereel.config import DEBUG_LOG_PATTERN, DEFAULT_FPS, FIT_MAX_FONT_SIZE, FIT_MIN_FONT_SIZE
from codereel.metrics import FitOptions, fit_codes
from codereel.motion import DedupeConfig, ExtractSpec, deduplicate_via_helper
from codereel.presets import LayoutPreset, get_slot
from codereel.render import (
    TerminalRenderer,
    create_console,
    play_live,
    print_banner,
    print_error,
    print_info,
    print_success,
    print_token_table,
)
from codereel.scene import Scene
from codereel.theme import get_theme
from codereel.timeline import All, Sequence, Timeline, Wait
from codereel.tokenizer import tokenize

logger = logging.getLogger(__name__)

DEMO_LEFT = """public User createUser(String name, String email) {
    if (email == null || !email.contains("@")) {
        throw new IllegalArgumentException("invalid email");
    }
    return repository.save(new User(name, email));
}"""

DEMO_RIGHT = """public User updateEmail(User user, String email) {
    if (email == null || !email.contains("@")) {
        throw new IllegalArgumentException("invalid email");
    }
    user.setEmail(email);
    return repository.save(user);
}"""

DEMO_HELPER = """private void validateEmail(String email) {
    if (email == null || !email.contains("@")) {
        throw new IllegalArgumentException("invalid email");
    }
}"""

DEMO_CALL = "validateEmail(email);"

DEMO_RANGE = (1, 3)


@dataclass
class RunConfig:
    """Configuration for a codereel run.

    Attributes:
        command: One of "tokenize", "fit", "demo".
        files: Source files for "tokenize" and "fit".
        types: Extra identifiers highlighted as types.
        theme: Syntax theme name.
        rows: Grid rows for "fit".
        cols: Grid columns for "fit".
        min_font_size: Smallest font size "fit" tries.
        max_font_size: Largest font size "fit" tries.
        fps: Timeline ticks per second for "demo".
        speed: Playback speed multiplier for "demo".
        live: Animate the demo in the terminal instead of printing the last frame.
        debug: Write a timestamped debug log to the working directory.

    """

    command: str = "demo"
    files: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    theme: str = "intellij-dark"
    rows: int = 1
    cols: int = 1
    min_font_size: int = FIT_MIN_FONT_SIZE
    max_font_size: int = FIT_MAX_FONT_SIZE
    fps: int = DEFAULT_FPS
    speed: float = 1.0
    live: bool = True
    debug: bool = False


def _read_sources(console: Console, files: list[str]) -> list[str] | None:
    sources: list[str] = []
    for name in files:
        path = Path(name)
        try:
            sources.append(path.read_text(encoding="utf-8"))
        except OSError as e:
            print_error(console, "Unreadable File", f"{path}: {e.strerror or e}")
            return None
    return sources


def run_tokenize(config: RunConfig, console: Console) -> int:
    """Print every line of each file with its token tags."""
    theme = get_theme(config.theme)
    sources = _read_sources(console, config.files)
    if sources is None:
        return 1
    for name, source in zip(config.files, sources):
        print_info(console, name)
        print_token_table(console, tokenize(source, config.types), theme)
    return 0


def run_fit(config: RunConfig, console: Console) -> int:
    """Print the auto-fit font size and grid cells for the given files."""
    sources = _read_sources(console, config.files)
    if sources is None:
        return 1
    options = FitOptions(min_font_size=config.min_font_size, max_font_size=config.max_font_size)
    result = fit_codes(sources, config.rows, config.cols, options)
    print_success(console, f"Font size {result.font_size}, line height {result.line_height:g}")

    table = Table(title="Cells")
    for column in ("x", "y", "width", "height"):
        table.add_column(column, justify="right")
    for cell in result.cells:
        table.add_row(f"{cell.x:g}", f"{cell.y:g}", f"{cell.width:g}", f"{cell.height:g}")
    console.print(table)
    return 0


def build_demo(scene: Scene, theme_name: str) -> Sequence:
    """Lay out the two demo blocks and return the full demo animation."""
    theme = get_theme(theme_name)
    fit = fit_codes([DEMO_LEFT, DEMO_RIGHT], 1, 2)
    blocks = []
    for slot_name, code in (("L", DEMO_LEFT), ("R", DEMO_RIGHT)):
        slot = get_slot(LayoutPreset.TWO_COL, slot_name)
        block = CodeBlock.from_code(
            code,
            BlockConfig(x=slot.x, y=slot.y, width=slot.width, font_size=fit.font_size, theme=theme),
        )
        block.mount(scene)
        blocks.append(block)

    choreography = deduplicate_via_helper(
        scene,
        [ExtractSpec(block, DEMO_RANGE) for block in blocks],
        DEMO_HELPER,
        DEMO_CALL,
        config=DedupeConfig(center_y=0),
    )
    return Sequence(
        All(*(block.appear() for block in blocks)),
        All(*(block.highlight(*DEMO_RANGE) for block in blocks)),
        Wait(0.5),
        choreography.animation,
    )


async def run_demo(config: RunConfig, console: Console) -> int:
    """Play the deduplicate-via-helper demo."""
    print_banner(console)
    scene = Scene()
    animation = build_demo(scene, config.theme)
    timeline = Timeline(fps=config.fps)
    renderer = TerminalRenderer(scene)

    if config.live:
        frames = await play_live(console, timeline, animation, renderer, speed=config.speed, title="codereel")
    else:
        frames = timeline.run(animation)
        console.print(renderer.render_panel("codereel"))
    print_success(console, f"Played {frames} frames ({timeline.time:.1f}s)")
    return 0


async def run(config: RunConfig, console: Console | None = None) -> int:
    """Run one codereel command.

    Returns:
        Exit code: 0 on success, 1 on failure.

    """
    console = console or create_console()

    handler: logging.FileHandler | None = None
    package_logger = logging.getLogger("codereel")
    previous_level = package_logger.level
    if config.debug:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        debug_log_path = Path.cwd() / DEBUG_LOG_PATTERN.format(timestamp=timestamp)
        handler = logging.FileHandler(debug_log_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG)
        print_info(console, f"Debug log: {debug_log_path}")

    try:
        logger.debug("Running command %s", config.command)
        if config.command == "tokenize":
            return run_tokenize(config, console)
        if config.command == "fit":
            return run_fit(config, console)
        if config.command == "demo":
            return await run_demo(config, console)
        print_error(console, "Unknown Command", f"'{config.command}' is not a codereel command")
        return 1
    finally:
        if handler is not None:
            package_logger.removeHandler(handler)
            package_logger.setLevel(previous_level)
            handler.close()
            print_info(console, f"Debug log saved: {handler.baseFilename}")
