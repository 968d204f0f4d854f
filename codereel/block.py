"""Mutable, animatable on-screen rendering of one code Document.

A CodeBlock is built in two steps. Construction tokenizes every line and
computes the layout (each line's local y and each token's local x) from font
metrics. ``mount`` then creates the render-state records in a Scene: one
container group, one group per line, one text node per token.

Every mutating operation returns a Transition rather than changing the scene
immediately. The per-line state table records the most recently requested
opacity, hidden flag, and token colors in issue order; the scene nodes hold
the live, possibly mid-tween values.

Index arguments are clamped or ignored when out of range, and lookups return
None on a miss, so choreography code needs no guards at each call.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field, replace

from codereel.config import (
    APPEAR_DURATION,
    DEFAULT_BLOCK_WIDTH,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DIM_OPACITY,
    LINE_DURATION,
    MOVE_DURATION,
    PADDING_X_RATIO,
    PADDING_Y_RATIO,
)
from codereel.coordinates import Point
from codereel.document import Document
from codereel.metrics import get_line_height, measure_text
from codereel.scene import ROOT, Scene
from codereel.theme import DEFAULT_THEME, SyntaxTheme, normalize_color
from codereel.timeline import All, Transition, Tween
from codereel.tokenizer import TokenType, tokenize_line

logger = logging.getLogger(__name__)

LineRange = tuple[int, int]


@dataclass(frozen=True)
class BlockConfig:
    """Immutable configuration of a CodeBlock.

    Attributes:
        x: Initial world x of the block centre.
        y: Initial world y of the block centre.
        width: Card width; the content area is this minus horizontal padding.
        height: Fixed card height. 0 means "fit the content".
        font_size: Font size in pixels.
        line_height: Line height; defaults to font_size * LINE_HEIGHT_RATIO.
        font_family: Font family for token text.
        theme: Token colors.
        custom_types: Extra identifiers highlighted as types.

    """

    x: float = 0.0
    y: float = 0.0
    width: float = DEFAULT_BLOCK_WIDTH
    height: float = 0.0
    font_size: float = DEFAULT_FONT_SIZE
    line_height: float | None = None
    font_family: str = DEFAULT_FONT_FAMILY
    theme: SyntaxTheme = DEFAULT_THEME
    custom_types: tuple[str, ...] = ()

    @property
    def resolved_line_height(self) -> float:
        if self.line_height is not None:
            return self.line_height
        return get_line_height(self.font_size)

    def at(self, x: float, y: float) -> "BlockConfig":
        """Return a copy positioned at (x, y)."""
        return replace(self, x=x, y=y)


@dataclass(frozen=True)
class TokenAnchor:
    """World position and width of a token match within a line."""

    x: float
    y: float
    width: float
    text: str


@dataclass
class TokenLayout:
    text: str
    type: TokenType
    local_x: float


@dataclass
class LineLayout:
    """Layout of one line, relative to the block container."""

    index: int
    local_y: float
    tokens: list[TokenLayout] = field(default_factory=list)


@dataclass
class LineState:
    """Live state of one line.

    Attributes:
        layout: The line's layout; ``local_y`` changes when lines shift.
        node: Handle of the line group, once mounted.
        token_nodes: Handles of the token text nodes, once mounted.
        opacity: Most recently requested line opacity.
        hidden: True when the most recent request faded the line to 0.
        colors: Most recently requested color of each token.

    """

    layout: LineLayout
    node: int | None = None
    token_nodes: list[int] = field(default_factory=list)
    opacity: float = 1.0
    hidden: bool = False
    colors: list[str] = field(default_factory=list)

    @property
    def index(self) -> int:
        return self.layout.index

    @property
    def local_y(self) -> float:
        return self.layout.local_y


@dataclass(frozen=True)
class LineGhostData:
    """Detached copy of a line's tokens plus where the line was."""

    node: int
    origin_world: Point


def _in_ranges(index: int, ranges: Iterable[LineRange]) -> bool:
    return any(start <= index <= end for start, end in ranges)


class CodeBlock:
    """One on-screen rendering of a Document plus its animation state.

    Args:
        document: The source lines.
        config: Layout and styling; defaults to ``BlockConfig()``.

    Usage:
        block = CodeBlock.from_code(source, BlockConfig(x=-400, font_size=18))
        block.mount(scene)
        timeline.run(block.appear())
        timeline.run(block.highlight_lines([(2, 4)]))

    """

    def __init__(self, document: Document, config: BlockConfig | None = None) -> None:
        self.document = document
        self.config = config or BlockConfig()
        self._scene: Scene | None = None
        self._container: int | None = None
        self._lines: list[LineState] = [
            LineState(layout=layout, colors=[self._base_color(t.type) for t in layout.tokens])
            for layout in self._compute_layout()
        ]

    @classmethod
    def from_code(cls, code: str, config: BlockConfig | None = None) -> "CodeBlock":
        return cls(Document.from_text(code), config)

    @classmethod
    def from_document(cls, document: Document, config: BlockConfig | None = None) -> "CodeBlock":
        return cls(document, config)

    # =========================================================================
    # Layout
    # =========================================================================

    @property
    def padding_x(self) -> float:
        return self.config.font_size * PADDING_X_RATIO

    @property
    def padding_y(self) -> float:
        return self.config.font_size * PADDING_Y_RATIO

    @property
    def content_left(self) -> float:
        content_width = max(self.config.width - self.padding_x * 2, 0)
        return -content_width / 2

    def _measure(self, text: str) -> float:
        return measure_text(text, self.config.font_size)

    def _base_color(self, tag: TokenType) -> str:
        return self.config.theme.color_for(tag)

    def _compute_layout(self) -> list[LineLayout]:
        line_count = self.document.line_count
        line_height = self.config.resolved_line_height
        content_height = line_count * line_height + self.padding_y * 2
        card_height = self.config.height if self.config.height > 0 else content_height

        if self.config.height > 0 and card_height != content_height:
            clip_height = max(0.0, card_height - self.padding_y * 2)
            start_y = -clip_height / 2 + line_height / 2
        else:
            start_y = -((line_count - 1) / 2) * line_height

        layouts: list[LineLayout] = []
        for index, text in enumerate(self.document):
            tokens: list[TokenLayout] = []
            x = self.content_left
            for token in tokenize_line(text, self.config.custom_types):
                tokens.append(TokenLayout(token.text, token.type, x))
                x += self._measure(token.text)
            layouts.append(LineLayout(index=index, local_y=start_y + index * line_height, tokens=tokens))
        return layouts

    # =========================================================================
    # Mounting
    # =========================================================================

    @property
    def is_mounted(self) -> bool:
        return self._scene is not None

    @property
    def scene(self) -> Scene | None:
        return self._scene

    @property
    def container(self) -> int | None:
        return self._container

    def mount(self, scene: Scene, parent: int = ROOT) -> None:
        """Create the block's nodes under ``parent``, initially transparent.

        The block is placed so that its world position equals the configured
        (x, y). Mounting twice is a no-op.
        """
        if self._scene is not None:
            return
        container = scene.create_group(opacity=0, parent=parent)
        scene.set_world_position(container, Point(self.config.x, self.config.y))

        for line in self._lines:
            line.node = scene.create_group(y=line.local_y, opacity=line.opacity, parent=container)
            line.token_nodes = [
                scene.create_text(
                    token.text,
                    fill=color,
                    font_size=self.config.font_size,
                    font_family=self.config.font_family,
                    x=token.local_x,
                    parent=line.node,
                )
                for token, color in zip(line.layout.tokens, line.colors)
            ]

        self._scene = scene
        self._container = container
        logger.debug("Mounted block with %d lines at (%s, %s)", self.line_count, self.config.x, self.config.y)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def line_count(self) -> int:
        return self.document.line_count

    @property
    def lines(self) -> list[LineState]:
        return list(self._lines)

    @property
    def line_height(self) -> float:
        return self.config.resolved_line_height

    @property
    def font_size(self) -> float:
        return self.config.font_size

    @property
    def width(self) -> float:
        return self.config.width

    @property
    def theme(self) -> SyntaxTheme:
        return self.config.theme

    @property
    def position(self) -> Point:
        """Current world position of the block centre."""
        if self._scene is None or self._container is None:
            return Point(self.config.x, self.config.y)
        return self._scene.world_position(self._container)

    @property
    def scale(self) -> float:
        if self._scene is None or self._container is None:
            return 1.0
        return self._scene.world_scale(self._container)[0]

    def line_state(self, index: int) -> LineState | None:
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return None

    def line_layouts(self) -> list[LineLayout]:
        return [line.layout for line in self._lines]

    def line_opacity(self, index: int) -> float | None:
        """Live opacity of a line, or None when out of range."""
        line = self.line_state(index)
        if line is None:
            return None
        if self._scene is None or line.node is None:
            return line.opacity
        return self._scene[line.node].opacity

    def token_colors(self, index: int) -> list[str]:
        """Live colors of a line's tokens (empty when out of range)."""
        line = self.line_state(index)
        if line is None:
            return []
        if self._scene is None:
            return list(line.colors)
        return [self._scene[handle].fill for handle in line.token_nodes]

    def get_anchor(self, index: int) -> Point:
        """World position of a line, following any in-flight movement.

        The index is clamped to the document. An empty document anchors at
        the block position.
        """
        position = self.position
        if not self._lines:
            return position
        line = self._lines[max(0, min(index, len(self._lines) - 1))]
        return Point(position.x, position.y + line.local_y * self.scale)

    def find_token(self, index: int, search: str) -> TokenAnchor | None:
        """Locate the first token on a line whose text contains ``search``.

        Returns:
            TokenAnchor centred on the matched substring, or None when the
            line is out of range or nothing matches.

        """
        line = self.line_state(index)
        if line is None or not search:
            return None
        position = self.position
        scale = self.scale
        for token in line.layout.tokens:
            offset = token.text.find(search)
            if offset < 0:
                continue
            width = self._measure(search)
            local_x = token.local_x + self._measure(token.text[:offset]) + width / 2
            return TokenAnchor(
                x=position.x + local_x * scale,
                y=position.y + line.local_y * scale,
                width=width * scale,
                text=search,
            )
        return None

    # =========================================================================
    # Transitions
    # =========================================================================

    def _tween(self, handle: int | None, prop: str, target: object, duration: float) -> Transition | None:
        if self._scene is None or handle is None:
            return None
        return Tween(self._scene, handle, prop, target, duration)

    @staticmethod
    def _all(transitions: Iterable[Transition | None]) -> All:
        return All(*(t for t in transitions if t is not None))

    def _line_opacity(self, line: LineState, opacity: float, duration: float) -> Transition | None:
        line.opacity = opacity
        line.hidden = opacity == 0
        return self._tween(line.node, "opacity", opacity, duration)

    def appear(self, duration: float = APPEAR_DURATION) -> Transition:
        return self._all([self._tween(self._container, "opacity", 1.0, duration)])

    def disappear(self, duration: float = APPEAR_DURATION) -> Transition:
        return self._all([self._tween(self._container, "opacity", 0.0, duration)])

    def move_to(self, x: float, y: float, duration: float = MOVE_DURATION) -> Transition:
        """Move the block centre to world (x, y)."""
        return self._all([self._tween(self._container, "world_position", Point(x, y), duration)])

    def fly_to(self, target: Point, duration: float = MOVE_DURATION) -> Transition:
        """Move the block centre to a previously captured anchor."""
        return self.move_to(target.x, target.y, duration)

    def scale_to(self, factor: float, duration: float = 0.5) -> Transition:
        return self._all([self._tween(self._container, "scale", factor, duration)])

    def highlight_lines(self, ranges: Sequence[LineRange], duration: float = LINE_DURATION) -> Transition:
        """Show lines inside any of the inclusive ranges, dim the rest."""
        return self._all(
            self._line_opacity(line, 1.0 if _in_ranges(line.index, ranges) else DIM_OPACITY, duration)
            for line in self._lines
        )

    def highlight(self, start: int, end: int, duration: float = LINE_DURATION) -> Transition:
        return self.highlight_lines([(start, end)], duration)

    def dim_lines(
        self,
        start: int,
        end: int,
        opacity: float = DIM_OPACITY,
        duration: float = LINE_DURATION,
    ) -> Transition:
        """Set an explicit opacity on the inclusive range, clamped to the block."""
        start = max(0, start)
        end = min(end, len(self._lines) - 1)
        return self._all(self._line_opacity(self._lines[i], opacity, duration) for i in range(start, end + 1))

    def dim_all(self, opacity: float = DIM_OPACITY, duration: float = LINE_DURATION) -> Transition:
        return self.dim_lines(0, len(self._lines) - 1, opacity, duration)

    def hide_lines(self, ranges: Sequence[LineRange], duration: float = LINE_DURATION) -> Transition:
        return self._all(
            self._line_opacity(line, 0.0, duration)
            for line in self._lines
            if _in_ranges(line.index, ranges)
        )

    def show_all(self, duration: float = LINE_DURATION) -> Transition:
        return self._all(self._line_opacity(line, 1.0, duration) for line in self._lines)

    def recolor_line(self, index: int, color: str, duration: float = LINE_DURATION) -> Transition:
        """Recolor every token on a line.

        Raises:
            InvalidColorError: If ``color`` cannot be parsed.

        """
        return self._recolor(index, lambda text: True, color, duration)

    def recolor_tokens(
        self,
        index: int,
        patterns: Sequence[str],
        color: str,
        duration: float = LINE_DURATION,
    ) -> Transition:
        """Recolor tokens whose text contains any of ``patterns``."""
        return self._recolor(index, lambda text: any(p in text for p in patterns), color, duration)

    def _recolor(self, index: int, matches: Callable[[str], bool], color: str, duration: float) -> Transition:
        color = normalize_color(color)
        line = self.line_state(index)
        if line is None:
            return All()
        transitions: list[Transition | None] = []
        for position, token in enumerate(line.layout.tokens):
            if not matches(token.text):
                continue
            line.colors[position] = color
            if line.token_nodes:
                transitions.append(self._tween(line.token_nodes[position], "fill", color, duration))
        return self._all(transitions)

    def reset_line_colors(self, index: int, duration: float = LINE_DURATION) -> Transition:
        """Return a line's tokens to their theme colors."""
        line = self.line_state(index)
        if line is None:
            return All()
        transitions: list[Transition | None] = []
        for position, token in enumerate(line.layout.tokens):
            color = self._base_color(token.type)
            line.colors[position] = color
            if line.token_nodes:
                transitions.append(self._tween(line.token_nodes[position], "fill", color, duration))
        return self._all(transitions)

    def set_tokens_opacity(
        self,
        index: int,
        patterns: Sequence[str],
        opacity: float,
        duration: float = LINE_DURATION,
    ) -> Transition:
        """Fade tokens on a line whose text contains any of ``patterns``."""
        line = self.line_state(index)
        if line is None or not line.token_nodes:
            return All()
        return self._all(
            self._tween(handle, "opacity", opacity, duration)
            for token, handle in zip(line.layout.tokens, line.token_nodes)
            if any(p in token.text for p in patterns)
        )

    def shift_lines(self, start: int, delta: float, duration: float = LINE_DURATION) -> Transition:
        """Move every line at or after ``start`` vertically by ``delta``.

        The new local y is recorded when the shift is requested, so anchors
        queried afterwards already include it.
        """
        transitions: list[Transition | None] = []
        for line in self._lines[max(0, start):]:
            line.layout.local_y += delta
            transitions.append(self._tween(line.node, "y", line.local_y, duration))
        return self._all(transitions)

    def insert_lines(self, start: int, end: int, duration: float = LINE_DURATION) -> Transition:
        """Open a gap for lines ``[start, end]`` and fade them in.

        Lines after ``end`` slide down by the height of the range. This
        reverses a gap previously closed with ``shift_lines``.
        """
        start = max(0, start)
        end = min(end, len(self._lines) - 1)
        if end < start:
            return All()
        height = (end - start + 1) * self.line_height
        return All(
            self.shift_lines(end + 1, height, duration),
            self._all(self._line_opacity(self._lines[i], 1.0, duration) for i in range(start, end + 1)),
        )

    # =========================================================================
    # Derived blocks
    # =========================================================================

    def extract(self, start: int, end: int) -> "CodeBlock":
        """Build an independent block holding lines ``[start, end]``.

        The new block is positioned so its first line sits on the current
        anchor of line ``start``. It is not mounted.
        """
        last = max(0, len(self._lines) - 1)
        start = max(0, min(start, last))
        end = max(start, min(end, last))
        sliced = self.document.slice(start, end)
        anchor = self.get_anchor(start)
        centre_offset = (sliced.line_count - 1) / 2 * self.line_height
        logger.debug("Extracting lines %d-%d at anchor (%s, %s)", start, end, anchor.x, anchor.y)
        config = replace(self.config, x=anchor.x, y=anchor.y + centre_offset, height=0.0)
        return CodeBlock(sliced, config)

    def clone(self) -> "CodeBlock":
        """Build an unmounted block with the same document at the current position."""
        position = self.position
        return CodeBlock(self.document, self.config.at(position.x, position.y))

    def build_line_ghost(self, index: int) -> LineGhostData | None:
        """Create a detached copy of a line's tokens with their live colors.

        Returns:
            The ghost group and the line's current world position, or None
            when unmounted or out of range.

        """
        line = self.line_state(index)
        scene = self._scene
        if scene is None or line is None or line.node is None:
            return None
        group = scene.create_group(opacity=0, parent=None)
        for handle in line.token_nodes:
            source = scene[handle]
            scene.create_text(
                source.text,
                fill=source.fill,
                font_size=source.font_size,
                font_family=source.font_family,
                x=source.x,
                parent=group,
            )
        return LineGhostData(node=group, origin_world=scene.world_position(line.node))
