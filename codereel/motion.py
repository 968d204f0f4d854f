"""Structural transformation operators over code blocks.

Each operator does its construction work immediately (building, mounting, and
positioning any new blocks) and hands back one deferred Transition for the
visual change. Keeping the two apart lets a caller sequence or parallelize the
animations explicitly, and inspect the new blocks before anything moves.

``deduplicate_via_helper`` chains the operators into the fixed five-phase
choreography: extract, merge to centre, morph into a helper, inject calls at
the original anchors, restore the surrounding lines.
"""

import logging
import weakref
from collections.abc import Sequence
from dataclasses import dataclass, field

from codereel.block import BlockConfig, CodeBlock
from codereel.config import (
    EXTRACT_DURATION,
    INJECT_DURATION,
    INJECT_FADE_DURATION,
    MERGE_DURATION,
    MORPH_DURATION,
    MORPH_HEAD_START,
    PHASE_PAUSE,
    RESTORE_DURATION,
)
from codereel.coordinates import Point
from codereel.document import Document
from codereel.scene import ROOT, Scene
from codereel.timeline import All, Call, Lazy, Sequence as SequenceTransition, Transition, Wait, delay, stagger

logger = logging.getLogger(__name__)

LineRange = tuple[int, int]

# Blocks taking part in a choreography that has started and not finished.
_busy_blocks: "weakref.WeakSet[CodeBlock]" = weakref.WeakSet()


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class ExtractSpec:
    """A source block and the inclusive line range to lift out of it."""

    block: CodeBlock
    range: LineRange


@dataclass(frozen=True)
class ExtractedBlock:
    """A block built from a line range of ``source``.

    It has its own lifetime; changing it never touches the source lines.
    """

    block: CodeBlock
    source: CodeBlock
    range: LineRange


@dataclass
class ExtractResult:
    blocks: list[ExtractedBlock]
    animation: Transition


@dataclass(frozen=True)
class MorphConfig:
    """Options for ``morph_to``.

    Attributes:
        duration: Length of the cross-fade.
        font_size: Font size of the new block; defaults to the first source's.
        head_start: Fraction of ``duration`` the fade-out runs before the
            new block starts fading in.

    """

    duration: float = MORPH_DURATION
    font_size: float | None = None
    head_start: float = MORPH_HEAD_START


@dataclass
class MorphResult:
    target: CodeBlock
    sources: list[CodeBlock]
    animation: Transition


@dataclass(frozen=True)
class InjectConfig:
    """Options for ``inject_calls``.

    Attributes:
        duration: Flight time of each call clone.
        fade_duration: Time for the clones to fade in before flying.
        stagger: Delay between consecutive clones taking off; 0 flies all
            clones together.
        hide_helper: Fade the helper out while the clones fly.

    """

    duration: float = INJECT_DURATION
    fade_duration: float = INJECT_FADE_DURATION
    stagger: float = 0.0
    hide_helper: bool = True


@dataclass
class InjectResult:
    calls: list[CodeBlock]
    animation: Transition


def _blocks_of(items: Sequence[ExtractedBlock | CodeBlock]) -> list[CodeBlock]:
    return [item.block if isinstance(item, ExtractedBlock) else item for item in items]


def _first_line_at(document: Document, anchor: Point, line_height: float) -> Point:
    """Block centre that puts the first line of ``document`` on ``anchor``."""
    return Point(anchor.x, anchor.y + (document.line_count - 1) / 2 * line_height)


# =============================================================================
# Operators
# =============================================================================


def extract_lines(
    scene: Scene,
    parent: int,
    specs: Sequence[ExtractSpec],
    duration: float = EXTRACT_DURATION,
) -> ExtractResult:
    """Lift each spec's line range into its own block at the source anchor.

    The animation hides every source range while the extracted blocks fade
    in, all at once.
    """
    blocks: list[ExtractedBlock] = []
    for spec in specs:
        extracted = spec.block.extract(*spec.range)
        extracted.mount(scene, parent)
        blocks.append(ExtractedBlock(block=extracted, source=spec.block, range=spec.range))

    animation = All(
        *(spec.block.hide_lines([spec.range], duration) for spec in specs),
        *(item.block.appear(duration * 0.6) for item in blocks),
    )
    logger.debug("Extracted %d block(s)", len(blocks))
    return ExtractResult(blocks=blocks, animation=animation)


def merge_to_center(
    blocks: Sequence[ExtractedBlock | CodeBlock],
    x: float = 0.0,
    y: float = 0.0,
    duration: float = MERGE_DURATION,
) -> Transition:
    """Move every block to the same world point concurrently."""
    return All(*(block.move_to(x, y, duration) for block in _blocks_of(blocks)))


def morph_to(
    scene: Scene,
    parent: int,
    sources: Sequence[ExtractedBlock | CodeBlock],
    target_code: str,
    config: MorphConfig | None = None,
) -> MorphResult:
    """Replace ``sources`` with a new block built from ``target_code``.

    The new block takes the first source's position, width, font and theme.
    The animation fades every source out and, after ``head_start`` of the
    duration, fades the new block in.

    Raises:
        ValueError: If ``sources`` is empty.

    """
    config = config or MorphConfig()
    grids = _blocks_of(sources)
    if not grids:
        raise ValueError("morph_to needs at least one source block")
    first = grids[0]
    position = first.position

    target = CodeBlock.from_code(
        target_code,
        BlockConfig(
            x=position.x,
            y=position.y,
            width=first.width,
            font_size=config.font_size or first.font_size,
            line_height=first.config.line_height,
            font_family=first.config.font_family,
            theme=first.theme,
            custom_types=first.config.custom_types,
        ),
    )
    target.mount(scene, parent)

    animation = All(
        *(grid.disappear(config.duration) for grid in grids),
        delay(config.duration * config.head_start, target.appear(config.duration)),
    )
    return MorphResult(target=target, sources=grids, animation=animation)


def inject_calls(
    scene: Scene,
    parent: int,
    helper: CodeBlock,
    call_code: str,
    targets: Sequence[Point],
    config: InjectConfig | None = None,
) -> InjectResult:
    """Build one clone of ``call_code`` per target and fly each home.

    The clones start stacked on the helper's first line. The animation fades
    them all in together, then flies each to its target so that the clone's
    first line lands on the target point.
    """
    config = config or InjectConfig()
    document = Document.from_text(call_code)
    line_height = helper.config.resolved_line_height
    start = _first_line_at(document, helper.get_anchor(0), line_height)
    call_config = BlockConfig(
        x=start.x,
        y=start.y,
        width=helper.width,
        font_size=helper.font_size,
        line_height=helper.config.line_height,
        font_family=helper.config.font_family,
        theme=helper.theme,
        custom_types=helper.config.custom_types,
    )

    calls: list[CodeBlock] = []
    for _ in targets:
        call = CodeBlock.from_document(document, call_config)
        call.mount(scene, parent)
        calls.append(call)

    flights = [
        call.fly_to(_first_line_at(document, target, line_height), config.duration)
        for call, target in zip(calls, targets)
    ]
    fly = stagger(flights, config.stagger) if config.stagger > 0 else All(*flights)
    if config.hide_helper:
        fly = All(fly, helper.disappear(config.duration))

    animation = SequenceTransition(
        All(*(call.appear(config.fade_duration) for call in calls)),
        fly,
    )
    return InjectResult(calls=calls, animation=animation)


def restore_originals(
    extracted: Sequence[ExtractedBlock],
    opacity: float = 1.0,
    duration: float = RESTORE_DURATION,
) -> Transition:
    """Bring back the lines around each extracted range in its source.

    Only the sibling ranges above and below are touched, so the extracted
    range itself stays hidden. A side is skipped when the range reaches that
    end of the document.
    """
    transitions: list[Transition] = []
    for item in extracted:
        start, end = item.range
        last = item.source.line_count - 1
        if start > 0:
            transitions.append(item.source.dim_lines(0, start - 1, opacity, duration))
        if end < last:
            transitions.append(item.source.dim_lines(end + 1, last, opacity, duration))
    return All(*transitions)


def collapse_source_gaps(
    extracted: Sequence[ExtractedBlock],
    duration: float = RESTORE_DURATION,
) -> Transition:
    """Pull the lines below each extracted range up.

    One line of the range is kept open for the injected call.
    """
    transitions: list[Transition] = []
    for item in extracted:
        start, end = item.range
        if end > start:
            source = item.source
            transitions.append(source.shift_lines(end + 1, -(end - start) * source.line_height, duration))
    return All(*transitions)


# =============================================================================
# Choreography
# =============================================================================


@dataclass(frozen=True)
class DedupeConfig:
    """Options for ``deduplicate_via_helper``.

    Attributes:
        center_x: World x the extracted blocks merge to.
        center_y: World y the extracted blocks merge to.
        extract_duration: Duration of the extract phase.
        merge_duration: Duration of the merge phase.
        morph: Options for the morph phase.
        inject: Options for the inject phase.
        restore_opacity: Opacity the sibling lines return to.
        restore_duration: Duration of the restore phase.
        collapse_gaps: Also close the gaps left by the extracted ranges.
        pause: Pause after each of the first three phases.

    """

    center_x: float = 0.0
    center_y: float = 0.0
    extract_duration: float = EXTRACT_DURATION
    merge_duration: float = MERGE_DURATION
    morph: MorphConfig = field(default_factory=MorphConfig)
    inject: InjectConfig = field(default_factory=InjectConfig)
    restore_opacity: float = 1.0
    restore_duration: float = RESTORE_DURATION
    collapse_gaps: bool = False
    pause: float = PHASE_PAUSE


@dataclass
class Choreography:
    """State of one deduplicate-via-helper run.

    Each phase is built only once the previous phase has finished, and its
    result is recorded here so callers can inspect the blocks it created.
    """

    scene: Scene
    parent: int
    specs: list[ExtractSpec]
    helper_code: str
    call_code: str
    config: DedupeConfig
    extract: ExtractResult | None = None
    morph: MorphResult | None = None
    inject: InjectResult | None = None
    phase: str = "pending"
    animation: Transition = field(init=False)

    def __post_init__(self) -> None:
        pause = self.config.pause
        self.animation = SequenceTransition(
            Call(self._start),
            Lazy(self._extract_phase),
            Wait(pause),
            Lazy(self._merge_phase),
            Wait(pause),
            Lazy(self._morph_phase),
            Wait(pause),
            Lazy(self._inject_phase),
            Lazy(self._restore_phase),
            Call(self._finish),
        )

    def _enter(self, phase: str) -> None:
        self.phase = phase
        logger.debug("Choreography phase: %s", phase)

    def _start(self) -> None:
        busy = [spec.block for spec in self.specs if spec.block in _busy_blocks]
        if busy:
            logger.warning(
                "Starting a choreography on %d block(s) already inside a running one; results are undefined",
                len(busy),
            )
        for spec in self.specs:
            _busy_blocks.add(spec.block)

    def _finish(self) -> None:
        for spec in self.specs:
            _busy_blocks.discard(spec.block)
        self._enter("done")

    def _extract_phase(self) -> Transition:
        self._enter("extract")
        self.extract = extract_lines(self.scene, self.parent, self.specs, self.config.extract_duration)
        return self.extract.animation

    def _merge_phase(self) -> Transition:
        self._enter("merge")
        assert self.extract is not None
        return merge_to_center(
            self.extract.blocks,
            self.config.center_x,
            self.config.center_y,
            self.config.merge_duration,
        )

    def _morph_phase(self) -> Transition:
        self._enter("morph")
        assert self.extract is not None
        self.morph = morph_to(self.scene, self.parent, self.extract.blocks, self.helper_code, self.config.morph)
        return self.morph.animation

    def _inject_phase(self) -> Transition:
        self._enter("inject")
        assert self.morph is not None
        targets = [spec.block.get_anchor(spec.range[0]) for spec in self.specs]
        self.inject = inject_calls(
            self.scene,
            self.parent,
            self.morph.target,
            self.call_code,
            targets,
            self.config.inject,
        )
        return self.inject.animation

    def _restore_phase(self) -> Transition:
        self._enter("restore")
        assert self.extract is not None
        blocks = self.extract.blocks
        restore = restore_originals(blocks, self.config.restore_opacity, self.config.restore_duration)
        if self.config.collapse_gaps:
            return All(restore, collapse_source_gaps(blocks, self.config.restore_duration))
        return restore


def deduplicate_via_helper(
    scene: Scene,
    specs: Sequence[ExtractSpec],
    helper_code: str,
    call_code: str,
    parent: int = ROOT,
    config: DedupeConfig | None = None,
) -> Choreography:
    """Build the extract, merge, morph, inject, restore choreography.

    Nothing happens until ``choreography.animation`` is driven by a Timeline.
    The phases run strictly one after another. The choreography is not
    reentrant: running a second one over the same blocks before the first
    has finished is logged as a warning and left to the caller.

    Usage:
        choreography = deduplicate_via_helper(scene, specs, helper, call)
        timeline.run(choreography.animation)

    """
    return Choreography(
        scene=scene,
        parent=parent,
        specs=list(specs),
        helper_code=helper_code,
        call_code=call_code,
        config=config or DedupeConfig(),
    )
