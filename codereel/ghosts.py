"""Detached line clones for "many copies converge to one" illustrations.

A ghost is a snapshot: it copies a line's tokens and colors and records where
the line was when the ghost was built. It does not follow the source block
afterwards, and no block keeps a reference to it.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from codereel.block import CodeBlock
from codereel.config import GHOST_FADE_IN_DURATION, GHOST_FADE_OUT_DURATION, GHOST_FLY_DURATION
from codereel.coordinates import Point
from codereel.scene import Scene
from codereel.timeline import All, Transition, Tween


@dataclass(frozen=True)
class Ghost:
    """A detached copy of one line of ``source``."""

    node: int
    source: CodeBlock
    line_index: int
    origin_world: Point


def build_line_ghosts(blocks: Sequence[CodeBlock], line_index: int) -> list[Ghost]:
    """Build a ghost of ``line_index`` for every mounted block that has that line."""
    ghosts: list[Ghost] = []
    for block in blocks:
        data = block.build_line_ghost(line_index)
        if data is None:
            continue
        ghosts.append(Ghost(node=data.node, source=block, line_index=line_index, origin_world=data.origin_world))
    return ghosts


def mount_ghosts(scene: Scene, parent: int, ghosts: Sequence[Ghost], initial_opacity: float = 0.0) -> None:
    """Attach each ghost under ``parent`` at its recorded world position."""
    for ghost in ghosts:
        scene.add(parent, ghost.node)
        scene.set_world_position(ghost.node, ghost.origin_world)
        scene[ghost.node].opacity = initial_opacity


def fly_ghosts_to(
    scene: Scene,
    ghosts: Sequence[Ghost],
    target: Point,
    duration: float = GHOST_FLY_DURATION,
) -> Transition:
    return All(*(Tween(scene, ghost.node, "world_position", target, duration) for ghost in ghosts))


def fade_in_ghosts(scene: Scene, ghosts: Sequence[Ghost], duration: float = GHOST_FADE_IN_DURATION) -> Transition:
    return All(*(Tween(scene, ghost.node, "opacity", 1.0, duration) for ghost in ghosts))


def fade_out_ghosts(scene: Scene, ghosts: Sequence[Ghost], duration: float = GHOST_FADE_OUT_DURATION) -> Transition:
    return All(*(Tween(scene, ghost.node, "opacity", 0.0, duration) for ghost in ghosts))
