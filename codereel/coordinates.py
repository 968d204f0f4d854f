"""World/local coordinate mapping through the scene node hierarchy.

World position of a node is its parent's world position plus the parent's
world scale applied to the node's local position. Scale composes
multiplicatively down the tree and may differ per axis.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from codereel.errors import DegenerateScaleError

if TYPE_CHECKING:
    from codereel.scene import Scene


@dataclass(frozen=True)
class Point:
    """A 2D point or vector."""

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def lerp(self, other: "Point", t: float) -> "Point":
        return Point(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)


def get_world_position(scene: "Scene", handle: int) -> Point:
    """Current world position of a node."""
    return scene.world_position(handle)


def set_world_position(scene: "Scene", handle: int, point: Point) -> None:
    """Move a node so that its world position equals ``point``."""
    scene.set_world_position(handle, point)


def local_to_world(scene: "Scene", handle: int, local: Point) -> Point:
    """Map a point in a node's local space to world space."""
    origin = scene.world_position(handle)
    sx, sy = scene.world_scale(handle)
    return Point(origin.x + local.x * sx, origin.y + local.y * sy)


def world_to_local(scene: "Scene", handle: int, world: Point) -> Point:
    """Map a world point into a node's local space.

    Raises:
        DegenerateScaleError: If the node's world scale is zero on either
            axis, which makes the mapping non-invertible.

    """
    origin = scene.world_position(handle)
    sx, sy = scene.world_scale(handle)
    if sx == 0 or sy == 0:
        raise DegenerateScaleError(f"Node {handle} has zero world scale ({sx}, {sy})")
    return Point((world.x - origin.x) / sx, (world.y - origin.y) / sy)


def delta_vector(start: Point, end: Point) -> Point:
    """Vector from ``start`` to ``end``."""
    return end - start
