"""Arena of render-state records addressed by integer handles.

Blocks, ghosts, and transitions never hold node objects directly. They keep
handles into a Scene and resolve them when reading or writing a property, so
every reader sees the current value (including values written mid-tween) and
ownership of a node is explicit.

Handle 0 is the root group. Nodes created with ``parent=None`` are detached:
they exist in the arena but are not part of the rendered tree until added.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from codereel.config import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE
from codereel.coordinates import Point, world_to_local

ROOT = 0


class NodeKind(str, Enum):
    """Kinds of render-state records."""

    GROUP = "group"
    TEXT = "text"


@dataclass
class Node:
    """One render-state record.

    Attributes:
        kind: GROUP nodes only carry a transform; TEXT nodes draw ``text``.
        x: Local x relative to the parent.
        y: Local y relative to the parent.
        scale_x: Horizontal scale applied to children.
        scale_y: Vertical scale applied to children.
        opacity: Local opacity, multiplied down the tree.
        text: Text content (TEXT nodes).
        fill: Text color as "#RRGGBB" (TEXT nodes).
        font_size: Font size in pixels (TEXT nodes).
        font_family: Font family name (TEXT nodes).
        parent: Parent handle, or None when detached.
        children: Ordered child handles.

    """

    kind: NodeKind
    x: float = 0.0
    y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    opacity: float = 1.0
    text: str = ""
    fill: str = "#FFFFFF"
    font_size: float = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    parent: int | None = None
    children: list[int] = field(default_factory=list)


# Properties a transition may read and write.
ANIMATABLE = frozenset({
    "x", "y", "position", "world_position", "scale", "scale_x", "scale_y", "opacity", "fill",
})


class Scene:
    """Node arena with a root group at handle 0.

    Usage:
        scene = Scene()
        group = scene.create_group(x=100, y=50)
        label = scene.create_text("hi", parent=group)
        scene.world_position(label)  # Point(100, 50)

    """

    def __init__(self) -> None:
        self._nodes: list[Node] = [Node(NodeKind.GROUP)]
        self._claims: dict[tuple[int, str], int] = {}
        self._next_ticket = 0

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def _append(self, node: Node, parent: int | None) -> int:
        handle = len(self._nodes)
        self._nodes.append(node)
        if parent is not None:
            self.add(parent, handle)
        return handle

    def create_group(
        self,
        x: float = 0.0,
        y: float = 0.0,
        opacity: float = 1.0,
        parent: int | None = ROOT,
    ) -> int:
        """Create a group node and return its handle."""
        return self._append(Node(NodeKind.GROUP, x=x, y=y, opacity=opacity), parent)

    def create_text(
        self,
        text: str,
        fill: str = "#FFFFFF",
        font_size: float = DEFAULT_FONT_SIZE,
        font_family: str = DEFAULT_FONT_FAMILY,
        x: float = 0.0,
        y: float = 0.0,
        opacity: float = 1.0,
        parent: int | None = ROOT,
    ) -> int:
        """Create a text node and return its handle."""
        node = Node(
            NodeKind.TEXT,
            x=x,
            y=y,
            opacity=opacity,
            text=text,
            fill=fill,
            font_size=font_size,
            font_family=font_family,
        )
        return self._append(node, parent)

    def add(self, parent: int, child: int) -> None:
        """Attach ``child`` as the last child of ``parent``, detaching it first."""
        self.remove(child)
        self._nodes[child].parent = parent
        self._nodes[parent].children.append(child)

    def remove(self, handle: int) -> None:
        """Detach a node from its parent. The record stays in the arena."""
        node = self._nodes[handle]
        if node.parent is not None:
            self._nodes[node.parent].children.remove(handle)
            node.parent = None

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def node(self, handle: int) -> Node:
        return self._nodes[handle]

    def __getitem__(self, handle: int) -> Node:
        return self._nodes[handle]

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> int:
        return ROOT

    def is_attached(self, handle: int) -> bool:
        """True if the node is reachable from the root."""
        current: int | None = handle
        while current is not None:
            if current == ROOT:
                return True
            current = self._nodes[current].parent
        return False

    def walk(self, handle: int = ROOT) -> Iterator[int]:
        """Yield ``handle`` and its descendants depth-first, in child order."""
        stack = [handle]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._nodes[current].children))

    # -------------------------------------------------------------------------
    # Transforms
    # -------------------------------------------------------------------------

    def world_scale(self, handle: int) -> tuple[float, float]:
        sx, sy = 1.0, 1.0
        current: int | None = handle
        while current is not None:
            node = self._nodes[current]
            sx *= node.scale_x
            sy *= node.scale_y
            current = node.parent
        return sx, sy

    def world_position(self, handle: int) -> Point:
        node = self._nodes[handle]
        if node.parent is None:
            return Point(node.x, node.y)
        origin = self.world_position(node.parent)
        sx, sy = self.world_scale(node.parent)
        return Point(origin.x + node.x * sx, origin.y + node.y * sy)

    def set_world_position(self, handle: int, point: Point) -> None:
        node = self._nodes[handle]
        if node.parent is None:
            node.x, node.y = point.x, point.y
            return
        local = world_to_local(self, node.parent, point)
        node.x, node.y = local.x, local.y

    def world_opacity(self, handle: int) -> float:
        opacity = 1.0
        current: int | None = handle
        while current is not None:
            node = self._nodes[current]
            opacity *= node.opacity
            current = node.parent
        return opacity

    # -------------------------------------------------------------------------
    # Property access for transitions
    # -------------------------------------------------------------------------

    def get(self, handle: int, prop: str) -> Any:
        """Read an animatable property."""
        node = self._nodes[handle]
        if prop == "position":
            return Point(node.x, node.y)
        if prop == "world_position":
            return self.world_position(handle)
        if prop == "scale":
            return node.scale_x
        if prop not in ANIMATABLE:
            raise AttributeError(f"Property {prop!r} is not animatable")
        return getattr(node, prop)

    def set(self, handle: int, prop: str, value: Any) -> None:
        """Write an animatable property."""
        node = self._nodes[handle]
        if prop == "position":
            node.x, node.y = value.x, value.y
        elif prop == "world_position":
            self.set_world_position(handle, value)
        elif prop == "scale":
            node.scale_x = node.scale_y = value
        elif prop in ANIMATABLE:
            setattr(node, prop, value)
        else:
            raise AttributeError(f"Property {prop!r} is not animatable")

    def claim(self, handle: int, prop: str) -> int:
        """Make the caller the current writer of a property; return its ticket."""
        self._next_ticket += 1
        key = (handle, self._canonical(prop))
        self._claims[key] = self._next_ticket
        return self._next_ticket

    def owns(self, handle: int, prop: str, ticket: int) -> bool:
        """True if ``ticket`` is still the latest claim on the property."""
        return self._claims.get((handle, self._canonical(prop))) == ticket

    @staticmethod
    def _canonical(prop: str) -> str:
        if prop == "world_position":
            return "position"
        if prop in ("scale", "scale_x", "scale_y"):
            return "scale"
        return prop
