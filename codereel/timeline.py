"""Transitions and the cooperative scheduler that drives them.

A Transition is a value describing an animation request: a property tween, a
pause, or a composition of other transitions. Nothing moves until a Timeline
advances it. ``advance(dt)`` returns None while the transition is running and
the unused part of ``dt`` once it has finished, which lets a Sequence hand the
remainder of a frame to its next member.

Concurrency is fan-out/fan-in only: ``All`` starts every member on the same
tick and completes when the last member completes. There is no cancellation;
a started transition always runs to its end.
"""

import logging
from collections.abc import Callable, Sequence as SequenceABC
from typing import Any

import anyio

from codereel.config import DEFAULT_FPS
from codereel.coordinates import Point
from codereel.scene import Scene
from codereel.theme import interpolate_color

logger = logging.getLogger(__name__)

# Slack for accumulated frame durations, so 0.1 s at 10 fps is exactly one frame.
EPSILON = 1e-9

Easing = Callable[[float], float]


def linear(t: float) -> float:
    return t


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


def _interpolate(start: Any, end: Any, t: float) -> Any:
    if isinstance(start, Point):
        return start.lerp(end, t)
    if isinstance(start, str):
        return interpolate_color(start, end, t)
    return start + (end - start) * t


# =============================================================================
# Transitions
# =============================================================================


class Transition:
    """Base class for animation requests."""

    def __init__(self) -> None:
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def advance(self, dt: float) -> float | None:
        """Advance by ``dt`` seconds.

        Returns:
            None while running, or the leftover time once finished.

        """
        raise NotImplementedError


class Tween(Transition):
    """Animate one property of one node toward a target value.

    The start value is read when the tween first advances, not when it is
    created, so a tween queued behind other work starts from wherever the
    property is at that moment. Starting also claims the property: if a
    later tween claims the same property while this one runs, this one stops
    writing and only runs out its clock.

    """

    def __init__(
        self,
        scene: Scene,
        handle: int,
        prop: str,
        target: Any,
        duration: float,
        easing: Easing = ease_in_out_cubic,
    ) -> None:
        super().__init__()
        self.scene = scene
        self.handle = handle
        self.prop = prop
        self.target = target
        self.duration = max(0.0, duration)
        self.easing = easing
        self._start: Any = None
        self._ticket: int | None = None
        self._elapsed = 0.0

    def _write(self, value: Any) -> None:
        if self._ticket is not None and self.scene.owns(self.handle, self.prop, self._ticket):
            self.scene.set(self.handle, self.prop, value)

    def advance(self, dt: float) -> float | None:
        if self._done:
            return dt
        if self._ticket is None:
            self._start = self.scene.get(self.handle, self.prop)
            self._ticket = self.scene.claim(self.handle, self.prop)
        self._elapsed += dt
        if self._elapsed >= self.duration - EPSILON:
            self._write(self.target)
            self._done = True
            return max(0.0, self._elapsed - self.duration)
        self._write(_interpolate(self._start, self.target, self.easing(self._elapsed / self.duration)))
        return None


def tween(
    scene: Scene,
    handle: int,
    prop: str,
    target: Any,
    duration: float,
    easing: Easing = ease_in_out_cubic,
) -> Tween:
    """Create a Tween; see ``Tween``."""
    return Tween(scene, handle, prop, target, duration, easing)


class Wait(Transition):
    """Do nothing for ``duration`` seconds."""

    def __init__(self, duration: float) -> None:
        super().__init__()
        self.duration = max(0.0, duration)
        self._elapsed = 0.0

    def advance(self, dt: float) -> float | None:
        if self._done:
            return dt
        self._elapsed += dt
        if self._elapsed >= self.duration - EPSILON:
            self._done = True
            return max(0.0, self._elapsed - self.duration)
        return None


class All(Transition):
    """Run members concurrently; finish when every member has finished."""

    def __init__(self, *members: Transition) -> None:
        super().__init__()
        self.members: list[Transition] = list(members)

    def advance(self, dt: float) -> float | None:
        if self._done:
            return dt
        leftovers: list[float] = []
        for member in self.members:
            if member.done:
                continue
            leftover = member.advance(dt)
            if leftover is not None:
                leftovers.append(leftover)
        if all(member.done for member in self.members):
            self._done = True
            return min(leftovers) if leftovers else dt
        return None


class Sequence(Transition):
    """Run members one after another."""

    def __init__(self, *members: Transition) -> None:
        super().__init__()
        self.members: list[Transition] = list(members)
        self._index = 0

    def advance(self, dt: float) -> float | None:
        if self._done:
            return dt
        while self._index < len(self.members):
            leftover = self.members[self._index].advance(dt)
            if leftover is None:
                return None
            self._index += 1
            dt = leftover
        self._done = True
        return dt


class Lazy(Transition):
    """Build the wrapped transition only when it starts.

    Used where a step must observe state produced by earlier steps, such as
    positioning a block at an anchor that only exists after a move finished.
    """

    def __init__(self, factory: Callable[[], Transition]) -> None:
        super().__init__()
        self.factory = factory
        self._inner: Transition | None = None

    def advance(self, dt: float) -> float | None:
        if self._done:
            return dt
        if self._inner is None:
            self._inner = self.factory()
        leftover = self._inner.advance(dt)
        if leftover is not None:
            self._done = True
        return leftover


class Call(Transition):
    """Run a callback when reached, taking no time."""

    def __init__(self, callback: Callable[[], None]) -> None:
        super().__init__()
        self.callback = callback

    def advance(self, dt: float) -> float | None:
        if not self._done:
            self.callback()
            self._done = True
        return dt


def all_of(transitions: SequenceABC[Transition]) -> All:
    return All(*transitions)


def delay(seconds: float, transition: Transition) -> Sequence:
    """Start ``transition`` after ``seconds``."""
    return Sequence(Wait(seconds), transition)


def stagger(transitions: SequenceABC[Transition], interval: float) -> All:
    """Start each transition ``interval`` seconds after the previous one."""
    return All(*(delay(i * interval, t) if i else t for i, t in enumerate(transitions)))


# =============================================================================
# Scheduler
# =============================================================================


class Timeline:
    """Single-threaded scheduler advancing outstanding transitions per tick.

    Args:
        fps: Ticks per second of timeline time.

    Usage:
        timeline = Timeline(fps=30)
        frames = timeline.run(block.appear(0.6))

    """

    def __init__(self, fps: int = DEFAULT_FPS) -> None:
        self.fps = fps
        self.frame = 0
        self.time = 0.0
        self._active: list[Transition] = []

    @property
    def frame_duration(self) -> float:
        return 1.0 / self.fps

    @property
    def active(self) -> list[Transition]:
        return list(self._active)

    def spawn(self, transition: Transition) -> Transition:
        """Add a transition to be advanced on every tick until it finishes."""
        self._active.append(transition)
        return transition

    def tick(self) -> None:
        """Advance every outstanding transition by one frame."""
        dt = self.frame_duration
        for transition in list(self._active):
            if transition.advance(dt) is not None:
                self._active.remove(transition)
        self.frame += 1
        self.time += dt

    def run(
        self,
        transition: Transition,
        on_frame: Callable[["Timeline"], None] | None = None,
    ) -> int:
        """Drive ``transition`` to completion synchronously.

        Other outstanding transitions advance alongside it.

        Returns:
            Number of frames it took.

        """
        self.spawn(transition)
        start = self.frame
        while not transition.done:
            self.tick()
            if on_frame is not None:
                on_frame(self)
        logger.debug("Transition %s finished after %d frames", type(transition).__name__, self.frame - start)
        return self.frame - start

    async def play(
        self,
        transition: Transition,
        on_frame: Callable[["Timeline"], None] | None = None,
        speed: float = 1.0,
    ) -> int:
        """Drive ``transition`` to completion in real time.

        Sleeps one frame duration (divided by ``speed``) between ticks so a
        live renderer can redraw.

        Returns:
            Number of frames it took.

        """
        self.spawn(transition)
        start = self.frame
        pause = self.frame_duration / speed if speed > 0 else 0
        while not transition.done:
            self.tick()
            if on_frame is not None:
                on_frame(self)
            await anyio.sleep(pause)
        return self.frame - start
