"""Single-pointer drag tracking."""
from __future__ import annotations

from dataclasses import dataclass

from zoom_viewer.geometry import constraints
from zoom_viewer.geometry.transform import Point, Size, Transform


@dataclass(frozen=True)
class DragResult:
    released: Transform
    """Where the pointer left the view, possibly outside the limits."""
    settled: Transform
    """The constrained transform the view should come to rest at."""

    @property
    def needs_bounce(self) -> bool:
        return not self.released.approx_eq(self.settled)


class DragSession:
    """Tracks the pointer offset since the press.

    The delta is deliberately left unconstrained so the content follows the
    pointer exactly; limits are only applied on release.
    """

    def __init__(self, anchor: Point) -> None:
        self.anchor = anchor
        self.delta: Point = (0.0, 0.0)

    def __repr__(self) -> str:
        return f"DragSession(anchor={self.anchor!r}, delta={self.delta!r})"

    def update(self, position: Point) -> bool:
        """Record the pointer position, returning True if the delta changed."""
        delta = (position[0] - self.anchor[0], position[1] - self.anchor[1])
        if delta == self.delta:
            return False
        self.delta = delta
        return True

    def live_transform(self, committed: Transform) -> Transform:
        return committed.translated(self.delta)

    def stop(self, committed: Transform, content_size: Size, viewport_size: Size) -> DragResult:
        released = self.live_transform(committed)
        offset = constraints.constrain_offset(
            content_size, viewport_size, released.scale, released.offset
        )
        return DragResult(released=released, settled=Transform(offset=offset, scale=released.scale))
