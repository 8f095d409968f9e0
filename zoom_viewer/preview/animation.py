"""Time-driven interpolation between two view transforms."""
from __future__ import annotations

from zoom_viewer.geometry.transform import Transform
from zoom_viewer.preview.easing import cubic_out
from zoom_viewer.preview.validation import require_positive_finite

DEFAULT_ANIMATION_MS = 160.0


def _lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


class AnimationState:
    """Progress of a single transition from ``start`` to ``target``.

    The clock is external: callers feed elapsed milliseconds to :meth:`advance`.
    """

    def __init__(
        self, start: Transform, target: Transform, duration_ms: float = DEFAULT_ANIMATION_MS
    ) -> None:
        require_positive_finite("duration_ms", duration_ms)
        self.start = start
        self.target = target
        self.duration_ms = duration_ms
        # Nothing to animate.
        self.progress = 1.0 if start.approx_eq(target) else 0.0

    def __repr__(self) -> str:
        return (
            f"AnimationState(start={self.start!r}, target={self.target!r}, "
            f"progress={self.progress:.3f}, duration_ms={self.duration_ms})"
        )

    def advance(self, elapsed_ms: float) -> None:
        if elapsed_ms <= 0:
            return
        self.progress = min(1.0, self.progress + elapsed_ms / self.duration_ms)

    def current(self) -> Transform:
        t = cubic_out(self.progress)
        return Transform(
            offset=(
                _lerp(self.start.offset[0], self.target.offset[0], t),
                _lerp(self.start.offset[1], self.target.offset[1], t),
            ),
            scale=_lerp(self.start.scale, self.target.scale, t),
        )

    def is_complete(self) -> bool:
        return self.progress >= 1.0

    def retarget(self, target: Transform, duration_ms: float | None = None) -> "AnimationState":
        """Start a new animation from wherever this one currently is."""
        return AnimationState(
            self.current(), target, self.duration_ms if duration_ms is None else duration_ms
        )
