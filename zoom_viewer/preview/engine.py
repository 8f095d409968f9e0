"""Pan/zoom/fit state machine for a single displayed image.

The engine owns the committed view transform, the current interaction mode
and the content/viewport sizes. It never reads a clock or touches Qt: the host
feeds it pointer, wheel, resize and tick events and receives callbacks when the
view needs repainting, when the transform changed, and when another animation
frame is wanted.

While animating, ``committed_transform`` already holds the animation target;
the transform to draw is :meth:`TransformEngine.effective_transform`.
"""
from __future__ import annotations

import logging
import math
from typing import Callable

from zoom_viewer.geometry import constraints
from zoom_viewer.geometry.constraints import ZoomLimits
from zoom_viewer.geometry.transform import Point, Size, Transform, is_empty_size
from zoom_viewer.preview.animation import DEFAULT_ANIMATION_MS, AnimationState
from zoom_viewer.preview.drag import DragSession
from zoom_viewer.preview.mode import IDLE, AnimatingMode, DraggingMode, IdleMode, Mode, mode_name
from zoom_viewer.preview.validation import (
    InvalidParameterError,
    require_finite_point,
    require_positive_finite,
)

logger = logging.getLogger(__name__)

DEFAULT_SCROLL_TWEAK = 0.5


class TransformEngine:
    def __init__(
        self,
        content_size: Size,
        *,
        limits: ZoomLimits = constraints.DEFAULT_LIMITS,
        animation_ms: float = DEFAULT_ANIMATION_MS,
        scroll_tweak: float = DEFAULT_SCROLL_TWEAK,
        on_transform_changed: Callable[[Transform], None] | None = None,
        request_repaint: Callable[[], None] | None = None,
        request_frame: Callable[[], None] | None = None,
    ) -> None:
        self._check_content_size(content_size)
        require_positive_finite("animation_ms", animation_ms)
        if not math.isfinite(scroll_tweak):
            raise InvalidParameterError(f"scroll_tweak must be finite, got {scroll_tweak!r}")
        self._content_size: Size = (float(content_size[0]), float(content_size[1]))
        self._viewport_size: Size = (0.0, 0.0)
        self._limits = limits
        self._animation_ms = animation_ms
        self._scroll_tweak = scroll_tweak
        self._committed = Transform()
        self._mode: Mode = IDLE
        self._first_layout_done = False
        self._last_reported: Transform | None = None
        self._on_transform_changed = on_transform_changed
        self._request_repaint = request_repaint
        self._request_frame = request_frame

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def committed_transform(self) -> Transform:
        return self._committed

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def content_size(self) -> Size:
        return self._content_size

    @property
    def viewport_size(self) -> Size:
        return self._viewport_size

    @property
    def first_layout_done(self) -> bool:
        return self._first_layout_done

    def is_dragging(self) -> bool:
        return isinstance(self._mode, DraggingMode)

    def is_animating(self) -> bool:
        return isinstance(self._mode, AnimatingMode)

    def effective_transform(self) -> Transform:
        """Transform to draw with, including any drag or animation in progress."""
        mode = self._mode
        if isinstance(mode, IdleMode):
            return self._committed
        if isinstance(mode, DraggingMode):
            return mode.session.live_transform(self._committed)
        if isinstance(mode, AnimatingMode):
            return mode.animation.current()
        raise TypeError(f"Unknown mode: {mode!r}")

    def inverse_transform(self) -> Transform:
        return self.effective_transform().inverse()

    def map_to_content(self, point: Point) -> Point:
        """Convert a viewport point to content coordinates."""
        return self.inverse_transform().apply(point)

    def fit_scale(self) -> float:
        return constraints.fit_scale(self._content_size, self._viewport_size)

    def viewport_center(self) -> Point:
        return (self._viewport_size[0] * 0.5, self._viewport_size[1] * 0.5)

    # ------------------------------------------------------------------
    # Pointer drag
    # ------------------------------------------------------------------
    def pointer_down(self, position: Point) -> None:
        require_finite_point("position", position)
        mode = self._mode
        if isinstance(mode, DraggingMode):
            return
        if isinstance(mode, AnimatingMode):
            # Pick the view up where the animation currently has it.
            self._committed = mode.animation.current()
        elif not isinstance(mode, IdleMode):
            raise TypeError(f"Unknown mode: {mode!r}")
        self._set_mode(DraggingMode(DragSession(position)))
        self._publish()

    def pointer_move(self, position: Point) -> None:
        mode = self._mode
        if not isinstance(mode, DraggingMode):
            return
        require_finite_point("position", position)
        if mode.session.update(position):
            self._publish()

    def pointer_up(self) -> None:
        mode = self._mode
        if not isinstance(mode, DraggingMode):
            return
        result = mode.session.stop(self._committed, self._content_size, self._viewport_size)
        if result.needs_bounce:
            logger.debug("Drag released out of bounds; bouncing back to %s", result.settled)
            self._committed = result.settled
            self._set_mode(
                AnimatingMode(AnimationState(result.released, result.settled, self._animation_ms))
            )
        else:
            self._committed = result.released
            self._set_mode(IDLE)
        self._publish()

    # ------------------------------------------------------------------
    # Zoom requests
    # ------------------------------------------------------------------
    def request_absolute_zoom(self, scale: float, origin: Point) -> None:
        """Zoom to ``scale`` keeping the content under ``origin`` (viewport space) in place.

        The resulting scale and offset are constrained, so the request may be
        only partially honoured.
        """
        require_positive_finite("scale", scale)
        require_finite_point("origin", origin)
        self._apply_zoom(scale, origin)
        self._publish()

    def request_relative_zoom(self, factor: float, origin: Point) -> None:
        """Zoom by ``factor`` (``> 1`` enlarges) around ``origin``."""
        require_positive_finite("factor", factor)
        require_finite_point("origin", origin)
        self._apply_zoom(self._committed.scale * factor, origin)
        self._publish()

    def request_fit_to_viewport(self) -> None:
        if is_empty_size(self._viewport_size):
            logger.debug("Ignoring fit request while the viewport is empty")
            return
        self._apply_zoom(self.fit_scale(), (0.0, 0.0))
        self._publish()

    def set_absolute_scale(self, scale: float) -> None:
        """Zoom around the viewport centre; a non-positive or non-finite scale means fit."""
        if scale <= 0 or not math.isfinite(scale):
            self.request_fit_to_viewport()
            return
        self.request_absolute_zoom(scale, self.viewport_center())

    def zoom_by_factor(self, factor: float) -> None:
        self.request_relative_zoom(factor, self.viewport_center())

    def wheel(self, position: Point, delta: float) -> None:
        """Zoom one step around ``position``; positive ``delta`` zooms out."""
        if delta == 0 or math.isnan(delta):
            return
        factor = math.exp(self._scroll_tweak * -math.copysign(1.0, delta))
        self.request_relative_zoom(factor, position)

    # ------------------------------------------------------------------
    # Layout and content
    # ------------------------------------------------------------------
    def viewport_resized(self, size: Size) -> None:
        self._viewport_size = (float(size[0]), float(size[1]))
        # Any drag or animation is meaningless against the old size.
        self._set_mode(IDLE)
        if is_empty_size(self._viewport_size):
            self._publish()
            return
        if not self._first_layout_done:
            self._first_layout_done = True
            logger.debug("First layout at %s; fitting content %s", size, self._content_size)
            self._apply_zoom(self.fit_scale(), (0.0, 0.0))
            self._set_mode(IDLE)
        else:
            self._committed = constraints.constrain_transform(
                self._content_size, self._viewport_size, self._committed, self._limits
            )
        self._publish()

    def content_replaced(self, content_size: Size) -> None:
        self._check_content_size(content_size)
        self._content_size = (float(content_size[0]), float(content_size[1]))
        logger.debug("Content replaced with size %s", self._content_size)
        if is_empty_size(self._viewport_size):
            # Fit once the viewport has a size.
            self._first_layout_done = False
            self._set_mode(IDLE)
            self._publish()
            return
        self._apply_zoom(self.fit_scale(), (0.0, 0.0))
        self._publish()

    # ------------------------------------------------------------------
    # Animation clock
    # ------------------------------------------------------------------
    def tick(self, delta_ms: float) -> None:
        mode = self._mode
        if not isinstance(mode, AnimatingMode):
            return
        mode.animation.advance(delta_ms)
        if mode.animation.is_complete():
            self._committed = mode.animation.target
            self._set_mode(IDLE)
        self._publish()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _check_content_size(content_size: Size) -> None:
        width, height = content_size
        if not (math.isfinite(width) and math.isfinite(height)) or is_empty_size(content_size):
            raise InvalidParameterError(f"content size must be positive, got {content_size!r}")

    def _apply_zoom(self, scale: float, origin: Point) -> None:
        before = self.effective_transform()
        origin_content = before.inverse().apply(origin)
        new_scale = constraints.constrain_scale(
            self._content_size, self._viewport_size, scale, self._limits
        )
        requested = Transform(
            offset=(
                origin[0] - origin_content[0] * new_scale,
                origin[1] - origin_content[1] * new_scale,
            ),
            scale=new_scale,
        )
        target = constraints.constrain_transform(
            self._content_size, self._viewport_size, requested, self._limits
        )
        self._committed = target
        if target.approx_eq(before):
            self._set_mode(IDLE)
            return

        mode = self._mode
        if isinstance(mode, AnimatingMode):
            self._set_mode(AnimatingMode(mode.animation.retarget(target, self._animation_ms)))
        elif isinstance(mode, (IdleMode, DraggingMode)):
            # A zoom during a drag ends the drag; the live position is the start.
            self._set_mode(AnimatingMode(AnimationState(before, target, self._animation_ms)))
        else:
            raise TypeError(f"Unknown mode: {mode!r}")

    def _set_mode(self, mode: Mode) -> None:
        previous = self._mode
        self._mode = mode
        if type(previous) is not type(mode):
            logger.debug("Mode %s -> %s", mode_name(previous), mode_name(mode))

    def _publish(self) -> None:
        effective = self.effective_transform()
        if self._request_repaint is not None:
            self._request_repaint()
        if self._last_reported is None or not effective.approx_eq(self._last_reported):
            self._last_reported = effective
            if self._on_transform_changed is not None:
                self._on_transform_changed(effective.inverse())
        if self.is_animating() and self._request_frame is not None:
            self._request_frame()
