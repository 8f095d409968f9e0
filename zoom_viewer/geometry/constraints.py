"""Keep a requested view transform inside usable bounds.

Scale is bounded below by whichever is smaller of the configured floor and the
scale that fits the whole content in the viewport, and above by the configured
ceiling. Offsets are bounded per axis: content smaller than the viewport is
centred, larger content must cover the viewport edge to edge.
"""
from __future__ import annotations

from dataclasses import dataclass

from zoom_viewer.geometry.transform import Point, Size, Transform, is_empty_size
from zoom_viewer.preview.validation import InvalidParameterError

DEFAULT_MIN_SCALE = 0.2  # 20%
DEFAULT_MAX_SCALE = 15.0  # 1500%


@dataclass(frozen=True)
class ZoomLimits:
    min_scale: float = DEFAULT_MIN_SCALE
    max_scale: float = DEFAULT_MAX_SCALE


DEFAULT_LIMITS = ZoomLimits()


def fit_scale(content_size: Size, viewport_size: Size) -> float:
    """Scale at which the whole content just fits in the viewport."""
    if is_empty_size(content_size):
        raise InvalidParameterError(f"content size must be non-empty, got {content_size}")
    content_w, content_h = content_size
    view_w, view_h = viewport_size
    return min(view_w / content_w, view_h / content_h)


def constrain_scale(
    content_size: Size,
    viewport_size: Size,
    scale: float,
    limits: ZoomLimits = DEFAULT_LIMITS,
) -> float:
    # If both bounds cannot be satisfied the lower one wins.
    min_scale = min(fit_scale(content_size, viewport_size), limits.min_scale)
    return max(min_scale, min(limits.max_scale, scale))


def _constrain_axis(view_extent: float, content_extent: float, scale: float, offset: float) -> float:
    slack = view_extent - content_extent * scale
    if slack > 0:
        return slack * 0.5
    return max(slack, min(0.0, offset))


def constrain_offset(content_size: Size, viewport_size: Size, scale: float, offset: Point) -> Point:
    content_w, content_h = content_size
    view_w, view_h = viewport_size
    return (
        _constrain_axis(view_w, content_w, scale, offset[0]),
        _constrain_axis(view_h, content_h, scale, offset[1]),
    )


def constrain_transform(
    content_size: Size,
    viewport_size: Size,
    transform: Transform,
    limits: ZoomLimits = DEFAULT_LIMITS,
) -> Transform:
    """Return the closest transform to ``transform`` that satisfies the limits.

    The offset bound depends on the final scale, so scale is resolved first.
    """
    scale = constrain_scale(content_size, viewport_size, transform.scale, limits)
    offset = constrain_offset(content_size, viewport_size, scale, transform.offset)
    return Transform(offset=offset, scale=scale)
