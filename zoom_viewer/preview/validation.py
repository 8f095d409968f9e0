"""Argument checks for zoom requests."""
from __future__ import annotations

import math

from zoom_viewer.geometry.transform import Point


class InvalidParameterError(ValueError):
    """Raised when a caller passes a non-finite or non-positive zoom argument."""


def require_positive_finite(name: str, value: float) -> None:
    if not (math.isfinite(value) and value > 0.0):
        raise InvalidParameterError(f"{name} must be in (0, infinity), got {value!r}")


def require_finite_point(name: str, point: Point) -> None:
    x, y = point
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidParameterError(f"{name} must be finite, got {point!r}")
