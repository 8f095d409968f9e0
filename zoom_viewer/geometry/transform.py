"""Uniform scale + translation transform between content and viewport space."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

Point = Tuple[float, float]
Size = Tuple[float, float]

EPSILON = 1e-6


def is_empty_size(size: Size) -> bool:
    width, height = size
    return width <= 0 or height <= 0


@dataclass(frozen=True)
class Transform:
    """Maps a content point ``p`` to the viewport as ``p * scale + offset``."""

    offset: Point = (0.0, 0.0)
    scale: float = 1.0

    def apply(self, point: Point) -> Point:
        return (
            point[0] * self.scale + self.offset[0],
            point[1] * self.scale + self.offset[1],
        )

    def inverse(self) -> "Transform":
        """Return the viewport-to-content mapping."""
        inv_scale = 1.0 / self.scale
        return Transform(
            offset=(-self.offset[0] * inv_scale, -self.offset[1] * inv_scale),
            scale=inv_scale,
        )

    def translated(self, delta: Point) -> "Transform":
        return Transform(
            offset=(self.offset[0] + delta[0], self.offset[1] + delta[1]),
            scale=self.scale,
        )

    def approx_eq(self, other: "Transform", epsilon: float = EPSILON) -> bool:
        dx = other.offset[0] - self.offset[0]
        dy = other.offset[1] - self.offset[1]
        return dx * dx + dy * dy < epsilon * epsilon and abs(self.scale - other.scale) < epsilon

    def as_tuple(self) -> tuple[float, Point]:
        return self.scale, self.offset


def transforms_approx_eq(first: Transform, second: Transform) -> bool:
    return first.approx_eq(second)
