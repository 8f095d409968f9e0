from __future__ import annotations


def cubic_out(t: float) -> float:
    """Cubic ease-out: fast start, slow finish. ``cubic_out(0) == 0``, ``cubic_out(1) == 1``."""
    inv = 1.0 - t
    return 1.0 - inv * inv * inv
