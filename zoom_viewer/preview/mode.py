"""Interaction modes of the transform engine.

Exactly one mode is active at a time. Transitions are made only by
:class:`zoom_viewer.preview.engine.TransformEngine`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from zoom_viewer.preview.animation import AnimationState
from zoom_viewer.preview.drag import DragSession


@dataclass(frozen=True)
class IdleMode:
    pass


@dataclass(frozen=True)
class DraggingMode:
    session: DragSession


@dataclass(frozen=True)
class AnimatingMode:
    animation: AnimationState


Mode = Union[IdleMode, DraggingMode, AnimatingMode]

IDLE = IdleMode()


def mode_name(mode: Mode) -> str:
    if isinstance(mode, IdleMode):
        return "idle"
    if isinstance(mode, DraggingMode):
        return "dragging"
    if isinstance(mode, AnimatingMode):
        return "animating"
    raise TypeError(f"Unknown mode: {mode!r}")
