from __future__ import annotations

import os
from types import SimpleNamespace

import pytest

pytest.importorskip("PyQt5")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt5 import QtCore, QtGui, QtWidgets

from zoom_viewer.config import ZoomSettings
from zoom_viewer.geometry.transform import Transform
from zoom_viewer.ui.zoom_image_widget import ZoomImageWidget


_APP = None


def qapp():
    global _APP
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    _APP = app
    return app


def _image(width: int, height: int) -> QtGui.QImage:
    image = QtGui.QImage(width, height, QtGui.QImage.Format_RGB32)
    image.fill(QtGui.QColor("white"))
    return image


def _resize(widget: ZoomImageWidget, width: int, height: int) -> None:
    widget.resize(width, height)
    widget.resizeEvent(QtGui.QResizeEvent(QtCore.QSize(width, height), QtCore.QSize()))


def _mouse(x: float, y: float, button=QtCore.Qt.LeftButton) -> SimpleNamespace:
    return SimpleNamespace(
        pos=lambda: QtCore.QPoint(int(x), int(y)),
        button=lambda: button,
        accept=lambda: None,
    )


def _wheel(x: float, y: float, delta: int) -> SimpleNamespace:
    return SimpleNamespace(
        pos=lambda: QtCore.QPoint(int(x), int(y)),
        angleDelta=lambda: QtCore.QPoint(0, delta),
        accept=lambda: None,
        ignore=lambda: None,
    )


class _FixedClock:
    def __init__(self, step_ms: int) -> None:
        self._step_ms = step_ms
        self._valid = False

    def isValid(self) -> bool:
        return self._valid

    def start(self) -> None:
        self._valid = True

    def restart(self) -> int:
        return self._step_ms

    def invalidate(self) -> None:
        self._valid = False


def _fitted_widget(settings: ZoomSettings | None = None) -> ZoomImageWidget:
    _ = qapp()
    widget = ZoomImageWidget() if settings is None else ZoomImageWidget(settings=settings)
    widget.set_image(_image(200, 100))
    _resize(widget, 100, 100)
    return widget


def _finish_animation(widget: ZoomImageWidget) -> None:
    widget._frame_clock = _FixedClock(50)
    widget._frame_clock.start()
    for _ in range(20):
        if not widget.engine.is_animating():
            return
        widget._on_frame()
    raise AssertionError("animation did not finish")


def test_placeholder_without_image() -> None:
    _ = qapp()
    widget = ZoomImageWidget()
    assert not widget.has_image()
    assert widget.current_transform() is None
    widget.set_scale(2.0)
    widget.zoom(2.0)
    assert not widget.grab().isNull()


def test_first_resize_fits_image() -> None:
    widget = _fitted_widget()
    transform = widget.current_transform()
    assert transform.scale == pytest.approx(0.5)
    assert transform.offset == pytest.approx((0.0, 25.0))
    assert not widget.grab().isNull()


def test_transform_changed_signal_carries_inverse() -> None:
    _ = qapp()
    widget = ZoomImageWidget()
    received: list[Transform] = []
    scales: list[float] = []
    widget.transformChanged.connect(received.append)
    widget.scaleChanged.connect(scales.append)
    widget.set_image(_image(200, 100))

    _resize(widget, 100, 100)

    assert received[-1].approx_eq(Transform((0.0, -50.0), 2.0))
    assert scales[-1] == pytest.approx(0.5)


def test_set_scale_animates_and_sentinel_fits() -> None:
    widget = _fitted_widget()

    widget.set_scale(2.0)
    assert widget.engine.is_animating()
    assert widget._frame_timer.isActive()
    _finish_animation(widget)
    assert widget.current_transform().scale == pytest.approx(2.0)

    widget.set_scale(0.0)
    _finish_animation(widget)
    assert widget.current_transform().approx_eq(Transform((0.0, 25.0), 0.5))


def test_zoom_slot_and_fit_to_window() -> None:
    widget = _fitted_widget()
    widget.zoom(4.0)
    _finish_animation(widget)
    assert widget.current_transform().scale == pytest.approx(2.0)

    widget.fit_to_window()
    _finish_animation(widget)
    assert widget.current_transform().scale == pytest.approx(0.5)


def test_wheel_zooms_around_cursor() -> None:
    widget = _fitted_widget()
    before = widget.engine.map_to_content((50.0, 50.0))

    widget.wheelEvent(_wheel(50, 50, 120))
    _finish_animation(widget)

    assert widget.current_transform().scale > 0.5
    assert widget.engine.map_to_content((50.0, 50.0)) == pytest.approx(before)


def test_wheel_without_vertical_delta_is_ignored() -> None:
    widget = _fitted_widget()
    widget.wheelEvent(_wheel(50, 50, 0))
    assert not widget.engine.is_animating()


def test_mouse_drag_routes_to_engine_and_bounces() -> None:
    widget = _fitted_widget()
    moves: list[tuple[float, float]] = []
    widget.cursorMoved.connect(moves.append)

    widget.mousePressEvent(_mouse(10, 10))
    assert widget.engine.is_dragging()
    widget.mouseMoveEvent(_mouse(40, 10))
    assert widget.current_transform().offset == pytest.approx((30.0, 25.0))
    assert moves[-1] == (40.0, 10.0)

    widget.mouseReleaseEvent(_mouse(40, 10))

    assert widget.engine.is_animating()
    _finish_animation(widget)
    assert widget.current_transform().offset == pytest.approx((0.0, 25.0))


def test_second_image_refits() -> None:
    widget = _fitted_widget()

    widget.set_image(_image(100, 200))
    _finish_animation(widget)

    transform = widget.current_transform()
    assert transform.scale == pytest.approx(0.5)
    assert transform.offset == pytest.approx((25.0, 0.0))


def test_clearing_image_drops_engine() -> None:
    widget = _fitted_widget()
    widget.set_image(None)
    assert widget.engine is None
    assert not widget.has_image()


def test_settings_limit_the_zoom_range() -> None:
    widget = _fitted_widget(ZoomSettings(max_scale=1.0))

    widget.set_scale(5.0)
    _finish_animation(widget)

    assert widget.current_transform().scale == pytest.approx(1.0)
