"""Qt widget that displays an image through a :class:`TransformEngine`.

The widget owns the decoded pixmap, converts Qt events into engine calls and
drives animation frames from a single-shot timer. All pan/zoom decisions are
made by the engine.
"""
from __future__ import annotations

import logging

from PyQt5 import QtCore, QtGui, QtWidgets

from zoom_viewer.config import DEFAULT_SETTINGS, ZoomSettings
from zoom_viewer.geometry.transform import Transform
from zoom_viewer.preview.engine import TransformEngine

logger = logging.getLogger(__name__)


class ZoomImageWidget(QtWidgets.QWidget):
    transformChanged = QtCore.pyqtSignal(object)
    scaleChanged = QtCore.pyqtSignal(float)
    cursorMoved = QtCore.pyqtSignal(object)

    _FRAME_INTERVAL_MS = 16
    _PLACEHOLDER_TEXT = "Open an image to view it."

    def __init__(
        self,
        parent: QtWidgets.QWidget | None = None,
        *,
        settings: ZoomSettings = DEFAULT_SETTINGS,
    ) -> None:
        super().__init__(parent)
        self.setMouseTracking(True)
        self.setFocusPolicy(QtCore.Qt.WheelFocus)
        self.setSizePolicy(
            QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Expanding
        )
        self._settings = settings
        self._engine: TransformEngine | None = None
        self._pixmap: QtGui.QPixmap | None = None
        self._last_scale: float | None = None

        self._frame_timer = QtCore.QTimer(self)
        self._frame_timer.setSingleShot(True)
        self._frame_timer.setInterval(self._FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._on_frame)
        self._frame_clock = QtCore.QElapsedTimer()

    @property
    def engine(self) -> TransformEngine | None:
        return self._engine

    def has_image(self) -> bool:
        return self._pixmap is not None

    def set_image(self, image: QtGui.QImage | None) -> None:
        """Show ``image``, refitting the view. ``None`` clears the widget."""
        if image is None or image.isNull():
            self._pixmap = None
            self._engine = None
            self._stop_frames()
            self._last_scale = None
            self.update()
            return

        self._pixmap = QtGui.QPixmap.fromImage(image)
        content_size = (float(image.width()), float(image.height()))
        if self._engine is None:
            self._engine = self._create_engine(content_size)
            self._sync_viewport()
        else:
            self._engine.content_replaced(content_size)
        logger.info("Displaying image %dx%d", image.width(), image.height())
        self.update()

    @QtCore.pyqtSlot(float)
    def set_scale(self, scale: float) -> None:
        """Zoom to ``scale`` around the centre; non-positive means fit to window."""
        if self._engine is not None:
            self._engine.set_absolute_scale(scale)

    @QtCore.pyqtSlot(float)
    def zoom(self, factor: float) -> None:
        """Zoom by ``factor`` around the centre (``< 1`` shrinks, ``> 1`` grows)."""
        if self._engine is not None:
            self._engine.zoom_by_factor(factor)

    @QtCore.pyqtSlot()
    def fit_to_window(self) -> None:
        if self._engine is not None:
            self._engine.request_fit_to_viewport()

    def current_transform(self) -> Transform | None:
        if self._engine is None:
            return None
        return self._engine.effective_transform()

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # noqa: D401
        super().resizeEvent(event)
        if self._engine is None:
            return
        size = event.size()
        self._stop_frames()
        self._engine.viewport_resized((float(size.width()), float(size.height())))

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: D401
        if self._engine is None or event.button() != QtCore.Qt.LeftButton:
            super().mousePressEvent(event)
            return
        self._stop_frames()
        self._engine.pointer_down((float(event.pos().x()), float(event.pos().y())))
        self.setCursor(QtCore.Qt.ClosedHandCursor)
        event.accept()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: D401
        if self._engine is None:
            super().mouseMoveEvent(event)
            return
        position = (float(event.pos().x()), float(event.pos().y()))
        self.cursorMoved.emit(position)
        self._engine.pointer_move(position)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: D401
        if self._engine is None or event.button() != QtCore.Qt.LeftButton:
            super().mouseReleaseEvent(event)
            return
        self._engine.pointer_up()
        self.setCursor(QtCore.Qt.ArrowCursor)
        event.accept()

    def wheelEvent(self, event: QtGui.QWheelEvent) -> None:  # noqa: D401
        if self._engine is None:
            super().wheelEvent(event)
            return
        delta = event.angleDelta().y()
        if delta == 0:
            event.ignore()
            return
        # Qt reports wheel-away-from-user as positive; the engine zooms out on positive.
        self._engine.wheel((float(event.pos().x()), float(event.pos().y())), -float(delta))
        event.accept()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # noqa: D401
        _ = event
        painter = QtGui.QPainter(self)
        rect = self.rect()
        painter.setClipRect(rect)
        painter.fillRect(rect, self.palette().color(QtGui.QPalette.Window))
        if self._engine is None or self._pixmap is None:
            painter.setPen(self.palette().color(QtGui.QPalette.WindowText))
            painter.drawText(rect, QtCore.Qt.AlignCenter, self._PLACEHOLDER_TEXT)
            painter.end()
            return

        painter.setRenderHint(QtGui.QPainter.SmoothPixmapTransform, True)
        scale, (offset_x, offset_y) = self._engine.effective_transform().as_tuple()
        target = QtCore.QRectF(
            offset_x,
            offset_y,
            self._pixmap.width() * scale,
            self._pixmap.height() * scale,
        )
        painter.drawPixmap(target, self._pixmap, QtCore.QRectF(self._pixmap.rect()))
        painter.end()

    # ------------------------------------------------------------------
    # Engine callbacks
    # ------------------------------------------------------------------
    def _create_engine(self, content_size: tuple[float, float]) -> TransformEngine:
        return TransformEngine(
            content_size,
            limits=self._settings.limits(),
            animation_ms=self._settings.animation_ms,
            scroll_tweak=self._settings.scroll_tweak,
            on_transform_changed=self._on_transform_changed,
            request_repaint=self.update,
            request_frame=self._request_frame,
        )

    def _on_transform_changed(self, inverse: Transform) -> None:
        self.transformChanged.emit(inverse)
        scale = 1.0 / inverse.scale
        if self._last_scale is None or abs(scale - self._last_scale) > 1e-9:
            self._last_scale = scale
            self.scaleChanged.emit(scale)

    def _request_frame(self) -> None:
        if self._frame_timer.isActive():
            return
        if not self._frame_clock.isValid():
            self._frame_clock.start()
        self._frame_timer.start()

    def _on_frame(self) -> None:
        engine = self._engine
        if engine is None or not engine.is_animating():
            self._frame_clock.invalidate()
            return
        elapsed = float(self._frame_clock.restart())
        engine.tick(elapsed)
        if not engine.is_animating():
            self._frame_clock.invalidate()

    def _stop_frames(self) -> None:
        self._frame_timer.stop()
        self._frame_clock.invalidate()

    def _sync_viewport(self) -> None:
        # Hidden widgets get their real size in the first resizeEvent after show.
        if self._engine is not None and self.isVisible():
            self._engine.viewport_resized((float(self.width()), float(self.height())))
