"""Application wiring for the zoom viewer."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from PyQt5 import QtGui, QtWidgets

from zoom_viewer import config as viewer_config
from zoom_viewer.geometry.transform import Point, Transform
from zoom_viewer.ui.zoom_image_widget import ZoomImageWidget

logger = logging.getLogger(__name__)

ZOOM_STEP = 1.25
IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.gif *.tif *.tiff);;All files (*)"


class ZoomViewerApp(QtWidgets.QApplication):
    """Thin wrapper that stores shared state for the viewer."""

    def __init__(self, argv: List[str], main_script_path: Optional[Path] = None):
        super().__init__(argv)
        self.setQuitOnLastWindowClosed(True)
        self._main_script_path = main_script_path
        self.settings = viewer_config.load_zoom_settings(self._main_script_path)
        self.window: Optional["ZoomViewerWindow"] = None

    def last_image_path(self) -> Optional[Path]:
        return viewer_config.load_last_image_path(self._main_script_path)

    def remember_image_path(self, path: Path) -> None:
        viewer_config.save_last_image_path(path, self._main_script_path)


class ZoomViewerWindow(QtWidgets.QMainWindow):
    def __init__(self, app: ZoomViewerApp) -> None:
        super().__init__()
        self.app = app
        self.setWindowTitle("Zoom Viewer")
        self.resize(1000, 700)

        self.viewer = ZoomImageWidget(self, settings=app.settings)
        self.setCentralWidget(self.viewer)
        self._inverse: Transform | None = None
        self._scale_label = QtWidgets.QLabel("")
        self._cursor_label = QtWidgets.QLabel("")
        self.statusBar().addPermanentWidget(self._cursor_label)
        self.statusBar().addPermanentWidget(self._scale_label)

        self.viewer.transformChanged.connect(self._on_transform_changed)
        self.viewer.scaleChanged.connect(self._on_scale_changed)
        self.viewer.cursorMoved.connect(self._on_cursor_moved)

        self._create_menus()
        self._create_toolbar()
        self.statusBar().showMessage("Open an image to get started")

    def _create_menus(self) -> None:
        file_menu = self.menuBar().addMenu("File")
        open_action = QtWidgets.QAction("Open image…", self)
        open_action.setShortcut(QtGui.QKeySequence.Open)
        open_action.triggered.connect(self._choose_image)
        file_menu.addAction(open_action)

        quit_action = QtWidgets.QAction("Quit", self)
        quit_action.triggered.connect(QtWidgets.qApp.quit)
        file_menu.addAction(quit_action)

    def _create_toolbar(self) -> None:
        toolbar = self.addToolBar("View")
        fit_action = QtWidgets.QAction("Fit", self)
        fit_action.triggered.connect(self.viewer.fit_to_window)
        toolbar.addAction(fit_action)

        actual_action = QtWidgets.QAction("100%", self)
        actual_action.triggered.connect(lambda: self.viewer.set_scale(1.0))
        toolbar.addAction(actual_action)

        zoom_in_action = QtWidgets.QAction("Zoom in", self)
        zoom_in_action.setShortcut(QtGui.QKeySequence.ZoomIn)
        zoom_in_action.triggered.connect(lambda: self.viewer.zoom(ZOOM_STEP))
        toolbar.addAction(zoom_in_action)

        zoom_out_action = QtWidgets.QAction("Zoom out", self)
        zoom_out_action.setShortcut(QtGui.QKeySequence.ZoomOut)
        zoom_out_action.triggered.connect(lambda: self.viewer.zoom(1 / ZOOM_STEP))
        toolbar.addAction(zoom_out_action)

    def _choose_image(self) -> None:
        start = self.app.last_image_path()
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Open image",
            str(start.parent) if start is not None else "",
            IMAGE_FILTER,
        )
        if path:
            self.open_image(Path(path))

    def open_image(self, path: Path) -> bool:
        image = QtGui.QImage(str(path))
        if image.isNull():
            logger.warning("Could not load image %s", path)
            QtWidgets.QMessageBox.warning(self, "Open image", f"Could not load {path}")
            return False
        self.viewer.set_image(image)
        self.app.remember_image_path(path)
        self.setWindowTitle(f"Zoom Viewer - {path.name}")
        self.statusBar().showMessage(str(path), 5000)
        return True

    def content_point(self, viewport_point: Point) -> Point | None:
        """Map a viewport point to image coordinates using the last reported transform."""
        if self._inverse is None:
            return None
        return self._inverse.apply(viewport_point)

    def _on_transform_changed(self, inverse: Transform) -> None:
        self._inverse = inverse

    def _on_scale_changed(self, scale: float) -> None:
        self._scale_label.setText(f"{scale * 100:.0f}%")

    def _on_cursor_moved(self, position: Point) -> None:
        point = self.content_point(position)
        if point is None:
            self._cursor_label.clear()
            return
        self._cursor_label.setText(f"x {point[0]:.1f}, y {point[1]:.1f}")
