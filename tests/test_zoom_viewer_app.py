from __future__ import annotations

import os
from types import SimpleNamespace

import pytest

pytest.importorskip("PyQt5")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt5 import QtCore, QtGui, QtWidgets

from zoom_viewer import main as viewer_main
from zoom_viewer.config import DEFAULT_SETTINGS
from zoom_viewer.ui.app import ZoomViewerWindow


_APP = None


def qapp():
    global _APP
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    _APP = app
    return app


def _fake_app():
    remembered = []
    return SimpleNamespace(
        settings=DEFAULT_SETTINGS,
        last_image_path=lambda: None,
        remember_image_path=remembered.append,
        remembered=remembered,
    )


def test_open_image_shows_image_and_remembers_path(tmp_path) -> None:
    _ = qapp()
    path = tmp_path / "sample.png"
    image = QtGui.QImage(40, 20, QtGui.QImage.Format_RGB32)
    image.fill(QtGui.QColor("black"))
    assert image.save(str(path))
    app = _fake_app()
    window = ZoomViewerWindow(app)

    assert window.open_image(path)

    assert window.viewer.has_image()
    assert app.remembered == [path]
    assert "sample.png" in window.windowTitle()


def test_open_image_failure_warns(tmp_path, monkeypatch) -> None:
    _ = qapp()
    warnings = []
    monkeypatch.setattr(
        QtWidgets.QMessageBox, "warning", lambda *args, **kwargs: warnings.append(args)
    )
    window = ZoomViewerWindow(_fake_app())

    assert not window.open_image(tmp_path / "missing.png")

    assert warnings
    assert not window.viewer.has_image()


def test_content_point_uses_reported_inverse() -> None:
    _ = qapp()
    window = ZoomViewerWindow(_fake_app())
    assert window.content_point((10.0, 10.0)) is None

    viewer = window.viewer
    viewer.set_image(QtGui.QImage(200, 100, QtGui.QImage.Format_RGB32))
    viewer.resizeEvent(QtGui.QResizeEvent(QtCore.QSize(100, 100), QtCore.QSize()))

    assert window.content_point((50.0, 75.0)) == pytest.approx((100.0, 100.0))


def test_parse_args_defaults_and_debug(monkeypatch) -> None:
    monkeypatch.delenv("ZOOM_VIEWER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("ZOOM_VIEWER_LOG_PATH", raising=False)
    args = viewer_main.parse_args([])
    assert args.image is None
    assert args.log_level == "INFO"
    assert args.log_file is None
    assert not args.debug
    assert not args.reopen

    args = viewer_main.parse_args(["photo.png", "--debug"])
    assert args.image == "photo.png"
    assert args.debug


def test_configure_logging_defaults_log_path(monkeypatch, tmp_path) -> None:
    calls = []
    monkeypatch.setattr(viewer_main.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr(viewer_main.sys, "argv", [str(tmp_path / "zoom_viewer.py")])
    monkeypatch.setattr(viewer_main.logging, "FileHandler", lambda *args, **kwargs: args)

    log_path = viewer_main.configure_logging("debug", None)

    assert log_path == os.path.join(str(tmp_path), "zoom_viewer_log.txt")
    assert calls[0]["level"] == viewer_main.logging.DEBUG


def test_startup_image_prefers_command_line_then_reopen(tmp_path) -> None:
    last = tmp_path / "last.png"
    app = SimpleNamespace(last_image_path=lambda: last)

    args = viewer_main.parse_args(["photo.png", "--reopen"])
    assert viewer_main.startup_image(args, app) == viewer_main.Path("photo.png")

    assert viewer_main.startup_image(viewer_main.parse_args(["--reopen"]), app) == last
    assert viewer_main.startup_image(viewer_main.parse_args([]), app) is None


def test_configure_logging_warns_on_unknown_level(monkeypatch, tmp_path, caplog) -> None:
    calls = []
    monkeypatch.setattr(viewer_main.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr(viewer_main.logging, "FileHandler", lambda *args, **kwargs: args)

    with caplog.at_level(viewer_main.logging.WARNING, logger=viewer_main.logger.name):
        viewer_main.configure_logging("chatty", str(tmp_path / "viewer.log"))

    assert calls[0]["level"] == viewer_main.logging.INFO
    assert "Unknown log level 'chatty'" in caplog.text
