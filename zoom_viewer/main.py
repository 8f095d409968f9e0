"""Command-line entry point for the pan/zoom image viewer.

Opens a window showing one image fitted to the viewport. Drag pans, the
wheel zooms around the cursor, and the toolbar offers Fit, 100% and stepped
zoom. Logging goes to stdout and to a log file; the level and file can also
come from ``ZOOM_VIEWER_LOG_LEVEL`` and ``ZOOM_VIEWER_LOG_PATH``.
"""

import argparse
import logging
import os
from pathlib import Path
import sys
from typing import Optional

# ensure repo root on path for local runs
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from zoom_viewer.ui.app import ZoomViewerApp, ZoomViewerWindow  # noqa: E402

logger = logging.getLogger(__name__)

LOG_FILENAME = "zoom_viewer_log.txt"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="zoom-viewer",
        description=(
            "View an image with drag-to-pan, wheel zoom around the cursor and "
            "fit-to-window."
        ),
    )
    parser.add_argument(
        "image",
        nargs="?",
        help="Image file to show on startup (PNG, JPEG, BMP, GIF or TIFF).",
    )
    parser.add_argument(
        "--reopen",
        action="store_true",
        help=(
            "Show the image opened last time when no IMAGE is given. The path "
            "is stored under [paths] in zoom_viewer.ini."
        ),
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("ZOOM_VIEWER_LOG_LEVEL", "INFO"),
        help=(
            "Logging level name. DEBUG also logs zoom requests and mode "
            "changes of the view. Defaults to $ZOOM_VIEWER_LOG_LEVEL or INFO."
        ),
    )
    parser.add_argument(
        "--log-file",
        default=os.getenv("ZOOM_VIEWER_LOG_PATH"),
        help=(
            f"File the log is appended to. Defaults to $ZOOM_VIEWER_LOG_PATH or "
            f"{LOG_FILENAME} next to the launched script."
        ),
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Same as --log-level DEBUG.",
    )
    return parser.parse_args(argv)


def configure_logging(log_level_name: str, log_path: str | None) -> str:
    """Log to stdout and ``log_path``; return the log file actually used.

    An unknown level name falls back to INFO with a warning.
    """
    resolved_level_name = log_level_name.upper()
    log_level = getattr(logging, resolved_level_name, None)
    known_level = isinstance(log_level, int)
    if not known_level:
        log_level = logging.INFO

    if not log_path:
        base_dir = os.path.dirname(sys.argv[0])
        log_path = os.path.join(base_dir, LOG_FILENAME)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode="a", encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
    )
    if not known_level:
        logger.warning("Unknown log level %r; using INFO", log_level_name)

    return log_path


def startup_image(args: argparse.Namespace, app: ZoomViewerApp) -> Optional[Path]:
    """Pick the image to show first: the command-line one, else the last one with ``--reopen``."""
    if args.image:
        return Path(args.image)
    if args.reopen:
        return app.last_image_path()
    return None


def main() -> None:
    args = parse_args()
    log_level_name = "DEBUG" if args.debug else args.log_level
    log_path = configure_logging(log_level_name, args.log_file)
    logger.info("Starting Zoom Viewer (log level %s, log file %s)", log_level_name.upper(), log_path)

    app = ZoomViewerApp(sys.argv, main_script_path=Path(__file__).resolve())
    window = ZoomViewerWindow(app)
    app.window = window
    window.show()
    image_path = startup_image(args, app)
    if image_path is not None:
        logger.info("Opening %s", image_path)
        window.open_image(image_path)

    def cleanup() -> None:
        try:
            if window:
                window.close()
        except Exception:  # pragma: no cover - best effort
            logger.exception("Unexpected error while closing window")

    app.aboutToQuit.connect(cleanup)
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
