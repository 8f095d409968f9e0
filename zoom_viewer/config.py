"""Configuration helpers for zoom viewer settings persistence."""
from __future__ import annotations

from configparser import ConfigParser, Error
from dataclasses import dataclass, fields
import logging
import math
import os
from pathlib import Path
import sys
from typing import Optional

from zoom_viewer.geometry.constraints import (
    DEFAULT_MAX_SCALE,
    DEFAULT_MIN_SCALE,
    ZoomLimits,
)
from zoom_viewer.preview.animation import DEFAULT_ANIMATION_MS
from zoom_viewer.preview.engine import DEFAULT_SCROLL_TWEAK

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "zoom_viewer.ini"
_ZOOM_SECTION = "zoom"
_PATHS_SECTION = "paths"
_LAST_IMAGE_KEY = "last_image"


@dataclass(frozen=True)
class ZoomSettings:
    min_scale: float = DEFAULT_MIN_SCALE
    max_scale: float = DEFAULT_MAX_SCALE
    scroll_tweak: float = DEFAULT_SCROLL_TWEAK
    animation_ms: float = DEFAULT_ANIMATION_MS

    def limits(self) -> ZoomLimits:
        return ZoomLimits(min_scale=self.min_scale, max_scale=self.max_scale)


DEFAULT_SETTINGS = ZoomSettings()


def _config_dir(main_script_path: Optional[Path]) -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    if main_script_path is not None:
        return main_script_path.resolve().parent
    main_module = sys.modules.get("__main__")
    if main_module and getattr(main_module, "__file__", None):
        return Path(main_module.__file__).resolve().parent
    return Path.cwd()


def config_path(main_script_path: Optional[Path]) -> Path:
    return _config_dir(main_script_path) / CONFIG_FILENAME


def _read_config(ini_path: Path) -> Optional[ConfigParser]:
    parser = ConfigParser()
    parser.optionxform = str
    try:
        with ini_path.open("r", encoding="utf-8") as handle:
            parser.read_file(handle)
    except (OSError, Error):
        logger.warning("Could not read settings file %s", ini_path, exc_info=True)
        return None
    return parser


def _write_config(parser: ConfigParser, ini_path: Path) -> None:
    try:
        with ini_path.open("w", encoding="utf-8") as handle:
            parser.write(handle)
            handle.flush()
            os.fsync(handle.fileno())
    except OSError:
        logger.warning("Could not write settings file %s", ini_path, exc_info=True)


def _positive_float(raw: str | None, fallback: float, key: str) -> float:
    if raw is None:
        return fallback
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", key, raw)
        return fallback
    if not math.isfinite(value) or value <= 0:
        logger.warning("Ignoring out-of-range %s=%r", key, raw)
        return fallback
    return value


def load_zoom_settings(main_script_path: Optional[Path]) -> ZoomSettings:
    ini_path = config_path(main_script_path)
    if not ini_path.exists():
        return DEFAULT_SETTINGS
    parser = _read_config(ini_path)
    if parser is None or not parser.has_section(_ZOOM_SECTION):
        return DEFAULT_SETTINGS
    section = parser[_ZOOM_SECTION]
    values = {
        field.name: _positive_float(
            section.get(field.name), getattr(DEFAULT_SETTINGS, field.name), field.name
        )
        for field in fields(ZoomSettings)
    }
    if values["min_scale"] > values["max_scale"]:
        logger.warning(
            "min_scale %s exceeds max_scale %s; using default limits",
            values["min_scale"],
            values["max_scale"],
        )
        values["min_scale"] = DEFAULT_SETTINGS.min_scale
        values["max_scale"] = DEFAULT_SETTINGS.max_scale
    return ZoomSettings(**values)


def load_last_image_path(main_script_path: Optional[Path]) -> Optional[Path]:
    ini_path = config_path(main_script_path)
    if not ini_path.exists():
        return None
    parser = _read_config(ini_path)
    if parser is None:
        return None
    stored_path = parser.get(_PATHS_SECTION, _LAST_IMAGE_KEY, fallback=None)
    if not stored_path:
        return None
    candidate = Path(stored_path)
    return candidate if candidate.is_file() else None


def save_last_image_path(image_path: Path, main_script_path: Optional[Path]) -> None:
    ini_path = config_path(main_script_path)
    parser = ConfigParser()
    parser.optionxform = str
    if ini_path.exists():
        existing = _read_config(ini_path)
        if existing is None:
            return
        parser = existing
    parser[_PATHS_SECTION] = {_LAST_IMAGE_KEY: str(image_path)}
    _write_config(parser, ini_path)
