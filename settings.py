"""
Render Settings
===============
User-adjustable rendering options, persisted across sessions in
``render_settings.json`` next to this module. Missing or unreadable files
fall back to the defaults from ``config.py``.
"""

import os
import json
import logging
from dataclasses import dataclass, asdict, fields

from config import (
    COLOR_THEMES, COLUMN_WIDTH_PX, COMPACT_ROW_LIMIT, COMPRESSION_MODES,
    DEFAULT_COMPRESSION, DEFAULT_IMAGE_SCALE, DEFAULT_THEME, ROW_HEIGHT_PX,
)

logger = logging.getLogger("MatrixViewer.Settings")

SETTINGS_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "render_settings.json")


@dataclass
class RenderSettings:
    """Options passed explicitly into view building and export calls."""
    theme: str = DEFAULT_THEME
    compression: str = DEFAULT_COMPRESSION
    compact_row_limit: int = COMPACT_ROW_LIMIT
    image_scale: float = DEFAULT_IMAGE_SCALE
    row_height_px: int = ROW_HEIGHT_PX
    column_width_px: int = COLUMN_WIDTH_PX

    def __post_init__(self):
        if self.theme not in COLOR_THEMES:
            logger.warning("Unknown theme %r, using %s", self.theme, DEFAULT_THEME)
            self.theme = DEFAULT_THEME
        if self.compression not in COMPRESSION_MODES:
            logger.warning("Unknown compression %r, using %s", self.compression, DEFAULT_COMPRESSION)
            self.compression = DEFAULT_COMPRESSION
        if self.compact_row_limit < 1:
            self.compact_row_limit = COMPACT_ROW_LIMIT
        if self.image_scale <= 0:
            self.image_scale = DEFAULT_IMAGE_SCALE
        if self.row_height_px < 1:
            self.row_height_px = ROW_HEIGHT_PX
        if self.column_width_px < 1:
            self.column_width_px = COLUMN_WIDTH_PX

    @classmethod
    def from_dict(cls, data: dict) -> "RenderSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        return asdict(self)


def load_settings(path: str = SETTINGS_FILE) -> RenderSettings:
    """Load settings from JSON, falling back to defaults."""
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return RenderSettings.from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load render settings: {e}")
    return RenderSettings()


def save_settings(settings: RenderSettings, path: str = SETTINGS_FILE) -> bool:
    """Persist settings to JSON. Returns False when the file cannot be written."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
        return True
    except OSError as e:
        logger.warning(f"Failed to save render settings: {e}")
        return False
