"""Tests for settings — persisted render settings with default fallback."""
import json
import os
import tempfile
import unittest

from config import COMPACT_ROW_LIMIT, DEFAULT_COMPRESSION, DEFAULT_THEME
from settings import RenderSettings, load_settings, save_settings


class TestRenderSettings(unittest.TestCase):
    def test_defaults(self):
        s = RenderSettings()
        self.assertEqual(s.theme, DEFAULT_THEME)
        self.assertEqual(s.compression, DEFAULT_COMPRESSION)
        self.assertEqual(s.compact_row_limit, COMPACT_ROW_LIMIT)

    def test_unknown_theme_falls_back(self):
        with self.assertLogs("MatrixViewer.Settings", level="WARNING"):
            s = RenderSettings(theme="neon")
        self.assertEqual(s.theme, "iridis")

    def test_invalid_numbers_fall_back(self):
        s = RenderSettings(compact_row_limit=0, image_scale=-1, row_height_px=0)
        self.assertEqual(s.compact_row_limit, COMPACT_ROW_LIMIT)
        self.assertGreater(s.image_scale, 0)
        self.assertGreater(s.row_height_px, 0)

    def test_from_dict_ignores_unknown_keys(self):
        s = RenderSettings.from_dict({"theme": "viridis", "colour": "red"})
        self.assertEqual(s.theme, "viridis")


class TestPersistence(unittest.TestCase):
    def test_round_trip(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "render_settings.json")
            self.assertTrue(save_settings(RenderSettings(theme="grayscale", compression="log"), path))
            loaded = load_settings(path)
            self.assertEqual(loaded.theme, "grayscale")
            self.assertEqual(loaded.compression, "log")

    def test_missing_file(self):
        self.assertEqual(load_settings("/nonexistent/render_settings.json"), RenderSettings())

    def test_corrupt_file(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "render_settings.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            with self.assertLogs("MatrixViewer.Settings", level="WARNING"):
                self.assertEqual(load_settings(path), RenderSettings())

    def test_wrong_shape(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "render_settings.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump(["iridis"], f)
            with self.assertLogs("MatrixViewer.Settings", level="WARNING"):
                self.assertEqual(load_settings(path), RenderSettings())

    def test_save_to_unwritable_path(self):
        with self.assertLogs("MatrixViewer.Settings", level="WARNING"):
            self.assertFalse(save_settings(RenderSettings(), "/nonexistent/dir/settings.json"))


if __name__ == "__main__":
    unittest.main()
