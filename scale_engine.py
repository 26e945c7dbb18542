"""
Scale Engine
============
Maps a count and the matrix maximum to a colour bucket and a bubble size.

Bucket assignment is theme-independent: a theme only supplies the five
bucket colours. Zero counts are EMPTY, painted white and never given a
bucket colour or a bubble.

Compression:
    linear  score = n = value / max
    log     score = max(n, log10(1 + 9n))  lifts low and mid values
    auto    log when the maximum is an outlier, linear otherwise
"""

import enum
import logging
import math
from typing import Iterable, Tuple

import numpy as np

from config import (
    BUBBLE_MAX_SIZE, BUBBLE_MIN_SIZE, BUBBLE_SIZE_K, BUCKET_THRESHOLDS,
    COLOR_THEMES, COMPRESSION_MODES, DEFAULT_COMPRESSION, DEFAULT_THEME,
    EMPTY_COLOR, OUTLIER_RATIO,
)

logger = logging.getLogger("MatrixViewer.Scale")


class ScaleBucket(enum.IntEnum):
    """Intensity buckets, ordered by severity (EMPTY < LOWEST < ... < HIGHEST)."""
    EMPTY = 0
    LOWEST = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    HIGHEST = 5


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    h = hex_color.lstrip('#')
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def has_outlier(values: Iterable[int], ratio: float = OUTLIER_RATIO) -> bool:
    """True when the largest distinct count is >= *ratio* x the next one."""
    distinct = np.unique(np.fromiter((v for v in values if v > 0), dtype=np.int64))
    if len(distinct) < 2:
        return False
    return bool(distinct[-1] >= ratio * distinct[-2])


class ScaleEngine:
    """Bucket, size and colour mapping shared by screen and export paths.

    Args:
        theme: key of ``config.COLOR_THEMES``
        compression: 'log' or 'linear' ('auto' must be resolved first,
            see ``for_values``)
        min_size / max_size / size_k: bubble radius parameters in pixels
    """

    def __init__(self, theme=DEFAULT_THEME, compression="log",
                 min_size=BUBBLE_MIN_SIZE, max_size=BUBBLE_MAX_SIZE, size_k=BUBBLE_SIZE_K):
        if theme not in COLOR_THEMES:
            raise ValueError(f"Unknown colour theme {theme!r}")
        if compression not in ("log", "linear"):
            raise ValueError(f"Unresolved compression mode {compression!r}")
        if min_size <= 0 or max_size < min_size:
            raise ValueError("Bubble sizes must satisfy 0 < min_size <= max_size")
        self.theme = theme
        self.compression = compression
        self.min_size = float(min_size)
        self.max_size = float(max_size)
        self.size_k = float(size_k)

    @classmethod
    def for_values(cls, values: Iterable[int], theme=DEFAULT_THEME,
                   compression=DEFAULT_COMPRESSION, **size_kwargs) -> "ScaleEngine":
        """Resolve 'auto' compression against a matrix's counts."""
        if compression not in COMPRESSION_MODES:
            raise ValueError(f"Unknown compression mode {compression!r}")
        if compression == "auto":
            compression = "log" if has_outlier(values) else "linear"
            logger.debug("Auto compression resolved to %s", compression)
        return cls(theme=theme, compression=compression, **size_kwargs)

    def with_theme(self, theme) -> "ScaleEngine":
        """Same bucketing and sizing, different colours."""
        return ScaleEngine(theme, self.compression, self.min_size, self.max_size, self.size_k)

    # ------------------------------------------------------------------
    # Bucketing
    # ------------------------------------------------------------------

    def score(self, value, max_value) -> float:
        """Normalized (and possibly compressed) intensity in [0, 1]."""
        max_value = max(int(max_value or 0), 1)
        n = min(max(value, 0) / max_value, 1.0)
        if self.compression == "log":
            return max(n, math.log(1 + 9 * n) / math.log(10))
        return n

    def bucket(self, value, max_value) -> ScaleBucket:
        if value is None or value <= 0:
            return ScaleBucket.EMPTY
        score = self.score(value, max_value)
        for threshold, name in BUCKET_THRESHOLDS:
            if score >= threshold:
                return ScaleBucket[name]
        return ScaleBucket.LOWEST

    # ------------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------------

    def size(self, value) -> float:
        """Bubble radius in pixels; 0 for zero counts."""
        if value is None or value <= 0:
            return 0.0
        raw = self.min_size + self.size_k * math.log1p(value)
        return min(self.max_size, max(self.min_size, raw))

    # ------------------------------------------------------------------
    # Colours
    # ------------------------------------------------------------------

    def color_hex(self, bucket: ScaleBucket) -> str:
        if bucket is ScaleBucket.EMPTY:
            return EMPTY_COLOR
        return COLOR_THEMES[self.theme][bucket.name]

    def color(self, bucket: ScaleBucket) -> Tuple[int, int, int]:
        return hex_to_rgb(self.color_hex(bucket))

    def text_color(self, bucket: ScaleBucket) -> str:
        """Black or white, whichever reads on the bucket fill."""
        r, g, b = self.color(bucket)
        luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
        return "#000000" if luminance > 0.55 else "#FFFFFF"

    def legend(self):
        """(bucket, hex colour) pairs from HIGHEST to LOWEST."""
        return [(b, self.color_hex(b)) for b in sorted(ScaleBucket, reverse=True)
                if b is not ScaleBucket.EMPTY]
