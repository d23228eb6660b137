from __future__ import annotations

import math
from typing import Optional, Tuple

import cv2
import numpy as np

from .types import Color, Region


class Raster:
    """Read-only RGB pixel buffer with bounds-checked colour lookup."""

    def __init__(self, rgb: np.ndarray):
        rgb = np.asarray(rgb)
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise ValueError(f"raster must be HxWx3 RGB, got shape {rgb.shape}")
        if rgb.dtype != np.uint8:
            rgb = np.clip(rgb, 0, 255).astype(np.uint8)
        rgb = rgb.view()
        rgb.flags.writeable = False
        self._rgb = rgb

    @classmethod
    def from_bgr(cls, img: np.ndarray) -> "Raster":
        """Accept an OpenCV image (grey, BGR or BGRA) and convert to RGB."""
        if img.ndim == 2:
            rgb = cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
        elif img.shape[2] == 4:
            rgb = cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
        else:
            rgb = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
        return cls(rgb)

    @property
    def array(self) -> np.ndarray:
        return self._rgb

    @property
    def width(self) -> int:
        return int(self._rgb.shape[1])

    @property
    def height(self) -> int:
        return int(self._rgb.shape[0])

    def full_region(self) -> Region:
        return Region(0, 0, self.width, self.height)

    def get_color_at(self, x: float, y: float) -> Optional[Color]:
        # round half up, as clicks land on fractional canvas coordinates
        px = int(math.floor(x + 0.5))
        py = int(math.floor(y + 0.5))
        if px < 0 or py < 0 or px >= self.width or py >= self.height:
            return None
        r, g, b = self._rgb[py, px].tolist()
        return Color(r, g, b)

    def sample_grid(self, region: Region, stride: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Stride-sample a region starting at its top-left corner.

        Returns (xs, ys, pixels) where xs/ys are the sampled column/row indices and
        pixels has shape [len(ys), len(xs), 3] (int32 so channel differences don't wrap).
        """
        r = region.clip(self.width, self.height)
        xs = np.arange(r.x0, r.x1, stride, dtype=np.int32)
        ys = np.arange(r.y0, r.y1, stride, dtype=np.int32)
        pixels = self._rgb[r.y0:r.y1:stride, r.x0:r.x1:stride].astype(np.int32)
        return xs, ys, pixels


def load_raster(image_path: str) -> Raster:
    img = cv2.imread(image_path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Could not read image: {image_path}")
    if img.dtype == np.uint16:
        img = (img // 257).astype(np.uint8)
    return Raster.from_bgr(img)
