from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Color:
    """8-bit RGB triple."""
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        def _c(v: int) -> int:
            return max(0, min(255, int(v)))
        return f"#{_c(self.r):02x}{_c(self.g):02x}{_c(self.b):02x}"

    @classmethod
    def from_hex(cls, hex_color: str) -> "Color":
        s = hex_color.strip().lstrip("#")
        if len(s) != 6:
            raise ValueError(f"Expected a #rrggbb colour, got {hex_color!r}")
        r, g, b = (int(s[i:i + 2], 16) for i in (0, 2, 4))
        return cls(r, g, b)

    def as_tuple(self):
        return self.r, self.g, self.b


@dataclass(frozen=True)
class PixelPoint:
    x: float
    y: float


@dataclass(frozen=True)
class DataPoint:
    """Calibrated point; (px, py) is the pixel it was resolved from."""
    x: float
    y: float
    px: float
    py: float


@dataclass(frozen=True)
class Region:
    """Axis-aligned rectangle in pixel coords (x0,y0) inclusive, (x1,y1) exclusive."""
    x0: int
    y0: int
    x1: int
    y1: int

    def clip(self, w: int, h: int) -> "Region":
        x0 = max(0, min(self.x0, w))
        x1 = max(0, min(self.x1, w))
        y0 = max(0, min(self.y0, h))
        y1 = max(0, min(self.y1, h))
        if x1 < x0:
            x0, x1 = x1, x0
        if y1 < y0:
            y0, y1 = y1, y0
        return Region(x0, y0, x1, y1)

    @property
    def w(self) -> int:
        return max(0, self.x1 - self.x0)

    @property
    def h(self) -> int:
        return max(0, self.y1 - self.y0)


@dataclass
class ColorCluster:
    color: Color
    count: int


@dataclass
class DetectedCurve:
    color: Color
    points: List[DataPoint] = field(default_factory=list)
    pixel_count: int = 0

    @property
    def hex_color(self) -> str:
        return self.color.hex
