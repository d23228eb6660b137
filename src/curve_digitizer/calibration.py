"""
Axis calibration: four clicked anchors plus four declared axis values define an
affine pixel <-> data mapping for each axis independently.

Pixel y grows downward and data y grows upward, so the y pixel span is taken as
(y-min anchor y) - (y-max anchor y).
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from .types import DataPoint, PixelPoint, Region

logger = logging.getLogger(__name__)

DATA_DECIMALS = 4
_DATA_QUANTUM = Decimal(1).scaleb(-DATA_DECIMALS)


def _round_data(v: float) -> float:
    # ties go away from zero, on the exact binary value of v
    return float(Decimal(v).quantize(_DATA_QUANTUM, rounding=ROUND_HALF_UP))


class AnchorRole(Enum):
    X_MIN = ("x_min", "Click on X-axis MINIMUM (left origin)")
    X_MAX = ("x_max", "Click on X-axis MAXIMUM (right end)")
    Y_MIN = ("y_min", "Click on Y-axis MINIMUM (bottom origin)")
    Y_MAX = ("y_max", "Click on Y-axis MAXIMUM (top end)")

    def __init__(self, key: str, label: str):
        self.key = key
        self.label = label


ANCHOR_SEQUENCE: Tuple[AnchorRole, ...] = (
    AnchorRole.X_MIN,
    AnchorRole.X_MAX,
    AnchorRole.Y_MIN,
    AnchorRole.Y_MAX,
)


@dataclass
class AxisValues:
    x_min: float = 0.0
    x_max: float = 60.0
    y_min: float = 0.0
    y_max: float = 1.0


class Calibration:
    """Pixel <-> data transform built anchor by anchor.

    Anchors must be supplied in the order of ``ANCHOR_SEQUENCE``; the role order
    is not checked here. Conversions return ``None`` until all four anchors are
    set, and also when either axis has a zero pixel span.
    """

    def __init__(self, values: Optional[AxisValues] = None):
        self.values = values if values is not None else AxisValues()
        self._anchors: Dict[AnchorRole, PixelPoint] = {}
        self._step = 0
        self._complete = False

    @classmethod
    def from_anchors(
        cls,
        anchors: Sequence[Tuple[float, float]],
        values: Optional[AxisValues] = None,
    ) -> "Calibration":
        """Build a complete calibration from four (x, y) pixels in x-min, x-max, y-min, y-max order."""
        if len(anchors) != len(ANCHOR_SEQUENCE):
            raise ValueError(f"Expected 4 anchors, got {len(anchors)}")
        cal = cls(values)
        for role, (x, y) in zip(ANCHOR_SEQUENCE, anchors):
            cal.set_anchor(role, x, y)
        return cal

    # --- state ---

    @property
    def step(self) -> int:
        return self._step

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def current_role(self) -> Optional[AnchorRole]:
        if self._complete or self._step >= len(ANCHOR_SEQUENCE):
            return None
        return ANCHOR_SEQUENCE[self._step]

    @property
    def anchors(self) -> Dict[AnchorRole, PixelPoint]:
        return dict(self._anchors)

    def set_anchor(self, role: AnchorRole, x: float, y: float) -> None:
        self._anchors[role] = PixelPoint(float(x), float(y))
        self._step += 1
        if self._step >= len(ANCHOR_SEQUENCE):
            self._complete = True
            logger.debug("Calibration complete: %s", self._anchors)

    def add_anchor(self, x: float, y: float) -> Optional[AnchorRole]:
        """Record a click for whichever role is next. Returns that role, or None once complete."""
        role = self.current_role
        if role is None:
            return None
        self.set_anchor(role, x, y)
        return role

    def clear(self) -> None:
        self._anchors = {}
        self._step = 0
        self._complete = False

    # --- geometry ---

    def _has_all_anchors(self) -> bool:
        return self._complete and all(role in self._anchors for role in ANCHOR_SEQUENCE)

    def _spans(self) -> Optional[Tuple[float, float]]:
        if not self._has_all_anchors():
            return None
        x_span = self._anchors[AnchorRole.X_MAX].x - self._anchors[AnchorRole.X_MIN].x
        y_span = self._anchors[AnchorRole.Y_MIN].y - self._anchors[AnchorRole.Y_MAX].y
        if x_span == 0 or y_span == 0:
            return None
        return x_span, y_span

    @property
    def is_degenerate(self) -> bool:
        return self._complete and self._spans() is None

    def pixel_to_data(self, px: float, py: float) -> Optional[DataPoint]:
        spans = self._spans()
        if spans is None:
            return None
        x_span, y_span = spans
        v = self.values
        x = v.x_min + (px - self._anchors[AnchorRole.X_MIN].x) / x_span * (v.x_max - v.x_min)
        y = v.y_min + (self._anchors[AnchorRole.Y_MIN].y - py) / y_span * (v.y_max - v.y_min)
        return DataPoint(_round_data(x), _round_data(y), float(px), float(py))

    def data_to_pixel(self, x: float, y: float) -> Optional[PixelPoint]:
        spans = self._spans()
        if spans is None:
            return None
        v = self.values
        x_range = v.x_max - v.x_min
        y_range = v.y_max - v.y_min
        if x_range == 0 or y_range == 0:
            return None
        x_span, y_span = spans
        px = self._anchors[AnchorRole.X_MIN].x + (x - v.x_min) / x_range * x_span
        py = self._anchors[AnchorRole.Y_MIN].y - (y - v.y_min) / y_range * y_span
        return PixelPoint(px, py)

    def contains(self, x: float, y: float) -> bool:
        v = self.values
        return v.x_min <= x <= v.x_max and v.y_min <= y <= v.y_max

    def bounds(self) -> Optional[Region]:
        """Pixel box spanned by the anchors (float edges widened to whole pixels)."""
        if not self._has_all_anchors():
            return None
        a = self._anchors
        left = min(a[AnchorRole.X_MIN].x, a[AnchorRole.X_MAX].x)
        right = max(a[AnchorRole.X_MIN].x, a[AnchorRole.X_MAX].x)
        top = min(a[AnchorRole.Y_MIN].y, a[AnchorRole.Y_MAX].y)
        bottom = max(a[AnchorRole.Y_MIN].y, a[AnchorRole.Y_MAX].y)
        return Region(int(math.floor(left)), int(math.floor(top)),
                      int(math.ceil(right)), int(math.ceil(bottom)))
