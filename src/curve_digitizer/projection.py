from __future__ import annotations

from typing import List, Sequence

from .calibration import Calibration
from .types import DataPoint, PixelPoint


def project(points: Sequence[PixelPoint], calibration: Calibration) -> List[DataPoint]:
    """
    Map traced pixels into data space.

    Points the calibration cannot convert, or that land outside the declared
    axis ranges (typically where a curve meets an axis), are dropped. Input
    order is preserved.
    """
    out: List[DataPoint] = []
    for p in points:
        d = calibration.pixel_to_data(p.x, p.y)
        if d is None or not calibration.contains(d.x, d.y):
            continue
        out.append(d)
    return out
