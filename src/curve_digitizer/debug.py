from __future__ import annotations

from typing import List, Optional, Sequence

import cv2
import numpy as np

from .calibration import Calibration
from .raster import Raster
from .types import DataPoint, DetectedCurve


def make_debug_overlay(raster: Raster, calibration: Calibration, curves: List[DetectedCurve]) -> np.ndarray:
    """Draw the calibrated box and each traced curve (at its source pixels) on a BGR copy."""
    overlay = cv2.cvtColor(np.ascontiguousarray(raster.array), cv2.COLOR_RGB2BGR)

    box = calibration.bounds()
    if box is not None:
        cv2.rectangle(overlay, (box.x0, box.y0), (box.x1, box.y1), (0, 255, 255), 1)

    for c in curves:
        if len(c.points) < 2:
            continue
        pts = np.array([[int(round(p.px)), int(round(p.py))] for p in c.points], dtype=np.int32)
        cv2.polylines(overlay, [pts.reshape(-1, 1, 2)], isClosed=False, color=(0, 0, 255), thickness=1)
        for x, y in pts:
            cv2.circle(overlay, (int(x), int(y)), 2, (0, 0, 0), -1)

    return overlay


def save_debug_overlay(path: str, overlay_bgr: np.ndarray) -> None:
    cv2.imwrite(path, overlay_bgr)


def curves_to_csv_rows(curves: List[DetectedCurve], names: Optional[Sequence[str]] = None) -> List[dict]:
    rows = []
    for i, c in enumerate(curves):
        name = names[i] if names is not None else f"Curve {i + 1}"
        rows.extend(points_to_csv_rows(c.points, name))
    return rows


def points_to_csv_rows(points: List[DataPoint], name: str) -> List[dict]:
    return [{"Time": p.x, "Value": p.y, "Curve": name} for p in points]
