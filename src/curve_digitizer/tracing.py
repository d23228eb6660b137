from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

import numpy as np

from .colors import match_mask
from .config import DetectionConfig
from .raster import Raster
from .types import Color, PixelPoint, Region

logger = logging.getLogger(__name__)


def find_pixels_matching_color(
    raster: Raster,
    region: Region,
    target: Color,
    tolerance: float = 30,
    sample_stride: int = 2,
) -> List[PixelPoint]:
    """Stride-sampled scan of ``region``; returns matching pixels in row-major order."""
    xs, ys, pixels = raster.sample_grid(region, sample_stride)
    if pixels.size == 0:
        return []
    rows, cols = np.nonzero(match_mask(pixels, target, tolerance))
    return [PixelPoint(int(xs[c]), int(ys[r])) for r, c in zip(rows.tolist(), cols.tolist())]


def trace_curve(pixels: Sequence[PixelPoint], bin_width: int = 3) -> List[PixelPoint]:
    """
    Reduce a blob of same-coloured pixels to one point per x bin.

    Pixels are grouped by floor(x / bin_width) * bin_width; each bin yields
    (bin_start + bin_width / 2, median y), where the median is the element at
    n // 2 of the ascending y values. Output is ordered by ascending x.
    """
    bins: Dict[float, List[float]] = defaultdict(list)
    for p in pixels:
        bin_x = math.floor(p.x / bin_width) * bin_width
        bins[bin_x].append(p.y)

    points: List[PixelPoint] = []
    for bin_x in sorted(bins):
        ys = sorted(bins[bin_x])
        points.append(PixelPoint(bin_x + bin_width / 2.0, ys[len(ys) // 2]))
    return points


def smooth(
    points: Sequence[PixelPoint],
    slope_factor: float = 2.0,
    offset: float = 20.0,
) -> List[PixelPoint]:
    """
    Single outlier pass: an interior point whose y is further than
    |dx| * slope_factor + offset from the mean of its two neighbours is pulled
    onto that mean. Neighbours are always read from the input, endpoints are
    kept, and the point count never changes.
    """
    if len(points) < 3:
        return list(points)

    out = [points[0]]
    for i in range(1, len(points) - 1):
        prev, cur, nxt = points[i - 1], points[i], points[i + 1]
        avg_y = (prev.y + nxt.y) / 2.0
        max_jump = abs(nxt.x - prev.x) * slope_factor
        if abs(cur.y - avg_y) > max_jump + offset:
            out.append(PixelPoint(cur.x, avg_y))
        else:
            out.append(cur)
    out.append(points[-1])
    return out


def simplify(points: Sequence[PixelPoint], target_count: int = 50) -> List[PixelPoint]:
    """
    Stride-subsample down to at most ``target_count`` points, always keeping the
    last one. The stride starts at len // target_count and is widened until the
    forced final point still fits.
    """
    n = len(points)
    if n <= target_count:
        return list(points)
    if target_count <= 1:
        return [points[-1]] if target_count == 1 else []

    step = max(1, n // target_count)
    while True:
        picked = list(points[::step])
        if (n - 1) % step != 0:
            picked.append(points[-1])
        if len(picked) <= target_count:
            return picked
        step += 1


def trace_color(
    raster: Raster,
    region: Region,
    target: Color,
    cfg: Optional[DetectionConfig] = None,
) -> List[PixelPoint]:
    """
    Match, bin and de-spike the curve drawn in ``target``.

    Returns [] when fewer than ``cfg.min_points`` pixels match. The result is
    not simplified.
    """
    cfg = cfg or DetectionConfig()
    matching = find_pixels_matching_color(
        raster, region, target, tolerance=cfg.color_tolerance, sample_stride=cfg.sample_stride
    )
    if len(matching) < cfg.min_points:
        logger.debug("Colour %s: only %d matching pixels, no curve", target.hex, len(matching))
        return []

    traced = trace_curve(matching, bin_width=cfg.bin_width)
    return smooth(traced, slope_factor=cfg.smooth_slope_factor, offset=cfg.smooth_offset)
