"""
Colour similarity and curve-colour discovery.

Curve colours are found by sampling the plot region, discarding background /
axis / gridline colours, quantising what remains into coarse RGB buckets and
merging buckets that are visually the same colour.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from .raster import Raster
from .types import Color, ColorCluster, Region

logger = logging.getLogger(__name__)

WHITE_BRIGHTNESS = 240
BLACK_BRIGHTNESS = 15
GRAY_MAX_SPREAD = 20
GRAY_MIN_BRIGHTNESS = 100


def colors_match(a: Optional[Color], b: Optional[Color], tolerance: float) -> bool:
    if a is None or b is None:
        return False
    diff = abs(a.r - b.r) + abs(a.g - b.g) + abs(a.b - b.b)
    return diff <= tolerance * 3


def match_mask(pixels: np.ndarray, target: Color, tolerance: float) -> np.ndarray:
    """Vectorised colors_match over an [..., 3] int array."""
    t = np.array(target.as_tuple(), dtype=np.int32)
    diff = np.abs(pixels.astype(np.int32) - t).sum(axis=-1)
    return diff <= tolerance * 3


def is_background_or_axis_color(c: Optional[Color]) -> bool:
    if c is None:
        return True
    brightness = (c.r + c.g + c.b) / 3.0
    if brightness > WHITE_BRIGHTNESS or brightness < BLACK_BRIGHTNESS:
        return True
    spread = max(abs(c.r - c.g), abs(c.g - c.b), abs(c.r - c.b))
    return spread < GRAY_MAX_SPREAD and brightness > GRAY_MIN_BRIGHTNESS


def background_mask(pixels: np.ndarray) -> np.ndarray:
    """Vectorised is_background_or_axis_color over an [..., 3] int array."""
    p = pixels.astype(np.int32)
    r, g, b = p[..., 0], p[..., 1], p[..., 2]
    brightness = (r + g + b) / 3.0
    spread = np.maximum(np.maximum(np.abs(r - g), np.abs(g - b)), np.abs(r - b))
    extreme = (brightness > WHITE_BRIGHTNESS) | (brightness < BLACK_BRIGHTNESS)
    gray = (spread < GRAY_MAX_SPREAD) & (brightness > GRAY_MIN_BRIGHTNESS)
    return extreme | gray


def _round_half_up(v):
    return np.floor(np.asarray(v, dtype=np.float64) + 0.5).astype(np.int64)


def quantize(c: Color, step: int = 16) -> Color:
    r, g, b = (int(v) * step for v in _round_half_up(np.array(c.as_tuple()) / float(step)))
    return Color(r, g, b)


def merge_similar_clusters(clusters: Sequence[ColorCluster], tolerance: float) -> List[ColorCluster]:
    """
    Greedily fold similar clusters together.

    Clusters are visited in the given order; each unabsorbed cluster absorbs every
    later-or-earlier unabsorbed cluster whose colour matches its own. Absorbed
    clusters are never candidates again, so merging is not chained through them.
    The merged colour is the count-weighted mean; total count is preserved.
    """
    used = [False] * len(clusters)
    merged: List[ColorCluster] = []
    for i, base in enumerate(clusters):
        if used[i]:
            continue
        used[i] = True
        total = base.count
        acc = np.array(base.color.as_tuple(), dtype=np.int64) * base.count
        for j, other in enumerate(clusters):
            if used[j] or not colors_match(base.color, other.color, tolerance):
                continue
            used[j] = True
            total += other.count
            acc += np.array(other.color.as_tuple(), dtype=np.int64) * other.count
        if total > 0:
            r, g, b = (int(v) for v in _round_half_up(acc / float(total)))
        else:
            r, g, b = base.color.as_tuple()
        merged.append(ColorCluster(Color(r, g, b), int(total)))
    return merged


def count_quantized_colors(
    raster: Raster,
    region: Region,
    sample_stride: int = 3,
    quantize_step: int = 16,
) -> List[ColorCluster]:
    """Histogram of quantised non-background colours, in first-seen (row-major) order."""
    _, _, pixels = raster.sample_grid(region, sample_stride)
    flat = pixels.reshape(-1, 3)
    if flat.size == 0:
        return []
    flat = flat[~background_mask(flat)]
    if flat.size == 0:
        return []

    q = _round_half_up(flat / float(quantize_step)) * quantize_step
    uniq, first_idx, counts = np.unique(q, axis=0, return_index=True, return_counts=True)
    order = np.argsort(first_idx, kind="stable")
    return [
        ColorCluster(Color(*(int(v) for v in uniq[k])), int(counts[k]))
        for k in order
    ]


def discover_clusters(
    raster: Raster,
    region: Region,
    sample_stride: int = 3,
    min_pixel_count: int = 20,
    max_clusters: int = 8,
    tolerance: float = 30,
    quantize_step: int = 16,
) -> List[ColorCluster]:
    """
    Find candidate curve colours inside ``region``.

    Returns at most ``max_clusters`` clusters sorted by descending pixel count;
    an empty list means no curve colours were found.
    """
    counted = count_quantized_colors(raster, region, sample_stride, quantize_step)
    significant = [c for c in counted if c.count >= min_pixel_count]
    significant.sort(key=lambda c: c.count, reverse=True)

    merged = merge_similar_clusters(significant, tolerance)
    merged.sort(key=lambda c: c.count, reverse=True)

    logger.debug(
        "Colour discovery: %d quantised colours, %d significant, %d after merge",
        len(counted), len(significant), len(merged),
    )
    return merged[:max_clusters]
