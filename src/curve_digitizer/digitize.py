from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .calibration import AxisValues, Calibration
from .colors import discover_clusters
from .config import DetectionConfig
from .debug import make_debug_overlay
from .projection import project
from .raster import Raster, load_raster
from .tracing import simplify, trace_color
from .types import ColorCluster, DataPoint, DetectedCurve, PixelPoint, Region

logger = logging.getLogger(__name__)


def detect_curve_at(
    raster: Raster,
    x: float,
    y: float,
    calibration: Calibration,
    cfg: Optional[DetectionConfig] = None,
) -> List[DataPoint]:
    """
    Trace the curve whose colour sits under pixel (x, y) across the whole image.

    Returns calibrated points, or [] if the click is off-image, too few pixels
    share its colour, or nothing lands inside the calibrated ranges.
    """
    cfg = (cfg or DetectionConfig()).validate()
    target = raster.get_color_at(x, y)
    if target is None:
        return []

    traced = trace_color(raster, raster.full_region(), target, cfg)
    if not traced:
        return []

    simplified = simplify(traced, cfg.click_target_points)
    points = project(simplified, calibration)
    logger.info(
        "Traced %s from (%.1f, %.1f): %d binned, %d kept, %d in range",
        target.hex, x, y, len(traced), len(simplified), len(points),
    )
    return points


def _trace_cluster(
    raster: Raster,
    region: Region,
    cluster: ColorCluster,
    cfg: DetectionConfig,
) -> List[PixelPoint]:
    traced = trace_color(raster, region, cluster.color, cfg)
    if len(traced) < cfg.min_points:
        return []
    return simplify(traced, cfg.auto_target_points)


def detect_all_curves(
    raster: Raster,
    calibration: Calibration,
    cfg: Optional[DetectionConfig] = None,
    region: Optional[Region] = None,
) -> List[DetectedCurve]:
    """
    Discover every curve colour inside the calibrated box and trace each one.

    Returns curves sorted by descending pixel count (most prominent first); []
    when the calibration is incomplete or no curve colours are found.
    """
    cfg = (cfg or DetectionConfig()).validate()
    if region is None:
        region = calibration.bounds()
        if region is None:
            return []
    region = region.clip(raster.width, raster.height)

    clusters = discover_clusters(
        raster,
        region,
        sample_stride=cfg.cluster_sample_stride,
        min_pixel_count=cfg.min_cluster_pixels,
        max_clusters=cfg.max_clusters,
        tolerance=cfg.effective_merge_tolerance,
        quantize_step=cfg.quantize_step,
    )
    if not clusters:
        logger.info("No curve colours found in %s", region)
        return []

    if cfg.max_workers > 1 and len(clusters) > 1:
        with ThreadPoolExecutor(max_workers=cfg.max_workers) as executor:
            traced = list(executor.map(lambda c: _trace_cluster(raster, region, c, cfg), clusters))
    else:
        traced = [_trace_cluster(raster, region, c, cfg) for c in clusters]

    curves: List[DetectedCurve] = []
    for cluster, pixel_points in zip(clusters, traced):
        if not pixel_points:
            logger.debug("Colour %s: insufficient data", cluster.color.hex)
            continue
        curves.append(
            DetectedCurve(
                color=cluster.color,
                points=project(pixel_points, calibration),
                pixel_count=cluster.count,
            )
        )

    curves.sort(key=lambda c: c.pixel_count, reverse=True)
    logger.info("Detected %d curve(s) from %d colour cluster(s)", len(curves), len(clusters))
    return curves


def digitize_image(
    image_path: str,
    anchors: Sequence[Tuple[float, float]],
    values: Optional[AxisValues] = None,
    cfg: Optional[DetectionConfig] = None,
) -> Tuple[List[DetectedCurve], Dict[str, Any]]:
    """
    Detect all curves in an image file.

    anchors: four pixel positions in x-min, x-max, y-min, y-max order.

    Returns (curves, debug_info) where debug_info holds the calibration, the
    detection region and, if cfg.debug, an overlay image (BGR).
    """
    cfg = cfg or DetectionConfig()
    raster = load_raster(image_path)
    calibration = Calibration.from_anchors(anchors, values)

    curves = detect_all_curves(raster, calibration, cfg)

    debug_info: Dict[str, Any] = {
        "image_path": image_path,
        "calibration": calibration,
        "region": calibration.bounds(),
    }
    if cfg.debug:
        debug_info["debug_overlay_bgr"] = make_debug_overlay(raster, calibration, curves)

    return curves, debug_info
