from __future__ import annotations

import argparse
import logging
import os
import pandas as pd

from curve_digitizer.calibration import AxisValues, Calibration
from curve_digitizer.config import DetectionConfig
from curve_digitizer.debug import curves_to_csv_rows, make_debug_overlay, points_to_csv_rows, save_debug_overlay
from curve_digitizer.digitize import detect_all_curves, detect_curve_at
from curve_digitizer.raster import Raster, load_raster
from curve_digitizer.tracing import find_pixels_matching_color
from curve_digitizer.types import DetectedCurve


def _floats(text: str, n: int, flag: str):
    parts = [p for p in text.replace(" ", "").split(",") if p]
    if len(parts) != n:
        raise argparse.ArgumentTypeError(f"{flag} expects {n} comma-separated numbers, got {text!r}")
    return [float(p) for p in parts]


def _click_curve(raster: Raster, cx: float, cy: float, calibration: Calibration, cfg: DetectionConfig):
    """Trace the curve under (cx, cy); weight is the number of sampled pixels sharing its colour."""
    points = detect_curve_at(raster, cx, cy, calibration, cfg)
    if not points:
        return None
    color = raster.get_color_at(cx, cy)
    matched = find_pixels_matching_color(
        raster, raster.full_region(), color, tolerance=cfg.color_tolerance, sample_stride=cfg.sample_stride
    )
    return DetectedCurve(color=color, points=points, pixel_count=len(matched))


def main():
    ap = argparse.ArgumentParser(description="Extract (x, y) series from a plotted-curve image")
    ap.add_argument("--image", required=True, help="Path to plot image (png/jpg)")
    ap.add_argument("--outdir", required=True, help="Output directory")
    ap.add_argument("--anchors", required=True,
                    help="Pixel anchors 'x1,y1,x2,y2,x3,y3,x4,y4' for x-min, x-max, y-min, y-max")
    ap.add_argument("--x-range", default="0,60", help="Data values at the x anchors (default 0,60)")
    ap.add_argument("--y-range", default="0,1", help="Data values at the y anchors (default 0,1)")
    ap.add_argument("--click", default=None, help="Trace only the curve under pixel 'X,Y'")
    ap.add_argument("--tolerance", type=int, default=30, help="Colour tolerance per channel (0-255)")
    ap.add_argument("--workers", type=int, default=1, help="Threads for per-colour tracing")
    ap.add_argument("--debug", action="store_true", help="Verbose logging and debug overlay image")
    args = ap.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    os.makedirs(args.outdir, exist_ok=True)

    flat = _floats(args.anchors, 8, "--anchors")
    anchors = list(zip(flat[0::2], flat[1::2]))
    x_min, x_max = _floats(args.x_range, 2, "--x-range")
    y_min, y_max = _floats(args.y_range, 2, "--y-range")

    cfg = DetectionConfig(color_tolerance=args.tolerance, max_workers=args.workers, debug=args.debug)
    calibration = Calibration.from_anchors(anchors, AxisValues(x_min, x_max, y_min, y_max))
    if calibration.is_degenerate:
        ap.error("anchors give a zero pixel span on one axis")

    raster = load_raster(args.image)
    print(f"Digitizing: {args.image} ({raster.width}x{raster.height})")

    if args.click:
        cx, cy = _floats(args.click, 2, "--click")
        curve = _click_curve(raster, cx, cy, calibration, cfg)
        if curve is None:
            print("Could not detect curve. Try adjusting the colour tolerance or click directly on the line.")
            return
        rows = points_to_csv_rows(curve.points, "Curve 1")
        curves = [curve]
        print(f"  Curve 1 ({curve.hex_color}): {len(curve.points)} points, weight {curve.pixel_count}")
    else:
        curves = detect_all_curves(raster, calibration, cfg)
        if not curves:
            print("No curves detected. Try adjusting the colour tolerance.")
            return
        rows = curves_to_csv_rows(curves)
        for i, c in enumerate(curves):
            print(f"  Curve {i + 1} ({c.hex_color}): {len(c.points)} points, weight {c.pixel_count}")

    df = pd.DataFrame(rows, columns=["Time", "Value", "Curve"])
    df.to_csv(os.path.join(args.outdir, "curves.csv"), index=False)

    if args.debug:
        overlay = make_debug_overlay(raster, calibration, curves)
        save_debug_overlay(os.path.join(args.outdir, "debug_overlay.png"), overlay)

    print(f"Digitized {len(curves)} curve(s). Output in: {args.outdir}")


if __name__ == "__main__":
    main()
