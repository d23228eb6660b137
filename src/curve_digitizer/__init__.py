from .calibration import ANCHOR_SEQUENCE, AnchorRole, AxisValues, Calibration
from .colors import colors_match, discover_clusters, is_background_or_axis_color, quantize
from .config import DetectionConfig
from .digitize import detect_all_curves, detect_curve_at, digitize_image
from .projection import project
from .raster import Raster, load_raster
from .tracing import find_pixels_matching_color, simplify, smooth, trace_color, trace_curve
from .types import Color, ColorCluster, DataPoint, DetectedCurve, PixelPoint, Region

__all__ = [
    "ANCHOR_SEQUENCE",
    "AnchorRole",
    "AxisValues",
    "Calibration",
    "Color",
    "ColorCluster",
    "DataPoint",
    "DetectedCurve",
    "DetectionConfig",
    "PixelPoint",
    "Raster",
    "Region",
    "colors_match",
    "detect_all_curves",
    "detect_curve_at",
    "digitize_image",
    "discover_clusters",
    "find_pixels_matching_color",
    "is_background_or_axis_color",
    "load_raster",
    "project",
    "quantize",
    "simplify",
    "smooth",
    "trace_color",
    "trace_curve",
]
__version__ = "0.1.0"
