from dataclasses import dataclass
from typing import Optional


@dataclass
class DetectionConfig:
    # --- Colour matching ---
    color_tolerance: int = 30            # allowed per-channel deviation (0-255); summed over 3 channels
    sample_stride: int = 2               # pixel step when collecting pixels of a target colour
    min_points: int = 5                  # fewer matching pixels than this means "no curve here"

    # --- Colour discovery / clustering ---
    cluster_sample_stride: int = 3       # pixel step when sampling candidate curve colours
    min_cluster_pixels: int = 20         # quantised colours sampled fewer times are dropped
    max_clusters: int = 8
    quantize_step: int = 16
    merge_tolerance: Optional[int] = None  # None -> reuse color_tolerance

    # --- Tracing ---
    bin_width: int = 3
    smooth_slope_factor: float = 2.0     # allowed |dy| per unit of x-spacing before a point is an outlier
    smooth_offset: float = 20.0          # constant slack (px) on top of the slope allowance

    # --- Simplification ---
    click_target_points: int = 40        # single curve traced from a click
    auto_target_points: int = 50         # each curve from detect-all

    # --- Execution ---
    max_workers: int = 1                 # >1 traces discovered colours on a thread pool

    # --- Debug ---
    debug: bool = False

    @property
    def effective_merge_tolerance(self) -> int:
        if self.merge_tolerance is None:
            return self.color_tolerance
        return self.merge_tolerance

    def validate(self) -> "DetectionConfig":
        if not 0 <= self.color_tolerance <= 255:
            raise ValueError(f"color_tolerance must be in [0, 255], got {self.color_tolerance}")
        if self.merge_tolerance is not None and not 0 <= self.merge_tolerance <= 255:
            raise ValueError(f"merge_tolerance must be in [0, 255], got {self.merge_tolerance}")
        for name in ("sample_stride", "cluster_sample_stride", "bin_width", "quantize_step",
                     "click_target_points", "auto_target_points", "max_workers"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.min_points < 0 or self.min_cluster_pixels < 0 or self.max_clusters < 0:
            raise ValueError("min_points, min_cluster_pixels and max_clusters must be non-negative")
        return self
