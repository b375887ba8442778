"""
Version: 0.1.0
License: MIT

Attaches metric distance to detections from a relative (MiDaS-style) depth map.
Larger relative values mean farther away; ``scale_factor`` converts them to meters.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import numpy as np

from wayfind_app.core.config import DepthConfig
from wayfind_app.core.models import Detection
from wayfind_app.hal import IDepthMapProvider


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def region_median(depth_map: np.ndarray, detection: Detection) -> Optional[float]:
    """Median of the depth values under the detection's box, or None for an empty region.

    The box is clamped to the frame and mapped to inclusive pixel indices; for an even
    count the upper median is used.
    """
    if depth_map is None or depth_map.ndim != 2 or depth_map.size == 0:
        return None
    h, w = depth_map.shape
    left = min(w - 1, max(0, int(_clamp01(detection.left) * w)))
    right = min(w - 1, max(0, int(_clamp01(detection.right) * w)))
    top = min(h - 1, max(0, int(_clamp01(detection.y_center - detection.height / 2.0) * h)))
    bottom = min(h - 1, max(0, int(_clamp01(detection.y_center + detection.height / 2.0) * h)))
    region = depth_map[top : bottom + 1, left : right + 1]
    values = region[np.isfinite(region)]
    if values.size == 0:
        return None
    ordered = np.sort(values, axis=None)
    return float(ordered[ordered.size // 2])


def depth_to_meters(relative_depth: float, config: DepthConfig) -> float:
    meters = max(relative_depth / config.scale_factor, 0.01)
    return min(config.max_depth_m, max(config.min_depth_m, meters))


def recommended_scale_factor(relative_depth: float, actual_distance_m: float) -> float:
    """Calibration helper: the scale factor that maps ``relative_depth`` to a measured distance."""
    if actual_distance_m <= 0.0:
        raise ValueError("actual distance must be > 0")
    return relative_depth / actual_distance_m


class DepthEnricher:
    def __init__(self, config: DepthConfig | None = None, logger: logging.Logger | None = None) -> None:
        self.config = config or DepthConfig()
        self.logger = logger or logging.getLogger("wayfind.depth")

    def enrich_one(self, detection: Detection, depth_map: Optional[np.ndarray]) -> Detection:
        if depth_map is None:
            return detection
        try:
            depth = region_median(np.asarray(depth_map, dtype=np.float32), detection)
        except (TypeError, ValueError) as exc:
            self.logger.error("depth lookup failed for %s: %s", detection.label, exc)
            return detection
        if depth is None:
            self.logger.debug("no depth available for %s", detection.label)
            return detection.with_distance(None, None)
        meters = depth_to_meters(depth, self.config)
        self.logger.debug("enriched %s: depth=%.2f distance=%.2fm", detection.label, depth, meters)
        return detection.with_distance(meters, depth)

    def enrich(self, detections: Sequence[Detection], depth_map: Optional[np.ndarray]) -> list[Detection]:
        return [self.enrich_one(d, depth_map) for d in detections]

    def enrich_frame(self, detections: Sequence[Detection], frame: Any, provider: IDepthMapProvider) -> list[Detection]:
        """Ask the depth model for this camera frame, then enrich."""
        return self.enrich(detections, provider.depth_map(frame))


def enrichment_summary(detections: Sequence[Detection]) -> dict[str, object]:
    total = len(detections)
    with_depth = sum(1 for d in detections if d.depth_value is not None and d.distance_meters is not None)
    return {
        "total": total,
        "with_depth": with_depth,
        "percent": (with_depth * 100) // total if total else 0,
    }
