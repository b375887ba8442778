"""Version: 0.1.0
License: MIT

Boundary between raw detector output and the decision core. Everything leaving this
module is clamped to documented ranges, so downstream code never re-validates.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional

from wayfind_app.core.models import Detection

UNKNOWN_LABEL = "unknown"


def _clamp01(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))


def _distance(value: Any) -> Optional[float]:
    if value is None:
        return None
    meters = float(value)
    if not math.isfinite(meters) or meters < 0.0:
        return None
    return meters


def normalize_detection(
    label: str | None,
    confidence: float,
    x_center: float,
    y_center: float,
    width: float,
    height: float,
    distance_meters: float | None = None,
    depth_value: float | None = None,
) -> Detection:
    name = (label or "").strip() or UNKNOWN_LABEL
    return Detection(
        label=name,
        confidence=_clamp01(float(confidence)),
        x_center=_clamp01(float(x_center)),
        y_center=_clamp01(float(y_center)),
        width=_clamp01(float(width)),
        height=_clamp01(float(height)),
        distance_meters=_distance(distance_meters),
        depth_value=None if depth_value is None else float(depth_value),
    )


def normalize_detections(detections: Iterable[Detection]) -> list[Detection]:
    return [
        normalize_detection(
            d.label, d.confidence, d.x_center, d.y_center, d.width, d.height, d.distance_meters, d.depth_value
        )
        for d in detections
    ]


def from_pixel_box(
    label: str | None,
    score: float | None,
    left: float,
    top: float,
    right: float,
    bottom: float,
    image_width: float,
    image_height: float,
    distance_meters: float | None = None,
) -> Detection:
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"image size must be positive, got {image_width}x{image_height}")
    x0, x1 = sorted((float(left), float(right)))
    y0, y1 = sorted((float(top), float(bottom)))
    return normalize_detection(
        label,
        0.0 if score is None else score,
        (x0 + x1) / 2.0 / image_width,
        (y0 + y1) / 2.0 / image_height,
        (x1 - x0) / image_width,
        (y1 - y0) / image_height,
        distance_meters,
    )


def from_mapping(
    obj: Mapping[str, Any],
    image_width: float | None = None,
    image_height: float | None = None,
) -> Detection:
    """Parse one JSON detection: normalized center/size fields or a pixel ``box``."""
    label = obj.get("label")
    confidence = obj.get("confidence", obj.get("score", 0.0))
    distance = obj.get("distance_meters")
    if "box" in obj:
        box = obj["box"]
        if not isinstance(box, (list, tuple)) or len(box) != 4:
            raise ValueError(f"box must be [left, top, right, bottom], got {box!r}")
        width = obj.get("image_width", image_width)
        height = obj.get("image_height", image_height)
        if width is None or height is None:
            raise ValueError("pixel box requires image_width and image_height")
        return from_pixel_box(
            None if label is None else str(label),
            float(confidence),
            float(box[0]),
            float(box[1]),
            float(box[2]),
            float(box[3]),
            float(width),
            float(height),
            _distance(distance),
        )
    return normalize_detection(
        None if label is None else str(label),
        float(confidence),
        float(obj["x_center"]),
        float(obj["y_center"]),
        float(obj["width"]),
        float(obj["height"]),
        _distance(distance),
    )
