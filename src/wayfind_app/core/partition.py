"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

from typing import Iterable

from .models import Detection, PartitionAnalysis, Zone, ZoneCoverage


def _overlap(left: float, right: float, zone_start: float, zone_end: float) -> float:
    return max(0.0, min(right, zone_end) - max(left, zone_start))


def _fraction(value: float, span: float) -> float:
    if span <= 0.0:
        return 0.0
    return min(1.0, max(0.0, value / span))


class PartitionAnalyzer:
    """Splits the frame into equal thirds and measures how much of each a box covers.

    ``frame_width`` may be pixels or 1.0 for normalized geometry; only ratios leave
    this class, so any consistent unit works.
    """

    def analyze(self, detection: Detection, frame_width: float = 1.0) -> PartitionAnalysis:
        if frame_width <= 0.0:
            raise ValueError(f"frame_width must be > 0, got {frame_width}")
        lb = frame_width / 3.0
        rb = frame_width * 2.0 / 3.0

        left = min(frame_width, max(0.0, detection.left * frame_width))
        right = min(frame_width, max(0.0, detection.right * frame_width))
        if right < left:
            left, right = right, left

        overlaps: set[Zone] = set()
        if left < lb:
            overlaps.add(Zone.LEFT)
        if right > lb and left < rb:
            overlaps.add(Zone.CENTER)
        if right > rb:
            overlaps.add(Zone.RIGHT)

        mid = (left + right) / 2.0
        if mid < lb:
            center_zone = Zone.LEFT
        elif mid < rb:
            center_zone = Zone.CENTER
        else:
            center_zone = Zone.RIGHT

        coverage = ZoneCoverage(
            left_pct=_fraction(_overlap(left, right, 0.0, lb), lb),
            center_pct=_fraction(_overlap(left, right, lb, rb), rb - lb),
            right_pct=_fraction(_overlap(left, right, rb, frame_width), frame_width - rb),
        )
        return PartitionAnalysis(
            detection=detection,
            overlaps=frozenset(overlaps),
            center_zone=center_zone,
            overall_occupancy=_fraction(right - left, frame_width),
            zone_coverage=coverage,
        )

    def analyze_all(
        self, detections: Iterable[Detection], frame_width: float = 1.0
    ) -> list[PartitionAnalysis]:
        return [self.analyze(d, frame_width) for d in detections]
