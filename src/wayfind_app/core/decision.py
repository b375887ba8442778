"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Sequence

from .config import PartitionConfig
from .models import DecisionResult, Detection, NavigationDecision, PartitionAnalysis, Zone


def select_navigation_targets(
    detections: Iterable[Detection], config: PartitionConfig
) -> list[Detection]:
    """Detections confident enough and close enough to steer around; input order is kept."""
    return [
        d
        for d in detections
        if d.confidence >= config.min_confidence
        and d.distance_meters is not None
        and d.distance_meters <= config.navigation_horizon_m
    ]


def choose_lateral(analyses: Iterable[PartitionAnalysis]) -> NavigationDecision:
    left_sum = 0.0
    right_sum = 0.0
    for a in analyses:
        if a.overlaps_zone(Zone.LEFT):
            left_sum += a.zone_coverage.left_pct
        if a.overlaps_zone(Zone.RIGHT):
            right_sum += a.zone_coverage.right_pct
    if left_sum < right_sum:
        return NavigationDecision.STEP_LEFT
    # equal sums step right
    return NavigationDecision.STEP_RIGHT


class PartitionDecisionEngine:
    """Stateless mapping from one frame's partition analyses to a single decision."""

    def __init__(self, config: PartitionConfig | None = None, logger: logging.Logger | None = None) -> None:
        self.config = config or PartitionConfig()
        self.logger = logger or logging.getLogger("wayfind.decision")

    @staticmethod
    def closest(analyses: Sequence[PartitionAnalysis]) -> PartitionAnalysis | None:
        best: PartitionAnalysis | None = None
        best_dist = math.inf
        for a in analyses:
            dist = a.detection.distance_meters
            # strict comparison keeps the first of equally distant targets
            if dist is not None and dist < best_dist:
                best, best_dist = a, dist
        return best

    def decide(self, analyses: Sequence[PartitionAnalysis]) -> DecisionResult | None:
        closest = self.closest(analyses)
        if closest is None or closest.detection.distance_meters is None:
            return None
        cfg = self.config
        distance = float(closest.detection.distance_meters)
        occupancy = closest.overall_occupancy

        if occupancy >= cfg.full_block_threshold and distance <= cfg.stop_distance_m:
            decision = NavigationDecision.STOP
            reason = "full_block"
        elif occupancy >= cfg.large_object_threshold and distance <= cfg.alert_distance_m:
            decision = choose_lateral(analyses)
            reason = "large_object"
        elif closest.center_zone == Zone.CENTER:
            decision = choose_lateral(analyses)
            reason = "center_obstacle"
        else:
            decision = NavigationDecision.GO_STRAIGHT
            reason = f"obstacle_{closest.center_zone.value}"

        self.logger.debug(
            "decision=%s reason=%s label=%s dist=%.2f occ=%.2f zone=%s",
            decision.value,
            reason,
            closest.detection.label,
            distance,
            occupancy,
            closest.center_zone.value,
        )
        return DecisionResult(
            decision=decision,
            distance_meters=distance,
            occupancy=occupancy,
            object_label=closest.detection.label,
            zone_coverage=closest.zone_coverage,
        )
