"""Version: 0.1.0
License: MIT

Legacy direction/distance-category guidance. Kept as a selectable alternative to the
partition path; its output is meant to go through the warning rate limiter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .config import ScoringConfig
from .models import Detection, Direction, DistanceCategory, Guidance

CONFIDENCE_WEIGHT = 2.0
DISTANCE_WEIGHT = 3.0
UNKNOWN_DISTANCE_TERM = 0.5

# score = (1 - width) ** 4; wide boxes score low and read as near
WIDTH_SCORE_VERY_CLOSE = 0.05
WIDTH_SCORE_CLOSE = 0.25
WIDTH_SCORE_MEDIUM = 0.60


@dataclass(frozen=True)
class ScoredGuidance:
    guidance: Guidance
    detection: Detection


def width_score(width: float) -> float:
    return (1.0 - min(1.0, max(0.0, width))) ** 4


def category_from_width(width: float) -> DistanceCategory:
    score = width_score(width)
    if score < WIDTH_SCORE_VERY_CLOSE:
        return DistanceCategory.VERY_CLOSE
    if score < WIDTH_SCORE_CLOSE:
        return DistanceCategory.CLOSE
    if score < WIDTH_SCORE_MEDIUM:
        return DistanceCategory.MEDIUM
    return DistanceCategory.FAR


class ScoringEngine:
    def __init__(self, config: ScoringConfig | None = None, logger: logging.Logger | None = None) -> None:
        self.config = config or ScoringConfig()
        self.logger = logger or logging.getLogger("wayfind.scoring")

    def is_relevant(self, detection: Detection) -> bool:
        cfg = self.config
        if detection.confidence < cfg.min_confidence:
            return False
        if detection.y_center < cfg.min_y_center:
            return False
        if detection.width < cfg.min_width:
            return False
        label = detection.label.lower().strip()
        return not any(item in label for item in cfg.stoplist)

    def direction_of(self, x_center: float) -> Direction:
        if x_center < self.config.left_boundary:
            return Direction.LEFT
        if x_center > self.config.right_boundary:
            return Direction.RIGHT
        return Direction.CENTER

    def category_from_meters(self, meters: float) -> DistanceCategory:
        cfg = self.config
        if meters < cfg.very_close_m:
            return DistanceCategory.VERY_CLOSE
        if meters < cfg.close_m:
            return DistanceCategory.CLOSE
        if meters < cfg.medium_m:
            return DistanceCategory.MEDIUM
        return DistanceCategory.FAR

    def distance_category(self, detection: Detection) -> DistanceCategory:
        if detection.distance_meters is not None:
            return self.category_from_meters(detection.distance_meters)
        if self.config.width_distance_fallback:
            return category_from_width(detection.width)
        self.logger.debug("no depth for %s, defaulting to FAR", detection.label)
        return DistanceCategory.FAR

    def priority(self, detection: Detection, direction: Direction) -> float:
        score = detection.confidence * CONFIDENCE_WEIGHT
        if detection.distance_meters is not None:
            meters = min(10.0, max(0.1, detection.distance_meters))
            score += (10.0 / meters) * DISTANCE_WEIGHT
        else:
            score += UNKNOWN_DISTANCE_TERM * DISTANCE_WEIGHT
        if direction == Direction.CENTER:
            score += self.config.center_weight
        else:
            score += self.config.side_weight
        return score

    def score(self, detection: Detection) -> ScoredGuidance:
        direction = self.direction_of(detection.x_center)
        guidance = Guidance(
            label=detection.label,
            direction=direction,
            distance_category=self.distance_category(detection),
            priority=self.priority(detection, direction),
        )
        return ScoredGuidance(guidance, detection)

    def evaluate(self, detections: Iterable[Detection]) -> ScoredGuidance | None:
        """Highest-priority guidance among relevant detections; the first one wins ties."""
        best: ScoredGuidance | None = None
        for detection in detections:
            if not self.is_relevant(detection):
                continue
            scored = self.score(detection)
            if best is None or scored.guidance.priority > best.guidance.priority:
                best = scored
        if best is not None:
            g = best.guidance
            self.logger.debug(
                "guidance label=%s dir=%s cat=%s prio=%.2f",
                g.label,
                g.direction.value,
                g.distance_category.value,
                g.priority,
            )
        return best
