"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from wayfind_app.hal import Deliver

from .clock import Clock
from .config import WayfindConfig
from .decision import PartitionDecisionEngine, select_navigation_targets
from .models import Announcement, Detection
from .partition import PartitionAnalyzer
from .partition_gate import PartitionGate
from .rate_limiter import WarningRateLimiter
from .scoring import ScoringEngine



class NavigationStrategy(ABC):
    name: str = ""

    @abstractmethod
    def step(self, detections: Sequence[Detection], frame_width: float, deliver: Deliver) -> list[Announcement]: ...

    @abstractmethod
    def reset(self) -> None: ...


class PartitionStrategy(NavigationStrategy):
    """Thirds-of-frame geometry, one decision per frame, Gate A."""

    name = "partition"

    def __init__(self, config: WayfindConfig, clock: Clock, logger: logging.Logger) -> None:
        self.config = config.partition
        self.analyzer = PartitionAnalyzer()
        self.engine = PartitionDecisionEngine(config.partition, logger.getChild("decision"))
        self.gate = PartitionGate(clock, config.partition_gate, config.lang, logger.getChild("gate"))

    def step(self, detections: Sequence[Detection], frame_width: float, deliver: Deliver) -> list[Announcement]:
        targets = select_navigation_targets(detections, self.config)
        if not targets:
            announcement = self.gate.offer_path_clear(deliver)
            return [announcement] if announcement else []
        result = self.engine.decide(self.analyzer.analyze_all(targets, frame_width))
        if result is None:
            return []
        announcement = self.gate.offer(result, deliver)
        return [announcement] if announcement else []

    def reset(self) -> None:
        self.gate.reset()


class ScoringStrategy(NavigationStrategy):
    """Direction/distance-category guidance behind the warning rate limiter."""

    name = "scoring"

    def __init__(self, config: WayfindConfig, clock: Clock, logger: logging.Logger) -> None:
        self.engine = ScoringEngine(config.scoring, logger.getChild("scoring"))
        self.limiter = WarningRateLimiter(clock, config.rate_limiter, config.lang, logger.getChild("rate_limiter"))

    def step(self, detections: Sequence[Detection], frame_width: float, deliver: Deliver) -> list[Announcement]:
        scored = self.engine.evaluate(detections)
        if scored is None:
            return []
        announcement = self.limiter.offer(scored, deliver)
        return [announcement] if announcement else []

    def reset(self) -> None:
        self.limiter.reset()


def build_strategy(config: WayfindConfig, clock: Clock, logger: logging.Logger) -> NavigationStrategy:
    if config.mode == "scoring":
        return ScoringStrategy(config, clock, logger)
    return PartitionStrategy(config, clock, logger)
