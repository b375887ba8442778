"""Version: 0.1.0
License: MIT

Announcement gate for the partition path.

A decision is spoken when the obstacle label changed, or when the repeat interval has
passed and distance or occupancy moved by a meaningful amount. A hard floor between
any two announcements absorbs detector flicker. With no obstacle in range the gate
says "path clear" once on entering that state and then on a slower repeat.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, replace
from typing import Optional

from wayfind_app.hal import Deliver

from .clock import Clock
from .config import PartitionGateConfig
from .localization import decision_category, decision_priority, decision_text, is_urgent, path_clear_text
from .models import (
    Announcement,
    AnnouncementSource,
    DecisionCategory,
    DecisionResult,
    NavigationDecision,
    SpeechPriority,
    SuppressionRule,
)



@dataclass
class GateState:
    last_speech_time: Optional[float] = None
    last_decision: Optional[NavigationDecision] = None
    last_decision_category: Optional[DecisionCategory] = None
    last_spoken_distance: Optional[float] = None
    last_spoken_occupancy: Optional[float] = None
    last_spoken_object_label: Optional[str] = None
    last_path_clear_time: Optional[float] = None


@dataclass(frozen=True)
class GateVerdict:
    speak: bool
    reason: SuppressionRule
    text: str = ""
    priority: SpeechPriority = SpeechPriority.NAVIGATION
    interrupt: bool = False
    category: Optional[DecisionCategory] = None
    category_changed: bool = False


def _since(now: float, then: Optional[float]) -> float:
    return math.inf if then is None else now - then


def _delta(value: float, previous: Optional[float]) -> float:
    return math.inf if previous is None else abs(value - previous)


class PartitionGate:
    def __init__(
        self,
        clock: Clock,
        config: PartitionGateConfig | None = None,
        lang: str = "en",
        logger: logging.Logger | None = None,
    ) -> None:
        self.clock = clock
        self.config = config or PartitionGateConfig()
        self.lang = lang
        self.logger = logger or logging.getLogger("wayfind.gate")
        self._lock = threading.Lock()
        self._state = GateState()

    def snapshot(self) -> GateState:
        with self._lock:
            return replace(self._state)

    def reset(self) -> None:
        with self._lock:
            self._state = GateState()
        self.logger.debug("partition gate reset")

    def _evaluate(self, result: DecisionResult, now: float) -> GateVerdict:
        cfg = self.config
        st = self._state
        category = decision_category(result.decision)
        category_changed = category != st.last_decision_category
        since = _since(now, st.last_speech_time)
        urgent = is_urgent(result.decision)

        common = {"category": category, "category_changed": category_changed}
        if since < cfg.min_inter_speech_s:
            return GateVerdict(False, SuppressionRule.MIN_INTER_SPEECH, **common)

        object_changed = result.object_label != st.last_spoken_object_label
        repeat_s = cfg.urgent_repeat_s if urgent else cfg.nonurgent_repeat_s
        time_ok = since >= repeat_s
        distance_ok = _delta(result.distance_meters, st.last_spoken_distance) >= cfg.distance_delta_m
        occupancy_ok = _delta(result.occupancy, st.last_spoken_occupancy) >= cfg.occupancy_delta

        if not (object_changed or (time_ok and (distance_ok or occupancy_ok))):
            return GateVerdict(False, SuppressionRule.NO_MEANINGFUL_CHANGE, **common)
        return GateVerdict(
            True,
            SuppressionRule.NONE,
            text=decision_text(result.decision, result.object_label, self.lang),
            priority=decision_priority(result.decision),
            interrupt=urgent,
            **common,
        )

    def evaluate(self, result: DecisionResult) -> GateVerdict:
        """Read-only check; does not touch the gate state."""
        with self._lock:
            return self._evaluate(result, self.clock.now())

    def offer(self, result: DecisionResult, deliver: Deliver) -> Announcement | None:
        """Evaluate, deliver, and record atomically. State changes only on successful delivery."""
        with self._lock:
            now = self.clock.now()
            self._state.last_path_clear_time = None
            verdict = self._evaluate(result, now)
            if not verdict.speak:
                self.logger.debug(
                    "nav skip: rule=%s obj=%s zone=%s occ=%.2f cat=%s",
                    verdict.reason.value,
                    result.object_label,
                    result.zone_coverage.dominant_zone().value,
                    result.occupancy,
                    verdict.category.value if verdict.category else None,
                )
                return None
            if not deliver(verdict.text, verdict.priority, verdict.interrupt):
                self.logger.debug("nav skip: rule=%s text=%r", SuppressionRule.DELIVERY_FAILED.value, verdict.text)
                return None
            st = self._state
            st.last_speech_time = now
            st.last_decision = result.decision
            st.last_decision_category = verdict.category
            st.last_spoken_distance = result.distance_meters
            st.last_spoken_occupancy = result.occupancy
            st.last_spoken_object_label = result.object_label
        self.logger.info("speaking: %s", verdict.text)
        return Announcement(
            text=verdict.text,
            priority=verdict.priority,
            interrupt=verdict.interrupt,
            source=AnnouncementSource.NAVIGATION,
            timestamp_s=now,
            decision=result.decision,
            label=result.object_label,
            distance_meters=result.distance_meters,
            occupancy=result.occupancy,
        )

    def _evaluate_path_clear(self, now: float) -> GateVerdict:
        st = self._state
        if _since(now, st.last_speech_time) < self.config.min_inter_speech_s:
            return GateVerdict(False, SuppressionRule.MIN_INTER_SPEECH)
        first = st.last_path_clear_time is None
        if not first and _since(now, st.last_path_clear_time) < self.config.path_clear_repeat_s:
            return GateVerdict(False, SuppressionRule.PATH_CLEAR_INTERVAL)
        return GateVerdict(True, SuppressionRule.NONE, text=path_clear_text(self.lang))

    def evaluate_path_clear(self) -> GateVerdict:
        with self._lock:
            return self._evaluate_path_clear(self.clock.now())

    def offer_path_clear(self, deliver: Deliver) -> Announcement | None:
        with self._lock:
            now = self.clock.now()
            verdict = self._evaluate_path_clear(now)
            if not verdict.speak:
                self.logger.debug("path clear skip: rule=%s", verdict.reason.value)
                return None
            if not deliver(verdict.text, verdict.priority, verdict.interrupt):
                self.logger.debug("path clear skip: rule=%s", SuppressionRule.DELIVERY_FAILED.value)
                return None
            self._state.last_path_clear_time = now
            self._state.last_speech_time = now
            # the next obstacle counts as a new object
            self._state.last_spoken_object_label = None
        self.logger.info("speaking: %s", verdict.text)
        return Announcement(
            text=verdict.text,
            priority=verdict.priority,
            interrupt=verdict.interrupt,
            source=AnnouncementSource.PATH_CLEAR,
            timestamp_s=now,
        )
