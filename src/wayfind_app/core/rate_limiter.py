"""Version: 0.1.0
License: MIT

Label/direction keyed rate limiter for the legacy scoring path.

Rules run in a fixed order and the first failing one suppresses:
global cooldown, FAR, MEDIUM off center, tiny box, frame edge, per-label cooldown,
per-label+direction cooldown, and finally movement sensitivity (only a strictly more
dangerous distance category re-triggers a label that was already announced).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from wayfind_app.hal import Deliver

from .clock import Clock
from .config import RateLimiterConfig
from .localization import guidance_priority, guidance_text
from .models import (
    Announcement,
    AnnouncementSource,
    Direction,
    DistanceCategory,
    Guidance,
    SpeechPriority,
    SuppressionRule,
)
from .scoring import ScoredGuidance



@dataclass
class RateLimiterState:
    last_global_time: Optional[float] = None
    per_label_time: dict[str, float] = field(default_factory=dict)
    per_label_direction_time: dict[tuple[str, Direction], float] = field(default_factory=dict)
    per_label_last_distance: dict[str, DistanceCategory] = field(default_factory=dict)


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    rule: SuppressionRule


class WarningRateLimiter:
    def __init__(
        self,
        clock: Clock,
        config: RateLimiterConfig | None = None,
        lang: str = "en",
        logger: logging.Logger | None = None,
    ) -> None:
        self.clock = clock
        self.config = config or RateLimiterConfig()
        self.lang = lang
        self.logger = logger or logging.getLogger("wayfind.rate_limiter")
        self._lock = threading.Lock()
        self._state = RateLimiterState()

    @staticmethod
    def _cooling(now: float, last: Optional[float], window_s: float) -> bool:
        return last is not None and now - last < window_s

    def _check(self, guidance: Guidance, width: float, x_center: float, now: float) -> RateDecision:
        cfg = self.config
        st = self._state
        if self._cooling(now, st.last_global_time, cfg.global_cooldown_s):
            return RateDecision(False, SuppressionRule.GLOBAL_COOLDOWN)
        category = guidance.distance_category
        if category == DistanceCategory.FAR:
            return RateDecision(False, SuppressionRule.FAR_AWAY)
        if category == DistanceCategory.MEDIUM and not (
            guidance.direction == Direction.CENTER and guidance.priority > cfg.medium_priority_floor
        ):
            return RateDecision(False, SuppressionRule.MEDIUM_OFF_CENTER)
        if width < cfg.min_width:
            return RateDecision(False, SuppressionRule.TOO_SMALL)
        if x_center < cfg.edge_margin or x_center > 1.0 - cfg.edge_margin:
            return RateDecision(False, SuppressionRule.FRAME_EDGE)
        if self._cooling(now, st.per_label_time.get(guidance.label), cfg.per_object_cooldown_s):
            return RateDecision(False, SuppressionRule.OBJECT_COOLDOWN)
        key = (guidance.label, guidance.direction)
        if self._cooling(now, st.per_label_direction_time.get(key), cfg.directional_cooldown_s):
            return RateDecision(False, SuppressionRule.DIRECTION_COOLDOWN)
        previous = st.per_label_last_distance.get(guidance.label)
        if previous is not None and not category.is_more_dangerous_than(previous):
            return RateDecision(False, SuppressionRule.NOT_WORSENING)
        return RateDecision(True, SuppressionRule.NONE)

    def _record(self, guidance: Guidance, now: float) -> None:
        st = self._state
        st.last_global_time = now
        st.per_label_time[guidance.label] = now
        st.per_label_direction_time[(guidance.label, guidance.direction)] = now
        st.per_label_last_distance[guidance.label] = guidance.distance_category

    def should_announce(self, guidance: Guidance, width: float = 0.1, x_center: float = 0.5) -> RateDecision:
        with self._lock:
            decision = self._check(guidance, width, x_center, self.clock.now())
        if not decision.allowed:
            self.logger.debug("suppressed: rule=%s label=%s", decision.rule.value, guidance.label)
        return decision

    def record_announcement(self, guidance: Guidance) -> None:
        with self._lock:
            self._record(guidance, self.clock.now())

    def try_acquire(self, guidance: Guidance, width: float = 0.1, x_center: float = 0.5) -> bool:
        """Check and record in one step so two callers cannot share a cooldown window."""
        with self._lock:
            now = self.clock.now()
            decision = self._check(guidance, width, x_center, now)
            if decision.allowed:
                self._record(guidance, now)
        if not decision.allowed:
            self.logger.debug("suppressed: rule=%s label=%s", decision.rule.value, guidance.label)
        return decision.allowed

    def offer(self, scored: ScoredGuidance, deliver: Deliver) -> Announcement | None:
        guidance = scored.guidance
        with self._lock:
            now = self.clock.now()
            decision = self._check(guidance, scored.detection.width, scored.detection.x_center, now)
            if not decision.allowed:
                self.logger.debug(
                    "suppressed: rule=%s label=%s cat=%s dir=%s",
                    decision.rule.value,
                    guidance.label,
                    guidance.distance_category.value,
                    guidance.direction.value,
                )
                return None
            text = guidance_text(guidance, self.lang)
            priority = guidance_priority(guidance.distance_category)
            interrupt = priority == SpeechPriority.URGENT
            if not deliver(text, priority, interrupt):
                self.logger.debug("suppressed: rule=%s label=%s", SuppressionRule.DELIVERY_FAILED.value, guidance.label)
                return None
            self._record(guidance, now)
        self.logger.info("speaking: %s", text)
        return Announcement(
            text=text,
            priority=priority,
            interrupt=interrupt,
            source=AnnouncementSource.GUIDANCE,
            timestamp_s=now,
            label=guidance.label,
            distance_meters=scored.detection.distance_meters,
        )

    def remaining_cooldown(self, label: str) -> float:
        with self._lock:
            last = self._state.per_label_time.get(label)
            if last is None:
                return 0.0
            return max(0.0, self.config.per_object_cooldown_s - (self.clock.now() - last))

    def debug_info(self) -> dict[str, object]:
        with self._lock:
            now = self.clock.now()
            st = self._state
            global_remaining = 0.0
            if st.last_global_time is not None:
                global_remaining = max(0.0, self.config.global_cooldown_s - (now - st.last_global_time))
            return {
                "global_cooldown_remaining_s": round(global_remaining, 3),
                "tracked_objects": len(st.per_label_time),
                "object_cooldowns_s": {
                    label: round(max(0.0, self.config.per_object_cooldown_s - (now - t)), 3)
                    for label, t in st.per_label_time.items()
                },
                "last_distances": {label: c.value for label, c in st.per_label_last_distance.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._state = RateLimiterState()
        self.logger.debug("rate limiter reset")
