"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from wayfind_app.core.clock import Clock
from wayfind_app.core.config import NarratorConfig
from wayfind_app.core.localization import closest_object_text
from wayfind_app.core.models import Announcement, AnnouncementSource, Detection, Direction, SpeechPriority
from wayfind_app.core.smoothing import ExponentialSmoother

from .arbiter import SpeechArbiter


def narration_direction(x_center: float) -> Direction:
    if x_center < 1.0 / 3.0:
        return Direction.LEFT
    if x_center > 2.0 / 3.0:
        return Direction.RIGHT
    return Direction.CENTER


class ClosestObjectNarrator:
    """Informational producer: names the nearest object and its rough distance.

    Speaks at INFORMATION priority, so the arbiter mutes it right after any
    navigation instruction.
    """

    def __init__(
        self,
        arbiter: SpeechArbiter,
        clock: Clock,
        config: NarratorConfig | None = None,
        lang: str = "en",
        logger: logging.Logger | None = None,
    ) -> None:
        self.arbiter = arbiter
        self.clock = clock
        self.config = config or NarratorConfig()
        self.lang = lang
        self.logger = logger or logging.getLogger("wayfind.narrator")
        self._lock = threading.Lock()
        self._smoother = ExponentialSmoother(self.config.ema_alpha)
        self._last_label: Optional[str] = None
        self._last_distance: Optional[float] = None
        self._last_speech_time: Optional[float] = None

    def _closest(self, detections: Iterable[Detection]) -> tuple[Detection, float] | None:
        best: tuple[Detection, float] | None = None
        for d in detections:
            if d.confidence < self.config.min_confidence or d.distance_meters is None:
                continue
            if best is None or d.distance_meters < best[1]:
                best = (d, d.distance_meters)
        return best

    def process(self, detections: Iterable[Detection]) -> Announcement | None:
        with self._lock:
            found = self._closest(detections)
            if found is None:
                return None
            closest, meters = found
            smoothed = self._smoother.push(meters)
            now = self.clock.now()
            if self._last_speech_time is not None and now - self._last_speech_time < self.config.cooldown_s:
                return None
            if self.arbiter.is_suppressed(SpeechPriority.INFORMATION):
                self.logger.debug("closest object muted by navigation speech")
                return None
            label_changed = closest.label != self._last_label
            distance_changed = (
                self._last_distance is None or abs(smoothed - self._last_distance) > self.config.distance_change_m
            )
            if not (label_changed or distance_changed):
                return None
            direction = narration_direction(closest.x_center)
            text = closest_object_text(closest.label, smoothed, direction, self.lang)
            if not self.arbiter.request(text, SpeechPriority.INFORMATION, interrupt=False):
                return None
            self._last_label = closest.label
            self._last_distance = smoothed
            self._last_speech_time = now
        self.logger.info("speaking: %s", text)
        return Announcement(
            text=text,
            priority=SpeechPriority.INFORMATION,
            interrupt=False,
            source=AnnouncementSource.CLOSEST_OBJECT,
            timestamp_s=now,
            label=closest.label,
            distance_meters=round(smoothed, 2),
        )

    def reset(self) -> None:
        with self._lock:
            self._smoother.reset()
            self._last_label = None
            self._last_distance = None
            self._last_speech_time = None
