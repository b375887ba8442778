"""Version: 0.1.0
License: MIT

One navigation run. The session owns every piece of mutable state (gate, rate
limiter, arbiter, narrator), so independent sessions never share cooldowns.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from wayfind_app.ai.normalizer import normalize_detections
from wayfind_app.audio.arbiter import SpeechArbiter
from wayfind_app.audio.narrator import ClosestObjectNarrator
from wayfind_app.audio.sinks import LoggingSpeechSink
from wayfind_app.hal import IDetectionSource, ISpeechSink

from .clock import Clock, MonotonicClock
from .config import WayfindConfig
from .models import Announcement, AnnouncementSource, Detection, SpeechPriority
from .strategies import NavigationStrategy, build_strategy


class NavigationSession:
    def __init__(
        self,
        config: WayfindConfig | None = None,
        sink: ISpeechSink | None = None,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or WayfindConfig()
        self.clock = clock or MonotonicClock()
        self.logger = logger or logging.getLogger("wayfind")
        self.sink = sink or LoggingSpeechSink(self.logger.getChild("speech"))
        self.arbiter = SpeechArbiter(self.sink, self.clock, self.config.arbiter, self.logger.getChild("arbiter"))
        self.strategy: NavigationStrategy = build_strategy(self.config, self.clock, self.logger)
        self.narrator: ClosestObjectNarrator | None = None
        if self.config.narrator.enabled:
            self.narrator = ClosestObjectNarrator(
                self.arbiter, self.clock, self.config.narrator, self.config.lang, self.logger.getChild("narrator")
            )
        self._lock = threading.RLock()
        self._paused = False

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._paused

    def process_frame(self, detections: Iterable[Detection], frame_width: float = 1.0) -> list[Announcement]:
        with self._lock:
            if self._paused:
                return []
            frame = normalize_detections(detections)
            out = self.strategy.step(frame, frame_width, self.arbiter.request)
            if self.narrator is not None:
                narrated = self.narrator.process(frame)
                if narrated is not None:
                    out.append(narrated)
            return out

    def pump(self, source: IDetectionSource, frame_width: float = 1.0) -> list[Announcement] | None:
        """Pull one batch from the detector and process it; None once the source is exhausted."""
        detections = source.next_detections()
        if detections is None:
            return None
        return self.process_frame(detections, frame_width)

    def reset(self) -> None:
        with self._lock:
            self.strategy.reset()
            self.arbiter.reset()
            if self.narrator is not None:
                self.narrator.reset()
        self.logger.info("navigation session reset (mode=%s)", self.strategy.name)

    def pause(self) -> None:
        """Silence guidance, e.g. while a manual scene analysis runs."""
        with self._lock:
            self._paused = True
            self.arbiter.stop()
        self.logger.info("navigation paused")

    def resume(self) -> None:
        with self._lock:
            self.reset()
            self._paused = False
        self.logger.info("navigation resumed")

    def announce_scene_description(self, text: str) -> Announcement | None:
        message = (text or "").strip()
        if not message:
            return None
        with self._lock:
            if not self.arbiter.request(message, SpeechPriority.NAVIGATION, interrupt=True):
                return None
            now = self.clock.now()
        return Announcement(
            text=message,
            priority=SpeechPriority.NAVIGATION,
            interrupt=True,
            source=AnnouncementSource.SCENE,
            timestamp_s=now,
        )
