"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from wayfind_app.core.clock import Clock
from wayfind_app.core.config import ArbiterConfig
from wayfind_app.core.models import SpeechPriority
from wayfind_app.hal import ISpeechSink


class SpeechArbiter:
    """Serializes every producer onto one speech sink.

    URGENT and NAVIGATION requests open a suppression window after they are handed to
    the sink; INFORMATION requests arriving inside that window are dropped. The arbiter
    sequences and mutes, it never edits what is said.
    """

    def __init__(
        self,
        sink: ISpeechSink,
        clock: Clock,
        config: ArbiterConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.sink = sink
        self.clock = clock
        self.config = config or ArbiterConfig()
        self.logger = logger or logging.getLogger("wayfind.arbiter")
        self._lock = threading.RLock()
        self._suppression_until: Optional[float] = None
        self._in_flight: Optional[SpeechPriority] = None
        self.sink.set_idle_listener(self.mark_idle)

    def _suppressed(self, now: float) -> bool:
        return self._suppression_until is not None and now < self._suppression_until

    def _extend_window(self, now: float, duration_s: float) -> None:
        until = now + duration_s
        if self._suppression_until is None or until > self._suppression_until:
            self._suppression_until = until

    def is_suppressed(self, priority: SpeechPriority = SpeechPriority.INFORMATION) -> bool:
        if priority != SpeechPriority.INFORMATION:
            return False
        with self._lock:
            return self._suppressed(self.clock.now())

    def suppress_information(self, duration_s: float) -> None:
        with self._lock:
            self._extend_window(self.clock.now(), duration_s)

    @property
    def current_priority(self) -> Optional[SpeechPriority]:
        with self._lock:
            return self._in_flight

    def request(self, message: str, priority: SpeechPriority, interrupt: bool = False) -> bool:
        with self._lock:
            now = self.clock.now()
            if priority == SpeechPriority.INFORMATION and self._suppressed(now):
                self.logger.debug("speech dropped (suppressed until %.2f): %s", self._suppression_until, message)
                return False
            previous = self._in_flight
            # a queued request does not replace what is already playing
            if interrupt or self._in_flight is None:
                self._in_flight = priority
            try:
                ok = bool(self.sink.speak(message, interrupt, priority))
            except Exception:
                self.logger.exception("speech sink failed for: %s", message)
                ok = False
            if not ok:
                self._in_flight = previous
                self.logger.warning("speech request rejected by sink: %s", message)
                return False
            if priority != SpeechPriority.INFORMATION:
                self._extend_window(now, self.config.suppression_window_s)
            return True

    def mark_idle(self) -> None:
        """Idle listener for sinks that report the end of playback."""
        with self._lock:
            self._in_flight = None

    def stop(self) -> None:
        with self._lock:
            self._in_flight = None
            self.sink.stop()

    def reset(self) -> None:
        with self._lock:
            self._in_flight = None
            self._suppression_until = None
