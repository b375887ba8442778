"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Source of "now" in seconds for every cooldown and suppression window."""

    @abstractmethod
    def now(self) -> float: ...


class MonotonicClock(Clock):
    def now(self) -> float:
        return time.monotonic()


class ManualClock(Clock):
    """Clock advanced by hand; used by tests and by frame-log replay."""

    def __init__(self, start_s: float = 0.0) -> None:
        self._now = float(start_s)

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        self._now += seconds
        return self._now

    def set(self, timestamp_s: float) -> float:
        if timestamp_s < self._now:
            raise ValueError(f"clock cannot move backwards ({timestamp_s} < {self._now})")
        self._now = float(timestamp_s)
        return self._now
