"""
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

from typing import Optional


class ExponentialSmoother:
    """Exponential moving average used to steady jittery per-frame distances."""

    def __init__(self, alpha: float = 0.3) -> None:
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be within (0, 1], got {alpha}")
        self.alpha = alpha
        self._value: Optional[float] = None

    def push(self, value: float) -> float:
        if self._value is None:
            self._value = value
        else:
            self._value = self.alpha * value + (1.0 - self.alpha) * self._value
        return self._value

    def reset(self) -> None:
        self._value = None

    @property
    def value(self) -> Optional[float]:
        return self._value
