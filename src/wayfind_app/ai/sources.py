"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

from collections import deque
from typing import Any, Iterable, Optional, Sequence

from wayfind_app.core.models import Detection
from wayfind_app.hal import IDepthMapProvider, IDetectionSource


class ListDetectionSource(IDetectionSource):
    """Plays back prepared detection batches; returns None once exhausted."""

    def __init__(self, batches: Iterable[Sequence[Detection]]) -> None:
        self._batches: deque[list[Detection]] = deque(list(b) for b in batches)

    def next_detections(self) -> Optional[list[Detection]]:
        if not self._batches:
            return None
        return self._batches.popleft()


class StaticDepthMapProvider(IDepthMapProvider):
    """Same depth map for every frame; handy for calibration runs."""

    def __init__(self, depth_map: Any) -> None:
        self._depth_map = depth_map

    def depth_map(self, frame: Any) -> Any:
        return self._depth_map
