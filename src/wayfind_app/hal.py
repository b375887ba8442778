"""
Version: 0.1.0
License: MIT

Boundaries to the collaborators that live outside the decision core: the detector,
the depth model and the text-to-speech engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from wayfind_app.core.models import Detection, SpeechPriority

# (text, priority, interrupt) -> handed to the speech engine
Deliver = Callable[[str, SpeechPriority, bool], bool]


class IDetectionSource(ABC):
    @abstractmethod
    def next_detections(self) -> Optional[list[Detection]]: ...


class IDepthMapProvider(ABC):
    @abstractmethod
    def depth_map(self, frame: Any) -> Any: ...


class ISpeechSink(ABC):
    """Fire-and-forget speech output. ``speak`` must not block until playback ends.

    Sinks that know when playback finished report it through the idle listener;
    the listener may be called from inside ``speak``.
    """

    _idle_listener: Optional[Callable[[], None]] = None

    @abstractmethod
    def speak(self, text: str, interrupt: bool, priority: SpeechPriority) -> bool: ...

    @abstractmethod
    def stop(self) -> None: ...

    def set_idle_listener(self, listener: Optional[Callable[[], None]]) -> None:
        self._idle_listener = listener

    def notify_idle(self) -> None:
        if self._idle_listener is not None:
            self._idle_listener()
