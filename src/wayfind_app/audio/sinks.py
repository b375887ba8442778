"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from wayfind_app.core.models import SpeechPriority
from wayfind_app.hal import ISpeechSink


@dataclass(frozen=True)
class SpokenItem:
    text: str
    priority: SpeechPriority
    interrupt: bool


class LoggingSpeechSink(ISpeechSink):
    """Writes every request to the log instead of a speech engine.

    A log line is "played" the moment it is written, so the sink is idle again
    before ``speak`` returns.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def speak(self, text: str, interrupt: bool, priority: SpeechPriority) -> bool:
        self.logger.info("say[%s%s]: %s", priority.value, ",flush" if interrupt else "", text)
        self.notify_idle()
        return True

    def stop(self) -> None:
        self.logger.info("say: stop")


class RecordingSpeechSink(ISpeechSink):
    """Queue model of a TTS engine: flushing drops pending items, adding appends.

    ``finish_current`` plays out the head of the queue; the sink reports idle once
    the queue drains.
    """

    def __init__(self, accept: bool = True) -> None:
        self.accept = accept
        self.history: list[SpokenItem] = []
        self.queue: list[SpokenItem] = []
        self.stops = 0

    def speak(self, text: str, interrupt: bool, priority: SpeechPriority) -> bool:
        if not self.accept:
            return False
        item = SpokenItem(text, priority, interrupt)
        if interrupt:
            self.queue.clear()
        self.queue.append(item)
        self.history.append(item)
        return True

    def finish_current(self) -> Optional[SpokenItem]:
        if not self.queue:
            return None
        done = self.queue.pop(0)
        if not self.queue:
            self.notify_idle()
        return done

    def stop(self) -> None:
        self.queue.clear()
        self.stops += 1

    @property
    def texts(self) -> list[str]:
        return [item.text for item in self.history]
