"""
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import random
import threading

from wayfind_app.core.clock import ManualClock
from wayfind_app.core.models import (
    DecisionCategory,
    DecisionResult,
    NavigationDecision,
    SpeechPriority,
    SuppressionRule,
    ZoneCoverage,
)
from wayfind_app.core.partition_gate import PartitionGate


class _Speaker:
    def __init__(self, accept: bool = True) -> None:
        self.accept = accept
        self.calls: list[tuple[str, SpeechPriority, bool]] = []

    def __call__(self, text: str, priority: SpeechPriority, interrupt: bool) -> bool:
        if self.accept:
            self.calls.append((text, priority, interrupt))
        return self.accept


def _result(
    label: str = "box",
    decision: NavigationDecision = NavigationDecision.STEP_LEFT,
    distance: float = 2.0,
    occupancy: float = 0.3,
) -> DecisionResult:
    return DecisionResult(decision, distance, occupancy, label, ZoneCoverage())


def test_first_decision_speaks_at_time_zero() -> None:
    clock = ManualClock()
    speaker = _Speaker()
    ann = PartitionGate(clock).offer(_result(), speaker)
    assert ann is not None
    assert ann.timestamp_s == 0.0
    assert speaker.calls == [("box ahead of you, move left", SpeechPriority.NAVIGATION, False)]


def test_hard_floor_blocks_new_object_inside_two_seconds() -> None:
    clock = ManualClock()
    gate = PartitionGate(clock)
    speaker = _Speaker()
    assert gate.offer(_result("a"), speaker) is not None
    clock.set(1.9)
    assert gate.evaluate(_result("b")).reason == SuppressionRule.MIN_INTER_SPEECH
    assert gate.offer(_result("b"), speaker) is None
    clock.set(2.0)
    assert gate.offer(_result("b"), speaker) is not None


def test_same_object_needs_interval_and_meaningful_change() -> None:
    clock = ManualClock()
    gate = PartitionGate(clock)
    speaker = _Speaker()
    gate.offer(_result(distance=2.0), speaker)

    clock.set(3.0)
    assert gate.evaluate(_result(distance=1.0)).reason == SuppressionRule.NO_MEANINGFUL_CHANGE

    clock.set(6.0)
    assert gate.evaluate(_result(distance=2.2)).reason == SuppressionRule.NO_MEANINGFUL_CHANGE
    assert gate.evaluate(_result(distance=1.5)).speak
    assert gate.evaluate(_result(occupancy=0.45)).speak


def test_stop_repeats_on_urgent_interval_bounded_by_floor() -> None:
    clock = ManualClock()
    gate = PartitionGate(clock)
    speaker = _Speaker()
    stop = _result("door", NavigationDecision.STOP, 0.9, 0.6)
    ann = gate.offer(stop, speaker)
    assert ann is not None
    assert ann.priority == SpeechPriority.URGENT
    assert ann.interrupt is True

    clock.set(1.5)
    assert gate.offer(_result("door", NavigationDecision.STOP, 0.9, 0.75), speaker) is None
    clock.set(2.0)
    assert gate.offer(_result("door", NavigationDecision.STOP, 0.9, 0.75), speaker) is not None


def test_lateral_flip_is_one_category() -> None:
    clock = ManualClock()
    gate = PartitionGate(clock)
    gate.offer(_result(decision=NavigationDecision.STEP_LEFT), _Speaker())
    clock.set(2.5)
    verdict = gate.evaluate(_result(decision=NavigationDecision.STEP_RIGHT, distance=2.1))
    assert verdict.category == DecisionCategory.LATERAL
    assert verdict.category_changed is False
    assert verdict.speak is False


def test_failed_delivery_does_not_update_state() -> None:
    clock = ManualClock()
    gate = PartitionGate(clock)
    assert gate.offer(_result(), _Speaker(accept=False)) is None
    assert gate.snapshot().last_speech_time is None
    assert gate.offer(_result(), _Speaker()) is not None
    assert gate.snapshot().last_spoken_object_label == "box"


def test_path_clear_entry_and_repeat() -> None:
    clock = ManualClock()
    gate = PartitionGate(clock)
    speaker = _Speaker()
    spoken = []
    for t in range(10):
        clock.set(float(t))
        ann = gate.offer_path_clear(speaker)
        if ann:
            spoken.append(ann.timestamp_s)
    assert spoken == [0.0, 8.0]
    assert speaker.calls[0] == ("path clear, move straight", SpeechPriority.NAVIGATION, False)


def test_obstacle_rearms_path_clear_and_clear_rearms_object() -> None:
    clock = ManualClock()
    gate = PartitionGate(clock)
    speaker = _Speaker()
    assert gate.offer_path_clear(speaker) is not None
    clock.set(3.0)
    assert gate.offer(_result("box"), speaker) is not None
    clock.set(4.0)
    assert gate.evaluate_path_clear().reason == SuppressionRule.MIN_INTER_SPEECH
    clock.set(5.0)
    assert gate.offer_path_clear(speaker) is not None
    assert gate.snapshot().last_spoken_object_label is None
    clock.set(7.0)
    assert gate.offer(_result("box"), speaker) is not None


def test_never_two_announcements_inside_the_floor() -> None:
    rng = random.Random(7)
    clock = ManualClock()
    gate = PartitionGate(clock)
    speaker = _Speaker()
    times: list[float] = []
    for i in range(600):
        clock.set(i * 0.1)
        if rng.random() < 0.2:
            ann = gate.offer_path_clear(speaker)
        else:
            ann = gate.offer(
                _result(
                    rng.choice(["chair", "door", "person"]),
                    rng.choice(list(NavigationDecision)),
                    rng.uniform(0.5, 3.5),
                    rng.uniform(0.0, 1.0),
                ),
                speaker,
            )
        if ann:
            times.append(ann.timestamp_s)
    assert len(times) > 5
    assert all(b - a >= 2.0 - 1e-9 for a, b in zip(times, times[1:]))


def test_reset_forgets_everything() -> None:
    clock = ManualClock()
    gate = PartitionGate(clock)
    gate.offer(_result(), _Speaker())
    gate.reset()
    assert gate.snapshot().last_speech_time is None
    clock.set(0.5)
    assert gate.offer(_result(), _Speaker()) is not None


def _race(workers: int, action) -> list[object]:
    barrier = threading.Barrier(workers)
    results: list[object] = []
    lock = threading.Lock()

    def worker(i: int) -> None:
        barrier.wait()
        out = action(i)
        with lock:
            results.append(out)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def test_concurrent_offers_let_exactly_one_through() -> None:
    gate = PartitionGate(ManualClock(5.0))
    speaker = _Speaker()
    # distinct labels, so only the hard floor can stop the losers
    results = _race(8, lambda i: gate.offer(_result(label=f"box{i}"), speaker))
    assert sum(r is not None for r in results) == 1
    assert len(speaker.calls) == 1
    assert gate.snapshot().last_spoken_object_label == speaker.calls[0][0].split(" ")[0]


def test_concurrent_path_clear_speaks_once() -> None:
    gate = PartitionGate(ManualClock(5.0))
    speaker = _Speaker()
    results = _race(8, lambda i: gate.offer_path_clear(speaker))
    assert sum(r is not None for r in results) == 1
    assert speaker.calls == [("path clear, move straight", SpeechPriority.NAVIGATION, False)]
