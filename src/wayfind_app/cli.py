#!/usr/bin/env python3
"""
Wayfind - navigation announcement replay CLI
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import numpy as np

from wayfind_app.ai.depth import DepthEnricher
from wayfind_app.ai.normalizer import from_mapping
from wayfind_app.audio.sinks import LoggingSpeechSink, RecordingSpeechSink
from wayfind_app.core.clock import ManualClock
from wayfind_app.core.config import LANGUAGES, MODES, WayfindConfig, load_config
from wayfind_app.core.models import Announcement, Detection
from wayfind_app.core.session import NavigationSession

APP_NAME = "wayfind"
SEMVER = "0.1.0"
EVENTS = ("frame", "reset", "pause", "resume", "scene")


@dataclass(frozen=True)
class Frame:
    timestamp_s: Optional[float]
    detections: tuple[Detection, ...]
    frame_width: float = 1.0
    event: str = "frame"
    text: str = ""
    depth_map: Optional[np.ndarray] = None


def parse_frame(raw: str) -> Frame:
    obj = json.loads(raw)
    if not isinstance(obj, dict):
        raise ValueError("frame must be a JSON object")
    event = str(obj.get("event", "frame"))
    if event not in EVENTS:
        raise ValueError(f"unknown event: {event}")
    image_w = obj.get("image_width")
    image_h = obj.get("image_height")
    detections = tuple(from_mapping(d, image_w, image_h) for d in obj.get("detections", []))
    depth_map = None
    if obj.get("depth_map") is not None:
        depth_map = np.asarray(obj["depth_map"], dtype=np.float32)
        if depth_map.ndim != 2:
            raise ValueError("depth_map must be a 2-D array")
    ts = obj.get("timestamp_s")
    return Frame(
        timestamp_s=None if ts is None else float(ts),
        detections=detections,
        frame_width=float(obj.get("frame_width", 1.0)),
        event=event,
        text=str(obj.get("text", "")),
        depth_map=depth_map,
    )


def event_payload(announcement: Announcement, mode: str) -> dict[str, object]:
    payload: dict[str, object] = {"app": APP_NAME, "version": SEMVER, "mode": mode}
    payload.update(announcement.as_dict())
    return payload


def iter_lines(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            row = line.strip()
            if row:
                yield row


def replay_frame(session: NavigationSession, clock: ManualClock, frame: Frame, enricher: DepthEnricher) -> list[Announcement]:
    if frame.timestamp_s is not None:
        clock.set(frame.timestamp_s)
    if frame.event == "reset":
        session.reset()
        return []
    if frame.event == "pause":
        session.pause()
        return []
    if frame.event == "resume":
        session.resume()
        return []
    if frame.event == "scene":
        scene = session.announce_scene_description(frame.text)
        return [scene] if scene else []
    detections: list[Detection] = list(frame.detections)
    if frame.depth_map is not None:
        detections = enricher.enrich(detections, frame.depth_map)
    return session.process_frame(detections, frame.frame_width)


def process_stream(
    lines: Iterable[str],
    session: NavigationSession,
    clock: ManualClock,
    logger: logging.Logger,
    frame_interval_s: float = 0.1,
) -> int:
    enricher = DepthEnricher(session.config.depth, logger.getChild("depth"))
    first = True
    for line in lines:
        try:
            frame = parse_frame(line)
            if frame.timestamp_s is None and not first:
                clock.advance(frame_interval_s)
            announcements = replay_frame(session, clock, frame, enricher)
        except (json.JSONDecodeError, KeyError, ValueError, TypeError) as exc:
            logger.error("invalid frame: %s", exc)
            continue
        first = False
        for announcement in announcements:
            print(json.dumps(event_payload(announcement, session.config.mode), ensure_ascii=False))
    return 0


def demo_frames() -> tuple[dict[str, Any], ...]:
    """A short walk: open corridor, a chair drifting in, a door blocking the path, then clear."""
    frames: list[dict[str, Any]] = []
    for i in range(4):
        frames.append({"timestamp_s": i * 0.5, "detections": []})
    for i in range(6):
        frames.append(
            {
                "timestamp_s": 2.0 + i * 0.5,
                "detections": [
                    {
                        "label": "chair",
                        "confidence": 0.82,
                        "x_center": 0.5,
                        "y_center": 0.7,
                        "width": 0.25,
                        "height": 0.4,
                        "distance_meters": round(3.0 - i * 0.3, 2),
                    }
                ],
            }
        )
    for i in range(4):
        frames.append(
            {
                "timestamp_s": 5.5 + i * 0.5,
                "detections": [
                    {
                        "label": "door",
                        "confidence": 0.9,
                        "x_center": 0.5,
                        "y_center": 0.55,
                        "width": 0.8,
                        "height": 0.9,
                        "distance_meters": 0.8,
                    }
                ],
            }
        )
    for i in range(8):
        frames.append({"timestamp_s": 8.0 + i * 0.5, "detections": []})
    return tuple(frames)


def run_demo_mode(config: WayfindConfig, logger: logging.Logger) -> int:
    clock = ManualClock()
    session = NavigationSession(config, LoggingSpeechSink(logger.getChild("speech")), clock, logger)
    return process_stream((json.dumps(f) for f in demo_frames()), session, clock, logger)


def _selftest_session(config: WayfindConfig) -> tuple[NavigationSession, ManualClock, RecordingSpeechSink]:
    clock = ManualClock()
    sink = RecordingSpeechSink()
    return NavigationSession(config, sink, clock), clock, sink


def run_self_test() -> int:
    checks: dict[str, bool] = {}

    session, clock, sink = _selftest_session(WayfindConfig())
    table = Detection("table", 0.9, 0.25, 0.7, 0.5, 0.5, distance_meters=1.5)
    out = session.process_frame([table], frame_width=1000.0)
    checks["table_step_right"] = bool(out) and out[0].text == "table ahead of you, move right"

    session, clock, sink = _selftest_session(WayfindConfig())
    clear = 0
    for t in range(10):
        clock.set(float(t))
        clear += len(session.process_frame([]))
    checks["path_clear_twice"] = clear == 2

    session, clock, sink = _selftest_session(WayfindConfig(mode="scoring"))
    person = Detection("person", 0.9, 0.5, 0.7, 0.3, 0.6, distance_meters=3.0)
    checks["medium_center_allowed"] = len(session.process_frame([person])) == 1

    ok = all(checks.values())
    print(json.dumps({"checks": checks}, indent=2))
    print("Self-test:", "PASS" if ok else "FAIL")
    return 0 if ok else 1


def configure_logger(debug: bool, log_file: Path | None) -> logging.Logger:
    logger = logging.getLogger(APP_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    stream_h = logging.StreamHandler(sys.stderr)
    stream_h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(stream_h)
    if log_file:
        file_h = logging.FileHandler(log_file, encoding="utf-8")
        file_h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(file_h)
    return logger


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description=f"Wayfind navigation announcements v{SEMVER}")
    p.add_argument("--version", action="store_true")
    p.add_argument("--self-test", action="store_true")
    p.add_argument("--demo-mode", action="store_true")
    p.add_argument("--print-config", action="store_true")

    p.add_argument("--input", type=Path)
    p.add_argument("--config", type=Path)
    p.add_argument("--mode", choices=list(MODES))
    p.add_argument("--lang", choices=list(LANGUAGES))
    p.add_argument("--narrator", action="store_true")
    p.add_argument("--frame-interval", type=float, default=0.1)
    p.add_argument("--debug", action="store_true")
    p.add_argument("--log-file", type=Path)
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logger(args.debug, args.log_file)

    if args.version:
        print(f"{APP_NAME} {SEMVER}")
        return 0
    if args.self_test:
        return run_self_test()

    overrides: dict[str, object] = {}
    if args.mode:
        overrides["mode"] = args.mode
    if args.lang:
        overrides["lang"] = args.lang
    if args.narrator:
        overrides["narrator"] = {"enabled": True}
    try:
        config = load_config(args.config, overrides=overrides)
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        logger.error("invalid configuration: %s", exc)
        return 2

    if args.print_config:
        print(json.dumps(config.as_dict(), ensure_ascii=False, indent=2))
        return 0
    if args.demo_mode:
        return run_demo_mode(config, logger)

    if args.input is None:
        print("Error: --input is required unless --demo-mode/--self-test is used.", file=sys.stderr)
        return 2
    clock = ManualClock()
    session = NavigationSession(config, LoggingSpeechSink(logger.getChild("speech")), clock, logger)
    return process_stream(iter_lines(args.input), session, clock, logger, args.frame_interval)


if __name__ == "__main__":
    raise SystemExit(main())
