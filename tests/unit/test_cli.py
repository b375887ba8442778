"""
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

np = pytest.importorskip("numpy")

from wayfind_app.audio.sinks import RecordingSpeechSink  # noqa: E402
from wayfind_app.cli import SEMVER, main, parse_frame, process_stream  # noqa: E402
from wayfind_app.core.clock import ManualClock  # noqa: E402
from wayfind_app.core.session import NavigationSession  # noqa: E402

DOOR = {
    "label": "door",
    "confidence": 0.9,
    "x_center": 0.5,
    "y_center": 0.55,
    "width": 0.9,
    "height": 0.9,
    "distance_meters": 0.5,
}


def _run(
    lines: list[str], capsys: pytest.CaptureFixture[str]
) -> tuple[list[dict], RecordingSpeechSink, ManualClock]:
    clock = ManualClock()
    sink = RecordingSpeechSink()
    session = NavigationSession(sink=sink, clock=clock)
    assert process_stream(lines, session, clock, logging.getLogger("wayfind.test")) == 0
    out = [json.loads(row) for row in capsys.readouterr().out.splitlines() if row.strip()]
    return out, sink, clock


def test_parse_frame_normalized_and_pixel_boxes() -> None:
    frame = parse_frame(json.dumps({"timestamp_s": 1.5, "detections": [DOOR]}))
    assert frame.timestamp_s == 1.5
    assert frame.event == "frame"
    assert frame.detections[0].label == "door"

    px = parse_frame(
        json.dumps(
            {
                "image_width": 640,
                "image_height": 480,
                "detections": [{"label": "chair", "score": 0.7, "box": [0, 240, 320, 480]}],
            }
        )
    )
    assert px.timestamp_s is None
    assert px.detections[0].x_center == pytest.approx(0.25)
    assert px.detections[0].y_center == pytest.approx(0.75)


def test_parse_frame_depth_map_and_errors() -> None:
    frame = parse_frame(json.dumps({"detections": [], "depth_map": [[1, 2], [3, 4]]}))
    assert frame.depth_map is not None
    assert frame.depth_map.shape == (2, 2)
    with pytest.raises(ValueError):
        parse_frame("[1, 2]")
    with pytest.raises(ValueError):
        parse_frame(json.dumps({"event": "teleport"}))
    with pytest.raises(ValueError):
        parse_frame(json.dumps({"depth_map": [1, 2, 3]}))


def test_stream_prints_announcements_and_skips_bad_lines(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    lines = [
        json.dumps({"timestamp_s": 0.0, "detections": []}),
        "{not json",
        json.dumps({"timestamp_s": 2.5, "detections": [DOOR]}),
    ]
    with caplog.at_level(logging.ERROR):
        out, sink, _ = _run(lines, capsys)
    assert [row["text"] for row in out] == ["path clear, move straight", "door ahead of you, stop"]
    assert out[1]["decision"] == "STOP"
    assert out[1]["priority"] == "urgent"
    assert out[1]["interrupt"] is True
    assert out[1]["app"] == "wayfind"
    assert out[1]["mode"] == "partition"
    assert "invalid frame" in caplog.text
    assert len(sink.history) == 2


def test_session_control_events(capsys: pytest.CaptureFixture[str]) -> None:
    lines = [
        json.dumps({"timestamp_s": 0.0}),
        json.dumps({"timestamp_s": 1.0, "event": "pause"}),
        json.dumps({"timestamp_s": 2.0, "detections": [DOOR]}),
        json.dumps({"timestamp_s": 3.0, "event": "scene", "text": "a hallway with a door at the end"}),
        json.dumps({"timestamp_s": 4.0, "event": "resume"}),
        json.dumps({"timestamp_s": 4.5}),
    ]
    out, sink, _ = _run(lines, capsys)
    assert [row["source"] for row in out] == ["path_clear", "scene", "path_clear"]
    assert sink.stops == 1


def test_depth_map_fills_missing_distance(capsys: pytest.CaptureFixture[str]) -> None:
    door = {k: v for k, v in DOOR.items() if k != "distance_meters"}
    lines = [json.dumps({"timestamp_s": 0.0, "detections": [door], "depth_map": [[75.0] * 4] * 4})]
    out, _, _ = _run(lines, capsys)
    assert out[0]["decision"] == "STOP"
    assert out[0]["distance_meters"] == pytest.approx(0.5)


def test_missing_timestamps_advance_by_frame_interval(capsys: pytest.CaptureFixture[str]) -> None:
    _, _, clock = _run([json.dumps({}) for _ in range(3)], capsys)
    assert clock.now() == pytest.approx(0.2)


def test_backwards_timestamp_is_rejected(
    capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
) -> None:
    lines = [json.dumps({"timestamp_s": 5.0}), json.dumps({"timestamp_s": 4.0, "detections": [DOOR]})]
    with caplog.at_level(logging.ERROR):
        out, _, clock = _run(lines, capsys)
    assert len(out) == 1
    assert clock.now() == 5.0
    assert "invalid frame" in caplog.text


def test_main_version_and_self_test(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"wayfind {SEMVER}"
    assert main(["--self-test"]) == 0
    assert "Self-test: PASS" in capsys.readouterr().out


def test_main_print_config_applies_overrides(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--print-config", "--mode", "scoring", "--lang", "de", "--narrator"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["mode"] == "scoring"
    assert data["lang"] == "de"
    assert data["narrator"]["enabled"] is True


def test_main_replays_input_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "walk.jsonl"
    path.write_text(
        "\n".join([json.dumps({"timestamp_s": 0.0}), "", json.dumps({"timestamp_s": 2.5, "detections": [DOOR]})]),
        encoding="utf-8",
    )
    assert main(["--input", str(path)]) == 0
    rows = [json.loads(r) for r in capsys.readouterr().out.splitlines()]
    assert [r["source"] for r in rows] == ["path_clear", "navigation"]


def test_main_usage_errors(tmp_path: Path) -> None:
    assert main([]) == 2
    assert main(["--config", str(tmp_path / "missing.json"), "--print-config"]) == 2
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"mode": "fastest"}), encoding="utf-8")
    assert main(["--config", str(bad), "--print-config"]) == 2


def test_demo_mode_runs(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--demo-mode"]) == 0
    rows = [json.loads(r) for r in capsys.readouterr().out.splitlines()]
    assert rows[0]["text"] == "path clear, move straight"
    assert any(r["decision"] == "STOP" for r in rows)
