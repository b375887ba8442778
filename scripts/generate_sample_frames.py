#!/usr/bin/env python3
"""
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import argparse
import json
import random
from pathlib import Path

LABELS = ("chair", "table", "person", "door", "bench", "trash can")


def build_frames(frames: int = 120, interval_s: float = 0.5, seed: int = 7) -> str:
    """A corridor walk: obstacles drift toward the camera and leave the frame again."""
    rng = random.Random(seed)
    rows = []
    label = rng.choice(LABELS)
    distance = 4.5
    x_center = rng.uniform(0.2, 0.8)
    for i in range(frames):
        detections = []
        if distance <= 4.0:
            width = min(0.95, 0.6 / max(distance, 0.3))
            detections.append(
                {
                    "label": label,
                    "confidence": round(rng.uniform(0.55, 0.95), 2),
                    "x_center": round(x_center, 3),
                    "y_center": 0.65,
                    "width": round(width, 3),
                    "height": round(min(0.9, width * 1.2), 3),
                    "distance_meters": round(distance, 2),
                }
            )
        rows.append(json.dumps({"timestamp_s": round(i * interval_s, 3), "detections": detections}))
        distance -= rng.uniform(0.1, 0.3)
        if distance < 0.4:
            label = rng.choice(LABELS)
            distance = rng.uniform(4.5, 6.0)
            x_center = rng.uniform(0.2, 0.8)
    return "\n".join(rows) + "\n"


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a sample JSONL frame log for replay.")
    parser.add_argument("--output", default="data/mock/sample_walk.jsonl")
    parser.add_argument("--frames", type=int, default=120)
    parser.add_argument("--seed", type=int, default=7)
    args = parser.parse_args()

    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(build_frames(frames=max(30, args.frames), seed=args.seed), encoding="utf-8")
    print(f"generated: {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
