"""Version: 0.1.0
License: MIT

Tunables for both decision paths and both announcement gates.

The partition path and the legacy scoring path keep separate sections on purpose:
their thresholds are tuned independently and must never be shared.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

ENV_PREFIX = "WAYFIND_"
MODES = ("partition", "scoring")
LANGUAGES = ("en", "de")

DEFAULT_STOPLIST = (
    "book",
    "bottle",
    "cup",
    "keyboard",
    "mouse",
    "laptop",
    "charger",
    "cell phone",
    "remote",
)


def _require_fraction(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


def _require_non_negative(name: str, value: float) -> None:
    if value < 0.0:
        raise ValueError(f"{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class PartitionConfig:
    min_confidence: float = 0.40
    navigation_horizon_m: float = 3.5
    full_block_threshold: float = 0.60
    large_object_threshold: float = 0.40
    stop_distance_m: float = 1.0
    alert_distance_m: float = 2.5

    def __post_init__(self) -> None:
        _require_fraction("partition.min_confidence", self.min_confidence)
        _require_fraction("partition.full_block_threshold", self.full_block_threshold)
        _require_fraction("partition.large_object_threshold", self.large_object_threshold)
        _require_non_negative("partition.navigation_horizon_m", self.navigation_horizon_m)
        _require_non_negative("partition.stop_distance_m", self.stop_distance_m)
        _require_non_negative("partition.alert_distance_m", self.alert_distance_m)


@dataclass(frozen=True)
class PartitionGateConfig:
    urgent_repeat_s: float = 1.2
    nonurgent_repeat_s: float = 5.0
    min_inter_speech_s: float = 2.0
    path_clear_repeat_s: float = 8.0
    distance_delta_m: float = 0.5
    occupancy_delta: float = 0.10

    def __post_init__(self) -> None:
        for f in fields(self):
            _require_non_negative(f"partition_gate.{f.name}", getattr(self, f.name))


@dataclass(frozen=True)
class ScoringConfig:
    min_confidence: float = 0.40
    min_y_center: float = 0.5
    min_width: float = 0.05
    left_boundary: float = 0.33
    right_boundary: float = 0.66
    very_close_m: float = 1.0
    close_m: float = 2.0
    medium_m: float = 4.0
    width_distance_fallback: bool = False
    center_weight: float = 4.0
    side_weight: float = 1.0
    stoplist: tuple[str, ...] = DEFAULT_STOPLIST

    def __post_init__(self) -> None:
        _require_fraction("scoring.min_confidence", self.min_confidence)
        _require_fraction("scoring.min_y_center", self.min_y_center)
        _require_fraction("scoring.min_width", self.min_width)
        if not 0.0 <= self.left_boundary < self.right_boundary <= 1.0:
            raise ValueError("scoring boundaries must satisfy 0 <= left < right <= 1")
        if not 0.0 <= self.very_close_m <= self.close_m <= self.medium_m:
            raise ValueError("scoring distance thresholds must be ascending")


@dataclass(frozen=True)
class RateLimiterConfig:
    global_cooldown_s: float = 2.5
    per_object_cooldown_s: float = 5.0
    directional_cooldown_s: float = 3.0
    min_width: float = 0.08
    edge_margin: float = 0.05
    medium_priority_floor: float = 10.0

    def __post_init__(self) -> None:
        _require_non_negative("rate_limiter.global_cooldown_s", self.global_cooldown_s)
        _require_non_negative("rate_limiter.per_object_cooldown_s", self.per_object_cooldown_s)
        _require_non_negative("rate_limiter.directional_cooldown_s", self.directional_cooldown_s)
        _require_fraction("rate_limiter.min_width", self.min_width)
        if not 0.0 <= self.edge_margin < 0.5:
            raise ValueError("rate_limiter.edge_margin must be within [0, 0.5)")


@dataclass(frozen=True)
class ArbiterConfig:
    suppression_window_s: float = 1.5

    def __post_init__(self) -> None:
        _require_non_negative("arbiter.suppression_window_s", self.suppression_window_s)


@dataclass(frozen=True)
class NarratorConfig:
    enabled: bool = False
    min_confidence: float = 0.40
    ema_alpha: float = 0.35
    distance_change_m: float = 0.3
    cooldown_s: float = 1.2

    def __post_init__(self) -> None:
        _require_fraction("narrator.min_confidence", self.min_confidence)
        if not 0.0 < self.ema_alpha <= 1.0:
            raise ValueError("narrator.ema_alpha must be within (0, 1]")
        _require_non_negative("narrator.distance_change_m", self.distance_change_m)
        _require_non_negative("narrator.cooldown_s", self.cooldown_s)


@dataclass(frozen=True)
class DepthConfig:
    scale_factor: float = 150.0
    min_depth_m: float = 0.1
    max_depth_m: float = 10.0

    def __post_init__(self) -> None:
        if self.scale_factor <= 0.0:
            raise ValueError("depth.scale_factor must be > 0")
        if not 0.0 <= self.min_depth_m < self.max_depth_m:
            raise ValueError("depth range must satisfy 0 <= min < max")


@dataclass(frozen=True)
class WayfindConfig:
    mode: str = "partition"
    lang: str = "en"
    partition: PartitionConfig = field(default_factory=PartitionConfig)
    partition_gate: PartitionGateConfig = field(default_factory=PartitionGateConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    rate_limiter: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    arbiter: ArbiterConfig = field(default_factory=ArbiterConfig)
    narrator: NarratorConfig = field(default_factory=NarratorConfig)
    depth: DepthConfig = field(default_factory=DepthConfig)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"unknown mode: {self.mode}")
        if self.lang not in LANGUAGES:
            raise ValueError(f"unsupported language: {self.lang}")

    def as_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["scoring"]["stoplist"] = list(self.scoring.stoplist)
        return out


SECTIONS = (
    "partition_gate",
    "rate_limiter",
    "partition",
    "scoring",
    "arbiter",
    "narrator",
    "depth",
)


def _coerce(template: object, raw: Any, name: str) -> object:
    if isinstance(template, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in {"1", "true", "yes", "on"}:
            return True
        if text in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"{name}: expected a boolean, got {raw!r}")
    if isinstance(template, float):
        try:
            return float(raw)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name}: expected a number, got {raw!r}") from exc
    if isinstance(template, tuple):
        if isinstance(raw, str):
            items = raw.split(",")
        elif isinstance(raw, (list, tuple)):
            items = list(raw)
        else:
            raise ValueError(f"{name}: expected a list, got {raw!r}")
        return tuple(str(x).strip().lower() for x in items if str(x).strip())
    return str(raw)


def _apply_section(section: Any, section_name: str, values: Mapping[str, object]) -> Any:
    known = {f.name for f in fields(section)}
    changes: dict[str, object] = {}
    for key, raw in values.items():
        if key not in known:
            raise ValueError(f"unknown setting: {section_name}.{key}")
        changes[key] = _coerce(getattr(section, key), raw, f"{section_name}.{key}")
    return replace(section, **changes) if changes else section


def _merge(config: WayfindConfig, data: Mapping[str, object]) -> WayfindConfig:
    top: dict[str, object] = {}
    for key, value in data.items():
        if key in ("mode", "lang"):
            top[key] = str(value)
        elif key in SECTIONS:
            if not isinstance(value, Mapping):
                raise ValueError(f"section {key} must be an object")
            top[key] = _apply_section(getattr(config, key), key, value)
        else:
            raise ValueError(f"unknown config section: {key}")
    return replace(config, **top) if top else config


def env_overrides(env: Mapping[str, str]) -> dict[str, object]:
    """Collect WAYFIND_<SECTION>_<FIELD> variables into a nested mapping."""
    out: dict[str, Any] = {}
    for name, value in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = name[len(ENV_PREFIX):].lower()
        if key in ("mode", "lang"):
            out[key] = value
            continue
        for section in SECTIONS:
            if key.startswith(section + "_"):
                out.setdefault(section, {})[key[len(section) + 1:]] = value
                break
    return out


def load_config(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> WayfindConfig:
    """Defaults, then a JSON file, then environment variables, then explicit overrides."""
    config = WayfindConfig()
    if path is not None:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"config file {path} must contain a JSON object")
        config = _merge(config, data)
    config = _merge(config, env_overrides(os.environ if env is None else env))
    if overrides:
        config = _merge(config, overrides)
    return config
