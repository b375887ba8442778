"""Version: 0.1.0
License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class Zone(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class Direction(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class DistanceCategory(str, Enum):
    """Coarse distance bucket, ordered FAR < MEDIUM < CLOSE < VERY_CLOSE by danger."""

    FAR = "far"
    MEDIUM = "medium"
    CLOSE = "close"
    VERY_CLOSE = "very_close"

    @property
    def danger_rank(self) -> int:
        return _DANGER_ORDER.index(self)

    def is_more_dangerous_than(self, other: DistanceCategory) -> bool:
        return self.danger_rank > other.danger_rank

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DistanceCategory):
            return NotImplemented
        return self.danger_rank < other.danger_rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, DistanceCategory):
            return NotImplemented
        return self.danger_rank <= other.danger_rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, DistanceCategory):
            return NotImplemented
        return self.danger_rank > other.danger_rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, DistanceCategory):
            return NotImplemented
        return self.danger_rank >= other.danger_rank


_DANGER_ORDER = (
    DistanceCategory.FAR,
    DistanceCategory.MEDIUM,
    DistanceCategory.CLOSE,
    DistanceCategory.VERY_CLOSE,
)


class NavigationDecision(str, Enum):
    STOP = "STOP"
    STEP_LEFT = "STEP_LEFT"
    STEP_RIGHT = "STEP_RIGHT"
    GO_STRAIGHT = "GO_STRAIGHT"


class DecisionCategory(str, Enum):
    STOP = "STOP"
    LATERAL = "LATERAL"
    STRAIGHT = "STRAIGHT"


class SpeechPriority(str, Enum):
    URGENT = "urgent"
    NAVIGATION = "navigation"
    INFORMATION = "information"

    @property
    def rank(self) -> int:
        return {"urgent": 3, "navigation": 2, "information": 1}[self.value]


class AnnouncementSource(str, Enum):
    NAVIGATION = "navigation"
    PATH_CLEAR = "path_clear"
    GUIDANCE = "guidance"
    CLOSEST_OBJECT = "closest_object"
    SCENE = "scene"


class SuppressionRule(str, Enum):
    NONE = "none"
    MIN_INTER_SPEECH = "min_inter_speech"
    NO_MEANINGFUL_CHANGE = "no_meaningful_change"
    PATH_CLEAR_INTERVAL = "path_clear_interval"
    GLOBAL_COOLDOWN = "global_cooldown"
    FAR_AWAY = "far_away"
    MEDIUM_OFF_CENTER = "medium_off_center"
    TOO_SMALL = "too_small"
    FRAME_EDGE = "frame_edge"
    OBJECT_COOLDOWN = "object_cooldown"
    DIRECTION_COOLDOWN = "direction_cooldown"
    NOT_WORSENING = "not_worsening"
    DELIVERY_FAILED = "delivery_failed"


@dataclass(frozen=True)
class Detection:
    label: str
    confidence: float
    x_center: float
    y_center: float
    width: float
    height: float
    distance_meters: Optional[float] = None
    depth_value: Optional[float] = None

    @property
    def left(self) -> float:
        return self.x_center - self.width / 2.0

    @property
    def right(self) -> float:
        return self.x_center + self.width / 2.0

    @property
    def has_distance(self) -> bool:
        return self.distance_meters is not None

    def with_distance(self, distance_meters: float | None, depth_value: float | None = None) -> Detection:
        return replace(self, distance_meters=distance_meters, depth_value=depth_value)


@dataclass(frozen=True)
class ZoneCoverage:
    left_pct: float = 0.0
    center_pct: float = 0.0
    right_pct: float = 0.0

    def for_zone(self, zone: Zone) -> float:
        if zone == Zone.LEFT:
            return self.left_pct
        if zone == Zone.RIGHT:
            return self.right_pct
        return self.center_pct

    def dominant_zone(self) -> Zone:
        # ties resolve toward the center
        best = Zone.CENTER
        for zone in (Zone.LEFT, Zone.RIGHT):
            if self.for_zone(zone) > self.for_zone(best):
                best = zone
        return best


@dataclass(frozen=True)
class PartitionAnalysis:
    detection: Detection
    overlaps: frozenset[Zone]
    center_zone: Zone
    overall_occupancy: float
    zone_coverage: ZoneCoverage

    def overlaps_zone(self, zone: Zone) -> bool:
        return zone in self.overlaps


@dataclass(frozen=True)
class Guidance:
    label: str
    direction: Direction
    distance_category: DistanceCategory
    priority: float


@dataclass(frozen=True)
class DecisionResult:
    decision: NavigationDecision
    distance_meters: float
    occupancy: float
    object_label: str
    zone_coverage: ZoneCoverage


@dataclass(frozen=True)
class Announcement:
    text: str
    priority: SpeechPriority
    interrupt: bool
    source: AnnouncementSource
    timestamp_s: float
    decision: Optional[NavigationDecision] = None
    label: Optional[str] = None
    distance_meters: Optional[float] = None
    occupancy: Optional[float] = None

    def as_dict(self) -> dict[str, object]:
        return {
            "timestamp_s": round(self.timestamp_s, 3),
            "text": self.text,
            "priority": self.priority.value,
            "interrupt": self.interrupt,
            "source": self.source.value,
            "decision": self.decision.value if self.decision else None,
            "label": self.label,
            "distance_meters": self.distance_meters,
            "occupancy": None if self.occupancy is None else round(self.occupancy, 3),
        }
