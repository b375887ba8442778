"""
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import pytest

from wayfind_app.core.models import Detection, Zone
from wayfind_app.core.partition import PartitionAnalyzer


def _det(left: float, right: float, distance: float | None = 1.5) -> Detection:
    return Detection("box", 0.9, (left + right) / 2.0, 0.6, right - left, 0.4, distance)


def test_left_half_box_covers_left_zone_and_half_the_center() -> None:
    a = PartitionAnalyzer().analyze(_det(0.0, 0.5), frame_width=1000.0)
    assert a.overlaps == frozenset({Zone.LEFT, Zone.CENTER})
    assert a.center_zone == Zone.LEFT
    assert a.overall_occupancy == pytest.approx(0.5)
    assert a.zone_coverage.left_pct == pytest.approx(1.0)
    assert a.zone_coverage.center_pct == pytest.approx(0.5)
    assert a.zone_coverage.right_pct == 0.0


def test_full_span_covers_every_zone() -> None:
    a = PartitionAnalyzer().analyze(_det(0.0, 1.0))
    assert a.overlaps == frozenset({Zone.LEFT, Zone.CENTER, Zone.RIGHT})
    assert a.center_zone == Zone.CENTER
    assert a.overall_occupancy == pytest.approx(1.0)
    assert a.zone_coverage.dominant_zone() == Zone.CENTER


def test_box_hanging_off_the_frame_is_clipped() -> None:
    a = PartitionAnalyzer().analyze(_det(-0.2, 0.2))
    assert a.overall_occupancy == pytest.approx(0.2)
    assert a.zone_coverage.left_pct == pytest.approx(0.6)
    assert a.zone_coverage.left_pct <= 1.0


def test_unit_of_frame_width_does_not_change_ratios() -> None:
    analyzer = PartitionAnalyzer()
    px = analyzer.analyze(_det(0.7, 0.95), frame_width=640.0)
    norm = analyzer.analyze(_det(0.7, 0.95), frame_width=1.0)
    assert px.center_zone == norm.center_zone == Zone.RIGHT
    assert px.zone_coverage.right_pct == pytest.approx(norm.zone_coverage.right_pct)


def test_degenerate_box_has_zero_occupancy_and_a_zone() -> None:
    a = PartitionAnalyzer().analyze(Detection("dot", 0.9, 0.5, 0.5, 0.0, 0.0, 1.0))
    assert a.overall_occupancy == 0.0
    assert a.center_zone == Zone.CENTER
    assert a.zone_coverage.left_pct == a.zone_coverage.right_pct == 0.0


def test_invalid_frame_width_raises() -> None:
    with pytest.raises(ValueError):
        PartitionAnalyzer().analyze(_det(0.1, 0.2), frame_width=0.0)
