from __future__ import annotations

import pytest

from osujudge.difficulty import (
    approach_opacity,
    approach_scale,
    approach_timings,
    calculate_windows,
    hit_radius,
    hit_windows,
)
from osujudge.hit_objects import Difficulty


@pytest.mark.parametrize(
    "od, expected",
    [
        (0, (0.080, 0.140, 0.200)),
        (5, (0.050, 0.100, 0.150)),
        (8, (0.032, 0.076, 0.120)),
        (10, (0.020, 0.060, 0.100)),
    ],
)
def test_hit_windows(od, expected) -> None:
    assert hit_windows(od) == pytest.approx(expected)


@pytest.mark.parametrize(
    "ar, expected",
    [
        (0, (1.8, 1.2)),
        (3, (1.44, 0.96)),
        (5, (1.2, 0.8)),
        (9, (0.6, 0.4)),
        (10, (0.45, 0.3)),
    ],
)
def test_approach_timings(ar, expected) -> None:
    assert approach_timings(ar) == pytest.approx(expected)


def test_approach_timings_are_continuous_at_the_midpoint() -> None:
    assert approach_timings(5 - 1e-9) == pytest.approx((1.2, 0.8))
    assert approach_timings(5 + 1e-9) == pytest.approx((1.2, 0.8))


def test_hit_radius() -> None:
    assert hit_radius(4) == pytest.approx(36.48)
    assert hit_radius(0) == pytest.approx(54.4)


def test_calculate_windows_uses_overall_difficulty_when_approach_rate_is_missing() -> None:
    windows = calculate_windows(Difficulty(circle_size=4, overall_difficulty=9))

    assert windows.preempt == pytest.approx(0.6)
    assert windows.fade_in == pytest.approx(0.4)
    assert windows.window_50 == pytest.approx(0.110)
    assert windows.radius == pytest.approx(36.48)


def test_approach_opacity() -> None:
    windows = calculate_windows(Difficulty(approach_rate=5))

    # not yet visible, halfway through the fade in, fully opaque
    assert approach_opacity(2.0, 0.0, windows) == 0
    assert abs(approach_opacity(2.0, 1.0, windows) - 127) <= 1
    assert approach_opacity(2.0, 1.5, windows) == 255
    assert approach_opacity(2.0, 2.5, windows) == 255


def test_approach_scale() -> None:
    windows = calculate_windows(Difficulty(approach_rate=5))

    assert approach_scale(2.0, 2.0 - windows.preempt, windows) == pytest.approx(4.0)
    assert approach_scale(2.0, 1.4, windows) == pytest.approx(2.5)
    assert approach_scale(2.0, 2.0, windows) == pytest.approx(1.0)
