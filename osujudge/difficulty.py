from __future__ import annotations

from dataclasses import dataclass

from .hit_objects import Difficulty

# approach rate at which the piecewise preempt/fade-in formulas switch branches
AR_MIDPOINT = 5.0
MAX_OPACITY = 255


@dataclass(frozen=True)
class DifficultyWindows:
    """Timing values derived from a beatmap's difficulty. All times are in seconds.

    Attributes:
        window_300 : float
            Largest absolute hit error that still counts as a 300
        window_100 : float
        window_50 : float
            Largest absolute hit error that still counts as a hit at all
        preempt : float
            How long before its start time an object appears
        fade_in : float
            How long an object takes to become fully opaque once it appears
        radius : float
            Hit circle radius in osu!pixels
    """

    window_300: float
    window_100: float
    window_50: float
    preempt: float
    fade_in: float
    radius: float


def hit_windows(od: float) -> tuple[float, float, float]:
    """Takes overall difficulty, returns the (300, 100, 50) hit windows in seconds."""
    return (
        (80 - 6 * od) / 1000,
        (140 - 8 * od) / 1000,
        (200 - 10 * od) / 1000,
    )


def approach_timings(ar: float) -> tuple[float, float]:
    """Takes approach rate, returns (preempt, fade_in) in seconds."""
    if ar < AR_MIDPOINT:
        return (
            (1200 + 600 * (AR_MIDPOINT - ar) / 5) / 1000,
            (800 + 400 * (AR_MIDPOINT - ar) / 5) / 1000,
        )
    elif ar == AR_MIDPOINT:
        return (1.2, 0.8)
    else:
        return (
            (1200 - 750 * (ar - AR_MIDPOINT) / 5) / 1000,
            (800 - 500 * (ar - AR_MIDPOINT) / 5) / 1000,
        )


def hit_radius(cs: float) -> float:
    """Takes circle size, returns the hit circle radius in osu!pixels."""
    return 54.4 - 4.48 * cs


def calculate_windows(difficulty: Difficulty) -> DifficultyWindows:
    window_300, window_100, window_50 = hit_windows(difficulty.overall_difficulty)
    preempt, fade_in = approach_timings(difficulty.approach_rate)
    return DifficultyWindows(
        window_300=window_300,
        window_100=window_100,
        window_50=window_50,
        preempt=preempt,
        fade_in=fade_in,
        radius=hit_radius(difficulty.circle_size),
    )


# ---------------------------------------------------------------------------- #
#                              Presentation helpers                            #
# ---------------------------------------------------------------------------- #


def approach_opacity(object_time: float, play_time: float, windows: DifficultyWindows) -> int:
    """Takes an object's start time and the play time (seconds), returns its alpha in the range 0 - 255.

    Objects are invisible until `preempt` before their start, then fade in linearly over `fade_in`."""
    if object_time <= play_time + windows.fade_in:
        return MAX_OPACITY
    if object_time <= play_time + windows.preempt:
        progress = (object_time - (play_time + windows.fade_in)) / (windows.preempt - windows.fade_in)
        return max(int(MAX_OPACITY - progress * MAX_OPACITY), 0)
    return 0


def approach_scale(object_time: float, play_time: float, windows: DifficultyWindows) -> float:
    """Takes an object's start time and the play time (seconds), returns the approach circle size as a multiple of
    the hit circle radius. 4x when the object appears, 1x when it should be hit."""
    time_to_hit = object_time - play_time
    return 1.0 + 3.0 * (1.0 - (windows.preempt - time_to_hit) / windows.preempt)
