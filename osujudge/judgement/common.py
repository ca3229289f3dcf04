from math import dist

from ..difficulty import DifficultyWindows
from ..enums.hit_object import HitObjectKind
from ..event import CursorSample
from ..hit_objects import HitObject

# ---------------------------------------------------------------------------- #
#                                 Input Helpers                                #
# ---------------------------------------------------------------------------- #


def just_input_hit(curr_sample: CursorSample, prev_sample: CursorSample) -> bool:
    """Takes current and previous cursor sample, returns True if K1 or K2 changed from unpressed -> pressed"""
    return curr_sample.keys.just_pressed(prev_sample.keys)


def cursor_distance(sample: CursorSample, hit_object: HitObject) -> float:
    return dist(sample.position, hit_object.position)


# ---------------------------------------------------------------------------- #
#                               Hit Object Helpers                             #
# ---------------------------------------------------------------------------- #


def start_seconds(hit_object: HitObject) -> float:
    return hit_object.time / 1000


def end_seconds(hit_object: HitObject) -> float:
    """Spinner end time, or the start time for everything else"""
    return hit_object.effective_time / 1000


def is_clickable(hit_object: HitObject) -> bool:
    return hit_object.kind is HitObjectKind.CIRCLE or hit_object.kind is HitObjectKind.SLIDER


def is_visible(hit_object: HitObject, time: float, windows: DifficultyWindows) -> bool:
    """Takes a time in seconds, returns True if the object has started its approach by then"""
    return start_seconds(hit_object) - windows.preempt <= time


def hit_grade(hit_error: float, windows: DifficultyWindows) -> int:
    """Takes a hit error in seconds, returns the 300/100/50 tier it falls in. Early hits outside the 50 window that
    were still accepted count as 50s."""
    error = abs(hit_error)
    if error <= windows.window_300:
        return 300
    if error <= windows.window_100:
        return 100
    return 50
