from __future__ import annotations

from .enums.hit_object import CurveType, HitObjectKind
from .util import Base


class Difficulty(Base):
    """Raw [Difficulty] section values, exactly as written in the .osu file.

    Attributes:
        hp_drain_rate : float
        circle_size : float
        overall_difficulty : float
        approach_rate : float
            Falls back to overall_difficulty for files that predate the ApproachRate key
        slider_multiplier : float
        slider_tick_rate : float
    """

    hp_drain_rate: float
    circle_size: float
    overall_difficulty: float
    approach_rate: float
    slider_multiplier: float
    slider_tick_rate: float

    def __init__(
        self,
        hp_drain_rate: float = 5.0,
        circle_size: float = 5.0,
        overall_difficulty: float = 5.0,
        approach_rate: float | None = None,
        slider_multiplier: float = 1.4,
        slider_tick_rate: float = 1.0,
    ):
        self.hp_drain_rate = hp_drain_rate
        self.circle_size = circle_size
        self.overall_difficulty = overall_difficulty
        self.approach_rate = overall_difficulty if approach_rate is None else approach_rate
        self.slider_multiplier = slider_multiplier
        self.slider_tick_rate = slider_tick_rate

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return vars(self) == vars(other)


class SliderData(Base):
    """Slider payload of a hit object.

    Attributes:
        curve_type : CurveType
        control_points : tuple[tuple[int, int]]
            Curve anchors after the head, in file order. The head is the hit object's own position.
        repeat : int
            Number of slides, 1 means no reverse arrows
        length : float
            Visual length in osu!pixels
        edge_sounds : tuple[int]
            Hitsound bitmask for every edge (head, repeats, tail), empty when omitted
        edge_sets : tuple[str]
            "normal:addition" sample sets for every edge, empty when omitted
    """

    curve_type: CurveType
    control_points: tuple[tuple[int, int], ...]
    repeat: int
    length: float
    edge_sounds: tuple[int, ...]
    edge_sets: tuple[str, ...]

    def __init__(
        self,
        curve_type: CurveType,
        control_points: tuple[tuple[int, int], ...],
        repeat: int = 1,
        length: float = 0.0,
        edge_sounds: tuple[int, ...] = (),
        edge_sets: tuple[str, ...] = (),
    ):
        self.curve_type = curve_type
        self.control_points = tuple(control_points)
        self.repeat = repeat
        self.length = length
        self.edge_sounds = tuple(edge_sounds)
        self.edge_sets = tuple(edge_sets)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return vars(self) == vars(other)


class SpinnerData(Base):
    end_time: int  #: Milliseconds, the spinner ends (and resolves) here

    def __init__(self, end_time: int):
        self.end_time = end_time

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self.end_time == other.end_time


class HitObject(Base):
    """A single target of a beatmap.

    The variant is carried by `kind`; `slider` is only set for HitObjectKind.SLIDER and `spinner` only for
    HitObjectKind.SPINNER. Circles carry no payload."""

    x: int
    y: int
    time: int  #: Start time in milliseconds
    kind: HitObjectKind
    new_combo: bool
    hitsound: int
    slider: SliderData | None
    spinner: SpinnerData | None

    def __init__(
        self,
        x: int,
        y: int,
        time: int,
        kind: HitObjectKind,
        new_combo: bool = False,
        hitsound: int = 0,
        slider: SliderData | None = None,
        spinner: SpinnerData | None = None,
    ):
        match kind:
            case HitObjectKind.CIRCLE:
                if slider is not None or spinner is not None:
                    raise ValueError("circles carry no payload")
            case HitObjectKind.SLIDER:
                if slider is None or spinner is not None:
                    raise ValueError("sliders need exactly a SliderData payload")
            case HitObjectKind.SPINNER:
                if spinner is None or slider is not None:
                    raise ValueError("spinners need exactly a SpinnerData payload")

        self.x = x
        self.y = y
        self.time = time
        self.kind = kind
        self.new_combo = new_combo
        self.hitsound = hitsound
        self.slider = slider
        self.spinner = spinner

    @classmethod
    def circle(cls, x: int, y: int, time: int, **kwargs) -> HitObject:
        return cls(x, y, time, HitObjectKind.CIRCLE, **kwargs)

    @classmethod
    def spinner_at(cls, time: int, end_time: int, x: int = 256, y: int = 192, **kwargs) -> HitObject:
        return cls(x, y, time, HitObjectKind.SPINNER, spinner=SpinnerData(end_time), **kwargs)

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)

    @property
    def effective_time(self) -> int:
        """Milliseconds. Spinners end at their end time, everything else is judged on its start time."""
        match self.kind:
            case HitObjectKind.SPINNER:
                return self.spinner.end_time
            case HitObjectKind.CIRCLE | HitObjectKind.SLIDER:
                return self.time

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return vars(self) == vars(other)
