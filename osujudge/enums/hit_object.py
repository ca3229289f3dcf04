from enum import IntFlag

from ..util import Enum


class HitObjectType(IntFlag):
    """Type byte of a hit object line. Exactly one of CIRCLE, SLIDER and SPINNER is set on a valid standard object."""

    HOLD = 2**7
    COMBO_SKIP_3 = 2**6
    COMBO_SKIP_2 = 2**5
    COMBO_SKIP_1 = 2**4
    SPINNER = 2**3
    NEW_COMBO = 2**2
    SLIDER = 2**1
    CIRCLE = 2**0
    NONE = 0


class HitObjectKind(Enum):
    CIRCLE = "circle"
    SLIDER = "slider"
    SPINNER = "spinner"


class CurveType(Enum):
    LINEAR = "L"
    PERFECT_CIRCLE = "P"
    BEZIER = "B"
    CATMULL = "C"
