from .beatmap import Beatmap
from .replay import Replay
from .parse import (
    DecompressionFailure,
    MalformedBeatmap,
    MalformedReplay,
    ParseError,
    UnknownCurveType,
    UnknownHitTypeBits,
    parse,
    parse_beatmap,
)
from .difficulty import DifficultyWindows, calculate_windows
from .judgement import *
from .session import judge, judge_directory, load_pair
from .controller import Keys
from .enums import *
