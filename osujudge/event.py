from __future__ import annotations

from .enums.mode import GameMode
from .enums.mods import Mods
from .controller import Keys
from .util import (
    Base,
    encode_string,
    pack_int32,
    pack_uint8,
    pack_uint16,
    pack_uint32,
    pack_uint64,
)

# The last record of a cursor stream carries the RNG seed in its keys field, flagged by this delta.
SEED_MARKER = -12345


class Header(Base):
    """Fixed block at the start of a replay, everything before the compressed cursor stream.

    Attributes:
        mode : GameMode
            Ruleset the replay was recorded in
        version : int
            Game client version that recorded the replay, in yyyymmdd form
        beatmap_hash : str
            MD5 of the .osu file the replay was played on
        player_name : str
            Name of the player
        replay_hash : str
            MD5 of the replay itself, as computed by the game
        count_300, count_100, count_50, count_geki, count_katu, count_miss : int
            Per-judgement counts, as reported by the game
        score : int
            Total score
        max_combo : int
            Highest combo reached
        is_perfect_combo : bool
            True if the play had no misses and no slider breaks
        mods : Mods
            Modifiers the play was made with
        life_bar_graph : str
            Raw life bar string, "time|fraction" pairs separated by commas
        timestamp : int
            Creation time in .NET ticks (100ns since 0001-01-01 UTC)
    """

    mode: GameMode
    version: int
    beatmap_hash: str
    player_name: str
    replay_hash: str
    count_300: int
    count_100: int
    count_50: int
    count_geki: int
    count_katu: int
    count_miss: int
    score: int
    max_combo: int
    is_perfect_combo: bool
    mods: Mods
    life_bar_graph: str
    timestamp: int

    def __init__(
        self,
        mode: GameMode,
        version: int,
        beatmap_hash: str,
        player_name: str,
        replay_hash: str,
        count_300: int = 0,
        count_100: int = 0,
        count_50: int = 0,
        count_geki: int = 0,
        count_katu: int = 0,
        count_miss: int = 0,
        score: int = 0,
        max_combo: int = 0,
        is_perfect_combo: bool = False,
        mods: Mods | int = Mods.NONE,
        life_bar_graph: str = "",
        timestamp: int = 0,
    ):
        self.mode = mode
        self.version = version
        self.beatmap_hash = beatmap_hash
        self.player_name = player_name
        self.replay_hash = replay_hash
        self.count_300 = count_300
        self.count_100 = count_100
        self.count_50 = count_50
        self.count_geki = count_geki
        self.count_katu = count_katu
        self.count_miss = count_miss
        self.score = score
        self.max_combo = max_combo
        self.is_perfect_combo = is_perfect_combo
        self.mods = Mods(mods)
        self.life_bar_graph = life_bar_graph
        self.timestamp = timestamp

    def _pack(self) -> bytes:
        return b"".join(
            (
                pack_uint8(self.mode),
                pack_uint32(self.version),
                encode_string(self.beatmap_hash),
                encode_string(self.player_name),
                encode_string(self.replay_hash),
                pack_uint16(self.count_300),
                pack_uint16(self.count_100),
                pack_uint16(self.count_50),
                pack_uint16(self.count_geki),
                pack_uint16(self.count_katu),
                pack_uint16(self.count_miss),
                pack_int32(self.score),
                pack_uint16(self.max_combo),
                pack_uint8(1 if self.is_perfect_combo else 0),
                pack_uint32(self.mods),
                encode_string(self.life_bar_graph),
                pack_uint64(self.timestamp),
            )
        )

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return vars(self) == vars(other)


def _format_coordinate(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


class CursorSample(Base):
    """One record of the cursor stream.

    `time` is the raw delta from the previous record, `total_time` is the cumulative play time in milliseconds."""

    __slots__ = "time", "x", "y", "keys", "total_time"

    time: int  #: Milliseconds since the previous record, can be negative
    x: float  #: Cursor x position, 0 - 512
    y: float  #: Cursor y position, 0 - 384
    keys: Keys  #: Buttons held during this record
    total_time: int  #: Milliseconds since the start of the replay

    def __init__(self, time: int, x: float, y: float, keys: Keys | int, total_time: int = 0):
        self.time = time
        self.x = x
        self.y = y
        self.keys = Keys(keys)
        self.total_time = total_time

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def seconds(self) -> float:
        """Cumulative play time in seconds, the unit the judgement clock runs in."""
        return self.total_time / 1000

    def _pack(self) -> str:
        return f"{self.time}|{_format_coordinate(self.x)}|{_format_coordinate(self.y)}|{int(self.keys)}"

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return (
            other.time == self.time
            and other.x == self.x
            and other.y == self.y
            and other.keys == self.keys
            and other.total_time == self.total_time
        )
