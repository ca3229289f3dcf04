from abc import ABC, abstractmethod
from collections import UserList
from dataclasses import dataclass

import polars as pl

from ..util import Enum


class JudgementKind(Enum):
    HIT = "hit"
    MISS_TIMING = "miss_timing"
    """Input landed on the object, but far too early"""
    MISS_AIM = "miss_aim"
    """Input arrived inside the hit window, but off the object"""
    MISS_TIMEOUT = "miss_timeout"
    """No qualifying input arrived before the hit window closed"""

    @property
    def is_miss(self) -> bool:
        return self is not JudgementKind.HIT


@dataclass(frozen=True)
class JudgementEvent:
    """A single outcome, in the order the engine produced it.

    Attributes:
        kind : JudgementKind
        index : int
            Index of the hit object in the beatmap
        time : float
            Play time in seconds the judgement was made at
        position : tuple[float, float] | None
            Cursor position at that time, None when the replay has no samples yet
        hit_error : float | None
            Input time minus object time in seconds, only set for input-driven judgements
        grade : int | None
            300, 100 or 50 for hits, None for misses
    """

    kind: JudgementKind
    index: int
    time: float
    position: tuple[float, float] | None = None
    hit_error: float | None = None
    grade: int | None = None


@dataclass
class MissRecord:
    """A miss as kept for display.

    Aim misses start out provisional (`confirmed` False) because the player can still hit the object inside its
    window. They are confirmed once the object is left behind without being hit."""

    time: float
    index: int
    position: tuple[float, float] | None
    kind: JudgementKind
    confirmed: bool = True


def _position_columns(position):
    if position is None:
        return {"x": None, "y": None}
    return {"x": float(position[0]), "y": float(position[1])}


class JudgementList(ABC, UserList):
    """Iterable wrapper shared by the event log and the miss list. Rows exported with to_polars() are prefixed with
    the replay's data header."""

    _item_type: type

    def __init__(self, data_header: dict | None = None):
        self.data = []
        self._data_header = data_header or {}
        self._header_schema = {
            "player_name": pl.Utf8,
            "beatmap_hash": pl.Utf8,
            "mods": pl.Utf8,
            "date_time": pl.Datetime(time_zone="UTC"),
        }

    def append(self, item):
        if isinstance(item, self._item_type):
            UserList.append(self, item)
        else:
            raise TypeError(f"Incorrect item type: {type(item)}, expected {self._item_type.__name__}")

    def _schema(self) -> dict:
        schema = {key: dtype for key, dtype in self._header_schema.items() if key in self._data_header}
        return schema | self._row_schema

    @property
    @abstractmethod
    def _row_schema(self) -> dict:
        ...

    @abstractmethod
    def _row(self, item) -> dict:
        ...

    def to_polars(self) -> pl.DataFrame:
        schema = self._schema()
        if len(self.data) == 0:
            return pl.DataFrame([], schema)
        rows = [self._data_header | self._row(item) for item in self.data]
        return pl.DataFrame(rows, schema=schema)


class Judgements(JudgementList):
    """Ordered log of every JudgementEvent a judgement run produced."""

    _item_type = JudgementEvent

    @property
    def _row_schema(self) -> dict:
        return {
            "kind": pl.Utf8,
            "index": pl.Int64,
            "time": pl.Float64,
            "x": pl.Float64,
            "y": pl.Float64,
            "hit_error": pl.Float64,
            "grade": pl.Int64,
        }

    def _row(self, item: JudgementEvent) -> dict:
        return {
            "kind": item.kind.name,
            "index": item.index,
            "time": item.time,
            **_position_columns(item.position),
            "hit_error": item.hit_error,
            "grade": item.grade,
        }

    def hits(self) -> list[JudgementEvent]:
        return [event for event in self.data if event.kind is JudgementKind.HIT]

    def misses(self) -> list[JudgementEvent]:
        return [event for event in self.data if event.kind.is_miss]


class MissRecords(JudgementList):
    _item_type = MissRecord

    @property
    def _row_schema(self) -> dict:
        return {
            "kind": pl.Utf8,
            "index": pl.Int64,
            "time": pl.Float64,
            "x": pl.Float64,
            "y": pl.Float64,
            "confirmed": pl.Boolean,
        }

    def _row(self, item: MissRecord) -> dict:
        return {
            "kind": item.kind.name,
            "index": item.index,
            "time": item.time,
            **_position_columns(item.position),
            "confirmed": item.confirmed,
        }
