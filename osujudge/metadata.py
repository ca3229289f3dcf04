from __future__ import annotations

from datetime import datetime, timedelta, timezone

import tzlocal

from .enums.mode import GameMode
from .event import Header
from .util import Base

# .NET ticks are 100ns intervals counted from 0001-01-01T00:00:00 UTC
TICKS_PER_MICROSECOND = 10
TICKS_EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)


def ticks_to_datetime(ticks: int) -> datetime:
    """Converts .NET ticks to an aware datetime in the timezone of the device that decoded the replay."""
    try:
        date = TICKS_EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)
    except OverflowError:
        # past year 9999, only hand-edited replays get here
        return datetime.max.replace(tzinfo=timezone.utc)
    try:
        return date.astimezone(tzlocal.get_localzone())
    except OverflowError:
        # dates at the very edges of the representable range can't shift zones
        return date


class Metadata(Base):
    """
    Data derived from the replay header.

    date : datetime
        Replay creation date & time, in the local timezone
    life_bar : tuple[Metadata.LifeBarPoint]
        Health over time as recorded by the game
    accuracy : float | None
        Standard-mode accuracy in the range 0 - 1, None for other modes or plays without judgements
    """

    date: datetime
    life_bar: tuple[Metadata.LifeBarPoint, ...]
    accuracy: float | None

    def __init__(
        self,
        date: datetime,
        life_bar: tuple[Metadata.LifeBarPoint, ...] = (),
        accuracy: float | None = None,
    ):
        self.date = date
        self.life_bar = life_bar
        self.accuracy = accuracy

    @classmethod
    def _parse(cls, header: Header):
        life_bar = []
        for entry in header.life_bar_graph.split(","):
            if not entry:
                continue
            # malformed entries are cosmetic, they never fail a replay
            time, sep, health = entry.partition("|")
            try:
                life_bar.append(cls.LifeBarPoint(int(time), float(health)))
            except ValueError:
                continue

        accuracy = None
        total = header.count_300 + header.count_100 + header.count_50 + header.count_miss
        if header.mode == GameMode.STANDARD and total > 0:
            accuracy = (header.count_300 + header.count_100 / 3 + header.count_50 / 6) / total

        return cls(
            date=ticks_to_datetime(header.timestamp),
            life_bar=tuple(life_bar),
            accuracy=accuracy,
        )

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self.date == other.date and self.life_bar == other.life_bar and self.accuracy == other.accuracy

    class LifeBarPoint(Base):
        time: int  #: Milliseconds since the start of the replay
        health: float  #: 0 - 1

        def __init__(self, time: int, health: float):
            self.time = time
            self.health = health

        def __eq__(self, other):
            if not isinstance(other, self.__class__):
                return NotImplemented
            return self.time == other.time and self.health == other.health
