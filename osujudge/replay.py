from __future__ import annotations

import lzma
import os
from typing import BinaryIO, Iterable

from .event import CursorSample, Header
from .metadata import Metadata
from .parse import parse
from .util import Base, pack_double, pack_int32, pack_uint64


class Replay(Base):
    """A decoded osu! replay (.osr). Read-only once decoded."""

    header: Header  #: Everything the game wrote before the cursor stream
    samples: tuple[CursorSample, ...]  #: Cursor stream in recorded order, seed record removed
    online_score_id: int  #: 0 for offline plays
    additional_mod_info: float | None  #: Target practice accuracy, only present on some replays
    metadata: Metadata  #: Values derived from the header, like the creation date and life bar

    def __init__(self, source: BinaryIO | bytes | str | os.PathLike):
        """Parse an osu! replay.

        :param source: replay file object, raw bytes or path"""
        self.header = None
        self.samples = []
        self.online_score_id = 0
        self.additional_mod_info = None

        parse(
            source,
            {
                Header: lambda x: setattr(self, "header", x),
                CursorSample: self.samples.append,
                int: lambda x: setattr(self, "online_score_id", x),
                float: lambda x: setattr(self, "additional_mod_info", x),
            },
        )

        self.samples = tuple(self.samples)
        self.metadata = Metadata._parse(self.header)

    @classmethod
    def create(
        cls,
        header: Header,
        samples: Iterable[CursorSample],
        online_score_id: int = 0,
        additional_mod_info: float | None = None,
    ) -> Replay:
        """Builds a replay from already decoded parts. Cumulative times are recomputed from the sample deltas."""
        replay = cls.__new__(cls)
        replay.header = header
        total_time = 0
        rebuilt = []
        for sample in samples:
            if sample.time >= 0:
                total_time += sample.time
            rebuilt.append(CursorSample(sample.time, sample.x, sample.y, sample.keys, total_time))
        replay.samples = tuple(rebuilt)
        replay.online_score_id = online_score_id
        replay.additional_mod_info = additional_mod_info
        replay.metadata = Metadata._parse(header)
        return replay

    def to_bytes(self) -> bytes:
        """Encodes the replay back into the .osr layout. Header fields round-trip byte-for-byte."""
        payload = "".join(sample._pack() + "," for sample in self.samples).encode("ascii")
        compressed = lzma.compress(payload, format=lzma.FORMAT_ALONE) if payload else b""

        data = bytearray(self.header._pack())
        data += pack_int32(len(compressed))
        data += compressed
        data += pack_uint64(self.online_score_id)
        if self.additional_mod_info is not None:
            data += pack_double(self.additional_mod_info)
        return bytes(data)

    def dump(self, target: str | os.PathLike) -> None:
        with open(target, "wb") as f:
            f.write(self.to_bytes())

    def _attr_repr(self, attr):
        self_attr = getattr(self, attr)
        if isinstance(self_attr, tuple) and attr == "samples":
            return f"{attr}=(...)({len(self_attr)})"
        else:
            return super()._attr_repr(attr)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return (
            self.header == other.header
            and self.samples == other.samples
            and self.online_score_id == other.online_score_id
            and self.additional_mod_info == other.additional_mod_info
        )
