from __future__ import annotations

import io
import os
from typing import Iterable, TextIO

from .enums.mode import GameMode
from .hit_objects import Difficulty, HitObject
from .parse import parse_beatmap
from .util import Base, try_enum


class Beatmap(Base):
    """A decoded osu! beatmap (.osu), limited to what judging and playback need.

    Attributes:
        format_version : int | None
            The "osu file format vN" number, if the file had one
        difficulty : Difficulty
            Raw [Difficulty] values
        hit_objects : tuple[HitObject]
            Every hit object, in file order
        audio_filename : str | None
            Song file, relative to the beatmap's folder
        audio_lead_in : int
            Milliseconds of silence before the song starts
        mode : GameMode | int
        title, artist, creator, version : str | None
            [Metadata] values, `version` is the difficulty name
        beatmap_id : int | None
    """

    format_version: int | None
    difficulty: Difficulty
    hit_objects: tuple[HitObject, ...]
    audio_filename: str | None
    audio_lead_in: int
    mode: GameMode | int
    title: str | None
    artist: str | None
    creator: str | None
    version: str | None
    beatmap_id: int | None

    def __init__(self, source: TextIO | str | os.PathLike):
        """Parse an osu! beatmap.

        :param source: text file object or path"""
        self.format_version = None
        self.difficulty = None
        self.hit_objects = []
        self.audio_filename = None
        self.audio_lead_in = 0
        self.mode = GameMode.STANDARD
        self.title = None
        self.artist = None
        self.creator = None
        self.version = None
        self.beatmap_id = None

        handlers = {
            HitObject: self.hit_objects.append,
            Difficulty: lambda x: setattr(self, "difficulty", x),
            "mode": lambda x: setattr(self, "mode", try_enum(GameMode, x)),
        }
        for attr in (
            "format_version",
            "audio_filename",
            "audio_lead_in",
            "title",
            "artist",
            "creator",
            "version",
            "beatmap_id",
        ):
            handlers[attr] = lambda x, attr=attr: setattr(self, attr, x)

        parse_beatmap(source, handlers)

        self.hit_objects = tuple(self.hit_objects)

    @classmethod
    def from_string(cls, text: str) -> Beatmap:
        return cls(io.StringIO(text))

    @classmethod
    def create(cls, difficulty: Difficulty, hit_objects: Iterable[HitObject]) -> Beatmap:
        """Builds a beatmap from already decoded parts, keeping the given object order."""
        beatmap = cls.__new__(cls)
        beatmap.format_version = None
        beatmap.difficulty = difficulty
        beatmap.hit_objects = tuple(hit_objects)
        beatmap.audio_filename = None
        beatmap.audio_lead_in = 0
        beatmap.mode = GameMode.STANDARD
        beatmap.title = None
        beatmap.artist = None
        beatmap.creator = None
        beatmap.version = None
        beatmap.beatmap_id = None
        return beatmap

    def _attr_repr(self, attr):
        self_attr = getattr(self, attr)
        if isinstance(self_attr, tuple) and attr == "hit_objects":
            return f"{attr}=(...)({len(self_attr)})"
        else:
            return super()._attr_repr(attr)
