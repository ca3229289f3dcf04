from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from osujudge.beatmap import Beatmap
from osujudge.controller import Keys
from osujudge.enums import GameMode, Mods
from osujudge.event import CursorSample, Header
from osujudge.hit_objects import Difficulty
from osujudge.metadata import TICKS_EPOCH, TICKS_PER_MICROSECOND
from osujudge.replay import Replay

# circle size that gives a hit radius of exactly 20 osu!pixels
CS_RADIUS_20 = (54.4 - 20) / 4.48

K1 = Keys.K1 | Keys.M1
K2 = Keys.K2 | Keys.M2

BEATMAP_TEXT = """\
osu file format v14

[General]
AudioFilename: audio.mp3
AudioLeadIn: 250
Mode: 0

[Metadata]
Title:Test Song
Artist:Someone
Creator:mapper
Version:Insane
BeatmapID:12345

[Difficulty]
HPDrainRate:6
CircleSize:4
OverallDifficulty:8
ApproachRate:9
SliderMultiplier:1.8
SliderTickRate:1

[TimingPoints]
0,500,4,2,0,50,1,0

[HitObjects]
256,192,1000,5,0,0:0:0:0:
100,100,1500,2,2,B|150:150|200:100,2,140,2|0|8,0:0|1:2|0:0,0:0:0:0:
256,192,2000,12,0,4000,0:0:0:0:
"""


def ticks(date: datetime) -> int:
    return (date - TICKS_EPOCH) // timedelta(microseconds=1) * TICKS_PER_MICROSECOND


@pytest.fixture
def header() -> Header:
    return Header(
        mode=GameMode.STANDARD,
        version=20240101,
        beatmap_hash="d41d8cd98f00b204e9800998ecf8427e",
        player_name="player",
        replay_hash="0123456789abcdef0123456789abcdef",
        count_300=90,
        count_100=6,
        count_50=3,
        count_geki=12,
        count_katu=4,
        count_miss=1,
        score=1234567,
        max_combo=321,
        is_perfect_combo=False,
        mods=Mods.HIDDEN | Mods.HARD_ROCK,
        life_bar_graph="0|1,500|0.75,",
        timestamp=ticks(datetime(2020, 1, 1, tzinfo=timezone.utc)),
    )


@pytest.fixture
def make_replay(header):
    """Builds a replay from (delta, x, y, keys) tuples"""

    def _make_replay(*records, **kwargs) -> Replay:
        return Replay.create(header, [CursorSample(*record) for record in records], **kwargs)

    return _make_replay


@pytest.fixture
def make_beatmap():
    def _make_beatmap(*hit_objects, od=5.0, ar=5.0, cs=CS_RADIUS_20) -> Beatmap:
        return Beatmap.create(Difficulty(circle_size=cs, overall_difficulty=od, approach_rate=ar), hit_objects)

    return _make_beatmap
