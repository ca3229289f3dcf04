import concurrent.futures
import hashlib
import math
import os

import polars as pl

from .beatmap import Beatmap
from .judgement.common import end_seconds
from .judgement.engine import JudgementConfig, JudgementState, advance, load
from .judgement.judgement_types import Judgements
from .log import log
from .parse import ParseError
from .replay import Replay


def load_pair(
    beatmap_path: os.PathLike | str,
    replay_path: os.PathLike | str,
    config: JudgementConfig | None = None,
) -> JudgementState:
    """Decodes a beatmap and a replay side by side and returns a judgement state for the pair, positioned at 0.

    Decode errors from either file are raised unchanged."""
    with concurrent.futures.ThreadPoolExecutor(max_workers=2) as executor:
        beatmap_future = executor.submit(Beatmap, beatmap_path)
        replay_future = executor.submit(Replay, replay_path)
        beatmap = beatmap_future.result()
        replay = replay_future.result()

    return load(beatmap, replay, config)


def end_time(state: JudgementState) -> float:
    """Earliest play time (seconds) at which every hit object has been judged and every cursor sample examined"""
    end = 0.0
    if state.replay.samples:
        end = max(end, state.replay.samples[-1].seconds)
    if state.beatmap.hit_objects:
        last_object = max(end_seconds(hit_object) for hit_object in state.beatmap.hit_objects)
        end = max(end, last_object + state.windows.window_50)
    # objects only time out once play time is strictly past their window
    return math.nextafter(end, math.inf)


def judge(beatmap: Beatmap, replay: Replay, config: JudgementConfig | None = None) -> Judgements:
    """Runs a whole replay through the judgement engine in one go and returns the full event log."""
    state = load(beatmap, replay, config)
    advance(state, end_time(state))
    return state.events


def _judge_file(beatmap: Beatmap, replay_path: str, beatmap_hash: str | None) -> pl.DataFrame | None:
    # ParseError subclasses don't unpickle, so they are reported from the worker
    try:
        replay = Replay(replay_path)
    except ParseError as e:
        log.warning(f"Skipping {replay_path}: {e}")
        return None
    if beatmap_hash is not None and replay.header.beatmap_hash != beatmap_hash:
        log.info(f"Skipping {replay_path}, it was recorded on a different beatmap")
        return None
    return judge(beatmap, replay).to_polars()


def judge_directory(
    directory: os.PathLike | str,
    beatmap_path: os.PathLike | str,
    check_hash: bool = True,
) -> pl.DataFrame:
    """Multiprocessed judgement of every replay in a directory against a single beatmap. Replays that fail to decode
    and, when `check_hash` is set, replays recorded on a different version of the beatmap are skipped.

    Args:
        directory : os.PathLike | str
            Path of the directory the replays are stored in
        beatmap_path : os.PathLike | str
            Path of the .osu file the replays were played on
        check_hash : bool
            Compare each replay's beatmap hash against the MD5 of `beatmap_path`
    Returns:
        pl.DataFrame
            Every judgement event of every processed replay, prefixed with the replay's player, mods and date
    """
    beatmap = Beatmap(beatmap_path)
    beatmap_hash = None
    if check_hash:
        with open(beatmap_path, "rb") as f:
            beatmap_hash = hashlib.md5(f.read()).hexdigest()

    frames = []
    with os.scandir(directory) as entries:
        replay_paths = [entry.path for entry in entries if entry.name.endswith(".osr")]

    with concurrent.futures.ProcessPoolExecutor() as executor:
        futures = [executor.submit(_judge_file, beatmap, path, beatmap_hash) for path in replay_paths]
        for future in concurrent.futures.as_completed(futures):
            frame = future.result()
            if frame is not None:
                frames.append(frame)

    if not frames:
        empty_header = {"player_name": None, "beatmap_hash": None, "mods": None, "date_time": None}
        return Judgements(empty_header).to_polars()

    return pl.concat(frames)
