from dataclasses import dataclass, field
from datetime import timezone

from ..beatmap import Beatmap
from ..difficulty import DifficultyWindows, calculate_windows
from ..enums.hit_object import HitObjectKind
from ..event import CursorSample
from ..log import log
from ..replay import Replay
from .common import (
    cursor_distance,
    end_seconds,
    hit_grade,
    is_clickable,
    is_visible,
    just_input_hit,
    start_seconds,
)
from .judgement_types import (
    JudgementEvent,
    JudgementKind,
    Judgements,
    MissRecord,
    MissRecords,
)

# Presses inside the circle are only rejected as too early once they're this many 50-windows ahead of the object
EARLY_GUARD_MULTIPLIER = 2.0
# How long a miss stays in recent_misses(), in seconds
MISS_DISPLAY_SECONDS = 3.0


@dataclass(frozen=True)
class JudgementConfig:
    early_guard_multiplier: float = EARLY_GUARD_MULTIPLIER
    miss_display_seconds: float = MISS_DISPLAY_SECONDS
    pause_on_miss: bool = False


@dataclass
class JudgementState:
    """Everything needed to judge a replay against a beatmap at an arbitrary play time.

    Created with load(), moved forward with advance() and repositioned with seek(). All times are in seconds.

    Attributes:
        next_hit_object_to_hit_index : int
            First hit object that hasn't been judged yet. Never decreases except through seek()
        hit_object_index : int
            First hit object whose start time hasn't been reached, for display
        last_checked_cursor_index : int
            Last cursor sample that has been examined
        last_aim_miss_index : int | None
            Most recent object flagged with a provisional aim miss
        pause_requested : bool
            Set by advance() when pause_on_miss is on and the call recorded a miss
    """

    beatmap: Beatmap
    replay: Replay
    windows: DifficultyWindows
    config: JudgementConfig
    events: Judgements
    misses: MissRecords
    play_time: float = 0.0
    next_hit_object_to_hit_index: int = 0
    hit_object_index: int = 0
    last_hit_object_index: int | None = None
    last_checked_cursor_index: int = 0
    last_aim_miss_index: int | None = None
    last_missed_index: int | None = None
    pause_on_miss: bool = False
    pause_requested: bool = False
    provisional_misses: dict[int, MissRecord] = field(default_factory=dict)


def _data_header(replay: Replay) -> dict:
    header = replay.header
    return {
        "player_name": header.player_name,
        "beatmap_hash": header.beatmap_hash,
        "mods": ",".join(mod.name for mod in header.mods.enabled()),
        "date_time": replay.metadata.date.astimezone(timezone.utc),
    }


def load(beatmap: Beatmap, replay: Replay, config: JudgementConfig | None = None) -> JudgementState:
    """Takes a decoded beatmap and replay, returns a fresh judgement state positioned at play time 0"""
    if config is None:
        config = JudgementConfig()
    data_header = _data_header(replay)
    windows = calculate_windows(beatmap.difficulty)
    log.debug(
        f"Judging {len(replay.samples)} cursor samples against {len(beatmap.hit_objects)} hit objects "
        f"(50 window {windows.window_50:.3f}s, radius {windows.radius:.2f})"
    )
    return JudgementState(
        beatmap=beatmap,
        replay=replay,
        windows=windows,
        config=config,
        events=Judgements(data_header),
        misses=MissRecords(data_header),
        pause_on_miss=config.pause_on_miss,
    )


# ---------------------------------------------------------------------------- #
#                                   Recording                                  #
# ---------------------------------------------------------------------------- #


def _move_past(state: JudgementState, index: int) -> None:
    """Moves the judgement cursor to `index + 1`, confirming any provisional aim misses it leaves behind"""
    for skipped in range(state.next_hit_object_to_hit_index, index + 1):
        record = state.provisional_misses.pop(skipped, None)
        if record is not None:
            record.confirmed = True
            state.last_missed_index = skipped
    state.next_hit_object_to_hit_index = index + 1


def _record_hit(
    state: JudgementState,
    index: int,
    time: float,
    position: tuple[float, float] | None,
    hit_error: float | None = None,
) -> None:
    grade = 300 if hit_error is None else hit_grade(hit_error, state.windows)
    state.events.append(JudgementEvent(JudgementKind.HIT, index, time, position, hit_error, grade))
    state.last_hit_object_index = index
    _move_past(state, index)


def _record_miss(
    state: JudgementState,
    index: int,
    time: float,
    position: tuple[float, float] | None,
    kind: JudgementKind,
    hit_error: float | None = None,
) -> None:
    record = MissRecord(time, index, position, kind, confirmed=kind is not JudgementKind.MISS_AIM)
    state.misses.append(record)
    state.events.append(JudgementEvent(kind, index, time, position, hit_error))

    if record.confirmed:
        state.last_missed_index = index
    else:
        state.last_aim_miss_index = index
        state.provisional_misses[index] = record

    if state.pause_on_miss:
        state.pause_requested = True
    log.debug(f"{kind.name} on hit object {index} at {time:.3f}s")


def _record_timeout(state: JudgementState, index: int, time: float, position: tuple[float, float] | None) -> None:
    # an aim miss already recorded for this object gets confirmed instead of recorded twice
    if index not in state.provisional_misses:
        _record_miss(state, index, time, position, JudgementKind.MISS_TIMEOUT)
    _move_past(state, index)


# ---------------------------------------------------------------------------- #
#                                   Resolution                                 #
# ---------------------------------------------------------------------------- #


def _resolve_by_time(state: JudgementState, time: float, position: tuple[float, float] | None) -> None:
    """Closes every pending object that `time` has run past: finished spinners are hits, everything else whose 50
    window has elapsed is a miss"""
    hit_objects = state.beatmap.hit_objects

    while state.next_hit_object_to_hit_index < len(hit_objects):
        index = state.next_hit_object_to_hit_index
        hit_object = hit_objects[index]
        if hit_object.kind is HitObjectKind.SPINNER:
            if time <= end_seconds(hit_object):
                break
            _record_hit(state, index, time, position)
        elif time - start_seconds(hit_object) > state.windows.window_50:
            _record_timeout(state, index, time, position)
        else:
            break

    while state.hit_object_index < len(hit_objects) and start_seconds(hit_objects[state.hit_object_index]) <= time:
        state.hit_object_index += 1


def _resolve_input(state: JudgementState, sample: CursorSample) -> None:
    """Judges a fresh K1/K2 press against the pending circles and sliders"""
    hit_objects = state.beatmap.hit_objects
    windows = state.windows
    time = sample.seconds
    position = sample.position

    index = state.next_hit_object_to_hit_index
    while index < len(hit_objects):
        hit_object = hit_objects[index]
        if not is_clickable(hit_object) or not is_visible(hit_object, time, windows):
            return
        # aim-missed objects wait for their window to close, presses go to the objects after them
        if index in state.provisional_misses:
            index += 1
            continue

        hit_error = time - start_seconds(hit_object)

        if cursor_distance(sample, hit_object) > windows.radius:
            if abs(hit_error) < windows.window_50:
                if index == state.next_hit_object_to_hit_index:
                    _record_miss(state, index, time, position, JudgementKind.MISS_AIM, hit_error)
                return
            if hit_error > 0:
                _record_timeout(state, index, time, position)
                index += 1
                continue
            return

        if hit_error < -(state.config.early_guard_multiplier * windows.window_50):
            _record_miss(state, index, time, position, JudgementKind.MISS_TIMING, hit_error)
            _move_past(state, index)
            return

        _record_hit(state, index, time, position, hit_error)
        return


# ---------------------------------------------------------------------------- #
#                                  Public API                                  #
# ---------------------------------------------------------------------------- #


def advance(state: JudgementState, play_time: float) -> list[JudgementEvent]:
    """Moves the play clock forward to `play_time` (seconds) and judges everything that happened on the way.

    Cursor samples are examined in recorded order. Before each sample's input is looked at, objects that its time has
    already run past are closed, so a press can never be judged against an object that has timed out. Moving
    backwards does nothing, use seek() for that.

    Returns the events produced by this call, in order."""
    state.pause_requested = False

    if play_time < state.play_time:
        log.debug(f"Ignoring backward advance from {state.play_time:.3f}s to {play_time:.3f}s")
        return []

    samples = state.replay.samples
    if not samples or not state.beatmap.hit_objects:
        state.play_time = play_time
        return []

    first_event = len(state.events)
    index = state.last_checked_cursor_index + 1
    while index < len(samples) and samples[index].seconds <= play_time:
        sample = samples[index]
        _resolve_by_time(state, sample.seconds, sample.position)
        if just_input_hit(sample, samples[index - 1]):
            _resolve_input(state, sample)
        state.last_checked_cursor_index = index
        index += 1

    _resolve_by_time(state, play_time, samples[state.last_checked_cursor_index].position)
    state.play_time = play_time

    return state.events.data[first_event:]


def seek(state: JudgementState, target_time: float) -> None:
    """Repositions the state at `target_time` (seconds), discarding every judgement made so far.

    Judging resumes at the first object that could still be approaching at `target_time`. Cursor samples are
    examined again from the start, so presses made while that object was approaching still count."""
    hit_objects = state.beatmap.hit_objects

    index = 0
    while index < len(hit_objects) and start_seconds(hit_objects[index]) < target_time - state.windows.preempt:
        index += 1

    state.next_hit_object_to_hit_index = index
    state.hit_object_index = index
    state.last_hit_object_index = None
    state.last_aim_miss_index = None
    state.last_missed_index = None
    state.provisional_misses.clear()
    state.misses.clear()
    state.events.clear()
    state.last_checked_cursor_index = 0
    state.play_time = target_time
    state.pause_requested = False


def set_pause_on_miss(state: JudgementState, enabled: bool) -> None:
    state.pause_on_miss = enabled
    if not enabled:
        state.pause_requested = False


def recent_misses(state: JudgementState, window: float | None = None) -> list[MissRecord]:
    """Misses recorded within the last `window` seconds of play time, defaults to the config's display time"""
    if window is None:
        window = state.config.miss_display_seconds
    return [miss for miss in state.misses if state.play_time - window <= miss.time <= state.play_time]
