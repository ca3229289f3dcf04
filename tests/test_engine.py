from __future__ import annotations

import pytest

from osujudge.hit_objects import HitObject
from osujudge.judgement import (
    JudgementConfig,
    JudgementKind,
    advance,
    load,
    recent_misses,
    seek,
    set_pause_on_miss,
)

from conftest import K1, K2

HIT = JudgementKind.HIT
MISS_AIM = JudgementKind.MISS_AIM
MISS_TIMING = JudgementKind.MISS_TIMING
MISS_TIMEOUT = JudgementKind.MISS_TIMEOUT


def _kinds(events):
    return [(event.kind, event.index) for event in events]


def _indices(state):
    return (
        state.play_time,
        state.next_hit_object_to_hit_index,
        state.hit_object_index,
        state.last_hit_object_index,
        state.last_checked_cursor_index,
        state.last_aim_miss_index,
        state.last_missed_index,
        list(state.misses),
        list(state.events),
        state.pause_requested,
    )


def test_press_on_the_circle_is_a_hit(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000))
    replay = make_replay((0, 0, 0, 0), (1000, 261, 192, K1))
    state = load(beatmap, replay)

    events = advance(state, 1.0)

    assert _kinds(events) == [(HIT, 0)]
    assert events[0].grade == 300
    assert events[0].hit_error == pytest.approx(0.0)
    assert events[0].position == (261, 192)
    assert len(state.misses) == 0
    assert state.next_hit_object_to_hit_index == 1
    assert state.last_hit_object_index == 0


def test_press_off_the_circle_is_a_provisional_aim_miss(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000))
    replay = make_replay((0, 0, 0, 0), (1000, 306, 192, K1))
    state = load(beatmap, replay)

    assert _kinds(advance(state, 1.0)) == [(MISS_AIM, 0)]
    assert state.next_hit_object_to_hit_index == 0
    assert state.last_aim_miss_index == 0
    assert state.misses[0].kind is MISS_AIM
    assert state.misses[0].confirmed is False

    # the window closing confirms the aim miss instead of adding a timeout
    assert advance(state, 1.2) == []
    assert state.next_hit_object_to_hit_index == 1
    assert state.last_missed_index == 0
    assert len(state.misses) == 1
    assert state.misses[0].confirmed is True


def test_repeated_aim_misses_on_one_object_are_recorded_once(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000))
    replay = make_replay((0, 0, 0, 0), (980, 306, 192, K1), (10, 306, 192, 0), (10, 306, 192, K2))
    state = load(beatmap, replay)

    assert _kinds(advance(state, 1.0)) == [(MISS_AIM, 0)]
    assert len(state.misses) == 1


def test_no_input_times_out(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000))
    replay = make_replay((0, 0, 0, 0), (2000, 0, 0, 0))
    state = load(beatmap, replay)

    assert advance(state, 1.1) == []
    assert advance(state, 1.15) == []

    events = advance(state, 1.16)

    assert _kinds(events) == [(MISS_TIMEOUT, 0)]
    assert events[0].grade is None
    assert state.next_hit_object_to_hit_index == 1
    assert state.last_missed_index == 0
    assert advance(state, 5.0) == []


def test_press_far_too_early_is_a_timing_miss(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 2000), HitObject.circle(256, 192, 3000))
    # 0.5s early on the first circle, 0.25s early on the second
    replay = make_replay((0, 0, 0, 0), (1500, 256, 192, K1), (100, 256, 192, 0), (1150, 256, 192, K1))
    state = load(beatmap, replay)

    events = advance(state, 2.75)

    assert _kinds(events) == [(MISS_TIMING, 0), (HIT, 1)]
    assert events[0].hit_error == pytest.approx(-0.5)
    # outside the 50 window, but not early enough to be rejected
    assert events[1].grade == 50
    assert state.misses[0].confirmed is True


def test_early_guard_is_configurable(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 2000))
    replay = make_replay((0, 0, 0, 0), (1500, 256, 192, K1))
    state = load(beatmap, replay, JudgementConfig(early_guard_multiplier=4.0))

    assert _kinds(advance(state, 1.5)) == [(HIT, 0)]


def test_press_before_the_object_appears_is_ignored(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 3000))
    replay = make_replay((0, 0, 0, 0), (1000, 256, 192, K1), (100, 256, 192, 0), (1900, 256, 192, K1))
    state = load(beatmap, replay)

    assert advance(state, 1.5) == []
    assert _kinds(advance(state, 3.0)) == [(HIT, 0)]


def test_held_key_only_counts_once(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000), HitObject.circle(256, 192, 1100))
    replay = make_replay((0, 0, 0, 0), (1000, 256, 192, K1), (100, 256, 192, K1))
    state = load(beatmap, replay)

    assert _kinds(advance(state, 1.1)) == [(HIT, 0)]
    assert _kinds(advance(state, 1.3)) == [(MISS_TIMEOUT, 1)]


def test_alternating_keys_hit_consecutive_objects(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000), HitObject.circle(300, 192, 1100))
    replay = make_replay((0, 0, 0, 0), (1000, 256, 192, K1), (100, 300, 192, K1 | K2))
    state = load(beatmap, replay)

    assert _kinds(advance(state, 1.1)) == [(HIT, 0), (HIT, 1)]


def test_hitting_the_next_object_confirms_an_aim_miss(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(100, 100, 1000), HitObject.circle(400, 300, 1100))
    replay = make_replay((0, 0, 0, 0), (1000, 400, 300, K1), (50, 400, 300, 0), (50, 400, 300, K1))
    state = load(beatmap, replay)

    events = advance(state, 1.1)

    assert _kinds(events) == [(MISS_AIM, 0), (HIT, 1)]
    assert state.next_hit_object_to_hit_index == 2
    assert [(miss.index, miss.confirmed) for miss in state.misses] == [(0, True)]
    assert state.last_missed_index == 0


def test_spinner_resolves_when_it_ends(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.spinner_at(1000, 3000), HitObject.circle(256, 192, 3500))
    replay = make_replay((0, 0, 0, 0), (1500, 10, 10, K1), (100, 10, 10, 0))
    state = load(beatmap, replay)

    # pressing far away during the spinner changes nothing
    assert advance(state, 2.9) == []
    assert state.next_hit_object_to_hit_index == 0

    events = advance(state, 3.01)

    assert _kinds(events) == [(HIT, 0)]
    assert events[0].grade == 300
    assert state.next_hit_object_to_hit_index == 1


def test_presentation_index_follows_start_times(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(
        HitObject.circle(256, 192, 1000),
        HitObject.circle(256, 192, 2000),
        HitObject.circle(256, 192, 3000),
    )
    replay = make_replay((0, 0, 0, 0), (5000, 0, 0, 0))
    state = load(beatmap, replay)

    advance(state, 0.5)
    assert state.hit_object_index == 0
    advance(state, 2.0)
    assert state.hit_object_index == 2
    # the judgement cursor lags behind until the 50 window has passed
    assert state.next_hit_object_to_hit_index == 1


def test_judgement_index_never_decreases(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(*(HitObject.circle(256, 192, 500 * i) for i in range(1, 11)))
    replay = make_replay((0, 0, 0, 0), *((250, 256, 192, K1 if i % 2 else 0) for i in range(1, 25)))
    state = load(beatmap, replay)

    seen = []
    for tick in range(0, 700):
        advance(state, tick / 100)
        seen.append(state.next_hit_object_to_hit_index)

    assert seen == sorted(seen)
    assert seen[-1] == 10
    assert all(miss.index <= state.next_hit_object_to_hit_index for miss in state.misses)


def test_backward_advance_is_ignored(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000))
    replay = make_replay((0, 0, 0, 0), (2000, 0, 0, 0))
    state = load(beatmap, replay)

    advance(state, 1.5)
    before = _indices(state)

    assert advance(state, 0.5) == []
    assert _indices(state) == before


def test_seek_rebuilds_state(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(
        HitObject.circle(256, 192, 1000),
        HitObject.circle(256, 192, 3000),
        HitObject.circle(256, 192, 5000),
    )
    replay = make_replay(*((100, 0, 0, 0) for _ in range(60)))
    state = load(beatmap, replay)
    advance(state, 4.0)
    assert len(state.misses) == 2

    seek(state, 3.0)

    # first object that hadn't started its approach by 3.0 - preempt
    assert state.next_hit_object_to_hit_index == 1
    assert state.hit_object_index == 1
    assert state.last_checked_cursor_index == 0
    assert state.last_hit_object_index is None
    assert state.last_missed_index is None
    assert len(state.misses) == 0
    assert len(state.events) == 0


def test_seek_replays_presses_made_during_the_approach(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000), HitObject.circle(256, 192, 2500))
    replay = make_replay((0, 0, 0, 0), (2500, 256, 192, K1), (100, 256, 192, 0))
    state = load(beatmap, replay)

    seek(state, 2.6)

    assert _kinds(advance(state, 2.7)) == [(HIT, 1)]
    assert len(state.misses) == 0


def test_seek_does_not_rejudge_old_presses(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000), HitObject.circle(256, 192, 4000))
    replay = make_replay((0, 0, 0, 0), (1000, 256, 192, K1), (100, 256, 192, 0), (2500, 256, 192, 0))
    state = load(beatmap, replay)

    seek(state, 3.5)

    # the press at 1.0s happened before the second circle appeared
    assert advance(state, 3.6) == []
    assert state.next_hit_object_to_hit_index == 1


def test_seek_then_advance_is_repeatable(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(
        HitObject.circle(256, 192, 1000),
        HitObject.circle(256, 192, 2500),
        HitObject.circle(256, 192, 4000),
    )
    replay = make_replay((0, 0, 0, 0), (2500, 256, 192, K1), (100, 256, 192, 0), (2000, 0, 0, 0))
    state = load(beatmap, replay)

    advance(state, 6.0)
    seek(state, 2.0)
    first_seek = _indices(state)
    first_events = advance(state, 2.0)
    first_advance = _indices(state)

    advance(state, 6.0)
    seek(state, 2.0)
    assert _indices(state) == first_seek
    assert advance(state, 2.0) == first_events
    assert _indices(state) == first_advance


@pytest.mark.parametrize("target", [-5.0, 100.0])
def test_seek_out_of_range_is_clamped(make_beatmap, make_replay, target) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000), HitObject.circle(256, 192, 2000))
    replay = make_replay((0, 0, 0, 0), (1000, 0, 0, 0))
    state = load(beatmap, replay)

    seek(state, target)

    assert 0 <= state.next_hit_object_to_hit_index <= 2
    assert state.next_hit_object_to_hit_index == (0 if target < 0 else 2)
    assert 0 <= state.last_checked_cursor_index < len(replay.samples)
    expected = [] if target > 0 else [(MISS_TIMEOUT, 0), (MISS_TIMEOUT, 1)]
    assert _kinds(advance(state, max(target, 0.0) + 10)) == expected


def test_pause_on_miss_signals_the_host(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000), HitObject.circle(256, 192, 3000))
    replay = make_replay((0, 0, 0, 0), (3000, 256, 192, K1))
    state = load(beatmap, replay)
    set_pause_on_miss(state, True)

    advance(state, 0.5)
    assert state.pause_requested is False

    advance(state, 1.5)
    assert state.pause_requested is True

    # only the call that recorded the miss raises it
    advance(state, 3.0)
    assert state.pause_requested is False

    set_pause_on_miss(state, False)
    assert state.pause_on_miss is False


def test_pause_on_miss_from_config(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000))
    replay = make_replay((0, 0, 0, 0), (3000, 0, 0, 0))
    state = load(beatmap, replay, JudgementConfig(pause_on_miss=True))

    advance(state, 2.0)

    assert state.pause_requested is True


def test_pause_is_off_by_default(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000))
    replay = make_replay((0, 0, 0, 0), (3000, 0, 0, 0))
    state = load(beatmap, replay)

    advance(state, 2.0)

    assert len(state.misses) == 1
    assert state.pause_requested is False


def test_recent_misses(make_beatmap, make_replay) -> None:
    beatmap = make_beatmap(HitObject.circle(256, 192, 1000))
    replay = make_replay((0, 0, 0, 0), (9000, 0, 0, 0))
    state = load(beatmap, replay)

    advance(state, 2.0)
    assert [miss.index for miss in recent_misses(state)] == [0]

    advance(state, 5.5)
    assert recent_misses(state) == []
    assert len(recent_misses(state, window=10.0)) == 1


def test_empty_inputs_are_no_ops(make_beatmap, make_replay) -> None:
    no_objects = load(make_beatmap(), make_replay((0, 0, 0, 0), (1000, 0, 0, K1)))
    no_samples = load(make_beatmap(HitObject.circle(256, 192, 1000)), make_replay())

    assert advance(no_objects, 5.0) == []
    assert advance(no_samples, 5.0) == []
    assert len(no_samples.misses) == 0

    seek(no_samples, 2.0)
    assert no_samples.last_checked_cursor_index == 0
