from __future__ import annotations

import io
import lzma
import mmap
import os
from pathlib import Path
from typing import Any, BinaryIO, Callable, TextIO

from .enums.hit_object import CurveType, HitObjectKind, HitObjectType
from .enums.mode import GameMode
from .event import SEED_MARKER, CursorSample, Header
from .hit_objects import Difficulty, HitObject, SliderData, SpinnerData
from .log import log
from .util import (
    unpack_double,
    unpack_int32,
    unpack_uint8,
    unpack_uint16,
    unpack_uint32,
    unpack_uint64,
)


class ParseError(IOError):
    def __init__(self, message, filename=None, pos=None):
        super().__init__(message)
        self.filename = filename
        self.pos = pos

    def __str__(self):
        return f'Parse error ({self.filename or "?"} {self.pos if self.pos is not None else "?"}): {super().__str__()}'


class MalformedReplay(ParseError):
    """The replay ended early or held a value that doesn't fit the field being read."""

    def __init__(self, field: str, offset: int, reason: str = "unexpected end of file"):
        super().__init__(f"{reason} while reading {field} at byte {offset}", pos=offset)
        self.field = field
        self.offset = offset


class DecompressionFailure(MalformedReplay):
    """The cursor stream is not valid LZMA data."""

    def __init__(self, offset: int, reason: str):
        super().__init__("replay_data", offset, reason=f"lzma decompression failed ({reason})")


class MalformedBeatmap(ParseError):
    """A line of the .osu file couldn't be decoded. `line` is 1-indexed."""

    def __init__(self, line: int, field: str, reason: str = "invalid value"):
        super().__init__(f"{reason} for {field} on line {line}", pos=line)
        self.line = line
        self.field = field


class UnknownCurveType(MalformedBeatmap):
    def __init__(self, line: int, code: str):
        super().__init__(line, "curve_type", reason=f"unknown curve type {code!r}")
        self.code = code


class UnknownHitTypeBits(MalformedBeatmap):
    def __init__(self, line: int, value: int):
        super().__init__(line, "type", reason=f"type bits 0x{value:x} don't select exactly one hit object kind")
        self.value = value


# ---------------------------------------------------------------------------- #
#                                    Replays                                   #
# ---------------------------------------------------------------------------- #


def _read(stream, size: int, unpack: Callable, field: str):
    offset = stream.tell()
    data = stream.read(size)
    if len(data) != size:
        raise MalformedReplay(field, offset)
    (value,) = unpack(data)
    return value


def _read_uleb128(stream, field: str) -> int:
    result = 0
    shift = 0
    while True:
        byte = _read(stream, 1, unpack_uint8, field)
        result |= (byte & 0x7F) << shift
        if byte & 0x80 == 0:
            return result
        shift += 7


def _read_string(stream, field: str) -> str:
    # a lead byte of 0 means the string is absent, anything else (0x0b in practice) is followed by a uleb128 length
    if _read(stream, 1, unpack_uint8, field) == 0:
        return ""

    length = _read_uleb128(stream, field)
    offset = stream.tell()
    raw = stream.read(length)
    if len(raw) != length:
        raise MalformedReplay(field, offset)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedReplay(field, offset, reason=f"invalid utf-8 ({exc.reason})") from exc


def _parse_header(stream) -> Header:
    offset = stream.tell()
    mode = _read(stream, 1, unpack_uint8, "mode")
    try:
        mode = GameMode(mode)
    except ValueError as exc:
        raise MalformedReplay("mode", offset, reason=str(exc)) from exc

    return Header(
        mode=mode,
        version=_read(stream, 4, unpack_uint32, "version"),
        beatmap_hash=_read_string(stream, "beatmap_hash"),
        player_name=_read_string(stream, "player_name"),
        replay_hash=_read_string(stream, "replay_hash"),
        count_300=_read(stream, 2, unpack_uint16, "count_300"),
        count_100=_read(stream, 2, unpack_uint16, "count_100"),
        count_50=_read(stream, 2, unpack_uint16, "count_50"),
        count_geki=_read(stream, 2, unpack_uint16, "count_geki"),
        count_katu=_read(stream, 2, unpack_uint16, "count_katu"),
        count_miss=_read(stream, 2, unpack_uint16, "count_miss"),
        score=_read(stream, 4, unpack_int32, "score"),
        max_combo=_read(stream, 2, unpack_uint16, "max_combo"),
        is_perfect_combo=_read(stream, 1, unpack_uint8, "is_perfect_combo") == 1,
        mods=_read(stream, 4, unpack_uint32, "mods"),
        life_bar_graph=_read_string(stream, "life_bar_graph"),
        timestamp=_read(stream, 8, unpack_uint64, "timestamp"),
    )


def _parse_cursor_samples(compressed: bytes, offset: int) -> list[CursorSample]:
    """Decompresses the cursor stream and turns it into samples with cumulative time.

    Seed records are dropped and negative deltas don't move the clock. `offset` is only used for error reporting."""
    if not compressed:
        return []

    try:
        payload = lzma.decompress(compressed).decode("ascii")
    except lzma.LZMAError as exc:
        raise DecompressionFailure(offset, str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise MalformedReplay("replay_data", offset, reason="cursor stream is not text") from exc

    samples = []
    total_time = 0
    for i, record in enumerate(payload.split(",")):
        if not record:
            continue

        parts = record.split("|")
        if len(parts) != 4:
            raise MalformedReplay(f"replay_data[{i}]", offset, reason=f"expected 4 fields, got {len(parts)}")
        try:
            time = int(parts[0])
            x = float(parts[1])
            y = float(parts[2])
            keys = int(parts[3])
        except ValueError as exc:
            raise MalformedReplay(f"replay_data[{i}]", offset, reason=str(exc)) from exc

        if time == SEED_MARKER:
            log.debug(f"dropping seed record, seed: {keys}")
            continue

        if time >= 0:
            total_time += time
        samples.append(CursorSample(time, x, y, keys, total_time))

    return samples


def _parse(stream, handlers):
    header = _parse_header(stream)

    length = _read(stream, 4, unpack_int32, "replay_data_length")
    if length < 0:
        raise MalformedReplay("replay_data_length", stream.tell() - 4, reason=f"negative length {length}")
    offset = stream.tell()
    compressed = stream.read(length)
    if len(compressed) != length:
        raise MalformedReplay("replay_data", offset)

    samples = _parse_cursor_samples(compressed, offset)

    online_score_id = _read(stream, 8, unpack_uint64, "online_score_id")

    # anything left over is the target practice accuracy
    additional_mod_info = None
    if stream.read(1):
        stream.seek(-1, os.SEEK_CUR)
        additional_mod_info = _read(stream, 8, unpack_double, "additional_mod_info")

    # handlers only see the replay once it fully decoded, a failure never leaves a half-built replay behind
    handlers[Header](header)
    for sample in samples:
        handlers[CursorSample](sample)
    handlers[int](online_score_id)
    handlers[float](additional_mod_info)


def _parse_try(source: BinaryIO, handlers):
    """Wrap parsing exceptions with additional information."""

    try:
        _parse(source, handlers)
    except Exception as exception:
        exception = exception if isinstance(exception, ParseError) else ParseError(str(exception))

        try:
            exception.filename = source.name  # type: ignore
        except AttributeError:
            pass

        try:
            # prefer provided position info, as it will be more accurate
            if exception.pos is None and source.seekable():  # type: ignore
                exception.pos = source.tell()  # type: ignore
        # not all stream-like objects support `seekable` (e.g. HTTP requests)
        except AttributeError:
            pass

        raise exception


def _parse_open(source: os.PathLike, handlers) -> None:
    if os.path.getsize(source) == 0:
        raise MalformedReplay("mode", 0)

    fd = os.open(source, os.O_RDONLY)
    try:
        with mmap.mmap(fd, 0, access=mmap.ACCESS_READ) as f:
            try:
                _parse_try(f, handlers)
            except ParseError as exc:
                exc.filename = str(source)
                raise
    finally:
        os.close(fd)


def parse(
    source: BinaryIO | bytes | str | os.PathLike,
    handlers: dict[Any, Callable[..., None]],
) -> None:
    """Parse an osu! replay (.osr).
    :param source: replay file object, raw bytes or path
    :param handlers: dict of parse event keys to handler functions. Keys are `Header`, `CursorSample` (called once per
        sample, in order), `int` (online score id) and `float` (additional mod info, may be None).
    """

    if isinstance(source, (bytes, bytearray, memoryview)):
        _parse_try(io.BytesIO(bytes(source)), handlers)
    elif isinstance(source, str):
        _parse_open(Path(source), handlers)
    elif isinstance(source, os.PathLike):
        _parse_open(source, handlers)
    else:
        _parse_try(source, handlers)


# ---------------------------------------------------------------------------- #
#                                   Beatmaps                                   #
# ---------------------------------------------------------------------------- #

DIFFICULTY_KEYS = {
    "HPDrainRate": "hp_drain_rate",
    "CircleSize": "circle_size",
    "OverallDifficulty": "overall_difficulty",
    "ApproachRate": "approach_rate",
    "SliderMultiplier": "slider_multiplier",
    "SliderTickRate": "slider_tick_rate",
}

GENERAL_KEYS = {
    "AudioFilename": "audio_filename",
    "AudioLeadIn": "audio_lead_in",
    "Mode": "mode",
}

METADATA_KEYS = {
    "Title": "title",
    "Artist": "artist",
    "Creator": "creator",
    "Version": "version",
    "BeatmapID": "beatmap_id",
}

FORMAT_PREFIX = "osu file format v"

KIND_BITS = HitObjectType.CIRCLE | HitObjectType.SLIDER | HitObjectType.SPINNER


def _int(token: str, line: int, field: str) -> int:
    # some editors write whole numbers with a trailing ".0"
    try:
        return int(token)
    except ValueError:
        try:
            return int(float(token))
        except (ValueError, OverflowError):
            raise MalformedBeatmap(line, field) from None


def _float(token: str, line: int, field: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise MalformedBeatmap(line, field) from None


def _parse_slider(fields: list[str], line: int) -> SliderData:
    if len(fields) < 8:
        raise MalformedBeatmap(line, "slider", reason=f"expected at least 8 fields, got {len(fields)}")

    curve = fields[5].split("|")
    try:
        curve_type = CurveType(curve[0])
    except ValueError:
        raise UnknownCurveType(line, curve[0]) from None

    control_points = []
    for point in curve[1:]:
        coords = point.split(":")
        if len(coords) != 2:
            raise MalformedBeatmap(line, "control_points", reason=f"bad control point {point!r}")
        control_points.append((_int(coords[0], line, "control_points"), _int(coords[1], line, "control_points")))

    edge_sounds = ()
    if len(fields) > 8 and fields[8]:
        edge_sounds = tuple(_int(sound, line, "edge_sounds") for sound in fields[8].split("|"))

    edge_sets = ()
    if len(fields) > 9 and fields[9]:
        edge_sets = tuple(fields[9].split("|"))

    return SliderData(
        curve_type=curve_type,
        control_points=tuple(control_points),
        repeat=_int(fields[6], line, "repeat"),
        length=_float(fields[7], line, "length"),
        edge_sounds=edge_sounds,
        edge_sets=edge_sets,
    )


def _parse_hit_object(text: str, line: int) -> HitObject:
    fields = text.split(",")
    if len(fields) < 5:
        raise MalformedBeatmap(line, "hit_object", reason=f"expected at least 5 fields, got {len(fields)}")

    x = _int(fields[0], line, "x")
    y = _int(fields[1], line, "y")
    time = _int(fields[2], line, "time")
    type_value = _int(fields[3], line, "type")
    type_bits = HitObjectType(type_value & 0xFF)
    hitsound = _int(fields[4], line, "hitsound")
    new_combo = HitObjectType.NEW_COMBO in type_bits

    match type_bits & KIND_BITS:
        case HitObjectType.CIRCLE:
            return HitObject(x, y, time, HitObjectKind.CIRCLE, new_combo=new_combo, hitsound=hitsound)
        case HitObjectType.SLIDER:
            return HitObject(
                x,
                y,
                time,
                HitObjectKind.SLIDER,
                new_combo=new_combo,
                hitsound=hitsound,
                slider=_parse_slider(fields, line),
            )
        case HitObjectType.SPINNER:
            if len(fields) < 6:
                raise MalformedBeatmap(line, "end_time", reason="spinner is missing its end time")
            end_time = _int(fields[5], line, "end_time")
            return HitObject(
                x,
                y,
                time,
                HitObjectKind.SPINNER,
                new_combo=new_combo,
                hitsound=hitsound,
                spinner=SpinnerData(end_time),
            )
        case _:
            raise UnknownHitTypeBits(line, type_value)


def _parse_beatmap(lines, handlers):
    section = None
    difficulty = {}
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("//"):
            continue

        # the first line may carry a BOM when the source wasn't opened as utf-8-sig
        line = line.lstrip("\ufeff")
        if section is None and line.startswith(FORMAT_PREFIX):
            handlers["format_version"](_int(line[len(FORMAT_PREFIX) :], line_number, "format_version"))
            continue

        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1]
            continue

        match section:
            case "General" | "Metadata" | "Difficulty":
                key, sep, value = line.partition(":")
                if not sep:
                    raise MalformedBeatmap(line_number, section, reason=f"expected key:value, got {line!r}")
                key = key.strip()
                value = value.strip()
                if section == "Difficulty":
                    if key in DIFFICULTY_KEYS:
                        difficulty[DIFFICULTY_KEYS[key]] = _float(value, line_number, key)
                    else:
                        log.info(f"ignoring unknown difficulty key: {key}")
                elif section == "General" and key in GENERAL_KEYS:
                    handlers[GENERAL_KEYS[key]](value if key == "AudioFilename" else _int(value, line_number, key))
                elif section == "Metadata" and key in METADATA_KEYS:
                    handlers[METADATA_KEYS[key]](_int(value, line_number, key) if key == "BeatmapID" else value)
            case "HitObjects":
                handlers[HitObject](_parse_hit_object(line, line_number))
            case _:
                # events, timing points, colours and editor data aren't needed for judging
                pass

    handlers[Difficulty](Difficulty(**difficulty))


def parse_beatmap(source: TextIO | str | os.PathLike, handlers: dict[Any, Callable[..., None]]) -> None:
    """Parse an osu! beatmap (.osu).
    :param source: text file object or path. Use `Beatmap.from_string` for in-memory text.
    :param handlers: dict of parse event keys to handler functions. Keys are `HitObject` (called once per object, in
        file order), `Difficulty`, "format_version" and the snake_case names of the [General] and [Metadata] keys.
    """

    if isinstance(source, (str, os.PathLike)):
        with open(source, "r", encoding="utf-8-sig") as f:
            try:
                _parse_beatmap(f, handlers)
            except ParseError as exc:
                exc.filename = str(source)
                raise
    else:
        try:
            _parse_beatmap(source, handlers)
        except ParseError as exc:
            exc.filename = getattr(source, "name", None)
            raise
