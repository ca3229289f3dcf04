import enum
import re
import struct
from functools import lru_cache
from typing import Any

from .log import log

# Pre-allocating these prevents python from recreating the object on every struct.unpack() call.
# Everything in an .osr file is little-endian.
unpack_uint8 = struct.Struct("<B").unpack

unpack_uint16 = struct.Struct("<H").unpack

unpack_uint32 = struct.Struct("<I").unpack

unpack_int32 = struct.Struct("<i").unpack

unpack_uint64 = struct.Struct("<Q").unpack

unpack_double = struct.Struct("<d").unpack

pack_uint8 = struct.Struct("<B").pack

pack_uint16 = struct.Struct("<H").pack

pack_uint32 = struct.Struct("<I").pack

pack_int32 = struct.Struct("<i").pack

pack_uint64 = struct.Struct("<Q").pack

pack_double = struct.Struct("<d").pack

# lead byte of a present string, "0x00" means the string is absent
STRING_PRESENT = 0x0B


def encode_uleb128(value: int) -> bytes:
    """Encodes a non-negative int as base-128 with a continuation bit, least significant group first."""
    if value < 0:
        raise ValueError(f"uleb128 cannot encode negative value {value}")

    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_string(value: str | None) -> bytes:
    if not value:
        return b"\x00"
    raw = value.encode("utf-8")
    return bytes([STRING_PRESENT]) + encode_uleb128(len(raw)) + raw


def _indent(s):
    return re.sub(r"^", "    ", s, flags=re.MULTILINE)


def _format_collection(coll, delim_open, delim_close):
    elements = [_format(x) for x in coll]
    if elements and "\n" in elements[0]:
        return delim_open + "\n" + ",\n".join(_indent(e) for e in elements) + delim_close
    else:
        return delim_open + ", ".join(elements) + delim_close


def _format(obj):
    if isinstance(obj, float):
        return "%.02f" % obj
    elif isinstance(obj, tuple):
        return _format_collection(obj, "(", ")")
    elif isinstance(obj, list):
        return _format_collection(obj, "[", "]")
    elif isinstance(obj, enum.Enum):
        return repr(obj)
    else:
        return str(obj)


class Base:
    def _attr_repr(self, attr):
        return attr + "=" + _format(getattr(self, attr))

    def __repr__(self):
        attrs = []
        for attr in dir(self):
            # uppercase names are nested classes
            if not callable(getattr(self, attr)) and not (attr.startswith("_") or attr[0].isupper()):
                s = self._attr_repr(attr)
                if s:
                    attrs.append(_indent(s))

        return "%s(\n%s)" % (self.__class__.__name__, ",\n".join(attrs))


class Enum(enum.Enum):
    def __repr__(self):
        return f"{self.value}:{self.name}"


class IntEnum(enum.IntEnum):
    def __repr__(self):
        return f"{self._value_}:{self._name_}"

    @classmethod
    def _missing_(cls, value):
        val_desc = f"0x{value:x}" if isinstance(value, int) else f"{value}"
        raise ValueError(f"{val_desc} is not a valid {cls.__name__}") from None


@lru_cache(maxsize=512)
def try_enum(enum_type, val) -> Enum | Any:
    """Attempts Enum(val). If the value is invalid, returns the given value."""
    try:
        return enum_type(val)
    except ValueError:
        log.info("unknown %s: %s" % (enum_type.__name__, val))
        return val
