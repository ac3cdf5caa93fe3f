"""Animation binary parser — decodes an animation set from bytes.

The format is sequential with no padding.  All multi-byte values are
little-endian.  Strings are a 7-bit-encoded byte length followed by UTF-8.

    int32   animation count
    per animation:
        string  name
        int32   bone track count
        per bone track:
            string  bone name
            int32   keyframe count
            per keyframe:
                16 x float32  transform (row-major)
                int64         time

Decoding is all-or-nothing: the first malformed field raises and no partial
result is returned.
"""

from __future__ import annotations

import io
import logging
import struct
from typing import BinaryIO, Union

from .types import Animation, AnimationSet, BoneTrack, Keyframe, Matrix4

log = logging.getLogger("skelanim")

DEFAULT_MAX_STRING_LENGTH = 1 << 20

# A 32-bit length never needs more than 5 groups of 7 bits
_MAX_PREFIX_BYTES = 5

Source = Union[bytes, bytearray, memoryview, BinaryIO]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class AnimationDecodeError(ValueError):
    """Base class for every failure raised while decoding."""


class UnexpectedEndOfStream(AnimationDecodeError, EOFError):
    """The input ended before a field could be read completely."""


class MalformedLength(AnimationDecodeError):
    """A count or string length prefix is negative or out of range."""


class StructuralMismatch(AnimationDecodeError):
    """Declared structure disagrees with the decoded content."""


# ---------------------------------------------------------------------------
# Binary reader helper
# ---------------------------------------------------------------------------

class _Reader:
    """Forward-only little-endian reader that tracks the bytes consumed."""

    __slots__ = ("_f", "_pos", "_max_string_length")

    def __init__(self, f: BinaryIO, max_string_length: int = DEFAULT_MAX_STRING_LENGTH) -> None:
        self._f = f
        self._pos = 0
        self._max_string_length = max_string_length

    @property
    def position(self) -> int:
        return self._pos

    # -- primitive reads --

    def read_bytes(self, n: int) -> bytes:
        data = self._f.read(n)
        if len(data) != n:
            raise UnexpectedEndOfStream(
                f"Expected {n} bytes at offset {self._pos}, got {len(data)}"
            )
        self._pos += n
        return data

    def read_uint8(self) -> int:
        return self.read_bytes(1)[0]

    def read_int32(self) -> int:
        return struct.unpack("<i", self.read_bytes(4))[0]

    def read_int64(self) -> int:
        return struct.unpack("<q", self.read_bytes(8))[0]

    def read_matrix(self) -> Matrix4:
        v = struct.unpack("<16f", self.read_bytes(64))
        return (v[0:4], v[4:8], v[8:12], v[12:16])

    def read_count(self, what: str) -> int:
        offset = self._pos
        count = self.read_int32()
        if count < 0:
            raise MalformedLength(f"Negative {what} count {count} at offset {offset}")
        return count

    # -- text --

    def read_7bit_length(self) -> int:
        offset = self._pos
        value = 0
        for i in range(_MAX_PREFIX_BYTES):
            byte = self.read_uint8()
            value |= (byte & 0x7F) << (7 * i)
            if not byte & 0x80:
                break
        else:
            raise MalformedLength(f"Unterminated 7-bit length prefix at offset {offset}")

        if value > 0xFFFFFFFF:
            raise MalformedLength(f"7-bit length prefix overflows 32 bits at offset {offset}")
        if value & 0x80000000:
            raise MalformedLength(
                f"Negative string length {value - (1 << 32)} at offset {offset}"
            )
        if value > self._max_string_length:
            raise MalformedLength(
                f"String length {value} at offset {offset} exceeds "
                f"limit of {self._max_string_length}"
            )
        return value

    def read_string(self) -> str:
        length = self.read_7bit_length()
        if length == 0:
            return ""
        return self.read_bytes(length).decode("utf-8", errors="replace")

    def read_rest(self) -> bytes:
        data = self._f.read()
        self._pos += len(data)
        return data


# ---------------------------------------------------------------------------
# Section parsers
# ---------------------------------------------------------------------------

def _parse_keyframe(r: _Reader) -> Keyframe:
    transform = r.read_matrix()
    time = r.read_int64()
    return Keyframe(transform=transform, time=time)


def _parse_bone_track(r: _Reader) -> BoneTrack:
    bone_name = r.read_string()
    count = r.read_count("keyframe")

    track = BoneTrack(bone_name)
    for _ in range(count):
        track.add_keyframe(_parse_keyframe(r))
    return track


def _parse_animation(r: _Reader) -> Animation:
    offset = r.position
    name = r.read_string()
    if not name:
        raise StructuralMismatch(f"Empty animation name at offset {offset}")
    count = r.read_count("bone track")
    log.debug("Parsing animation %r: %d bone tracks", name, count)

    animation = Animation(name)
    for _ in range(count):
        track = _parse_bone_track(r)
        if not track.is_sorted():
            log.warning(
                "Animation %r: keyframes for bone %r are not in time order",
                name, track.bone_name,
            )
        animation.add_bone_track(track)
    return animation


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode(
    source: Source,
    *,
    max_string_length: int = DEFAULT_MAX_STRING_LENGTH,
    expect_end: bool = False,
) -> AnimationSet:
    """Decode an AnimationSet from a byte buffer or readable binary stream.

    Exactly the bytes described by the declared counts are consumed; with
    ``expect_end`` any bytes left over raise StructuralMismatch.  The stream
    is never closed.

    Raises UnexpectedEndOfStream, MalformedLength or StructuralMismatch (all
    subclasses of AnimationDecodeError).
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))
    r = _Reader(source, max_string_length)

    count = r.read_count("animation")
    log.debug("Parsing %d animations", count)

    result = AnimationSet()
    for _ in range(count):
        animation = _parse_animation(r)
        if animation.name in result:
            log.warning("Duplicate animation %r replaces earlier entry", animation.name)
        result.add(animation)

    if expect_end:
        end = r.position
        trailing = r.read_rest()
        if trailing:
            raise StructuralMismatch(
                f"{len(trailing)} trailing bytes after declared content at offset {end}"
            )

    tracks = sum(len(a.bone_tracks) for a in result.values())
    keyframes = sum(len(t) for a in result.values() for t in a.bone_tracks)
    log.info(
        "Animations decoded: %d animations, %d bone tracks, %d keyframes (%d bytes)",
        len(result), tracks, keyframes, r.position,
    )
    return result
