"""Animation binary writer — the inverse of parser.decode.

Emits the same sequential little-endian layout the parser reads, walking
animations in insertion order and tracks/keyframes in list order.
"""

from __future__ import annotations

import io
import logging
import struct
from typing import BinaryIO

from .parser import DEFAULT_MAX_STRING_LENGTH
from .types import Animation, AnimationSet, BoneTrack, Keyframe, Matrix4

log = logging.getLogger("skelanim")

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class _Writer:
    """Little-endian writer mirroring the parser's _Reader."""

    __slots__ = ("_f", "written")

    def __init__(self, f: BinaryIO) -> None:
        self._f = f
        self.written = 0

    def write_bytes(self, data: bytes) -> None:
        self._f.write(data)
        self.written += len(data)

    def write_int32(self, value: int) -> None:
        self.write_bytes(struct.pack("<i", value))

    def write_int64(self, value: int) -> None:
        try:
            if not _INT64_MIN <= value <= _INT64_MAX:
                raise ValueError(f"Timestamp out of int64 range: {value}")
            data = struct.pack("<q", value)
        except (struct.error, OverflowError, TypeError) as e:
            raise ValueError(f"Timestamp is not an int64: {value!r}") from e
        self.write_bytes(data)

    def write_7bit_length(self, value: int) -> None:
        out = bytearray()
        while value >= 0x80:
            out.append((value & 0x7F) | 0x80)
            value >>= 7
        out.append(value)
        self.write_bytes(bytes(out))

    def write_string(self, text: str) -> None:
        data = text.encode("utf-8")
        if len(data) > DEFAULT_MAX_STRING_LENGTH:
            raise ValueError(
                f"String of {len(data)} bytes exceeds limit of {DEFAULT_MAX_STRING_LENGTH}"
            )
        self.write_7bit_length(len(data))
        self.write_bytes(data)

    def write_matrix(self, m: Matrix4) -> None:
        try:
            if len(m) != 4 or any(len(row) != 4 for row in m):
                raise ValueError(f"Transform must be a 4x4 matrix, got {m!r}")
            data = struct.pack("<16f", *(v for row in m for v in row))
        except (struct.error, OverflowError, TypeError) as e:
            raise ValueError(f"Transform not representable as float32: {m!r}") from e
        self.write_bytes(data)


def _write_keyframe(w: _Writer, keyframe: Keyframe) -> None:
    w.write_matrix(keyframe.transform)
    w.write_int64(keyframe.time)


def _write_bone_track(w: _Writer, track: BoneTrack) -> None:
    w.write_string(track.bone_name)
    w.write_int32(len(track.keyframes))
    for kf in track.keyframes:
        _write_keyframe(w, kf)


def _write_animation(w: _Writer, animation: Animation) -> None:
    w.write_string(animation.name)
    w.write_int32(len(animation.bone_tracks))
    for track in animation.bone_tracks:
        _write_bone_track(w, track)


def write(animation_set: AnimationSet, stream: BinaryIO) -> int:
    """Write *animation_set* to *stream* and return the number of bytes written.

    The set is encoded in full before anything reaches *stream*.  Raises
    ValueError for content the format cannot carry.
    """
    data = encode(animation_set)
    stream.write(data)
    return len(data)


def encode(animation_set: AnimationSet) -> bytes:
    """Encode *animation_set* to bytes.

    Raises ValueError for content the format cannot carry.
    """
    for key, animation in animation_set.items():
        if not animation.name:
            raise ValueError("Animation name must not be empty")
        if key != animation.name:
            raise ValueError(
                f"Animation {animation.name!r} is stored under key {key!r}"
            )

    buf = io.BytesIO()
    w = _Writer(buf)
    w.write_int32(len(animation_set))
    for animation in animation_set.values():
        _write_animation(w, animation)

    log.debug("Wrote %d animations (%d bytes)", len(animation_set), w.written)
    return buf.getvalue()
