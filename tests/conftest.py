from __future__ import annotations

import struct

import pytest

from skelanim.anim.types import IDENTITY

IDENTITY_FLAT = [v for row in IDENTITY for v in row]


@pytest.fixture
def walk_bytes() -> bytes:
    """One animation "Walk", one track "Root", identity keys at 0 and 1000."""
    buf = bytearray()
    buf.extend(struct.pack("<i", 1))
    buf.extend(b"\x04Walk")
    buf.extend(struct.pack("<i", 1))
    buf.extend(b"\x04Root")
    buf.extend(struct.pack("<i", 2))
    for t in (0, 1000):
        buf.extend(struct.pack("<16f", *IDENTITY_FLAT))
        buf.extend(struct.pack("<q", t))
    return bytes(buf)


@pytest.fixture
def walk_field_boundaries() -> list[int]:
    """Byte offsets where each field of walk_bytes starts."""
    offsets = [0, 4, 9, 13, 18]
    pos = 22
    for _ in range(2):
        offsets.extend([pos, pos + 64])
        pos += 72
    return offsets
