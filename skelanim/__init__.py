"""skelanim — decoder and encoder for binary skeletal animation sets"""

import logging

log = logging.getLogger("skelanim")
log.setLevel(logging.DEBUG)

from .anim.parser import (  # noqa: E402
    AnimationDecodeError,
    MalformedLength,
    StructuralMismatch,
    UnexpectedEndOfStream,
    decode,
)
from .anim.types import (  # noqa: E402
    IDENTITY,
    Animation,
    AnimationBuilder,
    AnimationSet,
    BoneTrack,
    Keyframe,
)
from .anim.writer import encode, write  # noqa: E402

__all__ = [
    "IDENTITY",
    "Animation",
    "AnimationBuilder",
    "AnimationDecodeError",
    "AnimationSet",
    "BoneTrack",
    "Keyframe",
    "MalformedLength",
    "StructuralMismatch",
    "UnexpectedEndOfStream",
    "decode",
    "encode",
    "write",
]
