"""Animation data model — dataclasses for decoded skeletal animation.

The model is a plain tree: AnimationSet → Animation → BoneTrack → Keyframe.
Timestamps are stored exactly as read; the core never sorts or rescales them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ItemsView, Iterator, ValuesView

Row4 = tuple[float, float, float, float]
Matrix4 = tuple[Row4, Row4, Row4, Row4]  # row-major: m[row][col]

IDENTITY: Matrix4 = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0),
)

# Timestamps written by the content pipeline are 100 ns ticks
TICKS_PER_SECOND = 10_000_000
TICKS_PER_60FPS = TICKS_PER_SECOND // 60


def ticks_to_seconds(ticks: int) -> float:
    return ticks / TICKS_PER_SECOND


def seconds_to_ticks(seconds: float) -> int:
    return round(seconds * TICKS_PER_SECOND)


@dataclass(frozen=True)
class Keyframe:
    """A sampled bone pose at a point in time."""

    transform: Matrix4
    time: int  # signed 64-bit ticks


@dataclass
class BoneTrack:
    """All keyframes animating one bone within one animation."""

    bone_name: str
    keyframes: list[Keyframe] = field(default_factory=list)

    def add_keyframe(self, keyframe: Keyframe) -> None:
        self.keyframes.append(keyframe)

    @property
    def duration(self) -> int:
        """Latest keyframe time, never below zero."""
        return max([0, *(kf.time for kf in self.keyframes)])

    def is_sorted(self) -> bool:
        times = [kf.time for kf in self.keyframes]
        return all(a <= b for a, b in zip(times, times[1:]))

    def __len__(self) -> int:
        return len(self.keyframes)

    def __iter__(self) -> Iterator[Keyframe]:
        return iter(self.keyframes)


@dataclass
class Animation:
    """A named animation made of per-bone tracks, in stream order."""

    name: str
    bone_tracks: list[BoneTrack] = field(default_factory=list)

    def add_bone_track(self, track: BoneTrack) -> None:
        self.bone_tracks.append(track)

    @property
    def duration(self) -> int:
        return max((t.duration for t in self.bone_tracks), default=0)

    def track(self, bone_name: str) -> BoneTrack | None:
        for t in self.bone_tracks:
            if t.bone_name == bone_name:
                return t
        return None


@dataclass
class AnimationSet:
    """Animations keyed by name, in insertion order.

    Adding an animation whose name is already present replaces the earlier
    one (last write wins) without moving it.
    """

    animations: dict[str, Animation] = field(default_factory=dict)

    def add(self, animation: Animation) -> None:
        self.animations[animation.name] = animation

    def at(self, index: int) -> Animation:
        """Return the animation at *index* in insertion order."""
        return list(self.animations.values())[index]

    def names(self) -> list[str]:
        return list(self.animations)

    def values(self) -> ValuesView[Animation]:
        return self.animations.values()

    def items(self) -> ItemsView[str, Animation]:
        return self.animations.items()

    def __getitem__(self, name: str) -> Animation:
        return self.animations[name]

    def __contains__(self, name: object) -> bool:
        return name in self.animations

    def __len__(self) -> int:
        return len(self.animations)

    def __iter__(self) -> Iterator[str]:
        return iter(self.animations)


class AnimationBuilder:
    """Assemble an Animation from loose (bone, transform, time) samples.

    Tracks are created on first use of a bone name and emitted sorted by
    bone name when the animation is finished.
    """

    def __init__(self) -> None:
        self._name: str | None = None
        self._tracks: dict[str, BoneTrack] = {}

    def start(self, name: str) -> None:
        self._name = name
        self._tracks = {}

    def add_keyframe(self, bone_name: str, transform: Matrix4, time: int) -> None:
        if self._name is None:
            raise RuntimeError("Cannot add keyframes before an animation is started")
        track = self._tracks.get(bone_name)
        if track is None:
            track = self._tracks[bone_name] = BoneTrack(bone_name)
        track.add_keyframe(Keyframe(transform, time))

    def finish(self) -> Animation:
        if self._name is None:
            raise RuntimeError("Cannot finish an animation that was not started")
        animation = Animation(self._name)
        for bone_name in sorted(self._tracks):
            animation.add_bone_track(self._tracks[bone_name])
        self._name = None
        self._tracks = {}
        return animation
