"""Animation model tests — durations, lookups, and the animation builder."""

from __future__ import annotations

import dataclasses
from collections.abc import ItemsView, ValuesView

import pytest

from skelanim.anim.types import (
    IDENTITY,
    TICKS_PER_60FPS,
    TICKS_PER_SECOND,
    Animation,
    AnimationBuilder,
    AnimationSet,
    BoneTrack,
    Keyframe,
    seconds_to_ticks,
    ticks_to_seconds,
)


def _track(name: str, *times: int) -> BoneTrack:
    return BoneTrack(name, [Keyframe(IDENTITY, t) for t in times])


class TestBoneTrack:
    def test_duration_is_latest_time(self):
        assert _track("Root", 0, 500, 250).duration == 500

    def test_empty_duration(self):
        assert _track("Root").duration == 0

    def test_duration_never_negative(self):
        assert _track("Root", -100, -50).duration == 0

    def test_is_sorted(self):
        assert _track("Root", 0, 0, 10).is_sorted()
        assert _track("Root").is_sorted()
        assert not _track("Root", 10, 0).is_sorted()

    def test_add_keyframe_preserves_order(self):
        track = BoneTrack("Root")
        track.add_keyframe(Keyframe(IDENTITY, 30))
        track.add_keyframe(Keyframe(IDENTITY, 10))
        assert [kf.time for kf in track] == [30, 10]
        assert len(track) == 2

    def test_keyframe_is_frozen(self):
        kf = Keyframe(IDENTITY, 0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            kf.time = 5


class TestAnimation:
    def test_duration_spans_tracks(self):
        anim = Animation("Walk", [_track("A", 0, 100), _track("B", 0, 400)])
        assert anim.duration == 400

    def test_empty_duration(self):
        assert Animation("Idle").duration == 0

    def test_track_lookup(self):
        anim = Animation("Walk", [_track("A", 0), _track("B", 1)])
        assert anim.track("B").keyframes[0].time == 1
        assert anim.track("missing") is None


class TestAnimationSet:
    def test_insertion_order(self):
        anims = AnimationSet()
        for name in ("Walk", "Run", "Idle"):
            anims.add(Animation(name))
        assert anims.names() == ["Walk", "Run", "Idle"]
        assert list(anims) == ["Walk", "Run", "Idle"]
        assert "Run" in anims
        assert "Jump" not in anims

    def test_overwrite_keeps_slot(self):
        anims = AnimationSet()
        anims.add(Animation("Walk", [_track("old")]))
        anims.add(Animation("Run"))
        anims.add(Animation("Walk", [_track("new")]))
        assert anims.names() == ["Walk", "Run"]
        assert anims["Walk"].bone_tracks[0].bone_name == "new"

    def test_values_and_items_are_live_views(self):
        anims = AnimationSet()
        values, items = anims.values(), anims.items()
        assert isinstance(values, ValuesView)
        assert isinstance(items, ItemsView)
        walk = Animation("Walk")
        anims.add(walk)
        assert list(values) == [walk]
        assert list(items) == [("Walk", walk)]

    def test_positional_access(self):
        anims = AnimationSet()
        anims.add(Animation("Walk"))
        anims.add(Animation("Run"))
        assert anims.at(1).name == "Run"
        assert anims.at(-1).name == "Run"
        with pytest.raises(IndexError):
            anims.at(2)

    def test_missing_name(self):
        with pytest.raises(KeyError):
            AnimationSet()["Walk"]


class TestAnimationBuilder:
    def test_tracks_sorted_by_bone_name(self):
        b = AnimationBuilder()
        b.start("Walk")
        b.add_keyframe("Spine", IDENTITY, 0)
        b.add_keyframe("Hips", IDENTITY, 0)
        b.add_keyframe("Spine", IDENTITY, 100)
        anim = b.finish()
        assert anim.name == "Walk"
        assert [t.bone_name for t in anim.bone_tracks] == ["Hips", "Spine"]
        assert [kf.time for kf in anim.track("Spine")] == [0, 100]
        assert anim.duration == 100

    def test_finish_resets(self):
        b = AnimationBuilder()
        b.start("Walk")
        b.finish()
        with pytest.raises(RuntimeError, match="not started"):
            b.finish()

    def test_add_before_start(self):
        with pytest.raises(RuntimeError, match="before an animation is started"):
            AnimationBuilder().add_keyframe("Hips", IDENTITY, 0)

    def test_restart_discards_unfinished(self):
        b = AnimationBuilder()
        b.start("Walk")
        b.add_keyframe("Hips", IDENTITY, 0)
        b.start("Run")
        assert b.finish().bone_tracks == []


class TestTiming:
    def test_ticks_to_seconds(self):
        assert ticks_to_seconds(TICKS_PER_SECOND) == pytest.approx(1.0)
        assert ticks_to_seconds(TICKS_PER_60FPS * 60) == pytest.approx(1.0, rel=1e-6)

    def test_seconds_to_ticks(self):
        assert seconds_to_ticks(0.5) == 5_000_000
        assert seconds_to_ticks(ticks_to_seconds(1234)) == 1234
