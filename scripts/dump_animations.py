#!/usr/bin/env python3
"""Print a summary of one or more encoded animation set files.

Usage:
    python scripts/dump_animations.py [--keys] file [file ...]

For every file: each animation with its duration and bone tracks.  With
--keys, every keyframe time is listed as well.  Exits with status 1 if any
file fails to decode.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add parent to path so we can import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from skelanim.anim.parser import AnimationDecodeError, decode
from skelanim.anim.types import AnimationSet, ticks_to_seconds


def dump(path: Path, anims: AnimationSet, show_keys: bool = False) -> None:
    print(f"{path.name}: {len(anims)} animations")
    for name, anim in anims.items():
        print(f"  {name}  ({ticks_to_seconds(anim.duration):.3f}s, "
              f"{len(anim.bone_tracks)} tracks)")
        for track in anim.bone_tracks:
            flag = "" if track.is_sorted() else "  UNSORTED"
            print(f"    {track.bone_name:<24} {len(track):>5} keys{flag}")
            if show_keys:
                times = ", ".join(str(kf.time) for kf in track)
                print(f"      [{times}]")


def main():
    args = sys.argv[1:]
    show_keys = "--keys" in args
    files = [Path(a) for a in args if a != "--keys"]
    if not files:
        print(__doc__, file=sys.stderr)
        sys.exit(2)

    failed = False
    for f in files:
        try:
            with open(f, "rb") as fh:
                anims = decode(fh)
        except (OSError, AnimationDecodeError) as e:
            print(f"  FAIL {f.name}: {e}", file=sys.stderr)
            failed = True
            continue
        dump(f, anims, show_keys)

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
