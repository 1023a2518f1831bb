# photo_tagger/core/classify/continuity.py
"""
Activity continuity over a time-ordered photo sequence.

Photos without readable text (machine overviews, wide shots) inherit the
activity of the photo taken just before them, as long as the time gap stays
under the threshold. `within_gap` is the single gap policy: group clustering
uses it too.

Invariants
----------
- OCR-derived activity always wins over inheritance.
- Inheritance requires `current - previous < gap_minutes * 60` (strict); a gap
  exactly equal to the threshold starts a new segment.
- Sequences are processed in non-decreasing timestamp order; equal stamps keep
  their collection order (stable sort).
"""

from __future__ import annotations

from collections.abc import Sequence

from photo_tagger.core.classify.activity import UNCLASSIFIED
from photo_tagger.core.normalize.timestamps import block_name
from photo_tagger.schemas.models import ActivityFrame

DEFAULT_GAP_MINUTES = 10


def within_gap(previous_ts: int, current_ts: int, gap_minutes: float) -> bool:
    return current_ts - previous_ts < gap_minutes * 60


def infer_activity_with_gap(
    previous: ActivityFrame | None,
    current: ActivityFrame,
    gap_minutes: float,
    *,
    block_names: bool = False,
) -> ActivityFrame:
    """One transition of the resolver. Returns the new state frame (its `activity` is the label)."""
    if current.activity:
        return current
    if previous is not None and within_gap(previous.timestamp, current.timestamp, gap_minutes):
        return ActivityFrame(previous.activity, current.timestamp)
    label = block_name(current.timestamp) if block_names else UNCLASSIFIED
    return ActivityFrame(label, current.timestamp)


class ContinuityResolver:
    """Holds `previous_frame` for one sequential pass over a folder."""

    def __init__(self, gap_minutes: float = DEFAULT_GAP_MINUTES, *, block_names: bool = False) -> None:
        self.gap_minutes = gap_minutes
        self.block_names = block_names
        self.previous_frame: ActivityFrame | None = None

    def feed(self, frame: ActivityFrame) -> str:
        self.previous_frame = infer_activity_with_gap(
            self.previous_frame, frame, self.gap_minutes, block_names=self.block_names
        )
        return self.previous_frame.activity

    def pin(self, frame: ActivityFrame) -> None:
        """Seed the state with a frame whose label is already decided (e.g. from an earlier run)."""
        self.previous_frame = frame

    def reset(self) -> None:
        self.previous_frame = None


def resolve_sequence(
    frames: Sequence[ActivityFrame],
    gap_minutes: float = DEFAULT_GAP_MINUTES,
    *,
    block_names: bool = False,
) -> list[str]:
    """Resolve labels for `frames`; the result is aligned with the input order, not the time order."""
    order = sorted(range(len(frames)), key=lambda i: frames[i].timestamp)
    resolver = ContinuityResolver(gap_minutes, block_names=block_names)
    labels = [""] * len(frames)
    for i in order:
        labels[i] = resolver.feed(frames[i])
    return labels
