# photo_tagger/core/fs/categories.py
"""
Folder IO for the category mode: category discovery, photo-tags.json and
moving a tagged photo into its category folder.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from photo_tagger.core.fs.folders import CollisionPolicy, PlannedMove, apply_move, plan_move
from photo_tagger.core.fs.group_records import load_record_mapping, save_record_mapping
from photo_tagger.schemas.models import TagRecord

TAG_FILE = "photo-tags.json"


def collect_subdirs(folder: str | Path) -> list[str]:
    """Names of the visible subfolders of `folder`, sorted. Each one is a category."""
    base = Path(folder)
    if not base.is_dir():
        return []
    return sorted(p.name for p in base.iterdir() if p.is_dir() and not p.name.startswith("."))


def load_tag_records(folder: str | Path) -> dict[str, TagRecord]:
    return load_record_mapping(Path(folder) / TAG_FILE, TagRecord)


def save_tag_records(folder: str | Path, records: Mapping[str, TagRecord]) -> Path:
    return save_record_mapping(Path(folder) / TAG_FILE, records)


def move_to_tag_dir(
    photo: Path,
    tag: str,
    *,
    on_collision: CollisionPolicy = "skip_existing",
    dry_run: bool = False,
) -> tuple[PlannedMove, bool]:
    """Move `photo` into the sibling folder named `tag`. Returns (plan, moved)."""
    mv = plan_move(photo, photo.parent / tag / photo.name, on_collision=on_collision)
    return mv, apply_move(mv, dry_run=dry_run)
