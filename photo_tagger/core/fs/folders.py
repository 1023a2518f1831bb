# photo_tagger/core/fs/folders.py
"""
Move photos into per-group (or per-category) folders.

Folder name: `<machine_type>_<machine_id>_<group:02d>` (empty parts dropped),
e.g. `タイヤローラー_TZ-703_01`. Photos without a group (no timestamp) and
photos already in place are left alone.
"""

from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from photo_tagger.core.errors import StorageIOError
from photo_tagger.schemas.models import GroupRecord

logger = logging.getLogger(__name__)

CollisionPolicy = Literal["skip_existing", "overwrite"]

_UNSAFE_RE = re.compile(r'[\\/:*?"<>|\s]+')


@dataclass(frozen=True)
class PlannedMove:
    source: Path
    target: Path
    action: Literal["move", "overwrite", "skip"]


def group_folder_name(rec: GroupRecord) -> str:
    parts = [_UNSAFE_RE.sub("-", p.strip()) for p in (rec.machine_type, rec.machine_id) if p and p.strip()]
    parts.append(f"{rec.group:02d}")
    return "_".join(parts)


def plan_move(source: Path, target: Path, *, on_collision: CollisionPolicy = "skip_existing") -> PlannedMove:
    if target.exists():
        action = "overwrite" if on_collision == "overwrite" else "skip"
    else:
        action = "move"
    return PlannedMove(source, target, action)


def apply_move(mv: PlannedMove, *, dry_run: bool = False) -> bool:
    """Carry out one planned move. Returns True when a file was actually moved."""
    if mv.action == "skip":
        logger.info("skip (exists): %s", mv.target)
        return False
    if dry_run:
        logger.info("would %s: %s -> %s", mv.action, mv.source.name, mv.target.parent.name)
        return False
    try:
        mv.target.parent.mkdir(parents=True, exist_ok=True)
        if mv.action == "overwrite":
            mv.target.unlink()
        shutil.move(str(mv.source), str(mv.target))
    except OSError as e:
        raise StorageIOError(f"cannot move {mv.source} -> {mv.target}: {e}") from e
    logger.debug("moved %s -> %s", mv.source.name, mv.target.parent.name)
    return True


def plan_moves(
    folder: str | Path,
    records: Mapping[str, GroupRecord],
    *,
    on_collision: CollisionPolicy = "skip_existing",
    locations: Mapping[str, Path] | None = None,
) -> list[PlannedMove]:
    """
    Plan group-folder moves. `locations` maps a filename to where it sits now
    (default: directly under `folder`).
    """
    base = Path(folder)
    where = locations or {}
    plan: list[PlannedMove] = []
    for name in sorted(records):
        rec = records[name]
        src = where.get(name, base / name)
        if rec.group == 0 or not src.is_file():
            continue
        dst = base / group_folder_name(rec) / name
        if dst == src:
            continue
        plan.append(plan_move(src, dst, on_collision=on_collision))
    return plan


def materialize_group_folders(
    folder: str | Path,
    records: Mapping[str, GroupRecord],
    *,
    on_collision: CollisionPolicy = "skip_existing",
    dry_run: bool = False,
    locations: Mapping[str, Path] | None = None,
) -> list[PlannedMove]:
    """Apply (or, with dry_run, only report) the planned moves."""
    plan = plan_moves(folder, records, on_collision=on_collision, locations=locations)
    for mv in plan:
        apply_move(mv, dry_run=dry_run)
    return plan


def locate_organized(folder: str | Path, records: Mapping[str, GroupRecord], *, exclude: Iterable[str] = ()) -> list[Path]:
    """Photos of `records` that an earlier organize run moved into their group folder."""
    base = Path(folder)
    skip = set(exclude)
    found: list[Path] = []
    for name in sorted(records):
        rec = records[name]
        if name in skip or rec.group == 0:
            continue
        p = base / group_folder_name(rec) / name
        if p.is_file():
            found.append(p)
    return found
