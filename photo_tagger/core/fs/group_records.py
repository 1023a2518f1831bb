# photo_tagger/core/fs/group_records.py
"""
Folder-level IO for the grouping run: image discovery and photo-groups.json.

`load_record_mapping` / `save_record_mapping` are shared with the category
output (photo-tags.json): both are JSON objects keyed by filename.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from photo_tagger.core.errors import StorageIOError
from photo_tagger.core.store.record_store import write_text_atomic
from photo_tagger.schemas.models import GroupRecord

GROUP_FILE = "photo-groups.json"

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".heic"}

M = TypeVar("M", bound=BaseModel)


def is_image(p: Path) -> bool:
    return p.suffix.lower() in IMAGE_EXTS


def collect_images_flat(folder: str | Path) -> list[Path]:
    """Image files directly under `folder` (not recursive), sorted by name."""
    base = Path(folder)
    if not base.is_dir():
        return []
    return sorted((p for p in base.iterdir() if p.is_file() and is_image(p)), key=lambda p: p.name)


def load_record_mapping(path: Path, model: type[M]) -> dict[str, M]:
    """
    Read a filename-keyed JSON object. Missing file → {}.

    A file that exists but cannot be read or parsed raises StorageIOError rather
    than silently starting over, which would renumber every group.
    """
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise StorageIOError(f"cannot read {path}: {e}") from e
    if not isinstance(raw, dict):
        raise StorageIOError(f"{path} is not a JSON object keyed by filename")
    try:
        return {str(name): model.model_validate(val) for name, val in raw.items()}
    except ValidationError as e:
        raise StorageIOError(f"invalid record in {path}:\n{e}") from e


def save_record_mapping(path: Path, records: Mapping[str, BaseModel]) -> Path:
    payload = {name: records[name].model_dump() for name in sorted(records)}
    write_text_atomic(path, json.dumps(payload, ensure_ascii=False, indent=2) + "\n")
    return path


def load_group_records(folder: str | Path) -> dict[str, GroupRecord]:
    return load_record_mapping(Path(folder) / GROUP_FILE, GroupRecord)


def save_group_records(folder: str | Path, records: Mapping[str, GroupRecord]) -> Path:
    return save_record_mapping(Path(folder) / GROUP_FILE, records)
