# tests/utils.py
"""
Single source of truth for test data, factories, and canonical payloads.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from photo_tagger.inputs.inputs import RunOptions
from photo_tagger.schemas.models import PhotoRecord

# -----------------------------
# Global defaults (edit once)
# -----------------------------

BASE_TIME = datetime(2025, 3, 14, 9, 0, 0)
BASE_EPOCH = 1741942800  # 2025-03-14 09:00:00 read as UTC

ROLLER_BOARD = "工種 舗装工\n機械 タイヤローラー 転圧状況"
ROLLER_PLATE = "型式 TZ-703 特定自主検査済"
FINISHER_BOARD = "アスファルトフィニッシャー 舗設状況"
FINISHER_PLATE = "HA60C-2 排出ガス対策型"

# -----------------------------
# Filenames
# -----------------------------


def photo_name(minutes: float = 0, *, prefix: str = "IMG_", ext: str = ".jpg") -> str:
    """Filename stamped `minutes` after BASE_TIME, e.g. IMG_20250314_091500.jpg."""
    ts = BASE_TIME + timedelta(minutes=minutes)
    return f"{prefix}{ts.strftime('%Y%m%d_%H%M%S')}{ext}"


def epoch(minutes: float = 0) -> int:
    return BASE_EPOCH + int(minutes * 60)


# -----------------------------
# Payload / record factories
# -----------------------------


def make_payload(
    file: str,
    *,
    board_text: str = "",
    other_text: str = "",
    notes: str = "",
    objects: list[Any] | None = None,
    prose: bool = True,
) -> str:
    body = json.dumps(
        {
            "file": file,
            "objects": objects if objects is not None else [],
            "board_text": board_text,
            "other_text": other_text,
            "notes": notes,
        },
        ensure_ascii=False,
    )
    return f"以下が抽出結果です。\n{body}\n以上。" if prose else body


def make_record(file: str = "a.jpg", **overrides: Any) -> PhotoRecord:
    data: dict[str, Any] = {"file": file, "objects": [], "board_text": "", "other_text": "", "notes": ""}
    data.update(overrides)
    return PhotoRecord(**data)


# -----------------------------
# Folder helpers
# -----------------------------


def make_photo_dir(base: Path, names: Iterable[str]) -> Path:
    base.mkdir(parents=True, exist_ok=True)
    for name in names:
        (base / name).write_bytes(b"\xff\xd8\xff\xd9")
    return base


def make_options(folder: Path, **overrides: Any) -> RunOptions:
    data: dict[str, Any] = {"target_folder": str(folder), "provider": "mock"}
    data.update(overrides)
    return RunOptions(**data)
