# photo_tagger/core/store/record_store.py
"""
Append-only per-photo record log + materialized views.

Layout (under the photo folder):
  - photo-records.jsonl : the log, one PhotoRecord per line (source of truth)
  - photo-records.json  : JSON array of live records (view)
  - photo-records.csv   : one row per live record (view)

"Live" = last occurrence per filename. Views are rebuilt from the whole log,
so materializing an unchanged log twice yields identical bytes.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from photo_tagger.core.errors import StorageIOError
from photo_tagger.schemas.models import PhotoRecord

logger = logging.getLogger(__name__)

LOG_FILE = "photo-records.jsonl"
COLLECTION_FILE = "photo-records.json"
TABLE_FILE = "photo-records.csv"

TABLE_COLUMNS = ["file", "objects_json", "board_text", "other_text", "notes", "error"]


def dedupe_last_wins(records: Iterable[PhotoRecord]) -> list[PhotoRecord]:
    """Keep the last record per filename, at the position where the filename first appeared."""
    live: dict[str, PhotoRecord] = {}
    for rec in records:
        live[rec.file] = rec
    return list(live.values())


def render_collection(records: Iterable[PhotoRecord]) -> str:
    return json.dumps([r.to_log_dict() for r in records], ensure_ascii=False, indent=2) + "\n"


def render_table(records: Iterable[PhotoRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(TABLE_COLUMNS)
    for r in records:
        writer.writerow(
            [
                r.file,
                json.dumps(r.objects, ensure_ascii=False, separators=(",", ":")),
                r.board_text,
                r.other_text,
                r.notes,
                r.error or "",
            ]
        )
    return buf.getvalue()


def write_text_atomic(path: Path, text: str) -> None:
    """Write via a sibling temp file + os.replace so readers never see a half-written view."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise StorageIOError(f"cannot write {path}: {e}") from e


class RecordStore:
    """
    Durable record log for one photo folder.

    `append` is safe to call from several threads: each record is written as one
    complete line under a lock, then flushed and fsynced.
    """

    def __init__(self, folder: str | Path, *, log_name: str = LOG_FILE) -> None:
        self.folder = Path(folder)
        self.log_path = self.folder / log_name
        self._lock = threading.Lock()

    # ---------- write ----------

    def append(self, record: PhotoRecord) -> None:
        line = json.dumps(record.to_log_dict(), ensure_ascii=False, separators=(",", ":")) + "\n"
        with self._lock:
            try:
                with self.log_path.open("a", encoding="utf-8", newline="") as f:
                    f.write(line)
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                raise StorageIOError(f"cannot append to {self.log_path}: {e}") from e
        logger.debug("appended record for %s%s", record.file, " (error)" if record.error else "")

    # ---------- read ----------

    def read_all(self) -> list[PhotoRecord]:
        if not self.log_path.exists():
            return []
        try:
            with self._lock:
                lines = self.log_path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageIOError(f"cannot read {self.log_path}: {e}") from e

        out: list[PhotoRecord] = []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                out.append(PhotoRecord.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError) as e:
                # A torn line can only come from a crash mid-write.
                logger.warning("skipping unreadable log line %d in %s: %s", lineno, self.log_path.name, e)
        return out

    def live_records(self) -> dict[str, PhotoRecord]:
        return {r.file: r for r in dedupe_last_wins(self.read_all())}

    # ---------- views ----------

    def materialize(self, out_dir: str | Path | None = None) -> tuple[Path, Path]:
        """Rebuild both views from the log. Returns (collection_path, table_path)."""
        target = Path(out_dir) if out_dir is not None else self.folder
        live = dedupe_last_wins(self.read_all())

        collection_path = target / COLLECTION_FILE
        table_path = target / TABLE_FILE
        write_text_atomic(collection_path, render_collection(live))
        write_text_atomic(table_path, render_table(live))
        logger.debug("materialized %d live records into %s", len(live), target)
        return collection_path, table_path
