# photo_tagger/orchestrators/folder_pass.py
"""
Shared analysis loop for passes over one photo folder.

A pass decides which photos are pending; `FolderPass._gather_records` turns
them into PhotoRecords:

- pending photos with a usable record already in the log are reused (unless
  forced), without calling the analyzer;
- the rest go to the analyzer in chunks of `concurrency`; every result is
  normalized and appended to the log from this thread, in input order;
- `_on_records` is called with the reused records and then once per chunk,
  so a pass can persist its own output as it goes.

The stop event is checked between chunks; KeyboardInterrupt drops the chunk
in flight. Completed appends are never lost.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from pathlib import Path

from photo_tagger.core.errors import BackendError, NormalizationError
from photo_tagger.core.normalize.payload import normalize, record_from_error
from photo_tagger.core.store.record_store import RecordStore
from photo_tagger.inputs.inputs import RunOptions
from photo_tagger.schemas.models import PassReport, PhotoRecord
from photo_tagger.tools.vision import VisionProvider, build_provider, run_batch

logger = logging.getLogger(__name__)


def classification_text(rec: PhotoRecord) -> str:
    """Board text names the work item; fall back to other text when there is no board."""
    return rec.board_text if rec.board_text.strip() else rec.other_text


class FolderPass:
    def __init__(
        self,
        options: RunOptions,
        provider: VisionProvider | None = None,
        *,
        stop_event: threading.Event | None = None,
    ) -> None:
        self.options = options
        self.folder = Path(options.target_folder)
        self.store = RecordStore(self.folder)
        self.stop_event = stop_event or threading.Event()
        self._provider = provider

    @property
    def provider(self) -> VisionProvider:
        if self._provider is None:
            self._provider = build_provider(self.options.provider)
        return self._provider

    # ---------- hooks ----------

    def _on_records(self, records: Mapping[str, PhotoRecord]) -> None:
        """Called with each batch of new records (reused ones first). No-op by default."""

    # ---------- records ----------

    def _gather_records(self, pending: list[Path], report: PassReport) -> dict[str, PhotoRecord]:
        # Memoized analyzer results: usable records already in the log
        live = {} if self.options.force_reclassify else self.store.live_records()
        reused: dict[str, PhotoRecord] = {}
        to_analyze: list[Path] = []
        for p in pending:
            rec = live.get(p.name)
            if rec is not None and rec.ok:
                reused[p.name] = rec
            else:
                to_analyze.append(p)
        report.reused = len(reused)
        if reused:
            self._on_records(reused)

        out = dict(reused)
        if to_analyze:
            report.stopped = self._analyze(to_analyze, out, report)
        return out

    def _analyze(self, paths: list[Path], out: dict[str, PhotoRecord], report: PassReport) -> bool:
        """Run the analyzer over `paths`; returns True if stopped early."""
        size = self.options.concurrency
        chunks = [paths[i : i + size] for i in range(0, len(paths), size)]
        logger.info("%d image(s) in %d chunk(s) (%d parallel)", len(paths), len(chunks), size)

        for idx, chunk in enumerate(chunks, start=1):
            if self.stop_event.is_set():
                logger.warning("Stop requested; %d image(s) left for the next run.", sum(len(c) for c in chunks[idx - 1 :]))
                return True
            try:
                results = run_batch(self.provider, [str(p) for p in chunk], max_workers=size)
            except KeyboardInterrupt:
                logger.warning("Interrupted; chunk %d/%d not recorded.", idx, len(chunks))
                return True

            batch: dict[str, PhotoRecord] = {}
            for path, result in zip(chunk, results):
                rec = self._to_record(path.name, result)
                self.store.append(rec)
                batch[path.name] = rec
                report.analyzed += 1
                if rec.ok:
                    logger.info("  [C%d] %s", idx, path.name)
                else:
                    logger.warning("  [C%d] %s error: %s", idx, path.name, rec.error)
            out.update(batch)
            self._on_records(batch)
        return False

    @staticmethod
    def _to_record(name: str, result: str | BackendError) -> PhotoRecord:
        if isinstance(result, BackendError):
            return record_from_error(name, result)
        try:
            return normalize(result, file=name)
        except NormalizationError as e:
            return record_from_error(name, e)
