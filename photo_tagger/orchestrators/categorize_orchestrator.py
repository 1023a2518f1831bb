# photo_tagger/orchestrators/categorize_orchestrator.py
"""
Category pass: sort photos into the folder's existing subfolders.

Every visible subfolder is a category. Photos directly under the folder that
photo-tags.json does not list yet are analyzed (log records are reused the
same way as in the grouping pass), matched against the category names, and
moved into the matching subfolder. photo-tags.json is saved after every
batch, so an interrupted run keeps what it tagged. Photos that match nothing
stay where they are and are retried on the next run.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping

from photo_tagger.core.classify.categories import match_category
from photo_tagger.core.errors import StorageIOError
from photo_tagger.core.fs.categories import collect_subdirs, load_tag_records, move_to_tag_dir, save_tag_records
from photo_tagger.core.fs.group_records import collect_images_flat
from photo_tagger.inputs.inputs import RunOptions
from photo_tagger.orchestrators.folder_pass import FolderPass, classification_text
from photo_tagger.schemas.models import CategorizeReport, PhotoRecord, TagRecord
from photo_tagger.tools.vision import VisionProvider

logger = logging.getLogger(__name__)


class CategorizeOrchestrator(FolderPass):
    categories: list[str]
    tags: dict[str, TagRecord]
    report: CategorizeReport

    def run(self) -> CategorizeReport:
        started = time.monotonic()
        opts = self.options
        if not self.folder.is_dir():
            raise StorageIOError(f"not a folder: {self.folder}")

        self.report = report = CategorizeReport(folder=str(self.folder))
        self.categories = report.categories = collect_subdirs(self.folder)
        if not self.categories:
            logger.error("No subfolders in %s. Create one folder per category first.", self.folder)
            report.elapsed_s = time.monotonic() - started
            return report
        logger.info("Categories: %s", ", ".join(self.categories))

        # Earlier tags survive a forced run; re-matched photos overwrite them
        self.tags = load_tag_records(self.folder)
        images = collect_images_flat(self.folder)
        report.total_images = len(images)

        pending = images if opts.force_reclassify else [p for p in images if p.name not in self.tags]
        report.skipped = len(images) - len(pending)
        if report.skipped:
            logger.info("Skipping %d already classified.", report.skipped)

        records = self._gather_records(pending, report)
        self.store.materialize(self.folder)

        report.errors = sorted(name for name, rec in records.items() if not rec.ok)
        report.unmatched = sorted(name for name, rec in records.items() if rec.ok and name not in self.tags)
        report.tags = dict(self.tags)
        report.elapsed_s = time.monotonic() - started
        return report

    def _on_records(self, records: Mapping[str, PhotoRecord]) -> None:
        opts = self.options
        changed = False
        for name in sorted(records):
            rec = records[name]
            if not rec.ok:
                continue
            tag = match_category(classification_text(rec), self.categories, opts.min_confidence)
            if tag is None:
                logger.info("  %s -> (no match)", name)
                continue
            logger.info("  %s -> %s (%.0f%%)", name, tag.tag, tag.confidence * 100)
            try:
                _, moved = move_to_tag_dir(
                    self.folder / name, tag.tag, on_collision=opts.on_collision, dry_run=opts.dry_run
                )
            except StorageIOError as e:
                logger.warning("  %s", e)
                moved = False
            if moved:
                self.report.moved += 1
            self.tags[name] = tag
            changed = True

        if changed and not opts.dry_run:
            save_tag_records(self.folder, self.tags)


def run_categorize(options: RunOptions, provider: VisionProvider | None = None) -> CategorizeReport:
    return CategorizeOrchestrator(options, provider).run()
