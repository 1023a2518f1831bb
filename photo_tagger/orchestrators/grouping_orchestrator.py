# photo_tagger/orchestrators/grouping_orchestrator.py
"""
Incremental grouping engine for one photo folder.

Flow
----
1) Load photo-groups.json; its filenames are *done* (unless force_reclassify).
   A forced run also picks up photos an earlier organize run moved into
   their group folders.
2) Pending photos with a usable record already in the log are reused.
3) The rest go to the analyzer in chunks of `concurrency` (see FolderPass).
4) Views are materialized once all appends are in.
5) Labels: continuity over the whole timeline, with done photos pinned to
   their stored labels.
6) Groups: time clusters per (machine_type, machine_id), stable numbering.
7) photo-groups.json is rewritten; optionally photos are moved into folders.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass

from photo_tagger.core.classify.activity import (
    UNCLASSIFIED,
    activity_for_text,
    classify_role,
    extract_machine_id,
)
from photo_tagger.core.classify.continuity import ContinuityResolver, within_gap
from photo_tagger.core.errors import StorageIOError
from photo_tagger.core.fs.folders import locate_organized, materialize_group_folders
from photo_tagger.core.fs.group_records import collect_images_flat, load_group_records, save_group_records
from photo_tagger.core.grouping.clusters import ClusterItem, assign_groups
from photo_tagger.core.normalize.timestamps import try_parse_timestamp
from photo_tagger.inputs.inputs import RunOptions
from photo_tagger.orchestrators.folder_pass import FolderPass, classification_text
from photo_tagger.schemas.models import ActivityFrame, GroupRecord, PhotoRecord, RunReport
from photo_tagger.tools.vision import VisionProvider

logger = logging.getLogger(__name__)


def _describe(rec: PhotoRecord) -> str:
    if rec.notes.strip():
        return rec.notes.strip()
    labels: list[str] = []
    for obj in rec.objects:
        if isinstance(obj, str):
            labels.append(obj)
        elif isinstance(obj, Mapping) and isinstance(obj.get("label"), str):
            labels.append(obj["label"])
    return ", ".join(labels)


def build_group_record(rec: PhotoRecord, machine_type: str, machine_id: str) -> GroupRecord:
    texts = [t.strip() for t in (rec.board_text, rec.other_text) if t.strip()]
    return GroupRecord(
        role=classify_role(" ".join([*texts, rec.notes])),
        machine_type=machine_type,
        machine_id=machine_id,
        group=0,
        has_board=bool(rec.board_text.strip()),
        detected_text=" / ".join(texts),
        description=_describe(rec),
    )


@dataclass
class _Entry:
    name: str
    timestamp: int | None
    done: GroupRecord | None = None
    record: PhotoRecord | None = None


@dataclass
class _LinePoint:
    """One timed photo on the labelling timeline."""

    label: str
    machine_id: str
    timestamp: int
    is_new: bool


class GroupingOrchestrator(FolderPass):
    # ---------- public ----------

    def run(self) -> RunReport:
        started = time.monotonic()
        opts = self.options
        if not self.folder.is_dir():
            raise StorageIOError(f"not a folder: {self.folder}")

        force = opts.force_reclassify
        prior = self._load_prior(force)
        existing = {} if force else prior

        images = collect_images_flat(self.folder)
        if force and prior:
            organized = locate_organized(self.folder, prior, exclude={p.name for p in images})
            if organized:
                logger.info("Re-grouping %d photo(s) from group folders.", len(organized))
                images = sorted([*images, *organized], key=lambda p: p.name)
        report = RunReport(folder=str(self.folder), total_images=len(images))

        pending = [p for p in images if p.name not in existing]
        report.skipped = len(images) - len(pending)
        if report.skipped:
            logger.info("Skipping %d already grouped.", report.skipped)

        new_records = self._gather_records(pending, report)

        # All appends are complete here
        self.store.materialize(self.folder)

        usable = {name: rec for name, rec in new_records.items() if rec.ok}
        report.errors = sorted(name for name, rec in new_records.items() if not rec.ok)

        labelled = self._label(existing, usable)
        report.untimed = sorted(name for name in labelled if try_parse_timestamp(name) is None)

        assigned, groups = assign_groups(self._cluster_items(existing, labelled), opts.gap_minutes)
        for name, grec in labelled.items():
            grec.group = assigned.get(name, 0)

        merged: dict[str, GroupRecord] = {**existing, **labelled}
        if merged or pending:
            save_group_records(self.folder, merged)
        if opts.organize:
            locations = {p.name: p for p in images}
            materialize_group_folders(
                self.folder, merged, on_collision=opts.on_collision, dry_run=opts.dry_run, locations=locations
            )

        report.records = merged
        report.groups = groups
        report.usable = len(merged)
        report.elapsed_s = time.monotonic() - started
        return report

    def _load_prior(self, force: bool) -> dict[str, GroupRecord]:
        if not force:
            return load_group_records(self.folder)
        # A forced run starts over anyway; an unreadable file only hides organized photos
        try:
            return load_group_records(self.folder)
        except StorageIOError as e:
            logger.warning("Ignoring unreadable group file: %s", e)
            return {}

    # ---------- labels & groups ----------

    def _label(self, existing: Mapping[str, GroupRecord], usable: Mapping[str, PhotoRecord]) -> dict[str, GroupRecord]:
        opts = self.options
        entries = [_Entry(n, try_parse_timestamp(n), done=existing[n]) for n in existing]
        entries += [_Entry(n, try_parse_timestamp(n), record=usable[n]) for n in usable]
        entries.sort(key=lambda e: e.name)  # collection order breaks timestamp ties

        out: dict[str, GroupRecord] = {}

        # No timestamp: no continuity, no clustering
        for e in entries:
            if e.timestamp is None and e.record is not None:
                rec = e.record
                label = activity_for_text(classification_text(rec), opts.activity_mode) or UNCLASSIFIED
                out[e.name] = build_group_record(rec, label, extract_machine_id(f"{rec.other_text} {rec.board_text}"))

        timed = sorted((e for e in entries if e.timestamp is not None), key=lambda e: e.timestamp)
        resolver = ContinuityResolver(opts.gap_minutes, block_names=opts.block_names)
        line: list[_LinePoint] = []

        for e in timed:
            ts = e.timestamp
            assert ts is not None
            if e.done is not None:
                resolver.pin(ActivityFrame(e.done.machine_type, ts))
                line.append(_LinePoint(e.done.machine_type, e.done.machine_id, ts, is_new=False))
                continue

            rec = e.record
            assert rec is not None
            activity = activity_for_text(classification_text(rec), opts.activity_mode)
            label = resolver.feed(ActivityFrame(activity, ts))
            machine_id = extract_machine_id(f"{rec.other_text} {rec.board_text}")
            if not machine_id and line:
                prev = line[-1]
                if prev.label == label and within_gap(prev.timestamp, ts, opts.gap_minutes):
                    machine_id = prev.machine_id
            line.append(_LinePoint(label, machine_id, ts, is_new=True))

        # Board shots often precede the nameplate shot: fill ids backwards too
        for cur, nxt in zip(reversed(line[:-1]), reversed(line[1:])):
            if (
                cur.is_new
                and not cur.machine_id
                and nxt.machine_id
                and cur.label == nxt.label
                and within_gap(cur.timestamp, nxt.timestamp, opts.gap_minutes)
            ):
                cur.machine_id = nxt.machine_id

        for e, point in zip(timed, line):
            if point.is_new:
                assert e.record is not None
                out[e.name] = build_group_record(e.record, point.label, point.machine_id)

        return out

    @staticmethod
    def _cluster_items(existing: Mapping[str, GroupRecord], labelled: Mapping[str, GroupRecord]) -> list[ClusterItem]:
        items: list[ClusterItem] = []
        for name in sorted(set(existing) | set(labelled)):
            ts = try_parse_timestamp(name)
            if ts is None:
                continue
            if name in labelled:
                g = labelled[name]
                items.append(ClusterItem(name, ts, g.machine_type, g.machine_id))
            else:
                g = existing[name]
                items.append(ClusterItem(name, ts, g.machine_type, g.machine_id, fixed_group=g.group or None))
        return items


def run_grouping(options: RunOptions, provider: VisionProvider | None = None) -> RunReport:
    """Convenience wrapper for one-shot callers."""
    return GroupingOrchestrator(options, provider).run()
