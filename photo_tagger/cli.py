# photo_tagger/cli.py

from __future__ import annotations

import argparse
import logging
from collections import Counter, defaultdict

from photo_tagger.core.errors import StorageIOError
from photo_tagger.core.logs import configure_logging
from photo_tagger.inputs.inputs import InputsLoader, RunOptions
from photo_tagger.orchestrators.categorize_orchestrator import CategorizeOrchestrator
from photo_tagger.orchestrators.grouping_orchestrator import GroupingOrchestrator
from photo_tagger.schemas.models import CategorizeReport, PassReport, RunReport
from photo_tagger.tools.vision import VisionProvider

logger = logging.getLogger("photo_tagger.cli")

EXIT_OK = 0
EXIT_NOTHING_PROCESSED = 1
EXIT_FATAL = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="photo-tagger", description="Group construction-site photos by machine and activity, or sort them into category folders")
    p.add_argument("path", type=str, help="Photo folder (images directly inside it are processed).")
    p.add_argument("--config", type=str, default=None, help="Optional JSON config file.")
    p.add_argument("--dry-run", action="store_true", default=None, help="Report only; do not move photos.")
    p.add_argument("--force", dest="force_reclassify", action="store_true", default=None, help="Ignore earlier results and redo everything.")
    p.add_argument("--gap-minutes", type=float, default=None, help="Continuity / clustering gap in minutes (default 10).")
    p.add_argument("--concurrency", type=int, default=None, help="Parallel analyzer calls (default 1).")
    p.add_argument("--activity-mode", choices=["rules", "keywords"], default=None, help="Activity naming strategy.")
    p.add_argument("--block-names", action="store_true", default=None, help="Name text-less segments by timestamp.")
    p.add_argument("--provider", choices=["openai", "mock"], default=None, help="Analyzer backend.")
    p.add_argument("--organize", action="store_true", default=None, help="Move photos into per-group folders.")
    p.add_argument("--categorize", action="store_true", default=None, help="Sort photos into the existing category subfolders instead of grouping.")
    p.add_argument("--min-confidence", type=float, default=None, help="Lowest category match score that tags a photo (default 0.5).")
    collision = p.add_mutually_exclusive_group()
    collision.add_argument("--overwrite", dest="on_collision", action="store_const", const="overwrite", default=None)
    collision.add_argument("--skip-existing", dest="on_collision", action="store_const", const="skip_existing")
    p.add_argument("--profile", action="store_true", help="Print timing details.")
    p.add_argument("--log-file", type=str, default=None, help="Rotating log file path.")
    p.add_argument("--debug", action="store_true", default=None, help="Verbose console logging.")
    return p.parse_args(argv)


def build_options(args: argparse.Namespace) -> RunOptions:
    loader = InputsLoader()
    cfg = loader.load(args.config, target_folder=args.path)
    return loader.with_overrides(
        cfg,
        target_folder=args.path,
        dry_run=args.dry_run,
        force_reclassify=args.force_reclassify,
        gap_minutes=args.gap_minutes,
        concurrency=args.concurrency,
        activity_mode=args.activity_mode,
        block_names=args.block_names,
        provider=args.provider,
        organize=args.organize,
        categorize=args.categorize,
        min_confidence=args.min_confidence,
        on_collision=args.on_collision,
        log_file=args.log_file,
        debug=args.debug,
    )


def fmt_duration(seconds: float) -> str:
    if seconds < 1.0:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.1f}s"


def print_group_summary(report: RunReport) -> None:
    if not report.groups:
        return
    print(f"\n--- Group Summary ({len(report.groups)} groups, {len(report.records)} photos) ---")
    for g in report.groups:
        ident = f"{g.machine_type} ({g.machine_id})" if g.machine_id else g.machine_type
        print(f"  {ident} #{g.group_index}")
        for name in g.member_files:
            print(f"    - {name}: {report.records[name].role}")

    unclustered = defaultdict(list)
    for name, rec in sorted(report.records.items()):
        if rec.group == 0:
            unclustered[rec.machine_type].append(name)
    for label, names in unclustered.items():
        print(f"  {label} (no timestamp): {', '.join(names)}")


def print_report(report: RunReport, options: RunOptions, *, profile: bool) -> None:
    print_group_summary(report)

    ok_new = report.analyzed + report.reused - len(report.errors)
    if report.usable == 0:
        print("\nNothing processed.")
    elif report.errors:
        print(f"\nProcessed {ok_new} new photo(s) with {len(report.errors)} error(s) - re-run to retry:")
        for name in report.errors:
            print(f"  ! {name}")
    else:
        print(f"\nProcessed {ok_new} new photo(s).")
    if report.untimed:
        print(f"{len(report.untimed)} photo(s) without a YYYYMMDD_HHMMSS timestamp were not grouped.")
    if report.stopped:
        print("Stopped early; remaining photos will be analyzed on the next run.")
    if options.dry_run:
        print("(dry-run: no files moved)")

    print_timing(report, profile=profile)


def print_tag_summary(report: CategorizeReport) -> None:
    print(f"\n--- Summary ({len(report.tags)} classified) ---")
    counts = Counter(rec.tag for rec in report.tags.values())
    for category in report.categories:
        if counts[category] > 0:
            print(f"  {category}: {counts[category]}")


def print_categorize_report(report: CategorizeReport, options: RunOptions, *, profile: bool) -> None:
    if not report.categories:
        print(f"\nNo category subfolders in {report.folder}. Create one folder per category first.")
        return
    print_tag_summary(report)

    if report.unmatched:
        print(f"\n{len(report.unmatched)} photo(s) with no matching category - re-run to retry:")
        for name in report.unmatched:
            print(f"  ? {name}")
    if report.errors:
        print(f"\n{len(report.errors)} error(s) - re-run to retry:")
        for name in report.errors:
            print(f"  ! {name}")
    if report.stopped:
        print("Stopped early; remaining photos will be analyzed on the next run.")
    if options.dry_run:
        print("\n(dry-run: no files moved)")
    else:
        print(f"\n{report.moved} file(s) moved.")

    print_timing(report, profile=profile)


def print_timing(report: PassReport, *, profile: bool) -> None:
    if profile:
        print("\n--- Profile ---")
        print(f"  {'images:':<12} {report.total_images:>8}")
        print(f"  {'skipped:':<12} {report.skipped:>8}")
        print(f"  {'reused:':<12} {report.reused:>8}")
        print(f"  {'analyzed:':<12} {report.analyzed:>8}")
        print(f"  {'total:':<12} {fmt_duration(report.elapsed_s):>8}")
    else:
        print(f"\nCompleted in {fmt_duration(report.elapsed_s)}.")


def main(argv: list[str] | None = None, *, provider: VisionProvider | None = None) -> int:
    args = parse_args(argv)
    try:
        options = build_options(args)
    except (ValueError, FileNotFoundError) as e:
        configure_logging()
        logger.error("%s", e)
        return EXIT_FATAL

    configure_logging(log_file=options.log_file, debug=options.debug)

    try:
        if options.categorize:
            tagged = CategorizeOrchestrator(options, provider).run()
        else:
            report = GroupingOrchestrator(options, provider).run()
    except StorageIOError as e:
        logger.error("storage failure: %s", e)
        return EXIT_FATAL
    except RuntimeError as e:
        # e.g. OPENAI_API_KEY missing when the analyzer is first needed
        logger.error("%s", e)
        return EXIT_FATAL

    if options.categorize:
        print_categorize_report(tagged, options, profile=args.profile)
        return EXIT_OK if tagged.exit_code == 0 else EXIT_NOTHING_PROCESSED

    print_report(report, options, profile=args.profile)
    return EXIT_OK if report.exit_code == 0 else EXIT_NOTHING_PROCESSED
