import json

from photo_tagger.core.fs import TAG_FILE, load_tag_records, save_tag_records
from photo_tagger.core.store import RecordStore
from photo_tagger.orchestrators.categorize_orchestrator import run_categorize
from photo_tagger.schemas.models import TagRecord
from tests.utils import FINISHER_BOARD, make_options, make_record, photo_name

PAVING = "01_舗設状況"
ROLLING = "02_転圧状況"
INSPECTION = "03_特定自主検査"


def _categorized_site(site_dir, *categories):
    for name in categories or (PAVING, ROLLING):
        (site_dir / name).mkdir()
    return site_dir


def test_photos_are_tagged_and_moved(site_dir, mock_provider):
    folder = _categorized_site(site_dir)
    report = run_categorize(make_options(folder, categorize=True), mock_provider())

    assert report.exit_code == 0
    assert report.categories == [PAVING, ROLLING]
    assert report.analyzed == 5
    assert {name: t.tag for name, t in report.tags.items()} == {photo_name(0): ROLLING, photo_name(30): PAVING}
    assert report.unmatched == [photo_name(2), photo_name(4), photo_name(31)]
    assert report.moved == 2

    assert (folder / ROLLING / photo_name(0)).exists()
    assert (folder / PAVING / photo_name(30)).exists()
    assert (folder / photo_name(2)).exists()
    raw = json.loads((folder / TAG_FILE).read_text(encoding="utf-8"))
    assert raw[photo_name(0)] == {"tag": ROLLING, "confidence": 1.0}


def test_unmatched_photos_are_retried_from_the_log(site_dir, mock_provider):
    folder = _categorized_site(site_dir)
    provider = mock_provider()
    run_categorize(make_options(folder, categorize=True), provider)

    (folder / INSPECTION).mkdir()
    report = run_categorize(make_options(folder, categorize=True), provider)

    assert report.total_images == 3
    assert report.reused == 3
    assert report.analyzed == 0
    assert all(n == 1 for n in provider.calls.values())
    assert report.tags[photo_name(2)].tag == INSPECTION
    assert (folder / INSPECTION / photo_name(2)).exists()
    assert report.unmatched == [photo_name(4), photo_name(31)]
    assert len(load_tag_records(folder)) == 3


def test_already_tagged_photos_are_skipped(site_dir, mock_provider):
    folder = _categorized_site(site_dir)
    save_tag_records(folder, {photo_name(0): TagRecord(tag=PAVING, confidence=0.9)})
    provider = mock_provider()
    report = run_categorize(make_options(folder, categorize=True), provider)

    assert report.skipped == 1
    assert photo_name(0) not in provider.calls
    assert report.tags[photo_name(0)].tag == PAVING
    assert (folder / photo_name(0)).exists()


def test_force_retags_but_keeps_earlier_tags(site_dir, mock_provider):
    folder = _categorized_site(site_dir)
    save_tag_records(folder, {"moved_earlier.jpg": TagRecord(tag=PAVING, confidence=1.0)})
    provider = mock_provider()
    report = run_categorize(make_options(folder, categorize=True, force_reclassify=True), provider)

    assert report.analyzed == 5
    assert set(load_tag_records(folder)) == {"moved_earlier.jpg", photo_name(0), photo_name(30)}


def test_usable_log_records_are_reused(site_dir, mock_provider):
    folder = _categorized_site(site_dir)
    RecordStore(folder).append(make_record(photo_name(31), board_text=FINISHER_BOARD))
    provider = mock_provider()
    report = run_categorize(make_options(folder, categorize=True), provider)

    assert report.reused == 1
    assert photo_name(31) not in provider.calls
    assert report.tags[photo_name(31)].tag == PAVING


def test_no_category_folders_exits_nonzero(site_dir, mock_provider):
    provider = mock_provider()
    report = run_categorize(make_options(site_dir, categorize=True), provider)

    assert report.exit_code == 1
    assert report.categories == []
    assert not provider.calls
    assert not (site_dir / TAG_FILE).exists()


def test_dry_run_moves_and_saves_nothing(site_dir, mock_provider):
    folder = _categorized_site(site_dir)
    report = run_categorize(make_options(folder, categorize=True, dry_run=True), mock_provider())

    assert report.exit_code == 0
    assert report.moved == 0
    assert set(report.tags) == {photo_name(0), photo_name(30)}
    assert (folder / photo_name(0)).exists()
    assert not (folder / TAG_FILE).exists()


def test_existing_target_is_left_alone(site_dir, mock_provider):
    folder = _categorized_site(site_dir)
    (folder / ROLLING / photo_name(0)).write_bytes(b"old")
    report = run_categorize(make_options(folder, categorize=True), mock_provider())

    assert report.moved == 1
    assert (folder / photo_name(0)).exists()
    assert (folder / ROLLING / photo_name(0)).read_bytes() == b"old"


def test_analysis_failure_is_not_tagged(site_dir, mock_provider):
    folder = _categorized_site(site_dir)
    report = run_categorize(make_options(folder, categorize=True), mock_provider(fail={photo_name(0)}))

    assert report.errors == [photo_name(0)]
    assert photo_name(0) not in report.tags
    assert (folder / photo_name(0)).exists()
