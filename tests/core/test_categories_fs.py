import json

from photo_tagger.core.fs import TAG_FILE, collect_subdirs, load_tag_records, move_to_tag_dir, save_tag_records
from photo_tagger.schemas.models import TagRecord
from tests.utils import make_photo_dir


def test_collect_subdirs_skips_hidden_and_files(tmp_path):
    for name in ("02_転圧状況", "01_舗設状況", ".cache"):
        (tmp_path / name).mkdir()
    make_photo_dir(tmp_path, ["a.jpg"])
    assert collect_subdirs(tmp_path) == ["01_舗設状況", "02_転圧状況"]
    assert collect_subdirs(tmp_path / "missing") == []


def test_tag_records_roundtrip_sorted(tmp_path):
    assert load_tag_records(tmp_path) == {}
    save_tag_records(tmp_path, {"b.jpg": TagRecord(tag="x", confidence=1.0), "a.jpg": TagRecord(tag="y", confidence=0.5)})
    raw = json.loads((tmp_path / TAG_FILE).read_text(encoding="utf-8"))
    assert list(raw) == ["a.jpg", "b.jpg"]
    assert raw["a.jpg"] == {"tag": "y", "confidence": 0.5}
    assert load_tag_records(tmp_path)["b.jpg"].tag == "x"


def test_move_to_tag_dir(tmp_path):
    make_photo_dir(tmp_path, ["a.jpg"])
    mv, moved = move_to_tag_dir(tmp_path / "a.jpg", "01_舗設状況")
    assert moved
    assert mv.action == "move"
    assert (tmp_path / "01_舗設状況" / "a.jpg").exists()
    assert not (tmp_path / "a.jpg").exists()


def test_move_to_tag_dir_dry_run_and_collisions(tmp_path):
    make_photo_dir(tmp_path, ["a.jpg"])
    target = tmp_path / "cat" / "a.jpg"

    _, moved = move_to_tag_dir(tmp_path / "a.jpg", "cat", dry_run=True)
    assert not moved
    assert not target.parent.exists()

    target.parent.mkdir()
    target.write_bytes(b"old")
    mv, moved = move_to_tag_dir(tmp_path / "a.jpg", "cat")
    assert (mv.action, moved) == ("skip", False)
    assert target.read_bytes() == b"old"

    mv, moved = move_to_tag_dir(tmp_path / "a.jpg", "cat", on_collision="overwrite")
    assert (mv.action, moved) == ("overwrite", True)
    assert target.read_bytes() != b"old"
    assert not (tmp_path / "a.jpg").exists()
