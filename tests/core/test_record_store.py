import csv
import io
import json
import threading

import pytest

from photo_tagger.core.errors import StorageIOError
from photo_tagger.core.store import COLLECTION_FILE, LOG_FILE, TABLE_COLUMNS, TABLE_FILE, RecordStore, dedupe_last_wins
from tests.utils import make_record


def test_append_writes_one_line_per_record(tmp_path):
    store = RecordStore(tmp_path)
    store.append(make_record("a.jpg", board_text="転圧"))
    store.append(make_record("b.jpg", error="BackendError: boom"))

    lines = (tmp_path / LOG_FILE).read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert list(first) == ["file", "objects", "board_text", "other_text", "notes"]
    assert first["board_text"] == "転圧"
    assert json.loads(lines[1])["error"] == "BackendError: boom"


def test_dedupe_last_wins_keeps_first_position():
    recs = [make_record("a.jpg", notes="1"), make_record("b.jpg"), make_record("a.jpg", notes="2")]
    live = dedupe_last_wins(recs)
    assert [r.file for r in live] == ["a.jpg", "b.jpg"]
    assert live[0].notes == "2"


def test_views_reflect_latest_record(tmp_path):
    store = RecordStore(tmp_path)
    store.append(make_record("a.jpg", error="BackendError: timeout"))
    store.append(make_record("a.jpg", board_text="舗設状況", objects=[{"label": "x", "bbox": [0, 0, 2, 2]}]))
    coll_path, table_path = store.materialize()

    coll = json.loads(coll_path.read_text(encoding="utf-8"))
    assert len(coll) == 1
    assert coll[0]["board_text"] == "舗設状況"
    assert "error" not in coll[0]

    rows = list(csv.DictReader(io.StringIO(table_path.read_text(encoding="utf-8"))))
    assert len(rows) == 1
    assert rows[0]["error"] == ""
    # bbox values outside [0, 1] survive untouched
    assert json.loads(rows[0]["objects_json"]) == [{"label": "x", "bbox": [0, 0, 2, 2]}]


def test_materialize_is_idempotent(tmp_path):
    store = RecordStore(tmp_path)
    for name in ("a.jpg", "b.jpg", "a.jpg"):
        store.append(make_record(name, other_text=f"text {name}"))

    store.materialize()
    first = ((tmp_path / COLLECTION_FILE).read_bytes(), (tmp_path / TABLE_FILE).read_bytes())
    store.materialize()
    second = ((tmp_path / COLLECTION_FILE).read_bytes(), (tmp_path / TABLE_FILE).read_bytes())
    assert first == second


def test_materialize_to_other_dir(tmp_path):
    store = RecordStore(tmp_path / "photos")
    (tmp_path / "photos").mkdir()
    store.append(make_record("a.jpg"))
    coll, table = store.materialize(tmp_path / "out")
    assert coll.parent == tmp_path / "out"
    assert table.exists()


def test_empty_log_materializes_empty_views(tmp_path):
    coll, table = RecordStore(tmp_path).materialize()
    assert json.loads(coll.read_text(encoding="utf-8")) == []
    assert table.read_text(encoding="utf-8").splitlines() == [",".join(TABLE_COLUMNS)]


def test_torn_trailing_line_is_skipped(tmp_path):
    store = RecordStore(tmp_path)
    store.append(make_record("a.jpg"))
    with (tmp_path / LOG_FILE).open("a", encoding="utf-8") as f:
        f.write('{"file": "b.jpg", "objects": [')

    assert [r.file for r in store.read_all()] == ["a.jpg"]


def test_unwritable_log_raises_storage_error(tmp_path):
    (tmp_path / LOG_FILE).mkdir()
    store = RecordStore(tmp_path)
    with pytest.raises(StorageIOError):
        store.append(make_record("a.jpg"))


def test_concurrent_appends_do_not_interleave(tmp_path):
    store = RecordStore(tmp_path)
    names = [f"p{i:03d}.jpg" for i in range(40)]

    def worker(chunk):
        for n in chunk:
            store.append(make_record(n, notes="x" * 200))

    threads = [threading.Thread(target=worker, args=(names[i::4],)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    recs = store.read_all()
    assert sorted(r.file for r in recs) == names
