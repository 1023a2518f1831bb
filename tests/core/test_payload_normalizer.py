import json

import pytest

from photo_tagger.core.errors import BackendError, NormalizationError
from photo_tagger.core.normalize import extract_json_object, normalize, record_from_error
from tests.utils import make_payload


def test_prose_wrapped_payload():
    rec = normalize(make_payload("a.jpg", board_text="舗設状況", notes="黒板あり"))
    assert rec.file == "a.jpg"
    assert rec.board_text == "舗設状況"
    assert rec.notes == "黒板あり"
    assert rec.ok


def test_fenced_payload():
    text = "```json\n" + json.dumps({"file": "a.jpg", "other_text": "TZ-703"}) + "\n```"
    assert normalize(text).other_text == "TZ-703"


def test_missing_fields_default_and_extra_fields_ignored():
    rec = normalize('{"file": "a.jpg", "confidence": 0.9}')
    assert rec.objects == []
    assert (rec.board_text, rec.other_text, rec.notes) == ("", "", "")
    assert rec.error is None


def test_supplied_file_overrides_payload():
    rec = normalize(make_payload("wrong.jpg"), file="IMG_1.jpg")
    assert rec.file == "IMG_1.jpg"


def test_field_incomplete_payloads_never_fail():
    rec = normalize("{}")
    assert rec.file == ""
    assert rec.objects == []
    assert (rec.board_text, rec.other_text, rec.notes) == ("", "", "")
    assert rec.ok

    rec = normalize('{"objects": [], "board_text": "x"}')
    assert (rec.file, rec.board_text) == ("", "x")
    assert rec.ok


def test_non_string_file_is_malformed():
    rec = normalize({"file": 12, "notes": "n"})
    assert rec.file == ""
    assert rec.notes == "n"
    assert rec.error == "malformed fields: file"
    assert normalize({"file": 12}, file="a.jpg").file == "a.jpg"


def test_wrong_shapes_become_error_record():
    rec = normalize({"file": "a.jpg", "objects": "crane", "board_text": ["x"], "notes": "ok"})
    assert rec.objects == []
    assert rec.board_text == ""
    assert rec.notes == "ok"
    assert not rec.ok
    assert "objects" in rec.error and "board_text" in rec.error


def test_bbox_passed_through_verbatim():
    objs = [{"label": "roller", "bbox": [-0.1, 0.2, 1.4, 0.9], "area_ratio": 0.99, "extra": True}]
    rec = normalize(make_payload("a.jpg", objects=objs))
    assert rec.objects == objs


def test_first_object_wins_and_leading_garbage_skipped():
    text = 'note {not json} then {"file": "a.jpg", "notes": "1"} and {"file": "b.jpg"}'
    assert extract_json_object(text) == {"file": "a.jpg", "notes": "1"}


@pytest.mark.parametrize("text", ["", "no json here", "[1, 2, 3]", "{broken"])
def test_no_object_raises(text):
    with pytest.raises(NormalizationError):
        normalize(text, file="a.jpg")


def test_bytes_payload():
    rec = normalize(make_payload("a.jpg", other_text="排出ガス").encode("utf-8"))
    assert rec.other_text == "排出ガス"


def test_record_from_error():
    rec = record_from_error("a.jpg", BackendError("timeout: slow"))
    assert rec.file == "a.jpg"
    assert rec.error == "BackendError: timeout: slow"
    assert rec.objects == []
