# photo_tagger/core/normalize/payload.py
"""
Analyzer payload normalizer (raw text → PhotoRecord).

Purpose
-------
The analyzer is an untrusted collaborator: it may wrap its JSON in Markdown
fences or prose, omit fields, add fields, or send fields with the wrong shape.
This module turns whatever it returned into a canonical PhotoRecord.

Rules
-----
- The first top-level JSON object in the text is decoded; no object at all
  raises NormalizationError.
- Missing `objects` → []; missing `file` and text fields → "" (a `file`
  argument, when given, wins over the payload).
- A field present with the wrong shape is treated as absent and the record is
  tagged with an `error` naming it, so the engine retries the photo later.
- Objects, boxes and numbers are passed through verbatim.

Public API
----------
normalize(raw_payload, *, file=None) -> PhotoRecord
extract_json_object(text) -> dict
record_from_error(file, exc) -> PhotoRecord
"""

from __future__ import annotations

import json
import re
from typing import Any

from photo_tagger.core.errors import NormalizationError
from photo_tagger.schemas.models import PhotoRecord

TEXT_FIELDS = ("board_text", "other_text", "notes")

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")

_decoder = json.JSONDecoder()


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Decode the first top-level JSON object found in `text`.

    Tries each `{` left to right with `raw_decode`, so prose before or after
    the object (and a second object later on) is ignored.
    """
    s = text.strip()
    if s.startswith("```"):
        s = _FENCE_OPEN_RE.sub("", s, count=1)
        s = _FENCE_CLOSE_RE.sub("", s, count=1)

    pos = s.find("{")
    while pos != -1:
        try:
            obj, _end = _decoder.raw_decode(s, pos)
        except json.JSONDecodeError:
            pos = s.find("{", pos + 1)
            continue
        if isinstance(obj, dict):
            return obj
        pos = s.find("{", pos + 1)
    raise NormalizationError("no JSON object in analyzer output")


def normalize(raw_payload: str | bytes | dict[str, Any], *, file: str | None = None) -> PhotoRecord:
    """Build a PhotoRecord from an analyzer payload. See module docstring for the rules."""
    if isinstance(raw_payload, dict):
        data = raw_payload
    elif isinstance(raw_payload, (str, bytes)):
        text = raw_payload.decode("utf-8", errors="replace") if isinstance(raw_payload, bytes) else raw_payload
        data = extract_json_object(text)
    else:
        raise NormalizationError(f"unsupported payload type: {type(raw_payload).__name__}")

    malformed: list[str] = []

    raw_file = data.get("file")
    if raw_file is not None and not isinstance(raw_file, str):
        malformed.append("file")
        raw_file = None
    name = file if file is not None else (raw_file or "")

    objects = data.get("objects")
    if objects is None:
        objects = []
    elif not isinstance(objects, list):
        malformed.append("objects")
        objects = []

    texts: dict[str, str] = {}
    for key in TEXT_FIELDS:
        val = data.get(key)
        if val is None:
            texts[key] = ""
        elif isinstance(val, str):
            texts[key] = val
        else:
            malformed.append(key)
            texts[key] = ""

    error = data.get("error")
    if error is not None and not isinstance(error, str):
        error = json.dumps(error, ensure_ascii=False, default=str)
    if malformed:
        note = "malformed fields: " + ", ".join(malformed)
        error = f"{error}; {note}" if error else note

    return PhotoRecord(file=name, objects=objects, error=error or None, **texts)


def record_from_error(file: str, exc: BaseException) -> PhotoRecord:
    """Error-tagged record for a photo whose analysis or normalization failed."""
    return PhotoRecord(file=file, error=f"{type(exc).__name__}: {exc}")
