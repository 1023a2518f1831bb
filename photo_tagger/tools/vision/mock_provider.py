# photo_tagger/tools/vision/mock_provider.py
"""
Mock Vision Provider (V1)

Purpose
-------
Deterministic, network-free analyzer for local dry runs and tests.

Design
------
- Canned responses by filename take priority (`responses={"a.jpg": "..."}`).
- Otherwise, a sidecar `<photo>.txt` next to the image is used as the
  board text, which lets a folder be "analyzed" offline.
- Otherwise, an empty-but-valid JSON object is returned.
- Names listed in `fail` raise, to exercise the error path.
- `calls` counts analyze() invocations per filename.
"""

from __future__ import annotations

import json
import threading
from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path

from .provider_base import VisionProvider


class MockVisionProvider(VisionProvider):
    """Deterministic, filename-based mock provider."""

    def __init__(self, responses: Mapping[str, str] | None = None, *, fail: Iterable[str] = ()) -> None:
        self.responses = dict(responses or {})
        self.fail = set(fail)
        self.calls: Counter[str] = Counter()
        self._lock = threading.Lock()

    def analyze(self, path: str) -> str:
        p = Path(path)
        name = p.name
        with self._lock:
            self.calls[name] += 1

        if name in self.fail:
            raise ConnectionError(f"mock backend unavailable for {name}")
        if name in self.responses:
            return self.responses[name]

        board_text = ""
        sidecar = p.with_name(p.name + ".txt")
        if sidecar.is_file():
            board_text = sidecar.read_text(encoding="utf-8").strip()

        payload = {"file": name, "objects": [], "board_text": board_text, "other_text": "", "notes": ""}
        return "解析結果:\n" + json.dumps(payload, ensure_ascii=False)
