# photo_tagger/tools/vision/provider_base.py
"""
Vision Analyzer Interface (V1)

Purpose
-------
Define the minimal contract for the external vision/OCR backend and a helper
to run it over a chunk of photos with bounded parallelism.

Design
------
- Protocol `VisionProvider` exposes a single-image `analyze(path) -> str`
  returning the backend's raw text (expected to contain a JSON object).
- Providers are untrusted: they may raise, time out, or return prose.
  Normalization happens downstream, never here.
- `run_batch` keeps results aligned 1:1 with the input paths and captures
  per-photo exceptions instead of raising them.

Public API
----------
class VisionProvider(Protocol):
    def analyze(self, path: str) -> str

def run_batch(provider, paths, *, max_workers=1) -> list[str | BackendError]
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from photo_tagger.core.errors import BackendError, backend_error_guard


class VisionProvider(Protocol):
    def analyze(self, path: str) -> str: ...


def _analyze_one(provider: VisionProvider, path: str) -> str | BackendError:
    try:
        with backend_error_guard():
            out = provider.analyze(path)
            if not isinstance(out, str):
                raise BackendError(f"analyzer returned {type(out).__name__}, expected str")
            return out
    except BackendError as e:
        return e


def run_batch(provider: VisionProvider, paths: Sequence[str], *, max_workers: int = 1) -> list[str | BackendError]:
    """
    Analyze `paths`, preserving input order.

    With max_workers > 1 the calls run on a thread pool (the backend is
    network-bound). Failures come back as BackendError values in place.
    """
    if max_workers <= 1 or len(paths) <= 1:
        return [_analyze_one(provider, p) for p in paths]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda p: _analyze_one(provider, p), paths))
