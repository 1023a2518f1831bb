# photo_tagger/core/errors.py
"""
Typed errors for the photo grouping pipeline.

Exports
-------
- PhotoTaggerError, BackendError, NormalizationError,
  StorageIOError, TimestampParseError
- RECORD_ERRORS
- classify_backend_error(exc)
- backend_error_guard()

Propagation policy
------------------
- BackendError / NormalizationError are per-photo: captured into the record's
  `error` field, never abort a run.
- StorageIOError is fatal: the append-only log is the single source of truth.
- TimestampParseError excludes a photo from continuity and clustering only.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager

# =========================
# Exception types
# =========================


class PhotoTaggerError(RuntimeError):
    """Base class for pipeline failures."""


class BackendError(PhotoTaggerError):
    """The vision/OCR analyzer call failed or timed out."""


class NormalizationError(PhotoTaggerError):
    """The analyzer payload had no extractable JSON object at all."""


class StorageIOError(PhotoTaggerError):
    """The record log or one of its views could not be read or written."""


class TimestampParseError(PhotoTaggerError, ValueError):
    """A filename does not carry a valid YYYYMMDD_HHMMSS stamp."""


# Errors that are recorded on a single photo and never abort the batch
RECORD_ERRORS = (
    BackendError,
    NormalizationError,
)

_TIMEOUT_PATTERN = re.compile(r"(timeout|timed\s*out|deadline)", re.IGNORECASE)

# =========================
# Classification helpers
# =========================


def classify_backend_error(exc: Exception) -> BackendError:
    """
    Map an arbitrary exception raised by an analyzer to a BackendError.

    Heuristics:
      - BackendError → passed through
      - openai.* API errors → BackendError with the SDK class name
      - Messages hinting at timeouts → "timeout: ..." prefix
      - Fallback → BackendError("<Type>: <message>")
    """
    if isinstance(exc, BackendError):
        return exc

    msg = f"{type(exc).__name__}: {exc}"

    try:
        import openai

        if isinstance(exc, openai.APITimeoutError):
            return BackendError(f"timeout: {msg}")
        if isinstance(exc, openai.OpenAIError):
            return BackendError(msg)
    except ImportError:
        pass

    if isinstance(exc, TimeoutError) or _TIMEOUT_PATTERN.search(msg):
        return BackendError(f"timeout: {msg}")

    return BackendError(msg)


@contextmanager
def backend_error_guard() -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from analyzer calls."""
    try:
        yield
    except BackendError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_backend_error(exc) from exc


__all__ = [
    "PhotoTaggerError",
    "BackendError",
    "NormalizationError",
    "StorageIOError",
    "TimestampParseError",
    "RECORD_ERRORS",
    "classify_backend_error",
    "backend_error_guard",
]
