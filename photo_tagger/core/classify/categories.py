# photo_tagger/core/classify/categories.py
"""
Category matching for the folder-per-category mode.

Each subfolder of the photo folder is a category. A photo is tagged with the
category whose name best matches its blackboard text:

- a leading ordinal such as `01_` or `3.` is ignored when matching, so
  folders can be sorted by hand without changing their meaning;
- whitespace is ignored on both sides (boards are often OCR'd with spaces
  between every few characters);
- the name appearing verbatim scores 1.0, otherwise the score is the share
  of the name's character bigrams found in the text.

The best score wins; ties keep the category order. Scores under
`min_confidence` leave the photo untagged.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from photo_tagger.schemas.models import TagRecord

DEFAULT_MIN_CONFIDENCE = 0.5

_ORDINAL_PREFIX_RE = re.compile(r"^\d+[\s._-]*")
_SPACE_RE = re.compile(r"\s+")


def category_key(name: str) -> str:
    """Matching form of a category folder name."""
    stripped = _ORDINAL_PREFIX_RE.sub("", name) or name
    return _SPACE_RE.sub("", stripped).lower()


def _bigrams(s: str) -> set[str]:
    if len(s) < 2:
        return {s}
    return {s[i : i + 2] for i in range(len(s) - 1)}


def category_score(text: str, category: str) -> float:
    key = category_key(category)
    flat = _SPACE_RE.sub("", text or "").lower()
    if not key or not flat:
        return 0.0
    if key in flat:
        return 1.0
    grams = _bigrams(key)
    return sum(1 for g in grams if g in flat) / len(grams)


def match_category(
    text: str,
    categories: Sequence[str],
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> TagRecord | None:
    best: str | None = None
    best_score = 0.0
    for category in categories:
        score = category_score(text, category)
        if score > best_score:
            best, best_score = category, score
    if best is None or best_score < min_confidence:
        return None
    return TagRecord(tag=best, confidence=round(best_score, 3))
