# photo_tagger/core/classify/keywords.py

from __future__ import annotations

import re
from collections import Counter

# \W covers ASCII and Unicode punctuation (、。・「」（）：...) but not CJK letters
# or the long-vowel mark; "_" is split explicitly since it counts as a word char.
_TOKEN_SPLIT_RE = re.compile(r"[\W_]+", re.UNICODE)


def tokenize(text: str) -> list[str]:
    return [t for t in _TOKEN_SPLIT_RE.split(text) if t]


def extract_top_keywords(text: str, k: int) -> list[str]:
    """
    Return up to `k` most frequent tokens of `text`.

    Ties are broken by first occurrence, so the result never depends on dict or
    set iteration order:

        >>> extract_top_keywords("交通保安施設 設置状況 交通保安施設", 2)
        ['交通保安施設', '設置状況']
    """
    if k <= 0 or not text or not text.strip():
        return []

    tokens = tokenize(text)
    counts = Counter(tokens)
    first_seen: dict[str, int] = {}
    for i, tok in enumerate(tokens):
        first_seen.setdefault(tok, i)

    ranked = sorted(counts, key=lambda t: (-counts[t], first_seen[t]))
    return ranked[:k]
