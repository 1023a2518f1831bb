"""
photo_tagger.core.classify
==========================

Text → label helpers used by the grouping engine.

Exports:
- Keywords: extract_top_keywords()
- Activity: classify_activity(), make_activity_name(), activity_for_text(),
  classify_role(), extract_machine_id(), UNCLASSIFIED
- Categories: match_category(), category_score()
- Continuity: within_gap(), infer_activity_with_gap(), ContinuityResolver,
  resolve_sequence()
"""

from __future__ import annotations

from .activity import (
    ACTIVITY_RULES,
    ROLE_RULES,
    UNCLASSIFIED,
    activity_for_text,
    classify_activity,
    classify_role,
    extract_machine_id,
    make_activity_name,
)
from .categories import DEFAULT_MIN_CONFIDENCE, category_score, match_category
from .continuity import (
    DEFAULT_GAP_MINUTES,
    ContinuityResolver,
    infer_activity_with_gap,
    resolve_sequence,
    within_gap,
)
from .keywords import extract_top_keywords

__all__ = [
    "ACTIVITY_RULES",
    "ROLE_RULES",
    "UNCLASSIFIED",
    "DEFAULT_GAP_MINUTES",
    "DEFAULT_MIN_CONFIDENCE",
    "category_score",
    "match_category",
    "extract_top_keywords",
    "classify_activity",
    "make_activity_name",
    "activity_for_text",
    "classify_role",
    "extract_machine_id",
    "within_gap",
    "infer_activity_with_gap",
    "ContinuityResolver",
    "resolve_sequence",
]
