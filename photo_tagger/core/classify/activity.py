# photo_tagger/core/classify/activity.py
"""
Activity / role classification from OCR text (V1)

Purpose
-------
Turn blackboard and nameplate text into the labels used for grouping:
  - activity (machine or work item), by rule table or by auto-keywords,
  - photo role within a machine set (全景 / 検査証票 / 排ガス証票 / ナンバー),
  - machine model number.

Design
------
- Pure functions; no IO, no hidden state.
- Rule tables are ordered lists of (pattern, label). First match wins, so the
  table order *is* the priority. Machines come before work items because a
  board that names a roller usually also mentions 転圧.

Public API
----------
classify_activity(text) -> str | None
make_activity_name(keywords) -> str
activity_for_text(text, mode) -> str
classify_role(text) -> str
extract_machine_id(text) -> str
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from re import Pattern
from typing import Literal

from photo_tagger.core.classify.keywords import extract_top_keywords

ActivityMode = Literal["rules", "keywords"]

UNCLASSIFIED = "unclassified"
KEYWORD_SEPARATOR = "_"

# -------------------------
# Activity rule table
# -------------------------

ACTIVITY_RULES: list[tuple[Pattern[str], str]] = [
    # Machines
    (re.compile(r"タイヤローラ"), "タイヤローラー"),
    (re.compile(r"マカダム|ロードローラ"), "マカダムローラー"),
    (re.compile(r"振動ローラ|コンバインドローラ"), "振動ローラー"),
    (re.compile(r"フィニッシャ"), "アスファルトフィニッシャー"),
    (re.compile(r"バックホ|ユンボ"), "バックホウ"),
    (re.compile(r"路面切削機|切削機"), "路面切削機"),
    (re.compile(r"ダンプ"), "ダンプトラック"),
    (re.compile(r"ディストリビュータ|散布車"), "乳剤散布車"),
    # Work items
    (re.compile(r"交通保安|保安施設|交通誘導"), "交通保安施設"),
    (re.compile(r"温度"), "温度管理"),
    (re.compile(r"乳剤|タックコート|プライムコート"), "乳剤散布"),
    (re.compile(r"切削"), "切削工"),
    (re.compile(r"転圧"), "転圧状況"),
    (re.compile(r"舗設|敷均"), "舗設状況"),
    (re.compile(r"出来形|幅員|厚さ"), "出来形管理"),
    (re.compile(r"着手前"), "着手前"),
    (re.compile(r"完成|竣工"), "完成"),
]

# -------------------------
# Role rule table
# -------------------------

DEFAULT_ROLE = "機械全景"

ROLE_RULES: list[tuple[Pattern[str], str]] = [
    (re.compile(r"特定自主検査"), "特定自主検査証票"),
    (re.compile(r"排出?ガス|低騒音"), "排ガス対策型・低騒音型機械証票"),
    (re.compile(r"ナンバー|[0-9]{2,3}\s*[ぁ-ん]\s*[0-9]{1,2}-?[0-9]{2}"), "ナンバープレート"),
]

# Model numbers such as TZ-703, HA60C-2, SW652
_MACHINE_ID_RE = re.compile(r"(?<![A-Za-z0-9])([A-Z]{1,4}-?[0-9]{1,4}[A-Z]{0,3}(?:-[0-9]{1,3})?)(?![A-Za-z0-9])")


def _first_match(rules: Sequence[tuple[Pattern[str], str]], text: str) -> str | None:
    for pattern, label in rules:
        if pattern.search(text):
            return label
    return None


def classify_activity(text: str) -> str | None:
    """Return the label of the first ACTIVITY_RULES pattern found in `text`, else None."""
    if not text:
        return None
    return _first_match(ACTIVITY_RULES, text)


def make_activity_name(keywords: Sequence[str]) -> str:
    """Join the top-2 keywords with "_"; UNCLASSIFIED when there are none."""
    top = [k for k in keywords[:2] if k]
    if not top:
        return UNCLASSIFIED
    return KEYWORD_SEPARATOR.join(top)


def activity_for_text(text: str, mode: ActivityMode = "rules") -> str:
    """
    Activity label for one photo's text, "" when the text gives nothing usable.

    The empty string is what the continuity resolver treats as "no evidence".
    """
    if not text or not text.strip():
        return ""
    if mode == "keywords":
        name = make_activity_name(extract_top_keywords(text, 2))
        return "" if name == UNCLASSIFIED else name
    return classify_activity(text) or ""


def classify_role(text: str) -> str:
    return _first_match(ROLE_RULES, text or "") or DEFAULT_ROLE


def extract_machine_id(text: str) -> str:
    if not text:
        return ""
    m = _MACHINE_ID_RE.search(text)
    return m.group(1) if m else ""
